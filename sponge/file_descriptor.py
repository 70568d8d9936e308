"""Reference-counted handles to kernel file descriptors."""

from __future__ import annotations

import os
import sys

from .buffer import BufferViewList

# Largest number of bytes taken by a single read.
_MAX_READ = 1024 * 1024


class _FDWrapper:
    """Owns a descriptor number and the state shared by every handle to it."""

    __slots__ = ("fd", "eof", "closed", "read_count", "write_count")

    def __init__(self, fd: int) -> None:
        if fd < 0:
            raise ValueError(f"invalid fd number:{fd}")
        self.fd = fd
        self.eof = False
        self.closed = False
        self.read_count = 0
        self.write_count = 0

    def close(self) -> None:
        os.close(self.fd)
        self.eof = self.closed = True

    def __del__(self) -> None:
        if getattr(self, "closed", True):
            return
        try:
            self.close()
        except OSError as exc:
            print(f"Exception destructing FDWrapper: {exc}", file=sys.stderr)


class FileDescriptor:
    """A handle on a file descriptor, shared by its duplicates.

    The descriptor is closed explicitly with ``close()`` or when the last
    handle sharing it is garbage collected. Reads and writes are counted so
    that an event loop can detect callbacks that never touch their descriptor.
    """

    def __init__(self, fd: "int | FileDescriptor") -> None:
        """Wrap a descriptor number, or take over another handle's descriptor."""
        if isinstance(fd, FileDescriptor):
            self._wrapper = fd._wrapper
        else:
            self._wrapper = _FDWrapper(fd)

    def _register_read(self) -> None:
        self._wrapper.read_count += 1

    def _register_write(self) -> None:
        self._wrapper.write_count += 1

    def read(self, limit: int | None = None) -> bytes:
        """Read up to ``limit`` bytes (at most 1 MiB); fewer may be returned.

        An empty result for a positive limit marks the descriptor as at EOF.
        """
        size = _MAX_READ if limit is None else min(_MAX_READ, limit)
        if size < 0:
            raise ValueError("read limit must be non-negative")
        data = os.read(self.fd_num, size)
        if size > 0 and not data:
            self._wrapper.eof = True
        if len(data) > size:
            raise RuntimeError("read() read more than requested")
        self._register_read()
        return data

    def write(self, data, write_all: bool = True) -> int:
        """Write bytes, a buffer or a buffer list; return the count written.

        With ``write_all`` the call keeps writing until everything is written.
        """
        buffer = data if isinstance(data, BufferViewList) else BufferViewList(data)
        total = 0
        while True:
            views = buffer.as_views() or [b""]
            written = os.writev(self.fd_num, views)
            remaining = len(buffer)
            if written == 0 and remaining:
                raise RuntimeError("write returned 0 given non-empty input buffer")
            if written > remaining:
                raise RuntimeError("write wrote more than length of input buffer")
            self._register_write()
            buffer.remove_prefix(written)
            total += written
            if not (write_all and len(buffer)):
                return total

    def close(self) -> None:
        """Close the underlying descriptor for every handle that shares it."""
        self._wrapper.close()

    def duplicate(self) -> "FileDescriptor":
        """Return another handle sharing this descriptor and its state."""
        return FileDescriptor(self)

    def set_blocking(self, blocking_state: bool) -> None:
        """Put the descriptor in blocking (True) or non-blocking (False) mode."""
        os.set_blocking(self.fd_num, blocking_state)

    @property
    def fd_num(self) -> int:
        return self._wrapper.fd

    @property
    def eof(self) -> bool:
        return self._wrapper.eof

    @property
    def closed(self) -> bool:
        return self._wrapper.closed

    @property
    def read_count(self) -> int:
        return self._wrapper.read_count

    @property
    def write_count(self) -> int:
        return self._wrapper.write_count

    def __enter__(self) -> "FileDescriptor":
        return self

    def __exit__(self, *exc_info) -> None:
        if not self.closed:
            self.close()