"""Shared read-only byte buffers that can drop bytes from the front."""

from __future__ import annotations

from collections import deque
from typing import Iterable, Union

BytesLike = Union[bytes, bytearray, memoryview]


def _to_bytes(data) -> bytes:
    return memoryview(data).tobytes()


class Buffer:
    """A read-only byte string whose storage is shared between copies.

    Each copy keeps its own starting offset, so dropping a prefix from one
    copy leaves the others untouched.
    """

    __slots__ = ("_storage", "_offset")

    def __init__(self, data: "Buffer | BytesLike" = b"") -> None:
        if isinstance(data, Buffer):
            self._storage = data._storage
            self._offset = data._offset
        else:
            self._storage = _to_bytes(data)
            self._offset = 0

    @property
    def view(self) -> memoryview:
        """A zero-copy view of the remaining bytes."""
        return memoryview(self._storage)[self._offset:]

    def __bytes__(self) -> bytes:
        return self._storage[self._offset:]

    def __len__(self) -> int:
        return len(self._storage) - self._offset

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Buffer):
            return bytes(self) == bytes(other)
        if isinstance(other, (bytes, bytearray, memoryview)):
            return bytes(self) == bytes(other)
        return NotImplemented

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"Buffer({bytes(self)!r})"

    def at(self, n: int) -> int:
        """Return the byte at position ``n``."""
        if not 0 <= n < len(self):
            raise IndexError("Buffer.at")
        return self._storage[self._offset + n]

    def copy(self) -> bytes:
        """Return the remaining bytes as a new ``bytes`` object."""
        return bytes(self)

    def remove_prefix(self, n: int) -> None:
        """Discard the first ``n`` bytes without copying."""
        if n < 0 or n > len(self):
            raise IndexError("Buffer.remove_prefix")
        self._offset += n
        if self._offset == len(self._storage):
            self._storage = b""
            self._offset = 0


class BufferList:
    """A discontiguous byte string made of several buffers.

    Headers can be prepended to a payload without copying the payload.
    """

    def __init__(self, data: "BufferList | Buffer | BytesLike | None" = None) -> None:
        self._buffers: deque[Buffer] = deque()
        if data is not None:
            self.append(data)

    @property
    def buffers(self) -> tuple[Buffer, ...]:
        """The underlying buffers, in order."""
        return tuple(self._buffers)

    def append(self, other: "BufferList | Buffer | BytesLike") -> None:
        """Append a buffer list, a buffer or raw bytes."""
        if isinstance(other, BufferList):
            self._buffers.extend(Buffer(buf) for buf in other._buffers)
        else:
            self._buffers.append(Buffer(other))

    def to_buffer(self) -> Buffer:
        """Return the contents as a single Buffer; only valid if contiguous."""
        if not self._buffers:
            return Buffer()
        if len(self._buffers) == 1:
            return Buffer(self._buffers[0])
        raise ValueError(
            "BufferList: please use concatenate() to combine a multi-Buffer BufferList into one Buffer"
        )

    def remove_prefix(self, n: int) -> None:
        """Discard the first ``n`` bytes across the buffers."""
        while n > 0:
            if not self._buffers:
                raise IndexError("BufferList.remove_prefix")
            front = self._buffers[0]
            if n < len(front):
                front.remove_prefix(n)
                n = 0
            else:
                n -= len(front)
                self._buffers.popleft()

    def __len__(self) -> int:
        return sum(len(buf) for buf in self._buffers)

    def concatenate(self) -> bytes:
        """Return all bytes joined into one ``bytes`` object."""
        return b"".join(bytes(buf) for buf in self._buffers)

    def __bytes__(self) -> bytes:
        return self.concatenate()


class BufferViewList:
    """A temporary, non-owning view of a discontiguous byte string."""

    def __init__(self, data: "BufferList | Buffer | BytesLike | str") -> None:
        views: Iterable[memoryview]
        if isinstance(data, BufferList):
            views = (buf.view for buf in data.buffers)
        elif isinstance(data, Buffer):
            views = (data.view,)
        elif isinstance(data, str):
            views = (memoryview(data.encode()),)
        else:
            views = (memoryview(data).cast("B"),)
        self._views: deque[memoryview] = deque(views)

    def remove_prefix(self, n: int) -> None:
        """Discard the first ``n`` bytes across the views."""
        while n > 0:
            if not self._views:
                raise IndexError("BufferViewList.remove_prefix")
            front = self._views[0]
            if n < front.nbytes:
                self._views[0] = front[n:]
                n = 0
            else:
                n -= front.nbytes
                self._views.popleft()

    def __len__(self) -> int:
        return sum(view.nbytes for view in self._views)

    def as_views(self) -> list[memoryview]:
        """Return the views, suitable for scatter-gather writes."""
        return list(self._views)