"""A flow-controlled, in-order, in-memory byte stream."""

from __future__ import annotations


class ByteStream:
    """Bytes are written on the input side and read from the output side.

    The stream holds at most ``capacity`` bytes; the writer can end the input.
    """

    def __init__(self, capacity: int) -> None:
        self._capacity = capacity if capacity > 0 else 1
        self._buffer = bytearray()
        self._bytes_written = 0
        self._bytes_read = 0
        self._input_ended = False
        self._error = False

    # Writer side

    def write(self, data) -> int:
        """Write as many bytes as fit; return how many were accepted."""
        accepted = bytes(data[: self.remaining_capacity])
        self._buffer += accepted
        self._bytes_written += len(accepted)
        return len(accepted)

    @property
    def remaining_capacity(self) -> int:
        """How many more bytes the stream has room for."""
        return self._capacity - len(self._buffer)

    def end_input(self) -> None:
        """Signal that no more bytes will be written."""
        self._input_ended = True

    def set_error(self) -> None:
        """Mark the stream as having suffered an error."""
        self._error = True

    # Reader side

    def peek_output(self, length: int) -> bytes:
        """Return up to ``length`` bytes without removing them."""
        return bytes(self._buffer[: max(length, 0)])

    def pop_output(self, length: int) -> None:
        """Remove up to ``length`` bytes from the output side."""
        count = min(max(length, 0), len(self._buffer))
        del self._buffer[:count]
        self._bytes_read += count

    def read(self, length: int) -> bytes:
        """Remove and return up to ``length`` bytes."""
        data = self.peek_output(length)
        self.pop_output(len(data))
        return data

    @property
    def input_ended(self) -> bool:
        return self._input_ended

    @property
    def error(self) -> bool:
        return self._error

    @property
    def buffer_size(self) -> int:
        """The number of bytes currently available to read."""
        return len(self._buffer)

    @property
    def buffer_empty(self) -> bool:
        return not self._buffer

    @property
    def eof(self) -> bool:
        """True once input has ended and every byte has been read."""
        return self._input_ended and not self._buffer

    # Accounting

    @property
    def bytes_written(self) -> int:
        return self._bytes_written

    @property
    def bytes_read(self) -> int:
        return self._bytes_read