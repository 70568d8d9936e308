"""Reassembly of possibly out-of-order, overlapping substrings into a stream."""

from __future__ import annotations

from .byte_stream import ByteStream


class StreamReassembler:
    """Assembles indexed substrings into an in-order ByteStream.

    ``capacity`` bounds both the reassembled bytes not yet read and the
    bytes held waiting for a gap to fill; anything beyond is discarded.
    """

    def __init__(self, capacity: int) -> None:
        if capacity < 1:
            raise ValueError("StreamReassembler capacity must be positive")
        self._output = ByteStream(capacity)
        self._capacity = capacity
        self._next_index = 0
        self._end_index = capacity
        self._eof = False
        self._slots = bytearray(capacity)
        self._filled = bytearray(capacity)
        self._pending = 0

    @property
    def stream_out(self) -> ByteStream:
        """The reassembled in-order byte stream."""
        return self._output

    def push_substring(self, data, index: int, eof: bool = False) -> None:
        """Accept a substring starting at ``index`` and assemble what is contiguous.

        ``eof`` marks the last byte of ``data`` as the last byte of the stream.
        """
        if index < 0:
            raise ValueError("index must be non-negative")
        data = bytes(data)
        cap = self._capacity
        window = cap - self._output.buffer_size
        begin = max(self._next_index - index, 0)
        end = min(len(data), self._next_index + window - index)

        for i in range(begin, end):
            slot = (index + i) % cap
            if not self._filled[slot]:
                self._slots[slot] = data[i]
                self._filled[slot] = 1
                self._pending += 1

        assembled = bytearray()
        slot = self._next_index % cap
        while self._filled[slot]:
            assembled.append(self._slots[slot])
            self._filled[slot] = 0
            self._next_index += 1
            self._pending -= 1
            slot = self._next_index % cap
        if assembled:
            self._output.write(assembled)

        if eof:
            self._eof = True
            self._end_index = index + len(data)
        if self._eof and self._next_index == self._end_index:
            self._output.end_input()

    @property
    def unassembled_bytes(self) -> int:
        """Bytes stored but not yet reassembled, each counted once."""
        return self._pending

    def empty(self) -> bool:
        """True if no substrings are waiting to be assembled."""
        return self._pending == 0