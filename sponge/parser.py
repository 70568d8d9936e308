"""Network byte order parsing and unparsing with sticky error state."""

from __future__ import annotations

from enum import Enum

from .buffer import Buffer


class ParseResult(Enum):
    """Outcome of parsing a datagram, segment, frame or message."""

    NO_ERROR = 0
    BAD_CHECKSUM = 1
    PACKET_TOO_SHORT = 2
    WRONG_IP_VERSION = 3
    HEADER_TOO_SHORT = 4
    TRUNCATED_PACKET = 5
    UNSUPPORTED = 6

    def __str__(self) -> str:
        return as_string(self)


_NAMES = {
    ParseResult.NO_ERROR: "NoError",
    ParseResult.BAD_CHECKSUM: "BadChecksum",
    ParseResult.PACKET_TOO_SHORT: "PacketTooShort",
    ParseResult.WRONG_IP_VERSION: "WrongIPVersion",
    ParseResult.HEADER_TOO_SHORT: "HeaderTooShort",
    ParseResult.TRUNCATED_PACKET: "TruncatedPacket",
    ParseResult.UNSUPPORTED: "Unsupported",
}


def as_string(result: ParseResult) -> str:
    """Return the display name of a ParseResult."""
    return _NAMES[result]


class ParseError(Exception):
    """Raised when parsing fails; carries the ParseResult."""

    def __init__(self, result: ParseResult) -> None:
        super().__init__(as_string(result))
        self.result = result


class NetParser:
    """Reads big-endian integers from a buffer.

    Once an error is recorded, further reads return zero and consume nothing,
    so a whole header can be read before the result is checked.
    """

    def __init__(self, buffer: "Buffer | bytes | bytearray | memoryview") -> None:
        self._buffer = Buffer(buffer)
        self.result = ParseResult.NO_ERROR

    @property
    def buffer(self) -> Buffer:
        """A copy of the unparsed remainder."""
        return Buffer(self._buffer)

    @property
    def error(self) -> bool:
        """True if an error has been recorded."""
        return self.result is not ParseResult.NO_ERROR

    def _check_size(self, size: int) -> None:
        if size > len(self._buffer):
            self.result = ParseResult.PACKET_TOO_SHORT

    def _parse_int(self, length: int) -> int:
        self._check_size(length)
        if self.error:
            return 0
        value = int.from_bytes(bytes(self._buffer.view[:length]), "big")
        self._buffer.remove_prefix(length)
        return value

    def u32(self) -> int:
        """Parse a 32-bit big-endian integer."""
        return self._parse_int(4)

    def u16(self) -> int:
        """Parse a 16-bit big-endian integer."""
        return self._parse_int(2)

    def u8(self) -> int:
        """Parse an 8-bit integer."""
        return self._parse_int(1)

    def remove_prefix(self, n: int) -> None:
        """Skip ``n`` bytes, recording an error if there are not enough."""
        self._check_size(n)
        if self.error:
            return
        self._buffer.remove_prefix(n)


def pack_u32(value: int) -> bytes:
    """Encode the low 32 bits of ``value`` in network byte order."""
    return (value & 0xFFFFFFFF).to_bytes(4, "big")


def pack_u16(value: int) -> bytes:
    """Encode the low 16 bits of ``value`` in network byte order."""
    return (value & 0xFFFF).to_bytes(2, "big")


def pack_u8(value: int) -> bytes:
    """Encode the low 8 bits of ``value``."""
    return (value & 0xFF).to_bytes(1, "big")