"""Internet checksum, timing, random seeding and hex dumps."""

from __future__ import annotations

import os
import random
import sys
import time
from typing import TextIO

_PROGRAM_START = time.monotonic()

# The Mersenne Twister keeps 624 32-bit words of state.
_SEED_BYTES = 624 * 4


def timestamp_ms() -> int:
    """Return the number of milliseconds since the program started."""
    return int((time.monotonic() - _PROGRAM_START) * 1000)


def get_random_generator() -> random.Random:
    """Return a Mersenne Twister generator seeded with a full state of entropy."""
    return random.Random(int.from_bytes(os.urandom(_SEED_BYTES), "big"))


class InternetChecksum:
    """Running Internet checksum (RFC 1071), returned in host byte order.

    Summing a segment that carries a correct checksum yields zero. To compute
    a checksum, zero the checksum field, add the data and store ``value()``.
    """

    def __init__(self, initial_sum: int = 0) -> None:
        self._sum = initial_sum & 0xFFFFFFFF
        self._odd = False

    def add(self, data) -> None:
        """Add bytes to the sum, continuing the byte alignment of earlier calls."""
        raw = bytes(data)
        high = raw[1::2] if self._odd else raw[0::2]
        low = raw[0::2] if self._odd else raw[1::2]
        self._sum = (self._sum + (sum(high) << 8) + sum(low)) & 0xFFFFFFFF
        if len(raw) % 2:
            self._odd = not self._odd

    def value(self) -> int:
        """Return the one's-complement checksum of everything added so far."""
        total = self._sum
        while total > 0xFFFF:
            total = (total >> 16) + (total & 0xFFFF)
        return ~total & 0xFFFF


def hexdump(data, indent: int = 0, file: TextIO | None = None) -> None:
    """Write a hex and printable-character dump of ``data``."""
    out = sys.stdout if file is None else file
    raw = bytes(data)
    pad = " " * indent
    pieces: list[str] = []
    chars: list[str] = []
    for printed, byte in enumerate(raw):
        if printed % 16 == 0:
            if printed:
                pieces.append(f"    {''.join(chars)}\n")
                chars = []
            pieces.append(f"{pad}{printed:08x}:    ")
        elif printed % 2 == 0:
            pieces.append(" ")
        pieces.append(f"{byte:02x}")
        chars.append(chr(byte) if 0x20 <= byte < 0x7F else ".")
    remaining = (16 - len(raw) % 16) % 16
    pieces.append(" " * (2 * remaining + remaining // 2 + 4))
    pieces.append("".join(chars) or " ")
    pieces.append("\n\n")
    out.write("".join(pieces))