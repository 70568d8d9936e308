"""32-bit wrapping sequence numbers relative to an initial sequence number."""

from __future__ import annotations

from dataclasses import dataclass

_MOD32 = 1 << 32
_MOD64 = 1 << 64
_MASK32 = _MOD32 - 1
_MASK64 = _MOD64 - 1


@dataclass(frozen=True)
class WrappingInt32:
    """A 32-bit integer that wraps around, as used for TCP seqno and ackno."""

    raw_value: int

    def __post_init__(self) -> None:
        object.__setattr__(self, "raw_value", self.raw_value & _MASK32)

    def __add__(self, other: int) -> "WrappingInt32":
        if isinstance(other, WrappingInt32) or not isinstance(other, int):
            return NotImplemented
        return WrappingInt32(self.raw_value + other)

    def __sub__(self, other):
        """With a WrappingInt32, the signed 32-bit offset; with an int, step back."""
        if isinstance(other, WrappingInt32):
            diff = (self.raw_value - other.raw_value) & _MASK32
            return diff - _MOD32 if diff >= 1 << 31 else diff
        if isinstance(other, int):
            return WrappingInt32(self.raw_value - other)
        return NotImplemented

    def __int__(self) -> int:
        return self.raw_value

    def __str__(self) -> str:
        return str(self.raw_value)


def wrap(n: int, isn: WrappingInt32) -> WrappingInt32:
    """Turn an absolute 64-bit sequence number into a wrapping one."""
    return isn + n


def unwrap(n: WrappingInt32, isn: WrappingInt32, checkpoint: int) -> int:
    """Return the absolute sequence number that wraps to ``n`` closest to ``checkpoint``."""
    checkpoint &= _MASK64
    # The signed offset is sign-extended into 64-bit space.
    offset = (n - isn) % _MOD64
    wrap_num = checkpoint // _MOD32
    left_wrap = wrap_num - 1 if wrap_num > 1 else wrap_num
    right_wrap = min(wrap_num + 1, _MASK32)
    candidates = [
        (w * _MOD32 + offset) & _MASK64 for w in (left_wrap, wrap_num, right_wrap)
    ]
    # min keeps the first of equal distances: left, then middle, then right.
    return min(candidates, key=lambda seqno: abs(checkpoint - seqno))