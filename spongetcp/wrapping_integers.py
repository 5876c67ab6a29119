"""32-bit wrapping sequence numbers expressed relative to an initial sequence number."""

from __future__ import annotations

from dataclasses import dataclass

_MASK32 = 0xFFFF_FFFF
_MASK64 = 0xFFFF_FFFF_FFFF_FFFF


def _to_int32(value: int) -> int:
    """Interpret the low 32 bits of ``value`` as a signed 32-bit integer."""
    value &= _MASK32
    return value - (1 << 32) if value & 0x8000_0000 else value


@dataclass(frozen=True)
class WrappingInt32:
    """A 32-bit unsigned integer whose arithmetic wraps around modulo 2**32."""

    raw_value: int

    def __post_init__(self) -> None:
        object.__setattr__(self, "raw_value", self.raw_value & _MASK32)

    def __add__(self, other: int) -> WrappingInt32:
        if not isinstance(other, int) or isinstance(other, WrappingInt32):
            return NotImplemented
        return WrappingInt32(self.raw_value + other)

    def __sub__(self, other):
        """Step back by an int, or return the signed offset from another WrappingInt32.

        The offset is the number of increments needed to get from ``other`` to
        ``self``; it is negative when the number of decrements needed is less
        than or equal to the number of increments.
        """
        if isinstance(other, WrappingInt32):
            return _to_int32(self.raw_value - other.raw_value)
        if isinstance(other, int):
            return WrappingInt32(self.raw_value - other)
        return NotImplemented

    def __int__(self) -> int:
        return self.raw_value

    def __str__(self) -> str:
        return str(self.raw_value)


def wrap(n: int, isn: WrappingInt32) -> WrappingInt32:
    """Turn an absolute 64-bit sequence number into a relative 32-bit one."""
    return WrappingInt32(isn.raw_value + (n & _MASK32))


def unwrap(n: WrappingInt32, isn: WrappingInt32, checkpoint: int) -> int:
    """Return the absolute sequence number that wraps to ``n`` and is closest to ``checkpoint``."""
    offset = n - wrap(checkpoint, isn)
    result = checkpoint + offset
    if result < 0:
        result += 1 << 32
    return result & _MASK64