"""Network-byte-order parsing and unparsing of packet fields."""

from __future__ import annotations

import enum

from spongetcp.buffer import Buffer, BytesLike


class ParseResult(enum.Enum):
    """Outcome of parsing an IP datagram, TCP segment, Ethernet frame or ARP message."""

    NoError = 0
    BadChecksum = 1
    PacketTooShort = 2
    WrongIPVersion = 3
    HeaderTooShort = 4
    TruncatedPacket = 5
    Unsupported = 6


def as_string(result: ParseResult) -> str:
    """Return the name of a ParseResult."""
    return result.name


class ParseError(ValueError):
    """Raised when a packet cannot be parsed; ``result`` says why."""

    def __init__(self, result: ParseResult) -> None:
        super().__init__(as_string(result))
        self.result = result


class NetParser:
    """Reads big-endian integers from the front of a buffer.

    A read past the end of the data records ``ParseResult.PacketTooShort`` in
    ``error``; from then on every read yields 0 and consumes nothing.
    """

    def __init__(self, buffer: Buffer | BytesLike) -> None:
        self._buffer = Buffer(bytes(buffer))
        self.error = ParseResult.NoError

    def buffer(self) -> Buffer:
        """The data not yet consumed."""
        return Buffer(bytes(self._buffer))

    def _check_size(self, size: int) -> None:
        if size > len(self._buffer):
            self.error = ParseResult.PacketTooShort

    def _parse_int(self, size: int) -> int:
        self._check_size(size)
        if self.error is not ParseResult.NoError:
            return 0
        raw = bytes(self._buffer.at(i) for i in range(size))
        self._buffer.remove_prefix(size)
        return int.from_bytes(raw, "big")

    def u32(self) -> int:
        """Parse a 32-bit unsigned integer."""
        return self._parse_int(4)

    def u16(self) -> int:
        """Parse a 16-bit unsigned integer."""
        return self._parse_int(2)

    def u8(self) -> int:
        """Parse an 8-bit unsigned integer."""
        return self._parse_int(1)

    def remove_prefix(self, n: int) -> None:
        """Skip ``n`` bytes."""
        self._check_size(n)
        if self.error is not ParseResult.NoError:
            return
        self._buffer.remove_prefix(n)


def _unparse_int(value: int, size: int) -> bytes:
    return (value & ((1 << (8 * size)) - 1)).to_bytes(size, "big")


def unparse_u32(value: int) -> bytes:
    """Encode the low 32 bits of ``value`` in network byte order."""
    return _unparse_int(value, 4)


def unparse_u16(value: int) -> bytes:
    """Encode the low 16 bits of ``value`` in network byte order."""
    return _unparse_int(value, 2)


def unparse_u8(value: int) -> bytes:
    """Encode the low 8 bits of ``value`` as one byte."""
    return _unparse_int(value, 1)