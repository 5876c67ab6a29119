"""Error types, timing, randomness, the Internet checksum and hex dumps."""

from __future__ import annotations

import os
import random
import sys
import time
from typing import TextIO

_PROGRAM_START = time.monotonic()


class TaggedError(OSError):
    """An OSError that also names what was being attempted."""

    def __init__(self, attempt: str, code: int, description: str) -> None:
        super().__init__(code, description)
        self.attempt = attempt

    def __str__(self) -> str:
        return f"{self.attempt}: {self.strerror}"


class UnixError(TaggedError):
    """A failed system call and the errno it produced."""

    def __init__(self, attempt: str, error: int) -> None:
        super().__init__(attempt, error, os.strerror(error))


def timestamp_ms() -> int:
    """Milliseconds elapsed since the module was loaded."""
    return int((time.monotonic() - _PROGRAM_START) * 1000)


def get_random_generator() -> random.Random:
    """A pseudo-random generator seeded from the operating system's entropy."""
    return random.Random(int.from_bytes(os.urandom(64), "big"))


class InternetChecksum:
    """Incremental Internet (ones' complement) checksum.

    Evaluating it over data that already carries a correct checksum gives 0.
    """

    def __init__(self, initial_sum: int = 0) -> None:
        self._sum = initial_sum & 0xFFFF_FFFF
        self._parity = False

    def add(self, data) -> None:
        """Add bytes to the running sum; data may be split across calls at any point."""
        data = bytes(data)
        if self._parity:
            high, low = data[1::2], data[0::2]
        else:
            high, low = data[0::2], data[1::2]
        self._sum = (self._sum + (sum(high) << 8) + sum(low)) & 0xFFFF_FFFF
        if len(data) & 1:
            self._parity = not self._parity

    def value(self) -> int:
        """The checksum of everything added so far, in host byte order."""
        total = self._sum
        while total > 0xFFFF:
            total = (total >> 16) + (total & 0xFFFF)
        return ~total & 0xFFFF


def _printable(byte: int) -> str:
    return chr(byte) if 0x20 <= byte <= 0x7E else "."


def format_hexdump(data, indent: int = 0) -> str:
    """Render bytes as offset, hex pairs and printable characters, 16 per line."""
    data = bytes(data)
    indent_string = " " * indent
    parts: list[str] = []
    chars: list[str] = []
    printed = 0
    for byte in data:
        if printed & 0xF == 0:
            if printed:
                parts.append("    " + "".join(chars) + "\n")
                chars = []
            parts.append(f"{indent_string}{printed:08x}:    ")
        elif printed & 1 == 0:
            parts.append(" ")
        parts.append(f"{byte:02x}")
        chars.append(_printable(byte))
        printed += 1
    remainder = (16 - (printed & 0xF)) % 16
    parts.append(" " * (2 * remainder + remainder // 2 + 4))
    parts.append("".join(chars) or " ")
    parts.append("\n\n")
    return "".join(parts)


def hexdump(data, indent: int = 0, file: TextIO | None = None) -> None:
    """Write a hex dump of ``data`` to ``file`` (standard output by default)."""
    out = sys.stdout if file is None else file
    out.write(format_hexdump(data, indent))
    out.flush()