"""Reference-counted handles on kernel file descriptors."""

from __future__ import annotations

import os
import sys
from typing import Union

from spongetcp.buffer import Buffer, BufferList, BufferViewList, BytesLike
from spongetcp.util import UnixError

_MAX_READ = 1024 * 1024

Writable = Union[BufferViewList, BufferList, Buffer, BytesLike, str]


class _FDWrapper:
    """The shared state behind every handle on one kernel file descriptor."""

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
        try:
            os.close(self.fd)
        except OSError as exc:
            raise UnixError("close", exc.errno or 0) from exc
        self.eof = self.closed = True

    def __del__(self) -> None:
        if getattr(self, "closed", True):
            return
        try:
            self.close()
        except Exception as exc:  # never raise from a finaliser
            print(f"Exception destructing FDWrapper: {exc}", file=sys.stderr)


def _as_view_list(data: Writable) -> BufferViewList:
    if isinstance(data, BufferViewList):
        return data
    if isinstance(data, str):
        data = data.encode()
    return BufferViewList(data)


class FileDescriptor:
    """A handle on a kernel file descriptor that tracks EOF and read/write counts.

    Handles made with ``duplicate`` share the descriptor and its counters; the
    descriptor is closed when the last handle goes away or ``close`` is called.
    """

    __slots__ = ("_internal",)

    def __init__(self, fd: int) -> None:
        self._internal = _FDWrapper(fd)

    @classmethod
    def _sharing(cls, wrapper: _FDWrapper) -> FileDescriptor:
        handle = cls.__new__(cls)
        handle._internal = wrapper
        return handle

    def read(self, limit: int | None = None) -> bytes:
        """Read up to ``limit`` bytes (at most 1 MiB at once); fewer may be returned."""
        size = _MAX_READ if limit is None else min(_MAX_READ, limit)
        try:
            data = os.read(self.fd_num(), size)
        except OSError as exc:
            raise UnixError("read", exc.errno or 0) from exc
        if size > 0 and not data:
            self._internal.eof = True
        if len(data) > size:
            raise RuntimeError("read() read more than requested")
        self.register_read()
        return data

    def write(self, data: Writable, write_all: bool = True) -> int:
        """Write ``data``; with ``write_all``, keep writing until all of it is written."""
        buffer = _as_view_list(data)
        total = 0
        while True:
            try:
                written = os.writev(self.fd_num(), buffer.as_views())
            except OSError as exc:
                raise UnixError("writev", exc.errno or 0) from exc
            remaining = len(buffer)
            if written == 0 and remaining != 0:
                raise RuntimeError("write returned 0 given non-empty input buffer")
            if written > remaining:
                raise RuntimeError("write wrote more than length of input buffer")
            self.register_write()
            buffer.remove_prefix(written)
            total += written
            if not (write_all and len(buffer)):
                return total

    def close(self) -> None:
        """Close the underlying descriptor."""
        self._internal.close()

    def duplicate(self) -> FileDescriptor:
        """Another handle on the same descriptor, sharing its state."""
        return FileDescriptor._sharing(self._internal)

    def set_blocking(self, blocking_state: bool) -> None:
        """Make the descriptor blocking (True) or non-blocking (False)."""
        try:
            os.set_blocking(self.fd_num(), blocking_state)
        except OSError as exc:
            raise UnixError("fcntl", exc.errno or 0) from exc

    def register_read(self) -> None:
        """Count one read."""
        self._internal.read_count += 1

    def register_write(self) -> None:
        """Count one write."""
        self._internal.write_count += 1

    def fd_num(self) -> int:
        return self._internal.fd

    def eof(self) -> bool:
        return self._internal.eof

    def closed(self) -> bool:
        return self._internal.closed

    def read_count(self) -> int:
        return self._internal.read_count

    def write_count(self) -> int:
        return self._internal.write_count

    def __enter__(self) -> FileDescriptor:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if not self.closed():
            self.close()

    def __repr__(self) -> str:
        return f"FileDescriptor(fd={self.fd_num()}, closed={self.closed()})"