"""Shared read-only byte buffers that can cheaply discard bytes from the front."""

from __future__ import annotations

from collections import deque
from typing import Union

BytesLike = Union[bytes, bytearray, memoryview]


class Buffer:
    """A read-only byte string that can drop bytes from its front without copying."""

    __slots__ = ("_storage", "_offset")

    def __init__(self, data: BytesLike = b"") -> None:
        self._storage = bytes(data)
        self._offset = 0

    def _view(self) -> memoryview:
        return memoryview(self._storage)[self._offset:]

    def _clone(self) -> Buffer:
        clone = Buffer.__new__(Buffer)
        clone._storage = self._storage
        clone._offset = self._offset
        return clone

    def __len__(self) -> int:
        return len(self._storage) - self._offset

    def __bytes__(self) -> bytes:
        return self._storage[self._offset:]

    def __repr__(self) -> str:
        return f"Buffer({bytes(self)!r})"

    def at(self, n: int) -> int:
        """Return the byte at position ``n``."""
        if n < 0 or n >= len(self):
            raise IndexError("Buffer.at")
        return self._storage[self._offset + n]

    def copy(self) -> bytes:
        """Return the contents as a new bytes object."""
        return bytes(self)

    def remove_prefix(self, n: int) -> None:
        """Discard the first ``n`` bytes."""
        if n < 0 or n > len(self):
            raise IndexError("Buffer.remove_prefix")
        self._offset += n
        if self._offset == len(self._storage):
            self._storage = b""
            self._offset = 0


def _as_buffers(value: BufferList | Buffer | BytesLike) -> list[Buffer]:
    if isinstance(value, BufferList):
        return [buf._clone() for buf in value._buffers]
    if isinstance(value, Buffer):
        return [value._clone()]
    return [Buffer(value)]


class BufferList:
    """A sequence of Buffers forming one discontiguous byte string."""

    def __init__(self, data: BufferList | Buffer | BytesLike | None = None) -> None:
        self._buffers: deque[Buffer] = deque()
        if data is not None:
            self.append(data)

    def buffers(self) -> tuple[Buffer, ...]:
        """The Buffers that make up the list, in order."""
        return tuple(buf._clone() for buf in self._buffers)

    def append(self, other: BufferList | Buffer | BytesLike) -> None:
        """Append another BufferList, a Buffer or raw bytes."""
        self._buffers.extend(_as_buffers(other))

    def to_buffer(self) -> Buffer:
        """Return the contents as one Buffer; only possible when they are contiguous."""
        if not self._buffers:
            return Buffer()
        if len(self._buffers) == 1:
            return self._buffers[0]._clone()
        raise ValueError(
            "BufferList: use concatenate() to combine a multi-Buffer BufferList into one Buffer"
        )

    def remove_prefix(self, n: int) -> None:
        """Discard the first ``n`` bytes across the contained Buffers."""
        if n < 0:
            raise IndexError("BufferList.remove_prefix")
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

    def __repr__(self) -> str:
        return f"BufferList({self.concatenate()!r})"

    def concatenate(self) -> bytes:
        """Return all contents joined into one bytes object."""
        return b"".join(bytes(buf) for buf in self._buffers)


class BufferViewList:
    """A non-owning view over a discontiguous byte string."""

    def __init__(self, data: BufferList | Buffer | BytesLike) -> None:
        if isinstance(data, BufferList):
            self._views = deque(buf._view() for buf in data._buffers)
        elif isinstance(data, Buffer):
            self._views = deque([data._view()])
        else:
            self._views = deque([memoryview(data).cast("B")])

    def remove_prefix(self, n: int) -> None:
        """Discard the first ``n`` bytes of the view."""
        if n < 0:
            raise IndexError("BufferViewList.remove_prefix")
        while n > 0:
            if not self._views:
                raise IndexError("BufferViewList.remove_prefix")
            front = self._views[0]
            if n < len(front):
                self._views[0] = front[n:]
                n = 0
            else:
                n -= len(front)
                self._views.popleft()

    def __len__(self) -> int:
        return sum(len(view) for view in self._views)

    def as_views(self) -> list[memoryview]:
        """The views in order, suitable for scatter-gather writes."""
        return list(self._views)