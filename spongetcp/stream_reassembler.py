"""Reassembly of possibly out-of-order, overlapping substrings into a byte stream."""

from __future__ import annotations

from spongetcp.byte_stream import ByteStream


class StreamReassembler:
    """Collects indexed substrings and writes contiguous bytes to a ByteStream in order.

    The capacity bounds both the reassembled bytes waiting in the output stream
    and the bytes stored but not yet reassembled; bytes beyond it are dropped.
    """

    def __init__(self, capacity: int) -> None:
        self._output = ByteStream(capacity)
        self._capacity = capacity
        self._next_index = 0
        self._pending: dict[int, int] = {}
        self._eof = False

    def push_substring(self, data: bytes, index: int, eof: bool = False) -> None:
        """Accept ``data`` starting at stream position ``index``.

        If ``eof`` is set, the last byte of ``data`` is the last byte of the stream.
        """
        limit = self._next_index + self._output.remaining_capacity()
        end = index + len(data)
        if eof and end <= limit:
            self._eof = True
        if index >= limit:
            return
        if end > self._next_index:
            pending = self._pending
            for position in range(max(index, self._next_index), min(end, limit)):
                if position not in pending:
                    pending[position] = data[position - index]
            assembled = bytearray()
            while self._next_index in pending:
                assembled.append(pending.pop(self._next_index))
                self._next_index += 1
            if assembled:
                self._output.write(bytes(assembled))
        if self._eof and self.empty():
            self._output.end_input()

    def stream_out(self) -> ByteStream:
        """The reassembled in-order byte stream."""
        return self._output

    def unassembled_bytes(self) -> int:
        """Number of bytes stored but not yet reassembled, each counted once."""
        return len(self._pending)

    def empty(self) -> bool:
        """True when no bytes are waiting to be reassembled."""
        return not self._pending