"""The receiving half of a TCP endpoint."""

from __future__ import annotations

from spongetcp.byte_stream import ByteStream
from spongetcp.stream_reassembler import StreamReassembler
from spongetcp.tcp_segment import TCPSegment
from spongetcp.wrapping_integers import WrappingInt32, unwrap, wrap


class TCPReceiver:
    """Reassembles incoming segments into a ByteStream and computes ackno and window."""

    def __init__(self, capacity: int) -> None:
        self._reassembler = StreamReassembler(capacity)
        self._capacity = capacity
        self._isn: WrappingInt32 | None = None

    def segment_received(self, seg: TCPSegment) -> None:
        """Handle an inbound segment; segments before the SYN are ignored."""
        header = seg.header
        if self._isn is None:
            if not header.syn:
                return
            self._isn = header.seqno
            self._reassembler.push_substring(seg.payload.copy(), 0, header.fin)

        stream_index = unwrap(header.seqno, self._isn, self.stream_out().bytes_written())
        if stream_index != 0:
            self._reassembler.push_substring(seg.payload.copy(), stream_index - 1, header.fin)

    def ackno(self) -> WrappingInt32 | None:
        """The first sequence number not yet received, or None before the SYN."""
        if self._isn is None:
            return None
        stream = self.stream_out()
        absolute = stream.bytes_written() + 1
        if stream.input_ended():
            absolute += 1
        return wrap(absolute, self._isn)

    def window_size(self) -> int:
        """How many more bytes the receiver can hold."""
        return self.stream_out().remaining_capacity()

    def unassembled_bytes(self) -> int:
        """Bytes stored but not yet reassembled."""
        return self._reassembler.unassembled_bytes()

    def stream_out(self) -> ByteStream:
        """The reassembled in-order byte stream."""
        return self._reassembler.stream_out()