"""A TCP segment: a header plus a payload."""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field

from spongetcp.buffer import Buffer, BufferList, BytesLike
from spongetcp.parser import NetParser, ParseError, ParseResult
from spongetcp.tcp_header import TCPHeader
from spongetcp.util import InternetChecksum


def _to_bytes(data: BufferList | Buffer | BytesLike) -> bytes:
    if isinstance(data, BufferList):
        return data.concatenate()
    return bytes(data)


@dataclass
class TCPSegment:
    """A TCP header together with the payload it carries."""

    header: TCPHeader = field(default_factory=TCPHeader)
    payload: Buffer = field(default_factory=Buffer)

    def __post_init__(self) -> None:
        if not isinstance(self.payload, Buffer):
            self.payload = Buffer(_to_bytes(self.payload))

    @classmethod
    def parse(
        cls,
        buffer: BufferList | Buffer | BytesLike,
        datagram_layer_checksum: int = 0,
    ) -> TCPSegment:
        """Parse a segment, verifying its checksum against the lower-layer pseudo-checksum.

        Raises ParseError on a bad checksum or a malformed header.
        """
        data = _to_bytes(buffer)
        check = InternetChecksum(datagram_layer_checksum)
        check.add(data)
        if check.value():
            raise ParseError(ParseResult.BadChecksum)

        parser = NetParser(data)
        try:
            header = TCPHeader.parse(parser)
        except ParseError as exc:
            if parser.error is not ParseResult.NoError:
                raise ParseError(parser.error) from exc
            raise
        return cls(header=header, payload=parser.buffer())

    def serialize(self, datagram_layer_checksum: int = 0) -> BufferList:
        """Encode the segment with a freshly computed checksum."""
        header_out = dataclasses.replace(self.header, cksum=0)
        check = InternetChecksum(datagram_layer_checksum)
        check.add(header_out.serialize())
        check.add(bytes(self.payload))
        header_out.cksum = check.value()

        out = BufferList(header_out.serialize())
        out.append(self.payload)
        return out

    def length_in_sequence_space(self) -> int:
        """Payload length, plus one for SYN and one for FIN."""
        return len(self.payload) + int(self.header.syn) + int(self.header.fin)