import pytest

from spongetcp.parser import NetParser, ParseError, ParseResult
from spongetcp.tcp_header import TCPHeader
from spongetcp.wrapping_integers import WrappingInt32


def _sample() -> TCPHeader:
    return TCPHeader(
        sport=1234,
        dport=80,
        seqno=WrappingInt32(3_000_000_000),
        ackno=WrappingInt32(42),
        urg=True,
        ack=True,
        psh=True,
        syn=True,
        win=65535,
        cksum=0xBEEF,
        uptr=7,
    )


def test_default_header_serializes_to_length():
    data = TCPHeader().serialize()
    assert len(data) == TCPHeader.LENGTH
    assert TCPHeader.parse(data) == TCPHeader()


def test_round_trip_all_fields():
    original = _sample()
    parsed = TCPHeader.parse(original.serialize())
    assert parsed == original
    assert parsed.sport == 1234
    assert parsed.dport == 80
    assert parsed.cksum == 0xBEEF
    assert parsed.seqno == WrappingInt32(3_000_000_000)
    assert (parsed.urg, parsed.ack, parsed.psh, parsed.rst, parsed.syn, parsed.fin) == (
        True,
        True,
        True,
        False,
        True,
        False,
    )


@pytest.mark.parametrize(
    "flag, bit",
    [
        ("urg", 0b0010_0000),
        ("ack", 0b0001_0000),
        ("psh", 0b0000_1000),
        ("rst", 0b0000_0100),
        ("syn", 0b0000_0010),
        ("fin", 0b0000_0001),
    ],
)
def test_flag_bits(flag, bit):
    data = TCPHeader(**{flag: True}).serialize()
    assert data[13] == bit


def test_options_are_skipped():
    header = TCPHeader(doff=6, seqno=WrappingInt32(9))
    data = header.serialize()
    assert len(data) == 24
    parser = NetParser(data + b"payload")
    parsed = TCPHeader.parse(parser)
    assert parsed.doff == 6
    assert parsed.seqno == WrappingInt32(9)
    assert bytes(parser.buffer()) == b"payload"


def test_serialize_rejects_small_doff():
    with pytest.raises(ValueError, match="TCP header too short"):
        TCPHeader(doff=4).serialize()


def test_parse_rejects_small_doff():
    data = bytearray(TCPHeader().serialize())
    data[12] = 4 << 4
    with pytest.raises(ParseError) as info:
        TCPHeader.parse(bytes(data))
    assert info.value.result is ParseResult.HeaderTooShort


def test_parse_very_short_packet_reports_header_too_short():
    with pytest.raises(ParseError) as info:
        TCPHeader.parse(_sample().serialize()[:10])
    assert info.value.result is ParseResult.HeaderTooShort


def test_parse_truncated_fields_reports_packet_too_short():
    with pytest.raises(ParseError) as info:
        TCPHeader.parse(_sample().serialize()[:18])
    assert info.value.result is ParseResult.PacketTooShort


def test_parse_missing_options_reports_packet_too_short():
    data = TCPHeader(doff=6).serialize()[:20]
    with pytest.raises(ParseError) as info:
        TCPHeader.parse(data)
    assert info.value.result is ParseResult.PacketTooShort


def test_summary():
    header = TCPHeader(
        syn=True, ack=True, seqno=WrappingInt32(5), ackno=WrappingInt32(9), win=100
    )
    assert header.summary() == "Header(flags=SA,seqno=5,ack=9,win=100)"


def test_summary_flag_order():
    header = TCPHeader(fin=True, rst=True, syn=True)
    assert header.summary().startswith("Header(flags=SRF,")


def test_to_string_uses_hex_and_words():
    text = TCPHeader(sport=255, ack=True).to_string()
    lines = text.splitlines()
    assert lines[0] == "TCP source port: ff"
    assert lines[5] == "Flags: urg: false ack: true psh: false rst: false syn: false fin: false"
    assert text.endswith("\n")


def test_equality_ignores_ports_and_checksum():
    a = _sample()
    b = _sample()
    b.sport = 1
    b.dport = 2
    b.cksum = 3
    assert a == b


def test_equality_detects_window_change():
    a = _sample()
    b = _sample()
    b.win = 1
    assert not a == b