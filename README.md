# spongetcp

Building blocks for a user-space TCP implementation. It is plain Python and
needs nothing beyond the standard library.

## Modules

### Streams and sequence numbers

- `spongetcp.byte_stream.ByteStream(capacity)` is an in-memory byte stream
  that holds at most `capacity` unread bytes.
  - The writer side has `write()`, which returns how many bytes were accepted.
    It also has `remaining_capacity()`, `end_input()` and `set_error()`.
  - The reader side has `peek_output()`, `pop_output()`, `read()`,
    `buffer_size()`, `buffer_empty()`, `input_ended()`, `error()` and `eof()`.
  - For accounting there are `bytes_written()` and `bytes_read()`.
- `spongetcp.stream_reassembler.StreamReassembler(capacity)` collects indexed
  substrings with `push_substring(data, index, eof)`. The substrings may arrive
  out of order or overlap. Contiguous bytes go into `stream_out()`, which is a
  `ByteStream`. Bytes that lie beyond the capacity are dropped.
  `unassembled_bytes()` and `empty()` report the bytes that are still waiting.
- `spongetcp.wrapping_integers` provides `WrappingInt32`, a 32-bit value whose
  arithmetic wraps. It also provides two functions:
  - `wrap(n, isn)` turns an absolute 64-bit index into a 32-bit sequence number.
  - `unwrap(n, isn, checkpoint)` turns a sequence number back into the absolute
    index closest to `checkpoint`.
  - Subtracting two `WrappingInt32` values gives their signed offset.

### Packets

- `spongetcp.buffer` provides three byte containers:
  - `Buffer` is a read-only byte string that can drop bytes from its front.
  - `BufferList` is a discontiguous sequence of `Buffer`s, with
    `concatenate()` and `to_buffer()`.
  - `BufferViewList` is a set of memoryviews for scatter-gather writes.
- `spongetcp.parser` covers parsing and encoding of fields:
  - `NetParser` reads big-endian `u8`/`u16`/`u32` values. A read past the end
    sets its `error` attribute to `ParseResult.PacketTooShort`.
  - `unparse_u8`, `unparse_u16` and `unparse_u32` encode values.
  - `ParseError` carries a `ParseResult`.
- `spongetcp.tcp_header.TCPHeader` is a dataclass of the TCP header fields.
  - `TCPHeader.parse()` skips options and raises `ParseError` on bad input.
  - `serialize()` pads the header to `4 * doff` bytes.
  - `to_string()` and `summary()` render the header for reading.
  - Equality ignores the ports and the checksum.
- `spongetcp.tcp_segment.TCPSegment` holds a `header` and a `payload`.
  - `TCPSegment.parse(buffer, datagram_layer_checksum=0)` checks the Internet
    checksum and raises `ParseError` on failure.
  - `serialize()` returns a `BufferList` with a freshly computed checksum.
  - `length_in_sequence_space()` gives the payload length plus one for each of
    SYN and FIN.
- `spongetcp.util` provides:
  - `InternetChecksum`;
  - `format_hexdump()` and `hexdump()`;
  - `timestamp_ms()`;
  - `get_random_generator()`, which returns a `random.Random` seeded from
    `os.urandom`;
  - the `TaggedError` and `UnixError` exception types.

### Receiving TCP

- `spongetcp.tcp_receiver.TCPReceiver(capacity)` passes segments to a
  `StreamReassembler` through `segment_received(seg)`. Segments that arrive
  before the SYN are ignored. It reports three things:
  - `ackno()` is `None` until a SYN has arrived.
  - `window_size()` is the room left in the stream.
  - `unassembled_bytes()` counts bytes stored but not yet assembled.
- `spongetcp.tcp_state.state_summary(receiver)` returns a
  `TCPReceiverStateSummary`: `ERROR`, `LISTEN`, `SYN_RECV` or `FIN_RECV`.

### Operating-system access (POSIX)

- `spongetcp.address.Address` is a socket address. It is built with
  `resolve()`, `from_ip_port()`, `from_sockaddr()` or `from_ipv4_numeric()`,
  and offers `ip()`, `port()`, `ipv4_numeric()` and `str()` as `"ip:port"`.
- `spongetcp.file_descriptor.FileDescriptor` is a handle on a kernel file
  descriptor.
  - It counts reads and writes and records EOF.
  - `duplicate()` shares one descriptor among several handles.
  - It works as a context manager.
- `spongetcp.eventloop.EventLoop` polls rules added with `add_rule()`. Its
  `wait_next_event(timeout_ms)` returns an `EventLoopResult`: `Success`,
  `Timeout` or `Exit`. A callback that neither reads nor writes its
  descriptor, while its rule stays interested, raises `RuntimeError`.
- `spongetcp.sockets` provides `UDPSocket`, `TCPSocket` and
  `LocalStreamSocket`. All of them are `FileDescriptor`s with `bind`,
  `connect`, `shutdown`, `local_address` and `peer_address`.
- `spongetcp.tun` provides `TunFD` and `TapFD`. They open existing persistent
  Linux TUN/TAP devices through `/dev/net/tun`.

## What it does not do

The package has no TCP sender, no full TCP connection and no retransmission
timer. It provides no network interface or IP layer, and no command-line
program. A `TCPReceiver` is the only part of TCP that it carries out.

## Installing

```
pip install .
```

To run the tests:

```
pip install .[test]
pytest
```

## Examples

```python
from spongetcp.stream_reassembler import StreamReassembler

r = StreamReassembler(8)
r.push_substring(b"b", 1, False)
r.push_substring(b"a", 0, False)
print(r.stream_out().read(2))   # b'ab'
```

```python
from spongetcp.wrapping_integers import WrappingInt32, wrap, unwrap

isn = WrappingInt32(2**32 - 2)
seqno = wrap(5, isn)
assert seqno.raw_value == 3
assert unwrap(seqno, isn, 0) == 5
```

```python
from spongetcp.tcp_header import TCPHeader
from spongetcp.tcp_segment import TCPSegment
from spongetcp.tcp_receiver import TCPReceiver
from spongetcp.wrapping_integers import WrappingInt32

receiver = TCPReceiver(4000)
receiver.segment_received(TCPSegment(TCPHeader(syn=True, seqno=WrappingInt32(0))))
wire = receiver_bytes = TCPSegment(TCPHeader(seqno=WrappingInt32(1)), b"abcd").serialize().concatenate()
receiver.segment_received(TCPSegment.parse(wire))
print(receiver.ackno())                  # 5
print(receiver.stream_out().read(4))     # b'abcd'
```