# sponge

Pieces for building TCP in user space. It is plain Python and has no
third-party dependencies. The socket and event-loop modules use
`os.writev` and `select.poll`, so they need a POSIX system.

## Modules

- `sponge.byte_stream.ByteStream(capacity)` is a bounded, in-order byte
  stream.
  - Writer side: `write(data)` returns how many bytes were accepted.
    `end_input()` marks the end of the input and `set_error()` marks the
    stream as failed. `remaining_capacity` tells how much room is left.
  - Reader side: `peek_output(n)`, `pop_output(n)` and `read(n)`.
  - Properties: `buffer_size`, `buffer_empty`, `input_ended`, `eof`,
    `error`, `bytes_written` and `bytes_read`.
- `sponge.stream_reassembler.StreamReassembler(capacity)` takes substrings
  that may arrive out of order or overlap, through
  `push_substring(data, index, eof)`. It writes them in order into the
  `ByteStream` given by `stream_out`.
  - The capacity covers both the reassembled bytes that have not been read
    and the bytes held waiting for a gap to fill. Bytes beyond it are
    discarded.
  - `unassembled_bytes` counts the waiting bytes, and `empty()` tells
    whether any are left.
- `sponge.wrapping_integers` has `WrappingInt32`, a 32-bit value that
  wraps around.
  - Adding an `int` to it, or subtracting an `int` from it, gives a new
    `WrappingInt32`.
  - Subtracting two of them gives the signed offset between them.
  - `wrap(n, isn)` turns a 64-bit absolute sequence number into a wrapping
    one.
  - `unwrap(n, isn, checkpoint)` returns the absolute sequence number that
    is closest to `checkpoint`.
- `sponge.tcp_header.TCPHeader` is a dataclass holding the fixed TCP header
  fields.
  - `TCPHeader.parse(parser)` skips any options.
  - `serialize()` encodes the header, `to_string()` shows it in hex and
    `summary()` gives a one-line summary.
  - Equality ignores the ports and the checksum.
- `sponge.tcp_segment.TCPSegment` holds a header and a payload.
  - `TCPSegment.parse(buffer, datagram_layer_checksum)` verifies the
    checksum.
  - `serialize(datagram_layer_checksum)` recomputes the checksum and
    returns a `BufferList`.
  - `length_in_sequence_space()` counts the payload plus one each for SYN
    and FIN.
- `sponge.parser` provides the following.
  - `NetParser` reads big-endian integers with `u8()`, `u16()` and
    `u32()`. After an error it returns zero and records the error in
    `result` and `error`.
  - `ParseResult` lists the outcomes and `as_string()` gives their names.
  - `ParseError` carries a `ParseResult` and is raised by the header and
    segment parsers.
  - `pack_u8`, `pack_u16` and `pack_u32` encode integers.
- `sponge.buffer` provides three buffer types.
  - `Buffer` is a read-only byte string whose storage is shared between
    copies.
  - `BufferList` is a discontiguous byte string. Use `concatenate()` to
    join it and `to_buffer()` to turn it into one `Buffer`.
  - `BufferViewList` is a set of memoryviews for scatter-gather writes.
  - All three support `remove_prefix(n)`.
- `sponge.util` provides the following.
  - `InternetChecksum` keeps a running RFC 1071 sum through `add()` and
    `value()`.
  - `hexdump(data, indent, file)` writes a hex dump.
  - `timestamp_ms()` returns milliseconds since import.
  - `get_random_generator()` returns a fully seeded `random.Random`.
- `sponge.address.Address` is an IPv4 address.
  - Build one with `Address(ip, port)`, `Address.resolve(host, service)`,
    `Address.from_sockaddr()` or `Address.from_ipv4_numeric()`.
  - Read it back with `ip_port()`, `ip`, `port`, `ipv4_numeric()` or
    `to_string()`.
- `sponge.file_descriptor.FileDescriptor` is a handle to a descriptor.
  Duplicates share the descriptor and count its reads and writes. It can
  be used as a context manager.
- `sponge.sockets` provides `UDPSocket`, `TCPSocket` and
  `LocalStreamSocket`, built on a common `Socket`.
  - `UDPSocket.recv()` returns a `ReceivedDatagram`.
- `sponge.eventloop.EventLoop` polls its rules and runs the callbacks of
  those that are ready.
  - Rules are added with `add_rule(fd, direction, callback, interest,
    cancel)`.
  - `wait_next_event(timeout_ms)` returns a `Result`: `SUCCESS`, `TIMEOUT`
    or `EXIT`.
  - A callback that neither reads nor writes its descriptor while its rule
    is still interested raises `RuntimeError`.

## Example

```python
from sponge.stream_reassembler import StreamReassembler

reassembler = StreamReassembler(8)
reassembler.push_substring(b"bc", 1, False)
reassembler.push_substring(b"a", 0, False)
print(reassembler.stream_out.read(3))  # b'abc'
```

```python
from sponge.wrapping_integers import WrappingInt32, wrap, unwrap

isn = WrappingInt32(2**32 - 1)
seqno = wrap(3, isn)
assert unwrap(seqno, isn, 0) == 3
```

## What it does not do

Sponge provides building blocks only. It has none of the following:

- a TCP receiver, sender or connection state machine
- IP datagram or Ethernet frame handling
- access to TUN/TAP devices
- a command-line program

## Running the tests

```
pip install -e .[test]
pytest
```