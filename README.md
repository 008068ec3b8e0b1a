# sponge

Building blocks for a user-space TCP/IP stack, in plain Python with no
third-party dependencies:

- `sponge.byte_stream.ByteStream`: a flow-controlled, in-order byte stream with
  a fixed capacity.
- `sponge.buffer`: `Buffer`, `BufferList` and `BufferViewList`, read-only byte
  strings whose front can be discarded without copying.
- `sponge.parser`: `NetParser` and `NetUnparser` for big-endian integers on the
  wire, with `ParseResult` and `as_string` to report parse errors.
- `sponge.util`: the Internet checksum (`InternetChecksum`), `hexdump`,
  `timestamp_ms`, `get_random_generator`, `system_call` and the `TaggedError`
  and `UnixError` exceptions.
- `sponge.address.Address`: IPv4 addresses and name resolution.
- `sponge.file_descriptor.FileDescriptor` and `sponge.sockets`
  (`UDPSocket`, `TCPSocket`, `LocalStreamSocket`): shared handles that count
  reads and writes and track end-of-file.
- `sponge.eventloop.EventLoop`: a poll-based loop that runs callbacks when
  descriptors become readable or writable.
- `sponge.tun`: `TunFD` and `TapFD` for existing Linux TUN/TAP devices.

## Installing

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## A byte stream

```python
from sponge.byte_stream import ByteStream

stream = ByteStream(capacity=4)
stream.write(b"catalog")      # returns 4: only what fits is taken
stream.peek_output(2)         # b"ca"
stream.read(4)                # b"cata"
stream.end_input()
stream.eof()                  # True
```

Once the input has ended, `write` accepts nothing and returns 0.
`bytes_written()`, `bytes_read()`, `buffer_size()` and `remaining_capacity()`
report the stream's accounting.

## Parsing network integers

```python
from sponge.parser import NetParser, NetUnparser

buf = bytearray()
NetUnparser.u32(buf, 0xDEADBEEF)
NetUnparser.u16(buf, 0xC0C0)

p = NetParser(bytes(buf))
assert p.u32() == 0xDEADBEEF
assert p.u16() == 0xC0C0
```

Reading past the end does not raise; the parser sets its `error` attribute to
`ParseResult.PACKET_TOO_SHORT` and returns zero from then on. `ParseResult` is
an `IntEnum` whose `NO_ERROR` member is falsy, so `if p.error:` tells whether
parsing failed.

## The Internet checksum

```python
from sponge.util import InternetChecksum

ck = InternetChecksum()
ck.add(b"\x45\x00\x00\x1c")
ck.value()                    # 16-bit checksum, as an int
```

Running the checksum over data that already carries a correct checksum gives 0.

## Sockets and the event loop

`TCPSocket`, `UDPSocket` and `LocalStreamSocket` are `FileDescriptor`s, so they
can be used as context managers and are closed on exit. `UDPSocket.recv`
returns a `ReceivedDatagram` with `source_address` and `payload`.

`EventLoop.add_rule(fd, direction, callback, interest=None, cancel=None)`
registers a callback for `Direction.IN` or `Direction.OUT`;
`wait_next_event(timeout_ms)` polls once and returns an `EventResult`
(`SUCCESS`, `TIMEOUT` or `EXIT`). A callback must read or write its descriptor,
or its `interest` must stop returning `True`, or the loop raises
`RuntimeError` for a busy wait.

## Fetching a page

The `webget` command connects to the HTTP service on a host, asks for a path
and prints everything the server sends back until the connection closes:

```
webget example.com /index.html
```

The same is available from Python as `sponge.webget.get_url(host, path)`.

## What it does not do

The package provides the pieces a TCP implementation is built from, not a TCP
implementation: there is no segment format, no sender or receiver, no stream
reassembler and no connection state machine. Network access goes through the
operating system's own sockets.