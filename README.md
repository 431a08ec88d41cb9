# m65net

A small networking toolkit. It has two commands, a line-prompted TCP terminal
and a UDP echo server. As a library it has IPv4 packet headers and a
simulated memory map, text console, real-time clock and random number
generators modelled on an 8-bit home computer.

## Installation

```
pip install .
```

For the test suite:

```
pip install ".[test]"
pytest
```

## Commands

### TCP terminal

```
m65net-terminal
```

The terminal asks for a remote hostname or dotted IPv4 address, then for a
port. If the port line holds anything other than digits, it asks for the
port again. An empty port line goes back to the start. A host that is not a
literal dotted quad is looked up with the system resolver. After the
connection is made, each key you type is sent to the server as one byte,
and everything the server sends is printed as Latin-1 text. When the peer
disconnects, the terminal prints `* disconnected <any key>` and waits for one
character, then starts over. It stops when input ends.

### UDP echo server

```
m65net-udpecho [--host HOST] [--port PORT]
```

The server binds to `0.0.0.0`, UDP port 5005, unless `--host` or `--port`
gives another address. It prints each datagram on a line of its own, with
printable ASCII shown as itself and every other byte shown as `[0xNN]`. It
then sends the datagram back to the sender. Stop it with Ctrl-C.

## Library

- `m65net.inet`: the `IPv4` and `EUI48` addresses (`parse`, `pack`, `unpack`)
  and the `ArpHeader`, `IpHeader`, `IcmpHeader`, `TcpHeader` and `UdpHeader`
  headers, each with `pack` and `unpack`. It also has the byte-swap helpers
  `ntohs` and `htons` and the enumerations `Event`, `Protocol`, `TcpState`,
  `TcpFlag` and `IpProto`.
- `m65net.terminal`: `strtol`, `parse_ipv4`, `read_host`, `read_port`, and
  the `Terminal` class with `resolve`, `connect`, `handle_event`,
  `send_key`, `session` and `run`. `parse_ipv4` accepts only strict dotted
  quads with no leading zeros and returns `None` for anything else.
- `m65net.udpecho`: `format_payload` and `UdpEchoServer`, which can be used
  as a context manager.
- `m65net.memory`: `Memory`, a sparse byte-addressed space. It has
  `peek`/`poke`, 16- and 32-bit little-endian access, 28-bit `lpeek`/`lpoke`,
  `read`/`write`, block copy (`lcopy`) and fill (`lfill`, `lfill_skip`).
- `m65net.conio`: `Console`, a text screen written into a `Memory`. It
  covers colours and attributes, cursor movement, text output, boxes and
  lines, `cprintf` with escapes such as `{clr}` and `{red}`, keyboard reads
  from the key register, and palette banks. The module also has
  `petscii_to_screencode`, `petscii_to_screencode_s` and `escape_hash`.
- `m65net.rtc`: `RtcTime`, `get_rtc` and `set_rtc`, which read and write the
  clock registers of a `Memory` according to the detected board, and the BCD
  helpers `to_bcd` and `from_bcd`.
- `m65net.random`: the seedable `Xorshift32` generator and the entropy-based
  `random8`, `random16` and `random32`.
- `m65net.targets`: the `Target` board identifiers and `detect_target`.
- `m65net.hal`: `usleep` and `debug_msg`.

```python
from m65net.terminal import parse_ipv4
from m65net.random import Xorshift32

print(parse_ipv4("192.168.1.42"))   # 192.168.1.42
print(parse_ipv4("192.168.01.42"))  # None
rng = Xorshift32(1)
print(rng.next())
```

## What it does not do

- The terminal and the echo server use the operating system's sockets. The
  package has no IP stack of its own. It does not implement ARP, DHCP or a
  DNS client, and it computes no checksums. The header classes only pack and
  unpack the fields they are given.
- `Console`, the clock functions and `detect_target` work on a `Memory`
  object only. They do not draw on a real display or touch real hardware.