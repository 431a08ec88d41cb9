"""Protocol constants, addresses and wire headers of the IP stack."""

from __future__ import annotations

import ipaddress
import struct
from dataclasses import dataclass, field
from enum import IntEnum, IntFlag
from typing import ClassVar

HEADER_LEN = 64
TCP_OPTIONS_LEN = HEADER_LEN - 40

MAX_SOCKET = 4
TIMEOUT_TCP = 2
RETRIES_TCP = 30
TICK_TCP = 44


class Event(IntEnum):
    """Events reported to socket callbacks."""

    NONE = 0
    CONNECT = 1
    DISCONNECT = 2
    DISCONNECT_WITH_DATA = 3
    DATA = 4
    DATA_SENT = 5


class Protocol(IntEnum):
    """Socket usage and transport protocol."""

    FREE = 0
    UDP = 1
    TCP = 2


class TcpState(IntEnum):
    """TCP connection state machine."""

    IDLE = 0
    LISTEN = 1
    SYN_SENT = 2
    SYN_REC = 3
    ACK_REC = 4
    CONNECT = 5
    ACK_WAIT = 6
    FIN_SENT = 7
    FIN_REC = 8
    FIN_ACK_REC = 9


class TcpFlag(IntFlag):
    """TCP header flags."""

    FIN = 0x01
    SYN = 0x02
    RST = 0x04
    PSH = 0x08
    ACK = 0x10
    URG = 0x20


class IpProto(IntEnum):
    """Values of the IP protocol field."""

    ICMP = 1
    TCP = 6
    UDP = 17


def ntohs(value: int) -> int:
    """Swap the two bytes of a 16-bit value."""
    return ((value >> 8) | (value << 8)) & 0xFFFF


def htons(value: int) -> int:
    """Swap the two bytes of a 16-bit value."""
    return ntohs(value)


def _unpack(fmt: struct.Struct, data: bytes, what: str) -> tuple:
    if len(data) < fmt.size:
        raise ValueError(f"{what} needs {fmt.size} bytes, got {len(data)}")
    return fmt.unpack_from(data)


def _octets(values, count: int, what: str) -> tuple[int, ...]:
    octets = tuple(values)
    if len(octets) != count:
        raise ValueError(f"{what} needs {count} octets, got {len(octets)}")
    if any(not 0 <= b <= 0xFF for b in octets):
        raise ValueError(f"{what} octets must be 0..255")
    return octets


@dataclass(frozen=True)
class IPv4:
    """An IPv4 address as four octets."""

    octets: tuple[int, ...] = (0, 0, 0, 0)

    def __post_init__(self) -> None:
        object.__setattr__(self, "octets", _octets(self.octets, 4, "IPv4 address"))

    @classmethod
    def parse(cls, text: str) -> IPv4:
        """Parse dotted-quad notation."""
        try:
            address = ipaddress.IPv4Address(text)
        except ipaddress.AddressValueError as exc:
            raise ValueError(f"invalid IPv4 address: {text!r}") from exc
        return cls(tuple(address.packed))

    def pack(self) -> bytes:
        return bytes(self.octets)

    @classmethod
    def unpack(cls, data: bytes) -> IPv4:
        if len(data) < 4:
            raise ValueError("IPv4 address needs 4 bytes")
        return cls(tuple(data[:4]))

    def __str__(self) -> str:
        return ".".join(str(b) for b in self.octets)


@dataclass(frozen=True)
class EUI48:
    """An Ethernet MAC address as six octets."""

    octets: tuple[int, ...] = (0, 0, 0, 0, 0, 0)

    def __post_init__(self) -> None:
        object.__setattr__(self, "octets", _octets(self.octets, 6, "MAC address"))

    @classmethod
    def parse(cls, text: str) -> EUI48:
        """Parse six hex octets separated by ':' or '-'."""
        parts = text.replace("-", ":").split(":")
        if len(parts) != 6 or any(not 1 <= len(p) <= 2 for p in parts):
            raise ValueError(f"invalid MAC address: {text!r}")
        try:
            return cls(tuple(int(p, 16) for p in parts))
        except ValueError as exc:
            raise ValueError(f"invalid MAC address: {text!r}") from exc

    def pack(self) -> bytes:
        return bytes(self.octets)

    @classmethod
    def unpack(cls, data: bytes) -> EUI48:
        if len(data) < 6:
            raise ValueError("MAC address needs 6 bytes")
        return cls(tuple(data[:6]))

    def __str__(self) -> str:
        return ":".join(f"{b:02x}" for b in self.octets)


@dataclass
class ArpHeader:
    """ARP message."""

    FORMAT: ClassVar[struct.Struct] = struct.Struct("!HHBBH6s4s6s4s")

    hardware: int = 1
    protocol: int = 0x0800
    hw_size: int = 6
    pr_size: int = 4
    opcode: int = 1
    orig_hw: EUI48 = field(default_factory=EUI48)
    orig_ip: IPv4 = field(default_factory=IPv4)
    dest_hw: EUI48 = field(default_factory=EUI48)
    dest_ip: IPv4 = field(default_factory=IPv4)

    def pack(self) -> bytes:
        return self.FORMAT.pack(
            self.hardware, self.protocol, self.hw_size, self.pr_size, self.opcode,
            self.orig_hw.pack(), self.orig_ip.pack(), self.dest_hw.pack(), self.dest_ip.pack(),
        )

    @classmethod
    def unpack(cls, data: bytes) -> ArpHeader:
        hw, proto, hw_size, pr_size, op, ohw, oip, dhw, dip = _unpack(cls.FORMAT, data, "ARP header")
        return cls(
            hw, proto, hw_size, pr_size, op,
            EUI48.unpack(ohw), IPv4.unpack(oip), EUI48.unpack(dhw), IPv4.unpack(dip),
        )


@dataclass
class IpHeader:
    """IPv4 header without options."""

    FORMAT: ClassVar[struct.Struct] = struct.Struct("!BBHHHBBH4s4s")

    ver_length: int = 0x45
    tos: int = 0
    length: int = 0
    id: int = 0
    frag: int = 0
    ttl: int = 0
    protocol: int = 0
    checksum: int = 0
    source: IPv4 = field(default_factory=IPv4)
    destination: IPv4 = field(default_factory=IPv4)

    def pack(self) -> bytes:
        return self.FORMAT.pack(
            self.ver_length, self.tos, self.length, self.id, self.frag,
            self.ttl, self.protocol, self.checksum, self.source.pack(), self.destination.pack(),
        )

    @classmethod
    def unpack(cls, data: bytes) -> IpHeader:
        *head, src, dst = _unpack(cls.FORMAT, data, "IP header")
        return cls(*head, IPv4.unpack(src), IPv4.unpack(dst))


@dataclass
class IcmpHeader:
    """ICMP echo-style header."""

    FORMAT: ClassVar[struct.Struct] = struct.Struct("!BBHHH")

    type: int = 0
    fcode: int = 0
    checksum: int = 0
    id: int = 0
    seq: int = 0

    def pack(self) -> bytes:
        return self.FORMAT.pack(self.type, self.fcode, self.checksum, self.id, self.seq)

    @classmethod
    def unpack(cls, data: bytes) -> IcmpHeader:
        return cls(*_unpack(cls.FORMAT, data, "ICMP header"))


@dataclass
class TcpHeader:
    """TCP header with up to 24 option bytes."""

    FORMAT: ClassVar[struct.Struct] = struct.Struct("!HHIIBBHHH")

    source: int = 0
    destination: int = 0
    n_seq: int = 0
    n_ack: int = 0
    hlen: int = 0x50
    flags: int = 0
    window: int = 0
    checksum: int = 0
    urgent: int = 0
    options: bytes = b""

    def pack(self) -> bytes:
        if len(self.options) > TCP_OPTIONS_LEN:
            raise ValueError(f"TCP options exceed {TCP_OPTIONS_LEN} bytes")
        return self.FORMAT.pack(
            self.source, self.destination, self.n_seq, self.n_ack, self.hlen,
            int(self.flags), self.window, self.checksum, self.urgent,
        ) + bytes(self.options)

    @classmethod
    def unpack(cls, data: bytes) -> TcpHeader:
        src, dst, seq, ack, hlen, flags, window, checksum, urgent = _unpack(
            cls.FORMAT, data, "TCP header"
        )
        option_len = (hlen >> 4) * 4 - cls.FORMAT.size
        if option_len > TCP_OPTIONS_LEN:
            raise ValueError(f"TCP options exceed {TCP_OPTIONS_LEN} bytes")
        options = b""
        if option_len > 0:
            end = cls.FORMAT.size + option_len
            if len(data) < end:
                raise ValueError("TCP header truncated in options")
            options = bytes(data[cls.FORMAT.size:end])
        return cls(src, dst, seq, ack, hlen, TcpFlag(flags), window, checksum, urgent, options)


@dataclass
class UdpHeader:
    """UDP header."""

    FORMAT: ClassVar[struct.Struct] = struct.Struct("!HHHH")

    source: int = 0
    destination: int = 0
    length: int = 0
    checksum: int = 0

    def pack(self) -> bytes:
        return self.FORMAT.pack(self.source, self.destination, self.length, self.checksum)

    @classmethod
    def unpack(cls, data: bytes) -> UdpHeader:
        return cls(*_unpack(cls.FORMAT, data, "UDP header"))