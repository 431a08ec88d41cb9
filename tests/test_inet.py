import pytest

from m65net.inet import (
    EUI48,
    ArpHeader,
    IcmpHeader,
    IPv4,
    IpHeader,
    IpProto,
    TcpFlag,
    TcpHeader,
    UdpHeader,
    htons,
    ntohs,
)

MAC_A = "02:00:00:00:00:01"
MAC_B = "02:00:00:00:00:02"


def test_ntohs_swaps_bytes():
    assert ntohs(0x1234) == 0x3412


@pytest.mark.parametrize("value", [0, 1, 0x00FF, 0xFF00, 0xABCD, 0xFFFF])
def test_byte_swap_round_trip(value):
    assert ntohs(htons(value)) == value
    assert 0 <= htons(value) <= 0xFFFF


def test_ipv4_parse_pack_and_str():
    ip = IPv4.parse("192.168.1.142")
    assert ip.pack() == bytes([192, 168, 1, 142])
    assert str(ip) == "192.168.1.142"
    assert IPv4.unpack(ip.pack()) == ip


@pytest.mark.parametrize("text", ["", "1.2.3", "1.2.3.4.5", "256.1.1.1", "a.b.c.d"])
def test_ipv4_parse_rejects_invalid(text):
    with pytest.raises(ValueError):
        IPv4.parse(text)


def test_ipv4_rejects_bad_octets():
    with pytest.raises(ValueError):
        IPv4((1, 2, 3))
    with pytest.raises(ValueError):
        IPv4((1, 2, 3, 300))
    with pytest.raises(ValueError):
        IPv4.unpack(b"\x01\x02")


def test_eui48_round_trip():
    mac = EUI48.parse(MAC_A)
    assert str(mac) == MAC_A
    assert EUI48.unpack(mac.pack()) == mac
    assert EUI48.parse(MAC_A.replace(":", "-")) == mac


@pytest.mark.parametrize("text", ["02:00:00:00:00", "02:00:00:00:00:zz", "020000000001"])
def test_eui48_parse_rejects_invalid(text):
    with pytest.raises(ValueError):
        EUI48.parse(text)


def test_arp_round_trip_and_size():
    header = ArpHeader(
        opcode=2,
        orig_hw=EUI48.parse(MAC_A),
        orig_ip=IPv4.parse("10.0.0.1"),
        dest_hw=EUI48.parse(MAC_B),
        dest_ip=IPv4.parse("10.0.0.2"),
    )
    wire = header.pack()
    assert len(wire) == 28
    assert ArpHeader.unpack(wire) == header
    assert wire[8:14] == EUI48.parse(MAC_A).pack()


def test_ip_header_round_trip():
    header = IpHeader(
        length=40, id=7, ttl=64, protocol=IpProto.TCP, checksum=0xBEEF,
        source=IPv4.parse("10.0.0.1"), destination=IPv4.parse("10.0.0.2"),
    )
    wire = header.pack()
    assert len(wire) == 20
    assert wire[9] == IpProto.TCP
    assert IpHeader.unpack(wire) == header


def test_icmp_header_round_trip():
    header = IcmpHeader(type=8, fcode=0, checksum=0x1234, id=1, seq=2)
    wire = header.pack()
    assert len(wire) == 8
    assert IcmpHeader.unpack(wire) == header


def test_udp_header_wire_bytes():
    header = UdpHeader(source=0x1234, destination=0x5678, length=8, checksum=0)
    assert header.pack() == b"\x12\x34\x56\x78\x00\x08\x00\x00"
    assert UdpHeader.unpack(header.pack()) == header


def test_tcp_header_round_trip_without_options():
    header = TcpHeader(
        source=5005, destination=64128, n_seq=0x01020304, n_ack=0x0A0B0C0D,
        flags=TcpFlag.SYN | TcpFlag.ACK, window=1024,
    )
    wire = header.pack()
    assert len(wire) == 20
    decoded = TcpHeader.unpack(wire)
    assert decoded == header
    assert TcpFlag.ACK in decoded.flags


def test_tcp_header_round_trip_with_options():
    options = b"\x02\x04\x05\xb4"
    header = TcpHeader(source=1, destination=2, hlen=0x60, options=options)
    wire = header.pack()
    assert len(wire) == 20 + len(options)
    assert TcpHeader.unpack(wire).options == options


def test_tcp_header_rejects_long_options():
    with pytest.raises(ValueError):
        TcpHeader(options=bytes(25)).pack()


@pytest.mark.parametrize("cls", [ArpHeader, IpHeader, IcmpHeader, TcpHeader, UdpHeader])
def test_unpack_short_data_raises(cls):
    with pytest.raises(ValueError):
        cls.unpack(b"\x00\x01\x02")