import io
import socket
import threading

import pytest

from m65net.udpecho import UdpEchoServer, format_payload, main


@pytest.fixture
def client():
    sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    sock.bind(("127.0.0.1", 0))
    sock.settimeout(5)
    yield sock
    sock.close()


def test_format_payload_printable_unchanged():
    assert format_payload(b"AZ az~") == "AZ az~"


def test_format_payload_escapes_other_bytes():
    assert format_payload(b"\x00\x7f\xff") == "[0x00][0x7f][0xff]"


def test_format_payload_boundaries():
    assert format_payload(b"\x1f \x7e") == "[0x1f] ~"


def test_format_payload_empty():
    assert format_payload(b"") == ""


def test_handle_prints_and_echoes(client):
    out = io.StringIO()
    with UdpEchoServer("127.0.0.1", 0, out) as server:
        server.handle(b"ping", client.getsockname())
        data, sender = client.recvfrom(512)
    assert data == b"ping"
    assert out.getvalue() == "ping\n"


def test_serve_forever_echoes_until_closed(client):
    out = io.StringIO()
    server = UdpEchoServer("127.0.0.1", 0, out)
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    try:
        client.sendto(b"abc\n", server.address)
        data, sender = client.recvfrom(512)
        assert data == b"abc\n"
        assert sender == server.address
    finally:
        server.close()
        thread.join(timeout=5)
    assert not thread.is_alive()
    assert "abc[0x0a]\n" in out.getvalue()


def test_serve_forever_after_close_returns():
    out = io.StringIO()
    server = UdpEchoServer("127.0.0.1", 0, out)
    server.close()
    server.serve_forever()
    assert out.getvalue() == ""


def test_context_manager_closes_socket():
    with UdpEchoServer("127.0.0.1", 0, io.StringIO()) as server:
        host, port = server.address
        assert host == "127.0.0.1"
    with pytest.raises(OSError):
        server.address


def test_main_rejects_bad_port():
    with pytest.raises(SystemExit) as excinfo:
        main(["--port", "70000"])
    assert excinfo.value.code == 2


def test_main_rejects_non_numeric_port():
    with pytest.raises(SystemExit) as excinfo:
        main(["--port", "echo"])
    assert excinfo.value.code == 2