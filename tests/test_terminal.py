import io
import socket
import threading
from unittest import mock

import pytest

from m65net.inet import Event, IPv4
from m65net.terminal import Terminal, main, parse_ipv4, read_host, read_port, strtol


def _serve_once(handler):
    listener = socket.create_server(("127.0.0.1", 0))
    port = listener.getsockname()[1]

    def run():
        with listener:
            conn, _ = listener.accept()
            with conn:
                handler(conn)

    thread = threading.Thread(target=run, daemon=True)
    thread.start()
    return port, thread


def _free_port():
    with socket.create_server(("127.0.0.1", 0)) as probe:
        return probe.getsockname()[1]


# -- strtol -------------------------------------------------------------------


def test_strtol_stops_at_first_non_digit():
    assert strtol("123abc") == (123, 3)


def test_strtol_skips_blanks_and_reads_sign():
    assert strtol("\t\n -42") == (-42, 6)
    assert strtol("+7") == (7, 2)


def test_strtol_without_digits_returns_start():
    assert strtol("abc") == (0, 0)
    assert strtol("-") == (0, 0)


def test_strtol_other_base_not_supported():
    assert strtol("ff", 16) == (0, 0)


# -- parse_ipv4 -----------------------------------------------------------------


def test_parse_ipv4_valid():
    assert parse_ipv4("192.168.1.1") == IPv4((192, 168, 1, 1))
    assert parse_ipv4("0.0.0.0") == IPv4((0, 0, 0, 0))


@pytest.mark.parametrize(
    "text",
    ["01.2.3.4", "256.1.1.1", "1.2.3", "1.2.3.4 ", "1.2.3.4.5", "-1.2.3.4", "1..2.3", "", "a.b.c.d"],
)
def test_parse_ipv4_rejects(text):
    assert parse_ipv4(text) is None


# -- read_host / read_port --------------------------------------------------------


def test_read_host_strips_newline_and_prompts():
    out = io.StringIO()
    assert read_host(io.StringIO("example.com\nrest"), out) == "example.com"
    assert "enter remote hostname or ip" in out.getvalue()


def test_read_host_truncates_to_maxlen():
    assert read_host(io.StringIO("abcdefgh\n"), io.StringIO(), 5) == "abcd"


def test_read_host_eof_gives_none():
    assert read_host(io.StringIO(""), io.StringIO()) is None


def test_read_port_reads_digits():
    assert read_port(io.StringIO("8080\n"), io.StringIO()) == 8080
    assert read_port(io.StringIO("65535\r"), io.StringIO()) == 65535


def test_read_port_empty_line_gives_none():
    assert read_port(io.StringIO("\n"), io.StringIO()) is None


def test_read_port_asks_again_after_bad_input():
    out = io.StringIO()
    assert read_port(io.StringIO("ab\n23\n"), out) == 23
    assert out.getvalue().count("enter remote port") == 2


def test_read_port_eof_raises():
    with pytest.raises(EOFError):
        read_port(io.StringIO("12"), io.StringIO())


# -- events ---------------------------------------------------------------------


def test_handle_connect_reports():
    out = io.StringIO()
    Terminal(io.StringIO(), out).handle_event(Event.CONNECT)
    assert "* connected" in out.getvalue()


def test_handle_data_prints_bytes():
    out = io.StringIO()
    term = Terminal(io.StringIO(), out)
    term.connected = True
    term.handle_event(Event.DATA, b"hi")
    assert out.getvalue() == "hi"
    assert term.connected is True


def test_handle_disconnect_with_data_prints_and_waits_for_key():
    stdin = io.StringIO("z")
    out = io.StringIO()
    term = Terminal(stdin, out)
    term.connected = True
    term.handle_event(Event.DISCONNECT_WITH_DATA, b"bye")
    assert out.getvalue().startswith("bye")
    assert "disconnected" in out.getvalue()
    assert term.connected is False
    assert stdin.read() == ""


# -- resolve / connect / send_key --------------------------------------------------


def test_resolve_literal_does_not_look_up():
    with mock.patch("socket.gethostbyname") as lookup:
        assert Terminal(io.StringIO(), io.StringIO()).resolve("10.0.0.1") == IPv4((10, 0, 0, 1))
    lookup.assert_not_called()


def test_resolve_name_uses_lookup():
    with mock.patch("socket.gethostbyname", return_value="10.1.2.3"):
        assert Terminal(io.StringIO(), io.StringIO()).resolve("example.com") == IPv4((10, 1, 2, 3))


def test_resolve_failure_raises_lookup_error():
    with mock.patch("socket.gethostbyname", side_effect=socket.gaierror("nope")):
        with pytest.raises(LookupError):
            Terminal(io.StringIO(), io.StringIO()).resolve("nowhere")


def test_connect_and_send_key():
    out = io.StringIO()
    with socket.create_server(("127.0.0.1", 0)) as listener:
        port = listener.getsockname()[1]
        term = Terminal(io.StringIO(), out)
        assert term.connect("127.0.0.1", port) == IPv4((127, 0, 0, 1))
        conn, _ = listener.accept()
        with conn:
            assert term.send_key(ord("a")) is True
            assert term.send_key(0) is False
            assert conn.recv(4) == b"a"
        term.handle_event(Event.DISCONNECT)
    assert f"connecting to: 127.0.0.1:{port} (127.0.0.1)..." in out.getvalue()
    assert term.connected is False


def test_send_key_without_connection_raises():
    with pytest.raises(ConnectionError):
        Terminal(io.StringIO(), io.StringIO()).send_key(ord("a"))


def test_send_key_out_of_range_raises():
    with pytest.raises(ValueError):
        Terminal(io.StringIO(), io.StringIO()).send_key(300)


# -- sessions -----------------------------------------------------------------------


def test_session_prints_received_data_until_disconnect():
    port, thread = _serve_once(lambda conn: conn.sendall(b"hello"))
    out = io.StringIO()
    term = Terminal(io.StringIO(f"127.0.0.1\n{port}\n"), out)
    assert term.session() is True
    thread.join(timeout=5)
    text = out.getvalue()
    assert "hello" in text
    assert "disconnected" in text
    assert term.connected is False


def test_session_sends_keys():
    def echo_upper(conn):
        conn.sendall(conn.recv(1).upper())

    port, thread = _serve_once(echo_upper)
    out = io.StringIO()
    term = Terminal(io.StringIO(f"127.0.0.1\n{port}\nk"), out)
    assert term.session() is True
    thread.join(timeout=5)
    assert "K" in out.getvalue()


def test_session_without_port_does_not_connect():
    term = Terminal(io.StringIO("127.0.0.1\nabc\n\n"), io.StringIO())
    assert term.session() is False
    assert term.connected is False


def test_session_reports_unresolvable_host():
    out = io.StringIO()
    with mock.patch("socket.gethostbyname", side_effect=socket.gaierror("nope")):
        assert Terminal(io.StringIO("nowhere\n80\n"), out).session() is False
    assert "could not resolve hostname 'nowhere'" in out.getvalue()


def test_session_refused_connection():
    port = _free_port()
    term = Terminal(io.StringIO(f"127.0.0.1\n{port}\n"), io.StringIO())
    assert term.session() is False
    assert term.connected is False


def test_session_eof_raises():
    with pytest.raises(EOFError):
        Terminal(io.StringIO(""), io.StringIO()).session()


def test_run_stops_at_end_of_input():
    out = io.StringIO()
    Terminal(io.StringIO("127.0.0.1\n\n"), out).run()
    assert out.getvalue().count("enter remote hostname or ip") == 2


def test_main_returns_zero_on_empty_input(monkeypatch):
    monkeypatch.setattr("sys.stdin", io.StringIO(""))
    assert main([]) == 0