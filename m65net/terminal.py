"""Interactive TCP terminal: ask for a host and port, then relay keys and received data."""

from __future__ import annotations

import argparse
import select
import socket
import sys
from typing import TextIO

from .inet import Event, IPv4

DEFAULT_PORT = 64128
HOST_MAXLEN = 80
RX_BUFFER_SIZE = 255
CONNECT_TIMEOUT = 10.0
POLL_INTERVAL = 0.02
BANNER = "mega65 ethernet terminal\r\r"

_IGNORED_KEYS = (0x00, 0xFF)
_RETRY = object()


def _is_digit(ch: str) -> bool:
    return "0" <= ch <= "9"


def strtol(text: str, base: int = 10) -> tuple[int, int]:
    """Parse a decimal integer at the start of ``text``.

    Leading blanks and one sign are accepted. Returns ``(value, end)`` where
    ``end`` is the index just past the digits; with no digits, or a base other
    than 10, the result is ``(0, 0)``.
    """
    if base != 10:
        return 0, 0
    pos = 0
    length = len(text)
    while pos < length and text[pos] in " \t\n\r":
        pos += 1
    sign = 1
    if pos < length and text[pos] in "+-":
        if text[pos] == "-":
            sign = -1
        pos += 1
    start = pos
    while pos < length and _is_digit(text[pos]):
        pos += 1
    if pos == start:
        return 0, 0
    return sign * int(text[start:pos]), pos


def parse_ipv4(text: str) -> IPv4 | None:
    """Parse a strict dotted quad; ``None`` if ``text`` is not one.

    Each octet is 0..255 without leading zeros, and nothing may follow the
    last octet.
    """
    octets: list[int] = []
    pos = 0
    for index in range(4):
        if pos >= len(text) or not _is_digit(text[pos]):
            return None
        value, consumed = strtol(text[pos:])
        end = pos + consumed
        if not 0 <= value <= 255:
            return None
        if end - pos > 1 and text[pos] == "0":
            return None
        octets.append(value)
        if index < 3:
            if end >= len(text) or text[end] != ".":
                return None
            pos = end + 1
        elif end != len(text):
            return None
    return IPv4(tuple(octets))


def _getchar(stdin: TextIO) -> str:
    ch = stdin.read(1)
    if not ch:
        raise EOFError("input closed")
    return ch


def read_host(stdin: TextIO, stdout: TextIO, maxlen: int = HOST_MAXLEN) -> str | None:
    """Prompt for a host name; at most ``maxlen - 1`` characters are read.

    The trailing newline is removed. Returns ``None`` at end of input.
    """
    if maxlen < 2:
        raise ValueError("maxlen must leave room for at least one character")
    stdout.write("\r - enter remote hostname or ip: ")
    stdout.flush()
    line = stdin.readline(maxlen - 1)
    if not line:
        return None
    return line[:-1] if line.endswith("\n") else line


def _port_attempt(stdin: TextIO, stdout: TextIO):
    acc = 0
    got_digit = False
    while True:
        ch = _getchar(stdin)
        if ch in ("\n", "\r"):
            stdout.write("\r")
            stdout.flush()
            break
        if _is_digit(ch):
            got_digit = True
            acc = (acc * 10 + int(ch)) & 0xFFFF
            continue
        while ch not in ("\n", "\r", "\0"):
            ch = _getchar(stdin)
        return _RETRY
    return acc if got_digit else None


def read_port(stdin: TextIO, stdout: TextIO) -> int | None:
    """Prompt for a port number, asking again after any non-digit.

    Returns ``None`` for an empty line; raises EOFError at end of input.
    """
    while True:
        stdout.write("\r - enter remote port:\n")
        stdout.flush()
        result = _port_attempt(stdin, stdout)
        if result is not _RETRY:
            return result


class Terminal:
    """A line-prompted TCP terminal over standard streams."""

    def __init__(self, stdin: TextIO | None = None, stdout: TextIO | None = None) -> None:
        self.stdin = sys.stdin if stdin is None else stdin
        self.stdout = sys.stdout if stdout is None else stdout
        self.connected = False
        self._sock: socket.socket | None = None
        self._keys_closed = False

    def _write(self, text: str) -> None:
        self.stdout.write(text)
        self.stdout.flush()

    def _release(self) -> None:
        if self._sock is not None:
            self._sock.close()
            self._sock = None

    def resolve(self, host: str) -> IPv4:
        """Turn a dotted quad or a host name into an address; LookupError if neither works."""
        address = parse_ipv4(host)
        if address is not None:
            return address
        try:
            resolved = socket.gethostbyname(host)
        except (OSError, ValueError) as exc:
            raise LookupError(f"could not resolve hostname '{host}'") from exc
        return IPv4.parse(resolved)

    def connect(self, host: str, port: int) -> IPv4:
        """Resolve ``host`` and open a TCP connection to it; return the address used."""
        address = self.resolve(host)
        self._write(f"\r\rconnecting to: {host}:{port} ({address})...")
        self._release()
        self._sock = socket.create_connection((str(address), port), timeout=CONNECT_TIMEOUT)
        self._sock.settimeout(None)
        self.connected = True
        self.handle_event(Event.CONNECT)
        return address

    def handle_event(self, event: Event, data: bytes = b"") -> None:
        """React to a connection event: report it, print data, or tear down."""
        event = Event(event)
        if event is Event.CONNECT:
            self._write("\r * connected\r\n")
            return
        if event in (Event.DATA, Event.DISCONNECT_WITH_DATA):
            self._write(bytes(data).decode("latin-1"))
            if event is Event.DATA:
                return
        if event in (Event.DISCONNECT, Event.DISCONNECT_WITH_DATA):
            self.connected = False
            self._release()
            self._write("\r * disconnected <any key> ")
            self.stdin.read(1)

    def send_key(self, key: int) -> bool:
        """Send one key code; codes 0x00 and 0xFF are ignored and give False."""
        if not 0 <= key <= 0xFF:
            raise ValueError("key code must fit in a byte")
        if key in _IGNORED_KEYS:
            return False
        if self._sock is None or not self.connected:
            raise ConnectionError("not connected")
        self._sock.sendall(bytes((key,)))
        return True

    def _poll_socket(self) -> None:
        if self._sock is None:
            return
        readable, _, _ = select.select([self._sock], [], [], POLL_INTERVAL)
        if not readable:
            return
        try:
            data = self._sock.recv(RX_BUFFER_SIZE)
        except ConnectionError:
            data = b""
        if data:
            self.handle_event(Event.DATA, data)
        else:
            self.handle_event(Event.DISCONNECT)

    def _key_ready(self) -> bool:
        try:
            fd = self.stdin.fileno()
        except (AttributeError, OSError, ValueError):
            return True
        try:
            readable, _, _ = select.select([fd], [], [], 0)
        except (OSError, ValueError):
            return True
        return bool(readable)

    def _poll_keyboard(self) -> None:
        if self._keys_closed or not self._key_ready():
            return
        ch = self.stdin.read(1)
        if not ch:
            self._keys_closed = True
            return
        key = ord(ch)
        if key > 0xFF:
            return
        try:
            self.send_key(key)
        except OSError:
            self.handle_event(Event.DISCONNECT)

    def session(self) -> bool:
        """Prompt, connect and relay until the peer disconnects.

        Returns whether a connection was made; raises EOFError at end of input.
        """
        self._write(BANNER)
        host = read_host(self.stdin, self.stdout)
        port = read_port(self.stdin, self.stdout)
        if host is None:
            raise EOFError("input closed")
        if port is None:
            return False
        try:
            self.connect(host, port)
        except LookupError as exc:
            self._write(f"\r{exc}")
            return False
        except OSError as exc:
            self._write(f"\rcould not connect to {host}:{port}: {exc.strerror or exc}\r")
            self._release()
            return False
        self._keys_closed = False
        try:
            while self.connected:
                self._poll_socket()
                if self.connected:
                    self._poll_keyboard()
        finally:
            if self.connected:
                self.connected = False
                self._release()
        return True

    def run(self) -> None:
        """Run sessions one after another until input ends."""
        try:
            while True:
                self.session()
        except EOFError:
            pass
        finally:
            self._release()


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="m65net-terminal",
        description="Connect to a TCP host and relay keyboard input and received data.",
    )
    parser.parse_args(argv)
    try:
        Terminal().run()
    except KeyboardInterrupt:
        return 130
    return 0


if __name__ == "__main__":
    sys.exit(main())