"""UDP echo server: print every datagram received and send it straight back."""

from __future__ import annotations

import argparse
import socket
import sys
from typing import TextIO

BUF_SIZE = 512
LOCAL_PORT = 5005
_POLL_SECONDS = 0.2


def format_payload(data: bytes) -> str:
    """Show printable ASCII as is and every other byte as ``[0xNN]``."""
    return "".join(chr(b) if 32 <= b < 127 else f"[0x{b:02x}]" for b in data)


class UdpEchoServer:
    """A bound UDP socket that echoes datagrams to their sender."""

    def __init__(self, host: str = "0.0.0.0", port: int = LOCAL_PORT, out: TextIO | None = None) -> None:
        self.out = sys.stdout if out is None else out
        self._closed = False
        self._sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
        try:
            self._sock.bind((host, port))
        except OSError:
            self._sock.close()
            raise
        self._sock.settimeout(_POLL_SECONDS)

    @property
    def address(self) -> tuple[str, int]:
        """The bound host and port."""
        return self._sock.getsockname()

    def handle(self, data: bytes, address: tuple[str, int]) -> None:
        """Print one datagram and send it back to ``address``."""
        self.out.write(format_payload(data) + "\n")
        self.out.flush()
        self._sock.sendto(data, address)

    def serve_forever(self) -> None:
        """Echo datagrams until :meth:`close` is called."""
        if not self._closed:
            host, port = self.address
            self.out.write(f"UDP echo @ {host}:{port}\r")
            self.out.flush()
        while not self._closed:
            try:
                data, address = self._sock.recvfrom(BUF_SIZE)
            except socket.timeout:
                continue
            except OSError:
                if self._closed:
                    break
                raise
            self.handle(data, address)

    def close(self) -> None:
        """Stop serving and release the socket."""
        self._closed = True
        self._sock.close()

    def __enter__(self) -> UdpEchoServer:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


def _port(text: str) -> int:
    try:
        value = int(text)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid port: {text!r}") from exc
    if not 0 <= value <= 0xFFFF:
        raise argparse.ArgumentTypeError(f"port out of range: {value}")
    return value


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(prog="m65net-udpecho", description="Echo UDP datagrams back to their sender.")
    parser.add_argument("--host", default="0.0.0.0", help="address to bind (default: all)")
    parser.add_argument("--port", type=_port, default=LOCAL_PORT, help=f"port to bind (default: {LOCAL_PORT})")
    args = parser.parse_args(argv)
    with UdpEchoServer(args.host, args.port) as server:
        try:
            server.serve_forever()
        except KeyboardInterrupt:
            pass
    return 0


if __name__ == "__main__":
    sys.exit(main())