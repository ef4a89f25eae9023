"""Echo server: sends every received byte straight back to its sender."""

from __future__ import annotations

import argparse
import sys
from typing import Optional, Sequence

from louisnet.buffer import Buffer
from louisnet.event_loop import EventLoop
from louisnet.inet_address import InetAddress
from louisnet.tcp_connection import TcpConnection
from louisnet.tcp_server import TcpServer

DEFAULT_PORT = 8888


class EchoServer:
    """A TCP server whose message handler echoes data back unchanged."""

    def __init__(self, loop: EventLoop, listen_addr: InetAddress) -> None:
        self._server = TcpServer(loop, listen_addr)
        self._server.set_message_callback(self._on_message)
        self._server.set_connection_callback(self._on_connection)

    def __enter__(self) -> EchoServer:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    @property
    def tcp_server(self) -> TcpServer:
        return self._server

    @property
    def listen_address(self) -> InetAddress:
        """The address the server is actually bound to."""
        return self._server.local_address

    def start(self) -> None:
        """Start listening; a failure is reported, not raised."""
        try:
            print(
                f"[EchoServer] starting EchoServer on {self._server.listen_addr.to_ip_port()}",
                flush=True,
            )
            self._server.start()
        except Exception as exc:
            print(f"[EchoServer] start error: {exc}", file=sys.stderr, flush=True)

    def close(self) -> None:
        """Close every connection and the listening socket."""
        self._server.close()

    def _on_connection(self, conn: TcpConnection) -> None:
        status = "established" if conn.connected() else "disconnected"
        print(f"[EchoServer] connection {conn.name} {status}", flush=True)

    def _on_message(self, conn: TcpConnection, buffer: Buffer) -> None:
        try:
            message = buffer.retrieve_all_as_bytes()
            text = message.decode("utf-8", "replace")
            print(
                f"[EchoServer] connection {conn.name} received {len(message)} bytes: {text}",
                flush=True,
            )
            conn.send(message)
        except Exception as exc:
            print(f"[EchoServer] message error: {exc}", file=sys.stderr, flush=True)


def _port(value: str) -> int:
    try:
        port = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not a port number: {value!r}") from None
    if not 0 <= port <= 0xFFFF:
        raise argparse.ArgumentTypeError(f"port out of range: {port}")
    return port


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run an echo server until interrupted."""
    parser = argparse.ArgumentParser(prog="louisnet-echo", description="TCP echo server")
    parser.add_argument(
        "--port", type=_port, default=DEFAULT_PORT, help=f"port to listen on (default {DEFAULT_PORT})"
    )
    args = parser.parse_args(argv)

    with EventLoop() as loop:
        server = EchoServer(loop, InetAddress(args.port))
        try:
            server.start()
            print(f"EchoServer started on port {args.port}", flush=True)
            loop.loop()
        except KeyboardInterrupt:
            pass
        finally:
            server.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())