"""Listening socket that hands accepted connections to a callback."""

from __future__ import annotations

import logging
import socket
from typing import TYPE_CHECKING, Callable, Optional

from louisnet.channel import Channel
from louisnet.inet_address import InetAddress

if TYPE_CHECKING:
    from louisnet.event_loop import EventLoop

_log = logging.getLogger(__name__)

NewConnectionCallback = Callable[[socket.socket, InetAddress], None]


def _create_nonblocking_socket() -> socket.socket:
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    sock.setblocking(False)
    try:
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
    except OSError as exc:
        _log.warning("failed to set SO_REUSEADDR: %s", exc)
    return sock


class Acceptor:
    """Accepts new TCP connections on behalf of an event loop."""

    def __init__(self, loop: EventLoop, listen_addr: InetAddress) -> None:
        self._loop = loop
        self._listen_addr = listen_addr
        self._listening = False
        self._closed = False
        self._sock = _create_nonblocking_socket()
        self._channel = Channel(loop, self._sock.fileno())
        self._channel.set_read_callback(self._handle_read)
        self._new_connection_callback: Optional[NewConnectionCallback] = None
        _log.debug("acceptor created with fd %d", self._sock.fileno())

    def __enter__(self) -> Acceptor:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    @property
    def listening(self) -> bool:
        return self._listening

    @property
    def listen_addr(self) -> InetAddress:
        return self._listen_addr

    @property
    def local_address(self) -> InetAddress:
        """The address the socket is actually bound to."""
        return InetAddress.from_sockaddr(self._sock.getsockname())

    def set_new_connection_callback(self, callback: Optional[NewConnectionCallback]) -> None:
        """Set the callable given each accepted socket and its peer address."""
        self._new_connection_callback = callback

    def listen(self) -> None:
        """Bind, listen and start watching for incoming connections."""
        if self._listening:
            raise RuntimeError("acceptor is already listening")
        self._sock.bind(self._listen_addr.sockaddr())
        self._sock.listen(socket.SOMAXCONN)
        self._listening = True
        self._channel.enable_read()
        _log.info("listening on %s", self._listen_addr.to_ip_port())

    def close(self) -> None:
        """Stop watching the socket and close it."""
        if self._closed:
            return
        self._closed = True
        self._channel.disable_all()
        self._channel.remove()
        self._sock.close()
        self._listening = False

    def _handle_read(self) -> None:
        try:
            conn, peer = self._sock.accept()
        except BlockingIOError:
            _log.debug("no more connections")
            return
        except OSError as exc:
            _log.error("accept failed: %s", exc)
            return

        conn.setblocking(False)
        peer_addr = InetAddress.from_sockaddr(peer)
        _log.debug("accepted fd %d from %s", conn.fileno(), peer_addr.to_ip_port())
        if self._new_connection_callback is not None:
            self._new_connection_callback(conn, peer_addr)
        else:
            conn.close()