"""TCP server that accepts connections and tracks them by descriptor."""

from __future__ import annotations

import logging
import socket
import types
from typing import TYPE_CHECKING, Mapping, Optional

from louisnet.acceptor import Acceptor
from louisnet.buffer import Buffer
from louisnet.inet_address import InetAddress
from louisnet.tcp_connection import (
    ConnectionCallback,
    MessageCallback,
    TcpConnection,
    WriteCompleteCallback,
)

if TYPE_CHECKING:
    from louisnet.event_loop import EventLoop

_log = logging.getLogger(__name__)


class TcpServer:
    """Listens on an address and wires each new connection to user callbacks."""

    def __init__(self, loop: EventLoop, listen_addr: InetAddress) -> None:
        self._loop = loop
        self._listen_addr = listen_addr
        self._name = f"TcpServer@{listen_addr.to_ip_port()}"
        self._acceptor = Acceptor(loop, listen_addr)
        self._acceptor.set_new_connection_callback(self._on_new_connection)
        self._connections: dict[int, TcpConnection] = {}
        self._connection_callback: Optional[ConnectionCallback] = None
        self._message_callback: Optional[MessageCallback] = None
        self._write_complete_callback: Optional[WriteCompleteCallback] = None

    def __enter__(self) -> TcpServer:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    @property
    def name(self) -> str:
        return self._name

    @property
    def listen_addr(self) -> InetAddress:
        return self._listen_addr

    @property
    def local_address(self) -> InetAddress:
        """The address the listening socket is actually bound to."""
        return self._acceptor.local_address

    @property
    def connections(self) -> Mapping[int, TcpConnection]:
        """Live connections keyed by descriptor (read-only view)."""
        return types.MappingProxyType(self._connections)

    def start(self) -> None:
        """Start listening for new connections."""
        _log.info("starting to listen on %s", self._listen_addr.to_ip_port())
        self._acceptor.listen()

    def set_connection_callback(self, callback: Optional[ConnectionCallback]) -> None:
        self._connection_callback = callback

    def set_message_callback(self, callback: Optional[MessageCallback]) -> None:
        self._message_callback = callback

    def set_write_complete_callback(self, callback: Optional[WriteCompleteCallback]) -> None:
        self._write_complete_callback = callback

    def close(self) -> None:
        """Shut down every connection and stop listening."""
        for conn in list(self._connections.values()):
            conn.shutdown()
            conn.connection_destroyed()
        self._connections.clear()
        self._acceptor.close()

    def _on_new_connection(self, sock: socket.socket, peer_addr: InetAddress) -> None:
        fd = sock.fileno()
        _log.debug("new connection from %s fd=%d", peer_addr.to_ip_port(), fd)
        conn: Optional[TcpConnection] = None
        try:
            conn = TcpConnection(self._loop, sock, self._listen_addr, peer_addr)
            conn.set_connection_callback(self._on_connection)
            conn.set_message_callback(self._on_message)
            conn.set_write_complete_callback(self._on_write_complete)
            conn.set_close_callback(self._on_close)
            conn.connection_established()
            self._connections[fd] = conn
        except Exception:
            _log.exception("setting up connection from %s failed", peer_addr.to_ip_port())
            if conn is not None:
                conn.connection_destroyed()
            else:
                sock.close()

    def _on_connection(self, conn: TcpConnection) -> None:
        if self._connection_callback is None:
            return
        try:
            self._connection_callback(conn)
        except Exception:
            _log.exception("connection callback failed for %s", conn.name)

    def _on_message(self, conn: TcpConnection, buffer: Buffer) -> None:
        if self._message_callback is not None:
            self._message_callback(conn, buffer)
        else:
            buffer.retrieve_all()

    def _on_write_complete(self, conn: TcpConnection) -> None:
        if self._write_complete_callback is not None:
            self._write_complete_callback(conn)

    def _on_close(self, conn: TcpConnection) -> None:
        _log.debug("connection %s closed", conn.name)
        if self._connections.get(conn.fd) is conn:
            del self._connections[conn.fd]
        conn.connection_destroyed()