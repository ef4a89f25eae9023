"""One established TCP connection driven by an event loop."""

from __future__ import annotations

import enum
import logging
import os
import socket
from typing import TYPE_CHECKING, Callable, Optional

from louisnet.buffer import Buffer
from louisnet.channel import Channel
from louisnet.inet_address import InetAddress

if TYPE_CHECKING:
    from louisnet.event_loop import EventLoop

_log = logging.getLogger(__name__)

ConnectionCallback = Callable[["TcpConnection"], None]
MessageCallback = Callable[["TcpConnection", Buffer], None]
WriteCompleteCallback = Callable[["TcpConnection"], None]
CloseCallback = Callable[["TcpConnection"], None]


class ConnectionState(enum.Enum):
    DISCONNECTED = enum.auto()
    CONNECTING = enum.auto()
    CONNECTED = enum.auto()
    DISCONNECTING = enum.auto()


class TcpConnection:
    """A connected socket with input and output buffers and user callbacks."""

    def __init__(
        self,
        loop: EventLoop,
        sock: socket.socket,
        local_addr: InetAddress,
        peer_addr: InetAddress,
    ) -> None:
        self._loop = loop
        self._sock = sock
        self._fd = sock.fileno()
        self._state = ConnectionState.CONNECTING
        self._error = 0
        self._channel = Channel(loop, self._fd)
        self._local_addr = local_addr
        self._peer_addr = peer_addr
        self._name = f"conn-{self._fd}-{peer_addr.to_ip_port()}"

        self._connection_callback: Optional[ConnectionCallback] = None
        self._message_callback: Optional[MessageCallback] = None
        self._write_complete_callback: Optional[WriteCompleteCallback] = None
        self._close_callback: Optional[CloseCallback] = None

        self._input = Buffer()
        self._output = Buffer()

        self._channel.set_read_callback(self._handle_read)
        self._channel.set_write_callback(self._handle_write)
        self._channel.set_close_callback(self._handle_close)
        self._channel.set_error_callback(self._handle_error)

        self.set_tcp_no_delay(True)
        _log.debug("created connection %s", self._name)

    def __repr__(self) -> str:
        return f"TcpConnection({self._name!r}, state={self._state.name})"

    @property
    def loop(self) -> EventLoop:
        return self._loop

    @property
    def fd(self) -> int:
        return self._fd

    @property
    def socket(self) -> socket.socket:
        return self._sock

    @property
    def name(self) -> str:
        return self._name

    @property
    def local_address(self) -> InetAddress:
        return self._local_addr

    @property
    def peer_address(self) -> InetAddress:
        return self._peer_addr

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def error(self) -> int:
        """The last socket error seen on this connection, 0 if none."""
        return self._error

    def connected(self) -> bool:
        return self._state is ConnectionState.CONNECTED

    def disconnected(self) -> bool:
        return self._state is ConnectionState.DISCONNECTED

    def set_connection_callback(self, callback: Optional[ConnectionCallback]) -> None:
        """Called when the connection comes up and again when it goes down."""
        self._connection_callback = callback

    def set_message_callback(self, callback: Optional[MessageCallback]) -> None:
        self._message_callback = callback

    def set_write_complete_callback(self, callback: Optional[WriteCompleteCallback]) -> None:
        self._write_complete_callback = callback

    def set_close_callback(self, callback: Optional[CloseCallback]) -> None:
        self._close_callback = callback

    def send(self, data: bytes | bytearray | memoryview | str) -> None:
        """Send data; whatever cannot be written now is buffered."""
        if isinstance(data, str):
            data = data.encode("utf-8")
        if self._state is ConnectionState.CONNECTED:
            self._send_in_loop(bytes(data))

    def shutdown(self) -> None:
        """Close the write side once pending output has been flushed."""
        if self._state is ConnectionState.CONNECTED:
            self._state = ConnectionState.DISCONNECTING
            self._shutdown_in_loop()

    def force_close(self) -> None:
        """Close the connection now, running the close callbacks."""
        if self._state in (ConnectionState.CONNECTED, ConnectionState.DISCONNECTING):
            self._state = ConnectionState.DISCONNECTING
            self._handle_close()

    def set_tcp_no_delay(self, on: bool) -> None:
        try:
            self._sock.setsockopt(socket.IPPROTO_TCP, socket.TCP_NODELAY, 1 if on else 0)
        except OSError as exc:
            _log.error("setting TCP_NODELAY on %s failed: %s", self._name, exc)

    def connection_established(self) -> None:
        """Mark the connection as up and start reading from it."""
        if self._state is not ConnectionState.CONNECTING:
            raise RuntimeError(f"connection {self._name} is not connecting")
        self._state = ConnectionState.CONNECTED
        self._channel.enable_read()
        if self._connection_callback is not None:
            self._connection_callback(self)
        _log.debug("connection %s established", self._name)

    def connection_destroyed(self) -> None:
        """Detach from the event loop and close the socket."""
        self._state = ConnectionState.DISCONNECTED
        if self._channel.index != Channel.NEW:
            try:
                self._channel.disable_all()
                self._channel.remove()
            except ValueError as exc:
                _log.error("destroying connection %s: %s", self._name, exc)
        self._sock.close()
        _log.debug("connection %s destroyed", self._name)

    def _handle_read(self) -> None:
        try:
            n = self._input.read_fd(self._fd)
        except (BlockingIOError, InterruptedError):
            return
        except OSError as exc:
            _log.error("read on %s failed: %s", self._name, exc)
            self._handle_error()
            return

        if n > 0:
            if self._message_callback is not None:
                self._message_callback(self, self._input)
        else:
            self._handle_close()

    def _handle_write(self) -> None:
        if not self._channel.is_writing():
            return
        try:
            n = self._output.write_fd(self._fd)
        except (BlockingIOError, InterruptedError):
            return
        except OSError as exc:
            _log.error("write on %s failed: %s", self._name, exc)
            self._handle_error()
            return

        if n <= 0:
            self._handle_error()
            return
        if self._output.readable_bytes() == 0:
            self._channel.disable_write()
            if self._write_complete_callback is not None:
                self._write_complete_callback(self)
            if self._state is ConnectionState.DISCONNECTING:
                self._shutdown_in_loop()

    def _handle_close(self) -> None:
        if self._state not in (ConnectionState.CONNECTED, ConnectionState.DISCONNECTING):
            return
        _log.debug("connection %s closing", self._name)
        self._state = ConnectionState.DISCONNECTED
        if self._connection_callback is not None:
            self._connection_callback(self)
        if self._close_callback is not None:
            self._close_callback(self)

    def _handle_error(self) -> None:
        if self._state is ConnectionState.DISCONNECTED:
            return
        try:
            err = self._sock.getsockopt(socket.SOL_SOCKET, socket.SO_ERROR)
        except OSError as exc:
            err = exc.errno or 0
        self._error = err
        _log.error("connection %s error: %s (errno: %d)", self._name, os.strerror(err), err)
        self._handle_close()

    def _send_in_loop(self, data: bytes) -> None:
        if self._state is ConnectionState.DISCONNECTED:
            _log.debug("connection %s is disconnected, give up writing", self._name)
            return

        nwrote = 0
        remaining = len(data)
        fatal = False
        if not self._channel.is_writing() and self._output.readable_bytes() == 0:
            try:
                nwrote = self._sock.send(data)
            except (BrokenPipeError, ConnectionResetError) as exc:
                _log.error("send on %s failed: %s", self._name, exc)
                fatal = True
                self._handle_close()
            except (BlockingIOError, InterruptedError):
                pass
            except OSError as exc:
                _log.error("send on %s failed: %s", self._name, exc)
            else:
                remaining = len(data) - nwrote
                if remaining == 0 and self._write_complete_callback is not None:
                    self._write_complete_callback(self)

        if not fatal and remaining > 0:
            self._output.append(data[nwrote:])
            if not self._channel.is_writing():
                self._channel.enable_write()

    def _shutdown_in_loop(self) -> None:
        if not self._channel.is_writing():
            try:
                self._sock.shutdown(socket.SHUT_WR)
            except OSError as exc:
                _log.error("shutdown of %s failed: %s", self._name, exc)