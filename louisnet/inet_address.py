"""IPv4 socket address."""

from __future__ import annotations

import socket


def _check_port(port: int) -> int:
    if not 0 <= port <= 0xFFFF:
        raise ValueError(f"port out of range: {port}")
    return port


def _normalize_ip(ip: str) -> str:
    try:
        return socket.inet_ntop(socket.AF_INET, socket.inet_pton(socket.AF_INET, ip))
    except OSError as exc:
        raise ValueError(f"invalid IPv4 address: {ip!r}") from exc


class InetAddress:
    """An IPv4 address and port."""

    def __init__(self, port: int = 0, loopback_only: bool = False) -> None:
        self._ip = "127.0.0.1" if loopback_only else "0.0.0.0"
        self._port = _check_port(port)

    @classmethod
    def from_ip_port(cls, ip: str, port: int) -> InetAddress:
        """Build an address from a dotted-quad IP and a port."""
        addr = cls(port)
        addr._ip = _normalize_ip(ip)
        return addr

    @classmethod
    def from_sockaddr(cls, addr: tuple[str, int]) -> InetAddress:
        """Build an address from a ``(host, port)`` tuple as returned by sockets."""
        ip, port = addr[0], addr[1]
        return cls.from_ip_port(ip, port)

    def to_ip(self) -> str:
        return self._ip

    def to_port(self) -> int:
        return self._port

    def to_ip_port(self) -> str:
        return f"{self._ip}:{self._port}"

    def sockaddr(self) -> tuple[str, int]:
        """Return the ``(host, port)`` tuple used by the socket module."""
        return (self._ip, self._port)

    def set_sockaddr(self, addr: tuple[str, int]) -> None:
        ip, port = addr[0], addr[1]
        self._ip = _normalize_ip(ip)
        self._port = _check_port(port)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, InetAddress):
            return NotImplemented
        return self.sockaddr() == other.sockaddr()

    def __hash__(self) -> int:
        return hash(self.sockaddr())

    def __repr__(self) -> str:
        return f"InetAddress({self.to_ip_port()!r})"

    def __str__(self) -> str:
        return self.to_ip_port()