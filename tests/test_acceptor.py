import socket

import pytest

from louisnet.acceptor import Acceptor
from louisnet.channel import Channel
from louisnet.event_loop import EventLoop
from louisnet.inet_address import InetAddress


@pytest.fixture
def loop():
    with EventLoop() as lp:
        yield lp


@pytest.fixture
def acceptor(loop):
    with Acceptor(loop, InetAddress(0, loopback_only=True)) as acc:
        yield acc


def test_listen_sets_flag_and_binds(acceptor):
    assert not acceptor.listening
    acceptor.listen()
    assert acceptor.listening
    assert acceptor.local_address.to_ip() == "127.0.0.1"
    assert acceptor.local_address.to_port() > 0


def test_listen_twice_raises(acceptor):
    acceptor.listen()
    with pytest.raises(RuntimeError):
        acceptor.listen()


def test_new_connection_callback_receives_socket_and_peer(loop, acceptor):
    acceptor.listen()
    accepted = []

    def on_new_connection(conn, peer):
        accepted.append((conn, peer))
        loop.quit()

    acceptor.set_new_connection_callback(on_new_connection)
    client = socket.create_connection(acceptor.local_address.sockaddr())
    try:
        loop.loop()
        assert len(accepted) == 1
        conn, peer = accepted[0]
        try:
            assert peer.to_ip() == "127.0.0.1"
            assert peer.to_port() == client.getsockname()[1]
            assert conn.getblocking() is False
            client.sendall(b"ping")
            conn.setblocking(True)
            assert conn.recv(4) == b"ping"
        finally:
            conn.close()
    finally:
        client.close()


def test_bind_conflict_raises(loop, acceptor):
    acceptor.listen()
    taken = InetAddress.from_ip_port("127.0.0.1", acceptor.local_address.to_port())
    with Acceptor(loop, taken) as other:
        with pytest.raises(OSError):
            other.listen()
        assert not other.listening


def test_close_releases_channel_and_socket(loop):
    acc = Acceptor(loop, InetAddress(0, loopback_only=True))
    acc.listen()
    port = acc.local_address.to_port()
    acc.close()
    assert not acc.listening
    acc.close()
    with pytest.raises(OSError):
        socket.create_connection(("127.0.0.1", port), timeout=1).close()


def test_channel_removed_from_loop_after_close(loop):
    acc = Acceptor(loop, InetAddress(0, loopback_only=True))
    acc.listen()
    fd = acc.local_address and acc._sock.fileno()
    acc.close()
    probe = Channel(loop, fd)
    loop.update_channel(probe)
    assert probe.index == Channel.ADDED
    loop.remove_channel(probe)