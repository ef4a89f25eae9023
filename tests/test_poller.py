import socket

import pytest

from louisnet.channel import Channel
from louisnet.poller import Poller


class _Loop:
    def __init__(self):
        self.poller = Poller(self)

    def update_channel(self, channel):
        self.poller.update_channel(channel)

    def remove_channel(self, channel):
        self.poller.remove_channel(channel)


@pytest.fixture
def loop():
    lp = _Loop()
    yield lp
    lp.poller.close()


@pytest.fixture
def pair():
    a, b = socket.socketpair()
    a.setblocking(False)
    b.setblocking(False)
    yield a, b
    a.close()
    b.close()


def test_owner_loop():
    owner = object()
    poller = Poller(owner)
    try:
        assert poller.owner_loop is owner
    finally:
        poller.close()


def test_readable_channel_is_reported(loop, pair):
    a, b = pair
    ch = Channel(loop, a.fileno())
    ch.enable_read()
    b.send(b"x")
    active = loop.poller.poll(1000)
    assert active == [ch]
    assert ch.revents & Channel.READ_EVENT


def test_writable_channel_is_reported(loop, pair):
    a, _ = pair
    ch = Channel(loop, a.fileno())
    ch.enable_write()
    active = loop.poller.poll(1000)
    assert active == [ch]
    assert ch.revents & Channel.WRITE_EVENT
    assert not ch.revents & Channel.READ_EVENT


def test_idle_channel_times_out(loop, pair):
    a, _ = pair
    ch = Channel(loop, a.fileno())
    ch.enable_read()
    assert loop.poller.poll(0) == []


def test_disabled_channel_stays_known_but_silent(loop, pair):
    a, b = pair
    ch = Channel(loop, a.fileno())
    ch.enable_read()
    ch.disable_all()
    b.send(b"x")
    assert loop.poller.poll(0) == []
    assert loop.poller.has_channel(ch)
    assert ch.index == Channel.DELETED


def test_reenabled_channel_is_reported_again(loop, pair):
    a, b = pair
    ch = Channel(loop, a.fileno())
    ch.enable_read()
    ch.disable_all()
    ch.enable_read()
    b.send(b"x")
    assert loop.poller.poll(1000) == [ch]
    assert ch.index == Channel.ADDED


def test_remove_channel(loop, pair):
    a, b = pair
    ch = Channel(loop, a.fileno())
    ch.enable_read()
    loop.poller.remove_channel(ch)
    b.send(b"x")
    assert not loop.poller.has_channel(ch)
    assert ch.index == Channel.NEW
    assert ch.is_none_event()
    assert loop.poller.poll(0) == []


def test_second_channel_on_same_fd_rejected(loop, pair):
    a, _ = pair
    first = Channel(loop, a.fileno())
    first.enable_read()
    second = Channel(loop, a.fileno())
    with pytest.raises(ValueError):
        second.enable_read()


def test_remove_unknown_channel_rejected(loop, pair):
    a, _ = pair
    ch = Channel(loop, a.fileno())
    with pytest.raises(ValueError):
        loop.poller.remove_channel(ch)


def test_close_forgets_all_channels(loop, pair):
    a, b = pair
    ch_a = Channel(loop, a.fileno())
    ch_b = Channel(loop, b.fileno())
    ch_a.enable_read()
    ch_b.enable_write()
    loop.poller.close()
    assert not loop.poller.has_channel(ch_a)
    assert not loop.poller.has_channel(ch_b)
    assert ch_a.index == Channel.NEW
    assert ch_b.index == Channel.NEW
    assert loop.poller.poll(0) == []