import socket

import pytest

from louisnet.channel import Channel
from louisnet.event_loop import EventLoop


@pytest.fixture
def loop():
    event_loop = EventLoop()
    yield event_loop
    event_loop.close()


@pytest.fixture
def channel(loop):
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    sock.setblocking(False)
    ch = Channel(loop, sock.fileno())
    yield ch
    if ch.index != Channel.NEW:
        ch.remove()
    sock.close()


def test_constructor_and_basic_properties(loop, channel):
    assert channel.index == Channel.NEW
    assert channel.owner_loop is loop
    assert channel.is_none_event()
    assert not channel.is_reading()
    assert not channel.is_writing()


def test_enable_disable_events_and_state_management(channel):
    assert channel.index == Channel.NEW

    channel.enable_read()
    assert channel.is_reading()
    assert not channel.is_writing()
    assert not channel.is_none_event()
    assert channel.index == Channel.ADDED

    channel.enable_write()
    assert channel.is_reading()
    assert channel.is_writing()
    assert not channel.is_none_event()
    assert channel.index == Channel.ADDED

    channel.disable_read()
    assert not channel.is_reading()
    assert channel.is_writing()
    assert not channel.is_none_event()
    assert channel.index == Channel.ADDED

    channel.disable_write()
    assert not channel.is_reading()
    assert not channel.is_writing()
    assert channel.is_none_event()
    assert channel.index == Channel.DELETED

    channel.enable_read()
    channel.enable_write()
    assert channel.is_reading()
    assert channel.is_writing()
    channel.disable_all()
    assert not channel.is_reading()
    assert not channel.is_writing()
    assert channel.is_none_event()
    assert channel.index == Channel.DELETED

    channel.remove()
    assert channel.index == Channel.NEW


@pytest.mark.parametrize(
    "revents, expected",
    [
        (Channel.READ_EVENT, {"read"}),
        (Channel.WRITE_EVENT, {"write"}),
        (Channel.CLOSE_EVENT, {"close"}),
        (Channel.ERROR_EVENT, {"error"}),
    ],
)
def test_set_callbacks_and_handle_events(channel, revents, expected):
    called = set()
    channel.set_read_callback(lambda: called.add("read"))
    channel.set_write_callback(lambda: called.add("write"))
    channel.set_close_callback(lambda: called.add("close"))
    channel.set_error_callback(lambda: called.add("error"))

    channel.revents = revents
    channel.handle_event()
    assert called == expected


def test_combined_events_call_every_handler_in_order(channel):
    order = []
    channel.set_read_callback(lambda: order.append("read"))
    channel.set_write_callback(lambda: order.append("write"))
    channel.set_close_callback(lambda: order.append("close"))
    channel.set_error_callback(lambda: order.append("error"))

    channel.revents = (
        Channel.READ_EVENT | Channel.WRITE_EVENT | Channel.CLOSE_EVENT | Channel.ERROR_EVENT
    )
    channel.handle_event()
    assert order == ["read", "write", "close", "error"]


def test_remove_detaches_channel_with_events(loop, channel):
    channel.enable_read()
    channel.enable_write()
    channel.remove()
    assert channel.index == Channel.NEW
    assert channel.is_none_event()