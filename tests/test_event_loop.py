import socket

import pytest

from louisnet.channel import Channel
from louisnet.event_loop import EventLoop


@pytest.fixture
def loop():
    with EventLoop() as lp:
        yield lp


@pytest.fixture
def pair():
    a, b = socket.socketpair()
    a.setblocking(False)
    b.setblocking(False)
    yield a, b
    a.close()
    b.close()


def test_read_callback_runs_and_quit_stops_loop(loop, pair):
    a, b = pair
    received = []
    ch = Channel(loop, a.fileno())

    def on_read():
        received.append(a.recv(100))
        loop.quit()

    ch.set_read_callback(on_read)
    ch.enable_read()
    b.send(b"hello")
    loop.loop()
    assert received == [b"hello"]
    assert not loop.looping


def test_looping_flag_inside_callback(loop, pair):
    a, _ = pair
    seen = []
    ch = Channel(loop, a.fileno())

    def on_write():
        seen.append(loop.looping)
        loop.quit()

    ch.set_write_callback(on_write)
    ch.enable_write()
    loop.loop()
    assert seen == [True]
    assert loop.looping is False


def test_nested_loop_raises(loop, pair):
    a, _ = pair
    outcomes = []
    ch = Channel(loop, a.fileno())

    def on_write():
        try:
            loop.loop()
        except RuntimeError:
            outcomes.append(("raised", loop.looping))
        else:
            outcomes.append(("returned", loop.looping))
        loop.quit()

    ch.set_write_callback(on_write)
    ch.enable_write()
    loop.loop()
    assert outcomes == [("raised", True)]
    assert loop.looping is False


def test_loop_can_run_again_after_quit(loop, pair):
    a, _ = pair
    runs = []
    ch = Channel(loop, a.fileno())

    def on_write():
        runs.append(loop.looping)
        loop.quit()

    ch.set_write_callback(on_write)
    ch.enable_write()
    loop.loop()
    loop.loop()
    assert runs == [True, True]
    assert loop.looping is False


def test_update_and_remove_channel(loop, pair):
    a, _ = pair
    ch = Channel(loop, a.fileno())
    loop.update_channel(ch)
    assert ch.index == Channel.ADDED
    ch.enable_read()
    loop.remove_channel(ch)
    assert ch.index == Channel.NEW
    assert ch.is_none_event()


def test_close_resets_registered_channels(pair):
    a, _ = pair
    lp = EventLoop()
    ch = Channel(lp, a.fileno())
    ch.enable_read()
    lp.close()
    assert ch.index == Channel.NEW