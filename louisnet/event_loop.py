"""Single-threaded reactor loop."""

from __future__ import annotations

import logging

from louisnet.channel import Channel
from louisnet.poller import Poller

_log = logging.getLogger(__name__)


class EventLoop:
    """Polls for I/O and dispatches fired events until asked to quit."""

    POLL_TIMEOUT_MS = 4000

    def __init__(self) -> None:
        self._poller = Poller(self)
        self._looping = False
        self._quit = False

    def __enter__(self) -> EventLoop:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    @property
    def looping(self) -> bool:
        return self._looping

    def loop(self) -> None:
        """Run until :meth:`quit` is called."""
        if self._looping:
            raise RuntimeError("event loop is already running")
        self._looping = True
        self._quit = False
        _log.debug("loop started")
        try:
            while not self._quit:
                for channel in self._poller.poll(self.POLL_TIMEOUT_MS):
                    _log.debug("handling event for fd %d", channel.fd)
                    channel.handle_event()
        finally:
            self._looping = False
            _log.debug("loop exited")

    def quit(self) -> None:
        """Stop the loop after the current iteration."""
        self._quit = True

    def update_channel(self, channel: Channel) -> None:
        self._poller.update_channel(channel)

    def remove_channel(self, channel: Channel) -> None:
        self._poller.remove_channel(channel)

    def close(self) -> None:
        """Release the poller and every channel still registered."""
        self._poller.close()