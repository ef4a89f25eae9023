"""I/O multiplexer that maps ready descriptors back to their channels."""

from __future__ import annotations

import logging
import select
from typing import TYPE_CHECKING

from louisnet.channel import Channel

if TYPE_CHECKING:
    from louisnet.event_loop import EventLoop

_log = logging.getLogger(__name__)


class Poller:
    """Keeps the fd-to-channel map and the kernel's interest set in step."""

    def __init__(self, loop: EventLoop) -> None:
        self._owner_loop = loop
        self._poll = select.poll()
        self._channels: dict[int, Channel] = {}

    @property
    def owner_loop(self) -> EventLoop:
        return self._owner_loop

    def poll(self, timeout_ms: int) -> list[Channel]:
        """Wait up to ``timeout_ms`` and return the channels with fired events."""
        try:
            ready = self._poll.poll(timeout_ms)
        except OSError as exc:
            _log.error("poll failed: %s", exc)
            return []

        if not ready:
            _log.debug("poll timed out")
            return []

        _log.debug("poll returned %d events", len(ready))
        active = []
        for fd, revents in ready:
            channel = self._channels.get(fd)
            if channel is not None:
                channel.revents = revents
                active.append(channel)
        return active

    def update_channel(self, channel: Channel) -> None:
        """Register a new channel or apply a changed interest set."""
        fd = channel.fd
        _log.debug("update_channel fd=%d events=%#x", fd, channel.events)
        if channel.index == Channel.NEW:
            if fd in self._channels:
                raise ValueError(f"fd {fd} already has a channel in this poller")
            self._channels[fd] = channel
            self._register(fd, channel.events)
            channel.index = Channel.ADDED
            return

        if self._channels.get(fd) is not channel:
            raise ValueError(f"channel for fd {fd} does not belong to this poller")
        if channel.is_none_event():
            # Stays in the map so it can be re-enabled later.
            self._unregister(fd)
            channel.index = Channel.DELETED
        else:
            self._register(fd, channel.events)
            channel.index = Channel.ADDED

    def remove_channel(self, channel: Channel) -> None:
        """Forget a channel completely."""
        fd = channel.fd
        _log.debug("remove_channel fd=%d", fd)
        if self._channels.get(fd) is not channel:
            raise ValueError(f"channel for fd {fd} does not belong to this poller")
        if not channel.is_none_event():
            channel.disable_all()
        if channel.index == Channel.ADDED:
            self._unregister(fd)
        del self._channels[fd]
        channel.index = Channel.NEW

    def has_channel(self, channel: Channel) -> bool:
        return self._channels.get(channel.fd) is channel

    def close(self) -> None:
        """Drop every channel still registered."""
        for fd, channel in list(self._channels.items()):
            if channel.index == Channel.ADDED:
                self._unregister(fd)
            channel.index = Channel.NEW
        self._channels.clear()

    def _register(self, fd: int, events: int) -> None:
        try:
            self._poll.register(fd, events)
        except (OSError, ValueError, TypeError) as exc:
            _log.error("failed to register fd %d: %s", fd, exc)

    def _unregister(self, fd: int) -> None:
        try:
            self._poll.unregister(fd)
        except (KeyError, OSError, ValueError) as exc:
            _log.error("failed to unregister fd %d: %s", fd, exc)