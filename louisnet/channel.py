"""A file descriptor together with the events it cares about and their handlers."""

from __future__ import annotations

import select
from typing import TYPE_CHECKING, Callable, Optional

if TYPE_CHECKING:
    from louisnet.event_loop import EventLoop

EventCallback = Callable[[], None]


class Channel:
    """Binds one file descriptor to an event loop.

    A channel never owns its descriptor; it only records which events are of
    interest, which events fired, and what to call for each of them.
    """

    NONE_EVENT = 0
    READ_EVENT = select.POLLIN | select.POLLPRI
    WRITE_EVENT = select.POLLOUT
    ERROR_EVENT = select.POLLERR
    CLOSE_EVENT = select.POLLHUP | getattr(select, "POLLRDHUP", 0)

    # Life-cycle states of a channel inside a poller.
    NEW = -1
    ADDED = 0
    DELETED = 1

    def __init__(self, loop: EventLoop, fd: int) -> None:
        self._loop = loop
        self._fd = fd
        self._events = self.NONE_EVENT
        self._revents = self.NONE_EVENT
        self._index = self.NEW
        self._read_callback: Optional[EventCallback] = None
        self._write_callback: Optional[EventCallback] = None
        self._close_callback: Optional[EventCallback] = None
        self._error_callback: Optional[EventCallback] = None

    def __repr__(self) -> str:
        return f"Channel(fd={self._fd}, events={self._events:#x}, index={self._index})"

    @property
    def fd(self) -> int:
        return self._fd

    @property
    def events(self) -> int:
        """Events this channel is interested in."""
        return self._events

    @property
    def revents(self) -> int:
        """Events that fired during the last poll."""
        return self._revents

    @revents.setter
    def revents(self, revents: int) -> None:
        self._revents = revents

    @property
    def index(self) -> int:
        """State of this channel inside its poller: NEW, ADDED or DELETED."""
        return self._index

    @index.setter
    def index(self, index: int) -> None:
        self._index = index

    @property
    def owner_loop(self) -> EventLoop:
        return self._loop

    def is_none_event(self) -> bool:
        return self._events == self.NONE_EVENT

    def is_reading(self) -> bool:
        return bool(self._events & self.READ_EVENT)

    def is_writing(self) -> bool:
        return bool(self._events & self.WRITE_EVENT)

    def set_read_callback(self, callback: Optional[EventCallback]) -> None:
        self._read_callback = callback

    def set_write_callback(self, callback: Optional[EventCallback]) -> None:
        self._write_callback = callback

    def set_close_callback(self, callback: Optional[EventCallback]) -> None:
        self._close_callback = callback

    def set_error_callback(self, callback: Optional[EventCallback]) -> None:
        self._error_callback = callback

    def enable_read(self) -> None:
        self._events |= self.READ_EVENT
        self._update()

    def disable_read(self) -> None:
        self._events &= ~self.READ_EVENT
        self._update()

    def enable_write(self) -> None:
        self._events |= self.WRITE_EVENT
        self._update()

    def disable_write(self) -> None:
        self._events &= ~self.WRITE_EVENT
        self._update()

    def disable_all(self) -> None:
        self._events = self.NONE_EVENT
        self._update()

    def handle_event(self) -> None:
        """Dispatch the fired events to their callbacks."""
        revents = self._revents
        if revents & self.READ_EVENT and self._read_callback:
            self._read_callback()
        if revents & self.WRITE_EVENT and self._write_callback:
            self._write_callback()
        if revents & self.CLOSE_EVENT and self._close_callback:
            self._close_callback()
        if revents & self.ERROR_EVENT and self._error_callback:
            self._error_callback()

    def remove(self) -> None:
        """Detach this channel from its event loop."""
        self._loop.remove_channel(self)

    def _update(self) -> None:
        self._loop.update_channel(self)