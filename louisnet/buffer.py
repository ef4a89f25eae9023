"""Growable byte buffer with a cheap prepend area, used for socket I/O."""

from __future__ import annotations

import os

_ENCODING = "utf-8"
_ERRORS = "surrogateescape"


class Buffer:
    """A byte buffer split into prepend, readable and writable regions.

    Layout::

        [prependable][readable][writable]
        0      reader_index  writer_index   len(buffer)
    """

    CHEAP_PREPEND = 8
    INITIAL_SIZE = 1024
    _EXTRA_BUF_SIZE = 65536

    def __init__(self, initial_size: int = INITIAL_SIZE) -> None:
        if initial_size < 0:
            raise ValueError("initial_size must not be negative")
        self._buffer = bytearray(self.CHEAP_PREPEND + initial_size)
        self._reader = self.CHEAP_PREPEND
        self._writer = self.CHEAP_PREPEND

    def __len__(self) -> int:
        return self.readable_bytes()

    def __repr__(self) -> str:
        return (
            f"Buffer(readable={self.readable_bytes()}, "
            f"writable={self.writable_bytes()}, "
            f"prependable={self.prependable_bytes()})"
        )

    def readable_bytes(self) -> int:
        """Number of bytes waiting to be read."""
        return self._writer - self._reader

    def writable_bytes(self) -> int:
        """Number of bytes that can be written without growing."""
        return len(self._buffer) - self._writer

    def prependable_bytes(self) -> int:
        """Number of bytes in front of the readable region."""
        return self._reader

    def peek(self) -> bytes:
        """Return the readable bytes without consuming them."""
        return bytes(self._buffer[self._reader:self._writer])

    def retrieve(self, length: int) -> None:
        """Consume ``length`` readable bytes."""
        if length < 0 or length > self.readable_bytes():
            raise ValueError(
                f"cannot retrieve {length} bytes, only {self.readable_bytes()} readable"
            )
        if length < self.readable_bytes():
            self._reader += length
        else:
            self.retrieve_all()

    def retrieve_all(self) -> None:
        """Consume every readable byte and reset both indices."""
        self._reader = self._writer = self.CHEAP_PREPEND

    def retrieve_as_bytes(self, length: int) -> bytes:
        """Consume ``length`` bytes and return them."""
        if length < 0 or length > self.readable_bytes():
            raise ValueError(
                f"cannot retrieve {length} bytes, only {self.readable_bytes()} readable"
            )
        result = bytes(self._buffer[self._reader:self._reader + length])
        self.retrieve(length)
        return result

    def retrieve_all_as_bytes(self) -> bytes:
        """Consume and return every readable byte."""
        return self.retrieve_as_bytes(self.readable_bytes())

    def retrieve_as_string(self, length: int) -> str:
        """Consume ``length`` bytes and return them decoded as text."""
        return self.retrieve_as_bytes(length).decode(_ENCODING, _ERRORS)

    def retrieve_all_as_string(self) -> str:
        """Consume every readable byte and return it decoded as text."""
        return self.retrieve_as_string(self.readable_bytes())

    def ensure_writable_bytes(self, length: int) -> None:
        """Make sure ``length`` bytes can be written, compacting or growing."""
        if self.writable_bytes() < length:
            self._make_space(length)

    def has_written(self, length: int) -> None:
        """Advance the write index after writing ``length`` bytes directly."""
        if length < 0 or length > self.writable_bytes():
            raise ValueError(
                f"cannot mark {length} bytes written, only {self.writable_bytes()} writable"
            )
        self._writer += length

    def append(self, data: bytes | bytearray | memoryview | str) -> None:
        """Append data to the end of the readable region."""
        if isinstance(data, str):
            data = data.encode(_ENCODING, _ERRORS)
        length = len(data)
        self.ensure_writable_bytes(length)
        self._buffer[self._writer:self._writer + length] = data
        self.has_written(length)

    def read_fd(self, fd: int) -> int:
        """Read from ``fd`` into the buffer; return the byte count.

        A 64 KiB scratch area takes whatever does not fit into the writable
        region, so a single call can read more than the buffer currently holds.
        Raises ``OSError`` on failure.
        """
        extrabuf = bytearray(self._EXTRA_BUF_SIZE)
        writable = self.writable_bytes()
        view = memoryview(self._buffer)[self._writer:]
        try:
            buffers = [view, extrabuf] if writable < len(extrabuf) else [view]
            n = os.readv(fd, buffers)
        finally:
            view.release()

        if n <= writable:
            self._writer += n
        else:
            self._writer = len(self._buffer)
            self.append(memoryview(extrabuf)[:n - writable])
        return n

    def write_fd(self, fd: int) -> int:
        """Write readable bytes to ``fd``; return the byte count.

        Raises ``OSError`` on failure.
        """
        readable = self.readable_bytes()
        view = memoryview(self._buffer)[self._reader:self._writer]
        try:
            n = os.write(fd, view)
        finally:
            view.release()

        if n <= readable:
            self._reader += n
        else:
            self.retrieve_all()
        return n

    def _make_space(self, length: int) -> None:
        if self.writable_bytes() + self.prependable_bytes() < length + self.CHEAP_PREPEND:
            self._buffer.extend(bytes(self._writer + length - len(self._buffer)))
        else:
            readable = self.readable_bytes()
            start = self.CHEAP_PREPEND
            self._buffer[start:start + readable] = self._buffer[self._reader:self._writer]
            self._reader = start
            self._writer = start + readable