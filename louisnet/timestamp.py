"""Wall-clock timestamps with microsecond resolution."""

from __future__ import annotations

import time
from dataclasses import dataclass


@dataclass(frozen=True, order=True)
class Timestamp:
    """A point in time, as microseconds since the Unix epoch."""

    micro_seconds_since_epoch: int = 0

    @classmethod
    def now(cls) -> Timestamp:
        """Return the current time."""
        return cls(time.time_ns() // 1000)

    def __str__(self) -> str:
        tm = time.localtime(self.micro_seconds_since_epoch // 1_000_000)
        return (
            f"{tm.tm_year:4d}/{tm.tm_mon:02d}/{tm.tm_mday:02d} "
            f"{tm.tm_hour:02d}:{tm.tm_min:02d}:{tm.tm_sec:02d}"
        )