"""Time source for event timestamps and queue TTL checks."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Protocol


def epoch_ms(moment: datetime) -> int:
    return int(moment.timestamp() * 1000)


class IClock(Protocol):
    def now(self) -> datetime:
        """Current UTC time, timezone-aware."""
        ...

    def now_ms(self) -> int: ...


class WallClock:
    def now(self) -> datetime:
        return datetime.now(timezone.utc)

    def now_ms(self) -> int:
        return epoch_ms(self.now())


class SimClock:
    """Manually driven clock for tests; moves only through ``advance_ms``."""

    def __init__(self, start: datetime | None = None) -> None:
        self._now = start or datetime(2024, 1, 1, tzinfo=timezone.utc)

    def now(self) -> datetime:
        return self._now

    def now_ms(self) -> int:
        return epoch_ms(self._now)

    def advance_ms(self, ms: int) -> None:
        if ms < 0:
            raise ValueError(f"Cannot advance by a negative interval: {ms}ms")
        self._now += timedelta(milliseconds=ms)
