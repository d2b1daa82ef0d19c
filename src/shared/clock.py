"""Clocks used to stamp orders.

Order dates are always recorded in one fixed zone (the storefront's), never
in the caller's. Tests inject a FixedClock to get deterministic dates and ids.
"""

import time
from datetime import datetime
from typing import Protocol
from zoneinfo import ZoneInfo


class Clock(Protocol):
    def now(self) -> datetime: ...

    def now_ns(self) -> int: ...


class ZoneClock:
    """Wall clock pinned to a single IANA time zone."""

    def __init__(self, tz_name: str = "Asia/Jakarta") -> None:
        self.tz = ZoneInfo(tz_name)

    def now(self) -> datetime:
        return datetime.now(self.tz)

    def now_ns(self) -> int:
        return time.time_ns()


class FixedClock:
    """Clock frozen at a given instant; `now_ns` still ticks so ids stay unique."""

    def __init__(self, instant: datetime) -> None:
        if instant.tzinfo is None:
            raise ValueError("FixedClock needs a timezone-aware datetime")
        self.instant = instant
        self._ticks = 0

    def now(self) -> datetime:
        return self.instant

    def now_ns(self) -> int:
        self._ticks += 1
        return int(self.instant.timestamp()) * 1_000_000_000 + self._ticks


_current_clock: Clock | None = None


def get_clock() -> Clock:
    """Return the process clock, pinned to the configured storefront zone."""
    global _current_clock
    if _current_clock is None:
        from shared.settings import get_settings

        _current_clock = ZoneClock(get_settings().timezone)
    return _current_clock


def set_clock(clock: Clock) -> None:
    global _current_clock
    _current_clock = clock


def reset_clock() -> None:
    global _current_clock
    _current_clock = None
