"""
snowflake_sdk.tier1_runtime.clock
──────────────────────────────────
Mockable time source. Generators read time through a Clock instead of
calling time.time() directly, which makes clock regressions and exhausted
milliseconds reproducible in tests.
"""
from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Callable


# ── Clock implementation ───────────────────────────────────────────────────

class Clock:
    """Mockable clock. Pass now_fn to control time in tests."""

    def __init__(self, now_fn: Callable[[], datetime] | None = None) -> None:
        self._now_fn = now_fn or (lambda: datetime.now(tz=timezone.utc))

    def now(self) -> datetime:
        """Return the current UTC datetime."""
        return self._now_fn()

    def timestamp_ms(self) -> int:
        """Return the current Unix timestamp in whole milliseconds."""
        return to_millis(self.now())

    def start_of_day_ms(self) -> int:
        """Return local midnight of the current day, in Unix milliseconds."""
        return start_of_day_ms(self.timestamp_ms())

    def freeze(self, dt: datetime) -> "Clock":
        """Return a new Clock frozen at the given datetime."""
        return Clock(now_fn=lambda: dt)

    def advance(self, seconds: float) -> "Clock":
        """Return a new Clock advanced by *seconds* from current time."""
        base = self.now()
        return Clock(now_fn=lambda: base + timedelta(seconds=seconds))


_UNIX_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
_ONE_MS = timedelta(milliseconds=1)


def to_millis(dt: datetime) -> int:
    """Convert a datetime to whole Unix milliseconds. Naive values are local time."""
    if dt.tzinfo is None:
        dt = dt.astimezone()
    return (dt - _UNIX_EPOCH) // _ONE_MS


def from_millis(ms: int) -> datetime:
    """Convert Unix milliseconds to an aware UTC datetime."""
    return _UNIX_EPOCH + timedelta(milliseconds=ms)


def start_of_day_ms(ms: int) -> int:
    """Local midnight of the day containing `ms`, in Unix milliseconds."""
    local = from_millis(ms).astimezone()
    return to_millis(local.replace(hour=0, minute=0, second=0, microsecond=0))


# ── Module-level singleton ─────────────────────────────────────────────────

_clock = Clock()


def get_clock() -> Clock:
    """Return the global clock instance."""
    return _clock


def set_clock(clock: Clock) -> None:
    """Replace the global clock (use in tests)."""
    global _clock
    _clock = clock


def timestamp_ms() -> int:
    """Return the current Unix timestamp in milliseconds."""
    return _clock.timestamp_ms()


__all__ = ["Clock", "to_millis", "from_millis", "start_of_day_ms", "get_clock", "set_clock", "timestamp_ms"]
