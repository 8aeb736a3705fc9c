"""
snowflake_sdk test configuration.

Tests never touch time.time(): time is controlled by injecting a Clock.
Override settings by exporting SNOWFLAKE_* variables before running pytest.
"""
from __future__ import annotations

import os
from datetime import datetime, timezone

import pytest

# ── Pin settings for all tests ─────────────────────────────────────────────
# These must be set before any snowflake_sdk modules read the config.

os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("SNOWFLAKE_LOG_LEVEL", "WARNING")
os.environ.setdefault("SNOWFLAKE_ERROR_BACKEND", "none")

from snowflake_sdk.tier1_runtime.clock import Clock, from_millis  # noqa: E402


NOON_MS = 1749988800000  # 2025-06-15T12:00:00Z


class ManualClock(Clock):
    """Clock frozen at `ms` until the test moves it."""

    def __init__(self, ms: int) -> None:
        super().__init__(now_fn=lambda: from_millis(self.ms))
        self.ms = ms


# ── Fixtures ───────────────────────────────────────────────────────────────

@pytest.fixture(autouse=True)
def reset_module_singletons():
    """
    Reset cached config, generator and global clock between tests.
    This ensures each test gets fresh state with no bleed.
    """
    from snowflake_sdk.tier0_core.config import _reset_config
    from snowflake_sdk.tier1_runtime.clock import get_clock, set_clock
    from snowflake_sdk.tier1_runtime.generator import _reset_generator

    orig_clock = get_clock()
    _reset_config()
    _reset_generator()

    yield

    set_clock(orig_clock)
    _reset_config()
    _reset_generator()


@pytest.fixture
def manual_clock():
    """Return a ManualClock at NOON_MS."""
    return ManualClock(NOON_MS)


@pytest.fixture
def noon():
    return datetime(2025, 6, 15, 12, 0, 0, tzinfo=timezone.utc)
