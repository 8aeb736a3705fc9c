"""
snowflake_sdk.tier1_runtime.retry
──────────────────────────────────
Retry policy for the mint loop. Backed by Tenacity.

Only SequenceExhausted is retried: the loop sleeps about one clock tick and
tries again, by which time the millisecond has rolled over and the resolver
restarts at 0. Every other error (clock regression included) propagates on
the first attempt.

Usage:
    for attempt in exhaustion_policy():
        with attempt:
            return mint_once()
"""
from __future__ import annotations

from collections.abc import Callable
from typing import Type

from tenacity import (
    RetryCallState,
    Retrying,
    retry_if_exception_type,
    stop_never,
    wait_fixed,
)

from snowflake_sdk.tier0_core.errors import SequenceExhausted

# One millisecond tick
DEFAULT_TICK_SECONDS = 0.001


def exhaustion_policy(
    tick: float = DEFAULT_TICK_SECONDS,
    on: tuple[Type[Exception], ...] = (SequenceExhausted,),
    before_sleep: Callable[[RetryCallState], None] | None = None,
) -> Retrying:
    """
    Build a Retrying iterator for one mint call.

    Args:
        tick:         Seconds to sleep between attempts.
        on:           Exception types that trigger another attempt.
        before_sleep: Hook called before each sleep (logging, metrics).
    """
    return Retrying(
        stop=stop_never,
        wait=wait_fixed(tick),
        retry=retry_if_exception_type(on),
        before_sleep=before_sleep,
        reraise=True,
    )


__all__ = ["exhaustion_policy", "DEFAULT_TICK_SECONDS"]
