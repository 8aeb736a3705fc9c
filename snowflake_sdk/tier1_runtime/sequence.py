"""
snowflake_sdk.tier1_runtime.sequence
─────────────────────────────────────
Sequence resolvers: given the current millisecond, return the sequence
number for the next ID. A resolver owns its own state and is not
synchronized; give every generator its own instance.

Any object with a `next_sequence(current_ms) -> int` method satisfies the
protocol. Plain functions are adapted with FunctionSequenceResolver.
"""
from __future__ import annotations

from typing import Callable, Protocol, runtime_checkable

from snowflake_sdk.tier0_core.errors import ClockRegressionError


# ── Resolver protocol ─────────────────────────────────────────────────────────

@runtime_checkable
class SequenceResolver(Protocol):
    def next_sequence(self, current_ms: int) -> int: ...


# ── Default resolver ──────────────────────────────────────────────────────────

class RandomSequenceResolver:
    """
    Counts up within a millisecond and restarts at 0 on the next one.

    The counter is not clamped: values past the 12-bit range tell the
    generator the millisecond is exhausted. A timestamp earlier than the
    last one seen raises ClockRegressionError.
    """

    def __init__(self) -> None:
        self.last_timestamp: int | None = None
        self.sequence = 0

    def next_sequence(self, current_ms: int) -> int:
        if self.last_timestamp is not None and current_ms < self.last_timestamp:
            raise ClockRegressionError(current_ms, self.last_timestamp)

        if current_ms == self.last_timestamp:
            self.sequence += 1
            return self.sequence

        self.sequence = 0
        self.last_timestamp = current_ms
        return 0


# ── Function adapter ──────────────────────────────────────────────────────────

class FunctionSequenceResolver:
    """Wrap a plain `fn(current_ms) -> int` as a SequenceResolver."""

    def __init__(self, fn: Callable[[int], int]) -> None:
        self.fn = fn

    def next_sequence(self, current_ms: int) -> int:
        return self.fn(current_ms)

    def __call__(self, current_ms: int) -> int:
        return self.fn(current_ms)

    def __repr__(self) -> str:
        return f"FunctionSequenceResolver({self.fn!r})"


def as_resolver(resolver: SequenceResolver | Callable[[int], int]) -> SequenceResolver:
    """Return `resolver` unchanged, or wrapped if it is a plain callable."""
    if isinstance(resolver, SequenceResolver):
        return resolver
    if callable(resolver):
        return FunctionSequenceResolver(resolver)
    raise TypeError(
        f"Expected a SequenceResolver or a callable, got {type(resolver).__name__}"
    )


__all__ = [
    "SequenceResolver",
    "RandomSequenceResolver",
    "FunctionSequenceResolver",
    "as_resolver",
]
