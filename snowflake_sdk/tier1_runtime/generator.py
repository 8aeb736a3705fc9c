"""
snowflake_sdk.tier1_runtime.generator
──────────────────────────────────────
The Snowflake generator: reads the clock, asks a SequenceResolver for the
sequence number, spins while the millisecond is exhausted, and packs the
result into a 64-bit ID. IDs are returned as decimal strings by default so
they survive JSON consumers limited to 53-bit integers.

One generator is safe to share between threads: minting holds a per-instance
lock. Uniqueness across processes relies on distinct datacenter/worker IDs.

Usage:
    generator = Snowflake(datacenter_id=1, worker_id=3)
    snowflake_id = generator.mint()              # decimal string
    generator.parse(snowflake_id, transform=True)
    # {"timestamp": ..., "datacenter": 1, "worker": 3, "sequence": 0}
"""
from __future__ import annotations

import threading
from datetime import datetime
from functools import lru_cache
from typing import Callable

from tenacity import RetryCallState

from snowflake_sdk.tier0_core import metrics
from snowflake_sdk.tier0_core.config import get_config
from snowflake_sdk.tier0_core.errors import (
    ClockRegressionError,
    ConfigurationError,
    EpochConfigurationError,
    InvalidParameterError,
    SequenceExhausted,
)
from snowflake_sdk.tier0_core.ids import (
    MAX_SEQUENCE,
    MAX_TIMESTAMP,
    compose,
    decompose,
    to_bits,
)
from snowflake_sdk.tier0_core.logging import get_logger
from snowflake_sdk.tier1_runtime.clock import Clock, from_millis, get_clock, start_of_day_ms
from snowflake_sdk.tier1_runtime.retry import DEFAULT_TICK_SECONDS, exhaustion_policy
from snowflake_sdk.tier1_runtime.sequence import (
    RandomSequenceResolver,
    SequenceResolver,
    as_resolver,
)
from snowflake_sdk.tier1_runtime.validate import GeneratorConfig, validate_input


class Snowflake:
    """
    Snowflake ID generator for one (datacenter, worker) node.

    Args:
        datacenter_id:     0-31.
        worker_id:         0-31.
        epoch_ms:          Custom epoch in Unix milliseconds. Defaults to local
                           midnight of the day the epoch is first needed.
        clock:             Time source. Defaults to the global clock.
        sequence_resolver: Resolver object or plain `fn(current_ms) -> int`.
        tick:              Seconds to sleep while a millisecond is exhausted.

    Raises:
        InvalidParameterError:   datacenter_id or worker_id out of range.
        EpochConfigurationError: epoch_ms in the future or too old.
    """

    def __init__(
        self,
        datacenter_id: int = 0,
        worker_id: int = 0,
        *,
        epoch_ms: int | None = None,
        clock: Clock | None = None,
        sequence_resolver: SequenceResolver | Callable[[int], int] | None = None,
        tick: float = DEFAULT_TICK_SECONDS,
    ) -> None:
        self._config = validate_input(
            GeneratorConfig,
            {"datacenter_id": datacenter_id, "worker_id": worker_id},
        )
        self._clock = clock
        self._tick = tick
        self._lock = threading.Lock()
        self._epoch_ms: int | None = None
        self._sequence_resolver: SequenceResolver | None = None
        self._default_sequence_resolver: SequenceResolver | None = None
        self._labels = {
            "datacenter": str(self.datacenter_id),
            "worker": str(self.worker_id),
        }
        self._log = get_logger(__name__).bind(
            datacenter_id=self.datacenter_id, worker_id=self.worker_id
        )

        if epoch_ms is not None:
            self.set_epoch(epoch_ms)
        if sequence_resolver is not None:
            self.set_sequence_resolver(sequence_resolver)

        self._log.info("snowflake.generator.created", epoch_ms=self._epoch_ms)

    # ── Node identity ─────────────────────────────────────────────────────

    @property
    def datacenter_id(self) -> int:
        return self._config.datacenter_id

    @property
    def worker_id(self) -> int:
        return self._config.worker_id

    @property
    def clock(self) -> Clock:
        return self._clock or get_clock()

    def current_millis(self) -> int:
        """Current time in whole Unix milliseconds, as used for minting."""
        return self.clock.timestamp_ms()

    # ── Minting ───────────────────────────────────────────────────────────

    def mint(self) -> str:
        """Mint the next ID as a decimal string."""
        return str(self.mint_int())

    def mint_int(self) -> int:
        """
        Mint the next ID as an int.

        Raises:
            ClockRegressionError:    the clock went backwards.
            EpochConfigurationError: now - epoch does not fit in 41 bits.
        """
        with self._lock:
            for attempt in exhaustion_policy(self._tick, before_sleep=self._on_exhausted):
                with attempt:
                    snowflake_id = self._mint_once()
                    metrics.ids_minted(**self._labels).inc()
                    return snowflake_id

    def _mint_once(self) -> int:
        current_ms = self.current_millis()
        try:
            sequence = self._active_sequence_resolver().next_sequence(current_ms)
        except ClockRegressionError as exc:
            self._log.error(
                "snowflake.clock.regressed",
                current_ms=exc.current_ms,
                last_ms=exc.last_ms,
            )
            metrics.clock_regressions(**self._labels).inc()
            raise

        if sequence > MAX_SEQUENCE:
            raise SequenceExhausted(current_ms, sequence)

        epoch_ms = self._epoch_for(current_ms)
        elapsed = current_ms - epoch_ms
        if not 0 <= elapsed <= MAX_TIMESTAMP:
            raise EpochConfigurationError(
                user_message=(
                    f"Elapsed time since epoch ({elapsed} ms) does not fit in "
                    f"41 bits; reset the epoch."
                ),
                elapsed_ms=elapsed,
                epoch_ms=epoch_ms,
            )

        return compose(elapsed, self.datacenter_id, self.worker_id, sequence)

    def _on_exhausted(self, retry_state: RetryCallState) -> None:
        exc = retry_state.outcome.exception() if retry_state.outcome else None
        self._log.debug(
            "snowflake.sequence.exhausted",
            attempt=retry_state.attempt_number,
            timestamp_ms=getattr(exc, "timestamp_ms", None),
        )
        metrics.sequence_exhausted(**self._labels).inc()

    # ── Parsing ───────────────────────────────────────────────────────────

    def parse(self, snowflake_id: int | str, transform: bool = False) -> dict:
        """
        Split an ID into timestamp, datacenter, worker and sequence.

        Without `transform`, each field is a zero-padded bit string of its
        width; with it, each field is an int. The timestamp stays relative
        to the epoch: add get_epoch() for an absolute time.
        """
        fields = decompose(snowflake_id)
        return fields if transform else to_bits(fields)

    def timestamp_of(self, snowflake_id: int | str) -> int:
        """Unix milliseconds at which `snowflake_id` was minted, using this epoch."""
        return decompose(snowflake_id)["timestamp"] + self.get_epoch()

    def minted_at(self, snowflake_id: int | str) -> datetime:
        return from_millis(self.timestamp_of(snowflake_id))

    # ── Epoch ─────────────────────────────────────────────────────────────

    def set_epoch(self, epoch_ms: int) -> "Snowflake":
        """
        Set the epoch in Unix milliseconds. The generator is unchanged if
        the epoch is rejected.

        Raises:
            EpochConfigurationError: epoch in the future, or more than
                                     2^41 - 1 ms before now.
        """
        now_ms = self.current_millis()
        elapsed = now_ms - epoch_ms

        if elapsed < 0:
            self._log.warning("snowflake.epoch.rejected", epoch_ms=epoch_ms, now_ms=now_ms)
            raise EpochConfigurationError(
                user_message="The start time cannot be in the future.",
                epoch_ms=epoch_ms,
                now_ms=now_ms,
            )
        if elapsed > MAX_TIMESTAMP:
            self._log.warning("snowflake.epoch.rejected", epoch_ms=epoch_ms, now_ms=now_ms)
            raise EpochConfigurationError(
                user_message=(
                    f"The current time minus the start time must not exceed "
                    f"{MAX_TIMESTAMP} ms (41 bits); range exceeded, pick a "
                    f"more recent epoch."
                ),
                epoch_ms=epoch_ms,
                now_ms=now_ms,
            )

        with self._lock:
            self._epoch_ms = epoch_ms
        self._log.info("snowflake.epoch.set", epoch_ms=epoch_ms)
        return self

    def get_epoch(self) -> int:
        """The configured epoch, or local midnight today (computed once)."""
        with self._lock:
            if self._epoch_ms is None:
                self._epoch_ms = self.clock.start_of_day_ms()
            return self._epoch_ms

    def _epoch_for(self, current_ms: int) -> int:
        # Caller holds the lock; the default comes from the same clock read
        if self._epoch_ms is None:
            self._epoch_ms = start_of_day_ms(current_ms)
        return self._epoch_ms

    # ── Sequence resolvers ────────────────────────────────────────────────

    def set_sequence_resolver(
        self, resolver: SequenceResolver | Callable[[int], int]
    ) -> "Snowflake":
        """Install a resolver object or a plain `fn(current_ms) -> int`."""
        adapted = as_resolver(resolver)
        with self._lock:
            self._sequence_resolver = adapted
        return self

    def get_sequence_resolver(self) -> SequenceResolver | None:
        """The installed resolver, or None when the default is in use."""
        return self._sequence_resolver

    def get_default_sequence_resolver(self) -> SequenceResolver:
        if self._default_sequence_resolver is None:
            self._default_sequence_resolver = RandomSequenceResolver()
        return self._default_sequence_resolver

    def _active_sequence_resolver(self) -> SequenceResolver:
        if self._sequence_resolver is not None:
            return self._sequence_resolver
        return self.get_default_sequence_resolver()

    def __repr__(self) -> str:
        return (
            f"Snowflake(datacenter_id={self.datacenter_id}, "
            f"worker_id={self.worker_id}, epoch_ms={self._epoch_ms})"
        )


# ── Module-level generator ─────────────────────────────────────────────────

@lru_cache(maxsize=1)
def get_generator() -> Snowflake:
    """
    Return the process-wide generator built from SNOWFLAKE_* settings.
    Call _reset_generator() in tests to pick up new env vars.
    """
    config = get_config()
    try:
        return Snowflake(
            config.datacenter_id,
            config.worker_id,
            epoch_ms=config.epoch_ms,
        )
    except (InvalidParameterError, EpochConfigurationError) as exc:
        raise ConfigurationError(
            user_message=f"Invalid SNOWFLAKE_* settings: {exc.user_message}",
        ) from exc


def _reset_generator() -> None:
    """For tests: drop the cached generator."""
    get_generator.cache_clear()


def new_id() -> str:
    """Mint an ID from the process-wide generator, as a decimal string."""
    return get_generator().mint()


def new_int_id() -> int:
    """Mint an ID from the process-wide generator, as an int."""
    return get_generator().mint_int()


def parse_id(snowflake_id: int | str, transform: bool = False) -> dict:
    """Parse an ID with the process-wide generator."""
    return get_generator().parse(snowflake_id, transform)


__all__ = [
    "Snowflake",
    "get_generator",
    "new_id",
    "new_int_id",
    "parse_id",
]
