"""
snowflake_sdk.tier0_core.metrics
─────────────────────────────────
Counters for minting activity with standard naming and labels.
Exports via a Prometheus /metrics endpoint.

Minimal stack: prometheus-client
Configure via: SNOWFLAKE_METRICS_PORT (default: 8001)
"""
from __future__ import annotations

from typing import Callable

from prometheus_client import Counter, start_http_server

from snowflake_sdk.tier0_core.config import get_config

# Standard labels applied to every metric
_DEFAULT_LABELS = ["service", "env"]


def _default_label_values() -> dict[str, str]:
    config = get_config()
    return dict(zip(_DEFAULT_LABELS, [config.app_name, config.environment]))


def counter(name: str, description: str, labels: list[str] | None = None) -> Callable:
    """
    Create a counter with standard labels.

    Usage:
        minted = counter("snowflake_ids_minted_total", "IDs minted", ["datacenter"])
        minted(datacenter="1").inc()
    """
    all_labels = _DEFAULT_LABELS + (labels or [])
    c = Counter(name, description, all_labels)

    def _counter(**extra_labels: str) -> Counter:
        return c.labels(**_default_label_values(), **extra_labels)

    return _counter


def start_metrics_server(port: int | None = None) -> None:
    """
    Start the Prometheus HTTP metrics server on a dedicated port.
    Call once at application startup.
    """
    start_http_server(port or get_config().metrics_port)


# ── Generator metrics ─────────────────────────────────────────────────────────

ids_minted = counter(
    "snowflake_ids_minted_total",
    "Identifiers minted",
    ["datacenter", "worker"],
)
sequence_exhausted = counter(
    "snowflake_sequence_exhausted_total",
    "Mint attempts that ran out of sequence numbers for a millisecond",
    ["datacenter", "worker"],
)
clock_regressions = counter(
    "snowflake_clock_regressions_total",
    "Mint attempts rejected because the clock moved backwards",
    ["datacenter", "worker"],
)


__all__ = ["counter", "start_metrics_server"]
