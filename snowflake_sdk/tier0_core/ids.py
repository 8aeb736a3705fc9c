"""
snowflake_sdk.tier0_core.ids
─────────────────────────────
Snowflake ID layout. A 64-bit ID is packed most-significant bit first:

    1 bit   sign, always 0
    41 bits milliseconds since the generator's epoch
    5 bits  datacenter ID
    5 bits  worker ID
    12 bits per-millisecond sequence

These helpers are pure: they know nothing about clocks or epochs. Use
snowflake_sdk.tier1_runtime.generator to mint IDs.
"""
from __future__ import annotations

from snowflake_sdk.tier0_core.errors import InvalidParameterError


# ── Layout ─────────────────────────────────────────────────────────────────

TIMESTAMP_BITS = 41
DATACENTER_BITS = 5
WORKER_BITS = 5
SEQUENCE_BITS = 12

MAX_TIMESTAMP = -1 ^ (-1 << TIMESTAMP_BITS)    # 2199023255551
MAX_DATACENTER_ID = -1 ^ (-1 << DATACENTER_BITS)  # 31
MAX_WORKER_ID = -1 ^ (-1 << WORKER_BITS)          # 31
MAX_SEQUENCE = -1 ^ (-1 << SEQUENCE_BITS)         # 4095

WORKER_SHIFT = SEQUENCE_BITS
DATACENTER_SHIFT = SEQUENCE_BITS + WORKER_BITS
TIMESTAMP_SHIFT = SEQUENCE_BITS + WORKER_BITS + DATACENTER_BITS

MAX_ID = -1 ^ (-1 << (TIMESTAMP_BITS + TIMESTAMP_SHIFT))

_FIELD_BITS = {
    "timestamp": TIMESTAMP_BITS,
    "datacenter": DATACENTER_BITS,
    "worker": WORKER_BITS,
    "sequence": SEQUENCE_BITS,
}
_FIELD_MAX = {name: -1 ^ (-1 << bits) for name, bits in _FIELD_BITS.items()}


# ── Pack / unpack ──────────────────────────────────────────────────────────

def compose(timestamp: int, datacenter: int, worker: int, sequence: int) -> int:
    """
    Pack the four fields into a single ID.

    `timestamp` is already relative to the epoch. Every field is checked
    against its width; nothing is silently truncated.
    """
    fields = {
        "timestamp": timestamp,
        "datacenter": datacenter,
        "worker": worker,
        "sequence": sequence,
    }
    errors = {
        name: f"must be >= 0 and <= {_FIELD_MAX[name]}"
        for name, value in fields.items()
        if not 0 <= value <= _FIELD_MAX[name]
    }
    if errors:
        raise InvalidParameterError(
            user_message="ID field out of range.",
            fields=errors,
        )
    return (
        (timestamp << TIMESTAMP_SHIFT)
        | (datacenter << DATACENTER_SHIFT)
        | (worker << WORKER_SHIFT)
        | sequence
    )


def decompose(snowflake_id: int | str) -> dict[str, int]:
    """Split an ID (int or decimal string) back into its four fields."""
    value = to_int(snowflake_id)
    return {
        "timestamp": value >> TIMESTAMP_SHIFT,
        "datacenter": (value >> DATACENTER_SHIFT) & MAX_DATACENTER_ID,
        "worker": (value >> WORKER_SHIFT) & MAX_WORKER_ID,
        "sequence": value & MAX_SEQUENCE,
    }


def to_bits(fields: dict[str, int]) -> dict[str, str]:
    """Render decomposed fields as zero-padded bit strings of their width."""
    return {
        name: format(value, f"0{_FIELD_BITS[name]}b")
        for name, value in fields.items()
    }


def to_int(snowflake_id: int | str) -> int:
    """Accept an ID as int or decimal string; reject anything outside 63 bits."""
    if isinstance(snowflake_id, bool):
        raise InvalidParameterError(user_message=f"Not a snowflake ID: {snowflake_id!r}")
    if isinstance(snowflake_id, str):
        text = snowflake_id.strip()
        if not (text.isascii() and text.isdigit()):
            raise InvalidParameterError(user_message=f"Not a snowflake ID: {snowflake_id!r}")
        value = int(text)
    elif isinstance(snowflake_id, int):
        value = snowflake_id
    else:
        raise InvalidParameterError(user_message=f"Not a snowflake ID: {snowflake_id!r}")
    if not 0 <= value <= MAX_ID:
        raise InvalidParameterError(
            user_message=f"Snowflake ID must be >= 0 and <= {MAX_ID}, got {value}",
        )
    return value


__all__ = [
    "TIMESTAMP_BITS", "DATACENTER_BITS", "WORKER_BITS", "SEQUENCE_BITS",
    "MAX_TIMESTAMP", "MAX_DATACENTER_ID", "MAX_WORKER_ID", "MAX_SEQUENCE", "MAX_ID",
    "compose", "decompose", "to_bits", "to_int",
]
