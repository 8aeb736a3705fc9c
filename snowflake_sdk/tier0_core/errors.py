"""
snowflake_sdk.tier0_core.errors
────────────────────────────────
Error taxonomy for ID generation. Every public error carries a stable
machine-readable code and a user-safe message. Raising a SnowflakeError
automatically reports it if an error backend is configured.

Minimal stack: Sentry OSS (optional extra)
Select via:    SNOWFLAKE_ERROR_BACKEND=sentry|none
"""
from __future__ import annotations

from typing import Any

from snowflake_sdk.tier0_core.config import get_config


# ── Base error ────────────────────────────────────────────────────────────────

class SnowflakeError(Exception):
    """
    Base class for all snowflake_sdk errors. Every error has:
    - code: stable machine-readable string (snake_case)
    - user_message: safe to surface to end users
    - detail: internal context, never shown to users
    - metadata: structured context (offending values, timestamps)
    """

    code: str = "snowflake_error"

    def __init__(
        self,
        code: str | None = None,
        user_message: str = "An unexpected error occurred.",
        detail: str | None = None,
        **metadata: Any,
    ) -> None:
        self.code = code or self.__class__.code
        self.user_message = user_message
        self.detail = detail or user_message
        self.metadata = metadata
        super().__init__(self.detail)
        _capture(self)

    def to_dict(self) -> dict:
        return {
            "error": {
                "code": self.code,
                "message": self.user_message,
            }
        }


# ── Typed error classes ───────────────────────────────────────────────────────

class InvalidParameterError(SnowflakeError):
    """A datacenter/worker ID, ID field or ID value is out of range."""
    code = "invalid_parameter"

    def __init__(
        self,
        code: str | None = None,
        user_message: str = "Invalid parameter.",
        fields: dict | None = None,
        **metadata: Any,
    ) -> None:
        self.fields = fields or {}
        super().__init__(code, user_message, **metadata)

    def to_dict(self) -> dict:
        d = super().to_dict()
        if self.fields:
            d["error"]["fields"] = self.fields
        return d


class ClockRegressionError(SnowflakeError):
    """The clock moved backwards between two sequence resolutions."""
    code = "clock_regression"

    def __init__(
        self,
        current_ms: int,
        last_ms: int,
        code: str | None = None,
        **metadata: Any,
    ) -> None:
        self.current_ms = current_ms
        self.last_ms = last_ms
        super().__init__(
            code,
            f"Current timestamp ({current_ms}) is earlier than the last "
            f"timestamp ({last_ms}).",
            current_ms=current_ms,
            last_ms=last_ms,
            **metadata,
        )


class EpochConfigurationError(SnowflakeError):
    """The epoch is in the future or too far in the past for 41 bits."""
    code = "epoch_configuration_error"


class ConfigurationError(SnowflakeError):
    """Misconfiguration detected while building the shared generator."""
    code = "configuration_error"


class SequenceExhausted(Exception):
    """
    Internal signal: the resolver ran past the 12-bit sequence range for the
    current millisecond. Retried by the mint loop, never surfaced.
    """

    def __init__(self, timestamp_ms: int, sequence: int) -> None:
        self.timestamp_ms = timestamp_ms
        self.sequence = sequence
        super().__init__(f"sequence {sequence} exhausted at {timestamp_ms}")


# ── Error capture backend ─────────────────────────────────────────────────────

def _capture(error: SnowflakeError) -> None:
    """Send error to configured backend. Called automatically by SnowflakeError.__init__."""
    backend = get_config().error_backend
    if backend == "sentry":
        _capture_sentry(error)


def _capture_sentry(error: SnowflakeError) -> None:
    try:
        import sentry_sdk
    except ImportError:
        return
    sentry_sdk.capture_message(
        str(error),
        level="warning",
        extras={"code": error.code, **error.metadata},
    )


__all__ = [
    "SnowflakeError",
    "InvalidParameterError",
    "ClockRegressionError",
    "EpochConfigurationError",
    "ConfigurationError",
]
