"""
snowflake_sdk.tier0_core.config
────────────────────────────────
Typed configuration with env layering. Reads from .env → environment
variables. All fields are typed via Pydantic.

Minimal stack: pydantic-settings + python-dotenv
"""
from __future__ import annotations

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class SnowflakeConfig(BaseSettings):
    """
    Typed configuration for the process-wide generator.
    Range checks on the node IDs happen when the generator is built.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ── Application ───────────────────────────────────────────────────────────
    app_name: str = Field(default="snowflake", alias="APP_NAME")
    environment: str = Field(default="development", alias="APP_ENV")

    # ── Node identity ─────────────────────────────────────────────────────────
    datacenter_id: int = Field(default=0, alias="SNOWFLAKE_DATACENTER_ID")
    worker_id: int = Field(default=0, alias="SNOWFLAKE_WORKER_ID")
    epoch_ms: int | None = Field(default=None, alias="SNOWFLAKE_EPOCH_MS")

    # ── Logging ───────────────────────────────────────────────────────────────
    log_level: str = Field(default="INFO", alias="SNOWFLAKE_LOG_LEVEL")
    log_format: str = Field(default="json", alias="SNOWFLAKE_LOG_FORMAT")

    # ── Error reporting / metrics ─────────────────────────────────────────────
    error_backend: str = Field(default="none", alias="SNOWFLAKE_ERROR_BACKEND")
    metrics_port: int = Field(default=8001, alias="SNOWFLAKE_METRICS_PORT")

    @field_validator("log_format")
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        allowed = {"json", "console"}
        if v.lower() not in allowed:
            raise ValueError(f"log_format must be one of {allowed}, got {v!r}")
        return v.lower()

    @field_validator("error_backend")
    @classmethod
    def validate_error_backend(cls, v: str) -> str:
        allowed = {"none", "sentry"}
        if v.lower() not in allowed:
            raise ValueError(f"error_backend must be one of {allowed}, got {v!r}")
        return v.lower()


@lru_cache(maxsize=1)
def get_config() -> SnowflakeConfig:
    """
    Return the singleton config. Cached after first call.
    Call _reset_config() in tests to pick up new env vars.
    """
    return SnowflakeConfig()


def _reset_config() -> None:
    """For tests: clear the config cache."""
    get_config.cache_clear()
