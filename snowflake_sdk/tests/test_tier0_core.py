"""Tests for tier0_core modules."""
from __future__ import annotations

import pytest
from pydantic import ValidationError as PydanticValidationError

from snowflake_sdk.tier0_core.errors import (
    ClockRegressionError,
    ConfigurationError,
    EpochConfigurationError,
    InvalidParameterError,
    SequenceExhausted,
    SnowflakeError,
)
from snowflake_sdk.tier0_core.ids import (
    MAX_DATACENTER_ID,
    MAX_ID,
    MAX_SEQUENCE,
    MAX_TIMESTAMP,
    MAX_WORKER_ID,
    compose,
    decompose,
    to_bits,
    to_int,
)


# ── errors ─────────────────────────────────────────────────────────────────

class TestErrors:
    def test_snowflake_error_has_code(self):
        e = SnowflakeError("custom_code", user_message="Something broke")
        assert e.code == "custom_code"
        assert "Something broke" in str(e)

    def test_subclasses_use_class_code(self):
        assert InvalidParameterError().code == "invalid_parameter"
        assert EpochConfigurationError().code == "epoch_configuration_error"
        assert ConfigurationError().code == "configuration_error"

    def test_invalid_parameter_fields_in_dict(self):
        e = InvalidParameterError(user_message="Bad", fields={"worker_id": "must be >= 0 and <= 31"})
        d = e.to_dict()
        assert d["error"]["code"] == "invalid_parameter"
        assert d["error"]["fields"] == {"worker_id": "must be >= 0 and <= 31"}

    def test_clock_regression_carries_timestamps(self):
        e = ClockRegressionError(1000, 2000)
        assert isinstance(e, SnowflakeError)
        assert e.current_ms == 1000
        assert e.last_ms == 2000
        assert e.metadata == {"current_ms": 1000, "last_ms": 2000}
        assert "1000" in str(e) and "2000" in str(e)

    def test_sentry_backend_captures_errors(self, monkeypatch):
        sentry_sdk = pytest.importorskip("sentry_sdk")
        from snowflake_sdk.tier0_core.config import _reset_config

        captured = []
        monkeypatch.setattr(
            sentry_sdk, "capture_message",
            lambda message, **kwargs: captured.append((message, kwargs)),
        )
        monkeypatch.setenv("SNOWFLAKE_ERROR_BACKEND", "sentry")
        _reset_config()

        ClockRegressionError(1000, 2000)

        assert len(captured) == 1
        message, kwargs = captured[0]
        assert "1000" in message
        assert kwargs["extras"]["code"] == "clock_regression"
        assert kwargs["extras"]["last_ms"] == 2000

    def test_no_capture_without_backend(self, monkeypatch):
        sentry_sdk = pytest.importorskip("sentry_sdk")

        captured = []
        monkeypatch.setattr(sentry_sdk, "capture_message", lambda *a, **kw: captured.append(a))
        InvalidParameterError(user_message="Bad")
        assert captured == []

    def test_sequence_exhausted_is_not_public_error(self):
        e = SequenceExhausted(1000, 4096)
        assert not isinstance(e, SnowflakeError)
        assert e.sequence == 4096


# ── ids ────────────────────────────────────────────────────────────────────

class TestIds:
    def test_field_limits(self):
        assert MAX_TIMESTAMP == 2**41 - 1
        assert MAX_DATACENTER_ID == 31
        assert MAX_WORKER_ID == 31
        assert MAX_SEQUENCE == 4095
        assert MAX_ID == 2**63 - 1

    def test_compose_bit_layout(self):
        assert compose(1, 0, 0, 0) == 1 << 22
        assert compose(0, 1, 0, 0) == 1 << 17
        assert compose(0, 0, 1, 0) == 1 << 12
        assert compose(0, 0, 0, 1) == 1

    def test_compose_all_fields_at_max_keeps_sign_bit_clear(self):
        assert compose(MAX_TIMESTAMP, 31, 31, 4095) == MAX_ID

    def test_decompose_extracts_fields(self):
        snowflake_id = compose(123456789, 7, 19, 999)
        assert decompose(snowflake_id) == {
            "timestamp": 123456789,
            "datacenter": 7,
            "worker": 19,
            "sequence": 999,
        }

    def test_decompose_accepts_decimal_string(self):
        snowflake_id = compose(42, 1, 2, 3)
        assert decompose(str(snowflake_id)) == decompose(snowflake_id)

    def test_to_bits_pads_to_field_width(self):
        bits = to_bits(decompose(compose(1, 1, 1, 999)))
        assert bits == {
            "timestamp": "0" * 40 + "1",
            "datacenter": "00001",
            "worker": "00001",
            "sequence": "001111100111",
        }

    @pytest.mark.parametrize(
        "field, args",
        [
            ("timestamp", (MAX_TIMESTAMP + 1, 0, 0, 0)),
            ("datacenter", (0, 32, 0, 0)),
            ("worker", (0, 0, -1, 0)),
            ("sequence", (0, 0, 0, 4096)),
            ("sequence", (0, 0, 0, -1)),
        ],
    )
    def test_compose_rejects_out_of_range_field(self, field, args):
        with pytest.raises(InvalidParameterError) as exc_info:
            compose(*args)
        assert field in exc_info.value.fields

    @pytest.mark.parametrize("bad", ["abc", "", "-5", "1.5", -1, 2**63, 3.0, None, True])
    def test_to_int_rejects_malformed_ids(self, bad):
        with pytest.raises(InvalidParameterError):
            to_int(bad)

    def test_to_int_strips_whitespace(self):
        assert to_int(" 4194304 ") == 4194304


# ── config ─────────────────────────────────────────────────────────────────

class TestConfig:
    def test_defaults(self):
        from snowflake_sdk.tier0_core.config import get_config

        config = get_config()
        assert config.datacenter_id == 0
        assert config.worker_id == 0
        assert config.epoch_ms is None
        assert config.environment == "test"

    def test_reads_env(self, monkeypatch):
        from snowflake_sdk.tier0_core.config import _reset_config, get_config

        monkeypatch.setenv("SNOWFLAKE_DATACENTER_ID", "3")
        monkeypatch.setenv("SNOWFLAKE_WORKER_ID", "17")
        monkeypatch.setenv("SNOWFLAKE_EPOCH_MS", "1700000000000")
        _reset_config()

        config = get_config()
        assert config.datacenter_id == 3
        assert config.worker_id == 17
        assert config.epoch_ms == 1700000000000

    def test_config_is_cached(self):
        from snowflake_sdk.tier0_core.config import get_config

        assert get_config() is get_config()

    def test_invalid_log_format_rejected(self, monkeypatch):
        from snowflake_sdk.tier0_core.config import SnowflakeConfig

        monkeypatch.setenv("SNOWFLAKE_LOG_FORMAT", "xml")
        with pytest.raises(PydanticValidationError):
            SnowflakeConfig()


# ── logging ────────────────────────────────────────────────────────────────

class TestLogging:
    def test_get_logger_returns_bound_logger(self):
        from snowflake_sdk.tier0_core.logging import get_logger

        log = get_logger("snowflake.test")
        assert hasattr(log, "info")
        assert hasattr(log, "bind")
        log.info("snowflake.test.event", value=1)


# ── metrics ────────────────────────────────────────────────────────────────

class TestMetrics:
    def test_counter_applies_default_labels(self):
        from prometheus_client import REGISTRY

        from snowflake_sdk.tier0_core.metrics import counter

        c = counter("snowflake_test_events_total", "Test events", ["kind"])
        c(kind="a").inc()
        c(kind="a").inc(2)
        value = REGISTRY.get_sample_value(
            "snowflake_test_events_total",
            {"service": "snowflake", "env": "test", "kind": "a"},
        )
        assert value == 3
