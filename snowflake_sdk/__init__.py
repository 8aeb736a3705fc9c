"""
snowflake_sdk
─────────────
Stable top-level exports. Import from here, not from sub-modules directly.
Every name exported here is part of the public API and subject to semver.
"""
from snowflake_sdk.tier0_core.logging import get_logger
from snowflake_sdk.tier0_core.errors import (
    SnowflakeError,
    InvalidParameterError,
    ClockRegressionError,
    EpochConfigurationError,
    ConfigurationError,
)
from snowflake_sdk.tier0_core.config import get_config, SnowflakeConfig
from snowflake_sdk.tier0_core.ids import compose, decompose
from snowflake_sdk.tier0_core.metrics import start_metrics_server

from snowflake_sdk.tier1_runtime.clock import Clock, get_clock, set_clock
from snowflake_sdk.tier1_runtime.sequence import (
    SequenceResolver,
    RandomSequenceResolver,
    FunctionSequenceResolver,
)
from snowflake_sdk.tier1_runtime.generator import (
    Snowflake,
    get_generator,
    new_id,
    new_int_id,
    parse_id,
)

__version__ = "0.1.0"
__all__ = [
    # logging
    "get_logger",
    # errors
    "SnowflakeError", "InvalidParameterError", "ClockRegressionError",
    "EpochConfigurationError", "ConfigurationError",
    # config
    "get_config", "SnowflakeConfig",
    # ids
    "compose", "decompose",
    # metrics
    "start_metrics_server",
    # clock
    "Clock", "get_clock", "set_clock",
    # sequence
    "SequenceResolver", "RandomSequenceResolver", "FunctionSequenceResolver",
    # generator
    "Snowflake", "get_generator", "new_id", "new_int_id", "parse_id",
]
