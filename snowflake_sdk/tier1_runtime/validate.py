"""
snowflake_sdk.tier1_runtime.validate
─────────────────────────────────────
Generator parameter validation via Pydantic v2. Raises InvalidParameterError
(not raw Pydantic errors) so callers always see the same error type.
"""
from __future__ import annotations

from typing import Any, Type, TypeVar

from pydantic import BaseModel, ConfigDict, ValidationError as PydanticValidationError
from pydantic import field_validator

from snowflake_sdk.tier0_core.errors import InvalidParameterError
from snowflake_sdk.tier0_core.ids import MAX_DATACENTER_ID, MAX_WORKER_ID

T = TypeVar("T", bound=BaseModel)


class GeneratorConfig(BaseModel):
    """Node identity of one generator. Immutable once built."""

    model_config = ConfigDict(frozen=True)

    datacenter_id: int = 0
    worker_id: int = 0

    @field_validator("datacenter_id")
    @classmethod
    def validate_datacenter_id(cls, v: int) -> int:
        if not 0 <= v <= MAX_DATACENTER_ID:
            raise ValueError(f"must be >= 0 and <= {MAX_DATACENTER_ID}")
        return v

    @field_validator("worker_id")
    @classmethod
    def validate_worker_id(cls, v: int) -> int:
        if not 0 <= v <= MAX_WORKER_ID:
            raise ValueError(f"must be >= 0 and <= {MAX_WORKER_ID}")
        return v


def validate_input(model: Type[T], data: Any) -> T:
    """
    Validate raw data against a Pydantic model.
    Raises InvalidParameterError (not Pydantic's) on failure.

    Usage:
        config = validate_input(GeneratorConfig, {"datacenter_id": 1, "worker_id": 2})
    """
    try:
        return model.model_validate(data)
    except PydanticValidationError as exc:
        fields = {
            ".".join(str(loc) for loc in err["loc"]): err["msg"].removeprefix("Value error, ")
            for err in exc.errors()
        }
        summary = "; ".join(f"`{name}` {msg}" for name, msg in fields.items())
        raise InvalidParameterError(
            user_message=f"Invalid generator parameters: {summary}",
            fields=fields,
        ) from exc


__all__ = ["GeneratorConfig", "validate_input"]
