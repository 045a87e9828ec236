# src/pipeforge/operators/config_base.py
"""Base classes and field checks for typed operator configurations.

Every operator parses its untyped config dict into one of these models.
Parsing either produces the typed config or raises OperatorConfigError
carrying a single, field-specific message such as "Field is required".
Those messages are part of the observable contract: the editor shows
them verbatim next to the offending node.

Example usage:
    class SortConfig(OperatorConfig):
        field: str = required_field()

        @field_validator("field", mode="before")
        @classmethod
        def check_field(cls, v: Any) -> str:
            return require_string(v, "Field is required", "Field must be a string")

    cfg = SortConfig.from_dict(node.config)

When several fields are wrong, errors on top-level fields are reported
before errors inside list entries (rules, mappings, params), and
otherwise in field definition order.
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from typing import Any, Self

from pydantic import BaseModel, Field, ValidationError
from pydantic_core import ErrorDetails

from pipeforge.contracts.errors import OperatorConfigError
from pipeforge.operators.sentinels import MISSING

CONFIG_REQUIRED = "Configuration is required"


def _error_message(error: ErrorDetails) -> str:
    ctx = error.get("ctx") or {}
    if error["type"] != "value_error" or "error" not in ctx:
        loc = ".".join(str(part) for part in error["loc"])
        return f"{loc}: {error['msg']}" if loc else error["msg"]
    message = str(ctx["error"])
    if "{index}" in message:
        index = next((part for part in error["loc"] if isinstance(part, int)), 0)
        message = message.replace("{index}", str(index))
    return message


def first_error_message(exc: ValidationError) -> str:
    """Pick the single message to report for a failed config parse."""
    errors = exc.errors()
    top_level = [e for e in errors if len(e["loc"]) <= 1]
    return _error_message((top_level or errors)[0])


class OperatorConfig(BaseModel):
    """Base class for typed operator configurations.

    Configs come from JSON authored in the editor, so keys are camelCase
    on the wire; fields declare the wire name as their alias. Unknown keys
    are ignored (the editor stores UI state alongside config).
    """

    model_config = {"extra": "ignore", "frozen": True, "populate_by_name": True}

    @classmethod
    def from_dict(cls, config: Any) -> Self:
        """Create config from dict with a field-specific error on failure.

        Raises:
            OperatorConfigError: If configuration is missing or invalid.
        """
        if not isinstance(config, Mapping):
            raise OperatorConfigError(CONFIG_REQUIRED)
        try:
            return cls.model_validate(dict(config))
        except ValidationError as e:
            raise OperatorConfigError(first_error_message(e)) from e


class EntryConfig(BaseModel):
    """Base for list entries inside a config (filter rules, mappings, params).

    Entry validators raise messages containing "{index}"; it is replaced
    with the entry's position when the error is reported.
    """

    model_config = {"extra": "ignore", "frozen": True, "populate_by_name": True}


def required_field(alias: str | None = None) -> Any:
    """A field whose presence is checked by its own before-validator.

    The default runs through validation so a missing key reports the
    field's "is required" message instead of pydantic's generic one.
    """
    return Field(default=None, alias=alias, validate_default=True)


def presence_field(alias: str | None = None) -> Any:
    """Like required_field, but distinguishes an absent key from null."""
    return Field(default=MISSING, alias=alias, validate_default=True)


def is_number(value: Any) -> bool:
    """True for real JSON numbers; booleans are not numbers here."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return not (isinstance(value, float) and math.isnan(value))


def is_integer(value: Any) -> bool:
    return is_number(value) and float(value).is_integer()


def is_absent(value: Any) -> bool:
    return value is None or value is MISSING


def is_blank(value: Any) -> bool:
    """Empty in the way an editor field is empty: missing, null, "", false or 0."""
    if is_absent(value) or value is False or value == "":
        return True
    return is_number(value) and value == 0


def require_string(value: Any, required: str, wrong_type: str) -> str:
    """Reject blank values, then non-strings."""
    if is_blank(value):
        raise ValueError(required)
    if not isinstance(value, str):
        raise ValueError(wrong_type)
    return value


def optional_string(value: Any, wrong_type: str) -> str | None:
    if is_absent(value):
        return None
    if not isinstance(value, str):
        raise ValueError(wrong_type)
    return value


def optional_bool(value: Any, wrong_type: str) -> bool | None:
    if is_absent(value):
        return None
    if not isinstance(value, bool):
        raise ValueError(wrong_type)
    return value


def require_count(value: Any, subject: str, required: str | None = None) -> int:
    """Validate a required non-negative integer (truncate/tail count, substring start)."""
    if is_absent(value):
        raise ValueError(required or f"{subject} is required")
    return _check_count(value, subject)


def optional_count(value: Any, subject: str) -> int | None:
    if is_absent(value):
        return None
    return _check_count(value, subject)


def _check_count(value: Any, subject: str) -> int:
    if not is_number(value):
        raise ValueError(f"{subject} must be a number")
    if not is_integer(value):
        raise ValueError(f"{subject} must be an integer")
    if value < 0:
        raise ValueError(f"{subject} must be non-negative")
    return int(value)


def require_list(value: Any, required: str, wrong_type: str) -> list[Any]:
    if is_blank(value):
        raise ValueError(required)
    if not isinstance(value, list):
        raise ValueError(wrong_type)
    return value
