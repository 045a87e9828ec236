"""Numeric user input with optional bounds."""

from __future__ import annotations

import math
import re
from typing import Any

from pydantic import ValidationInfo, field_validator

from pipeforge.contracts.enums import SchemaFieldType
from pipeforge.operators.config_base import is_absent, is_number
from pipeforge.operators.inputs.base import InputConfig, InputOperator, is_empty_value
from pipeforge.operators.transforms.comparison import display_string

# Leading numeric prefix, as a form field reads "12px" -> 12.
_FLOAT_PREFIX = re.compile(r"^\s*([+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?)")


def parse_float_prefix(text: str) -> float | None:
    """Parse the leading number in text; None if there is none.

    Examples:
        >>> parse_float_prefix("12.5kg")
        12.5
        >>> parse_float_prefix("abc") is None
        True
    """
    match = _FLOAT_PREFIX.match(text)
    if match is None:
        return None
    return float(match.group(1))


def _as_number(value: Any) -> int | float | None:
    if is_number(value):
        return value
    if isinstance(value, str):
        parsed = parse_float_prefix(value)
        if parsed is None or math.isinf(parsed):
            return None
        return int(parsed) if parsed.is_integer() else parsed
    return None


class NumberInputConfig(InputConfig):
    min: int | float | None = None
    max: int | float | None = None
    step: int | float | None = None

    @field_validator("default_value", mode="before")
    @classmethod
    def check_default(cls, v: Any) -> Any:
        if is_absent(v) or v == "":
            return None
        if _as_number(v) is None:
            raise ValueError("Default value must be a valid number")
        return v

    @field_validator("min", mode="before")
    @classmethod
    def check_min(cls, v: Any) -> int | float | None:
        if is_absent(v):
            return None
        if not is_number(v):
            raise ValueError("Min must be a valid number")
        return v

    @field_validator("max", mode="before")
    @classmethod
    def check_max(cls, v: Any, info: ValidationInfo) -> int | float | None:
        if is_absent(v):
            return None
        if not is_number(v):
            raise ValueError("Max must be a valid number")
        low = info.data.get("min")
        if low is not None and low > v:
            raise ValueError("Min cannot be greater than max")
        return v

    @field_validator("step", mode="before")
    @classmethod
    def check_step(cls, v: Any) -> int | float | None:
        if is_absent(v):
            return None
        if not is_number(v) or v <= 0:
            raise ValueError("Step must be a positive number")
        return v


class NumberInputOperator(InputOperator[NumberInputConfig]):
    type = "number-input"
    description = "A number typed by the person running the pipe"
    config_model = NumberInputConfig
    kind = "Number"
    value_type = SchemaFieldType.NUMBER
    sample = 0

    def coerce(self, value: Any, config: NumberInputConfig) -> int | float:
        if is_empty_value(value):
            number: int | float | None = 0
        else:
            number = _as_number(value)
        if number is None:
            raise self.fail(config, "must be a valid number")
        if config.min is not None and number < config.min:
            raise self.fail(config, f"must be at least {display_string(config.min)}")
        if config.max is not None and number > config.max:
            raise self.fail(config, f"must be at most {display_string(config.max)}")
        return number
