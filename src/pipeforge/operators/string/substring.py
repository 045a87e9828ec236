# src/pipeforge/operators/string/substring.py
"""Substring operator: slice one text field by character index."""

from __future__ import annotations

from typing import Any

from pydantic import ValidationInfo, field_validator

from pipeforge.contracts.context import ExecutionContext
from pipeforge.contracts.enums import OperatorCategory
from pipeforge.operators.base import Operator
from pipeforge.operators.config_base import (
    OperatorConfig,
    optional_count,
    require_count,
    require_string,
    required_field,
)
from pipeforge.operators.utils import map_items, replace_string_field


class SubstringConfig(OperatorConfig):
    field: str = required_field()
    start: int = required_field()
    end: int | None = None

    @field_validator("field", mode="before")
    @classmethod
    def check_field(cls, v: Any) -> str:
        return require_string(v, "Field is required", "Field must be a string")

    @field_validator("start", mode="before")
    @classmethod
    def check_start(cls, v: Any) -> int:
        return require_count(v, "Start", required="Start index is required")

    @field_validator("end", mode="before")
    @classmethod
    def check_end(cls, v: Any, info: ValidationInfo) -> int | None:
        end = optional_count(v, "End")
        start = info.data.get("start")
        if end is not None and start is not None and end < start:
            raise ValueError("End must be greater than or equal to start")
        return end


class SubstringOperator(Operator[SubstringConfig]):
    """Replace a field with text[start:end] (end exclusive, clamped)."""

    type = "substring"
    category = OperatorCategory.STRING
    description = "Extract a portion of text by position"
    config_model = SubstringConfig

    def run(self, data: Any, config: SubstringConfig, context: ExecutionContext) -> Any:
        return map_items(
            data,
            lambda item: replace_string_field(item, config.field, lambda text: text[config.start : config.end]),
        )
