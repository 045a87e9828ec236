# src/pipeforge/operators/transforms/unique.py
"""Unique operator: drop items whose field value was already seen."""

from __future__ import annotations

import json
from typing import Any

from pydantic import field_validator

from pipeforge.contracts.context import ExecutionContext
from pipeforge.contracts.enums import OperatorCategory
from pipeforge.contracts.errors import OperatorExecutionError
from pipeforge.operators.base import Operator
from pipeforge.operators.config_base import OperatorConfig, require_string, required_field
from pipeforge.operators.sentinels import MISSING
from pipeforge.operators.transforms.comparison import display_string
from pipeforge.operators.utils import get_nested_field


class UniqueConfig(OperatorConfig):
    field: str = required_field()

    @field_validator("field", mode="before")
    @classmethod
    def check_field(cls, v: Any) -> str:
        return require_string(v, "Field is required", "Field must be a string")


def dedupe_key(value: Any) -> str:
    """Hashable identity for a field value; objects compare by content."""
    if value is MISSING:
        return "__undefined__"
    if value is None:
        return "__null__"
    if isinstance(value, (dict, list)):
        return json.dumps(value, default=str)
    return display_string(value)


class UniqueOperator(Operator[UniqueConfig]):
    """Keep the first item for each distinct field value.

    Items missing the field share one key, so only the first of them is kept.
    """

    type = "unique"
    category = OperatorCategory.OPERATORS
    description = "Remove duplicate items by field value"
    config_model = UniqueConfig

    def run(self, data: Any, config: UniqueConfig, context: ExecutionContext) -> Any:
        if data is None:
            return []
        if not isinstance(data, list):
            raise OperatorExecutionError("Unique operator requires an array as input")

        seen: set[str] = set()
        result: list[Any] = []
        for item in data:
            key = dedupe_key(get_nested_field(item, config.field))
            if key not in seen:
                seen.add(key)
                result.append(item)
        return result
