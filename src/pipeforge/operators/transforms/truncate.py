# src/pipeforge/operators/transforms/truncate.py
"""Truncate and tail operators: keep a fixed number of items."""

from __future__ import annotations

from typing import Any

from pydantic import field_validator

from pipeforge.contracts.context import ExecutionContext
from pipeforge.contracts.enums import OperatorCategory
from pipeforge.contracts.errors import OperatorExecutionError
from pipeforge.operators.base import Operator
from pipeforge.operators.config_base import OperatorConfig, optional_bool, require_count, required_field


class TruncateConfig(OperatorConfig):
    count: int = required_field()

    @field_validator("count", mode="before")
    @classmethod
    def check_count(cls, v: Any) -> int:
        return require_count(v, "Count")


class TailConfig(TruncateConfig):
    skip: bool = False

    @field_validator("skip", mode="before")
    @classmethod
    def check_skip(cls, v: Any) -> bool:
        return bool(optional_bool(v, "Skip must be a boolean"))


def _require_list(data: Any, operator_name: str) -> list[Any]:
    if not isinstance(data, list):
        raise OperatorExecutionError(f"{operator_name} operator requires an array as input")
    return data


class TruncateOperator(Operator[TruncateConfig]):
    """Keep the first `count` items."""

    type = "truncate"
    category = OperatorCategory.OPERATORS
    description = "Keep only the first N items"
    config_model = TruncateConfig

    def run(self, data: Any, config: TruncateConfig, context: ExecutionContext) -> Any:
        if data is None:
            return []
        items = _require_list(data, "Truncate")
        if config.count <= 0:
            return []
        return items[: config.count]


class TailOperator(Operator[TailConfig]):
    """Keep the last `count` items, or with skip=True drop the first `count`."""

    type = "tail"
    category = OperatorCategory.OPERATORS
    description = "Keep the last N items, or skip the first N"
    config_model = TailConfig

    def run(self, data: Any, config: TailConfig, context: ExecutionContext) -> Any:
        if data is None:
            return []
        items = _require_list(data, "Tail")
        if config.count <= 0:
            return list(items) if config.skip else []
        if config.skip:
            return items[config.count :]
        return items[-config.count :]
