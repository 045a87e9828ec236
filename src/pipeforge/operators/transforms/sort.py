# src/pipeforge/operators/transforms/sort.py
"""Sort operator: order items by one field."""

from __future__ import annotations

from functools import cmp_to_key
from typing import Any

from pydantic import field_validator

from pipeforge.contracts.context import ExecutionContext
from pipeforge.contracts.enums import OperatorCategory
from pipeforge.operators.base import Operator
from pipeforge.operators.config_base import OperatorConfig, is_blank, require_string, required_field
from pipeforge.operators.sentinels import MISSING
from pipeforge.operators.transforms.comparison import compare_sortable
from pipeforge.operators.transforms.filter import require_array_input
from pipeforge.operators.utils import get_nested_field


class SortConfig(OperatorConfig):
    field: str = required_field()
    direction: str = required_field()

    @field_validator("field", mode="before")
    @classmethod
    def check_field(cls, v: Any) -> str:
        return require_string(v, "Field is required", "Field must be a string")

    @field_validator("direction", mode="before")
    @classmethod
    def check_direction(cls, v: Any) -> str:
        if is_blank(v):
            raise ValueError("Direction is required")
        if v not in ("asc", "desc"):
            raise ValueError('Direction must be "asc" or "desc"')
        return str(v)


class SortOperator(Operator[SortConfig]):
    """Stable sort by a field; items without the field go last, in input order.

    Dates (in the usual API and feed shapes) sort chronologically and
    numeric strings numerically, so "10" sorts after "9".
    """

    type = "sort"
    category = OperatorCategory.OPERATORS
    description = "Sort items by field (ascending or descending)"
    config_model = SortConfig

    def run(self, data: Any, config: SortConfig, context: ExecutionContext) -> Any:
        items = require_array_input(data, "Sort")

        keyed: list[tuple[Any, Any]] = []
        missing: list[Any] = []
        for item in items:
            value = get_nested_field(item, config.field)
            if value is MISSING or value is None:
                missing.append(item)
            else:
                keyed.append((value, item))

        sign = -1 if config.direction == "desc" else 1
        keyed.sort(key=cmp_to_key(lambda a, b: sign * compare_sortable(a[0], b[0])))
        return [item for _, item in keyed] + missing
