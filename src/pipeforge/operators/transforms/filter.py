# src/pipeforge/operators/transforms/filter.py
"""Filter operator: keep or drop items by rules.

Modes:
- permit: keep items that match
- block: drop items that match

Match modes:
- all: an item matches when every rule matches (AND)
- any: an item matches when at least one rule matches (OR)

A rule whose field is missing from an item does not match; the item is
never an error.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Literal

from pydantic import Field, field_validator, model_validator

from pipeforge.contracts.context import ExecutionContext
from pipeforge.contracts.enums import OperatorCategory
from pipeforge.contracts.errors import OperatorExecutionError
from pipeforge.core.security.regex import safe_regex_test, validate_regex_pattern
from pipeforge.operators.base import Operator
from pipeforge.operators.config_base import (
    EntryConfig,
    OperatorConfig,
    is_absent,
    is_blank,
    presence_field,
    require_list,
    require_string,
    required_field,
)
from pipeforge.operators.sentinels import MISSING
from pipeforge.operators.transforms.comparison import compare_loose, loose_equals
from pipeforge.operators.utils import describe_type, get_nested_field

RULE_OPERATORS: tuple[str, ...] = (
    "equals",
    "not_equals",
    "contains",
    "not_contains",
    "gt",
    "lt",
    "gte",
    "lte",
    "matches_regex",
)


class FilterRule(EntryConfig):
    field: str = required_field()
    operator: str = required_field()
    value: Any = presence_field()

    @model_validator(mode="before")
    @classmethod
    def require_object(cls, data: Any) -> Any:
        if not isinstance(data, Mapping):
            raise ValueError("Rule {index}: field is required")
        return data

    @field_validator("field", mode="before")
    @classmethod
    def check_field(cls, v: Any) -> str:
        return require_string(v, "Rule {index}: field is required", "Rule {index}: field must be a string")

    @field_validator("operator", mode="before")
    @classmethod
    def check_operator(cls, v: Any) -> str:
        if is_blank(v):
            raise ValueError("Rule {index}: operator is required")
        if not isinstance(v, str) or v not in RULE_OPERATORS:
            raise ValueError(f"Rule {{index}}: operator must be one of: {', '.join(RULE_OPERATORS)}")
        return v

    @field_validator("value", mode="before")
    @classmethod
    def check_value(cls, v: Any) -> Any:
        if v is MISSING:
            raise ValueError("Rule {index}: value is required")
        return v

    @model_validator(mode="after")
    def check_regex(self) -> FilterRule:
        if self.operator == "matches_regex":
            if not isinstance(self.value, str):
                raise ValueError("Rule {index}: regex pattern must be a string")
            result = validate_regex_pattern(self.value)
            if not result.valid:
                raise ValueError(f"Rule {{index}}: {result.error}")
        return self


class FilterConfig(OperatorConfig):
    rules: list[FilterRule] = required_field()
    mode: Literal["permit", "block"] = "permit"
    match_mode: Literal["any", "all"] = Field(default="all", alias="matchMode")

    @field_validator("rules", mode="before")
    @classmethod
    def check_rules(cls, v: Any) -> list[Any]:
        return require_list(v, "Rules array is required", "Rules must be an array")

    @field_validator("mode", mode="before")
    @classmethod
    def check_mode(cls, v: Any) -> str:
        if is_absent(v):
            return "permit"
        if v not in ("permit", "block"):
            raise ValueError('Mode must be either "permit" or "block"')
        return str(v)

    @field_validator("match_mode", mode="before")
    @classmethod
    def check_match_mode(cls, v: Any) -> str:
        if is_absent(v):
            return "all"
        if v not in ("any", "all"):
            raise ValueError('Match mode must be either "any" or "all"')
        return str(v)


def _contains(haystack: Any, needle: Any) -> bool | None:
    if isinstance(haystack, str) and isinstance(needle, str):
        return needle in haystack
    if isinstance(haystack, list):
        return needle in haystack
    return None


def evaluate_rule(item: Any, rule: FilterRule) -> bool:
    """Whether one rule matches one item. Missing fields never match."""
    value = get_nested_field(item, rule.field)
    if value is MISSING:
        return False

    match rule.operator:
        case "equals":
            return loose_equals(value, rule.value)
        case "not_equals":
            return not loose_equals(value, rule.value)
        case "contains":
            return _contains(value, rule.value) is True
        case "not_contains":
            # Values that cannot contain anything never contain the needle
            return _contains(value, rule.value) is not True
        case "gt":
            return compare_loose(value, rule.value) > 0
        case "lt":
            return compare_loose(value, rule.value) < 0
        case "gte":
            return compare_loose(value, rule.value) >= 0
        case "lte":
            return compare_loose(value, rule.value) <= 0
        case "matches_regex":
            if not isinstance(value, str) or not isinstance(rule.value, str):
                return False
            return safe_regex_test(rule.value, value)
        case _:
            return False


def require_array_input(data: Any, operator_name: str) -> list[Any]:
    if not isinstance(data, list):
        raise OperatorExecutionError(
            f"{operator_name} operator requires array input, received {describe_type(data)}. "
            "Make sure the upstream operator outputs an array of items."
        )
    return data


class FilterOperator(Operator[FilterConfig]):
    """Filter items by rules (permit/block mode with any/all matching)."""

    type = "filter"
    category = OperatorCategory.OPERATORS
    description = "Filter items by rules (Permit/Block mode with any/all matching)"
    config_model = FilterConfig

    def run(self, data: Any, config: FilterConfig, context: ExecutionContext) -> Any:
        items = require_array_input(data, "Filter")
        if not config.rules:
            return items

        def matches(item: Any) -> bool:
            if config.match_mode == "any":
                return any(evaluate_rule(item, rule) for rule in config.rules)
            return all(evaluate_rule(item, rule) for rule in config.rules)

        keep_matching = config.mode == "permit"
        return [item for item in items if matches(item) == keep_matching]
