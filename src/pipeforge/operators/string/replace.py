# src/pipeforge/operators/string/replace.py
"""String-replace operator: literal search and replace in one field."""

from __future__ import annotations

from typing import Any

from pydantic import field_validator

from pipeforge.contracts.context import ExecutionContext
from pipeforge.contracts.enums import OperatorCategory
from pipeforge.operators.base import Operator
from pipeforge.operators.config_base import (
    OperatorConfig,
    is_absent,
    optional_bool,
    require_string,
    required_field,
)
from pipeforge.operators.utils import map_items, replace_string_field


def _literal_string(value: Any, required: str, wrong_type: str) -> str:
    # Empty strings are valid here: replacing with "" deletes the match.
    if is_absent(value):
        raise ValueError(required)
    if not isinstance(value, str):
        raise ValueError(wrong_type)
    return value


class StringReplaceConfig(OperatorConfig):
    field: str = required_field()
    search: str = required_field()
    replace: str = required_field()
    all: bool = True

    @field_validator("field", mode="before")
    @classmethod
    def check_field(cls, v: Any) -> str:
        return require_string(v, "Field is required", "Field must be a string")

    @field_validator("search", mode="before")
    @classmethod
    def check_search(cls, v: Any) -> str:
        return _literal_string(v, "Search string is required", "Search must be a string")

    @field_validator("replace", mode="before")
    @classmethod
    def check_replace(cls, v: Any) -> str:
        return _literal_string(v, "Replace string is required", "Replace must be a string")

    @field_validator("all", mode="before")
    @classmethod
    def check_all(cls, v: Any) -> bool:
        parsed = optional_bool(v, "All must be a boolean")
        return True if parsed is None else parsed


def replace_literal(text: str, search: str, replacement: str, *, replace_all: bool) -> str:
    """Replace occurrences of search in text.

    An empty search string matches between characters: replacing all puts
    the replacement between each pair of characters (not at the ends), and
    replacing the first only puts it at the start.

    Examples:
        >>> replace_literal("abc", "", "-", replace_all=True)
        'a-b-c'
        >>> replace_literal("abc", "", "-", replace_all=False)
        '-abc'
    """
    if not search and replace_all:
        return replacement.join(text)
    return text.replace(search, replacement, -1 if replace_all else 1)


class StringReplaceOperator(Operator[StringReplaceConfig]):
    type = "string-replace"
    category = OperatorCategory.STRING
    description = "Find and replace text in a field"
    config_model = StringReplaceConfig

    def run(self, data: Any, config: StringReplaceConfig, context: ExecutionContext) -> Any:
        def _apply(text: str) -> str:
            return replace_literal(text, config.search, config.replace, replace_all=config.all)

        return map_items(data, lambda item: replace_string_field(item, config.field, _apply))
