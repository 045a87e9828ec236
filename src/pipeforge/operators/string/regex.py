# src/pipeforge/operators/string/regex.py
"""Regex operator: extract or replace with a user-supplied pattern.

Patterns and flags use the JavaScript conventions the editor exposes:
flags from "gimsuy", named groups as (?<name>...), and replacement
references $1, $& and $<name>. Every pattern passes the ReDoS guard
before it is compiled.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import ValidationInfo, field_validator, model_validator

from pipeforge.contracts.context import ExecutionContext
from pipeforge.contracts.enums import OperatorCategory
from pipeforge.contracts.errors import SecurityError
from pipeforge.core.security.regex import CompiledRegex, create_safe_regex, validate_regex_pattern_with_flags
from pipeforge.operators.base import Operator
from pipeforge.operators.config_base import (
    OperatorConfig,
    is_absent,
    is_blank,
    is_number,
    optional_string,
    presence_field,
    require_string,
    required_field,
)
from pipeforge.operators.sentinels import MISSING
from pipeforge.operators.utils import map_items, replace_string_field


class RegexConfig(OperatorConfig):
    field: str = required_field()
    pattern: str = required_field()
    mode: Literal["extract", "replace"] = required_field()
    replacement: Any = presence_field()
    flags: str | None = None
    group: int | float = 0

    @field_validator("field", mode="before")
    @classmethod
    def check_field(cls, v: Any) -> str:
        return require_string(v, "Field is required", "Field must be a string")

    @field_validator("pattern", mode="before")
    @classmethod
    def check_pattern(cls, v: Any) -> str:
        return require_string(v, "Pattern is required", "Pattern must be a string")

    @field_validator("mode", mode="before")
    @classmethod
    def check_mode(cls, v: Any) -> str:
        if is_blank(v):
            raise ValueError("Mode is required")
        if v not in ("extract", "replace"):
            raise ValueError('Mode must be "extract" or "replace"')
        return str(v)

    @field_validator("replacement", mode="before")
    @classmethod
    def check_replacement(cls, v: Any, info: ValidationInfo) -> Any:
        if info.data.get("mode") != "replace":
            return None if v is MISSING else v
        if v is MISSING:
            raise ValueError("Replacement is required for replace mode")
        if not isinstance(v, str):
            raise ValueError("Replacement must be a string")
        return v

    @field_validator("flags", mode="before")
    @classmethod
    def check_flags(cls, v: Any) -> str | None:
        return optional_string(v, "Flags must be a string")

    @field_validator("group", mode="before")
    @classmethod
    def check_group(cls, v: Any) -> int | float:
        if is_absent(v):
            return 0
        if not is_number(v):
            raise ValueError("Group must be a number")
        if v < 0:
            raise ValueError("Group must be non-negative")
        return v

    @model_validator(mode="after")
    def check_regex(self) -> RegexConfig:
        result = validate_regex_pattern_with_flags(self.pattern, self.flags)
        if not result.valid:
            raise ValueError(result.error)
        return self


def extract_match(regex: CompiledRegex, text: str, group: int | float) -> str | None:
    """Return the requested group of the first match, or None.

    With the "g" flag the candidates are all full matches instead of the
    groups of the first one, so group=1 picks the second match.
    """
    if not float(group).is_integer():
        return None
    index = int(group)

    if regex.global_:
        candidates: list[str | None] = [m.group(0) for m in regex.pattern.finditer(text)]
    else:
        match = regex.search(text)
        if match is None:
            return None
        candidates = [match.group(0), *match.groups()]

    if index >= len(candidates):
        return None
    return candidates[index]


class RegexOperator(Operator[RegexConfig]):
    type = "regex"
    category = OperatorCategory.STRING
    description = "Extract or replace text using regular expressions"
    config_model = RegexConfig

    def run(self, data: Any, config: RegexConfig, context: ExecutionContext) -> Any:
        if data is None:
            return None

        regex = create_safe_regex(config.pattern, config.flags)
        if regex is None:
            result = validate_regex_pattern_with_flags(config.pattern, config.flags)
            raise SecurityError(result.error or "Invalid regex pattern")

        if config.mode == "extract":

            def _apply(text: str) -> str | None:
                return extract_match(regex, text, config.group)

        else:
            replacement = config.replacement or ""

            def _apply(text: str) -> str | None:
                return regex.replace(replacement, text)

        return map_items(data, lambda item: replace_string_field(item, config.field, _apply))
