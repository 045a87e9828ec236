# tests/unit/operators/test_config_base.py
"""Tests for typed config parsing and field-specific error messages."""

from __future__ import annotations

from typing import Any

import pytest
from pydantic import field_validator

from pipeforge.contracts.errors import OperatorConfigError
from pipeforge.operators.config_base import (
    EntryConfig,
    OperatorConfig,
    is_blank,
    require_count,
    require_string,
    required_field,
)


class _Entry(EntryConfig):
    name: str = required_field()

    @field_validator("name", mode="before")
    @classmethod
    def check_name(cls, v: Any) -> str:
        return require_string(v, "Entry {index}: name is required", "Entry {index}: name must be a string")


class _Config(OperatorConfig):
    field: str = required_field()
    entries: list[_Entry] = []

    @field_validator("field", mode="before")
    @classmethod
    def check_field(cls, v: Any) -> str:
        return require_string(v, "Field is required", "Field must be a string")


class TestFromDict:
    def test_missing_field_uses_custom_message(self) -> None:
        with pytest.raises(OperatorConfigError, match="^Field is required$"):
            _Config.from_dict({})

    def test_wrong_type(self) -> None:
        with pytest.raises(OperatorConfigError, match="^Field must be a string$"):
            _Config.from_dict({"field": 3})

    def test_non_mapping(self) -> None:
        with pytest.raises(OperatorConfigError, match="^Configuration is required$"):
            _Config.from_dict(["field"])

    def test_entry_index_substituted(self) -> None:
        with pytest.raises(OperatorConfigError, match="^Entry 1: name must be a string$"):
            _Config.from_dict({"field": "x", "entries": [{"name": "ok"}, {"name": 5}]})

    def test_top_level_error_reported_before_entry_errors(self) -> None:
        with pytest.raises(OperatorConfigError, match="^Field is required$"):
            _Config.from_dict({"entries": [{"name": 5}]})

    def test_unknown_keys_ignored(self) -> None:
        assert _Config.from_dict({"field": "x", "uiCollapsed": True}).field == "x"


@pytest.mark.parametrize(("value", "blank"), [(None, True), ("", True), (False, True), (0, True), ("0", False), (1, False)])
def test_is_blank(value: Any, blank: bool) -> None:
    assert is_blank(value) is blank


class TestRequireCount:
    @pytest.mark.parametrize(
        ("value", "message"),
        [
            (None, "Count is required"),
            ("5", "Count must be a number"),
            (True, "Count must be a number"),
            (2.5, "Count must be an integer"),
            (-1, "Count must be non-negative"),
        ],
    )
    def test_rejections(self, value: Any, message: str) -> None:
        with pytest.raises(ValueError, match=f"^{message}$"):
            require_count(value, "Count")

    def test_integral_float_accepted(self) -> None:
        assert require_count(3.0, "Count") == 3
