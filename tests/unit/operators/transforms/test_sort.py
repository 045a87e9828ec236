# tests/unit/operators/transforms/test_sort.py
"""Tests for the sort operator."""

from __future__ import annotations

from typing import Any

import pytest

from pipeforge.contracts.context import ExecutionContext
from pipeforge.contracts.errors import OperatorExecutionError
from pipeforge.operators.transforms.sort import SortOperator


def _sort(items: Any, field: str = "v", direction: str = "asc") -> Any:
    return SortOperator().execute(items, {"field": field, "direction": direction}, ExecutionContext())


def _values(items: list[dict[str, Any]], field: str = "v") -> list[Any]:
    return [item.get(field) for item in items]


def test_numbers_ascending_and_descending() -> None:
    items = [{"v": 3}, {"v": 1}, {"v": 2}]
    assert _values(_sort(items)) == [1, 2, 3]
    assert _values(_sort(items, direction="desc")) == [3, 2, 1]


def test_numeric_strings_sort_numerically() -> None:
    assert _values(_sort([{"v": "10"}, {"v": "9"}, {"v": "100"}])) == ["9", "10", "100"]


def test_dates_sort_chronologically() -> None:
    items = [
        {"v": "Tue, 02 Jan 2024 09:00:00 GMT"},
        {"v": "Mon, 01 Jan 2024 09:00:00 GMT"},
        {"v": "Wed, 03 Jan 2024 09:00:00 GMT"},
    ]
    assert [v[:3] for v in _values(_sort(items, direction="desc"))] == ["Wed", "Tue", "Mon"]


def test_text_sorts_case_insensitively() -> None:
    assert _values(_sort([{"v": "banana"}, {"v": "Apple"}, {"v": "cherry"}])) == ["Apple", "banana", "cherry"]


def test_missing_and_null_values_go_last_in_input_order() -> None:
    items = [{"id": 1}, {"v": 2}, {"id": 2, "v": None}, {"v": 1}]
    result = _sort(items, direction="desc")
    assert result == [{"v": 2}, {"v": 1}, {"id": 1}, {"id": 2, "v": None}]


def test_sort_is_stable() -> None:
    items = [{"v": 1, "k": "a"}, {"v": 0, "k": "b"}, {"v": 1, "k": "c"}]
    assert [i["k"] for i in _sort(items)] == ["b", "a", "c"]


def test_nested_field() -> None:
    items = [{"meta": {"rank": 2}}, {"meta": {"rank": 1}}]
    assert _sort(items, field="meta.rank") == [{"meta": {"rank": 1}}, {"meta": {"rank": 2}}]


def test_requires_array() -> None:
    with pytest.raises(OperatorExecutionError, match="^Sort operator requires array input, received object"):
        _sort({"v": 1})


@pytest.mark.parametrize(
    ("config", "message"),
    [
        ({"direction": "asc"}, "Field is required"),
        ({"field": 1, "direction": "asc"}, "Field must be a string"),
        ({"field": "v"}, "Direction is required"),
        ({"field": "v", "direction": "up"}, 'Direction must be "asc" or "desc"'),
    ],
)
def test_validation(config: dict[str, Any], message: str) -> None:
    assert SortOperator().validate(config).error == message
