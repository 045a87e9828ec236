# tests/unit/operators/transforms/test_comparison.py
"""Tests for loose comparison rules shared by filter and sort."""

from __future__ import annotations

from typing import Any

import pytest

from pipeforge.operators.transforms.comparison import (
    coerce_number,
    compare_loose,
    compare_sortable,
    display_string,
    loose_equals,
)


@pytest.mark.parametrize(
    ("a", "b", "equal"),
    [
        ("1", 1, True),
        ("1.0", 1, True),
        ("true", True, True),
        ("false", False, True),
        ("abc", "ABC", False),
        (None, None, True),
        (None, 0, False),
        ("", 0, True),
        ([1], [1], True),
        ("1", "01", True),
    ],
)
def test_loose_equals(a: Any, b: Any, equal: bool) -> None:
    assert loose_equals(a, b) is equal


@pytest.mark.parametrize(
    ("a", "b", "sign"),
    [
        (None, 0, -1),
        (1, None, 1),
        (2, 10, -1),
        ("10", 9, 1),
        ("b", "a", 1),
        ("10", "9", -1),
        ("abc", 18, 1),
        ("", 18, -1),
    ],
)
def test_compare_loose(a: Any, b: Any, sign: int) -> None:
    assert compare_loose(a, b) == sign


def test_compare_sortable_numeric_strings() -> None:
    assert compare_sortable("10", "9") == 1


def test_compare_sortable_dates() -> None:
    assert compare_sortable("2024-02-01", "2024-01-31") == 1


def test_compare_sortable_booleans() -> None:
    assert compare_sortable(False, True) == -1


@pytest.mark.parametrize(("value", "number"), [(True, 1.0), (" 2.5 ", 2.5), ("", 0.0), ("1e3", 1000.0), ("abc", None)])
def test_coerce_number(value: Any, number: float | None) -> None:
    assert coerce_number(value) == number


@pytest.mark.parametrize(("value", "text"), [(True, "true"), (3.0, "3"), (2.5, "2.5"), (None, "null")])
def test_display_string(value: Any, text: str) -> None:
    assert display_string(value) == text
