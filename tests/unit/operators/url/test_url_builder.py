# tests/unit/operators/url/test_url_builder.py
"""Tests for the URL builder."""

from __future__ import annotations

from typing import Any

import pytest

from pipeforge.contracts.context import ExecutionContext
from pipeforge.contracts.enums import SchemaFieldType, SchemaRootType
from pipeforge.contracts.schema import ExtractedSchema
from pipeforge.operators.url.builder import URLBuilderOperator, is_absolute_url


def _run(config: dict[str, Any], data: Any = None, user_inputs: dict[str, Any] | None = None) -> Any:
    return URLBuilderOperator().execute(data, config, ExecutionContext(user_inputs=user_inputs or {}))


class TestBuild:
    def test_literal_params_encoded(self) -> None:
        result = _run(
            {
                "baseUrl": "https://api.example.com/search",
                "params": [{"key": "q", "value": "hello world"}, {"key": "lang", "value": "en&fr"}],
            }
        )
        assert result == {"url": "https://api.example.com/search?q=hello+world&lang=en%26fr", "input": None}

    def test_from_input_wins_over_value(self) -> None:
        result = _run(
            {"baseUrl": "https://api.example.com/s", "params": [{"key": "q", "fromInput": "Term", "value": "x"}]},
            user_inputs={"Term": "cats"},
        )
        assert result["url"] == "https://api.example.com/s?q=cats"

    def test_missing_input_falls_back_to_value(self) -> None:
        result = _run({"baseUrl": "https://api.example.com/s", "params": [{"key": "q", "fromInput": "Term", "value": "x"}]})
        assert result["url"] == "https://api.example.com/s?q=x"

    def test_missing_input_without_value_is_empty(self) -> None:
        result = _run({"baseUrl": "https://api.example.com/s", "params": [{"key": "q", "fromInput": "Term"}]})
        assert result["url"] == "https://api.example.com/s?q="

    def test_numeric_input_stringified(self) -> None:
        result = _run(
            {"baseUrl": "https://api.example.com/s", "params": [{"key": "n", "fromInput": "Count"}]},
            user_inputs={"Count": 5.0},
        )
        assert result["url"] == "https://api.example.com/s?n=5"

    def test_existing_query_kept(self) -> None:
        result = _run({"baseUrl": "https://api.example.com/s?a=1", "params": [{"key": "b", "value": "2"}]})
        assert result["url"] == "https://api.example.com/s?a=1&b=2"

    def test_bare_host_gets_slash(self) -> None:
        assert _run({"baseUrl": "https://example.com"})["url"] == "https://example.com/"

    def test_input_passed_along(self) -> None:
        assert _run({"baseUrl": "https://example.com/x"}, data=[1, 2])["input"] == [1, 2]


@pytest.mark.parametrize(
    ("config", "message"),
    [
        ({}, "Base URL is required"),
        ({"baseUrl": 5}, "Base URL must be a string"),
        ({"baseUrl": "not a url"}, "Base URL must be a valid URL"),
        ({"baseUrl": "https://x.io", "params": {}}, "Params must be an array"),
        ({"baseUrl": "https://x.io", "params": ["q"]}, "Param at index 0 must be an object"),
        ({"baseUrl": "https://x.io", "params": [{"key": "a", "value": "1"}, {"value": "x"}]}, "Param at index 1 is missing key"),
        ({"baseUrl": "https://x.io", "params": [{"key": 3, "value": "x"}]}, "Param key at index 0 must be a string"),
        ({"baseUrl": "https://x.io", "params": [{"key": "q"}]}, "Param at index 0 must have either value or fromInput"),
        ({"baseUrl": "https://x.io", "params": [{"key": "q", "value": 1}]}, "Param value at index 0 must be a string"),
        ({"baseUrl": "https://x.io", "params": [{"key": "q", "fromInput": 1}]}, "Param fromInput at index 0 must be a string"),
    ],
)
def test_validation(config: dict[str, Any], message: str) -> None:
    assert URLBuilderOperator().validate(config).error == message


@pytest.mark.parametrize(
    ("value", "absolute"),
    [
        ("https://example.com", True),
        ("mailto:someone@example.com", True),
        ("example.com/path", False),
        ("https://", False),
        ("https://exa mple.com", False),
    ],
)
def test_is_absolute_url(value: str, absolute: bool) -> None:
    assert is_absolute_url(value) is absolute


def test_output_schema() -> None:
    schema = URLBuilderOperator().get_output_schema(ExtractedSchema(fields=[], root_type=SchemaRootType.ARRAY), {})

    assert schema is not None
    assert schema.root_type == SchemaRootType.OBJECT
    assert [(f.path, f.type) for f in schema.fields] == [("url", SchemaFieldType.STRING), ("input", SchemaFieldType.ARRAY)]
