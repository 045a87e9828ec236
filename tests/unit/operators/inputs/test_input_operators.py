# tests/unit/operators/inputs/test_input_operators.py
"""Tests for the user-input operators."""

from __future__ import annotations

from typing import Any

import pytest

from pipeforge.contracts.context import ExecutionContext
from pipeforge.contracts.enums import SchemaFieldType, SchemaRootType
from pipeforge.contracts.errors import OperatorExecutionError
from pipeforge.operators.inputs.base import lookup_user_input
from pipeforge.operators.inputs.date import DateInputOperator
from pipeforge.operators.inputs.number import NumberInputOperator, parse_float_prefix
from pipeforge.operators.inputs.text import TextInputOperator
from pipeforge.operators.inputs.url import URLInputOperator, is_http_url


def _ctx(node_id: str = "in-1", **inputs: Any) -> ExecutionContext:
    return ExecutionContext(node_id=node_id).with_user_inputs(inputs)


class TestValueResolution:
    def test_node_id_wins_over_label(self) -> None:
        assert lookup_user_input({"in-1": "by id", "Term": "by label"}, "in-1", "Term") == "by id"

    def test_label_fallback(self) -> None:
        assert lookup_user_input({"Term": "by label"}, "in-1", "Term") == "by label"

    def test_none_values_ignored(self) -> None:
        assert lookup_user_input({"in-1": None}, "in-1", "Term") is None

    def test_default_used_when_nothing_supplied(self) -> None:
        config = {"label": "Term", "defaultValue": "cats"}
        assert TextInputOperator().execute(None, config, _ctx()) == "cats"

    def test_supplied_value_beats_default(self) -> None:
        config = {"label": "Term", "defaultValue": "cats"}
        assert TextInputOperator().execute(None, config, _ctx(**{"in-1": "dogs"})) == "dogs"

    def test_upstream_data_ignored(self) -> None:
        assert TextInputOperator().execute([1, 2, 3], {"label": "Term"}, _ctx()) == ""


class TestTextInput:
    def test_required_missing(self) -> None:
        with pytest.raises(OperatorExecutionError, match='^Text input "Term" is required$'):
            TextInputOperator().execute(None, {"label": "Term", "required": True}, _ctx())

    def test_required_whitespace_only(self) -> None:
        with pytest.raises(OperatorExecutionError, match="is required"):
            TextInputOperator().execute(None, {"label": "Term", "required": True}, _ctx(Term="   "))

    def test_non_string_value_stringified(self) -> None:
        assert TextInputOperator().execute(None, {"label": "Term"}, _ctx(Term=True)) == "true"

    def test_missing_required_preflight(self) -> None:
        op = TextInputOperator()
        assert op.missing_required({"label": "Term", "required": True}, None) == 'Text input "Term" is required'
        assert op.missing_required({"label": "Term", "required": True}, "x") is None
        assert op.missing_required({"label": "Term"}, None) is None

    @pytest.mark.parametrize(
        ("config", "message"),
        [
            ({}, "Label is required"),
            ({"label": 4}, "Label must be a string"),
            ({"label": "T", "required": "yes"}, "Required must be a boolean"),
            ({"label": "T", "placeholder": 1}, "Placeholder must be a string"),
            ({"label": "T", "defaultValue": 1}, "Default value must be a string"),
        ],
    )
    def test_validation(self, config: dict[str, Any], message: str) -> None:
        assert TextInputOperator().validate(config).error == message


class TestNumberInput:
    def test_numeric_string(self) -> None:
        assert NumberInputOperator().execute(None, {"label": "N"}, _ctx(N="42")) == 42

    def test_numeric_prefix(self) -> None:
        assert NumberInputOperator().execute(None, {"label": "N"}, _ctx(N="12.5kg")) == 12.5

    def test_empty_is_zero(self) -> None:
        assert NumberInputOperator().execute(None, {"label": "N"}, _ctx()) == 0

    def test_not_a_number(self) -> None:
        with pytest.raises(OperatorExecutionError, match='^Number input "N" must be a valid number$'):
            NumberInputOperator().execute(None, {"label": "N"}, _ctx(N="abc"))

    def test_bounds(self) -> None:
        config = {"label": "N", "min": 1, "max": 10}
        with pytest.raises(OperatorExecutionError, match='^Number input "N" must be at least 1$'):
            NumberInputOperator().execute(None, config, _ctx(N=0.5))
        with pytest.raises(OperatorExecutionError, match='^Number input "N" must be at most 10$'):
            NumberInputOperator().execute(None, config, _ctx(N="11"))
        assert NumberInputOperator().execute(None, config, _ctx(N=10)) == 10

    def test_numeric_default(self) -> None:
        assert NumberInputOperator().execute(None, {"label": "N", "defaultValue": 7}, _ctx()) == 7

    @pytest.mark.parametrize(
        ("config", "message"),
        [
            ({"label": "N", "min": "1"}, "Min must be a valid number"),
            ({"label": "N", "max": "x"}, "Max must be a valid number"),
            ({"label": "N", "min": 5, "max": 1}, "Min cannot be greater than max"),
            ({"label": "N", "step": 0}, "Step must be a positive number"),
            ({"label": "N", "defaultValue": "abc"}, "Default value must be a valid number"),
        ],
    )
    def test_validation(self, config: dict[str, Any], message: str) -> None:
        assert NumberInputOperator().validate(config).error == message

    def test_schema_is_number(self) -> None:
        schema = NumberInputOperator().get_output_schema()
        assert schema is not None
        assert schema.root_type == SchemaRootType.OBJECT
        assert schema.fields[0].type == SchemaFieldType.NUMBER

    def test_parse_float_prefix(self) -> None:
        assert parse_float_prefix("  -3e2 apples") == -300.0
        assert parse_float_prefix("px12") is None


class TestURLInput:
    def test_public_url_trimmed(self) -> None:
        assert URLInputOperator().execute(None, {"label": "Feed"}, _ctx(Feed=" https://example.com/rss ")) == (
            "https://example.com/rss"
        )

    def test_invalid_format(self) -> None:
        with pytest.raises(OperatorExecutionError, match='^URL input "Feed" has invalid URL format$'):
            URLInputOperator().execute(None, {"label": "Feed"}, _ctx(Feed="ftp://example.com"))

    @pytest.mark.parametrize("url", ["http://localhost:8080/", "http://127.0.0.1/", "http://192.168.1.20/x"])
    def test_private_hosts_rejected(self, url: str) -> None:
        with pytest.raises(OperatorExecutionError, match="localhost and private IPs are not allowed"):
            URLInputOperator().execute(None, {"label": "Feed"}, _ctx(Feed=url))

    def test_empty_optional(self) -> None:
        assert URLInputOperator().execute(None, {"label": "Feed"}, _ctx()) == ""

    @pytest.mark.parametrize(
        ("default", "message"),
        [
            ("not a url", "Default value must be a valid URL"),
            ("http://10.0.0.1/", "Default value cannot be localhost or private IP"),
            (5, "Default value must be a string"),
        ],
    )
    def test_default_validation(self, default: Any, message: str) -> None:
        assert URLInputOperator().validate({"label": "Feed", "defaultValue": default}).error == message

    @pytest.mark.parametrize(
        ("value", "expected"),
        [("https://a.io", True), ("HTTP://a.io/x", True), ("mailto:x@a.io", False), ("https://", False)],
    )
    def test_is_http_url(self, value: str, expected: bool) -> None:
        assert is_http_url(value) is expected


class TestDateInput:
    def test_normalized_to_iso(self) -> None:
        assert DateInputOperator().execute(None, {"label": "Since"}, _ctx(Since="2024-06-01")) == (
            "2024-06-01T00:00:00.000Z"
        )

    def test_offset_converted_to_utc(self) -> None:
        result = DateInputOperator().execute(None, {"label": "Since"}, _ctx(Since="2024-06-01T12:00:00+02:00"))
        assert result == "2024-06-01T10:00:00.000Z"

    def test_invalid_date(self) -> None:
        with pytest.raises(OperatorExecutionError, match='^Date input "Since" has invalid date format$'):
            DateInputOperator().execute(None, {"label": "Since"}, _ctx(Since="someday"))

    def test_range(self) -> None:
        config = {"label": "Since", "minDate": "2024-01-01", "maxDate": "2024-12-31"}
        with pytest.raises(OperatorExecutionError, match="must be on or after 2024-01-01"):
            DateInputOperator().execute(None, config, _ctx(Since="2023-12-31"))
        with pytest.raises(OperatorExecutionError, match="must be on or before 2024-12-31"):
            DateInputOperator().execute(None, config, _ctx(Since="2025-01-01"))

    @pytest.mark.parametrize(
        ("config", "message"),
        [
            ({"label": "D", "minDate": "nope"}, "Min date must be a valid date"),
            ({"label": "D", "maxDate": 3}, "Max date must be a string"),
            ({"label": "D", "minDate": "2024-02-01", "maxDate": "2024-01-01"}, "Min date cannot be after max date"),
            ({"label": "D", "defaultValue": "31/31/2024"}, "Default value must be a valid date"),
        ],
    )
    def test_validation(self, config: dict[str, Any], message: str) -> None:
        assert DateInputOperator().validate(config).error == message

    def test_schema_is_date(self) -> None:
        schema = DateInputOperator().get_output_schema()
        assert schema is not None
        assert schema.fields[0].type == SchemaFieldType.DATE
