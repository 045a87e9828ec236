# tests/unit/operators/sources/test_fetch_csv.py
"""Tests for fetch-csv and CSV parsing."""

from __future__ import annotations

import httpx
import pytest
import respx

from pipeforge.contracts.context import ExecutionContext
from pipeforge.contracts.errors import FetchError
from pipeforge.operators.sources.fetch_csv import FetchCSVOperator, cast_cell, parse_csv

URL = "https://api.example.com/data.csv"


class TestParseCSV:
    def test_header_row_and_typed_cells(self) -> None:
        text = "name,age,active,note\nAda,36,true,\nAlan,41.5,FALSE,hi\n"
        assert parse_csv(text) == [
            {"name": "Ada", "age": 36, "active": True, "note": None},
            {"name": "Alan", "age": 41.5, "active": False, "note": "hi"},
        ]

    def test_quoted_cells(self) -> None:
        assert parse_csv('a,b\n"x, y","say ""hi"""\n') == [{"a": "x, y", "b": 'say "hi"'}]

    def test_without_header(self) -> None:
        assert parse_csv("1,2\n3,4", has_header=False) == [
            {"column_0": 1, "column_1": 2},
            {"column_0": 3, "column_1": 4},
        ]

    def test_custom_delimiter(self) -> None:
        assert parse_csv("a;b\n1;2", delimiter=";") == [{"a": 1, "b": 2}]

    def test_ragged_rows(self) -> None:
        assert parse_csv("a,b,c\n1\n1,2,3,4") == [{"a": 1}, {"a": 1, "b": 2, "c": 3}]

    def test_blank_lines_skipped(self) -> None:
        assert parse_csv("a\n\n1\n\n") == [{"a": 1}]

    def test_empty_text(self) -> None:
        assert parse_csv("") == []

    @pytest.mark.parametrize(
        ("cell", "value"),
        [("007", 7), ("-1.5e2", -150), (" 12 ", 12), ("True", True), ("NaN", "NaN"), ("12px", "12px")],
    )
    def test_cast_cell(self, cell: str, value: object) -> None:
        assert cast_cell(cell) == value


class TestFetchCSV:
    @respx.mock
    def test_fetch(self, ctx: ExecutionContext) -> None:
        route = respx.get(URL).mock(return_value=httpx.Response(200, text="id,title\n1,First\n2,Second\n"))

        result = FetchCSVOperator().execute(None, {"url": URL}, ctx)

        assert result == [{"id": 1, "title": "First"}, {"id": 2, "title": "Second"}]
        assert route.calls.last.request.headers["Accept"] == "text/csv, text/plain, */*"

    @respx.mock
    def test_has_header_false(self, ctx: ExecutionContext) -> None:
        respx.get(URL).mock(return_value=httpx.Response(200, text="1,First\n"))

        assert FetchCSVOperator().execute(None, {"url": URL, "hasHeader": False}, ctx) == [
            {"column_0": 1, "column_1": "First"}
        ]

    @respx.mock
    def test_unterminated_quote(self, ctx: ExecutionContext) -> None:
        respx.get(URL).mock(return_value=httpx.Response(200, text='a,b\n"open,1\n'))

        with pytest.raises(FetchError, match="^CSV parsing failed: "):
            FetchCSVOperator().execute(None, {"url": URL}, ctx)

    @respx.mock
    def test_not_found(self, ctx: ExecutionContext) -> None:
        respx.get(URL).mock(return_value=httpx.Response(404))

        with pytest.raises(FetchError, match=r"^The URL returned HTTP 404 \(Not Found\)\. Resource does not exist\.$"):
            FetchCSVOperator().execute(None, {"url": URL}, ctx)

    @respx.mock
    def test_forbidden(self, ctx: ExecutionContext) -> None:
        respx.get(URL).mock(return_value=httpx.Response(403))

        with pytest.raises(FetchError, match=r"^The URL returned HTTP 403 \(Forbidden\)\. Access denied\.$"):
            FetchCSVOperator().execute(None, {"url": URL}, ctx)


def test_delimiter_validation() -> None:
    assert FetchCSVOperator().validate({"url": URL, "delimiter": 1}).error == "Delimiter must be a string"


def test_multi_character_delimiter_fails_at_parse(ctx: ExecutionContext) -> None:
    with respx.mock:
        respx.get(URL).mock(return_value=httpx.Response(200, text="a::b\n1::2"))
        with pytest.raises(FetchError, match="^CSV parsing failed: "):
            FetchCSVOperator().execute(None, {"url": URL, "delimiter": "::"}, ctx)
