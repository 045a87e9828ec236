"""fetch-csv: GET a CSV file and return one object per row."""

from __future__ import annotations

import csv
import io
import re
from typing import Any

import httpx
from pydantic import Field, field_validator

from pipeforge.contracts.errors import FetchError
from pipeforge.contracts.schema import ExtractedSchema
from pipeforge.operators.config_base import is_absent
from pipeforge.operators.sources.http import FetchConfig, FetchOperatorBase

_NUMERIC = re.compile(r"^\s*[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?\s*$")


def cast_cell(value: str) -> Any:
    """Type a CSV cell: '' -> None, numbers, true/false, else the string.

    Examples:
        >>> cast_cell("42"), cast_cell("3.5"), cast_cell("TRUE"), cast_cell("")
        (42, 3.5, True, None)
    """
    if value == "":
        return None
    if _NUMERIC.match(value):
        number = float(value)
        return int(number) if number.is_integer() else number
    lowered = value.lower()
    if lowered == "true":
        return True
    if lowered == "false":
        return False
    return value


def parse_csv(text: str, delimiter: str = ",", has_header: bool = True) -> list[dict[str, Any]]:
    """Parse CSV text into row dicts.

    Blank lines are skipped and rows may have more or fewer cells than the
    header: missing cells are omitted, extra cells are dropped. Without a
    header, keys are column_0, column_1, ...
    """
    rows = [row for row in csv.reader(io.StringIO(text), delimiter=delimiter, strict=True) if any(row)]
    if not has_header:
        return [{f"column_{i}": cast_cell(cell) for i, cell in enumerate(row)} for row in rows]
    if not rows:
        return []
    header, *body = rows
    return [{key: cast_cell(cell) for key, cell in zip(header, row, strict=False)} for row in body]


class FetchCSVConfig(FetchConfig):
    delimiter: str = ","
    has_header: bool = Field(default=True, alias="hasHeader")

    @field_validator("delimiter", mode="before")
    @classmethod
    def check_delimiter(cls, v: Any) -> str:
        if is_absent(v) or v == "":
            return ","
        if not isinstance(v, str):
            raise ValueError("Delimiter must be a string")
        return v

    @field_validator("has_header", mode="before")
    @classmethod
    def check_has_header(cls, v: Any) -> bool:
        # Only an explicit false turns the header row off.
        return v is not False


class FetchCSVOperator(FetchOperatorBase[FetchCSVConfig]):
    type = "fetch-csv"
    description = "Fetch and parse CSV data into JSON array"
    config_model = FetchCSVConfig
    accept = "text/csv, text/plain, */*"
    failure_prefix = "Fetch CSV failed"

    def parse_response(self, response: httpx.Response, config: FetchCSVConfig) -> list[dict[str, Any]]:
        try:
            return parse_csv(response.text, config.delimiter, config.has_header)
        except (csv.Error, TypeError) as e:
            raise FetchError(f"CSV parsing failed: {e}") from e

    def get_output_schema(
        self,
        input_schema: ExtractedSchema | None = None,
        config: Any = None,
    ) -> ExtractedSchema | None:
        return None
