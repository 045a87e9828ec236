"""Date user input, normalized to an ISO 8601 UTC timestamp."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import Field, ValidationInfo, field_validator

from pipeforge.contracts.enums import SchemaFieldType
from pipeforge.core.dates import parse_date_string, parse_iso_datetime, to_iso_string
from pipeforge.operators.config_base import is_absent
from pipeforge.operators.inputs.base import InputConfig, InputOperator
from pipeforge.operators.transforms.comparison import display_string


def parse_date_input(value: str) -> datetime | None:
    text = value.strip()
    return parse_iso_datetime(text) or parse_date_string(text)


def _check_date(v: Any, subject: str) -> str | None:
    if is_absent(v):
        return None
    if not isinstance(v, str):
        raise ValueError(f"{subject} must be a string")
    if v.strip() and parse_date_input(v) is None:
        raise ValueError(f"{subject} must be a valid date")
    return v or None


class DateInputConfig(InputConfig):
    min_date: str | None = Field(default=None, alias="minDate")
    max_date: str | None = Field(default=None, alias="maxDate")

    @field_validator("default_value", mode="before")
    @classmethod
    def check_default(cls, v: Any) -> str | None:
        if v is None:
            return None
        if not isinstance(v, str):
            raise ValueError("Default value must be a string")
        if v.strip() and parse_date_input(v) is None:
            raise ValueError("Default value must be a valid date")
        return v

    @field_validator("min_date", mode="before")
    @classmethod
    def check_min_date(cls, v: Any) -> str | None:
        return _check_date(v, "Min date")

    @field_validator("max_date", mode="before")
    @classmethod
    def check_max_date(cls, v: Any, info: ValidationInfo) -> str | None:
        value = _check_date(v, "Max date")
        low = info.data.get("min_date")
        if value and low:
            low_date, high_date = parse_date_input(low), parse_date_input(value)
            if low_date and high_date and low_date > high_date:
                raise ValueError("Min date cannot be after max date")
        return value


class DateInputOperator(InputOperator[DateInputConfig]):
    type = "date-input"
    description = "A date picked by the person running the pipe"
    config_model = DateInputConfig
    kind = "Date"
    value_type = SchemaFieldType.DATE

    @property
    def sample(self) -> str:  # type: ignore[override]
        return to_iso_string(datetime.now().astimezone())

    def coerce(self, value: Any, config: DateInputConfig) -> str:
        if value is None or (isinstance(value, str) and not value.strip()):
            return ""
        parsed = parse_date_input(value if isinstance(value, str) else display_string(value))
        if parsed is None:
            raise self.fail(config, "has invalid date format")
        if config.min_date and parsed < parse_date_input(config.min_date):  # type: ignore[operator]
            raise self.fail(config, f"must be on or after {config.min_date}")
        if config.max_date and parsed > parse_date_input(config.max_date):  # type: ignore[operator]
            raise self.fail(config, f"must be on or before {config.max_date}")
        return to_iso_string(parsed)
