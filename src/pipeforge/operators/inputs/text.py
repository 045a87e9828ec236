"""Free-text user input."""

from __future__ import annotations

from typing import Any

from pydantic import field_validator

from pipeforge.operators.inputs.base import InputConfig, InputOperator
from pipeforge.operators.transforms.comparison import display_string


class TextInputConfig(InputConfig):
    @field_validator("default_value", mode="before")
    @classmethod
    def check_default(cls, v: Any) -> str | None:
        if v is None:
            return None
        if not isinstance(v, str):
            raise ValueError("Default value must be a string")
        return v


class TextInputOperator(InputOperator[TextInputConfig]):
    type = "text-input"
    description = "Text typed by the person running the pipe"
    config_model = TextInputConfig
    kind = "Text"

    def coerce(self, value: Any, config: TextInputConfig) -> str:
        if value is None:
            return ""
        return value if isinstance(value, str) else display_string(value)
