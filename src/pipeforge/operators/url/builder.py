# src/pipeforge/operators/url/builder.py
"""URL-builder operator: base URL plus query parameters.

Parameter values are either literal (value) or taken from a user input
by label (fromInput), so a pipe can build an API URL from what the person
running it typed:

    {"baseUrl": "https://api.github.com/search/repositories",
     "params": [{"key": "q", "fromInput": "Search term", "value": "python"}]}
"""

from __future__ import annotations

import urllib.parse
from collections.abc import Mapping
from typing import Any

from pydantic import Field, field_validator, model_validator

from pipeforge.contracts.context import ExecutionContext
from pipeforge.contracts.enums import OperatorCategory, SchemaFieldType, SchemaRootType
from pipeforge.contracts.schema import ExtractedSchema, SchemaField
from pipeforge.operators.base import Operator
from pipeforge.operators.config_base import (
    EntryConfig,
    OperatorConfig,
    is_absent,
    is_blank,
    presence_field,
    require_string,
    required_field,
)
from pipeforge.operators.sentinels import MISSING
from pipeforge.operators.transforms.comparison import display_string


def is_absolute_url(value: str) -> bool:
    """Whether value parses as an absolute URL with a scheme."""
    try:
        parts = urllib.parse.urlsplit(value)
    except ValueError:
        return False
    if not parts.scheme:
        return False
    # Hierarchical schemes need a host; mailto: and friends do not.
    if parts.scheme in ("http", "https", "ftp", "ws", "wss") and not parts.netloc:
        return False
    return " " not in value.strip()


class QueryParam(EntryConfig):
    key: str = required_field()
    value: Any = presence_field()
    from_input: str | None = Field(default=None, alias="fromInput")

    @model_validator(mode="before")
    @classmethod
    def require_object(cls, data: Any) -> Any:
        if not isinstance(data, Mapping):
            raise ValueError("Param at index {index} must be an object")
        if is_blank(data.get("key")):
            raise ValueError("Param at index {index} is missing key")
        if not isinstance(data.get("key"), str):
            raise ValueError("Param key at index {index} must be a string")
        if "value" not in data and is_blank(data.get("fromInput")):
            raise ValueError("Param at index {index} must have either value or fromInput")
        return data

    @field_validator("value", mode="before")
    @classmethod
    def check_value(cls, v: Any) -> Any:
        if v is MISSING:
            return None
        if not isinstance(v, str):
            raise ValueError("Param value at index {index} must be a string")
        return v

    @field_validator("from_input", mode="before")
    @classmethod
    def check_from_input(cls, v: Any) -> str | None:
        if is_absent(v):
            return None
        if not isinstance(v, str):
            raise ValueError("Param fromInput at index {index} must be a string")
        return v


class URLBuilderConfig(OperatorConfig):
    base_url: str = required_field(alias="baseUrl")
    params: list[QueryParam] = Field(default_factory=list)

    @field_validator("base_url", mode="before")
    @classmethod
    def check_base_url(cls, v: Any) -> str:
        url = require_string(v, "Base URL is required", "Base URL must be a string")
        if not is_absolute_url(url):
            raise ValueError("Base URL must be a valid URL")
        return url

    @field_validator("params", mode="before")
    @classmethod
    def check_params(cls, v: Any) -> list[Any]:
        if is_absent(v):
            return []
        if not isinstance(v, list):
            raise ValueError("Params must be an array")
        return v


def build_url(config: URLBuilderConfig, user_inputs: Mapping[str, Any]) -> str:
    """Append the configured query parameters to the base URL, in order.

    Existing query parameters on the base URL are kept, and a bare host
    gets a trailing slash ("https://example.com" -> "https://example.com/").
    """
    pairs: list[tuple[str, str]] = []
    for param in config.params:
        value: str = param.value or ""
        if param.from_input and user_inputs.get(param.from_input) is not None:
            value = display_string(user_inputs[param.from_input])
        pairs.append((param.key, value))

    parts = urllib.parse.urlsplit(config.base_url)
    if parts.netloc and not parts.path:
        parts = parts._replace(path="/")
    if pairs:
        query = urllib.parse.urlencode(pairs)
        parts = parts._replace(query=f"{parts.query}&{query}" if parts.query else query)
    return urllib.parse.urlunsplit(parts)


class URLBuilderOperator(Operator[URLBuilderConfig]):
    type = "url-builder"
    category = OperatorCategory.URL
    description = "Build a URL from a base and query parameters"
    config_model = URLBuilderConfig

    def run(self, data: Any, config: URLBuilderConfig, context: ExecutionContext) -> Any:
        return {"url": build_url(config, context.user_inputs), "input": data}

    def get_output_schema(
        self,
        input_schema: ExtractedSchema | None = None,
        config: Any = None,
    ) -> ExtractedSchema | None:
        return ExtractedSchema(
            fields=[
                SchemaField(name="url", path="url", type=SchemaFieldType.STRING),
                SchemaField(
                    name="input",
                    path="input",
                    type=(
                        SchemaFieldType.ARRAY
                        if input_schema is not None and input_schema.root_type == SchemaRootType.ARRAY
                        else SchemaFieldType.OBJECT
                    ),
                ),
            ],
            root_type=SchemaRootType.OBJECT,
        )
