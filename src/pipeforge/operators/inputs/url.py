"""URL user input, restricted to public http(s) addresses."""

from __future__ import annotations

import urllib.parse
from typing import Any

from pydantic import field_validator

from pipeforge.contracts.errors import OperatorExecutionError
from pipeforge.core.security.web import is_private_host
from pipeforge.operators.inputs.base import InputConfig, InputOperator


def is_http_url(value: str) -> bool:
    """http(s) scheme and a host; nothing else counts as a URL here."""
    try:
        parts = urllib.parse.urlsplit(value.strip())
        host = parts.hostname
    except ValueError:
        return False
    return parts.scheme.lower() in ("http", "https") and bool(host)


def _host(value: str) -> str:
    return urllib.parse.urlsplit(value.strip()).hostname or ""


class URLInputConfig(InputConfig):
    @field_validator("default_value", mode="before")
    @classmethod
    def check_default(cls, v: Any) -> str | None:
        if v is None:
            return None
        if not isinstance(v, str):
            raise ValueError("Default value must be a string")
        if not v.strip():
            return v
        if not is_http_url(v):
            raise ValueError("Default value must be a valid URL")
        if is_private_host(_host(v)):
            raise ValueError("Default value cannot be localhost or private IP")
        return v


class URLInputOperator(InputOperator[URLInputConfig]):
    type = "url-input"
    description = "A URL typed by the person running the pipe"
    config_model = URLInputConfig
    kind = "URL"

    def coerce(self, value: Any, config: URLInputConfig) -> str:
        if value is None or (isinstance(value, str) and not value.strip()):
            return ""
        text = str(value).strip()
        if not is_http_url(text):
            raise self.fail(config, "has invalid URL format")
        if is_private_host(_host(text)):
            raise OperatorExecutionError(f'URL input "{config.label}": localhost and private IPs are not allowed')
        return text
