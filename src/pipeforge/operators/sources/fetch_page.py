"""fetch-page: GET an HTML page and extract values with a CSS selector.

Scripts never run: the page is parsed as static markup, and script and
noscript elements are removed before the selector is applied.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

import httpx
from bs4 import BeautifulSoup, Tag
from pydantic import field_validator
from soupsieve import SelectorSyntaxError

from pipeforge.contracts.enums import SchemaRootType
from pipeforge.contracts.errors import FetchError
from pipeforge.contracts.schema import ExtractedSchema
from pipeforge.operators.config_base import optional_string, require_string, required_field
from pipeforge.operators.sources.http import FetchConfig, FetchOperatorBase


def _value(element: Tag, attribute: str | None) -> str | None:
    if not attribute:
        return element.get_text().strip()
    value = element.get(attribute)
    if value is None:
        return None
    # Multi-valued attributes such as class come back as lists.
    return " ".join(value) if isinstance(value, list) else str(value)


def extract_from_html(html: str, selector: str, attribute: str | None = None, multiple: bool = True) -> str | list[str]:
    """Apply selector to html.

    Returns:
        With multiple, every match's value (matches lacking the attribute
        are skipped). Otherwise the first match's value, or '' if none.
    """
    soup = BeautifulSoup(html, "html.parser")
    for tag in soup.find_all(["script", "noscript"]):
        tag.decompose()

    if multiple:
        values = (_value(el, attribute) for el in soup.select(selector))
        return [v for v in values if v is not None]
    first = soup.select_one(selector)
    if first is None:
        return ""
    return _value(first, attribute) or ""


class FetchPageConfig(FetchConfig):
    selector: str = required_field()
    attribute: str | None = None
    multiple: bool = True

    @field_validator("selector", mode="before")
    @classmethod
    def check_selector(cls, v: Any) -> str:
        return require_string(v, "CSS selector is required", "CSS selector must be a string")

    @field_validator("attribute", mode="before")
    @classmethod
    def check_attribute(cls, v: Any) -> str | None:
        return optional_string(v, "Attribute must be a string") or None

    @field_validator("multiple", mode="before")
    @classmethod
    def check_multiple(cls, v: Any) -> bool:
        return v is not False


class FetchPageOperator(FetchOperatorBase[FetchPageConfig]):
    type = "fetch-page"
    description = "Fetch HTML and extract data with CSS selectors"
    config_model = FetchPageConfig
    accept = "text/html, application/xhtml+xml, */*"
    failure_prefix = "Fetch page failed"
    not_found = "Page does not exist."

    def parse_response(self, response: httpx.Response, config: FetchPageConfig) -> str | list[str]:
        try:
            return extract_from_html(response.text, config.selector, config.attribute, config.multiple)
        except SelectorSyntaxError as e:
            raise FetchError(f"{self.failure_prefix}: {e}") from e

    def get_output_schema(
        self,
        input_schema: ExtractedSchema | None = None,
        config: Any = None,
    ) -> ExtractedSchema | None:
        multiple = not (isinstance(config, Mapping) and config.get("multiple") is False)
        return ExtractedSchema(fields=[], root_type=SchemaRootType.ARRAY if multiple else SchemaRootType.OBJECT)
