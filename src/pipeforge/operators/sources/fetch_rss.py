"""fetch-rss: GET an RSS 2.0, RSS 1.0 or Atom feed and normalize its items.

Every item comes out with the same four string fields, whatever the feed
format:

    {"title": ..., "link": ..., "description": ..., "pubDate": ...}

Missing values are ''. description is plain text: HTML in the feed's
content or summary is stripped.
"""

from __future__ import annotations

import xml.etree.ElementTree as ET
from typing import Any

import httpx
from bs4 import BeautifulSoup
from pydantic import Field, field_validator

from pipeforge.contracts.enums import SchemaFieldType, SchemaRootType
from pipeforge.contracts.errors import FetchError
from pipeforge.contracts.schema import ExtractedSchema, SchemaField
from pipeforge.operators.config_base import is_absent, is_number
from pipeforge.operators.sources.http import FetchConfig, FetchOperatorBase

DEFAULT_MAX_ITEMS = 50

_FEED_ROOTS = frozenset({"rss", "feed", "RDF"})


def _local(tag: str) -> str:
    return tag.rsplit("}", 1)[-1]


def _child(element: ET.Element, *names: str) -> ET.Element | None:
    for name in names:
        for child in element:
            if _local(child.tag) == name:
                return child
    return None


def _text(element: ET.Element | None) -> str:
    if element is None:
        return ""
    return "".join(element.itertext()).strip()


def _plain_text(markup: str) -> str:
    if "<" not in markup:
        return markup.strip()
    return BeautifulSoup(markup, "html.parser").get_text(" ", strip=True)


def _link(item: ET.Element) -> str:
    # Atom links carry the URL in href; prefer rel="alternate".
    links = [child for child in item if _local(child.tag) == "link"]
    for link in links:
        if link.get("href") and link.get("rel", "alternate") == "alternate":
            return link.get("href", "")
    for link in links:
        if link.get("href"):
            return link.get("href", "")
        if _text(link):
            return _text(link)
    return ""


def normalize_item(item: ET.Element) -> dict[str, str]:
    content = _text(_child(item, "encoded", "content"))
    summary = _text(_child(item, "summary", "description"))
    return {
        "title": _text(_child(item, "title")),
        "link": _link(item),
        "description": _plain_text(content or summary),
        "pubDate": _text(_child(item, "pubDate", "date", "published", "updated")),
    }


def parse_feed(xml_text: str, max_items: int = DEFAULT_MAX_ITEMS) -> list[dict[str, str]]:
    """Parse feed XML into normalized items, at most max_items of them.

    Raises:
        ValueError: If the XML is malformed or not a recognized feed.
    """
    try:
        root = ET.fromstring(xml_text.strip())
    except ET.ParseError as e:
        raise ValueError(str(e)) from e
    if _local(root.tag) not in _FEED_ROOTS:
        raise ValueError("Feed not recognized as RSS 1 or 2, or Atom")
    items = [el for el in root.iter() if _local(el.tag) in ("item", "entry")]
    return [normalize_item(item) for item in items[:max_items]]


class FetchRSSConfig(FetchConfig):
    max_items: int = Field(default=DEFAULT_MAX_ITEMS, alias="maxItems")

    @field_validator("max_items", mode="before")
    @classmethod
    def check_max_items(cls, v: Any) -> int:
        if is_absent(v):
            return DEFAULT_MAX_ITEMS
        if not is_number(v) or v < 1:
            raise ValueError("maxItems must be a positive number")
        return int(v)


class FetchRSSOperator(FetchOperatorBase[FetchRSSConfig]):
    type = "fetch-rss"
    description = "Fetch and parse RSS/Atom feeds into normalized items"
    config_model = FetchRSSConfig
    accept = "application/rss+xml, application/atom+xml, application/xml, text/xml, */*"
    failure_prefix = "Fetch RSS failed"
    not_found = "Feed does not exist."

    def parse_response(self, response: httpx.Response, config: FetchRSSConfig) -> list[dict[str, str]]:
        try:
            return parse_feed(response.text, config.max_items)
        except ValueError as e:
            raise FetchError(f"RSS parsing failed: {e}") from e

    def get_output_schema(
        self,
        input_schema: ExtractedSchema | None = None,
        config: Any = None,
    ) -> ExtractedSchema | None:
        return ExtractedSchema(
            fields=[
                SchemaField(name="title", path="title", type=SchemaFieldType.STRING),
                SchemaField(name="link", path="link", type=SchemaFieldType.STRING),
                SchemaField(name="description", path="description", type=SchemaFieldType.STRING),
                SchemaField(name="pubDate", path="pubDate", type=SchemaFieldType.DATE),
            ],
            root_type=SchemaRootType.ARRAY,
        )
