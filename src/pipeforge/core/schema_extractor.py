# src/pipeforge/core/schema_extractor.py
"""Infer field schemas from sample data.

The editor's field pickers need to know what fields flow out of a node.
Sources can only answer that once data has been fetched, so the schema
is inferred from the data itself:

    >>> schema = SchemaExtractor().extract([{"name": "a", "stars": 3}])
    >>> [f.path for f in schema.fields], schema.root_type.value
    (['name', 'stars'], 'array')

Inference is best-effort: lists are sampled (first ten items) and field
types come from the first item that has the field.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any

from pipeforge.contracts.enums import SchemaFieldType, SchemaRootType
from pipeforge.contracts.schema import ExtractedSchema, SchemaField
from pipeforge.core.dates import parse_date_string, parse_iso_datetime

ARRAY_SAMPLE_SIZE = 10
MAX_SAMPLE_LENGTH = 100

_DATE_PREFIXES: tuple[re.Pattern[str], ...] = (
    re.compile(r"^\d{4}-\d{2}-\d{2}"),  # ISO
    re.compile(r"^\d{2}/\d{2}/\d{4}"),  # US
    re.compile(r"^\d{2}-\d{2}-\d{4}"),  # EU
    re.compile(r"^[A-Za-z]{3},?\s+\d{1,2}\s+[A-Za-z]{3}\s+\d{4}"),  # RFC 2822
)


def is_date_string(value: str) -> bool:
    if not value.strip() or not any(p.match(value) for p in _DATE_PREFIXES):
        return False
    return parse_iso_datetime(value) is not None or parse_date_string(value) is not None


def infer_type(value: Any) -> SchemaFieldType:
    if value is None:
        return SchemaFieldType.NULL
    if isinstance(value, bool):
        return SchemaFieldType.BOOLEAN
    if isinstance(value, (int, float)):
        return SchemaFieldType.NUMBER
    if isinstance(value, str):
        return SchemaFieldType.DATE if is_date_string(value) else SchemaFieldType.STRING
    if isinstance(value, (list, tuple)):
        return SchemaFieldType.ARRAY
    if isinstance(value, Mapping):
        return SchemaFieldType.OBJECT
    return SchemaFieldType.STRING


def sample_value(value: Any) -> Any:
    """Abbreviate a value for display next to its field."""
    if isinstance(value, (list, tuple)):
        return f"[{len(value)} items]" if value else "[]"
    if isinstance(value, Mapping):
        return "{...}"
    if isinstance(value, str) and len(value) > MAX_SAMPLE_LENGTH:
        return value[:MAX_SAMPLE_LENGTH] + "..."
    return value


class SchemaExtractor:
    """Stateless; one instance can be shared."""

    def extract(self, data: Any) -> ExtractedSchema:
        if data is None:
            return ExtractedSchema(fields=[], root_type=SchemaRootType.OBJECT, item_count=0)
        if isinstance(data, (list, tuple)):
            return ExtractedSchema(
                fields=self._array_fields(data, ""),
                root_type=SchemaRootType.ARRAY,
                item_count=len(data),
            )
        if isinstance(data, Mapping):
            return ExtractedSchema(fields=self._object_fields(data, ""), root_type=SchemaRootType.OBJECT)
        # Primitive at the root has no fields to pick.
        return ExtractedSchema(fields=[], root_type=SchemaRootType.OBJECT)

    def _object_fields(self, obj: Mapping[str, Any], prefix: str) -> list[SchemaField]:
        return [self._field(str(key), f"{prefix}.{key}" if prefix else str(key), value) for key, value in obj.items()]

    def _array_fields(self, items: list[Any] | tuple[Any, ...], prefix: str) -> list[SchemaField]:
        merged: dict[str, SchemaField] = {}
        for item in items[:ARRAY_SAMPLE_SIZE]:
            if not isinstance(item, Mapping):
                continue
            for field in self._object_fields(item, prefix):
                existing = merged.get(field.path)
                if existing is None:
                    merged[field.path] = field
                elif existing.sample is None:
                    existing.sample = field.sample
        return list(merged.values())

    def _field(self, name: str, path: str, value: Any) -> SchemaField:
        field_type = infer_type(value)
        field = SchemaField(name=name, path=path, type=field_type, sample=sample_value(value))
        if field_type == SchemaFieldType.OBJECT:
            field.children = self._object_fields(value, path)
        elif field_type == SchemaFieldType.ARRAY and value and isinstance(value[0], Mapping):
            field.children = self._object_fields(value[0], path)
        return field


def flatten_schema(schema: ExtractedSchema) -> list[str]:
    """Every dotted path in the schema, parents before their children."""
    paths: list[str] = []

    def collect(fields: list[SchemaField]) -> None:
        for field in fields:
            paths.append(field.path)
            if field.children:
                collect(field.children)

    collect(schema.fields)
    return paths
