"""Extracted-schema types used for field pickers and schema propagation."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from pipeforge.contracts.enums import SchemaFieldType, SchemaRootType


@dataclass(slots=True)
class SchemaField:
    """One field discovered in sample data.

    Attributes:
        name: Last path segment.
        path: Dot-notation path from the item root.
        type: Inferred type.
        sample: Display sample (long strings and containers are abbreviated).
        children: Nested fields for objects (and arrays of objects).
    """

    name: str
    path: str
    type: SchemaFieldType
    sample: Any = None
    children: list[SchemaField] | None = None

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"name": self.name, "path": self.path, "type": self.type.value}
        if self.sample is not None:
            result["sample"] = self.sample
        if self.children is not None:
            result["children"] = [c.to_dict() for c in self.children]
        return result


@dataclass(slots=True)
class ExtractedSchema:
    fields: list[SchemaField] = field(default_factory=list)
    root_type: SchemaRootType = SchemaRootType.OBJECT
    item_count: int | None = None

    def find_field(self, path: str) -> SchemaField | None:
        """Resolve a dot path against the field tree."""
        parts = path.split(".")
        current = self.fields
        for index, part in enumerate(parts):
            match = next((f for f in current if f.name == part), None)
            if match is None:
                return None
            if index == len(parts) - 1:
                return match
            if not match.children:
                return None
            current = match.children
        return None

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "fields": [f.to_dict() for f in self.fields],
            "rootType": self.root_type.value,
        }
        if self.item_count is not None:
            result["itemCount"] = self.item_count
        return result
