# src/pipeforge/operators/transforms/transform.py
"""Transform operator: reshape items through source -> target mappings.

Typical use is flattening a nested API response:

    {"path": "data.children",
     "mappings": [{"source": "data.title", "target": "title"},
                  {"source": "data.score", "target": "stats.score"}]}

Each output item contains only the mapped targets. A source that is
missing from an item maps to None.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import field_validator, model_validator

from pipeforge.contracts.context import ExecutionContext
from pipeforge.contracts.enums import OperatorCategory, SchemaFieldType, SchemaRootType
from pipeforge.contracts.schema import ExtractedSchema, SchemaField
from pipeforge.operators.base import Operator
from pipeforge.operators.config_base import (
    EntryConfig,
    OperatorConfig,
    optional_string,
    require_list,
    require_string,
    required_field,
)
from pipeforge.operators.sentinels import MISSING
from pipeforge.operators.utils import get_nested_field, map_items, set_nested_field


class FieldMapping(EntryConfig):
    source: str = required_field()
    target: str = required_field()

    @model_validator(mode="before")
    @classmethod
    def require_object(cls, data: Any) -> Any:
        if not isinstance(data, Mapping):
            raise ValueError("Mapping {index}: source is required")
        return data

    @field_validator("source", mode="before")
    @classmethod
    def check_source(cls, v: Any) -> str:
        return require_string(v, "Mapping {index}: source is required", "Mapping {index}: source must be a string")

    @field_validator("target", mode="before")
    @classmethod
    def check_target(cls, v: Any) -> str:
        return require_string(v, "Mapping {index}: target is required", "Mapping {index}: target must be a string")


class MappingsConfig(OperatorConfig):
    """Config shared by transform and rename."""

    mappings: list[FieldMapping] = required_field()

    @field_validator("mappings", mode="before")
    @classmethod
    def check_mappings(cls, v: Any) -> list[Any]:
        return require_list(v, "Mappings array is required", "Mappings must be an array")


class TransformConfig(MappingsConfig):
    path: str | None = None

    @field_validator("path", mode="before")
    @classmethod
    def check_path(cls, v: Any) -> str | None:
        return optional_string(v, "Path must be a string") or None


def _transform_item(item: Any, mappings: list[FieldMapping]) -> dict[str, Any]:
    result: dict[str, Any] = {}
    for mapping in mappings:
        value = get_nested_field(item, mapping.source)
        set_nested_field(result, mapping.target, None if value is MISSING else value)
    return result


class TransformOperator(Operator[TransformConfig]):
    """Extract a nested path and/or remap fields."""

    type = "transform"
    category = OperatorCategory.OPERATORS
    description = "Extract nested data and map fields to a new shape"
    config_model = TransformConfig

    def run(self, data: Any, config: TransformConfig, context: ExecutionContext) -> Any:
        if data is None:
            return None

        if config.path:
            data = get_nested_field(data, config.path, default=None)
            if data is None:
                return None

        if not config.mappings:
            return data

        return map_items(data, lambda item: _transform_item(item, config.mappings))

    def get_output_schema(
        self,
        input_schema: ExtractedSchema | None = None,
        config: Any = None,
    ) -> ExtractedSchema | None:
        cfg = self.try_parse_config(config)
        if cfg is None or not cfg.mappings:
            return None

        fields: list[SchemaField] = []
        for mapping in cfg.mappings:
            source_field = input_schema.find_field(mapping.source) if input_schema else None
            fields.append(
                SchemaField(
                    name=mapping.target.split(".")[-1],
                    path=mapping.target,
                    type=source_field.type if source_field else SchemaFieldType.STRING,
                )
            )

        return ExtractedSchema(
            fields=fields,
            root_type=input_schema.root_type if input_schema else SchemaRootType.ARRAY,
            item_count=input_schema.item_count if input_schema else None,
        )
