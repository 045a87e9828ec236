# src/pipeforge/operators/transforms/rename.py
"""Rename operator: move fields to new names, keeping everything else."""

from __future__ import annotations

import copy
from typing import Any

from pipeforge.contracts.context import ExecutionContext
from pipeforge.contracts.enums import OperatorCategory
from pipeforge.contracts.schema import ExtractedSchema, SchemaField
from pipeforge.operators.base import Operator
from pipeforge.operators.sentinels import MISSING
from pipeforge.operators.transforms.transform import FieldMapping, MappingsConfig
from pipeforge.operators.utils import delete_nested_field, get_nested_field, map_items, set_nested_field


def _rename_item(item: Any, mappings: list[FieldMapping]) -> Any:
    if not isinstance(item, dict):
        return item
    result = copy.deepcopy(item)
    for mapping in mappings:
        value = get_nested_field(item, mapping.source)
        if value is MISSING:
            continue
        delete_nested_field(result, mapping.source)
        set_nested_field(result, mapping.target, copy.deepcopy(value))
    return result


def _rename_schema_fields(fields: list[SchemaField], renames: dict[str, str]) -> list[SchemaField]:
    renamed: list[SchemaField] = []
    for field in fields:
        children = _rename_schema_fields(field.children, renames) if field.children is not None else None
        target = renames.get(field.path)
        renamed.append(
            SchemaField(
                name=target.split(".")[-1] if target else field.name,
                path=target or field.path,
                type=field.type,
                sample=field.sample,
                children=children,
            )
        )
    return renamed


class RenameOperator(Operator[MappingsConfig]):
    type = "rename"
    category = OperatorCategory.OPERATORS
    description = "Rename fields (supports dot notation)"
    config_model = MappingsConfig

    def run(self, data: Any, config: MappingsConfig, context: ExecutionContext) -> Any:
        if data is None or not config.mappings:
            return data
        return map_items(data, lambda item: _rename_item(item, config.mappings))

    def get_output_schema(
        self,
        input_schema: ExtractedSchema | None = None,
        config: Any = None,
    ) -> ExtractedSchema | None:
        if input_schema is None:
            return None
        cfg = self.try_parse_config(config)
        if cfg is None or not cfg.mappings:
            return input_schema

        renames = {m.source: m.target for m in cfg.mappings}
        return ExtractedSchema(
            fields=_rename_schema_fields(input_schema.fields, renames),
            root_type=input_schema.root_type,
            item_count=input_schema.item_count,
        )
