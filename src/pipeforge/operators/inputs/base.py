# src/pipeforge/operators/inputs/base.py
"""Shared behaviour for user-input operators.

An input node's value is, in order of preference:

1. the caller-supplied value keyed by the node's id,
2. the caller-supplied value keyed by the node's label,
3. the node's configured defaultValue.

Input nodes are roots: they ignore whatever is passed as their input.
"""

from __future__ import annotations

from abc import abstractmethod
from collections.abc import Mapping
from typing import Any, ClassVar, Generic, TypeVar

from pydantic import Field, field_validator

from pipeforge.contracts.context import ExecutionContext
from pipeforge.contracts.enums import OperatorCategory, SchemaFieldType, SchemaRootType
from pipeforge.contracts.errors import OperatorExecutionError
from pipeforge.contracts.schema import ExtractedSchema, SchemaField
from pipeforge.operators.base import Operator
from pipeforge.operators.config_base import (
    OperatorConfig,
    optional_bool,
    optional_string,
    require_string,
    required_field,
)


class InputConfig(OperatorConfig):
    label: str = required_field()
    required: bool = False
    placeholder: str | None = None
    default_value: Any = Field(default=None, alias="defaultValue")

    @field_validator("label", mode="before")
    @classmethod
    def check_label(cls, v: Any) -> str:
        return require_string(v, "Label is required", "Label must be a string")

    @field_validator("required", mode="before")
    @classmethod
    def check_required(cls, v: Any) -> bool:
        return bool(optional_bool(v, "Required must be a boolean"))

    @field_validator("placeholder", mode="before")
    @classmethod
    def check_placeholder(cls, v: Any) -> str | None:
        return optional_string(v, "Placeholder must be a string")


InputConfigT = TypeVar("InputConfigT", bound=InputConfig)


def is_empty_value(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def lookup_user_input(user_inputs: Mapping[str, Any], node_id: str | None, label: str) -> Any:
    """Caller-supplied value for an input node, by id then label; None if absent."""
    if node_id is not None and user_inputs.get(node_id) is not None:
        return user_inputs[node_id]
    if label and user_inputs.get(label) is not None:
        return user_inputs[label]
    return None


class InputOperator(Operator[InputConfigT], Generic[InputConfigT]):
    """Base for text/number/url/date inputs.

    Subclasses set `kind` (used in messages: 'Number input "Age" ...') and
    `value_type`, and implement coerce() to turn the raw value into the
    node's result.
    """

    category = OperatorCategory.USER_INPUTS
    kind: ClassVar[str]
    value_type: ClassVar[SchemaFieldType] = SchemaFieldType.STRING
    sample: ClassVar[Any] = ""

    def raw_value(self, config: InputConfigT, context: ExecutionContext) -> Any:
        supplied = lookup_user_input(context.user_inputs, context.node_id, config.label)
        return config.default_value if supplied is None else supplied

    def required_message(self, label: str) -> str:
        return f'{self.kind} input "{label}" is required'

    def fail(self, config: InputConfigT, problem: str) -> OperatorExecutionError:
        return OperatorExecutionError(f'{self.kind} input "{config.label}" {problem}')

    def missing_required(self, config: Any, supplied: Any) -> str | None:
        """Pre-flight check: the error message if a required input has no value.

        Args:
            config: The node's raw config.
            supplied: The caller-supplied value for this node, or None.
        """
        cfg = self.try_parse_config(config)
        if cfg is None or not cfg.required:
            return None
        value = cfg.default_value if supplied is None else supplied
        if is_empty_value(value):
            return self.required_message(cfg.label)
        return None

    def run(self, data: Any, config: InputConfigT, context: ExecutionContext) -> Any:
        value = self.raw_value(config, context)
        if config.required and is_empty_value(value):
            raise OperatorExecutionError(self.required_message(config.label))
        return self.coerce(value, config)

    @abstractmethod
    def coerce(self, value: Any, config: InputConfigT) -> Any:
        """Turn the raw supplied or default value into the node result."""
        ...

    def get_output_schema(
        self,
        input_schema: ExtractedSchema | None = None,
        config: Any = None,
    ) -> ExtractedSchema | None:
        return ExtractedSchema(
            fields=[SchemaField(name="value", path="value", type=self.value_type, sample=self.sample)],
            root_type=SchemaRootType.OBJECT,
        )
