# src/pipeforge/operators/base.py
"""Base class for operator implementations.

Every operator the registry knows about subclasses Operator and provides
the same three capabilities:

- execute(input, config, context): turn the upstream node's result into
  this node's result. May raise; the engine records the failure.
- validate(config): pure check of a node's config, no I/O.
- get_output_schema(input_schema, config): best-effort description of
  what execute would produce, for field pickers in the editor.

Operators are stateless. The registry holds one long-lived instance per
type and shares it across executions, so nothing may be stored on self
during execute.

Subclasses declare a typed config model and implement run(), which
receives the parsed config:

    class TruncateOperator(Operator[TruncateConfig]):
        type = "truncate"
        category = OperatorCategory.OPERATORS
        description = "Keep the first N items"
        config_model = TruncateConfig

        def run(self, data, config, context):
            ...
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, ClassVar, Generic, TypeVar

from pipeforge.contracts.context import ExecutionContext
from pipeforge.contracts.enums import OperatorCategory
from pipeforge.contracts.errors import OperatorConfigError
from pipeforge.contracts.results import ValidationResult
from pipeforge.contracts.schema import ExtractedSchema
from pipeforge.operators.config_base import OperatorConfig

ConfigT = TypeVar("ConfigT", bound=OperatorConfig)


class Operator(ABC, Generic[ConfigT]):
    """Base class for all operators."""

    type: ClassVar[str]
    category: ClassVar[OperatorCategory]
    description: ClassVar[str]
    config_model: ClassVar[type[OperatorConfig]]

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        # ABCMeta sets __abstractmethods__ only after this hook returns
        if any(getattr(getattr(cls, name, None), "__isabstractmethod__", False) for name in dir(cls)):
            return
        for attr in ("type", "category", "description", "config_model"):
            if not hasattr(cls, attr):
                raise TypeError(f"Operator {cls.__name__} must define class attribute '{attr}'")

    def parse_config(self, config: Any) -> ConfigT:
        """Parse a raw config into this operator's typed config.

        Raises:
            OperatorConfigError: With the field-specific message.
        """
        return self.config_model.from_dict(config)  # type: ignore[return-value]

    def validate(self, config: Any) -> ValidationResult:
        try:
            self.parse_config(config)
        except OperatorConfigError as e:
            return ValidationResult.failure(str(e))
        return ValidationResult.ok()

    def execute(self, data: Any, config: Any, context: ExecutionContext | None = None) -> Any:
        """Parse config and run the operator.

        Args:
            data: Result of the single upstream node, or None for roots.
            config: The node's raw config.
            context: Per-node execution context.

        Raises:
            OperatorConfigError: If config does not parse.
            PipeforgeError: For user-facing runtime failures.
        """
        return self.run(data, self.parse_config(config), context or ExecutionContext())

    @abstractmethod
    def run(self, data: Any, config: ConfigT, context: ExecutionContext) -> Any:
        """Produce this node's result from its input and typed config."""
        ...

    def get_output_schema(
        self,
        input_schema: ExtractedSchema | None = None,
        config: Any = None,
    ) -> ExtractedSchema | None:
        """Default: the operator preserves the shape of its input."""
        return input_schema

    def try_parse_config(self, config: Any) -> ConfigT | None:
        """Parse config for schema propagation, where a bad config means "unknown"."""
        try:
            return self.parse_config(config)
        except OperatorConfigError:
            return None

    def __repr__(self) -> str:
        return f"<{type(self).__name__} type={self.type!r}>"
