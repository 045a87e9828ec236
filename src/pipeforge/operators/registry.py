# src/pipeforge/operators/registry.py
"""Operator registry: type name -> operator instance, plus aliases.

There is no module-level registry. The application root constructs one,
bootstraps it with register_builtin_operators(), and passes it to the
graph validator and execution engine. Tests construct their own.

    registry = OperatorRegistry()
    register_builtin_operators(registry)
    registry.get("fetch")  # -> the fetch-json operator, via alias
"""

from __future__ import annotations

import builtins

import pluggy
import structlog

from pipeforge.contracts.enums import OperatorCategory
from pipeforge.contracts.errors import DuplicateOperatorError
from pipeforge.operators.base import Operator
from pipeforge.operators.hookspecs import PROJECT_NAME, PipeforgeOperatorSpec

logger = structlog.get_logger(__name__)


class OperatorRegistry:
    """Lookup table of operator instances keyed by type.

    Aliases are a separate indirection layer: an alias resolves to a
    concrete type and never shadows one. The registry is read-only during
    execution, so one instance can serve concurrent runs.
    """

    def __init__(self) -> None:
        self._operators: dict[str, Operator] = {}
        self._aliases: dict[str, str] = {}

    def register(self, operator: Operator) -> None:
        """Add an operator instance.

        Raises:
            DuplicateOperatorError: If its type is already registered.
        """
        if operator.type in self._operators:
            raise DuplicateOperatorError(f"Operator type '{operator.type}' is already registered")
        self._operators[operator.type] = operator
        logger.debug("operator_registered", operator_type=operator.type, category=str(operator.category))

    def register_alias(self, alias: str, target_type: str) -> None:
        """Map a legacy type name onto a concrete operator type.

        Raises:
            DuplicateOperatorError: If alias collides with a concrete type.
        """
        if alias in self._operators:
            raise DuplicateOperatorError(f"Cannot create alias '{alias}': an operator with this type already exists")
        self._aliases[alias] = target_type

    def resolve_type(self, operator_type: str) -> str:
        return self._aliases.get(operator_type, operator_type)

    def get(self, operator_type: str) -> Operator | None:
        return self._operators.get(self.resolve_type(operator_type))

    def has(self, operator_type: str) -> bool:
        return self.get(operator_type) is not None

    def list(self) -> builtins.list[str]:
        """Concrete operator types, in registration order (aliases excluded)."""
        return list(self._operators)

    def list_aliases(self) -> dict[str, str]:
        return dict(self._aliases)

    def by_category(self) -> dict[OperatorCategory, builtins.list[Operator]]:
        grouped: dict[OperatorCategory, list[Operator]] = {}
        for operator in self._operators.values():
            grouped.setdefault(operator.category, []).append(operator)
        return grouped

    def count(self) -> int:
        return len(self._operators)

    def clear(self) -> None:
        self._operators.clear()
        self._aliases.clear()

    def __contains__(self, operator_type: object) -> bool:
        return isinstance(operator_type, str) and self.has(operator_type)

    def __len__(self) -> int:
        return len(self._operators)


def _builtin_plugins() -> list[object]:
    from pipeforge.operators.inputs.hookimpl import builtin_inputs
    from pipeforge.operators.pipe_output import builtin_terminal
    from pipeforge.operators.sources.hookimpl import builtin_sources
    from pipeforge.operators.string.hookimpl import builtin_string_operators
    from pipeforge.operators.transforms.hookimpl import builtin_transforms
    from pipeforge.operators.url.hookimpl import builtin_url_operators

    return [
        builtin_sources,
        builtin_inputs,
        builtin_transforms,
        builtin_string_operators,
        builtin_url_operators,
        builtin_terminal,
    ]


def create_plugin_manager(plugins: list[object] | None = None) -> pluggy.PluginManager:
    """Build a pluggy manager with the operator hookspecs and given plugins.

    Args:
        plugins: Hook implementation objects; defaults to the built-in
            operator packages.
    """
    pm = pluggy.PluginManager(PROJECT_NAME)
    pm.add_hookspecs(PipeforgeOperatorSpec)
    for plugin in _builtin_plugins() if plugins is None else plugins:
        pm.register(plugin)
    return pm


def register_builtin_operators(
    registry: OperatorRegistry,
    plugin_manager: pluggy.PluginManager | None = None,
) -> OperatorRegistry:
    """Discover operator classes through pluggy hooks and register them.

    Not idempotent: registering twice raises DuplicateOperatorError. The
    application root guards against double bootstrap.

    Returns:
        The same registry, for chaining.
    """
    pm = plugin_manager or create_plugin_manager()

    # pluggy returns results in LIFO registration order; reverse for a
    # stable sources-first listing.
    for operator_classes in reversed(pm.hook.pipeforge_get_operators()):
        for operator_cls in operator_classes:
            registry.register(operator_cls())

    for aliases in reversed(pm.hook.pipeforge_get_aliases()):
        for alias, target in aliases.items():
            registry.register_alias(alias, target)

    return registry
