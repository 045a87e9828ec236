# src/pipeforge/core/dag/validator.py
"""Structural validation of pipe definitions.

PipeValidator works on the raw wire mapping, since its job is to report
malformed shapes rather than fail on them. Checks run in order and
accumulate:

1. Shape: nodes and edges must be lists (fatal, nothing else runs).
2. Operator limit.
3. Node fields and operator types.
4. Edge fields and endpoint resolution.
5. Cycles (first cycle only).

Config validation is a separate pass (validate_node_configs) because
callers that only save a draft skip it.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from typing import Any

import structlog

from pipeforge.contracts.definition import PipeDefinition
from pipeforge.contracts.enums import ValidationErrorType
from pipeforge.contracts.results import PipeValidationResult, ValidationIssue
from pipeforge.operators.pipe_output import PIPE_OUTPUT_TYPE
from pipeforge.operators.registry import OperatorRegistry

logger = structlog.get_logger(__name__)

MAX_OPERATORS = 50

_WHITE, _GRAY, _BLACK = 0, 1, 2


def _as_raw(definition: Any) -> Any:
    if isinstance(definition, PipeDefinition):
        return definition.to_dict()
    return definition


def _nonempty_str(value: Any) -> bool:
    return isinstance(value, str) and bool(value)


def _node_id(node: Any) -> str | None:
    if isinstance(node, Mapping) and _nonempty_str(node.get("id")):
        return str(node["id"])
    return None


def _well_formed_nodes(nodes: list[Any]) -> Iterator[Mapping[str, Any]]:
    for node in nodes:
        if isinstance(node, Mapping) and _nonempty_str(node.get("id")) and _nonempty_str(node.get("type")):
            yield node


def _node_data(node: Mapping[str, Any]) -> Mapping[str, Any]:
    data = node.get("data")
    return data if isinstance(data, Mapping) else {}


def _adjacency(nodes: list[Any], edges: list[Any]) -> dict[str, list[str]]:
    adjacency: dict[str, list[str]] = {}
    for node in nodes:
        node_id = _node_id(node)
        if node_id is not None:
            adjacency.setdefault(node_id, [])
    for edge in edges:
        if not isinstance(edge, Mapping):
            continue
        source, target = edge.get("source"), edge.get("target")
        if isinstance(source, str) and isinstance(target, str) and source in adjacency:
            adjacency[source].append(target)
    return adjacency


def find_cycle(adjacency: Mapping[str, list[str]]) -> list[str] | None:
    """First cycle found by depth-first search, as a closed path [a, b, a].

    Iterative, with an explicit path stack, so deep chains cannot hit the
    recursion limit. Roots are tried in adjacency order.
    """
    color = dict.fromkeys(adjacency, _WHITE)
    for root in adjacency:
        if color[root] != _WHITE:
            continue
        path: list[str] = [root]
        stack: list[Iterator[str]] = [iter(adjacency[root])]
        color[root] = _GRAY
        while stack:
            neighbor = next(stack[-1], None)
            if neighbor is None:
                stack.pop()
                color[path.pop()] = _BLACK
                continue
            state = color.get(neighbor)
            if state == _GRAY:
                return [*path[path.index(neighbor) :], neighbor]
            if state == _WHITE:
                color[neighbor] = _GRAY
                path.append(neighbor)
                stack.append(iter(adjacency[neighbor]))
    return None


def has_cycles(definition: Any) -> bool:
    raw = _as_raw(definition)
    if not isinstance(raw, Mapping) or not isinstance(raw.get("nodes"), list) or not isinstance(raw.get("edges"), list):
        return False
    return find_cycle(_adjacency(raw["nodes"], raw["edges"])) is not None


class PipeValidator:
    """Validates definitions against a registry.

    Never mutates the definition and never executes an operator.
    """

    def __init__(self, registry: OperatorRegistry, *, max_operators: int = MAX_OPERATORS) -> None:
        self._registry = registry
        self._max_operators = max_operators

    def validate(self, definition: Any) -> PipeValidationResult:
        raw = _as_raw(definition)
        shape_error = self._check_shape(raw)
        if shape_error is not None:
            return PipeValidationResult(errors=(shape_error,))

        nodes: list[Any] = raw["nodes"]
        edges: list[Any] = raw["edges"]
        errors: list[ValidationIssue] = []
        errors.extend(self._check_operator_count(nodes))
        errors.extend(self._check_operator_types(nodes))
        errors.extend(self._check_connections(nodes, edges))
        errors.extend(self._check_cycles(nodes, edges))

        if errors:
            logger.debug("pipe_validation_failed", error_count=len(errors), first_error=errors[0].message)
        return PipeValidationResult(errors=tuple(errors))

    def validate_node_configs(self, definition: Any) -> PipeValidationResult:
        """Run each resolved operator's validate() on its node's config.

        Nodes that are malformed or of unknown type are skipped; validate()
        reports those.
        """
        raw = _as_raw(definition)
        if self._check_shape(raw) is not None:
            return PipeValidationResult()
        errors: list[ValidationIssue] = []
        for node in _well_formed_nodes(raw["nodes"]):
            operator = self._registry.get(node["type"])
            if operator is None:
                continue
            data = _node_data(node)
            result = operator.validate(data.get("config"))
            if not result.valid:
                label = data.get("label") or node["type"]
                errors.append(
                    ValidationIssue(
                        type=ValidationErrorType.INVALID_CONFIG,
                        message=f'Operator "{label}" ({node["type"]}): {result.error}',
                        node_id=node["id"],
                    )
                )
        return PipeValidationResult(errors=tuple(errors))

    def validate_full(self, definition: Any) -> PipeValidationResult:
        """Structural validation, then config validation if the structure is sound."""
        result = self.validate(definition)
        if not result.valid:
            return result
        return self.validate_node_configs(definition)

    def preflight(self, definition: Any) -> PipeValidationResult:
        """Checks a runnable pipe must pass beyond structural validity."""
        raw = _as_raw(definition)
        if self._check_shape(raw) is not None:
            return PipeValidationResult()
        has_output = any(
            self._registry.resolve_type(node["type"]) == PIPE_OUTPUT_TYPE for node in _well_formed_nodes(raw["nodes"])
        )
        if has_output:
            return PipeValidationResult()
        return PipeValidationResult(
            errors=(ValidationIssue(type=ValidationErrorType.MISSING_OUTPUT, message="Pipe must have a pipe-output operator"),)
        )

    def has_cycles(self, definition: Any) -> bool:
        return has_cycles(definition)

    def _check_shape(self, raw: Any) -> ValidationIssue | None:
        if not isinstance(raw, Mapping):
            message = "Pipe definition is required"
        elif not isinstance(raw.get("nodes"), list):
            message = "Pipe definition must have nodes array"
        elif not isinstance(raw.get("edges"), list):
            message = "Pipe definition must have edges array"
        else:
            return None
        return ValidationIssue(type=ValidationErrorType.INVALID_STRUCTURE, message=message)

    def _check_operator_count(self, nodes: list[Any]) -> list[ValidationIssue]:
        if len(nodes) <= self._max_operators:
            return []
        return [
            ValidationIssue(
                type=ValidationErrorType.OPERATOR_LIMIT,
                message=f"Maximum {self._max_operators} operators per pipe (found {len(nodes)})",
            )
        ]

    def _check_operator_types(self, nodes: list[Any]) -> list[ValidationIssue]:
        errors: list[ValidationIssue] = []
        for node in nodes:
            node_id = _node_id(node)
            node_type = node.get("type") if isinstance(node, Mapping) else None
            if node_id is None or not _nonempty_str(node_type):
                errors.append(
                    ValidationIssue(
                        type=ValidationErrorType.INVALID_STRUCTURE,
                        message="Node is missing required fields (id or type)",
                        node_id=node_id,
                    )
                )
                continue
            if not self._registry.has(str(node_type)):
                errors.append(
                    ValidationIssue(
                        type=ValidationErrorType.UNKNOWN_OPERATOR,
                        message=f"Unknown operator type: {node_type}",
                        node_id=node_id,
                    )
                )
        return errors

    def _check_connections(self, nodes: list[Any], edges: list[Any]) -> list[ValidationIssue]:
        node_ids = {node_id for node_id in map(_node_id, nodes) if node_id is not None}
        errors: list[ValidationIssue] = []
        for edge in edges:
            edge_map: Mapping[str, Any] = edge if isinstance(edge, Mapping) else {}
            edge_id = edge_map.get("id") if isinstance(edge_map.get("id"), str) else None
            source, target = edge_map.get("source"), edge_map.get("target")
            if not _nonempty_str(source) or not _nonempty_str(target):
                errors.append(
                    ValidationIssue(
                        type=ValidationErrorType.INVALID_STRUCTURE,
                        message="Edge is missing source or target",
                        edge_id=edge_id,
                    )
                )
                continue
            if source not in node_ids:
                errors.append(
                    ValidationIssue(
                        type=ValidationErrorType.INVALID_CONNECTION,
                        message=f"Edge references non-existent source node: {source}",
                        edge_id=edge_id,
                    )
                )
            if target not in node_ids:
                errors.append(
                    ValidationIssue(
                        type=ValidationErrorType.INVALID_CONNECTION,
                        message=f"Edge references non-existent target node: {target}",
                        edge_id=edge_id,
                    )
                )
        return errors

    def _check_cycles(self, nodes: list[Any], edges: list[Any]) -> list[ValidationIssue]:
        cycle = find_cycle(_adjacency(nodes, edges))
        if cycle is None:
            return []
        return [
            ValidationIssue(
                type=ValidationErrorType.CYCLE_DETECTED,
                message=f"Circular dependency detected: {' -> '.join(cycle)}",
                node_id=cycle[-1],
            )
        ]
