"""Pipe definition model.

A pipe definition is the serialized graph a user authors in the editor:

    {"nodes": [{"id", "type", "position": {"x", "y"}, "data": {"label", "config"}}],
     "edges": [{"id", "source", "target"}]}

The graph validator works on the raw mapping (it has to report malformed
shapes). Once a definition has passed validation it is parsed into these
frozen types, which is what the execution engine consumes.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any


class DefinitionParseError(ValueError):
    """Raised when a raw definition cannot be parsed into a PipeDefinition."""


def _freeze(config: Mapping[str, Any]) -> Mapping[str, Any]:
    return MappingProxyType(dict(config))


def _coordinate(value: Any) -> float:
    # Positions are editor state only; anything unusable collapses to 0.
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return float(value)
    return 0.0


@dataclass(frozen=True, slots=True)
class OperatorNode:
    """One operator on the canvas.

    position is presentation-only and ignored by validation and execution.
    """

    id: str
    type: str
    label: str = ""
    config: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))
    position: tuple[float, float] = (0.0, 0.0)

    @property
    def display_label(self) -> str:
        return self.label or self.type

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> OperatorNode:
        node_id = raw.get("id")
        node_type = raw.get("type")
        if not isinstance(node_id, str) or not node_id or not isinstance(node_type, str) or not node_type:
            raise DefinitionParseError("Node is missing required fields (id or type)")

        data = raw.get("data") or {}
        if not isinstance(data, Mapping):
            raise DefinitionParseError(f"Node {node_id}: data must be an object")
        config = data.get("config") or {}
        if not isinstance(config, Mapping):
            raise DefinitionParseError(f"Node {node_id}: config must be an object")
        label = data.get("label") or ""

        position = raw.get("position")
        if not isinstance(position, Mapping):
            position = {}

        return cls(
            id=node_id,
            type=node_type,
            label=str(label),
            config=_freeze(config),
            position=(_coordinate(position.get("x")), _coordinate(position.get("y"))),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type,
            "position": {"x": self.position[0], "y": self.position[1]},
            "data": {"label": self.label, "config": dict(self.config)},
        }


@dataclass(frozen=True, slots=True)
class Edge:
    """Directed data-flow dependency: source output feeds target input."""

    id: str
    source: str
    target: str

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> Edge:
        source = raw.get("source")
        target = raw.get("target")
        if not isinstance(source, str) or not source or not isinstance(target, str) or not target:
            raise DefinitionParseError("Edge is missing source or target")
        edge_id = raw.get("id") or f"{source}->{target}"
        return cls(id=str(edge_id), source=source, target=target)

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "source": self.source, "target": self.target}


@dataclass(frozen=True, slots=True)
class PipeDefinition:
    """Read-only view of a pipe graph."""

    nodes: tuple[OperatorNode, ...]
    edges: tuple[Edge, ...] = ()

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> PipeDefinition:
        """Parse the wire shape.

        Raises:
            DefinitionParseError: If nodes/edges are missing or malformed.
        """
        if not isinstance(raw, Mapping):
            raise DefinitionParseError("Pipe definition is required")
        nodes = raw.get("nodes")
        edges = raw.get("edges")
        if not isinstance(nodes, list):
            raise DefinitionParseError("Pipe definition must have nodes array")
        if not isinstance(edges, list):
            raise DefinitionParseError("Pipe definition must have edges array")
        return cls(
            nodes=tuple(OperatorNode.from_dict(n) for n in nodes),
            edges=tuple(Edge.from_dict(e) for e in edges),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "nodes": [n.to_dict() for n in self.nodes],
            "edges": [e.to_dict() for e in self.edges],
        }

    def get_node(self, node_id: str) -> OperatorNode | None:
        for node in self.nodes:
            if node.id == node_id:
                return node
        return None

    def incoming_edges(self, node_id: str) -> list[Edge]:
        return [e for e in self.edges if e.target == node_id]

    def subgraph(self, node_ids: set[str] | frozenset[str]) -> PipeDefinition:
        """Induced subgraph over node_ids, preserving definition order."""
        return PipeDefinition(
            nodes=tuple(n for n in self.nodes if n.id in node_ids),
            edges=tuple(e for e in self.edges if e.source in node_ids and e.target in node_ids),
        )
