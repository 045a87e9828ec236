# tests/fixtures/pipes.py
"""Builders for pipe definitions in the editor's wire shape.

Usage:
    from tests.fixtures.pipes import linear_pipe, node

    definition = linear_pipe(
        node("fetch-1", "fetch-json", url="https://api.example.com/items"),
        node("truncate-1", "truncate", count=5),
        node("output-1", "pipe-output"),
    )
"""

from __future__ import annotations

from typing import Any


def node(node_id: str, node_type: str, *, label: str | None = None, **config: Any) -> dict[str, Any]:
    """One node; keyword arguments become its config."""
    return {
        "id": node_id,
        "type": node_type,
        "position": {"x": 0, "y": 0},
        "data": {"label": label if label is not None else node_id, "config": config},
    }


def input_node(node_id: str, node_type: str, label: str, **config: Any) -> dict[str, Any]:
    """A user-input node; its label also goes into config as inputs require."""
    built = node(node_id, node_type, label=label)
    built["data"]["config"] = {"label": label, **config}
    return built


def edge(source: str, target: str, edge_id: str | None = None) -> dict[str, Any]:
    return {"id": edge_id or f"e-{source}-{target}", "source": source, "target": target}


def pipe(nodes: list[dict[str, Any]], edges: list[dict[str, Any]] | None = None) -> dict[str, Any]:
    return {"nodes": nodes, "edges": edges or []}


def linear_pipe(*nodes: dict[str, Any]) -> dict[str, Any]:
    """Chain nodes in the given order: n0 -> n1 -> ... -> nk."""
    return pipe(list(nodes), [edge(a["id"], b["id"]) for a, b in zip(nodes, nodes[1:], strict=False)])
