# src/pipeforge/core/dag/graph.py
"""PipeGraph: networkx view of a validated pipe definition.

Wraps a DiGraph whose nodes are node ids in definition order. Edge
endpoints that do not resolve are ignored here; the validator reports
them.
"""

from __future__ import annotations

from collections import deque

import networkx as nx

from pipeforge.contracts.definition import OperatorNode, PipeDefinition
from pipeforge.contracts.errors import PipeforgeError


class GraphCycleError(PipeforgeError):
    """The definition cannot be ordered because it contains a cycle."""

    def __init__(self, message: str = "Cycle detected in pipe definition") -> None:
        super().__init__(message)


class PipeGraph:
    """Execution graph for one pipe definition."""

    def __init__(self, definition: PipeDefinition) -> None:
        self._definition = definition
        self._graph: nx.DiGraph[str] = nx.DiGraph()
        self._index: dict[str, int] = {}
        for index, node in enumerate(definition.nodes):
            self._index.setdefault(node.id, index)
            self._graph.add_node(node.id, node=node)
        for edge in definition.edges:
            if edge.source in self._graph and edge.target in self._graph:
                self._graph.add_edge(edge.source, edge.target, id=edge.id)

    @property
    def definition(self) -> PipeDefinition:
        return self._definition

    @property
    def node_count(self) -> int:
        return self._graph.number_of_nodes()

    def get_nx_graph(self) -> nx.DiGraph[str]:
        """The underlying networkx graph (treat as read-only)."""
        return self._graph

    def has_node(self, node_id: str) -> bool:
        return node_id in self._graph

    def get_node(self, node_id: str) -> OperatorNode:
        node: OperatorNode = self._graph.nodes[node_id]["node"]
        return node

    def is_acyclic(self) -> bool:
        return nx.is_directed_acyclic_graph(self._graph)

    def predecessors(self, node_id: str) -> list[str]:
        """Upstream node ids, in the order their edges appear in the definition."""
        return [e.source for e in self._definition.incoming_edges(node_id) if e.source in self._graph]

    def topological_order(self) -> list[str]:
        """Kahn's algorithm; ready nodes are taken first-in first-out.

        Roots enter the queue in definition order, and dependents are
        enqueued in definition order as their last dependency completes.

        Raises:
            GraphCycleError: If some nodes can never become ready.
        """
        in_degree = {node_id: self._graph.in_degree(node_id) for node_id in self._graph}
        queue = deque(node_id for node_id in self._graph if in_degree[node_id] == 0)
        order: list[str] = []
        while queue:
            node_id = queue.popleft()
            order.append(node_id)
            for successor in sorted(self._graph.successors(node_id), key=self._index.__getitem__):
                in_degree[successor] -= 1
                if in_degree[successor] == 0:
                    queue.append(successor)
        if len(order) != self._graph.number_of_nodes():
            raise GraphCycleError()
        return order

    def upstream_closure(self, node_id: str) -> set[str]:
        """node_id plus every node it transitively depends on."""
        return nx.ancestors(self._graph, node_id) | {node_id}

    def subgraph(self, node_ids: set[str]) -> PipeGraph:
        return PipeGraph(self._definition.subgraph(node_ids))
