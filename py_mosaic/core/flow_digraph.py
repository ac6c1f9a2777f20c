"""
Directed graph with supplies, capacities and costs for min-cost flow problems.
"""

from dataclasses import dataclass
from typing import List, Union

MAX_VALUE = 1_000_000


@dataclass
class FlowVertex:
    """A vertex; positive supply produces flow, negative supply consumes it."""
    id: int
    name: str = ""
    supply: int = 0
    capacity: int = MAX_VALUE  # Maximum flow through the vertex


@dataclass
class FlowEdge:
    """A directed edge from ``source`` to ``target`` (vertex ids)."""
    id: int
    source: int
    target: int
    capacity: int = MAX_VALUE
    weight: int = 0


VertexRef = Union[FlowVertex, int]


class FlowDigraph:
    """Vertices and edges indexed by consecutive integer ids."""

    def __init__(self):
        self.vertices: List[FlowVertex] = []
        self.edges: List[FlowEdge] = []
        self._outgoing: List[List[int]] = []
        self._incoming: List[List[int]] = []

    def add_vertex(self, name: str = "", supply: int = 0, capacity: int = MAX_VALUE) -> FlowVertex:
        if capacity < 0:
            raise ValueError(f"vertex capacity must be non-negative, got {capacity}")
        vertex = FlowVertex(len(self.vertices), name, supply, capacity)
        self.vertices.append(vertex)
        self._outgoing.append([])
        self._incoming.append([])
        return vertex

    def add_edge(self, source: VertexRef, target: VertexRef,
                 capacity: int = MAX_VALUE, weight: int = 0) -> FlowEdge:
        u = self._vertex_id(source)
        v = self._vertex_id(target)
        if capacity < 0:
            raise ValueError(f"edge capacity must be non-negative, got {capacity}")
        edge = FlowEdge(len(self.edges), u, v, capacity, weight)
        self.edges.append(edge)
        self._outgoing[u].append(edge.id)
        self._incoming[v].append(edge.id)
        return edge

    def _vertex_id(self, vertex: VertexRef) -> int:
        vid = vertex.id if isinstance(vertex, FlowVertex) else int(vertex)
        if not 0 <= vid < len(self.vertices):
            raise KeyError(f"unknown flow vertex {vid}")
        return vid

    def outgoing_edges(self, vertex: VertexRef) -> List[FlowEdge]:
        return [self.edges[e] for e in self._outgoing[self._vertex_id(vertex)]]

    def incoming_edges(self, vertex: VertexRef) -> List[FlowEdge]:
        return [self.edges[e] for e in self._incoming[self._vertex_id(vertex)]]

    def number_of_vertices(self) -> int:
        return len(self.vertices)

    def number_of_edges(self) -> int:
        return len(self.edges)

    def total_supply(self) -> int:
        return sum(v.supply for v in self.vertices)

    def min_weight(self) -> int:
        return min((e.weight for e in self.edges), default=0)

    def shift_weights(self, amount: int) -> None:
        for edge in self.edges:
            edge.weight += amount
