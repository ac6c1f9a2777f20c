"""
Dual graph of the input map: one vertex per region, one edge per required adjacency.
"""

from typing import Dict, Iterable, List, Optional, Set, Tuple


class DualGraph:
    """Undirected simple graph on vertices ``0..n-1``."""

    def __init__(self, num_vertices: int = 0, labels: Optional[List[str]] = None):
        if num_vertices < 0:
            raise ValueError(f"num_vertices must be non-negative, got {num_vertices}")
        self._adjacency: List[Set[int]] = [set() for _ in range(num_vertices)]
        if labels is not None and len(labels) != num_vertices:
            raise ValueError(f"expected {num_vertices} labels, got {len(labels)}")
        self.labels: List[str] = list(labels) if labels is not None else [str(i) for i in range(num_vertices)]

    @classmethod
    def from_edges(cls, num_vertices: int, edges: Iterable[Tuple[int, int]],
                   labels: Optional[List[str]] = None) -> "DualGraph":
        graph = cls(num_vertices, labels)
        for u, v in edges:
            graph.add_edge(u, v)
        return graph

    def add_vertex(self, label: Optional[str] = None) -> int:
        vertex = len(self._adjacency)
        self._adjacency.append(set())
        self.labels.append(label if label is not None else str(vertex))
        return vertex

    def _check(self, v: int) -> None:
        if not 0 <= v < len(self._adjacency):
            raise KeyError(f"unknown dual vertex {v}")

    def add_edge(self, u: int, v: int) -> None:
        self._check(u)
        self._check(v)
        if u == v:
            raise ValueError(f"self-loop on dual vertex {u}")
        self._adjacency[u].add(v)
        self._adjacency[v].add(u)

    def has_edge(self, u: int, v: int) -> bool:
        return 0 <= u < len(self._adjacency) and v in self._adjacency[u]

    def neighbours(self, v: int) -> Set[int]:
        self._check(v)
        return set(self._adjacency[v])

    def degree(self, v: int) -> int:
        self._check(v)
        return len(self._adjacency[v])

    def vertices(self) -> range:
        return range(len(self._adjacency))

    def edges(self) -> List[Tuple[int, int]]:
        return [(u, v) for u, adj in enumerate(self._adjacency) for v in sorted(adj) if u < v]

    def number_of_vertices(self) -> int:
        return len(self._adjacency)

    def number_of_edges(self) -> int:
        return sum(len(adj) for adj in self._adjacency) // 2

    def adjacency_dict(self) -> Dict[int, Set[int]]:
        return {v: set(adj) for v, adj in enumerate(self._adjacency)}

    def __len__(self) -> int:
        return len(self._adjacency)
