"""
Regions of a mosaic cartogram.

This module implements:
- ConnectivityGraph: cell adjacency inside one region with a BFS connectivity check
- MosaicRegion: a CellRegion tied to a dual vertex, carrying its guiding shape,
  hit count, adjacent-region multiset and lazily recomputed connectivity
"""

from collections import Counter, deque
from typing import Dict, Iterable, Optional, Set

import numpy as np
import structlog

from .cell_region import CellRegion
from .coordinates import Coordinate, Lattice

logger = structlog.get_logger()

OVERLAY_SEARCH_RADIUS = 5


class ConnectivityGraph:
    """Undirected graph whose nodes are the coordinates owned by a region."""

    def __init__(self):
        self._adjacency: Dict[Coordinate, Set[Coordinate]] = {}

    def __len__(self) -> int:
        return len(self._adjacency)

    def __contains__(self, c: Coordinate) -> bool:
        return c in self._adjacency

    def add_node(self, c: Coordinate, neighbours: Iterable[Coordinate] = ()) -> None:
        links = self._adjacency.setdefault(c, set())
        for d in neighbours:
            if d in self._adjacency and d != c:
                links.add(d)
                self._adjacency[d].add(c)

    def remove_node(self, c: Coordinate) -> None:
        for d in self._adjacency.pop(c, ()):
            self._adjacency[d].discard(c)

    def neighbours(self, c: Coordinate) -> Set[Coordinate]:
        return set(self._adjacency[c])

    def number_of_edges(self) -> int:
        return sum(len(links) for links in self._adjacency.values()) // 2

    def is_connected(self) -> bool:
        """Breadth-first search from an arbitrary node; an empty graph is not connected."""
        if not self._adjacency:
            return False
        start = next(iter(self._adjacency))
        seen = {start}
        queue = deque([start])
        while queue:
            c = queue.popleft()
            for d in self._adjacency[c]:
                if d not in seen:
                    seen.add(d)
                    queue.append(d)
        return len(seen) == len(self._adjacency)

    def copy(self) -> "ConnectivityGraph":
        duplicate = ConnectivityGraph()
        duplicate._adjacency = {c: set(links) for c, links in self._adjacency.items()}
        return duplicate


class MosaicRegion(CellRegion):
    """The cells assigned to one dual vertex.

    Ownership changes go through ``MosaicCartogram.set_vertex`` and
    ``MosaicCartogram.remove_cell``, which call :meth:`_add_cell` and
    :meth:`_remove_cell` and keep ``neighbour_dual_vertices`` symmetric
    between adjacent regions.
    """

    def __init__(self, vertex: int, lattice: Lattice, degree: int = 0):
        super().__init__(lattice)
        self.vertex = vertex
        self.degree = degree
        self.guiding_shape: Optional[CellRegion] = None
        self.factor = 1.0
        self.guiding_shape_translation = np.zeros(2)
        self.total_translation = lattice.zero()
        self.target_size: Optional[int] = None
        self.neighbour_dual_vertices: Counter = Counter()
        self.hits = 0
        self._connectivity_graph = ConnectivityGraph()
        self._connected = False
        self._recompute_connectivity = False

    @property
    def id(self) -> int:
        return self.vertex

    @property
    def connectivity_graph(self) -> ConnectivityGraph:
        return self._connectivity_graph

    def _add_cell(self, c: Coordinate) -> bool:
        if not self.add(c):
            return False
        if self.is_desired(c):
            self.hits += 1
        if not self._connected:
            self._recompute_connectivity = True
        elif not any(d in self for d in c.neighbours()):
            self._recompute_connectivity = True
        self._connectivity_graph.add_node(c, c.neighbours())
        return True

    def _remove_cell(self, c: Coordinate) -> bool:
        if not self.remove(c):
            return False
        if self.is_desired(c):
            self.hits -= 1
        self._recompute_connectivity = True
        self._connectivity_graph.remove_node(c)
        return True

    def _reset(self) -> None:
        self.clear()
        self.neighbour_dual_vertices.clear()
        self.hits = 0
        self._connectivity_graph = ConnectivityGraph()
        self._connected = False
        self._recompute_connectivity = False

    def is_connected(self) -> bool:
        if self._recompute_connectivity:
            self._connected = self._connectivity_graph.is_connected()
            self._recompute_connectivity = False
        return self._connected

    def is_adjacency_correct(self, dual_neighbours: Optional[Iterable[int]] = None) -> bool:
        """True if the regions touching this one are exactly its dual neighbours.

        Without ``dual_neighbours`` only the count is compared against
        ``degree``; the cartogram passes the dual neighbour set for the full check.
        """
        if dual_neighbours is None:
            return len(self.neighbour_dual_vertices) == self.degree
        expected = set(dual_neighbours)
        return set(self.neighbour_dual_vertices) == expected

    def is_valid(self, dual_neighbours: Optional[Iterable[int]] = None) -> bool:
        return self.is_connected() and self.is_adjacency_correct(dual_neighbours)

    def is_desired(self, c: Coordinate) -> bool:
        return self.guiding_shape is not None and c in self.guiding_shape

    @property
    def desired_size(self) -> int:
        return len(self.guiding_shape) if self.guiding_shape is not None else 0

    @property
    def symmetric_difference(self) -> int:
        return self.size() + self.desired_size - 2 * self.hits

    @property
    def hex_error(self) -> int:
        """Cells missing from the region (negative when it has too many)."""
        return self.desired_size - self.size()

    def set_guiding_shape(self, shape: CellRegion, factor: float, tx: float, ty: float,
                          target_size: Optional[int] = None) -> None:
        self.guiding_shape = shape
        self.factor = factor
        self.guiding_shape_translation = np.array([tx, ty], dtype=float)
        self.total_translation = self.lattice.zero()
        self.target_size = target_size
        self._recount_hits()

    def _recount_hits(self) -> None:
        self.hits = self.intersection_size(self.guiding_shape) if self.guiding_shape is not None else 0

    def translate_guiding_shape(self, t: Coordinate) -> None:
        if self.guiding_shape is None:
            raise ValueError(f"region {self.vertex} has no guiding shape")
        self.guiding_shape.translate(t)
        self.total_translation = self.total_translation.plus(t)
        self.guiding_shape_translation = self.guiding_shape_translation + t.to_point()
        self._recount_hits()

    def compute_best_overlay(self) -> Coordinate:
        """Move the guiding shape to the nearby offset with the most hits.

        Offsets are searched in a disk around the difference of the two
        barycenters. Returns the translation applied.
        """
        if self.guiding_shape is None or self.size() == 0:
            raise ValueError(f"region {self.vertex} needs cells and a guiding shape for an overlay")
        center = self.guiding_shape.barycenter().minus(self.barycenter())
        best_offset = center
        best_hits = -1
        for offset in center.disk(OVERLAY_SEARCH_RADIUS):
            hits = sum(1 for c in self if c.plus(offset) in self.guiding_shape)
            if hits > best_hits:
                best_offset = offset
                best_hits = hits
        translation = best_offset.times(-1)
        self.translate_guiding_shape(translation)
        logger.debug("Guiding shape overlaid", region=self.vertex, hits=self.hits)
        return translation

    def corresponding_map_point(self, c: Coordinate) -> np.ndarray:
        """Map-space point that the sampler turned into cell ``c``."""
        return (c.to_point() - self.guiding_shape_translation) / self.factor

    def copy(self) -> "MosaicRegion":
        duplicate = MosaicRegion(self.vertex, self.lattice, self.degree)
        duplicate._coordinates = dict(self._coordinates)
        duplicate._neighbours = Counter(self._neighbours)
        duplicate.guiding_shape = self.guiding_shape.copy() if self.guiding_shape is not None else None
        duplicate.factor = self.factor
        duplicate.guiding_shape_translation = self.guiding_shape_translation.copy()
        duplicate.total_translation = self.total_translation
        duplicate.target_size = self.target_size
        duplicate.neighbour_dual_vertices = Counter(self.neighbour_dual_vertices)
        duplicate.hits = self.hits
        duplicate._connectivity_graph = self._connectivity_graph.copy()
        duplicate._connected = self._connected
        duplicate._recompute_connectivity = self._recompute_connectivity
        return duplicate
