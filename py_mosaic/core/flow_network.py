"""
Flow network over the boundary cells of a mosaic cartogram.

This module implements:
- Collection of boundary coordinates (region neighbours and the owned cells
  next to boundary sea cells), each a unit-capacity flow vertex
- Arcs for every legal single-cell transfer between adjacent boundary cells,
  priced by distance to and depth inside the guiding shapes
- Supply vertices for every region (minus its hex error) and for the sea
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional

import structlog

from .cartogram import MosaicCartogram
from .cell_region import CellRegion
from .coordinates import Coordinate
from .dual_graph import DualGraph
from .flow_digraph import FlowDigraph, FlowEdge, FlowVertex
from .moves import Move, ReleaseMove, TakeMove

logger = structlog.get_logger()

SEA_NAME = "#SEA#"


def distance(c: Coordinate, shape: Optional[CellRegion]) -> int:
    """Grid distance from ``c`` to the nearest cell of ``shape``."""
    if shape is None:
        return 0
    return min((c.minus(d).norm() for d in shape), default=0)


def depth(c: Coordinate, shape: Optional[CellRegion]) -> int:
    """Grid distance from ``c`` to the nearest cell just outside ``shape``."""
    if shape is None:
        return 0
    return min((c.minus(d).norm() for d in shape.neighbours), default=0)


@dataclass
class WatchEdge:
    """A capacity-one arc standing for one cell transfer."""
    edge: FlowEdge
    source: Coordinate
    target: Coordinate


@dataclass
class FlowNetwork:
    """A built flow problem and the bookkeeping needed to read its solution."""
    graph: FlowDigraph
    exact: bool
    watch_edges: List[WatchEdge] = field(default_factory=list)
    vertex_of: Dict[Coordinate, FlowVertex] = field(default_factory=dict)
    region_vertices: List[FlowVertex] = field(default_factory=list)
    sea_vertex: Optional[FlowVertex] = None

    @property
    def boundary(self) -> List[Coordinate]:
        return list(self.vertex_of)

    def total_supply(self) -> int:
        return self.graph.total_supply()

    def supply_of(self, vertex: int) -> int:
        return self.region_vertices[vertex].supply


class FlowNetworkBuilder:
    """Builds the boundary flow network for the current state of a cartogram."""

    def __init__(self, cartogram: MosaicCartogram, dual: Optional[DualGraph] = None):
        self.cartogram = cartogram
        self.dual = dual if dual is not None else cartogram.dual

    def boundary_coordinates(self) -> List[Coordinate]:
        boundary: Dict[Coordinate, None] = {}
        for region in self.cartogram.regions():
            for c in region.neighbours:
                boundary[c] = None
                if self.cartogram.get_vertex(c) is None:
                    for d in c.neighbours():
                        if self.cartogram.get_vertex(d) is not None:
                            boundary[d] = None
        return list(boundary)

    def region_supplies(self, exact: bool) -> List[int]:
        """Supply of each region: its surplus of cells.

        In exact mode a single unit is requested from the first region that
        is off target.
        """
        supplies = [-region.hex_error for region in self.cartogram.regions()]
        if not exact:
            return supplies
        clamped = [0] * len(supplies)
        for i, supply in enumerate(supplies):
            if supply != 0:
                clamped[i] = 1 if supply > 0 else -1
                break
        return clamped

    def build(self, exact: bool = False) -> FlowNetwork:
        graph = FlowDigraph()
        network = FlowNetwork(graph=graph, exact=exact)
        boundary = self.boundary_coordinates()
        hole_baseline = None if exact else self.cartogram.total_hole_size()

        for c in boundary:
            network.vertex_of[c] = graph.add_vertex(name=str(c.components), supply=0, capacity=1)

        for c in boundary:
            owner_c = self.cartogram.get_vertex(c)
            for d in c.neighbours():
                if d not in network.vertex_of:
                    continue
                if self.cartogram.get_vertex(d) == owner_c:
                    continue
                self._add_arc(network, c, d, hole_baseline)

        members: Dict[Optional[int], List[FlowVertex]] = {}
        for c, v in network.vertex_of.items():
            members.setdefault(self.cartogram.get_vertex(c), []).append(v)

        supplies = self.region_supplies(exact)
        sea_supply = 0
        for region, supply in zip(self.cartogram.regions(), supplies):
            u = graph.add_vertex(name=self.dual.labels[region.vertex], supply=supply)
            network.region_vertices.append(u)
            for v in members.get(region.vertex, []):
                graph.add_edge(u, v)
                graph.add_edge(v, u)
            sea_supply -= supply

        sea = graph.add_vertex(name=SEA_NAME, supply=sea_supply)
        network.sea_vertex = sea
        for v in members.get(None, []):
            graph.add_edge(sea, v)
            graph.add_edge(v, sea)

        min_weight = graph.min_weight()
        if min_weight < 0:
            graph.shift_weights(-min_weight)

        logger.debug(
            "Flow network built",
            exact=exact,
            boundary=len(boundary),
            arcs=len(network.watch_edges),
            sea_supply=sea_supply,
        )
        return network

    def implied_move(self, source: Coordinate, target: Coordinate) -> Move:
        """The transfer an arc from ``source`` to ``target`` stands for."""
        if self.cartogram.get_vertex(source) is not None and self.cartogram.get_vertex(target) is None:
            return ReleaseMove(self.cartogram, source, self.dual)
        return TakeMove(self.cartogram, self.dual, source, self.cartogram.get_vertex(target))

    def _add_arc(self, network: FlowNetwork, c: Coordinate, d: Coordinate,
                 hole_baseline: Optional[int]) -> bool:
        owner_c = self.cartogram.get_vertex(c)
        owner_d = self.cartogram.get_vertex(d)
        move = self.implied_move(c, d)
        move.evaluate(hole_baseline)
        if not move.valid or move.creates_hole:
            return False

        weight = 0
        if owner_c is not None:
            shape = self.cartogram.get_region(owner_c).guiding_shape
            weight += depth(c, shape) if shape is not None and c in shape else -distance(c, shape)
        if owner_d is not None:
            shape = self.cartogram.get_region(owner_d).guiding_shape
            weight += -depth(c, shape) if shape is not None and c in shape else distance(c, shape)

        edge = network.graph.add_edge(network.vertex_of[c], network.vertex_of[d], capacity=1, weight=weight)
        network.watch_edges.append(WatchEdge(edge, c, d))
        return True
