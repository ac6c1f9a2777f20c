"""
Successive shortest path min-cost flow solver.

This module implements:
- Vertex splitting for vertex capacities
- Reversal of negative-cost edges with supply adjustment
- An artificial vertex that makes every instance feasible
- Dijkstra on reduced costs with node potentials
- Status reporting and mapping of the residual flow back onto the input graph
"""

import heapq
from enum import Enum
from typing import List, Optional, Tuple

import structlog

from .exceptions import InfeasibleFlowError
from .flow_digraph import MAX_VALUE, FlowDigraph, FlowEdge

logger = structlog.get_logger()

ARTIFICIAL_WEIGHT = MAX_VALUE // 10 - 1
_INFINITY = float("inf")


class FlowStatus(str, Enum):
    """Outcome of a min-cost flow computation."""

    FEASIBLE = "feasible"
    EXCESS = "excess"
    DEFICIT = "deficit"
    EXCESS_AND_DEFICIT = "excess_and_deficit"


class SuccessiveShortestPathMinCostFlow:
    """Min-cost flow on a :class:`FlowDigraph`.

    The input graph is left untouched; all work happens on a residual copy.
    Routes through the artificial vertex are expensive, so they are only used
    when supplies cannot be met otherwise; that flow is dropped when mapping
    back, leaving those supplies unmet.
    """

    def __init__(self, graph: FlowDigraph):
        self.graph = graph
        self.status: Optional[FlowStatus] = None
        self.iterations = 0

        self._source: List[int] = []
        self._target: List[int] = []
        self._capacity: List[int] = []
        self._weight: List[int] = []
        self._outgoing: List[List[int]] = []
        self._supply: List[int] = []
        self._opposite: List[int] = []
        self._reversed: List[Tuple[int, int]] = []
        self._residual_of_edge: List[int] = []
        self._flow: List[int] = []
        self._potential: List[int] = []
        self._build_residual()

    def _add_vertex(self, supply: int = 0) -> int:
        self._supply.append(supply)
        self._outgoing.append([])
        return len(self._supply) - 1

    def _add_edge(self, u: int, v: int, capacity: int, weight: int) -> int:
        self._source.append(u)
        self._target.append(v)
        self._capacity.append(capacity)
        self._weight.append(weight)
        self._outgoing[u].append(len(self._source) - 1)
        return len(self._source) - 1

    def _build_residual(self) -> None:
        incoming_copy = []
        outgoing_copy = []
        splits = []
        for vertex in self.graph.vertices:
            if vertex.capacity < MAX_VALUE:
                if vertex.supply < 0:
                    v_in = self._add_vertex(vertex.supply)
                    v_out = self._add_vertex(0)
                else:
                    v_in = self._add_vertex(0)
                    v_out = self._add_vertex(vertex.supply)
                splits.append((v_in, v_out, vertex.capacity))
            else:
                v_in = v_out = self._add_vertex(vertex.supply)
            incoming_copy.append(v_in)
            outgoing_copy.append(v_out)

        for edge in self.graph.edges:
            s = outgoing_copy[edge.source]
            t = incoming_copy[edge.target]
            if edge.weight >= 0:
                rid = self._add_edge(s, t, edge.capacity, edge.weight)
            else:
                # Saturate the edge up front and let the solver send flow back
                rid = self._add_edge(t, s, edge.capacity, -edge.weight)
                self._supply[s] -= edge.capacity
                self._supply[t] += edge.capacity
                self._reversed.append((rid, edge.capacity))
            self._residual_of_edge.append(rid)

        for v_in, v_out, capacity in splits:
            self._add_edge(v_in, v_out, capacity, 0)

        artificial = self._add_vertex(0)
        for v in range(artificial):
            self._add_edge(artificial, v, MAX_VALUE, ARTIFICIAL_WEIGHT)
            self._add_edge(v, artificial, MAX_VALUE, ARTIFICIAL_WEIGHT)

        forward_count = len(self._source)
        self._opposite = [0] * (2 * forward_count)
        for e in range(forward_count):
            f = self._add_edge(self._target[e], self._source[e], 0, -self._weight[e])
            self._opposite[e] = f
            self._opposite[f] = e

        self._flow = [0] * len(self._source)
        self._potential = [0] * len(self._supply)

    def solve(self) -> FlowStatus:
        """Route as much supply as possible at minimum cost."""
        imbalance = list(self._supply)
        while True:
            ve = next((v for v, b in enumerate(imbalance) if b > 0), None)
            vf = next((v for v, b in enumerate(imbalance) if b < 0), None)
            if ve is None or vf is None:
                break

            distance, predecessor = self._dijkstra(ve)
            if any(d == _INFINITY for d in distance):
                logger.warning("Residual graph disconnected", source=ve)
                break

            path = []
            v = vf
            while v != ve:
                e = predecessor[v]
                path.append(e)
                v = self._source[e]

            delta = min(imbalance[ve], -imbalance[vf], min(self._capacity[e] for e in path))
            if delta <= 0:
                raise InfeasibleFlowError(f"non-positive augmentation {delta} from {ve} to {vf}")

            imbalance[ve] -= delta
            imbalance[vf] += delta
            for e in path:
                self._flow[e] += delta
                self._capacity[e] -= delta
                self._capacity[self._opposite[e]] += delta

            for v, d in enumerate(distance):
                self._potential[v] -= d
            for e in range(len(self._weight)):
                self._weight[e] += distance[self._source[e]] - distance[self._target[e]]
            self.iterations += 1

        self.status = self._compute_status(imbalance)
        self._polish()
        logger.debug(
            "Min-cost flow solved",
            status=self.status.value,
            iterations=self.iterations,
            vertices=len(self._supply),
            edges=len(self._source),
        )
        return self.status

    def _dijkstra(self, start: int):
        distance = [_INFINITY] * len(self._supply)
        predecessor = [-1] * len(self._supply)
        distance[start] = 0
        heap = [(0, start)]
        done = [False] * len(self._supply)
        while heap:
            d, u = heapq.heappop(heap)
            if done[u]:
                continue
            done[u] = True
            for e in self._outgoing[u]:
                if self._capacity[e] == 0:
                    continue
                v = self._target[e]
                nd = d + self._weight[e]
                if nd < distance[v]:
                    distance[v] = nd
                    predecessor[v] = e
                    heapq.heappush(heap, (nd, v))
        return distance, predecessor

    @staticmethod
    def _compute_status(imbalance: List[int]) -> FlowStatus:
        excess = any(b > 0 for b in imbalance)
        deficit = any(b < 0 for b in imbalance)
        if excess and deficit:
            return FlowStatus.EXCESS_AND_DEFICIT
        if excess:
            return FlowStatus.EXCESS
        if deficit:
            return FlowStatus.DEFICIT
        return FlowStatus.FEASIBLE

    def _polish(self) -> None:
        for e, f in enumerate(self._opposite):
            if e < f:
                self._flow[e] -= self._flow[f]
                self._flow[f] = 0
        for rid, capacity in self._reversed:
            self._flow[rid] = capacity - self._flow[rid]

    def flow(self, edge: FlowEdge) -> int:
        """Flow on an edge of the input graph."""
        if self.status is None:
            raise RuntimeError("solve() has not been called")
        return self._flow[self._residual_of_edge[edge.id]]

    def total_cost(self) -> int:
        return sum(self.flow(edge) * edge.weight for edge in self.graph.edges)

    @property
    def potentials(self) -> List[int]:
        return list(self._potential)
