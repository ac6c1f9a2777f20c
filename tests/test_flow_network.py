"""Tests for the boundary flow network."""

from py_mosaic.core.cell_region import CellRegion
from py_mosaic.core.coordinates import SquareCoordinate, SquareLattice
from py_mosaic.core.dual_graph import DualGraph
from py_mosaic.core.flow_network import SEA_NAME, FlowNetworkBuilder, depth, distance
from py_mosaic.core.moves import ReleaseMove, TakeMove


def arc_exists(network, source, target):
    return any(w.source == source and w.target == target for w in network.watch_edges)


class TestShapeMeasures:
    """Test distance to and depth inside a guiding shape."""

    def test_distance(self):
        shape = CellRegion(SquareLattice(), [SquareCoordinate(x, 0) for x in range(3)])
        assert distance(SquareCoordinate(1, 0), shape) == 0
        assert distance(SquareCoordinate(5, 2), shape) == 5
        assert distance(SquareCoordinate(5, 2), None) == 0

    def test_depth(self):
        block = CellRegion(SquareLattice(), [SquareCoordinate(x, y) for x in range(5) for y in range(5)])
        assert depth(SquareCoordinate(0, 0), block) == 1
        assert depth(SquareCoordinate(2, 2), block) == 3


class TestFlowNetworkBuilder:
    """Test the flow problem built from a cartogram."""

    def test_supplies_balance(self, flower):
        network = FlowNetworkBuilder(flower).build()
        assert network.total_supply() == 0
        assert network.supply_of(0) == 2
        assert network.supply_of(4) == -2
        assert network.sea_vertex.name == SEA_NAME
        assert network.sea_vertex.supply == 0

    def test_exact_supplies_are_clamped(self, flower):
        network = FlowNetworkBuilder(flower).build(exact=True)
        assert [network.supply_of(v) for v in range(7)] == [1, 0, 0, 0, 0, 0, 0]
        assert network.sea_vertex.supply == -1
        assert network.total_supply() == 0

    def test_boundary_vertices_have_unit_capacity(self, flower):
        network = FlowNetworkBuilder(flower).build()
        assert network.vertex_of
        assert all(v.capacity == 1 for v in network.vertex_of.values())
        for region in flower.regions():
            for c in region.neighbours:
                assert c in network.vertex_of

    def test_arcs_are_unit_and_non_negative(self, flower):
        network = FlowNetworkBuilder(flower).build()
        assert network.watch_edges
        assert all(w.edge.capacity == 1 for w in network.watch_edges)
        assert all(e.weight >= 0 for e in network.graph.edges)
        assert min(w.edge.weight for w in network.watch_edges) == 0

    def test_arcs_only_between_different_owners(self, flower):
        network = FlowNetworkBuilder(flower).build()
        for w in network.watch_edges:
            assert flower.get_vertex(w.source) != flower.get_vertex(w.target)
            assert w.target in w.source.neighbours()

    def test_build_leaves_cartogram_untouched(self, flower):
        before = flower.duplicate()
        FlowNetworkBuilder(flower).build()
        assert flower == before

    def test_hole_sealing_arc_only_in_exact_mode(self, enclosure):
        builder = FlowNetworkBuilder(enclosure)
        gap, outer = SquareCoordinate(3, 0), SquareCoordinate(2, 0)
        assert not arc_exists(builder.build(exact=False), gap, outer)
        assert arc_exists(builder.build(exact=True), gap, outer)

    def test_implied_move(self, strip):
        builder = FlowNetworkBuilder(strip)
        release = builder.implied_move(SquareCoordinate(0, 0), SquareCoordinate(-1, 0))
        assert isinstance(release, ReleaseMove)
        take = builder.implied_move(SquareCoordinate(-1, 0), SquareCoordinate(0, 0))
        assert isinstance(take, TakeMove)
        assert take.new_vertex == 0
        transfer = builder.implied_move(SquareCoordinate(3, 0), SquareCoordinate(4, 0))
        assert isinstance(transfer, TakeMove)
        assert (transfer.old_vertex, transfer.new_vertex) == (0, 1)

    def test_arcs_follow_given_dual(self, strip):
        # Trimming an end keeps the regions touching; releasing the joint separates them
        end = (SquareCoordinate(0, 0), SquareCoordinate(-1, 0))
        split = (SquareCoordinate(3, 0), SquareCoordinate(3, 1))
        own = FlowNetworkBuilder(strip).build()
        assert arc_exists(own, *end)
        assert not arc_exists(own, *split)
        detached = FlowNetworkBuilder(strip, DualGraph(2)).build()
        assert not arc_exists(detached, *end)
        assert arc_exists(detached, *split)
