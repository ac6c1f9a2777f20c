"""Tests for speculative cartogram moves."""

import math

import pytest

from py_mosaic.core.coordinates import SquareCoordinate
from py_mosaic.core.dual_graph import DualGraph
from py_mosaic.core.exceptions import InvalidMoveError
from py_mosaic.core.moves import ReleaseMove, TakeMove


class TestReleaseMove:
    """Test giving cells back to the sea."""

    def test_evaluate_restores_cartogram(self, flower):
        before = flower.duplicate()
        c = flower.get_region(0).coordinates()[0]
        move = ReleaseMove(flower, c)
        move.evaluate(flower.total_hole_size())
        assert flower == before
        assert flower.is_valid()

    def test_end_cell_release_is_valid(self, strip):
        move = ReleaseMove(strip, SquareCoordinate(0, 0))
        move.evaluate()
        assert move.valid
        assert move.connected
        assert math.isfinite(move.quality)
        move.execute()
        assert strip.get_vertex(SquareCoordinate(0, 0)) is None

    def test_middle_cell_release_disconnects(self, strip):
        move = ReleaseMove(strip, SquareCoordinate(1, 0))
        move.evaluate()
        assert not move.connected
        assert not move.valid
        assert move.quality == math.inf
        with pytest.raises(InvalidMoveError):
            move.execute()
        assert strip.get_vertex(SquareCoordinate(1, 0)) == 0

    def test_release_breaking_adjacency_is_invalid(self, strip):
        move = ReleaseMove(strip, SquareCoordinate(3, 0))
        move.evaluate()
        assert move.connected
        assert not move.valid

    def test_validity_follows_given_dual(self, strip):
        detached = DualGraph(2)
        split = ReleaseMove(strip, SquareCoordinate(3, 0), detached)
        split.evaluate()
        assert split.valid
        trim = ReleaseMove(strip, SquareCoordinate(0, 0), detached)
        trim.evaluate()
        assert trim.connected
        assert not trim.valid

    def test_release_of_sea_is_invalid(self, strip):
        move = ReleaseMove(strip, SquareCoordinate(9, 9))
        move.evaluate()
        assert not move.valid

    def test_release_detects_new_hole(self, enclosure):
        # Releasing the inner cell leaves a sea cell inside the outer ring
        move = ReleaseMove(enclosure, SquareCoordinate(0, 0))
        move.evaluate(enclosure.total_hole_size())
        assert move.creates_hole
        assert not enclosure.has_holes()


class TestTakeMove:
    """Test taking cells from the sea or from neighbours."""

    def test_take_from_sea(self, strip):
        move = TakeMove(strip, strip.dual, SquareCoordinate(-1, 0), 0)
        move.evaluate(strip.total_hole_size())
        assert move.valid
        assert not move.creates_hole
        assert strip.get_vertex(SquareCoordinate(-1, 0)) is None
        move.execute()
        assert strip.get_vertex(SquareCoordinate(-1, 0)) == 0

    def test_take_from_neighbour(self, strip):
        move = TakeMove(strip, strip.dual, SquareCoordinate(4, 0), 0)
        move.evaluate()
        assert move.valid
        assert strip.get_vertex(SquareCoordinate(4, 0)) == 1
        move.execute()
        assert strip.get_region(0).size() == 5
        assert strip.get_region(1).size() == 3
        assert strip.is_valid()

    def test_take_that_disconnects_giver(self, strip):
        move = TakeMove(strip, strip.dual, SquareCoordinate(5, 0), 0)
        move.evaluate()
        assert not move.connected
        assert not move.valid
        assert strip.get_vertex(SquareCoordinate(5, 0)) == 1

    def test_take_checks_against_given_dual(self, strip):
        move = TakeMove(strip, DualGraph(2), SquareCoordinate(-1, 0), 0)
        move.evaluate()
        assert move.connected
        assert not move.valid
        assert move.quality == math.inf

    def test_take_of_own_cell_is_invalid(self, strip):
        move = TakeMove(strip, strip.dual, SquareCoordinate(0, 0), 0)
        move.evaluate()
        assert not move.valid

    def test_take_that_seals_hole(self, enclosure):
        move = TakeMove(enclosure, enclosure.dual, SquareCoordinate(3, 0), 1)
        move.evaluate(enclosure.total_hole_size())
        assert move.valid
        assert move.creates_hole
        assert not enclosure.has_holes()

    def test_hole_check_skipped_without_baseline(self, enclosure):
        move = TakeMove(enclosure, enclosure.dual, SquareCoordinate(3, 0), 1)
        move.evaluate()
        assert not move.creates_hole

    def test_improves(self, strip, shape_installer):
        shape_installer(strip, 0, [SquareCoordinate(x, 0) for x in range(5)])
        shape_installer(strip, 1, [SquareCoordinate(x, 0) for x in range(5, 8)])
        assert TakeMove(strip, strip.dual, SquareCoordinate(4, 0), 0).improves
        assert not TakeMove(strip, strip.dual, SquareCoordinate(-1, 0), 0).improves

    def test_evaluate_restores_flower(self, flower):
        before = flower.duplicate()
        centre_cells = flower.get_region(0).coordinates()
        for c in centre_cells[1:]:
            TakeMove(flower, flower.dual, c, 4).evaluate(flower.total_hole_size())
            assert flower == before
        assert flower.is_valid()

    def test_ordering(self, strip):
        better = TakeMove(strip, strip.dual, SquareCoordinate(-1, 0), 0)
        worse = TakeMove(strip, strip.dual, SquareCoordinate(8, 0), 1)
        better.quality, worse.quality = 1.0, 2.0
        assert better < worse
        worse.quality = 1.0
        better.necessity, worse.necessity = 3, 1
        assert better < worse
