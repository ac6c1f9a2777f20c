"""
Single-cell moves on a mosaic cartogram.

This module implements:
- ReleaseMove: a region gives one of its cells back to the sea
- TakeMove: a region takes a cell from the sea or from another region

``evaluate()`` applies a move speculatively, records its effect on the
cartogram invariants and restores the cartogram exactly. ``execute()``
applies an evaluated, valid move.
"""

import math
from typing import List, Optional

import structlog

from .cartogram import MosaicCartogram
from .coordinates import Coordinate
from .dual_graph import DualGraph
from .exceptions import InvalidMoveError

logger = structlog.get_logger()


class Move:
    """Common state of a speculative cartogram change."""

    def __init__(self, cartogram: MosaicCartogram, dual: Optional[DualGraph] = None):
        self.cartogram = cartogram
        self.dual = dual if dual is not None else cartogram.dual
        self.quality = math.inf
        self.necessity = -math.inf
        self.valid = False
        self.connected = False
        self.creates_hole = False
        self.creates_alley = False
        self.improves = False
        self.evaluated = False

    def evaluate(self, hole_baseline: Optional[int] = None) -> float:
        """Apply, inspect and undo the move; returns its quality.

        When ``hole_baseline`` (the current total hole size) is given, the
        move is also checked for enclosing new sea cells.
        """
        raise NotImplementedError

    def _apply(self) -> None:
        raise NotImplementedError

    def execute(self) -> float:
        if not self.evaluated:
            self.evaluate()
        if not self.valid:
            raise InvalidMoveError(f"{self!r} breaks connectivity or adjacency")
        self._apply()
        return self.quality

    def is_alley(self, c: Coordinate) -> bool:
        """True if ``c`` has exactly one sea neighbour and touches more than one region."""
        neighbours = c.neighbours()
        owners = [self.cartogram.get_vertex(d) for d in neighbours]
        occupied = [v for v in owners if v is not None]
        return len(occupied) == len(neighbours) - 1 and len(set(occupied)) > 1

    def _alleys(self, position: Coordinate) -> List[bool]:
        return [self.is_alley(c) for c in position.neighbours()]

    def _creates_hole(self, hole_baseline: Optional[int]) -> bool:
        if hole_baseline is None:
            return False
        return self.cartogram.total_hole_size() > hole_baseline

    def __lt__(self, other: "Move") -> bool:
        if self.quality != other.quality:
            return self.quality < other.quality
        return self.necessity > other.necessity


class ReleaseMove(Move):
    """The owner of ``position`` gives it to the sea."""

    def __init__(self, cartogram: MosaicCartogram, position: Coordinate, dual: Optional[DualGraph] = None):
        super().__init__(cartogram, dual)
        self.position = position
        self.old_vertex = cartogram.get_vertex(position)

    def evaluate(self, hole_baseline: Optional[int] = None) -> float:
        self.evaluated = True
        vertex = self.old_vertex
        if vertex is None:
            self.valid = self.connected = False
            return self.quality
        region = self.cartogram.get_region(vertex)
        old_difference = region.symmetric_difference

        self.cartogram.remove_cell(self.position)
        try:
            self.connected = region.is_connected()
            self.valid = self.cartogram.is_region_valid(vertex, self.dual)
            self.creates_hole = self._creates_hole(hole_baseline)
            if self.valid:
                self.quality = self.cartogram.quality(normalize=True)
                self.improves = region.symmetric_difference < old_difference
        finally:
            self.cartogram.set_vertex(self.position, vertex)
        return self.quality

    def _apply(self) -> None:
        self.cartogram.remove_cell(self.position)

    def __repr__(self) -> str:
        return f"ReleaseMove({self.position!r}, from={self.old_vertex})"


class TakeMove(Move):
    """Region ``vertex`` takes ``position`` from the sea or from another region."""

    def __init__(self, cartogram: MosaicCartogram, dual: DualGraph, position: Coordinate, vertex: int):
        super().__init__(cartogram, dual)
        self.position = position
        self.new_vertex = vertex
        self.old_vertex = cartogram.get_vertex(position)
        self.improves = self._compute_improves()

    def _compute_improves(self) -> bool:
        new_region = self.cartogram.get_region(self.new_vertex)
        if not new_region.is_desired(self.position):
            return False
        if self.old_vertex is None:
            return True
        old_region = self.cartogram.get_region(self.old_vertex)
        if not old_region.is_desired(self.position):
            return True
        new_sd = new_region.symmetric_difference
        old_sd = old_region.symmetric_difference
        new_size = new_region.desired_size
        old_size = old_region.desired_size
        current_error = max(new_sd / new_size, old_sd / old_size)
        new_error = max((new_sd - 1) / new_size, (old_sd + 1) / old_size)
        return new_error < current_error

    def evaluate(self, hole_baseline: Optional[int] = None) -> float:
        self.evaluated = True
        if self.old_vertex == self.new_vertex:
            self.valid = self.connected = False
            return self.quality

        alleys_before = self._alleys(self.position)
        self.cartogram.set_vertex(self.position, self.new_vertex)
        try:
            if self.old_vertex is None:
                self.creates_hole = self._creates_hole(hole_baseline)
            alleys_after = self._alleys(self.position)
            self.creates_alley = any(after and not before for before, after in zip(alleys_before, alleys_after))
            self.connected = self._take_is_connected()
            self.valid = self._take_is_valid()
            if self.valid:
                self.quality = self.cartogram.quality(normalize=True)
                self.necessity = max(self.cartogram.get_region(self.new_vertex).symmetric_difference, 1)
        finally:
            if self.old_vertex is not None:
                self.cartogram.set_vertex(self.position, self.old_vertex)
            else:
                self.cartogram.remove_cell(self.position)
        return self.quality

    def _take_is_connected(self) -> bool:
        if not self.cartogram.is_region_connected(self.new_vertex):
            return False
        return self.old_vertex is None or self.cartogram.is_region_connected(self.old_vertex)

    def _take_is_valid(self) -> bool:
        # Only the giving and the receiving region can change their adjacencies
        if not self.cartogram.is_region_valid(self.new_vertex, self.dual):
            return False
        return self.old_vertex is None or self.cartogram.is_region_valid(self.old_vertex, self.dual)

    def _apply(self) -> None:
        self.cartogram.set_vertex(self.position, self.new_vertex)

    def __repr__(self) -> str:
        return f"TakeMove({self.position!r}, from={self.old_vertex}, to={self.new_vertex})"
