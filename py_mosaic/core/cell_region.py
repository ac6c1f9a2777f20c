"""
Sets of lattice cells with an incrementally maintained neighbour multiset.

A ``CellRegion`` keeps its coordinates in insertion order together with a
``Counter`` of the outside cells adjacent to it, where each multiplicity is the
number of inside cells touching that outside cell.
"""

from collections import Counter
from typing import Iterable, Iterator, List, Optional

import numpy as np

from .coordinates import Coordinate, Lattice
from ..utils.geometry import polygon_area


class CellRegion:
    """An ordered set of coordinates on one lattice."""

    def __init__(self, lattice: Lattice, coordinates: Optional[Iterable[Coordinate]] = None):
        self.lattice = lattice
        self._coordinates = {}
        self._neighbours = Counter()
        if coordinates is not None:
            for c in coordinates:
                self.add(c)

    def __iter__(self) -> Iterator[Coordinate]:
        return iter(self._coordinates)

    def __len__(self) -> int:
        return len(self._coordinates)

    def __contains__(self, c: Coordinate) -> bool:
        return c in self._coordinates

    def __repr__(self) -> str:
        return f"{type(self).__name__}(size={len(self)})"

    def size(self) -> int:
        return len(self._coordinates)

    def contains(self, c: Coordinate) -> bool:
        return c in self._coordinates

    def coordinates(self) -> List[Coordinate]:
        return list(self._coordinates)

    @property
    def neighbours(self) -> Counter:
        """Outside cells adjacent to the region, with multiplicities."""
        return self._neighbours

    def add(self, c: Coordinate) -> bool:
        """Add a coordinate; returns False if it was already present."""
        if c in self._coordinates:
            return False
        self._coordinates[c] = None
        self._neighbours.pop(c, None)
        for d in c.neighbours():
            if d not in self._coordinates:
                self._neighbours[d] += 1
        return True

    def remove(self, c: Coordinate) -> bool:
        """Remove a coordinate; returns False if it was not present."""
        if c not in self._coordinates:
            return False
        del self._coordinates[c]
        inside = 0
        for d in c.neighbours():
            count = self._neighbours.get(d, 0)
            if count > 0:
                if count == 1:
                    del self._neighbours[d]
                else:
                    self._neighbours[d] = count - 1
            else:
                inside += 1
        if inside > 0:
            self._neighbours[c] = inside
        return True

    def clear(self) -> None:
        self._coordinates.clear()
        self._neighbours.clear()

    def set_coordinates(self, coordinates: Iterable[Coordinate]) -> None:
        self.clear()
        for c in coordinates:
            self.add(c)

    def translate(self, t: Coordinate) -> None:
        """Shift every coordinate by ``t``."""
        self._coordinates = {c.plus(t): None for c in self._coordinates}
        self._neighbours = Counter({c.plus(t): n for c, n in self._neighbours.items()})

    def is_edge(self, c: Coordinate) -> bool:
        """True if ``c`` has both inside and outside neighbours."""
        inside = outside = False
        for d in c.neighbours():
            if d in self._coordinates:
                inside = True
            else:
                outside = True
            if inside and outside:
                return True
        return False

    def intersects(self, other: "CellRegion") -> bool:
        return any(c in other for c in self)

    def intersection_size(self, other: "CellRegion") -> int:
        return sum(1 for c in self if c in other)

    def intersects_neighbours(self, other: "CellRegion") -> bool:
        return any(c in other.neighbours for c in self)

    def touches(self, other: "CellRegion") -> bool:
        """True if some outside neighbour of this region belongs to ``other``."""
        return any(c in other for c in self._neighbours)

    def continuous_barycenter(self) -> np.ndarray:
        if not self._coordinates:
            raise ValueError("barycenter of an empty region")
        return np.mean([c.to_point() for c in self._coordinates], axis=0)

    def barycenter(self) -> Coordinate:
        return self.lattice.containing_point(self.continuous_barycenter())

    def compute_outline_points(self) -> List[np.ndarray]:
        """Trace the region boundary counter-clockwise as cell corner points.

        The trace starts at the first outside neighbour and ends on the point
        it started from.
        """
        if not self._neighbours:
            raise ValueError("outline of an empty region")
        first_neighbour = next(iter(self._neighbours))
        first_position = next((c for c in first_neighbour.neighbours() if c in self._coordinates), None)
        if first_position is None:
            raise ValueError(f"{first_neighbour} is not adjacent to the region")

        index = first_position.neighbour_index(first_neighbour)
        outline = [self.lattice.cell_boundary_points(first_position)[index]]
        neighbour = first_neighbour
        position = first_position
        while True:
            points = self.lattice.cell_boundary_points(position)
            index = (position.neighbour_index(neighbour) + 1) % len(points)
            outline.append(points[index])
            neighbour = position.neighbours()[index]
            # Pivot around the shared corner until an outside cell is found again
            while neighbour in self._coordinates:
                pivot_neighbours = neighbour.neighbours()
                index = (neighbour.neighbour_index(position) + 1) % len(pivot_neighbours)
                position = neighbour
                neighbour = pivot_neighbours[index]
            if neighbour == first_neighbour and position == first_position:
                break
        return outline

    def outline_area(self) -> float:
        """Area enclosed by :meth:`compute_outline_points`."""
        return polygon_area(self.compute_outline_points())

    def copy(self) -> "CellRegion":
        duplicate = CellRegion(self.lattice)
        duplicate._coordinates = dict(self._coordinates)
        duplicate._neighbours = Counter(self._neighbours)
        return duplicate
