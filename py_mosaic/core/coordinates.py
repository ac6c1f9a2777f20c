"""
Lattice coordinates for hexagonal and square mosaic grids.

This module implements:
- Immutable hashable coordinates with group arithmetic (hex and square)
- Neighbour enumeration in counter-clockwise order starting from the right
- Rings and disks of cells at a given grid distance
- Lattice objects bundling cell geometry, parsing and the 2D grid embedding
  used for connected component labelling
"""

import math
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import List, Sequence, Tuple, Union

import numpy as np


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


class LatticeType(str, Enum):
    """Supported cell shapes."""

    HEXAGONAL = "hexagonal"
    SQUARE = "square"


class Coordinate(ABC):
    """A cell position on a lattice.

    Coordinates form an abelian group. Two coordinates of different lattice
    types never mix; arithmetic between them raises ``TypeError``.
    """

    __slots__ = ()

    lattice_type: LatticeType

    @property
    @abstractmethod
    def components(self) -> Tuple[int, ...]:
        """Integer components written to coordinate exports."""

    @abstractmethod
    def _from_components(self, *values: int) -> "Coordinate":
        pass

    @abstractmethod
    def neighbours(self) -> List["Coordinate"]:
        """Adjacent cells, counter-clockwise starting from the right one."""

    @abstractmethod
    def norm(self) -> int:
        """Grid distance to the origin."""

    @abstractmethod
    def ring(self, radius: int) -> List["Coordinate"]:
        """All cells at exactly ``radius`` steps from this one."""

    @abstractmethod
    def to_point(self) -> np.ndarray:
        """Euclidean centre of the cell for unit side length."""

    def _check_kind(self, other: "Coordinate") -> None:
        if not isinstance(other, Coordinate) or other.lattice_type != self.lattice_type:
            raise TypeError(
                f"cannot combine {type(self).__name__} with {type(other).__name__}"
            )

    def plus(self, other: "Coordinate") -> "Coordinate":
        self._check_kind(other)
        return self._from_components(*(a + b for a, b in zip(self.components, other.components)))

    def minus(self, other: "Coordinate") -> "Coordinate":
        self._check_kind(other)
        return self._from_components(*(a - b for a, b in zip(self.components, other.components)))

    def times(self, factor: Union[int, float]) -> "Coordinate":
        """Scale the coordinate; float factors are rounded half up per component."""
        if isinstance(factor, int):
            return self._from_components(*(a * factor for a in self.components))
        return self._from_components(*(_round_half_up(a * factor) for a in self.components))

    def dot(self, other: "Coordinate") -> int:
        self._check_kind(other)
        return sum(a * b for a, b in zip(self.components, other.components))

    def normalize(self) -> "Coordinate":
        return self

    def connected_vicinity(self) -> List["Coordinate"]:
        """Cells whose sea status decides whether the sea stays connected around this cell."""
        return self.neighbours()

    def disk(self, radius: int) -> List["Coordinate"]:
        """All cells at distance at most ``radius``, centre first."""
        cells = [self]
        for r in range(1, radius + 1):
            cells.extend(self.ring(r))
        return cells

    def neighbour_index(self, other: "Coordinate") -> int:
        """Position of ``other`` in :meth:`neighbours`, or -1 if not adjacent."""
        try:
            return self.neighbours().index(other)
        except ValueError:
            return -1

    def is_neighbour(self, other: "Coordinate") -> bool:
        return other in self.neighbours()

    def __add__(self, other: "Coordinate") -> "Coordinate":
        return self.plus(other)

    def __sub__(self, other: "Coordinate") -> "Coordinate":
        return self.minus(other)

    def __neg__(self) -> "Coordinate":
        return self.times(-1)


@dataclass(frozen=True)
class HexCoordinate(Coordinate):
    """Barycentric hexagon coordinate.

    ``(x, y, z)`` and ``(x + a, y + a, z + a)`` denote the same cell, so the
    value is stored normalized as ``(x - z, y - z, 0)``.
    """

    x: int
    y: int
    z: int = 0

    lattice_type = LatticeType.HEXAGONAL

    def __post_init__(self):
        if self.z != 0:
            object.__setattr__(self, "x", self.x - self.z)
            object.__setattr__(self, "y", self.y - self.z)
            object.__setattr__(self, "z", 0)

    @property
    def components(self) -> Tuple[int, int, int]:
        return (self.x, self.y, self.z)

    def _from_components(self, *values: int) -> "HexCoordinate":
        return HexCoordinate(*values)

    def neighbours(self) -> List["HexCoordinate"]:
        x, y, z = self.x, self.y, self.z
        return [
            HexCoordinate(x + 1, y, z),
            HexCoordinate(x, y - 1, z),
            HexCoordinate(x, y, z + 1),
            HexCoordinate(x - 1, y, z),
            HexCoordinate(x, y + 1, z),
            HexCoordinate(x, y, z - 1),
        ]

    def norm(self) -> int:
        return max(self.components) - min(self.components)

    def ring(self, radius: int) -> List["HexCoordinate"]:
        if radius < 0:
            raise ValueError(f"radius must be non-negative, got {radius}")
        if radius == 0:
            return [self]
        # Six legs walked counter-clockwise from the cell ``radius`` steps to the right
        legs = [(-1, -1, 0), (0, 1, 1), (-1, 0, -1), (1, 1, 0), (0, -1, -1), (1, 0, 1)]
        x, y, z = self.x + radius, self.y, self.z
        cells = []
        for dx, dy, dz in legs:
            for _ in range(radius):
                cells.append(HexCoordinate(x, y, z))
                x, y, z = x + dx, y + dy, z + dz
        return cells

    def to_point(self) -> np.ndarray:
        x, y, z = self.components
        return np.array([math.sqrt(3) * (x - (y + z) / 2.0), 1.5 * (z - y)])

    def __repr__(self) -> str:
        return f"HexCoordinate({self.x}, {self.y}, {self.z})"


@dataclass(frozen=True)
class SquareCoordinate(Coordinate):
    """Euclidean square-cell coordinate."""

    x: int
    y: int

    lattice_type = LatticeType.SQUARE

    @property
    def components(self) -> Tuple[int, int]:
        return (self.x, self.y)

    def _from_components(self, *values: int) -> "SquareCoordinate":
        return SquareCoordinate(*values)

    def neighbours(self) -> List["SquareCoordinate"]:
        x, y = self.x, self.y
        return [
            SquareCoordinate(x + 1, y),
            SquareCoordinate(x, y + 1),
            SquareCoordinate(x - 1, y),
            SquareCoordinate(x, y - 1),
        ]

    def connected_vicinity(self) -> List["SquareCoordinate"]:
        x, y = self.x, self.y
        return [
            SquareCoordinate(x + 1, y),
            SquareCoordinate(x + 1, y + 1),
            SquareCoordinate(x, y + 1),
            SquareCoordinate(x - 1, y + 1),
            SquareCoordinate(x - 1, y),
            SquareCoordinate(x - 1, y - 1),
            SquareCoordinate(x, y - 1),
            SquareCoordinate(x + 1, y - 1),
        ]

    def norm(self) -> int:
        return abs(self.x) + abs(self.y)

    def ring(self, radius: int) -> List["SquareCoordinate"]:
        if radius < 0:
            raise ValueError(f"radius must be non-negative, got {radius}")
        if radius == 0:
            return [self]
        legs = [(-1, 1), (-1, -1), (1, -1), (1, 1)]
        x, y = self.x + radius, self.y
        cells = []
        for dx, dy in legs:
            for _ in range(radius):
                cells.append(SquareCoordinate(x, y))
                x, y = x + dx, y + dy
        return cells

    def to_point(self) -> np.ndarray:
        return np.array([float(self.x), float(self.y)])

    def __repr__(self) -> str:
        return f"SquareCoordinate({self.x}, {self.y})"


class Lattice(ABC):
    """Geometry and construction helpers for one kind of cell."""

    lattice_type: LatticeType
    coordinate_class: type
    cell_side: float
    cell_apothem: float

    @property
    @abstractmethod
    def cell_area(self) -> float:
        pass

    @abstractmethod
    def zero(self) -> Coordinate:
        pass

    @abstractmethod
    def unit_vectors(self) -> List[Coordinate]:
        pass

    @abstractmethod
    def containing_cell(self, px: float, py: float) -> Coordinate:
        """Cell whose polygon contains the Euclidean point ``(px, py)``."""

    @abstractmethod
    def default_cell_boundary_points(self) -> np.ndarray:
        """Corners of the cell centred at the origin.

        Corner ``i`` is shared with neighbours ``i - 1`` and ``i``.
        """

    @abstractmethod
    def to_grid_index(self, c: Coordinate) -> Tuple[int, int]:
        pass

    @abstractmethod
    def from_grid_index(self, i: int, j: int) -> Coordinate:
        pass

    @property
    @abstractmethod
    def connectivity_structure(self) -> np.ndarray:
        """``scipy.ndimage`` structuring element matching lattice adjacency."""

    def coordinate(self, *values: int) -> Coordinate:
        """Parse integer components (as written by an export) into a coordinate."""
        expected = len(self.zero().components)
        if len(values) != expected:
            raise ValueError(
                f"{self.lattice_type.value} coordinates need {expected} components, got {len(values)}"
            )
        return self.coordinate_class(*(int(v) for v in values))

    def containing_point(self, point: Sequence[float]) -> Coordinate:
        return self.containing_cell(float(point[0]), float(point[1]))

    def cell_boundary_points(self, c: Coordinate) -> np.ndarray:
        return self.default_cell_boundary_points() + c.to_point()


class HexagonalLattice(Lattice):
    """Pointy-top hexagons with unit side."""

    lattice_type = LatticeType.HEXAGONAL
    coordinate_class = HexCoordinate
    cell_side = 1.0
    cell_apothem = math.sqrt(3) / 2

    _TAN30 = math.sqrt(3) / 3

    def __init__(self):
        angles = [math.radians(60 * i - 30) for i in range(6)]
        self._boundary = np.array([[math.cos(a), math.sin(a)] for a in angles]) * self.cell_side

    @property
    def cell_area(self) -> float:
        return 6 * self.cell_side * self.cell_side * math.sqrt(3) / 4

    def zero(self) -> HexCoordinate:
        return HexCoordinate(0, 0, 0)

    def unit_vectors(self) -> List[HexCoordinate]:
        return self.zero().neighbours()

    def containing_cell(self, px: float, py: float) -> HexCoordinate:
        side = self.cell_side
        apothem = self.cell_apothem
        y = -int(math.floor((py + side / 2) / (1.5 * side)))
        x = int(math.floor((px + y * apothem + apothem) / (2 * apothem)))
        box_top_x = -apothem * y + 2 * apothem * x
        box_top_y = -1.5 * side * y + side
        lhs = py - box_top_y
        rhs = self._TAN30 * (px - box_top_x)
        if lhs > rhs:
            x -= 1
            y -= 1
        elif lhs > -rhs:
            y -= 1
        return HexCoordinate(x, y, 0)

    def default_cell_boundary_points(self) -> np.ndarray:
        return self._boundary.copy()

    def to_grid_index(self, c: HexCoordinate) -> Tuple[int, int]:
        return (c.x, c.y)

    def from_grid_index(self, i: int, j: int) -> HexCoordinate:
        return HexCoordinate(int(i), int(j), 0)

    @property
    def connectivity_structure(self) -> np.ndarray:
        # Axial offsets (1,0) (0,-1) (-1,-1) (-1,0) (0,1) (1,1)
        return np.array([[1, 1, 0], [1, 1, 1], [0, 1, 1]], dtype=bool)


class SquareLattice(Lattice):
    """Axis-aligned unit squares."""

    lattice_type = LatticeType.SQUARE
    coordinate_class = SquareCoordinate
    cell_side = 1.0
    cell_apothem = 0.5

    @property
    def cell_area(self) -> float:
        return self.cell_side * self.cell_side

    def zero(self) -> SquareCoordinate:
        return SquareCoordinate(0, 0)

    def unit_vectors(self) -> List[SquareCoordinate]:
        return self.zero().neighbours()

    def containing_cell(self, px: float, py: float) -> SquareCoordinate:
        return SquareCoordinate(_round_half_up(px), _round_half_up(py))

    def default_cell_boundary_points(self) -> np.ndarray:
        a = self.cell_apothem
        return np.array([[a, -a], [a, a], [-a, a], [-a, -a]])

    def to_grid_index(self, c: SquareCoordinate) -> Tuple[int, int]:
        return (c.x, c.y)

    def from_grid_index(self, i: int, j: int) -> SquareCoordinate:
        return SquareCoordinate(int(i), int(j))

    @property
    def connectivity_structure(self) -> np.ndarray:
        return np.array([[0, 1, 0], [1, 1, 1], [0, 1, 0]], dtype=bool)


_LATTICES = {
    LatticeType.HEXAGONAL: HexagonalLattice,
    LatticeType.SQUARE: SquareLattice,
}


def get_lattice(lattice_type: Union[LatticeType, str]) -> Lattice:
    """Return the lattice for a type name such as ``"hexagonal"`` or ``"square"``."""
    try:
        return _LATTICES[LatticeType(lattice_type)]()
    except ValueError:
        raise ValueError(
            f"Unknown lattice type '{lattice_type}'. Available: {[t.value for t in LatticeType]}"
        ) from None
