"""
Mosaic cartogram grid model.

This module implements:
- Cell records keyed by coordinate and holding the owning dual vertex id
- MosaicCartogram, the coordinate to cell table plus one MosaicRegion per
  dual vertex, with every ownership change funnelled through set_vertex and
  remove_cell so region state and adjacency multisets stay consistent
- Hole detection by labelling the sea cells of the occupied bounding box
"""

from dataclasses import dataclass
from typing import Dict, Iterable, Iterator, List, Optional, Set, Union

import numpy as np
import structlog
from scipy import ndimage

from ..config.config import settings
from .cell_region import CellRegion
from .coordinates import Coordinate, Lattice, LatticeType, get_lattice
from .dual_graph import DualGraph
from .mosaic_region import MosaicRegion

logger = structlog.get_logger()


@dataclass
class Cell:
    """One lattice cell; ``vertex`` is None for sea."""
    coordinate: Coordinate
    vertex: Optional[int] = None

    @property
    def is_sea(self) -> bool:
        return self.vertex is None

    @property
    def center(self) -> np.ndarray:
        return self.coordinate.to_point()


def _label_sea(lattice: Lattice, coordinates: Set[Coordinate]):
    """Label connected sea components in the padded bounding box of ``coordinates``.

    Returns the label array, the grid offset and the set of labels that reach
    the frame of the box (the outer sea).
    """
    indices = np.array([lattice.to_grid_index(c) for c in coordinates], dtype=int)
    offset = indices.min(axis=0) - 1
    shape = tuple(indices.max(axis=0) - offset + 2)
    occupied = np.zeros(shape, dtype=bool)
    shifted = indices - offset
    occupied[shifted[:, 0], shifted[:, 1]] = True

    labels, _ = ndimage.label(~occupied, structure=lattice.connectivity_structure)
    frame = np.concatenate([labels[0, :], labels[-1, :], labels[:, 0], labels[:, -1]])
    outer = set(np.unique(frame[frame > 0]).tolist())
    return labels, offset, outer


def compute_holes(lattice: Lattice, coordinates: Iterable[Coordinate]) -> List[Set[Coordinate]]:
    """Sea components fully enclosed by ``coordinates``."""
    coordinates = set(coordinates)
    if not coordinates:
        return []
    labels, offset, outer = _label_sea(lattice, coordinates)
    holes = []
    for label in np.unique(labels):
        if label == 0 or label in outer:
            continue
        cells = np.argwhere(labels == label) + offset
        holes.append({lattice.from_grid_index(i, j) for i, j in cells})
    return holes


def compute_hole_boundaries(lattice: Lattice, coordinates: Iterable[Coordinate]) -> List[Set[Coordinate]]:
    """Cells of each hole that sit next to an occupied cell."""
    coordinates = set(coordinates)
    boundaries = []
    for hole in compute_holes(lattice, coordinates):
        boundaries.append({
            c for c in hole
            if any(d in coordinates for d in c.connected_vicinity())
        })
    return boundaries


def total_hole_size(lattice: Lattice, coordinates: Iterable[Coordinate]) -> int:
    return sum(len(hole) for hole in compute_holes(lattice, coordinates))


class MosaicCartogram:
    """Cell table and regions of a mosaic cartogram on one lattice."""

    def __init__(self, lattice: Lattice, dual: DualGraph):
        self.lattice = lattice
        self.dual = dual
        self._cells: Dict[Coordinate, Cell] = {}
        self._regions: List[MosaicRegion] = [
            MosaicRegion(v, lattice, dual.degree(v)) for v in dual.vertices()
        ]

    @classmethod
    def create(cls, dual: DualGraph,
               lattice: Union[Lattice, LatticeType, str, None] = None) -> "MosaicCartogram":
        """Build an empty cartogram, taking the lattice from ``settings.lattice`` when omitted."""
        if lattice is None:
            lattice = settings.lattice
        if not isinstance(lattice, Lattice):
            lattice = get_lattice(lattice)
        return cls(lattice, dual)

    # Ownership

    def set_vertex(self, c: Coordinate, vertex: int) -> Optional[int]:
        """Assign ``c`` to region ``vertex``; returns the previous owner or None."""
        if c is None or vertex is None:
            raise ValueError("coordinate and vertex are required")
        self._check_vertex(vertex)
        cell = self._cells.get(c)
        if cell is None:
            self._cells[c] = Cell(c, vertex)
            self._assign(c, vertex)
            return None
        old = cell.vertex
        if old == vertex:
            return old
        if old is not None:
            self._unassign(c, old)
        cell.vertex = vertex
        self._assign(c, vertex)
        return old

    def remove_cell(self, c: Coordinate) -> Optional[int]:
        """Return ``c`` to the sea; returns the previous owner or None."""
        cell = self._cells.pop(c, None)
        if cell is None:
            return None
        if cell.vertex is not None:
            self._unassign(c, cell.vertex)
        return cell.vertex

    def _assign(self, c: Coordinate, vertex: int) -> None:
        region = self._regions[vertex]
        region._add_cell(c)
        for d in c.neighbours():
            other = self.get_vertex(d)
            if other is not None and other != vertex:
                region.neighbour_dual_vertices[other] += 1
                self._regions[other].neighbour_dual_vertices[vertex] += 1

    def _unassign(self, c: Coordinate, vertex: int) -> None:
        region = self._regions[vertex]
        region._remove_cell(c)
        for d in c.neighbours():
            other = self.get_vertex(d)
            if other is not None and other != vertex:
                _decrement(region.neighbour_dual_vertices, other)
                _decrement(self._regions[other].neighbour_dual_vertices, vertex)

    def _check_vertex(self, vertex: int) -> None:
        if not 0 <= vertex < len(self._regions):
            raise KeyError(f"unknown region {vertex}")

    # Queries

    def get_vertex(self, c: Coordinate) -> Optional[int]:
        cell = self._cells.get(c)
        return cell.vertex if cell is not None else None

    def get_cell(self, c: Coordinate) -> Cell:
        """The cell at ``c``; a detached sea cell if nothing owns it."""
        cell = self._cells.get(c)
        return cell if cell is not None else Cell(c, None)

    def cell_boundary_points(self, c: Coordinate) -> np.ndarray:
        return self.lattice.cell_boundary_points(c)

    def get_region(self, vertex: int) -> MosaicRegion:
        self._check_vertex(vertex)
        return self._regions[vertex]

    def region_at(self, c: Coordinate) -> Optional[MosaicRegion]:
        vertex = self.get_vertex(c)
        return self._regions[vertex] if vertex is not None else None

    def regions(self) -> List[MosaicRegion]:
        return list(self._regions)

    def coordinates(self) -> List[Coordinate]:
        return list(self._cells)

    def cells(self) -> Iterator[Cell]:
        return iter(self._cells.values())

    def number_of_cells(self) -> int:
        return len(self._cells)

    def number_of_regions(self) -> int:
        return len(self._regions)

    def containing_cell(self, px: float, py: float) -> Coordinate:
        return self.lattice.containing_cell(px, py)

    # Invariants

    def is_region_connected(self, vertex: int) -> bool:
        return self.get_region(vertex).is_connected()

    def is_region_valid(self, vertex: int, dual: Optional[DualGraph] = None) -> bool:
        """Connected and touching exactly the regions adjacent to ``vertex`` in ``dual``.

        ``dual`` defaults to the cartogram's own dual graph.
        """
        dual = dual if dual is not None else self.dual
        return self.get_region(vertex).is_valid(dual.neighbours(vertex))

    def is_connected(self) -> bool:
        return all(region.is_connected() for region in self._regions)

    def is_valid(self) -> bool:
        return all(self.is_region_valid(region.vertex) for region in self._regions)

    def compute_holes(self) -> List[Set[Coordinate]]:
        return compute_holes(self.lattice, self._cells)

    def compute_hole_boundaries(self) -> List[Set[Coordinate]]:
        return compute_hole_boundaries(self.lattice, self._cells)

    def total_hole_size(self) -> int:
        return total_hole_size(self.lattice, self._cells)

    def has_holes(self) -> bool:
        return bool(self.compute_holes())

    # Metrics

    def quality(self, normalize: bool = False) -> float:
        """Sum of symmetric differences, optionally relative to guiding shape sizes."""
        total = 0.0
        for region in self._regions:
            if region.guiding_shape is None:
                continue
            if normalize:
                if region.desired_size > 0:
                    total += abs(region.symmetric_difference / region.desired_size)
            else:
                total += abs(region.symmetric_difference)
        return total

    def total_hex_error(self) -> int:
        return sum(abs(region.hex_error) for region in self._regions)

    # Bulk operations

    def set_desired_region(self, vertex: int, shape: CellRegion, factor: float,
                           tx: float, ty: float, target_size: Optional[int] = None) -> None:
        """Install the guiding shape produced by the sampling stage."""
        self.get_region(vertex).set_guiding_shape(shape, factor, tx, ty, target_size)

    def translate_regions(self, vertices: Iterable[int], t: Coordinate) -> None:
        """Shift whole regions by ``t``, overwriting whatever they land on."""
        vertices = list(vertices)
        moved = {}
        for vertex in vertices:
            region = self.get_region(vertex)
            moved[vertex] = region.coordinates()
            for c in moved[vertex]:
                self.remove_cell(c)
        for vertex in vertices:
            region = self._regions[vertex]
            if region.guiding_shape is not None:
                region.translate_guiding_shape(t)
            for c in moved[vertex]:
                self.set_vertex(c.plus(t), vertex)

    def clear(self) -> None:
        self._cells.clear()
        for region in self._regions:
            region._reset()

    def duplicate(self) -> "MosaicCartogram":
        """Deep, independent copy."""
        copy = MosaicCartogram.__new__(MosaicCartogram)
        copy.lattice = self.lattice
        copy.dual = self.dual
        copy._cells = {c: Cell(c, cell.vertex) for c, cell in self._cells.items()}
        copy._regions = [region.copy() for region in self._regions]
        return copy

    def restore(self, snapshot: "MosaicCartogram") -> None:
        """Replace this cartogram's state with a deep copy of ``snapshot``."""
        state = snapshot.duplicate()
        self._cells = state._cells
        self._regions = state._regions

    def __eq__(self, other) -> bool:
        if not isinstance(other, MosaicCartogram):
            return NotImplemented
        return {c: cell.vertex for c, cell in self._cells.items()} == \
            {c: cell.vertex for c, cell in other._cells.items()}

    __hash__ = None


def _decrement(counter, key) -> None:
    count = counter.get(key, 0)
    if count <= 1:
        counter.pop(key, None)
    else:
        counter[key] = count - 1
