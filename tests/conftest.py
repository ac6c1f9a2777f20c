"""Shared cartogram fixtures."""

import numpy as np
import pytest

from py_mosaic.core.cartogram import MosaicCartogram
from py_mosaic.core.cell_region import CellRegion
from py_mosaic.core.coordinates import HexagonalLattice, SquareCoordinate, SquareLattice, get_lattice
from py_mosaic.core.dual_graph import DualGraph


ENCLOSURE_GAP = SquareCoordinate(4, 0)


def install_shape(cartogram, vertex, coordinates, target_size=None):
    shape = CellRegion(cartogram.lattice, coordinates)
    cartogram.set_desired_region(vertex, shape, 1.0, 0.0, 0.0, target_size)
    return shape


def build_flower():
    """Seven hex regions: a centre (vertex 0) ringed by six petals (vertices 1-6).

    The centre owns six cells, petal 4 owns two and every other petal four.
    Every guiding shape has four cells; petal 4's shape includes the two
    centre cells next to it.
    """
    lattice = HexagonalLattice()
    zero = lattice.zero()
    ring1 = zero.ring(1)
    ring2 = zero.ring(2)
    ring3 = zero.ring(3)

    edges = [(0, k + 1) for k in range(6)]
    edges += [(k + 1, (k + 1) % 6 + 1) for k in range(6)]
    dual = DualGraph.from_edges(7, edges, labels=["centre"] + [f"petal{k}" for k in range(6)])
    cartogram = MosaicCartogram(lattice, dual)

    centre = [zero] + ring1[1:]
    for c in centre:
        cartogram.set_vertex(c, 0)
    petals = []
    for k in range(6):
        cells = [ring2[2 * k], ring2[2 * k + 1]]
        if k == 0:
            cells += [ring1[0], ring3[1]]
        elif k != 3:
            cells += [ring3[3 * k + 1], ring3[3 * k + 2]]
        for c in cells:
            cartogram.set_vertex(c, k + 1)
        petals.append(cells)

    install_shape(cartogram, 0, [zero, ring1[1], ring1[2], ring1[5]])
    for k in range(6):
        if k == 3:
            install_shape(cartogram, k + 1, petals[k] + [ring1[3], ring1[4]])
        else:
            install_shape(cartogram, k + 1, petals[k])
    return cartogram


def chebyshev_ring(radius):
    return [SquareCoordinate(x, y)
            for x in range(-radius, radius + 1)
            for y in range(-radius, radius + 1)
            if max(abs(x), abs(y)) == radius]


def build_enclosure():
    """Square grid with an inner region (0) enclosed by an outer region (1).

    A sea moat separates the outer region from a guard region (2) that
    surrounds it except for a one-cell gap at (4, 0). The inner region wants
    one more cell; the only sea cell the outer region may take, (3, 0),
    would seal the moat into a hole.
    """
    lattice = SquareLattice()
    dual = DualGraph.from_edges(3, [(0, 1)], labels=["inner", "outer", "guard"])
    cartogram = MosaicCartogram(lattice, dual)

    inner = [SquareCoordinate(0, 0)]
    outer = chebyshev_ring(1) + chebyshev_ring(2)
    guard = [c for c in chebyshev_ring(4) if c != ENCLOSURE_GAP]
    for vertex, cells in enumerate([inner, outer, guard]):
        for c in cells:
            cartogram.set_vertex(c, vertex)

    install_shape(cartogram, 0, [SquareCoordinate(0, 0), SquareCoordinate(1, 0)])
    install_shape(cartogram, 1, outer)
    install_shape(cartogram, 2, guard)
    return cartogram


def build_strip(length=4):
    """Two square regions side by side in one row: [0, 0, ..., 1, 1, ...]."""
    lattice = SquareLattice()
    dual = DualGraph.from_edges(2, [(0, 1)])
    cartogram = MosaicCartogram(lattice, dual)
    for x in range(length):
        cartogram.set_vertex(SquareCoordinate(x, 0), 0)
        cartogram.set_vertex(SquareCoordinate(x + length, 0), 1)
    return cartogram


def build_random(lattice, radius, regions, seed):
    """Grow ``regions`` regions from random seeds until they tile a disk.

    The dual graph is read off the grown tiling, so the cartogram starts
    valid and hole-free. Each guiding shape is the region's own cells with
    one cell dropped or one outside neighbour added.
    """
    rng = np.random.default_rng(seed)
    disk = lattice.zero().disk(radius)
    inside = set(disk)
    owner = {}
    for vertex, index in enumerate(rng.choice(len(disk), size=regions, replace=False)):
        owner[disk[index]] = vertex
    frontier = list(owner)
    while frontier:
        c = frontier.pop(int(rng.integers(len(frontier))))
        for d in c.neighbours():
            if d in inside and d not in owner:
                owner[d] = owner[c]
                frontier.append(d)

    edges = {tuple(sorted((owner[c], owner[d])))
             for c in owner for d in c.neighbours()
             if d in owner and owner[d] != owner[c]}
    cartogram = MosaicCartogram(lattice, DualGraph.from_edges(regions, sorted(edges)))
    for c, vertex in owner.items():
        cartogram.set_vertex(c, vertex)

    for region in cartogram.regions():
        cells = region.coordinates()
        if len(cells) > 1 and rng.random() < 0.5:
            cells = cells[:-1]
        else:
            outside = list(region.neighbours)
            cells.append(outside[int(rng.integers(len(outside)))])
        install_shape(cartogram, region.vertex, cells)
    return cartogram


def close_gap(cartogram):
    """Give the moat gap to the guard region so no sea cell can join the outer region."""
    cartogram.set_vertex(ENCLOSURE_GAP, 2)
    install_shape(cartogram, 2, chebyshev_ring(4))
    return cartogram


@pytest.fixture
def flower():
    return build_flower()


@pytest.fixture
def enclosure():
    return build_enclosure()


@pytest.fixture
def closed_enclosure():
    return close_gap(build_enclosure())


@pytest.fixture
def strip():
    return build_strip()


@pytest.fixture
def flower_factory():
    return build_flower


@pytest.fixture
def strip_factory():
    return build_strip


@pytest.fixture
def shape_installer():
    return install_shape


@pytest.fixture
def square_ring():
    return chebyshev_ring


@pytest.fixture(params=[
    ("hexagonal", 11), ("hexagonal", 23), ("hexagonal", 42),
    ("square", 7), ("square", 19), ("square", 64),
])
def random_cartogram(request):
    lattice_type, seed = request.param
    return build_random(get_lattice(lattice_type), radius=4, regions=5, seed=seed)
