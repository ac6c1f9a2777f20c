"""
Core mosaic cartogram functionality.
"""

from .coordinates import (Coordinate, HexCoordinate, SquareCoordinate, Lattice,
                          HexagonalLattice, SquareLattice, LatticeType, get_lattice)
from .cell_region import CellRegion
from .dual_graph import DualGraph
from .mosaic_region import ConnectivityGraph, MosaicRegion
from .cartogram import Cell, MosaicCartogram, compute_holes
from .moves import Move, ReleaseMove, TakeMove
from .flow_digraph import FlowDigraph, FlowEdge, FlowVertex
from .min_cost_flow import FlowStatus, SuccessiveShortestPathMinCostFlow
from .flow_network import FlowNetwork, FlowNetworkBuilder
from .polisher import Polisher, PolishResult
from .coordinate_io import export_coordinates, import_coordinates
from .exceptions import (MosaicError, InfeasibleFlowError, InvalidMoveError, ExactModeExhaustedError,
                         MalformedGuidingShapeError, CoordinateFormatError)

__all__ = ['Coordinate', 'HexCoordinate', 'SquareCoordinate', 'Lattice', 'HexagonalLattice',
           'SquareLattice', 'LatticeType', 'get_lattice', 'CellRegion', 'DualGraph',
           'ConnectivityGraph', 'MosaicRegion', 'Cell', 'MosaicCartogram', 'compute_holes',
           'Move', 'ReleaseMove', 'TakeMove', 'FlowDigraph', 'FlowEdge', 'FlowVertex',
           'FlowStatus', 'SuccessiveShortestPathMinCostFlow', 'FlowNetwork', 'FlowNetworkBuilder',
           'Polisher', 'PolishResult', 'export_coordinates', 'import_coordinates',
           'MosaicError', 'InfeasibleFlowError', 'InvalidMoveError', 'ExactModeExhaustedError',
           'MalformedGuidingShapeError', 'CoordinateFormatError']
