"""
Flow-based polishing of mosaic cartograms.

This module implements:
- Approximate passes: route every region's cell surplus or deficit through the
  boundary flow network and apply the transfers that are still valid
- Exact passes: move one unit of flow at a time, allowing holes, until every
  region has its desired cell count
- Snapshotting of the best cartogram seen and reporting through PolishResult
"""

from dataclasses import dataclass
from typing import Callable, Optional

import structlog

from .cartogram import MosaicCartogram
from .dual_graph import DualGraph
from .exceptions import (
    ExactModeExhaustedError,
    InfeasibleFlowError,
    InvalidMoveError,
    MalformedGuidingShapeError,
)
from .flow_network import FlowNetwork, FlowNetworkBuilder
from .min_cost_flow import FlowStatus, SuccessiveShortestPathMinCostFlow
from ..config.polisher_settings import PolisherSettings

logger = structlog.get_logger()

RestartPolicy = Callable[[MosaicCartogram], bool]


@dataclass
class PolishResult:
    """Outcome of :meth:`Polisher.polish`."""
    cartogram: MosaicCartogram
    initial_error: int
    final_error: int
    iterations: int = 0
    exact_iterations: int = 0
    moves_applied: int = 0
    exact: bool = False
    restarts: int = 0
    failure: Optional[ExactModeExhaustedError] = None

    @property
    def success(self) -> bool:
        return self.failure is None

    def raise_for_status(self) -> None:
        if self.failure is not None:
            raise self.failure


class Polisher:
    """Corrects region cell counts of a cartogram with min-cost flow.

    The cartogram is modified in place; when polishing ends it holds the
    best state seen, which is also returned in the :class:`PolishResult`.
    """

    def __init__(self, cartogram: MosaicCartogram, dual: Optional[DualGraph] = None,
                 settings: Optional[PolisherSettings] = None,
                 restart_policy: Optional[RestartPolicy] = None):
        self.cartogram = cartogram
        self.dual = dual if dual is not None else cartogram.dual
        self.settings = settings or PolisherSettings()
        self.restart_policy = restart_policy
        self._builder = FlowNetworkBuilder(cartogram, self.dual)
        self._best: Optional[MosaicCartogram] = None
        self._best_error = 0
        self._moves_applied = 0

    def validate(self) -> None:
        """Check that every region has a usable guiding shape."""
        for region in self.cartogram.regions():
            shape = region.guiding_shape
            if shape is None or len(shape) == 0:
                raise MalformedGuidingShapeError(f"region {region.vertex} has no guiding shape")
            if region.target_size is not None and len(shape) != region.target_size:
                raise MalformedGuidingShapeError(
                    f"region {region.vertex} guiding shape has {len(shape)} cells, expected {region.target_size}"
                )

    def polish(self, exact: Optional[bool] = None) -> PolishResult:
        """Run approximate passes, then exact passes when requested."""
        exact = self.settings.exact if exact is None else exact
        self.validate()

        initial_error = self.cartogram.total_hex_error()
        self._best = self.cartogram.duplicate()
        self._best_error = initial_error
        self._moves_applied = 0
        logger.info("Polishing started", regions=self.cartogram.number_of_regions(),
                    cells=self.cartogram.number_of_cells(), hex_error=initial_error, exact=exact)

        iterations = self._run_approximate()
        exact_iterations = 0
        restarts = 0
        failure = None
        if exact:
            exact_iterations, restarts, failure = self._run_exact()

        self.cartogram.restore(self._best)
        result = PolishResult(
            cartogram=self.cartogram,
            initial_error=initial_error,
            final_error=self._best_error,
            iterations=iterations,
            exact_iterations=exact_iterations,
            moves_applied=self._moves_applied,
            exact=exact,
            restarts=restarts,
            failure=failure,
        )
        logger.info("Polishing finished", initial_error=initial_error, final_error=self._best_error,
                    iterations=iterations, exact_iterations=exact_iterations,
                    moves_applied=self._moves_applied)
        if failure is not None and self.settings.raise_on_shortfall:
            raise failure
        return result

    def _run_approximate(self) -> int:
        iterations = 0
        while True:
            changed = self._pass(exact=False)
            error = self._record(iterations)
            iterations += 1
            if not changed or error == 0 or iterations > self.settings.max_iterations:
                return iterations

    def _run_exact(self):
        iterations = 0
        restarts = 0
        error = self.cartogram.total_hex_error()
        while error > 0:
            changed = False
            while error > 0 and iterations < self.settings.exact_max_iterations:
                changed = self._pass(exact=True)
                error = self._record(iterations, exact=True)
                iterations += 1
                if not changed:
                    break
            if error == 0:
                break
            if (self.restart_policy is None or restarts >= self.settings.exact_restarts
                    or not self.restart_policy(self.cartogram)):
                reason = "no applicable move" if not changed else "iteration limit reached"
                logger.warning("Exact polishing stopped short", hex_error=error, iterations=iterations, reason=reason)
                failure = ExactModeExhaustedError(
                    f"exact polishing left a total hex error of {error} ({reason})",
                    remaining_error=error,
                    iterations=iterations,
                )
                return iterations, restarts, failure
            restarts += 1
            error = self.cartogram.total_hex_error()
            logger.info("Exact polishing restarted", restart=restarts, hex_error=error)
        return iterations, restarts, None

    def _record(self, iteration: int, exact: bool = False) -> int:
        error = self.cartogram.total_hex_error()
        improved = error < self._best_error or (self.settings.snapshot_on_tie and error == self._best_error)
        if improved:
            self._best = self.cartogram.duplicate()
            self._best_error = error
        logger.debug("Polish pass complete", iteration=iteration, exact=exact,
                     hex_error=error, best_hex_error=self._best_error)
        return error

    def build_network(self, exact: bool = False) -> FlowNetwork:
        return self._builder.build(exact)

    def _pass(self, exact: bool) -> bool:
        """Build, solve and apply one flow problem; returns whether anything moved."""
        network = self.build_network(exact)
        solver = SuccessiveShortestPathMinCostFlow(network.graph)
        status = solver.solve()
        if status != FlowStatus.FEASIBLE:
            raise InfeasibleFlowError(f"flow model is {status.value}")

        changed = False
        for watch in network.watch_edges:
            if solver.flow(watch.edge) <= 0:
                continue
            if self.cartogram.get_vertex(watch.source) == self.cartogram.get_vertex(watch.target):
                continue
            move = self._builder.implied_move(watch.source, watch.target)
            move.evaluate(None if exact else self.cartogram.total_hole_size())
            if move.creates_hole:
                continue
            try:
                move.execute()
            except InvalidMoveError as e:
                logger.debug("Skipping invalidated move", move=repr(move), error=str(e))
                continue
            self._moves_applied += 1
            changed = True
        return changed
