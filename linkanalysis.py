"""Convergence-driven iteration shared by the link analysis algorithms.

An algorithm supplies `initial_state()` and `transition(state)`; the driver
repeats the transition until the error drops to the tolerance or the
iteration cap is hit.
"""
import abc
import enum
import logging
import math
import numbers
from dataclasses import dataclass
from typing import Iterator, Optional

import numpy as np

from phaseprogress import Progress

logger = logging.getLogger(__name__)

DEFAULT_TOL = 1e-8
# Added to the tolerance for round 0 so the driver never stops before one real round.
INITIAL_ERROR = 100.0


class LinkAnalysisError(Exception):
    pass


class ConfigurationError(LinkAnalysisError, ValueError):
    """Invalid algorithm parameters."""


class GraphInconsistencyError(LinkAnalysisError):
    """The graph reported ids or degrees that cannot exist."""


class StopReason(enum.Enum):
    CONVERGED = "converged"
    ITERATION_LIMIT = "iteration_limit"


@dataclass(frozen=True)
class Params:
    """
    max_iterations: hard cap on rounds, None to stop on tolerance only
    tolerance: stop once the error between two rounds is at or below this
    """

    max_iterations: Optional[int] = 10
    tolerance: float = DEFAULT_TOL

    def __post_init__(self):
        if self.max_iterations is not None:
            if isinstance(self.max_iterations, bool) or not isinstance(self.max_iterations, numbers.Integral):
                raise ConfigurationError(f"max_iterations must be an int or None, got {self.max_iterations!r}")
            if self.max_iterations <= 0:
                raise ConfigurationError(f"max_iterations must be positive, got {self.max_iterations}")
            object.__setattr__(self, "max_iterations", int(self.max_iterations))
        if isinstance(self.tolerance, bool) or not isinstance(self.tolerance, numbers.Real):
            raise ConfigurationError(f"tolerance must be a number, got {self.tolerance!r}")
        object.__setattr__(self, "tolerance", float(self.tolerance))
        if math.isnan(self.tolerance) or self.tolerance < 0:
            raise ConfigurationError(f"tolerance must be >= 0, got {self.tolerance}")


@dataclass(frozen=True, eq=False)
class IterationState:
    error: float
    iteration: int


def frozen_array(values) -> np.ndarray:
    arr = np.asarray(values, dtype=np.float64)
    arr.setflags(write=False)
    return arr


def delta_of_arrays(before, after) -> float:
    """T1 (L1) distance between two score vectors."""
    return float(np.abs(np.asarray(before) - np.asarray(after)).sum())


class LinkAnalysis(abc.ABC):
    name = "linkanalysis"

    def __init__(self, graph, params: Params, progress=None):
        self.graph = graph
        self.params = params
        self._progress = progress or Progress
        self.size = graph.max_node_id + 1
        self.is_in_stored = graph.is_in_stored
        nodes = np.fromiter(graph, dtype=np.int64)
        if nodes.size and (nodes.min() < 0 or nodes.max() >= self.size):
            raise GraphInconsistencyError(f"graph enumerates node ids outside [0, {self.size - 1}]")
        self._exists = np.zeros(self.size, dtype=bool)
        self._exists[nodes] = True

    @property
    def tolerance(self):
        return self.params.tolerance

    def progress(self, phase, total=None):
        return self._progress(phase, total)

    def efficient_neighbors(self, node) -> np.ndarray:
        nbrs = np.asarray(self.graph.efficient_neighbors(node), dtype=np.int64)
        if nbrs.size and (nbrs.min() < 0 or nbrs.max() >= self.size):
            bad = nbrs[(nbrs < 0) | (nbrs >= self.size)][0]
            raise GraphInconsistencyError(
                f"node {node} has neighbor {bad} outside [0, {self.size - 1}]"
            )
        missing = ~self._exists[nbrs]
        if missing.any():
            raise GraphInconsistencyError(f"node {node} has neighbor {nbrs[missing][0]} that does not exist")
        return nbrs

    def gather(self, values, out, prog):
        """out[v] = sum of values over v's efficient neighbors."""
        for node in self.graph:
            out[node] = values[self.efficient_neighbors(node)].sum()
            prog.inc()

    def scatter(self, values, out, prog):
        """Add values[v] into out[w] for each efficient neighbor w of v."""
        for node in self.graph:
            # add.at, since a node may list the same neighbor more than once
            np.add.at(out, self.efficient_neighbors(node), values[node])
            prog.inc()

    @abc.abstractmethod
    def initial_state(self) -> IterationState:
        ...

    @abc.abstractmethod
    def transition(self, prev: IterationState) -> IterationState:
        ...

    def states(self) -> Iterator[IterationState]:
        max_iter = self.params.max_iterations
        current = self.initial_state()
        yield current
        while True:
            if max_iter is not None and current.iteration >= max_iter:
                logger.info("%s stopped at iteration limit %d, error=%.2e", self.name, max_iter, current.error)
                return
            nxt = self.transition(current)
            logger.debug("%s iteration %d, error=%.2e", self.name, nxt.iteration, nxt.error)
            yield nxt
            if nxt.error <= self.tolerance:
                logger.info("%s converged at %d iterations, error=%.2e", self.name, nxt.iteration, nxt.error)
                return
            current = nxt

    def run(self) -> IterationState:
        state = None
        for state in self.states():
            pass
        return state

    def stop_reason(self, state: IterationState) -> StopReason:
        if state.error <= self.tolerance:
            return StopReason.CONVERGED
        return StopReason.ITERATION_LIMIT
