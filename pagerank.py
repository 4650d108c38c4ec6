import enum
import logging
from dataclasses import dataclass

import numpy as np

from linkanalysis import (
    INITIAL_ERROR,
    ConfigurationError,
    IterationState,
    LinkAnalysis,
    Params,
    delta_of_arrays,
    frozen_array,
)

logger = logging.getLogger(__name__)


class DanglingPolicy(enum.Enum):
    DROP = "drop"
    REDISTRIBUTE = "redistribute"


@dataclass(frozen=True)
class PageRankParams(Params):
    """
    damping_factor: probability of following an edge instead of jumping to a random node
    dangling: what happens to the score of nodes without outbound edges
    """

    damping_factor: float = 0.85
    dangling: DanglingPolicy = DanglingPolicy.DROP

    def __post_init__(self):
        super().__post_init__()
        if not 0.0 < self.damping_factor <= 1.0:
            raise ConfigurationError(f"damping_factor must be in (0, 1], got {self.damping_factor}")
        object.__setattr__(self, "dangling", DanglingPolicy(self.dangling))


@dataclass(frozen=True, eq=False)
class PageRankIterationState(IterationState):
    scores: np.ndarray = None

    def __post_init__(self):
        object.__setattr__(self, "scores", frozen_array(self.scores))


class PageRank(LinkAnalysis):
    """Damped power iteration over the graph's efficient neighbors.

    In-stored graphs are updated by pulling from predecessors, out-stored
    graphs by pushing to successors. Both give the same scores.
    """

    name = "pagerank"

    def __init__(self, graph, params=None, progress=None):
        super().__init__(graph, params or PageRankParams(), progress)
        self.damping_factor = self.params.damping_factor
        n = graph.node_count
        self.damping_amount = (1.0 - self.damping_factor) / n if n else 0.0
        self.outbound_count = self._count_outbound()
        self.outbound_count.setflags(write=False)
        self._dangling = self._exists & (self.outbound_count == 0)
        # pull from predecessors when in-stored, push to successors otherwise
        self._walk = self.gather if self.is_in_stored else self.scatter

    def _count_outbound(self):
        counts = np.zeros(self.size, dtype=np.int64)
        prog = self.progress("pagerank_outbound", self.graph.node_count)
        count = self._count_in_stored if self.is_in_stored else self._count_out_stored
        count(counts, prog)
        return counts

    def _count_in_stored(self, counts, prog):
        for node in self.graph:
            # each in-edge u -> node is one outbound edge of u
            np.add.at(counts, self.efficient_neighbors(node), 1)
            prog.inc()

    def _count_out_stored(self, counts, prog):
        for node in self.graph:
            counts[node] += len(self.efficient_neighbors(node))
            prog.inc()

    def initial_state(self):
        n = self.graph.node_count
        scores = np.where(self._exists, 1.0 / n if n else 0.0, 0.0)
        return PageRankIterationState(error=INITIAL_ERROR + self.tolerance, iteration=0, scores=scores)

    def shares(self, scores):
        """Score each node hands to every successor; 0 for dangling nodes."""
        out = np.zeros(self.size, dtype=np.float64)
        np.divide(scores, self.outbound_count, out=out, where=self.outbound_count > 0)
        return out

    def transition(self, prev):
        before = prev.scores
        after = np.zeros(self.size, dtype=np.float64)

        logger.debug("Calculating new PageRank values based on previous iteration...")
        self._walk(self.shares(before), after, self.progress("pagerank_calc", self.graph.node_count))

        if self.params.dangling is DanglingPolicy.REDISTRIBUTE and self.graph.node_count:
            after[self._exists] += before[self._dangling].sum() / self.graph.node_count

        if self.damping_amount > 0:
            logger.debug("Damping...")
            prog = self.progress("pagerank_damp", self.graph.node_count)
            for node in self.graph:
                after[node] = self.damping_amount + self.damping_factor * after[node]
                prog.inc()

        return PageRankIterationState(
            error=delta_of_arrays(before, after), iteration=prev.iteration + 1, scores=after
        )
