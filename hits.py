from dataclasses import dataclass
from typing import Optional

import numpy as np

from linkanalysis import INITIAL_ERROR, IterationState, LinkAnalysis, Params, delta_of_arrays, frozen_array


@dataclass(frozen=True)
class HITSParams(Params):
    max_iterations: Optional[int] = 100
    normalize: bool = True


@dataclass(frozen=True, eq=False)
class HITSIterationState(IterationState):
    hubs: np.ndarray = None
    authorities: np.ndarray = None

    def __post_init__(self):
        object.__setattr__(self, "hubs", frozen_array(self.hubs))
        object.__setattr__(self, "authorities", frozen_array(self.authorities))


def _normalized(values):
    total = values.sum()
    if total > 0:
        values /= total
    return values


class HITS(LinkAnalysis):
    """Hubs and authorities.

    authority(v) = sum of hub scores of v's predecessors
    hub(v) = sum of the new authority scores of v's successors
    """

    name = "hits"

    def __init__(self, graph, params=None, progress=None):
        super().__init__(graph, params or HITSParams(), progress)
        # authorities come from predecessors, hubs from successors
        if self.is_in_stored:
            self._authority_pass, self._hub_pass = self.gather, self.scatter
        else:
            self._authority_pass, self._hub_pass = self.scatter, self.gather

    def initial_state(self):
        n = self.graph.node_count
        start = np.where(self._exists, 1.0 / n if n else 0.0, 0.0)
        return HITSIterationState(
            error=INITIAL_ERROR + self.tolerance, iteration=0, hubs=start, authorities=start.copy()
        )

    def transition(self, prev):
        authorities = np.zeros(self.size, dtype=np.float64)
        hubs = np.zeros(self.size, dtype=np.float64)

        self._authority_pass(prev.hubs, authorities, self.progress("hits_authorities", self.graph.node_count))
        self._hub_pass(authorities, hubs, self.progress("hits_hubs", self.graph.node_count))

        if self.params.normalize:
            _normalized(authorities)
            _normalized(hubs)

        error = delta_of_arrays(prev.hubs, hubs) + delta_of_arrays(prev.authorities, authorities)
        return HITSIterationState(error=error, iteration=prev.iteration + 1, hubs=hubs, authorities=authorities)
