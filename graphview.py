import abc
import enum

import numpy as np
import scipy.sparse as sp

from linkanalysis import GraphInconsistencyError

DATA_FILE = "Data.txt"


class StoredDirection(enum.Enum):
    OUT = "out"
    IN = "in"


class GraphView(abc.ABC):
    """Read-only directed graph over node ids in [0, max_node_id].

    Iterating the view yields the ids of existing nodes. `efficient_neighbors`
    returns whichever edge direction the storage keeps: successors for an
    out-stored graph, predecessors for an in-stored one.
    """

    stored_direction = StoredDirection.OUT

    @property
    def is_in_stored(self):
        return self.stored_direction is StoredDirection.IN

    @property
    @abc.abstractmethod
    def max_node_id(self) -> int:
        ...

    @property
    @abc.abstractmethod
    def node_count(self) -> int:
        ...

    @abc.abstractmethod
    def exists_node(self, node) -> bool:
        ...

    @abc.abstractmethod
    def __iter__(self):
        ...

    @abc.abstractmethod
    def efficient_neighbors(self, node):
        ...


class SparseGraph(GraphView):
    """Graph view holding one adjacency direction as a CSR matrix.

    Row `i` of the matrix lists the efficient neighbors of node `i`. Duplicate
    edges are kept, so a repeated edge counts twice toward the degree.
    """

    def __init__(self, adj: sp.csr_matrix, exists, stored=StoredDirection.OUT):
        self._adj = adj
        self._exists = np.asarray(exists, dtype=bool)
        self._nodes = np.flatnonzero(self._exists)
        self.stored_direction = StoredDirection(stored)

    @classmethod
    def from_edges(cls, src, dst, stored=StoredDirection.OUT, nodes=None):
        stored = StoredDirection(stored)
        src = np.asarray(src, dtype=np.int64).ravel()
        dst = np.asarray(dst, dtype=np.int64).ravel()
        if src.shape != dst.shape:
            raise ValueError("src and dst must have the same length")
        extra = np.asarray([] if nodes is None else list(nodes), dtype=np.int64)
        ids = np.concatenate([src, dst, extra])
        if ids.size and ids.min() < 0:
            raise GraphInconsistencyError(f"negative node id {ids.min()}")
        n = int(ids.max()) + 1 if ids.size else 0

        rows, cols = (dst, src) if stored is StoredDirection.IN else (src, dst)
        # Stable sort keeps each row's neighbors in edge-file order.
        order = np.argsort(rows, kind="stable")
        indices = cols[order]
        indptr = np.zeros(n + 1, dtype=np.int64)
        np.cumsum(np.bincount(rows, minlength=n), out=indptr[1:])
        data = np.ones(len(indices), dtype=np.float64)
        adj = sp.csr_matrix((data, indices, indptr), shape=(n, n))

        exists = np.zeros(n, dtype=bool)
        exists[ids] = True
        return cls(adj, exists, stored)

    @property
    def max_node_id(self):
        return len(self._exists) - 1

    @property
    def node_count(self):
        return len(self._nodes)

    def exists_node(self, node):
        return 0 <= node < len(self._exists) and bool(self._exists[node])

    def __iter__(self):
        return iter(self._nodes.tolist())

    def efficient_neighbors(self, node):
        start, end = self._adj.indptr[node], self._adj.indptr[node + 1]
        return self._adj.indices[start:end]

    def edges(self):
        """Return (src, dst) arrays of every edge in true direction."""
        rows = np.repeat(np.arange(self._adj.shape[0]), np.diff(self._adj.indptr))
        cols = self._adj.indices.astype(np.int64)
        if self.is_in_stored:
            return cols, rows
        return rows, cols

    def reverse_stored(self):
        """Same graph, stored in the other direction."""
        src, dst = self.edges()
        other = StoredDirection.OUT if self.is_in_stored else StoredDirection.IN
        return SparseGraph.from_edges(src, dst, stored=other, nodes=self._nodes)

    def to_csr(self) -> sp.csr_matrix:
        return self._adj

    def __repr__(self):
        return (
            f"SparseGraph(nodes={self.node_count}, edges={self._adj.nnz}, "
            f"max_node_id={self.max_node_id}, stored={self.stored_direction.value})"
        )


def load_graph(filename=DATA_FILE, stored=StoredDirection.OUT) -> SparseGraph:
    """Load a whitespace separated `src dst` edge list."""
    data = np.loadtxt(filename, dtype=np.int64, ndmin=2)
    if data.size == 0:
        raise ValueError(f"{filename}: no edges")
    if data.shape[1] < 2:
        raise ValueError(f"{filename}: expected `src dst` per line")
    return SparseGraph.from_edges(data[:, 0], data[:, 1], stored=stored)
