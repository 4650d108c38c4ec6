import numpy as np
import pytest

from graphview import SparseGraph, StoredDirection


@pytest.fixture(params=[StoredDirection.OUT, StoredDirection.IN], ids=["push", "pull"])
def stored(request):
    return request.param


@pytest.fixture
def cycle3(stored):
    return SparseGraph.from_edges([0, 1, 2], [1, 2, 0], stored=stored)


@pytest.fixture
def mixed_edges():
    # 4 -> 0 is repeated, 5 is dangling
    src = np.array([0, 0, 1, 2, 3, 3, 4, 4, 3])
    dst = np.array([1, 2, 2, 0, 0, 4, 0, 0, 5])
    return src, dst


@pytest.fixture
def mixed(mixed_edges, stored):
    return SparseGraph.from_edges(*mixed_edges, stored=stored)


@pytest.fixture
def star_edges():
    return np.zeros(4, dtype=np.int64), np.arange(1, 5)
