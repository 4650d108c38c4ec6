import numpy as np
import pytest

from graphview import SparseGraph, StoredDirection, load_graph
from linkanalysis import GraphInconsistencyError


def test_from_edges_out_stored(mixed_edges):
    g = SparseGraph.from_edges(*mixed_edges)
    assert g.max_node_id == 5
    assert g.node_count == 6
    assert not g.is_in_stored
    assert list(g) == [0, 1, 2, 3, 4, 5]
    assert g.efficient_neighbors(3).tolist() == [0, 4, 5]
    assert g.efficient_neighbors(4).tolist() == [0, 0]
    assert g.efficient_neighbors(5).tolist() == []


def test_from_edges_in_stored(mixed_edges):
    g = SparseGraph.from_edges(*mixed_edges, stored="in")
    assert g.is_in_stored
    assert g.stored_direction is StoredDirection.IN
    assert g.efficient_neighbors(0).tolist() == [2, 3, 4, 4]
    assert g.efficient_neighbors(5).tolist() == [3]


def test_sparse_id_space():
    g = SparseGraph.from_edges([0, 7], [7, 0], nodes=[3])
    assert g.max_node_id == 7
    assert g.node_count == 3
    assert list(g) == [0, 3, 7]
    assert g.exists_node(3)
    assert not g.exists_node(1)
    assert not g.exists_node(8)
    assert not g.exists_node(-1)
    assert g.efficient_neighbors(3).tolist() == []


def test_negative_ids_rejected():
    with pytest.raises(GraphInconsistencyError):
        SparseGraph.from_edges([0, -1], [1, 0])


def test_mismatched_edge_arrays():
    with pytest.raises(ValueError):
        SparseGraph.from_edges([0, 1], [1])


def test_reverse_stored_keeps_edges(mixed_edges):
    g = SparseGraph.from_edges(*mixed_edges, nodes=[9])
    r = g.reverse_stored()
    assert r.is_in_stored
    assert list(r) == list(g)
    src, dst = r.edges()
    assert sorted(zip(src.tolist(), dst.tolist())) == sorted(zip(*(a.tolist() for a in mixed_edges)))


def test_to_csr_keeps_duplicates(mixed_edges):
    g = SparseGraph.from_edges(*mixed_edges)
    assert g.to_csr().nnz == len(mixed_edges[0])


def test_load_graph(tmp_path):
    path = tmp_path / "Data.txt"
    path.write_text("0 1\n1 2\n2 0\n2 4\n")
    g = load_graph(str(path), stored=StoredDirection.IN)
    assert g.node_count == 4
    assert g.max_node_id == 4
    assert g.efficient_neighbors(0).tolist() == [2]
    assert not g.exists_node(3)


def test_load_graph_single_edge(tmp_path):
    path = tmp_path / "Data.txt"
    path.write_text("3 1\n")
    g = load_graph(str(path))
    assert g.efficient_neighbors(3).tolist() == [1]


def test_load_graph_malformed(tmp_path):
    path = tmp_path / "Data.txt"
    path.write_text("0 a\n")
    with pytest.raises(ValueError):
        load_graph(str(path))


def test_load_graph_single_column(tmp_path):
    path = tmp_path / "Data.txt"
    path.write_text("0\n1\n")
    with pytest.raises(ValueError):
        load_graph(str(path))
