import itertools

import pytest

from ftwt.matrix import Triplet
from ftwt.topology import RandomGraph

BASE_PARAMS = dict(
    min_verts=6,
    max_verts=6,
    edge_probability=0.3,
    edge_min=0.5,
    edge_max=2.0,
    rng=7,
)


def make_graph(**overrides) -> RandomGraph:
    params = BASE_PARAMS.copy()
    params.update(overrides)
    return RandomGraph(**params)


def test_constructor_validations() -> None:
    with pytest.raises(ValueError):
        make_graph(min_verts=5, max_verts=4)
    with pytest.raises(ValueError):
        make_graph(min_verts=0, max_verts=3)
    with pytest.raises(ValueError):
        make_graph(edge_probability=1.5)
    with pytest.raises(ValueError):
        make_graph(edge_probability=-0.1)
    with pytest.raises(ValueError):
        make_graph(edge_min=3.0, edge_max=1.0)


def test_equal_bounds_give_exact_vertex_count() -> None:
    for seed in range(5):
        assert make_graph(min_verts=9, max_verts=9, rng=seed).num_verts == 9


def test_vertex_count_drawn_from_half_open_range() -> None:
    counts = {make_graph(min_verts=3, max_verts=6, rng=seed).num_verts for seed in range(40)}
    assert counts <= {3, 4, 5}
    assert len(counts) > 1


def test_full_probability_connects_every_ordered_pair() -> None:
    graph = make_graph(min_verts=7, max_verts=7, edge_probability=1.0)

    pairs = {(e.row, e.col) for e in graph.edges()}
    expected = {(i, j) for i, j in itertools.product(range(7), repeat=2) if i != j}
    assert pairs == expected
    assert graph.num_edges == 7 * 6
    assert len(graph.islands) == 1


def test_zero_probability_graph_is_repaired_pairwise() -> None:
    graph = make_graph(min_verts=5, max_verts=5, edge_probability=0.0)

    # every vertex starts as its own island; each island pair gets one edge each way
    assert len(graph.islands) == 5
    assert graph.num_edges == 2 * (5 * 4 // 2)
    assert graph.is_weakly_connected()


def test_edge_weights_respect_bounds_and_no_self_loops() -> None:
    graph = make_graph(min_verts=12, max_verts=12, edge_probability=0.4, edge_min=-1.0, edge_max=3.0)

    for edge in graph.edges():
        assert edge.row != edge.col
        assert -1.0 <= edge.value <= 3.0


def test_islands_partition_the_vertices() -> None:
    for seed in range(10):
        graph = make_graph(min_verts=15, max_verts=15, edge_probability=0.05, rng=seed)
        members = sorted(v for island in graph.islands for v in island)
        assert members == list(range(15))


def test_island_walk_follows_outgoing_edges_only() -> None:
    graph = make_graph(min_verts=3, max_verts=3, edge_probability=0.0)
    graph.adjacencies = [[(1, 1.0)], [], [(0, 1.0)]]

    # vertex 2 reaches 0, but 0 was already claimed by the first island
    assert graph._find_islands() == [[0, 1], [2]]


def test_island_walk_backtracks_through_dead_ends() -> None:
    graph = make_graph(min_verts=5, max_verts=5, edge_probability=0.0)
    graph.adjacencies = [[(1, 1.0), (3, 1.0)], [(2, 1.0)], [], [(4, 1.0)], []]

    assert graph._find_islands() == [[0, 1, 2, 3, 4]]


def test_connect_islands_rejects_empty_list() -> None:
    graph = make_graph()
    with pytest.raises(ValueError):
        graph._connect_islands([])


def test_edges_and_triplet_matrix_agree() -> None:
    graph = make_graph(min_verts=8, max_verts=8, edge_probability=0.5)
    matrix = graph.to_triplet_matrix("graph")

    assert matrix.shape == (8, 8)
    assert matrix.entries == graph.edges()
    assert all(isinstance(e, Triplet) for e in graph.edges())

    compressed = matrix.to_compressed()
    assert compressed.nnz <= graph.num_edges


def test_same_seed_gives_same_graph() -> None:
    first = make_graph(min_verts=4, max_verts=20, rng=123)
    second = make_graph(min_verts=4, max_verts=20, rng=123)

    assert first.num_verts == second.num_verts
    assert first.edges() == second.edges()


def test_neighbors_bounds_check() -> None:
    graph = make_graph()
    with pytest.raises(IndexError):
        graph.neighbors(graph.num_verts)
    assert graph.neighbors(0) == graph.adjacencies[0]


def test_weak_components_of_repaired_graph() -> None:
    for seed in range(5):
        graph = make_graph(min_verts=20, max_verts=20, edge_probability=0.02, rng=seed)
        assert graph.is_weakly_connected()
