import numpy as np
import pytest

from graphconv.edges import Direction, as_edge_array, edge_tuples
from graphconv.errors import DirectionModeError
from graphconv.transforms import (
    count_self_edges,
    deduplicate,
    direct_by_degree,
    is_adjacency_sorted,
    is_symmetric,
    normalize_direction,
    out_degrees,
    sort_adjacencies,
    symmetrize,
)


def _edges(*pairs):
    return as_edge_array(list(pairs))


def test_normalize_directed_is_identity_copy() -> None:
    edges = _edges((2, 0), (0, 1), (1, 1))
    result = normalize_direction(edges, Direction.DIRECTED)

    assert edge_tuples(result) == [(2, 0), (0, 1), (1, 1)]
    assert result is not edges
    result[0, 0] = 99
    assert edges[0, 0] == 2


def test_normalize_bidirectional_interleaves_reverse_pairs() -> None:
    result = normalize_direction(_edges((0, 1), (2, 5), (3, 3)), 2)

    assert edge_tuples(result) == [
        (0, 1),
        (1, 0),
        (2, 5),
        (5, 2),
        (3, 3),
        (3, 3),
    ]


def test_normalize_undirected_orders_each_pair() -> None:
    result = normalize_direction(_edges((3, 1), (1, 3), (-2, 4), (7, 7)), "undirected")

    assert edge_tuples(result) == [(1, 3), (1, 3), (-2, 4), (7, 7)]
    assert np.all(result[:, 0] <= result[:, 1])


def test_normalize_rejects_unknown_mode() -> None:
    with pytest.raises(DirectionModeError):
        normalize_direction(_edges((0, 1)), 3)


def test_normalize_empty_list() -> None:
    for mode in Direction:
        assert normalize_direction(as_edge_array([]), mode).shape == (0, 2)


def test_count_self_edges() -> None:
    assert count_self_edges(_edges((0, 0), (0, 1), (3, 3))) == 2
    assert count_self_edges(as_edge_array([])) == 0


def test_sort_adjacencies_orders_by_source_then_destination() -> None:
    result = sort_adjacencies(_edges((2, 0), (0, 2), (1, 5), (0, 1), (1, -3)))

    assert edge_tuples(result) == [(0, 1), (0, 2), (1, -3), (1, 5), (2, 0)]
    assert is_adjacency_sorted(result)
    assert not is_adjacency_sorted(_edges((1, 0), (0, 1)))


def test_sort_already_sorted_is_unchanged() -> None:
    edges = _edges((0, 1), (1, 2), (2, 0))

    assert edge_tuples(sort_adjacencies(edges)) == [(0, 1), (1, 2), (2, 0)]


def test_deduplicate_counts_adjacent_repeats() -> None:
    edges = sort_adjacencies(_edges((1, 2), (0, 1), (1, 2), (0, 1), (1, 2), (2, 1)))
    result, removed = deduplicate(edges)

    assert edge_tuples(result) == [(0, 1), (1, 2), (2, 1)]
    assert removed == 3


def test_deduplicate_is_idempotent() -> None:
    edges = sort_adjacencies(_edges((4, 4), (0, 1), (0, 1), (3, 2)))
    once, first_removed = deduplicate(edges)
    twice, second_removed = deduplicate(once)

    assert first_removed == 1
    assert second_removed == 0
    assert np.array_equal(once, twice)


def test_deduplicate_rejects_unsorted_input() -> None:
    with pytest.raises(ValueError, match="adjacency-sorted"):
        deduplicate(_edges((1, 2), (0, 1), (1, 2)))


def test_deduplicate_empty() -> None:
    result, removed = deduplicate(as_edge_array([]))

    assert result.shape == (0, 2)
    assert removed == 0


def test_out_degrees_counts_sources() -> None:
    table = out_degrees(_edges((0, 1), (0, 2), (2, 0), (5, 0)))

    assert table.as_dict() == {0: 2, 1: 0, 2: 1, 5: 1}
    assert table.degree(0) == 2
    assert table.degree(1) == 0
    assert table.degree(42) == 0
    assert len(table) == 4


def test_is_symmetric_and_symmetrize() -> None:
    assert is_symmetric(_edges((0, 1), (1, 0), (2, 2)))
    assert is_symmetric(as_edge_array([]))
    assert not is_symmetric(_edges((0, 1), (1, 0), (0, 1)))
    assert not is_symmetric(_edges((0, 1), (1, 2), (2, 1)))

    result = symmetrize(_edges((0, 1), (1, 2), (2, 1)))
    assert edge_tuples(result) == [(0, 1), (1, 0), (1, 2), (2, 1)]
    assert is_symmetric(result)


def test_direct_by_degree_orients_low_to_high() -> None:
    # Star centered on 1: leaves have degree 1, the center degree 3.
    bidirectional = normalize_direction(_edges((0, 1), (1, 2), (1, 3)), 2)
    result, table = direct_by_degree(bidirectional)

    assert edge_tuples(result) == [(0, 1), (2, 1), (3, 1)]
    assert table.as_dict() == {0: 1, 1: 3, 2: 1, 3: 1}
    for src, dst in edge_tuples(result):
        assert table.degree(src) < table.degree(dst)


def test_direct_by_degree_breaks_ties_by_smaller_id() -> None:
    triangle = normalize_direction(_edges((2, 1), (1, 0), (0, 2)), 2)
    result, _ = direct_by_degree(triangle)

    assert sorted(edge_tuples(result)) == [(0, 1), (0, 2), (1, 2)]


def test_direct_by_degree_keeps_one_edge_per_pair() -> None:
    pairs = [(0, 1), (0, 2), (0, 3), (1, 2), (3, 4), (4, 5)]
    bidirectional = normalize_direction(as_edge_array(pairs), 2)
    result, _ = direct_by_degree(bidirectional)

    assert result.shape[0] == len(pairs)
    canonical = {tuple(sorted(edge)) for edge in edge_tuples(result)}
    assert canonical == {tuple(sorted(edge)) for edge in pairs}


def test_direct_by_degree_drops_self_edges() -> None:
    result, _ = direct_by_degree(_edges((3, 3), (0, 1), (1, 0)))

    assert edge_tuples(result) == [(0, 1)]
