"""Edge list canonicalization stages.

Every stage takes an ``(n, 2)`` int64 edge array and returns a new array; no
stage mutates or retains its input.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import numpy as np

from graphconv.edges import EDGE_DTYPE, Direction, VertexId


@dataclass(frozen=True)
class DegreeTable:
    """Out-degree per vertex, aligned with the sorted ``vertices`` array."""

    vertices: np.ndarray
    degrees: np.ndarray

    def __len__(self) -> int:
        return int(self.vertices.shape[0])

    def degree(self, vertex: VertexId) -> int:
        index = int(np.searchsorted(self.vertices, vertex))
        if index >= len(self) or int(self.vertices[index]) != vertex:
            return 0
        return int(self.degrees[index])

    def as_dict(self) -> dict[int, int]:
        return {
            int(vertex): int(degree)
            for vertex, degree in zip(self.vertices, self.degrees)
        }


def _empty() -> np.ndarray:
    return np.empty((0, 2), dtype=EDGE_DTYPE)


def normalize_direction(edges: np.ndarray, direction: Any) -> np.ndarray:
    """Expand or canonicalize raw pairs according to ``direction``."""
    mode = Direction.parse(direction)
    if edges.shape[0] == 0:
        return _empty()
    if mode is Direction.DIRECTED:
        return edges.copy()
    if mode is Direction.BIDIRECTIONAL:
        expanded = np.empty((edges.shape[0] * 2, 2), dtype=EDGE_DTYPE)
        expanded[0::2] = edges
        expanded[1::2] = edges[:, ::-1]
        return expanded
    return np.column_stack((edges.min(axis=1), edges.max(axis=1))).astype(
        EDGE_DTYPE, copy=False
    )


def count_self_edges(edges: np.ndarray) -> int:
    if edges.shape[0] == 0:
        return 0
    return int(np.count_nonzero(edges[:, 0] == edges[:, 1]))


def sort_adjacencies(edges: np.ndarray) -> np.ndarray:
    """Order by source, then destination. ``np.lexsort`` is stable."""
    if edges.shape[0] == 0:
        return _empty()
    order = np.lexsort((edges[:, 1], edges[:, 0]))
    return edges[order]


def is_adjacency_sorted(edges: np.ndarray) -> bool:
    if edges.shape[0] < 2:
        return True
    src_prev, src_next = edges[:-1, 0], edges[1:, 0]
    dst_prev, dst_next = edges[:-1, 1], edges[1:, 1]
    ordered = (src_prev < src_next) | ((src_prev == src_next) & (dst_prev <= dst_next))
    return bool(np.all(ordered))


def deduplicate(edges: np.ndarray) -> tuple[np.ndarray, int]:
    """Drop repeated pairs from an adjacency-sorted edge list.

    Repeats are assumed to be adjacent, so the input must already be sorted
    with :func:`sort_adjacencies`. Returns the kept edges and the number of
    duplicates removed.
    """
    total = edges.shape[0]
    if total == 0:
        return _empty(), 0
    if not is_adjacency_sorted(edges):
        raise ValueError("deduplicate requires adjacency-sorted edges")
    keep = np.ones(total, dtype=bool)
    keep[1:] = np.any(edges[1:] != edges[:-1], axis=1)
    kept = edges[keep]
    return kept, int(total - kept.shape[0])


def out_degrees(edges: np.ndarray) -> DegreeTable:
    """Count edges leaving each vertex over the whole edge list."""
    if edges.shape[0] == 0:
        return DegreeTable(
            vertices=np.empty(0, dtype=EDGE_DTYPE),
            degrees=np.empty(0, dtype=np.int64),
        )
    vertices, inverse = np.unique(
        np.ascontiguousarray(edges).ravel(), return_inverse=True
    )
    index = inverse.reshape(-1, 2)
    degrees = np.bincount(index[:, 0], minlength=vertices.shape[0])
    return DegreeTable(vertices=vertices, degrees=degrees.astype(np.int64))


def is_symmetric(edges: np.ndarray) -> bool:
    """True when every (s, d) occurs exactly as often as (d, s)."""
    if edges.shape[0] == 0:
        return True
    forward = sort_adjacencies(edges)
    backward = sort_adjacencies(edges[:, ::-1])
    return bool(np.array_equal(forward, backward))


def symmetrize(edges: np.ndarray) -> np.ndarray:
    """Add every missing reverse edge; the result is sorted and duplicate-free."""
    if edges.shape[0] == 0:
        return _empty()
    combined = np.concatenate((edges, edges[:, ::-1]))
    unique, _ = deduplicate(sort_adjacencies(combined))
    return unique


def direct_by_degree(edges: np.ndarray) -> tuple[np.ndarray, DegreeTable]:
    """Keep one orientation per pair, from lower to higher out-degree.

    Ties go to the edge whose source id is smaller, so self edges are always
    dropped. Degrees are only meaningful when ``edges`` is symmetric.
    """
    table = out_degrees(edges)
    if edges.shape[0] == 0:
        return _empty(), table
    index = np.searchsorted(table.vertices, edges)
    deg_src = table.degrees[index[:, 0]]
    deg_dst = table.degrees[index[:, 1]]
    src = edges[:, 0]
    dst = edges[:, 1]
    keep = (deg_src < deg_dst) | ((deg_src == deg_dst) & (src < dst))
    return edges[keep], table


__all__ = [
    "DegreeTable",
    "count_self_edges",
    "deduplicate",
    "direct_by_degree",
    "is_adjacency_sorted",
    "is_symmetric",
    "normalize_direction",
    "out_degrees",
    "sort_adjacencies",
    "symmetrize",
]
