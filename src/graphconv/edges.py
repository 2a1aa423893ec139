"""In-memory edge list representation and direction modes."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
import enum
import re
from typing import Any, FrozenSet, Tuple

import numpy as np

from graphconv.errors import DirectionModeError

VertexId = int
Edge = Tuple[VertexId, VertexId]

EDGE_DTYPE = np.int64

_INT_TOKEN = re.compile(r"[+-]?[0-9]+")


class Direction(enum.IntEnum):
    """How each edge record is interpreted or produced."""

    DIRECTED = 1
    BIDIRECTIONAL = 2
    UNDIRECTED = 4

    @classmethod
    def parse(cls, value: Any) -> "Direction":
        if isinstance(value, cls):
            return value
        if isinstance(value, bool):
            raise DirectionModeError(_direction_message(value))
        if isinstance(value, str):
            token = value.strip()
            if _INT_TOKEN.fullmatch(token):
                value = int(token)
            else:
                try:
                    return cls[token.upper()]
                except KeyError:
                    raise DirectionModeError(_direction_message(value)) from None
        if isinstance(value, (int, np.integer)):
            try:
                return cls(int(value))
            except ValueError:
                raise DirectionModeError(_direction_message(value)) from None
        raise DirectionModeError(_direction_message(value))

    @property
    def label(self) -> str:
        return self.name.lower()


def _direction_message(value: Any) -> str:
    options = ", ".join(f"{member.value}={member.label}" for member in Direction)
    return f"Unrecognized direction mode {value!r}; expected one of {options}."


def as_edge_array(pairs: Iterable[Edge] | np.ndarray) -> np.ndarray:
    """Coerce pairs into an ``(n, 2)`` int64 array."""
    if isinstance(pairs, np.ndarray):
        array = pairs.astype(EDGE_DTYPE, copy=False)
    else:
        array = np.asarray(list(pairs), dtype=EDGE_DTYPE)
    if array.size == 0:
        return np.empty((0, 2), dtype=EDGE_DTYPE)
    if array.ndim != 2 or array.shape[1] != 2:
        raise ValueError(f"Edge array must have shape (n, 2), got {array.shape}.")
    return array


def edge_tuples(edges: np.ndarray) -> list[Edge]:
    return [(int(src), int(dst)) for src, dst in edges]


@dataclass
class EdgeStore:
    """Edge list plus the vertex ids observed while reading it."""

    edges: np.ndarray
    vertices: FrozenSet[VertexId] = field(default_factory=frozenset)
    self_edges: int = 0

    @property
    def num_edges(self) -> int:
        return int(self.edges.shape[0])

    @property
    def num_vertices(self) -> int:
        return len(self.vertices)


__all__ = [
    "EDGE_DTYPE",
    "Direction",
    "Edge",
    "EdgeStore",
    "VertexId",
    "as_edge_array",
    "edge_tuples",
]
