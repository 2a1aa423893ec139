"""Graph file format interfaces and shared record parsing."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterator
from dataclasses import dataclass, field
from pathlib import Path
from typing import IO, FrozenSet, Optional, Sequence

import numpy as np

from graphconv.edges import EDGE_DTYPE, Direction, VertexId
from graphconv.errors import MalformedRecordError
from graphconv.io_utils import ENCODING
from graphconv.transforms import count_self_edges

_ID_LIMITS = np.iinfo(EDGE_DTYPE)


@dataclass(frozen=True)
class RawEdges:
    """Pairs exactly as read from a file, plus per-read diagnostics."""

    edges: np.ndarray
    vertices: FrozenSet[VertexId] = field(default_factory=frozenset)
    self_edges: int = 0
    declared_vertices: Optional[int] = None
    declared_edges: Optional[int] = None

    @property
    def num_records(self) -> int:
        return int(self.edges.shape[0])


class EdgeAccumulator:
    """Collects parsed pairs and tracks the vertices they touch."""

    def __init__(self, *, offset: int = 0) -> None:
        self.offset = offset
        self._sources: list[int] = []
        self._destinations: list[int] = []
        self._vertices: set[int] = set()

    def add(self, src: int, dst: int) -> None:
        src -= self.offset
        dst -= self.offset
        self._sources.append(src)
        self._destinations.append(dst)
        self._vertices.add(src)
        self._vertices.add(dst)

    def __len__(self) -> int:
        return len(self._sources)

    def build(
        self,
        *,
        declared_vertices: Optional[int] = None,
        declared_edges: Optional[int] = None,
    ) -> RawEdges:
        edges = np.empty((len(self._sources), 2), dtype=EDGE_DTYPE)
        edges[:, 0] = self._sources
        edges[:, 1] = self._destinations
        return RawEdges(
            edges=edges,
            vertices=frozenset(self._vertices),
            self_edges=count_self_edges(edges),
            declared_vertices=declared_vertices,
            declared_edges=declared_edges,
        )


def numbered_lines(handle: IO[str], path: Path) -> Iterator[tuple[int, str]]:
    """Yield ``(line_no, line)``, reporting undecodable bytes as malformed.

    ``handle`` must be opened with ``errors="surrogateescape"`` so a bad byte
    surfaces on the line that holds it.
    """
    for line_no, line in enumerate(handle, start=1):
        if not line.isascii():
            try:
                line.encode(ENCODING)
            except UnicodeEncodeError:
                raise MalformedRecordError(
                    path, line_no, line, f"not valid {ENCODING} text"
                ) from None
        yield line_no, line


def parse_int(
    token: str,
    *,
    path: Path,
    line_no: int,
    line: str,
    label: str,
    offset: int = 0,
) -> int:
    try:
        value = int(token)
    except ValueError:
        raise MalformedRecordError(
            path, line_no, line, f"{label} {token!r} is not an integer"
        ) from None
    if not _ID_LIMITS.min <= value - offset <= _ID_LIMITS.max:
        raise MalformedRecordError(
            path, line_no, line, f"{label} {token!r} is out of range"
        )
    return value


def parse_pair(
    tokens: Sequence[str],
    *,
    path: Path,
    line_no: int,
    line: str,
    offset: int = 0,
) -> tuple[int, int]:
    if len(tokens) < 2:
        raise MalformedRecordError(
            path, line_no, line, f"expected 2 vertex ids, got {len(tokens)}"
        )
    src = parse_int(
        tokens[0], path=path, line_no=line_no, line=line, label="source", offset=offset
    )
    dst = parse_int(
        tokens[1],
        path=path,
        line_no=line_no,
        line=line,
        label="destination",
        offset=offset,
    )
    return src, dst


class GraphFormat(ABC):
    """Reader/writer pair for one textual edge-list encoding."""

    name: str
    extensions: tuple[str, ...] = ()
    comment_prefixes: tuple[str, ...] = ("%",)

    def is_comment(self, line: str) -> bool:
        return line.startswith(self.comment_prefixes)

    @abstractmethod
    def read(self, path: Path) -> RawEdges:
        """Parse ``path`` into raw pairs with 0-based vertex ids."""

    @abstractmethod
    def write(
        self,
        path: Path,
        edges: np.ndarray,
        *,
        num_vertices: int,
        direction: Direction = Direction.DIRECTED,
    ) -> None:
        """Write ``edges`` to ``path`` atomically."""


__all__ = [
    "EdgeAccumulator",
    "GraphFormat",
    "RawEdges",
    "numbered_lines",
    "parse_int",
    "parse_pair",
]
