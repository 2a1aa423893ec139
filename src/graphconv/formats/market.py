"""Matrix Market coordinate format (1-based vertex ids).

Defined at https://math.nist.gov/MatrixMarket/formats.html. Only the pattern
part of the format is used: any value column after the two ids is ignored.
"""

from __future__ import annotations

import logging
from pathlib import Path

import numpy as np

from graphconv.edges import Direction
from graphconv.errors import GraphIOError, MalformedRecordError
from graphconv.formats.base import (
    EdgeAccumulator,
    GraphFormat,
    RawEdges,
    numbered_lines,
    parse_int,
    parse_pair,
)
from graphconv.io_utils import atomic_text_writer, open_text_input
from graphconv.registry import register

logger = logging.getLogger(__name__)

BANNER = "%%MatrixMarket matrix coordinate pattern"


class MarketFormat(GraphFormat):
    name = "market"
    extensions = (".mtx",)
    comment_prefixes = ("%",)

    def read(self, path: Path) -> RawEdges:
        logger.info("Reading %s in Matrix Market format", path)
        accumulator = EdgeAccumulator(offset=1)
        declared_vertices = None
        declared_edges = None
        with open_text_input(path) as handle:
            for line_no, line in numbered_lines(handle, path):
                stripped = line.strip()
                if not stripped or self.is_comment(stripped):
                    continue
                tokens = stripped.split()
                if declared_edges is None:
                    declared_vertices, declared_edges = self._parse_dimensions(
                        tokens, path=path, line_no=line_no, line=line
                    )
                    continue
                src, dst = parse_pair(
                    tokens,
                    path=path,
                    line_no=line_no,
                    line=line,
                    offset=accumulator.offset,
                )
                accumulator.add(src, dst)
        if declared_edges is None:
            raise GraphIOError(
                f"Matrix Market file {path} has no dimensions line."
            )
        if len(accumulator) != declared_edges:
            logger.warning(
                "%s declares %d edges but contains %d records",
                path,
                declared_edges,
                len(accumulator),
            )
        return accumulator.build(
            declared_vertices=declared_vertices,
            declared_edges=declared_edges,
        )

    @staticmethod
    def _parse_dimensions(
        tokens: list[str],
        *,
        path: Path,
        line_no: int,
        line: str,
    ) -> tuple[int, int]:
        if len(tokens) < 3:
            raise MalformedRecordError(
                path,
                line_no,
                line,
                "dimensions line must be '<rows> <cols> <entries>'",
            )
        rows = parse_int(tokens[0], path=path, line_no=line_no, line=line, label="rows")
        entries = parse_int(
            tokens[2], path=path, line_no=line_no, line=line, label="entries"
        )
        if rows < 0 or entries < 0:
            raise MalformedRecordError(
                path, line_no, line, "dimensions must be non-negative"
            )
        return rows, entries

    def write(
        self,
        path: Path,
        edges: np.ndarray,
        *,
        num_vertices: int,
        direction: Direction = Direction.DIRECTED,
    ) -> None:
        symmetry = "symmetric" if direction is Direction.UNDIRECTED else "general"
        logger.info(
            "Writing Matrix Market graph %s: %d vertices, %d edges",
            path,
            num_vertices,
            edges.shape[0],
        )
        with atomic_text_writer(path) as handle:
            handle.write(f"{BANNER} {symmetry}\n")
            handle.write(f"{num_vertices} {num_vertices} {edges.shape[0]}\n")
            if edges.shape[0]:
                np.savetxt(handle, edges + 1, fmt="%d", delimiter=" ")


_MARKET_FORMAT = MarketFormat()
register("format", _MARKET_FORMAT.name, _MARKET_FORMAT)

__all__ = ["BANNER", "MarketFormat"]
