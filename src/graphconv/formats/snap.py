"""SNAP plain edge-pair format (0-based vertex ids).

See https://snap.stanford.edu/data/index.html.
"""

from __future__ import annotations

import logging
from pathlib import Path

import numpy as np

from graphconv.edges import Direction
from graphconv.formats.base import (
    EdgeAccumulator,
    GraphFormat,
    RawEdges,
    numbered_lines,
    parse_pair,
)
from graphconv.io_utils import atomic_text_writer, open_text_input
from graphconv.registry import register

logger = logging.getLogger(__name__)


class SnapFormat(GraphFormat):
    name = "snap"
    extensions = (".txt", ".el", ".edges")
    comment_prefixes = ("#", "%")

    def read(self, path: Path) -> RawEdges:
        logger.info("Reading %s in SNAP format", path)
        accumulator = EdgeAccumulator()
        with open_text_input(path) as handle:
            for line_no, line in numbered_lines(handle, path):
                stripped = line.strip()
                if not stripped or self.is_comment(stripped):
                    continue
                src, dst = parse_pair(
                    stripped.split(), path=path, line_no=line_no, line=line
                )
                accumulator.add(src, dst)
        return accumulator.build()

    def write(
        self,
        path: Path,
        edges: np.ndarray,
        *,
        num_vertices: int,
        direction: Direction = Direction.DIRECTED,
    ) -> None:
        logger.info(
            "Writing SNAP graph %s: %d vertices, %d edges",
            path,
            num_vertices,
            edges.shape[0],
        )
        with atomic_text_writer(path) as handle:
            handle.write(f"# {direction.label} graph\n")
            handle.write(f"# Nodes: {num_vertices} Edges: {edges.shape[0]}\n")
            if edges.shape[0]:
                np.savetxt(handle, edges, fmt="%d", delimiter=" ")


_SNAP_FORMAT = SnapFormat()
register("format", _SNAP_FORMAT.name, _SNAP_FORMAT)

__all__ = ["SnapFormat"]
