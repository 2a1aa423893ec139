"""Conversion pipeline: read, normalize, re-direct, sort, dedup, write."""

from __future__ import annotations

from dataclasses import asdict, dataclass
import logging
from pathlib import Path
import time
from typing import Any, Optional

import numpy as np

from graphconv import transforms
from graphconv.edges import Direction, EdgeStore
from graphconv.errors import AsymmetricGraphError, UsageError
from graphconv.formats import format_for_path
from graphconv.formats.base import RawEdges
from graphconv.io_utils import write_payload
from graphconv.registry import Registry
from graphconv.transforms import (
    deduplicate,
    is_symmetric,
    normalize_direction,
    sort_adjacencies,
    symmetrize,
)

logger = logging.getLogger(__name__)

ASYMMETRIC_POLICIES = ("error", "symmetrize")


@dataclass(frozen=True)
class ConversionRequest:
    input_path: Path
    output_path: Path
    input_direction: Direction = Direction.DIRECTED
    output_direction: Direction = Direction.DIRECTED
    sort: bool = False
    direct_by_degree: bool = False
    asymmetric_policy: str = "error"
    input_format: Optional[str] = None
    output_format: Optional[str] = None
    report_path: Optional[Path] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "input_path", Path(self.input_path))
        object.__setattr__(self, "output_path", Path(self.output_path))
        object.__setattr__(self, "input_direction", Direction.parse(self.input_direction))
        object.__setattr__(
            self, "output_direction", Direction.parse(self.output_direction)
        )
        if self.report_path is not None:
            object.__setattr__(self, "report_path", Path(self.report_path))
        validate_output_options(
            self.output_direction,
            direct_by_degree=self.direct_by_degree,
            asymmetric_policy=self.asymmetric_policy,
        )


@dataclass(frozen=True)
class OutputTransform:
    edges: np.ndarray
    duplicates_removed: int = 0
    degree_dropped: int = 0
    symmetrized_added: int = 0


@dataclass
class ConversionReport:
    input_path: str
    output_path: str
    input_format: str
    output_format: str
    input_direction: str
    output_direction: str
    input_vertices: int
    input_records: int
    input_edges: int
    self_edges: int
    read_duplicates_removed: int
    write_duplicates_removed: int
    degree_dropped: int
    symmetrized_added: int
    output_vertices: int
    output_edges: int
    sorted: bool
    elapsed_ms: int = 0

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def validate_output_options(
    direction: Direction,
    *,
    direct_by_degree: bool,
    asymmetric_policy: str,
) -> None:
    if asymmetric_policy not in ASYMMETRIC_POLICIES:
        options = ", ".join(ASYMMETRIC_POLICIES)
        raise UsageError(
            f"Unknown asymmetric policy {asymmetric_policy!r}; expected one of {options}."
        )
    if direct_by_degree and direction is not Direction.DIRECTED:
        raise UsageError(
            "Direction by degree is only supported for directed output "
            f"(got {direction.label})."
        )


def prepare_input(raw: RawEdges, direction: Any) -> tuple[EdgeStore, int]:
    """Apply the input direction to raw pairs.

    Undirected input is also sorted and deduplicated, since mirrored records
    collapse onto the same canonical pair. Returns the store and the number of
    duplicates removed.
    """
    mode = Direction.parse(direction)
    edges = normalize_direction(raw.edges, mode)
    logger.info(
        "Original input: %d vertices, %d edges", len(raw.vertices), edges.shape[0]
    )
    logger.info("Self-edges during reading: %d edges", raw.self_edges)
    removed = 0
    if mode is Direction.UNDIRECTED:
        before = edges.shape[0]
        edges, removed = deduplicate(sort_adjacencies(edges))
        logger.info(
            "Removed %d duplicate edges in conversion to undirected (%d -> %d edges)",
            removed,
            before,
            edges.shape[0],
        )
    store = EdgeStore(edges=edges, vertices=raw.vertices, self_edges=raw.self_edges)
    return store, removed


def _ensure_symmetric(edges: np.ndarray, policy: str) -> tuple[np.ndarray, int]:
    if is_symmetric(edges):
        return edges, 0
    if policy == "symmetrize":
        before = edges.shape[0]
        edges = symmetrize(edges)
        logger.warning(
            "Edge set is not symmetric; symmetrized %d edges into %d",
            before,
            edges.shape[0],
        )
        return edges, int(edges.shape[0] - before)
    raise AsymmetricGraphError(
        "Direction by degree requires a bidirectional edge set; "
        "read the input as bidirectional (2) or allow symmetrizing.",
        context={"edges": int(edges.shape[0])},
    )


def transform_for_output(
    store: EdgeStore,
    direction: Any,
    *,
    sort: bool = False,
    direct_by_degree: bool = False,
    asymmetric_policy: str = "error",
) -> OutputTransform:
    """Run the output-side stages on ``store.edges``."""
    mode = Direction.parse(direction)
    validate_output_options(
        mode, direct_by_degree=direct_by_degree, asymmetric_policy=asymmetric_policy
    )
    edges = normalize_direction(store.edges, mode)
    degree_dropped = 0
    added = 0

    if direct_by_degree:
        edges, added = _ensure_symmetric(edges, asymmetric_policy)
        before = edges.shape[0]
        edges, degrees = transforms.direct_by_degree(edges)
        degree_dropped = int(before - edges.shape[0])
        logger.info(
            "Directed by degree graph: %d edges (from %d)", edges.shape[0], before
        )
        logger.debug("Degree table covers %d vertices", len(degrees))
        sort = True

    if sort or mode is Direction.UNDIRECTED:
        logger.info("Sorting adjacencies...")
        edges = sort_adjacencies(edges)

    duplicates = 0
    if mode is Direction.UNDIRECTED:
        before = edges.shape[0]
        edges, duplicates = deduplicate(edges)
        logger.info(
            "Removed %d duplicate edges in conversion to undirected (%d -> %d edges)",
            duplicates,
            before,
            edges.shape[0],
        )

    return OutputTransform(
        edges=edges,
        duplicates_removed=duplicates,
        degree_dropped=degree_dropped,
        symmetrized_added=added,
    )


def convert(
    request: ConversionRequest,
    *,
    registry: Optional[Registry] = None,
) -> ConversionReport:
    """Convert ``request.input_path`` into ``request.output_path``."""
    start = time.perf_counter()
    reader = format_for_path(request.input_path, request.input_format, registry=registry)
    writer = format_for_path(
        request.output_path, request.output_format, registry=registry
    )

    raw = reader.read(request.input_path)
    store, read_removed = prepare_input(raw, request.input_direction)
    input_edges = store.num_edges
    result = transform_for_output(
        store,
        request.output_direction,
        sort=request.sort,
        direct_by_degree=request.direct_by_degree,
        asymmetric_policy=request.asymmetric_policy,
    )
    writer.write(
        request.output_path,
        result.edges,
        num_vertices=len(raw.vertices),
        direction=request.output_direction,
    )
    elapsed_ms = int((time.perf_counter() - start) * 1000)
    logger.info(
        "Time elapsed: %d seconds %d milliseconds", elapsed_ms // 1000, elapsed_ms % 1000
    )

    report = ConversionReport(
        input_path=str(request.input_path),
        output_path=str(request.output_path),
        input_format=reader.name,
        output_format=writer.name,
        input_direction=request.input_direction.label,
        output_direction=request.output_direction.label,
        input_vertices=len(raw.vertices),
        input_records=raw.num_records,
        input_edges=input_edges,
        self_edges=raw.self_edges,
        read_duplicates_removed=read_removed,
        write_duplicates_removed=result.duplicates_removed,
        degree_dropped=result.degree_dropped,
        symmetrized_added=result.symmetrized_added,
        output_vertices=len(raw.vertices),
        output_edges=int(result.edges.shape[0]),
        sorted=bool(
            request.sort
            or request.direct_by_degree
            or request.output_direction is Direction.UNDIRECTED
        ),
        elapsed_ms=elapsed_ms,
    )
    if request.report_path is not None:
        write_payload(request.report_path, report.to_dict())
        logger.info("Wrote conversion report to %s", request.report_path)
    return report


__all__ = [
    "ASYMMETRIC_POLICIES",
    "ConversionReport",
    "ConversionRequest",
    "OutputTransform",
    "convert",
    "prepare_input",
    "transform_for_output",
    "validate_output_options",
]
