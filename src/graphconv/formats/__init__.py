"""Graph file formats and extension-based selection."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Union

from graphconv.formats.base import GraphFormat, RawEdges
from graphconv.formats.market import MarketFormat
from graphconv.formats.snap import SnapFormat
from graphconv.registry import Registry, default_registry, resolve_format

DEFAULT_FORMAT = "snap"

logger = logging.getLogger(__name__)


def extension_map(registry: Optional[Registry] = None) -> dict[str, str]:
    registry = registry or default_registry()
    mapping: dict[str, str] = {}
    for fmt in registry.values("format"):
        for suffix in fmt.extensions:
            mapping[suffix.lower()] = fmt.name
    return mapping


def format_for_path(
    path: Union[str, Path],
    explicit: Optional[str] = None,
    *,
    registry: Optional[Registry] = None,
) -> GraphFormat:
    """Pick a format by explicit name, else by file extension."""
    if explicit:
        return resolve_format(explicit, registry=registry)
    suffix = Path(path).suffix.lower()
    name = extension_map(registry).get(suffix)
    if name is None:
        logger.warning(
            "Unrecognized file extension %r for %s; defaulting to %s format",
            suffix,
            path,
            DEFAULT_FORMAT,
        )
        name = DEFAULT_FORMAT
    return resolve_format(name, registry=registry)


__all__ = [
    "DEFAULT_FORMAT",
    "GraphFormat",
    "MarketFormat",
    "RawEdges",
    "SnapFormat",
    "extension_map",
    "format_for_path",
]
