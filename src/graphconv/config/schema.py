"""Structured config schema for Hydra."""

from __future__ import annotations

from dataclasses import dataclass, field
import logging
from typing import Any, Optional


@dataclass
class DirectionConfig:
    # 1|2|4 or directed|bidirectional|undirected.
    input: Any = 1
    output: Any = 1


@dataclass
class FormatConfig:
    # Explicit format names override extension sniffing.
    input: Optional[str] = None
    output: Optional[str] = None


@dataclass
class ConvertConfig:
    input: Optional[str] = None
    output: Optional[str] = None
    direction: DirectionConfig = field(default_factory=DirectionConfig)
    format: FormatConfig = field(default_factory=FormatConfig)
    sort: bool = False
    direct_by_degree: bool = False
    asymmetric_policy: str = "error"
    report: Optional[str] = None


def register_configs() -> None:
    from hydra.core.config_store import ConfigStore

    cs = ConfigStore.instance()
    try:
        cs.store(group="schema", name="base", node=ConvertConfig, package="_global_")
    except Exception as exc:
        logging.getLogger(__name__).warning(
            "Hydra config store registration failed: %s", exc
        )


__all__ = ["ConvertConfig", "DirectionConfig", "FormatConfig", "register_configs"]
