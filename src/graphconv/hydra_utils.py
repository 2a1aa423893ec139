"""Hydra config composition and conversion request helpers."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any, Optional, Union

from hydra import compose, initialize_config_dir
from hydra.core.global_hydra import GlobalHydra
from hydra.errors import HydraException
from omegaconf import OmegaConf
from omegaconf.errors import OmegaConfBaseException

from graphconv.config.schema import register_configs
from graphconv.errors import ConfigError, UsageError
from graphconv.pipeline import ConversionRequest

DEFAULT_CONFIG_PATH = "configs"
DEFAULT_CONFIG_NAME = "default"

_FLAG_OVERRIDES = {
    "--sort": "sort=true",
    "--directed-degree": "direct_by_degree=true",
    "--direct-by-degree": "direct_by_degree=true",
    "--symmetrize": "asymmetric_policy=symmetrize",
}


def _normalize_overrides(overrides: Optional[Sequence[str]]) -> list[str]:
    if not overrides:
        return []
    normalized: list[str] = []
    for item in overrides:
        if not item or item == "--":
            continue
        if item in _FLAG_OVERRIDES:
            normalized.append(_FLAG_OVERRIDES[item])
            continue
        if item.startswith("--"):
            raise UsageError(f"Unknown option {item!r}; use key=value overrides.")
        normalized.append(item)
    return normalized


def _normalize_config_name(config_name: str) -> str:
    if config_name.endswith((".yaml", ".yml")):
        return Path(config_name).stem
    return config_name


def resolve_config_dir(config_path: Union[Path, str] = DEFAULT_CONFIG_PATH) -> Path:
    """Resolve a config dir against cwd, then against the project checkout."""
    config_dir = Path(config_path)
    if config_dir.is_absolute():
        return config_dir
    cwd_candidate = (Path.cwd() / config_dir).resolve()
    if cwd_candidate.exists():
        return cwd_candidate
    project_candidate = Path(__file__).resolve().parents[2] / config_dir
    if project_candidate.exists():
        return project_candidate
    return cwd_candidate


def compose_config(
    *,
    config_path: Union[Path, str] = DEFAULT_CONFIG_PATH,
    config_name: str = DEFAULT_CONFIG_NAME,
    overrides: Optional[Sequence[str]] = None,
) -> Any:
    register_configs()
    config_dir = resolve_config_dir(config_path)
    if not config_dir.exists():
        raise ConfigError(f"Config directory not found: {config_dir}")
    if GlobalHydra.instance().is_initialized():
        GlobalHydra.instance().clear()
    try:
        with initialize_config_dir(config_dir=str(config_dir), version_base=None):
            return compose(
                config_name=_normalize_config_name(config_name),
                overrides=_normalize_overrides(overrides),
            )
    except (HydraException, OmegaConfBaseException) as exc:
        raise ConfigError(f"Failed to compose config from {config_dir}: {exc}") from exc


def resolve_config(cfg: Any) -> dict[str, Any]:
    if not OmegaConf.is_config(cfg):
        if isinstance(cfg, Mapping):
            return dict(cfg)
        raise ConfigError("Config must be an OmegaConf object or a mapping.")
    resolved = OmegaConf.to_container(cfg, resolve=True, throw_on_missing=False)
    if not isinstance(resolved, dict):
        raise ConfigError("Resolved config must be a mapping.")
    return resolved


def format_config(cfg: Any) -> str:
    return OmegaConf.to_yaml(cfg, resolve=True)


def _section(cfg: Mapping[str, Any], key: str) -> Mapping[str, Any]:
    value = cfg.get(key) or {}
    if not isinstance(value, Mapping):
        raise ConfigError(f"{key} must be a mapping.")
    return value


def _require_path(cfg: Mapping[str, Any], key: str) -> Path:
    value = cfg.get(key)
    if value is None or (isinstance(value, str) and not value.strip()):
        raise UsageError(
            f"Missing required setting {key!r} (ex: {key}=graph.mtx).",
        )
    return Path(str(value))


def request_from_config(cfg: Any) -> ConversionRequest:
    """Validate a composed config into a :class:`ConversionRequest`."""
    resolved = resolve_config(cfg)
    direction = _section(resolved, "direction")
    formats = _section(resolved, "format")
    report = resolved.get("report")
    return ConversionRequest(
        input_path=_require_path(resolved, "input"),
        output_path=_require_path(resolved, "output"),
        input_direction=direction.get("input", 1),
        output_direction=direction.get("output", 1),
        sort=bool(resolved.get("sort", False)),
        direct_by_degree=bool(resolved.get("direct_by_degree", False)),
        asymmetric_policy=str(resolved.get("asymmetric_policy", "error")),
        input_format=formats.get("input"),
        output_format=formats.get("output"),
        report_path=Path(report) if report else None,
    )


__all__ = [
    "DEFAULT_CONFIG_PATH",
    "DEFAULT_CONFIG_NAME",
    "compose_config",
    "format_config",
    "request_from_config",
    "resolve_config",
    "resolve_config_dir",
]
