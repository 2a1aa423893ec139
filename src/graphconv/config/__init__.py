"""Structured configuration for graph conversion."""

from graphconv.config.schema import ConvertConfig, register_configs

__all__ = ["ConvertConfig", "register_configs"]
