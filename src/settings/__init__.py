"""Workspace settings for covagg."""

from settings.config import (
    CONFIG_FILENAME,
    AggregationConfig,
    ConfigError,
    CovaggConfig,
    ModuleDecl,
    load_config,
    resolve_output_dir,
)

__all__ = [
    "CONFIG_FILENAME",
    "AggregationConfig",
    "ConfigError",
    "CovaggConfig",
    "ModuleDecl",
    "load_config",
    "resolve_output_dir",
]
