"""Dado job configuration loading and validation."""

from router_control.configs.loader import (
    ConfigError,
    JobConfig,
    LoggingConfig,
    load_config,
    parse_quantity,
)

__all__ = [
    "ConfigError",
    "JobConfig",
    "LoggingConfig",
    "load_config",
    "parse_quantity",
]
