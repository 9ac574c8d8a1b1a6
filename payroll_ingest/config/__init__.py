"""YAML configuration loading and validation."""

from .loader import ConfigError, DatabaseConfig, ImportConfig, load_config, resolve_dsn

__all__ = [
    "ConfigError",
    "DatabaseConfig",
    "ImportConfig",
    "load_config",
    "resolve_dsn",
]
