"""Configuration management."""

from .manager import ConfigManager, ConfigError, ReconcileConfig, create_sample_config

__all__ = ["ConfigManager", "ConfigError", "ReconcileConfig", "create_sample_config"]
