"""Configuration loading and validation."""

from .models import (
    AppConfig,
    CacheConfig,
    CommandConfig,
    LoggingConfig,
)
from .loader import ConfigError, load_app_config

__all__ = [
    # Config models
    "AppConfig",
    "CacheConfig",
    "CommandConfig",
    "LoggingConfig",
    # Loaders
    "ConfigError",
    "load_app_config",
]
