"""
Configuration loader for YAML files and environment overrides.

Loads and validates configuration into Pydantic models.
"""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import TYPE_CHECKING

import yaml
from pydantic import ValidationError

from .models import AppConfig

if TYPE_CHECKING:
    from typing import Any, Mapping


DEFAULT_CONFIG_PATH = Path("configs/app.yaml")

# Environment variable -> (section, key, parser)
ENV_OVERRIDES: dict[str, tuple[str, str, type]] = {
    "POLL_LIMIT": ("cache", "poll_limit", float),
    "FETCH_TIMEOUT": ("command", "timeout", float),
    "LOG_LEVEL": ("logging", "level", str),
}

_ENV_REF = re.compile(r"\$\{([^}:]+)(?::-([^}]*))?\}")


class ConfigError(Exception):
    """Configuration loading or validation error."""

    def __init__(self, message: str, path: Path | None = None, details: str | None = None):
        self.path = path
        self.details = details
        super().__init__(message)


def _load_yaml_file(path: Path) -> dict[str, Any]:
    """Load a YAML file and return its contents as a dictionary.

    Raises:
        ConfigError: If file cannot be read or parsed
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}", path=path, details=str(e)) from e
    except OSError as e:
        raise ConfigError(f"Cannot read {path}", path=path, details=str(e)) from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Top level of {path} must be a mapping", path=path)
    return data


def _expand_env_vars(data: Any, environ: Mapping[str, str]) -> Any:
    """Recursively expand ${VAR} and ${VAR:-default} in string values."""
    if isinstance(data, str):
        return _ENV_REF.sub(lambda m: environ.get(m.group(1), m.group(2) or ""), data)
    if isinstance(data, dict):
        return {k: _expand_env_vars(v, environ) for k, v in data.items()}
    if isinstance(data, list):
        return [_expand_env_vars(item, environ) for item in data]
    return data


def _apply_env_overrides(
    data: dict[str, Any],
    environ: Mapping[str, str],
    path: Path | None,
) -> dict[str, Any]:
    """Overlay known environment variables onto the loaded settings."""
    for var, (section, key, parser) in ENV_OVERRIDES.items():
        raw = environ.get(var)
        if raw is None:
            continue
        try:
            value = parser(raw)
        except ValueError as e:
            raise ConfigError(
                f"`{var}` env var must be a {parser.__name__}",
                path=path,
                details=str(e),
            ) from e
        section_data = data.get(section) or {}
        data[section] = {**section_data, key: value}
    return data


def load_app_config(
    path: Path | str | None = None,
    environ: Mapping[str, str] | None = None,
    expand_env: bool = True,
) -> AppConfig:
    """Load application configuration.

    Missing files fall back to defaults; environment variables listed
    in ENV_OVERRIDES win over file values.

    Args:
        path: Path to app.yaml (default: configs/app.yaml)
        environ: Environment mapping (default: os.environ)
        expand_env: Whether to expand ${VAR} references in the file

    Returns:
        Validated AppConfig instance

    Raises:
        ConfigError: If configuration is invalid
    """
    if environ is None:
        environ = os.environ

    if path is None:
        path = DEFAULT_CONFIG_PATH
        explicit = False
    else:
        path = Path(path)
        explicit = True

    if path.exists():
        data = _load_yaml_file(path)
    elif explicit:
        raise ConfigError(f"Configuration file not found: {path}", path=path)
    else:
        data = {}

    if expand_env:
        data = _expand_env_vars(data, environ)

    data = _apply_env_overrides(data, environ, path)

    try:
        return AppConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(
            f"Invalid configuration in {path}",
            path=path,
            details=str(e),
        ) from e
