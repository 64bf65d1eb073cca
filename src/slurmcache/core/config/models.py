"""
Pydantic configuration models for slurmcache.

These models provide type-safe configuration with validation for:
- Cache poll window
- The Slurm command to run
- Logging
"""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, Field, field_validator


# =============================================================================
# Cache Configuration
# =============================================================================


class CacheConfig(BaseModel):
    """Throttled cache settings."""

    poll_limit: float = Field(
        default=1.0,
        ge=0,
        description="Seconds a fetched payload is served before refetching",
    )


# =============================================================================
# Command Configuration
# =============================================================================


class CommandConfig(BaseModel):
    """Slurm CLI invocation settings."""

    args: list[str] = Field(
        default_factory=lambda: ["squeue", "--json"],
        description="Executable followed by its arguments",
    )
    timeout: float = Field(
        default=10.0,
        gt=0,
        description="Seconds before the command is killed",
    )

    @field_validator("args")
    @classmethod
    def validate_args(cls, v: list[str]) -> list[str]:
        if not v or not v[0].strip():
            raise ValueError("args must start with an executable")
        return v


# =============================================================================
# Logging Configuration
# =============================================================================


class LoggingConfig(BaseModel):
    """Logging settings."""

    level: str = Field(
        default="INFO",
        description="Log level (DEBUG, INFO, WARNING, ERROR)",
    )
    file: Path | None = Field(
        default=None,
        description="Log file path",
    )
    json_format: bool = Field(
        default=True,
        description="Use JSON format for file logs",
    )
    rich_console: bool = Field(
        default=True,
        description="Use Rich for console output",
    )

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"unknown log level: {v}")
        return level


# =============================================================================
# Application Configuration
# =============================================================================


class AppConfig(BaseModel):
    """Root application configuration.

    This is the main configuration object loaded from app.yaml.
    """

    cache: CacheConfig = Field(default_factory=CacheConfig)
    command: CommandConfig = Field(default_factory=CommandConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    fixture: Path | None = Field(
        default=None,
        description="Serve this file instead of running the command",
    )
