"""Fetcher implementations producing raw scheduler payloads."""

from .base import (
    FetchError,
    Fetcher,
    InvalidCommandError,
    ProcessError,
    ProcessTimeoutError,
)
from .command import DEFAULT_TIMEOUT, CommandFetcher
from .fixture import FixtureFetcher

__all__ = [
    # Base classes
    "Fetcher",
    # Errors
    "FetchError",
    "InvalidCommandError",
    "ProcessError",
    "ProcessTimeoutError",
    # Implementations
    "CommandFetcher",
    "FixtureFetcher",
    "DEFAULT_TIMEOUT",
]
