"""Core cache, fetchers, configuration and logging."""

from .cache import ThrottledCache
from .fetchers import (
    CommandFetcher,
    FetchError,
    Fetcher,
    FixtureFetcher,
    InvalidCommandError,
    ProcessError,
    ProcessTimeoutError,
)

__all__ = [
    "ThrottledCache",
    "Fetcher",
    "CommandFetcher",
    "FixtureFetcher",
    "FetchError",
    "InvalidCommandError",
    "ProcessError",
    "ProcessTimeoutError",
]
