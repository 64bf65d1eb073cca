"""
Fetcher base class and error taxonomy.

Defines the one-method contract every payload source implements.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Sequence


class Fetcher(ABC):
    """Abstract source of a raw scheduler payload.

    Implementations must be safe to call from several threads; the
    cache serializes its own calls but a fetcher may be shared.
    """

    @abstractmethod
    def fetch(self) -> bytes:
        """Produce a fresh payload.

        Returns:
            Raw payload bytes

        Raises:
            FetchError: On failure to produce the payload
        """
        pass


class FetchError(Exception):
    """Base exception for fetcher errors."""

    def __init__(
        self,
        message: str,
        command: Sequence[str] | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message)
        self.command = tuple(command) if command is not None else None
        self.cause = cause


class InvalidCommandError(FetchError):
    """No executable given to a command fetcher."""
    pass


class ProcessError(FetchError):
    """Subprocess did not run to a clean, silent completion."""

    def __init__(
        self,
        message: str,
        command: Sequence[str] | None = None,
        returncode: int | None = None,
        stderr: str | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message, command=command, cause=cause)
        self.returncode = returncode
        self.stderr = stderr


class ProcessTimeoutError(ProcessError):
    """Subprocess was killed after exceeding its timeout."""

    def __init__(
        self,
        message: str,
        command: Sequence[str] | None = None,
        timeout: float | None = None,
        returncode: int | None = None,
        stderr: str | None = None,
    ):
        super().__init__(message, command=command, returncode=returncode, stderr=stderr)
        self.timeout = timeout
