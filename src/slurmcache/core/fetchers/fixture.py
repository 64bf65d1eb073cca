"""
Fixture-backed fetcher for tests and offline runs.
"""

from __future__ import annotations

from pathlib import Path

from .base import Fetcher


class FixtureFetcher(Fetcher):
    """Serves the contents of a local file instead of calling Slurm."""

    def __init__(self, path: Path | str):
        self.path = Path(path)

    def fetch(self) -> bytes:
        # OSError propagates untouched
        return self.path.read_bytes()

    def __repr__(self) -> str:
        return f"FixtureFetcher({str(self.path)!r})"
