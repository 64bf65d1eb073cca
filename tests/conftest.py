"""Shared fixtures and fake fetchers."""

from __future__ import annotations

import threading
from pathlib import Path

import pytest

from slurmcache.core.fetchers import FetchError, Fetcher

FIXTURES_DIR = Path(__file__).parent / "fixtures"


class CountingFetcher(Fetcher):
    """Returns numbered payloads and counts calls."""

    def __init__(self, delay: float = 0.0):
        self.calls = 0
        self.delay = delay
        self._lock = threading.Lock()

    def fetch(self) -> bytes:
        with self._lock:
            self.calls += 1
            n = self.calls
        if self.delay:
            threading.Event().wait(self.delay)
        return f"payload-{n}".encode()


class FailingFetcher(Fetcher):
    """Fails every call until told otherwise."""

    def __init__(self):
        self.calls = 0
        self.fail = True

    def fetch(self) -> bytes:
        self.calls += 1
        if self.fail:
            raise FetchError("scheduler unavailable")
        return b"recovered"


@pytest.fixture
def counting_fetcher() -> CountingFetcher:
    return CountingFetcher()


@pytest.fixture
def failing_fetcher() -> FailingFetcher:
    return FailingFetcher()


@pytest.fixture
def squeue_fixture() -> Path:
    return FIXTURES_DIR / "squeue.json"
