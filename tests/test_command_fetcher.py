"""Tests for the subprocess-backed fetcher."""

import logging
import subprocess
import time

import pytest

from slurmcache.core.config import CommandConfig
from slurmcache.core.fetchers import command as command_module
from slurmcache.core.fetchers import (
    DEFAULT_TIMEOUT,
    CommandFetcher,
    InvalidCommandError,
    ProcessError,
    ProcessTimeoutError,
)


def test_returns_stdout_verbatim():
    """Test that stdout comes back byte for byte."""
    fetcher = CommandFetcher("printf", "  jobs\n42  \n")
    assert fetcher.fetch() == b"  jobs\n42  \n"


def test_default_timeout():
    """Test the documented default timeout."""
    assert DEFAULT_TIMEOUT == 10.0
    assert CommandFetcher("squeue").timeout == 10.0


def test_from_config():
    """Test building a fetcher from settings."""
    fetcher = CommandFetcher.from_config(CommandConfig(args=["sinfo", "--json"], timeout=3))
    assert fetcher.args == ("sinfo", "--json")
    assert fetcher.timeout == 3
    assert fetcher.command_line == "sinfo --json"


def test_empty_command_never_spawns(monkeypatch):
    """Test that an empty command fails before any process starts."""
    def no_spawn(*args, **kwargs):
        raise AssertionError("process spawned")

    monkeypatch.setattr(subprocess, "Popen", no_spawn)

    with pytest.raises(InvalidCommandError):
        CommandFetcher().fetch()


def test_stderr_with_zero_exit_is_error():
    """Test that any stderr output fails the fetch even on exit 0."""
    fetcher = CommandFetcher("sh", "-c", "printf data; printf 'slurm warning' >&2")

    with pytest.raises(ProcessError) as exc_info:
        fetcher.fetch()

    assert str(exc_info.value) == "slurm warning"
    assert exc_info.value.returncode == 0
    assert exc_info.value.stderr == "slurm warning"
    assert not isinstance(exc_info.value, ProcessTimeoutError)


def test_nonzero_exit_is_error():
    """Test that a failing exit status is reported."""
    with pytest.raises(ProcessError) as exc_info:
        CommandFetcher("sh", "-c", "exit 3").fetch()

    assert exc_info.value.returncode == 3
    assert exc_info.value.command == ("sh", "-c", "exit 3")
    assert not isinstance(exc_info.value, ProcessTimeoutError)


def test_spawn_failure_is_process_error():
    """Test that a missing executable is wrapped with its cause."""
    with pytest.raises(ProcessError) as exc_info:
        CommandFetcher("/nonexistent/squeue").fetch()

    assert isinstance(exc_info.value.cause, OSError)


def test_timeout_kills_process():
    """Test that a slow command is killed close to its timeout."""
    fetcher = CommandFetcher("sleep", "5", timeout=0.3)

    start = time.monotonic()
    with pytest.raises(ProcessTimeoutError) as exc_info:
        fetcher.fetch()
    elapsed = time.monotonic() - start

    assert elapsed < 3
    assert exc_info.value.timeout == 0.3
    assert exc_info.value.returncode != 0


def broken_killpg(pid, sig):
    raise PermissionError("operation not permitted")


def test_kill_failure_is_logged_not_raised(monkeypatch, caplog):
    """Test that a failed kill leaves the outcome to the process itself."""
    monkeypatch.setattr(command_module.os, "killpg", broken_killpg)
    caplog.set_level(logging.DEBUG, logger="slurmcache")

    fetcher = CommandFetcher("sh", "-c", "sleep 0.5; printf done", timeout=0.1)
    assert fetcher.fetch() == b"done"
    assert any("Failed to cancel command" in r.getMessage() for r in caplog.records)


def test_timeout_kills_grandchildren():
    """Test that a shell wrapper's children cannot outlive the timeout."""
    fetcher = CommandFetcher("sh", "-c", "sleep 5; printf x", timeout=0.3)

    start = time.monotonic()
    with pytest.raises(ProcessTimeoutError):
        fetcher.fetch()

    assert time.monotonic() - start < 2


def test_own_nonzero_exit_after_deadline_is_not_timeout(monkeypatch):
    """Test that only a signal kill is reported as a timeout."""
    monkeypatch.setattr(command_module.os, "killpg", broken_killpg)

    with pytest.raises(ProcessError) as exc_info:
        CommandFetcher("sh", "-c", "sleep 0.5; exit 3", timeout=0.1).fetch()

    assert exc_info.value.returncode == 3
    assert not isinstance(exc_info.value, ProcessTimeoutError)


def test_logs_duration(caplog):
    """Test that each call logs the command and how long it took."""
    caplog.set_level(logging.DEBUG, logger="slurmcache")

    CommandFetcher("printf", "ok").fetch()

    records = [r for r in caplog.records if r.getMessage().startswith("cmd printf ok took")]
    assert len(records) == 1
    assert records[0].command == "printf ok"
    assert records[0].elapsed >= 0


def test_fresh_process_per_call():
    """Test that repeated calls each run the command."""
    fetcher = CommandFetcher("sh", "-c", "printf $$")
    assert fetcher.fetch() != fetcher.fetch()
