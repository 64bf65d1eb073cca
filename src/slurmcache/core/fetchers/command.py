"""
Command fetcher - runs a Slurm CLI and captures its output.

Provides payload fetching with:
- A hard wall-clock timeout that kills the whole process group
- Strict failure on non-zero exit or any stderr output
- Debug timing of every invocation
"""

from __future__ import annotations

import os
import signal
import subprocess
import threading
from typing import TYPE_CHECKING

from slurmcache.core.logging import get_logger, log_duration

from .base import Fetcher, InvalidCommandError, ProcessError, ProcessTimeoutError

if TYPE_CHECKING:
    from slurmcache.core.config.models import CommandConfig


logger = get_logger("fetchers.command")

# Seconds a CLI call may run before it is killed
DEFAULT_TIMEOUT = 10.0


class CommandFetcher(Fetcher):
    """Fetcher that shells out to a command line program.

    Every call spawns a fresh process, so a single instance can be
    shared between threads.

    Usage:
        fetcher = CommandFetcher("squeue", "--json", timeout=5)
        payload = fetcher.fetch()
    """

    def __init__(self, *args: str, timeout: float = DEFAULT_TIMEOUT):
        """Initialize command fetcher.

        Args:
            *args: Executable followed by its arguments
            timeout: Seconds before the process is killed
        """
        self.args: tuple[str, ...] = tuple(args)
        self.timeout = timeout

    @classmethod
    def from_config(cls, config: CommandConfig) -> "CommandFetcher":
        """Build a fetcher from validated command settings."""
        return cls(*config.args, timeout=config.timeout)

    @property
    def command_line(self) -> str:
        return " ".join(self.args)

    def _kill(self, process: subprocess.Popen, fired: threading.Event) -> None:
        """Deadline callback: kill the process and anything it spawned."""
        fired.set()
        logger.warning(
            "Command exceeded %ss timeout, killing: %s",
            self.timeout,
            self.command_line,
            extra={"command": self.command_line},
        )
        try:
            os.killpg(process.pid, signal.SIGKILL)
        except OSError:
            # The final wait still decides the outcome
            logger.error(
                "Failed to cancel command: %s",
                self.command_line,
                exc_info=True,
                extra={"command": self.command_line},
            )

    def fetch(self) -> bytes:
        """Run the command and return its stdout verbatim.

        Returns:
            Captured standard output

        Raises:
            InvalidCommandError: If no executable was configured
            ProcessTimeoutError: If the process was killed by the timeout
            ProcessError: On spawn failure, non-zero exit or any stderr output
        """
        if not self.args:
            raise InvalidCommandError("Need at least 1 argument (the executable)", command=self.args)

        with log_duration(logger, self.command_line):
            try:
                process = subprocess.Popen(
                    self.args,
                    stdin=subprocess.DEVNULL,
                    stdout=subprocess.PIPE,
                    stderr=subprocess.PIPE,
                    start_new_session=True,
                )
            except OSError as e:
                raise ProcessError(
                    f"Failed to start {self.args[0]}: {e}",
                    command=self.args,
                    cause=e,
                ) from e

            fired = threading.Event()
            deadline = threading.Timer(self.timeout, self._kill, args=(process, fired))
            deadline.daemon = True
            deadline.start()
            try:
                stdout, stderr = process.communicate()
            finally:
                deadline.cancel()

        stderr_text = stderr.decode("utf-8", errors="replace")

        if process.returncode != 0:
            logger.debug(
                "Command exited with status %d",
                process.returncode,
                extra={"command": self.command_line, "returncode": process.returncode},
            )
            if fired.is_set() and process.returncode < 0:
                raise ProcessTimeoutError(
                    f"{self.command_line} killed after {self.timeout}s timeout",
                    command=self.args,
                    timeout=self.timeout,
                    returncode=process.returncode,
                    stderr=stderr_text,
                )
            raise ProcessError(
                f"{self.command_line} exited with status {process.returncode}",
                command=self.args,
                returncode=process.returncode,
                stderr=stderr_text,
            )

        # Any stderr output is a failure, even with a zero exit status
        if stderr:
            raise ProcessError(
                stderr_text,
                command=self.args,
                returncode=process.returncode,
                stderr=stderr_text,
            )

        return stdout

    def __repr__(self) -> str:
        return f"CommandFetcher({self.command_line!r}, timeout={self.timeout})"
