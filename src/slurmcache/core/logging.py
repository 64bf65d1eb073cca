"""
Logging infrastructure for slurmcache.

Provides:
- Structured JSON logging for file output
- Rich console output for terminal
- Wall-clock timing of CLI invocations
"""

from __future__ import annotations

import logging
import sys
import time
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING, Iterator

import orjson

if TYPE_CHECKING:
    from rich.console import Console
    from rich.text import Text


# Extra record attributes copied into JSON output
EXTRA_FIELDS = ("command", "elapsed", "age", "returncode")


# =============================================================================
# JSON Formatter for File Logging
# =============================================================================


class JSONFormatter(logging.Formatter):
    """Format log records as JSON lines."""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        for key in EXTRA_FIELDS:
            if hasattr(record, key):
                log_data[key] = getattr(record, key)

        return orjson.dumps(log_data, default=str).decode("utf-8")


# =============================================================================
# Rich Console Handler
# =============================================================================


LEVEL_STYLES = {
    logging.DEBUG: "dim",
    logging.INFO: "default",
    logging.WARNING: "yellow",
    logging.ERROR: "red",
    logging.CRITICAL: "bold red",
}


def record_context(record: logging.LogRecord) -> str:
    """Render cache/process extras as ``key=value`` pairs, command excluded."""
    parts = []
    for key in EXTRA_FIELDS:
        if key == "command" or not hasattr(record, key):
            continue
        value = getattr(record, key)
        if key in ("elapsed", "age"):
            value = f"{value}s"
        parts.append(f"{key}={value}")
    return " ".join(parts)


class RichConsoleHandler(logging.Handler):
    """Handler that writes records to a Rich console on stderr.

    The command a record concerns is shown as a cyan prefix; timing
    and exit details follow the message in dim text.
    """

    def __init__(self, console: "Console | None" = None, level: int = logging.INFO):
        super().__init__(level)
        if console is None:
            from rich.console import Console
            console = Console(stderr=True)
        self.console = console

    def render(self, record: logging.LogRecord) -> "Text":
        from rich.text import Text

        line = Text()
        if hasattr(record, "command"):
            line.append(f"[{record.command}] ", style="cyan")
        line.append(self.format(record), style=LEVEL_STYLES.get(record.levelno, "default"))
        context = record_context(record)
        if context:
            line.append(f" ({context})", style="dim")
        return line

    def emit(self, record: logging.LogRecord) -> None:
        try:
            self.console.print(self.render(record), highlight=False)
            if record.exc_info:
                self.console.print_exception()
        except Exception:
            self.handleError(record)


# =============================================================================
# Logger Configuration
# =============================================================================


def setup_logging(
    level: str = "INFO",
    log_file: Path | str | None = None,
    json_format: bool = True,
    rich_console: bool = True,
) -> logging.Logger:
    """Set up logging for slurmcache.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR)
        log_file: Path to log file (optional)
        json_format: Use JSON format for file logs
        rich_console: Use Rich for console output

    Returns:
        Root logger for slurmcache
    """
    logger = logging.getLogger("slurmcache")
    logger.setLevel(getattr(logging, level.upper()))

    logger.handlers.clear()

    # Console handler, always stderr so payloads on stdout stay clean
    if rich_console:
        console_handler: logging.Handler = RichConsoleHandler()
        console_handler.setFormatter(logging.Formatter("%(message)s"))
    else:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setFormatter(
            logging.Formatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s")
        )
    console_handler.setLevel(getattr(logging, level.upper()))
    logger.addHandler(console_handler)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_path, encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)

        if json_format:
            file_handler.setFormatter(JSONFormatter())
        else:
            file_handler.setFormatter(
                logging.Formatter(
                    "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
                    datefmt="%Y-%m-%d %H:%M:%S",
                )
            )

        logger.addHandler(file_handler)

    return logger


def get_logger(name: str | None = None) -> logging.Logger:
    """Get a logger instance.

    Args:
        name: Logger name (will be prefixed with 'slurmcache.')

    Returns:
        Logger instance
    """
    if name:
        return logging.getLogger(f"slurmcache.{name}")
    return logging.getLogger("slurmcache")


# =============================================================================
# Timing
# =============================================================================


@contextmanager
def log_duration(logger: logging.Logger, label: str) -> Iterator[None]:
    """Log how long the wrapped block took, even when it raises.

    Usage:
        with log_duration(logger, "squeue --json"):
            run_command()
    """
    start = time.perf_counter()
    try:
        yield
    finally:
        elapsed = time.perf_counter() - start
        logger.debug(
            "cmd %s took %.3f secs",
            label,
            elapsed,
            extra={"command": label, "elapsed": round(elapsed, 6)},
        )
