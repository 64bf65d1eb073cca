"""
slurmcache CLI - Main entry point.

Bootstraps configuration and logging, then drives the throttled
cache against a Slurm command or a local fixture.
"""

from __future__ import annotations

import time
from pathlib import Path
from typing import Any, List, Optional

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.table import Table

from slurmcache import __app_name__, __version__
from slurmcache.core.cache import ThrottledCache
from slurmcache.core.config import AppConfig, ConfigError, load_app_config
from slurmcache.core.fetchers import CommandFetcher, FetchError, Fetcher, FixtureFetcher
from slurmcache.core.logging import setup_logging

# Load environment variables from .env (if present)
load_dotenv()

console = Console()
err_console = Console(stderr=True)

app = typer.Typer(
    name=__app_name__,
    help="Throttled cache in front of Slurm CLI queries",
    rich_markup_mode="rich",
    no_args_is_help=True,
    pretty_exceptions_show_locals=False,
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"[bold cyan]{__app_name__}[/bold cyan] version [green]{__version__}[/green]")
        raise typer.Exit()


@app.callback()
def main(
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        "-v",
        help="Show version and exit",
        callback=version_callback,
        is_eager=True,
    ),
) -> None:
    """slurmcache - Rate-limited access to Slurm data."""
    pass


# =============================================================================
# Bootstrap
# =============================================================================


def _load_config(config_path: Optional[Path], overrides: dict[str, dict[str, Any]] | None = None) -> AppConfig:
    """Load configuration, exiting the process if it is invalid."""
    try:
        config = load_app_config(config_path)
        if overrides:
            data = config.model_dump()
            for section, values in overrides.items():
                if isinstance(data.get(section), dict):
                    data[section].update(values)
                else:
                    data[section] = values
            config = AppConfig.model_validate(data)
    except ConfigError as e:
        err_console.print(f"[red]Configuration error:[/red] {e}")
        if e.details:
            err_console.print(f"[dim]{e.details}[/dim]")
        raise typer.Exit(1)
    except ValueError as e:
        # pydantic ValidationError from CLI overrides
        err_console.print(f"[red]Configuration error:[/red] {e}")
        raise typer.Exit(1)
    return config


def _build_fetcher(config: AppConfig) -> Fetcher:
    if config.fixture is not None:
        return FixtureFetcher(config.fixture)
    return CommandFetcher.from_config(config.command)


# =============================================================================
# Fetch Command
# =============================================================================


@app.command()
def fetch(
    args: Optional[List[str]] = typer.Argument(
        None,
        help="Command to run instead of the configured one",
    ),
    config_path: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to app.yaml",
    ),
    fixture: Optional[Path] = typer.Option(
        None,
        "--fixture",
        "-f",
        help="Serve this file instead of running a command",
    ),
    timeout: Optional[float] = typer.Option(
        None,
        "--timeout",
        "-t",
        help="Seconds before the command is killed",
    ),
    poll_limit: Optional[float] = typer.Option(
        None,
        "--poll-limit",
        "-p",
        help="Seconds a payload stays fresh",
    ),
    times: int = typer.Option(
        1,
        "--times",
        "-n",
        min=1,
        help="Number of cache reads to perform",
    ),
    interval: float = typer.Option(
        0.0,
        "--interval",
        "-i",
        min=0.0,
        help="Seconds to wait between reads",
    ),
    output: Optional[Path] = typer.Option(
        None,
        "--output",
        "-o",
        help="Write the payload here instead of stdout",
    ),
) -> None:
    """Read the payload through the throttled cache.

    With --times above 1 the cache is read repeatedly, showing how
    many reads actually reached the underlying command. Put `--`
    before a command that takes its own options:

        slurmcache fetch -n 5 -- squeue --json
    """
    overrides: dict[str, dict[str, Any]] = {}
    if args:
        overrides.setdefault("command", {})["args"] = list(args)
    if timeout is not None:
        overrides.setdefault("command", {})["timeout"] = timeout
    if poll_limit is not None:
        overrides.setdefault("cache", {})["poll_limit"] = poll_limit

    config = _load_config(config_path, overrides)
    if fixture is not None:
        config = config.model_copy(update={"fixture": fixture})

    setup_logging(
        level=config.logging.level,
        log_file=config.logging.file,
        json_format=config.logging.json_format,
        rich_console=config.logging.rich_console,
    )

    cache = ThrottledCache.from_config(config.cache, _build_fetcher(config))

    payload = b""
    for i in range(times):
        if i and interval:
            time.sleep(interval)
        try:
            payload = cache.fetch()
        except (FetchError, OSError) as e:
            err_console.print(f"[red]Fetch failed:[/red] {e}")
            raise typer.Exit(1)

    if output is not None:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_bytes(payload)
    else:
        typer.echo(payload, nl=False)

    err_console.print(
        f"[green]OK[/green] {times} read(s), {cache.refresh_count} refresh(es), "
        f"{len(payload)} bytes"
    )


# =============================================================================
# Config Command
# =============================================================================


@app.command("config")
def show_config(
    config_path: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to app.yaml",
    ),
) -> None:
    """Show the effective configuration."""
    config = _load_config(config_path)

    table = Table(title="Effective Configuration", show_header=True, header_style="bold magenta")
    table.add_column("Setting", style="cyan")
    table.add_column("Value")

    table.add_row("cache.poll_limit", f"{config.cache.poll_limit}s")
    table.add_row("command.args", " ".join(config.command.args))
    table.add_row("command.timeout", f"{config.command.timeout}s")
    table.add_row("fixture", str(config.fixture) if config.fixture else "-")
    table.add_row("logging.level", config.logging.level)
    table.add_row("logging.file", str(config.logging.file) if config.logging.file else "-")

    console.print(table)


# =============================================================================
# Entry Point
# =============================================================================


def run() -> None:
    """Run the CLI application."""
    app()


if __name__ == "__main__":
    run()
