"""CLI entry point for grains."""

import logging
from typing import List, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler

from grains.config import Config
from grains.driver import run
from grains.errors import GrainsError
from grains.ui import ConsoleUI

app = typer.Typer(
    help="grains - Analyze goroutine dumps for blocked goroutines and suspected deadlocks",
    no_args_is_help=True
)
console = Console(stderr=True)

SOURCES_HELP = "Goroutine dump files or http(s) URLs"


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True
    )


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
):
    """grains - Analyze goroutine dumps."""
    _setup_logging(verbose)


def _run(
    sources: List[str],
    cmd: Optional[List[str]],
    output: Optional[str],
    trim_path: str,
    timeout: float
) -> None:
    try:
        cfg = Config(output=output or "", trim_path=trim_path, timeout=timeout)
        run(sources, cmd, cfg, ConsoleUI(console))
    except GrainsError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(code=1)


@app.command()
def summary(
    sources: List[str] = typer.Argument(..., help=SOURCES_HELP),
    output: Optional[str] = typer.Option(None, "--output", "-o", help="Write the report to this file"),
    timeout: float = typer.Option(60.0, "--timeout", help="Timeout in seconds for remote dumps"),
):
    """Count blocked goroutines per reason and flag suspected deadlocks."""
    _run(sources, ["summary"], output, "", timeout)


@app.command()
def trim(
    sources: List[str] = typer.Argument(..., help=SOURCES_HELP),
    output: Optional[str] = typer.Option(None, "--output", "-o", help="Write the report to this file"),
    timeout: float = typer.Option(60.0, "--timeout", help="Timeout in seconds for remote dumps"),
):
    """Print the dump summary under a banner, with suspected deadlocks."""
    _run(sources, ["trim"], output, "", timeout)


@app.command()
def show(
    gid: int = typer.Argument(..., help="Goroutine id to show"),
    sources: List[str] = typer.Argument(..., help=SOURCES_HELP),
    output: Optional[str] = typer.Option(None, "--output", "-o", help="Write the report to this file"),
    timeout: float = typer.Option(60.0, "--timeout", help="Timeout in seconds for remote dumps"),
):
    """Show the stack of one goroutine."""
    _run(sources, ["show", str(gid)], output, "", timeout)


@app.command()
def dump(
    sources: List[str] = typer.Argument(..., help=SOURCES_HELP),
    trim_path: str = typer.Option("", "--trim-path", help="Directory for the trimmed dump file"),
    timeout: float = typer.Option(60.0, "--timeout", help="Timeout in seconds for remote dumps"),
):
    """Write the trimmed dump to trimed.<unixtime>.log."""
    _run(sources, ["dump"], None, trim_path, timeout)


@app.command()
def interactive(
    sources: List[str] = typer.Argument(..., help=SOURCES_HELP),
    trim_path: str = typer.Option("", "--trim-path", help="Directory for trimmed dump files"),
    timeout: float = typer.Option(60.0, "--timeout", help="Timeout in seconds for remote dumps"),
):
    """Explore a dump with an interactive shell."""
    _run(sources, None, None, trim_path, timeout)


if __name__ == "__main__":
    app()
