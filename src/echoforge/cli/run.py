"""``echoforge`` — run an echo benchmark with live terminal progress."""

from __future__ import annotations

import logging

import typer
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.progress import BarColumn, Progress, TextColumn, TimeElapsedColumn

from echoforge import __version__
from echoforge._internal.config import load_config
from echoforge._internal.errors import EchoForgeError
from echoforge._internal.logging import setup_logging
from echoforge.cli.report import print_summary
from echoforge.engine.driver import BenchmarkDriver

console = Console(stderr=True)

# Conventional exit status for SIGINT
_EXIT_INTERRUPTED = 130


def _version_callback(value: bool) -> None:
    """Print version and exit.

    Args:
        value: True if --version was passed.
    """
    if value:
        typer.echo(f"echoforge {__version__}")
        raise typer.Exit


def run_cmd(
    address: str | None = typer.Option(
        None,
        "--address",
        "-a",
        help="Target echo server address. Default: 127.0.0.1:12345",
        metavar="<address>",
    ),
    length: int | None = typer.Option(
        None,
        "--length",
        "-l",
        help="Test message length. Default: 512",
        min=1,
        metavar="<length>",
    ),
    duration: int | None = typer.Option(
        None,
        "--duration",
        "-t",
        help="Test duration in seconds. Default: 60",
        min=1,
        metavar="<duration>",
    ),
    number: int | None = typer.Option(
        None,
        "--number",
        "-c",
        help="Test connection number. Default: 50",
        min=1,
        metavar="<number>",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose (DEBUG) logging.",
    ),
    json_logs: bool = typer.Option(
        False,
        "--json-logs",
        help="Emit log lines as JSON on stderr.",
    ),
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
) -> None:
    """Drive a TCP echo server over many connections and report throughput."""
    setup_logging(
        level=logging.DEBUG if verbose else logging.INFO,
        json_format=json_logs,
    )

    try:
        config = load_config(
            address=address,
            length=length,
            duration=duration,
            connections=number,
        )
    except EchoForgeError as exc:
        console.print(f"[red]Error:[/red] {escape(str(exc))}")
        raise typer.Exit(code=1) from exc

    console.print(
        Panel(
            f"[bold]Address:[/bold]  {escape(config.address)}\n"
            f"[bold]Clients:[/bold]  {config.connections}\n"
            f"[bold]Length:[/bold]   {config.length} bytes\n"
            f"[bold]Duration:[/bold] {config.duration}s",
            title="EchoForge",
            border_style="cyan",
        )
    )

    try:
        with Progress(
            TextColumn("[bold cyan]Benchmarking"),
            BarColumn(),
            TimeElapsedColumn(),
            console=console,
            transient=True,
        ) as progress:
            task_id = progress.add_task("run", total=config.duration)

            def _on_tick(elapsed: float) -> None:
                progress.update(task_id, completed=elapsed)

            driver = BenchmarkDriver(config, on_tick=_on_tick)
            result = driver.run()
    except EchoForgeError as exc:
        console.print(f"[red]Error:[/red] {escape(str(exc))}")
        raise typer.Exit(code=1) from exc
    except KeyboardInterrupt:
        console.print("[yellow]Interrupted, no summary produced.[/yellow]")
        raise typer.Exit(code=_EXIT_INTERRUPTED) from None

    print_summary(result, config)
