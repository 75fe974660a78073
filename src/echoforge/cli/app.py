"""Main Typer application — entry point for the ``echoforge`` CLI."""

from __future__ import annotations

import typer

from echoforge.cli.run import run_cmd

app = typer.Typer(
    name="echoforge",
    help="Echo benchmark: drive a TCP echo server over many persistent connections.",
    add_completion=False,
    context_settings={"help_option_names": ["-h", "--help"]},
    rich_markup_mode="rich",
)

app.command(help="Run an echo benchmark against a TCP echo server.")(run_cmd)


def main() -> None:
    """Console-script entry point."""
    app()
