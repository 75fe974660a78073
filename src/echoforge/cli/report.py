"""Plain-text rendering of a finished benchmark run."""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.console import Console

if TYPE_CHECKING:
    from echoforge._internal.config import BenchConfig
    from echoforge.metrics.models import AggregateResult

console = Console()


def format_summary(result: AggregateResult, config: BenchConfig) -> str:
    """Render the run summary.

    Args:
        result: Aggregate totals of the run.
        config: Configuration the run was started with.

    Returns:
        Multi-line summary text without a trailing newline.
    """
    return (
        f"Benchmarking: {config.address}\n"
        f"{config.connections} clients, running {config.length} bytes, "
        f"{config.duration} sec.\n"
        "\n"
        f"Error: {result.total_errors}\n"
        f"Speed: {result.requests_per_second:.2f} request/sec"
    )


def print_summary(result: AggregateResult, config: BenchConfig) -> None:
    """Write the run summary to standard output."""
    console.print(
        format_summary(result, config),
        markup=False,
        highlight=False,
        soft_wrap=True,
    )
