"""Aggregate result dataclasses for EchoForge."""

from __future__ import annotations

from dataclasses import dataclass

__all__ = ["AggregateResult"]


@dataclass(frozen=True)
class AggregateResult:
    """Run-wide totals folded from every worker outcome.

    Attributes:
        total_requests: Round trips completed across all connections.
        total_errors: Number of workers that stopped on an I/O error.
        requests_per_second: ``total_requests`` divided by the configured
            duration (not by the measured wall time).
        connections: Number of worker outcomes folded into this result.
        elapsed_seconds: Measured wall time from start to last join.
    """

    total_requests: int = 0
    total_errors: int = 0
    requests_per_second: float = 0.0
    connections: int = 0
    elapsed_seconds: float = 0.0
