"""Fan-in reduction of per-worker outcomes into one aggregate."""

from __future__ import annotations

from functools import reduce
from typing import TYPE_CHECKING

from echoforge.metrics.models import AggregateResult

if TYPE_CHECKING:
    from collections.abc import Iterable

    from echoforge.engine.protocol import WorkerOutcome


def _fold(acc: tuple[int, int, int], outcome: WorkerOutcome) -> tuple[int, int, int]:
    requests, errors, count = acc
    return requests + outcome.requests_completed, errors + int(outcome.failed), count + 1


def reduce_outcomes(
    outcomes: Iterable[WorkerOutcome],
    duration: float,
    *,
    elapsed: float = 0.0,
) -> AggregateResult:
    """Sum worker outcomes into an AggregateResult.

    The reduction is order-independent, so outcomes may be supplied in
    any order.

    Args:
        outcomes: One outcome per terminated worker.
        duration: Configured run duration in seconds, used for the rate.
        elapsed: Measured wall time, recorded for information only.

    Returns:
        The aggregate totals.

    Raises:
        ValueError: If ``duration`` is not positive.
    """
    if duration <= 0:
        msg = f"duration must be positive, got: {duration}"
        raise ValueError(msg)

    total_requests, total_errors, count = reduce(_fold, outcomes, (0, 0, 0))
    return AggregateResult(
        total_requests=total_requests,
        total_errors=total_errors,
        requests_per_second=total_requests / duration,
        connections=count,
        elapsed_seconds=elapsed,
    )
