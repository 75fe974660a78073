"""Result types passed from connection workers back to the driver."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class WorkerOutcome:
    """Result of one connection worker, produced when it terminates.

    Attributes:
        worker_id: Identifier of the worker that produced this outcome.
        requests_completed: Round trips completed before the worker stopped.
        failed: Whether the worker stopped because of an I/O error.
        error: Description of the I/O error, if any.
    """

    worker_id: int
    requests_completed: int
    failed: bool = False
    error: str | None = None
