"""EchoForge — concurrent TCP echo-load generator."""

from __future__ import annotations

from echoforge._internal.config import BenchConfig, load_config
from echoforge.engine.driver import BenchmarkDriver, DriverState
from echoforge.engine.protocol import WorkerOutcome
from echoforge.engine.stop import StopSignal
from echoforge.metrics.aggregator import reduce_outcomes
from echoforge.metrics.models import AggregateResult

__version__ = "0.1.0"

__all__ = [
    "AggregateResult",
    "BenchConfig",
    "BenchmarkDriver",
    "DriverState",
    "StopSignal",
    "WorkerOutcome",
    "load_config",
    "reduce_outcomes",
]
