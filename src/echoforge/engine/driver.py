"""Benchmark driver: fan out connection workers, time the run, fan in results."""

from __future__ import annotations

import threading
import time
from enum import Enum, auto
from typing import TYPE_CHECKING

from echoforge._internal.errors import ConnectError, EngineError
from echoforge._internal.logging import get_logger
from echoforge.engine.limits import ResourceLimiter
from echoforge.engine.protocol import WorkerOutcome
from echoforge.engine.stop import StopSignal
from echoforge.engine.worker import ConnectionWorker
from echoforge.metrics.aggregator import reduce_outcomes

if TYPE_CHECKING:
    from collections.abc import Callable

    from echoforge._internal.config import BenchConfig
    from echoforge.metrics.models import AggregateResult

logger = get_logger("engine.driver")


class DriverState(Enum):
    """State machine for a benchmark run."""

    IDLE = auto()
    RUNNING = auto()
    STOPPING = auto()
    DONE = auto()
    FAILED = auto()


class BenchmarkDriver:
    """Runs one benchmark against an echo server.

    Spawns one thread per connection, all sharing a single StopSignal.
    Every worker connects first; if any connection fails the run is
    aborted with :class:`ConnectError` before timing starts. Otherwise the
    driver sleeps for the configured duration, triggers the stop signal,
    joins every worker and reduces their outcomes.

    State machine: IDLE -> RUNNING -> STOPPING -> DONE
                        -> FAILED (on startup failure or interrupt)

    Attributes:
        config: The resolved benchmark configuration.
    """

    def __init__(
        self,
        config: BenchConfig,
        *,
        limiter: ResourceLimiter | None = None,
        on_tick: Callable[[float], None] | None = None,
        tick_interval: float = 1.0,
    ) -> None:
        """Initialize the driver.

        Args:
            config: Resolved benchmark configuration.
            limiter: File-descriptor limiter consulted before spawning.
                Defaults to a :class:`ResourceLimiter`.
            on_tick: Optional callback invoked with elapsed seconds while
                the driver waits out the run duration.
            tick_interval: Seconds between ``on_tick`` calls.
        """
        self.config = config
        self._limiter = limiter if limiter is not None else ResourceLimiter()
        self._on_tick = on_tick
        self._tick_interval = tick_interval

        self._state = DriverState.IDLE
        self._stop = StopSignal()
        self._trigger = self._stop.trigger_handle()
        self._threads: list[threading.Thread] = []

    @property
    def state(self) -> DriverState:
        """Return the current driver state."""
        return self._state

    @property
    def stop_signal(self) -> StopSignal:
        """Return the stop signal shared with the workers."""
        return self._stop

    def run(self) -> AggregateResult:
        """Execute the benchmark and return the aggregate totals.

        This call blocks for at least the configured duration.

        Raises:
            ResourceLimitError: If the process cannot hold enough sockets.
            ConnectError: If any worker fails to connect.
            EngineError: If the driver has already been run, or its worker
                threads cannot be started.
        """
        if self._state is not DriverState.IDLE:
            msg = f"driver cannot run from state {self._state.name}"
            raise EngineError(msg)

        config = self.config
        logger.info(
            "Starting benchmark: address=%s, connections=%d, length=%d, duration=%ds",
            config.address,
            config.connections,
            config.length,
            config.duration,
        )

        try:
            self._limiter.ensure_capacity(config.connections)
        except EngineError:
            self._state = DriverState.FAILED
            raise

        self._state = DriverState.RUNNING
        n = config.connections
        endpoint = config.endpoint
        outcomes: list[WorkerOutcome | None] = [None] * n
        connect_errors: list[ConnectError | None] = [None] * n

        def _abort_if_unconnected() -> None:
            if any(connect_errors):
                self._trigger()

        # Released once every worker has attempted its connection
        barrier = threading.Barrier(n + 1, action=_abort_if_unconnected)

        try:
            for i in range(n):
                worker = ConnectionWorker(i, endpoint, self._stop, config.length)
                thread = threading.Thread(
                    target=self._run_worker,
                    args=(worker, barrier, outcomes, connect_errors),
                    name=f"echoforge-worker-{i}",
                    daemon=True,
                )
                thread.start()
                self._threads.append(thread)
        except RuntimeError as exc:
            barrier.abort()
            self._fail(f"Started only {len(self._threads)} of {n} worker threads")
            self._join_all()
            msg = f"could not start {n} worker threads: {exc}"
            raise EngineError(msg) from exc

        try:
            barrier.wait()
        except KeyboardInterrupt:
            barrier.abort()
            self._fail("Interrupted while connecting")
            raise

        failures = [exc for exc in connect_errors if exc is not None]
        if failures:
            self._join_all()
            self._state = DriverState.FAILED
            logger.error("%d of %d connections failed, aborting run", len(failures), n)
            raise failures[0]

        logger.debug("All %d workers connected", n)
        start_time = time.monotonic()

        try:
            self._wait_duration(start_time)
        except KeyboardInterrupt:
            self._fail("Interrupted, stopping workers")
            raise

        self._state = DriverState.STOPPING
        self._trigger()
        self._join_all()
        elapsed = time.monotonic() - start_time

        finished = [o for o in outcomes if o is not None]
        if len(finished) != n:
            logger.warning("Only %d of %d workers reported an outcome", len(finished), n)

        result = reduce_outcomes(finished, config.duration, elapsed=elapsed)
        self._state = DriverState.DONE
        logger.info(
            "Benchmark complete: requests=%d, errors=%d, elapsed=%.2fs",
            result.total_requests,
            result.total_errors,
            elapsed,
        )
        return result

    def _wait_duration(self, start_time: float) -> None:
        """Block until the configured duration has passed since ``start_time``."""
        deadline = start_time + self.config.duration
        while True:
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                break
            time.sleep(min(remaining, self._tick_interval))
            if self._on_tick is not None:
                self._on_tick(min(time.monotonic() - start_time, float(self.config.duration)))

    def _join_all(self) -> None:
        for thread in self._threads:
            thread.join()

    def _fail(self, reason: str) -> None:
        logger.info(reason)
        self._trigger()
        self._state = DriverState.FAILED

    def _run_worker(
        self,
        worker: ConnectionWorker,
        barrier: threading.Barrier,
        outcomes: list[WorkerOutcome | None],
        connect_errors: list[ConnectError | None],
    ) -> None:
        """Thread body: connect, wait for the others, then loop."""
        index = worker.worker_id
        try:
            worker.connect(timeout=self.config.connect_timeout)
        except ConnectError as exc:
            logger.debug("%s", exc)
            connect_errors[index] = exc
        except Exception as exc:
            logger.exception("Worker %d: connect failed", index)
            msg = f"worker {index} could not connect: {exc}"
            connect_errors[index] = ConnectError(msg)

        try:
            barrier.wait()
        except threading.BrokenBarrierError:
            worker.close()
            return

        if not worker.connected:
            return

        try:
            outcomes[index] = worker.run()
        except Exception as exc:
            logger.exception("Worker %d: failed", index)
            outcomes[index] = WorkerOutcome(index, 0, failed=True, error=str(exc))
