"""One-shot stop signal shared by the driver and all connection workers."""

from __future__ import annotations

import threading


class StopSignal:
    """Single-writer, many-reader cancellation flag.

    Starts unset and transitions to set exactly once; it is never reset.
    Workers poll :meth:`is_set` once per round trip, so a worker already
    blocked in a socket call finishes that call before it notices.
    """

    def __init__(self) -> None:
        self._event = threading.Event()

    def is_set(self) -> bool:
        """Return True once the signal has been triggered. Never blocks."""
        return self._event.is_set()

    def trigger(self) -> None:
        """Set the signal. Calling it again has no further effect."""
        self._event.set()

    def wait(self, timeout: float | None = None) -> bool:
        """Block until triggered or ``timeout`` elapses.

        Returns:
            True if the signal is set.
        """
        return self._event.wait(timeout)

    def trigger_handle(self) -> StopTrigger:
        """Return a capability that can trigger this signal but not read it."""
        return StopTrigger(self)


class StopTrigger:
    """Write-only view of a :class:`StopSignal`."""

    __slots__ = ("_signal",)

    def __init__(self, signal: StopSignal) -> None:
        self._signal = signal

    def __call__(self) -> None:
        self._signal.trigger()
