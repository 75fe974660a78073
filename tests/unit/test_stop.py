"""Tests for StopSignal."""

from __future__ import annotations

import threading
import time

from echoforge.engine.stop import StopSignal, StopTrigger


class TestStopSignal:
    def test_starts_unset(self):
        assert StopSignal().is_set() is False

    def test_trigger_sets(self):
        stop = StopSignal()
        stop.trigger()
        assert stop.is_set() is True

    def test_trigger_is_idempotent(self):
        stop = StopSignal()
        stop.trigger()
        stop.trigger()
        assert stop.is_set() is True

    def test_wait_times_out_when_unset(self):
        stop = StopSignal()
        start = time.monotonic()
        assert stop.wait(0.05) is False
        assert time.monotonic() - start >= 0.04

    def test_wait_returns_once_triggered(self):
        stop = StopSignal()
        timer = threading.Timer(0.05, stop.trigger)
        timer.start()
        assert stop.wait(5.0) is True
        timer.join()

    def test_trigger_handle_sets_signal(self):
        stop = StopSignal()
        trigger = stop.trigger_handle()
        assert isinstance(trigger, StopTrigger)
        assert not hasattr(trigger, "is_set")
        trigger()
        assert stop.is_set()

    def test_visible_to_many_readers(self):
        stop = StopSignal()
        seen: list[bool] = []
        lock = threading.Lock()

        def _reader() -> None:
            while not stop.is_set():
                time.sleep(0.001)
            with lock:
                seen.append(True)

        readers = [threading.Thread(target=_reader) for _ in range(8)]
        for t in readers:
            t.start()
        stop.trigger()
        for t in readers:
            t.join(timeout=5.0)

        assert seen == [True] * 8
