"""Unit tests for the worker pool and stop signal."""

import threading

import pytest

from routing_config_provider.pool import StopSignal, WorkerPool


class TestStopSignal:

    def test_subscribers_are_notified_once(self):
        stop = StopSignal()
        calls = []
        stop.subscribe(lambda: calls.append(1))

        stop.set()
        stop.set()

        assert calls == [1]
        assert stop.is_set()

    def test_late_subscriber_is_called_immediately(self):
        stop = StopSignal()
        stop.set()
        calls = []

        stop.subscribe(lambda: calls.append(1))

        assert calls == [1]

    def test_failing_callback_does_not_block_others(self):
        stop = StopSignal()
        calls = []

        def broken():
            raise RuntimeError("boom")

        stop.subscribe(broken)
        stop.subscribe(lambda: calls.append(1))
        stop.set()

        assert calls == [1]


class TestWorkerPool:

    def test_stop_signals_and_joins_workers(self):
        pool = WorkerPool("test")
        started = threading.Event()
        finished = threading.Event()

        def worker(stop):
            started.set()
            stop.wait()
            finished.set()

        pool.go(worker)
        assert started.wait(timeout=5)

        pool.stop(timeout=5)

        assert finished.is_set()

    def test_crashing_worker_is_logged(self, caplog):
        pool = WorkerPool("test")
        done = threading.Event()

        def worker(stop):
            done.set()
            raise RuntimeError("boom")

        pool.go(worker)
        assert done.wait(timeout=5)
        pool.stop(timeout=5)

        assert any("crashed" in r.getMessage() for r in caplog.records)

    def test_go_after_stop_is_rejected(self):
        pool = WorkerPool("test")
        pool.stop()

        with pytest.raises(RuntimeError):
            pool.go(lambda stop: None)
