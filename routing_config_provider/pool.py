"""Background worker pool owned by the caller of the provider."""

import logging
import threading
from typing import Callable, List, Optional

logger = logging.getLogger(__name__)


class StopSignal:
    """One-shot stop flag that can wake up blocked waiters.

    ``subscribe`` lets a worker hook its own wait point (a queue, a socket)
    so that it observes the stop request where it already blocks.
    """

    def __init__(self):
        self._event = threading.Event()
        self._lock = threading.Lock()
        self._callbacks: List[Callable[[], None]] = []

    def subscribe(self, callback: Callable[[], None]) -> None:
        with self._lock:
            if not self._event.is_set():
                self._callbacks.append(callback)
                return
        callback()

    def set(self) -> None:
        with self._lock:
            if self._event.is_set():
                return
            self._event.set()
            callbacks = list(self._callbacks)
            self._callbacks.clear()

        for callback in callbacks:
            try:
                callback()
            except Exception as e:
                logger.error(f"Error in stop callback: {e}")

    def is_set(self) -> bool:
        return self._event.is_set()

    def wait(self, timeout: Optional[float] = None) -> bool:
        return self._event.wait(timeout)


class WorkerPool:
    """Runs long-lived workers on threads and stops them together."""

    def __init__(self, name: str = "provider-pool"):
        self.name = name
        self._workers: List[threading.Thread] = []
        self._signals: List[StopSignal] = []
        self._lock = threading.Lock()
        self._stopped = False

    def go(self, target: Callable[[StopSignal], None]) -> StopSignal:
        """Start ``target(stop)`` on a new daemon thread.

        Returns:
            The stop signal handed to the worker
        """
        stop = StopSignal()
        with self._lock:
            if self._stopped:
                raise RuntimeError(f"Worker pool '{self.name}' is stopped")
            thread = threading.Thread(
                target=self._run,
                args=(target, stop),
                name=f"{self.name}-{len(self._workers)}",
                daemon=True
            )
            self._workers.append(thread)
            self._signals.append(stop)
        thread.start()
        return stop

    def _run(self, target: Callable[[StopSignal], None], stop: StopSignal) -> None:
        try:
            target(stop)
        except Exception:
            logger.exception(f"Worker in pool '{self.name}' crashed")

    def stop(self, timeout: Optional[float] = None) -> None:
        """Signal every worker to stop and wait for them to return."""
        with self._lock:
            self._stopped = True
            signals = list(self._signals)
            workers = list(self._workers)

        for stop in signals:
            stop.set()
        for worker in workers:
            worker.join(timeout)
            if worker.is_alive():
                logger.warning(f"Worker {worker.name} did not stop gracefully")

        logger.info(f"Worker pool '{self.name}' stopped")
