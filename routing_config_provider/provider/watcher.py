"""Filesystem watch facility on top of watchdog.

The dispatcher only needs ``add``, ``remove``, a stream of events and errors,
and ``release``. Events, errors and wake-ups share one inbox so that the
dispatcher blocks at a single point.
"""

import logging
import queue
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer
from watchdog.observers.api import ObservedWatch

from ..errors import WatchAddError, WatchSetupError

logger = logging.getLogger(__name__)


class EventOp(Enum):
    CREATE = "create"
    WRITE = "write"
    REMOVE = "remove"
    RENAME = "rename"


@dataclass(frozen=True)
class FileEvent:
    """A change to one path, as the dispatcher sees it."""
    op: EventOp
    path: str
    is_directory: bool = False


@dataclass(frozen=True)
class WatchMessage:
    """One item taken from the inbox: an event, an error, or a wake-up."""
    event: Optional[FileEvent] = None
    error: Optional[Exception] = None

    @property
    def is_wakeup(self) -> bool:
        return self.event is None and self.error is None


class WatchFacility(ABC):
    """Inbox shared by every watch facility implementation."""

    def __init__(self):
        self._inbox: "queue.Queue[WatchMessage]" = queue.Queue()

    def start(self) -> "WatchFacility":
        return self

    @abstractmethod
    def add(self, path: str) -> None:
        """Start watching one directory, non-recursively."""
        pass

    @abstractmethod
    def remove(self, path: str) -> None:
        """Stop watching one directory."""
        pass

    @abstractmethod
    def release(self) -> None:
        """Stop delivering events and free the underlying resources."""
        pass

    def push_event(self, event: FileEvent) -> None:
        self._inbox.put(WatchMessage(event=event))

    def push_error(self, error: Exception) -> None:
        self._inbox.put(WatchMessage(error=error))

    def interrupt(self) -> None:
        """Wake up a reader blocked in ``next_message``."""
        self._inbox.put(WatchMessage())

    def next_message(self) -> WatchMessage:
        """Block until an event, an error or a wake-up is available."""
        return self._inbox.get()


class _InboxHandler(FileSystemEventHandler):
    """Translates watchdog callbacks into FileEvents."""

    def __init__(self, facility: WatchFacility):
        super().__init__()
        self.facility = facility

    def dispatch(self, event: FileSystemEvent) -> None:
        try:
            super().dispatch(event)
        except Exception as e:
            self.facility.push_error(e)

    @staticmethod
    def _path(path) -> str:
        return path.decode() if isinstance(path, bytes) else path

    def on_created(self, event):
        self.facility.push_event(FileEvent(EventOp.CREATE, self._path(event.src_path), event.is_directory))

    def on_deleted(self, event):
        self.facility.push_event(FileEvent(EventOp.REMOVE, self._path(event.src_path), event.is_directory))

    def on_modified(self, event):
        # A directory "modification" is just a change of its entries, which
        # is reported separately.
        if event.is_directory:
            return
        self.facility.push_event(FileEvent(EventOp.WRITE, self._path(event.src_path), False))

    def on_moved(self, event):
        self.facility.push_event(FileEvent(EventOp.RENAME, self._path(event.src_path), event.is_directory))
        self.facility.push_event(FileEvent(EventOp.CREATE, self._path(event.dest_path), event.is_directory))


class FileWatcher(WatchFacility):
    """Watches individual directories, non-recursively, with one Observer."""

    def __init__(self):
        super().__init__()
        self._observer: Optional[Observer] = None
        self._handler = _InboxHandler(self)
        self._watches: Dict[str, ObservedWatch] = {}
        self._lock = threading.Lock()
        self._released = False

    def start(self) -> 'FileWatcher':
        """Create and start the underlying observer.

        Raises:
            WatchSetupError: If the observer cannot be started
        """
        try:
            self._observer = Observer()
            self._observer.start()
        except Exception as e:
            self._observer = None
            raise WatchSetupError(f"Error creating file watcher: {e}") from e
        return self

    def add(self, path: str) -> None:
        """Watch the entries of directory ``path``.

        Raises:
            WatchAddError: If the directory cannot be watched
        """
        if self._observer is None:
            raise WatchAddError(f"File watcher is not running, cannot watch {path}", path=path)
        with self._lock:
            if path in self._watches:
                return
            try:
                self._watches[path] = self._observer.schedule(self._handler, path, recursive=False)
            except Exception as e:
                raise WatchAddError(f"Unable to add file watcher on directory {path!r}: {e}", path=path) from e

    def remove(self, path: str) -> None:
        with self._lock:
            watch = self._watches.pop(path, None)
            if watch is None or self._observer is None:
                return
            try:
                self._observer.unschedule(watch)
            except (KeyError, OSError) as e:
                # The emitter of a deleted directory may already be gone.
                logger.debug(f"Watch on {path} already released: {e}")

    def watched_paths(self):
        with self._lock:
            return list(self._watches)

    def release(self) -> None:
        with self._lock:
            if self._released:
                return
            self._released = True
            self._watches.clear()
            observer, self._observer = self._observer, None

        if observer is not None:
            observer.stop()
            observer.join()
        logger.info("File watcher released")
