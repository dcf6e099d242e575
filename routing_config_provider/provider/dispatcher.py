"""The watch loop: filesystem events in, reloads out."""

import logging
import os
from typing import Callable, Optional

from ..pool import StopSignal
from .watch_set import WatchSetManager
from .watcher import EventOp, FileEvent, WatchFacility

logger = logging.getLogger(__name__)


class EventDispatcher:
    """Turns filesystem events into watch-set changes and reloads.

    With ``target_file`` set, the dispatcher runs in single-target mode and
    reloads only for events whose basename matches the target. Otherwise it
    runs in directory-tree mode: every event adjusts the watch set if a
    directory came or went, then triggers a full reload.
    """

    def __init__(self, watcher: WatchFacility, watch_set: WatchSetManager,
                 reload: Callable[[], None], target_file: Optional[str] = None):
        self.watcher = watcher
        self.watch_set = watch_set
        self.reload = reload
        self.target_file = target_file

    @property
    def single_target(self) -> bool:
        return self.target_file is not None

    def handle_event(self, event: FileEvent) -> None:
        if self.single_target:
            if os.path.basename(event.path) == os.path.basename(self.target_file):
                self.reload()
            return

        if event.op in (EventOp.REMOVE, EventOp.RENAME):
            self.watch_set.on_directory_removed_or_renamed(event.path)
        elif event.op is EventOp.CREATE:
            self.watch_set.on_directory_created(event.path)
        self.reload()

    def run(self, stop: StopSignal) -> None:
        """Process events until ``stop`` is set, then release the watcher."""
        stop.subscribe(self.watcher.interrupt)
        logger.info("File watch loop started")
        try:
            while True:
                message = self.watcher.next_message()
                if stop.is_set():
                    return
                if message.error is not None:
                    logger.error(f"Watcher event error: {message.error}")
                elif message.event is not None:
                    self.handle_event(message.event)
        finally:
            self.watcher.release()
            logger.info("File watch loop stopped")
