"""Index of watched directory subtrees."""

import logging
import os
from typing import Callable, Dict, List

from ..errors import ConfigIOError, WatchAddError
from .enumerator import list_directories_recursively
from .watcher import WatchFacility

logger = logging.getLogger(__name__)


def _is_within(path: str, root: str) -> bool:
    return path == root or path.startswith(root.rstrip(os.sep) + os.sep)


class WatchSetManager:
    """Keeps the watched subtrees in line with the directories on disk.

    Every registered directory, and every directory found below it, is a
    key mapping to its own subtree listing (root first, depth-first). A
    removed or renamed directory takes its whole subtree out of the index
    and out of the watch facility. Plain files never get an entry.

    Only the event loop touches this object once watching has started.
    """

    def __init__(self, watcher: WatchFacility,
                 enumerate_directories: Callable[[str], List[str]] = list_directories_recursively):
        self.watcher = watcher
        self.enumerate_directories = enumerate_directories
        self._watched: Dict[str, List[str]] = {}

    def __contains__(self, path: str) -> bool:
        return path in self._watched

    def subtree(self, root: str) -> List[str]:
        """Recorded subtree listing of ``root`` (empty if not watched)."""
        return list(self._watched.get(root, []))

    def roots(self) -> List[str]:
        return list(self._watched)

    def register(self, root: str) -> List[str]:
        """Record and watch ``root`` and every directory below it.

        Raises:
            ConfigIOError: If ``root`` cannot be statted or listed
        """
        directories = self.enumerate_directories(root)
        if not directories:
            return []

        self._record(directories)
        self.add_watches(directories)
        return directories

    def add_watches(self, paths: List[str]) -> None:
        """Add a watch per path; a failing path does not stop the others."""
        for path in paths:
            try:
                self.watcher.add(path)
            except WatchAddError as e:
                logger.error(f"Unable to add file watcher on directory {path!r}: {e}")

    def on_directory_created(self, path: str) -> None:
        try:
            self.register(path)
        except ConfigIOError as e:
            logger.error(f"Unable to get sub-directories to add to watcher (root directory: {path}): {e}")

    def on_directory_removed_or_renamed(self, path: str) -> None:
        subtree = self._watched.get(path)
        if subtree is None:
            return

        for directory in reversed(subtree):
            self.watcher.remove(directory)
            self._watched.pop(directory, None)

        gone = set(subtree)
        for root, listing in self._watched.items():
            if _is_within(path, root):
                self._watched[root] = [d for d in listing if d not in gone]

        logger.debug(f"Stopped watching {len(subtree)} directories under {path}")

    def _record(self, directories: List[str]) -> None:
        new_root = directories[0]

        for directory in directories:
            self._watched[directory] = [d for d in directories if _is_within(d, directory)]

        for root, listing in self._watched.items():
            if root != new_root and _is_within(new_root, root) and not _is_within(root, new_root):
                known = set(listing)
                listing.extend(d for d in directories if d not in known)
