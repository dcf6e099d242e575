"""Recursive directory listing used for initial watch setup and new subtrees."""

import os
import stat
from typing import List

from ..errors import ConfigIOError


def list_directories_recursively(root: str) -> List[str]:
    """List ``root`` and every directory below it.

    Order is root first, then each child subtree depth-first in directory
    listing order. A root that exists but is a plain file yields an empty
    list. Symlinked directories below the root are not followed.

    Raises:
        ConfigIOError: If the root, or a directory below it, cannot be
            statted or listed
    """
    try:
        root_info = os.stat(root)
    except OSError as e:
        raise ConfigIOError(f"Unable to stat {root!r}: {e}", path=root) from e

    if not stat.S_ISDIR(root_info.st_mode):
        return []

    try:
        with os.scandir(root) as it:
            entries = list(it)
    except OSError as e:
        raise ConfigIOError(
            f"Unable to initialize sub-directories list from directory {root}: {e}",
            path=root
        ) from e

    directories = [root]
    for entry in entries:
        if entry.is_dir(follow_symlinks=False):
            child = root.rstrip(os.sep) + os.sep + entry.name
            try:
                directories.extend(list_directories_recursively(child))
            except ConfigIOError as e:
                raise ConfigIOError(
                    f"Unable to initialize recursively sub-directories list from directory {root}: {e}",
                    path=root
                ) from e
    return directories
