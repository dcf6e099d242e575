"""File provider: directory enumeration, loading, merging and watching."""

from .enumerator import list_directories_recursively
from .loader import ConfigLoader, read_file
from .merger import ConfigMerger, RECOGNIZED_EXTENSIONS
from .watcher import EventOp, FileEvent, FileWatcher, WatchFacility, WatchMessage
from .watch_set import WatchSetManager
from .dispatcher import EventDispatcher
from .file_provider import FileProvider, PROVIDER_NAME

__all__ = [
    'list_directories_recursively',
    'ConfigLoader',
    'read_file',
    'ConfigMerger',
    'RECOGNIZED_EXTENSIONS',
    'EventOp',
    'FileEvent',
    'FileWatcher',
    'WatchFacility',
    'WatchMessage',
    'WatchSetManager',
    'EventDispatcher',
    'FileProvider',
    'PROVIDER_NAME',
]
