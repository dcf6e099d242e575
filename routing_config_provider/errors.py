"""Error taxonomy of the file provider.

Startup raises every one of these to the caller. Inside the watch loop they
are logged and the last published snapshot stays in effect.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass
class ProviderError(Exception):
    """Base class for file provider failures."""
    message: str
    path: Optional[str] = None

    def __str__(self) -> str:
        return self.message


@dataclass
class ConfigNotFoundError(ProviderError):
    """None of directory, filename or fallback file is configured."""


@dataclass
class ConfigIOError(ProviderError):
    """A path could not be statted, listed or read."""


@dataclass
class ConfigParseError(ProviderError):
    """A fragment's content could not be expanded or decoded."""
    field_path: Optional[str] = None


@dataclass
class WatchSetupError(ProviderError):
    """The filesystem watch facility could not be created."""


@dataclass
class WatchAddError(ProviderError):
    """A single directory could not be added to the watch facility."""
