"""Folding a directory tree of fragments into one Configuration."""

import logging
import os
from typing import Optional, Set, Tuple

from ..decoding import STRUCTURED_EXTENSIONS, TEMPLATE_EXTENSION
from ..errors import ConfigIOError
from ..types import Configuration
from .loader import ConfigLoader

logger = logging.getLogger(__name__)

RECOGNIZED_EXTENSIONS: Tuple[str, ...] = STRUCTURED_EXTENSIONS + (TEMPLATE_EXTENSION,)


class ConfigMerger:
    """Merges every fragment below a directory, first definition winning.

    Entries are visited in directory listing order, which the filesystem does
    not sort. When two fragments define the same backend or frontend name,
    the one met first is kept and the other is dropped with a warning.
    Symlinked directories are not descended into.
    """

    def __init__(self, loader: ConfigLoader):
        self.loader = loader

    def merge_directory(self, directory: str,
                        configuration: Optional[Configuration] = None) -> Configuration:
        """Merge ``directory`` recursively into ``configuration``.

        Raises:
            ConfigIOError: If a directory cannot be listed or a file read
            ConfigParseError: If any fragment is malformed; nothing is skipped
        """
        if configuration is None:
            configuration = Configuration()
        seen_tls = {tls.identity for tls in configuration.tls}
        return self._merge(directory, configuration, seen_tls)

    def _merge(self, directory: str, configuration: Configuration, seen_tls: Set[int]) -> Configuration:
        try:
            with os.scandir(directory) as it:
                entries = list(it)
        except OSError as e:
            raise ConfigIOError(f"Unable to read directory {directory}: {e}", path=directory) from e

        for entry in entries:
            path = os.path.join(directory, entry.name)

            if entry.is_dir(follow_symlinks=False):
                self._merge(path, configuration, seen_tls)
                continue

            if not entry.name.endswith(RECOGNIZED_EXTENSIONS):
                continue

            fragment = self.loader.load(path, templated=True)

            for name, backend in fragment.backends.items():
                if name in configuration.backends:
                    logger.warning(f"Backend {name} already configured, skipping")
                else:
                    configuration.backends[name] = backend

            for name, frontend in fragment.frontends.items():
                if name in configuration.frontends:
                    logger.warning(f"Frontend {name} already configured, skipping")
                else:
                    configuration.frontends[name] = frontend

            for tls in fragment.tls:
                if tls.identity in seen_tls:
                    logger.warning(f"TLS Configuration {tls.certificate.cert_file} already configured, skipping")
                else:
                    seen_tls.add(tls.identity)
                    configuration.tls.append(tls)

        return configuration
