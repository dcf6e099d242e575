"""File-based configuration provider."""

import logging
import os
import queue
from typing import Callable, Optional

from ..decoding import decode_fragment
from ..errors import ConfigIOError, ConfigNotFoundError
from ..pool import WorkerPool
from ..settings import ProviderSettings
from ..types import ConfigMessage, Configuration
from .dispatcher import EventDispatcher
from .loader import ConfigLoader, Decoder
from .merger import ConfigMerger
from .watch_set import WatchSetManager
from .watcher import FileWatcher, WatchFacility

logger = logging.getLogger(__name__)

PROVIDER_NAME = "file"


class FileProvider:
    """Provides routing configuration from a file or a directory of fragments.

    ``provide`` publishes one snapshot synchronously and, with watching on,
    hands a watch loop to the caller's worker pool that publishes a fresh
    snapshot after every relevant filesystem change.
    """

    def __init__(self, settings: ProviderSettings, decoder: Decoder = decode_fragment,
                 watcher_factory: Callable[[], WatchFacility] = FileWatcher):
        """
        Args:
            settings: Provider knobs (directory, filename, fallback file, watch)
            decoder: Turns one file's text into a Fragment
            watcher_factory: Builds the filesystem watch facility
        """
        self.settings = settings
        self.loader = ConfigLoader(decoder, template_functions=settings.template_functions)
        self.merger = ConfigMerger(self.loader)
        self.watcher_factory = watcher_factory

        self.directory = os.path.normpath(settings.directory) if settings.directory else None

    def watch_target(self) -> Optional[str]:
        """The directory or file whose changes trigger a reload."""
        return self.directory or self.settings.filename or self.settings.fallback_file

    def build_configuration(self) -> Configuration:
        """Load the configuration from the directory, the file or the fallback file.

        Raises:
            ConfigNotFoundError: If none of them is configured
            ConfigIOError: If a path cannot be read
            ConfigParseError: If a fragment is malformed
        """
        if self.directory:
            return self.merger.merge_directory(self.directory)

        if self.settings.filename:
            return Configuration.from_fragment(self.loader.load(self.settings.filename, templated=True))

        if self.settings.fallback_file:
            return Configuration.from_fragment(self.loader.load(self.settings.fallback_file, templated=False))

        raise ConfigNotFoundError("Error using file configuration backend, no filename defined")

    def provide(self, configuration_queue: "queue.Queue[ConfigMessage]", pool: WorkerPool) -> None:
        """Publish the initial snapshot and start watching if enabled.

        Raises:
            ProviderError: If the initial build or the watch setup fails
        """
        configuration = self.build_configuration()

        if self.settings.watch:
            self._start_watching(configuration_queue, pool)

        self._send(configuration_queue, configuration)

    def _start_watching(self, configuration_queue: "queue.Queue[ConfigMessage]", pool: WorkerPool) -> None:
        watcher = self.watcher_factory().start()

        watch_set = WatchSetManager(watcher)
        try:
            if self.directory:
                watch_set.register(self.directory)
            else:
                watch_set.add_watches([os.path.dirname(self.watch_target()) or os.curdir])
        except ConfigIOError as e:
            watcher.release()
            raise ConfigIOError(f"Unable to initialize provider File: {e}", path=e.path) from e

        dispatcher = EventDispatcher(
            watcher,
            watch_set,
            reload=lambda: self.watcher_callback(configuration_queue),
            target_file=None if self.directory else self.watch_target()
        )
        try:
            pool.go(dispatcher.run)
        except Exception:
            watcher.release()
            raise
        logger.info(f"Watching {self.watch_target()} for configuration changes")

    def watcher_callback(self, configuration_queue: "queue.Queue[ConfigMessage]") -> None:
        """Rebuild and publish; keep the previous snapshot on any failure."""
        watch_item = self.watch_target()

        try:
            os.stat(watch_item)
        except OSError as e:
            logger.debug(f"Unable to get modifications from {watch_item}: {e}")
            return

        try:
            configuration = self.build_configuration()
        except Exception as e:
            logger.error(f"Error occurred during watcher callback: {e}")
            return

        self._send(configuration_queue, configuration)

    @staticmethod
    def _send(configuration_queue: "queue.Queue[ConfigMessage]", configuration: Configuration) -> None:
        configuration_queue.put(ConfigMessage(provider_name=PROVIDER_NAME, configuration=configuration))
