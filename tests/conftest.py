"""
Pytest configuration and fixtures for the routing config provider test suite.
"""

import logging
import logging.handlers
import tempfile
from pathlib import Path
from typing import Dict, List, Optional

import pytest
import yaml

from routing_config_provider.errors import WatchAddError
from routing_config_provider.provider.watcher import WatchFacility


class FakeWatcher(WatchFacility):
    """In-memory watch facility recording every add and remove."""

    def __init__(self, fail_on=()):
        super().__init__()
        self.fail_on = set(fail_on)
        self.added: List[str] = []
        self.removed: List[str] = []
        self.watched: List[str] = []
        self.released = 0

    def add(self, path: str) -> None:
        if path in self.fail_on:
            raise WatchAddError(f"cannot watch {path}", path=path)
        self.added.append(path)
        if path not in self.watched:
            self.watched.append(path)

    def remove(self, path: str) -> None:
        self.removed.append(path)
        if path in self.watched:
            self.watched.remove(path)

    def release(self) -> None:
        self.released += 1


def fragment_document(backends: Optional[List[str]] = None,
                      frontends: Optional[List[str]] = None,
                      tls: Optional[List[str]] = None) -> Dict:
    """Build a fragment document with one server per backend."""
    document: Dict = {}
    if backends is not None:
        document['backends'] = {
            name: {'servers': {'s1': {'url': f"http://{name}.internal:80", 'weight': 1}}}
            for name in backends
        }
    if frontends is not None:
        document['frontends'] = {
            name: {'backend': name, 'entry_points': ['http'],
                   'routes': {'main': {'rule': f"Host:{name}.example.com"}}}
            for name in frontends
        }
    if tls is not None:
        document['tls'] = [
            {'entry_points': ['https'], 'certificate': {'cert_file': cert, 'key_file': cert + '.key'}}
            for cert in tls
        ]
    return document


def write_fragment(path: Path, **kwargs) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, 'w', encoding='utf-8') as f:
        yaml.safe_dump(fragment_document(**kwargs), f, default_flow_style=False)
    return path


@pytest.fixture
def temp_config_dir():
    """Create a temporary directory for test configurations."""
    with tempfile.TemporaryDirectory() as temp_dir:
        yield Path(temp_dir)


@pytest.fixture
def fake_watcher():
    return FakeWatcher()


@pytest.fixture
def make_fragment():
    """Write a YAML fragment file: ``make_fragment(path, backends=[...])``."""
    return write_fragment


@pytest.fixture
def watcher_factory():
    """Build fake watchers: ``watcher_factory(fail_on=[...])``."""
    return FakeWatcher


@pytest.fixture(autouse=True)
def restore_root_logger():
    """Remove handlers installed by LoggerManager during a test."""
    root_logger = logging.getLogger()
    level = root_logger.level
    yield
    for handler in list(root_logger.handlers):
        if type(handler) in (logging.StreamHandler, logging.handlers.RotatingFileHandler):
            root_logger.removeHandler(handler)
            handler.close()
    root_logger.setLevel(level)
