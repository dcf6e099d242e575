"""Unit tests for the watch facility inbox."""

import pytest

from routing_config_provider.provider.watcher import EventOp, FileEvent, WatchFacility


class TestWatchFacility:

    def test_cannot_be_instantiated_without_watch_operations(self):
        with pytest.raises(TypeError):
            WatchFacility()

    def test_inbox_preserves_order(self, fake_watcher):
        event = FileEvent(EventOp.CREATE, "/conf/sub", is_directory=True)
        error = OSError("queue overflow")

        fake_watcher.push_event(event)
        fake_watcher.push_error(error)
        fake_watcher.interrupt()

        assert fake_watcher.next_message().event == event
        assert fake_watcher.next_message().error is error
        assert fake_watcher.next_message().is_wakeup
