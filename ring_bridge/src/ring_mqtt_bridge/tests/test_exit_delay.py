"""
Tests for the exit-delay watcher.
"""

import asyncio
from unittest.mock import Mock

from ring_alarm.tests.fakes import settle
from ring_mqtt_bridge.exit_delay import ExitDelayWatcher


class TestExitDelayWatcher:
    """Test the one-shot timer."""

    def test_fires_after_delay(self, clock):
        on_elapsed = Mock()

        async def scenario():
            watcher = ExitDelayWatcher(on_elapsed, clock.sleep)
            watcher.schedule(30.0)
            await settle()
            return watcher

        watcher = asyncio.run(scenario())

        on_elapsed.assert_called_once_with()
        assert clock.sleeps == [30.0]
        assert not watcher.pending

    def test_reschedule_replaces_pending_timer(self, clock):
        on_elapsed = Mock()

        async def scenario():
            watcher = ExitDelayWatcher(on_elapsed, clock.sleep)
            watcher.schedule(30.0)
            watcher.schedule(12.5)
            await settle()

        asyncio.run(scenario())

        on_elapsed.assert_called_once_with()
        assert clock.sleeps == [12.5]

    def test_cancel(self, clock):
        on_elapsed = Mock()

        async def scenario():
            watcher = ExitDelayWatcher(on_elapsed, clock.sleep)
            watcher.schedule(30.0)
            assert watcher.pending
            watcher.cancel()
            await settle()
            return watcher

        watcher = asyncio.run(scenario())

        on_elapsed.assert_not_called()
        assert not watcher.pending

    def test_callback_may_reschedule(self, clock):
        calls = []

        async def scenario():
            def on_elapsed():
                calls.append(clock.time())
                if len(calls) == 1:
                    watcher.schedule(5.0)

            watcher = ExitDelayWatcher(on_elapsed, clock.sleep)
            watcher.schedule(10.0)
            await settle()

        asyncio.run(scenario())

        assert len(calls) == 2
        assert clock.sleeps == [10.0, 5.0]
