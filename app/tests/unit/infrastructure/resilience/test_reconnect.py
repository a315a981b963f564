"""Unit tests for ReconnectManager.

Tests cover:
- Exponential backoff schedule
- Giving up after max attempts
- Timer-driven reconnect attempts
- cancel() and reset()
"""

import asyncio
from unittest.mock import AsyncMock

import pytest

from infrastructure.resilience.reconnect import ConnectionState, ReconnectManager


@pytest.fixture
def blocked_sleep():
    async def _sleep(delay):
        await asyncio.Event().wait()

    return _sleep


@pytest.fixture
def manager_factory(blocked_sleep):
    """Factory for managers whose timers never fire unless a sleep is given."""

    def _factory(reconnect=None, sleep=blocked_sleep, **kwargs):
        return ReconnectManager(
            name="push",
            reconnect=reconnect or AsyncMock(),
            sleep=sleep,
            **kwargs,
        )

    return _factory


@pytest.mark.unit
class TestReconnectManagerInitialization:
    """Tests for the initial state."""

    def test_starts_idle(self, manager_factory):
        manager = manager_factory()

        assert manager.state == ConnectionState.IDLE
        assert manager.attempts == 0
        snapshot = manager.snapshot()
        assert snapshot.max_attempts == 5
        assert snapshot.next_attempt_at is None


@pytest.mark.unit
class TestBackoff:
    """Tests for the backoff schedule."""

    @pytest.mark.asyncio
    async def test_delays_double_then_give_up(self, manager_factory):
        manager = manager_factory(base_delay=5.0, max_attempts=5)
        delays = []

        for _ in range(6):
            manager.on_connecting()
            delays.append(manager.on_disconnected("connection refused"))

        assert delays == [5.0, 10.0, 20.0, 40.0, 80.0, None]
        assert manager.state == ConnectionState.GIVEN_UP
        assert manager.snapshot().next_attempt_at is None
        manager.cancel()

    @pytest.mark.asyncio
    async def test_given_up_ignores_further_disconnects(self, manager_factory):
        manager = manager_factory(max_attempts=0)

        assert manager.on_disconnected("first") is None
        assert manager.on_disconnected("second") is None
        assert manager.state == ConnectionState.GIVEN_UP

    @pytest.mark.asyncio
    async def test_connected_clears_attempts(self, manager_factory):
        manager = manager_factory()
        manager.on_disconnected("lost")
        manager.on_disconnected("lost again")

        manager.on_connected()

        assert manager.state == ConnectionState.CONNECTED
        assert manager.attempts == 0
        assert manager.on_disconnected("lost") == 5.0
        manager.cancel()

    @pytest.mark.asyncio
    async def test_next_attempt_at_is_set(self, manager_factory):
        manager = manager_factory()

        manager.on_disconnected("lost")

        snapshot = manager.snapshot()
        assert snapshot.state == ConnectionState.DISCONNECTED
        assert snapshot.next_attempt_at is not None
        manager.cancel()


@pytest.mark.unit
class TestTimer:
    """Tests for timer-driven reconnect attempts."""

    @pytest.mark.asyncio
    async def test_timer_invokes_reconnect(self, manager_factory):
        connected = asyncio.Event()
        slept = []

        async def instant_sleep(delay):
            slept.append(delay)

        manager = None

        async def reconnect():
            manager.on_connected()
            connected.set()

        manager = manager_factory(reconnect=reconnect, sleep=instant_sleep)
        manager.on_disconnected("lost")

        await asyncio.wait_for(connected.wait(), timeout=1)

        assert slept == [5.0]
        assert manager.state == ConnectionState.CONNECTED

    @pytest.mark.asyncio
    async def test_raising_reconnect_schedules_next_attempt(self, manager_factory):
        calls = []
        done = asyncio.Event()

        async def instant_sleep(delay):
            pass

        async def reconnect():
            calls.append(1)
            if len(calls) == 2:
                done.set()
                return
            raise ConnectionError("refused")

        manager = manager_factory(reconnect=reconnect, sleep=instant_sleep)
        manager.on_disconnected("lost")

        await asyncio.wait_for(done.wait(), timeout=1)

        assert len(calls) == 2
        assert manager.attempts == 2

    @pytest.mark.asyncio
    async def test_cancel_stops_pending_attempt(self):
        reconnect = AsyncMock()
        release = asyncio.Event()

        async def gated_sleep(delay):
            await release.wait()

        manager = ReconnectManager("push", reconnect, sleep=gated_sleep)
        manager.on_disconnected("lost")

        manager.cancel()
        release.set()
        await asyncio.sleep(0)

        reconnect.assert_not_called()
        assert manager.on_disconnected("late") is None

    @pytest.mark.asyncio
    async def test_reset_returns_to_idle(self, manager_factory):
        manager = manager_factory(max_attempts=0)
        manager.on_disconnected("lost")
        manager.cancel()

        manager.reset()

        assert manager.state == ConnectionState.IDLE
        assert manager.attempts == 0
        assert manager.on_disconnected("lost") is None
        assert manager.state == ConnectionState.GIVEN_UP
