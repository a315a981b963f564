"""Fixtures for event source adapter tests."""

import asyncio
from typing import Any, List, Optional

import pytest

from integrations.pnw.pusher import PushMessage, PushTransport
from modules.war_alerts.exceptions import TransportError


class FakeFeed:
    """War feed replaying scripted batches.

    Each entry is a list of events (newest first) or an exception to raise.
    The last entry is repeated once the script is exhausted.
    """

    def __init__(self, *batches: Any):
        self.batches = list(batches)
        self.calls: List[int] = []

    async def fetch_recent(self, limit: int):
        self.calls.append(limit)
        batch = self.batches.pop(0) if len(self.batches) > 1 else self.batches[0]
        if isinstance(batch, Exception):
            raise batch
        return batch[:limit]


class FakeSubscriptions:
    def __init__(self, channel: str = "private-war-create-abc", failures: int = 0):
        self.channel = channel
        self.failures = failures
        self.calls: List[List[str]] = []

    async def subscribe(self, tenant_external_ids):
        self.calls.append(list(tenant_external_ids))
        if self.failures:
            self.failures -= 1
            raise TransportError("subscribe failed", status_code=503)
        return self.channel


class FakeTransport(PushTransport):
    """Transport fed through a queue; putting None ends the connection."""

    def __init__(self, connect_error: Optional[Exception] = None):
        self.connect_error = connect_error
        self.queue: asyncio.Queue = asyncio.Queue()
        self.connected_channel: Optional[str] = None
        self.closed = False

    async def connect(self, channel: str) -> None:
        if self.connect_error is not None:
            raise self.connect_error
        self.connected_channel = channel

    async def messages(self):
        while True:
            message = await self.queue.get()
            if message is None:
                return
            yield message

    async def close(self) -> None:
        self.closed = True

    def push(self, event: str, data: Any) -> None:
        self.queue.put_nowait(PushMessage(event=event, data=data))


@pytest.fixture
def fake_feed():
    return FakeFeed


@pytest.fixture
def fake_subscriptions():
    return FakeSubscriptions


@pytest.fixture
def fake_transport():
    return FakeTransport


@pytest.fixture
def never_sleep():
    """Sleep that blocks forever, keeping reconnect timers pending."""

    async def _sleep(delay: float) -> None:
        await asyncio.Event().wait()

    return _sleep


@pytest.fixture
def recorder():
    """Async event handler recording what it receives."""

    class Recorder:
        def __init__(self):
            self.events = []

        async def __call__(self, event):
            self.events.append(event)

        @property
        def ids(self):
            return [e.id for e in self.events]

    return Recorder()
