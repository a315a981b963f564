"""Unit tests for PushAdapter.

Tests cover:
- WAR_CREATE and BULK_WAR_CREATE handling
- Malformed and unknown messages
- Subscription filter from the tenant directory
- Reconnect scheduling, recovery and giving up
- Shutdown
"""

import asyncio
import json

import pytest

from infrastructure.resilience.reconnect import ConnectionState
from integrations.pnw.pusher import PushMessage
from modules.war_alerts.adapters.push import (
    BULK_WAR_CREATE,
    WAR_CREATE,
    PushAdapter,
    decode_payload,
)
from modules.war_alerts.directory import InMemoryTenantDirectory
from modules.war_alerts.exceptions import ParseError, TransportError


@pytest.fixture
def tenants(tenant_factory):
    return InMemoryTenantDirectory(
        [
            tenant_factory(id="t1", external_id="790"),
            tenant_factory(id="t2", external_id="800"),
        ]
    )


@pytest.fixture
def push_factory(tenants, fake_subscriptions, fake_transport, never_sleep):
    """Factory returning (adapter, transports) with a fresh transport per connect.

    ``connect_errors`` are raised by the first transports' connect(), in order.
    """

    def _factory(subscriptions=None, connect_errors=(), sleep=never_sleep, **kwargs):
        transports = []
        errors = list(connect_errors)

        def _make():
            transport = fake_transport(errors.pop(0) if errors else None)
            transports.append(transport)
            return transport

        adapter = PushAdapter(
            subscriptions=subscriptions or fake_subscriptions(),
            transport_factory=_make,
            tenants=tenants,
            sleep=sleep,
            **kwargs,
        )
        return adapter, transports

    return _factory


async def wait_for(condition, timeout=1.0):
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not condition():
        if loop.time() > deadline:
            raise AssertionError("condition not met in time")
        await asyncio.sleep(0.001)


@pytest.mark.unit
class TestDecodePayload:
    """Tests for decode_payload."""

    def test_decodes_json_string(self):
        assert decode_payload('{"id": "1"}') == {"id": "1"}

    def test_passes_through_objects(self):
        assert decode_payload({"id": "1"}) == {"id": "1"}

    def test_unwraps_data_envelope(self):
        assert decode_payload(json.dumps({"data": json.dumps([{"id": "1"}])})) == [
            {"id": "1"}
        ]

    def test_invalid_json_raises(self):
        with pytest.raises(ParseError):
            decode_payload("{nope")


@pytest.mark.unit
class TestHandleMessage:
    """Tests for PushAdapter.handle_message."""

    @pytest.mark.asyncio
    async def test_war_create_forwards_one_event(
        self, push_factory, war_payload, recorder
    ):
        adapter, _ = push_factory()
        adapter._handler = recorder

        count = await adapter.handle_message(
            PushMessage(event=WAR_CREATE, data=json.dumps(war_payload(id="105")))
        )

        assert count == 1
        assert recorder.ids == ["105"]
        assert recorder.events[0].side_a.tenant_external_id == "790"
        assert recorder.events[0].side_b.tenant_external_id is None

    @pytest.mark.asyncio
    async def test_bulk_war_create_forwards_each_war(
        self, push_factory, war_payload, recorder
    ):
        adapter, _ = push_factory()
        adapter._handler = recorder

        count = await adapter.handle_message(
            PushMessage(
                event=BULK_WAR_CREATE,
                data=json.dumps([war_payload(id="105"), war_payload(id="106")]),
            )
        )

        assert count == 2
        assert recorder.ids == ["105", "106"]
        assert adapter.events_emitted == 2

    @pytest.mark.asyncio
    async def test_bulk_skips_malformed_wars(self, push_factory, war_payload, recorder):
        adapter, _ = push_factory()
        adapter._handler = recorder

        count = await adapter.handle_message(
            PushMessage(
                event=BULK_WAR_CREATE,
                data=[war_payload(id="105"), {"reason": "no id"}, "garbage"],
            )
        )

        assert count == 1
        assert recorder.ids == ["105"]

    @pytest.mark.asyncio
    async def test_malformed_message_skipped(self, push_factory, recorder):
        adapter, _ = push_factory()
        adapter._handler = recorder

        assert await adapter.handle_message(PushMessage(event=WAR_CREATE, data="{bad")) == 0
        assert (
            await adapter.handle_message(
                PushMessage(event=BULK_WAR_CREATE, data='{"id": "1"}')
            )
            == 0
        )
        assert recorder.events == []

    @pytest.mark.asyncio
    async def test_unknown_event_ignored(self, push_factory, war_payload, recorder):
        adapter, _ = push_factory()
        adapter._handler = recorder

        count = await adapter.handle_message(
            PushMessage(event="WAR_UPDATE", data=json.dumps(war_payload()))
        )

        assert count == 0
        assert recorder.events == []

    @pytest.mark.asyncio
    async def test_unknown_and_malformed_messages_keep_connection(
        self, push_factory, war_payload, recorder
    ):
        adapter, transports = push_factory()
        await adapter.start(recorder)
        try:
            transports[0].push("WAR_UPDATE", "{}")
            transports[0].push(WAR_CREATE, "{bad")
            transports[0].push(BULK_WAR_CREATE, '{"id": "1"}')
            transports[0].push(WAR_CREATE, json.dumps(war_payload(id="105")))

            await wait_for(lambda: recorder.ids == ["105"])
            assert adapter.reconnect.state == ConnectionState.CONNECTED
            assert not transports[0].closed
            assert len(transports) == 1
        finally:
            await adapter.stop()

    @pytest.mark.asyncio
    async def test_handler_failure_isolated(self, push_factory, war_payload):
        seen = []

        async def flaky(event):
            seen.append(event.id)
            if event.id == "105":
                raise RuntimeError("boom")

        adapter, _ = push_factory()
        adapter._handler = flaky

        count = await adapter.handle_message(
            PushMessage(
                event=BULK_WAR_CREATE,
                data=[war_payload(id="105"), war_payload(id="106")],
            )
        )

        assert seen == ["105", "106"]
        assert count == 1


@pytest.mark.unit
class TestConnect:
    """Tests for the connect and reconnect cycle."""

    @pytest.mark.asyncio
    async def test_start_subscribes_with_tracked_alliances(
        self, push_factory, fake_subscriptions, war_payload, recorder
    ):
        subscriptions = fake_subscriptions(channel="private-war-create-xyz")
        adapter, transports = push_factory(subscriptions=subscriptions)

        await adapter.start(recorder)
        try:
            assert subscriptions.calls == [["790", "800"]]
            assert transports[0].connected_channel == "private-war-create-xyz"
            assert adapter.reconnect.state == ConnectionState.CONNECTED

            transports[0].push(WAR_CREATE, json.dumps(war_payload(id="105")))
            await wait_for(lambda: recorder.events)
            assert recorder.ids == ["105"]
        finally:
            await adapter.stop()

    @pytest.mark.asyncio
    async def test_connect_failure_schedules_reconnect(
        self, push_factory, fake_subscriptions, recorder
    ):
        adapter, _ = push_factory(subscriptions=fake_subscriptions(failures=1))

        await adapter.start(recorder)
        try:
            status = adapter.status()
            assert status["state"] == "disconnected"
            assert status["reconnect_attempts"] == 1
            assert status["next_attempt_at"] is not None
        finally:
            await adapter.stop()

    @pytest.mark.asyncio
    async def test_reconnects_after_failure(
        self, push_factory, fake_subscriptions, recorder
    ):
        delays = []

        async def instant_sleep(delay):
            delays.append(delay)

        adapter, transports = push_factory(
            subscriptions=fake_subscriptions(failures=2), sleep=instant_sleep
        )

        await adapter.start(recorder)
        try:
            await wait_for(lambda: adapter.reconnect.state == ConnectionState.CONNECTED)
            assert delays == [5.0, 10.0]
            assert adapter.reconnect.attempts == 0
            assert len(transports) == 1
        finally:
            await adapter.stop()

    @pytest.mark.asyncio
    async def test_transport_connect_failure_closes_transport(
        self, push_factory, recorder
    ):
        adapter, transports = push_factory(
            connect_errors=[TransportError("auth failed")]
        )

        await adapter.start(recorder)
        try:
            assert transports[0].closed
            assert adapter.reconnect.state == ConnectionState.DISCONNECTED
        finally:
            await adapter.stop()

    @pytest.mark.asyncio
    async def test_gives_up_after_max_attempts(
        self, push_factory, fake_subscriptions, recorder
    ):
        async def instant_sleep(delay):
            pass

        adapter, _ = push_factory(
            subscriptions=fake_subscriptions(failures=100),
            sleep=instant_sleep,
            reconnect_max_attempts=3,
        )

        await adapter.start(recorder)
        try:
            await wait_for(lambda: adapter.reconnect.state == ConnectionState.GIVEN_UP)
            status = adapter.status()
            assert status["state"] == "given_up"
            assert status["reconnect_attempts"] == 3
            assert status["next_attempt_at"] is None
        finally:
            await adapter.stop()

    @pytest.mark.asyncio
    async def test_start_after_giving_up_restarts(
        self, push_factory, fake_subscriptions, recorder
    ):
        async def instant_sleep(delay):
            pass

        subscriptions = fake_subscriptions(failures=4)
        adapter, transports = push_factory(
            subscriptions=subscriptions,
            sleep=instant_sleep,
            reconnect_max_attempts=3,
        )

        await adapter.start(recorder)
        try:
            await wait_for(lambda: adapter.reconnect.state == ConnectionState.GIVEN_UP)
            assert len(subscriptions.calls) == 4

            await adapter.start(recorder)

            assert len(subscriptions.calls) == 5
            assert adapter.reconnect.state == ConnectionState.CONNECTED
            assert adapter.reconnect.attempts == 0
            assert transports[-1].connected_channel == "private-war-create-abc"
        finally:
            await adapter.stop()

    @pytest.mark.asyncio
    async def test_start_while_connected_is_noop(self, push_factory, recorder):
        adapter, transports = push_factory()
        await adapter.start(recorder)
        try:
            await adapter.start(recorder)

            assert len(transports) == 1
            assert adapter.reconnect.state == ConnectionState.CONNECTED
        finally:
            await adapter.stop()

    @pytest.mark.asyncio
    async def test_connection_loss_schedules_reconnect(self, push_factory, recorder):
        adapter, transports = push_factory()
        await adapter.start(recorder)
        try:
            transports[0].queue.put_nowait(None)
            await wait_for(
                lambda: adapter.reconnect.state == ConnectionState.DISCONNECTED
            )
            assert transports[0].closed
            assert adapter.reconnect.attempts == 1
        finally:
            await adapter.stop()


@pytest.mark.unit
class TestStop:
    """Tests for PushAdapter.stop."""

    @pytest.mark.asyncio
    async def test_stop_closes_transport(self, push_factory, recorder):
        adapter, transports = push_factory()
        await adapter.start(recorder)

        await adapter.stop()

        assert transports[0].closed
        assert not adapter.running
        assert adapter.status()["running"] is False

    @pytest.mark.asyncio
    async def test_stop_cancels_pending_reconnect(
        self, push_factory, fake_subscriptions, recorder
    ):
        adapter, _ = push_factory(subscriptions=fake_subscriptions(failures=1))
        await adapter.start(recorder)

        await adapter.stop()
        await adapter.stop()

        assert adapter.status()["next_attempt_at"] is None
        assert adapter.reconnect.on_disconnected("late") is None
