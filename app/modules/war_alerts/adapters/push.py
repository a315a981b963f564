"""Push adapter for the P&W war subscription.

Connect sequence:
1. Load tracked alliance ids from the tenant directory (subscription filter)
2. Subscribe handshake, answering with the channel name
3. Open the websocket transport and bind to the channel

Each WAR_CREATE (one war) or BULK_WAR_CREATE (list of wars) message is
parsed and forwarded immediately. Connect failures and disconnects are
reported to the ReconnectManager, which schedules the next attempt with
exponential backoff and gives up after the configured number of attempts.
"""

import asyncio
import json
from typing import Any, Callable, Dict, Iterable, List, Optional, Protocol

from infrastructure.logging import bind_event_context, get_module_logger
from infrastructure.resilience.reconnect import (
    ConnectionState,
    ReconnectManager,
    SleepFunc,
)
from integrations.pnw.parsing import parse_war
from integrations.pnw.pusher import PushMessage, PushTransport
from modules.war_alerts.adapters.base import EventHandler, EventSourceAdapter
from modules.war_alerts.directory import TenantDirectory
from modules.war_alerts.exceptions import ParseError

logger = get_module_logger()

WAR_CREATE = "WAR_CREATE"
BULK_WAR_CREATE = "BULK_WAR_CREATE"


class Subscriptions(Protocol):
    async def subscribe(self, tenant_external_ids: Iterable[str]) -> str: ...


def decode_payload(data: Any) -> Any:
    """Decode message data that may be JSON-encoded, possibly twice.

    Raises:
        ParseError: The data is not valid JSON.
    """
    if isinstance(data, (bytes, bytearray)):
        data = data.decode("utf-8", errors="replace")
    if isinstance(data, str):
        try:
            data = json.loads(data)
        except ValueError as e:
            raise ParseError(f"Message data is not valid JSON: {e}") from e
    # some publishers wrap the payload in a second {"data": "..."} envelope
    if isinstance(data, dict) and "id" not in data and "data" in data:
        return decode_payload(data["data"])
    return data


class PushAdapter(EventSourceAdapter):
    """Websocket-driven adapter with automatic reconnect.

    Args:
        subscriptions: Subscribe handshake client
        transport_factory: Creates a fresh transport for each connection
        tenants: Directory providing the alliance ids to subscribe to
        reconnect_base_delay: Seconds before the first reconnect attempt
        reconnect_max_attempts: Attempts before giving up
        sleep: Sleep used by the reconnect timer, injectable for tests
        name: Adapter name
    """

    def __init__(
        self,
        subscriptions: Subscriptions,
        transport_factory: Callable[[], PushTransport],
        tenants: TenantDirectory,
        reconnect_base_delay: float = 5.0,
        reconnect_max_attempts: int = 5,
        sleep: SleepFunc = asyncio.sleep,
        name: str = "push",
    ):
        self.name = name
        self.subscriptions = subscriptions
        self.transport_factory = transport_factory
        self.tenants = tenants
        self.reconnect = ReconnectManager(
            name=name,
            reconnect=self._connect,
            base_delay=reconnect_base_delay,
            max_attempts=reconnect_max_attempts,
            sleep=sleep,
        )

        self._handler: Optional[EventHandler] = None
        self._running = False
        self._transport: Optional[PushTransport] = None
        self._reader: Optional[asyncio.Task] = None
        self._channel: Optional[str] = None
        self.events_emitted = 0

    @property
    def running(self) -> bool:
        return self._running

    async def start(self, handler: EventHandler) -> None:
        """Connect, handing later connect attempts to the reconnect manager.

        Calling start() again after the reconnect manager gave up restarts
        the adapter with a fresh attempts budget.
        """
        if self._running and self.reconnect.state != ConnectionState.GIVEN_UP:
            return
        await self._close_transport()
        self._handler = handler
        self._running = True
        self.reconnect.reset()
        logger.info("push_adapter_starting", adapter=self.name)
        await self._connect()

    async def stop(self) -> None:
        """Cancel the reconnect timer and the reader, then close the transport."""
        if not self._running and self._transport is None:
            self.reconnect.cancel()
            return
        self._running = False
        self.reconnect.cancel()
        await self._close_transport()
        logger.info("push_adapter_stopped", adapter=self.name)

    def status(self) -> Dict[str, Any]:
        snapshot = self.reconnect.snapshot()
        return {
            "name": self.name,
            "type": "push",
            "running": self._running,
            "channel": self._channel,
            "events_emitted": self.events_emitted,
            "state": snapshot.state.value,
            "reconnect_attempts": snapshot.attempts,
            "max_reconnect_attempts": snapshot.max_attempts,
            "next_attempt_at": (
                snapshot.next_attempt_at.isoformat()
                if snapshot.next_attempt_at
                else None
            ),
        }

    async def handle_message(self, message: PushMessage) -> int:
        """Parse a channel event and forward its wars.

        Malformed messages and wars are logged and skipped.

        Returns:
            Number of events forwarded to the handler
        """
        if message.event not in (WAR_CREATE, BULK_WAR_CREATE):
            logger.debug(
                "push_event_ignored", adapter=self.name, push_event=message.event
            )
            return 0

        try:
            payload = decode_payload(message.data)
        except ParseError as e:
            logger.warning(
                "push_message_malformed",
                adapter=self.name,
                push_event=message.event,
                error=str(e),
            )
            return 0

        if message.event == BULK_WAR_CREATE:
            if not isinstance(payload, list):
                logger.warning(
                    "push_message_malformed",
                    adapter=self.name,
                    push_event=message.event,
                    error="bulk payload is not a list",
                )
                return 0
            wars: List[Any] = payload
        else:
            wars = [payload]

        forwarded = 0
        for war in wars:
            try:
                event = parse_war(decode_payload(war))
            except ParseError as e:
                logger.warning(
                    "push_war_malformed",
                    adapter=self.name,
                    push_event=message.event,
                    error=str(e),
                )
                continue

            with bind_event_context(event_id=event.id, source=self.name):
                try:
                    await self._handler(event)
                    self.events_emitted += 1
                    forwarded += 1
                except Exception as e:  # pylint: disable=broad-except
                    logger.error(
                        "push_event_handler_failed",
                        adapter=self.name,
                        error=str(e),
                        exc_info=True,
                    )
        return forwarded

    async def _connect(self) -> None:
        if not self._running:
            return

        self.reconnect.on_connecting()
        transport: Optional[PushTransport] = None
        try:
            tenants = await self.tenants.list_active()
            channel = await self.subscriptions.subscribe(
                [t.external_id for t in tenants]
            )
            transport = self.transport_factory()
            await transport.connect(channel)
        except Exception as e:  # pylint: disable=broad-except
            logger.error("push_connect_failed", adapter=self.name, error=str(e))
            if transport is not None:
                await transport.close()
            if self._running:
                self.reconnect.on_disconnected(str(e))
            return

        if not self._running:
            await transport.close()
            return

        self._transport = transport
        self._channel = channel
        self.reconnect.on_connected()
        self._reader = asyncio.create_task(self._read(transport))
        logger.info(
            "push_adapter_connected",
            adapter=self.name,
            channel=channel,
            alliances=len(tenants),
        )

    async def _read(self, transport: PushTransport) -> None:
        reason = "connection closed"
        try:
            async for message in transport.messages():
                await self.handle_message(message)
        except asyncio.CancelledError:
            raise
        except Exception as e:  # pylint: disable=broad-except
            reason = str(e)
            logger.error("push_connection_error", adapter=self.name, error=reason)

        if self._transport is transport:
            self._transport = None
            self._reader = None
        await transport.close()

        if self._running:
            logger.warning("push_disconnected", adapter=self.name, reason=reason)
            self.reconnect.on_disconnected(reason)

    async def _close_transport(self) -> None:
        if self._reader is not None and self._reader is not asyncio.current_task():
            self._reader.cancel()
        self._reader = None

        transport, self._transport = self._transport, None
        if transport is not None:
            await transport.close()
