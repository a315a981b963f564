"""Pusher websocket transport for the P&W war subscription.

Speaks the Pusher channels protocol (version 7) over an aiohttp websocket:

1. Connect to ``wss://{host}/app/{app_key}?protocol=7&client=python&version=1.0``
2. Read ``pusher:connection_established`` for the ``socket_id``
3. POST ``socket_id`` and ``channel_name`` to the auth endpoint with the API
   key as a bearer token, receiving a channel ``auth`` signature
4. Send ``pusher:subscribe`` and wait for
   ``pusher_internal:subscription_succeeded``
5. Yield channel events, answering ``pusher:ping`` with ``pusher:pong``
6. After ``activity_timeout`` seconds of silence send ``pusher:ping``; no
   answer within ``timeout_seconds`` ends the connection with TransportError

Usage:
    transport = PusherTransport(app_key=..., host=..., auth_url=..., api_key=...)
    await transport.connect("private-war-create-abc")
    async for message in transport.messages():
        handle(message.event, message.data)
    await transport.close()
"""

import asyncio
import json
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, AsyncIterator, Dict, Optional

import aiohttp

from infrastructure.logging import get_module_logger
from modules.war_alerts.exceptions import TransportError

logger = get_module_logger()

PROTOCOL_VERSION = 7
CLIENT_NAME = "python"
CLIENT_VERSION = "1.0"

EVENT_CONNECTION_ESTABLISHED = "pusher:connection_established"
EVENT_SUBSCRIBE = "pusher:subscribe"
EVENT_SUBSCRIPTION_SUCCEEDED = "pusher_internal:subscription_succeeded"
EVENT_PING = "pusher:ping"
EVENT_PONG = "pusher:pong"
EVENT_ERROR = "pusher:error"

# Seconds of silence before the client pings, unless the server asks for less
DEFAULT_ACTIVITY_TIMEOUT = 120

CLOSED_TYPES = (
    aiohttp.WSMsgType.CLOSE,
    aiohttp.WSMsgType.CLOSING,
    aiohttp.WSMsgType.CLOSED,
)


@dataclass
class PushMessage:
    """A channel event received over the websocket.

    Attributes:
        event: Event name (e.g. ``WAR_CREATE``)
        data: Raw event data, usually a JSON-encoded string
        channel: Channel the event was published on
    """

    event: str
    data: Any
    channel: Optional[str] = None


class PushTransport(ABC):
    """Websocket transport delivering channel events."""

    @abstractmethod
    async def connect(self, channel: str) -> None:
        """Open the connection and subscribe to ``channel``.

        Raises:
            TransportError: The connection or subscription failed.
        """
        pass

    @abstractmethod
    def messages(self) -> AsyncIterator[PushMessage]:
        """Iterate channel events until the connection closes.

        Raises:
            TransportError: The server reported a protocol error.
        """
        pass

    @abstractmethod
    async def close(self) -> None:
        """Close the connection. Safe to call more than once."""
        pass


def decode_frame(raw: str) -> Dict[str, Any]:
    """Decode a Pusher frame.

    Raises:
        TransportError: The frame is not a JSON object.
    """
    try:
        frame = json.loads(raw)
    except ValueError as e:
        raise TransportError(f"Invalid Pusher frame: {e}") from e
    if not isinstance(frame, dict):
        raise TransportError("Pusher frame is not an object")
    return frame


def frame_data(frame: Dict[str, Any]) -> Any:
    """Protocol frames carry their payload JSON-encoded under ``data``."""
    data = frame.get("data")
    if isinstance(data, str):
        try:
            return json.loads(data)
        except ValueError:
            return data
    return data


class PusherTransport(PushTransport):
    """aiohttp websocket client for the P&W Pusher endpoint."""

    def __init__(
        self,
        app_key: str,
        host: str,
        auth_url: str,
        api_key: str,
        timeout_seconds: float = 15,
        activity_timeout: float = DEFAULT_ACTIVITY_TIMEOUT,
    ):
        self.app_key = app_key
        self.host = host
        self.auth_url = auth_url
        self.timeout_seconds = timeout_seconds
        self.activity_timeout = activity_timeout
        self._api_key = api_key
        self._session: Optional[aiohttp.ClientSession] = None
        self._ws: Optional[aiohttp.ClientWebSocketResponse] = None
        self._channel: Optional[str] = None
        self.socket_id: Optional[str] = None

    @property
    def url(self) -> str:
        return (
            f"wss://{self.host}/app/{self.app_key}"
            f"?protocol={PROTOCOL_VERSION}&client={CLIENT_NAME}&version={CLIENT_VERSION}"
        )

    async def connect(self, channel: str) -> None:
        self._channel = channel
        timeout = aiohttp.ClientTimeout(total=None, sock_connect=self.timeout_seconds)
        self._session = aiohttp.ClientSession(timeout=timeout)
        try:
            self._ws = await self._session.ws_connect(self.url)

            established = await self._receive_frame()
            if established.get("event") != EVENT_CONNECTION_ESTABLISHED:
                raise TransportError(
                    f"Unexpected first Pusher event: {established.get('event')}"
                )
            info = frame_data(established) or {}
            self.socket_id = info.get("socket_id")
            if not self.socket_id:
                raise TransportError("Pusher connection did not provide a socket_id")
            if info.get("activity_timeout"):
                self.activity_timeout = min(
                    self.activity_timeout, float(info["activity_timeout"])
                )

            auth = await self._authorize(channel)
            await self._ws.send_json(
                {"event": EVENT_SUBSCRIBE, "data": {"channel": channel, "auth": auth}}
            )

            while True:
                frame = await self._receive_frame()
                event = frame.get("event")
                if event == EVENT_SUBSCRIPTION_SUCCEEDED:
                    break
                if event == EVENT_ERROR:
                    raise TransportError(f"Pusher subscription error: {frame_data(frame)}")
                if event == EVENT_PING:
                    await self._ws.send_json({"event": EVENT_PONG, "data": {}})
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            await self.close()
            raise TransportError(f"Pusher connection failed: {e}") from e
        except TransportError:
            await self.close()
            raise

        logger.info("pusher_subscribed", channel=channel, socket_id=self.socket_id)

    async def messages(self) -> AsyncIterator[PushMessage]:
        ws = self._ws
        if ws is None:
            raise TransportError("Pusher transport is not connected")

        awaiting_pong = False
        while True:
            timeout = self.timeout_seconds if awaiting_pong else self.activity_timeout
            try:
                msg = await ws.receive(timeout=timeout)
            except asyncio.TimeoutError as e:
                if awaiting_pong:
                    raise TransportError(
                        f"Pusher connection stalled, no pong within {self.timeout_seconds}s"
                    ) from e
                # quiet line: ask the server to prove it is still there
                await ws.send_json({"event": EVENT_PING, "data": {}})
                awaiting_pong = True
                continue
            awaiting_pong = False

            if msg.type in CLOSED_TYPES:
                break
            if msg.type == aiohttp.WSMsgType.ERROR:
                raise TransportError(f"Pusher websocket error: {ws.exception()}")
            if msg.type != aiohttp.WSMsgType.TEXT:
                continue

            try:
                frame = decode_frame(msg.data)
            except TransportError as e:
                logger.warning("pusher_frame_ignored", error=str(e))
                continue

            event = frame.get("event")
            if event == EVENT_PING:
                await ws.send_json({"event": EVENT_PONG, "data": {}})
                continue
            if event == EVENT_ERROR:
                raise TransportError(f"Pusher error: {frame_data(frame)}")
            if not event or event.startswith("pusher"):
                continue

            yield PushMessage(
                event=event, data=frame.get("data"), channel=frame.get("channel")
            )

        logger.info(
            "pusher_connection_closed",
            channel=self._channel,
            close_code=ws.close_code,
        )

    async def close(self) -> None:
        ws, session = self._ws, self._session
        self._ws = None
        self._session = None
        if ws is not None and not ws.closed:
            await ws.close()
        if session is not None and not session.closed:
            await session.close()

    async def _receive_frame(self) -> Dict[str, Any]:
        msg = await self._ws.receive(timeout=self.timeout_seconds)
        if msg.type != aiohttp.WSMsgType.TEXT:
            raise TransportError(f"Pusher connection closed during handshake ({msg.type})")
        return decode_frame(msg.data)

    async def _authorize(self, channel: str) -> str:
        async with self._session.post(
            self.auth_url,
            data={"socket_id": self.socket_id, "channel_name": channel},
            headers={"Authorization": f"Bearer {self._api_key}"},
        ) as response:
            if response.status >= 400:
                raise TransportError(
                    f"Pusher channel authorization failed ({response.status})"
                )
            body = await response.json(content_type=None)
        auth = body.get("auth") if isinstance(body, dict) else None
        if not auth:
            raise TransportError("Pusher channel authorization returned no auth")
        return auth
