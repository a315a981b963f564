"""Reconnect manager for long-lived upstream connections.

Tracks the lifecycle of a push connection and schedules reconnect attempts
with exponential backoff:
1. IDLE: Nothing attempted yet (or reset)
2. CONNECTING: An attempt is in flight
3. CONNECTED: Connection established, attempts counter cleared
4. DISCONNECTED: Connection lost, a reconnect is scheduled
5. GIVEN_UP: Attempts exhausted, terminal until reset()

State transitions:
- IDLE/DISCONNECTED -> CONNECTING: on_connecting() or the reconnect timer fires
- CONNECTING -> CONNECTED: on_connected()
- CONNECTING/CONNECTED -> DISCONNECTED: on_disconnected() with attempts left
- DISCONNECTED -> GIVEN_UP: on_disconnected() with attempts exhausted

The delay before reconnect attempt n (0-based) is base_delay * 2 ** n.
"""

import asyncio
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Awaitable, Callable, Optional

from pydantic import BaseModel

from infrastructure.logging import get_module_logger

logger = get_module_logger()

SleepFunc = Callable[[float], Awaitable[None]]


class ConnectionState(Enum):
    """Push connection states."""

    IDLE = "idle"
    CONNECTING = "connecting"
    CONNECTED = "connected"
    DISCONNECTED = "disconnected"
    GIVEN_UP = "given_up"


class ReconnectState(BaseModel):
    """Snapshot of a reconnect manager, reported by adapter status."""

    state: ConnectionState
    attempts: int
    max_attempts: int
    next_attempt_at: Optional[datetime] = None


class ReconnectManager:
    """Exponential backoff reconnect scheduler.

    Args:
        name: Name of the connection (typically the adapter name)
        reconnect: Coroutine function performing one connection attempt
        base_delay: Delay in seconds before the first reconnect attempt
        max_attempts: Reconnect attempts before giving up
        sleep: Awaitable sleep used by the timer, injectable for tests
    """

    def __init__(
        self,
        name: str,
        reconnect: Callable[[], Awaitable[None]],
        base_delay: float = 5.0,
        max_attempts: int = 5,
        sleep: SleepFunc = asyncio.sleep,
    ):
        self.name = name
        self.base_delay = base_delay
        self.max_attempts = max_attempts
        self._reconnect = reconnect
        self._sleep = sleep

        self._state = ConnectionState.IDLE
        self._attempts = 0
        self._next_attempt_at: Optional[datetime] = None
        self._timer: Optional[asyncio.Task] = None
        self._stopped = False

    @property
    def state(self) -> ConnectionState:
        """Get current connection state."""
        return self._state

    @property
    def attempts(self) -> int:
        """Reconnect attempts scheduled since the last successful connect."""
        return self._attempts

    def on_connecting(self) -> None:
        """Record that a connection attempt started."""
        self._state = ConnectionState.CONNECTING
        self._next_attempt_at = None

    def on_connected(self) -> None:
        """Record a successful connection and clear the attempts counter."""
        if self._attempts:
            logger.info(
                "reconnect_succeeded",
                name=self.name,
                attempts=self._attempts,
            )
        self._state = ConnectionState.CONNECTED
        self._attempts = 0
        self._next_attempt_at = None

    def on_disconnected(self, reason: str) -> Optional[float]:
        """Record a lost or failed connection and schedule the next attempt.

        Args:
            reason: Human-readable cause, logged

        Returns:
            Delay in seconds before the scheduled attempt, or None when the
            manager gave up or was cancelled.
        """
        if self._stopped or self._state == ConnectionState.GIVEN_UP:
            return None

        self._state = ConnectionState.DISCONNECTED

        if self._attempts >= self.max_attempts:
            self._state = ConnectionState.GIVEN_UP
            self._next_attempt_at = None
            self._cancel_timer()
            logger.error(
                "reconnect_given_up",
                name=self.name,
                attempts=self._attempts,
                reason=reason,
            )
            return None

        delay = self.base_delay * 2**self._attempts
        self._attempts += 1
        self._next_attempt_at = datetime.now(timezone.utc) + timedelta(seconds=delay)

        self._cancel_timer()
        self._timer = asyncio.create_task(self._fire(delay))

        logger.warning(
            "reconnect_scheduled",
            name=self.name,
            attempt=self._attempts,
            max_attempts=self.max_attempts,
            delay_seconds=delay,
            reason=reason,
        )
        return delay

    def cancel(self) -> None:
        """Cancel the pending reconnect and ignore later disconnects."""
        self._stopped = True
        self._next_attempt_at = None
        self._cancel_timer()

    def reset(self) -> None:
        """Return to IDLE with a cleared attempts counter."""
        self._cancel_timer()
        self._stopped = False
        self._state = ConnectionState.IDLE
        self._attempts = 0
        self._next_attempt_at = None

    def snapshot(self) -> ReconnectState:
        """Get a snapshot of the current state."""
        return ReconnectState(
            state=self._state,
            attempts=self._attempts,
            max_attempts=self.max_attempts,
            next_attempt_at=self._next_attempt_at,
        )

    def _cancel_timer(self) -> None:
        # The timer task itself may report a failed attempt; it must not cancel itself.
        if self._timer is not None and self._timer is not asyncio.current_task():
            self._timer.cancel()
        self._timer = None

    async def _fire(self, delay: float) -> None:
        await self._sleep(delay)
        if self._stopped:
            return

        self.on_connecting()
        logger.info("reconnect_attempt", name=self.name, attempt=self._attempts)
        try:
            await self._reconnect()
        except asyncio.CancelledError:
            raise
        except Exception as e:  # pylint: disable=broad-except
            logger.error(
                "reconnect_attempt_failed",
                name=self.name,
                attempt=self._attempts,
                error=str(e),
            )
            if self._state == ConnectionState.CONNECTING:
                self.on_disconnected(str(e))
