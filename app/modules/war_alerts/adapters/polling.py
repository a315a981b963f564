"""Polling adapter for the GraphQL war feed.

Every ``interval`` seconds a tick fetches the most recent wars, keeps the
ones newer than the watermark and hands them to the handler oldest first.

Tick algorithm:
1. fetch_recent(batch_size), newest first
2. Collect events until the first id <= watermark
3. Reverse to oldest first
4. Advance the watermark to the newest fetched id
5. Hand each new event to the handler, isolating handler failures

A failed fetch abandons the tick without touching the watermark. The
watermark advances before the handler runs, so an event whose delivery
fails is not retried on the next tick.
"""

import asyncio
from typing import Any, Dict, List, Optional, Protocol, Set

from infrastructure.logging import bind_event_context, get_module_logger
from modules.war_alerts.adapters.base import EventHandler, EventSourceAdapter
from modules.war_alerts.exceptions import WarAlertError
from modules.war_alerts.models import ConflictEvent
from modules.war_alerts.watermark import WatermarkStore, compare_event_ids

logger = get_module_logger()


class WarFeed(Protocol):
    async def fetch_recent(self, limit: int) -> List[ConflictEvent]: ...


class PollingAdapter(EventSourceAdapter):
    """Timer-driven adapter over a war feed.

    Args:
        feed: Feed returning the most recent events, newest first
        watermarks: Shared watermark store
        interval: Seconds between ticks
        batch_size: Events requested per tick
        allow_overlap: Run a tick even while the previous one is still
            running; when False the late tick is skipped
        name: Adapter name, also the watermark key
    """

    def __init__(
        self,
        feed: WarFeed,
        watermarks: WatermarkStore,
        interval: float = 30.0,
        batch_size: int = 10,
        allow_overlap: bool = False,
        name: str = "polling",
    ):
        self.name = name
        self.feed = feed
        self.watermarks = watermarks
        self.interval = interval
        self.batch_size = batch_size
        self.allow_overlap = allow_overlap

        self._handler: Optional[EventHandler] = None
        self._running = False
        self._seeded = False
        self._timer: Optional[asyncio.Task] = None
        self._in_flight: Set[asyncio.Task] = set()

        self.ticks_ok = 0
        self.ticks_failed = 0
        self.ticks_skipped = 0
        self.events_emitted = 0

    @property
    def running(self) -> bool:
        return self._running

    @property
    def seeded(self) -> bool:
        return self._seeded

    async def start(self, handler: EventHandler) -> None:
        """Seed the watermark and start the timer."""
        if self._running:
            return
        self._handler = handler
        self._running = True

        await self.seed()
        if not self._running:
            # stop() was called while seeding
            return

        self._timer = asyncio.create_task(self._run_timer())
        logger.info(
            "polling_adapter_started",
            adapter=self.name,
            interval_seconds=self.interval,
            batch_size=self.batch_size,
            watermark=self.watermarks.get(self.name),
        )

    async def stop(self) -> None:
        """Cancel the timer. In-flight ticks are left to finish."""
        if not self._running and self._timer is None:
            return
        self._running = False
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        logger.info(
            "polling_adapter_stopped",
            adapter=self.name,
            in_flight_ticks=len(self._in_flight),
        )

    async def seed(self) -> bool:
        """Set the watermark to the newest event in the feed.

        Returns:
            True if the adapter is now seeded
        """
        try:
            events = await self.feed.fetch_recent(1)
        except WarAlertError as e:
            logger.warning("poll_seed_failed", adapter=self.name, error=str(e))
            return False

        if events:
            self.watermarks.advance(self.name, events[0].id)
        self._seeded = True
        logger.info(
            "poll_seeded",
            adapter=self.name,
            watermark=self.watermarks.get(self.name),
        )
        return True

    def trigger_tick(self) -> Optional[asyncio.Task]:
        """Start a tick as its own task.

        Returns:
            The tick task, or None when the tick was skipped because the
            previous one is still running and overlap is not allowed.
        """
        if self._in_flight and not self.allow_overlap:
            self.ticks_skipped += 1
            logger.warning(
                "poll_tick_skipped",
                adapter=self.name,
                reason="previous tick still running",
                in_flight_ticks=len(self._in_flight),
            )
            return None

        task = asyncio.create_task(self.tick())
        self._in_flight.add(task)
        task.add_done_callback(self._in_flight.discard)
        return task

    async def tick(self) -> int:
        """Run one poll tick.

        Returns:
            Number of events handed to the handler
        """
        try:
            events = await self.feed.fetch_recent(self.batch_size)
        except WarAlertError as e:
            self.ticks_failed += 1
            logger.error("poll_tick_failed", adapter=self.name, error=str(e))
            return 0

        if not self._seeded:
            # first successful fetch after a failed seed only sets the watermark
            if events:
                self.watermarks.advance(self.name, events[0].id)
            self._seeded = True
            self.ticks_ok += 1
            logger.info(
                "poll_seeded",
                adapter=self.name,
                watermark=self.watermarks.get(self.name),
            )
            return 0

        watermark = self.watermarks.get(self.name)
        new_events: List[ConflictEvent] = []
        for event in events:
            if watermark is not None and compare_event_ids(event.id, watermark) <= 0:
                break
            new_events.append(event)
        new_events.reverse()

        if events:
            self.watermarks.advance(self.name, events[0].id)
        self.ticks_ok += 1

        if new_events:
            logger.info(
                "poll_tick_completed",
                adapter=self.name,
                fetched=len(events),
                new_events=len(new_events),
                watermark=self.watermarks.get(self.name),
            )

        for event in new_events:
            await self._emit(event)
        return len(new_events)

    def status(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "type": "polling",
            "running": self._running,
            "seeded": self._seeded,
            "watermark": self.watermarks.get(self.name),
            "ticks_ok": self.ticks_ok,
            "ticks_failed": self.ticks_failed,
            "ticks_skipped": self.ticks_skipped,
            "events_emitted": self.events_emitted,
        }

    async def _run_timer(self) -> None:
        loop = asyncio.get_running_loop()
        next_fire = loop.time() + self.interval
        while self._running:
            await asyncio.sleep(max(0.0, next_fire - loop.time()))
            if not self._running:
                break
            self.trigger_tick()
            next_fire += self.interval

    async def _emit(self, event: ConflictEvent) -> None:
        with bind_event_context(event_id=event.id, source=self.name):
            try:
                await self._handler(event)
                self.events_emitted += 1
            except Exception as e:  # pylint: disable=broad-except
                logger.error(
                    "poll_event_handler_failed",
                    adapter=self.name,
                    error=str(e),
                    exc_info=True,
                )
