"""Automated status monitoring.

Every ``interval`` seconds the monitor assesses the relay's own health and
publishes a status report to every active alliance through the same fan-out
as manual reports:

- Chat Bot: chat platform health check
- P&W API: outcome of the polling ticks since the previous check, or the
  push connection state when only push is configured
- modules["war"]: worst state of the event source adapters

The first check runs ``initial_delay`` seconds after start. A check that
finds a component down logs the critical issues before publishing.
"""

import asyncio
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, List, Optional

from infrastructure.logging import get_module_logger
from infrastructure.notifications.channels.base import ChatChannel
from infrastructure.resilience.reconnect import SleepFunc
from modules.war_alerts.directory import TenantDirectory
from modules.war_alerts.pipeline import WarAlertPipeline
from modules.war_alerts.status import (
    DEGRADED,
    DOWN,
    HEALTHY,
    ComponentStatus,
    SystemStatus,
)

logger = get_module_logger()

REQUESTED_BY = "Automated monitoring"
UNKNOWN = "unknown"

_SEVERITY = {HEALTHY: 0, UNKNOWN: 1, DEGRADED: 2, DOWN: 3}


def worst(statuses: List[str]) -> str:
    if not statuses:
        return UNKNOWN
    return max(statuses, key=lambda s: _SEVERITY.get(s, 1))


def adapter_health(status: Dict[str, Any]) -> str:
    """Health of one adapter from its status() dict."""
    if not status.get("running"):
        return DOWN
    state = status.get("state")
    if state == "given_up":
        return DOWN
    if state is not None and state != "connected":
        return DEGRADED
    if status.get("type") == "polling" and not status.get("seeded"):
        return DEGRADED
    return HEALTHY


class StatusMonitor:
    """Periodic self-check publishing status reports to every alliance.

    Args:
        pipeline: Fan-out used for the reports
        tenants: Directory listing the alliances to report to
        chat: Chat channel whose health check feeds the Chat Bot component
        adapter_statuses: Returns the current adapter status dicts
        interval: Seconds between checks
        initial_delay: Seconds before the first check
        sleep: Sleep used by the timer, injectable for tests
    """

    def __init__(
        self,
        pipeline: WarAlertPipeline,
        tenants: TenantDirectory,
        chat: ChatChannel,
        adapter_statuses: Callable[[], List[Dict[str, Any]]],
        interval: float = 1800.0,
        initial_delay: float = 60.0,
        sleep: SleepFunc = asyncio.sleep,
    ):
        self.pipeline = pipeline
        self.tenants = tenants
        self.chat = chat
        self.adapter_statuses = adapter_statuses
        self.interval = interval
        self.initial_delay = initial_delay
        self._sleep = sleep
        self._task: Optional[asyncio.Task] = None
        self._last_ticks: Dict[str, Dict[str, int]] = {}
        self.checks_run = 0

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.create_task(self._run())
        logger.info(
            "status_monitor_started",
            interval_seconds=self.interval,
            initial_delay_seconds=self.initial_delay,
        )

    async def stop(self) -> None:
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        logger.info("status_monitor_stopped", checks_run=self.checks_run)

    async def assess(self) -> SystemStatus:
        """Build the relay's current SystemStatus."""
        statuses = self.adapter_statuses()

        bot_result = await self.chat.health_check()
        bot = ComponentStatus(
            name="Chat Bot",
            status=HEALTHY if bot_result.is_success else DOWN,
            details=None if bot_result.is_success else bot_result.message,
        )

        modules = {}
        if statuses:
            modules["war"] = ComponentStatus(
                name="War Alerts",
                status=worst([adapter_health(s) for s in statuses]),
                details=", ".join(
                    f"{s.get('name')}: {adapter_health(s)}" for s in statuses
                ),
            )

        return SystemStatus(
            bot=bot,
            pw_api=self._feed_health(statuses),
            modules=modules,
            next_update=datetime.now(timezone.utc) + timedelta(seconds=self.interval),
        )

    async def run_check(self) -> int:
        """Assess health and publish to every active alliance.

        Returns:
            Number of alliances a report was published to
        """
        self.checks_run += 1
        system_status = await self.assess()
        critical = [
            c.name or "component"
            for c in system_status.all_components()
            if c.status == DOWN
        ]
        if critical:
            logger.warning("status_monitor_critical_issues", components=critical)

        published = 0
        alliance_ids = sorted({t.external_id for t in await self.tenants.list_active()})
        for alliance_id in alliance_ids:
            try:
                report = await self.pipeline.publish_status(
                    alliance_id, system_status, requested_by=REQUESTED_BY
                )
            except Exception as e:  # pylint: disable=broad-except
                logger.error(
                    "status_monitor_publish_failed",
                    tenant_external_id=alliance_id,
                    error=str(e),
                )
                continue
            if report is not None and report.published_count:
                published += 1

        logger.info(
            "status_monitor_check_completed",
            overall_status=system_status.overall_status,
            alliances=len(alliance_ids),
            published=published,
        )
        return published

    def _feed_health(self, statuses: List[Dict[str, Any]]) -> Optional[ComponentStatus]:
        polling = [s for s in statuses if s.get("type") == "polling"]
        if polling:
            ok = failed = 0
            for s in polling:
                previous = self._last_ticks.get(s["name"], {"ok": 0, "failed": 0})
                ok += s.get("ticks_ok", 0) - previous["ok"]
                failed += s.get("ticks_failed", 0) - previous["failed"]
                self._last_ticks[s["name"]] = {
                    "ok": s.get("ticks_ok", 0),
                    "failed": s.get("ticks_failed", 0),
                }
            if failed and not ok:
                status = DOWN
            elif failed:
                status = DEGRADED
            elif ok:
                status = HEALTHY
            else:
                status = UNKNOWN
            return ComponentStatus(
                name="P&W API",
                status=status,
                details=f"{ok} successful, {failed} failed polls since last check",
            )

        push = [s for s in statuses if s.get("type") == "push"]
        if push:
            return ComponentStatus(
                name="P&W API", status=worst([adapter_health(s) for s in push])
            )
        return None

    async def _run(self) -> None:
        await self._sleep(self.initial_delay)
        while True:
            try:
                await self.run_check()
            except Exception as e:  # pylint: disable=broad-except
                logger.error("status_monitor_check_failed", error=str(e), exc_info=True)
            await self._sleep(self.interval)
