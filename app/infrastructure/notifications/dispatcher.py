"""Notification dispatcher with concurrent per-target fan-out.

Delivers one rendered message to every delivery target of a tenant:
- All sends start concurrently
- Each target succeeds or fails on its own
- A discussion thread is opened under each successful send
- Every outcome becomes a DeliveryResult

Usage Example:
    from infrastructure.notifications.dispatcher import NotificationDispatcher

    dispatcher = NotificationDispatcher(channel=SlackChatChannel(provider))
    results = await dispatcher.dispatch(message, routed_tenant, targets)
    sent = sum(1 for r in results if r.success)
"""

import asyncio
from typing import TYPE_CHECKING, List

import structlog
from infrastructure.notifications.channels.base import ChatChannel
from infrastructure.notifications.models import (
    ChatMessage,
    DeliveryResult,
    DeliveryTarget,
)

if TYPE_CHECKING:
    from modules.war_alerts.models import RoutedTenant

logger = structlog.get_logger()


class NotificationDispatcher:
    """Concurrent chat fan-out for one tenant at a time.

    Attributes:
        channel: Chat channel used to post messages
        create_threads: Open a thread under each delivered message when the
            message carries a thread seed
    """

    def __init__(self, channel: ChatChannel, create_threads: bool = True):
        """Initialize notification dispatcher.

        Args:
            channel: Chat channel implementation
            create_threads: Whether to open discussion threads
        """
        self.channel = channel
        self.create_threads = create_threads

        logger.info(
            "initialized_notification_dispatcher",
            channel=channel.channel_name,
            create_threads=create_threads,
        )

    async def dispatch(
        self,
        message: ChatMessage,
        routed_tenant: "RoutedTenant",
        targets: List[DeliveryTarget],
    ) -> List[DeliveryResult]:
        """Send a message to every target of a tenant.

        Sends start together and are awaited together; a failure or an
        exception on one target never affects its siblings.

        Args:
            message: Rendered message
            routed_tenant: Tenant (and its role) the message is for
            targets: Resolved delivery targets of the tenant

        Returns:
            One DeliveryResult per target, in target order
        """
        if not targets:
            return []

        outcomes = await asyncio.gather(
            *(self._deliver(message, routed_tenant, target) for target in targets),
            return_exceptions=True,
        )

        results: List[DeliveryResult] = []
        for target, outcome in zip(targets, outcomes):
            if isinstance(outcome, BaseException):
                logger.error(
                    "war_alert_delivery_crashed",
                    tenant_id=routed_tenant.tenant.id,
                    channel_id=target.channel_id,
                    error=str(outcome),
                )
                outcome = self._failed(
                    routed_tenant, target, f"Delivery error: {outcome}"
                )
            results.append(outcome)

        logger.info(
            "tenant_fan_out_completed",
            tenant_id=routed_tenant.tenant.id,
            delivered=sum(1 for r in results if r.success),
            total=len(results),
        )
        return results

    async def _deliver(
        self,
        message: ChatMessage,
        routed_tenant: "RoutedTenant",
        target: DeliveryTarget,
    ) -> DeliveryResult:
        tenant = routed_tenant.tenant
        send_result = await self.channel.send_message(target.channel_id, message)
        if not send_result.is_success:
            logger.warning(
                "war_alert_delivery_failed",
                tenant_id=tenant.id,
                channel_id=target.channel_id,
                error=send_result.message,
                error_code=send_result.error_code,
            )
            return self._failed(routed_tenant, target, send_result.message)

        ts = (send_result.data or {}).get("ts")
        logger.info(
            "war_alert_sent",
            tenant_id=tenant.id,
            channel_id=target.channel_id,
            synthetic=target.synthetic,
            ts=ts,
        )

        thread_created = False
        if message.thread and self.create_threads and ts:
            thread_created = await self._open_thread(tenant.id, target, ts, message)

        return DeliveryResult(
            tenant_id=tenant.id,
            tenant_name=tenant.name,
            channel_id=target.channel_id,
            target=target,
            success=True,
            message="Message sent successfully",
            external_id=ts,
            thread_created=thread_created,
        )

    async def _open_thread(
        self, tenant_id: str, target: DeliveryTarget, ts: str, message: ChatMessage
    ) -> bool:
        """Open the discussion thread. A failure never fails the delivery."""
        try:
            result = await self.channel.create_thread(
                target.channel_id, ts, message.thread
            )
        except Exception as e:  # pylint: disable=broad-except
            logger.warning(
                "thread_creation_failed",
                tenant_id=tenant_id,
                channel_id=target.channel_id,
                error=str(e),
            )
            return False

        if not result.is_success:
            logger.warning(
                "thread_creation_failed",
                tenant_id=tenant_id,
                channel_id=target.channel_id,
                error=result.message,
            )
        return result.is_success

    @staticmethod
    def _failed(
        routed_tenant: "RoutedTenant", target: DeliveryTarget, message: str
    ) -> DeliveryResult:
        return DeliveryResult(
            tenant_id=routed_tenant.tenant.id,
            tenant_name=routed_tenant.tenant.name,
            channel_id=target.channel_id,
            target=target,
            success=False,
            message=message,
        )
