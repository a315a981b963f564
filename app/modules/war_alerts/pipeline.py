"""War alert pipeline.

Route, resolve, render, dispatch:

    event -> TenantRouter -> [RoutedTenant]
          -> ChannelResolver (per tenant) -> [DeliveryTarget]
          -> renderer (per category) -> ChatMessage
          -> NotificationDispatcher -> [DeliveryResult]

Tenants are processed one after the other; the targets of one tenant are
delivered concurrently. A failure while processing one tenant becomes a
failed DeliveryResult for that tenant and never affects the others.
"""

from typing import Any, Iterable, List, Optional

from infrastructure.logging import bind_event_context, get_module_logger
from infrastructure.notifications.dispatcher import NotificationDispatcher
from infrastructure.notifications.models import (
    STATUS_UPDATES,
    WAR_ALERTS,
    DeliveryResult,
    NotificationCategory,
    PublishReport,
)
from infrastructure.notifications.rendering import get_renderer
from modules.war_alerts import renderers  # noqa: F401  registers renderers
from modules.war_alerts.channels import ChannelResolver
from modules.war_alerts.directory import TenantDirectory
from modules.war_alerts.models import ConflictEvent, RoutedTenant
from modules.war_alerts.routing import TenantRouter
from modules.war_alerts.status import StatusReport, SystemStatus

logger = get_module_logger()


class WarAlertPipeline:
    """Fan-out of conflict events and status reports to tenant channels."""

    def __init__(
        self,
        router: TenantRouter,
        resolver: ChannelResolver,
        dispatcher: NotificationDispatcher,
        tenants: TenantDirectory,
    ):
        self.router = router
        self.resolver = resolver
        self.dispatcher = dispatcher
        self.tenants = tenants

    async def handle_event(self, event: ConflictEvent) -> List[DeliveryResult]:
        """Deliver a war alert to every tenant involved in the event.

        Args:
            event: Conflict event

        Returns:
            Delivery results of all tenants, empty when nobody is interested
        """
        try:
            routed = await self.router.route(event)
        except Exception as e:  # pylint: disable=broad-except
            logger.error("war_routing_failed", event_id=event.id, error=str(e))
            return []

        results: List[DeliveryResult] = []
        for routed_tenant in routed:
            results.extend(await self._deliver(event, routed_tenant, WAR_ALERTS))

        if routed:
            logger.info(
                "war_alert_processed",
                event_id=event.id,
                tenants=len(routed),
                delivered=sum(1 for r in results if r.success),
                total=len(results),
            )
        return results

    async def handle_batch(
        self, events: Iterable[ConflictEvent], source: str = "api"
    ) -> PublishReport:
        """Deliver several events and aggregate the outcome."""
        results: List[DeliveryResult] = []
        for event in events:
            with bind_event_context(event_id=event.id, source=source):
                results.extend(await self.handle_event(event))
        return PublishReport.from_results(results)

    async def publish_status(
        self,
        tenant_external_id: str,
        system_status: SystemStatus,
        requested_by: Optional[str] = None,
    ) -> Optional[PublishReport]:
        """Publish a status report to every tenant of an alliance.

        Args:
            tenant_external_id: Alliance id
            system_status: Reported component health
            requested_by: Who asked for the report, shown in the footer

        Returns:
            The publish report, or None when no active tenant matches
        """
        tenants = await self.tenants.find_by_external_ids([tenant_external_id])
        if not tenants:
            logger.warning(
                "status_publish_no_tenant", tenant_external_id=tenant_external_id
            )
            return None

        report = StatusReport(system_status=system_status, requested_by=requested_by)
        results: List[DeliveryResult] = []
        for tenant in tenants:
            results.extend(
                await self._deliver(report, RoutedTenant(tenant=tenant), STATUS_UPDATES)
            )

        publish_report = PublishReport.from_results(results)
        logger.info(
            "status_report_published",
            tenant_external_id=tenant_external_id,
            requested_by=requested_by,
            published=publish_report.published_count,
            total=publish_report.total_count,
        )
        return publish_report

    async def _deliver(
        self,
        payload: Any,
        routed_tenant: RoutedTenant,
        category: NotificationCategory,
    ) -> List[DeliveryResult]:
        tenant = routed_tenant.tenant
        try:
            resolution = await self.resolver.resolve(tenant, category)
            if not resolution.targets:
                return [
                    DeliveryResult(
                        tenant_id=tenant.id,
                        tenant_name=tenant.name,
                        success=False,
                        message=resolution.failure_reason or "No delivery target",
                    )
                ]

            message = get_renderer(category)(payload, routed_tenant)
            return await self.dispatcher.dispatch(
                message, routed_tenant, resolution.targets
            )
        except Exception as e:  # pylint: disable=broad-except
            logger.error(
                "tenant_delivery_failed",
                tenant_id=tenant.id,
                category=str(category),
                error=str(e),
                exc_info=True,
            )
            return [
                DeliveryResult(
                    tenant_id=tenant.id,
                    tenant_name=tenant.name,
                    success=False,
                    message=f"Processing error: {e}",
                )
            ]
