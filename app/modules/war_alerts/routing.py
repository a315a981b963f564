"""Tenant routing.

Decides which tracked alliances take part in a conflict event, and on
which side.
"""

from typing import List, Set

from infrastructure.logging import get_module_logger
from modules.war_alerts.directory import TenantDirectory
from modules.war_alerts.models import ConflictEvent, ParticipantRole, RoutedTenant

logger = get_module_logger()


class TenantRouter:
    """Maps events to interested tenants."""

    def __init__(self, tenants: TenantDirectory):
        self.tenants = tenants

    async def route(self, event: ConflictEvent) -> List[RoutedTenant]:
        """Resolve the tenants involved in an event.

        Side A is examined before side B and each tenant is kept once, with
        the first role found. An alliance at war with itself is therefore
        routed once, as the attacker.

        Args:
            event: Conflict event

        Returns:
            Routed tenants, empty when no tracked alliance is involved
        """
        routed: List[RoutedTenant] = []
        seen: Set[str] = set()

        for role in (ParticipantRole.SIDE_A, ParticipantRole.SIDE_B):
            external_id = event.participant(role).tenant_external_id
            if not external_id or external_id == "0":
                continue
            for tenant in await self.tenants.find_by_external_ids([external_id]):
                if tenant.id in seen:
                    continue
                seen.add(tenant.id)
                routed.append(RoutedTenant(tenant=tenant, role=role))

        if not routed:
            logger.debug(
                "war_not_routed",
                event_id=event.id,
                side_a_alliance=event.side_a.tenant_external_id,
                side_b_alliance=event.side_b.tenant_external_id,
            )
        else:
            logger.info(
                "war_routed",
                event_id=event.id,
                tenants=[r.tenant.id for r in routed],
            )
        return routed
