"""Channel resolution with keyword fallback discovery.

Resolution order for a tenant and category:
1. Active channels configured in the channel directory
2. The first workspace channel whose name contains a fallback keyword
3. Nothing, with a failure reason
"""

from typing import List, Optional, Sequence

from pydantic import BaseModel, Field

from infrastructure.logging import get_module_logger
from infrastructure.notifications.channels.base import ChatChannel
from infrastructure.notifications.models import (
    WAR_ALERTS,
    DeliveryTarget,
    NotificationCategory,
)
from modules.war_alerts.directory import ChannelDirectory
from modules.war_alerts.models import Tenant

logger = get_module_logger()

DEFAULT_FALLBACK_KEYWORDS = ("status", "announcements", "updates")
NO_CHANNEL_REASON = "No channel configured or found"


class ChannelResolution(BaseModel):
    """Targets resolved for a tenant, or why there are none."""

    targets: List[DeliveryTarget] = Field(default_factory=list)
    failure_reason: Optional[str] = None

    @property
    def is_resolved(self) -> bool:
        return bool(self.targets)


class ChannelResolver:
    """Resolves delivery targets for a tenant.

    Args:
        channels: Configured channel directory
        chat: Chat channel used to list workspace channels
        fallback_keywords: Substrings looked for, in order, in channel names
    """

    def __init__(
        self,
        channels: ChannelDirectory,
        chat: ChatChannel,
        fallback_keywords: Sequence[str] = DEFAULT_FALLBACK_KEYWORDS,
    ):
        self.channels = channels
        self.chat = chat
        self.fallback_keywords = [k.lower() for k in fallback_keywords if k]

    async def resolve(
        self, tenant: Tenant, category: NotificationCategory = WAR_ALERTS
    ) -> ChannelResolution:
        """Resolve the delivery targets of a tenant for a category."""
        configured = await self.channels.list_targets(
            tenant.id, category, active_only=True
        )
        if configured:
            return ChannelResolution(targets=configured)

        fallback = await self._discover(tenant, category)
        if fallback is not None:
            return ChannelResolution(targets=[fallback])

        logger.warning(
            "channel_resolution_failed",
            tenant_id=tenant.id,
            category=str(category),
            reason=NO_CHANNEL_REASON,
        )
        return ChannelResolution(failure_reason=NO_CHANNEL_REASON)

    async def _discover(
        self, tenant: Tenant, category: NotificationCategory
    ) -> Optional[DeliveryTarget]:
        if not self.fallback_keywords:
            return None

        listing = await self.chat.list_channels(tenant.workspace_id)
        if not listing.is_success:
            logger.warning(
                "fallback_channel_listing_failed",
                tenant_id=tenant.id,
                workspace_id=tenant.workspace_id,
                error=listing.message,
            )
            return None

        for channel in listing.data or []:
            name = (channel.get("name") or "").lower()
            if any(keyword in name for keyword in self.fallback_keywords):
                logger.info(
                    "fallback_channel_found",
                    tenant_id=tenant.id,
                    channel_id=channel["id"],
                    channel_name=channel.get("name"),
                )
                return DeliveryTarget(
                    tenant_id=tenant.id,
                    category=category,
                    channel_id=channel["id"],
                    synthetic=True,
                )
        return None
