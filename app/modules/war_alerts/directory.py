"""Tenant and channel directories.

Read-only lookups of tracked alliances (tenants) and the chat channels each
alliance configured per notification category. Directory records look like:

    tenants:  {"id", "external_id", "name", "workspace_id", "is_active"}
    channels: {"tenant_id", "module", "event_type", "channel_id",
               "is_active", "settings"}

The in-memory implementations back tests and the ``file`` directory
backend; DynamoDB implementations live in ``integrations.aws.directory``.
"""

import json
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, Iterable, List, Tuple

from infrastructure.logging import get_module_logger
from infrastructure.notifications.models import DeliveryTarget, NotificationCategory
from modules.war_alerts.models import Tenant

logger = get_module_logger()


def tenant_from_record(record: Dict[str, Any]) -> Tenant:
    """Build a Tenant from a directory record."""
    return Tenant(
        id=str(record["id"]),
        external_id=str(record.get("external_id") or ""),
        name=record.get("name") or str(record["id"]),
        workspace_id=record.get("workspace_id") or None,
        is_active=bool(record.get("is_active", True)),
    )


def target_from_record(record: Dict[str, Any]) -> DeliveryTarget:
    """Build a DeliveryTarget from a channel configuration record."""
    return DeliveryTarget(
        tenant_id=str(record["tenant_id"]),
        category=NotificationCategory(
            module=record["module"], event_type=record["event_type"]
        ),
        channel_id=str(record["channel_id"]),
        is_active=bool(record.get("is_active", True)),
        settings=record.get("settings") or {},
    )


def select_active_tenants(tenants: Iterable[Tenant]) -> List[Tenant]:
    """Active tenants that have an external id."""
    return [t for t in tenants if t.is_active and t.external_id]


def select_targets(
    targets: Iterable[DeliveryTarget],
    tenant_id: str,
    category: NotificationCategory,
    active_only: bool,
) -> List[DeliveryTarget]:
    """Targets of a tenant for a category."""
    return [
        t
        for t in targets
        if t.tenant_id == tenant_id
        and t.category == category
        and (t.is_active or not active_only)
    ]


class TenantDirectory(ABC):
    """Lookup of tracked alliances."""

    @abstractmethod
    async def list_active(self) -> List[Tenant]:
        """Active tenants with a non-empty external id."""
        pass

    async def find_by_external_ids(self, external_ids: Iterable[str]) -> List[Tenant]:
        """Active tenants whose external id is in ``external_ids``.

        Args:
            external_ids: Alliance ids to match

        Returns:
            Matching tenants in directory order
        """
        wanted = {str(i) for i in external_ids if i}
        if not wanted:
            return []
        return [t for t in await self.list_active() if t.external_id in wanted]


class ChannelDirectory(ABC):
    """Lookup of configured delivery targets."""

    @abstractmethod
    async def list_targets(
        self,
        tenant_id: str,
        category: NotificationCategory,
        active_only: bool = True,
    ) -> List[DeliveryTarget]:
        """Targets configured by a tenant for a category.

        Args:
            tenant_id: Tenant directory id
            category: Notification category
            active_only: Drop inactive targets

        Returns:
            Configured targets in directory order
        """
        pass


class InMemoryTenantDirectory(TenantDirectory):
    """Tenant directory held in memory."""

    def __init__(self, tenants: Iterable[Tenant] = ()):
        self._tenants = list(tenants)

    def add(self, tenant: Tenant) -> None:
        self._tenants.append(tenant)

    async def list_active(self) -> List[Tenant]:
        return select_active_tenants(self._tenants)


class InMemoryChannelDirectory(ChannelDirectory):
    """Channel directory held in memory."""

    def __init__(self, targets: Iterable[DeliveryTarget] = ()):
        self._targets = list(targets)

    def add(self, target: DeliveryTarget) -> None:
        self._targets.append(target)

    async def list_targets(
        self,
        tenant_id: str,
        category: NotificationCategory,
        active_only: bool = True,
    ) -> List[DeliveryTarget]:
        return select_targets(self._targets, tenant_id, category, active_only)


def load_directory_file(
    path: str,
) -> Tuple[InMemoryTenantDirectory, InMemoryChannelDirectory]:
    """Load tenant and channel directories from a JSON file.

    The file holds ``{"tenants": [...], "channels": [...]}`` with the record
    shapes described in the module docstring.

    Args:
        path: Path to the JSON file

    Returns:
        Tuple of (tenant directory, channel directory)

    Raises:
        FileNotFoundError: The file does not exist.
        ValueError: The file is not valid JSON or a record is incomplete.
    """
    try:
        data = json.loads(Path(path).read_text(encoding="utf-8"))
        tenants = [tenant_from_record(r) for r in data.get("tenants", [])]
        targets = [target_from_record(r) for r in data.get("channels", [])]
    except (json.JSONDecodeError, KeyError, TypeError, AttributeError) as e:
        raise ValueError(f"Invalid directory file {path}: {e}") from e

    logger.info(
        "directory_file_loaded",
        path=path,
        tenants=len(tenants),
        channels=len(targets),
    )
    return InMemoryTenantDirectory(tenants), InMemoryChannelDirectory(targets)
