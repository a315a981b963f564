"""Shared fixtures for war alert relay tests."""

from datetime import datetime, timezone
from typing import Optional
from unittest.mock import AsyncMock, MagicMock

import pytest

from infrastructure.notifications.channels.base import ChatChannel
from infrastructure.notifications.models import (
    WAR_ALERTS,
    DeliveryTarget,
    NotificationCategory,
)
from infrastructure.operations import OperationResult
from modules.war_alerts.models import (
    ConflictEvent,
    Participant,
    ParticipantRole,
    RoutedTenant,
    Tenant,
)


@pytest.fixture
def participant_factory():
    """Factory for creating Participant instances.

    Example:
        attacker = participant_factory(actor_id="1", tenant_external_id="790")
    """

    def _factory(
        actor_id: str = "1",
        tenant_external_id: Optional[str] = None,
        name: str = "Test Nation",
        leader_name: str = "Test Leader",
        tenant_name: Optional[str] = None,
        tenant_acronym: Optional[str] = None,
    ) -> Participant:
        return Participant(
            actor_id=actor_id,
            tenant_external_id=tenant_external_id,
            name=name,
            leader_name=leader_name,
            tenant_name=tenant_name,
            tenant_acronym=tenant_acronym,
        )

    return _factory


@pytest.fixture
def event_factory(participant_factory):
    """Factory for creating ConflictEvent instances.

    Example:
        event = event_factory(id="105", side_a_alliance="790")
    """

    def _factory(
        id: str = "100",
        side_a_alliance: Optional[str] = None,
        side_b_alliance: Optional[str] = None,
        side_a_name: str = "Attacker Nation",
        side_b_name: str = "Defender Nation",
        category: str = "RAID",
        reason: str = "Testing",
        date: Optional[datetime] = None,
    ) -> ConflictEvent:
        return ConflictEvent(
            id=id,
            date=date or datetime(2025, 1, 1, 12, 0, tzinfo=timezone.utc),
            category=category,
            reason=reason,
            side_a=participant_factory(
                actor_id="11",
                tenant_external_id=side_a_alliance,
                name=side_a_name,
                leader_name="Attacker Leader",
            ),
            side_b=participant_factory(
                actor_id="22",
                tenant_external_id=side_b_alliance,
                name=side_b_name,
                leader_name="Defender Leader",
            ),
        )

    return _factory


@pytest.fixture
def tenant_factory():
    """Factory for creating Tenant instances."""

    def _factory(
        id: str = "t1",
        external_id: str = "790",
        name: str = "Rose",
        workspace_id: Optional[str] = "W1",
        is_active: bool = True,
    ) -> Tenant:
        return Tenant(
            id=id,
            external_id=external_id,
            name=name,
            workspace_id=workspace_id,
            is_active=is_active,
        )

    return _factory


@pytest.fixture
def target_factory():
    """Factory for creating DeliveryTarget instances."""

    def _factory(
        tenant_id: str = "t1",
        channel_id: str = "C1",
        category: NotificationCategory = WAR_ALERTS,
        is_active: bool = True,
        synthetic: bool = False,
    ) -> DeliveryTarget:
        return DeliveryTarget(
            tenant_id=tenant_id,
            category=category,
            channel_id=channel_id,
            is_active=is_active,
            synthetic=synthetic,
        )

    return _factory


@pytest.fixture
def routed_tenant_factory(tenant_factory):
    """Factory for creating RoutedTenant instances."""

    def _factory(
        role: Optional[ParticipantRole] = ParticipantRole.SIDE_A, **tenant_kwargs
    ) -> RoutedTenant:
        return RoutedTenant(tenant=tenant_factory(**tenant_kwargs), role=role)

    return _factory


@pytest.fixture
def mock_chat_channel():
    """Chat channel whose calls all succeed.

    send_message returns ts "1700000000.000100" echoing the channel id;
    list_channels returns no channels.
    """
    channel = MagicMock(spec=ChatChannel)
    channel.channel_name = "mock"

    async def _send(channel_id, message):
        return OperationResult.success(
            data={"ts": "1700000000.000100", "channel": channel_id}
        )

    channel.send_message = AsyncMock(side_effect=_send)
    channel.create_thread = AsyncMock(
        return_value=OperationResult.success(
            data={"ts": "1700000000.000200", "channel": "C1"}
        )
    )
    channel.list_channels = AsyncMock(return_value=OperationResult.success(data=[]))
    channel.health_check = AsyncMock(return_value=OperationResult.success())
    return channel


@pytest.fixture
def war_payload():
    """Raw war dict in the GraphQL shape."""

    def _factory(
        id: str = "105",
        att_alliance_id: str = "790",
        def_alliance_id: str = "0",
        **overrides,
    ) -> dict:
        payload = {
            "id": id,
            "date": "2025-01-01T12:00:00+00:00",
            "reason": "Raiding",
            "war_type": "RAID",
            "att_id": "11",
            "def_id": "22",
            "att_alliance_id": att_alliance_id,
            "def_alliance_id": def_alliance_id,
            "attacker": {
                "id": "11",
                "nation_name": "Attacker Nation",
                "leader_name": "Attacker Leader",
                "alliance": {"id": att_alliance_id, "name": "Rose", "acronym": "RS"},
            },
            "defender": {
                "id": "22",
                "nation_name": "Defender Nation",
                "leader_name": "Defender Leader",
                "alliance": None,
            },
        }
        payload.update(overrides)
        return payload

    return _factory
