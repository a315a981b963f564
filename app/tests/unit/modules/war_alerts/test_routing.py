"""Unit tests for TenantRouter."""

from unittest.mock import AsyncMock

import pytest

from modules.war_alerts.directory import InMemoryTenantDirectory
from modules.war_alerts.models import ParticipantRole
from modules.war_alerts.routing import TenantRouter


@pytest.fixture
def router(tenant_factory):
    return TenantRouter(
        InMemoryTenantDirectory(
            [
                tenant_factory(id="t1", external_id="790", name="Rose"),
                tenant_factory(id="t2", external_id="800", name="Eclipse"),
            ]
        )
    )


@pytest.mark.unit
class TestTenantRouter:
    """Tests for TenantRouter.route."""

    @pytest.mark.asyncio
    async def test_attacker_alliance_routed_as_side_a(self, router, event_factory):
        routed = await router.route(event_factory(side_a_alliance="790"))

        assert len(routed) == 1
        assert routed[0].tenant.id == "t1"
        assert routed[0].role == ParticipantRole.SIDE_A

    @pytest.mark.asyncio
    async def test_defender_alliance_routed_as_side_b(self, router, event_factory):
        routed = await router.route(event_factory(side_b_alliance="800"))

        assert [(r.tenant.id, r.role) for r in routed] == [
            ("t2", ParticipantRole.SIDE_B)
        ]

    @pytest.mark.asyncio
    async def test_both_sides_tracked(self, router, event_factory):
        routed = await router.route(
            event_factory(side_a_alliance="790", side_b_alliance="800")
        )

        assert [(r.tenant.id, r.role) for r in routed] == [
            ("t1", ParticipantRole.SIDE_A),
            ("t2", ParticipantRole.SIDE_B),
        ]

    @pytest.mark.asyncio
    async def test_same_alliance_on_both_sides_routed_once(
        self, router, event_factory
    ):
        routed = await router.route(
            event_factory(side_a_alliance="790", side_b_alliance="790")
        )

        assert len(routed) == 1
        assert routed[0].role == ParticipantRole.SIDE_A

    @pytest.mark.asyncio
    async def test_untracked_alliances_not_routed(self, router, event_factory):
        routed = await router.route(
            event_factory(side_a_alliance="1", side_b_alliance="2")
        )

        assert routed == []

    @pytest.mark.asyncio
    async def test_zero_and_missing_alliance_skipped(self, event_factory):
        tenants = AsyncMock()
        tenants.find_by_external_ids = AsyncMock(return_value=[])
        router = TenantRouter(tenants)

        routed = await router.route(event_factory(side_a_alliance="0"))

        assert routed == []
        tenants.find_by_external_ids.assert_not_called()
