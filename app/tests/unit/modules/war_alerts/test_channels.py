"""Unit tests for ChannelResolver."""

import pytest

from infrastructure.notifications.models import STATUS_UPDATES, WAR_ALERTS
from infrastructure.operations import OperationResult
from modules.war_alerts.channels import NO_CHANNEL_REASON, ChannelResolver
from modules.war_alerts.directory import InMemoryChannelDirectory


@pytest.mark.unit
class TestChannelResolver:
    """Tests for ChannelResolver.resolve."""

    @pytest.mark.asyncio
    async def test_configured_targets_win(
        self, tenant_factory, target_factory, mock_chat_channel
    ):
        channels = InMemoryChannelDirectory(
            [target_factory(channel_id="C1"), target_factory(channel_id="C2")]
        )
        resolver = ChannelResolver(channels, mock_chat_channel)

        resolution = await resolver.resolve(tenant_factory())

        assert resolution.is_resolved
        assert [t.channel_id for t in resolution.targets] == ["C1", "C2"]
        mock_chat_channel.list_channels.assert_not_called()

    @pytest.mark.asyncio
    async def test_inactive_configured_target_falls_back(
        self, tenant_factory, target_factory, mock_chat_channel
    ):
        channels = InMemoryChannelDirectory(
            [target_factory(channel_id="C1", is_active=False)]
        )
        mock_chat_channel.list_channels.return_value = OperationResult.success(
            data=[{"id": "C9", "name": "war-updates"}]
        )
        resolver = ChannelResolver(channels, mock_chat_channel)

        resolution = await resolver.resolve(tenant_factory())

        assert [t.channel_id for t in resolution.targets] == ["C9"]

    @pytest.mark.asyncio
    async def test_fallback_picks_first_keyword_match(
        self, tenant_factory, mock_chat_channel
    ):
        mock_chat_channel.list_channels.return_value = OperationResult.success(
            data=[
                {"id": "C1", "name": "general"},
                {"id": "C2", "name": "Alliance-Announcements"},
                {"id": "C3", "name": "status"},
            ]
        )
        resolver = ChannelResolver(InMemoryChannelDirectory(), mock_chat_channel)

        resolution = await resolver.resolve(tenant_factory(workspace_id="W7"))

        assert len(resolution.targets) == 1
        target = resolution.targets[0]
        assert target.channel_id == "C2"
        assert target.synthetic is True
        assert target.category == WAR_ALERTS
        mock_chat_channel.list_channels.assert_awaited_once_with("W7")

    @pytest.mark.asyncio
    async def test_fallback_keeps_requested_category(
        self, tenant_factory, mock_chat_channel
    ):
        mock_chat_channel.list_channels.return_value = OperationResult.success(
            data=[{"id": "C3", "name": "status"}]
        )
        resolver = ChannelResolver(InMemoryChannelDirectory(), mock_chat_channel)

        resolution = await resolver.resolve(tenant_factory(), STATUS_UPDATES)

        assert resolution.targets[0].category == STATUS_UPDATES

    @pytest.mark.asyncio
    async def test_no_match_reports_reason(self, tenant_factory, mock_chat_channel):
        mock_chat_channel.list_channels.return_value = OperationResult.success(
            data=[{"id": "C1", "name": "general"}]
        )
        resolver = ChannelResolver(InMemoryChannelDirectory(), mock_chat_channel)

        resolution = await resolver.resolve(tenant_factory())

        assert not resolution.is_resolved
        assert resolution.failure_reason == NO_CHANNEL_REASON

    @pytest.mark.asyncio
    async def test_listing_failure_counts_as_not_found(
        self, tenant_factory, mock_chat_channel
    ):
        mock_chat_channel.list_channels.return_value = OperationResult.transient_error(
            "Connection error"
        )
        resolver = ChannelResolver(InMemoryChannelDirectory(), mock_chat_channel)

        resolution = await resolver.resolve(tenant_factory())

        assert resolution.failure_reason == NO_CHANNEL_REASON

    @pytest.mark.asyncio
    async def test_no_keywords_skips_discovery(self, tenant_factory, mock_chat_channel):
        resolver = ChannelResolver(
            InMemoryChannelDirectory(), mock_chat_channel, fallback_keywords=[]
        )

        resolution = await resolver.resolve(tenant_factory())

        assert resolution.failure_reason == NO_CHANNEL_REASON
        mock_chat_channel.list_channels.assert_not_called()
