"""Application context.

Builds the long-lived collaborators of the service once, at startup, and
hands them out explicitly. The FastAPI lifespan owns the context and stores
it on ``app.state.context``.

Usage:
    context = build_context(get_settings())
    await context.start_adapters()
    ...
    await context.aclose()
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

import httpx

from infrastructure.configuration import Settings
from infrastructure.logging import get_module_logger
from infrastructure.notifications.channels.base import ChatChannel
from infrastructure.notifications.channels.chat import SlackChatChannel
from infrastructure.notifications.dispatcher import NotificationDispatcher
from integrations.pnw.client import SubscriptionClient, WarFeedClient
from integrations.pnw.pusher import PusherTransport
from integrations.slack.client import SlackClientManager
from modules.war_alerts.adapters import (
    EventSourceAdapter,
    PollingAdapter,
    PushAdapter,
)
from modules.war_alerts.channels import ChannelResolver
from modules.war_alerts.directory import (
    ChannelDirectory,
    TenantDirectory,
    load_directory_file,
)
from modules.war_alerts.monitoring import StatusMonitor
from modules.war_alerts.pipeline import WarAlertPipeline
from modules.war_alerts.routing import TenantRouter
from modules.war_alerts.watermark import WatermarkStore

logger = get_module_logger()


@dataclass
class AppContext:
    """Collaborators shared by the adapters and the HTTP routes."""

    settings: Settings
    chat: ChatChannel
    tenants: TenantDirectory
    channels: ChannelDirectory
    watermarks: WatermarkStore
    dispatcher: NotificationDispatcher
    pipeline: WarAlertPipeline
    adapters: List[EventSourceAdapter] = field(default_factory=list)
    http: Optional[httpx.AsyncClient] = None
    monitor: Optional[StatusMonitor] = None

    async def start_adapters(self) -> None:
        """Start every adapter, then the status monitor.

        One adapter failing to start does not stop the others.
        """
        for adapter in self.adapters:
            try:
                await adapter.start(self.pipeline.handle_event)
            except Exception as e:  # pylint: disable=broad-except
                logger.error(
                    "adapter_start_failed", adapter=adapter.name, error=str(e)
                )
        if self.monitor is not None:
            self.monitor.start()

    async def stop_adapters(self) -> None:
        if self.monitor is not None:
            await self.monitor.stop()
        for adapter in self.adapters:
            try:
                await adapter.stop()
            except Exception as e:  # pylint: disable=broad-except
                logger.error("adapter_stop_failed", adapter=adapter.name, error=str(e))

    def adapter_statuses(self) -> List[Dict[str, Any]]:
        return [adapter.status() for adapter in self.adapters]

    async def aclose(self) -> None:
        """Stop adapters and release the HTTP client."""
        await self.stop_adapters()
        if self.http is not None:
            await self.http.aclose()


def build_directories(settings: Settings) -> Tuple[TenantDirectory, ChannelDirectory]:
    """Create the tenant and channel directories for the configured backend."""
    war_alerts = settings.war_alerts
    if war_alerts.directory_backend == "file":
        if not war_alerts.directory_file:
            raise ValueError(
                "WAR_ALERTS_DIRECTORY_FILE is required with the 'file' directory backend"
            )
        return load_directory_file(war_alerts.directory_file)

    from integrations.aws.directory import (
        DynamoDBChannelDirectory,
        DynamoDBTenantDirectory,
        get_dynamodb_resource,
    )

    resource = get_dynamodb_resource(settings.aws)
    return (
        DynamoDBTenantDirectory(resource, war_alerts.tenants_table),
        DynamoDBChannelDirectory(resource, war_alerts.channel_configs_table),
    )


def build_adapters(
    settings: Settings,
    http: httpx.AsyncClient,
    watermarks: WatermarkStore,
    tenants: TenantDirectory,
) -> List[EventSourceAdapter]:
    """Create the adapters selected by WAR_ALERTS_SOURCE."""
    war_alerts = settings.war_alerts
    pnw = settings.pnw
    adapters: List[EventSourceAdapter] = []

    if war_alerts.source in ("polling", "both"):
        adapters.append(
            PollingAdapter(
                feed=WarFeedClient(http, api_key=pnw.PNW_API_KEY, url=pnw.PNW_GRAPHQL_URL),
                watermarks=watermarks,
                interval=war_alerts.poll_interval_seconds,
                batch_size=war_alerts.poll_batch_size,
                allow_overlap=war_alerts.allow_tick_overlap,
            )
        )

    if war_alerts.source in ("push", "both"):
        adapters.append(
            PushAdapter(
                subscriptions=SubscriptionClient(
                    http, api_key=pnw.PNW_API_KEY, url=pnw.PNW_SUBSCRIBE_URL
                ),
                transport_factory=lambda: PusherTransport(
                    app_key=pnw.PNW_PUSHER_APP_KEY,
                    host=pnw.PNW_SOCKET_HOST,
                    auth_url=pnw.PNW_AUTH_URL,
                    api_key=pnw.PNW_API_KEY,
                    timeout_seconds=pnw.PNW_TIMEOUT_SECONDS,
                ),
                tenants=tenants,
                reconnect_base_delay=war_alerts.reconnect_base_delay_seconds,
                reconnect_max_attempts=war_alerts.reconnect_max_attempts,
            )
        )

    return adapters


def build_context(
    settings: Settings,
    chat: Optional[ChatChannel] = None,
    tenants: Optional[TenantDirectory] = None,
    channels: Optional[ChannelDirectory] = None,
    with_adapters: bool = True,
) -> AppContext:
    """Build the application context.

    Args:
        settings: Application settings
        chat: Chat channel override (defaults to Slack)
        tenants: Tenant directory override
        channels: Channel directory override
        with_adapters: Create the event source adapters

    Returns:
        AppContext ready for start_adapters()
    """
    if chat is None:
        chat = SlackChatChannel(SlackClientManager.get_client)
    if tenants is None or channels is None:
        default_tenants, default_channels = build_directories(settings)
        tenants = tenants or default_tenants
        channels = channels or default_channels

    watermarks = WatermarkStore()
    dispatcher = NotificationDispatcher(
        channel=chat, create_threads=settings.war_alerts.create_threads
    )
    pipeline = WarAlertPipeline(
        router=TenantRouter(tenants),
        resolver=ChannelResolver(
            channels, chat, fallback_keywords=settings.war_alerts.fallback_keywords
        ),
        dispatcher=dispatcher,
        tenants=tenants,
    )

    http: Optional[httpx.AsyncClient] = None
    adapters: List[EventSourceAdapter] = []
    if with_adapters:
        http = httpx.AsyncClient(
            timeout=settings.pnw.PNW_TIMEOUT_SECONDS,
            headers={"Accept": "application/json"},
        )
        adapters = build_adapters(settings, http, watermarks, tenants)

    monitor: Optional[StatusMonitor] = None
    if with_adapters and settings.war_alerts.status_monitor_enabled:
        monitor = StatusMonitor(
            pipeline=pipeline,
            tenants=tenants,
            chat=chat,
            adapter_statuses=lambda: [a.status() for a in adapters],
            interval=settings.war_alerts.status_interval_seconds,
            initial_delay=settings.war_alerts.status_initial_delay_seconds,
        )

    logger.info(
        "app_context_built",
        source=settings.war_alerts.source,
        adapters=[a.name for a in adapters],
        directory_backend=settings.war_alerts.directory_backend,
        status_monitor=monitor is not None,
    )
    return AppContext(
        settings=settings,
        chat=chat,
        tenants=tenants,
        channels=channels,
        watermarks=watermarks,
        dispatcher=dispatcher,
        pipeline=pipeline,
        adapters=adapters,
        http=http,
        monitor=monitor,
    )
