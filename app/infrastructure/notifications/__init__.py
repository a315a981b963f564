"""Chat notification delivery.

Provides tenant fan-out of rendered chat cards with:
- Platform-agnostic message and delivery models
- A category-keyed renderer registry
- A concurrent dispatcher isolating each delivery target
- A Slack implementation of the chat channel

Usage:
    from infrastructure.notifications import (
        NotificationDispatcher,
        SlackChatChannel,
        WAR_ALERTS,
        get_renderer,
    )

    dispatcher = NotificationDispatcher(channel=SlackChatChannel(provider))
    message = get_renderer(WAR_ALERTS)(event, routed_tenant)
    results = await dispatcher.dispatch(message, routed_tenant, targets)
"""

# Models
from infrastructure.notifications.models import (
    STATUS_UPDATES,
    WAR_ALERTS,
    ChatMessage,
    DeliveryResult,
    DeliveryTarget,
    MessageField,
    NotificationCategory,
    PublishReport,
    ThreadSeed,
)

# Renderer registry
from infrastructure.notifications.rendering import get_renderer, register_renderer

# Dispatcher
from infrastructure.notifications.dispatcher import NotificationDispatcher

# Channels
from infrastructure.notifications.channels.base import ChatChannel
from infrastructure.notifications.channels.chat import SlackChatChannel

__all__ = [
    # Models
    "ChatMessage",
    "DeliveryResult",
    "DeliveryTarget",
    "MessageField",
    "NotificationCategory",
    "PublishReport",
    "ThreadSeed",
    "WAR_ALERTS",
    "STATUS_UPDATES",
    # Rendering
    "get_renderer",
    "register_renderer",
    # Dispatcher
    "NotificationDispatcher",
    # Channels
    "ChatChannel",
    "SlackChatChannel",
]
