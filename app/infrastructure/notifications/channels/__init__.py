"""Chat channel implementations."""

from infrastructure.notifications.channels.base import ChatChannel
from infrastructure.notifications.channels.chat import SlackChatChannel

__all__ = [
    "ChatChannel",
    "SlackChatChannel",
]
