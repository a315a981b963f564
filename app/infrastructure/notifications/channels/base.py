"""Chat channel abstract base class.

All chat platform implementations must implement this interface.
"""

from abc import ABC, abstractmethod
from typing import Optional

from infrastructure.notifications.models import ChatMessage, ThreadSeed
from infrastructure.operations import OperationResult


class ChatChannel(ABC):
    """Abstract base class for chat channels.

    A chat channel posts rendered cards to channels of a chat platform,
    opens discussion threads under them and lists a workspace's channels
    for fallback discovery.

    Implementations must handle platform errors and report them as an
    OperationResult rather than raising.

    Example Implementation:
        class ConsoleChatChannel(ChatChannel):

            @property
            def channel_name(self) -> str:
                return "console"

            async def send_message(self, channel_id, message):
                print(channel_id, message.title)
                return OperationResult.success(
                    data={"ts": "0", "channel": channel_id}
                )
    """

    @property
    @abstractmethod
    def channel_name(self) -> str:
        """Platform identifier used in logs (e.g. "slack")."""
        pass

    @abstractmethod
    async def send_message(
        self, channel_id: str, message: ChatMessage
    ) -> OperationResult:
        """Post a rendered card to a channel.

        Args:
            channel_id: Platform channel identifier
            message: Rendered message

        Returns:
            OperationResult with ``{"ts", "channel"}`` in data on success
        """
        pass

    @abstractmethod
    async def create_thread(
        self, channel_id: str, parent_ts: str, seed: ThreadSeed
    ) -> OperationResult:
        """Open a discussion thread under a posted message.

        Args:
            channel_id: Channel holding the parent message
            parent_ts: Platform id of the parent message
            seed: Thread title and first message

        Returns:
            OperationResult with ``{"ts", "channel"}`` in data on success
        """
        pass

    @abstractmethod
    async def list_channels(self, workspace_id: Optional[str]) -> OperationResult:
        """List the channels of a workspace.

        Args:
            workspace_id: Workspace to list, None for the token's default

        Returns:
            OperationResult with a list of ``{"id", "name"}`` dicts in data
        """
        pass

    @abstractmethod
    async def health_check(self) -> OperationResult:
        """Check platform connectivity and credentials."""
        pass
