"""Chat channel implementation using Slack."""

from typing import Any, Callable, Dict, List, Optional

from slack_sdk.web.async_client import AsyncWebClient

import structlog
from infrastructure.notifications.channels.base import ChatChannel
from infrastructure.notifications.models import ChatMessage, ThreadSeed
from infrastructure.operations import OperationResult, classify_slack_error
from modules.war_alerts.exceptions import DeliveryError

logger = structlog.get_logger()

CONVERSATIONS_PAGE_SIZE = 200


def to_mrkdwn(text: str) -> str:
    """Convert double-asterisk bold to Slack mrkdwn bold."""
    return text.replace("**", "*")


def build_attachment(message: ChatMessage) -> Dict[str, Any]:
    """Render a ChatMessage as a colored Slack attachment."""
    attachment: Dict[str, Any] = {
        "color": message.color_hex,
        "title": message.title,
        "fields": [
            {
                "title": field.name,
                "value": to_mrkdwn(field.value),
                "short": field.inline,
            }
            for field in message.fields
        ],
        "mrkdwn_in": ["text", "fields"],
    }
    if message.description:
        attachment["text"] = to_mrkdwn(message.description)
    if message.footer:
        attachment["footer"] = message.footer
    if message.timestamp:
        attachment["ts"] = int(message.timestamp.timestamp())
    return attachment


class SlackChatChannel(ChatChannel):
    """Slack chat channel.

    Posts colored cards as message attachments, opens discussion threads
    as ``thread_ts`` replies and lists channels with
    ``conversations.list`` for fallback discovery.

    The Web API client is obtained from ``client_provider`` at call time
    so the token is only needed once the first message is sent.
    """

    def __init__(self, client_provider: Callable[[], AsyncWebClient]):
        """Initialize Slack chat channel.

        Args:
            client_provider: Callable returning the shared AsyncWebClient
        """
        self._client_provider = client_provider
        logger.info("initialized_chat_channel", backend="slack")

    @property
    def channel_name(self) -> str:
        """Channel identifier."""
        return "slack"

    async def send_message(
        self, channel_id: str, message: ChatMessage
    ) -> OperationResult:
        """Post a rendered card to a Slack channel.

        Args:
            channel_id: Slack channel ID
            message: Rendered message

        Returns:
            OperationResult with ts and channel in data field.
        """
        text = to_mrkdwn(message.content) if message.content else message.title
        try:
            data = await self._post(
                channel=channel_id,
                text=text,
                attachments=[build_attachment(message)],
            )
        except DeliveryError as e:
            logger.error(
                "slack_message_rejected",
                channel_id=channel_id,
                error=str(e),
                error_code=e.error_code,
            )
            return OperationResult.permanent_error(
                message=str(e), error_code=e.error_code
            )
        except Exception as e:  # pylint: disable=broad-except
            result = classify_slack_error(e)
            logger.error(
                "slack_message_failed",
                channel_id=channel_id,
                error=result.message,
                error_code=result.error_code,
            )
            return result

        return OperationResult.success(data=data, message="Sent Slack message")

    async def create_thread(
        self, channel_id: str, parent_ts: str, seed: ThreadSeed
    ) -> OperationResult:
        """Reply under the parent message to open a thread.

        Args:
            channel_id: Slack channel ID
            parent_ts: ts of the parent message
            seed: Thread title and first message

        Returns:
            OperationResult with ts and channel in data field.
        """
        try:
            data = await self._post(
                channel=channel_id,
                text=f"*{seed.name}*\n{to_mrkdwn(seed.text)}",
                thread_ts=parent_ts,
            )
        except DeliveryError as e:
            return OperationResult.permanent_error(
                message=str(e), error_code=e.error_code
            )
        except Exception as e:  # pylint: disable=broad-except
            return classify_slack_error(e)

        return OperationResult.success(data=data, message="Created Slack thread")

    async def list_channels(self, workspace_id: Optional[str]) -> OperationResult:
        """List public, unarchived channels of a workspace.

        Args:
            workspace_id: Slack team ID, None for the token's own workspace

        Returns:
            OperationResult with a list of {"id", "name"} dicts in data.
        """
        channels: List[Dict[str, str]] = []
        kwargs: Dict[str, Any] = {
            "types": "public_channel",
            "exclude_archived": True,
            "limit": CONVERSATIONS_PAGE_SIZE,
        }
        if workspace_id:
            kwargs["team_id"] = workspace_id

        try:
            client = self._client_provider()
            cursor = None
            while True:
                if cursor:
                    kwargs["cursor"] = cursor
                response = await client.conversations_list(**kwargs)
                for channel in response.get("channels", []):
                    channels.append({"id": channel["id"], "name": channel["name"]})
                cursor = response.get("response_metadata", {}).get("next_cursor")
                if not cursor:
                    break
        except Exception as e:  # pylint: disable=broad-except
            result = classify_slack_error(e)
            logger.warning(
                "slack_channel_listing_failed",
                workspace_id=workspace_id,
                error=result.message,
            )
            return result

        return OperationResult.success(
            data=channels, message=f"Listed {len(channels)} channels"
        )

    async def health_check(self) -> OperationResult:
        """Check Slack API connectivity.

        Returns:
            OperationResult indicating channel health.
        """
        try:
            client = self._client_provider()
            auth_test = await client.auth_test()
            if auth_test.get("ok"):
                return OperationResult.success(
                    message="Slack API healthy",
                    data={"team_id": auth_test.get("team_id")},
                )
            return OperationResult.transient_error(
                message="Slack API health check failed",
                error_code="HEALTH_CHECK_FAILED",
            )
        except Exception as e:  # pylint: disable=broad-except
            return classify_slack_error(e)

    async def _post(self, **kwargs: Any) -> Dict[str, str]:
        """Call chat.postMessage and return the posted message reference.

        Raises:
            DeliveryError: When Slack answers without ``ok`` or ``ts``.
        """
        client = self._client_provider()
        response = await client.chat_postMessage(**kwargs)
        if not response.get("ok"):
            error = response.get("error", "unknown_error")
            raise DeliveryError(f"Slack rejected message: {error}", error_code=error)
        ts = response.get("ts")
        if not ts:
            raise DeliveryError("Slack response is missing ts", error_code="MISSING_TS")
        return {"ts": ts, "channel": response.get("channel", kwargs["channel"])}
