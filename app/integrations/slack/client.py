from typing import Optional

from slack_sdk.web.async_client import AsyncWebClient

from infrastructure.services.providers import get_settings


class SlackClientManager:
    """Manages the Slack API client. Ensures a single instance is used throughout the application."""

    _client: Optional[AsyncWebClient] = None

    @classmethod
    def get_client(cls) -> AsyncWebClient:
        """Returns a singleton instance of the Slack AsyncWebClient.

        Created on first use so the service can start without a token; the
        per-call timeout comes from SLACK_TIMEOUT_SECONDS.
        """
        if cls._client is None:
            settings = get_settings()
            cls._client = AsyncWebClient(
                token=settings.slack.SLACK_TOKEN,
                timeout=settings.slack.SLACK_TIMEOUT_SECONDS,
            )
        return cls._client

    @classmethod
    def reset(cls) -> None:
        """Drop the cached client (used when the token changes and in tests)."""
        cls._client = None
