"""Slack integration settings."""

from pydantic import Field

from infrastructure.configuration.base import IntegrationSettings


class SlackSettings(IntegrationSettings):
    """Slack API and bot configuration.

    Environment Variables:
        SLACK_TOKEN: Slack bot token (xoxb-*) used to post alerts
        SLACK_TIMEOUT_SECONDS: Per-call timeout for Slack Web API calls

    Example:
        ```python
        from infrastructure.services import get_settings

        settings = get_settings()

        slack_token = settings.slack.SLACK_TOKEN
        ```
    """

    SLACK_TOKEN: str = ""
    SLACK_TIMEOUT_SECONDS: int = Field(default=15, alias="SLACK_TIMEOUT_SECONDS")
