"""Server infrastructure settings."""

from typing import List, Optional

from pydantic import Field

from infrastructure.configuration.base import InfrastructureSettings


class ServerSettings(InfrastructureSettings):
    """HTTP server configuration.

    Environment Variables:
        BOT_API_SECRET: Shared bearer secret required by the publish
            endpoints. Empty disables the check (local development).
        CORS_ALLOW_ORIGINS: JSON list of allowed origins outside production

    Example:
        ```python
        from infrastructure.services import get_settings

        settings = get_settings()

        secret = settings.server.BOT_API_SECRET
        ```
    """

    BOT_API_SECRET: Optional[str] = Field(default=None, alias="BOT_API_SECRET")
    CORS_ALLOW_ORIGINS: List[str] = Field(
        default_factory=lambda: ["http://localhost:3000", "http://127.0.0.1:3000"],
        alias="CORS_ALLOW_ORIGINS",
    )
