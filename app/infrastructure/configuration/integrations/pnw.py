"""Politics & War API integration settings."""

from pydantic import Field

from infrastructure.configuration.base import IntegrationSettings


class PnwSettings(IntegrationSettings):
    """Politics & War feed configuration.

    The GraphQL endpoint serves the polling adapter; the subscription
    endpoints and the websocket host serve the push adapter.

    Environment Variables:
        PNW_API_KEY: Long-lived API key (query parameter and bearer token)
        PNW_GRAPHQL_URL: GraphQL endpoint
        PNW_SUBSCRIBE_URL: War creation subscribe handshake endpoint
        PNW_AUTH_URL: Channel authorization endpoint for the websocket
        PNW_SOCKET_HOST: Websocket host
        PNW_PUSHER_APP_KEY: Pusher application key of the websocket
        PNW_TIMEOUT_SECONDS: Per-request timeout (default: 15)

    Example:
        ```python
        from infrastructure.services import get_settings

        settings = get_settings()

        api_key = settings.pnw.PNW_API_KEY
        ```
    """

    PNW_API_KEY: str = Field(default="", alias="PNW_API_KEY")
    PNW_GRAPHQL_URL: str = Field(
        default="https://api.politicsandwar.com/graphql", alias="PNW_GRAPHQL_URL"
    )
    PNW_SUBSCRIBE_URL: str = Field(
        default="https://api.politicsandwar.com/subscriptions/v1/subscribe/war/create",
        alias="PNW_SUBSCRIBE_URL",
    )
    PNW_AUTH_URL: str = Field(
        default="https://api.politicsandwar.com/subscriptions/v1/auth",
        alias="PNW_AUTH_URL",
    )
    PNW_SOCKET_HOST: str = Field(
        default="socket.politicsandwar.com", alias="PNW_SOCKET_HOST"
    )
    PNW_PUSHER_APP_KEY: str = Field(
        default="a22734a47847a64386c8", alias="PNW_PUSHER_APP_KEY"
    )
    PNW_TIMEOUT_SECONDS: int = Field(default=15, alias="PNW_TIMEOUT_SECONDS")
