"""Politics & War HTTP clients.

WarFeedClient queries the GraphQL API for the most recent wars (polling
adapter). SubscriptionClient performs the war creation subscribe handshake
that names the websocket channel to bind to (push adapter).

Usage:
    from integrations.pnw.client import WarFeedClient

    async with httpx.AsyncClient() as http:
        feed = WarFeedClient(http, api_key=settings.pnw.PNW_API_KEY)
        events = await feed.fetch_recent(10)  # newest first
"""

from typing import Any, Dict, Iterable, List

import httpx

from infrastructure.logging import get_module_logger
from infrastructure.operations import classify_http_error
from integrations.pnw.parsing import parse_war
from modules.war_alerts.exceptions import TransportError
from modules.war_alerts.models import ConflictEvent

logger = get_module_logger()

DEFAULT_GRAPHQL_URL = "https://api.politicsandwar.com/graphql"
DEFAULT_SUBSCRIBE_URL = (
    "https://api.politicsandwar.com/subscriptions/v1/subscribe/war/create"
)

NATION_FIELDS = """
        id
        nation_name
        leader_name
        alliance {
          id
          name
          acronym
        }"""

RECENT_WARS_QUERY = (
    """
query RecentWars($first: Int!) {
  wars(first: $first, orderBy: {column: DATE, order: DESC}) {
    data {
      id
      date
      reason
      war_type
      att_id
      def_id
      att_alliance_id
      def_alliance_id
      attacker {"""
    + NATION_FIELDS
    + """
      }
      defender {"""
    + NATION_FIELDS
    + """
      }
    }
  }
}
"""
)


def _raise_transport_error(exc: Exception, operation: str) -> None:
    result = classify_http_error(exc)
    status_code = None
    if isinstance(exc, httpx.HTTPStatusError):
        status_code = exc.response.status_code
    logger.warning(
        "pnw_request_failed",
        operation=operation,
        error=result.message,
        error_code=result.error_code,
        status_code=status_code,
    )
    raise TransportError(result.message, status_code=status_code) from exc


class WarFeedClient:
    """GraphQL client returning the most recent wars, newest first.

    Attributes:
        api_key: P&W API key sent as the ``api_key`` query parameter
        url: GraphQL endpoint
    """

    def __init__(
        self,
        http: httpx.AsyncClient,
        api_key: str,
        url: str = DEFAULT_GRAPHQL_URL,
    ):
        self._http = http
        self.api_key = api_key
        self.url = url

    async def fetch_recent(self, limit: int) -> List[ConflictEvent]:
        """Fetch the most recent wars.

        Args:
            limit: Number of wars to request

        Returns:
            Parsed events ordered newest first

        Raises:
            TransportError: Network failure, non-2xx, invalid JSON or a
                GraphQL ``errors`` array.
            ParseError: A war node has no id.
        """
        try:
            response = await self._http.post(
                self.url,
                params={"api_key": self.api_key},
                json={"query": RECENT_WARS_QUERY, "variables": {"first": limit}},
            )
            response.raise_for_status()
        except httpx.HTTPError as e:
            _raise_transport_error(e, "fetch_recent")

        try:
            body = response.json()
        except ValueError as e:
            raise TransportError(f"Invalid JSON from GraphQL API: {e}") from e

        if not isinstance(body, dict):
            raise TransportError("Unexpected GraphQL response shape")

        errors = body.get("errors")
        if errors:
            messages = "; ".join(
                str(err.get("message", err)) if isinstance(err, dict) else str(err)
                for err in errors
            )
            raise TransportError(f"GraphQL errors: {messages}")

        wars = ((body.get("data") or {}).get("wars") or {}).get("data")
        if not isinstance(wars, list):
            raise TransportError("GraphQL response is missing wars.data")

        events = [parse_war(war) for war in wars]
        logger.debug("pnw_wars_fetched", requested=limit, received=len(events))
        return events


class SubscriptionClient:
    """War creation subscribe handshake.

    The handshake registers interest in wars involving the given alliances
    and answers with the private channel to subscribe to on the websocket.
    """

    def __init__(
        self,
        http: httpx.AsyncClient,
        api_key: str,
        url: str = DEFAULT_SUBSCRIBE_URL,
    ):
        self._http = http
        self.api_key = api_key
        self.url = url

    async def subscribe(self, tenant_external_ids: Iterable[str]) -> str:
        """Subscribe to war creation events.

        Args:
            tenant_external_ids: Alliance ids to filter on; attackers and
                defenders in any of them match. Empty subscribes to all wars.

        Returns:
            Channel name to bind to

        Raises:
            TransportError: Handshake failed or answered without a channel.
        """
        params: Dict[str, Any] = {"api_key": self.api_key}
        ids = ",".join(str(i) for i in tenant_external_ids if i)
        if ids:
            params["att_alliance_id"] = ids
            params["def_alliance_id"] = ids

        try:
            response = await self._http.get(self.url, params=params)
            response.raise_for_status()
        except httpx.HTTPError as e:
            _raise_transport_error(e, "subscribe")

        try:
            body = response.json()
        except ValueError as e:
            raise TransportError(f"Invalid JSON from subscribe endpoint: {e}") from e

        channel = body.get("channel") if isinstance(body, dict) else None
        if not channel:
            raise TransportError("Subscribe response did not include a channel")

        logger.info("pnw_subscription_created", channel=channel, alliances=ids or "all")
        return channel
