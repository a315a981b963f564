"""War payload parsing.

Turns raw war dicts (GraphQL nodes or websocket subscription payloads) into
ConflictEvent models. Only the war id is required; every other field is
recovered with a default.
"""

from datetime import datetime
from typing import Any, Dict, Optional

from modules.war_alerts.exceptions import ParseError
from modules.war_alerts.models import (
    NO_REASON,
    UNKNOWN_LEADER,
    UNKNOWN_NATION,
    UNKNOWN_WAR_TYPE,
    ConflictEvent,
    Participant,
)


def normalize_alliance_id(value: Any) -> Optional[str]:
    """Alliance id as a string, None for missing, empty or "0"."""
    if value is None:
        return None
    value = str(value).strip()
    if not value or value == "0":
        return None
    return value


def parse_date(value: Any) -> Optional[datetime]:
    """Parse an ISO 8601 date, None when missing or invalid."""
    if not value or not isinstance(value, str):
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None


def _participant(
    war: Dict[str, Any], nation_key: str, id_key: str, alliance_key: str
) -> Participant:
    nation = war.get(nation_key)
    if not isinstance(nation, dict):
        nation = {}
    alliance = nation.get("alliance")
    if not isinstance(alliance, dict):
        alliance = {}

    alliance_id = normalize_alliance_id(
        war.get(alliance_key) or alliance.get("id") or nation.get("alliance_id")
    )
    actor_id = war.get(id_key) or nation.get("id") or ""

    return Participant(
        actor_id=str(actor_id),
        tenant_external_id=alliance_id,
        name=nation.get("nation_name") or UNKNOWN_NATION,
        leader_name=nation.get("leader_name") or UNKNOWN_LEADER,
        tenant_name=alliance.get("name") or None,
        tenant_acronym=alliance.get("acronym") or None,
    )


def parse_war(war: Any) -> ConflictEvent:
    """Parse a raw war payload.

    Args:
        war: War dict as returned by the GraphQL API or the war subscription

    Returns:
        ConflictEvent with defaults for missing optional fields

    Raises:
        ParseError: The payload is not an object or has no war id.
    """
    if not isinstance(war, dict):
        raise ParseError(f"War payload must be an object, got {type(war).__name__}")

    war_id = war.get("id")
    if war_id is None or str(war_id).strip() == "":
        raise ParseError("War payload is missing 'id'")

    return ConflictEvent(
        id=str(war_id).strip(),
        date=parse_date(war.get("date")),
        category=war.get("war_type") or UNKNOWN_WAR_TYPE,
        reason=war.get("reason") or NO_REASON,
        side_a=_participant(war, "attacker", "att_id", "att_alliance_id"),
        side_b=_participant(war, "defender", "def_id", "def_alliance_id"),
    )
