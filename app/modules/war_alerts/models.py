"""War alert domain models.

Conflict events as parsed from the upstream feed, the participants on each
side, and the tenants (tracked alliances) that receive alerts.
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict

UNKNOWN_NATION = "Unknown Nation"
UNKNOWN_LEADER = "Unknown Leader"
NO_REASON = "No reason provided"
UNKNOWN_WAR_TYPE = "Unknown"


class ParticipantRole(Enum):
    """Side a tenant takes in a conflict."""

    SIDE_A = "side_a"  # attacking
    SIDE_B = "side_b"  # defending


class Participant(BaseModel):
    """One side of a conflict.

    Attributes:
        actor_id: Nation id
        tenant_external_id: Alliance id, None when the nation has no alliance
        name: Nation name
        leader_name: Nation leader name
        tenant_name: Alliance name
        tenant_acronym: Alliance acronym
    """

    model_config = ConfigDict(frozen=True)

    actor_id: str
    tenant_external_id: Optional[str] = None
    name: str = UNKNOWN_NATION
    leader_name: str = UNKNOWN_LEADER
    tenant_name: Optional[str] = None
    tenant_acronym: Optional[str] = None


class ConflictEvent(BaseModel):
    """A newly declared war.

    Attributes:
        id: War id, monotonically increasing upstream
        date: Declaration time
        category: War type (e.g. "RAID", "ORDINARY", "ATTRITION")
        reason: Declaration reason
        side_a: Attacker
        side_b: Defender
    """

    model_config = ConfigDict(frozen=True)

    id: str
    date: Optional[datetime] = None
    category: str = UNKNOWN_WAR_TYPE
    reason: str = NO_REASON
    side_a: Participant
    side_b: Participant

    def participant(self, role: ParticipantRole) -> Participant:
        """Participant playing the given role."""
        return self.side_a if role == ParticipantRole.SIDE_A else self.side_b

    def opponent(self, role: ParticipantRole) -> Participant:
        """Participant facing the given role."""
        return self.side_b if role == ParticipantRole.SIDE_A else self.side_a


class Tenant(BaseModel):
    """A tracked alliance.

    Attributes:
        id: Directory id
        external_id: Alliance id compared with participant tenant ids
        name: Alliance display name
        workspace_id: Chat workspace used for fallback channel discovery
        is_active: Inactive tenants receive nothing
    """

    id: str
    external_id: str
    name: str
    workspace_id: Optional[str] = None
    is_active: bool = True


class RoutedTenant(BaseModel):
    """A tenant interested in an event, with the side it is on.

    ``role`` is None for notifications that are not about a conflict, such
    as status reports.
    """

    tenant: Tenant
    role: Optional[ParticipantRole] = None
