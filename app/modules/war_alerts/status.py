"""System status report models.

The body of a status publish request, as sent by the alliance dashboard.
"""

from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

HEALTHY = "healthy"
DEGRADED = "degraded"
DOWN = "down"


class ComponentStatus(BaseModel):
    """Health of one component."""

    model_config = ConfigDict(populate_by_name=True)

    name: Optional[str] = None
    status: str = "unknown"
    response_time: Optional[float] = Field(default=None, alias="responseTime")
    details: Optional[str] = None


class SystemStatus(BaseModel):
    """Health of the core systems and feature modules.

    Attributes:
        webapp: Alliance dashboard
        bot: Chat bot (this service)
        database: Primary database
        pw_api: Politics & War API
        modules: Feature module health keyed by module name
        next_update: When the next automated report is due
    """

    model_config = ConfigDict(populate_by_name=True)

    webapp: Optional[ComponentStatus] = None
    bot: Optional[ComponentStatus] = Field(default=None, alias="discordBot")
    database: Optional[ComponentStatus] = None
    pw_api: Optional[ComponentStatus] = Field(default=None, alias="pwApi")
    modules: Dict[str, ComponentStatus] = Field(default_factory=dict)
    next_update: Optional[datetime] = Field(default=None, alias="nextUpdate")

    def core_components(self) -> List[tuple]:
        """(label, component) pairs of the core systems that were reported."""
        labelled = [
            ("Webapp", self.webapp),
            ("Chat Bot", self.bot),
            ("Database", self.database),
            ("P&W API", self.pw_api),
        ]
        return [(label, c) for label, c in labelled if c is not None]

    def all_components(self) -> List[ComponentStatus]:
        return [c for _, c in self.core_components()] + list(self.modules.values())

    @property
    def overall_status(self) -> str:
        statuses = [c.status for c in self.all_components()]
        if DOWN in statuses:
            return DOWN
        if DEGRADED in statuses:
            return DEGRADED
        return HEALTHY


class StatusReport(BaseModel):
    """A status report to publish to a tenant."""

    system_status: SystemStatus
    requested_by: Optional[str] = None
