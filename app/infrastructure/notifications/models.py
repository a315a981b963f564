"""Notification system core models.

Platform-agnostic chat delivery models for tenant fan-out.
Features render message content, infrastructure handles delivery.

Uses Pydantic BaseModel for:
- Runtime input validation of directory records
- Hashable, frozen category keys for the renderer registry
- Alias-based serialization of publish reports for the HTTP API
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class NotificationCategory(BaseModel):
    """Notification category (module + event type).

    Channel configurations are stored per tenant and category, and
    renderers are registered per category.

    Attributes:
        module: Owning feature module (e.g. "war", "system")
        event_type: Event type within the module (e.g. "war_alerts")
    """

    model_config = ConfigDict(frozen=True)

    module: str
    event_type: str

    def __str__(self) -> str:
        return f"{self.module}.{self.event_type}"


WAR_ALERTS = NotificationCategory(module="war", event_type="war_alerts")
STATUS_UPDATES = NotificationCategory(module="system", event_type="status_updates")


class MessageField(BaseModel):
    """One name/value field of a rendered chat card."""

    name: str
    value: str
    inline: bool = False


class ThreadSeed(BaseModel):
    """Discussion thread opened under a delivered message.

    Attributes:
        name: Thread title (e.g. "War Alert: Rose vs Blue")
        text: First message posted in the thread
    """

    name: str
    text: str


class ChatMessage(BaseModel):
    """Rendered, platform-agnostic chat card.

    Attributes:
        title: Card title
        color: RGB color as an integer (0xff003c)
        description: Optional card body
        content: Optional plain text line posted alongside the card
        fields: Ordered card fields
        footer: Optional footer text
        timestamp: Optional timestamp shown on the card
        thread: Optional thread to open after a successful send

    Example:
        message = ChatMessage(
            title="DEFENSIVE WAR ALERT",
            color=0xFF003C,
            content="**Blue** is under attack by **Rose**!",
            fields=[MessageField(name="War Details", value="**War ID:** 105")],
        )
    """

    title: str
    color: int = 0
    description: Optional[str] = None
    content: Optional[str] = None
    fields: List[MessageField] = Field(default_factory=list)
    footer: Optional[str] = None
    timestamp: Optional[datetime] = None
    thread: Optional[ThreadSeed] = None

    @property
    def color_hex(self) -> str:
        """Color formatted as ``#rrggbb``."""
        return f"#{self.color:06x}"

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str) -> str:
        """Ensure title is not empty."""
        if not v or not v.strip():
            raise ValueError("Chat message title cannot be empty")
        return v


class DeliveryTarget(BaseModel):
    """A (tenant, category, channel) routing record.

    Attributes:
        tenant_id: Owning tenant id
        category: Notification category the channel receives
        channel_id: Chat channel identifier
        is_active: Inactive targets are ignored by the resolver
        settings: Free-form per-channel settings from the directory
        synthetic: True when produced by fallback discovery rather than
            read from the channel directory
    """

    tenant_id: str
    category: NotificationCategory
    channel_id: str
    is_active: bool = True
    settings: Dict[str, Any] = Field(default_factory=dict)
    synthetic: bool = False


class DeliveryResult(BaseModel):
    """Result of one delivery attempt to one target.

    Attributes:
        tenant_id: Tenant the delivery was for
        tenant_name: Tenant display name
        channel_id: Channel posted to, None when no channel was resolved
        target: Target used, None when no channel was resolved
        success: Whether the message was posted
        message: Human-readable result message
        external_id: Chat message id (Slack ts) on success
        thread_created: Whether the discussion thread was opened
    """

    tenant_id: str
    tenant_name: str
    channel_id: Optional[str] = None
    target: Optional[DeliveryTarget] = None
    success: bool
    message: str
    external_id: Optional[str] = None
    thread_created: bool = False


class PublishReport(BaseModel):
    """Aggregate of delivery results for a publish call.

    ``model_dump(by_alias=True)`` gives the camelCase API shape
    (``publishedCount``, ``totalCount``, ``results``).
    """

    model_config = ConfigDict(populate_by_name=True)

    published_count: int = Field(default=0, alias="publishedCount")
    total_count: int = Field(default=0, alias="totalCount")
    results: List[DeliveryResult] = Field(default_factory=list)

    @classmethod
    def from_results(cls, results: List[DeliveryResult]) -> "PublishReport":
        """Build a report counting successful deliveries."""
        return cls(
            published_count=sum(1 for r in results if r.success),
            total_count=len(results),
            results=results,
        )
