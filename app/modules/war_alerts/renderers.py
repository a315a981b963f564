"""Chat renderers for war alerts and status reports.

Registered in the notification renderer registry on import.
"""

from datetime import datetime, timezone
from typing import List

from infrastructure.notifications.models import (
    STATUS_UPDATES,
    WAR_ALERTS,
    ChatMessage,
    MessageField,
    ThreadSeed,
)
from infrastructure.notifications.rendering import register_renderer
from modules.war_alerts.models import (
    ConflictEvent,
    Participant,
    ParticipantRole,
    RoutedTenant,
)
from modules.war_alerts.status import DEGRADED, DOWN, HEALTHY, StatusReport

PNW_BASE_URL = "https://politicsandwar.com"

OFFENSIVE_COLOR = 0xFF6B35
DEFENSIVE_COLOR = 0xFF003C

STATUS_COLORS = {
    HEALTHY: 0x00FF9F,
    DEGRADED: 0xFCEE0A,
    DOWN: 0xFF003C,
}
STATUS_EMOJIS = {
    HEALTHY: "🟢",
    DEGRADED: "🟡",
    DOWN: "🔴",
}


def war_timeline_url(war_id: str) -> str:
    return f"{PNW_BASE_URL}/nation/war/timeline/war={war_id}"


def nation_url(nation_id: str) -> str:
    return f"{PNW_BASE_URL}/nation/id={nation_id}"


def describe_alliance(participant: Participant) -> str:
    """Alliance name with its acronym, or "None"."""
    if not participant.tenant_name:
        return "None"
    if participant.tenant_acronym:
        return f"{participant.tenant_name} [{participant.tenant_acronym}]"
    return participant.tenant_name


def describe_nation(participant: Participant) -> str:
    return (
        f"**[{participant.name}]({nation_url(participant.actor_id)})** "
        f"({participant.leader_name})\n"
        f"**Alliance:** {describe_alliance(participant)}"
    )


@register_renderer(WAR_ALERTS)
def render_war_alert(event: ConflictEvent, routed: RoutedTenant) -> ChatMessage:
    """Render a war alert from the point of view of the routed tenant."""
    attacking = routed.role == ParticipantRole.SIDE_A
    ours = event.participant(routed.role)
    enemy = event.opponent(routed.role)
    war_kind = "OFFENSIVE" if attacking else "DEFENSIVE"
    verb = "has declared war on" if attacking else "is under attack by"

    thread_text = "\n".join(
        [
            "**War Coordination Thread**",
            "Use this thread for war planning, coordination, and updates!",
            "",
            "**Quick Links:**",
            f"• [View War Timeline]({war_timeline_url(event.id)})",
            f"• [{ours.name}]({nation_url(ours.actor_id)})",
            f"• [{enemy.name}]({nation_url(enemy.actor_id)})",
            "",
            f"**War Type:** {event.category}",
            f"**Reason:** {event.reason}",
        ]
    )

    return ChatMessage(
        title=f"{war_kind} WAR ALERT",
        color=OFFENSIVE_COLOR if attacking else DEFENSIVE_COLOR,
        description=f"A new {event.category.lower()} war has been declared!",
        content=f"**{ours.name}** {verb} **{enemy.name}**",
        fields=[
            MessageField(
                name="War Details",
                value=(
                    f"**War ID:** [{event.id}]({war_timeline_url(event.id)})\n"
                    f"**Type:** {event.category}\n"
                    f"**Reason:** {event.reason}"
                ),
            ),
            MessageField(name="Our Nation", value=describe_nation(ours), inline=True),
            MessageField(
                name="Enemy Nation", value=describe_nation(enemy), inline=True
            ),
        ],
        footer=f"{routed.tenant.name} War Alerts",
        timestamp=event.date,
        thread=ThreadSeed(name=f"War Alert: {ours.name} vs {enemy.name}", text=thread_text),
    )


def _status_line(label: str, status: str) -> str:
    return f"**{label}:** {STATUS_EMOJIS.get(status, '⚪')} {status.upper()}"


@register_renderer(STATUS_UPDATES)
def render_status_report(report: StatusReport, routed: RoutedTenant) -> ChatMessage:
    """Render a system status report for a tenant."""
    status = report.system_status
    components = status.all_components()
    healthy = sum(1 for c in components if c.status == HEALTHY)
    degraded = sum(1 for c in components if c.status == DEGRADED)
    down = sum(1 for c in components if c.status == DOWN)
    overall = status.overall_status

    fields: List[MessageField] = [
        MessageField(
            name="Overall Health",
            value=(
                f"**{healthy}** Healthy • **{degraded}** Degraded • **{down}** Down\n"
                f"**{healthy}/{len(components)}** components operational"
            ),
        )
    ]

    core = status.core_components()
    if core:
        fields.append(
            MessageField(
                name="Core Systems",
                value="\n".join(_status_line(label, c.status) for label, c in core),
                inline=True,
            )
        )
    if status.modules:
        fields.append(
            MessageField(
                name="Modules",
                value="\n".join(
                    _status_line(c.name or key.replace("_", " ").title(), c.status)
                    for key, c in status.modules.items()
                ),
                inline=True,
            )
        )

    response_times = [
        f"**{label}:** {c.response_time:g}ms"
        for label, c in core
        if c.response_time is not None
    ]
    if response_times:
        fields.append(MessageField(name="Response Times", value="\n".join(response_times)))

    critical: List[str] = []
    for label, c in core:
        if c.status == DOWN:
            critical.append(f"**{c.name or label}:** {c.details or 'Service unavailable'}")
    for key, c in status.modules.items():
        if c.status == DOWN:
            critical.append(f"**{c.name or key}:** {c.details or 'Service unavailable'}")
    if critical:
        fields.append(MessageField(name="Critical Issues", value="\n".join(critical)))

    footer_parts = []
    if report.requested_by:
        footer_parts.append(f"Requested by {report.requested_by}")
    if status.next_update:
        footer_parts.append(f"Next auto-update: {status.next_update.strftime('%H:%M:%S UTC')}")

    return ChatMessage(
        title=f"{STATUS_EMOJIS[overall]} System Status Report",
        color=STATUS_COLORS[overall],
        description=f"Automated status update for **{routed.tenant.name}**",
        fields=fields,
        footer=" • ".join(footer_parts) or None,
        timestamp=datetime.now(timezone.utc),
    )
