"""War alerts feature settings."""

from typing import List, Literal, Optional

from pydantic import Field, field_validator

from infrastructure.configuration.base import FeatureSettings


class WarAlertSettings(FeatureSettings):
    """War alert detection and fan-out configuration.

    Environment Variables:
        WAR_ALERTS_ENABLED: Start the event source adapters (default: True)
        WAR_ALERTS_SOURCE: 'polling', 'push' or 'both' (default: polling)
        WAR_ALERTS_POLL_INTERVAL_SECONDS: Polling timer interval (default: 30)
        WAR_ALERTS_POLL_BATCH_SIZE: Wars fetched per tick (default: 10)
        WAR_ALERTS_ALLOW_TICK_OVERLAP: Let a tick start while the previous
            one is still running (default: False, the late tick is skipped)
        WAR_ALERTS_RECONNECT_BASE_DELAY_SECONDS: Push reconnect base delay
        WAR_ALERTS_RECONNECT_MAX_ATTEMPTS: Push reconnect ceiling
        WAR_ALERTS_FALLBACK_KEYWORDS: JSON list of channel name keywords used
            when an alliance has no configured channel
        WAR_ALERTS_CREATE_THREADS: Open a discussion thread under each alert
        WAR_ALERTS_DIRECTORY_BACKEND: 'dynamodb' or 'file'
        WAR_ALERTS_DIRECTORY_FILE: JSON directory file for the 'file' backend
        WAR_ALERTS_TENANTS_TABLE: DynamoDB table holding alliances
        WAR_ALERTS_CHANNEL_CONFIGS_TABLE: DynamoDB table holding channel configs
        WAR_ALERTS_STATUS_MONITOR_ENABLED: Publish automated status reports
            to every alliance (default: False)
        WAR_ALERTS_STATUS_INTERVAL_SECONDS: Seconds between automated
            reports (default: 1800)
        WAR_ALERTS_STATUS_INITIAL_DELAY_SECONDS: Delay before the first
            automated report (default: 60)

    Backoff:
        Delay before reconnect attempt n (0-based) is base * 2 ** n, so the
        defaults give 5s, 10s, 20s, 40s, 80s and then give up.

    Example:
        ```python
        from infrastructure.services import get_settings

        settings = get_settings()

        if settings.war_alerts.enabled:
            interval = settings.war_alerts.poll_interval_seconds
        ```
    """

    enabled: bool = Field(default=True, alias="WAR_ALERTS_ENABLED")
    source: Literal["polling", "push", "both"] = Field(
        default="polling", alias="WAR_ALERTS_SOURCE"
    )
    poll_interval_seconds: float = Field(
        default=30.0, alias="WAR_ALERTS_POLL_INTERVAL_SECONDS"
    )
    poll_batch_size: int = Field(default=10, alias="WAR_ALERTS_POLL_BATCH_SIZE")
    allow_tick_overlap: bool = Field(
        default=False, alias="WAR_ALERTS_ALLOW_TICK_OVERLAP"
    )
    reconnect_base_delay_seconds: float = Field(
        default=5.0, alias="WAR_ALERTS_RECONNECT_BASE_DELAY_SECONDS"
    )
    reconnect_max_attempts: int = Field(
        default=5, alias="WAR_ALERTS_RECONNECT_MAX_ATTEMPTS"
    )
    fallback_keywords: List[str] = Field(
        default_factory=lambda: ["status", "announcements", "updates"],
        alias="WAR_ALERTS_FALLBACK_KEYWORDS",
    )
    create_threads: bool = Field(default=True, alias="WAR_ALERTS_CREATE_THREADS")
    directory_backend: Literal["dynamodb", "file"] = Field(
        default="dynamodb", alias="WAR_ALERTS_DIRECTORY_BACKEND"
    )
    directory_file: Optional[str] = Field(
        default=None, alias="WAR_ALERTS_DIRECTORY_FILE"
    )
    tenants_table: str = Field(
        default="war_alerts_alliances", alias="WAR_ALERTS_TENANTS_TABLE"
    )
    channel_configs_table: str = Field(
        default="war_alerts_channel_configs", alias="WAR_ALERTS_CHANNEL_CONFIGS_TABLE"
    )
    status_monitor_enabled: bool = Field(
        default=False, alias="WAR_ALERTS_STATUS_MONITOR_ENABLED"
    )
    status_interval_seconds: float = Field(
        default=1800.0, alias="WAR_ALERTS_STATUS_INTERVAL_SECONDS"
    )
    status_initial_delay_seconds: float = Field(
        default=60.0, alias="WAR_ALERTS_STATUS_INITIAL_DELAY_SECONDS"
    )

    @field_validator("poll_batch_size")
    @classmethod
    def validate_batch_size(cls, v: int) -> int:
        """The GraphQL feed caps page size at 50."""
        if v < 1 or v > 50:
            raise ValueError(f"Poll batch size must be between 1 and 50: {v}")
        return v
