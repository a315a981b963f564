"""Top-level settings for the war alert relay."""

from pydantic_settings import BaseSettings, SettingsConfigDict

from infrastructure.configuration.features import WarAlertSettings
from infrastructure.configuration.infrastructure import ServerSettings
from infrastructure.configuration.integrations import (
    AwsSettings,
    PnwSettings,
    SlackSettings,
)

SECTIONS = {
    "pnw": PnwSettings,
    "slack": SlackSettings,
    "aws": AwsSettings,
    "war_alerts": WarAlertSettings,
    "server": ServerSettings,
}


class Settings(BaseSettings):
    """Aggregates the settings sections.

    Each section reads its own environment variables; this class only adds
    the process-wide ones.

    Environment Variables:
        PREFIX: Environment prefix, empty in production
        LOG_LEVEL: Logging level (DEBUG, INFO, WARNING, ERROR)
        GIT_SHA: Commit of the running build, reported by /version

    Example:
        settings = get_settings()
        if settings.war_alerts.source in ("push", "both"):
            ...
    """

    PREFIX: str = ""
    LOG_LEVEL: str = "INFO"
    GIT_SHA: str = "Unknown"

    pnw: PnwSettings
    slack: SlackSettings
    aws: AwsSettings
    war_alerts: WarAlertSettings
    server: ServerSettings

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore",
    )

    def __init__(self, **kwargs):
        # sections not passed explicitly are read from the environment
        for name, section in SECTIONS.items():
            if name not in kwargs:
                kwargs[name] = section()
        super().__init__(**kwargs)

    @property
    def is_production(self) -> bool:
        """No PREFIX means production."""
        return not self.PREFIX
