"""Infrastructure configuration module - public API.

This module provides centralized configuration management for the war alert
relay using Pydantic BaseSettings with domain-based organization.

Exports:
    Settings: Main settings class (for testing/overrides)
    WarAlertSettings: War alert feature settings class (for testing)

Example:
    ```python
    from infrastructure.services import get_settings

    settings = get_settings()

    # Access settings
    slack_token = settings.slack.SLACK_TOKEN
    interval = settings.war_alerts.poll_interval_seconds

    # Check environment
    if settings.is_production:
        # Production-specific logic...
    ```
"""

from infrastructure.configuration.settings import Settings
from infrastructure.configuration.features.war_alerts import WarAlertSettings

__all__ = ["Settings", "WarAlertSettings"]
