"""Feature settings __init__ - exports all feature settings."""

from infrastructure.configuration.features.war_alerts import WarAlertSettings

__all__ = [
    "WarAlertSettings",
]
