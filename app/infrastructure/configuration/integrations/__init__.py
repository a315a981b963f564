"""Integration settings __init__ - exports all integration settings."""

from infrastructure.configuration.integrations.slack import SlackSettings
from infrastructure.configuration.integrations.aws import AwsSettings
from infrastructure.configuration.integrations.pnw import PnwSettings

__all__ = [
    "SlackSettings",
    "AwsSettings",
    "PnwSettings",
]
