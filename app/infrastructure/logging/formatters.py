"""Structlog processors applied to every log entry.

Usage:
    from infrastructure.logging.formatters import mask_sensitive_data
"""

import re
from typing import Any

# Keys whose values never reach the log output
SENSITIVE_PATTERNS = frozenset(
    {
        "password",
        "secret",
        "token",
        "api_key",
        "apikey",
        "authorization",
        "credential",
        "bearer",
    }
)

# api_key=... inside a URL or query string
_QUERY_SECRET = re.compile(r"(?i)\b(api_key|apikey|token)=[^&\s\"']+")

REDACTED = "***REDACTED***"


def mask_sensitive_data(
    mask_value: str = REDACTED,
    additional_patterns: frozenset[str] | None = None,
):
    """Create a processor that replaces the values of sensitive keys.

    A key is sensitive when it contains one of the patterns, ignoring case.

    Args:
        mask_value: Replacement for sensitive values.
        additional_patterns: Extra patterns, e.g. ``{"socket_id"}``.
    """
    patterns = SENSITIVE_PATTERNS
    if additional_patterns:
        patterns = patterns | additional_patterns

    def processor(
        logger: Any, method_name: str, event_dict: dict[str, Any]
    ) -> dict[str, Any]:
        return {
            key: (
                mask_value
                if value is not None and any(p in key.lower() for p in patterns)
                else value
            )
            for key, value in event_dict.items()
        }

    return processor


def redact_query_secrets(mask_value: str = REDACTED):
    """Create a processor that strips secrets from URLs in string values.

    The P&W API key is sent as a query parameter, so request URLs logged by
    the feed client or by error messages would otherwise carry it.
    """

    def processor(
        logger: Any, method_name: str, event_dict: dict[str, Any]
    ) -> dict[str, Any]:
        for key, value in event_dict.items():
            if isinstance(value, str) and "=" in value:
                event_dict[key] = _QUERY_SECRET.sub(
                    lambda m: f"{m.group(1)}={mask_value}", value
                )
        return event_dict

    return processor


def truncate_large_values(max_length: int = 500):
    """Create a processor that shortens oversized string values.

    A bulk push message can hold dozens of wars; one bad payload should not
    flood the log.
    """

    def processor(
        logger: Any, method_name: str, event_dict: dict[str, Any]
    ) -> dict[str, Any]:
        for key, value in event_dict.items():
            if isinstance(value, str) and len(value) > max_length:
                event_dict[key] = (
                    value[:max_length] + f"...[truncated, {len(value)} chars total]"
                )
        return event_dict

    return processor
