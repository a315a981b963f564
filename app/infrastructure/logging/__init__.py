"""Structured logging with structlog.

Example:
    from infrastructure.logging import bind_event_context, get_module_logger

    logger = get_module_logger()

    with bind_event_context(event_id="12345", source="polling"):
        logger.info("processing_event")
"""

from infrastructure.logging.setup import configure_logging, get_module_logger
from infrastructure.logging.context import bind_event_context, get_correlation_id
from infrastructure.logging.formatters import (
    SENSITIVE_PATTERNS,
    mask_sensitive_data,
    redact_query_secrets,
    truncate_large_values,
)

__all__ = [
    "configure_logging",
    "get_module_logger",
    "bind_event_context",
    "get_correlation_id",
    "SENSITIVE_PATTERNS",
    "mask_sensitive_data",
    "redact_query_secrets",
    "truncate_large_values",
]
