"""Unit-of-work context binding for structured logging.

Binds identifiers such as the event id being fanned out or the HTTP request
that triggered a manual publish, so that every log line emitted while the
work runs carries them.

Usage:
    from infrastructure.logging import bind_event_context

    with bind_event_context(event_id="1234567", source="push"):
        logger.info("routing_event")

Dependencies:
    - structlog.contextvars
"""

import uuid
from contextlib import contextmanager
from typing import Optional, Any, Generator
import structlog


@contextmanager
def bind_event_context(
    correlation_id: Optional[str] = None,
    event_id: Optional[str] = None,
    source: Optional[str] = None,
    **extra_context: Any,
) -> Generator[None, None, None]:
    """Bind context to all logs within the context manager.

    Context variables are task-local under asyncio, so concurrent fan-outs
    do not leak identifiers into each other.

    Args:
        correlation_id: Unique identifier. Auto-generated if not provided.
        event_id: Conflict event id being processed.
        source: Adapter or endpoint that produced the work.
        **extra_context: Additional key-value pairs to include in logs.

    Yields:
        None - context is bound to structlog's context vars.

    Example:
        with bind_event_context(event_id=event.id, source=adapter.name):
            await pipeline.handle_event(event)
    """
    context: dict[str, Any] = {}
    context["correlation_id"] = correlation_id or str(uuid.uuid4())

    if event_id is not None:
        context["event_id"] = event_id

    if source is not None:
        context["source"] = source

    context.update(extra_context)

    structlog.contextvars.bind_contextvars(**context)
    try:
        yield
    finally:
        structlog.contextvars.unbind_contextvars(*context.keys())


def get_correlation_id() -> Optional[str]:
    """Get the current correlation ID from the logging context.

    Returns:
        The correlation ID if set, None otherwise.
    """
    ctx = structlog.contextvars.get_contextvars()
    return ctx.get("correlation_id")
