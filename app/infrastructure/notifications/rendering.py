"""Renderer registry keyed by notification category.

Features register one renderer per NotificationCategory; the pipeline looks
the renderer up by category instead of branching on it.

Usage:
    from infrastructure.notifications.rendering import register_renderer

    @register_renderer(WAR_ALERTS)
    def render_war_alert(event, routed_tenant) -> ChatMessage:
        ...
"""

from typing import Any, Callable, Dict, List

import structlog
from infrastructure.notifications.models import ChatMessage, NotificationCategory

logger = structlog.get_logger()

Renderer = Callable[[Any, Any], ChatMessage]

_renderers: Dict[NotificationCategory, Renderer] = {}


def register_renderer(
    category: NotificationCategory,
) -> Callable[[Renderer], Renderer]:
    """Register the decorated function as the renderer of a category.

    Registering a category twice replaces the previous renderer.

    Args:
        category: Category the renderer produces messages for

    Returns:
        Decorator returning the function unchanged
    """

    def decorator(func: Renderer) -> Renderer:
        if category in _renderers:
            logger.warning(
                "renderer_replaced",
                category=str(category),
                renderer=func.__name__,
            )
        _renderers[category] = func
        return func

    return decorator


def get_renderer(category: NotificationCategory) -> Renderer:
    """Return the renderer registered for a category.

    Raises:
        KeyError: No renderer is registered for the category.
    """
    try:
        return _renderers[category]
    except KeyError:
        raise KeyError(f"No renderer registered for category '{category}'") from None


def registered_categories() -> List[NotificationCategory]:
    """Categories that currently have a renderer."""
    return list(_renderers.keys())
