"""
Dependency injection services.

Provides the settings provider and the application context that owns the
long-lived collaborators (chat channel, directories, pipeline, adapters).
FastAPI type aliases live in ``infrastructure.services.dependencies``.
"""

from infrastructure.services.providers import get_settings

__all__ = [
    "get_settings",
]
