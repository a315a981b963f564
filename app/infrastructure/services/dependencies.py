"""
Type aliases for FastAPI dependency injection.

Provides annotated type hints for common infrastructure dependencies.
"""

import secrets
from typing import Annotated, Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from infrastructure.configuration import Settings
from infrastructure.services.context import AppContext
from infrastructure.services.providers import get_settings

bearer_scheme = HTTPBearer(auto_error=False)


def get_app_context(request: Request) -> AppContext:
    """Application context built by the lifespan."""
    context = getattr(request.app.state, "context", None)
    if context is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Service is starting",
        )
    return context


def require_api_secret(
    settings: Annotated[Settings, Depends(get_settings)],
    credentials: Annotated[
        Optional[HTTPAuthorizationCredentials], Depends(bearer_scheme)
    ],
) -> None:
    """Check the bearer token against BOT_API_SECRET.

    No secret configured disables the check.
    """
    expected = settings.server.BOT_API_SECRET
    if not expected:
        return
    if credentials is None or not secrets.compare_digest(
        credentials.credentials, expected
    ):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized",
            headers={"WWW-Authenticate": "Bearer"},
        )


# Settings dependency
SettingsDep = Annotated[Settings, Depends(get_settings)]

# Application context (directories, pipeline, adapters)
AppContextDep = Annotated[AppContext, Depends(get_app_context)]

# Shared secret check for the publish endpoints
ApiSecretDep = Annotated[None, Depends(require_api_secret)]

__all__ = [
    "SettingsDep",
    "AppContextDep",
    "ApiSecretDep",
    "get_app_context",
    "require_api_secret",
]
