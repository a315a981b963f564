from fastapi import APIRouter, Request

from api.dependencies.rate_limits import get_limiter
from infrastructure.resilience.reconnect import ConnectionState
from infrastructure.services.dependencies import SettingsDep

router = APIRouter(tags=["System"])
limiter = get_limiter()


# Load balancer health checks hit these every few seconds, so the limit is generous
@router.get("/version")
@limiter.limit("50/minute")
def get_version(request: Request, settings: SettingsDep):  # pylint: disable=unused-argument
    """Get the version of the application."""
    return {"version": settings.GIT_SHA}


@router.get("/health")
@limiter.limit("50/minute")
def get_health(request: Request):
    """Healthcheck endpoint.

    Reports each event source adapter; the service is degraded when an
    adapter gave up reconnecting.
    """
    context = getattr(request.app.state, "context", None)
    adapters = context.adapter_statuses() if context is not None else []
    degraded = any(
        a.get("state") == ConnectionState.GIVEN_UP.value for a in adapters
    )
    return {"status": "degraded" if degraded else "ok", "adapters": adapters}
