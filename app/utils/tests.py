from typing import Any, Optional

from fastapi import FastAPI

from api.dependencies.rate_limits import get_limiter, setup_rate_limiter


def create_test_app(routers, context: Optional[Any] = None, prefix: str = "") -> FastAPI:
    """
    Create a FastAPI test application serving the given routers.

    The lifespan is not run, so the application context is set directly.

    Args:
        routers: Router or list of routers to include.
        context: Optional AppContext (or stand-in) stored on app.state.context.
        prefix: Optional path prefix for the routers.

    Returns:
        FastAPI: A configured FastAPI application.

    Example:
        app = create_test_app(war_alerts.router, context=context, prefix="/api/v1")
    """
    app = FastAPI()

    setup_rate_limiter(app)
    get_limiter().reset()

    app.state.context = context

    if not isinstance(routers, list):
        routers = [routers]
    for router in routers:
        app.include_router(router, prefix=prefix)

    return app
