from contextlib import asynccontextmanager
import sys
from typing import AsyncIterator, TYPE_CHECKING

from fastapi import FastAPI
from structlog.stdlib import BoundLogger

from infrastructure.logging.setup import configure_logging
from infrastructure.services.context import build_context
from infrastructure.services.providers import get_settings

if TYPE_CHECKING:
    from infrastructure.configuration import Settings


def _is_test_environment() -> bool:
    """Detect if running in a test environment."""
    return "pytest" in sys.modules


def _get_logger(settings: "Settings") -> BoundLogger:
    return configure_logging(
        log_level=settings.LOG_LEVEL, is_production=settings.is_production
    )


def _list_configs(settings: "Settings", logger: BoundLogger) -> None:
    config_settings: dict[str, list[object]] = {"settings": []}

    for key, value in settings.model_dump().items():
        if isinstance(value, dict):
            config_settings[key] = list(value.keys())
        else:
            config_settings["settings"].append({key: value})

    logger.info("configuration_initialized", base_settings=config_settings["settings"])
    for key, value in config_settings.items():
        if key != "settings":
            logger.info("configuration_loaded", config_setting=key, keys=value)


def _adapters_enabled(settings: "Settings") -> bool:
    """Adapters run unless disabled or under pytest."""
    if _is_test_environment():
        return False
    return settings.war_alerts.enabled


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    settings = get_settings()
    logger = _get_logger(settings)

    app.state.settings = settings
    app.state.logger = logger

    logger.info("application_startup")
    _list_configs(settings, logger)

    with_adapters = _adapters_enabled(settings)
    if not with_adapters:
        logger.info(
            "war_alert_adapters_skipped",
            enabled=settings.war_alerts.enabled,
            test_environment=_is_test_environment(),
        )

    context = build_context(settings, with_adapters=with_adapters)
    app.state.context = context
    await context.start_adapters()

    yield

    logger.info("application_shutdown")
    await context.aclose()
    app.state.context = None
