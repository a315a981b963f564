"""Fixtures for API route tests."""

import pytest
from fastapi.testclient import TestClient

from api.router import api_router
from infrastructure.configuration import Settings
from infrastructure.configuration.infrastructure import ServerSettings
from infrastructure.notifications.models import STATUS_UPDATES
from infrastructure.services.context import build_context
from infrastructure.services.providers import get_settings
from modules.war_alerts.directory import (
    InMemoryChannelDirectory,
    InMemoryTenantDirectory,
)
from utils.tests import create_test_app

API_SECRET = "s3cret"


@pytest.fixture
def settings():
    return Settings(server=ServerSettings(BOT_API_SECRET=API_SECRET))


@pytest.fixture
def app_context(settings, mock_chat_channel, tenant_factory, target_factory):
    """Context with tenant Rose (790) configured on C1 (war) and S1 (status)."""
    return build_context(
        settings,
        chat=mock_chat_channel,
        tenants=InMemoryTenantDirectory([tenant_factory()]),
        channels=InMemoryChannelDirectory(
            [
                target_factory(channel_id="C1"),
                target_factory(channel_id="S1", category=STATUS_UPDATES),
            ]
        ),
        with_adapters=False,
    )


@pytest.fixture
def client(settings, app_context):
    """Test client over the full API router."""
    app = create_test_app(api_router, context=app_context)
    app.dependency_overrides[get_settings] = lambda: settings
    return TestClient(app)


@pytest.fixture
def auth_headers():
    return {"Authorization": f"Bearer {API_SECRET}"}
