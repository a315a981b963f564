"""Tests for the system routes."""

from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

from api.routes.system import router as system_router
from utils.tests import create_test_app


@pytest.mark.unit
class TestVersion:
    def test_returns_git_sha(self, client, settings):
        response = client.get("/version")

        assert response.status_code == 200
        assert response.json() == {"version": settings.GIT_SHA}


@pytest.mark.unit
class TestHealth:
    def test_ok_without_adapters(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "ok", "adapters": []}

    def test_degraded_when_adapter_gave_up(self):
        context = MagicMock()
        context.adapter_statuses.return_value = [
            {"name": "polling", "type": "polling", "running": True},
            {"name": "push", "type": "push", "state": "given_up"},
        ]
        client = TestClient(create_test_app(system_router, context=context))

        body = client.get("/health").json()

        assert body["status"] == "degraded"
        assert len(body["adapters"]) == 2

    def test_ok_before_context_is_built(self):
        client = TestClient(create_test_app(system_router))

        assert client.get("/health").json()["status"] == "ok"


@pytest.mark.unit
def test_version_rate_limited():
    client = TestClient(create_test_app(system_router))

    for _ in range(50):
        assert client.get("/version").status_code == 200

    response = client.get("/version")
    assert response.status_code == 429
    assert response.json()["message"] == "Rate limit exceeded"
    assert "limit" in response.json()
