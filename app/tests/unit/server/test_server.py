"""Unit tests for the FastAPI application."""

import pytest

from server import server


@pytest.mark.unit
def test_handler_routes():
    paths = {route.path for route in server.handler.routes}

    assert "/version" in paths
    assert "/health" in paths
    assert "/api/v1/war-alerts/publish" in paths
    assert "/api/v1/status/publish" in paths


@pytest.mark.unit
def test_rate_limiter_installed():
    assert hasattr(server.handler.state, "limiter")
