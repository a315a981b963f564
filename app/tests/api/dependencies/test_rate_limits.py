from unittest.mock import MagicMock

import pytest

from api.dependencies.rate_limits import client_key, get_limiter, limiter


@pytest.mark.unit
class TestClientKey:
    def test_uses_first_forwarded_hop(self):
        request = MagicMock()
        request.headers = {"x-forwarded-for": "203.0.113.7, 10.0.0.2"}

        assert client_key(request) == "203.0.113.7"

    def test_falls_back_to_peer_address(self):
        request = MagicMock()
        request.headers = {}
        request.client.host = "198.51.100.4"

        assert client_key(request) == "198.51.100.4"


@pytest.mark.unit
def test_get_limiter_returns_module_limiter():
    assert get_limiter() is limiter
