"""Tests for rate limiting behaviour."""

import pytest
from fastapi.testclient import TestClient

from court_booking.main import app
from tests.mocks.models import GUEST_CONTACT


class TestRateLimiting:
    """Verify that rate limiting kicks in for checkout."""

    @pytest.fixture()
    def limited_client(self, _test_env):
        """
        TestClient with rate limiting **enabled** (unlike the default
        `client` fixture which disables it for convenience).
        """
        from court_booking.rate_limit import limiter

        limiter.enabled = True
        # Reset in-memory state so previous tests don't pollute counts
        limiter.reset()

        with TestClient(app, raise_server_exceptions=False) as tc:
            yield tc

        limiter.enabled = False

    def test_checkout_rate_limit(self, limited_client):
        """POST /api/sessions/{id}/checkout is limited to 10 requests/minute."""
        for i in range(10):
            resp = limited_client.post("/api/sessions/missing/checkout", json=GUEST_CONTACT.model_dump())
            # 404 (no such session) is fine – we just need it not to be 429 yet
            assert resp.status_code == 404, f"Request {i + 1} should not be rate-limited"

        resp = limited_client.post("/api/sessions/missing/checkout", json=GUEST_CONTACT.model_dump())
        assert resp.status_code == 429
        assert "Rate limit exceeded" in resp.json()["detail"]

    def test_grid_not_limited_at_low_volume(self, limited_client):
        """GET /api/slots at low volume should not be rate-limited."""
        for _ in range(10):
            resp = limited_client.get("/api/slots", params={"days": 1})
            assert resp.status_code == 200
