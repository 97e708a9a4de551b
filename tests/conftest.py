"""
Shared test fixtures.

Provides a FastAPI TestClient wired to:
  • an in-memory reservation store (no database, no HTTP)
  • rate limiting disabled

The `client` fixture runs the full lifespan (store open, court catalog
start / stop) so the app state looks exactly as in production.
"""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from court_booking.main import app
from tests.mocks.models import make_token
from tests.mocks.stores import MockReservationStore


# ── Fixtures ───────────────────────────────────────────────────────────────


@pytest.fixture()
def mock_store() -> MockReservationStore:
    return MockReservationStore()


@pytest.fixture()
def _test_env(monkeypatch, mock_store: MockReservationStore) -> MockReservationStore:
    """
    Internal fixture that makes the app lifespan use the in-memory store
    and switches rate limiting off.
    """
    monkeypatch.setattr("court_booking.main._build_store", lambda: mock_store)

    # ── Disable rate limiting in tests ────────────────────────────────
    from court_booking.rate_limit import limiter as _limiter
    monkeypatch.setattr(_limiter, "enabled", False)

    return mock_store


@pytest.fixture()
def client(_test_env: MockReservationStore) -> TestClient:
    """
    FastAPI TestClient backed by the in-memory store; requests are made
    as a guest unless they carry a token.

    Uses a context manager so the lifespan runs.
    """
    with TestClient(app, raise_server_exceptions=False) as tc:
        yield tc


@pytest.fixture()
def member_headers() -> dict[str, str]:
    """Authorization header of a signed-in club member."""
    return {"Authorization": f"Bearer {make_token('member-1', member=True)}"}


@pytest.fixture()
def player_headers() -> dict[str, str]:
    """Authorization header of a signed-in non-member player."""
    return {"Authorization": f"Bearer {make_token('player-1')}"}


@pytest.fixture()
def staff_headers() -> dict[str, str]:
    return {"Authorization": f"Bearer {make_token('staff-1', role='staff')}"}
