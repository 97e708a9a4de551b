"""Tests for the /api/sessions endpoints."""

import json

import pytest

from tests.mocks.models import (
    CLOSED_COURT,
    GUEST_CONTACT,
    INDOOR_COURT,
    OUTDOOR_COURT,
    SUMMER_DAY,
    UNPRICED_COURT,
    make_reservation,
)


def _toggle(client, session_id, start, court_id=OUTDOOR_COURT.id, headers=None):
    return client.post(
        f"/api/sessions/{session_id}/toggle",
        json={"court_id": court_id, "date": SUMMER_DAY.isoformat(), "start": start},
        headers=headers,
    )


@pytest.fixture()
def session_id(client) -> str:
    resp = client.post("/api/sessions")
    assert resp.status_code == 201
    return resp.json()["id"]


class TestOpenSession:
    def test_new_session_is_empty(self, client):
        data = client.post("/api/sessions").json()
        assert data["id"]
        assert data["blocks"] == []
        assert data["total_price"] == 0.0
        assert data["formatted_total"] == "0 Kč"

    def test_get_and_discard(self, client, session_id):
        assert client.get(f"/api/sessions/{session_id}").status_code == 200
        assert client.delete(f"/api/sessions/{session_id}").status_code == 204
        resp = client.get(f"/api/sessions/{session_id}")
        assert resp.status_code == 404
        assert resp.json()["detail"]["error"] == "not_found"

    def test_unknown_session(self, client):
        assert client.get("/api/sessions/nope").status_code == 404

    def test_member_session_hidden_from_others(self, client, member_headers, player_headers):
        sid = client.post("/api/sessions", headers=member_headers).json()["id"]
        assert client.get(f"/api/sessions/{sid}", headers=member_headers).status_code == 200
        assert client.get(f"/api/sessions/{sid}").status_code == 404
        assert client.get(f"/api/sessions/{sid}", headers=player_headers).status_code == 404


class TestToggle:
    def test_sequential_toggles_build_one_block(self, client, session_id):
        for start in ("16:00", "16:30", "17:00"):
            resp = _toggle(client, session_id, start)
            assert resp.status_code == 200
        data = resp.json()
        assert len(data["blocks"]) == 1
        block = data["blocks"][0]
        assert (block["start"], block["end"]) == ("16:00", "17:30")
        assert block["court_name"] == "Kurt 3"
        assert data["total_price"] == 1188.0
        assert data["formatted_total"] == "1188 Kč"

    def test_member_prices_in_selection(self, client, member_headers):
        sid = client.post("/api/sessions", headers=member_headers).json()["id"]
        data = _toggle(client, sid, "09:00", headers=member_headers).json()
        assert data["total_price"] == 300.0

    def test_deselect_middle_splits(self, client, session_id):
        for start in ("16:00", "16:30", "17:00", "16:30"):
            data = _toggle(client, session_id, start).json()
        assert [(b["start"], b["end"]) for b in data["blocks"]] == [("16:00", "16:30"), ("17:00", "17:30")]

    def test_selection_survives_between_requests(self, client, session_id):
        _toggle(client, session_id, "16:00")
        data = client.get(f"/api/sessions/{session_id}").json()
        assert [(b["start"], b["end"]) for b in data["blocks"]] == [("16:00", "16:30")]

    def test_busy_slot_rejected(self, client, mock_store, session_id):
        mock_store.reservations.append(make_reservation("16:00", "17:00"))
        resp = _toggle(client, session_id, "16:30")
        assert resp.status_code == 409
        detail = resp.json()["detail"]
        assert detail["error"] == "slot_not_selectable"
        assert detail["details"]["reason"] == "busy"
        assert client.get(f"/api/sessions/{session_id}").json()["blocks"] == []

    def test_unpriced_slot_rejected(self, client, session_id):
        resp = _toggle(client, session_id, "09:00", court_id=UNPRICED_COURT.id)
        assert resp.status_code == 409
        assert resp.json()["detail"]["details"]["reason"] == "unpriced"

    def test_unknown_or_closed_court(self, client, session_id):
        assert _toggle(client, session_id, "09:00", court_id="99").status_code == 404
        assert _toggle(client, session_id, "09:00", court_id=CLOSED_COURT.id).status_code == 404

    def test_outside_working_hours(self, client, session_id):
        assert _toggle(client, session_id, "06:30").status_code == 422
        assert _toggle(client, session_id, "22:00").status_code == 422
        assert _toggle(client, session_id, "09:15").status_code == 422

    def test_malformed_start(self, client, session_id):
        assert _toggle(client, session_id, "9:00").status_code == 422


class TestCheckout:
    def test_guest_checkout(self, client, mock_store, session_id):
        _toggle(client, session_id, "09:00", court_id=INDOOR_COURT.id)
        _toggle(client, session_id, "16:00")
        _toggle(client, session_id, "16:30")

        resp = client.post(f"/api/sessions/{session_id}/checkout", json=GUEST_CONTACT.model_dump())
        assert resp.status_code == 201
        data = resp.json()
        assert len(data["reservations"]) == 2
        assert data["total_price"] == 300.0 + 792.0

        assert len(mock_store.inserted) == 2
        notes = json.loads(mock_store.inserted[0].notes)
        assert notes["email"] == GUEST_CONTACT.email
        assert client.get(f"/api/sessions/{session_id}").status_code == 404

    def test_member_checkout_records_user(self, client, mock_store, member_headers):
        sid = client.post("/api/sessions", headers=member_headers).json()["id"]
        _toggle(client, sid, "09:00", headers=member_headers)
        resp = client.post(
            f"/api/sessions/{sid}/checkout",
            json=GUEST_CONTACT.model_dump(),
            headers=member_headers,
        )
        assert resp.status_code == 201
        assert mock_store.inserted[0].user_id == "member-1"
        assert mock_store.inserted[0].notes == GUEST_CONTACT.notes

    def test_invalid_contact(self, client, mock_store, session_id):
        _toggle(client, session_id, "16:00")
        resp = client.post(
            f"/api/sessions/{session_id}/checkout",
            json={"name": "", "email": "nope", "phone": ""},
        )
        assert resp.status_code == 422
        detail = resp.json()["detail"]
        assert detail["error"] == "validation_error"
        assert [e["field"] for e in detail["details"]["errors"]] == ["name", "email", "phone"]
        assert mock_store.inserted == []

    def test_empty_selection(self, client, session_id):
        resp = client.post(f"/api/sessions/{session_id}/checkout", json=GUEST_CONTACT.model_dump())
        assert resp.status_code == 422
        assert [e["field"] for e in resp.json()["detail"]["details"]["errors"]] == ["blocks"]

    def test_conflict_keeps_session(self, client, mock_store, session_id):
        _toggle(client, session_id, "16:00")
        # Someone else books the court in the meantime.
        mock_store.reservations.append(make_reservation("16:00", "16:30", reservation_id="res-other"))

        resp = client.post(f"/api/sessions/{session_id}/checkout", json=GUEST_CONTACT.model_dump())
        assert resp.status_code == 409
        assert resp.json()["detail"]["error"] == "reservation_conflict"
        assert client.get(f"/api/sessions/{session_id}").status_code == 200
