"""Tests for the SQLite-backed reservation store."""

import pytest

import court_booking.db as db_mod
from court_booking.errors import ReservationConflictError
from court_booking.models import ReservationRequest
from court_booking.services.slot_grid import grid_window
from court_booking.services.sqlite_store import SqliteReservationStore
from tests.mocks.models import INDOOR_COURT, OUTDOOR_COURT, SUMMER_DAY, local_dt


def _request(start: str, end: str, *, court_id: str = OUTDOOR_COURT.id, status: str = "new") -> ReservationRequest:
    return ReservationRequest(
        court_id=court_id,
        begins_at=local_dt(SUMMER_DAY, start),
        ends_at=local_dt(SUMMER_DAY, end),
        price=396.0,
        user_id="member-1",
        status=status,
        notes="",
    )


@pytest.fixture()
async def store(monkeypatch, tmp_path):
    monkeypatch.setattr(db_mod, "DB_PATH", str(tmp_path / "test.db"))
    sqlite_store = SqliteReservationStore()
    await sqlite_store.open()
    await sqlite_store.save_court(INDOOR_COURT)
    await sqlite_store.save_court(OUTDOOR_COURT)
    yield sqlite_store
    await sqlite_store.close()


async def _day_reservations(store):
    return await store.list_reservations(*grid_window(SUMMER_DAY, 1))


class TestCourts:
    async def test_courts_round_trip(self, store):
        courts = await store.list_courts()
        assert courts == [INDOOR_COURT, OUTDOOR_COURT]

    async def test_save_court_replaces_price_table(self, store):
        updated = OUTDOOR_COURT.model_copy(update={"seasonal_price_rules": {"summer_outdoor": 700}})
        await store.save_court(updated)
        courts = {c.id: c for c in await store.list_courts()}
        assert courts[OUTDOOR_COURT.id].seasonal_price_rules == {"summer_outdoor": 700}

    async def test_demo_seed_only_when_empty(self, monkeypatch, tmp_path):
        monkeypatch.setattr(db_mod, "DB_PATH", str(tmp_path / "seeded.db"))
        seeded = SqliteReservationStore(seed_demo=True)
        await seeded.open()
        try:
            assert len(await seeded.list_courts()) == 5
        finally:
            await seeded.close()

        reopened = SqliteReservationStore(seed_demo=True)
        await reopened.open()
        try:
            assert len(await reopened.list_courts()) == 5
        finally:
            await reopened.close()


class TestReservations:
    async def test_insert_and_list(self, store):
        created = await store.insert_reservations([_request("16:00", "17:00")])
        assert len(created) == 1

        listed = await _day_reservations(store)
        assert len(listed) == 1
        assert listed[0].court_id == OUTDOOR_COURT.id
        assert listed[0].start_time == local_dt(SUMMER_DAY, "16:00")
        assert listed[0].end_time == local_dt(SUMMER_DAY, "17:00")

    async def test_overlapping_insert_rejected(self, store):
        await store.insert_reservations([_request("16:00", "17:00")])
        with pytest.raises(ReservationConflictError):
            await store.insert_reservations([_request("16:30", "17:30")])

    async def test_touching_insert_allowed(self, store):
        await store.insert_reservations([_request("16:00", "17:00")])
        await store.insert_reservations([_request("17:00", "17:30")])
        assert len(await _day_reservations(store)) == 2

    async def test_other_court_not_in_conflict(self, store):
        await store.insert_reservations([_request("16:00", "17:00")])
        await store.insert_reservations([_request("16:00", "17:00", court_id=INDOOR_COURT.id)])
        assert len(await _day_reservations(store)) == 2

    async def test_conflict_writes_nothing(self, store):
        await store.insert_reservations([_request("16:00", "17:00")])
        with pytest.raises(ReservationConflictError):
            await store.insert_reservations([
                _request("09:00", "10:00", court_id=INDOOR_COURT.id),
                _request("16:30", "17:30"),
            ])
        listed = await _day_reservations(store)
        assert [r.court_id for r in listed] == [OUTDOOR_COURT.id]

    async def test_cancelled_rows_are_ignored(self, store):
        await store.insert_reservations([_request("16:00", "17:00", status="cancelled")])
        assert await _day_reservations(store) == []
        await store.insert_reservations([_request("16:00", "17:00")])
        assert len(await _day_reservations(store)) == 1

    async def test_window_excludes_other_days(self, store):
        await store.insert_reservations([_request("16:00", "17:00")])
        next_day = grid_window(SUMMER_DAY.replace(day=16), 1)
        assert await store.list_reservations(*next_day) == []
