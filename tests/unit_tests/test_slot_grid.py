"""Tests for slot grid construction."""

from datetime import time, timedelta

from court_booking.config import CLUB_TIMEZONE
from court_booking.services.slot_grid import (
    bookable_courts,
    build_court_day,
    build_grid,
    build_slot,
    grid_window,
    is_working_slot_start,
    working_slot_starts,
)
from tests.mocks.models import (
    CLOSED_COURT,
    INDOOR_COURT,
    MOCK_COURTS,
    OUTDOOR_COURT,
    SUMMER_DAY,
    UNPRICED_COURT,
    local_dt,
    make_reservation,
)


class TestWorkingWindow:
    def test_thirty_half_hours(self):
        starts = working_slot_starts()
        assert len(starts) == 30
        assert starts[0] == time(7, 0)
        assert starts[-1] == time(21, 30)

    def test_is_working_slot_start(self):
        assert is_working_slot_start(time(7, 0)) is True
        assert is_working_slot_start(time(21, 30)) is True
        assert is_working_slot_start(time(6, 30)) is False
        assert is_working_slot_start(time(22, 0)) is False
        assert is_working_slot_start(time(9, 15)) is False


class TestBookableCourts:
    def test_unavailable_courts_are_hidden(self):
        courts = bookable_courts(MOCK_COURTS)
        assert CLOSED_COURT not in courts
        assert len(courts) == 3

    def test_indoor_first_then_by_name(self):
        names = [c.name for c in bookable_courts(MOCK_COURTS)]
        assert names == ["Hala 1", "Kurt 3", "Kurt 4"]


class TestBuildSlot:
    def test_slot_is_aware_and_half_hour_long(self):
        slot = build_slot(OUTDOOR_COURT, SUMMER_DAY, time(9, 0), [])
        assert slot.starts_at == local_dt(SUMMER_DAY, "09:00")
        assert slot.starts_at.tzinfo is not None
        assert slot.ends_at - slot.starts_at == timedelta(minutes=30)
        assert slot.key == (OUTDOOR_COURT.id, SUMMER_DAY, slot.starts_at)

    def test_slot_priced_for_tier(self):
        assert build_slot(OUTDOOR_COURT, SUMMER_DAY, time(9, 0), []).price == 360.0
        assert build_slot(OUTDOOR_COURT, SUMMER_DAY, time(9, 0), [], is_member=True).price == 300.0

    def test_busy_slot_is_not_selectable(self):
        reservations = [make_reservation("09:00", "10:00")]
        slot = build_slot(OUTDOOR_COURT, SUMMER_DAY, time(9, 30), reservations)
        assert slot.is_busy is True
        assert slot.is_selectable is False

    def test_unpriced_slot_is_present_but_not_selectable(self):
        slot = build_slot(UNPRICED_COURT, SUMMER_DAY, time(9, 0), [])
        assert slot.price is None
        assert slot.is_busy is False
        assert slot.is_selectable is False


class TestBuildGrid:
    def test_court_day_has_every_working_slot(self):
        day = build_court_day(INDOOR_COURT, SUMMER_DAY, [])
        assert day.court_name == "Hala 1"
        assert len(day.slots) == 30
        assert [s.starts_at.time() for s in day.slots] == working_slot_starts()

    def test_grid_day_by_day_then_court(self):
        grid = build_grid(MOCK_COURTS, SUMMER_DAY, [], days=2)
        assert len(grid) == 2 * 3
        assert [g.date for g in grid] == [SUMMER_DAY] * 3 + [SUMMER_DAY + timedelta(days=1)] * 3
        assert [g.court_id for g in grid[:3]] == [INDOOR_COURT.id, OUTDOOR_COURT.id, UNPRICED_COURT.id]

    def test_grid_marks_only_overlapping_slots_busy(self):
        reservations = [make_reservation("16:00", "17:00")]
        grid = build_grid([OUTDOOR_COURT], SUMMER_DAY, reservations, days=1)
        busy = [s.starts_at.strftime("%H:%M") for s in grid[0].slots if s.is_busy]
        assert busy == ["16:00", "16:30"]

    def test_grid_window_covers_local_days(self):
        start, end = grid_window(SUMMER_DAY, 7, CLUB_TIMEZONE)
        assert start == local_dt(SUMMER_DAY, "00:00")
        assert end == local_dt(SUMMER_DAY + timedelta(days=7), "00:00")
