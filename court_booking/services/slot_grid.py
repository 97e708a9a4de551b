"""
Slot grid construction.

For each bookable court, each visible day and each half-hour between
07:00 and 21:30 one Slot is built, priced by the price resolver and
flagged busy by the availability checker.  Grids are rebuilt on every
request; slots are never updated in place.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from datetime import date, datetime, time, timedelta, tzinfo

from court_booking.config import (
    CLUB_TIMEZONE,
    FIRST_SLOT_START,
    LAST_SLOT_START,
    SLOT_MINUTES,
    VISIBLE_DAYS,
)
from court_booking.models import Court, CourtSlots, CourtStatus, CourtType, Reservation, Slot
from court_booking.services.availability import is_occupied
from court_booking.services.pricing import resolve_price

_SLOT_LENGTH = timedelta(minutes=SLOT_MINUTES)


def working_slot_starts() -> list[time]:
    """Start times of every bookable half-hour of a day."""
    starts: list[time] = []
    current = datetime.combine(date.min, FIRST_SLOT_START)
    last = datetime.combine(date.min, LAST_SLOT_START)
    while current <= last:
        starts.append(current.time())
        current += _SLOT_LENGTH
    return starts


def is_working_slot_start(at: time) -> bool:
    return at in working_slot_starts()


def bookable_courts(courts: Iterable[Court]) -> list[Court]:
    """Available courts, indoor first, then by name."""
    available = [c for c in courts if c.status == CourtStatus.AVAILABLE]
    return sorted(available, key=lambda c: (c.type != CourtType.INDOOR, c.name))


def build_slot(
    court: Court,
    day: date,
    start: time,
    reservations: Sequence[Reservation],
    *,
    is_member: bool = False,
    tz: tzinfo = CLUB_TIMEZONE,
) -> Slot:
    starts_at = datetime.combine(day, start, tzinfo=tz)
    ends_at = starts_at + _SLOT_LENGTH
    return Slot(
        court_id=court.id,
        date=day,
        starts_at=starts_at,
        ends_at=ends_at,
        price=resolve_price(court, day, start, is_member),
        is_busy=is_occupied(court.id, starts_at, ends_at, reservations),
    )


def build_court_day(
    court: Court,
    day: date,
    reservations: Sequence[Reservation],
    *,
    is_member: bool = False,
    tz: tzinfo = CLUB_TIMEZONE,
) -> CourtSlots:
    return CourtSlots(
        court_id=court.id,
        court_name=court.name,
        court_type=court.type,
        date=day,
        slots=[
            build_slot(court, day, start, reservations, is_member=is_member, tz=tz)
            for start in working_slot_starts()
        ],
    )


def build_grid(
    courts: Iterable[Court],
    date_from: date,
    reservations: Sequence[Reservation],
    *,
    days: int = VISIBLE_DAYS,
    is_member: bool = False,
    tz: tzinfo = CLUB_TIMEZONE,
) -> list[CourtSlots]:
    """Slots of every bookable court for *days* days starting at *date_from*, day by day."""
    offered = bookable_courts(courts)
    grid: list[CourtSlots] = []
    for offset in range(days):
        day = date_from + timedelta(days=offset)
        for court in offered:
            grid.append(build_court_day(court, day, reservations, is_member=is_member, tz=tz))
    return grid


def grid_window(date_from: date, days: int = VISIBLE_DAYS, tz: tzinfo = CLUB_TIMEZONE) -> tuple[datetime, datetime]:
    """Absolute [start, end) covered by a grid, for the reservation query."""
    start = datetime.combine(date_from, time(0, 0), tzinfo=tz)
    end = datetime.combine(date_from + timedelta(days=days), time(0, 0), tzinfo=tz)
    return start, end
