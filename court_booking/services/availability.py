"""Occupancy checks of half-hour windows against existing reservations."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime

from court_booking.models import Reservation

CANCELLED_STATUS = "cancelled"


def intervals_overlap(
    start_a: datetime,
    end_a: datetime,
    start_b: datetime,
    end_b: datetime,
) -> bool:
    """Half-open overlap test; touching endpoints do not overlap."""
    return start_a < end_b and end_a > start_b


def is_blocking(reservation: Reservation) -> bool:
    return reservation.status != CANCELLED_STATUS


def is_occupied(
    court_id: str,
    slot_start: datetime,
    slot_end: datetime,
    reservations: Iterable[Reservation],
) -> bool:
    """True if a non-cancelled reservation of *court_id* overlaps [slot_start, slot_end)."""
    return any(
        r.court_id == court_id
        and is_blocking(r)
        and intervals_overlap(r.start_time, r.end_time, slot_start, slot_end)
        for r in reservations
    )
