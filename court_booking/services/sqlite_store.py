"""
SQLite-backed reservation store (local file via court_booking.db).

Usage::

    store = SqliteReservationStore(seed_demo=True)
    await store.open()          # creates tables, seeds demo courts if empty
    courts = await store.list_courts()
    ...
    await store.close()
"""

from __future__ import annotations

import logging
from datetime import datetime

from court_booking import db
from court_booking.demo_data import get_demo_courts
from court_booking.models import Court, Reservation, ReservationRequest

logger = logging.getLogger(__name__)


class SqliteReservationStore:
    """Implements the ReservationStore protocol on top of court_booking.db."""

    def __init__(self, *, seed_demo: bool = False) -> None:
        self._seed_demo = seed_demo

    async def open(self) -> None:
        await db.init_db()
        if self._seed_demo and await db.count_courts() == 0:
            courts = get_demo_courts()
            for court in courts:
                await db.upsert_court(court)
            logger.info("Seeded %d demo courts", len(courts))

    async def close(self) -> None:
        await db.close_db()

    async def save_court(self, court: Court) -> None:
        await db.upsert_court(court)

    async def list_courts(self) -> list[Court]:
        return await db.list_courts()

    async def list_reservations(self, window_start: datetime, window_end: datetime) -> list[Reservation]:
        return await db.list_reservations(window_start, window_end)

    async def insert_reservations(self, requests: list[ReservationRequest]) -> list[Reservation]:
        return await db.insert_reservations(requests)
