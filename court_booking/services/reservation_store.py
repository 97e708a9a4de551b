"""
Abstract interface for the persistent reservation store.

The booking core never talks to a database directly; it reads courts and
reservations through this protocol and hands assembled reservation
requests back to it.  Implementations: SqliteReservationStore (local
file) and SupabaseReservationStore (hosted REST backend).
"""

from __future__ import annotations

from datetime import datetime
from typing import Protocol

from court_booking.models import Court, Reservation, ReservationRequest


class ReservationStore(Protocol):
    """Protocol that every reservation backend must satisfy."""

    # ── Lifecycle ─────────────────────────────────────────────────────
    async def open(self) -> None:
        """Acquire connections / clients."""
        ...

    async def close(self) -> None:
        """Release connections / clients."""
        ...

    # ── Reads ─────────────────────────────────────────────────────────
    async def list_courts(self) -> list[Court]:
        """Return every court with its price table, bookable or not."""
        ...

    async def list_reservations(self, window_start: datetime, window_end: datetime) -> list[Reservation]:
        """Return non-cancelled reservations overlapping [window_start, window_end)."""
        ...

    # ── Writes ────────────────────────────────────────────────────────
    async def insert_reservations(self, requests: list[ReservationRequest]) -> list[Reservation]:
        """
        Persist the requests atomically.

        Raises ReservationConflictError if any of them overlaps a reservation
        that already exists; nothing is written in that case.
        """
        ...
