"""
Hosted backend store – implements the ReservationStore protocol.

Translates PostgREST rows into our domain models.  This is the only
layer that knows about both the backend's table layout and our schema.
Insert races are settled by the backend: an exclusion constraint rejects
overlapping bookings with HTTP 409, which surfaces here as
ReservationConflictError.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any

import httpx
from pydantic import ValidationError

from court_booking.errors import ReservationConflictError, StoreUnavailableError
from court_booking.models import Court, Reservation, ReservationRequest
from court_booking.services.supabase.client import SupabaseClient
from court_booking.services.supabase.config import (
    BOOKINGS_TABLE,
    COURT_COLUMNS,
    COURTS_TABLE,
    RESERVATION_COLUMNS,
    RESERVATIONS_TABLE,
)

logger = logging.getLogger(__name__)


def _utc_iso(dt: datetime) -> str:
    return dt.astimezone(timezone.utc).isoformat()


def _booking_row(req: ReservationRequest) -> dict[str, Any]:
    return {
        "court_id": req.court_id,
        "begins_at": _utc_iso(req.begins_at),
        "ends_at": _utc_iso(req.ends_at),
        "price": req.price,
        "user_id": req.user_id,
        "status": req.status,
        "notes": req.notes,
    }


class SupabaseReservationStore:
    """
    Implements the ReservationStore protocol for the hosted backend.

    Usage::

        client = SupabaseClient(SUPABASE_URL, SUPABASE_KEY)
        store = SupabaseReservationStore(client)
        courts = await store.list_courts()
    """

    def __init__(self, client: SupabaseClient) -> None:
        self._client = client

    async def open(self) -> None:
        logger.info("Using hosted reservation backend")

    async def close(self) -> None:
        await self._client.close()

    async def list_courts(self) -> list[Court]:
        try:
            rows = await self._client.select(COURTS_TABLE, {"select": COURT_COLUMNS, "order": "name"})
            return [Court.model_validate(r) for r in rows]
        except (httpx.HTTPError, ValidationError) as exc:
            raise StoreUnavailableError(f"Could not load courts: {exc}") from exc

    async def list_reservations(self, window_start: datetime, window_end: datetime) -> list[Reservation]:
        params = {
            "select": RESERVATION_COLUMNS,
            "status": "neq.cancelled",
            "start_time": f"lt.{_utc_iso(window_end)}",
            "end_time": f"gt.{_utc_iso(window_start)}",
        }
        try:
            rows = await self._client.select(RESERVATIONS_TABLE, params)
            return [Reservation.model_validate(r) for r in rows]
        except (httpx.HTTPError, ValidationError) as exc:
            raise StoreUnavailableError(f"Could not load reservations: {exc}") from exc

    async def insert_reservations(self, requests: list[ReservationRequest]) -> list[Reservation]:
        try:
            rows = await self._client.insert(BOOKINGS_TABLE, [_booking_row(r) for r in requests])
        except httpx.HTTPStatusError as exc:
            if exc.response.status_code == httpx.codes.CONFLICT:
                court_id = requests[0].court_id if requests else "?"
                raise ReservationConflictError(court_id) from exc
            raise StoreUnavailableError(f"Booking insert failed: {exc}") from exc
        except httpx.HTTPError as exc:
            raise StoreUnavailableError(f"Booking insert failed: {exc}") from exc

        created = [
            Reservation(
                id=row["id"],
                court_id=row["court_id"],
                start_time=row["begins_at"],
                end_time=row["ends_at"],
                status=row.get("status", "new"),
            )
            for row in rows
        ]
        logger.info("Inserted %d booking(s) into %s", len(created), BOOKINGS_TABLE)
        return created
