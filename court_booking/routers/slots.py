"""
Slot grid and price quote endpoints.
"""

import logging
from datetime import date, datetime, time, timedelta

from fastapi import APIRouter, HTTPException, Query, status

from court_booking.config import CLUB_TIMEZONE, LAST_SLOT_START, SLOT_MINUTES, VISIBLE_DAYS
from court_booking.dependencies import Catalog, CurrentViewer, Store
from court_booking.errors import StoreUnavailableError
from court_booking.models import PriceQuote, Reservation, SlotGridResponse
from court_booking.services.pricing import format_price, price_for_range
from court_booking.services.reservation_store import ReservationStore
from court_booking.services.slot_grid import build_grid, grid_window, is_working_slot_start

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["slots"])

_CLOSING_TIME = (datetime.combine(date.min, LAST_SLOT_START) + timedelta(minutes=SLOT_MINUTES)).time()


async def load_reservations(store: ReservationStore, date_from: date, days: int) -> list[Reservation]:
    """
    Reservations overlapping the visible days.

    A failed fetch yields an empty list; the client re-requests the grid.
    """
    window_start, window_end = grid_window(date_from, days, CLUB_TIMEZONE)
    try:
        return await store.list_reservations(window_start, window_end)
    except StoreUnavailableError:
        logger.warning("Reservation fetch failed for %s +%dd, serving empty grid", date_from, days)
        return []


def _parse_hhmm(raw: str, field: str) -> time:
    try:
        return time.fromisoformat(raw)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"Invalid {field} time {raw!r}, expected HH:MM",
        ) from None


@router.get(
    "/slots",
    response_model=SlotGridResponse,
    operation_id="listSlots",
    summary="Half-hour slot grid for every bookable court",
)
async def list_slots(
    viewer: CurrentViewer,
    catalog: Catalog,
    store: Store,
    date_from: date | None = Query(None, description="First day (defaults to today)"),
    days: int = Query(VISIBLE_DAYS, ge=1, le=14, description="Number of days"),
    court_id: str | None = Query(None, description="Only this court"),
) -> SlotGridResponse:
    start_day = date_from or datetime.now(CLUB_TIMEZONE).date()
    courts = await catalog.list_courts()
    if court_id is not None:
        courts = [c for c in courts if c.id == court_id]

    reservations = await load_reservations(store, start_day, days)
    grid = build_grid(
        courts,
        start_day,
        reservations,
        days=days,
        is_member=viewer.is_member,
        tz=CLUB_TIMEZONE,
    )
    return SlotGridResponse(
        date_from=start_day,
        days=days,
        is_member=viewer.is_member,
        courts=grid,
    )


@router.get(
    "/prices/quote",
    response_model=PriceQuote,
    operation_id="quotePrice",
    summary="Price of a time range on one court",
)
async def quote_price(
    viewer: CurrentViewer,
    catalog: Catalog,
    court_id: str = Query(..., description="Court identifier"),
    day: date = Query(..., alias="date", description="Day (YYYY-MM-DD)"),
    start: str = Query(..., description="Range start (HH:MM)"),
    end: str = Query(..., description="Range end (HH:MM)"),
) -> PriceQuote:
    court = await catalog.get_court(court_id)
    if court is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Court {court_id} not found",
        )

    start_at = _parse_hhmm(start, "start")
    end_at = _parse_hhmm(end, "end")
    if not is_working_slot_start(start_at) or end_at > _CLOSING_TIME:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"Range {start}-{end} is outside working hours",
        )

    try:
        price = price_for_range(
            court,
            day,
            start_at,
            end_at,
            is_member=viewer.is_member,
        )
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=str(exc),
        ) from None

    return PriceQuote(
        court_id=court.id,
        date=day,
        start=start,
        end=end,
        price=price,
        formatted=format_price(price),
    )
