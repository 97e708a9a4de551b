"""
Booking session endpoints – toggle grid cells, then check out.
"""

import logging
from datetime import time

from fastapi import APIRouter, HTTPException, Request, status

from court_booking.config import CLUB_TIMEZONE
from court_booking.dependencies import Catalog, CurrentViewer, Sessions, Store
from court_booking.errors import SessionNotFoundError
from court_booking.models import (
    BookingSessionResponse,
    CheckoutResponse,
    ContactInfo,
    CourtStatus,
    Error,
    ToggleRequest,
    Viewer,
)
from court_booking.rate_limit import CHECKOUT, limiter
from court_booking.routers.slots import load_reservations
from court_booking.services.booking import assemble
from court_booking.services.pricing import format_price, sum_prices
from court_booking.services.sessions import BookingSession, SessionStore
from court_booking.services.slot_grid import build_slot, is_working_slot_start

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/sessions", tags=["sessions"])


def _to_response(session: BookingSession) -> BookingSessionResponse:
    total = session.total_price
    return BookingSessionResponse(
        id=session.id,
        blocks=session.blocks,
        total_price=total,
        formatted_total=format_price(total),
    )


def _owned_session(sessions: SessionStore, session_id: str, viewer: Viewer) -> BookingSession:
    session = sessions.get(session_id)
    # A signed-in user's session is invisible to everybody else.
    if session.owner_id is not None and session.owner_id != viewer.user_id:
        raise SessionNotFoundError(session_id)
    return session


@router.post(
    "",
    response_model=BookingSessionResponse,
    status_code=status.HTTP_201_CREATED,
    operation_id="openSession",
    summary="Open a booking session with an empty selection",
)
async def open_session(viewer: CurrentViewer, sessions: Sessions) -> BookingSessionResponse:
    return _to_response(sessions.create(owner_id=viewer.user_id))


@router.get(
    "/{session_id}",
    response_model=BookingSessionResponse,
    operation_id="getSession",
    summary="Current selection of a booking session",
)
async def get_session(session_id: str, viewer: CurrentViewer, sessions: Sessions) -> BookingSessionResponse:
    return _to_response(_owned_session(sessions, session_id, viewer))


@router.delete(
    "/{session_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    operation_id="discardSession",
    summary="Abandon a booking session",
)
async def discard_session(session_id: str, viewer: CurrentViewer, sessions: Sessions) -> None:
    _owned_session(sessions, session_id, viewer)
    sessions.discard(session_id)


@router.post(
    "/{session_id}/toggle",
    response_model=BookingSessionResponse,
    operation_id="toggleSlot",
    summary="Select or deselect one half-hour slot",
)
async def toggle(
    session_id: str,
    body: ToggleRequest,
    viewer: CurrentViewer,
    sessions: Sessions,
    catalog: Catalog,
    store: Store,
) -> BookingSessionResponse:
    session = _owned_session(sessions, session_id, viewer)

    court = await catalog.get_court(body.court_id)
    if court is None or court.status != CourtStatus.AVAILABLE:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Court {body.court_id} is not bookable",
        )

    start = time.fromisoformat(body.start)
    if not is_working_slot_start(start):
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"{body.start} is not a bookable slot start",
        )

    reservations = await load_reservations(store, body.date, 1)
    slot = build_slot(
        court,
        body.date,
        start,
        reservations,
        is_member=viewer.is_member,
        tz=CLUB_TIMEZONE,
    )
    if not slot.is_selectable:
        reason = "busy" if slot.is_busy else "unpriced"
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=Error(
                error="slot_not_selectable",
                message=f"Slot {body.date} {body.start} on {court.name} is {reason}",
                details={"court_id": court.id, "reason": reason},
            ).model_dump(),
        )

    session.toggle(slot, court.name)
    return _to_response(session)


@router.post(
    "/{session_id}/checkout",
    response_model=CheckoutResponse,
    status_code=status.HTTP_201_CREATED,
    operation_id="checkoutSession",
    summary="Turn the selection into reservations",
)
@limiter.limit(CHECKOUT)
async def checkout(
    request: Request,
    session_id: str,
    contact: ContactInfo,
    viewer: CurrentViewer,
    sessions: Sessions,
    store: Store,
) -> CheckoutResponse:
    session = _owned_session(sessions, session_id, viewer)

    requests = assemble(session.blocks, contact, user_id=viewer.user_id)
    await store.insert_reservations(requests)
    sessions.discard(session_id)

    logger.info(
        "Session %s checked out: %d reservation(s) for %s",
        session_id,
        len(requests),
        viewer.user_id or "guest",
    )
    return CheckoutResponse(
        reservations=requests,
        total_price=sum_prices(r.price for r in requests),
    )
