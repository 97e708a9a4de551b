"""
Court Booking API – FastAPI application.

The store, the court catalog and the booking session registry are created
in the lifespan and handed to request handlers through ``app.state``.
"""

import logging
from contextlib import asynccontextmanager
from datetime import timedelta

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

from court_booking import __version__
from court_booking.config import (
    COURT_REFRESH_INTERVAL,
    ENVIRONMENT,
    RESERVATION_BACKEND,
    SESSION_TTL_MINUTES,
    SUPABASE_KEY,
    SUPABASE_TIMEOUT,
    SUPABASE_URL,
)
from court_booking.errors import (
    BookingValidationError,
    ReservationConflictError,
    SessionNotFoundError,
    StoreUnavailableError,
)
from court_booking.models import Error
from court_booking.rate_limit import limiter
from court_booking.routers import courts, health, sessions, slots
from court_booking.services.cache import CourtCatalog
from court_booking.services.reservation_store import ReservationStore
from court_booking.services.sessions import SessionStore
from court_booking.services.sqlite_store import SqliteReservationStore
from court_booking.services.supabase.client import SupabaseClient
from court_booking.services.supabase.service import SupabaseReservationStore

logger = logging.getLogger(__name__)


def _build_store() -> ReservationStore:
    """Reservation store selected by RESERVATION_BACKEND."""
    if RESERVATION_BACKEND == "supabase":
        if not SUPABASE_URL or not SUPABASE_KEY:
            raise RuntimeError("SUPABASE_URL and SUPABASE_KEY must be set for the supabase backend")
        client = SupabaseClient(SUPABASE_URL, SUPABASE_KEY, timeout=SUPABASE_TIMEOUT)
        return SupabaseReservationStore(client)
    if RESERVATION_BACKEND != "sqlite":
        raise RuntimeError(f"Unknown RESERVATION_BACKEND {RESERVATION_BACKEND!r}")
    return SqliteReservationStore(seed_demo=ENVIRONMENT != "production")


# ── Lifespan ──────────────────────────────────────────────────────────────


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Open the store, warm the court catalog, shut down cleanly."""
    store = _build_store()
    await store.open()
    logger.info("Reservation store opened (%s)", RESERVATION_BACKEND)

    catalog = CourtCatalog(store, refresh_interval_seconds=COURT_REFRESH_INTERVAL)
    await catalog.start()

    app.state.store = store
    app.state.catalog = catalog
    app.state.sessions = SessionStore(timedelta(minutes=SESSION_TTL_MINUTES))

    yield

    await catalog.stop()
    await store.close()
    logger.info("Reservation store closed")


app = FastAPI(
    title="Court Booking API",
    description="Half-hour court slots, booking blocks and seasonal pricing for a tennis club",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)


# ── Rate limiting ─────────────────────────────────────────────────────────

app.state.limiter = limiter


@app.exception_handler(RateLimitExceeded)
def _rate_limit_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_429_TOO_MANY_REQUESTS,
        content={"detail": f"Rate limit exceeded: {exc.detail}"},
    )


app.add_middleware(SlowAPIMiddleware)


# ── Domain errors ─────────────────────────────────────────────────────────


def _error_response(status_code: int, error: str, message: str, details: dict | None = None) -> JSONResponse:
    body = Error(error=error, message=message, details=details)
    return JSONResponse(status_code=status_code, content={"detail": body.model_dump()})


@app.exception_handler(BookingValidationError)
async def _booking_validation_handler(request: Request, exc: BookingValidationError) -> JSONResponse:
    return _error_response(
        status.HTTP_422_UNPROCESSABLE_ENTITY,
        "validation_error",
        "Booking data is incomplete",
        {"errors": [e.model_dump() for e in exc.errors]},
    )


@app.exception_handler(ReservationConflictError)
async def _conflict_handler(request: Request, exc: ReservationConflictError) -> JSONResponse:
    logger.warning("Reservation conflict on court %s", exc.court_id)
    return _error_response(
        status.HTTP_409_CONFLICT,
        "reservation_conflict",
        str(exc),
        {"court_id": exc.court_id},
    )


@app.exception_handler(SessionNotFoundError)
async def _session_not_found_handler(request: Request, exc: SessionNotFoundError) -> JSONResponse:
    return _error_response(
        status.HTTP_404_NOT_FOUND,
        "not_found",
        "Booking session not found",
        {"session_id": exc.session_id},
    )


@app.exception_handler(StoreUnavailableError)
async def _store_unavailable_handler(request: Request, exc: StoreUnavailableError) -> JSONResponse:
    logger.error("Reservation store unavailable: %s", exc)
    return _error_response(
        status.HTTP_503_SERVICE_UNAVAILABLE,
        "store_unavailable",
        "Reservation store is temporarily unavailable",
    )


# ── Routers ───────────────────────────────────────────────────────────────

app.include_router(health.router)
app.include_router(courts.router)
app.include_router(slots.router)
app.include_router(sessions.router)
