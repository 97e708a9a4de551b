import logging
from typing import Annotated, Any

import jwt
from fastapi import Cookie, Depends, Header, HTTPException, Request, status

from court_booking.config import JWT_ALGORITHM, JWT_SECRET
from court_booking.models import Role, Viewer
from court_booking.services.cache import CourtCatalog
from court_booking.services.reservation_store import ReservationStore
from court_booking.services.sessions import SessionStore

logger = logging.getLogger(__name__)


# ── Shared services (created in the app lifespan) ──────────────────────────


def get_store(request: Request) -> ReservationStore:
    return request.app.state.store


def get_catalog(request: Request) -> CourtCatalog:
    return request.app.state.catalog


def get_sessions(request: Request) -> SessionStore:
    return request.app.state.sessions


Store = Annotated[ReservationStore, Depends(get_store)]
Catalog = Annotated[CourtCatalog, Depends(get_catalog)]
Sessions = Annotated[SessionStore, Depends(get_sessions)]


# ── JWT / Viewer ───────────────────────────────────────────────────────────


def _role_from_claim(raw: Any) -> Role:
    try:
        return Role(raw)
    except ValueError:
        logger.warning("Unknown role claim %r, treating as player", raw)
        return Role.PLAYER


def viewer_from_token(token: str) -> Viewer:
    """
    Decode an identity-provider token into a Viewer.

    Claims used: ``sub`` (user id), ``role`` and ``member`` (bool).
    Raises jwt.PyJWTError for bad or expired tokens.
    """
    payload = jwt.decode(token, JWT_SECRET, algorithms=[JWT_ALGORITHM])
    user_id = payload.get("sub")
    if not user_id:
        raise jwt.InvalidTokenError("token has no subject")
    return Viewer(
        user_id=str(user_id),
        role=_role_from_claim(payload.get("role", Role.PLAYER.value)),
        is_member=bool(payload.get("member", False)),
    )


def _bearer_token(authorization: str | None) -> str | None:
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token:
        return None
    return token.strip()


async def get_viewer(
    session: Annotated[str | None, Cookie()] = None,
    authorization: Annotated[str | None, Header()] = None,
) -> Viewer:
    """Signed-in viewer from the bearer token or session cookie; guests otherwise."""
    token = _bearer_token(authorization) or session
    if token is None:
        return Viewer()

    try:
        return viewer_from_token(token)
    except jwt.ExpiredSignatureError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Session expired. Please log in again.",
        ) from None
    except jwt.PyJWTError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid session. Please log in again.",
        ) from None


CurrentViewer = Annotated[Viewer, Depends(get_viewer)]
