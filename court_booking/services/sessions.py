"""
Booking sessions: each visitor's in-memory selection.

A session holds the visitor's current Block list and nothing else.
Nothing is persisted until checkout, so discarding a session (explicitly
or by idling past the TTL) needs no cleanup.
"""

from __future__ import annotations

import logging
import secrets
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone

from court_booking.errors import SessionNotFoundError
from court_booking.models import Block, Slot
from court_booking.services.blocks import selection_total, toggle_slot

logger = logging.getLogger(__name__)


def _now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class BookingSession:
    """One visitor's selection."""

    id: str
    owner_id: str | None = None
    blocks: list[Block] = field(default_factory=list)
    touched_at: datetime = field(default_factory=_now)

    def toggle(self, slot: Slot, court_name: str) -> list[Block]:
        self.blocks = toggle_slot(self.blocks, slot, court_name)
        self.touched_at = _now()
        return self.blocks

    @property
    def total_price(self) -> float:
        return selection_total(self.blocks)


class SessionStore:
    """In-process registry of open booking sessions, keyed by random id."""

    def __init__(self, ttl: timedelta) -> None:
        self._ttl = ttl
        self._sessions: dict[str, BookingSession] = {}

    def __len__(self) -> int:
        return len(self._sessions)

    def create(self, owner_id: str | None = None) -> BookingSession:
        self.purge_expired()
        session = BookingSession(id=secrets.token_urlsafe(16), owner_id=owner_id)
        self._sessions[session.id] = session
        logger.debug("Opened booking session %s", session.id)
        return session

    def get(self, session_id: str) -> BookingSession:
        session = self._sessions.get(session_id)
        if session is None or self._expired(session):
            self._sessions.pop(session_id, None)
            raise SessionNotFoundError(session_id)
        session.touched_at = _now()
        return session

    def discard(self, session_id: str) -> bool:
        """Drop a session. Returns True if it existed."""
        removed = self._sessions.pop(session_id, None) is not None
        if removed:
            logger.debug("Discarded booking session %s", session_id)
        return removed

    def purge_expired(self) -> int:
        expired = [sid for sid, s in self._sessions.items() if self._expired(s)]
        for sid in expired:
            del self._sessions[sid]
        if expired:
            logger.info("Purged %d idle booking session(s)", len(expired))
        return len(expired)

    def _expired(self, session: BookingSession) -> bool:
        return _now() - session.touched_at > self._ttl
