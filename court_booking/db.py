"""
SQLite database layer using aiosqlite.

Stores courts (with their price tables) and reservations for local
development and single-node deployments.  Tables are created
automatically on first connect.

Timestamps are stored as UTC ISO strings with second precision so that
plain string comparison orders them correctly.
"""

from __future__ import annotations

import asyncio
import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from uuid import uuid4

import aiosqlite

from court_booking.config import DB_PATH
from court_booking.errors import ReservationConflictError
from court_booking.models import Court, Reservation, ReservationRequest

logger = logging.getLogger(__name__)

# ── Module-level connection ───────────────────────────────────────────────

_db: aiosqlite.Connection | None = None

# Serialises the conflict check + insert of one booking.
_write_lock = asyncio.Lock()


async def init_db() -> None:
    """Open the database and create tables if they don't exist."""
    global _db
    db_path = Path(DB_PATH)
    db_path.parent.mkdir(parents=True, exist_ok=True)

    _db = await aiosqlite.connect(str(db_path))
    _db.row_factory = aiosqlite.Row  # dict-like rows
    await _db.execute("PRAGMA journal_mode=WAL")
    await _db.execute("PRAGMA foreign_keys=ON")

    await _db.executescript(_SCHEMA)
    await _db.commit()
    logger.info("Database initialized at %s", db_path)


async def close_db() -> None:
    """Close the database connection."""
    global _db
    if _db is not None:
        await _db.close()
        _db = None
        logger.info("Database connection closed")


def get_db() -> aiosqlite.Connection:
    """Return the active database connection (must call init_db first)."""
    assert _db is not None, "Database not initialized: call init_db() first"
    return _db


# ── Schema ────────────────────────────────────────────────────────────────

_SCHEMA = """
CREATE TABLE IF NOT EXISTS courts (
    id              TEXT PRIMARY KEY,
    name            TEXT NOT NULL,
    type            TEXT NOT NULL,      -- indoor | outdoor
    status          TEXT NOT NULL DEFAULT 'available',
    seasonal_price_rules TEXT NOT NULL DEFAULT '{}'  -- JSON object
);

CREATE TABLE IF NOT EXISTS reservations (
    id              TEXT PRIMARY KEY,
    court_id        TEXT NOT NULL,
    start_time      TEXT NOT NULL,      -- UTC ISO
    end_time        TEXT NOT NULL,      -- UTC ISO
    status          TEXT NOT NULL DEFAULT 'new',
    price           REAL NOT NULL DEFAULT 0,
    user_id         TEXT,
    notes           TEXT,
    created_at      TEXT NOT NULL,
    FOREIGN KEY (court_id) REFERENCES courts(id) ON DELETE CASCADE
);

CREATE INDEX IF NOT EXISTS idx_res_court_time ON reservations(court_id, start_time);
"""


# ── Helpers ───────────────────────────────────────────────────────────────


def _utc_iso(dt: datetime) -> str:
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc).isoformat(timespec="seconds")


def _now_iso() -> str:
    return _utc_iso(datetime.now(timezone.utc))


def _row_to_court(row: aiosqlite.Row) -> Court:
    """Convert a database row to a Court model."""
    return Court(
        id=row["id"],
        name=row["name"],
        type=row["type"],
        status=row["status"],
        seasonal_price_rules=json.loads(row["seasonal_price_rules"] or "{}"),
    )


def _row_to_reservation(row: aiosqlite.Row) -> Reservation:
    """Convert a database row to a Reservation model."""
    return Reservation(
        id=row["id"],
        court_id=row["court_id"],
        start_time=row["start_time"],
        end_time=row["end_time"],
        status=row["status"],
    )


# ══════════════════════════════════════════════════════════════════════════
#                         COURT REPOSITORY
# ══════════════════════════════════════════════════════════════════════════


async def upsert_court(court: Court) -> None:
    """Insert a court or replace its name, status and price table."""
    db = get_db()
    await db.execute(
        """
        INSERT INTO courts (id, name, type, status, seasonal_price_rules)
        VALUES (?, ?, ?, ?, ?)
        ON CONFLICT(id) DO UPDATE SET
            name = excluded.name,
            type = excluded.type,
            status = excluded.status,
            seasonal_price_rules = excluded.seasonal_price_rules
        """,
        (
            court.id, court.name, court.type.value, court.status.value,
            json.dumps(court.seasonal_price_rules),
        ),
    )
    await db.commit()


async def list_courts() -> list[Court]:
    """Return all courts ordered by name."""
    db = get_db()
    async with db.execute("SELECT * FROM courts ORDER BY name") as cur:
        rows = await cur.fetchall()
    return [_row_to_court(r) for r in rows]


async def count_courts() -> int:
    db = get_db()
    async with db.execute("SELECT COUNT(*) FROM courts") as cur:
        row = await cur.fetchone()
    return row[0] if row else 0


# ══════════════════════════════════════════════════════════════════════════
#                       RESERVATION REPOSITORY
# ══════════════════════════════════════════════════════════════════════════


async def list_reservations(window_start: datetime, window_end: datetime) -> list[Reservation]:
    """Non-cancelled reservations overlapping [window_start, window_end)."""
    db = get_db()
    async with db.execute(
        """
        SELECT * FROM reservations
        WHERE status != 'cancelled' AND start_time < ? AND end_time > ?
        ORDER BY start_time
        """,
        (_utc_iso(window_end), _utc_iso(window_start)),
    ) as cur:
        rows = await cur.fetchall()
    return [_row_to_reservation(r) for r in rows]


async def insert_reservations(requests: list[ReservationRequest]) -> list[Reservation]:
    """
    Insert all requests in one transaction.

    Raises ReservationConflictError (and writes nothing) if any request
    overlaps an existing non-cancelled reservation of the same court.
    """
    db = get_db()
    created: list[Reservation] = []
    async with _write_lock:
        try:
            for req in requests:
                begins, ends = _utc_iso(req.begins_at), _utc_iso(req.ends_at)
                async with db.execute(
                    """
                    SELECT id FROM reservations
                    WHERE court_id = ? AND status != 'cancelled'
                      AND start_time < ? AND end_time > ?
                    LIMIT 1
                    """,
                    (req.court_id, ends, begins),
                ) as cur:
                    clash = await cur.fetchone()
                if clash is not None:
                    raise ReservationConflictError(req.court_id)

                res_id = str(uuid4())
                await db.execute(
                    """
                    INSERT INTO reservations
                        (id, court_id, start_time, end_time, status, price, user_id, notes, created_at)
                    VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                    """,
                    (
                        res_id, req.court_id, begins, ends, req.status,
                        req.price, req.user_id, req.notes, _now_iso(),
                    ),
                )
                created.append(
                    Reservation(
                        id=res_id,
                        court_id=req.court_id,
                        start_time=req.begins_at,
                        end_time=req.ends_at,
                        status=req.status,
                    )
                )
        except Exception:
            await db.rollback()
            raise
        await db.commit()
    logger.info("Inserted %d reservation(s)", len(created))
    return created
