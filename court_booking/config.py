"""
Application configuration from environment variables.

All settings have sensible defaults for local development.
A .env file in the project root is loaded automatically (if present).

The booking grid constants at the bottom are fixed club rules and are
not read from the environment.
"""

from __future__ import annotations

import os
from datetime import time
from decimal import Decimal
from pathlib import Path
from zoneinfo import ZoneInfo

from dotenv import load_dotenv

# Load .env file before reading any env vars
load_dotenv(Path(__file__).resolve().parent.parent / ".env")

# ── Environment ───────────────────────────────────────────────────────────

ENVIRONMENT: str = os.getenv("ENVIRONMENT", "development")
LOG_LEVEL: str = os.getenv("LOG_LEVEL", "info")

# ── Paths ─────────────────────────────────────────────────────────────────

PROJECT_ROOT = Path(__file__).resolve().parent.parent
DATA_DIR = PROJECT_ROOT / "data"

# ── Reservation store ─────────────────────────────────────────────────────

# "sqlite" (local file, default) or "supabase" (hosted REST backend)
RESERVATION_BACKEND: str = os.getenv("RESERVATION_BACKEND", "sqlite").lower()

# SQLite database file
DB_PATH: str = os.getenv("DB_PATH", str(DATA_DIR / "court_booking.db"))

SUPABASE_URL: str = os.getenv("SUPABASE_URL", "")
SUPABASE_KEY: str = os.getenv("SUPABASE_KEY", "")
SUPABASE_TIMEOUT: float = float(os.getenv("SUPABASE_TIMEOUT", "15"))

# How often the court catalog (courts + price tables) is re-fetched (seconds).
COURT_REFRESH_INTERVAL: float = float(os.getenv("COURT_REFRESH_INTERVAL", "300"))

# ── JWT ───────────────────────────────────────────────────────────────────

# Tokens are issued by the identity provider; we only verify them.
JWT_SECRET: str = os.getenv("JWT_SECRET", "dev-secret-change-me-in-production")
JWT_ALGORITHM: str = os.getenv("JWT_ALGORITHM", "HS256")

# ── Booking sessions ──────────────────────────────────────────────────────

# Idle booking sessions older than this are discarded.
SESSION_TTL_MINUTES: int = int(os.getenv("SESSION_TTL_MINUTES", "60"))

# ── Club clock ────────────────────────────────────────────────────────────

CLUB_TIMEZONE: ZoneInfo = ZoneInfo(os.getenv("CLUB_TIMEZONE", "Europe/Prague"))

# ── Booking grid (fixed club rules) ───────────────────────────────────────

SLOT_MINUTES = 30

# First bookable half-hour starts at 07:00, the last one at 21:30 (ends 22:00).
FIRST_SLOT_START = time(7, 0)
LAST_SLOT_START = time(21, 30)

# Days shown in one grid page.
VISIBLE_DAYS = 7

# ── Pricing (fixed club rules) ────────────────────────────────────────────

# Morning rates apply to slots starting in [07:00, 13:00).
MORNING_START_HOUR = 7
EVENING_START_HOUR = 13

# Fallback surcharges applied to the seasonal base rate.
EVENING_SURCHARGE = Decimal("1.1")
NON_MEMBER_SURCHARGE = Decimal("1.2")

CURRENCY_LABEL = "Kč"
