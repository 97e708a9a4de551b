"""
Hosted backend (Supabase / PostgREST) configuration.

Table names and column selections used when talking to the REST API.
"""

from __future__ import annotations

REST_PREFIX = "/rest/v1"

COURTS_TABLE = "courts"
# Read side: every booking row that still occupies a court.
RESERVATIONS_TABLE = "reservations"
# Write side: new reservation rows land here.
BOOKINGS_TABLE = "bookings"

COURT_COLUMNS = "id,name,type,status,seasonal_price_rules"
RESERVATION_COLUMNS = "id,court_id,start_time,end_time,status"

# ── HTTP defaults ─────────────────────────────────────────────────────────

DEFAULT_HEADERS: dict[str, str] = {
    "User-Agent": "CourtBooking/0.1",
    "Accept": "application/json",
    "Content-Type": "application/json",
}
