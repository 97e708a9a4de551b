"""
Price resolution for half-hour court slots.

Each court carries a table of hourly prices.  A slot's price is looked up
by an exact key first::

    {season}_{period}_{court_type}_{member|non_member}   e.g. summer_morning_outdoor_member

and, when that key is missing, derived from the seasonal base rate::

    {season}_{court_type}                                e.g. summer_outdoor

with a 10 % evening surcharge and a 20 % non-member surcharge applied
independently.  Table prices are per hour; the result is per half-hour,
halved after the surcharges.  A court without a usable entry yields
``None`` ("not bookable"), never zero.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable
from datetime import date, datetime, time, timedelta
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

from court_booking.config import (
    CURRENCY_LABEL,
    EVENING_START_HOUR,
    EVENING_SURCHARGE,
    MORNING_START_HOUR,
    NON_MEMBER_SURCHARGE,
    SLOT_MINUTES,
)
from court_booking.models import Court, CourtType, Season, TimePeriod

logger = logging.getLogger(__name__)

MONEY_PLACES = Decimal("0.01")

# Month number → season.  Boundaries are fixed club rules.
_SEASON_BY_MONTH: dict[int, Season] = {
    3: Season.SPRING, 4: Season.SPRING, 5: Season.SPRING,
    6: Season.SUMMER, 7: Season.SUMMER, 8: Season.SUMMER,
    9: Season.AUTUMN, 10: Season.AUTUMN, 11: Season.AUTUMN,
    12: Season.WINTER, 1: Season.WINTER, 2: Season.WINTER,
}


def season_for(day: date) -> Season:
    return _SEASON_BY_MONTH[day.month]


def time_period_for(at: time) -> TimePeriod:
    if MORNING_START_HOUR <= at.hour < EVENING_START_HOUR:
        return TimePeriod.MORNING
    return TimePeriod.EVENING


def membership_tier(is_member: bool) -> str:
    return "member" if is_member else "non_member"


def rule_key(season: Season, period: TimePeriod, court_type: CourtType, is_member: bool) -> str:
    return f"{season.value}_{period.value}_{court_type.value}_{membership_tier(is_member)}"


def base_rule_key(season: Season, court_type: CourtType) -> str:
    return f"{season.value}_{court_type.value}"


def _rule_value(rules: dict[str, Any], key: str) -> Decimal | None:
    """Hourly price stored under *key*, or None when missing or unusable."""
    raw = rules.get(key)
    # Zero, empty and boolean entries do not count as a price.
    if not raw or isinstance(raw, bool):
        return None
    try:
        value = Decimal(str(raw))
    except InvalidOperation:
        logger.warning("Ignoring non-numeric price rule %s=%r", key, raw)
        return None
    if not value.is_finite() or value < 0:
        logger.warning("Ignoring invalid price rule %s=%r", key, raw)
        return None
    return value


def _to_money(value: Decimal) -> float:
    return float(value.quantize(MONEY_PLACES, rounding=ROUND_HALF_UP))


def resolve_price(court: Court, day: date, at: time, is_member: bool = False) -> float | None:
    """
    Half-hour price of *court* for a slot starting at *at* on *day*.

    Returns None when the court's table has neither the exact key nor the
    seasonal base rate.
    """
    season = season_for(day)
    period = time_period_for(at)
    rules = court.seasonal_price_rules or {}

    exact = _rule_value(rules, rule_key(season, period, court.type, is_member))
    if exact is not None:
        return _to_money(exact / 2)

    base = _rule_value(rules, base_rule_key(season, court.type))
    if base is None:
        return None

    price = base
    if period is TimePeriod.EVENING:
        price *= EVENING_SURCHARGE
    if not is_member:
        price *= NON_MEMBER_SURCHARGE
    return _to_money(price / 2)


def price_for_range(
    court: Court,
    day: date,
    start: time,
    end: time,
    is_member: bool = False,
) -> float | None:
    """
    Price of the half-hours between *start* and *end* on *day*.

    Every half-hour is resolved on its own, so a range crossing 13:00
    mixes morning and evening rates.  None if any half-hour is unpriced.
    """
    step = timedelta(minutes=SLOT_MINUTES)
    current = datetime.combine(day, start)
    stop = datetime.combine(day, end)
    if stop <= current:
        raise ValueError(f"Range end {end} must be after start {start}")
    if (stop - current) % step or start.minute % SLOT_MINUTES or start.second:
        raise ValueError(f"Range {start}-{end} is not aligned to {SLOT_MINUTES}-minute slots")

    prices: list[float] = []
    while current < stop:
        price = resolve_price(court, day, current.time(), is_member)
        if price is None:
            return None
        prices.append(price)
        current += step
    return sum_prices(prices)


def sum_prices(prices: Iterable[float]) -> float:
    """Exact decimal sum of slot prices."""
    total = sum((Decimal(str(p)) for p in prices), Decimal("0"))
    return _to_money(total)


def format_price(price: float | None) -> str:
    """Whole-crown display string, e.g. ``360 Kč``; ``N/A`` when unpriced."""
    if price is None or math.isnan(price):
        return "N/A"
    rounded = Decimal(str(price)).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    return f"{rounded} {CURRENCY_LABEL}"
