"""Demo courts used to seed an empty local database in development."""

from typing import List

from court_booking.models import Court, CourtStatus, CourtType


def _seasonal_base(indoor: int, outdoor: int) -> dict:
    """Base hourly rates per season for one court type pair."""
    rules = {}
    for season in ("spring", "summer", "autumn", "winter"):
        rules[f"{season}_indoor"] = indoor
        rules[f"{season}_outdoor"] = outdoor
    return rules


def get_demo_courts() -> List[Court]:
    """Two indoor halls and three outdoor clay courts with typical price tables."""
    indoor_rules = _seasonal_base(indoor=500, outdoor=400)
    indoor_rules.update({
        "winter_morning_indoor_member": 400,
        "winter_morning_indoor_non_member": 500,
        "winter_evening_indoor_member": 500,
        "winter_evening_indoor_non_member": 650,
    })

    outdoor_rules = _seasonal_base(indoor=500, outdoor=400)
    outdoor_rules.update({
        "summer_outdoor": 600,
        "summer_evening_outdoor_member": 600,
        "summer_evening_outdoor_non_member": 750,
    })
    # Outdoor courts are closed in winter: no winter key at all.
    del outdoor_rules["winter_outdoor"]

    return [
        Court(id="1", name="Hala 1", type=CourtType.INDOOR, seasonal_price_rules=indoor_rules),
        Court(id="2", name="Hala 2", type=CourtType.INDOOR, seasonal_price_rules=indoor_rules),
        Court(id="3", name="Kurt 3", type=CourtType.OUTDOOR, seasonal_price_rules=outdoor_rules),
        Court(id="4", name="Kurt 4", type=CourtType.OUTDOOR, seasonal_price_rules=outdoor_rules),
        Court(
            id="5",
            name="Kurt 5",
            type=CourtType.OUTDOOR,
            seasonal_price_rules=outdoor_rules,
            status=CourtStatus.UNAVAILABLE,
        ),
    ]
