"""
Health check endpoint.
"""

from datetime import datetime, timezone

from fastapi import APIRouter

from court_booking import __version__
from court_booking.models import HealthResponse

router = APIRouter(prefix="/api", tags=["health"])


@router.get(
    "/health",
    response_model=HealthResponse,
    operation_id="getHealth",
    summary="Health check",
)
async def get_health() -> HealthResponse:
    return HealthResponse(
        status="ok",
        version=__version__,
        timestamp=datetime.now(timezone.utc),
    )
