"""
Court endpoints – bookable courts and their price tables.
"""

import logging

from fastapi import APIRouter, HTTPException, status

from court_booking.dependencies import Catalog, CurrentViewer
from court_booking.models import Court, Role
from court_booking.services.slot_grid import bookable_courts

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/courts", tags=["courts"])

_STAFF_ROLES = {Role.STAFF, Role.OWNER, Role.ADMIN}


@router.get(
    "",
    response_model=list[Court],
    operation_id="listCourts",
    summary="List bookable courts, indoor first",
)
async def list_courts(catalog: Catalog) -> list[Court]:
    return bookable_courts(await catalog.list_courts())


@router.get(
    "/{court_id}",
    response_model=Court,
    operation_id="getCourt",
    summary="Get details of a specific court",
)
async def get_court(court_id: str, catalog: Catalog) -> Court:
    court = await catalog.get_court(court_id)
    if court is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Court {court_id} not found",
        )
    return court


@router.post(
    "/cache/invalidate",
    status_code=status.HTTP_204_NO_CONTENT,
    operation_id="invalidateCourtCache",
    summary="Drop cached courts after price tables were edited",
)
async def invalidate_court_cache(viewer: CurrentViewer, catalog: Catalog) -> None:
    if viewer.role not in _STAFF_ROLES:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Staff role required",
        )
    logger.info("Court cache invalidated by %s (%s)", viewer.user_id, viewer.role.value)
    catalog.invalidate()
