"""
Court catalog cache.

Courts and their price tables change rarely, so they are held in memory
and re-fetched from the reservation store by a background task.  The
catalog is an ordinary object created at startup and handed to request
handlers through ``app.state``; callers that change price tables call
``invalidate()`` so the next read goes back to the store.

Reservations are *not* cached: every grid request asks the store, so the
busy flags are as fresh as that fetch.

Usage::

    catalog = CourtCatalog(store, refresh_interval_seconds=300)
    await catalog.start()       # initial fetch + starts background loop
    courts = await catalog.list_courts()
    catalog.invalidate()        # next read re-fetches
    await catalog.stop()        # cancels background loop
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone

from court_booking.errors import StoreUnavailableError
from court_booking.models import Court

logger = logging.getLogger(__name__)


class CourtCache:
    """
    In-memory store for courts.

    Data is replaced atomically on each refresh so readers never see a
    partially-updated state.
    """

    def __init__(self) -> None:
        self._courts: list[Court] = []
        self._last_refresh: datetime | None = None

    # ── Write ──────────────────────────────────────────────────────────

    def update(self, courts: list[Court]) -> None:
        """Atomically replace the cached data."""
        self._courts = list(courts)
        self._last_refresh = datetime.now(timezone.utc)
        logger.info(
            "Court cache updated: %d courts (at %s)",
            len(self._courts),
            self._last_refresh.isoformat(),
        )

    def clear(self) -> None:
        self._last_refresh = None

    # ── Read ───────────────────────────────────────────────────────────

    @property
    def is_populated(self) -> bool:
        return self._last_refresh is not None

    @property
    def last_refresh(self) -> datetime | None:
        return self._last_refresh

    def get_courts(self) -> list[Court]:
        return list(self._courts)


class CourtCatalog:
    """
    Read-through court cache in front of a ReservationStore.

    If the cache is cold (never filled, or invalidated) reads go to the
    store and refill it.  A failed refresh keeps serving the last good
    courts; if there are none, StoreUnavailableError propagates.
    """

    def __init__(
        self,
        store: object,  # anything satisfying the ReservationStore protocol
        *,
        refresh_interval_seconds: float = 300.0,
    ) -> None:
        self._store = store
        self._cache = CourtCache()
        self._refresh_interval = refresh_interval_seconds
        self._task: asyncio.Task[None] | None = None
        self._stale: list[Court] = []

    # ── Lifecycle ──────────────────────────────────────────────────────

    async def start(self) -> None:
        """Perform the initial cache fill and start the background loop."""
        try:
            await self.refresh()
        except StoreUnavailableError:
            logger.exception("Initial court fetch failed – will retry next cycle")
        self._task = asyncio.create_task(self._refresh_loop(), name="court-catalog-refresh")
        logger.info(
            "Background court refresh started (every %ds)",
            self._refresh_interval,
        )

    async def stop(self) -> None:
        """Cancel the background refresh loop."""
        if self._task is not None:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
            logger.info("Background court refresh stopped")

    # ── Refresh ────────────────────────────────────────────────────────

    async def _refresh_loop(self) -> None:
        """Runs forever, refreshing the cache on a fixed interval."""
        while True:
            await asyncio.sleep(self._refresh_interval)
            try:
                await self.refresh()
            except Exception:
                logger.exception("Court refresh failed – will retry next cycle")

    async def refresh(self) -> None:
        """Fetch all courts from the store and update the cache."""
        logger.debug("Refreshing court catalog from store...")
        courts = await self._store.list_courts()
        self._cache.update(courts)
        self._stale = []

    def invalidate(self) -> None:
        """Drop the cached courts; the next read fetches them again."""
        if self._cache.is_populated:
            self._stale = self._cache.get_courts()
        self._cache.clear()
        logger.info("Court catalog invalidated")

    # ── Reads ──────────────────────────────────────────────────────────

    async def list_courts(self) -> list[Court]:
        if not self._cache.is_populated:
            try:
                await self.refresh()
            except StoreUnavailableError:
                if not self._stale:
                    raise
                logger.warning("Court fetch failed, serving %d stale courts", len(self._stale))
                return list(self._stale)
        return self._cache.get_courts()

    async def get_court(self, court_id: str) -> Court | None:
        for court in await self.list_courts():
            if court.id == court_id:
                return court
        return None

    # ── Introspection ──────────────────────────────────────────────────

    @property
    def last_refresh(self) -> datetime | None:
        return self._cache.last_refresh
