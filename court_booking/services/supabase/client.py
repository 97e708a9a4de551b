"""
Low-level HTTP client for the hosted backend's PostgREST API.

Handles request construction and JSON parsing only; mapping onto domain
models lives in service.py.  A single instance is shared across the app
lifetime.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from court_booking.services.supabase.config import DEFAULT_HEADERS, REST_PREFIX

logger = logging.getLogger(__name__)


class SupabaseClient:
    """Async HTTP client for the hosted backend's REST endpoints."""

    def __init__(
        self,
        base_url: str,
        api_key: str,
        *,
        timeout: float = 15.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        headers = {
            **DEFAULT_HEADERS,
            "apikey": api_key,
            "Authorization": f"Bearer {api_key}",
        }
        self._client = httpx.AsyncClient(
            base_url=base_url.rstrip("/") + REST_PREFIX,
            headers=headers,
            timeout=timeout,
            transport=transport,
        )

    async def close(self) -> None:
        await self._client.aclose()

    async def select(self, table: str, params: dict[str, str] | list[tuple[str, str]]) -> list[dict[str, Any]]:
        """GET /{table} with PostgREST filter params."""
        logger.debug("select %s %s", table, params)
        resp = await self._client.get(f"/{table}", params=params)
        resp.raise_for_status()
        return resp.json()

    async def insert(self, table: str, rows: list[dict[str, Any]]) -> list[dict[str, Any]]:
        """POST /{table}; returns the inserted rows."""
        logger.debug("insert %d row(s) into %s", len(rows), table)
        resp = await self._client.post(
            f"/{table}",
            json=rows,
            headers={"Prefer": "return=representation"},
        )
        resp.raise_for_status()
        return resp.json()
