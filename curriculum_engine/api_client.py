"""
Async HTTP client for the practice API.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List

import httpx


class PracticeApiClient:
    def __init__(self, base_url: str, transport: httpx.AsyncBaseTransport | None = None):
        self.base_url = base_url.rstrip("/")
        self.transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(base_url=self.base_url, transport=self.transport)

    async def get_session(self, plan_id: str, now: datetime | None = None) -> Dict[str, Any]:
        params = {"now": now.isoformat()} if now else None
        async with self._client() as client:
            response = await client.get(f"/api/plans/{plan_id}/session", params=params)
            response.raise_for_status()
            return response.json()

    async def submit_response(
        self,
        plan_id: str,
        item_id: str,
        grade: int,
        item_type: str = "vocabulary",
        lesson_id: str | None = None,
    ) -> Dict[str, Any]:
        payload = {"item_id": item_id, "grade": grade, "item_type": item_type, "lesson_id": lesson_id}
        async with self._client() as client:
            response = await client.post(f"/api/plans/{plan_id}/responses", json=payload)
            response.raise_for_status()
            return response.json()

    async def submit_results(self, plan_id: str, responses: List[Dict[str, Any]]) -> Dict[str, Any]:
        async with self._client() as client:
            response = await client.post(f"/api/plans/{plan_id}/results", json={"responses": responses})
            response.raise_for_status()
            return response.json()

    async def health(self) -> Dict[str, Any]:
        async with self._client() as client:
            response = await client.get("/health")
            response.raise_for_status()
            return response.json()
