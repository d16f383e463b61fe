"""Integration test fixtures — Docker-based search backends with mock data.

Expects backends to be running, e.g.:
    docker run -p 7700:7700 -e MEILI_MASTER_KEY=test-master-key getmeili/meilisearch

Seed data is automatically loaded into each backend on first use.
"""

from __future__ import annotations

import asyncio
import time
from typing import Any

import httpx
import pytest

MOCK_USERS: list[dict[str, Any]] = [
    {"id": 1, "first_name": "Jane", "last_name": "Doe", "email": "jane@example.com"},
    {"id": 2, "first_name": "John", "last_name": "Janssen", "email": "john@example.com"},
    {"id": 3, "first_name": "Alice", "last_name": "Jones", "email": "alice@example.com"},
    {"id": 4, "first_name": "Bob", "last_name": "Smith", "email": "bob@example.com"},
    {"id": 5, "first_name": "Janet", "last_name": "Brown", "email": "janet@example.com"},
]

MEILI_HOST = "http://localhost:7700"
MEILI_KEY = "test-master-key"
MEILI_INDEX = "test-users"


def _wait_for_service(url: str, timeout: float = 5.0) -> bool:
    """Block until *url* returns HTTP 200, or timeout."""
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        try:
            r = httpx.get(url, timeout=2)
            if r.status_code == 200:
                return True
        except httpx.HTTPError:
            pass
        time.sleep(1)
    return False


# ── MeiliSearch ─────────────────────────────────────────────────


async def _seed_meilisearch(host: str = MEILI_HOST, index: str = MEILI_INDEX, api_key: str = MEILI_KEY) -> None:
    headers = {
        "Authorization": f"Bearer {api_key}",
        "Content-Type": "application/json",
    }
    async with httpx.AsyncClient(base_url=host, timeout=30, headers=headers) as client:
        await client.delete(f"/indexes/{index}")
        await asyncio.sleep(0.5)

        resp = await client.post("/indexes", json={"uid": index, "primaryKey": "id"})
        resp.raise_for_status()
        await asyncio.sleep(0.5)

        await client.patch(
            f"/indexes/{index}/settings",
            json={"searchableAttributes": ["first_name", "last_name", "email"]},
        )
        await asyncio.sleep(0.5)

        resp = await client.post(f"/indexes/{index}/documents", json=MOCK_USERS)
        resp.raise_for_status()

        # Wait for indexing to complete
        task_uid = resp.json().get("taskUid")
        if task_uid is not None:
            for _ in range(30):
                t = await client.get(f"/tasks/{task_uid}")
                if t.json().get("status") in ("succeeded", "failed"):
                    break
                await asyncio.sleep(0.5)


@pytest.fixture(scope="session")
def meilisearch_ready() -> str:
    """Ensure MeiliSearch is running and seeded."""
    if not _wait_for_service(f"{MEILI_HOST}/health"):
        pytest.skip(f"MeiliSearch not available at {MEILI_HOST}")
    asyncio.run(_seed_meilisearch())
    return MEILI_HOST
