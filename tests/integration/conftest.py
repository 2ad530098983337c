"""Integration test fixtures for the HTTP API."""

from collections.abc import AsyncGenerator
from typing import Any

import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from timecard_engine.api.app import create_app

# ISO week 2024-W02, Monday to Friday
WEEKDAY_DATES = ["2024-01-08", "2024-01-09", "2024-01-10", "2024-01-11", "2024-01-12"]
SATURDAY_DATE = "2024-01-13"


def entry_payload(
    entry_id: str,
    day: str,
    start: str = "09:00",
    end: str | None = "17:00",
    worker_id: str = "worker-1",
    **extra: Any,
) -> dict[str, Any]:
    """Build a time entry request body with UTC timestamps."""
    payload = {
        "entry_id": entry_id,
        "worker_id": worker_id,
        "clock_in": f"{day}T{start}:00Z",
        "clock_out": f"{day}T{end}:00Z" if end else None,
    }
    payload.update(extra)
    return payload


@pytest_asyncio.fixture(scope="function")
async def client() -> AsyncGenerator[AsyncClient, None]:
    """Create async HTTP client for API testing."""
    app = create_app()
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
