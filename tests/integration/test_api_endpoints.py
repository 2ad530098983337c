"""API endpoint integration tests.

Tests the FastAPI endpoints for hours and payroll previews.
"""

from decimal import Decimal
from uuid import UUID

import pytest
from httpx import AsyncClient

from .conftest import SATURDAY_DATE, WEEKDAY_DATES, entry_payload


pytestmark = pytest.mark.asyncio

API = "/api/v1/calculations"


class TestHealthEndpoints:
    """Test health check endpoints."""

    async def test_health_check(self, client: AsyncClient):
        """Health endpoint should return 200."""
        response = await client.get("/health")
        assert response.status_code == 200

        data = response.json()
        assert data["status"] == "healthy"
        assert "timestamp" in data
        assert data["engine_version"]

    async def test_readiness_check(self, client: AsyncClient):
        """Readiness endpoint should return 200."""
        response = await client.get("/ready")
        assert response.status_code == 200
        assert response.json()["status"] == "ready"

    async def test_liveness_check(self, client: AsyncClient):
        """Liveness endpoint should return 200."""
        response = await client.get("/live")
        assert response.status_code == 200
        assert response.json()["status"] == "alive"


class TestEntryEndpoint:
    """Test single-entry calculation."""

    async def test_standard_day(self, client: AsyncClient):
        """An 8h weekday shift returns 7.5 net hours."""
        response = await client.post(
            f"{API}/entry", json={"entry": entry_payload("e1", WEEKDAY_DATES[0])}
        )
        assert response.status_code == 200

        data = response.json()
        assert data["entry_id"] == "e1"
        assert Decimal(data["gross_hours"]) == Decimal("8")
        assert Decimal(data["net_hours"]) == Decimal("7.5")
        assert data["break_source"] == "implied"
        assert Decimal(data["shift_multiplier"]) == Decimal("1")

    async def test_policy_timezone(self, client: AsyncClient):
        """The request policy's timezone decides the weekend differential."""
        body = {
            "entry": entry_payload("e1", WEEKDAY_DATES[0], "02:00", "04:00"),
            "policy": {"timezone": "America/New_York"},
        }
        response = await client.post(f"{API}/entry", json=body)

        assert response.status_code == 200
        assert Decimal(response.json()["shift_multiplier"]) == Decimal("1.25")

    async def test_open_entry_rejected(self, client: AsyncClient):
        """Open entries return 422 with the engine's error code."""
        response = await client.post(
            f"{API}/entry", json={"entry": entry_payload("e1", WEEKDAY_DATES[0], end=None)}
        )
        assert response.status_code == 422
        assert response.json()["code"] == "INCOMPLETE_ENTRY"

    async def test_naive_timestamp_rejected(self, client: AsyncClient):
        """Timestamps without an offset are rejected."""
        body = {
            "entry": {
                "entry_id": "e1",
                "worker_id": "worker-1",
                "clock_in": "2024-01-08T09:00:00",
                "clock_out": "2024-01-08T17:00:00",
            }
        }
        response = await client.post(f"{API}/entry", json=body)

        assert response.status_code == 422
        assert response.json()["code"] == "INVALID_INTERVAL"

    async def test_invalid_policy_rejected(self, client: AsyncClient):
        """Inconsistent thresholds return 422."""
        body = {
            "entry": entry_payload("e1", WEEKDAY_DATES[0]),
            "policy": {"overtime_after_hours_per_day": "14"},
        }
        response = await client.post(f"{API}/entry", json=body)

        assert response.status_code == 422
        assert response.json()["code"] == "INVALID_POLICY"

    async def test_malformed_body_rejected(self, client: AsyncClient):
        """Schema violations are rejected before calculation."""
        response = await client.post(f"{API}/entry", json={"entry": {"entry_id": "e1"}})
        assert response.status_code == 422


class TestWeekEndpoint:
    """Test weekly reconciliation."""

    async def test_six_seven_hour_days(self, client: AsyncClient):
        """Six 7h days reconcile to 40 regular + 2 overtime."""
        entries = [
            entry_payload(f"e{i}", day, "09:00", "16:30")
            for i, day in enumerate(WEEKDAY_DATES + [SATURDAY_DATE])
        ]
        response = await client.post(f"{API}/week", json={"entries": entries})
        assert response.status_code == 200

        data = response.json()
        assert data["week"] == "2024-W02"
        assert data["week_start"] == "2024-01-08"
        assert data["week_end"] == "2024-01-14"
        assert Decimal(data["regular_hours"]) == Decimal("40")
        assert Decimal(data["overtime_hours"]) == Decimal("2")
        assert len(data["allocations"]) == 6
        assert Decimal(data["allocations"][-1]["weekly_overtime_hours"]) == Decimal("2")

    async def test_mixed_workers_rejected(self, client: AsyncClient):
        """Entries of several workers return 422."""
        entries = [
            entry_payload("a1", WEEKDAY_DATES[0], worker_id="alice"),
            entry_payload("b1", WEEKDAY_DATES[1], worker_id="bob"),
        ]
        response = await client.post(f"{API}/week", json={"entries": entries})

        assert response.status_code == 422
        assert response.json()["code"] == "INVALID_ENTRY_SET"

    async def test_naive_entry_among_aware_rejected(self, client: AsyncClient):
        """A naive timestamp in a week returns 422, not a server error."""
        entries = [
            entry_payload("e1", WEEKDAY_DATES[0]),
            {
                "entry_id": "e2",
                "worker_id": "worker-1",
                "clock_in": "2024-01-09T09:00:00",
                "clock_out": "2024-01-09T17:00:00",
            },
        ]
        response = await client.post(f"{API}/week", json={"entries": entries})

        assert response.status_code == 422
        assert response.json()["code"] == "INVALID_INTERVAL"

    async def test_skip_open_entries(self, client: AsyncClient):
        """Open entries can be skipped on request."""
        entries = [
            entry_payload("e1", WEEKDAY_DATES[0]),
            entry_payload("e2", WEEKDAY_DATES[1], end=None),
        ]
        response = await client.post(
            f"{API}/week", json={"entries": entries, "skip_open_entries": True}
        )

        assert response.status_code == 200
        assert Decimal(response.json()["total_hours"]) == Decimal("7.5")


class TestPayrollEndpoint:
    """Test single-worker payroll."""

    async def test_forty_five_hour_week(self, client: AsyncClient):
        """Five 9h days at 10/h pay 475.00."""
        body = {
            "worker_id": "worker-1",
            "hourly_rate": "10",
            "entries": [
                entry_payload(f"e{i}", day, "09:00", "18:30")
                for i, day in enumerate(WEEKDAY_DATES)
            ],
        }
        response = await client.post(f"{API}/payroll", json=body)
        assert response.status_code == 200

        data = response.json()
        assert Decimal(data["regular_pay"]) == Decimal("400.00")
        assert Decimal(data["overtime_pay"]) == Decimal("75.00")
        assert Decimal(data["gross_pay"]) == Decimal("475.00")
        assert data["shift_differential_mode"] == "informational"
        UUID(data["calculation_id"])
        assert len(data["weeks"]) == 1

    async def test_calculation_id_repeatable(self, client: AsyncClient):
        """The same request yields the same calculation ID."""
        body = {
            "worker_id": "worker-1",
            "hourly_rate": "12.50",
            "entries": [entry_payload("e1", WEEKDAY_DATES[0])],
        }
        first = (await client.post(f"{API}/payroll", json=body)).json()
        second = (await client.post(f"{API}/payroll", json=body)).json()

        assert first["calculation_id"] == second["calculation_id"]
        assert first["inputs_fingerprint"] == second["inputs_fingerprint"]

    async def test_negative_rate_rejected(self, client: AsyncClient):
        """Negative rates fail schema validation."""
        body = {
            "worker_id": "worker-1",
            "hourly_rate": "-1",
            "entries": [entry_payload("e1", WEEKDAY_DATES[0])],
        }
        response = await client.post(f"{API}/payroll", json=body)
        assert response.status_code == 422

    async def test_compound_mode(self, client: AsyncClient):
        """Compound mode scales weekend overtime pay."""
        body = {
            "worker_id": "worker-1",
            "hourly_rate": "20",
            "entries": [entry_payload("e1", SATURDAY_DATE, "09:00", "19:30")],
            "policy": {"shift_differential_mode": "compound"},
        }
        response = await client.post(f"{API}/payroll", json=body)

        assert response.status_code == 200
        data = response.json()
        assert Decimal(data["regular_pay"]) == Decimal("200.00")
        assert Decimal(data["overtime_pay"]) == Decimal("75.00")


class TestPayPeriodEndpoint:
    """Test multi-worker pay periods."""

    async def test_workers_and_errors(self, client: AsyncClient):
        """Workers are calculated independently; missing rates are errors."""
        body = {
            "hourly_rates": {"alice": "10", "bob": "20"},
            "entries": [
                entry_payload("a1", WEEKDAY_DATES[0], worker_id="alice"),
                entry_payload("b1", WEEKDAY_DATES[0], worker_id="bob"),
                entry_payload("c1", WEEKDAY_DATES[0], worker_id="carol"),
            ],
            "period_start": "2024-01-08",
            "period_end": "2024-01-14",
        }
        response = await client.post(f"{API}/pay-period", json=body)
        assert response.status_code == 200

        data = response.json()
        assert Decimal(data["total_gross"]) == Decimal("225.00")
        assert set(data["results"]) == {"alice", "bob"}
        assert data["error_count"] == 1
        assert "carol" in data["errors"]
