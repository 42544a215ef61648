"""Tests for the readiness probe (src/authhub/core/health.py)."""

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from src.authhub.core.health import ReadinessProbe, setup_health_endpoint

pytestmark = pytest.mark.unit


class FakeClock:
    def __init__(self):
        self.now = 100.0

    def __call__(self) -> float:
        return self.now


class TestReadinessProbe:
    async def test_result_is_cached_within_ttl(self):
        calls = []

        async def check():
            calls.append(1)
            return "healthy"

        clock = FakeClock()
        probe = ReadinessProbe(check=check, ttl=10, clock=clock)

        first, first_status = await probe.run()
        clock.now += 4
        second, _ = await probe.run()

        assert first_status == 200
        assert first["cached"] is False
        assert second["cached"] is True
        assert second["cache_age_seconds"] == 4.0
        assert len(calls) == 1

    async def test_cache_expires(self):
        results = iter(["healthy", "unhealthy: connection refused"])

        async def check():
            return next(results)

        clock = FakeClock()
        probe = ReadinessProbe(check=check, ttl=10, clock=clock)

        await probe.run()
        clock.now += 11
        body, status_code = await probe.run()

        assert status_code == 503
        assert body["database"] == "unhealthy: connection refused"

    async def test_reset_forces_a_fresh_check(self):
        calls = []

        async def check():
            calls.append(1)
            return "healthy"

        probe = ReadinessProbe(check=check, clock=FakeClock())

        await probe.run()
        probe.reset()
        await probe.run()

        assert len(calls) == 2


async def test_health_endpoint_reports_unhealthy_database():
    async def check():
        return "unhealthy: timeout"

    app = FastAPI()
    setup_health_endpoint(app, ReadinessProbe(check=check))

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        response = await client.get("/health")

    assert response.status_code == 503
    assert response.json()["status"] == "unhealthy"
