"""Readiness and Prometheus metrics endpoints."""

import secrets
import time
from collections.abc import Awaitable, Callable
from typing import Any

from fastapi import Depends, FastAPI, HTTPException, status
from fastapi.responses import JSONResponse
from fastapi.security import APIKeyHeader
from prometheus_fastapi_instrumentator import Instrumentator
from sqlalchemy import text

from src.authhub.core.config import get_settings
from src.authhub.core.db import get_session
from src.authhub.core.logging import get_logger

logger = get_logger(__name__)

HEALTH_CACHE_TTL = 10  # seconds


async def check_database() -> str:
    try:
        async with get_session() as session:
            await session.execute(text("SELECT 1"))
    except Exception as e:
        logger.warning("Database health check failed", error=str(e))
        return f"unhealthy: {e!s}"
    return "healthy"


class ReadinessProbe:
    """Database probe whose result is reused for ``ttl`` seconds."""

    def __init__(
        self,
        check: Callable[[], Awaitable[str]] = check_database,
        ttl: float = HEALTH_CACHE_TTL,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.check = check
        self.ttl = ttl
        self.clock = clock
        self._last: dict[str, Any] | None = None
        self._checked_at = 0.0

    def reset(self) -> None:
        self._last = None
        self._checked_at = 0.0

    async def run(self) -> tuple[dict[str, Any], int]:
        now = self.clock()
        age = now - self._checked_at
        if self._last is not None and age < self.ttl:
            body = {**self._last, "cached": True, "cache_age_seconds": round(age, 1)}
        else:
            database = await self.check()
            body = {
                "status": "healthy" if database == "healthy" else "unhealthy",
                "database": database,
                "cached": False,
            }
            self._last = body
            self._checked_at = now
        return body, 200 if body["status"] == "healthy" else 503


readiness_probe = ReadinessProbe()


def setup_health_endpoint(app: FastAPI, probe: ReadinessProbe = readiness_probe) -> None:
    @app.get("/health", include_in_schema=False)
    async def health() -> JSONResponse:
        body, status_code = await probe.run()
        return JSONResponse(content=body, status_code=status_code)


def _metrics_key_guard(expected: str):
    header = APIKeyHeader(name="X-Metrics-Key", auto_error=False)

    async def guard(api_key: str | None = Depends(header)) -> None:
        if api_key is None or not secrets.compare_digest(api_key, expected):
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Invalid or missing metrics API key",
            )

    return guard


def setup_metrics(app: FastAPI) -> None:
    """Expose Prometheus metrics, behind ``X-Metrics-Key`` when one is configured."""
    settings = get_settings()
    instrumentator = Instrumentator(excluded_handlers=["/health", "/metrics"]).instrument(app)

    dependencies = []
    if settings.metrics_api_key:
        dependencies.append(Depends(_metrics_key_guard(settings.metrics_api_key)))
    instrumentator.expose(app, endpoint="/metrics", dependencies=dependencies)
