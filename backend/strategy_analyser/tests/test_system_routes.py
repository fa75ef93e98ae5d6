from __future__ import annotations

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.exc import OperationalError

from backend.strategy_analyser.app.config import settings
from backend.strategy_analyser.app.dependencies import get_session


class _UnavailableSession:
    async def execute(self, *args, **kwargs):
        raise OperationalError("SELECT 1", {}, Exception("database is down"))


@pytest.mark.asyncio
async def test_health_status_reports_database(app) -> None:
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver") as client:
        response = await client.get("/system/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok", "env": settings.env, "database": "ok"}


@pytest.mark.asyncio
async def test_health_status_degrades_without_database(app) -> None:
    async def _broken_session():
        yield _UnavailableSession()

    app.dependency_overrides[get_session] = _broken_session

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver") as client:
        response = await client.get("/system/health")

    assert response.status_code == 200
    assert response.json()["status"] == "degraded"
    assert response.json()["database"] == "error"


@pytest.mark.asyncio
async def test_available_parsers(app) -> None:
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver") as client:
        response = await client.get("/system/parsers")

    assert response.status_code == 200
    assert response.json() == {
        "success": True,
        "parsers": ["MagicLinesScalper", "Sample Strategy"],
    }


@pytest.mark.asyncio
async def test_unknown_route_returns_not_found(app) -> None:
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver") as client:
        response = await client.get("/does-not-exist")

    assert response.status_code == 404
