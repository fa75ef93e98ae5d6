from __future__ import annotations

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from backend.strategy_analyser.db.models import StrategyRun

from backend.strategy_analyser.tests.utils import create_run


async def _baseline_ids(session, strategy_id: int) -> list[int]:
    result = await session.execute(
        select(StrategyRun.id)
        .where(StrategyRun.strategy_id == strategy_id, StrategyRun.is_baseline.is_(True))
        .order_by(StrategyRun.id)
    )
    return list(result.scalars().all())


@pytest.mark.asyncio
async def test_setting_baseline_clears_previous_one(app, db_session) -> None:
    first = await create_run(db_session, strategy="Alpha", run_name="A1", is_baseline=True)
    second = await create_run(db_session, strategy="Alpha", run_name="A2")
    other = await create_run(db_session, strategy="Beta", run_name="B1", is_baseline=True)

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver") as client:
        response = await client.post("/runs/baseline", json={"runId": second.id, "isBaseline": True})
        assert response.status_code == 200
        assert response.json() == {"success": True, "message": "Run set as baseline"}

        baseline = await client.get("/runs/baseline", params={"strategyId": first.strategy_id})
        assert baseline.json()["baselineRun"]["id"] == second.id
        assert baseline.json()["baselineRun"]["is_baseline"] is True
        assert baseline.json()["baselineRun"]["strategy_name"] == "Alpha"

    assert await _baseline_ids(db_session, first.strategy_id) == [second.id]
    assert await _baseline_ids(db_session, other.strategy_id) == [other.id]


@pytest.mark.asyncio
async def test_unsetting_baseline(app, db_session) -> None:
    run = await create_run(db_session, is_baseline=True)

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver") as client:
        response = await client.post("/runs/baseline", json={"runId": run.id, "isBaseline": False})
        assert response.json()["message"] == "Run unset as baseline"

        baseline = await client.get("/runs/baseline", params={"strategyId": run.strategy_id})
        assert baseline.status_code == 200
        assert baseline.json() == {"success": True, "baselineRun": None}


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "body",
    [
        {"isBaseline": True},
        {"runId": 1},
        {"runId": 1, "isBaseline": "yes"},
        {"runId": 1, "isBaseline": 1},
    ],
)
async def test_baseline_requires_run_id_and_boolean(app, body) -> None:
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver") as client:
        response = await client.post("/runs/baseline", json=body)

    assert response.status_code == 400
    assert response.json()["detail"] == "Invalid request. runId and isBaseline are required."


@pytest.mark.asyncio
async def test_baseline_for_unknown_run(app) -> None:
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver") as client:
        response = await client.post("/runs/baseline", json={"runId": 424242, "isBaseline": True})

    assert response.status_code == 404
    assert response.json()["detail"] == "Run not found"


@pytest.mark.asyncio
async def test_baseline_lookup_without_filter(app, db_session) -> None:
    await create_run(db_session, strategy="Alpha")
    flagged = await create_run(db_session, strategy="Beta", is_baseline=True)

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver") as client:
        response = await client.get("/runs/baseline")

    assert response.json()["baselineRun"]["id"] == flagged.id


@pytest.mark.asyncio
async def test_database_rejects_second_baseline_for_strategy(db_session) -> None:
    first = await create_run(db_session, strategy="Alpha", run_name="A1", is_baseline=True)
    await create_run(db_session, strategy="Beta", run_name="B1", is_baseline=True)
    await create_run(db_session, strategy="Alpha", run_name="A2")
    first_id, strategy_id = first.id, first.strategy_id

    with pytest.raises(IntegrityError):
        await create_run(db_session, strategy="Alpha", run_name="A3", is_baseline=True)
    await db_session.rollback()

    assert await _baseline_ids(db_session, strategy_id) == [first_id]
