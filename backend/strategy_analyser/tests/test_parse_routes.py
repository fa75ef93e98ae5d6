from __future__ import annotations

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import func, select

from backend.strategy_analyser.db.models import Strategy, StrategyRun

from backend.strategy_analyser.tests.utils import MAGIC_LINES_OUTPUT, SAMPLE_OUTPUT


@pytest.mark.asyncio
async def test_parse_stores_magic_lines_run(app, db_session) -> None:
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver") as client:
        response = await client.post(
            "/parse",
            json={"rawData": MAGIC_LINES_OUTPUT, "runDescription": "first upload"},
        )
        assert response.status_code == 200
        payload = response.json()
        run_id = payload["runId"]

        assert payload["success"] is True
        assert payload["strategyName"] == "MagicLinesScalper"
        assert payload["summary"] == {
            "totalTrades": 3,
            "netPnl": pytest.approx(40.0),
            "winRate": pytest.approx(2 / 3),
            "profitFactor": None,
            "maxDrawdown": 0.0,
            "days": 2,
        }

        daily = (await client.get(f"/runs/{run_id}/daily-pnl")).json()["dailyPnl"]
        assert [(row["date"], row["pnl"], row["trades"]) for row in daily] == [
            ("2024-01-02", 40.0, 2),
            ("2024-01-03", 0.0, 1),
        ]
        assert daily[0]["highest_intraday_pnl"] == pytest.approx(40.0)

        trades = (await client.get(f"/runs/{run_id}/trades")).json()["trades"]
        assert [trade["tradeId"] for trade in trades] == ["1", "2", "3"]
        assert trades[0]["actualPnl"] == pytest.approx(30.0)
        assert trades[0]["entryPrice"] == pytest.approx(4500.25)
        assert trades[0]["maxProfitVsTarget"] == pytest.approx(0.6)

        events = (await client.get(f"/runs/{run_id}/events")).json()
        assert len(events["tpNearMisses"]) == 1
        assert events["tpNearMisses"][0]["closestDistance"] == "0.5pts"
        assert events["tpNearMisses"][0]["reason"] == "Reversal"
        assert events["fillNearMisses"][0]["direction"] == "SHORT"
        assert events["slAdjustments"][0]["tradeId"] == "3"
        assert events["slAdjustments"][0]["adjustment"] == "Breakeven"

        parameters = (await client.get(f"/runs/{run_id}/parameters")).json()["parameters"]
        names = [row["parameter_name"] for row in parameters]
        assert names == sorted(names)
        by_name = {row["parameter_name"]: row for row in parameters}
        assert by_name["Trade Quantity"]["parameter_type"] == "number"
        assert by_name["Dynamic Trim"]["parameter_type"] == "boolean"

        metrics = (await client.get(f"/runs/{run_id}/metrics")).json()["metrics"]
        values = {row["metric_name"]: row["metric_value"] for row in metrics}
        assert values["Near Misses"] == 1
        assert values["Best Trade"] == pytest.approx(30.0)

    run = await db_session.get(StrategyRun, run_id)
    assert run is not None
    assert run.raw_data == MAGIC_LINES_OUTPUT
    assert run.run_name == "MLS Test Run"
    assert run.run_description == "first upload"


@pytest.mark.asyncio
async def test_parse_reuses_existing_strategy(app, db_session) -> None:
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver") as client:
        first = await client.post("/parse", json={"rawData": SAMPLE_OUTPUT})
        second = await client.post("/parse", json={"rawData": SAMPLE_OUTPUT})

    assert first.status_code == 200
    assert second.status_code == 200
    assert first.json()["runId"] != second.json()["runId"]
    assert first.json()["summary"]["winRate"] == pytest.approx(0.555)

    count = await db_session.scalar(
        select(func.count()).select_from(Strategy).where(Strategy.name == "Sample Strategy")
    )
    assert count == 1


@pytest.mark.asyncio
@pytest.mark.parametrize("body", [{}, {"rawData": ""}, {"rawData": 42}])
async def test_parse_requires_string_raw_data(app, body) -> None:
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver") as client:
        response = await client.post("/parse", json=body)

    assert response.status_code == 400
    assert response.json()["detail"] == "Raw data is required and must be a string"


@pytest.mark.asyncio
async def test_parse_rejects_unknown_output(app) -> None:
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver") as client:
        response = await client.post("/parse", json={"rawData": "just some text"})

    assert response.status_code == 400
    assert "No suitable parser found" in response.json()["detail"]


@pytest.mark.asyncio
async def test_raw_data_routes(app) -> None:
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver") as client:
        created = await client.post("/parse", json={"rawData": MAGIC_LINES_OUTPUT})
        run_id = created.json()["runId"]

        raw = await client.get(f"/runs/{run_id}/raw-data")
        assert raw.status_code == 200
        assert raw.json()["rawData"] == MAGIC_LINES_OUTPUT
        assert raw.json()["runName"] == "MLS Test Run"
        assert raw.json()["createdAt"]

        day = await client.get(f"/runs/{run_id}/raw-data/date/2024-01-03")
        assert day.status_code == 200
        payload = day.json()
        assert payload["date"] == "2024-01-03"
        assert len(payload["dateSpecificRawData"]) == 4
        assert payload["trades"][0]["maxLoss"] == pytest.approx(-5.0)
        assert payload["summary"] == {
            "totalTrades": 1,
            "totalPnl": pytest.approx(40.0),
            "winningTrades": 1,
            "losingTrades": 0,
        }

        bad_date = await client.get(f"/runs/{run_id}/raw-data/date/2024-1-3")
        assert bad_date.status_code == 400

        missing = await client.get("/runs/999999/raw-data")
        assert missing.status_code == 404

        invalid = await client.get("/runs/abc/raw-data")
        assert invalid.status_code == 400
        assert invalid.json()["detail"] == "Invalid run ID"
