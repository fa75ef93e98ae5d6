from __future__ import annotations

import pytest
from httpx import ASGITransport, AsyncClient

from backend.strategy_analyser.tests.utils import create_run, get_or_create_strategy


@pytest.mark.asyncio
async def test_list_strategies_with_run_aggregates(app, db_session) -> None:
    await create_run(db_session, strategy="Alpha", net_pnl=100.0)
    await create_run(db_session, strategy="Alpha", net_pnl=-20.0)
    await create_run(db_session, strategy="Alpha", net_pnl=40.0)
    empty = await get_or_create_strategy(db_session, "Beta")
    await db_session.commit()

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver") as client:
        response = await client.get("/strategies")

    assert response.status_code == 200
    strategies = {item["name"]: item for item in response.json()["strategies"]}
    alpha = strategies["Alpha"]
    assert alpha["run_count"] == 3
    assert alpha["avg_net_pnl"] == pytest.approx(40.0)
    assert alpha["best_net_pnl"] == pytest.approx(100.0)
    assert alpha["worst_net_pnl"] == pytest.approx(-20.0)

    beta = strategies["Beta"]
    assert beta["id"] == empty.id
    assert beta["run_count"] == 0
    assert beta["avg_net_pnl"] is None
    assert response.json()["strategies"][0]["name"] == "Beta"


@pytest.mark.asyncio
async def test_strategy_notes_round_trip(app, db_session) -> None:
    strategy = await get_or_create_strategy(db_session, "Alpha")
    await db_session.commit()

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver") as client:
        initial = await client.get(f"/strategies/{strategy.id}/notes")
        assert initial.status_code == 200
        assert initial.json() == {"success": True, "notes": ""}

        updated = await client.put(
            f"/strategies/{strategy.id}/notes", json={"notes": "tighten stops after FOMC"}
        )
        assert updated.status_code == 200
        assert updated.json() == {"success": True, "message": "Notes updated successfully"}

        stored = await client.get(f"/strategies/{strategy.id}/notes")
        assert stored.json()["notes"] == "tighten stops after FOMC"

        cleared = await client.put(f"/strategies/{strategy.id}/notes", json={"notes": None})
        assert cleared.status_code == 200
        assert (await client.get(f"/strategies/{strategy.id}/notes")).json()["notes"] == ""


@pytest.mark.asyncio
@pytest.mark.parametrize("method", ["get", "put"])
async def test_strategy_notes_errors(app, method: str) -> None:
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver") as client:
        send = getattr(client, method)
        kwargs = {"json": {"notes": "x"}} if method == "put" else {}
        invalid = await send("/strategies/abc/notes", **kwargs)
        missing = await send("/strategies/31337/notes", **kwargs)

    assert invalid.status_code == 400
    assert invalid.json()["detail"] == "Invalid strategy ID"
    assert missing.status_code == 404
    assert missing.json()["detail"] == "Strategy not found"
