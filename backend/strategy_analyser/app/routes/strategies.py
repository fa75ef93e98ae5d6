"""Routes exposing strategies and their notes."""
from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ...db.models import Strategy, StrategyRun
from ..dependencies import get_session, parse_strategy_id
from ..logging import get_logger
from ..schemas.runs import MessageResponse
from ..schemas.strategies import (
    NotesResponse,
    NotesUpdate,
    StrategiesResponse,
    StrategyOverview,
)

logger = get_logger("strategy_analyser.strategies")
router = APIRouter(prefix="/strategies", tags=["strategies"])


async def _get_strategy(session: AsyncSession, strategy_id: int) -> Strategy:
    result = await session.execute(
        select(Strategy)
        .where(Strategy.id == strategy_id)
        .execution_options(populate_existing=True)
    )
    strategy = result.scalars().first()
    if strategy is None:
        raise HTTPException(status.HTTP_404_NOT_FOUND, detail="Strategy not found")
    return strategy


@router.get("", response_model=StrategiesResponse)
async def list_strategies(session: AsyncSession = Depends(get_session)) -> StrategiesResponse:
    stmt = (
        select(
            Strategy.id,
            Strategy.name,
            Strategy.description,
            Strategy.created_at,
            func.count(StrategyRun.id).label("run_count"),
            func.avg(StrategyRun.net_pnl).label("avg_net_pnl"),
            func.max(StrategyRun.net_pnl).label("best_net_pnl"),
            func.min(StrategyRun.net_pnl).label("worst_net_pnl"),
        )
        .outerjoin(StrategyRun, StrategyRun.strategy_id == Strategy.id)
        .group_by(Strategy.id, Strategy.name, Strategy.description, Strategy.created_at)
        .order_by(Strategy.created_at.desc(), Strategy.id.desc())
    )
    result = await session.execute(stmt)
    return StrategiesResponse(
        strategies=[StrategyOverview.model_validate(row) for row in result.all()]
    )


@router.get("/{strategy_id}/notes", response_model=NotesResponse)
async def get_strategy_notes(
    strategy_id: str, session: AsyncSession = Depends(get_session)
) -> NotesResponse:
    strategy = await _get_strategy(session, parse_strategy_id(strategy_id))
    return NotesResponse(notes=strategy.notes or "")


@router.put("/{strategy_id}/notes", response_model=MessageResponse)
async def update_strategy_notes(
    strategy_id: str,
    payload: NotesUpdate,
    session: AsyncSession = Depends(get_session),
) -> MessageResponse:
    strategy = await _get_strategy(session, parse_strategy_id(strategy_id))
    strategy.notes = payload.notes or ""
    strategy.updated_at = func.now()
    await session.commit()
    logger.info("strategy_notes_updated", strategy_id=strategy.id)
    return MessageResponse(message="Notes updated successfully")
