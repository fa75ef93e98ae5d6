"""Routes for listing, editing and inspecting strategy runs."""
from __future__ import annotations

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from ...db.models import (
    DailyPnl,
    EventType,
    Strategy,
    StrategyEvent,
    StrategyMetric,
    StrategyParameter,
    StrategyRun,
    StrategyTradeSummary,
)
from ..dates import is_iso_date
from ..dependencies import get_session, parse_run_id, parse_strategy_id
from ..logging import get_logger
from ..parsers import parser_registry
from ..raw_data import extract_date_specific_data
from ..schemas.runs import (
    BaselineResponse,
    BaselineUpdate,
    DailyPnlResponse,
    DailyPnlRow,
    DateRawDataResponse,
    DayEventRow,
    DaySummaryRow,
    DayTradeRow,
    EventsResponse,
    FillNearMiss,
    MessageResponse,
    MetricRow,
    MetricsResponse,
    ParameterRow,
    ParametersResponse,
    RawDataResponse,
    RunDescriptionUpdate,
    RunSummary,
    RunsResponse,
    SlAdjustment,
    TpNearMiss,
    TradeRow,
    TradesResponse,
)

logger = get_logger("strategy_analyser.runs")
router = APIRouter(prefix="/runs", tags=["runs"])


def _summary(run: StrategyRun, strategy_name: str) -> RunSummary:
    return RunSummary(
        id=run.id,
        strategy_id=run.strategy_id,
        strategy_name=strategy_name,
        run_name=run.run_name,
        run_description=run.run_description,
        net_pnl=run.net_pnl,
        total_trades=run.total_trades,
        win_rate=run.win_rate,
        profit_factor=run.profit_factor,
        max_drawdown=run.max_drawdown,
        sharpe_ratio=run.sharpe_ratio,
        is_baseline=run.is_baseline,
        created_at=run.created_at,
    )


def _runs_with_strategy():
    return (
        select(StrategyRun, Strategy.name)
        .join(Strategy, StrategyRun.strategy_id == Strategy.id)
        .execution_options(populate_existing=True)
    )


async def _get_run(session: AsyncSession, run_id: int) -> StrategyRun:
    result = await session.execute(
        select(StrategyRun)
        .where(StrategyRun.id == run_id)
        .execution_options(populate_existing=True)
    )
    run = result.scalars().first()
    if run is None:
        raise HTTPException(status.HTTP_404_NOT_FOUND, detail="Run not found")
    return run


@router.get("", response_model=RunsResponse)
async def list_runs(
    strategy_id: Optional[str] = Query(default=None, alias="strategyId"),
    session: AsyncSession = Depends(get_session),
) -> RunsResponse:
    stmt = _runs_with_strategy()
    if strategy_id:
        stmt = stmt.where(StrategyRun.strategy_id == parse_strategy_id(strategy_id))
    stmt = stmt.order_by(StrategyRun.created_at.desc(), StrategyRun.id.desc())
    result = await session.execute(stmt)
    return RunsResponse(runs=[_summary(run, name) for run, name in result.all()])


@router.patch("", response_model=MessageResponse)
async def update_run_description(
    payload: RunDescriptionUpdate,
    session: AsyncSession = Depends(get_session),
) -> MessageResponse:
    if payload.run_id in (None, ""):
        raise HTTPException(status.HTTP_400_BAD_REQUEST, detail="Run ID is required")
    run = await _get_run(session, parse_run_id(payload.run_id))
    run.run_description = payload.run_description or None
    await session.commit()
    logger.info("run_description_updated", run_id=run.id)
    return MessageResponse(message="Run description updated successfully")


@router.delete("", response_model=MessageResponse)
async def delete_run(
    run_id: Optional[str] = Query(default=None, alias="runId"),
    session: AsyncSession = Depends(get_session),
) -> MessageResponse:
    if not run_id:
        raise HTTPException(status.HTTP_400_BAD_REQUEST, detail="Run ID is required")
    run = await _get_run(session, parse_run_id(run_id))
    deleted_id = run.id
    await session.delete(run)
    await session.commit()
    logger.info("run_deleted", run_id=deleted_id)
    return MessageResponse(message="Run deleted successfully")


@router.get("/baseline", response_model=BaselineResponse)
async def get_baseline_run(
    strategy_id: Optional[str] = Query(default=None, alias="strategyId"),
    session: AsyncSession = Depends(get_session),
) -> BaselineResponse:
    stmt = _runs_with_strategy().where(StrategyRun.is_baseline.is_(True))
    if strategy_id:
        stmt = stmt.where(StrategyRun.strategy_id == parse_strategy_id(strategy_id))
    result = await session.execute(stmt.order_by(StrategyRun.id))
    row = result.first()
    if row is None:
        return BaselineResponse(baseline_run=None)
    run, name = row
    return BaselineResponse(baseline_run=_summary(run, name))


@router.post("/baseline", response_model=MessageResponse)
async def set_baseline_run(
    payload: BaselineUpdate,
    session: AsyncSession = Depends(get_session),
) -> MessageResponse:
    if payload.run_id in (None, "") or not isinstance(payload.is_baseline, bool):
        raise HTTPException(
            status.HTTP_400_BAD_REQUEST,
            detail="Invalid request. runId and isBaseline are required.",
        )
    run = await _get_run(session, parse_run_id(payload.run_id))

    try:
        if payload.is_baseline:
            await session.execute(
                update(StrategyRun)
                .where(
                    StrategyRun.strategy_id == run.strategy_id,
                    StrategyRun.is_baseline.is_(True),
                    StrategyRun.id != run.id,
                )
                .values(is_baseline=False)
            )
        run.is_baseline = payload.is_baseline
        await session.commit()
    except Exception:
        await session.rollback()
        raise

    logger.info(
        "baseline_updated",
        run_id=run.id,
        strategy_id=run.strategy_id,
        is_baseline=payload.is_baseline,
    )
    message = "Run set as baseline" if payload.is_baseline else "Run unset as baseline"
    return MessageResponse(message=message)


@router.get("/{run_id}/daily-pnl", response_model=DailyPnlResponse)
async def get_daily_pnl(
    run_id: str, session: AsyncSession = Depends(get_session)
) -> DailyPnlResponse:
    result = await session.execute(
        select(DailyPnl).where(DailyPnl.run_id == parse_run_id(run_id)).order_by(DailyPnl.date)
    )
    rows = [DailyPnlRow.model_validate(row) for row in result.scalars().all()]
    return DailyPnlResponse(daily_pnl=rows)


@router.get("/{run_id}/parameters", response_model=ParametersResponse)
async def get_parameters(
    run_id: str, session: AsyncSession = Depends(get_session)
) -> ParametersResponse:
    result = await session.execute(
        select(StrategyParameter)
        .where(StrategyParameter.run_id == parse_run_id(run_id))
        .order_by(StrategyParameter.parameter_name)
    )
    return ParametersResponse(
        parameters=[ParameterRow.model_validate(row) for row in result.scalars().all()]
    )


@router.get("/{run_id}/metrics", response_model=MetricsResponse)
async def get_metrics(run_id: str, session: AsyncSession = Depends(get_session)) -> MetricsResponse:
    result = await session.execute(
        select(StrategyMetric)
        .where(StrategyMetric.run_id == parse_run_id(run_id))
        .order_by(StrategyMetric.metric_name)
    )
    return MetricsResponse(metrics=[MetricRow.model_validate(row) for row in result.scalars().all()])


@router.get("/{run_id}/events", response_model=EventsResponse)
async def get_events(run_id: str, session: AsyncSession = Depends(get_session)) -> EventsResponse:
    result = await session.execute(
        select(StrategyEvent)
        .where(StrategyEvent.run_id == parse_run_id(run_id))
        .order_by(StrategyEvent.date, StrategyEvent.time, StrategyEvent.id)
    )
    response = EventsResponse()
    for event in result.scalars().all():
        if event.event_type is EventType.TP_NEAR_MISS:
            response.tp_near_misses.append(TpNearMiss.model_validate(event))
        elif event.event_type is EventType.FILL_NEAR_MISS:
            response.fill_near_misses.append(FillNearMiss.model_validate(event))
        elif event.event_type is EventType.SL_ADJUSTMENT:
            response.sl_adjustments.append(SlAdjustment.model_validate(event))
    return response


@router.get("/{run_id}/trades", response_model=TradesResponse)
async def get_trades(run_id: str, session: AsyncSession = Depends(get_session)) -> TradesResponse:
    result = await session.execute(
        select(StrategyTradeSummary)
        .where(StrategyTradeSummary.run_id == parse_run_id(run_id))
        .order_by(StrategyTradeSummary.date, StrategyTradeSummary.time, StrategyTradeSummary.id)
    )
    return TradesResponse(trades=[TradeRow.model_validate(row) for row in result.scalars().all()])


@router.get("/{run_id}/raw-data", response_model=RawDataResponse)
async def get_raw_data(run_id: str, session: AsyncSession = Depends(get_session)) -> RawDataResponse:
    run = await _get_run(session, parse_run_id(run_id))
    return RawDataResponse(
        raw_data=run.raw_data,
        run_name=run.run_name,
        run_description=run.run_description,
        created_at=run.created_at,
    )


@router.get("/{run_id}/raw-data/date/{day}", response_model=DateRawDataResponse)
async def get_raw_data_for_date(
    run_id: str, day: str, session: AsyncSession = Depends(get_session)
) -> DateRawDataResponse:
    parsed_id = parse_run_id(run_id)
    if not is_iso_date(day):
        raise HTTPException(
            status.HTTP_400_BAD_REQUEST, detail="Invalid date format. Expected YYYY-MM-DD"
        )

    run = await _get_run(session, parsed_id)
    if not run.raw_data:
        raise HTTPException(
            status.HTTP_404_NOT_FOUND, detail="No raw data available for this run"
        )

    parsed = parser_registry.parse_raw_data(run.raw_data)
    if parsed is None:
        logger.error("raw_data_unparseable", run_id=run.id)
        raise HTTPException(
            status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Unable to parse raw data"
        )

    target = date.fromisoformat(day)
    extracted = extract_date_specific_data(run.raw_data, target, parsed)
    return DateRawDataResponse(
        date=target,
        run_name=run.run_name,
        run_description=run.run_description,
        created_at=run.created_at,
        date_specific_raw_data=extracted.raw_lines,
        trades=[DayTradeRow.model_validate(trade) for trade in extracted.trades],
        events=[DayEventRow.model_validate(event) for event in extracted.events],
        summary=DaySummaryRow.model_validate(extracted.summary),
    )
