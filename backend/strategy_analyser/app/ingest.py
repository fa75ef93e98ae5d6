"""Persist parsed strategy output as a run with all of its child rows."""
from __future__ import annotations

from datetime import date
from typing import Dict, Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ..db.models import (
    DailyPnl,
    Strategy,
    StrategyEvent,
    StrategyMetric,
    StrategyParameter,
    StrategyRun,
    StrategyTradeSummary,
)
from .logging import get_logger
from .parsers.base import ParsedDailyPnl, ParsedRun

logger = get_logger("strategy_analyser.ingest")


def _to_date(value: str) -> Optional[date]:
    try:
        return date.fromisoformat(value)
    except ValueError:
        return None


async def get_or_create_strategy(
    session: AsyncSession, name: str, *, description: Optional[str] = None
) -> Strategy:
    """Return the strategy called ``name``, adding it to the session when missing."""

    result = await session.execute(select(Strategy).where(Strategy.name == name))
    strategy = result.scalars().first()
    if strategy is None:
        strategy = Strategy(name=name, description=description)
        session.add(strategy)
        await session.flush()
    return strategy


def _combine_daily(rows: list[ParsedDailyPnl]) -> Dict[date, DailyPnl]:
    # One row per date; repeated dates are summed.
    combined: Dict[date, DailyPnl] = {}
    for row in rows:
        day = _to_date(row.date)
        if day is None:
            logger.warning("daily_pnl_date_skipped", date=row.date)
            continue
        existing = combined.get(day)
        if existing is None:
            combined[day] = DailyPnl(
                date=day,
                pnl=row.pnl,
                trades=row.trades or 0,
                highest_intraday_pnl=row.highest_intraday_pnl,
                lowest_intraday_pnl=row.lowest_intraday_pnl,
            )
            continue
        existing.pnl += row.pnl
        existing.trades += row.trades or 0
    return combined


async def store_parsed_run(
    session: AsyncSession,
    parsed: ParsedRun,
    *,
    raw_data: Optional[str] = None,
    run_description: Optional[str] = None,
) -> StrategyRun:
    """Store ``parsed`` and its child rows in a single transaction."""

    try:
        strategy = await get_or_create_strategy(session, parsed.strategy_name)

        run = StrategyRun(
            strategy_id=strategy.id,
            run_name=parsed.run_name,
            run_description=run_description or parsed.run_description,
            net_pnl=parsed.net_pnl,
            total_trades=parsed.total_trades,
            win_rate=parsed.win_rate,
            profit_factor=parsed.profit_factor,
            max_drawdown=parsed.max_drawdown,
            sharpe_ratio=parsed.sharpe_ratio,
            raw_data=raw_data,
        )
        run.daily_pnl = list(_combine_daily(parsed.daily_pnl).values())
        run.parameters = [
            StrategyParameter(
                parameter_name=param.name,
                parameter_value=param.value,
                parameter_type=param.type,
            )
            for param in parsed.parameters
        ]
        run.metrics = [
            StrategyMetric(
                metric_name=metric.name,
                metric_value=metric.value,
                metric_description=metric.description,
            )
            for metric in parsed.custom_metrics
        ]

        events = []
        for event in parsed.events:
            day = _to_date(event.date)
            if day is None:
                logger.warning("event_date_skipped", date=event.date)
                continue
            events.append(
                StrategyEvent(
                    event_type=event.event_type,
                    date=day,
                    time=event.time,
                    trade_id=event.trade_id,
                    direction=event.direction,
                    target=event.target,
                    closest_distance=event.closest_distance,
                    reason=event.reason,
                    trigger=event.trigger,
                    adjustment=event.adjustment,
                )
            )
        run.events = events

        trades = []
        for trade in parsed.trades:
            day = _to_date(trade.date)
            if day is None:
                logger.warning("trade_date_skipped", date=trade.date)
                continue
            trades.append(
                StrategyTradeSummary(
                    trade_id=trade.trade_id,
                    date=day,
                    time=trade.time,
                    direction=trade.direction,
                    line=trade.line,
                    entry_price=trade.entry,
                    high_price=trade.high,
                    low_price=trade.low,
                    max_profit=trade.max_profit,
                    max_loss=trade.max_loss,
                    actual_pnl=trade.actual_pnl,
                    bars=trade.bars,
                    max_profit_vs_target=trade.max_profit_vs_target,
                    max_loss_vs_stop=trade.max_loss_vs_stop,
                    profit_efficiency=trade.profit_efficiency,
                )
            )
        run.trades = trades

        session.add(run)
        await session.commit()
    except IntegrityError:
        await session.rollback()
        raise

    logger.info(
        "run_ingested",
        run_id=run.id,
        strategy=strategy.name,
        days=len(run.daily_pnl),
        trades=len(run.trades),
        events=len(run.events),
    )
    return run


__all__ = ["get_or_create_strategy", "store_parsed_run"]
