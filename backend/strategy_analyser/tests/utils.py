"""Testing utilities for strategy analyser tests."""
from __future__ import annotations

from datetime import date
from typing import Iterable, Mapping, Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from backend.strategy_analyser.db.models import (
    DailyPnl,
    EventType,
    ParameterType,
    Strategy,
    StrategyEvent,
    StrategyMetric,
    StrategyParameter,
    StrategyRun,
    StrategyTradeSummary,
)

MAGIC_LINES_OUTPUT = """\
RTH Magic Lines Strategy 'MLS Test Run' starting
Trade Quantity: 2
Max Gain: $500
Max Loss: $300
Full Take Profit: 10pts
Full Stop Loss: 8pts
Dynamic Trim: True
SL Adjustment: True
Upside Levels: 4500.25, 4510.5
Instrument: MNQ
2024-01-02 9:45:00 AM [TRADE SUMMARY] LONG | Line: 4500.25 | Entry: 4500.25 | High: 4506.25 | Low: 4498.00 | Max Profit: 6.00pts | Max Loss: -2.25pts | Bars: 4
2024-01-02 10:15:00 AM [TP NEAR MISS] LONG | Target: 4510.25 | Closest: 0.5pts | Reason: Reversal
2024-01-02 11:05:00 AM [TRADE SUMMARY] SHORT | Line: 4510.5 | Entry: 4510.50 | High: 4512.00 | Low: 4508.50 | Max Profit: 2.00pts | Max Loss: -1.50pts | Bars: 2
2024-01-03 9:35:00 AM [TRADE SUMMARY] LONG | Line: 4520.0 | Entry: 4520.00 | High: 4520.00 | Low: 4515.00 | Max Profit: 0.00pts | Max Loss: -5.00pts | Bars: 6
2024-01-03 9:50:00 AM [SL ADJUSTMENT] Trade: 3 | LONG | Trigger: 4pts profit | Adjustment: Breakeven
2024-01-03 10:20:00 AM [FILL NEAR MISS] SHORT | Closest: 1.25pts
2024-01-03 3:59:00 PM PNL UPDATE: Daily PnL $40.00
"""

SAMPLE_OUTPUT = """\
Strategy: Sample Strategy
Run: Baseline January
Net PnL: 1,250.50
Total Trades: 42
Win Rate: 55.5%
Profit Factor: 1.8
Max Drawdown: -300.25
Sharpe Ratio: 1.2
Period: 14
Stop Loss: 2.5
Take Profit: 5
Time Frame: 5 min
Enabled: true
Near Misses: 3
Avg Trade Duration: 12.5
Consecutive Losses: 4
2024-01-02: 150.5
2024-01-03: -75.25
"""


async def get_or_create_strategy(session: AsyncSession, name: str) -> Strategy:
    result = await session.execute(select(Strategy).where(Strategy.name == name))
    strategy = result.scalars().first()
    if strategy is None:
        strategy = Strategy(name=name)
        session.add(strategy)
        await session.flush()
    return strategy


async def create_run(
    session: AsyncSession,
    *,
    strategy: str = "Alpha",
    run_name: str | None = "Run",
    net_pnl: float = 0.0,
    daily: Sequence[tuple[str, float, int]] = (),
    parameters: Mapping[str, str] | None = None,
    metrics: Mapping[str, float] | None = None,
    trades: Iterable[tuple[str, str, float]] = (),
    events: Iterable[tuple[EventType, str, str]] = (),
    is_baseline: bool = False,
    raw_data: str | None = None,
) -> StrategyRun:
    """Insert a run with the given child rows and commit it.

    ``daily`` holds ``(date, pnl, trades)``, ``trades`` holds
    ``(date, time, actual_pnl)`` and ``events`` holds ``(type, date, time)``.
    """

    owner = await get_or_create_strategy(session, strategy)
    run = StrategyRun(
        strategy_id=owner.id,
        run_name=run_name,
        net_pnl=net_pnl,
        is_baseline=is_baseline,
        raw_data=raw_data,
    )
    run.daily_pnl = [
        DailyPnl(date=date.fromisoformat(day), pnl=pnl, trades=count)
        for day, pnl, count in daily
    ]
    run.parameters = [
        StrategyParameter(
            parameter_name=name,
            parameter_value=value,
            parameter_type=ParameterType.STRING,
        )
        for name, value in (parameters or {}).items()
    ]
    run.metrics = [
        StrategyMetric(metric_name=name, metric_value=value)
        for name, value in (metrics or {}).items()
    ]
    run.trades = [
        StrategyTradeSummary(
            trade_id=str(index),
            date=date.fromisoformat(day),
            time=clock,
            direction="LONG",
            line="4500",
            entry_price=4500.0,
            high_price=4500.0 + max(pnl, 0.0) / 5,
            low_price=4500.0 - max(-pnl, 0.0) / 5,
            max_profit=max(pnl, 0.0),
            max_loss=min(pnl, 0.0),
            actual_pnl=pnl,
            bars=3,
        )
        for index, (day, clock, pnl) in enumerate(trades, start=1)
    ]
    run.events = [
        StrategyEvent(event_type=kind, date=date.fromisoformat(day), time=clock)
        for kind, day, clock in events
    ]
    session.add(run)
    await session.commit()
    return run
