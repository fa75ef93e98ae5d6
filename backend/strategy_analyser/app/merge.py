"""Validation and execution of strategy run merges."""
from __future__ import annotations

import re
from collections import OrderedDict
from dataclasses import dataclass
from datetime import date
from typing import Any, Dict, Iterable, List, Optional, Sequence

from sqlalchemy import func, select
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
from . import metrics
from .dates import ranges_overlap
from .errors import MergeError, NotFoundError
from .logging import get_logger

logger = get_logger("strategy_analyser.merge")

MISSING = "MISSING"

_AVERAGED = {"rate", "ratio", "efficiency", "average", "avg"}
_MAXIMISED = {"best", "max", "maximum", "highest"}
_MINIMISED = {"worst", "min", "minimum", "lowest"}
_WORD = re.compile(r"[a-z]+")
_INTEGER = re.compile(r"[+-]?\d+", re.ASCII)


@dataclass
class RunDateRange:
    run_id: int
    start_date: str
    end_date: str

    def as_dict(self) -> Dict[str, Any]:
        return {"runId": self.run_id, "startDate": self.start_date, "endDate": self.end_date}


def normalise_run_ids(values: Any) -> List[int]:
    """Coerce the requested ids to integers, rejecting short, malformed or repeated lists."""

    if not isinstance(values, (list, tuple)) or len(values) < 2:
        raise MergeError("At least 2 run IDs are required for merging")

    run_ids: List[int] = []
    for value in values:
        if isinstance(value, bool):
            raise MergeError("All run IDs must be valid numbers")
        if isinstance(value, int):
            run_ids.append(value)
            continue
        if isinstance(value, str) and _INTEGER.fullmatch(value.strip()):
            run_ids.append(int(value.strip()))
            continue
        raise MergeError("All run IDs must be valid numbers")

    if len(set(run_ids)) != len(run_ids):
        raise MergeError("Run IDs must be unique")
    return run_ids


def merge_metric_values(name: str, values: Sequence[float]) -> float:
    """Combine one custom metric across runs according to what its name says it measures."""

    words = set(_WORD.findall(name.lower()))
    if words & _AVERAGED:
        return sum(values) / len(values)
    if words & _MAXIMISED:
        return max(values)
    if words & _MINIMISED:
        return min(values)
    return sum(values)


async def _load_date_ranges(session: AsyncSession, run_ids: Sequence[int]) -> List[RunDateRange]:
    stmt = (
        select(DailyPnl.run_id, func.min(DailyPnl.date), func.max(DailyPnl.date))
        .where(DailyPnl.run_id.in_(run_ids))
        .group_by(DailyPnl.run_id)
        .order_by(DailyPnl.run_id)
    )
    result = await session.execute(stmt)
    ranges: List[RunDateRange] = []
    for run_id, start, end in result.all():
        if start is None or end is None:
            continue
        ranges.append(RunDateRange(run_id=run_id, start_date=_iso(start), end_date=_iso(end)))
    return ranges


def _iso(value: Any) -> str:
    if isinstance(value, date):
        return value.isoformat()
    return str(value)


def _parameter_differences(
    run_ids: Sequence[int], rows: Iterable[StrategyParameter]
) -> List[Dict[str, Any]]:
    by_run: Dict[int, Dict[str, str]] = {run_id: {} for run_id in run_ids}
    names: "OrderedDict[str, None]" = OrderedDict()
    for row in rows:
        by_run.setdefault(row.run_id, {})[row.parameter_name] = row.parameter_value
        names[row.parameter_name] = None

    differences: List[Dict[str, Any]] = []
    for name in names:
        values = [
            {"runId": run_id, "value": by_run[run_id].get(name, MISSING)} for run_id in run_ids
        ]
        if len({entry["value"] for entry in values}) > 1:
            differences.append({"parameter": name, "differences": values})
    return differences


async def validate_merge(session: AsyncSession, requested: Any) -> Dict[str, Any]:
    """Check that the requested runs can be merged.

    The checks run in a fixed order: id shape, existence, shared strategy,
    disjoint date ranges and identical parameters. The first failing check
    raises a :class:`MergeError` (or :class:`NotFoundError`) carrying the
    details the client needs to explain the refusal.
    """

    run_ids = normalise_run_ids(requested)

    result = await session.execute(
        select(StrategyRun, Strategy.name)
        .join(Strategy, StrategyRun.strategy_id == Strategy.id)
        .where(StrategyRun.id.in_(run_ids))
        .order_by(StrategyRun.id)
    )
    rows = result.all()
    if len(rows) != len(run_ids):
        raise NotFoundError("One or more runs not found")

    if len({run.strategy_id for run, _ in rows}) > 1:
        raise MergeError(
            "Cannot merge runs from different strategies",
            details={
                "runs": [
                    {"id": run.id, "name": run.run_name, "strategy": strategy_name}
                    for run, strategy_name in rows
                ]
            },
        )

    ranges = await _load_date_ranges(session, run_ids)
    range_by_run = {entry.run_id: entry.as_dict() for entry in ranges}

    overlaps: List[Dict[str, Any]] = []
    for index, first in enumerate(ranges):
        for second in ranges[index + 1:]:
            shared = ranges_overlap(
                (first.start_date, first.end_date), (second.start_date, second.end_date)
            )
            if shared is not None:
                overlaps.append(
                    {
                        "run1": first.run_id,
                        "run2": second.run_id,
                        "overlap": f"{shared[0]} to {shared[1]}",
                    }
                )
    if overlaps:
        raise MergeError(
            "Cannot merge runs with overlapping date ranges",
            details={
                "overlaps": overlaps,
                "runs": [
                    {"id": run.id, "name": run.run_name, "dateRange": range_by_run.get(run.id)}
                    for run, _ in rows
                ],
            },
        )

    params = await session.execute(
        select(StrategyParameter)
        .where(StrategyParameter.run_id.in_(run_ids))
        .order_by(StrategyParameter.run_id, StrategyParameter.parameter_name)
    )
    differences = _parameter_differences(run_ids, params.scalars().all())
    if differences:
        raise MergeError(
            "Cannot merge runs with different parameters",
            details={
                "parameterDifferences": differences,
                "runs": [{"id": run.id, "name": run.run_name} for run, _ in rows],
            },
        )

    merged_range: Optional[Dict[str, str]] = None
    if ranges:
        merged_range = {
            "startDate": min(entry.start_date for entry in ranges),
            "endDate": max(entry.end_date for entry in ranges),
        }

    return {
        "canMerge": True,
        "runs": [
            {
                "id": run.id,
                "name": run.run_name,
                "description": run.run_description,
                "strategy": strategy_name,
                "dateRange": range_by_run.get(run.id),
            }
            for run, strategy_name in rows
        ],
        "mergedDateRange": merged_range,
    }


def _merge_daily(rows: Iterable[DailyPnl]) -> "OrderedDict[date, DailyPnl]":
    merged: "OrderedDict[date, DailyPnl]" = OrderedDict()
    for row in rows:
        existing = merged.get(row.date)
        if existing is None:
            merged[row.date] = DailyPnl(
                date=row.date,
                pnl=row.pnl,
                trades=row.trades or 0,
                highest_intraday_pnl=row.highest_intraday_pnl,
                lowest_intraday_pnl=row.lowest_intraday_pnl,
            )
            continue
        existing.pnl += row.pnl
        existing.trades += row.trades or 0
        # Intraday extremes of separate runs cannot be combined.
        existing.highest_intraday_pnl = None
        existing.lowest_intraday_pnl = None
    return merged


def _merge_metrics(rows: Iterable[StrategyMetric]) -> List[StrategyMetric]:
    grouped: "OrderedDict[str, List[StrategyMetric]]" = OrderedDict()
    for row in rows:
        grouped.setdefault(row.metric_name, []).append(row)
    merged: List[StrategyMetric] = []
    for name, entries in grouped.items():
        merged.append(
            StrategyMetric(
                metric_name=name,
                metric_value=merge_metric_values(name, [entry.metric_value for entry in entries]),
                metric_description=entries[0].metric_description,
            )
        )
    return merged


async def execute_merge(
    session: AsyncSession,
    requested: Any,
    *,
    name: Optional[str] = None,
    description: Optional[str] = None,
) -> Dict[str, Any]:
    """Validate the runs and store their combination as a new run of the same strategy."""

    run_ids = normalise_run_ids(requested)
    await validate_merge(session, run_ids)

    first = await session.get(StrategyRun, run_ids[0])
    if first is None:  # pragma: no cover - validated above
        raise NotFoundError("One or more runs not found")

    joined_ids = ", ".join(str(run_id) for run_id in run_ids)
    run_name = name or f"Merged Run ({joined_ids})"
    run_description = description or f"Merged from runs: {joined_ids}"

    daily_rows = await session.execute(
        select(DailyPnl).where(DailyPnl.run_id.in_(run_ids)).order_by(DailyPnl.date, DailyPnl.id)
    )
    daily = _merge_daily(daily_rows.scalars().all())

    param_rows = await session.execute(
        select(StrategyParameter)
        .where(StrategyParameter.run_id == run_ids[0])
        .order_by(StrategyParameter.id)
    )
    event_rows = await session.execute(
        select(StrategyEvent)
        .where(StrategyEvent.run_id.in_(run_ids))
        .order_by(StrategyEvent.date, StrategyEvent.time, StrategyEvent.id)
    )
    trade_rows = await session.execute(
        select(StrategyTradeSummary)
        .where(StrategyTradeSummary.run_id.in_(run_ids))
        .order_by(StrategyTradeSummary.date, StrategyTradeSummary.time, StrategyTradeSummary.id)
    )
    metric_rows = await session.execute(
        select(StrategyMetric)
        .where(StrategyMetric.run_id.in_(run_ids))
        .order_by(StrategyMetric.run_id, StrategyMetric.id)
    )

    source_trades = trade_rows.scalars().all()
    if source_trades:
        summary = metrics.summarise([trade.actual_pnl for trade in source_trades])
        total_trades = summary.total_trades
    else:
        summary = metrics.summarise([day.pnl for day in daily.values()])
        total_trades = sum(day.trades for day in daily.values())

    merged = StrategyRun(
        strategy_id=first.strategy_id,
        run_name=run_name,
        run_description=run_description,
        net_pnl=metrics.finite(summary.net_pnl),
        total_trades=total_trades,
        win_rate=metrics.finite(summary.win_rate),
        profit_factor=summary.profit_factor,
        max_drawdown=metrics.finite(summary.max_drawdown),
        sharpe_ratio=metrics.finite(summary.sharpe_ratio),
    )
    merged.daily_pnl = list(daily.values())
    merged.parameters = [
        StrategyParameter(
            parameter_name=row.parameter_name,
            parameter_value=row.parameter_value,
            parameter_type=row.parameter_type,
        )
        for row in param_rows.scalars().all()
    ]
    merged.events = [
        StrategyEvent(
            event_type=row.event_type,
            date=row.date,
            time=row.time,
            trade_id=row.trade_id,
            direction=row.direction,
            target=row.target,
            closest_distance=row.closest_distance,
            reason=row.reason,
            trigger=row.trigger,
            adjustment=row.adjustment,
        )
        for row in event_rows.scalars().all()
    ]
    merged.trades = [
        StrategyTradeSummary(
            trade_id=row.trade_id,
            date=row.date,
            time=row.time,
            direction=row.direction,
            line=row.line,
            entry_price=row.entry_price,
            high_price=row.high_price,
            low_price=row.low_price,
            max_profit=row.max_profit,
            max_loss=row.max_loss,
            actual_pnl=row.actual_pnl,
            bars=row.bars,
            max_profit_vs_target=row.max_profit_vs_target,
            max_loss_vs_stop=row.max_loss_vs_stop,
            profit_efficiency=row.profit_efficiency,
        )
        for row in source_trades
    ]
    merged.metrics = _merge_metrics(metric_rows.scalars().all())

    session.add(merged)
    try:
        await session.commit()
    except Exception:
        await session.rollback()
        raise

    dates = list(daily.keys())
    date_range = (
        {"startDate": dates[0].isoformat(), "endDate": dates[-1].isoformat()} if dates else None
    )

    logger.info("runs_merged", merged_run_id=merged.id, source_run_ids=run_ids)

    return {
        "mergedRunId": merged.id,
        "message": f"Successfully merged {len(run_ids)} runs into run #{merged.id}",
        "mergedRun": {
            "id": merged.id,
            "name": run_name,
            "description": run_description,
            "netPnl": merged.net_pnl,
            "totalTrades": merged.total_trades,
            "winRate": merged.win_rate,
            "profitFactor": merged.profit_factor,
            "maxDrawdown": merged.max_drawdown,
            "sharpeRatio": merged.sharpe_ratio,
            "dateRange": date_range,
        },
    }


__all__ = [
    "MISSING",
    "RunDateRange",
    "execute_merge",
    "merge_metric_values",
    "normalise_run_ids",
    "validate_merge",
]
