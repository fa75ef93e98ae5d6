"""Performance statistics shared by the parsers and the run merge."""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence, Tuple


@dataclass
class DailyAggregate:
    date: str
    pnl: float
    trades: int
    highest_intraday_pnl: float
    lowest_intraday_pnl: float


@dataclass
class PerformanceSummary:
    net_pnl: float
    total_trades: int
    win_rate: float
    profit_factor: Optional[float]
    max_drawdown: float
    sharpe_ratio: float


def finite(value: Optional[float], default: float = 0.0) -> float:
    if value is None or not math.isfinite(value):
        return default
    return value


def win_rate(pnls: Sequence[float]) -> float:
    if not pnls:
        return 0.0
    winners = sum(1 for pnl in pnls if pnl > 0)
    return winners / len(pnls)


def profit_factor(pnls: Iterable[float]) -> Optional[float]:
    """Gross profit over gross loss.

    ``None`` when there are profits but no losses, ``0.0`` when there is
    nothing to divide.
    """

    gross_profit = 0.0
    gross_loss = 0.0
    for pnl in pnls:
        if pnl > 0:
            gross_profit += pnl
        elif pnl < 0:
            gross_loss += -pnl
    if gross_loss > 0:
        return gross_profit / gross_loss
    if gross_profit > 0:
        return None
    return 0.0


def max_drawdown(pnls: Iterable[float]) -> float:
    """Largest fall of the cumulative P&L curve from its running peak (starting at 0)."""

    peak = 0.0
    running = 0.0
    worst = 0.0
    for pnl in pnls:
        running += pnl
        peak = max(peak, running)
        worst = max(worst, peak - running)
    return worst


def sharpe_ratio(pnls: Sequence[float]) -> float:
    """Mean over population standard deviation of per-trade returns."""

    if not pnls:
        return 0.0
    mean = sum(pnls) / len(pnls)
    variance = sum((pnl - mean) ** 2 for pnl in pnls) / len(pnls)
    if variance <= 0:
        return 0.0
    return mean / math.sqrt(variance)


def max_consecutive_losses(pnls: Iterable[float]) -> int:
    longest = 0
    current = 0
    for pnl in pnls:
        if pnl < 0:
            current += 1
            longest = max(longest, current)
        else:
            current = 0
    return longest


def summarise(pnls: Sequence[float]) -> PerformanceSummary:
    values = [finite(pnl) for pnl in pnls]
    return PerformanceSummary(
        net_pnl=sum(values),
        total_trades=len(values),
        win_rate=win_rate(values),
        profit_factor=profit_factor(values),
        max_drawdown=max_drawdown(values),
        sharpe_ratio=sharpe_ratio(values),
    )


def aggregate_daily(trades: Iterable[Tuple[str, float]]) -> List[DailyAggregate]:
    """Group ``(date, pnl)`` pairs by date in encounter order, sorted by date.

    The intraday extremes track the cumulative P&L within each day.
    """

    days: dict[str, DailyAggregate] = {}
    for day, pnl in trades:
        value = finite(pnl)
        bucket = days.get(day)
        if bucket is None:
            days[day] = DailyAggregate(
                date=day,
                pnl=value,
                trades=1,
                highest_intraday_pnl=value,
                lowest_intraday_pnl=value,
            )
            continue
        bucket.pnl += value
        bucket.trades += 1
        bucket.highest_intraday_pnl = max(bucket.highest_intraday_pnl, bucket.pnl)
        bucket.lowest_intraday_pnl = min(bucket.lowest_intraday_pnl, bucket.pnl)
    return sorted(days.values(), key=lambda item: item.date)


__all__ = [
    "DailyAggregate",
    "PerformanceSummary",
    "aggregate_daily",
    "finite",
    "max_consecutive_losses",
    "max_drawdown",
    "profit_factor",
    "sharpe_ratio",
    "summarise",
    "win_rate",
]
