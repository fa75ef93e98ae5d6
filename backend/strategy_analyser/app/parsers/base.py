"""Shared structures and helpers for NinjaTrader output parsers."""
from __future__ import annotations

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional, Pattern

from ...db.models import EventType, ParameterType

_DATE_FORMATS = ("%Y-%m-%d", "%Y/%m/%d", "%m/%d/%Y", "%m/%d/%y", "%d.%m.%Y", "%b %d %Y", "%B %d %Y")
_TIME_FORMATS = ("%I:%M:%S %p", "%I:%M %p", "%H:%M:%S", "%H:%M")
_DAILY_PNL_PATTERN = re.compile(r"(\d{4}-\d{2}-\d{2})[:\s]+([+-]?\d+\.?\d*)")


@dataclass
class ParsedParameter:
    name: str
    value: str
    type: ParameterType


@dataclass
class ParsedMetric:
    name: str
    value: float
    description: Optional[str] = None


@dataclass
class ParsedDailyPnl:
    date: str
    pnl: float
    trades: int = 0
    highest_intraday_pnl: Optional[float] = None
    lowest_intraday_pnl: Optional[float] = None


@dataclass
class ParsedEvent:
    event_type: EventType
    date: str
    time: str
    trade_id: Optional[str] = None
    direction: Optional[str] = None
    target: Optional[str] = None
    closest_distance: Optional[str] = None
    reason: Optional[str] = None
    trigger: Optional[str] = None
    adjustment: Optional[str] = None


@dataclass
class ParsedTrade:
    trade_id: str
    date: str
    time: str
    direction: str
    line: str
    entry: float
    high: float
    low: float
    max_profit: float
    max_loss: float
    actual_pnl: float
    bars: int
    max_profit_vs_target: Optional[float] = None
    max_loss_vs_stop: Optional[float] = None
    profit_efficiency: Optional[float] = None


@dataclass
class ParsedRun:
    """Everything a parser extracts from one uploaded backtest output."""

    strategy_name: str
    net_pnl: float
    run_name: Optional[str] = None
    run_description: Optional[str] = None
    total_trades: Optional[int] = None
    win_rate: Optional[float] = None
    profit_factor: Optional[float] = None
    max_drawdown: Optional[float] = None
    sharpe_ratio: Optional[float] = None
    daily_pnl: List[ParsedDailyPnl] = field(default_factory=list)
    parameters: List[ParsedParameter] = field(default_factory=list)
    custom_metrics: List[ParsedMetric] = field(default_factory=list)
    events: List[ParsedEvent] = field(default_factory=list)
    trades: List[ParsedTrade] = field(default_factory=list)


class BaseStrategyParser(ABC):
    """Recognise and parse the text output of one strategy."""

    strategy_name: str = ""

    @abstractmethod
    def can_parse(self, raw_data: str) -> bool:
        """Return ``True`` when ``raw_data`` was produced by this strategy."""

    @abstractmethod
    def parse(self, raw_data: str) -> ParsedRun:
        """Extract a :class:`ParsedRun` from ``raw_data``."""

    @staticmethod
    def extract_number(text: str, pattern: Pattern[str]) -> Optional[float]:
        match = pattern.search(text)
        if not match or not match.group(1):
            return None
        try:
            return float(match.group(1).replace(",", ""))
        except ValueError:
            return None

    @staticmethod
    def extract_string(text: str, pattern: Pattern[str]) -> Optional[str]:
        match = pattern.search(text)
        if not match:
            return None
        return match.group(1).strip()

    @staticmethod
    def parse_date(value: str) -> str:
        """Normalise a date to ``YYYY-MM-DD``; unknown spellings are returned as-is."""

        cleaned = value.strip()
        for fmt in _DATE_FORMATS:
            try:
                return datetime.strptime(cleaned, fmt).date().isoformat()
            except ValueError:
                continue
        return cleaned

    @staticmethod
    def parse_time(value: str) -> str:
        """Normalise a clock time to 24-hour ``HH:MM:SS``."""

        cleaned = " ".join(value.split()).upper()
        for fmt in _TIME_FORMATS:
            try:
                return datetime.strptime(cleaned, fmt).strftime("%H:%M:%S")
            except ValueError:
                continue
        return cleaned

    def extract_daily_pnl(self, text: str) -> List[ParsedDailyPnl]:
        daily: List[ParsedDailyPnl] = []
        for match in _DAILY_PNL_PATTERN.finditer(text):
            try:
                pnl = float(match.group(2))
            except ValueError:
                continue
            daily.append(ParsedDailyPnl(date=match.group(1), pnl=pnl))
        return daily


__all__ = [
    "BaseStrategyParser",
    "ParsedDailyPnl",
    "ParsedEvent",
    "ParsedMetric",
    "ParsedParameter",
    "ParsedRun",
    "ParsedTrade",
]
