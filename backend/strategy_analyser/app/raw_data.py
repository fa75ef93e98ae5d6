"""Slice an uploaded strategy output down to the lines of a single day."""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import date
from typing import List, Optional

from .dates import date_variants
from .parsers.base import ParsedRun

_TRADE_LINE = re.compile(
    r"(LONG|SHORT).*?Entry:\s*([\d.]+).*?Max Profit:\s*([+-]?[\d.]+)pts.*?Max Loss:\s*([+-]?[\d.]+)pts"
)
_PNL_VALUE = re.compile(r"\$?(-?\d+\.?\d*)")

# Checked in order; the first marker found names the event.
_EVENT_MARKERS = (
    ("SL ADJUSTMENT", "SL Adjustment"),
    ("TP NEAR MISS", "TP Near Miss"),
    ("FILL NEAR MISS", "Fill Near Miss"),
    ("TRADE COMPLETION", "Trade Completion"),
)


@dataclass
class DayTrade:
    direction: str
    entry: float
    max_profit: float
    max_loss: float
    line: str


@dataclass
class DayEvent:
    type: str
    line: str


@dataclass
class DaySummary:
    total_trades: int = 0
    total_pnl: float = 0.0
    winning_trades: int = 0
    losing_trades: int = 0


@dataclass
class DateSpecificData:
    raw_lines: List[str] = field(default_factory=list)
    trades: List[DayTrade] = field(default_factory=list)
    events: List[DayEvent] = field(default_factory=list)
    summary: DaySummary = field(default_factory=DaySummary)


def _bounded(token: str) -> "re.Pattern[str]":
    return re.compile(r"(?<![\w/-])" + re.escape(token) + r"(?![\w/-])")


def _line_matches(line: str, full: List["re.Pattern[str]"], partial: List["re.Pattern[str]"]) -> bool:
    if any(pattern.search(line) for pattern in full):
        return True
    if "AM" in line or "PM" in line or "[" in line:
        return any(pattern.search(line) for pattern in partial)
    return False


def _event_type(line: str) -> Optional[str]:
    upper = line.upper()
    for marker, label in _EVENT_MARKERS:
        if marker in upper:
            return label
    return None


def _format_amount(value: float) -> str:
    if float(value).is_integer():
        return str(int(value))
    return str(value)


def extract_date_specific_data(
    raw_data: str, target_date: date, parsed: Optional[ParsedRun] = None
) -> DateSpecificData:
    """Collect the lines, trades, P&L updates and events logged on ``target_date``.

    A line belongs to the day when it carries one of the full spellings of the
    date, or a month/day spelling next to a clock time or a bracketed tag.
    When no line qualifies, the parsed daily P&L row for the date is used as
    a one-line summary instead.
    """

    full_forms, partial_forms = date_variants(target_date)
    full = [_bounded(form) for form in full_forms]
    partial = [_bounded(form) for form in partial_forms]

    result = DateSpecificData()
    summary = result.summary

    for raw_line in raw_data.splitlines():
        line = raw_line.strip()
        if not line or not _line_matches(line, full, partial):
            continue
        result.raw_lines.append(line)

        trade_match = _TRADE_LINE.search(line)
        if trade_match:
            direction, entry, max_profit, max_loss = trade_match.groups()
            result.trades.append(
                DayTrade(
                    direction=direction,
                    entry=float(entry),
                    max_profit=float(max_profit),
                    max_loss=float(max_loss),
                    line=line,
                )
            )
            summary.total_trades += 1

        if "PNL UPDATE" in line or "COMPLETED TRADE PnL" in line:
            values = _PNL_VALUE.findall(line)
            if values:
                pnl = float(values[-1])
                summary.total_pnl += pnl
                if pnl > 0:
                    summary.winning_trades += 1
                elif pnl < 0:
                    summary.losing_trades += 1

        event_type = _event_type(line)
        if event_type:
            result.events.append(DayEvent(type=event_type, line=line))

    if not result.raw_lines and parsed is not None:
        iso = target_date.isoformat()
        for day in parsed.daily_pnl:
            if day.date != iso:
                continue
            result.raw_lines.append(
                f"Daily Summary for {iso}: PnL: ${_format_amount(day.pnl)}, Trades: {day.trades or 0}"
            )
            summary.total_pnl = day.pnl
            summary.total_trades = day.trades or 0
            break

    return result


__all__ = [
    "DateSpecificData",
    "DayEvent",
    "DaySummary",
    "DayTrade",
    "extract_date_specific_data",
]
