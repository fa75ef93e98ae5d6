"""Parser for MagicLinesScalper NinjaTrader strategy output."""
from __future__ import annotations

import re
from typing import Dict, List, Optional, Tuple

from ...db.models import EventType, ParameterType
from .. import metrics
from ..logging import get_logger
from .base import (
    BaseStrategyParser,
    ParsedDailyPnl,
    ParsedEvent,
    ParsedMetric,
    ParsedParameter,
    ParsedRun,
    ParsedTrade,
)

logger = get_logger("strategy_analyser.parsers.magic_lines")

_NUMBER = ParameterType.NUMBER
_BOOLEAN = ParameterType.BOOLEAN
_STRING = ParameterType.STRING

# Catalogue of the parameter block printed when the strategy starts.
PARAMETER_PATTERNS: Tuple[Tuple[str, "re.Pattern[str]", ParameterType], ...] = (
    ("Trade Quantity", re.compile(r"Trade Quantity:\s*(\d+)", re.I), _NUMBER),
    ("Max Gain", re.compile(r"Max Gain:\s*\$(\d+)", re.I), _NUMBER),
    ("Max Loss", re.compile(r"Max Loss:\s*\$(\d+)", re.I), _NUMBER),
    ("Max Consecutive Losses", re.compile(r"Max Consecutive Losses:\s*(\d+)", re.I), _NUMBER),
    ("Loss Cut Off", re.compile(r"Loss Cut Off:\s*\$(\d+)", re.I), _NUMBER),
    ("Full Take Profit", re.compile(r"Full Take Profit:\s*(\d+(?:\.\d+)?)pts", re.I), _NUMBER),
    ("Full Stop Loss", re.compile(r"Full Stop Loss:\s*(\d+(?:\.\d+)?)pts", re.I), _NUMBER),
    ("Min Distance From Line", re.compile(r"Min Distance From Line:\s*(\d+(?:\.\d+)?)pts", re.I), _NUMBER),
    ("Max Distance From Line", re.compile(r"Max Distance From Line:\s*(\d+(?:\.\d+)?)pts", re.I), _NUMBER),
    ("Entry Offset", re.compile(r"Entry Offset:\s*(\d+(?:\.\d+)?)pts", re.I), _NUMBER),
    ("Line Cross Bar Count", re.compile(r"Line Cross Bar Count:\s*(\d+)", re.I), _NUMBER),
    ("Upside Short Trades", re.compile(r"Upside Short Trades:\s*(True|False)", re.I), _BOOLEAN),
    ("Downside Long Trades", re.compile(r"Downside Long Trades:\s*(True|False)", re.I), _BOOLEAN),
    ("Dynamic Trim", re.compile(r"Dynamic Trim:\s*(True|False)", re.I), _BOOLEAN),
    ("Trim Percent", re.compile(r"Trim Percent:\s*(\d+)%", re.I), _NUMBER),
    ("Trim Take Profit", re.compile(r"Trim Take Profit:\s*(\d+(?:\.\d+)?)pts", re.I), _NUMBER),
    ("SL Adjustment", re.compile(r"SL Adjustment:\s*(True|False)", re.I), _BOOLEAN),
    ("X1", re.compile(r"X1:\s*(\d+(?:\.\d+)?)pts", re.I), _NUMBER),
    ("X2", re.compile(r"X2:\s*(\d+(?:\.\d+)?)pts", re.I), _NUMBER),
    ("L1", re.compile(r"L1:\s*([+-]?\d+(?:\.\d+)?)pts", re.I), _NUMBER),
    ("L2", re.compile(r"L2:\s*(\d+(?:\.\d+)?)pts", re.I), _NUMBER),
    ("Start Time", re.compile(r"Start Time:\s*(\d{2}:\d{2})", re.I), _STRING),
    ("End Time", re.compile(r"End Time:\s*(\d{2}:\d{2})", re.I), _STRING),
    ("Upside Levels", re.compile(r"Upside Levels:\s*([\d.]+(?:[ \t]*,[ \t]*[\d.]+)*)", re.I), _STRING),
    ("Downside Levels", re.compile(r"Downside Levels:\s*([\d.]+(?:[ \t]*,[ \t]*[\d.]+)*)", re.I), _STRING),
    ("Mini Mode", re.compile(r"Mini Mode:\s*(True|False)", re.I), _BOOLEAN),
    ("Instrument", re.compile(r"Instrument:\s*(\w+)", re.I), _STRING),
)

_TIMESTAMP = r"(\d{4}-\d{2}-\d{2})\s+(\d{1,2}:\d{2}:\d{2}\s+(?:AM|PM))"

TRADE_SUMMARY_PATTERN = re.compile(
    _TIMESTAMP
    + r"\s+\[TRADE SUMMARY\]\s+(LONG|SHORT)\s*\|\s*Line:\s*([^|]+?)\s*\|\s*Entry:\s*([\d.]+)"
    r"\s*\|\s*High:\s*([\d.]+)\s*\|\s*Low:\s*([\d.]+)"
    r"\s*\|\s*Max Profit:\s*([+-]?[\d.]+)pts\s*\|\s*Max Loss:\s*([+-]?[\d.]+)pts"
    r"\s*\|\s*Bars:\s*(\d+)"
)

EVENT_PATTERN = re.compile(
    r"^\s*" + _TIMESTAMP
    + r"\s+\[(TRIM TP NEAR MISS|TP NEAR MISS|FILL NEAR MISS|NEAR MISS|SL ADJUSTMENT)\]\s*(.*)$",
    re.MULTILINE,
)

_EVENT_TYPES: Dict[str, EventType] = {
    "TRIM TP NEAR MISS": EventType.TP_NEAR_MISS,
    "TP NEAR MISS": EventType.TP_NEAR_MISS,
    "NEAR MISS": EventType.TP_NEAR_MISS,
    "FILL NEAR MISS": EventType.FILL_NEAR_MISS,
    "SL ADJUSTMENT": EventType.SL_ADJUSTMENT,
}

_EVENT_FIELDS: Dict[str, str] = {
    "trade": "trade_id",
    "trade id": "trade_id",
    "trade #": "trade_id",
    "direction": "direction",
    "target": "target",
    "closest": "closest_distance",
    "closest distance": "closest_distance",
    "distance": "closest_distance",
    "reason": "reason",
    "trigger": "trigger",
    "adjustment": "adjustment",
    "new sl": "adjustment",
}

NEAR_MISS_PATTERN = re.compile(r"\[(?:TP )?NEAR MISS\]")
_RUN_NAME_PATTERN = re.compile(r"Strategy '([^']+)'")


class MagicLinesScalperParser(BaseStrategyParser):
    """Parse the trade log written by the MagicLinesScalper strategy."""

    strategy_name = "MagicLinesScalper"

    def __init__(self, *, point_value: float = 5.0) -> None:
        self.point_value = point_value

    def can_parse(self, raw_data: str) -> bool:
        return (
            "MagicLinesScalper" in raw_data
            or "Magic Lines" in raw_data
            or "RTH Magic Lines" in raw_data
        )

    def parse(self, raw_data: str) -> ParsedRun:
        run_name = self.extract_string(raw_data, _RUN_NAME_PATTERN) or self.strategy_name
        parameters = self.extract_parameters(raw_data)
        trades = self.extract_trades(raw_data, parameters)
        events = self.extract_events(raw_data)

        pnls = [trade.actual_pnl for trade in trades]
        summary = metrics.summarise(pnls)
        daily = [
            ParsedDailyPnl(
                date=day.date,
                pnl=day.pnl,
                trades=day.trades,
                highest_intraday_pnl=day.highest_intraday_pnl,
                lowest_intraday_pnl=day.lowest_intraday_pnl,
            )
            for day in metrics.aggregate_daily((trade.date, trade.actual_pnl) for trade in trades)
        ]

        logger.debug(
            "magic_lines_parsed",
            trades=len(trades),
            events=len(events),
            parameters=len(parameters),
        )

        return ParsedRun(
            strategy_name=self.strategy_name,
            run_name=run_name,
            net_pnl=metrics.finite(summary.net_pnl),
            total_trades=summary.total_trades,
            win_rate=metrics.finite(summary.win_rate),
            profit_factor=summary.profit_factor,
            max_drawdown=metrics.finite(summary.max_drawdown),
            sharpe_ratio=metrics.finite(summary.sharpe_ratio),
            daily_pnl=daily,
            parameters=parameters,
            custom_metrics=self.extract_custom_metrics(raw_data, trades, events),
            events=events,
            trades=trades,
        )

    def extract_parameters(self, raw_data: str) -> List[ParsedParameter]:
        parameters: List[ParsedParameter] = []
        for name, pattern, kind in PARAMETER_PATTERNS:
            value = self.extract_string(raw_data, pattern)
            if value:
                parameters.append(ParsedParameter(name=name, value=value, type=kind))
        return parameters

    def extract_trades(
        self, raw_data: str, parameters: Optional[List[ParsedParameter]] = None
    ) -> List[ParsedTrade]:
        """Build one trade per ``[TRADE SUMMARY]`` line.

        The realised P&L is the favourable excursion: high minus entry for
        longs, entry minus low for shorts, converted to dollars.
        """

        lookup = {param.name: param.value for param in parameters or []}
        target_pts = _positive_float(lookup.get("Full Take Profit"))
        stop_pts = _positive_float(lookup.get("Full Stop Loss"))

        trades: List[ParsedTrade] = []
        for match in TRADE_SUMMARY_PATTERN.finditer(raw_data):
            (day, clock, direction, line, entry_s, high_s, low_s,
             max_profit_s, max_loss_s, bars_s) = match.groups()
            entry = float(entry_s)
            high = float(high_s)
            low = float(low_s)
            max_profit_pts = float(max_profit_s)
            max_loss_pts = float(max_loss_s)

            points = high - entry if direction == "LONG" else entry - low
            actual_pnl = metrics.finite(points * self.point_value)
            max_profit = max_profit_pts * self.point_value
            max_loss = max_loss_pts * self.point_value

            trades.append(
                ParsedTrade(
                    trade_id=str(len(trades) + 1),
                    date=day,
                    time=self.parse_time(clock),
                    direction=direction,
                    line=line.strip(),
                    entry=entry,
                    high=high,
                    low=low,
                    max_profit=max_profit,
                    max_loss=max_loss,
                    actual_pnl=actual_pnl,
                    bars=int(bars_s),
                    max_profit_vs_target=(
                        max_profit_pts / target_pts if target_pts else None
                    ),
                    max_loss_vs_stop=(
                        abs(max_loss_pts) / stop_pts if stop_pts else None
                    ),
                    profit_efficiency=(
                        actual_pnl / max_profit if max_profit > 0 else None
                    ),
                )
            )
        return trades

    def extract_events(self, raw_data: str) -> List[ParsedEvent]:
        events: List[ParsedEvent] = []
        for match in EVENT_PATTERN.finditer(raw_data):
            day, clock, tag, body = match.groups()
            event = ParsedEvent(
                event_type=_EVENT_TYPES[tag],
                date=day,
                time=self.parse_time(clock),
            )
            for segment in body.split("|"):
                segment = segment.strip()
                if not segment:
                    continue
                if segment.upper() in ("LONG", "SHORT"):
                    event.direction = segment.upper()
                    continue
                key, sep, value = segment.partition(":")
                if not sep:
                    continue
                attribute = _EVENT_FIELDS.get(key.strip().lower())
                if attribute and value.strip():
                    setattr(event, attribute, value.strip())
            events.append(event)
        return events

    def extract_custom_metrics(
        self,
        raw_data: str,
        trades: List[ParsedTrade],
        events: List[ParsedEvent],
    ) -> List[ParsedMetric]:
        found: List[ParsedMetric] = [
            ParsedMetric(
                name="Near Misses",
                value=float(len(NEAR_MISS_PATTERN.findall(raw_data))),
                description="Number of near miss trades",
            ),
            ParsedMetric(
                name="SL Adjustments",
                value=float(
                    sum(1 for event in events if event.event_type is EventType.SL_ADJUSTMENT)
                ),
                description="Number of stop loss adjustments made",
            ),
        ]

        total_bars = sum(trade.bars for trade in trades)
        found.append(
            ParsedMetric(
                name="Average Trade Duration",
                value=metrics.finite(total_bars / len(trades)) if trades else 0.0,
                description="Average trade duration in bars",
            )
        )

        if trades:
            pnls = [trade.actual_pnl for trade in trades]
            found.extend(
                [
                    ParsedMetric(
                        name="Best Trade",
                        value=metrics.finite(max(pnls)),
                        description="Best single trade P&L",
                    ),
                    ParsedMetric(
                        name="Worst Trade",
                        value=metrics.finite(min(pnls)),
                        description="Worst single trade P&L",
                    ),
                    ParsedMetric(
                        name="Max Consecutive Losses",
                        value=float(metrics.max_consecutive_losses(pnls)),
                        description="Maximum consecutive losing trades",
                    ),
                ]
            )
        return found


def _positive_float(value: Optional[str]) -> Optional[float]:
    if value is None:
        return None
    try:
        number = float(value)
    except ValueError:
        return None
    return number if number > 0 else None


__all__ = ["MagicLinesScalperParser"]
