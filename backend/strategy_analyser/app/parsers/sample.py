"""Parser for the plain-text "Sample Strategy" report format."""
from __future__ import annotations

import re
from typing import List

from ...db.models import ParameterType
from .base import BaseStrategyParser, ParsedMetric, ParsedParameter, ParsedRun

_NET_PNL = re.compile(r"net pnl[:\s]+([+-]?[\d,]+\.?\d*)", re.I)
_TOTAL_TRADES = re.compile(r"total trades[:\s]+(\d+)", re.I)
_WIN_RATE = re.compile(r"win rate[:\s]+(\d+\.?\d*)%", re.I)
_PROFIT_FACTOR = re.compile(r"profit factor[:\s]+(\d+\.?\d*)", re.I)
_MAX_DRAWDOWN = re.compile(r"max drawdown[:\s]+([+-]?[\d,]+\.?\d*)", re.I)
_SHARPE_RATIO = re.compile(r"sharpe ratio[:\s]+([+-]?\d+\.?\d*)", re.I)
_RUN_NAME = re.compile(r"^\s*run[ \t]*:[ \t]*(.+)$", re.I | re.M)

_PARAMETERS = (
    ("Period", re.compile(r"period[:\s]+(\d+)", re.I), ParameterType.NUMBER),
    ("Stop Loss", re.compile(r"stop loss[:\s]+(\d+\.?\d*)", re.I), ParameterType.NUMBER),
    ("Take Profit", re.compile(r"take profit[:\s]+(\d+\.?\d*)", re.I), ParameterType.NUMBER),
    ("Time Frame", re.compile(r"time frame[ \t:]+(.+)", re.I), ParameterType.STRING),
    ("Enabled", re.compile(r"enabled[:\s]+(true|false)", re.I), ParameterType.BOOLEAN),
)

_METRICS = (
    ("Near Misses", re.compile(r"near misses[:\s]+(\d+)", re.I), "Number of near miss trades"),
    (
        "Average Trade Duration",
        re.compile(r"avg trade duration[:\s]+(\d+\.?\d*)", re.I),
        "Average trade duration in minutes",
    ),
    (
        "Consecutive Losses",
        re.compile(r"consecutive losses[:\s]+(\d+)", re.I),
        "Maximum consecutive losses",
    ),
)


class SampleStrategyParser(BaseStrategyParser):
    strategy_name = "Sample Strategy"

    def can_parse(self, raw_data: str) -> bool:
        lowered = raw_data.lower()
        return "sample strategy" in lowered or "strategy: sample" in lowered

    def parse(self, raw_data: str) -> ParsedRun:
        win_rate = self.extract_number(raw_data, _WIN_RATE)
        total_trades = self.extract_number(raw_data, _TOTAL_TRADES)
        return ParsedRun(
            strategy_name=self.strategy_name,
            run_name=self.extract_string(raw_data, _RUN_NAME),
            net_pnl=self.extract_number(raw_data, _NET_PNL) or 0.0,
            total_trades=int(total_trades) if total_trades is not None else None,
            # Reports print a percentage; runs store a fraction.
            win_rate=win_rate / 100 if win_rate is not None else None,
            profit_factor=self.extract_number(raw_data, _PROFIT_FACTOR),
            max_drawdown=self.extract_number(raw_data, _MAX_DRAWDOWN),
            sharpe_ratio=self.extract_number(raw_data, _SHARPE_RATIO),
            daily_pnl=self.extract_daily_pnl(raw_data),
            parameters=self._extract_parameters(raw_data),
            custom_metrics=self._extract_metrics(raw_data),
        )

    def _extract_parameters(self, raw_data: str) -> List[ParsedParameter]:
        found: List[ParsedParameter] = []
        for name, pattern, kind in _PARAMETERS:
            value = self.extract_string(raw_data, pattern)
            if value:
                found.append(ParsedParameter(name=name, value=value, type=kind))
        return found

    def _extract_metrics(self, raw_data: str) -> List[ParsedMetric]:
        found: List[ParsedMetric] = []
        for name, pattern, description in _METRICS:
            value = self.extract_number(raw_data, pattern)
            if value is not None:
                found.append(ParsedMetric(name=name, value=value, description=description))
        return found


__all__ = ["SampleStrategyParser"]
