"""Parsers turning NinjaTrader strategy output into structured runs."""
from .base import (
    BaseStrategyParser,
    ParsedDailyPnl,
    ParsedEvent,
    ParsedMetric,
    ParsedParameter,
    ParsedRun,
    ParsedTrade,
)
from .magic_lines import MagicLinesScalperParser
from .registry import ParserRegistry, build_default_registry, parser_registry
from .sample import SampleStrategyParser

__all__ = [
    "BaseStrategyParser",
    "MagicLinesScalperParser",
    "ParsedDailyPnl",
    "ParsedEvent",
    "ParsedMetric",
    "ParsedParameter",
    "ParsedRun",
    "ParsedTrade",
    "ParserRegistry",
    "SampleStrategyParser",
    "build_default_registry",
    "parser_registry",
]
