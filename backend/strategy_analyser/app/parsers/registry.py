"""Registry selecting the parser that understands an uploaded output."""
from __future__ import annotations

from typing import Iterable, List, Optional

from ..config import settings
from ..logging import get_logger
from .base import BaseStrategyParser, ParsedRun
from .magic_lines import MagicLinesScalperParser
from .sample import SampleStrategyParser

logger = get_logger("strategy_analyser.parsers")


class ParserRegistry:
    """Ordered collection of parsers; the first one that accepts the text wins."""

    def __init__(self, parsers: Optional[Iterable[BaseStrategyParser]] = None) -> None:
        self._parsers: List[BaseStrategyParser] = list(parsers or [])

    def register(self, parser: BaseStrategyParser) -> None:
        self._parsers.append(parser)

    def parse_raw_data(self, raw_data: str) -> Optional[ParsedRun]:
        for parser in self._parsers:
            if not parser.can_parse(raw_data):
                continue
            try:
                return parser.parse(raw_data)
            except Exception:
                logger.exception("parser_failed", parser=parser.strategy_name)
                return None

        logger.warning("parser_not_found", length=len(raw_data))
        return None

    def available_strategies(self) -> List[str]:
        return [parser.strategy_name for parser in self._parsers]

    def parser_for_strategy(self, strategy_name: str) -> Optional[BaseStrategyParser]:
        for parser in self._parsers:
            if parser.strategy_name == strategy_name:
                return parser
        return None


def build_default_registry() -> ParserRegistry:
    return ParserRegistry(
        [
            MagicLinesScalperParser(point_value=settings.point_value),
            SampleStrategyParser(),
        ]
    )


parser_registry = build_default_registry()


__all__ = ["ParserRegistry", "build_default_registry", "parser_registry"]
