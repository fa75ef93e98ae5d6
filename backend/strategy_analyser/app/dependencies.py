"""Common FastAPI dependency helpers."""
from __future__ import annotations

import re
from typing import Any, AsyncIterator, NoReturn, Optional

from fastapi import HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from ..db.base import create_session
from .errors import AnalyserError

_INTEGER = re.compile(r"[+-]?\d+", re.ASCII)


async def get_session() -> AsyncIterator[AsyncSession]:
    """Provide an async SQLAlchemy session."""

    session = create_session()
    try:
        yield session
    finally:  # pragma: no cover - cleanup
        await session.close()


def _parse_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        cleaned = value.strip()
        if _INTEGER.fullmatch(cleaned):
            return int(cleaned)
    return None


def parse_run_id(value: Any) -> int:
    run_id = _parse_int(value)
    if run_id is None:
        raise HTTPException(status.HTTP_400_BAD_REQUEST, detail="Invalid run ID")
    return run_id


def parse_strategy_id(value: Any) -> int:
    strategy_id = _parse_int(value)
    if strategy_id is None:
        raise HTTPException(status.HTTP_400_BAD_REQUEST, detail="Invalid strategy ID")
    return strategy_id


def raise_http_error(exc: AnalyserError) -> NoReturn:
    """Re-raise a service error as the matching HTTP response."""

    raise HTTPException(status_code=exc.status_code, detail=exc.to_detail()) from exc


__all__ = ["get_session", "parse_run_id", "parse_strategy_id", "raise_http_error"]
