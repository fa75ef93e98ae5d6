"""API routes exposing system level information."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ..config import settings
from ..dependencies import get_session
from ..logging import get_logger
from ..parsers import parser_registry
from ..schemas.system import HealthStatusResponse, ParsersResponse

logger = get_logger("strategy_analyser.system")
router = APIRouter(prefix="/system", tags=["system"])


@router.get("/health", response_model=HealthStatusResponse)
async def get_health_status(
    session: AsyncSession = Depends(get_session),
) -> HealthStatusResponse:
    """Report the service environment and whether the database answers."""

    database = "ok"
    try:
        await session.execute(text("SELECT 1"))
    except SQLAlchemyError:
        logger.exception("database_health_check_failed")
        database = "error"

    status = "ok" if database == "ok" else "degraded"
    return HealthStatusResponse(status=status, env=settings.env, database=database)


@router.get("/parsers", response_model=ParsersResponse)
def list_parsers() -> ParsersResponse:
    return ParsersResponse(parsers=parser_registry.available_strategies())
