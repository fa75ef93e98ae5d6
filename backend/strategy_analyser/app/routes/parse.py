"""Route accepting raw NinjaTrader output for parsing and storage."""
from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from ..dependencies import get_session
from ..ingest import store_parsed_run
from ..parsers import parser_registry
from ..schemas.parse import ParseRequest, ParseResponse, ParseSummary

router = APIRouter(prefix="/parse", tags=["parse"])


@router.post("", response_model=ParseResponse)
async def parse_raw_output(
    payload: ParseRequest,
    session: AsyncSession = Depends(get_session),
) -> ParseResponse:
    """Parse uploaded strategy output and store it as a new run."""

    if not payload.raw_data or not isinstance(payload.raw_data, str):
        raise HTTPException(
            status.HTTP_400_BAD_REQUEST,
            detail="Raw data is required and must be a string",
        )

    parsed = parser_registry.parse_raw_data(payload.raw_data)
    if parsed is None:
        raise HTTPException(
            status.HTTP_400_BAD_REQUEST,
            detail="Unable to parse the provided data. No suitable parser found.",
        )

    run = await store_parsed_run(
        session,
        parsed,
        raw_data=payload.raw_data,
        run_description=payload.run_description,
    )

    return ParseResponse(
        run_id=run.id,
        strategy_name=parsed.strategy_name,
        summary=ParseSummary(
            total_trades=parsed.total_trades or 0,
            net_pnl=parsed.net_pnl or 0.0,
            win_rate=parsed.win_rate or 0.0,
            profit_factor=parsed.profit_factor,
            max_drawdown=parsed.max_drawdown or 0.0,
            days=len(parsed.daily_pnl),
        ),
    )
