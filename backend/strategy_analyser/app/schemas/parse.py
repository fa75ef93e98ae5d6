"""Schemas for the upload endpoint."""
from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class ParseRequest(BaseModel):
    raw_data: Any = Field(default=None, alias="rawData")
    run_description: Optional[str] = Field(default=None, alias="runDescription")

    model_config = ConfigDict(populate_by_name=True)


class ParseSummary(BaseModel):
    total_trades: int = Field(alias="totalTrades")
    net_pnl: float = Field(alias="netPnl")
    win_rate: float = Field(alias="winRate")
    profit_factor: Optional[float] = Field(default=None, alias="profitFactor")
    max_drawdown: float = Field(alias="maxDrawdown")
    days: int

    model_config = ConfigDict(populate_by_name=True)


class ParseResponse(BaseModel):
    success: bool = True
    run_id: int = Field(alias="runId")
    strategy_name: str = Field(alias="strategyName")
    message: str = "Data parsed and saved successfully"
    summary: ParseSummary

    model_config = ConfigDict(populate_by_name=True)


__all__ = ["ParseRequest", "ParseResponse", "ParseSummary"]
