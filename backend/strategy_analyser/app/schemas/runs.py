"""Schemas for strategy run endpoints."""
from __future__ import annotations

import datetime as dt
from datetime import datetime
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from ...db.models import ParameterType


class RunSummary(BaseModel):
    """A run row joined with the name of its strategy."""

    id: int
    strategy_id: int
    strategy_name: str
    run_name: Optional[str] = None
    run_description: Optional[str] = None
    net_pnl: float
    total_trades: Optional[int] = None
    win_rate: Optional[float] = None
    profit_factor: Optional[float] = None
    max_drawdown: Optional[float] = None
    sharpe_ratio: Optional[float] = None
    is_baseline: bool = False
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class RunsResponse(BaseModel):
    success: bool = True
    runs: List[RunSummary]


class BaselineResponse(BaseModel):
    success: bool = True
    baseline_run: Optional[RunSummary] = Field(default=None, alias="baselineRun")

    model_config = ConfigDict(populate_by_name=True)


class MessageResponse(BaseModel):
    success: bool = True
    message: str


class RunDescriptionUpdate(BaseModel):
    run_id: Optional[Union[int, str]] = Field(default=None, alias="runId")
    run_description: Optional[str] = Field(default=None, alias="runDescription")

    model_config = ConfigDict(populate_by_name=True)


class BaselineUpdate(BaseModel):
    run_id: Optional[Union[int, str]] = Field(default=None, alias="runId")
    # Checked by the route so that non-boolean values get a 400 with a message.
    is_baseline: Any = Field(default=None, alias="isBaseline")

    model_config = ConfigDict(populate_by_name=True)


class DailyPnlRow(BaseModel):
    date: dt.date
    pnl: float
    trades: int
    highest_intraday_pnl: Optional[float] = None
    lowest_intraday_pnl: Optional[float] = None

    model_config = ConfigDict(from_attributes=True)


class DailyPnlResponse(BaseModel):
    success: bool = True
    daily_pnl: List[DailyPnlRow] = Field(alias="dailyPnl")

    model_config = ConfigDict(populate_by_name=True)


class ParameterRow(BaseModel):
    parameter_name: str
    parameter_value: str
    parameter_type: ParameterType

    model_config = ConfigDict(from_attributes=True)


class ParametersResponse(BaseModel):
    success: bool = True
    parameters: List[ParameterRow]


class MetricRow(BaseModel):
    metric_name: str
    metric_value: float
    metric_description: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class MetricsResponse(BaseModel):
    success: bool = True
    metrics: List[MetricRow]


class TpNearMiss(BaseModel):
    date: dt.date
    time: str
    trade_id: Optional[str] = Field(default=None, alias="tradeId")
    direction: Optional[str] = None
    target: Optional[str] = None
    closest_distance: Optional[str] = Field(default=None, alias="closestDistance")
    reason: Optional[str] = None

    model_config = ConfigDict(populate_by_name=True, from_attributes=True)


class FillNearMiss(BaseModel):
    date: dt.date
    time: str
    direction: Optional[str] = None
    closest_distance: Optional[str] = Field(default=None, alias="closestDistance")

    model_config = ConfigDict(populate_by_name=True, from_attributes=True)


class SlAdjustment(BaseModel):
    date: dt.date
    time: str
    trade_id: Optional[str] = Field(default=None, alias="tradeId")
    direction: Optional[str] = None
    trigger: Optional[str] = None
    adjustment: Optional[str] = None

    model_config = ConfigDict(populate_by_name=True, from_attributes=True)


class EventsResponse(BaseModel):
    success: bool = True
    tp_near_misses: List[TpNearMiss] = Field(default_factory=list, alias="tpNearMisses")
    fill_near_misses: List[FillNearMiss] = Field(default_factory=list, alias="fillNearMisses")
    sl_adjustments: List[SlAdjustment] = Field(default_factory=list, alias="slAdjustments")

    model_config = ConfigDict(populate_by_name=True)


class TradeRow(BaseModel):
    trade_id: str = Field(alias="tradeId")
    date: dt.date
    time: str
    direction: str
    line: str
    entry_price: float = Field(alias="entryPrice")
    high_price: float = Field(alias="highPrice")
    low_price: float = Field(alias="lowPrice")
    max_profit: float = Field(alias="maxProfit")
    max_loss: float = Field(alias="maxLoss")
    actual_pnl: float = Field(alias="actualPnl")
    bars: int
    max_profit_vs_target: Optional[float] = Field(default=None, alias="maxProfitVsTarget")
    max_loss_vs_stop: Optional[float] = Field(default=None, alias="maxLossVsStop")
    profit_efficiency: Optional[float] = Field(default=None, alias="profitEfficiency")

    model_config = ConfigDict(populate_by_name=True, from_attributes=True)


class TradesResponse(BaseModel):
    success: bool = True
    trades: List[TradeRow]


class RawDataResponse(BaseModel):
    success: bool = True
    raw_data: Optional[str] = Field(default=None, alias="rawData")
    run_name: Optional[str] = Field(default=None, alias="runName")
    run_description: Optional[str] = Field(default=None, alias="runDescription")
    created_at: datetime = Field(alias="createdAt")

    model_config = ConfigDict(populate_by_name=True)


class DayTradeRow(BaseModel):
    direction: str
    entry: float
    max_profit: float = Field(alias="maxProfit")
    max_loss: float = Field(alias="maxLoss")
    line: str

    model_config = ConfigDict(populate_by_name=True, from_attributes=True)


class DayEventRow(BaseModel):
    type: str
    line: str

    model_config = ConfigDict(from_attributes=True)


class DaySummaryRow(BaseModel):
    total_trades: int = Field(alias="totalTrades")
    total_pnl: float = Field(alias="totalPnl")
    winning_trades: int = Field(alias="winningTrades")
    losing_trades: int = Field(alias="losingTrades")

    model_config = ConfigDict(populate_by_name=True, from_attributes=True)


class DateRawDataResponse(BaseModel):
    success: bool = True
    date: dt.date
    run_name: Optional[str] = Field(default=None, alias="runName")
    run_description: Optional[str] = Field(default=None, alias="runDescription")
    created_at: datetime = Field(alias="createdAt")
    date_specific_raw_data: List[str] = Field(alias="dateSpecificRawData")
    trades: List[DayTradeRow]
    events: List[DayEventRow]
    summary: DaySummaryRow

    model_config = ConfigDict(populate_by_name=True)


class MergeRequest(BaseModel):
    run_ids: Any = Field(default=None, alias="runIds")
    merged_run_name: Optional[str] = Field(default=None, alias="mergedRunName")
    merged_run_description: Optional[str] = Field(default=None, alias="mergedRunDescription")

    model_config = ConfigDict(populate_by_name=True)


class MergeValidationResponse(BaseModel):
    success: bool = True
    can_merge: bool = Field(alias="canMerge")
    runs: List[Dict[str, Any]]
    merged_date_range: Optional[Dict[str, str]] = Field(default=None, alias="mergedDateRange")

    model_config = ConfigDict(populate_by_name=True)


class MergedRun(BaseModel):
    id: int
    name: str
    description: str
    net_pnl: float = Field(alias="netPnl")
    total_trades: int = Field(alias="totalTrades")
    win_rate: float = Field(alias="winRate")
    profit_factor: Optional[float] = Field(default=None, alias="profitFactor")
    max_drawdown: float = Field(alias="maxDrawdown")
    sharpe_ratio: float = Field(alias="sharpeRatio")
    date_range: Optional[Dict[str, str]] = Field(default=None, alias="dateRange")

    model_config = ConfigDict(populate_by_name=True)


class MergeExecuteResponse(BaseModel):
    success: bool = True
    merged_run_id: int = Field(alias="mergedRunId")
    message: str
    merged_run: MergedRun = Field(alias="mergedRun")

    model_config = ConfigDict(populate_by_name=True)


__all__ = [
    "BaselineResponse",
    "BaselineUpdate",
    "DailyPnlResponse",
    "DailyPnlRow",
    "DateRawDataResponse",
    "DayEventRow",
    "DaySummaryRow",
    "DayTradeRow",
    "EventsResponse",
    "FillNearMiss",
    "MergeExecuteResponse",
    "MergeRequest",
    "MergeValidationResponse",
    "MergedRun",
    "MessageResponse",
    "MetricRow",
    "MetricsResponse",
    "ParameterRow",
    "ParametersResponse",
    "RawDataResponse",
    "RunDescriptionUpdate",
    "RunSummary",
    "RunsResponse",
    "SlAdjustment",
    "TpNearMiss",
    "TradeRow",
    "TradesResponse",
]
