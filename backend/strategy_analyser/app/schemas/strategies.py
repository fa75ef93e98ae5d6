"""Schemas for strategy endpoints."""
from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict


class StrategyOverview(BaseModel):
    """A strategy with aggregate statistics over its runs."""

    id: int
    name: str
    description: Optional[str] = None
    created_at: datetime
    run_count: int = 0
    avg_net_pnl: Optional[float] = None
    best_net_pnl: Optional[float] = None
    worst_net_pnl: Optional[float] = None

    model_config = ConfigDict(from_attributes=True)


class StrategiesResponse(BaseModel):
    success: bool = True
    strategies: List[StrategyOverview]


class NotesResponse(BaseModel):
    success: bool = True
    notes: str = ""


class NotesUpdate(BaseModel):
    notes: Optional[str] = None


__all__ = ["NotesResponse", "NotesUpdate", "StrategiesResponse", "StrategyOverview"]
