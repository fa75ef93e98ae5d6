"""Pydantic models for system status endpoints."""

from __future__ import annotations

from typing import List

from pydantic import BaseModel, ConfigDict


class HealthStatusResponse(BaseModel):
    """Response schema for ``GET /system/health``."""

    status: str
    env: str
    database: str

    model_config = ConfigDict(extra="allow")


class ParsersResponse(BaseModel):
    """Response schema for ``GET /system/parsers``."""

    success: bool = True
    parsers: List[str]
