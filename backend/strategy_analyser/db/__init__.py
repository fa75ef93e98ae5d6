"""Database helpers for the strategy analyser service."""
from __future__ import annotations

from . import models as _models
from .base import (
    Base,
    create_engine,
    create_schema,
    create_session,
    dispose_engine,
    metadata,
)
from .models import *  # noqa: F401,F403

__all__ = [
    "Base",
    "create_engine",
    "create_schema",
    "create_session",
    "dispose_engine",
    "metadata",
] + _models.__all__
