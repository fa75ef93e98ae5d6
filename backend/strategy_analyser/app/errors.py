"""Domain errors raised by the service layer."""
from __future__ import annotations

from typing import Any, Dict, Optional


class AnalyserError(ValueError):
    """A business rule violation that maps onto an HTTP status."""

    status_code = 400

    def __init__(
        self,
        message: str,
        *,
        status_code: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        self.details = details

    def to_detail(self) -> Any:
        if self.details is None:
            return self.message
        return {"error": self.message, "details": self.details}


class NotFoundError(AnalyserError):
    status_code = 404


class MergeError(AnalyserError):
    pass


__all__ = ["AnalyserError", "MergeError", "NotFoundError"]
