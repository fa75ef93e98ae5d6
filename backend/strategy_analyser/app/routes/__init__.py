"""Router modules exposed by the strategy analyser API."""
from . import merge, parse, runs, strategies, system

__all__ = [
    "merge",
    "parse",
    "runs",
    "strategies",
    "system",
]
