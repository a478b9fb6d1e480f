"""Constant-memory running statistics that are safe to feed from many threads."""

from .moments import EMPTY, Moments
from .rwlock import ReadWriteLock
from .snapshot import StatsSnapshot, format_summary
from .summary_statistics import Accumulator

__all__ = [
    "Accumulator",
    "Moments",
    "EMPTY",
    "StatsSnapshot",
    "format_summary",
    "ReadWriteLock",
]
