"""
Health analysis for the Whoop dashboard.

- records        : Typed Whoop records and derived day points
- trend_analyzer : Rolling averages, week-over-week trends, post-strain recovery
- brief_composer : Plain-text brief and coaching prompts
- coaching_relay : Streams coaching text to the caller
"""

from .records import (
    CycleRecord,
    MergedDayPoint,
    RecoveryRecord,
    SleepRecord,
    Snapshot,
    TrendSummary,
)
from .trend_analyzer import analyze

__all__ = [
    "CycleRecord",
    "MergedDayPoint",
    "RecoveryRecord",
    "SleepRecord",
    "Snapshot",
    "TrendSummary",
    "analyze",
]
