"""
Whoop record models.

Typed views over the JSON records returned by the Whoop developer API, plus
the derived structures the trend analyzer and brief composer work with.
All derived structures are rebuilt on every request; nothing here is persisted.
"""

from dataclasses import dataclass
from datetime import date
from typing import Any, Dict, Optional


def _score(raw: Dict[str, Any]) -> Dict[str, Any]:
    """Return the nested ``score`` object, tolerating unscored records."""
    return raw.get("score") or {}


@dataclass
class RecoveryRecord:
    """One recovery per physiological cycle."""
    cycle_id: Any
    recovery_score: Optional[int] = None  # 0-100
    hrv_milli: Optional[float] = None  # hrv_rmssd_milli
    resting_heart_rate: Optional[float] = None
    spo2_percentage: Optional[float] = None

    @classmethod
    def from_api(cls, raw: Dict[str, Any]) -> "RecoveryRecord":
        score = _score(raw)
        return cls(
            cycle_id=raw.get("cycle_id"),
            recovery_score=score.get("recovery_score"),
            hrv_milli=score.get("hrv_rmssd_milli"),
            resting_heart_rate=score.get("resting_heart_rate"),
            spo2_percentage=score.get("spo2_percentage"),
        )


@dataclass
class CycleRecord:
    """One physiological day. ``end is None`` means the cycle is still running."""
    id: Any
    start: Optional[str] = None
    end: Optional[str] = None
    strain: Optional[float] = None  # 0-21

    @property
    def completed(self) -> bool:
        return self.end is not None

    @property
    def start_date(self) -> Optional[str]:
        """Calendar date (YYYY-MM-DD) of the cycle start."""
        return self.start[:10] if self.start else None

    @classmethod
    def from_api(cls, raw: Dict[str, Any]) -> "CycleRecord":
        return cls(
            id=raw.get("id"),
            start=raw.get("start"),
            end=raw.get("end"),
            strain=_score(raw).get("strain"),
        )


@dataclass
class SleepRecord:
    """A sleep activity with its performance score and sleep need."""
    id: Any
    sleep_performance: Optional[float] = None
    sleep_need_millis: Optional[int] = None

    @classmethod
    def from_api(cls, raw: Dict[str, Any]) -> "SleepRecord":
        score = _score(raw)
        sleep_needed = score.get("sleep_needed") or {}
        return cls(
            id=raw.get("id"),
            sleep_performance=score.get("sleep_performance_percentage"),
            sleep_need_millis=sleep_needed.get("baseline_milli"),
        )


@dataclass
class MergedDayPoint:
    """A completed cycle joined with its scored recovery."""
    date: Optional[str]
    recovery: int
    strain: Optional[float] = None
    hrv: Optional[int] = None  # whole milliseconds


@dataclass
class TrendSummary:
    """
    Historical statistics over the newest-first merged series.

    Averages are whole numbers (rounded half away from zero). Trend labels
    are None when the comparison window has too little data.
    """
    avg_recovery_7: int
    avg_recovery_30: int
    data_points: int
    avg_hrv_7: Optional[int] = None
    avg_hrv_prev_7: Optional[int] = None
    hrv_trend: Optional[str] = None  # up, down, stable
    hrv_delta: Optional[int] = None
    recovery_trend: Optional[str] = None  # improving, declining, stable
    recovery_delta: Optional[int] = None
    avg_post_high_strain: Optional[int] = None
    high_strain_count: int = 0


@dataclass
class Snapshot:
    """Today's values as shown in the morning brief."""
    day: date
    recovery_score: Optional[int] = None
    hrv: Optional[int] = None
    resting_heart_rate: Optional[float] = None
    sleep_performance: Optional[float] = None
    strain: Optional[float] = None  # yesterday's completed cycle
    sleep_need_millis: Optional[int] = None
