"""
Trend Analyzer for Whoop history.

Merges recovery and cycle records into a newest-first day series and derives
the rolling averages, week-over-week trends and post-high-strain recovery
used to ground the coaching prompt.

Everything in this module is pure: the same records always produce the same
TrendSummary, and nothing is cached between requests.
"""

from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, Iterable, List, Optional, Sequence

from Tools.health.records import (
    CycleRecord,
    MergedDayPoint,
    RecoveryRecord,
    TrendSummary,
)

MIN_DATA_POINTS = 3
WEEK = 7
MONTH = 30

HRV_TREND_THRESHOLD = 3  # ms
RECOVERY_TREND_THRESHOLD = 5  # percentage points
MIN_PRIOR_WEEK_POINTS = 3

HIGH_STRAIN = 15.0


def round_half_up(value: float, ndigits: int = 0) -> Decimal:
    """
    Round half away from zero.

    The exact binary value of the float is rounded, so 2.5 -> 3, -2.5 -> -3
    and 14.07 -> 14.1 at one decimal.
    """
    exponent = Decimal(1).scaleb(-ndigits)
    return Decimal(value).quantize(exponent, rounding=ROUND_HALF_UP)


def round_int(value: float) -> int:
    """Round half away from zero to a whole number."""
    return int(round_half_up(value))


def average(values: Iterable[float]) -> Optional[int]:
    """Whole-number mean of the values, or None when there are none."""
    values = list(values)
    if not values:
        return None
    return round_int(sum(values) / len(values))


def merge_day_points(
    recoveries: Sequence[RecoveryRecord],
    cycles: Sequence[CycleRecord],
) -> List[MergedDayPoint]:
    """
    Join completed cycles with their scored recoveries, newest first.

    A later recovery with the same cycle id replaces an earlier one. Cycles
    still in progress and cycles without a recovery score are dropped.
    """
    recovery_by_cycle: Dict[object, RecoveryRecord] = {
        r.cycle_id: r for r in recoveries
    }

    points = []
    for cycle in cycles:
        if not cycle.completed:
            continue
        recovery = recovery_by_cycle.get(cycle.id)
        if recovery is None or recovery.recovery_score is None:
            continue
        points.append(MergedDayPoint(
            date=cycle.start_date,
            recovery=recovery.recovery_score,
            strain=cycle.strain,
            hrv=round_int(recovery.hrv_milli) if recovery.hrv_milli is not None else None,
        ))

    points.sort(key=lambda p: p.date or "", reverse=True)
    return points


def _avg_recovery(points: Sequence[MergedDayPoint]) -> Optional[int]:
    return average(p.recovery for p in points)


def _avg_hrv(points: Sequence[MergedDayPoint]) -> Optional[int]:
    return average(p.hrv for p in points if p.hrv is not None)


def classify_hrv_trend(diff: int) -> str:
    """Label a week-over-week HRV difference (ms). Exactly +/-3 is stable."""
    if diff > HRV_TREND_THRESHOLD:
        return "up"
    elif diff < -HRV_TREND_THRESHOLD:
        return "down"
    return "stable"


def classify_recovery_trend(diff: int) -> str:
    """Label a week-over-week recovery difference. Exactly +/-5 is stable."""
    if diff > RECOVERY_TREND_THRESHOLD:
        return "improving"
    elif diff < -RECOVERY_TREND_THRESHOLD:
        return "declining"
    return "stable"


def _post_high_strain_recoveries(last30: Sequence[MergedDayPoint]) -> List[int]:
    """
    Recovery of the point after each high-strain point.

    The series is newest first, so ``last30[i + 1]`` is the next older entry.
    Adjacency is by index only; missing calendar days are not detected.
    """
    collected = []
    for i in range(min(len(last30) - 1, MONTH - 1)):
        strain = last30[i].strain
        if strain is not None and strain >= HIGH_STRAIN:
            collected.append(last30[i + 1].recovery)
    return collected


def analyze(
    recoveries: Sequence[RecoveryRecord],
    cycles: Sequence[CycleRecord],
) -> Optional[TrendSummary]:
    """
    Compute the historical trend summary.

    Args:
        recoveries: Recovery records, any order
        cycles: Cycle records, any order

    Returns:
        TrendSummary, or None when fewer than 3 merged points exist

    Algorithm:
        1. Merge completed cycles with scored recoveries (newest first)
        2. Return None below MIN_DATA_POINTS
        3. Split into last7, prev7 (indices 7-13) and last30
        4. Average recovery over last7/last30 and HRV over last7/prev7
        5. HRV trend from the rounded weekly means (needs both)
        6. Recovery trend from the rounded weekly means (needs 3+ prior points)
        7. Average next-entry recovery after strain >= 15 within last30
    """
    merged = merge_day_points(recoveries, cycles)
    if len(merged) < MIN_DATA_POINTS:
        return None

    last7 = merged[:WEEK]
    prev7 = merged[WEEK:2 * WEEK]
    last30 = merged[:MONTH]

    avg_recovery_7 = _avg_recovery(last7)
    avg_recovery_30 = _avg_recovery(last30)
    avg_hrv_7 = _avg_hrv(last7)
    avg_hrv_prev_7 = _avg_hrv(prev7)

    hrv_trend = hrv_delta = None
    if avg_hrv_7 is not None and avg_hrv_prev_7 is not None:
        hrv_delta = avg_hrv_7 - avg_hrv_prev_7
        hrv_trend = classify_hrv_trend(hrv_delta)

    recovery_trend = recovery_delta = None
    if len(prev7) >= MIN_PRIOR_WEEK_POINTS:
        recovery_delta = avg_recovery_7 - _avg_recovery(prev7)
        recovery_trend = classify_recovery_trend(recovery_delta)

    post_high_strain = _post_high_strain_recoveries(last30)

    return TrendSummary(
        avg_recovery_7=avg_recovery_7,
        avg_recovery_30=avg_recovery_30,
        data_points=len(merged),
        avg_hrv_7=avg_hrv_7,
        avg_hrv_prev_7=avg_hrv_prev_7,
        hrv_trend=hrv_trend,
        hrv_delta=hrv_delta,
        recovery_trend=recovery_trend,
        recovery_delta=recovery_delta,
        avg_post_high_strain=average(post_high_strain),
        high_strain_count=len(post_high_strain),
    )


def recovery_stats(recoveries: Sequence[RecoveryRecord]) -> Dict[str, Optional[int]]:
    """
    Plain averages over raw recovery records (no cycle join).

    Returns:
        Dictionary with avgHRV, avgRecovery and dataPoints
    """
    return {
        "avgHRV": average(
            round_int(r.hrv_milli) for r in recoveries if r.hrv_milli is not None
        ),
        "avgRecovery": average(
            r.recovery_score for r in recoveries if r.recovery_score is not None
        ),
        "dataPoints": len(recoveries),
    }
