"""
Brief Composer.

Turns today's Whoop snapshot and the historical TrendSummary into:
- the short plain-text brief (newline-joined, emoji-prefixed lines) consumed
  by phone automations, whose field order and formatting must stay stable
- the long-form prompt sent to Claude for the streamed coaching brief
- the short prompt for the optional one-sentence coaching line

Numbers in the output always come from an input field. Absent snapshot values
render as "--" in the short brief and "unavailable" in the prompt.
"""

from dataclasses import dataclass
from datetime import date
from typing import List, Optional, Sequence

from Tools.health.records import (
    CycleRecord,
    RecoveryRecord,
    SleepRecord,
    Snapshot,
    TrendSummary,
)
from Tools.health.trend_analyzer import round_half_up, round_int

STRAIN_PER_RECOVERY_POINT = 0.21
MINUTES_PER_DAY = 24 * 60
DEFAULT_WAKE_TIME = "08:00"
UNAVAILABLE = "unavailable"


@dataclass(frozen=True)
class Readiness:
    """Readiness band for a recovery score."""
    level: str  # green, yellow, red
    emoji: str
    action: str  # short brief wording
    description: str  # prompt wording


GREEN = Readiness("green", "🟢", "Go hard", "Green (well-recovered)")
YELLOW = Readiness("yellow", "🟡", "Moderate", "Yellow (moderate)")
RED = Readiness("red", "🔴", "Take it easy", "Red (under-recovered)")


def classify_readiness(recovery_score: Optional[int]) -> Readiness:
    """Classify a 0-100 recovery score; an absent score counts as 0."""
    score = recovery_score or 0
    if score >= 67:
        return GREEN
    elif score >= 34:
        return YELLOW
    return RED


def strain_target(recovery_score: Optional[int]) -> str:
    """Suggested strain for the day, one decimal (67 -> "14.1")."""
    score = recovery_score or 0
    return f"{round_half_up(score * STRAIN_PER_RECOVERY_POINT, 1):.1f}"


def format_12h(minutes: int) -> str:
    """Minutes since midnight -> "H:MM AM/PM"."""
    hours = (minutes // 60) % 24
    mins = minutes % 60
    period = "PM" if hours >= 12 else "AM"
    return f"{hours % 12 or 12}:{mins:02d} {period}"


def calc_bedtime(
    sleep_need_millis: Optional[int],
    wake_time: str = DEFAULT_WAKE_TIME,
) -> Optional[str]:
    """
    Bedtime that covers the sleep need before waking.

    Args:
        sleep_need_millis: Sleep need in milliseconds
        wake_time: Wake time as "HH:MM"

    Returns:
        "H:MM AM/PM", or None when the sleep need is absent or zero
    """
    if not sleep_need_millis:
        return None

    wake_hours, wake_minutes = (int(part) for part in wake_time.split(":"))
    need_minutes = round_int(sleep_need_millis / 1000 / 60)

    bed_minutes = wake_hours * 60 + wake_minutes - need_minutes
    if bed_minutes < 0:
        bed_minutes += MINUTES_PER_DAY
    return format_12h(bed_minutes)


def format_hrv_delta(hrv: Optional[int], avg_hrv: Optional[int]) -> Optional[str]:
    """Signed difference to the average HRV, e.g. "+4ms vs avg"."""
    if hrv is None or avg_hrv is None:
        return None
    return f"{hrv - avg_hrv:+d}ms vs avg"


def format_percent(value: Optional[float], missing: str = "--") -> str:
    return f"{round_int(value)}%" if value is not None else missing


def format_strain(value: Optional[float], missing: str = "--") -> str:
    return f"{round_half_up(value, 1):.1f}" if value is not None else missing


def format_brief_date(day: date) -> str:
    """e.g. "Sat, Oct 18"."""
    return f"{day:%a}, {day:%b} {day.day}"


def build_snapshot(
    day: date,
    recoveries: Sequence[RecoveryRecord],
    sleeps: Sequence[SleepRecord],
    cycles: Sequence[CycleRecord],
) -> Snapshot:
    """
    Pick today's values from newest-first record lists.

    Yesterday's strain comes from the most recent completed cycle only;
    a cycle still in progress never stands in for it.
    """
    recovery = recoveries[0] if recoveries else None
    sleep = sleeps[0] if sleeps else None
    completed = next((c for c in cycles if c.completed), None)

    snapshot = Snapshot(day=day)
    if recovery is not None:
        snapshot.recovery_score = recovery.recovery_score
        if recovery.hrv_milli is not None:
            snapshot.hrv = round_int(recovery.hrv_milli)
        snapshot.resting_heart_rate = recovery.resting_heart_rate
    if sleep is not None:
        snapshot.sleep_performance = sleep.sleep_performance
        snapshot.sleep_need_millis = sleep.sleep_need_millis
    if completed is not None:
        snapshot.strain = completed.strain
    return snapshot


# =============================================================================
# Short brief
# =============================================================================

def compose_short_brief(
    today: Snapshot,
    summary: Optional[TrendSummary],
    wake_time: str = DEFAULT_WAKE_TIME,
    coaching_line: Optional[str] = None,
) -> str:
    """
    Plain-text morning brief, one field group per line.

    Line order: date, readiness, HRV/RHR, sleep/strain, strain target,
    bedtime (only when computable), coaching line (only when given).
    """
    score = today.recovery_score or 0
    readiness = classify_readiness(score)

    hrv = f"{today.hrv}ms" if today.hrv is not None else "--ms"
    delta = format_hrv_delta(today.hrv, summary.avg_hrv_7 if summary else None)
    if delta:
        hrv = f"{hrv} ({delta})"
    rhr = round_int(today.resting_heart_rate) if today.resting_heart_rate is not None else "--"

    lines = [
        format_brief_date(today.day),
        f"{readiness.emoji} Recovery {score}% · {readiness.action}",
        f"❤️ HRV {hrv} · RHR {rhr}bpm",
        f"😴 Sleep {format_percent(today.sleep_performance)} · Strain {format_strain(today.strain)}",
        f"⚡ Target {strain_target(score)}",
    ]

    bedtime = calc_bedtime(today.sleep_need_millis, wake_time)
    if bedtime:
        lines.append(f"🛏 Bed {bedtime}")
    if coaching_line:
        lines.append(f"💬 {coaching_line.strip()}")

    return "\n".join(lines)


# =============================================================================
# Prompt context
# =============================================================================

PROMPT_PREAMBLE = (
    "You are a concise personal health coach with access to this athlete's "
    "real Whoop data. Give a short, personalized morning brief."
)

PROMPT_INSTRUCTIONS = """Write a brief with these sections (total under 160 words):
1. One sentence on how they're looking today, referencing their personal trends where relevant.
2. Specific workout intensity or activity recommendation based on today's numbers and their historical patterns.
3. A natural reminder of their morning routine items.
4. One short motivating closing line.

Be direct, personal, and reference actual numbers."""

COACHING_LINE_INSTRUCTIONS = (
    "Reply with exactly one sentence (under 25 words) of coaching for today, "
    "referencing at least one of the numbers above. No preamble."
)


def snapshot_block(today: Snapshot, wake_time: str = DEFAULT_WAKE_TIME) -> str:
    """Today's numbers; every line is always present."""
    readiness = classify_readiness(today.recovery_score)
    recovery = (
        f"{today.recovery_score}%" if today.recovery_score is not None else UNAVAILABLE
    )
    hrv = f"{today.hrv}ms" if today.hrv is not None else UNAVAILABLE
    rhr = (
        f"{round_int(today.resting_heart_rate)} bpm"
        if today.resting_heart_rate is not None else UNAVAILABLE
    )

    return "\n".join([
        "Today's Data:",
        f"- Recovery: {recovery}: {readiness.description}",
        f"- HRV: {hrv}",
        f"- Resting HR: {rhr}",
        f"- Sleep Performance: {format_percent(today.sleep_performance, UNAVAILABLE)}",
        f"- Yesterday's Strain: {format_strain(today.strain, UNAVAILABLE)}",
        f"- Suggested Strain Target: {strain_target(today.recovery_score)}",
        f"- Recommended Bedtime: {calc_bedtime(today.sleep_need_millis, wake_time) or UNAVAILABLE}",
    ])


def _recovery_trend_sentence(summary: TrendSummary) -> Optional[str]:
    if summary.recovery_trend is None:
        return None
    if summary.recovery_trend == "improving":
        return f"improving ({summary.recovery_delta:+d}% vs prior week)"
    if summary.recovery_trend == "declining":
        return f"declining ({summary.recovery_delta:+d}% vs prior week, may need more rest)"
    return "stable week over week"


def _hrv_trend_sentence(summary: TrendSummary) -> str:
    if summary.hrv_trend == "up":
        return f"up {summary.hrv_delta:+d}ms vs prior week (positive sign)"
    if summary.hrv_trend == "down":
        return f"down {summary.hrv_delta:+d}ms vs prior week (watch your load)"
    if summary.hrv_trend == "stable":
        return "stable week over week"
    return "no prior week data"


def history_block(summary: Optional[TrendSummary]) -> Optional[str]:
    """
    Historical Patterns section, or None without a summary.

    Sub-lines whose value is absent are left out.
    """
    if summary is None:
        return None

    lines: List[str] = [
        f"Historical Patterns ({summary.data_points} days of data):",
        f"- 7-day avg recovery: {summary.avg_recovery_7}% | 30-day avg: {summary.avg_recovery_30}%",
    ]

    recovery_trend = _recovery_trend_sentence(summary)
    if recovery_trend:
        lines.append(f"- Recovery trend: {recovery_trend}")

    if summary.avg_hrv_7 is not None:
        lines.append(f"- HRV: {summary.avg_hrv_7}ms 7-day avg ({_hrv_trend_sentence(summary)})")

    if summary.avg_post_high_strain is not None:
        lines.append(
            f"- After high-strain days (15+): avg next-day recovery is "
            f"{summary.avg_post_high_strain}% (seen {summary.high_strain_count}x in last 30 days)"
        )

    return "\n".join(lines)


def routine_block(routine: Sequence[str]) -> str:
    items = "\n".join(f"- {item}" for item in routine) if routine else "(no routine items set)"
    return f"Morning Routine:\n{items}"


def compose_prompt_context(
    today: Snapshot,
    summary: Optional[TrendSummary],
    routine: Sequence[str],
    wake_time: str = DEFAULT_WAKE_TIME,
) -> str:
    """
    Long-form coaching prompt.

    Args:
        today: Today's snapshot
        summary: Historical trends, or None when history is too short
        routine: The user's morning checklist, included verbatim
        wake_time: Wake time used for the bedtime recommendation

    Returns:
        Prompt text for the completion gateway
    """
    sections = [PROMPT_PREAMBLE, snapshot_block(today, wake_time)]
    history = history_block(summary)
    if history:
        sections.append(history)
    sections.append(routine_block(routine))
    sections.append(PROMPT_INSTRUCTIONS)
    return "\n\n".join(sections)


def compose_coaching_line_prompt(
    today: Snapshot,
    summary: Optional[TrendSummary],
    wake_time: str = DEFAULT_WAKE_TIME,
) -> str:
    """Prompt for the single sentence appended to the short brief."""
    sections = [PROMPT_PREAMBLE, snapshot_block(today, wake_time)]
    history = history_block(summary)
    if history:
        sections.append(history)
    sections.append(COACHING_LINE_INSTRUCTIONS)
    return "\n\n".join(sections)
