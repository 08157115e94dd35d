#!/usr/bin/env python3
"""
Tests for the brief composer.

Tests cover:
- Readiness bands and strain target
- Bedtime arithmetic (including wrap past midnight)
- Snapshot selection from newest-first records
- The plain-text brief (line order and absent values)
- Prompt context sections
"""

from datetime import date

import pytest

from Tools.health.brief_composer import (
    GREEN,
    RED,
    YELLOW,
    build_snapshot,
    calc_bedtime,
    classify_readiness,
    compose_coaching_line_prompt,
    compose_prompt_context,
    compose_short_brief,
    format_12h,
    format_brief_date,
    format_hrv_delta,
    history_block,
    routine_block,
    snapshot_block,
    strain_target,
)
from Tools.health.records import (
    CycleRecord,
    RecoveryRecord,
    SleepRecord,
    Snapshot,
    TrendSummary,
)

BRIEF_DAY = date(2025, 10, 18)  # a Saturday
EIGHT_HOURS = 8 * 60 * 60 * 1000


@pytest.fixture
def snapshot():
    return Snapshot(
        day=BRIEF_DAY,
        recovery_score=72,
        hrv=62,
        resting_heart_rate=52,
        sleep_performance=88.4,
        strain=12.43,
        sleep_need_millis=EIGHT_HOURS,
    )


@pytest.fixture
def summary():
    return TrendSummary(
        avg_recovery_7=64,
        avg_recovery_30=58,
        data_points=45,
        avg_hrv_7=58,
        avg_hrv_prev_7=52,
        hrv_trend="up",
        hrv_delta=6,
        recovery_trend="improving",
        recovery_delta=8,
        avg_post_high_strain=41,
        high_strain_count=3,
    )


# ============================================================================
# Readiness and strain target
# ============================================================================


class TestReadiness:

    @pytest.mark.parametrize("score,band", [
        (100, GREEN), (67, GREEN), (66, YELLOW), (34, YELLOW), (33, RED), (0, RED), (None, RED),
    ])
    def test_bands(self, score, band):
        assert classify_readiness(score) is band

    def test_band_wording(self):
        assert GREEN.action == "Go hard"
        assert YELLOW.description == "Yellow (moderate)"
        assert RED.emoji == "🔴"


class TestStrainTarget:

    @pytest.mark.parametrize("score,expected", [
        (67, "14.1"),
        (0, "0.0"),
        (None, "0.0"),
        (100, "21.0"),
        (50, "10.5"),
    ])
    def test_one_decimal(self, score, expected):
        assert strain_target(score) == expected


# ============================================================================
# Bedtime
# ============================================================================


class TestBedtime:

    def test_eight_hours_before_seven(self):
        assert calc_bedtime(EIGHT_HOURS, "07:00") == "11:00 PM"

    def test_absent_or_zero_need(self):
        assert calc_bedtime(0, "07:00") is None
        assert calc_bedtime(None, "07:00") is None

    def test_default_wake_time(self):
        assert calc_bedtime(EIGHT_HOURS) == "12:00 AM"

    def test_same_day_bedtime(self):
        # 23:30 wake, 7.5h need -> 4:00 PM
        assert calc_bedtime(27_000_000, "23:30") == "4:00 PM"

    def test_need_rounded_to_minutes(self):
        # 7h 45m 30s rounds up to 7h 46m
        assert calc_bedtime(27_930_000, "07:00") == "11:14 PM"

    @pytest.mark.parametrize("minutes,expected", [
        (0, "12:00 AM"), (59, "12:59 AM"), (12 * 60, "12:00 PM"), (13 * 60 + 5, "1:05 PM"),
    ])
    def test_format_12h(self, minutes, expected):
        assert format_12h(minutes) == expected


def test_format_hrv_delta():
    assert format_hrv_delta(62, 58) == "+4ms vs avg"
    assert format_hrv_delta(50, 58) == "-8ms vs avg"
    assert format_hrv_delta(58, 58) == "+0ms vs avg"
    assert format_hrv_delta(None, 58) is None
    assert format_hrv_delta(62, None) is None


def test_format_brief_date():
    assert format_brief_date(BRIEF_DAY) == "Sat, Oct 18"
    assert format_brief_date(date(2025, 11, 3)) == "Mon, Nov 3"


# ============================================================================
# Snapshot
# ============================================================================


class TestBuildSnapshot:

    def test_takes_newest_records(self):
        recoveries = [
            RecoveryRecord(cycle_id=2, recovery_score=72, hrv_milli=61.6, resting_heart_rate=52),
            RecoveryRecord(cycle_id=1, recovery_score=40, hrv_milli=40.0, resting_heart_rate=60),
        ]
        sleeps = [SleepRecord(id="s1", sleep_performance=88.4, sleep_need_millis=EIGHT_HOURS)]
        cycles = [CycleRecord(id=2, start="2025-10-17T06:00:00Z", end="2025-10-18T06:00:00Z", strain=12.4)]

        today = build_snapshot(BRIEF_DAY, recoveries, sleeps, cycles)

        assert today.recovery_score == 72
        assert today.hrv == 62
        assert today.resting_heart_rate == 52
        assert today.sleep_performance == 88.4
        assert today.sleep_need_millis == EIGHT_HOURS
        assert today.strain == 12.4

    def test_in_progress_cycle_skipped_for_strain(self):
        cycles = [
            CycleRecord(id=3, start="2025-10-18T06:00:00Z", end=None, strain=2.1),
            CycleRecord(id=2, start="2025-10-17T06:00:00Z", end="2025-10-18T06:00:00Z", strain=14.8),
        ]
        today = build_snapshot(BRIEF_DAY, [], [], cycles)
        assert today.strain == 14.8

    def test_only_in_progress_cycle_leaves_strain_absent(self):
        cycles = [CycleRecord(id=3, start="2025-10-18T06:00:00Z", end=None, strain=2.1)]
        assert build_snapshot(BRIEF_DAY, [], [], cycles).strain is None

    def test_no_records(self):
        today = build_snapshot(BRIEF_DAY, [], [], [])
        assert today == Snapshot(day=BRIEF_DAY)


# ============================================================================
# Short brief
# ============================================================================


class TestShortBrief:

    def test_full_brief(self, snapshot, summary):
        brief = compose_short_brief(snapshot, summary, "07:00")
        assert brief.split("\n") == [
            "Sat, Oct 18",
            "🟢 Recovery 72% · Go hard",
            "❤️ HRV 62ms (+4ms vs avg) · RHR 52bpm",
            "😴 Sleep 88% · Strain 12.4",
            "⚡ Target 15.1",
            "🛏 Bed 11:00 PM",
        ]

    def test_no_history_omits_delta(self, snapshot):
        brief = compose_short_brief(snapshot, None, "07:00")
        assert "❤️ HRV 62ms · RHR 52bpm" in brief.split("\n")

    def test_absent_values_render_dashes(self):
        brief = compose_short_brief(Snapshot(day=BRIEF_DAY), None)
        assert brief.split("\n") == [
            "Sat, Oct 18",
            "🔴 Recovery 0% · Take it easy",
            "❤️ HRV --ms · RHR --bpm",
            "😴 Sleep -- · Strain --",
            "⚡ Target 0.0",
        ]

    def test_coaching_line_is_last(self, snapshot, summary):
        brief = compose_short_brief(snapshot, summary, "07:00", coaching_line="  Push the intervals today.\n")
        lines = brief.split("\n")
        assert lines[-1] == "💬 Push the intervals today."
        assert lines[-2] == "🛏 Bed 11:00 PM"

    def test_yellow_band(self, snapshot):
        snapshot.recovery_score = 50
        brief = compose_short_brief(snapshot, None, "07:00")
        assert "🟡 Recovery 50% · Moderate" in brief
        assert "⚡ Target 10.5" in brief

    def test_deterministic(self, snapshot, summary):
        assert compose_short_brief(snapshot, summary) == compose_short_brief(snapshot, summary)


# ============================================================================
# Prompt context
# ============================================================================


class TestSnapshotBlock:

    def test_values(self, snapshot):
        block = snapshot_block(snapshot, "07:00")
        assert block.split("\n") == [
            "Today's Data:",
            "- Recovery: 72%: Green (well-recovered)",
            "- HRV: 62ms",
            "- Resting HR: 52 bpm",
            "- Sleep Performance: 88%",
            "- Yesterday's Strain: 12.4",
            "- Suggested Strain Target: 15.1",
            "- Recommended Bedtime: 11:00 PM",
        ]

    def test_absent_values_are_unavailable(self):
        block = snapshot_block(Snapshot(day=BRIEF_DAY))
        assert "- Recovery: unavailable: Red (under-recovered)" in block
        assert "- HRV: unavailable" in block
        assert "- Recommended Bedtime: unavailable" in block


class TestHistoryBlock:

    def test_none_without_summary(self):
        assert history_block(None) is None

    def test_all_lines(self, summary):
        assert history_block(summary).split("\n") == [
            "Historical Patterns (45 days of data):",
            "- 7-day avg recovery: 64% | 30-day avg: 58%",
            "- Recovery trend: improving (+8% vs prior week)",
            "- HRV: 58ms 7-day avg (up +6ms vs prior week (positive sign))",
            "- After high-strain days (15+): avg next-day recovery is 41% (seen 3x in last 30 days)",
        ]

    def test_declining_and_down(self, summary):
        summary.recovery_trend, summary.recovery_delta = "declining", -9
        summary.hrv_trend, summary.hrv_delta = "down", -5
        block = history_block(summary)
        assert "- Recovery trend: declining (-9% vs prior week, may need more rest)" in block
        assert "(down -5ms vs prior week (watch your load))" in block

    def test_absent_sub_lines_omitted(self):
        minimal = TrendSummary(avg_recovery_7=60, avg_recovery_30=60, data_points=3, avg_hrv_7=55)
        assert minimal.recovery_trend is None
        assert history_block(minimal).split("\n") == [
            "Historical Patterns (3 days of data):",
            "- 7-day avg recovery: 60% | 30-day avg: 60%",
            "- HRV: 55ms 7-day avg (no prior week data)",
        ]


class TestComposePromptContext:

    def test_sections_in_order(self, snapshot, summary):
        prompt = compose_prompt_context(snapshot, summary, ["Cold plunge", "Journal"], "07:00")
        assert prompt.index("Today's Data:") < prompt.index("Historical Patterns")
        assert prompt.index("Historical Patterns") < prompt.index("Morning Routine:")
        assert "- Cold plunge\n- Journal" in prompt
        assert prompt.rstrip().endswith("reference actual numbers.")

    def test_single_point_history_still_has_snapshot(self, snapshot):
        prompt = compose_prompt_context(snapshot, None, [], "07:00")
        assert "Today's Data:" in prompt
        assert "Historical Patterns" not in prompt
        assert "(no routine items set)" in prompt

    def test_routine_block(self):
        assert routine_block([]) == "Morning Routine:\n(no routine items set)"
        assert routine_block(["Stretch"]) == "Morning Routine:\n- Stretch"

    def test_coaching_line_prompt(self, snapshot, summary):
        prompt = compose_coaching_line_prompt(snapshot, summary, "07:00")
        assert "Today's Data:" in prompt
        assert "Morning Routine" not in prompt
        assert "exactly one sentence" in prompt
