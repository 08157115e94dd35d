"""
Pytest configuration and shared fixtures for the Whoop dashboard tests.
"""

from datetime import date, timedelta
from pathlib import Path
import sys

import pytest


# Add project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from Tools.health.records import CycleRecord, RecoveryRecord  # noqa: E402
from Tools.state_store.token_store import TokenStore  # noqa: E402


@pytest.fixture
def project_root_path():
    """Return the project root directory path."""
    return project_root


@pytest.fixture
def token_store(tmp_path):
    """TokenStore backed by a temporary database."""
    return TokenStore(db_path=tmp_path / "whoop_test.db")


def build_history(days, newest=date(2024, 3, 31)):
    """
    Build matching recovery and cycle records, newest first.

    Args:
        days: List of dicts with ``recovery`` and optional ``strain``/``hrv``;
              index 0 is the newest day
        newest: Start date of the newest cycle

    Returns:
        (recoveries, cycles)
    """
    recoveries, cycles = [], []
    for i, day in enumerate(days):
        start = newest - timedelta(days=i)
        cycle_id = 1000 + i
        cycles.append(CycleRecord(
            id=cycle_id,
            start=f"{start.isoformat()}T06:00:00.000Z",
            end=f"{(start + timedelta(days=1)).isoformat()}T06:00:00.000Z",
            strain=day.get("strain"),
        ))
        recoveries.append(RecoveryRecord(
            cycle_id=cycle_id,
            recovery_score=day.get("recovery"),
            hrv_milli=day.get("hrv"),
        ))
    return recoveries, cycles


@pytest.fixture
def history():
    """Factory fixture: ``history(days)`` -> (recoveries, cycles)."""
    return build_history


@pytest.fixture
def raw_recovery():
    """Whoop v2 recovery record as returned by the API."""
    return {
        "cycle_id": 93845,
        "sleep_id": "ecfc6a15-4661-442f-a9a4-f160dd7afae8",
        "user_id": 10129,
        "created_at": "2024-03-31T11:25:44.774Z",
        "updated_at": "2024-03-31T14:25:44.774Z",
        "score_state": "SCORED",
        "score": {
            "user_calibrating": False,
            "recovery_score": 72,
            "resting_heart_rate": 52,
            "hrv_rmssd_milli": 61.6,
            "spo2_percentage": 95.6,
            "skin_temp_celsius": 33.7,
        },
    }


@pytest.fixture
def raw_cycle():
    """Whoop v1 cycle record (completed)."""
    return {
        "id": 93845,
        "user_id": 10129,
        "start": "2024-03-30T05:25:44.774Z",
        "end": "2024-03-31T05:25:44.774Z",
        "timezone_offset": "-05:00",
        "score_state": "SCORED",
        "score": {
            "strain": 12.43,
            "kilojoule": 8288.3,
            "average_heart_rate": 68,
            "max_heart_rate": 141,
        },
    }


@pytest.fixture
def raw_sleep():
    """Whoop v2 sleep record."""
    return {
        "id": "ecfc6a15-4661-442f-a9a4-f160dd7afae8",
        "cycle_id": 93845,
        "nap": False,
        "score_state": "SCORED",
        "score": {
            "sleep_needed": {
                "baseline_milli": 27395716,
                "need_from_sleep_debt_milli": 352230,
                "need_from_recent_strain_milli": 208595,
                "need_from_recent_nap_milli": -12312,
            },
            "respiratory_rate": 16.1,
            "sleep_performance_percentage": 88.4,
            "sleep_consistency_percentage": 90,
            "sleep_efficiency_percentage": 91.7,
        },
    }
