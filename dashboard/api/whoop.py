"""
Whoop data API endpoints.

Provides REST API endpoints exposing the latest Whoop records to the
dashboard client: recovery, sleep, workouts, yesterday's cycle, the weekly
recovery/strain chart, strength sessions, and 30-day averages.
"""

import asyncio
import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, HTTPException, Query

from Tools.adapters.base import ToolResult
from Tools.health.records import RecoveryRecord
from Tools.health.trend_analyzer import recovery_stats

from dashboard.whoop_client import get_client

logger = logging.getLogger(__name__)

# Create Whoop data router
router = APIRouter(tags=["whoop"])

STRENGTH_KEYWORDS = ("weight", "strength", "power", "functional", "crossfit", "resistance", "lift")


def _records(result: ToolResult) -> List[Dict[str, Any]]:
    """
    Unwrap an adapter result or raise the matching HTTP error.

    Raises:
        HTTPException: 401 when no Whoop credential is stored
        HTTPException: 500 with the upstream message otherwise
    """
    if result.success:
        return result.records
    if result.unauthenticated:
        raise HTTPException(status_code=401, detail="Not authenticated")
    raise HTTPException(status_code=500, detail=result.error)


async def _fetch(tool_name: str, limit: int) -> List[Dict[str, Any]]:
    client = get_client()
    return _records(await client.call_tool(tool_name, {"limit": limit}))


@router.get("/recovery")
async def get_recovery() -> Optional[Dict[str, Any]]:
    """Latest recovery record, or null before the first scored cycle."""
    records = await _fetch("get_recovery", 1)
    return records[0] if records else None


@router.get("/sleep")
async def get_sleep() -> Optional[Dict[str, Any]]:
    """Latest sleep record."""
    records = await _fetch("get_sleep", 1)
    return records[0] if records else None


@router.get("/workout")
async def get_workouts(
    limit: int = Query(default=5, description="Number of workouts", ge=1, le=25)
) -> List[Dict[str, Any]]:
    """Most recent workouts, newest first."""
    return await _fetch("get_workouts", limit)


@router.get("/cycle")
async def get_cycle() -> Optional[Dict[str, Any]]:
    """
    Yesterday's cycle.

    Returns the most recent completed cycle. A cycle still in progress is
    never returned in its place; the response is null until one completes.
    """
    records = await _fetch("get_cycles", 2)
    return next((r for r in records if r.get("end") is not None), None)


@router.get("/weekly")
async def get_weekly() -> List[Dict[str, Any]]:
    """
    Last 7 cycles with their recovery score attached.

    Returns:
        Cycle records, each with an added ``recovery_score`` (null if unscored)
    """
    cycles, recoveries = await asyncio.gather(
        _fetch("get_cycles", 7),
        _fetch("get_recovery", 7),
    )
    recovery_by_cycle = {
        r.get("cycle_id"): (r.get("score") or {}).get("recovery_score") for r in recoveries
    }
    return [
        {**cycle, "recovery_score": recovery_by_cycle.get(cycle.get("id"))}
        for cycle in cycles
    ]


@router.get("/ready")
async def get_ready() -> Dict[str, bool]:
    """
    Whether Whoop has scored today's recovery yet.

    Reports not-ready when no credential is stored; upstream failures are
    returned as errors.
    """
    client = get_client()
    result = await client.call_tool("get_recovery", {"limit": 1})
    if result.unauthenticated:
        return {"ready": False}

    records = _records(result)
    score = (records[0].get("score") or {}).get("recovery_score") if records else None
    return {"ready": score is not None and score > 0}


@router.get("/strength")
async def get_strength() -> List[Dict[str, Any]]:
    """
    Recent strength sessions.

    Filters the last 20 workouts by sport name; falls back to the six most
    recent workouts of any kind when none match.
    """
    workouts = await _fetch("get_workouts", 20)
    strength = [
        w for w in workouts
        if any(k in (w.get("sport_name") or "").lower() for k in STRENGTH_KEYWORDS)
    ]
    return strength if strength else workouts[:6]


@router.get("/stats")
async def get_stats() -> Dict[str, Any]:
    """30-day average HRV and recovery."""
    records = await _fetch("get_recovery", 30)
    return recovery_stats([RecoveryRecord.from_api(r) for r in records])
