"""
Coaching API endpoints.

- GET  /api/brief       plain-text morning brief for phone automations
- POST /api/ai-suggest  streamed Claude coaching brief (server-sent events)

Both endpoints fetch today's records plus history in parallel, run the trend
analyzer, and hand the results to the brief composer.
"""

import asyncio
import logging
from datetime import date
from typing import List, Optional, Tuple

from fastapi import APIRouter, HTTPException, Query
from fastapi.responses import PlainTextResponse, StreamingResponse
from pydantic import BaseModel, Field

from Tools.adapters.errors import (
    GatewayRequestError,
    GatewayUnavailableError,
    WhoopAPIError,
    WhoopAuthError,
    log_error_with_context,
)
from Tools.adapters.whoop import WhoopAdapter
from Tools.health.brief_composer import (
    build_snapshot,
    compose_coaching_line_prompt,
    compose_prompt_context,
    compose_short_brief,
)
from Tools.health.coaching_relay import ensure_available, relay_sse
from Tools.health.records import (
    CycleRecord,
    RecoveryRecord,
    SleepRecord,
    Snapshot,
    TrendSummary,
)
from Tools.health.trend_analyzer import analyze

from dashboard.config import config
from dashboard.whoop_client import get_client, get_gateway

logger = logging.getLogger(__name__)

# Create coaching router
router = APIRouter(tags=["coach"])


class SuggestRequest(BaseModel):
    """Body of POST /api/ai-suggest."""
    routine: List[str] = Field(default_factory=list, description="Morning routine checklist")


async def fetch_history(
    client: WhoopAdapter, limit: int
) -> Tuple[List[RecoveryRecord], List[SleepRecord], List[CycleRecord]]:
    """Fetch recoveries, the latest sleep, and cycles concurrently."""
    recoveries, sleeps, cycles = await asyncio.gather(
        client.fetch_recoveries(limit),
        client.fetch_sleep(1),
        client.fetch_cycles(limit),
    )
    return recoveries, sleeps, cycles


async def coaching_line(today: Snapshot, summary: Optional[TrendSummary]) -> Optional[str]:
    """
    One sentence of coaching for the plain-text brief.

    Gateway failures are logged and the line is left out; they never fail
    the brief itself.
    """
    gateway = get_gateway()
    if not gateway.available:
        return None

    prompt = compose_coaching_line_prompt(today, summary, config.coach.wake_time)
    try:
        text = await gateway.complete(prompt, config.coach.line_max_tokens)
    except (GatewayRequestError, GatewayUnavailableError) as e:
        logger.warning(f"Coaching line skipped: {e}")
        return None

    lines = text.strip().splitlines()
    return lines[0] if lines else None


@router.get("/brief", response_class=PlainTextResponse)
async def get_brief(
    coach: bool = Query(
        default=True,
        description="Append a one-sentence coaching line when Claude is configured"
    )
) -> PlainTextResponse:
    """
    Plain-text morning summary.

    Newline-separated, emoji-prefixed lines (date, readiness, HRV/RHR,
    sleep/strain, strain target, bedtime, optional coaching line).

    Returns:
        text/plain brief; 401 text when Whoop is not connected; 500 text
        with the upstream message when a Whoop request fails
    """
    client = get_client()
    try:
        recoveries, sleeps, cycles = await fetch_history(client, config.whoop.history_limit)
    except WhoopAuthError:
        return PlainTextResponse("Not authenticated. Connect Whoop first.", status_code=401)
    except WhoopAPIError as e:
        log_error_with_context(e, "coach", {"route": "brief"}, exc_info=True)
        return PlainTextResponse(f"Error: {e}", status_code=500)

    today = build_snapshot(date.today(), recoveries, sleeps, cycles)
    summary = analyze(recoveries, cycles)

    line = await coaching_line(today, summary) if coach else None
    return PlainTextResponse(
        compose_short_brief(today, summary, config.coach.wake_time, coaching_line=line)
    )


@router.post("/ai-suggest")
async def ai_suggest(body: Optional[SuggestRequest] = None) -> StreamingResponse:
    """
    Stream a personalized coaching brief.

    Fails fast with 500 before opening the stream when Claude is not
    configured. Once streaming, each chunk is sent as ``data: {"text": ...}``
    and the stream ends with ``data: [DONE]``, or with a single
    ``data: {"error": ...}`` if generation fails.

    Raises:
        HTTPException: 500 if no Anthropic API key is configured
        HTTPException: 401 if Whoop is not connected
        HTTPException: 500 if fetching Whoop records fails
    """
    routine = body.routine if body else []

    gateway = get_gateway()
    try:
        ensure_available(gateway)
    except GatewayUnavailableError as e:
        raise HTTPException(status_code=500, detail=str(e))

    client = get_client()
    try:
        recoveries, sleeps, cycles = await fetch_history(client, config.whoop.history_limit)
    except WhoopAuthError:
        raise HTTPException(status_code=401, detail="Not authenticated")
    except WhoopAPIError as e:
        log_error_with_context(e, "coach", {"route": "ai-suggest"}, exc_info=True)
        raise HTTPException(status_code=500, detail=str(e))

    today = build_snapshot(date.today(), recoveries, sleeps, cycles)
    summary = analyze(recoveries, cycles)
    prompt = compose_prompt_context(today, summary, routine, config.coach.wake_time)

    logger.info(
        f"Streaming coaching brief ({summary.data_points if summary else 0} days of history)"
    )
    return StreamingResponse(
        relay_sse(gateway, prompt, config.coach.max_tokens),
        media_type="text/event-stream",
        headers={"Cache-Control": "no-cache", "Connection": "keep-alive"},
    )
