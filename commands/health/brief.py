"""
Health: Morning Brief Command

Prints the plain-text morning brief from Whoop data - the same text the
dashboard serves at GET /api/brief.

Usage:
    python -m commands.health.brief [--coach] [--stream] [--wake HH:MM]

Flags:
    --coach: Append a one-sentence coaching line from Claude
    --stream: Stream the full coaching brief after the summary
    --wake: Wake time used for the bedtime recommendation
"""

import argparse
import asyncio
from datetime import date
from pathlib import Path
import sys
from typing import List, Optional

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from Tools.adapters.claude import ClaudeGateway
from Tools.adapters.errors import AdapterError, GatewayRequestError
from Tools.adapters.whoop import WhoopAdapter
from Tools.health.brief_composer import (
    build_snapshot,
    compose_coaching_line_prompt,
    compose_prompt_context,
    compose_short_brief,
)
from Tools.health.coaching_relay import ensure_available, relay
from Tools.health.trend_analyzer import analyze
from Tools.state_store.token_store import TokenStore

from dashboard.config import config


async def execute(
    coach: bool = False,
    stream: bool = False,
    wake_time: Optional[str] = None,
    routine: Optional[List[str]] = None,
    adapter: Optional[WhoopAdapter] = None,
    gateway: Optional[ClaudeGateway] = None,
) -> str:
    """
    Build and print the morning brief.

    Args:
        coach: Append a coaching line when Claude is configured
        stream: Stream the long-form coaching brief after the summary
        wake_time: Wake time override (HH:MM)
        routine: Morning routine items for the long-form brief
        adapter: Whoop adapter (defaults to one over the configured token store)
        gateway: Claude gateway (defaults to the configured API key)

    Returns:
        The short brief text

    Raises:
        GatewayUnavailableError: --stream was requested without an API key
    """
    wake_time = wake_time or config.coach.wake_time
    adapter = adapter or WhoopAdapter(
        TokenStore(db_path=config.whoop.db_path),
        client_id=config.whoop.client_id,
        client_secret=config.whoop.client_secret,
    )
    gateway = gateway or ClaudeGateway(api_key=config.coach.api_key, model=config.coach.model)
    if stream:
        ensure_available(gateway)

    try:
        recoveries, sleeps, cycles = await asyncio.gather(
            adapter.fetch_recoveries(config.whoop.history_limit),
            adapter.fetch_sleep(1),
            adapter.fetch_cycles(config.whoop.history_limit),
        )
    finally:
        await adapter.close()

    today = build_snapshot(date.today(), recoveries, sleeps, cycles)
    summary = analyze(recoveries, cycles)

    line = None
    if coach and gateway.available:
        try:
            line = await gateway.complete(
                compose_coaching_line_prompt(today, summary, wake_time),
                config.coach.line_max_tokens,
            )
        except GatewayRequestError as e:
            print(f"(coaching line skipped: {e})", file=sys.stderr)

    brief = compose_short_brief(today, summary, wake_time, coaching_line=line)
    print(brief)

    if stream:
        print("\n" + "-" * 50)
        prompt = compose_prompt_context(today, summary, routine or [], wake_time)
        async for unit in relay(gateway, prompt, config.coach.max_tokens):
            if unit.error is not None:
                print(f"\n❌ {unit.error}", file=sys.stderr)
            elif unit.text is not None:
                print(unit.text, end="", flush=True)
        print()

    return brief


def create_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="health:brief",
        description="Print the Whoop morning brief.",
    )
    parser.add_argument("--coach", action="store_true", help="Append a coaching line")
    parser.add_argument("--stream", action="store_true", help="Stream the full coaching brief")
    parser.add_argument("--wake", metavar="HH:MM", help="Wake time for bedtime advice")
    parser.add_argument(
        "--routine", action="append", default=[], metavar="ITEM",
        help="Morning routine item (repeatable)",
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """CLI entry point."""
    args = create_parser().parse_args(argv)
    try:
        asyncio.run(execute(
            coach=args.coach,
            stream=args.stream,
            wake_time=args.wake,
            routine=args.routine,
        ))
    except AdapterError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
