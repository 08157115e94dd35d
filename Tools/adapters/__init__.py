"""
External service adapters.

- WhoopAdapter  : Whoop developer API (records, OAuth, token refresh)
- ClaudeGateway : Claude prompt completion (streaming and one-shot)

Usage:
    from Tools.adapters import WhoopAdapter
    from Tools.state_store import TokenStore

    async def main():
        adapter = WhoopAdapter(TokenStore())
        recoveries = await adapter.fetch_recoveries(limit=30)
        await adapter.close()
"""

from .base import BaseAdapter, ToolResult
from .claude import ClaudeGateway
from .errors import (
    AdapterError,
    GatewayRequestError,
    GatewayUnavailableError,
    WhoopAPIError,
    WhoopAuthError,
)
from .whoop import WhoopAdapter

__all__ = [
    "AdapterError",
    "BaseAdapter",
    "ClaudeGateway",
    "GatewayRequestError",
    "GatewayUnavailableError",
    "ToolResult",
    "WhoopAPIError",
    "WhoopAdapter",
    "WhoopAuthError",
]
