"""
Service clients for the Dashboard API.

Holds the process-wide Whoop adapter (with its credential store) and the
Claude completion gateway. Route modules obtain them through ``get_client``
and ``get_gateway`` so tests can swap in fakes.
"""

import logging
from typing import Optional

from Tools.adapters.claude import ClaudeGateway
from Tools.adapters.whoop import WhoopAdapter
from Tools.state_store.token_store import TokenStore

from dashboard.config import config

logger = logging.getLogger(__name__)

# Global instances (singletons)
_client: Optional[WhoopAdapter] = None
_gateway: Optional[ClaudeGateway] = None


def get_client() -> WhoopAdapter:
    """
    Get the global Whoop adapter instance.

    Returns:
        WhoopAdapter singleton backed by the configured token database
    """
    global _client
    if _client is None:
        store = TokenStore(db_path=config.whoop.db_path)
        _client = WhoopAdapter(
            token_store=store,
            client_id=config.whoop.client_id,
            client_secret=config.whoop.client_secret,
        )
        logger.info(f"Whoop adapter initialized (tokens: {store.db_path})")
    return _client


def get_gateway() -> ClaudeGateway:
    """
    Get the global Claude gateway instance.

    Returns:
        ClaudeGateway singleton (may be unavailable without an API key)
    """
    global _gateway
    if _gateway is None:
        _gateway = ClaudeGateway(api_key=config.coach.api_key, model=config.coach.model)
    return _gateway


async def close_clients():
    """Close the global client instances."""
    global _client, _gateway
    if _client:
        await _client.close()
        _client = None
    if _gateway:
        await _gateway.close()
        _gateway = None
