"""
Whoop OAuth endpoints.

Connects the dashboard to a single Whoop account:
- GET /auth/whoop     redirect to Whoop consent (with a stored state nonce)
- GET /auth/callback  verify state, exchange the code, store tokens
- GET /auth/status    whether a credential is stored
- GET /auth/logout    forget the credential
"""

import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter
from fastapi.responses import RedirectResponse

from Tools.adapters.errors import AdapterError, log_error_with_context

from dashboard.config import config
from dashboard.whoop_client import get_client

logger = logging.getLogger(__name__)

# Create auth router
router = APIRouter(prefix="/auth", tags=["auth"])


@router.get("/whoop")
async def start_oauth() -> RedirectResponse:
    """Begin the OAuth flow."""
    client = get_client()
    state = client.token_store.create_oauth_state()
    return RedirectResponse(
        client.authorization_url(state, config.dashboard.redirect_uri),
        status_code=302,
    )


@router.get("/callback")
async def oauth_callback(
    code: Optional[str] = None,
    state: Optional[str] = None,
    error: Optional[str] = None,
    error_description: Optional[str] = None,
) -> RedirectResponse:
    """
    Finish the OAuth flow.

    Redirects to ``/?auth=success`` or ``/?auth=error``.
    """
    if error or not code:
        logger.error(f"Whoop OAuth error: {error} {error_description}")
        return RedirectResponse("/?auth=error", status_code=302)

    client = get_client()
    if not client.token_store.consume_oauth_state(state):
        logger.error("OAuth state mismatch")
        return RedirectResponse("/?auth=error", status_code=302)

    try:
        await client.exchange_code(code, config.dashboard.redirect_uri)
    except AdapterError as e:
        log_error_with_context(e, "auth")
        return RedirectResponse("/?auth=error", status_code=302)

    return RedirectResponse("/?auth=success", status_code=302)


@router.get("/status")
async def auth_status() -> Dict[str, bool]:
    """Whether a Whoop credential is stored."""
    return {"authenticated": get_client().token_store.is_authenticated()}


@router.get("/logout")
async def logout() -> Dict[str, Any]:
    """Clear the stored credential."""
    get_client().token_store.clear()
    logger.info("Whoop credential cleared")
    return {"ok": True}
