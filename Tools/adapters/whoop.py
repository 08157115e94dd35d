"""
Whoop API adapter.

Reads recovery, cycle, sleep and workout records from the Whoop developer
API and owns the OAuth side of the single stored credential: building the
authorization URL, exchanging the callback code, and refreshing the access
token shortly before it expires.
"""

import asyncio
import logging
import os
import time
from typing import Any, Dict, List, Optional

import httpx

from Tools.adapters.base import (
    UNAUTHENTICATED,
    UNKNOWN_TOOL,
    UPSTREAM,
    BaseAdapter,
    ToolResult,
)
from Tools.adapters.errors import WhoopAPIError, WhoopAuthError, log_error_with_context
from Tools.health.records import CycleRecord, RecoveryRecord, SleepRecord
from Tools.state_store.token_store import StoredToken, TokenStore

logger = logging.getLogger(__name__)


class WhoopAdapter(BaseAdapter):
    """Async adapter for the Whoop developer API."""

    BASE_URL = "https://api.prod.whoop.com/developer"
    AUTH_URL = "https://api.prod.whoop.com/oauth/oauth2/auth"
    TOKEN_URL = "https://api.prod.whoop.com/oauth/oauth2/token"
    SCOPES = (
        "offline read:recovery read:cycles read:sleep read:workout "
        "read:body_measurement read:profile"
    )

    RECOVERY_PATH = "/v2/recovery"
    CYCLE_PATH = "/v1/cycle"
    SLEEP_PATH = "/v2/activity/sleep"
    WORKOUT_PATH = "/v2/activity/workout"

    PAGE_SIZE = 25  # API maximum per request
    REFRESH_MARGIN_SECONDS = 5 * 60

    def __init__(
        self,
        token_store: TokenStore,
        client_id: Optional[str] = None,
        client_secret: Optional[str] = None,
    ):
        """
        Initialize the Whoop adapter.

        Args:
            token_store: Credential store holding the OAuth tokens
            client_id: OAuth client id. Falls back to WHOOP_CLIENT_ID env var.
            client_secret: OAuth client secret. Falls back to WHOOP_CLIENT_SECRET.
        """
        self.token_store = token_store
        self.client_id = client_id or os.environ.get("WHOOP_CLIENT_ID")
        self.client_secret = client_secret or os.environ.get("WHOOP_CLIENT_SECRET")
        self._client: Optional[httpx.AsyncClient] = None
        self._refresh_lock: Optional[asyncio.Lock] = None

    @property
    def name(self) -> str:
        return "whoop"

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=30.0)
        return self._client

    async def close(self):
        """Close the HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    # -------------------------------------------------------------------------
    # OAuth
    # -------------------------------------------------------------------------

    def authorization_url(self, state: str, redirect_uri: str) -> str:
        """URL that starts the Whoop consent flow."""
        return str(httpx.URL(self.AUTH_URL, params={
            "client_id": self.client_id or "",
            "redirect_uri": redirect_uri,
            "response_type": "code",
            "scope": self.SCOPES,
            "state": state,
        }))

    async def _request_token(self, form: Dict[str, str]) -> Dict[str, Any]:
        client = await self._get_client()
        form = {
            **form,
            "client_id": self.client_id or "",
            "client_secret": self.client_secret or "",
        }
        try:
            response = await client.post(self.TOKEN_URL, data=form)
        except httpx.RequestError as e:
            raise WhoopAPIError(f"Whoop token request failed: {e}") from e

        if response.is_error:
            raise WhoopAuthError(
                f"Whoop token request failed: {response.status_code} {response.text[:200]}",
                context={"grant_type": form.get("grant_type")},
            )
        return response.json()

    def _store_token_response(
        self, data: Dict[str, Any], previous_refresh: Optional[str] = None
    ) -> StoredToken:
        return self.token_store.save_token(
            access_token=data["access_token"],
            refresh_token=data.get("refresh_token") or previous_refresh or "",
            expires_at=time.time() + float(data.get("expires_in", 0)),
        )

    async def exchange_code(self, code: str, redirect_uri: str) -> StoredToken:
        """Exchange an authorization code for tokens and store them."""
        data = await self._request_token({
            "grant_type": "authorization_code",
            "code": code,
            "redirect_uri": redirect_uri,
        })
        logger.info("Whoop credential stored")
        return self._store_token_response(data)

    async def get_access_token(self) -> str:
        """
        Return a usable access token.

        Refreshes the stored token when it expires within
        REFRESH_MARGIN_SECONDS. Concurrent callers wait for a single refresh
        request; Whoop rotates the refresh token on every use.

        Raises:
            WhoopAuthError: No credential stored, or the refresh was rejected
        """
        token = self.token_store.get_token()
        if token is None:
            raise WhoopAuthError("Not authenticated. Connect Whoop first.")

        if not token.expires_within(self.REFRESH_MARGIN_SECONDS):
            return token.access_token

        if self._refresh_lock is None:
            self._refresh_lock = asyncio.Lock()

        async with self._refresh_lock:
            # Another caller may have refreshed while we waited
            token = self.token_store.get_token()
            if token is None:
                raise WhoopAuthError("Not authenticated. Connect Whoop first.")
            if not token.expires_within(self.REFRESH_MARGIN_SECONDS):
                return token.access_token

            logger.info("Refreshing Whoop access token")
            data = await self._request_token({
                "grant_type": "refresh_token",
                "refresh_token": token.refresh_token,
            })
            return self._store_token_response(data, token.refresh_token).access_token

    # -------------------------------------------------------------------------
    # Records
    # -------------------------------------------------------------------------

    async def get_records(self, path: str, limit: int) -> List[Dict[str, Any]]:
        """
        Fetch up to ``limit`` newest-first records from a collection endpoint.

        Follows ``next_token`` pagination in PAGE_SIZE steps.

        Raises:
            WhoopAuthError: No usable credential
            WhoopAPIError: Non-2xx response or transport failure
        """
        token = await self.get_access_token()
        client = await self._get_client()
        headers = {"Authorization": f"Bearer {token}"}

        records: List[Dict[str, Any]] = []
        next_token: Optional[str] = None
        while len(records) < limit:
            params: Dict[str, Any] = {"limit": min(self.PAGE_SIZE, limit - len(records))}
            if next_token:
                params["nextToken"] = next_token

            try:
                response = await client.get(
                    f"{self.BASE_URL}{path}", params=params, headers=headers
                )
            except httpx.RequestError as e:
                raise WhoopAPIError(f"Whoop API {path} failed: {e}", path=path) from e

            if response.is_error:
                raise WhoopAPIError(
                    f"Whoop API {path} failed: {response.status_code} {response.text}",
                    path=path,
                    status_code=response.status_code,
                )

            payload = response.json()
            records.extend(payload.get("records") or [])
            next_token = payload.get("next_token")
            if not next_token:
                break

        return records[:limit]

    async def fetch_recoveries(self, limit: int) -> List[RecoveryRecord]:
        return [RecoveryRecord.from_api(r) for r in await self.get_records(self.RECOVERY_PATH, limit)]

    async def fetch_cycles(self, limit: int) -> List[CycleRecord]:
        return [CycleRecord.from_api(r) for r in await self.get_records(self.CYCLE_PATH, limit)]

    async def fetch_sleep(self, limit: int) -> List[SleepRecord]:
        return [SleepRecord.from_api(r) for r in await self.get_records(self.SLEEP_PATH, limit)]

    async def fetch_workouts(self, limit: int) -> List[Dict[str, Any]]:
        return await self.get_records(self.WORKOUT_PATH, limit)

    # -------------------------------------------------------------------------
    # Tool interface
    # -------------------------------------------------------------------------

    TOOL_PATHS = {
        "get_recovery": RECOVERY_PATH,
        "get_cycles": CYCLE_PATH,
        "get_sleep": SLEEP_PATH,
        "get_workouts": WORKOUT_PATH,
    }

    def list_tools(self) -> List[Dict[str, Any]]:
        """Return list of available Whoop tools."""
        limit = {
            "type": "integer",
            "description": "Maximum number of records, newest first",
            "default": 1,
        }
        return [
            {
                "name": "get_recovery",
                "description": "Recovery scores, HRV and resting heart rate per cycle",
                "parameters": {"limit": limit},
            },
            {
                "name": "get_cycles",
                "description": "Physiological cycles with day strain",
                "parameters": {"limit": limit},
            },
            {
                "name": "get_sleep",
                "description": "Sleep activities with performance and sleep need",
                "parameters": {"limit": limit},
            },
            {
                "name": "get_workouts",
                "description": "Workout activities with sport and strain",
                "parameters": {"limit": limit},
            },
        ]

    async def call_tool(self, tool_name: str, arguments: Dict[str, Any]) -> ToolResult:
        """Execute a Whoop tool, returning raw records."""
        path = self.TOOL_PATHS.get(tool_name)
        if path is None:
            return ToolResult.fail(f"Unknown tool: {tool_name}", error_type=UNKNOWN_TOOL)

        try:
            records = await self.get_records(path, int(arguments.get("limit", 1)))
        except WhoopAuthError as e:
            return ToolResult.fail(str(e), error_type=UNAUTHENTICATED)
        except WhoopAPIError as e:
            log_error_with_context(e, "whoop", {"tool": tool_name})
            return ToolResult.fail(str(e), error_type=UPSTREAM)

        return ToolResult.ok(records, count=len(records))
