# dashboard/tests/conftest.py
import pytest
from fastapi.testclient import TestClient
from unittest.mock import AsyncMock, MagicMock

from Tools.adapters.base import ToolResult
from Tools.state_store.token_store import TokenStore


@pytest.fixture
def client():
    """FastAPI test client fixture."""
    from dashboard.main import app
    return TestClient(app)


@pytest.fixture
def tool_results():
    """ToolResult per Whoop tool name; tests overwrite entries as needed."""
    return {
        "get_recovery": ToolResult.ok([]),
        "get_cycles": ToolResult.ok([]),
        "get_sleep": ToolResult.ok([]),
        "get_workouts": ToolResult.ok([]),
    }


@pytest.fixture(autouse=True)
def mock_whoop_client(monkeypatch, tmp_path, tool_results):
    """Mock Whoop adapter for testing without the Whoop API (autouse)."""
    mock_client = MagicMock()
    mock_client.token_store = TokenStore(db_path=tmp_path / "whoop.db")
    mock_client.authorization_url = MagicMock(
        side_effect=lambda state, redirect_uri: f"https://whoop.test/oauth?state={state}"
    )
    mock_client.exchange_code = AsyncMock()

    async def call_tool(tool_name, arguments):
        return tool_results[tool_name]

    mock_client.call_tool = AsyncMock(side_effect=call_tool)

    mock_client.fetch_recoveries = AsyncMock(return_value=[])
    mock_client.fetch_cycles = AsyncMock(return_value=[])
    mock_client.fetch_sleep = AsyncMock(return_value=[])

    # Patch the get_client function everywhere it's used
    import dashboard.whoop_client as whoop_client_module
    import dashboard.api.auth as auth_module
    import dashboard.api.coach as coach_module
    import dashboard.api.whoop as whoop_module

    monkeypatch.setattr(whoop_client_module, 'get_client', lambda: mock_client)
    monkeypatch.setattr(auth_module, 'get_client', lambda: mock_client)
    monkeypatch.setattr(coach_module, 'get_client', lambda: mock_client)
    monkeypatch.setattr(whoop_module, 'get_client', lambda: mock_client)

    return mock_client


@pytest.fixture(autouse=True)
def mock_gateway(monkeypatch):
    """Mock Claude gateway streaming a fixed two-chunk brief (autouse)."""
    gateway = MagicMock()
    gateway.available = True
    gateway.complete = AsyncMock(return_value="Solid recovery, push the tempo run.")
    gateway.chunks = ["Good ", "morning"]
    gateway.error = None

    async def stream_completion(prompt, max_tokens):
        for chunk in gateway.chunks:
            yield chunk
        if gateway.error is not None:
            raise gateway.error

    gateway.stream_completion = MagicMock(side_effect=stream_completion)

    import dashboard.whoop_client as whoop_client_module
    import dashboard.api.coach as coach_module

    monkeypatch.setattr(whoop_client_module, 'get_gateway', lambda: gateway)
    monkeypatch.setattr(coach_module, 'get_gateway', lambda: gateway)

    return gateway


@pytest.fixture(autouse=True)
def fixed_coach_config(monkeypatch):
    """Pin settings a local .env could override."""
    from dashboard.config import config

    monkeypatch.setattr(config.coach, "wake_time", "07:00")
    monkeypatch.setattr(config.whoop, "history_limit", 60)
    monkeypatch.setattr(config.dashboard, "app_url", None)
    monkeypatch.setattr(config.dashboard, "port", 3000)
