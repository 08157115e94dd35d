"""
Dashboard Configuration.

Provides configuration management for the Whoop dashboard: server settings,
Whoop OAuth client credentials, and coaching (Claude) settings. Values come
from environment variables, with a project-root .env loaded first.
"""

import os
import re
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator

PROJECT_ROOT = Path(__file__).parent.parent

load_dotenv(PROJECT_ROOT / ".env")

_WAKE_TIME_RE = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")


class DashboardConfig(BaseModel):
    """Dashboard application configuration."""

    host: str = Field(default="0.0.0.0", description="API server host")
    port: int = Field(default=3000, description="API server port")
    debug: bool = Field(default=False, description="Debug mode")
    app_url: Optional[str] = Field(default=None, description="Public base URL")
    cors_origins: list[str] = Field(
        default_factory=lambda: ["http://localhost:3000"],
        description="Allowed CORS origins"
    )

    @property
    def redirect_uri(self) -> str:
        """OAuth callback URL registered with Whoop."""
        if self.app_url:
            return f"{self.app_url.rstrip('/')}/auth/callback"
        return f"http://localhost:{self.port}/auth/callback"


class WhoopConfig(BaseModel):
    """Whoop OAuth client and credential storage."""

    client_id: Optional[str] = None
    client_secret: Optional[str] = None
    db_path: Optional[Path] = Field(default=None, description="Token database path")
    history_limit: int = Field(default=60, ge=1, description="Records fetched for trends")


class CoachConfig(BaseModel):
    """Claude coaching settings."""

    api_key: Optional[str] = None
    model: str = "claude-sonnet-4-6"
    max_tokens: int = Field(default=400, ge=1, description="Token budget for the streamed brief")
    line_max_tokens: int = Field(default=80, ge=1, description="Token budget for the brief one-liner")
    wake_time: str = Field(default="07:00", description="Wake time (HH:MM) for bedtime advice")

    @field_validator("wake_time")
    @classmethod
    def _check_wake_time(cls, value: str) -> str:
        if not _WAKE_TIME_RE.match(value):
            raise ValueError(f"wake_time must be HH:MM, got {value!r}")
        return value


class Config:
    """
    Global configuration for the dashboard application.

    Loads configuration from environment variables with sensible defaults.
    """

    def __init__(self):
        """Initialize configuration from environment."""
        self.dashboard = DashboardConfig(
            host=os.getenv("DASHBOARD_HOST", "0.0.0.0"),
            port=int(os.getenv("DASHBOARD_PORT", os.getenv("PORT", "3000"))),
            debug=os.getenv("DEBUG", "false").lower() == "true",
            app_url=os.getenv("APP_URL") or None,
            cors_origins=self._parse_cors_origins()
        )
        db_path = os.getenv("WHOOP_DB_PATH")
        self.whoop = WhoopConfig(
            client_id=os.getenv("WHOOP_CLIENT_ID"),
            client_secret=os.getenv("WHOOP_CLIENT_SECRET"),
            db_path=Path(db_path) if db_path else None,
            history_limit=int(os.getenv("HISTORY_LIMIT", "60")),
        )
        self.coach = CoachConfig(
            api_key=os.getenv("ANTHROPIC_API_KEY") or None,
            model=os.getenv("COACH_MODEL", "claude-sonnet-4-6"),
            max_tokens=int(os.getenv("COACH_MAX_TOKENS", "400")),
            line_max_tokens=int(os.getenv("COACH_LINE_MAX_TOKENS", "80")),
            wake_time=os.getenv("WAKE_TIME", "07:00"),
        )

    def _parse_cors_origins(self) -> list[str]:
        """
        Parse CORS origins from environment.

        Returns:
            List of allowed CORS origins
        """
        origins = os.getenv("CORS_ORIGINS", "http://localhost:3000")
        return [origin.strip() for origin in origins.split(",")]


# Global configuration instance
config = Config()
