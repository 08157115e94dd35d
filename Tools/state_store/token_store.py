#!/usr/bin/env python3
"""
Whoop credential store.

Keeps the single OAuth credential for the dashboard in SQLite, together with
the one outstanding OAuth ``state`` nonce used to verify the callback.

Usage:
    from Tools.state_store.token_store import TokenStore

    store = TokenStore()
    store.save_token("access", "refresh", expires_at=time.time() + 3600)
    token = store.get_token()
"""

import secrets
import sqlite3
import time
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

DEFAULT_DB_PATH = Path(__file__).parent.parent.parent / "State" / "whoop.db"


@dataclass
class StoredToken:
    """The stored Whoop OAuth credential."""
    access_token: str
    refresh_token: str
    expires_at: float  # epoch seconds

    def expires_within(self, seconds: float, now: Optional[float] = None) -> bool:
        """True when the token expires in less than ``seconds``."""
        now = time.time() if now is None else now
        return now >= self.expires_at - seconds


class TokenStore:
    """SQLite store for the single Whoop credential."""

    def __init__(self, db_path: Optional[Path] = None):
        """Initialize token store.

        Args:
            db_path: Path to SQLite database. Defaults to State/whoop.db
        """
        self.db_path = Path(db_path) if db_path else DEFAULT_DB_PATH
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_database()

    @contextmanager
    def _get_connection(self):
        """Get database connection with proper handling."""
        conn = sqlite3.connect(str(self.db_path))
        conn.row_factory = sqlite3.Row
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def _init_database(self):
        """Initialize database schema."""
        with self._get_connection() as conn:
            conn.executescript('''
                CREATE TABLE IF NOT EXISTS tokens (
                    id INTEGER PRIMARY KEY CHECK (id = 1),
                    access_token TEXT NOT NULL,
                    refresh_token TEXT NOT NULL,
                    expires_at REAL NOT NULL
                );

                CREATE TABLE IF NOT EXISTS oauth_state (
                    state TEXT PRIMARY KEY,
                    created_at REAL NOT NULL
                );
            ''')

    # -------------------------------------------------------------------------
    # Credential
    # -------------------------------------------------------------------------

    def get_token(self) -> Optional[StoredToken]:
        """Return the stored credential, or None when not connected."""
        with self._get_connection() as conn:
            row = conn.execute(
                "SELECT access_token, refresh_token, expires_at FROM tokens WHERE id = 1"
            ).fetchone()
        if row is None:
            return None
        return StoredToken(
            access_token=row["access_token"],
            refresh_token=row["refresh_token"],
            expires_at=row["expires_at"],
        )

    def save_token(self, access_token: str, refresh_token: str, expires_at: float) -> StoredToken:
        """Insert or replace the credential."""
        with self._get_connection() as conn:
            conn.execute('''
                INSERT INTO tokens (id, access_token, refresh_token, expires_at)
                VALUES (1, ?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    access_token = excluded.access_token,
                    refresh_token = excluded.refresh_token,
                    expires_at = excluded.expires_at
            ''', (access_token, refresh_token, expires_at))
        return StoredToken(access_token, refresh_token, expires_at)

    def clear(self) -> None:
        """Forget the credential (logout)."""
        with self._get_connection() as conn:
            conn.execute("DELETE FROM tokens WHERE id = 1")

    def is_authenticated(self) -> bool:
        return self.get_token() is not None

    # -------------------------------------------------------------------------
    # OAuth state nonce
    # -------------------------------------------------------------------------

    def create_oauth_state(self) -> str:
        """Create a new state nonce, replacing any outstanding one."""
        state = secrets.token_hex(16)
        with self._get_connection() as conn:
            conn.execute("DELETE FROM oauth_state")
            conn.execute(
                "INSERT INTO oauth_state (state, created_at) VALUES (?, ?)",
                (state, time.time()),
            )
        return state

    def consume_oauth_state(self, state: Optional[str]) -> bool:
        """
        Verify a callback state against the outstanding nonce.

        The nonce is removed on a match so it cannot be replayed.
        """
        if not state:
            return False
        with self._get_connection() as conn:
            row = conn.execute(
                "SELECT state FROM oauth_state WHERE state = ?", (state,)
            ).fetchone()
            if row is None:
                return False
            conn.execute("DELETE FROM oauth_state")
        return True
