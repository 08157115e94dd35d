"""
SQLite-backed storage for the Whoop dashboard.

Holds the single Whoop OAuth credential and the pending OAuth state nonce.
"""

from .token_store import DEFAULT_DB_PATH, StoredToken, TokenStore

__all__ = ["DEFAULT_DB_PATH", "StoredToken", "TokenStore"]
