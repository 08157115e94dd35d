"""
Dashboard API Routes.

This package contains API route modules for the dashboard backend.
Each module defines a FastAPI router (whoop data, coaching, OAuth).
"""

# API version prefix
API_V1_PREFIX = "/api"

__all__ = ["API_V1_PREFIX"]
