"""
Dashboard Package.

Personal Whoop dashboard backend - recovery, sleep and strain data plus
Claude-generated coaching briefs.

This package contains:
- FastAPI backend server
- Whoop and Claude client wiring
- REST API endpoints for dashboard data and coaching
"""

__version__ = "0.1.0"
