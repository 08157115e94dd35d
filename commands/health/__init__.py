"""
Health Commands

Commands for Whoop recovery tracking:
- brief   : Plain-text morning brief (same output as GET /api/brief)
"""

__all__ = ["brief"]
