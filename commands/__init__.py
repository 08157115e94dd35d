"""
Command line tools.

Commands are organized by namespace:
- health/ : Whoop brief and coaching commands
"""

__all__ = ["health"]
