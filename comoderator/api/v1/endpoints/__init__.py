"""
API v1 endpoints module.
"""

from . import sessions, health

__all__ = ["sessions", "health"]
