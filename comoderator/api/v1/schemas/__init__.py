"""
API v1 schemas module.
"""

from .session import (
    JoinRequest,
    JoinResponse,
    LeaveResponse,
    SessionStatusResponse,
    EventResponse,
    EventListResponse,
    HealthCheckResponse,
)

__all__ = [
    "JoinRequest",
    "JoinResponse",
    "LeaveResponse",
    "SessionStatusResponse",
    "EventResponse",
    "EventListResponse",
    "HealthCheckResponse",
]
