"""
API request/response schemas for session control.
"""

from typing import Any, Dict, Optional, List
from pydantic import BaseModel, Field
from datetime import datetime


class JoinRequest(BaseModel):
    """Request to join a meeting and start co-moderating its chat."""
    meeting_link: str = Field(..., description="Zoom web meeting URL to join")
    session_id: Optional[str] = Field(default=None, description="Host session identifier")


class JoinResponse(BaseModel):
    """Response for a join request."""
    success: bool
    session_id: Optional[str] = None
    state: str
    error: Optional[str] = None


class LeaveResponse(BaseModel):
    """Response for a leave request."""
    success: bool
    state: str


class SessionStatusResponse(BaseModel):
    """Engine status."""
    state: str
    session: Optional[Dict[str, Any]] = None
    seen_messages: int
    pending_tasks: int
    selector_catalog: str


class EventResponse(BaseModel):
    """One published engine event."""
    kind: str
    payload: Dict[str, Any]
    emitted_at: datetime
    session_id: Optional[str] = None


class EventListResponse(BaseModel):
    """Recent engine events, oldest first."""
    events: List[EventResponse]


class HealthCheckResponse(BaseModel):
    """Health check response."""
    status: str = "ok"
    timestamp: datetime
    version: str
