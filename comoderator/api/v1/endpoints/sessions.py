"""
Session control endpoints (join, leave, status, events).
"""

from fastapi import APIRouter, Depends, Query
from typing import Dict, Any

from comoderator.api.v1.schemas.session import (
    EventListResponse,
    JoinRequest,
    JoinResponse,
    LeaveResponse,
    SessionStatusResponse,
)
from comoderator.core.dependencies import get_engine, get_event_log
from comoderator.core.exceptions import CoModeratorError, HTTPBadRequest, InvalidInput
from comoderator.core.logging import get_logger
from comoderator.models import EngineState

router = APIRouter()
logger = get_logger("api.sessions")


@router.post("/join", response_model=JoinResponse)
async def join_session(
    request: JoinRequest,
    engine=Depends(get_engine)
) -> Dict[str, Any]:
    """
    Join a meeting and start co-moderating its chat.

    Args:
        request: Meeting link and optional host session id
        engine: Moderation engine (injected)

    Returns:
        Join result; join-phase failures come back with success=false
    """
    logger.info(f"Join request: {request.meeting_link}")
    try:
        await engine.join(request.meeting_link, request.session_id)
    except InvalidInput as e:
        raise HTTPBadRequest(e.message)
    except CoModeratorError as e:
        logger.error(f"Join failed: {e}")
        return {
            "success": False,
            "session_id": request.session_id,
            "state": engine.state.value,
            "error": e.message,
        }

    # leave() may have ended the session while the join was still running
    if engine.state is not EngineState.MONITORING:
        return {
            "success": False,
            "session_id": request.session_id,
            "state": engine.state.value,
            "error": f"Session ended during join (state {engine.state.value})",
        }

    return {
        "success": True,
        "session_id": engine.session.session_id if engine.session else request.session_id,
        "state": engine.state.value,
        "error": None,
    }


@router.post("/leave", response_model=LeaveResponse)
async def leave_session(engine=Depends(get_engine)) -> Dict[str, Any]:
    """Leave the current meeting. Safe to call in any state."""
    await engine.leave()
    return {"success": True, "state": engine.state.value}


@router.get("/status", response_model=SessionStatusResponse)
async def session_status(engine=Depends(get_engine)) -> Dict[str, Any]:
    """Current engine state and session."""
    return engine.get_status()


@router.get("/events", response_model=EventListResponse)
async def recent_events(
    limit: int = Query(default=50, ge=1, le=1000),
    event_log=Depends(get_event_log),
) -> Dict[str, Any]:
    """
    Most recent engine events, oldest first.

    Chat messages, AI responses and soft errors all appear here;
    hosts poll this to render the chat and answer feeds.
    """
    return {"events": [event.to_dict() for event in event_log.recent(limit)]}
