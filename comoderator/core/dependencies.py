"""
Dependency injection for the host control API.
Provides the engine and its event log to API endpoints.
"""

from typing import Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from comoderator.engine import ModerationEngine
    from comoderator.events import EventLog

_engine_instance: Optional["ModerationEngine"] = None
_event_log_instance: Optional["EventLog"] = None


def set_engine_instance(engine: Optional["ModerationEngine"], event_log: Optional["EventLog"] = None) -> None:
    """Set the process-wide engine used by the API."""
    global _engine_instance, _event_log_instance
    _engine_instance = engine
    _event_log_instance = event_log


async def get_engine() -> "ModerationEngine":
    """
    Dependency injection for the moderation engine.

    Raises:
        HTTPException: If the engine is not initialized
    """
    from comoderator.core.exceptions import HTTPInternalServerError

    if _engine_instance is None:
        raise HTTPInternalServerError("Moderation engine not initialized")

    return _engine_instance


async def get_event_log() -> "EventLog":
    """Dependency injection for the recent-events log."""
    from comoderator.core.exceptions import HTTPInternalServerError

    if _event_log_instance is None:
        raise HTTPInternalServerError("Event log not initialized")

    return _event_log_instance

