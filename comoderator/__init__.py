"""
Chat Co-Moderator Package.
Joins a Zoom web meeting, answers chat questions with AI and reports events.
"""

from .engine import ModerationEngine
from .events import EventBus, EventLog
from .models import Answer, ChatEntry, EngineEvent, EngineState, EventKind, SessionHandle
from .config import settings
from .core import get_logger

__version__ = "1.0.0"

__all__ = [
    # Engine
    "ModerationEngine",
    "EventBus",
    "EventLog",

    # Models
    "Answer",
    "ChatEntry",
    "EngineEvent",
    "EngineState",
    "EventKind",
    "SessionHandle",

    # Config
    "settings",
    "get_logger",
]
