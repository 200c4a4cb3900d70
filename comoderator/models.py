"""
Data models for chat co-moderation sessions.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional


def utc_now() -> datetime:
    """Timezone-aware current time."""
    return datetime.now(timezone.utc)


class EngineState(str, Enum):
    """Lifecycle states of a co-moderation engine."""
    IDLE = "idle"
    JOINING = "joining"
    MONITORING = "monitoring"
    LEAVING = "leaving"
    CLOSED = "closed"
    FAILED = "failed"


class EventKind(str, Enum):
    """Events published to the host application."""
    CHAT_MESSAGE = "chat-message"
    AI_RESPONSE = "ai-response"
    PROCESSING_ERROR = "processing-error"
    POST_ERROR = "post-error"
    STATE_CHANGED = "state-changed"


@dataclass(frozen=True)
class ChatEntry:
    """
    One chat message as read from the meeting UI during a poll tick.

    observed_at is whatever timestamp the UI exposed, or the ISO-8601
    time of extraction when it exposed none.
    """
    sender: str
    text: str
    observed_at: str

    @classmethod
    def from_page(cls, raw: Dict[str, Any]) -> "ChatEntry":
        """Build an entry from the dict returned by the extraction script."""
        sender = str(raw.get("sender") or "").strip() or "Unknown"
        text = str(raw.get("text") or "").strip()
        observed_at = str(raw.get("observed_at") or "").strip() or utc_now().isoformat()
        return cls(sender=sender, text=text, observed_at=observed_at)

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "sender": self.sender,
            "text": self.text,
            "observed_at": self.observed_at,
        }


@dataclass(frozen=True)
class Answer:
    """An AI-generated reply to one chat question."""
    question: str
    answer: str
    confidence: float
    generated_at: datetime = field(default_factory=utc_now)

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "question": self.question,
            "answer": self.answer,
            "confidence": self.confidence,
            "generated_at": self.generated_at.isoformat(),
        }


@dataclass
class SessionHandle:
    """The single live meeting session of an engine."""
    session_id: str
    meeting_link: str
    started_at: datetime = field(default_factory=utc_now)

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "session_id": self.session_id,
            "meeting_link": self.meeting_link,
            "started_at": self.started_at.isoformat(),
        }


@dataclass(frozen=True)
class EngineEvent:
    """A published event and its payload."""
    kind: EventKind
    payload: Dict[str, Any]
    emitted_at: datetime = field(default_factory=utc_now)
    session_id: Optional[str] = None

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "kind": self.kind.value,
            "payload": self.payload,
            "emitted_at": self.emitted_at.isoformat(),
            "session_id": self.session_id,
        }
