"""
Custom exceptions for the chat co-moderator.
"""

from typing import Any, Dict, Optional
from fastapi import HTTPException, status


class CoModeratorError(Exception):
    """Base exception for co-moderator errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class InvalidInput(CoModeratorError):
    """Raised when a control call receives bad arguments."""
    pass


# Join-phase failures: fatal to the join attempt, not to the engine
class JoinError(CoModeratorError):
    """Raised when joining a meeting fails."""
    pass


class LaunchError(JoinError):
    """Raised when the automated browser cannot be started."""
    pass


class NavigationError(JoinError):
    """Raised when the meeting page cannot be loaded."""
    pass


class NavigationTimeout(NavigationError):
    """Raised when the meeting page does not settle before the deadline."""
    pass


class SelectorNotFound(JoinError):
    """Raised when none of the selector candidates appear in time."""
    pass


# Per-tick / per-message failures: reported, never fatal
class ExtractionError(CoModeratorError):
    """Raised when chat entries cannot be read from the page."""
    pass


class AnswerGenerationError(CoModeratorError):
    """Raised when the completion API does not return a usable answer."""
    pass


class PostError(CoModeratorError):
    """Raised when a reply cannot be injected into the meeting chat."""
    pass


class PostNotFound(PostError):
    """Raised when no chat input or send control exists on the page."""
    pass


# HTTP Exceptions for API responses
class HTTPBadRequest(HTTPException):
    """400 Bad Request"""
    def __init__(self, detail: str):
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


class HTTPInternalServerError(HTTPException):
    """500 Internal Server Error"""
    def __init__(self, detail: str = "Internal server error"):
        super().__init__(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=detail)
