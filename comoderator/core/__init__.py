"""
Core module exports.
"""

from .logging import logger, get_logger, setup_logging
from .exceptions import (
    CoModeratorError,
    InvalidInput,
    JoinError,
    LaunchError,
    NavigationError,
    NavigationTimeout,
    SelectorNotFound,
    ExtractionError,
    AnswerGenerationError,
    PostError,
    PostNotFound,
)

__all__ = [
    "logger",
    "get_logger",
    "setup_logging",
    "CoModeratorError",
    "InvalidInput",
    "JoinError",
    "LaunchError",
    "NavigationError",
    "NavigationTimeout",
    "SelectorNotFound",
    "ExtractionError",
    "AnswerGenerationError",
    "PostError",
    "PostNotFound",
]
