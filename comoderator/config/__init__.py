"""
Configuration module for the chat co-moderator.
"""

from .settings import (
    Settings,
    settings,
    BrowserSettings,
    BotSettings,
    CompletionSettings,
    ApiSettings,
    DEFAULT_SYSTEM_PROMPT,
)

__all__ = [
    "Settings",
    "settings",
    "BrowserSettings",
    "BotSettings",
    "CompletionSettings",
    "ApiSettings",
    "DEFAULT_SYSTEM_PROMPT",
]
