"""
Meeting handler module.

Browser automation against the Zoom web client: session, selectors,
chat extraction and chat posting.
"""

from .browser_session import BrowserSession
from .chat_monitor import ChatMonitor
from .chat_poster import ChatPoster
from .zoom_selectors import SelectorCatalog, load_catalog, resolve

__all__ = [
    "BrowserSession",
    "ChatMonitor",
    "ChatPoster",
    "SelectorCatalog",
    "load_catalog",
    "resolve",
]
