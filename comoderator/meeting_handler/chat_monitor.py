"""
Chat extraction for one poll tick.
"""

from __future__ import annotations

from typing import List

from comoderator.core.exceptions import ExtractionError
from comoderator.core.logging import get_logger
from comoderator.models import ChatEntry
from .browser_session import BrowserSession
from .zoom_selectors import EXTRACT_CHAT_JS, SelectorCatalog


logger = get_logger("chat_monitor")


class ChatMonitor:
    """Reads the currently visible chat messages from the meeting page."""

    def __init__(self, session: BrowserSession, catalog: SelectorCatalog):
        self.session = session
        self.catalog = catalog

    async def extract(self) -> List[ChatEntry]:
        """
        Snapshot the chat panel.

        Returns:
            Entries in the UI's DOM order (possibly empty).

        Raises:
            ExtractionError: If the page cannot be queried.
        """
        try:
            raw_entries = await self.session.evaluate(
                EXTRACT_CHAT_JS, self.catalog.chat_extraction_args()
            )
        except Exception as e:
            raise ExtractionError(f"Chat extraction failed: {e}") from e

        if not isinstance(raw_entries, list):
            raise ExtractionError(
                f"Chat extraction returned {type(raw_entries).__name__}, expected list"
            )

        entries = [ChatEntry.from_page(raw) for raw in raw_entries if isinstance(raw, dict)]
        logger.debug(f"Extracted {len(entries)} chat entries")
        return entries
