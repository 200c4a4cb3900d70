"""
Reply injection into the meeting chat.
"""

from __future__ import annotations

from comoderator.core.exceptions import PostError, PostNotFound
from comoderator.core.logging import get_logger
from .browser_session import BrowserSession
from .zoom_selectors import SEND_BUTTON_FALLBACK_JS, SET_INPUT_VALUE_JS, SelectorCatalog


logger = get_logger("chat_poster")


class ChatPoster:
    """Types a reply into the chat composer and submits it."""

    def __init__(self, session: BrowserSession, catalog: SelectorCatalog):
        self.session = session
        self.catalog = catalog

    async def post(self, text: str) -> str:
        """
        Post text to the meeting chat.

        Strategy 1: each chat-input candidate in order; set the value,
        fire input/change, press Enter.
        Strategy 2: any "Send" button plus any generic text field.

        Returns:
            Description of the strategy that worked.

        Raises:
            PostNotFound: If neither strategy finds a target.
            PostError: If the browser fails while posting.
        """
        try:
            for selector in self.catalog.get("chat_input"):
                if not await self.session.query(selector):
                    continue
                filled = await self.session.evaluate(
                    SET_INPUT_VALUE_JS, {"selector": selector, "text": text}
                )
                if not filled:
                    continue
                await self.session.press_enter()
                logger.info(f"Posted to chat via {selector}")
                return f"input:{selector}"

            logger.debug("No chat input matched, trying send-button fallback")
            if await self.session.evaluate(SEND_BUTTON_FALLBACK_JS, text):
                logger.info("Posted to chat via send-button fallback")
                return "send-button"
        except Exception as e:
            raise PostError(f"Failed to post to chat: {e}") from e

        raise PostNotFound("Could not find chat input or send button to post message")
