"""
Zoom web client DOM selectors and page-side JavaScript.

This module centralizes every Zoom UI selector and JavaScript snippet used for:
- Meeting join flow
- Chat extraction
- Chat reply injection

Note: the Zoom web UI changes without notice and differs across versions and
locales, so every affordance has an ordered list of candidates and the whole
catalog can be replaced from a JSON file without touching engine code.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Awaitable, Callable, Dict, Iterable, List, Optional

from comoderator.core.logging import get_logger


logger = get_logger("selectors")


# =============================================================================
# DOM SELECTORS
# =============================================================================

CATALOG_VERSION = "zoom-web-2024.1"

ZOOM_SELECTORS: Dict[str, List[str]] = {
    # -------------------------------------------------------------------------
    # Join Flow Selectors
    # -------------------------------------------------------------------------

    # Display name field on the pre-join screen
    "name_input": [
        'input[name="name"]',
        'input#inputname',
        'input#input-for-name',
        'input[aria-label="Your name"]',
        'input[placeholder*="name" i]',
    ],

    # Join button (various client versions)
    "join_button": [
        'button[type="submit"]',
        'button[aria-label*="Join"]',
        'button[data-role="join-button"]',
        '.join-button',
        'button.preview-join-button',
    ],

    # -------------------------------------------------------------------------
    # Chat Panel Selectors
    # -------------------------------------------------------------------------

    # One chat message row; all candidates are matched together in DOM order
    "chat_item": [
        '.chat-item',
        '.chat-list-item',
        '.chat-message',
    ],

    # Fields inside a chat row, tried in priority order
    "chat_sender": [
        '.sender-name',
        '.name',
        '.chat-item-sender',
        '.chat-item__sender',
    ],
    "chat_text": [
        '.chat-message-text',
        '.message',
        '.chat-text',
    ],
    "chat_timestamp": [
        '.time',
        '.timestamp',
        'time',
    ],

    # Chat composer
    "chat_input": [
        '.chat-input',
        'textarea.chat-input',
        'input.chat-input',
        'textarea[aria-label="Send a message"]',
        '[contenteditable="true"][aria-label*="chat" i]',
    ],
}


# =============================================================================
# JAVASCRIPT
# =============================================================================

# Returns [{sender, text, observed_at}] for every visible chat row, in DOM order.
# Missing fields come back empty/null; defaults are applied on the Python side.
EXTRACT_CHAT_JS = """
(sel) => {
    const pick = (root, candidates) => {
        for (const s of candidates) {
            const el = root.querySelector(s);
            if (el) return el;
        }
        return null;
    };

    const rows = document.querySelectorAll(sel.item.join(', '));
    return Array.from(rows).map(row => {
        const senderEl = pick(row, sel.sender);
        const textEl = pick(row, sel.text);
        const timeEl = pick(row, sel.timestamp);

        let observedAt = null;
        if (timeEl) {
            observedAt = timeEl.getAttribute('data-timestamp')
                || (timeEl.textContent || '').trim()
                || null;
        }

        return {
            sender: senderEl ? (senderEl.textContent || '').trim() : '',
            text: textEl ? (textEl.textContent || '').trim() : '',
            observed_at: observedAt,
        };
    });
}
"""

# Focuses the composer, sets its value and fires input/change so the
# framework behind the Zoom UI picks the new value up. Elements that cannot
# hold text (wrapper divs) return false so the next candidate is tried.
SET_INPUT_VALUE_JS = """
({selector, text}) => {
    const el = document.querySelector(selector);
    if (!el) return false;
    const isField = el instanceof HTMLInputElement || el instanceof HTMLTextAreaElement;
    if (!isField && !el.isContentEditable) return false;

    el.focus();
    if (el.isContentEditable) {
        el.textContent = text;
    } else {
        const proto = el instanceof HTMLTextAreaElement
            ? HTMLTextAreaElement.prototype
            : HTMLInputElement.prototype;
        const descriptor = Object.getOwnPropertyDescriptor(proto, 'value');
        if (descriptor && descriptor.set) {
            descriptor.set.call(el, text);
        } else {
            el.value = text;
        }
    }
    el.dispatchEvent(new Event('input', { bubbles: true }));
    el.dispatchEvent(new Event('change', { bubbles: true }));
    return true;
}
"""

# Last resort: any button labelled "Send" plus any generic text field.
SEND_BUTTON_FALLBACK_JS = """
(text) => {
    const btn = Array.from(document.querySelectorAll('button'))
        .find(b => /send/i.test(b.textContent || b.getAttribute('aria-label') || ''));
    if (!btn) return false;

    const input = document.querySelector('textarea, input[type="text"]');
    if (input) {
        input.focus();
        input.value = text;
        input.dispatchEvent(new Event('input', { bubbles: true }));
        input.dispatchEvent(new Event('change', { bubbles: true }));
    }
    btn.click();
    return true;
}
"""


# =============================================================================
# CATALOG
# =============================================================================

@dataclass
class SelectorCatalog:
    """Versioned, ordered selector candidates per UI affordance."""
    version: str = CATALOG_VERSION
    selectors: Dict[str, List[str]] = field(
        default_factory=lambda: {key: list(values) for key, values in ZOOM_SELECTORS.items()}
    )

    def get(self, affordance: str) -> List[str]:
        """
        Get the ordered candidates for an affordance.

        Args:
            affordance: Key such as "name_input" or "chat_item"

        Returns:
            Copy of the candidate list (empty if unknown)
        """
        return list(self.selectors.get(affordance, []))

    def chat_extraction_args(self) -> Dict[str, List[str]]:
        """Selector argument passed to EXTRACT_CHAT_JS."""
        return {
            "item": self.get("chat_item"),
            "sender": self.get("chat_sender"),
            "text": self.get("chat_text"),
            "timestamp": self.get("chat_timestamp"),
        }

    @classmethod
    def from_file(cls, path: str | Path) -> "SelectorCatalog":
        """
        Load a catalog override from JSON.

        The file holds {"version": "...", "selectors": {affordance: [...]}}.
        Affordances it does not mention keep the built-in candidates.
        """
        data = json.loads(Path(path).read_text(encoding="utf-8"))
        catalog = cls()
        overrides = data.get("selectors", {})
        for affordance, candidates in overrides.items():
            if not isinstance(candidates, list) or not all(isinstance(c, str) for c in candidates):
                raise ValueError(f"Selector candidates for '{affordance}' must be a list of strings")
            catalog.selectors[affordance] = list(candidates)
        catalog.version = str(data.get("version", f"{CATALOG_VERSION}+custom"))
        logger.info(f"Loaded selector catalog {catalog.version} from {path}")
        return catalog


def load_catalog(path: Optional[str] = None) -> SelectorCatalog:
    """Built-in catalog, or the JSON override at path."""
    if path:
        return SelectorCatalog.from_file(path)
    return SelectorCatalog()


async def resolve(
    candidates: Iterable[str],
    probe: Callable[[str], Awaitable[bool]],
) -> Optional[str]:
    """
    Return the first candidate, in priority order, that the probe accepts.

    A probe that raises counts as a miss for that candidate.
    """
    for selector in candidates:
        try:
            if await probe(selector):
                return selector
        except Exception as e:
            logger.debug(f"Probe failed for {selector}: {e}")
            continue
    return None
