"""
Chat message deduplication.

The meeting UI exposes no message IDs, so identity is a fingerprint of the
entry's fields and the remembered set is bounded.
"""

from __future__ import annotations

import hashlib
from typing import Dict

from comoderator.models import ChatEntry


def message_identity(entry: ChatEntry) -> str:
    """Stable SHA-1 fingerprint of sender, text and timestamp."""
    key = f"{entry.sender}||{entry.text}||{entry.observed_at}"
    return hashlib.sha1(key.encode("utf-8")).hexdigest()


class SeenSet:
    """
    Insertion-ordered set of message identities with a size ceiling.

    When an insert pushes the size above the ceiling, only the most
    recently inserted half is kept. An entry identical to one pruned long
    ago will be treated as new again.
    """

    def __init__(self, ceiling: int = 1000) -> None:
        if ceiling < 2:
            raise ValueError("ceiling must be at least 2")
        self.ceiling = ceiling
        # dict keeps insertion order
        self._ids: Dict[str, None] = {}

    def __contains__(self, identity: str) -> bool:
        return identity in self._ids

    def __len__(self) -> int:
        return len(self._ids)

    def add(self, identity: str) -> bool:
        """
        Remember an identity.

        Returns:
            True if it was new, False if already present.
        """
        if identity in self._ids:
            return False
        self._ids[identity] = None
        if len(self._ids) > self.ceiling:
            self._prune()
        return True

    def clear(self) -> None:
        self._ids.clear()

    def _prune(self) -> None:
        keep = self.ceiling // 2
        self._ids = dict.fromkeys(list(self._ids)[-keep:])
