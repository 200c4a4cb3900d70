"""
Decides which chat entries get an AI answer.
"""

from typing import Callable

from comoderator.models import ChatEntry


# Any predicate with this shape can replace is_question on the engine
QuestionFilter = Callable[[ChatEntry], bool]


def is_question(entry: ChatEntry) -> bool:
    """Coarse heuristic: non-empty text containing a question mark."""
    return bool(entry.text) and "?" in entry.text
