"""
Chat processing: deduplication, question detection and answer generation.
"""

from .dedup import SeenSet, message_identity
from .question_filter import QuestionFilter, is_question
from .answer_generator import AnswerGenerator, ConfidenceScorer, fixed_confidence

__all__ = [
    "SeenSet",
    "message_identity",
    "QuestionFilter",
    "is_question",
    "AnswerGenerator",
    "ConfidenceScorer",
    "fixed_confidence",
]
