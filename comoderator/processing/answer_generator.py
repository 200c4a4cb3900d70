"""
AI answer generation via a chat-completions HTTP API.
"""

from __future__ import annotations

from typing import Callable, Optional

import httpx

from comoderator.config import CompletionSettings, settings as app_settings
from comoderator.core.exceptions import AnswerGenerationError
from comoderator.core.logging import get_logger
from comoderator.models import Answer


logger = get_logger("answer_generator")

# (question, answer) -> confidence in 0..100
ConfidenceScorer = Callable[[str, str], float]

# Error bodies from the API are cut to this many characters
MAX_ERROR_BODY = 500


def fixed_confidence(value: float) -> ConfidenceScorer:
    """Scorer that ignores its input and returns a constant."""
    def scorer(question: str, answer: str) -> float:
        return value
    return scorer


class AnswerGenerator:
    """
    Turns a chat question into an Answer using the completion API.

    The bearer credential comes from the host (or OPENAI_API_KEY) and is
    never logged.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        completion_settings: Optional[CompletionSettings] = None,
        client: Optional[httpx.AsyncClient] = None,
        scorer: Optional[ConfidenceScorer] = None,
    ):
        self._settings = completion_settings or app_settings.completion
        if api_key is None and self._settings.api_key is not None:
            api_key = self._settings.api_key.get_secret_value()
        self._api_key = api_key
        self._client = client
        self._owns_client = client is None
        self.scorer = scorer or fixed_confidence(self._settings.default_confidence)

        if not self._api_key:
            logger.warning("No completion API key configured; questions will not be answered")

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self._settings.timeout_seconds)
        return self._client

    def build_payload(self, question: str) -> dict:
        """Request body for one question."""
        return {
            "model": self._settings.model,
            "messages": [
                {"role": "system", "content": self._settings.system_prompt},
                {"role": "user", "content": question},
            ],
            "temperature": self._settings.temperature,
            "max_tokens": self._settings.max_tokens,
        }

    async def generate(self, question: str) -> Answer:
        """
        Ask the completion API to answer a question.

        Raises:
            AnswerGenerationError: On missing credentials, transport errors,
                non-success responses, or an empty answer.
        """
        if not self._api_key:
            raise AnswerGenerationError("No completion API key configured")

        headers = {
            "Authorization": f"Bearer {self._api_key}",
            "Content-Type": "application/json",
        }
        logger.debug(f"Requesting answer for: {question[:80]}")

        try:
            response = await self._get_client().post(
                self._settings.api_url,
                json=self.build_payload(question),
                headers=headers,
                timeout=self._settings.timeout_seconds,
            )
        except httpx.HTTPError as e:
            raise AnswerGenerationError(f"Completion API request failed: {e}") from e

        if not response.is_success:
            raise AnswerGenerationError(
                f"Completion API error ({response.status_code}): {response.text[:MAX_ERROR_BODY]}",
                details={"status_code": response.status_code},
            )

        try:
            data = response.json()
        except ValueError as e:
            raise AnswerGenerationError("Completion API returned invalid JSON") from e

        answer_text = _extract_answer(data)
        if not answer_text:
            raise AnswerGenerationError("No answer returned from completion API")

        confidence = max(0.0, min(100.0, float(self.scorer(question, answer_text))))
        return Answer(question=question, answer=answer_text, confidence=confidence)

    async def aclose(self) -> None:
        """Close the HTTP client if this generator created it."""
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None


def _extract_answer(data) -> str:
    """Pull choices[0].message.content out of a completion response."""
    try:
        content = data["choices"][0]["message"]["content"]
    except (KeyError, IndexError, TypeError):
        return ""
    if not isinstance(content, str):
        return ""
    return content.strip()
