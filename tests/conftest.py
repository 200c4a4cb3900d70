"""Pytest configuration and shared fixtures."""

import asyncio
import os
from typing import Any, Dict, Iterable, List, Optional
from unittest.mock import AsyncMock

# No log files from test runs; must be set before comoderator is imported
os.environ["LOG_TO_FILE"] = "false"

import pytest
import pytest_asyncio

from comoderator.config import BotSettings, Settings
from comoderator.core.exceptions import SelectorNotFound
from comoderator.engine import ModerationEngine
from comoderator.meeting_handler.zoom_selectors import (
    EXTRACT_CHAT_JS,
    SEND_BUTTON_FALLBACK_JS,
    SET_INPUT_VALUE_JS,
)
from comoderator.models import Answer, EngineEvent, EventKind


class FakeBrowserSession:
    """In-memory stand-in for the Playwright BrowserSession."""

    def __init__(
        self,
        present: Iterable[str] = ('input[name="name"]', 'button[type="submit"]', ".chat-input"),
        launch_error: Optional[Exception] = None,
        navigate_error: Optional[Exception] = None,
        send_button: bool = False,
    ):
        self.present = set(present)
        self.launch_error = launch_error
        self.navigate_error = navigate_error
        self.send_button = send_button

        self.chat: List[Dict[str, Any]] = []
        self.extract_error: Optional[Exception] = None
        self.extract_calls = 0

        self.launched = False
        self.closed = False
        self.crashed = False
        self.close_calls = 0
        self.navigated_to: Optional[str] = None
        self.typed: List[tuple] = []
        self.clicked: List[str] = []
        self.enter_presses = 0
        self.posted: List[str] = []
        self.unfillable: set = set()
        self._composer_text: Optional[str] = None

    @property
    def is_closed(self) -> bool:
        return not self.launched or self.closed or self.crashed

    async def launch(self) -> None:
        if self.launch_error:
            raise self.launch_error
        self.launched = True

    async def navigate(self, url: str, timeout_ms: Optional[int] = None) -> None:
        if self.navigate_error:
            raise self.navigate_error
        self.navigated_to = url

    async def query(self, selector: str) -> bool:
        return selector in self.present

    async def wait_for_any(self, candidates, timeout_ms: int) -> str:
        for selector in candidates:
            if selector in self.present:
                return selector
        raise SelectorNotFound("no candidate appeared")

    async def type_into(self, selector: str, text: str, delay_ms: int = 0) -> None:
        self.typed.append((selector, text))

    async def click(self, selector: str) -> None:
        self.clicked.append(selector)

    async def press_enter(self) -> None:
        self.enter_presses += 1
        if self._composer_text is not None:
            self.posted.append(self._composer_text)
            self._composer_text = None

    async def evaluate(self, script: str, arg: Any = None) -> Any:
        if script is EXTRACT_CHAT_JS:
            self.extract_calls += 1
            if self.crashed:
                raise RuntimeError("Target crashed")
            if self.extract_error:
                raise self.extract_error
            return [dict(row) for row in self.chat]
        if script is SET_INPUT_VALUE_JS:
            if arg["selector"] in self.unfillable:
                return False
            self._composer_text = arg["text"]
            return True
        if script is SEND_BUTTON_FALLBACK_JS:
            if self.send_button:
                self.posted.append(arg)
                return True
            return False
        raise AssertionError("unexpected script")

    def crash(self) -> None:
        """Renderer crash: the page stays open but every call fails."""
        self.crashed = True

    async def close(self) -> None:
        self.close_calls += 1
        self.closed = True


class EventRecorder:
    """Collects every published event."""

    def __init__(self) -> None:
        self.events: List[EngineEvent] = []

    def __call__(self, event: EngineEvent) -> None:
        self.events.append(event)

    def of(self, kind: EventKind) -> List[EngineEvent]:
        return [e for e in self.events if e.kind is kind]


async def wait_until(predicate, timeout: float = 2.0, interval: float = 0.01) -> None:
    """Poll predicate until true or fail the test."""
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate():
        if loop.time() > deadline:
            raise AssertionError("condition not met in time")
        await asyncio.sleep(interval)


def chat_row(sender: str, text: str, observed_at: str = "2024-05-01T10:00:00Z") -> Dict[str, Any]:
    return {"sender": sender, "text": text, "observed_at": observed_at}


@pytest.fixture
def fast_settings() -> Settings:
    """Settings with no settle wait and a short poll period."""
    return Settings(
        bot=BotSettings(settle_seconds=0, poll_interval_ms=20, name_input_timeout_ms=100),
        log_to_file=False,
    )


@pytest.fixture
def fake_browser() -> FakeBrowserSession:
    return FakeBrowserSession()


@pytest.fixture
def answer_generator() -> AsyncMock:
    generator = AsyncMock()
    generator.generate.side_effect = lambda question: Answer(
        question=question, answer=f"Answer to: {question}", confidence=85
    )
    return generator


@pytest.fixture
def recorder() -> EventRecorder:
    return EventRecorder()


@pytest_asyncio.fixture
async def engine(fast_settings, fake_browser, answer_generator, recorder):
    engine = ModerationEngine(
        app_config=fast_settings,
        browser_factory=lambda: fake_browser,
        answer_generator=answer_generator,
    )
    engine.events.subscribe(None, recorder)
    yield engine
    await engine.leave()
    await engine.wait_for_pending()
