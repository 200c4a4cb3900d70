"""
Chat co-moderation engine.

Coordinates one meeting session end to end:
- Join the meeting through the browser session
- Poll the chat on a fixed cadence and deduplicate messages
- Answer questions in background tasks and post the answers
- Publish lifecycle and content events to the host
- Tear everything down on leave
"""

from __future__ import annotations

import asyncio
import uuid
from typing import Any, Callable, Coroutine, Dict, Optional, Set

from comoderator.config import Settings, settings as app_settings
from comoderator.core.exceptions import ExtractionError, InvalidInput
from comoderator.core.logging import get_logger
from comoderator.events import EventBus
from comoderator.meeting_handler import (
    BrowserSession,
    ChatMonitor,
    ChatPoster,
    SelectorCatalog,
    load_catalog,
    resolve,
)
from comoderator.models import ChatEntry, EngineState, EventKind, SessionHandle
from comoderator.processing import (
    AnswerGenerator,
    QuestionFilter,
    SeenSet,
    is_question,
    message_identity,
)


logger = get_logger("engine")


class ModerationEngine:
    """
    Drives a single meeting session: join -> monitor -> leave.

    Usage pattern:
        engine = ModerationEngine(api_key="...")
        engine.events.subscribe(EventKind.AI_RESPONSE, on_answer)
        await engine.join(meeting_link, session_id)
        ...
        await engine.leave()
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        app_config: Optional[Settings] = None,
        *,
        browser_factory: Optional[Callable[[], BrowserSession]] = None,
        answer_generator: Optional[AnswerGenerator] = None,
        question_filter: Optional[QuestionFilter] = None,
        catalog: Optional[SelectorCatalog] = None,
        events: Optional[EventBus] = None,
    ):
        self.settings = app_config or app_settings
        self.catalog = catalog or load_catalog(self.settings.bot.selector_catalog_path)
        self.events = events or EventBus()
        self.question_filter = question_filter or is_question

        self._owns_generator = answer_generator is None
        self.answer_generator = answer_generator or AnswerGenerator(
            api_key=api_key, completion_settings=self.settings.completion
        )
        self._browser_factory = browser_factory or (lambda: BrowserSession(self.settings.browser))

        self._state = EngineState.IDLE
        self.session: Optional[SessionHandle] = None
        self._browser: Optional[BrowserSession] = None
        self._monitor: Optional[ChatMonitor] = None
        self._poster: Optional[ChatPoster] = None
        self._seen = SeenSet(self.settings.bot.seen_ceiling)
        self._poll_task: Optional[asyncio.Task] = None
        self._pending: Set[asyncio.Task] = set()

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def state(self) -> EngineState:
        return self._state

    @property
    def seen_count(self) -> int:
        return len(self._seen)

    @property
    def pending_count(self) -> int:
        """Answer/post tasks still in flight."""
        return len(self._pending)

    def get_status(self) -> Dict[str, Any]:
        """Snapshot for the host API."""
        return {
            "state": self._state.value,
            "session": self.session.to_dict() if self.session else None,
            "seen_messages": self.seen_count,
            "pending_tasks": self.pending_count,
            "selector_catalog": self.catalog.version,
        }

    # ------------------------------------------------------------------
    # Join
    # ------------------------------------------------------------------

    async def join(self, meeting_link: str, session_id: Optional[str] = None) -> None:
        """
        Join a meeting and start monitoring its chat.

        Raises:
            InvalidInput: Empty link, or another session is active.
            LaunchError, NavigationError, NavigationTimeout, SelectorNotFound:
                The join attempt failed; the engine is left in FAILED with
                every browser resource released.
        """
        meeting_link = (meeting_link or "").strip()
        if not meeting_link:
            raise InvalidInput("meeting_link is required")

        if self._state in (EngineState.JOINING, EngineState.MONITORING, EngineState.LEAVING):
            if (
                self._state is EngineState.MONITORING
                and self.session is not None
                and self.session.meeting_link == meeting_link
                and (not session_id or session_id == self.session.session_id)
            ):
                logger.info(f"Meeting {meeting_link} is already active. Skipping duplicate join.")
                return
            raise InvalidInput(
                f"Engine is {self._state.value}; leave the current session first",
                details={"state": self._state.value},
            )

        session_id = session_id or f"session_{uuid.uuid4().hex[:12]}"
        self.session = SessionHandle(session_id=session_id, meeting_link=meeting_link)
        self._set_state(EngineState.JOINING)
        logger.info(f"Joining meeting: session='{session_id}', url='{meeting_link}'")

        browser = self._browser_factory()
        self._browser = browser
        try:
            await self._join_meeting(browser, meeting_link)
        except (Exception, asyncio.CancelledError) as e:
            logger.error(f"Failed to join meeting: {e}")
            await self._release_browser()
            if self._state is EngineState.JOINING:
                self.session = None
                self._set_state(EngineState.FAILED, session_id=session_id)
            raise

        if self._state is not EngineState.JOINING:
            # leave() ran while we were joining and already released everything
            logger.info("Join finished after leave(); not starting chat monitoring")
            return

        self._seen = SeenSet(self.settings.bot.seen_ceiling)
        self._monitor = ChatMonitor(browser, self.catalog)
        self._poster = ChatPoster(browser, self.catalog)
        self._set_state(EngineState.MONITORING)
        self._poll_task = asyncio.create_task(self._poll_loop())
        logger.info(f"✅ Successfully joined meeting, monitoring chat (session {session_id})")

    async def _join_meeting(self, browser: BrowserSession, meeting_link: str) -> None:
        """
        Join flow:
        1. Launch browser
        2. Navigate to the meeting link
        3. Wait for the name field
        4. Enter the bot display name
        5. Click Join (or press Enter)
        6. Let the meeting UI settle
        """
        bot = self.settings.bot

        # --- Step 1: Launch ---
        await browser.launch()

        # --- Step 2: Navigate ---
        await browser.navigate(meeting_link, timeout_ms=self.settings.browser.navigation_timeout_ms)
        logger.info("Meeting page loaded")

        # --- Step 3: Name field ---
        name_selector = await browser.wait_for_any(
            self.catalog.get("name_input"), timeout_ms=bot.name_input_timeout_ms
        )

        # --- Step 4: Display name ---
        await browser.type_into(name_selector, bot.display_name, delay_ms=bot.type_delay_ms)
        logger.info(f"Entered bot name: {bot.display_name}")

        # --- Step 5: Join ---
        clicked = await self._click_join(browser)
        if clicked:
            logger.info(f"Clicked join button: {clicked}")
        else:
            logger.info("No join button found, submitting name with Enter")
            await browser.press_enter()

        # --- Step 6: Settle ---
        if bot.settle_seconds > 0:
            logger.info(f"Waiting {bot.settle_seconds}s for meeting UI to load...")
            await asyncio.sleep(bot.settle_seconds)

    async def _click_join(self, browser: BrowserSession) -> Optional[str]:
        """Click the first join-button candidate that exists and accepts a click."""
        async def click_if_present(selector: str) -> bool:
            if not await browser.query(selector):
                return False
            await browser.click(selector)
            return True

        return await resolve(self.catalog.get("join_button"), click_if_present)

    # ------------------------------------------------------------------
    # Chat monitoring
    # ------------------------------------------------------------------

    async def _poll_loop(self) -> None:
        """Fixed-rate chat polling; never waits on answer/post tasks."""
        interval = self.settings.bot.poll_interval_ms / 1000
        loop = asyncio.get_running_loop()
        next_tick = loop.time() + interval

        try:
            while self._state is EngineState.MONITORING:
                await asyncio.sleep(max(0.0, next_tick - loop.time()))
                if self._state is not EngineState.MONITORING:
                    break

                if self._browser is None or self._browser.is_closed:
                    await self._on_browser_lost()
                    break

                try:
                    await self._tick()
                except Exception as e:
                    logger.error(f"Chat monitoring error: {e}")

                next_tick += interval
                now = loop.time()
                if next_tick < now:
                    # Extraction overran the period; skip the missed slots
                    next_tick = now
        except asyncio.CancelledError:
            logger.debug("Chat monitor cancelled")
            raise

    async def _tick(self) -> None:
        """Extract, deduplicate, publish and dispatch new chat entries."""
        try:
            entries = await self._monitor.extract()
        except ExtractionError as e:
            logger.warning(f"Chat monitoring error: {e}")
            return

        if not entries:
            return

        for entry in entries:
            if not self._seen.add(message_identity(entry)):
                continue
            logger.info(f"Chat message from {entry.sender}: {entry.text[:120]}")
            self._publish(EventKind.CHAT_MESSAGE, entry.to_dict())
            self._spawn(self._process_entry(entry))

    async def _on_browser_lost(self) -> None:
        logger.error("Meeting page closed unexpectedly; ending session")
        self._poll_task = None
        await self._release_browser()
        self._monitor = None
        self._poster = None
        self._set_state(EngineState.FAILED)

    def _spawn(self, coro: Coroutine[Any, Any, None]) -> None:
        task = asyncio.create_task(coro)
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    # ------------------------------------------------------------------
    # Question processing
    # ------------------------------------------------------------------

    async def _process_entry(self, entry: ChatEntry) -> None:
        """Answer one entry if it is a question; failures become events."""
        try:
            if not self.question_filter(entry):
                return
            answer = await self.answer_generator.generate(entry.text)
        except Exception as e:
            logger.error(f"Processing error: {e}")
            self._publish(
                EventKind.PROCESSING_ERROR,
                {"error": str(e), "original_entry": entry.to_dict()},
            )
            return

        await self._post_answer(answer.answer)
        self._publish(EventKind.AI_RESPONSE, answer.to_dict())

    async def _post_answer(self, text: str) -> bool:
        poster = self._poster
        try:
            if poster is None:
                raise RuntimeError("No active meeting page to post to")
            await poster.post(text)
            return True
        except Exception as e:
            logger.error(f"Failed to post to chat: {e}")
            self._publish(EventKind.POST_ERROR, {"error": str(e), "attempted_text": text})
            return False

    async def wait_for_pending(self) -> None:
        """Wait until every in-flight answer/post task has finished."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    # ------------------------------------------------------------------
    # Leave
    # ------------------------------------------------------------------

    async def leave(self) -> None:
        """
        Stop monitoring and release the browser.

        No-op from IDLE or CLOSED; from FAILED it only moves to CLOSED.
        In-flight answer tasks are not cancelled and may still publish.
        """
        if self._state in (EngineState.IDLE, EngineState.CLOSED, EngineState.LEAVING):
            logger.debug(f"leave() ignored in state {self._state.value}")
            return

        self._set_state(EngineState.LEAVING)
        await self._stop_polling()
        await self._release_browser()
        self._monitor = None
        self._poster = None
        self._set_state(EngineState.CLOSED)
        self.session = None
        logger.info("Left meeting")

    async def shutdown(self) -> None:
        """Leave, let in-flight tasks finish, and close the HTTP client."""
        await self.leave()
        await self.wait_for_pending()
        if self._owns_generator:
            await self.answer_generator.aclose()

    async def _stop_polling(self) -> None:
        task = self._poll_task
        self._poll_task = None
        if task is None or task.done():
            return
        task.cancel()
        if task is asyncio.current_task():
            return
        try:
            await task
        except asyncio.CancelledError:
            pass

    async def _release_browser(self) -> None:
        browser = self._browser
        self._browser = None
        if browser is None:
            return
        try:
            await browser.close()
        except Exception as e:
            logger.warning(f"Error closing browser session: {e}")

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------

    def _publish(self, kind: EventKind, payload: Dict[str, Any]) -> None:
        session_id = self.session.session_id if self.session else None
        self.events.publish(kind, payload, session_id=session_id)

    def _set_state(self, new_state: EngineState, session_id: Optional[str] = None) -> None:
        previous = self._state
        self._state = new_state
        if session_id is None and self.session is not None:
            session_id = self.session.session_id
        logger.info(f"Engine state: {previous.value} -> {new_state.value}")
        self.events.publish(
            EventKind.STATE_CHANGED,
            {"previous": previous.value, "current": new_state.value, "session_id": session_id},
            session_id=session_id,
        )
