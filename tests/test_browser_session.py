"""Tests for the Playwright-backed BrowserSession using mocked driver objects."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from playwright.async_api import Error as PlaywrightError, TimeoutError as PlaywrightTimeoutError

from comoderator.config import BrowserSettings
from comoderator.core.exceptions import (
    LaunchError,
    NavigationError,
    NavigationTimeout,
    SelectorNotFound,
)
from comoderator.meeting_handler import browser_session as browser_session_module
from comoderator.meeting_handler.browser_session import BrowserSession


def mock_page() -> MagicMock:
    page = MagicMock()
    page.is_closed.return_value = False
    page.close = AsyncMock()
    page.goto = AsyncMock()
    page.evaluate = AsyncMock()
    page.query_selector = AsyncMock(return_value=None)
    return page


def mock_driver(page: MagicMock):
    """Playwright driver, browser and context wired to return the given page."""
    context = MagicMock()
    context.add_init_script = AsyncMock()
    context.new_page = AsyncMock(return_value=page)
    context.close = AsyncMock()

    browser = MagicMock()
    browser.new_context = AsyncMock(return_value=context)
    browser.close = AsyncMock()
    browser.is_connected.return_value = True

    playwright = MagicMock()
    playwright.chromium.launch = AsyncMock(return_value=browser)
    playwright.stop = AsyncMock()
    return playwright, browser, context


def registered_handler(mock_obj: MagicMock, event: str):
    for call in mock_obj.on.call_args_list:
        if call.args[0] == event:
            return call.args[1]
    raise AssertionError(f"no handler registered for {event}")


@pytest.fixture
def session() -> BrowserSession:
    return BrowserSession(BrowserSettings(headless=True))


@pytest.fixture
def launched(session):
    """Session with mocked page/context/browser/driver already in place."""
    page = mock_page()
    playwright, browser, context = mock_driver(page)
    session._playwright = playwright
    session._browser = browser
    session._context = context
    session._page = page
    return session, page, browser, context, playwright


class TestLaunch:

    @pytest.mark.asyncio
    async def test_launch_opens_page_and_watches_for_loss(self, session) -> None:
        page = mock_page()
        playwright, browser, context = mock_driver(page)

        with patch.object(browser_session_module, "async_playwright") as factory:
            factory.return_value.start = AsyncMock(return_value=playwright)
            await session.launch()

        assert session.page is page
        assert session.is_closed is False
        launch_kwargs = playwright.chromium.launch.await_args.kwargs
        assert launch_kwargs["headless"] is True
        assert "--use-fake-ui-for-media-stream" in launch_kwargs["args"]
        page.set_default_timeout.assert_called_once_with(5000)
        registered_handler(page, "crash")
        registered_handler(browser, "disconnected")

    @pytest.mark.asyncio
    async def test_driver_error_cleans_up_and_raises_launch_error(self, session) -> None:
        page = mock_page()
        playwright, browser, context = mock_driver(page)
        playwright.chromium.launch.side_effect = PlaywrightError("Executable doesn't exist")

        with patch.object(browser_session_module, "async_playwright") as factory:
            factory.return_value.start = AsyncMock(return_value=playwright)
            with pytest.raises(LaunchError):
                await session.launch()

        playwright.stop.assert_awaited_once()
        assert session._playwright is None
        assert session.is_closed is True

    @pytest.mark.asyncio
    async def test_non_playwright_error_becomes_launch_error(self, session) -> None:
        with patch.object(browser_session_module, "async_playwright") as factory:
            factory.return_value.start = AsyncMock(side_effect=OSError("driver binary missing"))
            with pytest.raises(LaunchError) as exc_info:
                await session.launch()

        assert "driver binary missing" in exc_info.value.message


class TestLossDetection:

    @pytest.mark.asyncio
    async def test_page_crash_marks_session_closed(self, session) -> None:
        page = mock_page()
        playwright, browser, context = mock_driver(page)
        with patch.object(browser_session_module, "async_playwright") as factory:
            factory.return_value.start = AsyncMock(return_value=playwright)
            await session.launch()

        registered_handler(page, "crash")(page)

        assert page.is_closed() is False
        assert session.is_closed is True

    @pytest.mark.asyncio
    async def test_browser_disconnect_marks_session_closed(self, session) -> None:
        page = mock_page()
        playwright, browser, context = mock_driver(page)
        with patch.object(browser_session_module, "async_playwright") as factory:
            factory.return_value.start = AsyncMock(return_value=playwright)
            await session.launch()

        registered_handler(browser, "disconnected")(browser)

        assert session.is_closed is True

    def test_disconnected_browser_is_closed(self, launched) -> None:
        session, page, browser, context, playwright = launched
        assert session.is_closed is False

        browser.is_connected.return_value = False

        assert session.is_closed is True


class TestNavigate:

    @pytest.mark.asyncio
    async def test_waits_for_network_idle_with_timeout(self, launched) -> None:
        session, page, *_ = launched

        await session.navigate("https://zoom.us/wc/1/join", timeout_ms=1234)

        page.goto.assert_awaited_once_with(
            "https://zoom.us/wc/1/join", wait_until="networkidle", timeout=1234
        )

    @pytest.mark.asyncio
    async def test_timeout_becomes_navigation_timeout(self, launched) -> None:
        session, page, *_ = launched
        page.goto.side_effect = PlaywrightTimeoutError("Timeout 30000ms exceeded")

        with pytest.raises(NavigationTimeout) as exc_info:
            await session.navigate("https://zoom.us/wc/1/join")

        assert exc_info.value.details["timeout_ms"] == 30000

    @pytest.mark.asyncio
    async def test_other_driver_error_becomes_navigation_error(self, launched) -> None:
        session, page, *_ = launched
        page.goto.side_effect = PlaywrightError("net::ERR_NAME_NOT_RESOLVED")

        with pytest.raises(NavigationError) as exc_info:
            await session.navigate("https://zoom.invalid/j/1")

        assert not isinstance(exc_info.value, NavigationTimeout)


class TestWaitForAny:

    @pytest.mark.asyncio
    async def test_prefers_earlier_candidates(self, launched) -> None:
        session, page, *_ = launched
        present = {"#b", "#c"}
        page.query_selector.side_effect = lambda selector: object() if selector in present else None

        assert await session.wait_for_any(["#a", "#b", "#c"], timeout_ms=100) == "#b"

    @pytest.mark.asyncio
    async def test_keeps_polling_until_a_candidate_appears(self, launched, monkeypatch) -> None:
        session, page, *_ = launched
        monkeypatch.setattr(browser_session_module, "SELECTOR_POLL_SECONDS", 0)
        probes = []

        def query(selector):
            probes.append(selector)
            return object() if len(probes) > 4 else None

        page.query_selector.side_effect = query

        assert await session.wait_for_any(["#a", "#b"], timeout_ms=1000) in {"#a", "#b"}
        assert len(probes) >= 5

    @pytest.mark.asyncio
    async def test_raises_when_nothing_appears(self, launched) -> None:
        session, page, *_ = launched

        with pytest.raises(SelectorNotFound) as exc_info:
            await session.wait_for_any(["#a", "#b"], timeout_ms=0)

        assert exc_info.value.details["candidates"] == ["#a", "#b"]


class TestClose:

    @pytest.mark.asyncio
    async def test_close_is_independent_and_idempotent(self, launched) -> None:
        session, page, browser, context, playwright = launched
        page.close.side_effect = RuntimeError("Target closed")

        await session.close()
        await session.close()

        page.close.assert_awaited_once()
        context.close.assert_awaited_once()
        browser.close.assert_awaited_once()
        playwright.stop.assert_awaited_once()
        assert session.is_closed is True

    @pytest.mark.asyncio
    async def test_close_before_launch_is_noop(self, session) -> None:
        await session.close()

        assert session.is_closed is True
