"""
Playwright-backed browser session.

Owns the Playwright driver, one Chromium browser, one context and a single
page. Every other component reaches the meeting UI through this class.
"""

from __future__ import annotations

import asyncio
from typing import Any, Iterable, Optional

from playwright.async_api import (
    async_playwright,
    Browser,
    BrowserContext,
    Page,
    Playwright,
    Error as PlaywrightError,
    TimeoutError as PlaywrightTimeoutError,
)

from comoderator.config import BrowserSettings, settings as app_settings
from comoderator.core.exceptions import (
    LaunchError,
    NavigationError,
    NavigationTimeout,
    SelectorNotFound,
)
from comoderator.core.logging import get_logger
from .zoom_selectors import resolve


logger = get_logger("browser_session")

# Interval between selector probes in wait_for_any
SELECTOR_POLL_SECONDS = 0.25


class BrowserSession:
    """
    Single-page automated browser.

    Usage pattern:
        session = BrowserSession()
        await session.launch()
        await session.navigate(url)
        ...
        await session.close()
    """

    def __init__(self, browser_settings: Optional[BrowserSettings] = None) -> None:
        self._settings = browser_settings or app_settings.browser
        self._playwright: Optional[Playwright] = None
        self._browser: Optional[Browser] = None
        self._context: Optional[BrowserContext] = None
        self._page: Optional[Page] = None
        self._lost = False

    @property
    def is_closed(self) -> bool:
        """True when no page is open, or the page was closed, crashed or lost its browser."""
        if self._page is None or self._lost:
            return True
        if self._browser is not None and not self._browser.is_connected():
            return True
        return self._page.is_closed()

    @property
    def page(self) -> Page:
        if self._page is None:
            raise RuntimeError("Browser session not launched")
        return self._page

    async def launch(self) -> None:
        """
        Start Playwright, launch Chromium and open the page.

        Raises:
            LaunchError: If the browser cannot be started.
        """
        if self._page is not None:
            return

        logger.info("Launching browser session...")
        self._lost = False
        try:
            self._playwright = await async_playwright().start()
            self._browser = await self._playwright.chromium.launch(
                headless=self._settings.headless,
                executable_path=self._settings.executable_path,
                ignore_default_args=["--enable-automation"],
                args=list(self._settings.launch_args),
                timeout=self._settings.launch_timeout_ms,
            )
            self._context = await self._browser.new_context(
                viewport={
                    "width": self._settings.viewport_width,
                    "height": self._settings.viewport_height,
                },
                permissions=["microphone", "camera"],
            )
            # Hide navigator.webdriver from the meeting client
            await self._context.add_init_script(
                "Object.defineProperty(navigator, 'webdriver', {get: () => undefined})"
            )
            self._page = await self._context.new_page()
            self._page.set_default_timeout(self._settings.action_timeout_ms)
            self._browser.on("disconnected", self._mark_lost)
            self._page.on("crash", self._mark_lost)
        except Exception as e:
            logger.error(f"Browser launch failed: {e}")
            await self.close()
            raise LaunchError(f"Could not start browser: {e}") from e

        logger.info("Browser session launched.")

    def _mark_lost(self, _source: Any = None) -> None:
        # close() drops the page first, so its own disconnect is not a loss
        if self._page is None:
            return
        if not self._lost:
            logger.error("Meeting page crashed or browser disconnected")
        self._lost = True

    async def navigate(self, url: str, timeout_ms: Optional[int] = None) -> None:
        """
        Load a URL and wait for network quiescence.

        Raises:
            NavigationTimeout: If the page does not settle before the deadline.
            NavigationError: For any other load failure.
        """
        timeout = timeout_ms or self._settings.navigation_timeout_ms
        logger.info(f"Navigating to {url} (timeout {timeout} ms)")
        try:
            await self.page.goto(url, wait_until="networkidle", timeout=timeout)
        except PlaywrightTimeoutError as e:
            raise NavigationTimeout(
                f"Page did not load within {timeout} ms",
                details={"url": url, "timeout_ms": timeout},
            ) from e
        except PlaywrightError as e:
            raise NavigationError(f"Navigation failed: {e}", details={"url": url}) from e

    async def query(self, selector: str) -> bool:
        """Return True if an element matches the selector right now."""
        return await self.page.query_selector(selector) is not None

    async def wait_for_any(self, candidates: Iterable[str], timeout_ms: int) -> str:
        """
        Wait until one of the candidates appears, preferring earlier ones.

        Returns:
            The selector that matched.

        Raises:
            SelectorNotFound: If none appear before the deadline.
        """
        candidates = list(candidates)
        loop = asyncio.get_running_loop()
        deadline = loop.time() + timeout_ms / 1000

        while True:
            matched = await resolve(candidates, self.query)
            if matched is not None:
                logger.debug(f"Selector matched: {matched}")
                return matched
            if loop.time() >= deadline:
                raise SelectorNotFound(
                    f"None of {len(candidates)} selector candidates appeared within {timeout_ms} ms",
                    details={"candidates": candidates},
                )
            await asyncio.sleep(SELECTOR_POLL_SECONDS)

    async def type_into(self, selector: str, text: str, delay_ms: int = 0) -> None:
        """Clear the field and type text into it."""
        field = self.page.locator(selector).first
        await field.click()
        await field.fill("")
        await self.page.keyboard.type(text, delay=delay_ms)

    async def click(self, selector: str) -> None:
        await self.page.locator(selector).first.click()

    async def press_enter(self) -> None:
        await self.page.keyboard.press("Enter")

    async def evaluate(self, script: str, arg: Any = None) -> Any:
        """Run page-side JavaScript and return its result."""
        return await self.page.evaluate(script, arg)

    async def close(self) -> None:
        """
        Close page, context, browser and driver.

        Each step is independent; failures are logged and never raised.
        Safe to call repeatedly or after a failed launch.
        """
        try:
            if self._page is not None and not self._page.is_closed():
                await self._page.close()
        except Exception as e:
            logger.warning(f"Error closing page: {e}")
        finally:
            self._page = None

        try:
            if self._context is not None:
                await self._context.close()
        except Exception as e:
            logger.warning(f"Error closing browser context: {e}")
        finally:
            self._context = None

        try:
            if self._browser is not None:
                await self._browser.close()
        except Exception as e:
            logger.warning(f"Error closing browser: {e}")
        finally:
            self._browser = None

        try:
            if self._playwright is not None:
                await self._playwright.stop()
        except Exception as e:
            logger.warning(f"Error stopping Playwright: {e}")
        finally:
            self._playwright = None
