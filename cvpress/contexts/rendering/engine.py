"""
Headless Chromium PDF engine.

Drives one fresh Playwright browser per call: launch, responsiveness poll,
page creation, markup load, PDF export, teardown. Nothing is shared between
calls, so a crashed or wedged browser cannot affect other requests.

Every suspension point is bounded by its own timeout, and every acquired
resource (driver, browser, page) is released on every exit path.
"""

import asyncio
from typing import List, Optional

from playwright.async_api import Browser, Page, Playwright, async_playwright
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from cvpress.contexts.rendering.logger import _log_debug
from cvpress.exceptions import RenderEngineLaunchFailure, RenderSurfaceFailure
from cvpress.settings import Settings

# Error message fragments that mean the browser connection died
CONNECTION_DROP_MARKERS = (
    "target closed",
    "target page, context or browser has been closed",
    "browser has been closed",
    "browser has disconnected",
    "connection closed",
    "connection terminated",
)

ZERO_MARGIN = {"top": "0", "right": "0", "bottom": "0", "left": "0"}


def is_connection_drop(error: Optional[BaseException]) -> bool:
    """Check whether an error indicates the engine connection dropped."""
    if error is None:
        return False
    if getattr(error, "connection_dropped", False):
        return True
    message = str(error).lower()
    return any(marker in message for marker in CONNECTION_DROP_MARKERS)


class PlaywrightEngine:
    """
    Per-call headless Chromium engine.

    Attributes:
        launch_timeout_ms: Budget for starting the browser
        page_timeout_ms: Budget for creating a page
        render_timeout_ms: Budget for loading markup until network idle
        settle_ms: Pause after network idle for asset decode
        page_format: Paper format for the export (e.g., 'A4')
        launch_poll_attempts: Responsiveness checks after launch
        launch_poll_interval_s: Delay between responsiveness checks
        launch_args: Chromium command-line flags
    """

    def __init__(
        self,
        launch_timeout_ms: int = 30000,
        page_timeout_ms: int = 10000,
        render_timeout_ms: int = 30000,
        settle_ms: int = 250,
        page_format: str = "A4",
        launch_poll_attempts: int = 3,
        launch_poll_interval_s: float = 0.2,
        launch_args: Optional[List[str]] = None,
    ):
        self.launch_timeout_ms = launch_timeout_ms
        self.page_timeout_ms = page_timeout_ms
        self.render_timeout_ms = render_timeout_ms
        self.settle_ms = settle_ms
        self.page_format = page_format
        self.launch_poll_attempts = launch_poll_attempts
        self.launch_poll_interval_s = launch_poll_interval_s
        self.launch_args = list(launch_args or [])

    @classmethod
    def from_settings(cls, settings: Settings) -> "PlaywrightEngine":
        return cls(
            launch_timeout_ms=settings.launch_timeout_ms,
            page_timeout_ms=settings.page_timeout_ms,
            render_timeout_ms=settings.render_timeout_ms,
            settle_ms=settings.settle_ms,
            page_format=settings.page_format,
            launch_poll_attempts=settings.launch_poll_attempts,
            launch_poll_interval_s=settings.launch_poll_interval_s,
            launch_args=settings.launch_args,
        )

    async def export_pdf(self, html: str) -> bytes:
        """
        Render markup to PDF bytes in a fresh browser.

        Args:
            html: Complete HTML document

        Returns:
            PDF bytes

        Raises:
            RenderEngineLaunchFailure: Driver or browser could not start, or never became responsive
            RenderSurfaceFailure: Page creation, markup load or export failed or timed out
        """
        try:
            playwright = await async_playwright().start()
        except PlaywrightError as e:
            raise RenderEngineLaunchFailure(
                f"Playwright driver failed to start: {e}", connection_dropped=is_connection_drop(e)
            ) from e

        try:
            browser = await self._launch(playwright)
            try:
                await self._confirm_responsive(browser)
                page = await self._open_page(browser)
                try:
                    await self._load_markup(page, html)
                    return await self._export(page)
                finally:
                    await self._close_quietly(page, "page")
            finally:
                await self._close_quietly(browser, "browser")
        finally:
            await playwright.stop()
            _log_debug("Playwright driver stopped")

    async def _launch(self, playwright: Playwright) -> Browser:
        _log_debug("Launching headless Chromium")
        try:
            return await playwright.chromium.launch(
                headless=True, args=self.launch_args, timeout=self.launch_timeout_ms
            )
        except PlaywrightError as e:
            raise RenderEngineLaunchFailure(
                f"Browser failed to launch: {e}", connection_dropped=is_connection_drop(e)
            ) from e

    async def _confirm_responsive(self, browser: Browser) -> None:
        for check in range(1, self.launch_poll_attempts + 1):
            if browser.is_connected():
                _log_debug(f"Browser responsive (check {check}/{self.launch_poll_attempts})")
                return
            await asyncio.sleep(self.launch_poll_interval_s)

        raise RenderEngineLaunchFailure(
            f"Browser not responsive after {self.launch_poll_attempts} checks",
            connection_dropped=True,
        )

    async def _open_page(self, browser: Browser) -> Page:
        try:
            return await asyncio.wait_for(browser.new_page(), timeout=self.page_timeout_ms / 1000)
        except asyncio.TimeoutError as e:
            raise RenderSurfaceFailure(
                f"Page creation timed out after {self.page_timeout_ms}ms"
            ) from e
        except PlaywrightError as e:
            raise RenderSurfaceFailure(
                f"Page creation failed: {e}", connection_dropped=is_connection_drop(e)
            ) from e

    async def _load_markup(self, page: Page, html: str) -> None:
        try:
            await page.set_content(html, wait_until="networkidle", timeout=self.render_timeout_ms)
        except PlaywrightTimeoutError as e:
            raise RenderSurfaceFailure(
                f"Markup load timed out after {self.render_timeout_ms}ms"
            ) from e
        except PlaywrightError as e:
            raise RenderSurfaceFailure(
                f"Markup load failed: {e}", connection_dropped=is_connection_drop(e)
            ) from e

        if self.settle_ms > 0:
            await page.wait_for_timeout(self.settle_ms)

    async def _export(self, page: Page) -> bytes:
        try:
            return await page.pdf(format=self.page_format, print_background=True, margin=ZERO_MARGIN)
        except PlaywrightError as e:
            raise RenderSurfaceFailure(
                f"PDF export failed: {e}", connection_dropped=is_connection_drop(e)
            ) from e

    @staticmethod
    async def _close_quietly(target, label: str) -> None:
        # Closing an already-dead browser raises; the original failure matters more
        try:
            await target.close()
        except PlaywrightError as e:
            _log_debug(f"Ignoring error while closing {label}: {e}")
