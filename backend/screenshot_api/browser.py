"""
Shared Chromium handle and per-request browsing contexts
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Awaitable, Callable, Optional

from playwright.async_api import Browser, BrowserContext, Page, async_playwright

from .config import settings

logger = logging.getLogger(__name__)

LAUNCH_ARGS = [
    '--no-sandbox',
    '--disable-setuid-sandbox',
    '--disable-dev-shm-usage',
    '--disable-gpu',
]

Launcher = Callable[[], Awaitable[Browser]]


class BrowserManager:
    """
    Process-wide holder for a single lazily launched browser.

    The first call to get_browser() starts the launch; every caller that
    arrives while it is in flight awaits the same task, so a cold process
    never launches two browsers.
    """

    def __init__(self, launcher: Optional[Launcher] = None):
        self._launcher = launcher or self._launch_chromium
        self._launch_task: Optional["asyncio.Future[Browser]"] = None
        self._playwright = None
        self.launch_count = 0

    async def _launch_chromium(self) -> Browser:
        if self._playwright is None:
            self._playwright = await async_playwright().start()
        return await self._playwright.chromium.launch(
            headless=settings.BROWSER_HEADLESS,
            args=LAUNCH_ARGS,
        )

    async def _launch(self) -> Browser:
        self.launch_count += 1
        logger.info("Launching browser (launch #%d)", self.launch_count)
        try:
            browser = await self._launcher()
        except Exception:
            logger.exception("Browser launch failed")
            raise
        logger.info("Browser ready")
        return browser

    def _current_is_stale(self) -> bool:
        task = self._launch_task
        if task is None:
            return True
        if not task.done():
            return False
        if task.cancelled() or task.exception() is not None:
            return True
        return not task.result().is_connected()

    async def get_browser(self) -> Browser:
        """Return the shared browser, launching it on first use"""
        # No await between the check and the assignment, so this is atomic on the loop
        if self._current_is_stale():
            if self._launch_task is not None:
                logger.warning("Previous browser unavailable, launching a new one")
            self._launch_task = asyncio.ensure_future(self._launch())
        return await asyncio.shield(self._launch_task)

    @asynccontextmanager
    async def managed_context(self, **context_kwargs: Any) -> AsyncIterator[BrowserContext]:
        """Yield a fresh isolated BrowserContext and close it on the way out"""
        browser = await self.get_browser()
        context = await browser.new_context(**context_kwargs)
        try:
            yield context
        finally:
            await close_quietly(context)


@asynccontextmanager
async def managed_page(context: BrowserContext) -> AsyncIterator[Page]:
    page = await context.new_page()
    try:
        yield page
    finally:
        await close_quietly(page)


async def close_quietly(resource: Any) -> None:
    """Close a page or context, logging and discarding any failure"""
    try:
        await resource.close()
    except Exception as e:
        logger.debug("Ignoring error while closing %s: %s", type(resource).__name__, e)
