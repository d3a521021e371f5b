"""
Screenshot service
Opens an isolated context per request, navigates, captures and hashes a PNG
"""

import asyncio
import io
import logging
import time
from typing import Dict, Optional

from playwright.async_api import BrowserContext, Route
from PIL import Image

from .browser import BrowserManager, managed_page
from .config import settings
from .models import ScreenshotParams, ScreenshotResult
from .utils import content_hash, is_tracker_url

logger = logging.getLogger(__name__)


class ScreenshotService:
    """Captures one page per call on top of the shared browser"""

    def __init__(self, browser_manager: Optional[BrowserManager] = None):
        self.browser_manager = browser_manager or BrowserManager()

    async def capture(self, params: ScreenshotParams) -> ScreenshotResult:
        """Capture a screenshot; failures come back as an unsuccessful result"""
        start_time = time.time()
        logger.info("Capturing %s (%dx%d, wait=%s)", params.url, params.w, params.h, params.wait)

        try:
            async with self.browser_manager.managed_context(**self._context_options(params)) as context:
                if params.block_ads:
                    await self._install_tracker_filter(context)

                async with managed_page(context) as page:
                    page.set_default_timeout(params.timeout_ms)
                    await page.goto(params.url, wait_until=params.wait, timeout=params.timeout_ms)

                    if params.delay:
                        await asyncio.sleep(params.delay / 1000)

                    screenshot_bytes = await page.screenshot(type="png", full_page=params.full)

        except Exception as e:
            logger.warning("Screenshot failed for %s: %s", params.url, e)
            return ScreenshotResult(url=params.url, success=False, error=str(e))

        if not screenshot_bytes:
            return ScreenshotResult(url=params.url, success=False, error="Screenshot capture returned empty data")

        etag = content_hash(screenshot_bytes)
        logger.info(
            "Screenshot successful: %s (%d bytes, %.2fs)",
            params.url, len(screenshot_bytes), time.time() - start_time,
        )

        return ScreenshotResult(
            url=params.url,
            success=True,
            image=screenshot_bytes,
            etag=etag,
            file_size=len(screenshot_bytes),
            dimensions=self._read_dimensions(screenshot_bytes),
        )

    def _context_options(self, params: ScreenshotParams) -> Dict:
        # Certificate errors are ignored on purpose: a capture of a site with a
        # broken chain is more useful to callers than a failure.
        return {
            'viewport': {'width': params.w, 'height': params.h},
            'user_agent': params.ua or settings.DEFAULT_USER_AGENT,
            'device_scale_factor': 1,
            'bypass_csp': True,
            'ignore_https_errors': True,
        }

    async def _install_tracker_filter(self, context: BrowserContext):
        await context.route("**/*", block_trackers)

    def _read_dimensions(self, image_bytes: bytes) -> Optional[Dict[str, int]]:
        try:
            with Image.open(io.BytesIO(image_bytes)) as image:
                return {"width": image.width, "height": image.height}
        except (OSError, ValueError):
            return None


async def block_trackers(route: Route):
    """Abort requests to known tracker and analytics hosts, let the rest through"""
    if is_tracker_url(route.request.url):
        await route.abort()
    else:
        await route.continue_()
