"""
In-memory stand-ins for the Playwright objects the service touches.
"""
import asyncio
import io
from typing import Any, Dict, List, Optional

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from PIL import Image

from screenshot_api import main
from screenshot_api.browser import BrowserManager
from screenshot_api.config import settings
from screenshot_api.screenshot_service import ScreenshotService


def make_png(width: int, height: int, color=(200, 30, 30)) -> bytes:
    buffered = io.BytesIO()
    Image.new("RGB", (width, height), color).save(buffered, format="PNG")
    return buffered.getvalue()


class FakeRequest:
    def __init__(self, url: str):
        self.url = url


class FakeRoute:
    def __init__(self, url: str):
        self.request = FakeRequest(url)
        self.outcome: Optional[str] = None

    async def abort(self):
        self.outcome = "aborted"

    async def continue_(self):
        self.outcome = "continued"


class FakePage:
    def __init__(self, context: "FakeContext"):
        self.context = context
        self.default_timeout: Optional[int] = None
        self.goto_calls: List[Dict[str, Any]] = []
        self.screenshot_calls: List[Dict[str, Any]] = []
        self.closed = False

    def set_default_timeout(self, timeout: int):
        self.default_timeout = timeout

    async def goto(self, url: str, wait_until: str = "load", timeout: Optional[int] = None):
        self.goto_calls.append({"url": url, "wait_until": wait_until, "timeout": timeout})
        browser = self.context.browser
        if browser.goto_error is not None:
            raise browser.goto_error
        await asyncio.sleep(0)

    async def screenshot(self, type: str = "png", full_page: bool = False):
        self.screenshot_calls.append({"type": type, "full_page": full_page})
        viewport = self.context.options["viewport"]
        height = viewport["height"] * 2 if full_page else viewport["height"]
        return make_png(viewport["width"], height)

    async def close(self):
        self.closed = True
        if self.context.browser.close_error is not None:
            raise self.context.browser.close_error


class FakeContext:
    def __init__(self, browser: "FakeBrowser", options: Dict[str, Any]):
        self.browser = browser
        self.options = options
        self.routes: List[tuple] = []
        self.pages: List[FakePage] = []
        self.closed = False

    async def route(self, pattern: str, handler):
        self.routes.append((pattern, handler))

    async def new_page(self) -> FakePage:
        page = FakePage(self)
        self.pages.append(page)
        return page

    async def close(self):
        self.closed = True
        if self.browser.close_error is not None:
            raise self.browser.close_error


class FakeBrowser:
    def __init__(self):
        self.contexts: List[FakeContext] = []
        self.connected = True
        self.goto_error: Optional[Exception] = None
        self.close_error: Optional[Exception] = None

    def is_connected(self) -> bool:
        return self.connected

    async def new_context(self, **options) -> FakeContext:
        context = FakeContext(self, options)
        self.contexts.append(context)
        return context


class FakeLauncher:
    """Counts launches and hands out FakeBrowser instances"""

    def __init__(self, delay: float = 0.01):
        self.delay = delay
        self.calls = 0
        self.browsers: List[FakeBrowser] = []
        self.failures: List[Exception] = []

    async def __call__(self) -> FakeBrowser:
        self.calls += 1
        await asyncio.sleep(self.delay)
        if self.failures:
            raise self.failures.pop(0)
        browser = FakeBrowser()
        self.browsers.append(browser)
        return browser


@pytest.fixture(autouse=True)
def no_api_key(monkeypatch):
    monkeypatch.setattr(settings, "API_KEY", "")


@pytest.fixture
def launcher() -> FakeLauncher:
    return FakeLauncher()


@pytest.fixture
def browser_manager(launcher) -> BrowserManager:
    return BrowserManager(launcher=launcher)


@pytest.fixture
def service(browser_manager) -> ScreenshotService:
    return ScreenshotService(browser_manager)


@pytest_asyncio.fixture
async def client(service, monkeypatch):
    monkeypatch.setattr(main, "screenshot_service", service)
    transport = ASGITransport(app=main.app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://testserver") as ac:
        yield ac
