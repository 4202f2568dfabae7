from __future__ import annotations

import asyncio
import logging
import random
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from playwright.async_api import Browser, Page, Playwright, async_playwright

from .config import TrackerSettings

logger = logging.getLogger(__name__)

USER_AGENTS = {
    "chromium": (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/131.0.0.0 Safari/537.36",
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/130.0.0.0 Safari/537.36",
        "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/131.0.0.0 Safari/537.36",
        "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/129.0.0.0 Safari/537.36",
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/131.0.0.0 Safari/537.36 Edg/131.0.0.0",
    ),
    "firefox": (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64; rv:129.0) Gecko/20100101 Firefox/129.0",
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64; rv:131.0) Gecko/20100101 Firefox/131.0",
        "Mozilla/5.0 (Macintosh; Intel Mac OS X 14.5; rv:130.0) Gecko/20100101 Firefox/130.0",
        "Mozilla/5.0 (X11; Linux x86_64; rv:131.0) Gecko/20100101 Firefox/131.0",
    ),
    "webkit": (
        "Mozilla/5.0 (Macintosh; Intel Mac OS X 14_5) AppleWebKit/605.1.15 (KHTML, like Gecko) Version/17.5 Safari/605.1.15",
        "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/605.1.15 (KHTML, like Gecko) Version/18.0 Safari/605.1.15",
    ),
}

CHROMIUM_ARGS = ["--no-sandbox", "--disable-setuid-sandbox"]


def random_user_agent(browser_type: str = "chromium") -> str:
    """A user agent claiming the same engine as the browser actually running."""
    return random.choice(USER_AGENTS[browser_type])


class BrowserSession:
    """One long-lived browser shared by many queries.

    The browser is launched on first use and relaunched if it disconnected.
    Every query gets its own context (cookies, storage, user agent) which is
    closed when the query ends.
    """

    def __init__(self, settings: Optional[TrackerSettings] = None):
        self.settings = settings or TrackerSettings()
        self._playwright: Optional[Playwright] = None
        self._browser: Optional[Browser] = None
        self._lock = asyncio.Lock()

    @property
    def is_open(self) -> bool:
        return self._browser is not None and self._browser.is_connected()

    async def get_browser(self) -> Browser:
        if self.is_open:
            return self._browser
        async with self._lock:
            if not self.is_open:
                await self._launch()
        return self._browser

    async def _launch(self) -> None:
        if self._browser is not None:
            logger.info("Browser disconnected, relaunching")
            await self._browser.close()
            self._browser = None
        if self._playwright is None:
            self._playwright = await async_playwright().start()
        browser_type = getattr(self._playwright, self.settings.browser_type)
        args = CHROMIUM_ARGS if self.settings.browser_type == "chromium" else []
        logger.debug("Launching %s (headless=%s)", self.settings.browser_type, self.settings.headless)
        self._browser = await browser_type.launch(headless=self.settings.headless, args=args)

    @asynccontextmanager
    async def new_page(self) -> AsyncIterator[Page]:
        browser = await self.get_browser()
        context = await browser.new_context(user_agent=random_user_agent(self.settings.browser_type), locale="tr-TR")
        try:
            page = await context.new_page()
            page.set_default_timeout(self.settings.navigation_timeout_ms)
            yield page
        finally:
            await context.close()

    async def close(self) -> None:
        async with self._lock:
            browser, self._browser = self._browser, None
            playwright, self._playwright = self._playwright, None
            try:
                if browser is not None:
                    await browser.close()
            finally:
                if playwright is not None:
                    await playwright.stop()
