"""Playwright transport for JavaScript-rendered hotel pages"""

import asyncio
import logging
import time
from typing import Optional, Dict, Callable, Awaitable
from contextlib import asynccontextmanager

from playwright.async_api import async_playwright, Browser, Error as PlaywrightError, TimeoutError as PlaywrightTimeout

from models import ReadinessWait
from .errors import FetchTimeout, TransportError

logger = logging.getLogger(__name__)


async def wait_until_ready(
    page,
    readiness: ReadinessWait,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    clock: Callable[[], float] = time.monotonic,
) -> int:
    """
    Poll until the loading indicator is gone and content has appeared.

    Returns:
        Number of content elements found

    Raises:
        FetchTimeout if the page is still not ready after readiness.timeout
    """
    deadline = clock() + readiness.timeout
    attempt = 0
    while True:
        attempt += 1
        spinner = await page.query_selector(readiness.loading_selector)
        elements = await page.query_selector_all(readiness.content_selector)
        logger.info(f"Waiting... attempt {attempt} ({len(elements)} content elements found)")
        if spinner is None and elements:
            return len(elements)
        if clock() > deadline:
            raise FetchTimeout(f"Page not ready after {attempt} tries", getattr(page, "url", None))
        await sleep(readiness.poll_interval)


class PlaywrightService:
    """
    Transport that renders pages in headless Chromium.

    The browser lives from open() to close(); every retrieval runs in its own
    browser context so each attempt carries its own user agent and headers.
    Images, fonts and tracking requests are blocked for faster loading.
    """

    BLOCKED_RESOURCES = [
        "**/*.{png,jpg,jpeg,gif,svg,ico,woff,woff2,ttf,eot}",
        "**/analytics**",
        "**/tracking**",
        "**/ads**",
    ]

    def __init__(
        self,
        headless: bool = True,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.headless = headless
        self._sleep = sleep
        self._clock = clock
        self._playwright = None
        self._browser: Optional[Browser] = None

    @property
    def is_open(self) -> bool:
        return self._browser is not None

    async def open(self) -> None:
        """Launch the browser"""
        if self._browser is not None:
            return
        self._playwright = await async_playwright().start()
        self._browser = await self._playwright.chromium.launch(
            headless=self.headless,
            args=[
                '--disable-blink-features=AutomationControlled',
                '--no-sandbox',
                '--disable-setuid-sandbox',
                '--disable-dev-shm-usage',
                '--disable-gpu',
            ]
        )
        logger.info(f"Playwright browser launched (headless={self.headless})")

    async def close(self) -> None:
        """Close browser and cleanup"""
        if self._browser:
            await self._browser.close()
            self._browser = None
        if self._playwright:
            await self._playwright.stop()
            self._playwright = None
        logger.info("Playwright browser closed")

    @asynccontextmanager
    async def _new_page(self, headers: Dict[str, str]):
        if not self._browser:
            raise RuntimeError("Browser not initialized")

        extra_headers = {k: v for k, v in headers.items() if k.lower() != "user-agent"}
        context = await self._browser.new_context(
            viewport={'width': 1920, 'height': 1080},
            user_agent=headers.get("User-Agent"),
            extra_http_headers=extra_headers,
            locale='en-US',
        )
        for pattern in self.BLOCKED_RESOURCES:
            await context.route(pattern, lambda route: route.abort())

        page = await context.new_page()
        try:
            yield page
        finally:
            await context.close()

    async def retrieve(
        self,
        url: str,
        headers: Dict[str, str],
        timeout: float,
        readiness: Optional[ReadinessWait] = None,
    ) -> str:
        """Navigate to url, wait for readiness if asked, and return the rendered HTML"""
        try:
            async with self._new_page(headers) as page:
                logger.info(f"Playwright: Fetching {url}")
                response = await page.goto(url, timeout=timeout * 1000, wait_until='domcontentloaded')

                if not response or response.status >= 400:
                    status = response.status if response else None
                    raise TransportError(
                        f"HTTP {status if status else 'No response'} for {url}", url, status
                    )

                if readiness is not None:
                    await wait_until_ready(page, readiness, sleep=self._sleep, clock=self._clock)

                html = await page.content()
                logger.info(f"Playwright: Successfully fetched {url} ({len(html)} bytes)")
                return html
        except PlaywrightTimeout as e:
            raise FetchTimeout(f"Timeout fetching {url}: {e}", url) from e
        except PlaywrightError as e:
            raise TransportError(f"Browser error for {url}: {e}", url) from e
