"""Headless page fetching with Playwright.

A :class:`PageFetcher` owns one Chromium instance for the lifetime of a
chat request.  Each URL gets its own browser context and page, opened and
closed around the navigation so nothing leaks between URLs or requests.

Navigation is attempted a bounded number of times with a fixed pause
between attempts; a missing response or non-2xx status is a failure.
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import AsyncIterator

from playwright.async_api import Browser, Error as PlaywrightError, Page, Playwright, Response, async_playwright

logger = logging.getLogger(__name__)

USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/91.0.4472.124 Safari/537.36"
)
VIEWPORT = {"width": 1920, "height": 1080}

_LAUNCH_ARGS = [
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-dev-shm-usage",
    "--disable-gpu",
    "--window-size=1920,1080",
]


class FetchError(Exception):
    """Raised when a page cannot be loaded after all attempts."""


@dataclass(frozen=True)
class FetchedPage:
    url: str
    html: str
    status: int


def is_fetchable_url(url: str) -> bool:
    """Return True for ``http://`` and ``https://`` URLs only."""
    return isinstance(url, str) and url.startswith(("http://", "https://"))


class PageFetcher:
    """Fetch rendered page markup through a headless Chromium browser.

    Use as an async context manager::

        async with PageFetcher() as fetcher:
            page = await fetcher.fetch("https://example.com")
    """

    def __init__(
        self,
        timeout_seconds: float = 45.0,
        max_attempts: int = 3,
        retry_delay_seconds: float = 2.0,
    ) -> None:
        self.timeout_ms = int(timeout_seconds * 1000)
        self.max_attempts = max(1, max_attempts)
        self.retry_delay_seconds = retry_delay_seconds
        self._playwright: Playwright | None = None
        self._browser: Browser | None = None

    async def __aenter__(self) -> PageFetcher:
        self._playwright = await async_playwright().start()
        try:
            self._browser = await self._playwright.chromium.launch(headless=True, args=_LAUNCH_ARGS)
        except BaseException:
            await self._playwright.stop()
            self._playwright = None
            raise
        logger.debug("Chromium launched")
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        try:
            if self._browser is not None:
                await self._browser.close()
        finally:
            self._browser = None
            if self._playwright is not None:
                await self._playwright.stop()
                self._playwright = None
        logger.debug("Chromium closed")

    @asynccontextmanager
    async def _open_page(self) -> AsyncIterator[Page]:
        """Open a configured context + page; both are closed on every exit path."""
        if self._browser is None:
            raise RuntimeError("PageFetcher must be entered before fetching")
        context = await self._browser.new_context(
            user_agent=USER_AGENT,
            viewport=VIEWPORT,
            java_script_enabled=False,
        )
        try:
            page = await context.new_page()
            page.set_default_navigation_timeout(self.timeout_ms)
            try:
                yield page
            finally:
                await page.close()
        finally:
            await context.close()

    async def fetch(self, url: str) -> FetchedPage:
        """Navigate to *url* and return its markup.

        Raises
        ------
        FetchError
            Navigation kept failing, the server answered with a non-2xx
            status, or the browser failed while opening or reading the page.
        """
        try:
            async with self._open_page() as page:
                response = await self._navigate(page, url)
                if response is None or not response.ok:
                    status = response.status if response is not None else None
                    raise FetchError(f"Failed to load {url}: {status}")

                html = await page.content()
        except PlaywrightError as exc:
            raise FetchError(f"Failed to load {url}: {exc}") from exc

        logger.debug("Fetched %s (%d, %d chars)", url, response.status, len(html))
        return FetchedPage(url=url, html=html, status=response.status)

    async def _navigate(self, page: Page, url: str) -> Response | None:
        """``page.goto`` with bounded attempts and a fixed pause between them."""
        for attempt in range(1, self.max_attempts + 1):
            try:
                return await page.goto(url, wait_until="domcontentloaded", timeout=self.timeout_ms)
            except PlaywrightError as exc:
                if attempt == self.max_attempts:
                    raise FetchError(
                        f"Failed to load {url} after {attempt} attempts: {exc}"
                    ) from exc
                logger.info(
                    "Navigation to %s failed (attempt %d/%d), retrying in %.1fs",
                    url,
                    attempt,
                    self.max_attempts,
                    self.retry_delay_seconds,
                )
                await asyncio.sleep(self.retry_delay_seconds)
        return None
