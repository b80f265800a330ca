"""Source collection — scrape an ordered list of URLs into labelled sources.

Steps per URL:
    1. Validate the scheme via :func:`researchbot.page_fetcher.is_fetchable_url`
    2. Fetch the markup via :class:`researchbot.page_fetcher.PageFetcher`
    3. Extract the main text via :func:`researchbot.html_extractor.extract_content`

Each URL produces a :class:`CollectOutcome`; failed URLs carry a skip reason
and are logged, never raised.  Only successful outcomes become sources.
"""

from __future__ import annotations

import enum
import logging
from contextlib import AbstractAsyncContextManager
from dataclasses import dataclass
from typing import Callable, Protocol

from researchbot.html_extractor import MAX_CONTENT_CHARS, extract_content
from researchbot.models import Source
from researchbot.page_fetcher import FetchedPage, FetchError, is_fetchable_url

logger = logging.getLogger(__name__)


class Fetcher(Protocol):
    async def fetch(self, url: str) -> FetchedPage: ...


FetcherFactory = Callable[[], AbstractAsyncContextManager[Fetcher]]


class SkipReason(str, enum.Enum):
    INVALID_URL = "invalid-url"
    DUPLICATE = "duplicate"
    FETCH_FAILED = "fetch-failed"
    EMPTY_CONTENT = "empty-content"


@dataclass(frozen=True)
class CollectOutcome:
    """Result of scraping one URL: either a source or a skip reason."""

    url: str
    source: Source | None = None
    skip_reason: SkipReason | None = None
    detail: str = ""

    @property
    def ok(self) -> bool:
        return self.source is not None


class SourceCollector:
    """Scrape URLs sequentially and return the sources that could be read."""

    def __init__(self, fetcher_factory: FetcherFactory, max_chars: int = MAX_CONTENT_CHARS) -> None:
        self._fetcher_factory = fetcher_factory
        self.max_chars = max_chars

    async def collect(self, urls: list[str]) -> list[Source]:
        """Return one :class:`Source` per successfully scraped URL, in input order."""
        outcomes = await self.collect_outcomes(urls)
        sources = [o.source for o in outcomes if o.source is not None]
        logger.info("Collected %d/%d sources", len(sources), len(urls))
        return sources

    async def collect_outcomes(self, urls: list[str]) -> list[CollectOutcome]:
        """Scrape every URL and report an outcome for each, including skips.

        The browser is only launched when at least one URL has a fetchable
        scheme.  Errors launching the browser itself propagate.
        """
        outcomes: list[CollectOutcome] = []
        pending: list[str] = []
        seen: set[str] = set()

        for url in urls:
            if not is_fetchable_url(url):
                outcomes.append(CollectOutcome(url=url, skip_reason=SkipReason.INVALID_URL))
            elif url in seen:
                outcomes.append(CollectOutcome(url=url, skip_reason=SkipReason.DUPLICATE))
            else:
                seen.add(url)
                pending.append(url)
                outcomes.append(CollectOutcome(url=url))  # placeholder, filled below

        if pending:
            scraped: dict[str, CollectOutcome] = {}
            async with self._fetcher_factory() as fetcher:
                for url in pending:
                    scraped[url] = await self._scrape(fetcher, url)
            outcomes = [
                scraped[o.url] if o.skip_reason is None and o.source is None else o
                for o in outcomes
            ]

        for outcome in outcomes:
            if outcome.skip_reason is not None:
                logger.warning(
                    "Skipping %s (%s)%s",
                    outcome.url,
                    outcome.skip_reason.value,
                    f": {outcome.detail}" if outcome.detail else "",
                )
        return outcomes

    async def _scrape(self, fetcher: Fetcher, url: str) -> CollectOutcome:
        try:
            page = await fetcher.fetch(url)
            extracted = extract_content(page.html, max_chars=self.max_chars)
        except FetchError as exc:
            return CollectOutcome(url=url, skip_reason=SkipReason.FETCH_FAILED, detail=str(exc))
        except Exception as exc:
            # Per-URL failures never fail the request.
            logger.error("Error scraping %s", url, exc_info=True)
            return CollectOutcome(url=url, skip_reason=SkipReason.FETCH_FAILED, detail=repr(exc))

        if not extracted.text:
            return CollectOutcome(url=url, skip_reason=SkipReason.EMPTY_CONTENT)

        return CollectOutcome(
            url=url,
            source=Source(url=url, content=extracted.text, title=extracted.title or url),
        )
