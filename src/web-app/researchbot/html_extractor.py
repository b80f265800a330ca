"""HTML content extraction — reduce a scraped page to its main readable text.

Strips boilerplate (scripts, navigation, headers/footers, ad and menu blocks),
then looks for the main content container using an ordered list of common
selectors, falling back to the whole ``<body>``.  The result is whitespace
normalised and truncated, so identical markup always yields identical text.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass

from bs4 import BeautifulSoup

logger = logging.getLogger(__name__)

MAX_CONTENT_CHARS = 8000

_BOILERPLATE_SELECTOR = (
    'script, style, noscript, iframe, nav, header, footer, '
    '[class*="ad"], [class*="menu"], [id*="menu"]'
)

# Tried in order; the first selector with non-empty text wins.
_CONTENT_SELECTORS = (
    "article",
    "main",
    '[role="main"]',
    ".content",
    "#content",
    ".article-body",
    ".post-content",
    ".entry-content",
    ".main-content",
)

_WHITESPACE_RE = re.compile(r"\s+")


@dataclass(frozen=True)
class ExtractedPage:
    """Readable text pulled out of a page, plus its ``<title>`` if any."""

    title: str | None
    text: str


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def extract_content(html: str, max_chars: int = MAX_CONTENT_CHARS) -> ExtractedPage:
    """Extract the main content text and title from raw page markup.

    Parameters
    ----------
    html:
        Raw page markup as returned by the browser.
    max_chars:
        Upper bound on the length of the returned text.

    Returns
    -------
    ExtractedPage
        ``text`` is whitespace-collapsed, trimmed and at most *max_chars*
        long (possibly empty).  ``title`` is ``None`` when the page has none.
    """
    soup = BeautifulSoup(html or "", "html.parser")

    title = _normalize(soup.title.get_text()) if soup.title else ""

    for element in soup.select(_BOILERPLATE_SELECTOR):
        element.extract()

    text = ""
    for selector in _CONTENT_SELECTORS:
        matches = soup.select(selector)
        text = _normalize(" ".join(m.get_text(" ") for m in matches))
        if text:
            logger.debug("Main content matched selector %r (%d chars)", selector, len(text))
            break

    if not text:
        root = soup.body or soup
        text = _normalize(root.get_text(" "))

    return ExtractedPage(title=title or None, text=text[:max_chars])


# ---------------------------------------------------------------------------
# Private helpers
# ---------------------------------------------------------------------------


def _normalize(text: str) -> str:
    """Collapse all whitespace runs to a single space and strip."""
    return _WHITESPACE_RE.sub(" ", text).strip()
