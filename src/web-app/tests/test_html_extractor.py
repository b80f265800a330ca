"""Tests for researchbot.html_extractor — main-content extraction from markup."""

from __future__ import annotations

import pytest

from researchbot.html_extractor import MAX_CONTENT_CHARS, ExtractedPage, extract_content

_ARTICLE_PAGE = """
<html>
  <head>
    <title>  Climate   Report 2024 </title>
    <style>body { color: red; }</style>
  </head>
  <body>
    <nav>Home | About | Contact</nav>
    <header>Site banner</header>
    <article>
      <h1>Global temperatures</h1>
      <p>Average   temperatures rose
         again this year.</p>
      <script>trackPageView();</script>
      <div class="sidebar-ad">Buy now!</div>
    </article>
    <footer>Copyright 2024</footer>
  </body>
</html>
"""


class TestExtractContent:
    """Tests for extract_content()."""

    def test_returns_article_text(self) -> None:
        page = extract_content(_ARTICLE_PAGE)
        assert page.text == "Global temperatures Average temperatures rose again this year."

    def test_title_is_normalised(self) -> None:
        assert extract_content(_ARTICLE_PAGE).title == "Climate Report 2024"

    def test_missing_title_is_none(self) -> None:
        assert extract_content("<body><p>No head here</p></body>").title is None

    def test_boilerplate_removed(self) -> None:
        text = extract_content(_ARTICLE_PAGE).text
        for unwanted in ("Home | About", "Site banner", "Copyright", "trackPageView", "Buy now"):
            assert unwanted not in text

    def test_menu_blocks_removed_from_body_fallback(self) -> None:
        html = """
        <body>
          <div id="main-menu">Products Pricing</div>
          <ul class="dropdown-menu"><li>Settings</li></ul>
          <p>Plain body paragraph.</p>
        </body>
        """
        assert extract_content(html).text == "Plain body paragraph."

    def test_falls_back_to_body(self) -> None:
        html = "<html><body><div><p>First.</p><p>Second.</p></div></body></html>"
        assert extract_content(html).text == "First. Second."

    def test_selector_priority_main_over_content_class(self) -> None:
        html = """
        <body>
          <div class="content">Secondary content</div>
          <main><p>Primary content</p></main>
        </body>
        """
        assert extract_content(html).text == "Primary content"

    def test_empty_match_falls_through_to_next_selector(self) -> None:
        html = """
        <body>
          <article>   </article>
          <div role="main">Role main text</div>
        </body>
        """
        assert extract_content(html).text == "Role main text"

    def test_multiple_matches_are_concatenated(self) -> None:
        html = "<body><article>One</article><article>Two</article></body>"
        assert extract_content(html).text == "One Two"

    @pytest.mark.parametrize(
        "container",
        [
            '<div id="content">{}</div>',
            '<div class="article-body">{}</div>',
            '<div class="post-content">{}</div>',
            '<div class="entry-content">{}</div>',
            '<div class="main-content">{}</div>',
        ],
    )
    def test_common_content_containers(self, container: str) -> None:
        html = f"<body><p>Noise outside</p>{container.format('Inside the container')}</body>"
        assert extract_content(html).text == "Inside the container"

    def test_truncated_to_default_cap(self) -> None:
        html = "<body><p>" + "lorem ipsum " * 2000 + "</p></body>"
        text = extract_content(html).text
        assert len(text) == MAX_CONTENT_CHARS == 8000

    def test_custom_cap(self) -> None:
        text = extract_content("<body><p>abcdefghij</p></body>", max_chars=4).text
        assert text == "abcd"

    def test_deterministic(self) -> None:
        first = extract_content(_ARTICLE_PAGE)
        second = extract_content(_ARTICLE_PAGE)
        assert first == second
        assert isinstance(first, ExtractedPage)

    def test_empty_markup(self) -> None:
        page = extract_content("")
        assert page.text == ""
        assert page.title is None
