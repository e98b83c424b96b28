from bs4 import BeautifulSoup

from style_extractor import discovery
from style_extractor.scrape import PageFetchError

PAGE = """
<html><head><title>Home</title></head><body>
<header><nav>
  <a href="/">Home</a>
  <a href="/pricing">Pricing</a>
  <a href="/blog">Blog</a>
  <a href="/privacy">Privacy</a>
  <a href="/login">Log in</a>
  <a href="https://other.com/about">About</a>
  <a href="/logo"><img src="/logo.png"></a>
</nav></header>
<main>
  <a href="/guide">Read the getting started guide</a>
  <a href="/pricing">Pricing again</a>
  <a href="/files/report.pdf">Report</a>
  <a href="#section">Jump</a>
  <a href="mailto:hi@example.com">Email us</a>
</main>
<footer><a href="/careers/open-roles">Open roles</a></footer>
</body></html>
"""


def _soup(html: str = PAGE) -> BeautifulSoup:
    return BeautifulSoup(html, "html.parser")


def test_collect_links_filters_and_scores_by_tier():
    links = discovery.collect_links(_soup(), "https://example.com", "https://example.com")

    assert [(link.url, link.origin_context, link.score) for link in links] == [
        ("https://example.com/pricing", "navigation", 95),
        ("https://example.com/blog", "navigation", 80),
        ("https://example.com/privacy", "navigation", 45),
        ("https://example.com/guide", "content", 65),
        ("https://example.com/careers/open-roles", "generic", 15),
    ]


def test_rank_pages_returns_main_url_then_top_three():
    pages = discovery.rank_pages(_soup(), "https://example.com")

    assert pages == [
        "https://example.com",
        "https://example.com/pricing",
        "https://example.com/blog",
        "https://example.com/guide",
    ]
    assert len(set(pages)) == len(pages)
    assert all(page.startswith("https://example.com") for page in pages)


def test_rank_pages_excludes_current_page_with_path():
    soup = _soup('<nav><a href="/docs">Docs</a><a href="/about">About</a></nav>')

    assert discovery.rank_pages(soup, "https://example.com/docs") == [
        "https://example.com/docs",
        "https://example.com/about",
    ]


def test_ties_keep_discovery_order():
    soup = _soup('<nav><a href="/contact">Contact</a><a href="/about">About</a></nav>')

    pages = discovery.rank_pages(soup, "https://example.com")

    assert pages[1:] == ["https://example.com/contact", "https://example.com/about"]


def test_scoring_rules():
    assert discovery.score_navigation("Privacy Policy") == 40
    assert discovery.score_navigation("Documentation") == 75
    assert discovery.score_navigation("Pricing") == 95
    assert discovery.score_content("Short") == 30
    assert discovery.score_content("How to build a design system") == 65
    assert discovery.score_generic("Hi") == 10
    assert discovery.score_generic("Our latest work") == 15


def test_discover_important_pages_normalises_and_ranks():
    calls = []

    def fake_fetch(url: str) -> tuple[str, str]:
        calls.append(url)
        return url, PAGE

    pages = discovery.discover_important_pages("example.com", fetch=fake_fetch)

    assert calls == ["https://example.com"]
    assert pages[0] == "https://example.com"
    assert len(pages) == 4


def test_discover_important_pages_degrades_on_failure():
    def failing_fetch(url: str) -> tuple[str, str]:
        raise PageFetchError("boom")

    assert discovery.discover_important_pages("example.com", fetch=failing_fetch) == [
        "https://example.com"
    ]
