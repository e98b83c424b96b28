"""Pick a handful of auxiliary pages worth sampling from the main page's links."""
from __future__ import annotations

import logging
import re
import time
from typing import Callable, Iterator, List, Optional
from urllib.parse import urljoin, urlsplit, urlunsplit

from bs4 import BeautifulSoup, Tag

from .schemas import DiscoveredLink
from .scrape import fetch_page

logger = logging.getLogger(__name__)

MAX_AUXILIARY_PAGES = 3

NAVIGATION_SELECTORS = (
    "nav a[href]",
    ".navigation a[href]",
    ".nav a[href]",
    ".menu a[href]",
    ".navbar a[href]",
    "header a[href]",
    ".header a[href]",
)
CONTENT_SELECTORS = (
    "main a[href]",
    ".main a[href]",
    ".content a[href]",
    "article a[href]",
    ".hero a[href]",
    ".featured a[href]",
    "h1 a[href]",
    "h2 a[href]",
    "h3 a[href]",
)
GENERIC_SELECTORS = ("a[href]",)

TIERS = (
    ("navigation", NAVIGATION_SELECTORS),
    ("content", CONTENT_SELECTORS),
    ("generic", GENERIC_SELECTORS),
)

SKIP_PATTERNS = [
    re.compile(pattern, re.IGNORECASE)
    for pattern in (
        r"/login",
        r"/register",
        r"/signup",
        r"/cart",
        r"/checkout",
        r"/account",
        r"/profile",
        r"/admin",
        r"/dashboard",
        r"/settings",
        r"/logout",
        r"\.pdf$",
        r"\.jpg$",
        r"\.png$",
        r"\.gif$",
        r"\.zip$",
        r"mailto:",
        r"tel:",
        r"javascript:",
        r"#",
    )
]

NAV_HIGH_VALUE_TERMS = (
    "home", "about", "services", "products", "features", "pricing",
    "contact", "portfolio", "solutions", "demo", "tour", "overview",
)
NAV_MEDIUM_VALUE_TERMS = (
    "blog", "news", "resources", "documentation", "docs", "help", "support",
    "team", "company", "careers", "clients", "testimonials",
)
NAV_LOW_VALUE_TERMS = ("privacy", "terms", "legal", "sitemap", "rss")
CONTENT_HIGH_VALUE_TERMS = (
    "getting started", "tutorial", "guide", "how to", "how-to", "introduction",
    "overview", "features", "benefits", "advantages", "comparison",
)


def normalize_url(url: str) -> str:
    """Prefix bare hosts with ``https://``."""

    url = url.strip()
    return url if url.startswith("http") else f"https://{url}"


def canonical_url(url: str) -> str:
    """Return ``url`` with an explicit root path so ``a.com`` equals ``a.com/``."""

    parts = urlsplit(url)
    return urlunsplit((parts.scheme, parts.netloc, parts.path or "/", parts.query, parts.fragment))


def page_origin(url: str) -> str:
    parts = urlsplit(url)
    if not parts.scheme or not parts.hostname:
        raise ValueError(f"Cannot determine origin of {url!r}")
    return f"{parts.scheme}://{parts.hostname}"


def _contains_any(text: str, terms: tuple[str, ...]) -> bool:
    return any(term in text for term in terms)


def score_navigation(text: str) -> int:
    lower = text.lower()
    score = 50
    if _contains_any(lower, NAV_HIGH_VALUE_TERMS):
        score += 30
    elif _contains_any(lower, NAV_MEDIUM_VALUE_TERMS):
        score += 15
    if len(lower) <= 20:
        score += 10
    if len(lower) <= 10:
        score += 5
    if _contains_any(lower, NAV_LOW_VALUE_TERMS):
        score -= 20
    return max(0, score)


def score_content(text: str) -> int:
    lower = text.lower()
    score = 30
    if _contains_any(lower, CONTENT_HIGH_VALUE_TERMS):
        score += 25
    if 10 < len(lower) <= 50:
        score += 10
    return max(0, score)


def score_generic(text: str) -> int:
    score = 10
    if 5 < len(text) <= 30:
        score += 5
    return max(0, score)


SCORERS: dict[str, Callable[[str], int]] = {
    "navigation": score_navigation,
    "content": score_content,
    "generic": score_generic,
}


class LinkFilter:
    """Resolves hrefs and rejects anything not worth sampling.

    Every resolved URL is remembered on first sight, whether or not it is
    accepted, so later tiers never see it again.
    """

    def __init__(self, origin: str, current_url: str) -> None:
        self.origin = origin
        self.hostname = urlsplit(origin).hostname
        self.current_url = canonical_url(current_url)
        self.seen: set[str] = set()

    def __call__(self, href: str) -> Optional[str]:
        try:
            absolute = urljoin(self.origin + "/", href.strip())
            parts = urlsplit(absolute)
            hostname = parts.hostname
        except ValueError:
            return None
        if absolute in self.seen:
            return None
        self.seen.add(absolute)
        if parts.scheme not in ("http", "https"):
            return None
        if hostname != self.hostname:
            return None
        if canonical_url(absolute) == self.current_url:
            return None
        if any(pattern.search(absolute) for pattern in SKIP_PATTERNS):
            return None
        return absolute


def _iter_anchors(soup: BeautifulSoup) -> Iterator[tuple[str, Tag]]:
    for context, selectors in TIERS:
        for selector in selectors:
            for anchor in soup.select(selector):
                yield context, anchor


def collect_links(soup: BeautifulSoup, origin: str, current_url: str) -> List[DiscoveredLink]:
    """Return scored, same-origin candidate links in discovery order."""

    accept = LinkFilter(origin, current_url)
    links: List[DiscoveredLink] = []
    for context, anchor in _iter_anchors(soup):
        url = accept(anchor.get("href") or "")
        text = anchor.get_text().strip()
        if not url or not text:
            continue
        links.append(
            DiscoveredLink(url=url, origin_context=context, text=text, score=SCORERS[context](text))
        )
    return links


def rank_pages(soup: BeautifulSoup, main_url: str, limit: int = MAX_AUXILIARY_PAGES) -> List[str]:
    """Return ``main_url`` followed by the ``limit`` best scoring links."""

    links = collect_links(soup, page_origin(main_url), main_url)
    ranked = sorted(links, key=lambda link: link.score, reverse=True)
    logger.debug(
        "Ranked %d candidate links: %s",
        len(ranked),
        [(link.url, link.origin_context, link.score) for link in ranked[:10]],
    )
    return [main_url, *(link.url for link in ranked[:limit])]


def discover_important_pages(
    main_url: str, fetch: Callable[[str], tuple[str, str]] | None = None
) -> List[str]:
    """Fetch ``main_url`` and pick up to three auxiliary pages from its links.

    Any failure falls back to sampling the main page alone.
    """

    normalized = normalize_url(main_url)
    fetch = fetch or fetch_page

    start = time.perf_counter()
    try:
        _, html = fetch(normalized)
        soup = BeautifulSoup(html, "html.parser")
        pages = rank_pages(soup, normalized)
    except Exception as exc:
        logger.warning("Page discovery failed for %s, using main URL only: %s", normalized, exc)
        return [normalized]

    logger.info(
        "Discovered %d auxiliary pages for %s in %.2fs",
        len(pages) - 1,
        normalized,
        time.perf_counter() - start,
    )
    return pages
