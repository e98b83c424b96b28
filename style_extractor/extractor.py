"""End-to-end style extraction for a single page."""
from __future__ import annotations

import copy
import logging
import os
import time
from typing import Callable, List, Optional, Sequence

from bs4 import BeautifulSoup, Doctype, Tag

from .css_parser import combine_sources, parse_css_rules
from .dedupe import DEFAULT_CLASS_PREFIX, dedupe_inline_styles
from .discovery import normalize_url
from .layout import detect_layout_patterns
from .schemas import CssSource, DeduplicationResult, ExtractionResult, Screenshot, truncate
from .screenshots import capture_screenshots
from .scrape import StylesheetBatch, fetch_page, fetch_stylesheets
from .tokens import VariableResolver, summarize_colors, summarize_spacing, summarize_typography

logger = logging.getLogger(__name__)

HTML_TRUNCATE_LENGTH = 50_000
CSS_RULES_TRUNCATE_LENGTH = 20_000
CONTENT_ROOT_TAGS = ("body", "html")
NON_CONTENT_TAGS = frozenset({"head", "title", "meta", "link", "base", "script", "style"})
MISSING_CONTENT_PLACEHOLDER = "<!-- The document has no body content. -->"
UNTITLED_PAGE = "Untitled Page"
INLINE_CLASS_PREFIX = os.getenv("INLINE_CLASS_PREFIX", DEFAULT_CLASS_PREFIX)


def find_content_root(soup: BeautifulSoup) -> Optional[Tag]:
    """Return ``<body>``, else ``<html>``, else a body built from loose content.

    ``html.parser`` does not invent the implied ``<body>`` of a document that
    omits it, so top-level nodes other than metadata, scripts and styles are
    gathered under a detached ``<body>`` tag. ``None`` means there is no content.
    """

    for name in CONTENT_ROOT_TAGS:
        root = soup.find(name)
        if root is not None:
            return root

    body = soup.new_tag("body")
    for node in soup.contents:
        if isinstance(node, Doctype) or (isinstance(node, Tag) and node.name in NON_CONTENT_TAGS):
            continue
        body.append(copy.copy(node))
    if body.find(True) is None and not body.get_text(strip=True):
        return None
    return body


def clean_content(soup: BeautifulSoup, prefix: str = INLINE_CLASS_PREFIX) -> DeduplicationResult:
    """Strip scripts and styles from a copy of the content root and dedupe it.

    A document with no content yields a placeholder comment and no CSS.
    """

    root = find_content_root(soup)
    if root is None:
        logger.warning("No content root found; returning placeholder markup")
        return DeduplicationResult(html=MISSING_CONTENT_PLACEHOLDER, processed=0, css="")

    content = copy.copy(root)
    for tag in content.find_all(["script", "style"]):
        tag.decompose()
    result = dedupe_inline_styles(content, prefix)
    result.html = truncate(result.html, HTML_TRUNCATE_LENGTH, "html")
    return result


def _page_title(soup: BeautifulSoup) -> str:
    title_tag = soup.find("title")
    title = title_tag.get_text(strip=True) if title_tag else ""
    return title or UNTITLED_PAGE


def _stylesheet_hrefs(soup: BeautifulSoup) -> List[str]:
    hrefs = []
    for link in soup.select('link[rel~="stylesheet"]'):
        href = (link.get("href") or "").strip()
        if href:
            hrefs.append(href)
    return hrefs


def _inline_styles(soup: BeautifulSoup) -> List[str]:
    return [tag["style"] for tag in soup.find_all(style=True) if tag["style"]]


def extract_all_styles(
    urls: Sequence[str],
    fetch: Callable[[str], tuple[str, str]] = fetch_page,
    fetch_sheets: Callable[[Sequence[str], str], StylesheetBatch] = fetch_stylesheets,
    capture: Callable[[Sequence[str]], List[Screenshot]] = capture_screenshots,
) -> ExtractionResult:
    """Analyse ``urls[0]`` and screenshot every URL in ``urls``.

    Raises ``PageFetchError`` when the analysed page cannot be fetched; every
    other failure degrades inside its own step.
    """

    if not urls:
        raise ValueError("At least one URL is required")
    sample_urls = [normalize_url(url) for url in urls]
    analysis_url = sample_urls[0]

    overall_start = time.perf_counter()
    _, html = fetch(analysis_url)
    soup = BeautifulSoup(html, "html.parser")

    style_text = "".join(style.get_text() for style in soup.find_all("style"))
    batch = fetch_sheets(_stylesheet_hrefs(soup), analysis_url)
    css_text = style_text + "".join(sheet.content for sheet in batch.sheets)

    inline_styles = _inline_styles(soup)
    all_text = combine_sources([css_text], inline_styles)

    phase_start = time.perf_counter()
    resolver = VariableResolver.from_css(all_text)
    rules = parse_css_rules(css_text)
    color_palette = summarize_colors(all_text)
    typography = resolver.annotate_typography(summarize_typography(all_text))
    spacing_scale = resolver.annotate(summarize_spacing(all_text))
    layout_patterns = detect_layout_patterns(rules, inline_styles)
    logger.info(
        "Extracted %d colours, %d spacing values and %d CSS rules in %.2fs",
        len(color_palette),
        len(spacing_scale),
        len(rules),
        time.perf_counter() - phase_start,
    )

    cleaned = clean_content(soup)
    screenshots = capture(sample_urls)

    result = ExtractionResult(
        page_title=_page_title(soup),
        page_url=analysis_url,
        stylesheet_count=len(batch.sheets),
        inline_style_count=len(inline_styles),
        inaccessible_sheets=batch.inaccessible,
        color_palette=color_palette,
        typography=typography,
        spacing_scale=spacing_scale,
        layout_patterns=layout_patterns,
        css_variables=resolver.as_dict(),
        css_rules=[
            CssSource(url=sheet.url, content=truncate(sheet.content, CSS_RULES_TRUNCATE_LENGTH, "css"))
            for sheet in batch.sheets
        ],
        clean_html=cleaned.html,
        head_content=soup.head.decode_contents() if soup.head else "",
        generated_inline_css=cleaned.css,
        screenshots=screenshots,
    )
    logger.info(
        "Completed extraction for %s in %.2fs (%d stylesheets, %d inaccessible, %d inline styles)",
        analysis_url,
        time.perf_counter() - overall_start,
        result.stylesheet_count,
        result.inaccessible_sheets,
        result.inline_style_count,
    )
    return result
