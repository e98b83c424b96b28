"""Shared data structures used across modules."""
from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List

TRUNCATION_MARKERS = {
    "css": "\n/*...TRUNCATED...*/",
    "html": "\n...<!-- TRUNCATED -->",
}


@dataclass(slots=True)
class FrequencyEntry:
    value: str
    count: int


@dataclass(slots=True)
class CssRule:
    selector: str
    declarations: str


@dataclass(slots=True)
class LayoutPattern:
    selector: str
    properties: List[str]


@dataclass(slots=True)
class LayoutSummary:
    flex: List[LayoutPattern] = field(default_factory=list)
    grid: List[LayoutPattern] = field(default_factory=list)


@dataclass(slots=True)
class Typography:
    font_families: List[FrequencyEntry] = field(default_factory=list)
    font_sizes: List[FrequencyEntry] = field(default_factory=list)
    font_weights: List[FrequencyEntry] = field(default_factory=list)
    line_heights: List[FrequencyEntry] = field(default_factory=list)


@dataclass(slots=True)
class CssSource:
    url: str
    content: str


@dataclass(slots=True)
class Screenshot:
    url: str
    label: str
    source_url: str


@dataclass(slots=True)
class DiscoveredLink:
    """A same-origin anchor found on the analysed page.

    ``origin_context`` is one of ``navigation``, ``content`` or ``generic``
    and selects the scoring rules applied to ``text``.
    """

    url: str
    origin_context: str
    text: str
    score: int = 0


@dataclass(slots=True)
class DeduplicationResult:
    html: str
    processed: int
    css: str


@dataclass(slots=True)
class ExtractionResult:
    page_title: str
    page_url: str
    stylesheet_count: int
    inline_style_count: int
    inaccessible_sheets: int
    color_palette: List[FrequencyEntry]
    typography: Typography
    spacing_scale: List[FrequencyEntry]
    layout_patterns: LayoutSummary
    css_variables: Dict[str, str]
    css_rules: List[CssSource]
    clean_html: str
    head_content: str
    generated_inline_css: str
    screenshots: List[Screenshot] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def truncate(content: str, limit: int, kind: str) -> str:
    """Cap ``content`` at ``limit`` characters, appending the marker for ``kind``."""

    if len(content) <= limit:
        return content
    return content[:limit] + TRUNCATION_MARKERS[kind]


@dataclass(slots=True)
class UrlSuggestion:
    url: str
    label: str
    category: str
