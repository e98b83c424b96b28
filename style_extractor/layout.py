"""Flex and grid container detection."""
from __future__ import annotations

from typing import Iterable, List, Optional

from .css_parser import split_declarations
from .schemas import CssRule, LayoutPattern, LayoutSummary

LAYOUT_PROPERTIES = frozenset(
    {
        "display",
        "flex-direction",
        "flex-wrap",
        "justify-content",
        "align-items",
        "align-content",
        "gap",
        "grid-template-columns",
        "grid-template-rows",
        "grid-auto-flow",
        "flex",
    }
)
FLEX_DISPLAYS = frozenset({"flex", "inline-flex"})
GRID_DISPLAYS = frozenset({"grid", "inline-grid"})


def _split_property(declaration: str) -> Optional[tuple[str, str]]:
    name, sep, value = declaration.partition(":")
    if not sep:
        return None
    return name.strip().lower(), value.strip()


def layout_properties(declarations: str) -> tuple[Optional[str], List[str]]:
    """Return the block's ``display`` value and its layout declarations.

    Declarations come back as ``name: value`` regardless of the source spacing.
    The last ``display`` in the block wins, as it would in the browser.
    """

    display = None
    relevant: List[str] = []
    for declaration in split_declarations(declarations):
        parsed = _split_property(declaration)
        if parsed is None:
            continue
        name, value = parsed
        if name == "display":
            display = value.lower()
        if name in LAYOUT_PROPERTIES:
            relevant.append(f"{name}: {value}")
    return display, relevant


def _classify(summary: LayoutSummary, selector: str, declarations: str) -> None:
    display, properties = layout_properties(declarations)
    if display in FLEX_DISPLAYS:
        summary.flex.append(LayoutPattern(selector=selector, properties=properties))
    elif display in GRID_DISPLAYS:
        summary.grid.append(LayoutPattern(selector=selector, properties=properties))


def detect_layout_patterns(rules: Iterable[CssRule], inline_styles: Iterable[str] = ()) -> LayoutSummary:
    """Collect flex and grid containers from parsed rules and inline styles.

    Inline styles have no selector, so they are labelled ``Inline Style #N``
    after their 1-based position in document order.
    """

    summary = LayoutSummary()
    for rule in rules:
        _classify(summary, rule.selector, rule.declarations)
    for index, style in enumerate(inline_styles, start=1):
        _classify(summary, f"Inline Style #{index}", style)
    return summary
