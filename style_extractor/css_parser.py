"""Regex based CSS rule splitting and declaration scanning.

The parser is deliberately shallow: declaration blocks must not contain nested
braces and string literals containing braces are not understood. Conditional
group rules (``@media``, ``@supports`` and friends) are flattened exactly one
level so their inner rules are treated like top-level ones.
"""
from __future__ import annotations

import re
from functools import lru_cache
from typing import Iterable, List

from .schemas import CssRule

COMMENT_RE = re.compile(r"/\*[\s\S]*?\*/")
AT_RULE_WRAPPER_RE = re.compile(
    r"@(?:media|supports|layer|container|document)[^{};]*\{([\s\S]+?\})\s*\}",
    re.IGNORECASE,
)
RULE_RE = re.compile(r"([^{}]+)\s*\{([^}]+)\}")

COLOR_RE = re.compile(
    r"(#(?:[0-9a-f]{8}|[0-9a-f]{6}|[0-9a-f]{3,4})\b"
    r"|rgba?\([\d\s,./%]+\)"
    r"|hsla?\([\d\s,./%deg]+\))",
    re.IGNORECASE,
)
SPACING_RE = re.compile(
    r"(?<![\w-])(?:margin|padding|(?:row-|column-)?gap)\s*:\s*([^;}]+)",
    re.IGNORECASE,
)

TYPOGRAPHY_PROPERTIES = ("font-family", "font-size", "font-weight", "line-height")
DEGENERATE_SPACING_TOKENS = frozenset({"0", "auto", "inherit", "initial"})


def flatten_at_rules(css: str) -> str:
    """Replace each one-level at-rule wrapper with its inner body."""

    return AT_RULE_WRAPPER_RE.sub(lambda match: match.group(1), css)


def parse_css_rules(css: str) -> List[CssRule]:
    """Split CSS text into ordered ``selector { declarations }`` pairs.

    Empty selectors, empty declaration blocks and anything still starting with
    an ``@`` after flattening (``@font-face``, ``@keyframes`` ...) are dropped.
    """

    rules: List[CssRule] = []
    flattened = flatten_at_rules(COMMENT_RE.sub("", css))
    for match in RULE_RE.finditer(flattened):
        selector = match.group(1).strip()
        declarations = match.group(2).strip()
        if selector and declarations and not selector.startswith("@"):
            rules.append(CssRule(selector=selector, declarations=declarations))
    return rules


def split_declarations(block: str) -> List[str]:
    """Return the trimmed, non-empty ``property: value`` parts of a block."""

    return [part.strip() for part in block.split(";") if part.strip()]


@lru_cache(maxsize=None)
def _property_pattern(name: str) -> re.Pattern[str]:
    # Custom properties such as ``--font-size`` must not count as the real one.
    return re.compile(rf"(?<![\w-]){re.escape(name)}\s*:\s*([^;}}]+)", re.IGNORECASE)


def extract_colors(text: str) -> List[str]:
    return [match.group(0) for match in COLOR_RE.finditer(text)]


def extract_property_values(text: str, name: str) -> List[str]:
    """Capture every value of ``name`` up to the next ``;`` or ``}``."""

    values = []
    for match in _property_pattern(name).finditer(text):
        value = match.group(1).strip()
        if value:
            values.append(value)
    return values


def extract_spacing_values(text: str) -> List[str]:
    """Split margin/padding/gap values into individual non-degenerate tokens."""

    tokens: List[str] = []
    for match in SPACING_RE.finditer(text):
        for token in match.group(1).split():
            if token.lower() not in DEGENERATE_SPACING_TOKENS:
                tokens.append(token)
    return tokens


def combine_sources(stylesheets: Iterable[str], inline_styles: Iterable[str]) -> str:
    """Concatenate CSS text and inline style attributes into one scan target."""

    return "".join(stylesheets) + ";".join(inline_styles)
