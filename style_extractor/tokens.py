"""Frequency aggregation and CSS custom property resolution."""
from __future__ import annotations

import re
from collections import Counter
from typing import Dict, Iterable, List

from .css_parser import (
    TYPOGRAPHY_PROPERTIES,
    extract_colors,
    extract_property_values,
    extract_spacing_values,
)
from .schemas import FrequencyEntry, Typography

ROOT_BLOCK_RE = re.compile(r":root\s*\{([^}]+)\}")
VARIABLE_DECLARATION_RE = re.compile(r"(--[\w-]+)\s*:\s*([^;}]+)")
VARIABLE_REFERENCE_RE = re.compile(r"var\(\s*(--[\w-]+)")


def count_and_sort(values: Iterable[str]) -> List[FrequencyEntry]:
    """Count ``values`` and order them by descending frequency.

    ``Counter`` keeps first-insertion order and ``sorted`` is stable, so ties
    stay in the order the values were first extracted.
    """

    counts = Counter(values)
    ordered = sorted(counts.items(), key=lambda item: item[1], reverse=True)
    return [FrequencyEntry(value=value, count=count) for value, count in ordered]


def summarize_colors(text: str) -> List[FrequencyEntry]:
    return count_and_sort(color.lower() for color in extract_colors(text))


def summarize_typography(text: str) -> Typography:
    families, sizes, weights, line_heights = (
        count_and_sort(extract_property_values(text, name)) for name in TYPOGRAPHY_PROPERTIES
    )
    return Typography(
        font_families=families,
        font_sizes=sizes,
        font_weights=weights,
        line_heights=line_heights,
    )


def summarize_spacing(text: str) -> List[FrequencyEntry]:
    return count_and_sort(extract_spacing_values(text))


class VariableResolver:
    """Name to value map of ``:root`` custom properties, last declaration wins."""

    def __init__(self, variables: Dict[str, str] | None = None) -> None:
        self.variables: Dict[str, str] = dict(variables or {})

    @classmethod
    def from_css(cls, text: str) -> "VariableResolver":
        resolver = cls()
        for block in ROOT_BLOCK_RE.finditer(text):
            for match in VARIABLE_DECLARATION_RE.finditer(block.group(1)):
                value = match.group(2).strip()
                if value:
                    resolver.variables[match.group(1).strip()] = value
        return resolver

    def resolve(self, value: str) -> str:
        """Annotate ``value`` with the literal behind its ``var()`` reference."""

        match = VARIABLE_REFERENCE_RE.search(value)
        if match and match.group(1) in self.variables:
            return f"{value} ({self.variables[match.group(1)]})"
        return value

    def annotate(self, entries: Iterable[FrequencyEntry]) -> List[FrequencyEntry]:
        return [FrequencyEntry(value=self.resolve(entry.value), count=entry.count) for entry in entries]

    def annotate_typography(self, typography: Typography) -> Typography:
        return Typography(
            font_families=self.annotate(typography.font_families),
            font_sizes=self.annotate(typography.font_sizes),
            font_weights=self.annotate(typography.font_weights),
            line_heights=self.annotate(typography.line_heights),
        )

    def as_dict(self) -> Dict[str, str]:
        return dict(self.variables)
