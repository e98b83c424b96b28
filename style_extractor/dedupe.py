"""Collapse repeated inline styles into shared generated classes."""
from __future__ import annotations

import copy
import logging
import re
from typing import Dict, List

from bs4 import Tag

from .css_parser import split_declarations
from .schemas import DeduplicationResult

logger = logging.getLogger(__name__)

DEFAULT_CLASS_PREFIX = "style"
DECLARATION_SEPARATOR = "; "
_WHITESPACE_RE = re.compile(r"\s+")


def _normalise_declaration(declaration: str) -> str:
    name, sep, value = declaration.partition(":")
    if not sep:
        return _WHITESPACE_RE.sub(" ", declaration.strip())
    return f"{name.strip().lower()}: {_WHITESPACE_RE.sub(' ', value.strip())}"


def normalise_style(style: str) -> str:
    """Return the order independent key for an inline ``style`` value.

    Declarations are trimmed, de-duplicated, sorted and rejoined, so running
    the result through this function again yields the same string.
    """

    declarations = {_normalise_declaration(part) for part in split_declarations(style)}
    declarations.discard("")
    return DECLARATION_SEPARATOR.join(sorted(declarations))


class StyleClassRegistry:
    """Per-run mapping between normalised style keys and generated classes."""

    def __init__(self, prefix: str = DEFAULT_CLASS_PREFIX) -> None:
        self.prefix = prefix
        self._counter = 0
        self._class_by_key: Dict[str, str] = {}
        self._key_by_class: Dict[str, str] = {}

    def __len__(self) -> int:
        return len(self._class_by_key)

    def class_for(self, key: str) -> str:
        existing = self._class_by_key.get(key)
        if existing is not None:
            return existing
        self._counter += 1
        name = f"{self.prefix}-{self._counter}"
        self._class_by_key[key] = name
        self._key_by_class[name] = key
        return name

    def key_for(self, class_name: str) -> str | None:
        return self._key_by_class.get(class_name)

    def stylesheet(self) -> str:
        rules: List[str] = []
        for key, name in self._class_by_key.items():
            body = key if key.endswith(";") else f"{key};"
            rules.append(f".{name} {{ {body} }}")
        return "\n".join(rules)


def _add_class(element: Tag, class_name: str) -> None:
    classes = element.get("class") or []
    if isinstance(classes, str):
        classes = classes.split()
    if class_name not in classes:
        classes = [*classes, class_name]
    element["class"] = classes


def dedupe_inline_styles(root: Tag, prefix: str = DEFAULT_CLASS_PREFIX) -> DeduplicationResult:
    """Rewrite a copy of ``root`` so each unique inline style becomes one class.

    ``root`` itself is never modified. Elements are visited parent first and
    siblings in document order, which fixes the numbering of generated classes.
    An inline style that normalises to nothing is dropped without a class.
    """

    tree = copy.copy(root)
    registry = StyleClassRegistry(prefix)
    processed = 0

    elements = [tree] if tree.has_attr("style") else []
    elements.extend(tree.find_all(style=True))
    for element in elements:
        key = normalise_style(element.get("style") or "")
        del element["style"]
        if not key:
            continue
        _add_class(element, registry.class_for(key))
        processed += 1

    logger.debug(
        "Collapsed %d inline styles into %d generated classes", processed, len(registry)
    )
    return DeduplicationResult(html=str(tree), processed=processed, css=registry.stylesheet())
