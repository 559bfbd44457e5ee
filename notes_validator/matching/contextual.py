"""Catalog-driven pattern and context-clue matching."""

from __future__ import annotations

from notes_validator.catalog import ElementSpec, PatternCatalog, get_catalog

# Context clues are only trusted on text longer than this.
CLUE_MIN_TEXT_LENGTH = 50


def _has_digit(text: str) -> bool:
    return any(ch.isdigit() for ch in text)


def matches_numeric_markers(text: str, spec: ElementSpec) -> bool:
    """Digit plus one of the element's literal markers (e.g. "BP 140/90")."""
    if not spec.numeric_markers or not _has_digit(text):
        return False
    lowered = text.lower()
    return any(marker in lowered for marker in spec.numeric_markers)


def matches_spec(text: str, spec: ElementSpec) -> bool:
    lowered = text.lower()
    if any(pattern in lowered for pattern in spec.patterns):
        return True
    if len(text) > CLUE_MIN_TEXT_LENGTH and any(clue in lowered for clue in spec.context_clues):
        return True
    return matches_numeric_markers(text, spec)


def matches(text: str, element_name: str, catalog: PatternCatalog | None = None) -> bool:
    """Return True if *text* carries a trigger pattern or clue for the element.

    Unknown element names return False.
    """
    spec = (catalog or get_catalog()).lookup(element_name)
    if spec is None:
        return False
    return matches_spec(text, spec)


__all__ = ["CLUE_MIN_TEXT_LENGTH", "matches", "matches_numeric_markers", "matches_spec"]
