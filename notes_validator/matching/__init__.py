"""Deterministic matchers: keyword presence, catalog patterns and snippet extraction."""

from __future__ import annotations

from notes_validator.matching import contextual, keywords, snippets
from notes_validator.matching.snippets import DEFAULT_SNIPPET

__all__ = ["DEFAULT_SNIPPET", "contextual", "keywords", "snippets"]
