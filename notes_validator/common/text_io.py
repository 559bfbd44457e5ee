"""Loading helpers for clinical notes exported from EHR systems."""

from __future__ import annotations

import re
from pathlib import Path

__all__ = [
    "load_note",
    "normalize_whitespace",
    "strip_headers",
]

# Lines that wrap an exported note; only removed from the top or bottom edge.
_LEADING_WRAPPERS = re.compile(
    r"^\s*(?:page\s+\d+\s+of\s+\d+|(?:dictated|transcribed)\s+by|(?:electronically\s+)?signed\b|printed\s+on\b)",
    re.IGNORECASE,
)
_TRAILING_WRAPPERS = re.compile(
    # "cc:" is a distribution line only when a recipient follows; "CC: cough" is a chief complaint.
    r"^\s*(?:cc:\s*(?:dr\b|doctor\b|pcp\b|primary\s+care\b|referring\b|chart\b)"
    r"|copy\s+to\b|end\s+of\s+note|page\s+\d+\s+of\s+\d+|(?:electronically\s+)?signed\b)",
    re.IGNORECASE,
)

_TRANSLATE = str.maketrans({"\t": " ", "\u00a0": " ", "\u2022": "-", "\u25cf": "-"})
_SPACE_RUN = re.compile(r" {2,}")
_MAX_PATH_LENGTH = 255


def load_note(source: str | Path) -> str:
    """Return note text from a string or a path to a UTF-8 text file, cleaned for analysis."""
    return strip_headers(normalize_whitespace(_read_source(source)))


def normalize_whitespace(text: str) -> str:
    """Unify line endings, tabs, non-breaking spaces and bullets; keep at most one blank line."""
    lines = text.replace("\r\n", "\n").replace("\r", "\n").translate(_TRANSLATE).split("\n")
    cleaned: list[str] = []
    for line in lines:
        line = _SPACE_RUN.sub(" ", line).rstrip()
        if not line and cleaned and not cleaned[-1]:
            continue
        cleaned.append(line)
    return "\n".join(cleaned).strip()


def strip_headers(text: str) -> str:
    """Drop page markers, signature and distribution lines at the edges of the note."""
    lines = text.split("\n")
    start, end = 0, len(lines)
    while start < end and (not lines[start].strip() or _LEADING_WRAPPERS.match(lines[start])):
        start += 1
    while end > start and (not lines[end - 1].strip() or _TRAILING_WRAPPERS.match(lines[end - 1])):
        end -= 1
    return "\n".join(lines[start:end])


def _read_source(source: str | Path) -> str:
    if isinstance(source, Path):
        return source.read_text(encoding="utf-8")
    # Multi-line input is note text, never a path.
    if "\n" not in source and len(source) <= _MAX_PATH_LENGTH and Path(source).is_file():
        return Path(source).read_text(encoding="utf-8")
    return source
