"""Last-resort keyword presence test."""

from __future__ import annotations

import math


def element_keywords(element_name: str) -> list[str]:
    return element_name.lower().split()


def keyword_hits(text: str, element_name: str) -> int:
    """Count element-name keywords appearing anywhere in *text*."""
    haystack = text.lower()
    return sum(1 for word in element_keywords(element_name) if word in haystack)


def matches(text: str, element_name: str) -> bool:
    """True when at least half (rounded up) of the element-name keywords occur in *text*.

    Keywords are the whitespace-split, case-folded element name; each is a plain
    substring test with no further tokenization.
    """
    keywords = element_keywords(element_name)
    if not keywords:
        return False
    return keyword_hits(text, element_name) >= math.ceil(len(keywords) / 2)


__all__ = ["element_keywords", "keyword_hits", "matches"]
