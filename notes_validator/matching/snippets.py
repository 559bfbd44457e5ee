"""Pick the most relevant excerpt of a note for a matched element."""

from __future__ import annotations

import re

from notes_validator.catalog import ElementSpec, PatternCatalog, get_catalog

DEFAULT_SNIPPET = "Content detected (no specific text extracted)"
MAX_JOINED_SENTENCES = 3
DEFAULT_MAX_CHARS = 200

_SENTENCE_SPLIT = re.compile(r"[.!?]")


def split_sentences(text: str) -> list[str]:
    return [sentence.strip() for sentence in _SENTENCE_SPLIT.split(text) if sentence.strip()]


def _regex_hits(text: str, spec: ElementSpec) -> list[str]:
    if spec.regex is None:
        return []
    return [match.group(0).strip() for match in spec.regex.finditer(text) if match.group(0).strip()]


def _phrase_sentences(sentences: list[str], spec: ElementSpec) -> list[str]:
    phrases = spec.phrases
    return [sentence for sentence in sentences if any(p in sentence.lower() for p in phrases)]


def _keyword_sentence(sentences: list[str], element_name: str, max_chars: int) -> str | None:
    keywords = element_name.lower().split()
    for sentence in sentences:
        lowered = sentence.lower()
        if any(word in lowered for word in keywords):
            return sentence[:max_chars].strip()
    return None


def extract(
    text: str,
    element_name: str,
    catalog: PatternCatalog | None = None,
    *,
    max_chars: int = DEFAULT_MAX_CHARS,
) -> str:
    """Return the excerpt of *text* that best evidences *element_name*.

    Order of preference: element regex hits (vital signs), up to three
    sentences carrying a catalog pattern or clue, the first sentence naming an
    element keyword, then `DEFAULT_SNIPPET`. Never returns an empty string.
    """
    sentences = split_sentences(text)
    spec = (catalog or get_catalog()).lookup(element_name)

    if spec is not None:
        regex_hits = _regex_hits(text, spec)
        if regex_hits:
            return "; ".join(regex_hits)

        relevant = _phrase_sentences(sentences, spec)
        if len(relevant) > MAX_JOINED_SENTENCES:
            return ". ".join(relevant[:MAX_JOINED_SENTENCES]) + "..."
        if relevant:
            return ". ".join(relevant)

    fallback = _keyword_sentence(sentences, element_name, max_chars)
    if fallback:
        return fallback
    return DEFAULT_SNIPPET


__all__ = ["DEFAULT_SNIPPET", "extract", "split_sentences"]
