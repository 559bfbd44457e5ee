"""Partition a free-text note into Subjective/Objective/Assessment/Plan buffers."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING, Iterator, Mapping

from notes_validator.catalog import SOAP_TAGS, SoapTag
from notes_validator.common.logger import get_logger

if TYPE_CHECKING:  # pragma: no cover
    from notes_validator.sectioning.chunk_classifier import ChunkClassifier

logger = get_logger("sectioning.soap")

HEADER_ALIASES: dict[str, SoapTag] = {
    "subjective": "S",
    "history": "S",
    "hpi": "S",
    "s": "S",
    "objective": "O",
    "physical exam": "O",
    "findings": "O",
    "o": "O",
    "assessment": "A",
    "impression": "A",
    "a": "A",
    "plan": "P",
    "treatment": "P",
    "recommendations": "P",
    "p": "P",
}

HEADER_PATTERN = re.compile(
    r"^\s*(?P<header>{})\s*:".format(
        "|".join(re.escape(alias) for alias in sorted(HEADER_ALIASES, key=len, reverse=True))
    ),
    re.IGNORECASE,
)

# Upper bounds (percent of lines) for S, O and A; the remainder is P.
POSITIONAL_CUTS: tuple[int, int, int] = (35, 70, 85)


@dataclass(frozen=True)
class SoapSections:
    """Section text for one note; always carries all four tags."""

    sections: Mapping[str, str]
    strategy: str = "empty"

    def __getitem__(self, tag: str) -> str:
        return self.sections[tag]

    def __iter__(self) -> Iterator[str]:
        return iter(SOAP_TAGS)

    def get(self, tag: str | None) -> str:
        if tag is None:
            return ""
        return self.sections.get(tag, "")

    @property
    def is_empty(self) -> bool:
        return not any(self.sections[tag] for tag in SOAP_TAGS)

    def as_dict(self) -> dict[str, str]:
        return {tag: self.sections[tag] for tag in SOAP_TAGS}


@dataclass
class SectionBuffers:
    """Append-only line buffers used while a single note is being split."""

    lines: dict[str, list[str]] = field(default_factory=lambda: {tag: [] for tag in SOAP_TAGS})

    def append(self, tag: SoapTag, text: str) -> None:
        if text:
            self.lines[tag].append(text)

    def freeze(self, strategy: str) -> SoapSections:
        joined = {tag: "\n".join(self.lines[tag]) for tag in SOAP_TAGS}
        return SoapSections(sections=MappingProxyType(joined), strategy=strategy)


def empty_sections() -> SoapSections:
    return SectionBuffers().freeze("empty")


def position_tag(index: int, total: int, cuts: tuple[int, int, int] = POSITIONAL_CUTS) -> SoapTag:
    """Map item *index* of *total* onto S/O/A/P by percentage cut points."""
    scaled = index * 100
    if scaled < cuts[0] * total:
        return "S"
    if scaled < cuts[1] * total:
        return "O"
    if scaled < cuts[2] * total:
        return "A"
    return "P"


def _content_lines(note: str) -> list[str]:
    return [line.strip() for line in note.splitlines() if line.strip()]


def split_by_headers(note: str) -> SoapSections | None:
    """Header-driven split; None when the note has no recognised SOAP header."""
    buffers = SectionBuffers()
    current: SoapTag = "S"
    saw_header = False

    for line in _content_lines(note):
        match = HEADER_PATTERN.match(line)
        if match:
            saw_header = True
            current = HEADER_ALIASES[match.group("header").lower()]
        # The header line belongs to the section it opens.
        buffers.append(current, line)

    if not saw_header:
        return None
    return buffers.freeze("headers")


def split_by_position(note: str) -> SoapSections:
    """Approximate split by line position (35% / 35% / 15% / 15%)."""
    lines = _content_lines(note)
    buffers = SectionBuffers()
    for index, line in enumerate(lines):
        buffers.append(position_tag(index, len(lines)), line)
    return buffers.freeze("positional")


class SoapSectionSplitter:
    """Tries explicit headers, then chunk classification (if configured), then line position."""

    def __init__(self, chunk_classifier: ChunkClassifier | None = None) -> None:
        self.chunk_classifier = chunk_classifier

    def split(self, note: str) -> SoapSections:
        if not note or not note.strip():
            return empty_sections()

        sections = split_by_headers(note)
        if sections is not None and not sections.is_empty:
            return sections

        if self.chunk_classifier is not None:
            sections = self.chunk_classifier.split(note)
            if not sections.is_empty:
                return sections
            logger.debug("Chunk classification produced no sections; using positional split")

        return split_by_position(note)


_DEFAULT_SPLITTER = SoapSectionSplitter()


def split_soap_sections(note: str, splitter: SoapSectionSplitter | None = None) -> SoapSections:
    return (splitter or _DEFAULT_SPLITTER).split(note)


__all__ = [
    "HEADER_ALIASES",
    "POSITIONAL_CUTS",
    "SectionBuffers",
    "SoapSectionSplitter",
    "SoapSections",
    "empty_sections",
    "position_tag",
    "split_by_headers",
    "split_by_position",
    "split_soap_sections",
]
