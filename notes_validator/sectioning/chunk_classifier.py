"""Chunk-level SOAP classification for notes without explicit headers."""

from __future__ import annotations

import re

from notes_validator.capabilities.embeddings import EmbeddingCapability
from notes_validator.catalog import SOAP_TAGS, PatternCatalog, SoapTag, get_catalog
from notes_validator.common.logger import get_logger
from notes_validator.sectioning.soap_splitter import SectionBuffers, SoapSections, position_tag

logger = get_logger("sectioning.chunks")

SOAP_PROMPTS: dict[str, str] = {
    "S": "Subjective: the patient's own report of symptoms, complaints, history, medications and allergies.",
    "O": "Objective: measured vital signs, physical examination findings, laboratory and imaging results.",
    "A": "Assessment: the clinician's diagnosis, impression and differential diagnoses.",
    "P": "Plan: treatment, prescriptions, referrals, patient education and follow-up instructions.",
}

# Cut points used when a chunk carries no keyword signal at all.
CHUNK_POSITION_CUTS: tuple[int, int, int] = (40, 70, 85)

_PARAGRAPH_SPLIT = re.compile(r"\n\s*\n")


def split_chunks(note: str) -> list[str]:
    """Paragraphs, or individual lines when the note is a single paragraph."""
    paragraphs = [p.strip() for p in _PARAGRAPH_SPLIT.split(note) if p.strip()]
    if len(paragraphs) > 1:
        return paragraphs
    return [line.strip() for line in note.splitlines() if line.strip()]


def first_max(scores: dict[str, float]) -> SoapTag:
    best: SoapTag = SOAP_TAGS[0]
    for tag in SOAP_TAGS:
        if scores[tag] > scores[best]:
            best = tag
    return best


class ChunkClassifier:
    """Assign each chunk of a note to S/O/A/P.

    Scores chunks against one prompt per section with the embedding capability
    when it is ready; otherwise votes with the catalog's patterns and clues
    grouped by section, and places signal-free chunks by relative position.
    """

    def __init__(
        self,
        embedding: EmbeddingCapability | None = None,
        catalog: PatternCatalog | None = None,
        *,
        min_chunk_length: int = 20,
    ) -> None:
        self.embedding = embedding
        self.min_chunk_length = min_chunk_length
        catalog = catalog or get_catalog()
        self._section_phrases: dict[str, tuple[str, ...]] = {
            tag: tuple(phrase for spec in catalog.by_section(tag) for phrase in spec.phrases)
            for tag in SOAP_TAGS
        }

    def split(self, note: str) -> SoapSections:
        chunks = split_chunks(note)
        buffers = SectionBuffers()
        semantic = self.embedding is not None and self.embedding.ensure_ready()
        strategy = "semantic" if semantic else "keyword_vote"

        for index, chunk in enumerate(chunks):
            if len(chunk) < self.min_chunk_length:
                continue
            tag = self._classify_semantic(chunk) if semantic else None
            if tag is None:
                tag = self.vote(chunk) or position_tag(index, len(chunks), CHUNK_POSITION_CUTS)
            buffers.append(tag, chunk)

        return buffers.freeze(strategy)

    def _classify_semantic(self, chunk: str) -> SoapTag | None:
        if self.embedding is None:
            return None
        try:
            scores = {tag: self.embedding.score(chunk, SOAP_PROMPTS[tag]) for tag in SOAP_TAGS}
        except Exception as exc:
            logger.warning("Semantic chunk scoring failed; voting with keywords instead: %s", exc)
            return None
        return first_max(scores)

    def vote(self, chunk: str) -> SoapTag | None:
        """Section whose catalog phrases appear most often in *chunk*; None without signal."""
        lowered = chunk.lower()
        counts = {
            tag: float(sum(1 for phrase in self._section_phrases[tag] if phrase in lowered))
            for tag in SOAP_TAGS
        }
        if not any(counts.values()):
            return None
        return first_max(counts)


__all__ = ["CHUNK_POSITION_CUTS", "ChunkClassifier", "SOAP_PROMPTS", "first_max", "split_chunks"]
