"""Detection tiers sharing one `attempt(context)` contract.

The analyzer runs them in order and keeps the first `Detection`. A strategy
returns None when its capability is unavailable, when it fails, or when its
answer does not clear the acceptance gate; it never raises.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, Sequence

from notes_validator.analysis.schema import Tier
from notes_validator.capabilities import EmbeddingCapability, LLMExtractionCapability
from notes_validator.catalog import SOAP_TAGS, ElementSpec, PatternCatalog, SoapTag, get_catalog
from notes_validator.common.logger import get_logger
from notes_validator.matching import contextual, keywords, snippets
from notes_validator.sectioning import SoapSections
from observability.metrics import get_metrics_client

logger = get_logger("analysis.strategies")

CONTEXTUAL_CONFIDENCE = 0.5
KEYWORD_CONFIDENCE = 0.25


@dataclass(frozen=True)
class DetectionContext:
    note: str
    spec: ElementSpec
    sections: SoapSections
    text: str


@dataclass(frozen=True)
class Detection:
    matched_text: str
    confidence: float
    section: SoapTag | None = None


class DetectionStrategy(Protocol):
    tier: Tier

    def attempt(self, context: DetectionContext) -> Detection | None:
        ...


def locate_section(span: str, sections: SoapSections) -> SoapTag | None:
    """Tag of the first section whose text contains *span*."""
    for tag in SOAP_TAGS:
        if span and span in sections.get(tag):
            return tag
    return None


def _record_capability_failure(tier: Tier, exc: Exception) -> None:
    logger.warning("%s tier failed; falling back: %s", tier.value, exc)
    get_metrics_client().incr("element_analysis.capability_error", tags={"tier": tier.value})


class LLMExtractionStrategy:
    tier = Tier.LLM

    def __init__(
        self,
        capability: LLMExtractionCapability,
        *,
        confidence_threshold: float = 0.5,
        min_span_length: int = 10,
    ) -> None:
        self.capability = capability
        self.confidence_threshold = confidence_threshold
        self.min_span_length = min_span_length

    def attempt(self, context: DetectionContext) -> Detection | None:
        if not self.capability.ensure_ready():
            return None
        try:
            result = self.capability.extract(context.text, context.spec)
        except Exception as exc:
            _record_capability_failure(self.tier, exc)
            return None
        span = (result.span or "").strip()
        if result.confidence <= self.confidence_threshold or len(span) <= self.min_span_length:
            return None
        return Detection(
            matched_text=span,
            confidence=result.confidence,
            section=result.section or locate_section(span, context.sections),
        )


class SemanticSimilarityStrategy:
    """Best-scoring sentence against an element query built from the catalog."""

    tier = Tier.SEMANTIC

    def __init__(
        self,
        embedding: EmbeddingCapability,
        *,
        similarity_threshold: float = 0.5,
        min_span_length: int = 10,
    ) -> None:
        self.embedding = embedding
        self.similarity_threshold = similarity_threshold
        self.min_span_length = min_span_length

    @staticmethod
    def query_for(spec: ElementSpec) -> str:
        if spec.description:
            return f"{spec.name}: {spec.description}"
        return spec.name

    def attempt(self, context: DetectionContext) -> Detection | None:
        if not self.embedding.ensure_ready():
            return None
        sentences = snippets.split_sentences(context.text)
        if not sentences:
            return None

        query = self.query_for(context.spec)
        best_sentence = ""
        best_score = float("-inf")
        try:
            for sentence in sentences:
                score = self.embedding.score(sentence, query)
                if score > best_score:
                    best_sentence, best_score = sentence, score
        except Exception as exc:
            _record_capability_failure(self.tier, exc)
            return None

        if best_score <= self.similarity_threshold or len(best_sentence) <= self.min_span_length:
            return None
        return Detection(
            matched_text=best_sentence,
            confidence=best_score,
            section=locate_section(best_sentence, context.sections),
        )


class ContextualStrategy:
    tier = Tier.CONTEXTUAL

    def __init__(self, catalog: PatternCatalog | None = None, *, max_chars: int = snippets.DEFAULT_MAX_CHARS) -> None:
        self.catalog = catalog or get_catalog()
        self.max_chars = max_chars

    def attempt(self, context: DetectionContext) -> Detection | None:
        if not contextual.matches_spec(context.text, context.spec):
            return None
        snippet = snippets.extract(context.text, context.spec.name, self.catalog, max_chars=self.max_chars)
        return Detection(matched_text=snippet, confidence=CONTEXTUAL_CONFIDENCE)


class KeywordStrategy:
    tier = Tier.KEYWORD

    def __init__(self, catalog: PatternCatalog | None = None, *, max_chars: int = snippets.DEFAULT_MAX_CHARS) -> None:
        self.catalog = catalog or get_catalog()
        self.max_chars = max_chars

    def attempt(self, context: DetectionContext) -> Detection | None:
        if not keywords.matches(context.text, context.spec.name):
            return None
        snippet = snippets.extract(context.text, context.spec.name, self.catalog, max_chars=self.max_chars)
        return Detection(matched_text=snippet, confidence=KEYWORD_CONFIDENCE)


def heuristic_strategies(
    catalog: PatternCatalog | None = None,
    *,
    max_chars: int = snippets.DEFAULT_MAX_CHARS,
) -> list[DetectionStrategy]:
    return [
        ContextualStrategy(catalog, max_chars=max_chars),
        KeywordStrategy(catalog, max_chars=max_chars),
    ]


def tier_names(strategies: Sequence[DetectionStrategy]) -> list[str]:
    return [strategy.tier.value for strategy in strategies]


__all__ = [
    "ContextualStrategy",
    "Detection",
    "DetectionContext",
    "DetectionStrategy",
    "KeywordStrategy",
    "LLMExtractionStrategy",
    "SemanticSimilarityStrategy",
    "heuristic_strategies",
    "locate_section",
    "tier_names",
]
