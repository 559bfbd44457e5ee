"""Per-element analysis: section selection plus the ordered detection tiers."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from functools import lru_cache
from typing import Iterable, Sequence

from config.settings import AnalyzerSettings, LLMSettings
from notes_validator.analysis.schema import AnalysisReport, ElementOutcome, MatchResult, Tier
from notes_validator.analysis.strategies import (
    DetectionContext,
    DetectionStrategy,
    LLMExtractionStrategy,
    SemanticSimilarityStrategy,
    heuristic_strategies,
    tier_names,
)
from notes_validator.capabilities import EmbeddingCapability, LLMExtractionCapability
from notes_validator.catalog import REQUIRED_ELEMENTS, SOAP_TAGS, PatternCatalog, get_catalog
from notes_validator.common.llm import build_llm
from notes_validator.common.logger import get_logger
from notes_validator.sectioning import ChunkClassifier, SoapSections, SoapSectionSplitter
from observability.logging_config import get_logger as get_structured_logger
from observability.metrics import get_metrics_client
from observability.timing import timed

logger = get_logger("analysis.analyzer")
report_logger = get_structured_logger("notes_validator.analysis.report", component="analyzer")


class ElementAnalyzer:
    """Decide, per required element, whether a note documents it.

    The analyzer owns no per-note state: sections are computed per call (or
    supplied by `analyze_note`, which computes them once per note), so one
    instance can serve concurrent notes.
    """

    def __init__(
        self,
        strategies: Sequence[DetectionStrategy] | None = None,
        *,
        splitter: SoapSectionSplitter | None = None,
        catalog: PatternCatalog | None = None,
        workers: int = 1,
    ) -> None:
        self.catalog = catalog or get_catalog()
        self.strategies: list[DetectionStrategy] = (
            list(strategies) if strategies is not None else heuristic_strategies(self.catalog)
        )
        self.splitter = splitter or SoapSectionSplitter()
        self.workers = max(1, workers)

    def split(self, note: str) -> SoapSections:
        return self.splitter.split(note or "")

    def analyze(self, note: str, element_name: str, sections: SoapSections | None = None) -> MatchResult:
        spec = self.catalog.lookup(element_name)
        if spec is None:
            logger.info("Unknown element %r; reporting as absent", element_name)
            result = MatchResult.absent(None, tier=Tier.UNKNOWN_ELEMENT)
            self._record(element_name, result)
            return result

        note = note or ""
        sections = sections if sections is not None else self.split(note)
        section_text = sections.get(spec.soap_section)
        context = DetectionContext(
            note=note,
            spec=spec,
            sections=sections,
            text=section_text if section_text else note,
        )

        result = MatchResult.absent(spec.soap_section)
        for strategy in self.strategies:
            try:
                detection = strategy.attempt(context)
            except Exception:
                logger.exception("%s: %s tier raised; continuing with next tier", spec.name, strategy.tier.value)
                continue
            if detection is None:
                logger.debug("%s: %s tier inconclusive", spec.name, strategy.tier.value)
                continue
            result = MatchResult(
                has_content=True,
                matched_text=detection.matched_text,
                soap_section=detection.section or spec.soap_section,
                tier=strategy.tier,
                confidence=detection.confidence,
            )
            break

        self._record(spec.name, result)
        return result

    def analyze_note(self, note: str, elements: Iterable[str] | None = None) -> AnalysisReport:
        element_names = list(elements) if elements is not None else list(REQUIRED_ELEMENTS)
        note = note or ""

        with timed("note_analysis.duration", tags={"tiers": "+".join(tier_names(self.strategies))}) as timer:
            sections = self.split(note)
            timer.tags["section_strategy"] = sections.strategy
            if self.workers > 1 and len(element_names) > 1:
                with ThreadPoolExecutor(max_workers=self.workers) as pool:
                    results = list(pool.map(lambda name: self.analyze(note, name, sections), element_names))
            else:
                results = [self.analyze(note, name, sections) for name in element_names]

        report = build_report(element_names, results, sections)
        report_logger.info(
            "note analyzed",
            extra={
                "elements": len(element_names),
                "missing": len(report.missing_elements),
                "section_strategy": sections.strategy,
                "degraded": report.degraded,
                "elapsed_ms": round(timer.elapsed_ms, 2),
            },
        )
        return report

    @staticmethod
    def _record(element_name: str, result: MatchResult) -> None:
        get_metrics_client().incr(
            "element_analysis.tier",
            tags={
                "element": element_name,
                "tier": result.tier.value,
                "present": str(result.has_content).lower(),
            },
        )


def build_report(
    element_names: Sequence[str],
    results: Sequence[MatchResult],
    sections: SoapSections,
) -> AnalysisReport:
    """Aggregate element verdicts; detected elements are grouped by their reported section."""
    detected: list[str] = []
    missing: list[str] = []
    detected_text: dict[str, str] = {}
    grouped: dict[str, list[str]] = {tag: [] for tag in SOAP_TAGS}
    outcomes: list[ElementOutcome] = []

    for name, result in zip(element_names, results):
        outcomes.append(ElementOutcome(element=name, **result.to_dict()))
        if not result.has_content:
            missing.append(name)
            continue
        detected.append(name)
        detected_text[name] = result.matched_text or ""
        grouped[result.soap_section or "S"].append(name)

    return AnalysisReport(
        complete=not missing,
        detected_elements=detected,
        missing_elements=missing,
        detected_text=detected_text,
        soap_sections=grouped,
        section_text=sections.as_dict(),
        section_strategy=sections.strategy,
        outcomes=outcomes,
    )


def build_analyzer(
    settings: AnalyzerSettings | None = None,
    llm_settings: LLMSettings | None = None,
    *,
    catalog: PatternCatalog | None = None,
    embedding: EmbeddingCapability | None = None,
    llm_capability: LLMExtractionCapability | None = None,
) -> ElementAnalyzer:
    """Wire capabilities and tiers from settings.

    Capabilities are created here, once, and shared by the strategies and the
    chunk classifier; each initializes lazily on first use.
    """
    settings = settings or AnalyzerSettings()
    llm_settings = llm_settings or LLMSettings()
    catalog = catalog or get_catalog()

    if embedding is None and settings.enable_embeddings:
        embedding = EmbeddingCapability(settings.embedding_model)
    if llm_capability is None and llm_settings.enabled:
        llm_capability = LLMExtractionCapability(factory=lambda: build_llm(llm_settings))

    strategies: list[DetectionStrategy] = []
    if llm_capability is not None:
        strategies.append(
            LLMExtractionStrategy(
                llm_capability,
                confidence_threshold=settings.llm_confidence_threshold,
                min_span_length=settings.min_span_length,
            )
        )
    if embedding is not None:
        strategies.append(
            SemanticSimilarityStrategy(
                embedding,
                similarity_threshold=settings.semantic_similarity_threshold,
                min_span_length=settings.min_span_length,
            )
        )
    strategies.extend(heuristic_strategies(catalog, max_chars=settings.snippet_max_chars))

    classifier = None
    if settings.enable_chunk_classifier:
        classifier = ChunkClassifier(embedding, catalog, min_chunk_length=settings.min_chunk_length)

    return ElementAnalyzer(
        strategies,
        splitter=SoapSectionSplitter(classifier),
        catalog=catalog,
        workers=settings.analysis_workers,
    )


@lru_cache(maxsize=1)
def get_default_analyzer() -> ElementAnalyzer:
    return build_analyzer()


def analyze(note: str, element_name: str) -> MatchResult:
    return get_default_analyzer().analyze(note, element_name)


def analyze_note(note: str, elements: Iterable[str] | None = None) -> AnalysisReport:
    return get_default_analyzer().analyze_note(note, elements)


def split_soap_sections(note: str) -> SoapSections:
    return get_default_analyzer().split(note)


__all__ = [
    "ElementAnalyzer",
    "analyze",
    "analyze_note",
    "build_analyzer",
    "build_report",
    "get_default_analyzer",
    "split_soap_sections",
]
