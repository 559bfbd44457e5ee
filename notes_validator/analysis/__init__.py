"""Element analysis: ordered detection tiers and per-note reports."""

from __future__ import annotations

from notes_validator.analysis.analyzer import (
    ElementAnalyzer,
    analyze,
    analyze_note,
    build_analyzer,
    build_report,
    get_default_analyzer,
    split_soap_sections,
)
from notes_validator.analysis.schema import AnalysisReport, ElementOutcome, MatchResult, Tier

__all__ = [
    "AnalysisReport",
    "ElementAnalyzer",
    "ElementOutcome",
    "MatchResult",
    "Tier",
    "analyze",
    "analyze_note",
    "build_analyzer",
    "build_report",
    "get_default_analyzer",
    "split_soap_sections",
]
