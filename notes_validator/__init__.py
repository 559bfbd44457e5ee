"""Clinical note completeness checks against the SOAP format."""

from __future__ import annotations

from notes_validator.analysis import (
    AnalysisReport,
    ElementAnalyzer,
    MatchResult,
    Tier,
    analyze,
    analyze_note,
    build_analyzer,
    split_soap_sections,
)
from notes_validator.catalog import REQUIRED_ELEMENTS, SOAP_SECTION_LABELS, get_catalog
from notes_validator.sectioning import SoapSections

__version__ = "0.1.0"

__all__ = [
    "AnalysisReport",
    "ElementAnalyzer",
    "MatchResult",
    "REQUIRED_ELEMENTS",
    "SOAP_SECTION_LABELS",
    "SoapSections",
    "Tier",
    "analyze",
    "analyze_note",
    "build_analyzer",
    "get_catalog",
    "split_soap_sections",
]
