"""Result types produced by element analysis."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field

from notes_validator.catalog import SoapTag


class Tier(str, Enum):
    """Which strategy produced a result; heuristic tiers mean degraded mode."""

    LLM = "llm"
    SEMANTIC = "semantic"
    CONTEXTUAL = "contextual"
    KEYWORD = "keyword"
    NONE = "none"
    UNKNOWN_ELEMENT = "unknown_element"

    @property
    def is_heuristic(self) -> bool:
        return self in (Tier.CONTEXTUAL, Tier.KEYWORD)


@dataclass(frozen=True)
class MatchResult:
    """Per-element verdict for one note."""

    has_content: bool
    matched_text: str | None
    soap_section: SoapTag | None
    tier: Tier = Tier.NONE
    confidence: float = 0.0

    def __post_init__(self) -> None:
        if self.has_content != (self.matched_text is not None):
            raise ValueError("matched_text must be set exactly when has_content is true")

    @classmethod
    def absent(cls, soap_section: SoapTag | None, tier: Tier = Tier.NONE) -> "MatchResult":
        return cls(has_content=False, matched_text=None, soap_section=soap_section, tier=tier)

    def to_dict(self) -> dict[str, Any]:
        return {
            "has_content": self.has_content,
            "matched_text": self.matched_text,
            "soap_section": self.soap_section,
            "tier": self.tier.value,
            "confidence": round(self.confidence, 4),
        }


class ElementOutcome(BaseModel):
    element: str
    has_content: bool
    matched_text: str | None = None
    soap_section: str | None = None
    tier: str = Tier.NONE.value
    confidence: float = 0.0


class AnalysisReport(BaseModel):
    """Aggregate of all element verdicts for one note."""

    complete: bool
    detected_elements: list[str] = Field(default_factory=list)
    missing_elements: list[str] = Field(default_factory=list)
    detected_text: dict[str, str] = Field(default_factory=dict)
    soap_sections: dict[str, list[str]] = Field(default_factory=dict)
    section_text: dict[str, str] = Field(default_factory=dict)
    section_strategy: str = "empty"
    outcomes: list[ElementOutcome] = Field(default_factory=list)

    @property
    def degraded(self) -> bool:
        """True when any detection came only from the heuristic tiers."""
        return any(Tier(o.tier).is_heuristic for o in self.outcomes if o.has_content)


__all__ = ["AnalysisReport", "ElementOutcome", "MatchResult", "Tier"]
