"""External capabilities consumed by the semantic tiers."""

from __future__ import annotations

from notes_validator.capabilities.base import Capability, CapabilityState, ExtractionResult
from notes_validator.capabilities.embeddings import EmbeddingCapability, cosine_similarity
from notes_validator.capabilities.llm_extraction import LLMExtractionCapability, parse_yes_response

__all__ = [
    "Capability",
    "CapabilityState",
    "EmbeddingCapability",
    "ExtractionResult",
    "LLMExtractionCapability",
    "cosine_similarity",
    "parse_yes_response",
]
