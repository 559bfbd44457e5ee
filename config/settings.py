"""Configuration settings using pydantic-settings."""

from __future__ import annotations

from typing import Optional

from pydantic import AliasChoices, Field, model_validator
from pydantic_settings import BaseSettings


class AnalyzerSettings(BaseSettings):
    """Settings for the element analysis pipeline.

    Each semantic tier has exactly one acceptance threshold. The historical
    variants of this tool disagreed (0.5 vs 0.6 similarity, 0.1 QA confidence);
    the values below are the ones this package commits to.
    """

    # Semantic (embedding) tier: best sentence similarity must exceed this.
    semantic_similarity_threshold: float = 0.5
    # LLM tier: a "YES:" answer carries confidence 1.0, anything else 0.0.
    llm_confidence_threshold: float = 0.5
    # Spans accepted from a semantic tier must be longer than this.
    min_span_length: int = 10

    min_chunk_length: int = 20
    snippet_max_chars: int = 200

    analysis_workers: int = 1

    enable_embeddings: bool = False
    enable_chunk_classifier: bool = False
    embedding_model: str = "mixedbread-ai/mxbai-embed-xsmall-v1"

    model_config = {"env_prefix": "NOTES_", "protected_namespaces": ()}

    @model_validator(mode="after")
    def _clamp(self) -> "AnalyzerSettings":
        self.analysis_workers = max(1, self.analysis_workers)
        self.min_span_length = max(0, self.min_span_length)
        self.min_chunk_length = max(0, self.min_chunk_length)
        return self


class LLMSettings(BaseSettings):
    """Settings for the OpenAI-compatible extraction endpoint."""

    enabled: bool = False
    base_url: str = "https://api.openai.com"
    api_key: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("NOTES_LLM_API_KEY", "OPENAI_API_KEY"),
    )
    model: str = "gpt-4o-mini"
    timeout_s: float = 30.0
    max_retries: int = 2

    model_config = {"env_prefix": "NOTES_LLM_", "extra": "ignore", "populate_by_name": True}


def get_analyzer_settings() -> AnalyzerSettings:
    return AnalyzerSettings()


def get_llm_settings() -> LLMSettings:
    return LLMSettings()
