"""Shared utilities: logging, exceptions, note loading and the LLM client."""

__all__ = [
    "exceptions",
    "llm",
    "logger",
    "text_io",
]
