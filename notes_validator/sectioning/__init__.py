"""SOAP section splitting."""

from __future__ import annotations

from notes_validator.sectioning.chunk_classifier import ChunkClassifier
from notes_validator.sectioning.soap_splitter import (
    SoapSections,
    SoapSectionSplitter,
    split_by_headers,
    split_by_position,
    split_soap_sections,
)

__all__ = [
    "ChunkClassifier",
    "SoapSectionSplitter",
    "SoapSections",
    "split_by_headers",
    "split_by_position",
    "split_soap_sections",
]
