"""Pattern catalog of required clinical elements."""

from __future__ import annotations

from notes_validator.catalog.catalog import PatternCatalog, get_catalog
from notes_validator.catalog.elements import (
    ELEMENT_SPECS,
    REQUIRED_ELEMENTS,
    SOAP_SECTION_LABELS,
    SOAP_TAGS,
    ElementSpec,
    SoapTag,
)

__all__ = [
    "ELEMENT_SPECS",
    "ElementSpec",
    "PatternCatalog",
    "REQUIRED_ELEMENTS",
    "SOAP_SECTION_LABELS",
    "SOAP_TAGS",
    "SoapTag",
    "get_catalog",
]
