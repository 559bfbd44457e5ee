"""Tests for the pattern catalog."""

import pytest

from notes_validator.catalog import REQUIRED_ELEMENTS, SOAP_TAGS, ElementSpec, PatternCatalog, get_catalog
from notes_validator.common.exceptions import CatalogError


class TestBundledCatalog:
    def test_every_required_element_has_a_spec(self, catalog):
        assert len(catalog) == len(REQUIRED_ELEMENTS) == 11
        for name in REQUIRED_ELEMENTS:
            spec = catalog.lookup(name)
            assert spec is not None
            assert spec.name == name
            assert spec.soap_section in SOAP_TAGS
            assert spec.patterns

    def test_patterns_and_clues_are_lower_case(self, catalog):
        for spec in catalog:
            assert all(p == p.lower() for p in spec.phrases), spec.name

    @pytest.mark.parametrize(
        "name,section",
        [
            ("Chief complaint", "S"),
            ("Allergies", "S"),
            ("Vital signs", "O"),
            ("Lab results", "O"),
            ("Diagnosis", "A"),
            ("Treatment plan", "P"),
            ("Follow-up instructions", "P"),
        ],
    )
    def test_section_for(self, catalog, name, section):
        assert catalog.section_for(name) == section

    def test_by_section_preserves_catalog_order(self, catalog):
        names = [spec.name for tag in SOAP_TAGS for spec in catalog.by_section(tag)]
        assert names == list(catalog.names)

    def test_only_vital_signs_carries_a_regex(self, catalog):
        with_regex = [spec.name for spec in catalog if spec.regex is not None]
        assert with_regex == ["Vital signs"]

    def test_get_catalog_is_shared(self):
        assert get_catalog() is get_catalog()


class TestLookupMisses:
    def test_unknown_name_returns_none(self, catalog):
        assert catalog.lookup("Social history") is None
        assert catalog.section_for("Social history") is None
        assert "Social history" not in catalog

    def test_lookup_is_case_sensitive(self, catalog):
        assert catalog.lookup("allergies") is None


def test_duplicate_names_are_rejected():
    spec = ElementSpec(name="Allergies", soap_section="S", patterns=("allergies",))
    with pytest.raises(CatalogError, match="Duplicate"):
        PatternCatalog([spec, spec])


def test_keywords_derive_from_name():
    spec = ElementSpec(name="Past Medical History", soap_section="S", patterns=())
    assert spec.keywords == ("past", "medical", "history")
