"""End-to-end tests for element analysis and report aggregation."""

import pytest

from config.settings import AnalyzerSettings, LLMSettings
from notes_validator import REQUIRED_ELEMENTS, Tier, analyze, analyze_note
from notes_validator.analysis import ElementAnalyzer, MatchResult, build_analyzer
from notes_validator.analysis.strategies import LLMExtractionStrategy, heuristic_strategies, tier_names
from notes_validator.capabilities import EmbeddingCapability, LLMExtractionCapability
from notes_validator.common.text_io import load_note


class ExplodingStrategy:
    tier = Tier.SEMANTIC

    def attempt(self, context):
        raise RuntimeError("tier crashed")


class TestAnalyzeElement:
    def test_unknown_element_is_absent(self, chest_pain_note):
        result = analyze(chest_pain_note, "Social history")
        assert result == MatchResult(
            has_content=False, matched_text=None, soap_section=None, tier=Tier.UNKNOWN_ELEMENT
        )

    def test_vital_signs_from_regex(self, chest_pain_note):
        result = analyze(chest_pain_note, "Vital signs")
        assert result.has_content is True
        assert result.matched_text == "BP 120/80; HR 72"
        assert result.soap_section == "O"
        assert result.tier is Tier.CONTEXTUAL

    def test_keyword_tier_is_last_resort(self):
        result = analyze("Discussed the plan and treatment options.", "Treatment plan")
        assert result.has_content is True
        assert result.tier is Tier.KEYWORD
        assert result.matched_text == "Discussed the plan and treatment options"
        assert result.soap_section == "P"

    def test_absent_element_keeps_its_section(self, chest_pain_note):
        result = analyze(chest_pain_note, "Lab results")
        assert result.has_content is False
        assert result.matched_text is None
        assert result.soap_section == "O"
        assert result.tier is Tier.NONE

    def test_empty_note(self):
        result = analyze("", "Allergies")
        assert result.has_content is False
        assert result.soap_section == "S"

    def test_search_is_scoped_to_the_element_section(self):
        note = "Subjective: labs reviewed with patient\nObjective: lungs clear to auscultation"
        analyzer = ElementAnalyzer()
        assert analyzer.analyze(note, "Physical examination findings").has_content is True
        # "labs" only appears under S
        assert analyzer.analyze(note, "Lab results").has_content is False

    def test_empty_section_falls_back_to_whole_note(self):
        note = "Subjective: BP 150/95 measured at home"
        result = ElementAnalyzer().analyze(note, "Vital signs")
        assert result.has_content is True
        assert result.matched_text == "BP 150/95"

    def test_match_result_rejects_inconsistent_fields(self):
        with pytest.raises(ValueError):
            MatchResult(has_content=True, matched_text=None, soap_section="S")


class TestStrategyOrdering:
    def test_model_reported_section_wins(self, full_note, fake_llm_factory):
        llm = fake_llm_factory("YES: Follow up in 2 weeks or sooner")
        analyzer = ElementAnalyzer(
            [LLMExtractionStrategy(LLMExtractionCapability(llm)), *heuristic_strategies()]
        )
        result = analyzer.analyze(full_note, "Allergies")

        assert result.tier is Tier.LLM
        assert result.confidence == 1.0
        assert result.soap_section == "P"

    def test_rejected_llm_answer_falls_through_to_heuristics(self, chest_pain_note, fake_llm_factory):
        analyzer = ElementAnalyzer(
            [LLMExtractionStrategy(LLMExtractionCapability(fake_llm_factory("NO"))), *heuristic_strategies()]
        )
        result = analyzer.analyze(chest_pain_note, "Allergies")
        assert result.tier is Tier.CONTEXTUAL
        assert result.matched_text == "No known drug allergies"

    def test_raising_strategy_does_not_abort_analysis(self, chest_pain_note):
        analyzer = ElementAnalyzer([ExplodingStrategy(), *heuristic_strategies()])
        result = analyzer.analyze(chest_pain_note, "Allergies")
        assert result.has_content is True
        assert result.tier is Tier.CONTEXTUAL


class TestAnalyzeNote:
    def test_chest_pain_note(self, chest_pain_note):
        report = analyze_note(chest_pain_note)

        assert report.complete is False
        assert report.detected_elements == [
            "Chief complaint",
            "Current medications",
            "Allergies",
            "Vital signs",
            "Treatment plan",
            "Follow-up instructions",
        ]
        assert report.missing_elements == [
            "History of present illness",
            "Past medical history",
            "Physical examination findings",
            "Lab results",
            "Diagnosis",
        ]
        assert report.detected_text["Chief complaint"] == "Patient presents with chest pain"
        assert report.detected_text["Allergies"] == "No known drug allergies"
        assert report.detected_text["Vital signs"] == "BP 120/80; HR 72"
        assert report.soap_sections == {
            "S": ["Chief complaint", "Current medications", "Allergies"],
            "O": ["Vital signs"],
            "A": [],
            "P": ["Treatment plan", "Follow-up instructions"],
        }
        assert report.section_strategy == "positional"

    def test_full_note_is_complete(self, full_note):
        report = analyze_note(full_note)

        assert report.complete is True
        assert report.missing_elements == []
        assert report.detected_elements == list(REQUIRED_ELEMENTS)
        assert report.section_strategy == "headers"
        assert report.degraded is True
        assert report.soap_sections["A"] == ["Diagnosis"]

    def test_section_headers_count_as_evidence(self):
        note = (
            "Subjective: Cough for 3 days.\n"
            "Objective: Lungs with crackles at right base.\n"
            "Assessment: Community acquired pneumonia.\n"
            "Plan: Amoxicillin and rest."
        )
        report = analyze_note(note)

        assert report.section_strategy == "headers"
        assert "Diagnosis" in report.detected_elements
        assert "Treatment plan" in report.detected_elements
        assert report.detected_text["Diagnosis"] == "Assessment: Community acquired pneumonia"
        assert report.detected_text["Treatment plan"] == "Plan: Amoxicillin and rest"
        assert report.soap_sections["A"] == ["Diagnosis"]
        assert report.soap_sections["P"] == ["Treatment plan"]

    def test_chief_complaint_survives_loading(self):
        report = analyze_note(load_note("CC: chest pain for 2 days"))
        assert "Chief complaint" in report.detected_elements
        assert report.detected_text["Chief complaint"] == "CC: chest pain for 2 days"

    def test_empty_note_is_all_missing(self):
        report = analyze_note("")
        assert report.complete is False
        assert report.detected_elements == []
        assert report.missing_elements == list(REQUIRED_ELEMENTS)
        assert report.soap_sections == {"S": [], "O": [], "A": [], "P": []}
        assert report.section_text == {"S": "", "O": "", "A": "", "P": ""}

    def test_element_subset_keeps_requested_order(self, chest_pain_note):
        report = analyze_note(chest_pain_note, ["Lab results", "Allergies"])
        assert report.detected_elements == ["Allergies"]
        assert report.missing_elements == ["Lab results"]
        assert [o.element for o in report.outcomes] == ["Lab results", "Allergies"]

    def test_worker_pool_matches_sequential_result(self, full_note, chest_pain_note):
        for note in (full_note, chest_pain_note):
            assert ElementAnalyzer(workers=4).analyze_note(note) == ElementAnalyzer().analyze_note(note)

    def test_deterministic(self, chest_pain_note):
        assert analyze_note(chest_pain_note) == analyze_note(chest_pain_note)

    def test_report_serializes(self, chest_pain_note):
        payload = analyze_note(chest_pain_note).model_dump()
        assert payload["outcomes"][0] == {
            "element": "Chief complaint",
            "has_content": True,
            "matched_text": "Patient presents with chest pain",
            "soap_section": "S",
            "tier": "contextual",
            "confidence": 0.5,
        }


class TestMetrics:
    def test_tier_counter_and_timing(self, chest_pain_note, metrics):
        analyze_note(chest_pain_note)

        tags = {"element": "Allergies", "tier": "contextual", "present": "true"}
        assert metrics.counter_value("element_analysis.tier", tags) == 1
        missing = {"element": "Lab results", "tier": "none", "present": "false"}
        assert metrics.counter_value("element_analysis.tier", missing) == 1
        assert "note_analysis.duration" in metrics.export_json()["observations"]


class TestBuildAnalyzer:
    def test_defaults_use_heuristics_only(self):
        analyzer = build_analyzer(AnalyzerSettings(), LLMSettings(enabled=False))
        assert tier_names(analyzer.strategies) == ["contextual", "keyword"]
        assert analyzer.splitter.chunk_classifier is None

    def test_capabilities_are_ordered_before_heuristics(self, fake_llm_factory):
        embedding = EmbeddingCapability("fake", loader=lambda name: (lambda text: [1.0]))
        analyzer = build_analyzer(
            AnalyzerSettings(),
            LLMSettings(enabled=False),
            embedding=embedding,
            llm_capability=LLMExtractionCapability(fake_llm_factory("NO")),
        )
        assert tier_names(analyzer.strategies) == ["llm", "semantic", "contextual", "keyword"]

    def test_chunk_classifier_shares_the_embedding(self):
        embedding = EmbeddingCapability("fake", loader=lambda name: (lambda text: [1.0]))
        analyzer = build_analyzer(AnalyzerSettings(enable_chunk_classifier=True), embedding=embedding)
        assert analyzer.splitter.chunk_classifier is not None
        assert analyzer.splitter.chunk_classifier.embedding is embedding

    def test_enabled_llm_without_key_degrades_to_heuristics(self, chest_pain_note, monkeypatch):
        monkeypatch.delenv("OPENAI_API_KEY", raising=False)
        monkeypatch.delenv("NOTES_LLM_API_KEY", raising=False)
        analyzer = build_analyzer(AnalyzerSettings(), LLMSettings(enabled=True, api_key=None))

        result = analyzer.analyze(chest_pain_note, "Allergies")
        assert result.tier is Tier.CONTEXTUAL
