"""Tests for SOAP section splitting."""

import pytest

from notes_validator.catalog import SOAP_TAGS
from notes_validator.sectioning import SoapSectionSplitter, split_by_headers, split_soap_sections
from notes_validator.sectioning.soap_splitter import position_tag


class TestHeaderDrivenSplit:
    def test_full_headers_round_trip(self):
        note = (
            "Subjective: Patient reports headache for 3 days.\n"
            "Objective: BP 120/80.\n"
            "Assessment: Tension headache.\n"
            "Plan: Ibuprofen and follow up in 2 weeks."
        )
        sections = split_soap_sections(note)
        assert sections.strategy == "headers"
        assert sections.as_dict() == {
            "S": "Subjective: Patient reports headache for 3 days.",
            "O": "Objective: BP 120/80.",
            "A": "Assessment: Tension headache.",
            "P": "Plan: Ibuprofen and follow up in 2 weeks.",
        }

    def test_abbreviated_headers(self):
        note = "S: cough x5 days\nO: Temp 100.2\nA: viral URI\nP: fluids, rest"
        sections = split_soap_sections(note)
        assert sections["S"] == "S: cough x5 days"
        assert sections["O"] == "O: Temp 100.2"
        assert sections["A"] == "A: viral URI"
        assert sections["P"] == "P: fluids, rest"

    @pytest.mark.parametrize(
        "header,tag",
        [
            ("History", "S"),
            ("HPI", "S"),
            ("Physical Exam", "O"),
            ("findings", "O"),
            ("IMPRESSION", "A"),
            ("Treatment", "P"),
            ("Recommendations", "P"),
        ],
    )
    def test_header_aliases(self, header, tag):
        sections = split_by_headers(f"{header}: some content here")
        assert sections is not None
        assert sections[tag] == f"{header}: some content here"

    def test_header_switches_section_for_following_lines(self):
        note = "Objective:\nLungs clear.\nHeart regular.\n\nPlan:\nRest."
        sections = split_soap_sections(note)
        assert sections["O"] == "Objective:\nLungs clear.\nHeart regular."
        assert sections["P"] == "Plan:\nRest."
        assert sections["S"] == ""
        assert sections["A"] == ""

    def test_lines_before_first_header_default_to_subjective(self):
        note = "Seen in clinic today.\nAssessment: stable angina"
        sections = split_soap_sections(note)
        assert sections["S"] == "Seen in clinic today."
        assert sections["A"] == "Assessment: stable angina"

    def test_header_must_start_the_line(self):
        assert split_by_headers("Discussed the plan: rest and fluids") is None

    def test_no_headers_returns_none(self):
        assert split_by_headers("Patient doing well.\nNo complaints.") is None


class TestPositionalSplit:
    def test_hundred_line_note_uses_fixed_ratios(self):
        lines = [f"line {i} of the narrative" for i in range(100)]
        sections = split_soap_sections("\n".join(lines))

        assert sections.strategy == "positional"
        assert sections["S"].split("\n") == lines[0:35]
        assert sections["O"].split("\n") == lines[35:70]
        assert sections["A"].split("\n") == lines[70:85]
        assert sections["P"].split("\n") == lines[85:100]

    def test_single_line_note_lands_in_subjective(self, chest_pain_note):
        sections = split_soap_sections(chest_pain_note)
        assert sections["S"] == chest_pain_note
        assert sections["O"] == sections["A"] == sections["P"] == ""

    def test_position_tag_boundaries(self):
        assert [position_tag(i, 20) for i in (0, 6, 7, 13, 14, 16, 17, 19)] == [
            "S", "S", "O", "O", "A", "A", "P", "P",
        ]


class TestEmptyInput:
    @pytest.mark.parametrize("note", ["", "   ", "\n\n"])
    def test_empty_note_has_four_empty_sections(self, note):
        sections = SoapSectionSplitter().split(note)
        assert list(sections) == list(SOAP_TAGS)
        assert sections.as_dict() == {"S": "", "O": "", "A": "", "P": ""}
        assert sections.is_empty


def test_sections_are_read_only():
    sections = split_soap_sections("Plan: rest")
    with pytest.raises(TypeError):
        sections.sections["P"] = "changed"
