"""Required clinical elements and the patterns used to recognise them."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Literal

SoapTag = Literal["S", "O", "A", "P"]

SOAP_TAGS: tuple[SoapTag, ...] = ("S", "O", "A", "P")

SOAP_SECTION_LABELS: dict[str, str] = {
    "S": "Subjective",
    "O": "Objective",
    "A": "Assessment",
    "P": "Plan",
}


@dataclass(frozen=True, slots=True)
class ElementSpec:
    """Everything the matchers know about one required element.

    Patterns and clues are stored lower-cased; every comparison against note
    text is a case-insensitive substring test.
    """

    name: str
    soap_section: SoapTag
    patterns: tuple[str, ...]
    context_clues: tuple[str, ...] = ()
    regex: re.Pattern[str] | None = None
    # Literal markers that, together with any digit, signal the element on their own.
    numeric_markers: tuple[str, ...] = ()
    description: str = ""
    examples: tuple[str, ...] = field(default=())

    @property
    def keywords(self) -> tuple[str, ...]:
        return tuple(self.name.lower().split())

    @property
    def phrases(self) -> tuple[str, ...]:
        """Patterns followed by context clues, in catalog order."""
        return self.patterns + self.context_clues


VITAL_SIGNS_REGEX = re.compile(
    r"\b(?:"
    r"(?:BP|blood\s+pressure)\s*[:=]?\s*\d{2,3}\s*/\s*\d{2,3}(?:\s*mm\s*Hg)?"
    r"|(?:(?-i:HR)|heart\s+rate|pulse|P)\s*[:=]?\s*\d{2,3}(?:\s*(?:bpm|beats/min))?"
    # Lowercase "hr" needs a separator or a unit; "3 hr 20 min" is a duration.
    r"|hr\s*(?:[:=]\s*\d{2,3}(?:\s*(?:bpm|beats/min))?|\d{2,3}\s*(?:bpm|beats/min))"
    r"|(?:RR|respiratory\s+rate|resp)\s*[:=]?\s*\d{1,2}(?:\s*(?:breaths/min|/min))?"
    r"|(?:temp(?:erature)?|T)\s*[:=]?\s*\d{2,3}(?:\.\d+)?\s*°?\s*[FC]?"
    r"|(?:SpO2|O2\s+sat(?:uration)?|sat)\s*[:=]?\s*\d{2,3}\s*%(?:\s+on\s+(?:RA|room\s+air))?"
    r")",
    re.IGNORECASE,
)


ELEMENT_SPECS: tuple[ElementSpec, ...] = (
    ElementSpec(
        name="Chief complaint",
        soap_section="S",
        patterns=(
            "chief complaint",
            "cc:",
            "presents with",
            "presenting with",
            "presented with",
            "complains of",
            "complaining of",
            "c/o",
            "reason for visit",
            "here for",
            "comes in for",
        ),
        context_clues=("pain", "cough", "fever", "headache", "nausea", "shortness of breath", "concern"),
        description="The patient's primary reason for seeking medical care",
        examples=("Patient presents with chest pain.", "CC: cough x 3 days"),
    ),
    ElementSpec(
        name="History of present illness",
        soap_section="S",
        patterns=(
            "history of present illness",
            "hpi",
            "started",
            "began",
            "onset",
            "for the past",
            "days ago",
            "weeks ago",
            "months ago",
            "worsening",
            "progressive",
        ),
        context_clues=("gradual", "sudden", "intermittent", "constant", "radiating", "associated with", "since"),
        description="Chronological description of the patient's symptoms",
        examples=("Pain began 2 days ago and is worse with exertion.",),
    ),
    ElementSpec(
        name="Past medical history",
        soap_section="S",
        patterns=(
            "past medical history",
            "pmh",
            "pmhx",
            "history of",
            "h/o",
            "previously diagnosed",
            "prior surgery",
            "surgical history",
            "hospitalized",
        ),
        context_clues=("chronic", "diabetes", "hypertension", "asthma", "copd", "surgery", "prior"),
        description="Previous diagnoses, hospitalizations, surgeries",
        examples=("PMH: hypertension, type 2 diabetes.",),
    ),
    ElementSpec(
        name="Current medications",
        soap_section="S",
        patterns=(
            "current medications",
            "medications:",
            "meds:",
            "home medications",
            "currently taking",
            "currently on",
            "takes",
        ),
        context_clues=("mg", "daily", "twice", "bid", "tid", "prn", "tablet"),
        description="All medications the patient is currently taking",
        examples=("Meds: lisinopril 10 mg daily, metformin 500 mg BID.",),
    ),
    ElementSpec(
        name="Allergies",
        soap_section="S",
        patterns=(
            "allergies",
            "allergic to",
            "allergy",
            "nkda",
            "no known drug allergies",
            "no known allergies",
        ),
        context_clues=("penicillin", "sulfa", "latex", "hives", "anaphylaxis", "reaction"),
        description="Known allergies to medications, foods, or environmental factors",
        examples=("Allergies: penicillin (rash).", "NKDA"),
    ),
    ElementSpec(
        name="Vital signs",
        soap_section="O",
        patterns=(
            "vital signs",
            "vitals",
            "blood pressure",
            "heart rate",
            "pulse",
            "respiratory rate",
            "temperature",
            "spo2",
            "o2 sat",
        ),
        context_clues=("mmhg", "bpm", "afebrile", "febrile", "room air"),
        regex=VITAL_SIGNS_REGEX,
        numeric_markers=("bp", "hr", "temp", "rr"),
        description="Temperature, blood pressure, pulse, respiratory rate, etc.",
        examples=("BP 120/80 mmHg, HR 72, RR 16, Temp 98.6 F, SpO2 98% on RA",),
    ),
    ElementSpec(
        name="Physical examination findings",
        soap_section="O",
        patterns=(
            "physical exam",
            "physical examination",
            "on exam",
            "on examination",
            "exam:",
            "auscultation",
            "palpation",
            "lungs clear",
            "tender",
            "no acute distress",
        ),
        context_clues=("murmur", "swelling", "edema", "erythema", "rales", "wheez", "abdomen", "normal"),
        description="Results of the practitioner's examination",
        examples=("Lungs clear to auscultation bilaterally.",),
    ),
    ElementSpec(
        name="Lab results",
        soap_section="O",
        patterns=(
            "lab results",
            "labs",
            "laboratory",
            "cbc",
            "bmp",
            "cmp",
            "wbc",
            "hemoglobin",
            "troponin",
            "glucose",
            "a1c",
            "ekg",
            "ecg",
            "x-ray",
            "imaging",
        ),
        context_clues=("elevated", "within normal limits", "wnl", "negative", "positive", "result", "level"),
        description="Relevant laboratory findings and interpretations",
        examples=("Labs: WBC 12.1, troponin negative.",),
    ),
    ElementSpec(
        name="Diagnosis",
        soap_section="A",
        patterns=(
            "diagnosis",
            "diagnosed with",
            "impression",
            "assessment",
            "consistent with",
            "differential",
            "likely",
            "suspect",
            "rule out",
            "r/o",
        ),
        context_clues=("acute", "chronic", "probable", "possible", "secondary to", "exacerbation"),
        description="Clinical assessment and differential diagnoses",
        examples=("Impression: community-acquired pneumonia.",),
    ),
    ElementSpec(
        name="Treatment plan",
        soap_section="P",
        patterns=(
            "treatment plan",
            "plan:",
            "will start",
            "start",
            "prescribe",
            "prescribed",
            "continue",
            "discontinue",
            "increase",
            "therapy",
            "recommend",
            "refer",
        ),
        context_clues=("mg", "daily", "medication", "dose", "regimen", "treatment"),
        description="Medications, therapies, and interventions",
        examples=("Start amoxicillin 500 mg TID for 10 days.",),
    ),
    ElementSpec(
        name="Follow-up instructions",
        soap_section="P",
        patterns=(
            "follow up",
            "follow-up",
            "followup",
            "return to clinic",
            "return if",
            "return in",
            "rtc",
            "recheck",
            "schedule",
        ),
        context_clues=("weeks", "months", "education", "instructed", "advised", "call", "worsen"),
        description="Next steps and patient education",
        examples=("Follow up in 2 weeks or sooner if symptoms worsen.",),
    ),
)

REQUIRED_ELEMENTS: tuple[str, ...] = tuple(spec.name for spec in ELEMENT_SPECS)


__all__ = [
    "ELEMENT_SPECS",
    "ElementSpec",
    "REQUIRED_ELEMENTS",
    "SOAP_SECTION_LABELS",
    "SOAP_TAGS",
    "SoapTag",
    "VITAL_SIGNS_REGEX",
]
