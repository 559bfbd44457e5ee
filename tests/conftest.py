"""Shared fixtures for the notes validator test suite.

No test touches the network or downloads a model: capabilities are exercised
through fake encoders and fake LLM clients.
"""

import logging

import pytest

from notes_validator.analysis.analyzer import get_default_analyzer
from notes_validator.catalog import get_catalog
from observability.metrics import RegistryMetricsClient, reset_metrics_client, set_metrics_client


@pytest.fixture(autouse=True)
def _quiet_package_logger():
    """Keep INFO chatter out of captured CLI output."""
    package_logger = logging.getLogger("notes_validator")
    previous = package_logger.level
    package_logger.setLevel(logging.WARNING)
    yield
    package_logger.setLevel(previous)


@pytest.fixture(autouse=True)
def _reset_globals():
    reset_metrics_client()
    get_default_analyzer.cache_clear()
    yield
    reset_metrics_client()
    get_default_analyzer.cache_clear()


@pytest.fixture
def metrics():
    client = RegistryMetricsClient()
    set_metrics_client(client)
    return client


@pytest.fixture
def catalog():
    return get_catalog()


@pytest.fixture
def chest_pain_note():
    """Single-line note with no SOAP headers."""
    return (
        "Patient presents with chest pain. BP 120/80, HR 72. No known drug allergies. "
        "Will start aspirin 81mg daily and follow up in 2 weeks."
    )


@pytest.fixture
def full_note():
    """Headed note touching every required element."""
    return "\n".join(
        [
            "Subjective:",
            "Chief complaint: chest pain.",
            "The pain started 2 days ago and is worse with exertion.",
            "Past medical history: hypertension and type 2 diabetes.",
            "Current medications: lisinopril 10 mg daily, metformin 500 mg BID.",
            "Allergies: penicillin (rash).",
            "Objective:",
            "Vitals: BP 130/85 mmHg, HR 88, RR 16, Temp 98.6 F, SpO2 98% on RA.",
            "Physical exam: lungs clear to auscultation, no murmur.",
            "Labs: troponin negative, CBC within normal limits.",
            "Assessment:",
            "Diagnosis: atypical chest pain, likely musculoskeletal.",
            "Plan:",
            "Start ibuprofen 400 mg TID with food.",
            "Follow up in 2 weeks or sooner if symptoms worsen.",
        ]
    )


class FakeLLM:
    """Returns canned responses in order (the last one repeats) and records prompts."""

    def __init__(self, *responses, error=None):
        self.responses = list(responses) or ["NO"]
        self.error = error
        self.prompts = []

    def generate(self, prompt, **kwargs):
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        if len(self.responses) > 1:
            return self.responses.pop(0)
        return self.responses[0]


def keyword_encoder_loader(vocabulary):
    """Build an encoder loader whose vectors count vocabulary hits per dimension."""

    def loader(_model_name):
        def encode(text):
            lowered = text.lower()
            return [float(sum(1 for word in words if word in lowered)) for words in vocabulary]

        return encode

    return loader


@pytest.fixture
def fake_llm_factory():
    return FakeLLM
