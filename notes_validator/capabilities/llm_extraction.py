"""Yes/no element extraction through an LLM."""

from __future__ import annotations

from typing import Callable

from notes_validator.capabilities.base import Capability, ExtractionResult
from notes_validator.catalog import ElementSpec
from notes_validator.common.exceptions import CapabilityUnavailableError
from notes_validator.common.llm import LLMInterface

YES_PREFIX = "YES:"

EXTRACTION_PROMPT = """You are reviewing an excerpt of a clinical note.

Element: {element}
Definition: {description}

Does the excerpt document this element? If it does, answer on one line as
"YES: <the shortest verbatim excerpt that documents it>". If it does not,
answer "NO". Do not add anything else.

Excerpt:
\"\"\"
{text}
\"\"\"
"""


def parse_yes_response(response: str | None) -> tuple[bool, str | None]:
    """Apply the "YES: <excerpt>" convention; anything else is a negative answer."""
    cleaned = (response or "").strip()
    if not cleaned.startswith(YES_PREFIX):
        return False, None
    return True, cleaned[len(YES_PREFIX):].strip()


def build_extraction_prompt(text: str, spec: ElementSpec) -> str:
    return EXTRACTION_PROMPT.format(
        element=spec.name,
        description=spec.description or spec.name,
        text=text.strip(),
    )


class LLMExtractionCapability(Capability):
    """Wraps an `LLMInterface`; unavailable when no client can be built."""

    name = "llm"

    def __init__(
        self,
        llm: LLMInterface | None = None,
        *,
        factory: Callable[[], LLMInterface | None] | None = None,
    ) -> None:
        super().__init__()
        self._llm = llm
        self._factory = factory

    def _initialize(self) -> None:
        if self._llm is None and self._factory is not None:
            self._llm = self._factory()
        if self._llm is None:
            raise CapabilityUnavailableError(self.name, "no LLM client configured")

    def extract(self, text: str, spec: ElementSpec) -> ExtractionResult:
        if not self.ensure_ready() or self._llm is None:
            raise CapabilityUnavailableError(self.name, self.failure_reason)
        response = self._llm.generate(build_extraction_prompt(text, spec), temperature=0.0)
        present, excerpt = parse_yes_response(response)
        if not present:
            return ExtractionResult(span=None, confidence=0.0)
        return ExtractionResult(span=excerpt, confidence=1.0)


__all__ = [
    "EXTRACTION_PROMPT",
    "LLMExtractionCapability",
    "YES_PREFIX",
    "build_extraction_prompt",
    "parse_yes_response",
]
