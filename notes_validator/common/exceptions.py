"""Exception hierarchy for the notes validator."""

from __future__ import annotations


class NotesValidatorError(Exception):
    """Base error for the notes validation pipeline."""

    pass


class CatalogError(NotesValidatorError):
    """Pattern catalog construction or lookup error."""

    pass


class CapabilityUnavailableError(NotesValidatorError):
    """An external capability (embedding model, LLM) could not be initialized."""

    def __init__(self, capability: str, reason: str | None = None):
        self.capability = capability
        self.reason = reason
        message = f"{capability} capability unavailable"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class LLMError(NotesValidatorError):
    """LLM call failed (timeout, invalid response, etc.)."""

    pass
