"""Lazily initialized external capabilities with a cached outcome."""

from __future__ import annotations

import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum

from notes_validator.catalog import SoapTag
from notes_validator.common.logger import get_logger

logger = get_logger("capabilities")


class CapabilityState(str, Enum):
    UNINITIALIZED = "uninitialized"
    READY = "ready"
    FAILED = "failed"


@dataclass(frozen=True)
class ExtractionResult:
    """Answer span returned by a semantic capability."""

    span: str | None
    confidence: float
    section: SoapTag | None = None


class Capability(ABC):
    """One external dependency whose initialization is attempted at most once.

    Concurrent callers during the first initialization block on the lock and
    then observe the cached READY/FAILED state; a failure is never retried.
    """

    name: str = "capability"

    def __init__(self) -> None:
        self._state = CapabilityState.UNINITIALIZED
        self._failure: str | None = None
        self._lock = threading.Lock()

    @property
    def state(self) -> CapabilityState:
        return self._state

    @property
    def failure_reason(self) -> str | None:
        return self._failure

    def ensure_ready(self) -> bool:
        if self._state is CapabilityState.UNINITIALIZED:
            with self._lock:
                if self._state is CapabilityState.UNINITIALIZED:
                    self._state = self._try_initialize()
        return self._state is CapabilityState.READY

    def _try_initialize(self) -> CapabilityState:
        try:
            self._initialize()
        except Exception as exc:
            self._failure = f"{type(exc).__name__}: {exc}"
            logger.warning("%s capability unavailable; using fallback tiers (%s)", self.name, self._failure)
            return CapabilityState.FAILED
        logger.info("%s capability ready", self.name)
        return CapabilityState.READY

    @abstractmethod
    def _initialize(self) -> None:
        """Acquire the underlying resource; raise on failure."""
        ...


__all__ = ["Capability", "CapabilityState", "ExtractionResult"]
