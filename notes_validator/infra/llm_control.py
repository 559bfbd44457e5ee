"""Process-wide gate and retry pacing for outbound LLM requests."""

from __future__ import annotations

import random
import threading
import time
from contextlib import contextmanager
from email.utils import parsedate_to_datetime
from functools import lru_cache
from typing import Iterator, Mapping

from notes_validator.common.exceptions import LLMError
from notes_validator.infra.settings import get_infra_settings
from observability.metrics import get_metrics_client


class LLMGate:
    """Bounded number of in-flight LLM requests shared by all analyzer threads."""

    def __init__(self, limit: int) -> None:
        self.limit = max(1, limit)
        self._semaphore = threading.BoundedSemaphore(self.limit)
        self._lock = threading.Lock()
        self._in_flight = 0

    @property
    def in_flight(self) -> int:
        return self._in_flight

    @contextmanager
    def slot(self, timeout: float | None = None) -> Iterator[None]:
        """Hold one slot; raise `LLMError` when none frees up within *timeout* seconds."""
        waited_from = time.perf_counter()
        if not self._semaphore.acquire(timeout=timeout):
            raise LLMError(f"Timed out after {timeout:.2f}s waiting for an LLM slot (limit={self.limit})")
        with self._lock:
            self._in_flight += 1
        get_metrics_client().timing("llm.gate_wait", (time.perf_counter() - waited_from) * 1000)
        try:
            yield
        finally:
            with self._lock:
                self._in_flight -= 1
            self._semaphore.release()


@lru_cache(maxsize=1)
def get_llm_gate() -> LLMGate:
    return LLMGate(get_infra_settings().llm_concurrency)


def llm_slot(timeout: float | None = None):
    """Hold one slot of the process-wide gate for the duration of a request."""
    return get_llm_gate().slot(timeout)


def parse_retry_after_seconds(headers: Mapping[str, str]) -> float | None:
    """Seconds to wait from a Retry-After header given as delta-seconds or an HTTP date."""
    value = (headers.get("retry-after") or headers.get("Retry-After") or "").strip()
    if not value:
        return None
    try:
        return max(0.0, float(value))
    except ValueError:
        pass
    try:
        retry_at = parsedate_to_datetime(value)
    except (TypeError, ValueError):
        return None
    return max(0.0, retry_at.timestamp() - time.time())


def retry_delay(attempt: int, headers: Mapping[str, str] | None = None, *, base: float = 0.75, cap: float = 10.0) -> float:
    """Server-requested delay when given, else capped exponential backoff with jitter."""
    requested = parse_retry_after_seconds(headers or {})
    if requested is not None:
        return min(cap, requested)
    return min(cap, base * (2 ** max(0, attempt)) + random.uniform(0.0, base))


__all__ = [
    "LLMGate",
    "get_llm_gate",
    "llm_slot",
    "parse_retry_after_seconds",
    "retry_delay",
]
