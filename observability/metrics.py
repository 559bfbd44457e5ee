"""Metrics emission for tier outcomes, capability failures and timings.

The active client is process-global. ``METRICS_BACKEND`` picks it on first
use (``null`` by default, ``stdout`` or ``registry``); tests and the CLI
install one explicitly with `set_metrics_client`.
"""

from __future__ import annotations

import json
import os
import sys
import threading
from abc import ABC, abstractmethod
from collections import Counter, defaultdict
from datetime import datetime, timezone
from typing import Any, Callable

METRIC_PREFIX = "notes_validator"

TagKey = tuple[tuple[str, str], ...]


def _tag_key(tags: dict[str, str] | None) -> TagKey:
    return tuple(sorted((tags or {}).items()))


def _tag_label(key: TagKey) -> str:
    return ",".join(f"{k}={v}" for k, v in key)


class MetricsClient(ABC):
    """Counters and observations; timings are observations in milliseconds."""

    @abstractmethod
    def incr(self, name: str, tags: dict[str, str] | None = None, value: int = 1) -> None:
        ...

    @abstractmethod
    def observe(self, name: str, value: float, tags: dict[str, str] | None = None) -> None:
        ...

    def timing(self, name: str, value_ms: float, tags: dict[str, str] | None = None) -> None:
        self.observe(name, value_ms, tags)


class NullMetricsClient(MetricsClient):
    def incr(self, name: str, tags: dict[str, str] | None = None, value: int = 1) -> None:
        pass

    def observe(self, name: str, value: float, tags: dict[str, str] | None = None) -> None:
        pass


class StdoutMetricsClient(MetricsClient):
    """Writes one JSON line per data point to stderr."""

    def __init__(self, prefix: str = METRIC_PREFIX, stream: Any = None):
        self.prefix = prefix
        self.stream = stream

    def _write(self, kind: str, name: str, value: float, tags: dict[str, str] | None) -> None:
        line = json.dumps(
            {
                "ts": datetime.now(timezone.utc).isoformat(),
                "kind": kind,
                "metric": f"{self.prefix}.{name}",
                "value": value,
                "tags": dict(tags or {}),
            }
        )
        print(line, file=self.stream or sys.stderr)

    def incr(self, name: str, tags: dict[str, str] | None = None, value: int = 1) -> None:
        self._write("counter", name, value, tags)

    def observe(self, name: str, value: float, tags: dict[str, str] | None = None) -> None:
        self._write("observation", name, value, tags)


class RegistryMetricsClient(MetricsClient):
    """In-memory, thread-safe store that can be queried after a run."""

    def __init__(self, prefix: str = METRIC_PREFIX):
        self.prefix = prefix
        self._lock = threading.Lock()
        self._counters: Counter[tuple[str, TagKey]] = Counter()
        self._observations: dict[tuple[str, TagKey], list[float]] = defaultdict(list)

    def incr(self, name: str, tags: dict[str, str] | None = None, value: int = 1) -> None:
        with self._lock:
            self._counters[(name, _tag_key(tags))] += value

    def observe(self, name: str, value: float, tags: dict[str, str] | None = None) -> None:
        with self._lock:
            self._observations[(name, _tag_key(tags))].append(float(value))

    def counter_value(self, name: str, tags: dict[str, str] | None = None) -> float:
        with self._lock:
            return float(self._counters.get((name, _tag_key(tags)), 0))

    def export_json(self) -> dict[str, Any]:
        """Counters and observation summaries keyed by metric name, then by tag label."""
        counters: dict[str, dict[str, float]] = defaultdict(dict)
        observations: dict[str, dict[str, dict[str, float]]] = defaultdict(dict)
        with self._lock:
            for (name, key), count in self._counters.items():
                counters[name][_tag_label(key)] = float(count)
            for (name, key), values in self._observations.items():
                observations[name][_tag_label(key)] = {"count": len(values), "sum": sum(values)}
        return {"prefix": self.prefix, "counters": dict(counters), "observations": dict(observations)}

    def reset(self) -> None:
        with self._lock:
            self._counters.clear()
            self._observations.clear()


_BACKENDS: dict[str, Callable[[], MetricsClient]] = {
    "null": NullMetricsClient,
    "stdout": StdoutMetricsClient,
    "registry": RegistryMetricsClient,
}

_client: MetricsClient | None = None
_client_lock = threading.Lock()


def get_metrics_client() -> MetricsClient:
    global _client
    if _client is None:
        with _client_lock:
            if _client is None:
                backend = os.getenv("METRICS_BACKEND", "null").strip().lower()
                _client = _BACKENDS.get(backend, NullMetricsClient)()
    return _client


def set_metrics_client(client: MetricsClient) -> None:
    global _client
    _client = client


def reset_metrics_client() -> None:
    """Forget the active client; the next lookup reads METRICS_BACKEND again."""
    global _client
    _client = None


__all__ = [
    "METRIC_PREFIX",
    "MetricsClient",
    "NullMetricsClient",
    "RegistryMetricsClient",
    "StdoutMetricsClient",
    "get_metrics_client",
    "reset_metrics_client",
    "set_metrics_client",
]
