"""Wall-clock timing that reports into the active metrics client."""

from __future__ import annotations

import time
from contextlib import contextmanager
from typing import Iterator

from .metrics import get_metrics_client


class TimingContext:
    """Elapsed time of one block.

    Tags may be added inside the block (for example once the section strategy
    is known); they are read when the block exits.
    """

    def __init__(self, name: str, tags: dict[str, str] | None = None, emit_metric: bool = True):
        self.name = name
        self.tags: dict[str, str] = dict(tags or {})
        self.emit_metric = emit_metric
        self._started: float | None = None
        self._elapsed_ms: float | None = None

    @property
    def elapsed_ms(self) -> float:
        """Final duration after exit; running duration while inside the block."""
        if self._elapsed_ms is not None:
            return self._elapsed_ms
        if self._started is None:
            return 0.0
        return (time.perf_counter() - self._started) * 1000

    def start(self) -> "TimingContext":
        self._started = time.perf_counter()
        self._elapsed_ms = None
        return self

    def stop(self) -> float:
        self._elapsed_ms = self.elapsed_ms
        if self.emit_metric:
            get_metrics_client().timing(self.name, self._elapsed_ms, self.tags)
        return self._elapsed_ms


@contextmanager
def timed(name: str, tags: dict[str, str] | None = None, emit_metric: bool = True) -> Iterator[TimingContext]:
    """Time the enclosed block; the metric is emitted even when the block raises.

        with timed("note_analysis.duration") as timer:
            sections = analyzer.split(note)
            timer.tags["section_strategy"] = sections.strategy
    """
    ctx = TimingContext(name, tags, emit_metric).start()
    try:
        yield ctx
    finally:
        ctx.stop()
