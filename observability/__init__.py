"""Metrics, timing and structured logging shared by the analyzer and the CLI."""

from .logging_config import StructuredLogger, configure_logging, get_logger
from .metrics import (
    MetricsClient,
    NullMetricsClient,
    RegistryMetricsClient,
    StdoutMetricsClient,
    get_metrics_client,
    reset_metrics_client,
    set_metrics_client,
)
from .timing import TimingContext, timed

__all__ = [
    "MetricsClient",
    "NullMetricsClient",
    "RegistryMetricsClient",
    "StdoutMetricsClient",
    "StructuredLogger",
    "TimingContext",
    "configure_logging",
    "get_logger",
    "get_metrics_client",
    "reset_metrics_client",
    "set_metrics_client",
    "timed",
]
