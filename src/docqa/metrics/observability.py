"""Observability helpers for DocQA."""

from __future__ import annotations

import logging

import structlog
from prometheus_client import Counter, Histogram

_logger_configured = False


def configure_logging(level: int | str = logging.INFO) -> None:
    global _logger_configured  # noqa: PLW0603 - module-level guard
    if _logger_configured:
        return
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO
    logging.basicConfig(level=level, format="%(message)s")
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
    _logger_configured = True


def bind_correlation_id(correlation_id: str) -> None:
    structlog.contextvars.bind_contextvars(correlation_id=correlation_id)


def clear_correlation_id() -> None:
    structlog.contextvars.clear_contextvars()


def get_logger(name: str = "docqa") -> structlog.BoundLogger:
    configure_logging()
    return structlog.get_logger(name)


class PipelineMetrics:
    """Prometheus metrics for pipeline stages."""

    selection_latency = Histogram(
        "docqa_selection_duration_seconds",
        "Time spent selecting documents for a query.",
        buckets=(0.001, 0.005, 0.01, 0.05, 0.1, 0.5, 1.0),
    )
    selected_file_count = Histogram(
        "docqa_selected_file_count",
        "Number of documents included in a prompt.",
        buckets=(0, 1, 2, 3, 5, 8, 13, 21),
    )
    generation_latency = Histogram(
        "docqa_generation_duration_seconds",
        "Time spent waiting on the generation backend.",
        buckets=(0.1, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0),
    )
    backend_errors = Counter(
        "docqa_backend_errors_total",
        "Generation backend failures by error type.",
        ["error"],
    )
    normalization_fallbacks = Counter(
        "docqa_normalization_fallbacks_total",
        "Model replies that were not valid JSON and were wrapped.",
    )
    query_outcomes = Counter(
        "docqa_query_outcomes_total",
        "Completed queries by outcome.",
        ["outcome"],
    )

    @classmethod
    def observe_selection(cls, duration_seconds: float, file_count: int) -> None:
        cls.selection_latency.observe(duration_seconds)
        cls.selected_file_count.observe(file_count)

    @classmethod
    def observe_generation(cls, duration_seconds: float) -> None:
        cls.generation_latency.observe(duration_seconds)

    @classmethod
    def record_backend_error(cls, error_name: str) -> None:
        cls.backend_errors.labels(error=error_name).inc()

    @classmethod
    def record_normalization_fallback(cls) -> None:
        cls.normalization_fallbacks.inc()

    @classmethod
    def record_query(cls, outcome: str) -> None:
        cls.query_outcomes.labels(outcome=outcome).inc()


__all__ = [
    "PipelineMetrics",
    "bind_correlation_id",
    "clear_correlation_id",
    "configure_logging",
    "get_logger",
]
