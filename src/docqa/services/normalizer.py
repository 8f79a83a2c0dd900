"""Turn a raw model reply into a structured JSON value."""

from __future__ import annotations

import json
from typing import Any

from docqa.metrics.observability import PipelineMetrics, get_logger

LOGGER = get_logger("normalizer")


def _reject_constant(name: str) -> Any:
    raise ValueError(f"Non-standard JSON constant: {name}")


def normalize(raw_text: str) -> Any:
    """Parse ``raw_text`` as strict JSON, wrapping it as ``{"raw": raw_text}`` when that fails.

    ``NaN``, ``Infinity`` and ``-Infinity`` are not JSON and take the fallback.
    """

    try:
        return json.loads(raw_text, parse_constant=_reject_constant)
    except (TypeError, ValueError):
        PipelineMetrics.record_normalization_fallback()
        LOGGER.warning("normalize.fallback", response_chars=len(raw_text or ""))
        return {"raw": raw_text}
