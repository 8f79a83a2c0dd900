"""Shared domain models used across the DocQA pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Sequence


@dataclass(frozen=True)
class Document:
    """A text file read in full for a single request."""

    filename: str
    path: Path
    content: str


@dataclass(frozen=True)
class Query:
    """Free-text question plus an optional category selector."""

    text: str
    category: str | None = None


@dataclass(frozen=True)
class SamplingOptions:
    """Deterministic sampling settings sent with every generation request."""

    temperature: float = 0.0
    top_p: float = 0.95

    def to_payload(self) -> dict[str, float]:
        return {"temperature": self.temperature, "top_p": self.top_p}


@dataclass(frozen=True)
class GenerationRequest:
    """Body of a single non-streaming ``/api/generate`` call."""

    model: str
    prompt: str
    stream: bool = False
    format: str | None = "json"
    options: SamplingOptions | None = field(default_factory=SamplingOptions)

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "model": self.model,
            "prompt": self.prompt,
            "stream": self.stream,
        }
        if self.format:
            payload["format"] = self.format
        if self.options is not None:
            payload["options"] = self.options.to_payload()
        return payload


@dataclass(frozen=True)
class GenerationReply:
    """Decoded backend reply."""

    response: str
    done: bool


@dataclass(frozen=True)
class ApiResult:
    """Value returned to API callers: either an answer or an error."""

    answer: Any = None
    used_files: Sequence[str] = ()
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def to_dict(self) -> dict[str, Any]:
        return {
            "answer": self.answer,
            "used_files": list(self.used_files),
            "error": self.error,
        }
