"""Filename/keyword heuristic that picks the documents for a query."""

from __future__ import annotations

import re
import time
from dataclasses import dataclass
from pathlib import Path
from typing import List, Protocol, Sequence

from docqa.documents import list_text_files
from docqa.errors import DocQAError, ErrorKind
from docqa.metrics.observability import PipelineMetrics, get_logger

_TOKEN_PATTERN = re.compile(r"[a-z0-9]+")


class NoRelevantFiles(DocQAError):
    """Raised when a category folder has nothing to reason over."""

    kind = ErrorKind.CLIENT


@dataclass(frozen=True)
class SelectionConfig:
    """Configuration for document selection."""

    extension: str = ".txt"
    broadening_tokens: tuple[str, ...] = ("invoice",)
    fallback_limit: int = 2


class MatchStrategy(Protocol):
    """Decide whether a file stem is referenced by a query."""

    def matches(self, query: str, stem: str) -> bool:
        """Both arguments are already lower-cased."""


class SubstringMatchStrategy:
    """Match when the stem occurs anywhere in the query."""

    def matches(self, query: str, stem: str) -> bool:
        return bool(stem) and stem in query


class TokenMatchStrategy:
    """Match when every alphanumeric token of the stem is a query token."""

    def matches(self, query: str, stem: str) -> bool:
        stem_tokens = _tokens(stem)
        if not stem_tokens:
            return False
        return stem_tokens.issubset(_tokens(query))


def _tokens(text: str) -> set[str]:
    return set(_TOKEN_PATTERN.findall(text))


MATCH_STRATEGIES: dict[str, type[MatchStrategy]] = {
    "substring": SubstringMatchStrategy,
    "token": TokenMatchStrategy,
}


class RelevanceSelector:
    """Select the text files of a folder that a query refers to."""

    def __init__(self, config: SelectionConfig | None = None, strategy: MatchStrategy | None = None) -> None:
        self._config = config or SelectionConfig()
        self._strategy = strategy or SubstringMatchStrategy()
        self._logger = get_logger("selection")

    def select(self, directory: Path, query: str) -> List[Path]:
        start = time.perf_counter()
        candidates = list_text_files(directory, self._config.extension)
        lowered = query.lower()
        broadened = any(token and token.lower() in lowered for token in self._config.broadening_tokens)
        matches = [
            path for path in candidates if broadened or self._strategy.matches(lowered, path.stem.lower())
        ]
        if not matches and candidates:
            matches = candidates[: max(1, self._config.fallback_limit)]
            self._logger.info(
                "selection.fallback",
                directory=str(directory),
                file_count=len(matches),
            )
        duration = time.perf_counter() - start
        PipelineMetrics.observe_selection(duration, len(matches))
        self._logger.info(
            "selection.complete",
            directory=str(directory),
            candidate_count=len(candidates),
            selected=[path.name for path in matches],
            broadened=broadened,
            duration_seconds=duration,
        )
        return matches


def build_strategy(name: str) -> MatchStrategy:
    try:
        return MATCH_STRATEGIES[name]()
    except KeyError as exc:
        raise ValueError(f"Unknown selection strategy: {name}") from exc


def select_relevant_files(
    directory: Path,
    query: str,
    *,
    config: SelectionConfig | None = None,
    strategy: MatchStrategy | None = None,
) -> Sequence[Path]:
    """Convenience helper for tests and ad-hoc selection."""

    return RelevanceSelector(config=config, strategy=strategy).select(directory, query)
