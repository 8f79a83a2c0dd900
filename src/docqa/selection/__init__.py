"""Document selection."""

from .service import (
    MATCH_STRATEGIES,
    MatchStrategy,
    NoRelevantFiles,
    RelevanceSelector,
    SelectionConfig,
    SubstringMatchStrategy,
    TokenMatchStrategy,
    build_strategy,
    select_relevant_files,
)

__all__ = [
    "MATCH_STRATEGIES",
    "MatchStrategy",
    "NoRelevantFiles",
    "RelevanceSelector",
    "SelectionConfig",
    "SubstringMatchStrategy",
    "TokenMatchStrategy",
    "build_strategy",
    "select_relevant_files",
]
