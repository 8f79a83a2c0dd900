"""Query orchestration combining selection, prompting, generation and normalization."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping

from docqa.documents import (
    DEFAULT_CATEGORY,
    DEFAULT_CATEGORY_DIRS,
    ensure_category_directory,
    load_documents,
    resolve_category,
)
from docqa.errors import DocQAError
from docqa.metrics.observability import PipelineMetrics, get_logger
from docqa.models import ApiResult, Query
from docqa.selection import NoRelevantFiles, RelevanceSelector
from docqa.services.generation import GenerationBackend, OllamaGenerator
from docqa.services.normalizer import normalize
from docqa.services.prompt import PromptBuilder, get_template

DEFAULT_CATEGORY_TEMPLATES: Mapping[str, str] = {"invoices": "invoice_qa"}


@dataclass(frozen=True)
class QueryConfig:
    """Where documents live and which model answers questions about them."""

    data_dir: Path = Path("./data")
    categories: Mapping[str, str] = field(default_factory=lambda: dict(DEFAULT_CATEGORY_DIRS))
    default_category: str = DEFAULT_CATEGORY
    encoding: str = "utf-8"
    model: str = "llama3.2"
    force_json: bool = True
    category_templates: Mapping[str, str] = field(default_factory=lambda: dict(DEFAULT_CATEGORY_TEMPLATES))
    default_template: str = "general_qa"


class QueryService:
    """Orchestrates the document question-answering pipeline for one request at a time.

    The service holds no per-request state, so a single instance can serve
    concurrent requests. Each category is answered with the prompt template
    named in ``config.category_templates`` (``default_template`` otherwise);
    passing ``prompt_builder`` uses that one builder for every category.
    """

    def __init__(
        self,
        config: QueryConfig | None = None,
        selector: RelevanceSelector | None = None,
        prompt_builder: PromptBuilder | None = None,
        generator: GenerationBackend | None = None,
    ) -> None:
        self._config = config or QueryConfig()
        self._selector = selector or RelevanceSelector()
        self._prompt_builder = prompt_builder
        self._category_builders = {
            name.strip().lower(): PromptBuilder(get_template(template))
            for name, template in self._config.category_templates.items()
        }
        self._default_builder = PromptBuilder(get_template(self._config.default_template))
        self._generator = generator or OllamaGenerator()
        self._logger = get_logger("query")

    @property
    def config(self) -> QueryConfig:
        return self._config

    def prompt_builder_for(self, category: str) -> PromptBuilder:
        if self._prompt_builder is not None:
            return self._prompt_builder
        return self._category_builders.get(category.strip().lower(), self._default_builder)

    def answer(self, question: str, *, category: str | None = None) -> ApiResult:
        return self.answer_query(Query(text=question, category=category))

    def answer_query(self, query: Query) -> ApiResult:
        start = time.perf_counter()
        used_files: list[str] = []
        try:
            location = resolve_category(
                query.category,
                data_dir=self._config.data_dir,
                categories=self._config.categories,
                default_category=self._config.default_category,
            )
            directory = ensure_category_directory(location)
            paths = self._selector.select(directory, query.text)
            if not paths:
                raise NoRelevantFiles(f"No relevant files found in category '{location.name}'")
            documents = load_documents(paths, encoding=self._config.encoding)
            used_files = [document.filename for document in documents]
            prompt = self.prompt_builder_for(location.name).build(documents, query.text)
            raw = self._generator.generate(model=self._config.model, prompt=prompt, force_json=self._config.force_json)
        except DocQAError as exc:
            exc.with_used_files(used_files)
            PipelineMetrics.record_query(exc.kind.value)
            self._logger.error(
                "query.error",
                category=query.category,
                error=type(exc).__name__,
                kind=exc.kind.value,
                detail=str(exc),
                used_files=used_files,
            )
            raise

        answer = normalize(raw)
        latency_ms = (time.perf_counter() - start) * 1000
        PipelineMetrics.record_query("ok")
        self._logger.info(
            "query.complete",
            category=location.name,
            used_files=used_files,
            latency_ms=latency_ms,
        )
        return ApiResult(answer=answer, used_files=used_files, error=None)
