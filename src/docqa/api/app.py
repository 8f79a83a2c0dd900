"""FastAPI application exposing the DocQA pipeline."""

from __future__ import annotations

from dataclasses import dataclass
from uuid import uuid4

from fastapi import Depends, FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from docqa.api.schemas import CategoriesResponse, CategoryInfo, QueryRequest, QueryResponse
from docqa.config import Settings, get_settings
from docqa.documents import resolve_category
from docqa.errors import DocQAError, ErrorKind
from docqa.metrics.observability import bind_correlation_id, clear_correlation_id, configure_logging, get_logger
from docqa.models import ApiResult
from docqa.selection import RelevanceSelector, SelectionConfig, build_strategy
from docqa.services.generation import (
    BackendTimeout,
    GenerationConfig,
    OllamaGenerator,
    RetryingGenerator,
    RetryPolicy,
)
from docqa.services.query import QueryConfig, QueryService

_KIND_STATUS = {
    ErrorKind.CLIENT: status.HTTP_400_BAD_REQUEST,
    ErrorKind.SERVER: status.HTTP_500_INTERNAL_SERVER_ERROR,
    ErrorKind.UPSTREAM: status.HTTP_502_BAD_GATEWAY,
}


@dataclass(frozen=True)
class AppDependencies:
    query_service: QueryService


def build_query_service(settings: Settings) -> QueryService:
    selector = RelevanceSelector(
        SelectionConfig(
            extension=settings.document_extension,
            broadening_tokens=settings.broadening_tokens_tuple,
            fallback_limit=settings.selection_fallback_limit,
        ),
        strategy=build_strategy(settings.selection_strategy),
    )
    generator = RetryingGenerator(
        OllamaGenerator(
            GenerationConfig(
                base_url=settings.ollama_base_url,
                generate_path=settings.ollama_generate_path,
                model=settings.generator_model,
                temperature=settings.generator_temperature,
                top_p=settings.generator_top_p,
                force_json=settings.generator_force_json,
                timeout_seconds=settings.generator_timeout_seconds,
            ),
        ),
        RetryPolicy(
            max_attempts=settings.generator_max_attempts,
            backoff_seconds=settings.generator_backoff_seconds,
            max_backoff_seconds=settings.generator_backoff_max_seconds,
        ),
    )
    return QueryService(
        QueryConfig(
            data_dir=settings.data_dir,
            categories=settings.category_dirs,
            default_category=settings.default_category,
            encoding=settings.document_encoding,
            model=settings.generator_model,
            force_json=settings.generator_force_json,
            category_templates=settings.category_templates,
            default_template=settings.prompt_template,
        ),
        selector=selector,
        generator=generator,
    )


def _build_dependencies(settings: Settings) -> AppDependencies:
    return AppDependencies(query_service=build_query_service(settings))


def status_for_error(exc: DocQAError) -> int:
    if isinstance(exc, BackendTimeout):
        return status.HTTP_504_GATEWAY_TIMEOUT
    return _KIND_STATUS.get(exc.kind, status.HTTP_500_INTERNAL_SERVER_ERROR)


def create_app(*, settings: Settings | None = None, dependencies: AppDependencies | None = None) -> FastAPI:
    settings = settings or get_settings()
    deps = dependencies or _build_dependencies(settings)

    configure_logging(settings.log_level)
    logger = get_logger("api")
    app = FastAPI(title="DocQA API", version="0.1.0")
    app.state.dependencies = deps

    if settings.cors_allow_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=list(settings.cors_allow_origins),
            allow_methods=list(settings.cors_allow_methods),
            allow_headers=list(settings.cors_allow_headers),
        )

    @app.middleware("http")
    async def add_correlation_id(request: Request, call_next):  # type: ignore[override]
        correlation_id = request.headers.get("X-Request-ID", uuid4().hex)
        request.state.correlation_id = correlation_id
        bind_correlation_id(correlation_id)
        try:
            response = await call_next(request)
        finally:
            clear_correlation_id()
        response.headers["X-Correlation-ID"] = correlation_id
        return response

    @app.exception_handler(DocQAError)
    async def handle_pipeline_error(request: Request, exc: DocQAError) -> JSONResponse:
        correlation_id = getattr(request.state, "correlation_id", uuid4().hex)
        status_code = status_for_error(exc)
        logger.warning(
            "request.failed",
            correlation_id=correlation_id,
            error=type(exc).__name__,
            status_code=status_code,
        )
        result = ApiResult(answer=None, used_files=exc.used_files, error=str(exc))
        return JSONResponse(status_code=status_code, content=result.to_dict())

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
        correlation_id = getattr(request.state, "correlation_id", uuid4().hex)
        logger.error("unhandled.error", correlation_id=correlation_id, detail=str(exc))
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"answer": None, "used_files": [], "error": "Internal Server Error", "correlation_id": correlation_id},
        )

    def get_dependencies(request: Request) -> AppDependencies:
        return request.app.state.dependencies

    def get_query_service(dep: AppDependencies = Depends(get_dependencies)) -> QueryService:
        return dep.query_service

    # Plain def: the blocking backend call runs in the worker threadpool.
    @app.post("/query", response_model=QueryResponse)
    def query_documents(
        payload: QueryRequest,
        service: QueryService = Depends(get_query_service),
    ) -> QueryResponse:
        result = service.answer(payload.query, category=payload.category)
        return QueryResponse(answer=result.answer, used_files=list(result.used_files), error=result.error)

    @app.get("/categories", response_model=CategoriesResponse)
    async def list_categories() -> CategoriesResponse:
        infos = []
        for name in sorted(settings.category_dirs):
            location = resolve_category(
                name,
                data_dir=settings.data_dir,
                categories=settings.category_dirs,
                default_category=settings.default_category,
            )
            infos.append(
                CategoryInfo(name=name, directory=str(location.directory), exists=location.directory.is_dir()),
            )
        return CategoriesResponse(default_category=settings.default_category, categories=infos)

    @app.get("/metrics")
    async def metrics() -> Response:
        payload = generate_latest()
        return Response(content=payload, media_type=CONTENT_TYPE_LATEST)

    @app.get("/healthz")
    async def healthcheck() -> dict[str, str]:
        from docqa import __version__

        return {"status": "ok", "version": __version__, "environment": settings.environment}

    @app.head("/healthz")
    async def healthcheck_head() -> Response:
        return Response(status_code=status.HTTP_200_OK)

    @app.get("/livez")
    async def liveness() -> dict[str, str]:
        return {"status": "alive"}

    return app


def main() -> None:  # pragma: no cover - server entrypoint
    import uvicorn

    settings = get_settings()
    uvicorn.run(create_app(settings=settings), host=settings.api_host, port=settings.api_port)


app = create_app()
