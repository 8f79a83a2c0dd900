"""HTTP client for the local text-generation backend."""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Callable, Protocol

import httpx
from pydantic import BaseModel, ValidationError

from docqa.errors import DocQAError, ErrorKind
from docqa.metrics.observability import PipelineMetrics, get_logger
from docqa.models import GenerationReply, GenerationRequest, SamplingOptions

LOGGER = get_logger("generation")


class GenerationError(DocQAError):
    """Base class for failures talking to the generation backend."""

    kind = ErrorKind.UPSTREAM


class BackendUnreachable(GenerationError):
    """The backend could not be reached at the transport level."""


class BackendTimeout(GenerationError):
    """The backend did not answer within the configured timeout."""


class BackendError(GenerationError):
    """The backend answered with a non-success HTTP status."""

    def __init__(self, status_code: int, body: str) -> None:
        super().__init__(f"Generation backend error {status_code}: {body}")
        self.status_code = status_code
        self.body = body


class MalformedBackendResponse(GenerationError):
    """The backend answered 2xx but the payload could not be decoded."""


@dataclass(frozen=True)
class GenerationConfig:
    """Configuration for answer generation."""

    base_url: str = "http://localhost:11434"
    generate_path: str = "/api/generate"
    model: str = "llama3.2"
    temperature: float = 0.0
    top_p: float = 0.95
    force_json: bool = True
    timeout_seconds: float = 60.0

    @property
    def endpoint(self) -> str:
        return f"{self.base_url.rstrip('/')}/{self.generate_path.lstrip('/')}"


class GenerationBackend(Protocol):
    """Protocol describing generation behaviour."""

    def generate(self, *, model: str, prompt: str, force_json: bool = True) -> str:
        """Return the raw text produced by the backend for ``prompt``."""


class _GenerateResponse(BaseModel):
    response: str
    done: bool = False


class OllamaGenerator:
    """Single-attempt client for an Ollama-compatible ``/api/generate`` endpoint."""

    def __init__(self, config: GenerationConfig | None = None, client: httpx.Client | None = None) -> None:
        self._config = config or GenerationConfig()
        self._client = client

    @property
    def config(self) -> GenerationConfig:
        return self._config

    def build_request(self, *, model: str, prompt: str, force_json: bool = True) -> GenerationRequest:
        return GenerationRequest(
            model=model,
            prompt=prompt,
            stream=False,
            format="json" if force_json else None,
            options=SamplingOptions(temperature=self._config.temperature, top_p=self._config.top_p),
        )

    def generate(self, *, model: str, prompt: str, force_json: bool = True) -> str:
        request = self.build_request(model=model, prompt=prompt, force_json=force_json)
        reply = self.send(request)
        return reply.response

    def send(self, request: GenerationRequest) -> GenerationReply:
        LOGGER.info(
            "generation.request",
            endpoint=self._config.endpoint,
            model=request.model,
            prompt_chars=len(request.prompt),
            format=request.format,
        )
        start = time.perf_counter()
        try:
            response = self._post(request)
        except httpx.TimeoutException as exc:
            raise self._fail(
                BackendTimeout(f"Generation backend timed out after {self._config.timeout_seconds}s: {exc}")
            ) from exc
        except httpx.TransportError as exc:
            raise self._fail(BackendUnreachable(f"Cannot reach generation backend: {exc}")) from exc
        finally:
            PipelineMetrics.observe_generation(time.perf_counter() - start)

        if not response.is_success:
            raise self._fail(BackendError(response.status_code, response.text))

        try:
            decoded = _GenerateResponse.model_validate(response.json())
        except (ValueError, ValidationError) as exc:
            raise self._fail(MalformedBackendResponse(f"Invalid generation backend response: {exc}")) from exc

        LOGGER.info(
            "generation.complete",
            model=request.model,
            done=decoded.done,
            response_chars=len(decoded.response),
            duration_seconds=time.perf_counter() - start,
        )
        return GenerationReply(response=decoded.response, done=decoded.done)

    def _post(self, request: GenerationRequest) -> httpx.Response:
        payload = request.to_payload()
        if self._client is not None:
            return self._client.post(self._config.endpoint, json=payload, timeout=self._config.timeout_seconds)
        with httpx.Client(timeout=self._config.timeout_seconds) as client:
            return client.post(self._config.endpoint, json=payload)

    @staticmethod
    def _fail(error: GenerationError) -> GenerationError:
        PipelineMetrics.record_backend_error(type(error).__name__)
        LOGGER.error("generation.error", error=type(error).__name__, detail=str(error))
        return error


@dataclass(frozen=True)
class RetryPolicy:
    """Bounded exponential backoff for transport-level failures."""

    max_attempts: int = 1
    backoff_seconds: float = 0.5
    max_backoff_seconds: float = 8.0
    retry_on: tuple[type[GenerationError], ...] = (BackendUnreachable, BackendTimeout)

    def delay_for(self, attempt: int) -> float:
        """Delay before retry number ``attempt`` (1-based)."""

        return min(self.backoff_seconds * (2 ** (attempt - 1)), self.max_backoff_seconds)


class RetryingGenerator:
    """Wrap a backend and retry it on transport failures only."""

    def __init__(
        self,
        inner: GenerationBackend,
        policy: RetryPolicy | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._inner = inner
        self._policy = policy or RetryPolicy()
        self._sleep = sleep

    def generate(self, *, model: str, prompt: str, force_json: bool = True) -> str:
        attempts = max(1, self._policy.max_attempts)
        for attempt in range(1, attempts):
            try:
                return self._inner.generate(model=model, prompt=prompt, force_json=force_json)
            except self._policy.retry_on as exc:
                delay = self._policy.delay_for(attempt)
                LOGGER.warning(
                    "generation.retry",
                    attempt=attempt,
                    max_attempts=attempts,
                    delay_seconds=delay,
                    error=type(exc).__name__,
                )
                self._sleep(delay)
        return self._inner.generate(model=model, prompt=prompt, force_json=force_json)
