"""Tests for the generation backend client."""

from __future__ import annotations

import json

import httpx
import pytest

from docqa.errors import ErrorKind
from docqa.services.generation import (
    BackendError,
    BackendTimeout,
    BackendUnreachable,
    GenerationConfig,
    MalformedBackendResponse,
    OllamaGenerator,
    RetryingGenerator,
    RetryPolicy,
)


def make_generator(handler, **config) -> OllamaGenerator:
    client = httpx.Client(transport=httpx.MockTransport(handler))
    return OllamaGenerator(GenerationConfig(**config), client=client)


def test_request_body_matches_wire_contract() -> None:
    captured: dict = {}

    def handler(request: httpx.Request) -> httpx.Response:
        captured["url"] = str(request.url)
        captured["method"] = request.method
        captured["body"] = json.loads(request.content)
        return httpx.Response(200, json={"response": '{"answer": "ok"}', "done": True})

    generator = make_generator(handler)
    text = generator.generate(model="llama3.2", prompt="PROMPT", force_json=True)

    assert text == '{"answer": "ok"}'
    assert captured["method"] == "POST"
    assert captured["url"] == "http://localhost:11434/api/generate"
    assert captured["body"] == {
        "model": "llama3.2",
        "prompt": "PROMPT",
        "stream": False,
        "format": "json",
        "options": {"temperature": 0.0, "top_p": 0.95},
    }


def test_format_hint_omitted_when_not_forced() -> None:
    bodies: list[dict] = []

    def handler(request: httpx.Request) -> httpx.Response:
        bodies.append(json.loads(request.content))
        return httpx.Response(200, json={"response": "plain", "done": True})

    generator = make_generator(handler, base_url="http://ollama:11434/")
    assert generator.generate(model="m", prompt="p", force_json=False) == "plain"
    assert "format" not in bodies[0]
    assert bodies[0]["stream"] is False


def test_build_request_is_fresh_each_time() -> None:
    generator = OllamaGenerator()
    first = generator.build_request(model="m", prompt="one")
    second = generator.build_request(model="m", prompt="two")
    assert first is not second
    assert first.to_payload()["prompt"] == "one"
    assert second.options.temperature == 0.0


def test_done_flag_is_not_required() -> None:
    generator = make_generator(lambda request: httpx.Response(200, json={"response": "partial", "done": False}))
    reply = generator.send(generator.build_request(model="m", prompt="p"))
    assert reply.response == "partial"
    assert reply.done is False


def test_non_success_status_raises_backend_error_with_body() -> None:
    generator = make_generator(lambda request: httpx.Response(500, text="model not loaded"))
    with pytest.raises(BackendError) as info:
        generator.generate(model="m", prompt="p")
    assert info.value.status_code == 500
    assert info.value.body == "model not loaded"
    assert "model not loaded" in str(info.value)
    assert info.value.kind is ErrorKind.UPSTREAM


def test_transport_failure_raises_backend_unreachable() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(BackendUnreachable):
        make_generator(handler).generate(model="m", prompt="p")


def test_timeout_raises_backend_timeout() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    with pytest.raises(BackendTimeout):
        make_generator(handler, timeout_seconds=0.5).generate(model="m", prompt="p")


@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(200, text="<html>not json</html>"),
        httpx.Response(200, json={"done": True}),
        httpx.Response(200, json={"response": 42, "done": True}),
        httpx.Response(200, json=["response"]),
    ],
)
def test_undecodable_body_raises_malformed_response(response: httpx.Response) -> None:
    generator = make_generator(lambda request: response)
    with pytest.raises(MalformedBackendResponse):
        generator.generate(model="m", prompt="p")


class FlakyBackend:
    def __init__(self, failures: list[Exception], reply: str = "ok") -> None:
        self.failures = failures
        self.reply = reply
        self.calls = 0

    def generate(self, *, model: str, prompt: str, force_json: bool = True) -> str:
        self.calls += 1
        if self.failures:
            raise self.failures.pop(0)
        return self.reply


def test_default_policy_makes_a_single_attempt() -> None:
    backend = FlakyBackend([BackendUnreachable("down")])
    with pytest.raises(BackendUnreachable):
        RetryingGenerator(backend, sleep=lambda _: None).generate(model="m", prompt="p")
    assert backend.calls == 1


def test_retries_transport_failures_with_backoff() -> None:
    delays: list[float] = []
    backend = FlakyBackend([BackendUnreachable("down"), BackendTimeout("slow")])
    policy = RetryPolicy(max_attempts=3, backoff_seconds=0.5, max_backoff_seconds=0.75)
    result = RetryingGenerator(backend, policy, sleep=delays.append).generate(model="m", prompt="p")
    assert result == "ok"
    assert backend.calls == 3
    assert delays == [0.5, 0.75]


def test_does_not_retry_backend_errors() -> None:
    backend = FlakyBackend([BackendError(400, "bad request")])
    policy = RetryPolicy(max_attempts=5)
    with pytest.raises(BackendError):
        RetryingGenerator(backend, policy, sleep=lambda _: None).generate(model="m", prompt="p")
    assert backend.calls == 1


def test_gives_up_after_max_attempts() -> None:
    backend = FlakyBackend([BackendUnreachable("1"), BackendUnreachable("2"), BackendUnreachable("3")])
    with pytest.raises(BackendUnreachable, match="2"):
        RetryingGenerator(backend, RetryPolicy(max_attempts=2), sleep=lambda _: None).generate(model="m", prompt="p")
    assert backend.calls == 2
