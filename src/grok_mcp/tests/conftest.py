"""Shared fixtures: a recording stub upstream and wired clients/contexts."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import httpx
import orjson
import pytest
from pydantic import SecretStr

from grok_mcp.cache import ResponseCache
from grok_mcp.client import GrokClient
from grok_mcp.context import ServerContext, build_context
from grok_mcp.foundation.config import GrokSettings, LimiterSettings, UpstreamConfig, clear_settings_cache
from grok_mcp.observability import configure_logging
from grok_mcp.runtime import Limiter

Handler = Callable[[httpx.Request], Any]


def completion(content: str | None, *, model: str = "grok-test", citations: list[object] | None = None) -> dict[str, object]:
    body: dict[str, object] = {
        "id": "cmpl-1",
        "object": "chat.completion",
        "created": 1,
        "model": model,
        "choices": [{"index": 0, "message": {"role": "assistant", "content": content}, "finish_reason": "stop"}],
        "usage": {"prompt_tokens": 1, "completion_tokens": 1, "total_tokens": 2},
    }
    if citations is not None:
        body["citations"] = citations
    return body


def echo_model(request: httpx.Request) -> httpx.Response:
    """Answer with the model the caller asked for."""
    body = orjson.loads(request.content)
    return httpx.Response(200, json=completion(f"Answered by {body['model']}", model=body["model"]))


class StubUpstream:
    """Recording stand-in for the Grok API, used as an httpx.MockTransport handler."""

    def __init__(self, chat: Handler = echo_model, models: Handler | None = None) -> None:
        self.chat = chat
        self.models = models or (lambda r: httpx.Response(404, json={"error": "Not found"}))
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> Any:
        self.requests.append(request)
        if request.url.path.endswith("/chat/completions"):
            return self.chat(request)
        if request.url.path.endswith("/models"):
            return self.models(request)
        return httpx.Response(404, json={"error": {"message": "no route"}})

    @property
    def calls(self) -> int:
        return len(self.requests)

    def bodies(self) -> list[dict[str, Any]]:
        return [orjson.loads(r.content) for r in self.requests if r.content]

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)


@pytest.fixture(autouse=True)
def quiet_logging() -> None:
    configure_logging(format="none")


@pytest.fixture(autouse=True)
def fresh_settings(monkeypatch: pytest.MonkeyPatch) -> None:
    for var in ("SHARED_SECRET", "GROK_MODEL", "GROK_SEARCH_MODE", "XAI_BASE_URL", "LOG_LEVEL", "LOG_FORMAT"):
        monkeypatch.delenv(var, raising=False)
    clear_settings_cache()


@pytest.fixture
def upstream() -> StubUpstream:
    return StubUpstream()


@pytest.fixture
def config() -> UpstreamConfig:
    return UpstreamConfig(api_key=SecretStr("test-key"), base_url="https://api.test/v1")


def make_client(upstream: StubUpstream, config: UpstreamConfig, **kw: Any) -> GrokClient:
    kw.setdefault("limiter", Limiter(max_concurrent=2, min_interval=0.0))
    kw.setdefault("cache", ResponseCache())
    return GrokClient(config, transport=upstream.transport(), **kw)


@pytest.fixture
def client(upstream: StubUpstream, config: UpstreamConfig) -> GrokClient:
    return make_client(upstream, config)


def make_settings(**overrides: Any) -> GrokSettings:
    values: dict[str, Any] = {
        "XAI_API_KEY": "test-key",
        "XAI_BASE_URL": "https://api.test/v1",
        "limiter": LimiterSettings(min_interval=0.0),
    }
    values.update(overrides)
    return GrokSettings(_env_file=None, **values)


def make_context(upstream: StubUpstream, **overrides: Any) -> ServerContext:
    return build_context(make_settings(**overrides), transport=upstream.transport())


@pytest.fixture
def context(upstream: StubUpstream) -> ServerContext:
    return make_context(upstream)
