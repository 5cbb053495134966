"""Async client for the xAI Grok chat-completion API.

All network calls share one pooled `httpx.AsyncClient`, go through the
`Limiter`, and (where idempotent) through the `ResponseCache`. Failures are
raised as `ExternalServiceError`, except for the advisory operations
(`get_models`, `test_connection`) which degrade to a default.

Example:
    >>> async with GrokClient(settings.upstream_config()) as client:
    ...     answer = await client.ask("What is MCP?")
    ...     results = await client.live_search(SearchRequest(query="grok 4"))
"""

from __future__ import annotations

import time
from types import TracebackType
from typing import Final

import httpx
import orjson
from pydantic import ValidationError as PydanticValidationError

from ..cache import ResponseCache, make_key
from ..foundation.config import SearchMode, UpstreamConfig
from ..foundation.errors import Err, ExternalServiceError, Ok, Result, UpstreamTimeoutError
from ..foundation.types import (
    ChatCompletion,
    ChatMessage,
    ChatRequest,
    SearchParameters,
    SearchRequest,
    SearchResponse,
    SearchResult,
    SearchSource,
)
from ..observability import get_logger
from ..runtime import Limiter
from .search import (
    DEFAULT_MAX_RESULTS,
    SIMULATED_SYSTEM_PROMPT,
    SearchParseError,
    extract_results,
    fallback_results,
    from_date,
    native_prompt,
    parse_simulated,
    simulated_prompt,
    truncate,
)

log = get_logger("grok_mcp.client")

FALLBACK_MODELS: Final[tuple[str, ...]] = (
    "grok-4-1-fast-reasoning",
    "grok-4-1-fast-non-reasoning",
    "grok-code-fast-1",
    "grok-4",
    "grok-3",
)
ASK_SEARCH_RESULTS = 3
MAX_CONNECTIONS = 10
PROBE_MESSAGE = "Hello, are you working?"

class GrokClient:
    """Upstream client bound to one immutable `UpstreamConfig`.

    Args:
        config: Credentials, endpoint and request defaults
        cache: Response cache (a private default-sized one if omitted)
        limiter: Outbound limiter (a private default one if omitted)
        search_mode: "native", "simulated", or "auto" (native, then simulated)
        transport: httpx transport override, e.g. `httpx.MockTransport` in tests
    """

    def __init__(
        self,
        config: UpstreamConfig,
        *,
        cache: ResponseCache[object] | None = None,
        limiter: Limiter | None = None,
        search_mode: SearchMode = "auto",
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.config = config
        self.cache: ResponseCache[object] = cache if cache is not None else ResponseCache()
        self.limiter = limiter if limiter is not None else Limiter()
        self.search_mode = search_mode
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    # ─────────────────────────────────────────────────────────────────
    # HTTP Client
    # ─────────────────────────────────────────────────────────────────

    def _get_client(self) -> httpx.AsyncClient:
        """Get or create the pooled httpx client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.config.base_url,
                headers={
                    "Authorization": f"Bearer {self.config.api_key.get_secret_value()}",
                    "Content-Type": "application/json",
                },
                timeout=self.config.timeout,
                limits=httpx.Limits(max_connections=MAX_CONNECTIONS, max_keepalive_connections=MAX_CONNECTIONS),
                transport=self._transport,
            )
        return self._client

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> GrokClient:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def _send(self, method: str, path: str, body: dict[str, object] | None = None, *, limited: bool = True) -> object:
        """One upstream round trip; returns the decoded JSON body.

        Raises:
            ExternalServiceError: non-2xx status, timeout, transport failure, or non-JSON body
        """
        client = self._get_client()
        content = orjson.dumps(body) if body is not None else None
        try:
            if limited:
                async with self.limiter.slot():
                    response = await client.request(method, path, content=content)
            else:
                response = await client.request(method, path, content=content)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            raise ExternalServiceError(f"Grok API Error: {status} - {_error_message(e.response)}", status) from e
        except httpx.TimeoutException as e:
            raise UpstreamTimeoutError(f"Grok API Error: request timed out after {self.config.timeout:g}s") from e
        except httpx.HTTPError as e:
            raise ExternalServiceError(f"Grok API Error: {type(e).__name__}: {e}", 502) from e

        try:
            return orjson.loads(response.content)
        except orjson.JSONDecodeError as e:
            raise ExternalServiceError("Grok API Error: response was not valid JSON", 502) from e

    # ─────────────────────────────────────────────────────────────────
    # Chat
    # ─────────────────────────────────────────────────────────────────

    def _with_defaults(self, request: ChatRequest) -> ChatRequest:
        return request.model_copy(update={
            "model": request.model or self.config.model,
            "temperature": self.config.temperature if request.temperature is None else request.temperature,
            "max_tokens": self.config.max_tokens if request.max_tokens is None else request.max_tokens,
            "stream": False,
        })

    async def chat_completion(self, request: ChatRequest, *, use_cache: bool = True) -> ChatCompletion:
        """POST /chat/completions with config defaults filled in.

        Identical requests (after defaults) within the cache TTL are served
        from the cache without a network call.
        """
        full = self._with_defaults(request)
        key = make_key("chat", full.wire())
        if use_cache:
            cached = self.cache.get(key)
            if isinstance(cached, ChatCompletion):
                log.debug("cache hit", kind="chat", model=full.model)
                return cached

        try:
            payload = await self._send("POST", "/chat/completions", full.wire())
        except ExternalServiceError as e:
            log.error("chat completion failed", model=full.model, status=e.status_code, error=e.message)
            raise
        try:
            completion = ChatCompletion.model_validate(payload)
        except PydanticValidationError as e:
            raise ExternalServiceError("Grok API Error: unexpected chat completion shape", 502) from e

        if use_cache:
            self.cache.set(key, completion)
        return completion

    async def ask(
        self,
        question: str,
        context: str | None = None,
        system_prompt: str | None = None,
        *,
        temperature: float | None = None,
        max_tokens: int | None = None,
        include_search: bool = False,
        model: str | None = None,
    ) -> str:
        """Single question, optionally with context and live search."""
        messages: list[ChatMessage] = []
        if system_prompt:
            messages.append(ChatMessage(role="system", content=system_prompt))
        content = f"Context: {context}\n\nQuestion: {question}" if context else question
        messages.append(ChatMessage(role="user", content=content))

        search = None
        if include_search:
            search = SearchParameters(mode="on", return_citations=True, max_search_results=ASK_SEARCH_RESULTS)

        completion = await self.chat_completion(ChatRequest(
            messages=tuple(messages),
            model=model,
            temperature=temperature,
            max_tokens=max_tokens,
            search_parameters=search,
        ))
        return completion.text_or_default()

    # ─────────────────────────────────────────────────────────────────
    # Search
    # ─────────────────────────────────────────────────────────────────

    async def live_search(self, request: SearchRequest) -> SearchResponse:
        """Search using the configured strategy.

        Never raises `ExternalServiceError`: native mode degrades straight to
        the fallback result, auto mode tries simulated search first. Fallback
        results are not cached.
        """
        max_results = request.max_results or DEFAULT_MAX_RESULTS
        key = make_key("search", {**request.model_dump(mode="json"), "mode": self.search_mode})
        cached = self.cache.get(key)
        if isinstance(cached, SearchResponse):
            log.debug("cache hit", kind="search", query=request.query)
            return cached

        start = time.perf_counter()
        results, cacheable = await self._search(request, max_results)
        results = truncate(results, max_results)
        response = SearchResponse(
            results=results,
            total_results=len(results),
            search_time=round(time.perf_counter() - start, 3),
        )
        if cacheable:
            self.cache.set(key, response)
        return response

    async def _search(self, request: SearchRequest, max_results: int) -> tuple[list[SearchResult], bool]:
        match self.search_mode:
            case "native":
                try:
                    results = await self._native_search(request, max_results)
                except ExternalServiceError as e:
                    log.warning("native search failed", query=request.query, error=e.message)
                    return fallback_results(request.query), False
                return (results, True) if results else (fallback_results(request.query), False)
            case "simulated":
                return await self._simulated_or_fallback(request, max_results)
            case _:
                try:
                    results = await self._native_search(request, max_results)
                except ExternalServiceError as e:
                    log.warning("native search failed, simulating", query=request.query, error=e.message)
                    return await self._simulated_or_fallback(request, max_results)
                if results:
                    return results, True
                log.warning("native search returned nothing, simulating", query=request.query)
                return await self._simulated_or_fallback(request, max_results)

    async def _native_search(self, request: SearchRequest, max_results: int) -> list[SearchResult]:
        sources = [SearchSource(type="web"), SearchSource(type="x")]
        if request.include_news:
            sources.append(SearchSource(type="news"))
        params = SearchParameters(
            mode="on",
            return_citations=True,
            max_search_results=max_results,
            sources=tuple(sources),
            from_date=from_date(request.time_filter),
        )
        prompt = native_prompt(request.query, images=bool(request.include_images))
        completion = await self.chat_completion(ChatRequest(
            messages=(ChatMessage(role="user", content=prompt),),
            search_parameters=params,
        ), use_cache=False)
        return extract_results(completion, request.query)

    async def _simulated_search(self, request: SearchRequest, max_results: int) -> Result[list[SearchResult], str]:
        try:
            completion = await self.chat_completion(ChatRequest(
                messages=(
                    ChatMessage(role="system", content=SIMULATED_SYSTEM_PROMPT),
                    ChatMessage(
                        role="user",
                        content=simulated_prompt(request.query, max_results, images=bool(request.include_images)),
                    ),
                ),
                temperature=0.1,
                max_tokens=2000,
            ), use_cache=False)
        except ExternalServiceError as e:
            return Err(e.message)
        try:
            results = parse_simulated(completion.text)
        except SearchParseError as e:
            return Err(f"unparseable search results: {e}")
        return Ok(results) if results else Err("no search results returned")

    async def _simulated_or_fallback(self, request: SearchRequest, max_results: int) -> tuple[list[SearchResult], bool]:
        outcome = await self._simulated_search(request, max_results)
        if outcome.is_ok():
            return outcome.unwrap(), True
        log.warning("simulated search degraded to fallback", query=request.query, reason=outcome.unwrap_err())
        return fallback_results(request.query), False

    # ─────────────────────────────────────────────────────────────────
    # Diagnostics (never raise)
    # ─────────────────────────────────────────────────────────────────

    async def fetch_models(self) -> Result[list[str], str]:
        """GET /models. Err on any failure or an empty list."""
        try:
            payload = await self._send("GET", "/models", limited=False)
        except ExternalServiceError as e:
            return Err(e.message)
        data = payload.get("data") if isinstance(payload, dict) else None
        ids = [m["id"] for m in data or () if isinstance(m, dict) and isinstance(m.get("id"), str)]
        return Ok(ids) if ids else Err("models endpoint returned no models")

    async def get_models(self) -> list[str]:
        result = await self.fetch_models()
        if result.is_err():
            log.warning("models endpoint unavailable, using defaults", reason=result.unwrap_err())
        return result.unwrap_or(list(FALLBACK_MODELS))

    async def probe(self) -> Result[bool, str]:
        """Minimal uncached chat completion."""
        try:
            await self.chat_completion(ChatRequest(
                messages=(ChatMessage(role="user", content=PROBE_MESSAGE),),
                max_tokens=10,
            ), use_cache=False)
        except ExternalServiceError as e:
            return Err(e.message)
        return Ok(True)

    async def test_connection(self) -> bool:
        result = await self.probe()
        if result.is_err():
            log.error("connection test failed", reason=result.unwrap_err())
        return result.is_ok()


def _error_message(response: httpx.Response) -> str:
    """Upstream error text: `error.message`, a bare `error` string, or the reason phrase."""
    try:
        body = orjson.loads(response.content)
    except orjson.JSONDecodeError:
        body = None
    if isinstance(body, dict):
        err = body.get("error")
        if isinstance(err, dict) and isinstance(err.get("message"), str):
            return err["message"]
        if isinstance(err, str):
            return err
    return response.reason_phrase or response.text[:200] or "request failed"
