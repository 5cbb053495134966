"""Upstream wire models: chat completion and search payloads.

Response models are lenient (unknown fields kept, most fields optional) so
that minor upstream additions never break parsing. Request models are
strict about shape and dump with `exclude_none` to stay minimal on the wire.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

Role = Literal["system", "user", "assistant"]
TimeFilter = Literal["day", "week", "month", "year", "all"]

NO_RESPONSE = "No response generated"


# ─────────────────────────────────────────────────────────────────────────────
# Chat
# ─────────────────────────────────────────────────────────────────────────────


class ChatMessage(BaseModel):
    """One conversation turn."""

    model_config = ConfigDict(frozen=True)

    role: Role
    content: str


class SearchSource(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["web", "x", "news", "rss"]


class SearchParameters(BaseModel):
    """Live-search options attached to a chat request."""

    model_config = ConfigDict(frozen=True)

    mode: Literal["auto", "on", "off"] = "on"
    return_citations: bool = True
    max_search_results: int | None = None
    sources: tuple[SearchSource, ...] | None = None
    from_date: str | None = None


class ChatRequest(BaseModel):
    """Partial chat request; unset fields are filled from UpstreamConfig."""

    model_config = ConfigDict(frozen=True)

    messages: tuple[ChatMessage, ...] = ()
    model: str | None = None
    temperature: float | None = None
    max_tokens: int | None = None
    stream: bool = False
    search_parameters: SearchParameters | None = None

    def wire(self) -> dict[str, object]:
        return self.model_dump(mode="json", exclude_none=True)


class ResponseMessage(BaseModel):
    model_config = ConfigDict(extra="allow")

    role: str = "assistant"
    content: str | None = None


class Choice(BaseModel):
    model_config = ConfigDict(extra="allow")

    index: int = 0
    message: ResponseMessage = Field(default_factory=ResponseMessage)
    finish_reason: str | None = None


class Usage(BaseModel):
    model_config = ConfigDict(extra="allow")

    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0


class Citation(BaseModel):
    model_config = ConfigDict(extra="allow")

    url: str
    title: str | None = None


class ChatCompletion(BaseModel):
    """Chat completion payload as returned by the upstream."""

    model_config = ConfigDict(extra="allow")

    id: str = ""
    object: str = "chat.completion"
    created: int = 0
    model: str = ""
    choices: list[Choice] = Field(default_factory=list)
    usage: Usage | None = None
    citations: list[str | Citation] | None = None

    @property
    def text(self) -> str | None:
        """First choice content, None when the upstream produced nothing."""
        if not self.choices:
            return None
        return self.choices[0].message.content or None

    def text_or_default(self) -> str:
        return self.text or NO_RESPONSE


# ─────────────────────────────────────────────────────────────────────────────
# Search
# ─────────────────────────────────────────────────────────────────────────────


class SearchRequest(BaseModel):
    model_config = ConfigDict(frozen=True)

    query: str
    max_results: int | None = None
    include_images: bool | None = None
    include_news: bool | None = None
    time_filter: TimeFilter | None = None


class SearchResult(BaseModel):
    model_config = ConfigDict(extra="ignore")

    title: str
    url: str
    snippet: str
    published_date: str | None = None
    source: str | None = None


class SearchResponse(BaseModel):
    results: list[SearchResult] = Field(default_factory=list)
    total_results: int = 0
    search_time: float = 0.0
