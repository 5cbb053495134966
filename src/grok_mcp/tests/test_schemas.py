"""Tests for per-tool parameter schemas."""

from __future__ import annotations

import pytest

from grok_mcp.client import GrokClient
from grok_mcp.foundation.config import UpstreamConfig
from grok_mcp.foundation.errors import ValidationError
from grok_mcp.tools import AskTool, ChatTool, SearchParams, SearchTool


@pytest.fixture
def ask(config: UpstreamConfig) -> AskTool:
    return AskTool(GrokClient(config))


@pytest.fixture
def chat(config: UpstreamConfig) -> ChatTool:
    return ChatTool(GrokClient(config))


@pytest.fixture
def search(config: UpstreamConfig) -> SearchTool:
    return SearchTool(GrokClient(config))


# ─────────────────────────────────────────────────────────────────────────────
# grok_ask
# ─────────────────────────────────────────────────────────────────────────────


def test_ask_requires_question(ask: AskTool) -> None:
    with pytest.raises(ValidationError) as exc:
        ask.validate({})
    assert exc.value.status_code == 400
    assert exc.value.message.startswith("Invalid input for grok_ask: question:")
    assert [i["field"] for i in exc.value.issues] == ["question"]


def test_ask_rejects_empty_question(ask: AskTool) -> None:
    with pytest.raises(ValidationError):
        ask.validate({"question": ""})


def test_ask_bounds(ask: AskTool) -> None:
    with pytest.raises(ValidationError, match="temperature"):
        ask.validate({"question": "q", "temperature": 1.5})
    with pytest.raises(ValidationError, match="max_tokens"):
        ask.validate({"question": "q", "max_tokens": 8001})
    params = ask.validate({"question": "q", "temperature": 0, "max_tokens": 8000})
    assert params.temperature == 0 and params.max_tokens == 8000


def test_ask_no_string_coercion(ask: AskTool) -> None:
    """Booleans and strings are not coerced from other types."""
    with pytest.raises(ValidationError, match="include_search"):
        ask.validate({"question": "q", "include_search": "true"})
    with pytest.raises(ValidationError, match="question"):
        ask.validate({"question": 42})


def test_ask_ignores_unknown_fields(ask: AskTool) -> None:
    params = ask.validate({"question": "q", "unexpected": 1})
    assert params.question == "q"
    assert not hasattr(params, "unexpected")


def test_ask_multiple_issues_in_one_line(ask: AskTool) -> None:
    with pytest.raises(ValidationError) as exc:
        ask.validate({"temperature": 2})
    assert "\n" not in exc.value.message
    assert {i["field"] for i in exc.value.issues} == {"question", "temperature"}


# ─────────────────────────────────────────────────────────────────────────────
# grok_chat
# ─────────────────────────────────────────────────────────────────────────────


def test_chat_roles(chat: ChatTool) -> None:
    params = chat.validate({"messages": [{"role": "system", "content": "s"}, {"role": "user", "content": "u"}]})
    assert [m.role for m in params.messages] == ["system", "user"]
    with pytest.raises(ValidationError, match="messages.0.role"):
        chat.validate({"messages": [{"role": "tool", "content": "x"}]})


def test_chat_requires_messages(chat: ChatTool) -> None:
    with pytest.raises(ValidationError, match="messages"):
        chat.validate({})
    with pytest.raises(ValidationError, match="messages"):
        chat.validate({"messages": []})


# ─────────────────────────────────────────────────────────────────────────────
# grok_search
# ─────────────────────────────────────────────────────────────────────────────


@pytest.mark.parametrize(("raw", "expected"), [(3.7, 3), (3, 3), ("4", 4), ("4.9", 4), (1.0, 1), (20.9, 20)])
def test_search_max_results_truncated(raw: object, expected: int) -> None:
    assert SearchParams.model_validate({"query": "q", "max_results": raw}).max_results == expected


@pytest.mark.parametrize("raw", [0, 0.5, -2, 21, 1e6, "25", True, "many", float("nan")])
def test_search_max_results_rejected(search: SearchTool, raw: object) -> None:
    with pytest.raises(ValidationError, match="max_results"):
        search.validate({"query": "q", "max_results": raw})


def test_search_time_filter(search: SearchTool) -> None:
    assert search.validate({"query": "q", "time_filter": "week"}).time_filter == "week"
    with pytest.raises(ValidationError, match="time_filter"):
        search.validate({"query": "q", "time_filter": "decade"})


# ─────────────────────────────────────────────────────────────────────────────
# JSON schema
# ─────────────────────────────────────────────────────────────────────────────


def test_input_schema_shape(ask: AskTool, search: SearchTool) -> None:
    schema = ask.input_schema()
    assert schema["type"] == "object"
    assert schema["required"] == ["question"]
    props = schema["properties"]
    assert set(props) == {"question", "context", "system_prompt", "temperature", "max_tokens", "include_search", "model"}
    assert all("title" not in p for p in props.values())
    assert search.input_schema()["required"] == ["query"]
    max_results = search.input_schema()["properties"]["max_results"]["anyOf"][0]
    assert (max_results["exclusiveMinimum"], max_results["maximum"]) == (0, 20)
