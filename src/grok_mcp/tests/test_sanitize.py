"""Tests for argument sanitization."""

from __future__ import annotations

from grok_mcp.middleware import sanitize


def test_strips_markup_and_quote_characters() -> None:
    assert sanitize({"question": "<script>'"}) == {"question": "script"}
    assert sanitize('a"b`c<d>e') == "abcde"


def test_recurses_into_lists_and_mappings() -> None:
    raw = {"messages": [{"role": "user", "content": "<b>hi</b>"}], "meta": {"note": "'quoted'"}}
    assert sanitize(raw) == {"messages": [{"role": "user", "content": "bhi/b"}], "meta": {"note": "quoted"}}


def test_drops_operator_and_prototype_keys() -> None:
    raw = {"$where": "1", "__proto__": {}, "a__proto__b": 1, "query": "ok", "nested": {"$gt": 1, "keep": 2}}
    assert sanitize(raw) == {"query": "ok", "nested": {"keep": 2}}


def test_non_strings_pass_through() -> None:
    raw = {"max_results": 3.7, "include_news": True, "context": None, "n": 0}
    assert sanitize(raw) == raw


def test_tuples_become_lists() -> None:
    assert sanitize(("<a>", 1)) == ["a", 1]
