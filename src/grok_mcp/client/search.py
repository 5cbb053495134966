"""Turning chat completions into search results.

Native search returns prose plus (usually) a citation list; simulated search
returns prose that should contain a JSON object. The helpers here are pure so
they can be tested without a transport.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from datetime import date, timedelta
from urllib.parse import quote, unquote, urlsplit

import orjson
from pydantic import ValidationError as PydanticValidationError

from ..foundation.types import ChatCompletion, Citation, SearchResult, TimeFilter

DEFAULT_MAX_RESULTS = 5
TITLE_MAX_CHARS = 80
SNIPPET_MAX_CHARS = 200

_URL_RE = re.compile(r"""https?://[^\s)\]>"'`]+""")
_FENCE_RE = re.compile(r"```(?:json)?\n?")
_JSON_OBJECT_RE = re.compile(r"\{[\s\S]*\}")

_LOOKBACK_DAYS: dict[str, int] = {"day": 1, "week": 7, "month": 30, "year": 365}


def from_date(time_filter: TimeFilter | None, today: date | None = None) -> str | None:
    """ISO start date for a time filter; None for "all" or no filter."""
    days = _LOOKBACK_DAYS.get(time_filter or "all")
    if days is None:
        return None
    return ((today or date.today()) - timedelta(days=days)).isoformat()


def source_of(url: str) -> str | None:
    host = urlsplit(url).hostname
    if not host:
        return None
    return host.removeprefix("www.")


def title_from_url(url: str) -> str:
    """Readable title from the last non-empty path segment, or the host.

    >>> title_from_url("https://example.com/blog/grok-4_release/")
    'grok 4 release'
    """
    parts = urlsplit(url)
    segments = [s for s in parts.path.split("/") if s]
    raw = unquote(segments[-1]) if segments else (parts.hostname or url)
    title = re.sub(r"[-_]+", " ", raw).strip() or raw
    return title[:TITLE_MAX_CHARS]


def scan_urls(text: str) -> list[str]:
    """Literal http(s) URLs in order of appearance, deduplicated."""
    seen: dict[str, None] = {}
    for match in _URL_RE.finditer(text):
        seen.setdefault(match.group(0).rstrip(".,;:"), None)
    return list(seen)


def _snippet_around(text: str, url: str) -> str:
    pos = text.find(url)
    if pos < 0:
        return _head(text)
    start = max(0, pos - SNIPPET_MAX_CHARS // 2)
    window = text[start:pos] + text[pos + len(url):pos + len(url) + SNIPPET_MAX_CHARS // 2]
    return " ".join(window.split()) or _head(text)


def _head(text: str) -> str:
    flat = " ".join(text.split())
    if len(flat) <= SNIPPET_MAX_CHARS:
        return flat
    return flat[:SNIPPET_MAX_CHARS].rstrip() + "..."


def _citation_url(citation: str | Citation) -> tuple[str, str | None]:
    if isinstance(citation, Citation):
        return citation.url, citation.title
    return citation, None


def extract_results(completion: ChatCompletion, query: str) -> list[SearchResult]:
    """Search results from a native-search completion.

    Citations come first, then URLs found in the text that no citation
    already covers. With neither, the answer text becomes one result.
    """
    text = completion.text or ""
    results: list[SearchResult] = []
    seen: set[str] = set()

    for citation in completion.citations or ():
        url, title = _citation_url(citation)
        if not url or url in seen:
            continue
        seen.add(url)
        results.append(SearchResult(
            title=title or title_from_url(url), url=url,
            snippet=_snippet_around(text, url), source=source_of(url),
        ))

    for url in scan_urls(text):
        if url in seen:
            continue
        seen.add(url)
        results.append(SearchResult(
            title=title_from_url(url), url=url,
            snippet=_snippet_around(text, url), source=source_of(url),
        ))

    if not results and text.strip():
        results.append(SearchResult(
            title=f"Grok search: {query}", url=fallback_url(query),
            snippet=_head(text), source="grok",
        ))
    return results


# ─────────────────────────────────────────────────────────────────────────────
# Search prompts
# ─────────────────────────────────────────────────────────────────────────────

NATIVE_SEARCH_PROMPT = (
    "Search the web and X for: {query}\n\n"
    "Summarize the most relevant findings and cite every source by its URL."
)


def native_prompt(query: str, *, images: bool = False) -> str:
    prompt = NATIVE_SEARCH_PROMPT.format(query=query)
    return prompt + "\nInclude links to relevant images where available." if images else prompt


SIMULATED_SYSTEM_PROMPT = (
    "You are a search results generator. Respond ONLY with valid JSON. "
    "Do not include any explanation or additional text."
)
IMAGES_HINT = "\n- Prefer pages with relevant images and mention the images in the snippet"


def simulated_prompt(query: str, max_results: int, *, images: bool = False) -> str:
    prompt = f"""I need you to simulate web search results for the query: "{query}"

Please provide {max_results} realistic search results that someone would find when searching for this topic online.

Respond with ONLY valid JSON in this exact format:
{{
  "results": [
    {{
      "title": "Title of the webpage",
      "url": "https://example.com/page",
      "snippet": "Brief description of what this page contains",
      "published_date": "2024-01-01" (optional)
    }}
  ]
}}

Make sure:
- URLs are realistic and related to the topic
- Snippets are informative and relevant
- No extra text outside the JSON
- Each result has title, url, and snippet"""
    return prompt + IMAGES_HINT if images else prompt


class SearchParseError(ValueError):
    """Simulated search output had no usable results."""


def parse_simulated(content: str | None) -> list[SearchResult]:
    """Parse results out of a model reply that should be a JSON object.

    Raises:
        SearchParseError: no JSON object, invalid JSON, or wrong shape
    """
    cleaned = _FENCE_RE.sub("", (content or "").strip())
    match = _JSON_OBJECT_RE.search(cleaned)
    if match is None:
        raise SearchParseError("no JSON object in reply")
    try:
        payload = orjson.loads(match.group(0))
    except orjson.JSONDecodeError as e:
        raise SearchParseError(f"invalid JSON: {e}") from e
    raw = payload.get("results") if isinstance(payload, dict) else None
    if not isinstance(raw, list):
        raise SearchParseError("missing 'results' list")
    try:
        return [SearchResult.model_validate(item) for item in raw]
    except PydanticValidationError as e:
        raise SearchParseError(f"malformed result: {e.error_count()} issue(s)") from e


def fallback_url(query: str) -> str:
    return f"https://www.google.com/search?q={quote(query, safe='')}"


def fallback_results(query: str) -> list[SearchResult]:
    """The single deterministic result used when simulated search fails."""
    return [SearchResult(
        title=f"Search results for: {query}",
        url=fallback_url(query),
        snippet=f"Information about {query} - simulated search result as the live search API is not available.",
    )]


def truncate(results: Iterable[SearchResult], max_results: int) -> list[SearchResult]:
    return list(results)[:max_results]
