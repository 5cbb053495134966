"""Tests for structured logging and the in-memory metrics backend."""

from __future__ import annotations

import io

import orjson
import pytest

from grok_mcp.observability import MemoryMetricsBackend, configure_logging, get_logger, log_context


def test_json_lines_include_bound_and_scoped_context() -> None:
    out = io.StringIO()
    configure_logging(format="json", level="DEBUG", output=out)
    log = get_logger("grok_mcp.test").bind(tool="grok_ask")

    with log_context(request_id=7):
        log.info("dispatching", attempt=1)
    log.debug("after")

    first, second = (orjson.loads(line) for line in out.getvalue().splitlines())
    assert first["event"] == "dispatching" and first["level"] == "info"
    assert (first["logger"], first["tool"], first["request_id"], first["attempt"]) == ("grok_mcp.test", "grok_ask", 7, 1)
    assert "request_id" not in second


def test_level_filters_lower_entries() -> None:
    out = io.StringIO()
    configure_logging(format="console", level="WARNING", output=out, colors=False)
    log = get_logger("grok_mcp.test")
    log.info("hidden")
    log.warning("shown", status=502)
    text = out.getvalue()
    assert "hidden" not in text
    assert "[warning] shown" in text and "status=502" in text


def test_unknown_format_rejected() -> None:
    with pytest.raises(ValueError):
        configure_logging(format="xml")


def test_metrics_counters_and_timings() -> None:
    backend = MemoryMetricsBackend()
    backend.increment("grok_mcp.requests_total", tags={"tool": "grok_ask"})
    backend.increment("grok_mcp.requests_total", tags={"tool": "grok_ask"})
    backend.timing("grok_mcp.request_latency_ms", 10.0, tags={"tool": "grok_ask"})
    backend.timing("grok_mcp.request_latency_ms", 30.0, tags={"tool": "grok_ask"})

    assert backend.count("grok_mcp.requests_total", tool="grok_ask") == 2
    assert backend.count("grok_mcp.requests_total", tool="grok_chat") == 0
    summary = backend.summary("grok_mcp.request_latency_ms", tool="grok_ask")
    assert summary is not None
    assert (summary.count, summary.min, summary.max, summary.mean) == (2, 10.0, 30.0, 20.0)

    snapshot = backend.snapshot()
    assert snapshot["counters"] == {'grok_mcp_requests_total{tool="grok_ask"}': 2}
    assert backend.render().splitlines() == [
        'grok_mcp_requests_total{tool="grok_ask"} 2',
        'grok_mcp_request_latency_ms_count{tool="grok_ask"} 2',
        'grok_mcp_request_latency_ms_sum{tool="grok_ask"} 40.0',
    ]


def test_exception_carries_traceback() -> None:
    out = io.StringIO()
    configure_logging(format="json", output=out)
    try:
        raise RuntimeError("boom")
    except RuntimeError:
        get_logger("grok_mcp.test").exception("crashed")
    entry = orjson.loads(out.getvalue())
    assert entry["level"] == "error"
    assert "RuntimeError: boom" in entry["exc_info"]
