"""Structured logging with bound context.

Output always goes to stderr: under the stdio transport stdout carries the
MCP message stream, and a stray log line there corrupts the protocol.

Quick Start:
    >>> from grok_mcp.observability import get_logger, configure_logging
    >>> configure_logging(format="console", level="DEBUG")
    >>> log = get_logger("grok_mcp.client").bind(tool="grok_search")
    >>> with log_context(request_id=7):
    ...     log.info("cache hit", kind="search")
    12:30:45.120 [info] cache hit kind="search" logger="grok_mcp.client" request_id=7 tool="grok_search"
"""

from __future__ import annotations

import sys
import time
import traceback
from contextvars import ContextVar
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any, Protocol, TextIO

import orjson

if TYPE_CHECKING:
    from types import TracebackType

JsonDict = dict[str, Any]

LEVELS = {"debug": 10, "info": 20, "warning": 30, "error": 40, "critical": 50}

# Scoped context (persists across awaits within a task)
_log_context: ContextVar[JsonDict] = ContextVar("log_context", default={})


@dataclass(slots=True, frozen=True)
class LogEntry:
    timestamp: float
    level: str
    event: str
    context: JsonDict


@dataclass(slots=True, frozen=True)
class BoundLogger:
    """Logger carrying fixed key-value context. bind() returns a new logger."""

    context: JsonDict = field(default_factory=dict)

    def bind(self, **kw: Any) -> BoundLogger:
        return BoundLogger({**self.context, **kw})

    def _log(self, level: str, event: str, **kw: Any) -> None:
        if LEVELS[level] < _threshold:
            return
        _get_renderer().render(LogEntry(time.time(), level, event, {**_log_context.get(), **self.context, **kw}))

    def debug(self, event: str, **kw: Any) -> None: self._log("debug", event, **kw)
    def info(self, event: str, **kw: Any) -> None: self._log("info", event, **kw)
    def warning(self, event: str, **kw: Any) -> None: self._log("warning", event, **kw)
    def error(self, event: str, **kw: Any) -> None: self._log("error", event, **kw)

    def exception(self, event: str, **kw: Any) -> None:
        """Error entry with the active exception's traceback under 'exc_info'."""
        self._log("error", event, exc_info=traceback.format_exc(), **kw)


# ─────────────────────────────────────────────────────────────────────────────
# Renderers
# ─────────────────────────────────────────────────────────────────────────────


class LogRenderer(Protocol):
    def render(self, entry: LogEntry) -> None: ...


@dataclass(slots=True)
class ConsoleRenderer:
    """`HH:MM:SS.mmm [level] event key=value ...`, coloured on a TTY."""

    output: TextIO = field(default_factory=lambda: sys.stderr)
    colors: bool | None = None

    def __post_init__(self) -> None:
        if self.colors is None:
            self.colors = getattr(self.output, "isatty", lambda: False)()

    def render(self, entry: LogEntry) -> None:
        ts = datetime.fromtimestamp(entry.timestamp, tz=UTC).strftime("%H:%M:%S.%f")[:-3]
        level = f"[{entry.level}]"
        if self.colors:
            level = f"{_LEVEL_COLORS[entry.level]}{level}{_RESET}"
        fields = " ".join(f"{k}={_console_value(v)}" for k, v in sorted(entry.context.items()) if k != "exc_info")
        print(f"{ts} {level} {entry.event} {fields}".rstrip(), file=self.output)
        if "exc_info" in entry.context:
            print(entry.context["exc_info"], file=self.output, end="")


@dataclass(slots=True)
class JsonRenderer:
    """One JSON object per line."""

    output: TextIO = field(default_factory=lambda: sys.stderr)

    def render(self, entry: LogEntry) -> None:
        ts = datetime.fromtimestamp(entry.timestamp, tz=UTC).isoformat()
        line = orjson.dumps({"timestamp": ts, "level": entry.level, "event": entry.event, **entry.context},
                            option=orjson.OPT_NON_STR_KEYS, default=str)
        print(line.decode(), file=self.output)


class NoOpRenderer:
    def render(self, entry: LogEntry) -> None:
        pass


# ─────────────────────────────────────────────────────────────────────────────
# Configuration
# ─────────────────────────────────────────────────────────────────────────────


_renderer: LogRenderer | None = None
_threshold = LEVELS["info"]


def configure_logging(
    format: str = "console",  # noqa: A002 - matches LOG_FORMAT
    level: str = "INFO",
    *,
    output: TextIO | None = None,
    colors: bool | None = None,
) -> LogRenderer:
    """Set the process-wide renderer ("console", "json" or "none") and level threshold."""
    global _renderer, _threshold
    match format:
        case "console": renderer: LogRenderer = ConsoleRenderer(output=output or sys.stderr, colors=colors)
        case "json": renderer = JsonRenderer(output=output or sys.stderr)
        case "none": renderer = NoOpRenderer()
        case _: raise ValueError(f"Unknown format: {format}. Use 'console', 'json', or 'none'")
    _threshold = LEVELS.get(level.lower(), LEVELS["info"])
    _renderer = renderer
    return renderer


def get_logger(name: str | None = None, **initial_context: Any) -> BoundLogger:
    """Logger whose entries carry `logger=name` plus the given context."""
    return BoundLogger({**initial_context, **({"logger": name} if name else {})})


def _get_renderer() -> LogRenderer:
    global _renderer
    if _renderer is None:
        _renderer = ConsoleRenderer()
    return _renderer


class log_context:
    """Add key-value pairs to every entry logged within the `with` block."""

    __slots__ = ("_ctx", "_token")

    def __init__(self, **kw: Any) -> None:
        self._ctx: JsonDict = dict(kw)
        self._token: object | None = None

    def __enter__(self) -> log_context:
        self._token = _log_context.set({**_log_context.get(), **self._ctx})
        return self

    def __exit__(self, exc_type: type[BaseException] | None, exc_val: BaseException | None,
                 exc_tb: TracebackType | None) -> None:
        if self._token is not None:
            _log_context.reset(self._token)  # type: ignore[arg-type]


_RESET = "\033[0m"
_LEVEL_COLORS = {"debug": "\033[2m", "info": "\033[32m", "warning": "\033[33m", "error": "\033[31m"}


def _console_value(v: object) -> str:
    if isinstance(v, str):
        return f'"{v}"'
    if isinstance(v, bool):
        return str(v).lower()
    return str(v)
