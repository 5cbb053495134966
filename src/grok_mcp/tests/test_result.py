"""Tests for the Result type used by never-raising operations."""

from __future__ import annotations

import pytest

from grok_mcp.foundation.errors import Err, Ok, Result


def test_ok_and_err_basics() -> None:
    ok: Result[int, str] = Ok(42)
    err: Result[int, str] = Err("fail")
    assert ok.is_ok() and not ok.is_err()
    assert err.is_err() and not err.is_ok()
    assert ok.unwrap() == 42
    assert err.unwrap_err() == "fail"
    assert (repr(ok), repr(err)) == ("Ok(42)", "Err('fail')")


def test_unwrap_or_default() -> None:
    assert Ok([1]).unwrap_or([]) == [1]
    assert Err("unreachable").unwrap_or(["grok-4"]) == ["grok-4"]


def test_unwrap_wrong_variant_raises() -> None:
    with pytest.raises(RuntimeError, match="on Err: x"):
        Err("x").unwrap()
    with pytest.raises(RuntimeError, match="on Ok: 1"):
        Ok(1).unwrap_err()
