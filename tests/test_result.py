"""Unit tests for the lightweight Result utilities."""

from __future__ import annotations

import pytest

from blockschema.core.result import Err, Ok, Result, err, ok


def test_ok_map_keeps_value() -> None:
    """`Ok` should map and keep values typed."""
    r: Result[dict[str, str], str] = ok({"type": "string"})
    r2 = r.map(lambda prop: {**prop, "enum": "x"})
    assert isinstance(r2, Ok)
    assert r2.is_ok() and r2.unwrap() == {"type": "string", "enum": "x"}


def test_err_propagates_through_map() -> None:
    """`Err` passes through `map` untouched."""
    r: Result[int, str] = err("disallowed")
    assert r.is_err()
    r2 = r.map(lambda x: x + 1)
    assert isinstance(r2, Err) and r2.unwrap_err() == "disallowed"


def test_unwrap_on_the_wrong_variant_raises() -> None:
    """Unwrapping the other side is a programming error."""
    assert ok("x").unwrap() == "x"
    with pytest.raises(RuntimeError):
        err("e").unwrap()
    with pytest.raises(RuntimeError):
        ok(1).unwrap_err()
