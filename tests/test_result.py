"""Unit tests for the lightweight Result utilities."""

from __future__ import annotations

import pytest

from plandraft.core.result import Err, Ok, Result, err, ok


def test_ok_map_keeps_value_typed() -> None:
    """`Ok` should map and unwrap."""
    r: Result[int, str] = ok(10)
    r2 = r.map(lambda x: x + 5)
    assert r2.is_ok() and r2.unwrap() == 15
    assert isinstance(r2, Ok)


def test_err_propagation_and_map_err() -> None:
    """`Err` should propagate through map and allow mapping the error."""
    r: Result[int, str] = err("boom")
    assert r.is_err()
    assert r.map(lambda x: x + 1).is_err()
    r2 = r.map_err(lambda e: f"{e}!")
    assert isinstance(r2, Err) and r2.unwrap_err() == "boom!"


def test_unwrap_variants_and_defaults() -> None:
    """Unwrap behavior: default value and explicit error raising."""
    assert ok("x").unwrap() == "x"
    assert err("e").get_or("fallback") == "fallback"
    with pytest.raises(RuntimeError):
        err("e").unwrap()
    with pytest.raises(RuntimeError):
        ok(1).unwrap_err()
