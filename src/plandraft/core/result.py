"""Explicit success/failure values for the two non-raising paths of the engine.

Reading a stored snapshot and flushing autosave both report failure as a
value: a malformed blob means "no prior snapshot", and a failed write is a
state the caller inspects rather than an exception unwinding the editor.

Each variant implements the operations itself, so no call site needs an
``isinstance`` check:

>>> from plandraft.core.result import ok, err, Result
>>> def parse_minutes(raw: str) -> Result[int, str]:
...     return ok(int(raw)) if raw.isdigit() else err(f"not a duration: {raw!r}")
>>> parse_minutes("45").map(lambda m: m * 60).unwrap()
2700
>>> parse_minutes("soon").get_or(0)
0
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar("T")
U = TypeVar("U")
E = TypeVar("E")
F = TypeVar("F")


class Result(ABC, Generic[T, E]):
    """Either :class:`Ok` carrying a ``T`` or :class:`Err` carrying an ``E``."""

    @abstractmethod
    def is_ok(self) -> bool: ...

    def is_err(self) -> bool:
        return not self.is_ok()

    @abstractmethod
    def unwrap(self) -> T:
        """The success value; ``RuntimeError`` on :class:`Err`."""

    @abstractmethod
    def unwrap_err(self) -> E:
        """The error value; ``RuntimeError`` on :class:`Ok`."""

    @abstractmethod
    def get_or(self, default: T) -> T: ...

    @abstractmethod
    def map(self, fn: Callable[[T], U]) -> Result[U, E]: ...

    @abstractmethod
    def map_err(self, fn: Callable[[E], F]) -> Result[T, F]: ...


@dataclass(frozen=True)
class Ok(Result[T, E]):
    value: T

    def is_ok(self) -> bool:
        return True

    def unwrap(self) -> T:
        return self.value

    def unwrap_err(self) -> E:
        raise RuntimeError(f"unwrap_err() on {self!r}")

    def get_or(self, default: T) -> T:
        return self.value

    def map(self, fn: Callable[[T], U]) -> Result[U, E]:
        return Ok(fn(self.value))

    def map_err(self, fn: Callable[[E], F]) -> Result[T, F]:
        return Ok(self.value)


@dataclass(frozen=True)
class Err(Result[T, E]):
    error: E

    def is_ok(self) -> bool:
        return False

    def unwrap(self) -> T:
        raise RuntimeError(f"unwrap() on {self!r}")

    def unwrap_err(self) -> E:
        return self.error

    def get_or(self, default: T) -> T:
        return default

    def map(self, fn: Callable[[T], U]) -> Result[U, E]:
        return Err(self.error)

    def map_err(self, fn: Callable[[E], F]) -> Result[T, F]:
        return Err(fn(self.error))


def ok(value: T) -> Result[T, E]:
    """Construct :class:`Ok` typed as the ``Result`` a signature promises."""
    return Ok(value)


def err(error: E) -> Result[T, E]:
    """Construct :class:`Err` typed as the ``Result`` a signature promises."""
    return Err(error)


__all__ = ["Err", "Ok", "Result", "err", "ok"]
