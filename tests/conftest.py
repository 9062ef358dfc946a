"""Shared fixtures: a simulated debounce clock and a deterministic timestamp source.

The autosave engine takes its timer primitive (`sleep`) and its wall clock
(`clock`) as constructor arguments. Tests hand it the objects below so that
"800 ms of idle time" is a method call rather than real waiting.
"""

from __future__ import annotations

import asyncio
from collections.abc import Iterator
from datetime import UTC, datetime, timedelta

import pytest

from plandraft.core.contracts.plan import Snapshot, Step
from plandraft.core.settings import load_settings
from plandraft.core.store.memory import InMemorySnapshotStore

BASE_TIME = datetime(2025, 3, 3, 9, 0, tzinfo=UTC)


async def settle(rounds: int = 25) -> None:
    """Let every ready task run until the loop is quiet."""
    for _ in range(rounds):
        await asyncio.sleep(0)


class FakeClock:
    """Simulated monotonic time for :class:`DebounceScheduler`.

    ``sleep`` parks the caller on a future; ``advance`` moves time forward and
    releases every sleeper whose deadline has passed.
    """

    def __init__(self) -> None:
        self.now = 0.0
        self._sleepers: list[tuple[float, asyncio.Future[None]]] = []

    async def sleep(self, seconds: float) -> None:
        future: asyncio.Future[None] = asyncio.get_running_loop().create_future()
        self._sleepers.append((self.now + seconds, future))
        await future

    @property
    def sleepers(self) -> int:
        """Number of timers still waiting."""
        return sum(1 for _, future in self._sleepers if not future.done())

    async def advance(self, seconds: float) -> None:
        # Let freshly scheduled timers register before time moves.
        await settle()
        self.now += seconds
        remaining: list[tuple[float, asyncio.Future[None]]] = []
        for deadline, future in self._sleepers:
            if future.done():
                continue
            if deadline <= self.now + 1e-9:
                future.set_result(None)
            else:
                remaining.append((deadline, future))
        self._sleepers = remaining
        await settle()


class Ticker:
    """Wall clock that moves one second per reading."""

    def __init__(self, start: datetime = BASE_TIME) -> None:
        self.current = start

    def __call__(self) -> datetime:
        self.current = self.current + timedelta(seconds=1)
        return self.current


@pytest.fixture(autouse=True)  # type: ignore[misc]
def fresh_settings() -> Iterator[None]:
    """Rebuild settings around every test so env overrides never leak."""
    load_settings.cache_clear()
    yield
    load_settings.cache_clear()


@pytest.fixture  # type: ignore[misc]
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture  # type: ignore[misc]
def ticker() -> Ticker:
    return Ticker()


def make_step(step_id: str, minutes: int = 5, title: str | None = None) -> Step:
    return Step(
        id=step_id, kind="activity", title=title or step_id.title(), duration_minutes=minutes
    )


def make_snapshot(plan_id: str = "plan-1", *steps: Step, target: int = 60) -> Snapshot:
    return Snapshot(
        id=plan_id, title="Fractions", target_minutes=target, steps=steps, updated_at=BASE_TIME
    )


class RecordingStore(InMemorySnapshotStore):
    """In-memory store that records writes and can stall or fail them."""

    def __init__(self) -> None:
        super().__init__()
        self.saves: list[Snapshot] = []
        self.gate: asyncio.Event | None = None
        self.fail_with: Exception | None = None
        self.echo: Snapshot | None = None

    async def save(self, document_id: str, snapshot: Snapshot) -> Snapshot:
        self.saves.append(snapshot)
        if self.gate is not None:
            await self.gate.wait()
        if self.fail_with is not None:
            raise self.fail_with
        stored = await super().save(document_id, self.echo or snapshot)
        return stored
