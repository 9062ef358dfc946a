"""
Plan editor facade.

:class:`PlanEditor` composes a :class:`HistoryEngine` and an
:class:`AutosaveEngine` behind the mutation API the UI layer calls. Every
mutation is a single ``HistoryEngine.update`` call, so de-duplication, linear
undo and frame independence come from the history reducer; the autosave
engine is subscribed to the history and picks up every change of present.

Mutations are total: an unknown step id or an out-of-range index leaves the
plan untouched and never raises.

Session lifecycle
-----------------
``open()`` wires autosave to history and hydrates from the store;
``close()`` cancels any pending save. ``async with PlanEditor(...)`` does both::

    async with PlanEditor(starter_snapshot("plan-1"), store) as editor:
        editor.add_step_from_template(find_template("guided-practice"))
        await editor.flush()
"""

from __future__ import annotations

import asyncio
import math
import uuid
from collections.abc import Callable
from datetime import datetime
from types import TracebackType
from typing import Any

from plandraft.core.autosave.engine import AutosaveEngine, ErrorCallback, SaveResult
from plandraft.core.autosave.scheduler import Sleep
from plandraft.core.contracts.plan import (
    PlanTotals,
    Snapshot,
    Step,
    StepDraft,
    StepTemplate,
    serialize_snapshot,
    step_from_template,
    utc_now,
)
from plandraft.core.history.engine import HistoryEngine
from plandraft.core.settings import get_logger
from plandraft.core.store.base import SnapshotStore

from .summary import plan_totals

StepUpdater = Callable[[Step], Step]
PlanUpdater = Callable[[Snapshot], Snapshot]

logger = get_logger(__name__)


def new_step_id() -> str:
    return str(uuid.uuid4())


def _insert_at(steps: tuple[Step, ...], index: int | None, step: Step) -> tuple[Step, ...]:
    position = len(steps) if index is None else max(0, min(index, len(steps)))
    return (*steps[:position], step, *steps[position:])


def _move(steps: tuple[Step, ...], from_index: int, to_index: int) -> tuple[Step, ...]:
    items = list(steps)
    item = items.pop(from_index)
    items.insert(to_index, item)
    return tuple(items)


def _round_minutes(minutes: float) -> int:
    if not math.isfinite(minutes):
        return 0
    return max(0, math.floor(minutes + 0.5))


class PlanEditor:
    """Undoable, autosaved editing session over one lesson plan.

    Parameters
    ----------
    initial:
        Snapshot the session starts from (usually a fresh template); its id
        is the document id for the whole session.
    store:
        Durable backend for autosave and hydration.
    debounce_seconds:
        Autosave debounce window; defaults to configuration.
    clock:
        Source of ``updated_at`` / ``last_saved_at`` timestamps.
    sleep:
        Timer primitive for the debounce (simulated in tests).
    id_factory:
        Generator of fresh step ids.
    on_error:
        Called with the exception when a save fails.
    """

    def __init__(
        self,
        initial: Snapshot,
        store: SnapshotStore,
        *,
        debounce_seconds: float | None = None,
        clock: Callable[[], datetime] = utc_now,
        sleep: Sleep = asyncio.sleep,
        id_factory: Callable[[], str] = new_step_id,
        on_error: ErrorCallback | None = None,
    ) -> None:
        self.history = HistoryEngine(initial)
        self.autosave = AutosaveEngine(
            initial.id,
            store,
            debounce_seconds=debounce_seconds,
            on_hydrated=self._handle_hydrated,
            on_saved=self._handle_saved,
            on_error=on_error,
            clock=clock,
            sleep=sleep,
        )
        self._clock = clock
        self._new_id = id_factory
        self._initial_serialized = serialize_snapshot(self.history.snapshot)
        self._unsubscribe: Callable[[], None] | None = None

    # ------------------------------- Lifecycle ------------------------------

    async def open(self, *, hydrate: bool = True) -> None:
        """Start autosaving and, by default, load the stored snapshot."""
        if self._unsubscribe is None:
            self._unsubscribe = self.history.subscribe(self.autosave.observe)
            self.autosave.observe(self.history.snapshot)
        if hydrate:
            await self.autosave.hydrate()

    async def close(self) -> None:
        """End the session: no stale write may fire after this returns."""
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        await self.autosave.close()

    async def flush(self) -> SaveResult:
        """Write any pending change now instead of waiting for the debounce."""
        return await self.autosave.flush()

    async def __aenter__(self) -> PlanEditor:
        await self.open()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.close()

    # ------------------------------- Read API -------------------------------

    @property
    def plan(self) -> Snapshot:
        return self.history.snapshot

    @property
    def steps(self) -> tuple[Step, ...]:
        return self.history.snapshot.steps

    @property
    def target_minutes(self) -> int:
        return self.history.snapshot.target_minutes

    @property
    def totals(self) -> PlanTotals:
        return plan_totals(self.history.snapshot)

    @property
    def can_undo(self) -> bool:
        return self.history.can_undo

    @property
    def can_redo(self) -> bool:
        return self.history.can_redo

    @property
    def is_saving(self) -> bool:
        return self.autosave.is_saving

    @property
    def last_saved_at(self) -> datetime | None:
        return self.autosave.last_saved_at

    @property
    def last_error(self) -> str | None:
        return self.autosave.last_error

    @property
    def is_stored(self) -> bool:
        """True once the plan is known to exist in the store."""
        return self.autosave.server_snapshot is not None

    @property
    def is_pristine(self) -> bool:
        """No edit has been made (or undone) since the session started."""
        state = self.history.state
        return (
            not state.past
            and not state.future
            and serialize_snapshot(state.present) == self._initial_serialized
        )

    # ------------------------------- Mutations ------------------------------

    def add_step_from_template(self, template: StepTemplate, index: int | None = None) -> Step:
        """Insert a fresh step built from ``template`` (appended by default)."""
        step = step_from_template(template, self._new_id())
        self.history.update(
            lambda current: self._stamp(current, steps=_insert_at(current.steps, index, step))
        )
        return step

    def add_custom_step(self, draft: StepDraft, index: int | None = None) -> Step:
        """Insert a caller-described step and return it with its new id."""
        step = Step.model_validate({**draft.model_dump(), "id": self._new_id()})
        self.history.update(
            lambda current: self._stamp(current, steps=_insert_at(current.steps, index, step))
        )
        return step

    def duplicate_step(self, step_id: str, index: int | None = None) -> Step | None:
        """Copy a step under a new id, titled ``"<title> (Copy)"``.

        The copy lands right after the original unless ``index`` is given.
        Returns None for an unknown id.
        """
        source = self.plan.find_step(step_id)
        if source is None:
            return None
        duplicate = source.model_copy(
            update={"id": self._new_id(), "title": f"{source.title} (Copy)"}, deep=True
        )

        def _updater(current: Snapshot) -> Snapshot:
            original_index = current.step_index(step_id)
            target = original_index + 1 if index is None else index
            return self._stamp(current, steps=_insert_at(current.steps, target, duplicate))

        self.history.update(_updater)
        return duplicate

    def remove_step(self, step_id: str) -> bool:
        if self.plan.find_step(step_id) is None:
            return False
        return self.history.update(
            lambda current: self._stamp(
                current, steps=tuple(step for step in current.steps if step.id != step_id)
            )
        )

    def reorder_steps(self, from_index: int, to_index: int) -> bool:
        """Move one step; equal or out-of-range indices are a no-op."""
        count = len(self.steps)
        if from_index == to_index:
            return False
        if not (0 <= from_index < count and 0 <= to_index < count):
            return False
        return self.history.update(
            lambda current: self._stamp(current, steps=_move(current.steps, from_index, to_index))
        )

    def set_target_minutes(self, minutes: float) -> bool:
        value = _round_minutes(minutes)
        return self.history.update(lambda current: self._stamp(current, target_minutes=value))

    def update_step(self, step_id: str, updater: StepUpdater) -> bool:
        """Apply a field-level edit to one step; its id cannot change."""
        if self.plan.find_step(step_id) is None:
            return False

        def _updater(current: Snapshot) -> Snapshot:
            steps = tuple(
                updater(step).model_copy(update={"id": step.id}) if step.id == step_id else step
                for step in current.steps
            )
            return self._stamp(current, steps=steps)

        return self.history.update(_updater)

    def update_plan(self, updater: PlanUpdater) -> bool:
        """Apply a whole-snapshot transform such as a title edit."""

        def _updater(current: Snapshot) -> Snapshot:
            return self._stamp(updater(current), id=current.id)

        return self.history.update(_updater)

    def rename(self, title: str) -> bool:
        return self.update_plan(lambda current: current.model_copy(update={"title": title}))

    def undo(self) -> bool:
        return self.history.undo()

    def redo(self) -> bool:
        return self.history.redo()

    def reset(self, snapshot: Snapshot) -> None:
        """Hard reset: new present, empty stacks, server revision back to 0."""
        self.history.reset(snapshot)
        self._initial_serialized = serialize_snapshot(self.history.snapshot)

    # ------------------------------- Internals ------------------------------

    def _stamp(self, snapshot: Snapshot, **changes: Any) -> Snapshot:
        return snapshot.model_copy(update={**changes, "updated_at": self._clock()})

    def _handle_hydrated(self, stored: Snapshot) -> None:
        if not self.is_pristine:
            logger.warning(
                "plan %s: unsaved edits in this session, keeping them over the stored snapshot",
                stored.id,
            )
            return
        self.history.apply(stored, push_to_history=False)
        self.history.mark_server_snapshot()
        self._initial_serialized = serialize_snapshot(self.history.snapshot)

    def _handle_saved(self, _snapshot: Snapshot) -> None:
        self.history.mark_server_snapshot()


__all__ = ["PlanEditor", "PlanUpdater", "StepUpdater", "new_step_id"]
