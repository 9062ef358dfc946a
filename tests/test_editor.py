"""Tests for `PlanEditor`, the mutation facade over history and autosave.

Scope
-----
1.  **End-to-end session**: edit, no-op, undo, redo, then one debounced write.
2.  **Hydration**: a stored plan replaces a pristine session without creating
    undo frames; a session with local edits keeps them.
3.  **Mutations**: every operation is total (unknown ids and out-of-range
    indices leave the plan untouched) and stamps `updated_at` when it applies.
"""

from __future__ import annotations

import asyncio
import itertools
import math
from collections.abc import Callable

from conftest import (
    BASE_TIME,
    FakeClock,
    RecordingStore,
    Ticker,
    make_snapshot,
    make_step,
)
from plandraft.core.contracts.plan import Snapshot, StepDraft
from plandraft.core.store.base import StoreError
from plandraft.editor.facade import PlanEditor
from plandraft.editor.templates import find_template

DEBOUNCE = 0.8


def _ids() -> Callable[[], str]:
    counter = itertools.count(1)
    return lambda: f"step-{next(counter)}"


def _editor(
    store: RecordingStore,
    fake_clock: FakeClock,
    ticker: Ticker,
    initial: Snapshot | None = None,
) -> PlanEditor:
    return PlanEditor(
        initial or make_snapshot("plan-1"),
        store,
        debounce_seconds=DEBOUNCE,
        clock=ticker,
        sleep=fake_clock.sleep,
        id_factory=_ids(),
    )


def _step_ids(editor: PlanEditor) -> list[str]:
    return [step.id for step in editor.steps]


# --------------------------------------------------------------------------- #
# Sessions
# --------------------------------------------------------------------------- #


def test_end_to_end_session_writes_once(fake_clock: FakeClock, ticker: Ticker) -> None:
    """add -> no-op reorder -> undo -> redo -> idle: exactly one save, one step."""
    store = RecordingStore()
    template = find_template("collaborative-activity")
    assert template is not None

    async def scenario() -> None:
        editor = _editor(store, fake_clock, ticker)
        await editor.open()

        added = editor.add_step_from_template(template)
        assert _step_ids(editor) == [added.id]
        assert editor.can_undo
        past_size = len(editor.history.state.past)

        assert editor.reorder_steps(0, 0) is False
        assert len(editor.history.state.past) == past_size

        assert editor.undo() is True
        assert editor.steps == ()
        assert editor.can_redo

        assert editor.redo() is True
        assert _step_ids(editor) == [added.id]

        await fake_clock.advance(DEBOUNCE)

        assert len(store.saves) == 1
        saved = store.saves[0]
        assert [step.id for step in saved.steps] == [added.id]
        assert saved.steps[0].duration_minutes == 15
        assert editor.last_saved_at is not None
        assert editor.history.server_revision == 1
        assert editor.is_stored

        await editor.close()

    asyncio.run(scenario())


def test_hydration_replaces_pristine_session_without_history(
    fake_clock: FakeClock, ticker: Ticker
) -> None:
    """A stored plan becomes present; nothing is undoable and nothing is re-sent."""
    store = RecordingStore()
    stored = make_snapshot("plan-1", make_step("warmup"), make_step("lesson"))

    async def scenario() -> None:
        await store.save("plan-1", stored)
        store.saves.clear()

        editor = _editor(store, fake_clock, ticker)
        await editor.open()

        assert editor.plan == stored
        assert not editor.can_undo and not editor.can_redo
        assert editor.history.server_revision == 1
        assert editor.is_pristine and editor.is_stored

        await fake_clock.advance(DEBOUNCE * 3)
        assert store.saves == []
        await editor.close()

    asyncio.run(scenario())


def test_hydration_does_not_clobber_local_edits(fake_clock: FakeClock, ticker: Ticker) -> None:
    """Edits made before the stored plan arrives win and are written back."""
    store = RecordingStore()
    stored = make_snapshot("plan-1", make_step("server-step"))

    async def scenario() -> None:
        await store.save("plan-1", stored)
        store.saves.clear()

        editor = _editor(store, fake_clock, ticker)
        await editor.open(hydrate=False)
        editor.rename("Local title")

        await editor.autosave.hydrate()

        assert editor.plan.title == "Local title"
        assert editor.can_undo
        assert editor.history.server_revision == 0

        await fake_clock.advance(DEBOUNCE)
        assert [snapshot.title for snapshot in store.saves] == ["Local title"]
        await editor.close()

    asyncio.run(scenario())


def test_context_manager_flush_and_close(fake_clock: FakeClock, ticker: Ticker) -> None:
    store = RecordingStore()

    async def scenario() -> None:
        async with _editor(store, fake_clock, ticker) as editor:
            editor.set_target_minutes(45)
            result = await editor.flush()
            assert result.is_ok()
            saved = result.unwrap()
            assert saved is not None and saved.target_minutes == 45

            editor.set_target_minutes(30)
        # Leaving the block cancelled the pending write.
        await fake_clock.advance(DEBOUNCE * 2)
        assert [snapshot.target_minutes for snapshot in store.saves] == [45]

    asyncio.run(scenario())


def test_save_failure_reaches_error_callback(fake_clock: FakeClock, ticker: Ticker) -> None:
    store = RecordingStore()
    store.fail_with = StoreError("read-only filesystem")
    errors: list[Exception] = []

    async def scenario() -> None:
        editor = PlanEditor(
            make_snapshot("plan-1"),
            store,
            debounce_seconds=DEBOUNCE,
            clock=ticker,
            sleep=fake_clock.sleep,
            on_error=errors.append,
        )
        await editor.open()
        editor.rename("Broken")
        await fake_clock.advance(DEBOUNCE)

        assert errors == [store.fail_with]
        assert editor.last_error == "read-only filesystem"
        assert editor.last_saved_at is None
        assert editor.history.server_revision == 0
        await editor.close()

    asyncio.run(scenario())


# --------------------------------------------------------------------------- #
# Mutations
# --------------------------------------------------------------------------- #


def _loaded_editor(ticker: Ticker) -> PlanEditor:
    initial = make_snapshot("plan-1", make_step("a", 5), make_step("b", 10), make_step("c", 20))
    return PlanEditor(
        initial, RecordingStore(), debounce_seconds=DEBOUNCE, clock=ticker, id_factory=_ids()
    )


def test_add_step_clamps_index_and_stamps_time(ticker: Ticker) -> None:
    editor = _loaded_editor(ticker)
    template = find_template("warmup-timer")
    assert template is not None

    first = editor.add_step_from_template(template, -4)
    last = editor.add_step_from_template(template, 99)

    assert _step_ids(editor) == [first.id, "a", "b", "c", last.id]
    assert first.id != last.id
    assert first.kind == "timer" and first.duration_minutes == 5
    assert editor.plan.updated_at == ticker.current
    assert editor.plan.updated_at > BASE_TIME


def test_add_custom_step_assigns_id(ticker: Ticker) -> None:
    editor = _loaded_editor(ticker)
    draft = StepDraft(kind="objective", title="Students can compare fractions", notes="")

    step = editor.add_custom_step(draft, 1)

    assert step.id == "step-1"
    assert editor.steps[1] == step
    assert step.title == "Students can compare fractions"


def test_duplicate_step_inserts_copy_after_original(ticker: Ticker) -> None:
    editor = _loaded_editor(ticker)

    copy = editor.duplicate_step("b")

    assert copy is not None
    assert _step_ids(editor) == ["a", "b", copy.id, "c"]
    assert copy.title == "B (Copy)"
    assert copy.duration_minutes == 10
    assert len(set(_step_ids(editor))) == 4


def test_duplicate_step_with_explicit_index_and_unknown_id(ticker: Ticker) -> None:
    editor = _loaded_editor(ticker)

    copy = editor.duplicate_step("c", 0)
    assert copy is not None
    assert _step_ids(editor)[0] == copy.id

    before = editor.history.state
    assert editor.duplicate_step("nope") is None
    assert editor.history.state is before


def test_duplicate_does_not_share_metadata(ticker: Ticker) -> None:
    initial = make_snapshot(
        "plan-1", make_step("a").model_copy(update={"metadata": {"codes": ["RL.1"]}})
    )
    editor = PlanEditor(initial, RecordingStore(), debounce_seconds=DEBOUNCE, clock=ticker)

    copy = editor.duplicate_step("a")

    assert copy is not None and copy.metadata is not None
    copy.metadata["codes"].append("RL.2")
    original = editor.plan.find_step("a")
    assert original is not None and original.metadata == {"codes": ["RL.1"]}


def test_remove_step(ticker: Ticker) -> None:
    editor = _loaded_editor(ticker)
    before = editor.history.state

    assert editor.remove_step("zzz") is False
    assert editor.history.state is before

    assert editor.remove_step("b") is True
    assert _step_ids(editor) == ["a", "c"]


def test_reorder_steps(ticker: Ticker) -> None:
    editor = _loaded_editor(ticker)

    assert editor.reorder_steps(0, 2) is True
    assert _step_ids(editor) == ["b", "c", "a"]

    before = editor.history.state
    assert editor.reorder_steps(1, 1) is False
    assert editor.reorder_steps(-1, 0) is False
    assert editor.reorder_steps(0, 3) is False
    assert editor.history.state is before


def test_set_target_minutes_rounds_and_clamps(ticker: Ticker) -> None:
    editor = _loaded_editor(ticker)

    editor.set_target_minutes(44.5)
    assert editor.target_minutes == 45
    editor.set_target_minutes(44.4)
    assert editor.target_minutes == 44
    editor.set_target_minutes(-3)
    assert editor.target_minutes == 0
    editor.set_target_minutes(90)
    editor.set_target_minutes(math.nan)
    assert editor.target_minutes == 0
    editor.set_target_minutes(math.inf)
    assert editor.target_minutes == 0


def test_update_step_keeps_identity(ticker: Ticker) -> None:
    editor = _loaded_editor(ticker)

    changed = editor.update_step(
        "b", lambda step: step.model_copy(update={"id": "hijacked", "notes": "Use manipulatives"})
    )

    assert changed is True
    step = editor.plan.find_step("b")
    assert step is not None and step.notes == "Use manipulatives"
    assert editor.plan.find_step("hijacked") is None
    assert editor.update_step("zzz", lambda step: step) is False


def test_update_plan_and_rename_keep_plan_id(ticker: Ticker) -> None:
    editor = _loaded_editor(ticker)

    editor.update_plan(lambda plan: plan.model_copy(update={"id": "other", "title": "Renamed"}))
    assert editor.plan.id == "plan-1"
    assert editor.plan.title == "Renamed"

    assert editor.rename("Fractions, day 2") is True
    assert editor.plan.title == "Fractions, day 2"


def test_undo_redo_through_facade(ticker: Ticker) -> None:
    editor = _loaded_editor(ticker)
    original = editor.plan

    editor.remove_step("a")
    edited = editor.plan

    assert editor.undo() is True
    assert editor.plan == original
    assert editor.redo() is True
    assert editor.plan == edited
    assert editor.redo() is False


def test_totals_and_pristine_flags(ticker: Ticker) -> None:
    editor = _loaded_editor(ticker)
    assert editor.is_pristine and not editor.is_stored
    assert editor.totals.total_minutes == 35
    assert editor.totals.remaining_minutes == 25

    editor.set_target_minutes(30)
    assert not editor.is_pristine
    assert editor.totals.overflow

    editor.undo()
    # Back to the initial value but with a redo frame: not pristine.
    assert not editor.is_pristine


def test_reset_replaces_session(ticker: Ticker) -> None:
    editor = _loaded_editor(ticker)
    editor.remove_step("a")
    editor.history.mark_server_snapshot()

    editor.reset(make_snapshot("plan-1"))

    assert editor.steps == ()
    assert not editor.can_undo and not editor.can_redo
    assert editor.history.server_revision == 0
    assert editor.is_pristine
