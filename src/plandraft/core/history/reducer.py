"""
Pure undo/redo transitions over :class:`HistoryState`.

Every function takes a state and returns a state. When a transition has
nothing to do (empty stack, no-op edit) the *same* state object is returned,
which is how :class:`~plandraft.core.history.engine.HistoryEngine` decides
that subscribers need no notification.

Frames entering the history are deep-cloned, so no two frames share a Step
or a metadata dict.
"""

from __future__ import annotations

from collections.abc import Callable

from plandraft.core.contracts.plan import Snapshot, clone_snapshot, serialize_snapshot
from plandraft.core.contracts.state import HistoryState

SnapshotUpdater = Callable[[Snapshot], Snapshot]


def initial_state(snapshot: Snapshot) -> HistoryState:
    """Start a history whose only frame is a private copy of ``snapshot``."""
    return HistoryState(present=clone_snapshot(snapshot))


def apply(state: HistoryState, snapshot: Snapshot, *, push_to_history: bool) -> HistoryState:
    """Replace ``present``.

    With ``push_to_history`` the old present becomes undoable and the redo
    branch is discarded. Without it (hydration from storage) ``past`` and
    ``future`` are left exactly as they were.
    """
    if push_to_history:
        return state.model_copy(
            update={
                "past": (*state.past, state.present),
                "present": clone_snapshot(snapshot),
                "future": (),
            }
        )
    return state.model_copy(update={"present": clone_snapshot(snapshot)})


def update(state: HistoryState, updater: SnapshotUpdater) -> HistoryState:
    """Run ``updater`` on a private copy of present and record the result.

    A candidate that serialises identically to present is discarded, so
    no-op edits never grow the undo stack.
    """
    candidate = clone_snapshot(updater(clone_snapshot(state.present)))
    if serialize_snapshot(candidate) == serialize_snapshot(state.present):
        return state
    return state.model_copy(
        update={
            "past": (*state.past, state.present),
            "present": candidate,
            "future": (),
        }
    )


def undo(state: HistoryState) -> HistoryState:
    if not state.past:
        return state
    return state.model_copy(
        update={
            "past": state.past[:-1],
            "present": state.past[-1],
            "future": (state.present, *state.future),
        }
    )


def redo(state: HistoryState) -> HistoryState:
    if not state.future:
        return state
    return state.model_copy(
        update={
            "past": (*state.past, state.present),
            "present": state.future[0],
            "future": state.future[1:],
        }
    )


def reset(state: HistoryState, snapshot: Snapshot) -> HistoryState:
    """Hard session reset: drop both stacks and the server revision."""
    return HistoryState(present=clone_snapshot(snapshot))


def mark_server_snapshot(state: HistoryState) -> HistoryState:
    return state.model_copy(update={"server_revision": state.server_revision + 1})


__all__ = [
    "SnapshotUpdater",
    "apply",
    "initial_state",
    "mark_server_snapshot",
    "redo",
    "reset",
    "undo",
    "update",
]
