"""
Stateful holder for the undo/redo reducer.

:class:`HistoryEngine` owns one :class:`HistoryState`, dispatches the pure
transitions from :mod:`.reducer` and tells subscribers when ``present``
changed. The autosave engine subscribes here; that subscription is the
"implicit reactive trigger" that schedules saves for ordinary edits.
"""

from __future__ import annotations

from collections.abc import Callable

from plandraft.core.contracts.plan import Snapshot
from plandraft.core.contracts.state import HistoryState
from plandraft.core.settings import get_logger

from . import reducer
from .reducer import SnapshotUpdater

SnapshotListener = Callable[[Snapshot], None]

logger = get_logger(__name__)


class HistoryEngine:
    """Undo/redo state machine over plan snapshots."""

    __slots__ = ("_state", "_listeners")

    def __init__(self, initial: Snapshot) -> None:
        self._state: HistoryState = reducer.initial_state(initial)
        self._listeners: list[SnapshotListener] = []

    # ------------------------------- Read API -------------------------------

    @property
    def state(self) -> HistoryState:
        return self._state

    @property
    def snapshot(self) -> Snapshot:
        """The current working snapshot (``present``)."""
        return self._state.present

    @property
    def can_undo(self) -> bool:
        return self._state.can_undo

    @property
    def can_redo(self) -> bool:
        return self._state.can_redo

    @property
    def server_revision(self) -> int:
        return self._state.server_revision

    # ----------------------------- Subscriptions ----------------------------

    def subscribe(self, listener: SnapshotListener) -> Callable[[], None]:
        """Call ``listener(present)`` after every change of present.

        Returns an unsubscribe callable.
        """
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    # ------------------------------ Transitions -----------------------------

    def apply(self, snapshot: Snapshot, *, push_to_history: bool = False) -> None:
        self._dispatch(reducer.apply(self._state, snapshot, push_to_history=push_to_history))

    def update(self, updater: SnapshotUpdater) -> bool:
        """Record ``updater(present)``; return False when it was a no-op."""
        return self._dispatch(reducer.update(self._state, updater))

    def undo(self) -> bool:
        return self._dispatch(reducer.undo(self._state))

    def redo(self) -> bool:
        return self._dispatch(reducer.redo(self._state))

    def reset(self, snapshot: Snapshot) -> None:
        self._dispatch(reducer.reset(self._state, snapshot))

    def mark_server_snapshot(self) -> None:
        self._state = reducer.mark_server_snapshot(self._state)
        logger.debug(
            "plan %s server revision -> %d", self._state.present.id, self._state.server_revision
        )

    # ------------------------------- Internals ------------------------------

    def _dispatch(self, next_state: HistoryState) -> bool:
        if next_state is self._state:
            return False
        previous = self._state.present
        self._state = next_state
        if next_state.present is not previous:
            for listener in list(self._listeners):
                listener(next_state.present)
        return True


__all__ = ["HistoryEngine", "SnapshotListener"]
