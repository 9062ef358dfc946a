"""
Debounced, redundancy-aware autosave of one plan document.

The engine keeps a *server baseline*: the canonical serialised form of the
last snapshot confirmed durable (written, or loaded by ``hydrate``). Any
snapshot that serialises identically to the baseline is never sent again;
anything else restarts the debounce timer, and only the newest value is
written when it fires.

Wiring
------
``observe`` is meant to be subscribed to
:meth:`HistoryEngine.subscribe <plandraft.core.history.engine.HistoryEngine.subscribe>`,
so edits schedule saves without anyone calling ``touch``. ``on_hydrated``,
``on_saved`` and ``on_error`` are plain callbacks injected by the editor.

Failure model
-------------
A failed write is recorded in :attr:`AutosaveState.last_error`, reported to
``on_error`` and returned by :meth:`flush`; it is never retried here.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from datetime import datetime
from functools import partial

from plandraft.core.contracts.plan import Snapshot, serialize_snapshot, utc_now
from plandraft.core.contracts.state import AutosaveState
from plandraft.core.result import Result, err, ok
from plandraft.core.settings import get_logger, load_settings
from plandraft.core.store.base import SnapshotStore, StoreError

from .scheduler import DebounceScheduler, Sleep

SnapshotCallback = Callable[[Snapshot], None]
ErrorCallback = Callable[[Exception], None]
SaveResult = Result[Snapshot | None, str]

logger = get_logger(__name__)


class AutosaveEngine:
    """Persist a plan's working snapshot through a :class:`SnapshotStore`.

    Parameters
    ----------
    document_id:
        Id of the plan; the store key.
    store:
        Durable backend. Assumed single-writer for this id during a session.
    debounce_seconds:
        Trailing-edge debounce window. Defaults to the configured
        ``PLANDRAFT_AUTOSAVE_DEBOUNCE_MS`` (800 ms).
    on_hydrated, on_saved, on_error:
        Optional callbacks, see the module docstring.
    clock:
        Source of ``last_saved_at`` timestamps.
    sleep:
        Timer primitive handed to the scheduler (simulated in tests).
    """

    def __init__(
        self,
        document_id: str,
        store: SnapshotStore,
        *,
        debounce_seconds: float | None = None,
        on_hydrated: SnapshotCallback | None = None,
        on_saved: SnapshotCallback | None = None,
        on_error: ErrorCallback | None = None,
        clock: Callable[[], datetime] = utc_now,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        if debounce_seconds is None:
            debounce_seconds = load_settings().autosave_debounce_seconds
        self.document_id = document_id
        self.on_hydrated = on_hydrated
        self.on_saved = on_saved
        self.on_error = on_error
        self._store = store
        self._clock = clock
        self._scheduler = DebounceScheduler(debounce_seconds, sleep=sleep)
        self._state = AutosaveState()
        self._latest: Snapshot | None = None
        self._last_result: SaveResult = ok(None)

    # ------------------------------- Read API -------------------------------

    @property
    def state(self) -> AutosaveState:
        return self._state

    @property
    def is_saving(self) -> bool:
        return self._state.is_saving

    @property
    def last_saved_at(self) -> datetime | None:
        return self._state.last_saved_at

    @property
    def server_snapshot(self) -> Snapshot | None:
        return self._state.server_snapshot

    @property
    def server_serialized(self) -> str | None:
        return self._state.server_serialized

    @property
    def last_error(self) -> str | None:
        return self._state.last_error

    @property
    def has_pending_save(self) -> bool:
        return self._scheduler.pending

    # ------------------------------ Operations ------------------------------

    async def hydrate(self) -> Snapshot | None:
        """Load the last persisted snapshot and adopt it as the baseline.

        Unreadable data and backend read errors both count as "nothing
        stored"; the session then keeps its in-memory value, which becomes
        the first write. A read error is also kept in ``last_error`` so a
        caller can tell an unreachable store from an empty one.
        """
        try:
            stored = await self._store.load(self.document_id)
        except StoreError as exc:
            logger.warning("plan %s: hydrate failed, continuing unsaved: %s", self.document_id, exc)
            self._state = self._state.model_copy(update={"last_error": str(exc)})
            return None

        if stored is None:
            logger.info("plan %s: no stored snapshot", self.document_id)
            return None

        self.set_server_snapshot(stored)
        logger.info("plan %s: hydrated (%d steps)", self.document_id, len(stored.steps))
        if self.on_hydrated is not None:
            self.on_hydrated(stored)
        if self._latest is not None:
            self.touch(self._latest)
        return stored

    def observe(self, snapshot: Snapshot) -> None:
        """Reactive trigger: remember the working snapshot and touch it."""
        self._latest = snapshot
        self.touch(snapshot)

    def touch(self, snapshot: Snapshot) -> bool:
        """Schedule a save of ``snapshot`` unless it matches the baseline.

        Returns True when a save was (re)scheduled. A snapshot equal to the
        baseline also drops a pending save, whose value is stale by now.
        """
        if serialize_snapshot(snapshot) == self._state.server_serialized:
            self._scheduler.cancel()
            return False
        self._scheduler.schedule(partial(self._persist, snapshot))
        return True

    def set_server_snapshot(self, snapshot: Snapshot | None) -> None:
        """Overwrite the baseline without writing anything."""
        self._state = self._state.model_copy(
            update={
                "server_snapshot": snapshot,
                "server_serialized": (
                    serialize_snapshot(snapshot) if snapshot is not None else None
                ),
            }
        )

    async def flush(self) -> SaveResult:
        """Write a pending save immediately and wait for the store.

        Returns ``Ok(snapshot)`` for the last completed write, ``Ok(None)``
        when there was nothing to write, or ``Err(message)`` on failure.
        """
        if not (self._scheduler.pending or self._scheduler.running):
            return ok(None)
        await self._scheduler.flush()
        return self._last_result

    async def wait_idle(self) -> None:
        """Wait for the pending timer to fire and the write to settle."""
        await self._scheduler.wait_idle()

    async def close(self) -> None:
        """Cancel any pending save; a write already in flight completes."""
        await self._scheduler.close()

    # ------------------------------- Internals ------------------------------

    async def _persist(self, snapshot: Snapshot) -> None:
        sent = serialize_snapshot(snapshot)
        self._state = self._state.model_copy(update={"is_saving": True})
        logger.debug("plan %s: saving (%d steps)", self.document_id, len(snapshot.steps))
        try:
            echoed = await self._store.save(self.document_id, snapshot)
        except Exception as exc:
            # Any backend failure becomes an error state; the caller decides
            # whether to touch again.
            self._state = self._state.model_copy(
                update={"is_saving": False, "last_error": str(exc)}
            )
            self._last_result = err(f"Save failed: {exc}")
            logger.error("plan %s: save failed: %s", self.document_id, exc)
            if self.on_error is not None:
                self.on_error(exc)
            return

        echoed_serialized = serialize_snapshot(echoed)
        if echoed_serialized != sent:
            logger.warning(
                "plan %s: store echoed a different snapshot than was sent; "
                "adopting the echo as baseline without reconciling",
                self.document_id,
            )
        self._state = AutosaveState(
            is_saving=False,
            last_saved_at=self._clock(),
            server_snapshot=echoed,
            server_serialized=echoed_serialized,
            last_error=None,
        )
        self._last_result = ok(echoed)
        logger.info("plan %s: saved", self.document_id)
        if self.on_saved is not None:
            self.on_saved(echoed)
        self._resave_if_moved_on(sent)

    def _resave_if_moved_on(self, sent: str) -> None:
        # An edit made during the write may have landed back on the old
        # baseline (undo), in which case no timer was started for it.
        if self._latest is None or self._scheduler.pending:
            return
        latest = serialize_snapshot(self._latest)
        if latest != sent and latest != self._state.server_serialized:
            logger.info("plan %s: working copy changed during save, rescheduling", self.document_id)
            self.touch(self._latest)


__all__ = ["AutosaveEngine", "ErrorCallback", "SaveResult", "SnapshotCallback"]
