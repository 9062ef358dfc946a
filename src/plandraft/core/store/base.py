"""
Snapshot store contract.

A snapshot store is the durable side of the editor: key/value persistence of
one serialised :class:`Snapshot` per document id. The engine needs only two
calls and relies on two guarantees:

- ``save`` echoes back the value that is now durable (the autosave engine
  treats the echo as its new server baseline);
- ``load`` returns ``None`` both for "never saved" and for "stored data is
  unreadable". Malformed data is logged by the backend and never raised.

Backends: :mod:`.memory` (process-local dict), :mod:`.file` (one JSON file per
plan) and :mod:`.http` (the plan API in :mod:`plandraft.api`).
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from pydantic import ValidationError

from plandraft.core.contracts.plan import Snapshot, parse_snapshot
from plandraft.core.result import Result, err, ok


class StoreError(RuntimeError):
    """A backend could not read or write (I/O, HTTP, permissions)."""


@runtime_checkable
class SnapshotStore(Protocol):
    """Async key/value persistence of plan snapshots."""

    async def save(self, document_id: str, snapshot: Snapshot) -> Snapshot: ...

    async def load(self, document_id: str) -> Snapshot | None: ...


def storage_key(document_id: str) -> str:
    """Namespaced key under which a plan is kept (``plan:<id>``)."""
    return f"plan:{document_id}"


def decode_snapshot(raw: str | bytes) -> Result[Snapshot, str]:
    """Parse a stored blob, reporting malformed data as ``Err``."""
    try:
        text = raw.decode("utf-8") if isinstance(raw, bytes) else raw
    except UnicodeDecodeError as exc:
        return err(f"unreadable snapshot (not UTF-8: {exc.reason} at byte {exc.start})")
    try:
        return ok(parse_snapshot(text))
    except ValidationError as exc:
        return err(f"unreadable snapshot ({exc.error_count()} validation errors)")


__all__ = ["SnapshotStore", "StoreError", "decode_snapshot", "storage_key"]
