"""Process-local snapshot store.

Keeps the serialised JSON (not the model) so that every ``load`` hands out a
fresh, independently owned snapshot, exactly like a real backend would.
"""

from __future__ import annotations

from plandraft.core.contracts.plan import Snapshot, serialize_snapshot
from plandraft.core.settings import get_logger

from .base import decode_snapshot, storage_key

logger = get_logger(__name__)


class InMemorySnapshotStore:
    """Dictionary-backed store; volatile, mainly for tests and the API default."""

    def __init__(self) -> None:
        self._data: dict[str, str] = {}

    async def save(self, document_id: str, snapshot: Snapshot) -> Snapshot:
        self._data[storage_key(document_id)] = serialize_snapshot(snapshot)
        return snapshot

    async def load(self, document_id: str) -> Snapshot | None:
        raw = self._data.get(storage_key(document_id))
        if raw is None:
            return None
        result = decode_snapshot(raw)
        if result.is_err():
            logger.warning("plan %s: %s", document_id, result.unwrap_err())
            return None
        return result.unwrap()

    def put_raw(self, document_id: str, raw: str) -> None:
        """Store an arbitrary blob under a plan id (used to seed fixtures)."""
        self._data[storage_key(document_id)] = raw

    def keys(self) -> tuple[str, ...]:
        """Return the stored keys as a sorted tuple (stable for tests)."""
        return tuple(sorted(self._data))

    def __len__(self) -> int:  # pragma: no cover - trivial
        return len(self._data)


__all__ = ["InMemorySnapshotStore"]
