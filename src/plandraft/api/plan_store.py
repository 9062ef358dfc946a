"""
Process-wide plan repository for the HTTP API.

The API is the server side of :class:`~plandraft.core.store.http.HttpSnapshotStore`:
it keeps plans in whichever local backend the settings name. Asking the API
itself for the ``http`` backend would make it call itself, so that setting
falls back to a volatile in-memory store.
"""

from __future__ import annotations

from typing import ClassVar

from plandraft.core.settings import get_logger, load_settings
from plandraft.core.store.base import SnapshotStore
from plandraft.core.store.factory import open_store
from plandraft.core.store.memory import InMemorySnapshotStore

logger = get_logger(__name__)


def _default_store() -> SnapshotStore:
    config = load_settings()
    if config.store_backend == "http":
        logger.warning("API cannot proxy to itself; using an in-memory plan store")
        return InMemorySnapshotStore()
    return open_store(config)


class PlanRepository:
    """Holds the snapshot store every API request reads and writes."""

    # Singleton instance placeholder (initialized in app startup)
    _instance: ClassVar[PlanRepository | None] = None

    def __init__(self, store: SnapshotStore | None = None) -> None:
        self.store: SnapshotStore = store if store is not None else _default_store()

    @classmethod
    def get_instance(cls) -> PlanRepository:
        """Accessor for the global singleton instance."""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    @classmethod
    def install(cls, store: SnapshotStore) -> PlanRepository:
        """Replace the singleton with one backed by ``store`` (tests, embedding)."""
        cls._instance = cls(store)
        return cls._instance


def get_plan_repository() -> PlanRepository:
    return PlanRepository.get_instance()


__all__ = ["PlanRepository", "get_plan_repository"]
