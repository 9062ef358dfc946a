"""Build the snapshot store a session should use from settings."""

from __future__ import annotations

from plandraft.core.settings import Settings, load_settings

from .base import SnapshotStore
from .file import JsonFileSnapshotStore
from .http import HttpSnapshotStore
from .memory import InMemorySnapshotStore


def open_store(config: Settings | None = None) -> SnapshotStore:
    """Return the backend named by ``config.store_backend``."""
    config = config or load_settings()
    if config.store_backend == "memory":
        return InMemorySnapshotStore()
    if config.store_backend == "http":
        return HttpSnapshotStore(
            base_url=config.store_url, timeout_seconds=config.store_timeout_seconds
        )
    return JsonFileSnapshotStore(config.store_dir)


__all__ = ["open_store"]
