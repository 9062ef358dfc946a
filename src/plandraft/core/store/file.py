"""Disk-backed snapshot store.

One JSON file per plan:

- Default directory: `PLANDRAFT_STORE_DIR` (see settings) or `artifacts/plans/`
- Filename pattern:  `plan_<percent-encoded id>.json` (one file per distinct id)
- Content:           the canonical serialised snapshot, pretty-printed

Writes go to a sibling temp file which is then renamed over the target, so a
crash mid-write never leaves a half-written plan behind.

Usage
-----
>>> store = JsonFileSnapshotStore(Path("artifacts/plans"))
>>> await store.save("plan-builder-draft", snapshot)
"""

from __future__ import annotations

import asyncio
import json
import urllib.parse
from pathlib import Path

from plandraft.core.contracts.plan import Snapshot, serialize_snapshot
from plandraft.core.settings import get_logger

from .base import StoreError, decode_snapshot

logger = get_logger(__name__)

class JsonFileSnapshotStore:
    """Persist plan snapshots as JSON files under ``base_dir``."""

    def __init__(self, base_dir: Path) -> None:
        self.base_dir: Path = base_dir
        self.base_dir.mkdir(parents=True, exist_ok=True)

    def path_for(self, document_id: str) -> Path:
        """Return the file that holds ``document_id``."""
        safe_id = urllib.parse.quote(document_id, safe="")
        return self.base_dir / f"plan_{safe_id}.json"

    async def save(self, document_id: str, snapshot: Snapshot) -> Snapshot:
        await asyncio.to_thread(self._write, document_id, snapshot)
        return snapshot

    async def load(self, document_id: str) -> Snapshot | None:
        raw = await asyncio.to_thread(self._read, document_id)
        if raw is None:
            return None
        result = decode_snapshot(raw)
        if result.is_err():
            logger.warning(
                "plan %s at %s: %s", document_id, self.path_for(document_id), result.unwrap_err()
            )
            return None
        return result.unwrap()

    # ------------------------------- Blocking IO ----------------------------

    def _write(self, document_id: str, snapshot: Snapshot) -> None:
        path = self.path_for(document_id)
        tmp_path = path.with_suffix(".json.tmp")
        payload = json.loads(serialize_snapshot(snapshot))
        try:
            with tmp_path.open("w", encoding="utf-8") as f:
                json.dump(payload, f, ensure_ascii=False, indent=2)
                f.write("\n")
            tmp_path.replace(path)
        except OSError as exc:
            raise StoreError(f"Failed to write plan {document_id!r} to {path}: {exc}") from exc

    def _read(self, document_id: str) -> bytes | None:
        path = self.path_for(document_id)
        if not path.exists():
            return None
        try:
            return path.read_bytes()
        except OSError as exc:
            raise StoreError(f"Failed to read plan {document_id!r} from {path}: {exc}") from exc


__all__ = ["JsonFileSnapshotStore"]
