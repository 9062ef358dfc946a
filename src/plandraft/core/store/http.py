# -----------------------------------------------------------------------------
# Remote snapshot store speaking to the plan API (see plandraft.api).
#
#   GET {base_url}/plans/{id}  -> 200 snapshot JSON | 404 (never saved)
#   PUT {base_url}/plans/{id}  -> 200 echoed snapshot JSON
#
# The implementation uses only the Python standard library (`urllib.request`)
# and runs each blocking call in a worker thread, so the editor's event loop
# never waits on the network. Unit tests are expected to *mock* `_request()`
# so that no real HTTP calls are made during CI.
# -----------------------------------------------------------------------------
from __future__ import annotations

import asyncio
import json
import urllib.error
import urllib.parse
import urllib.request
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from plandraft.core.contracts.plan import Snapshot, serialize_snapshot
from plandraft.core.settings import get_logger

from .base import StoreError, decode_snapshot

logger = get_logger(__name__)


@dataclass(slots=True)
class HttpSnapshotStore:
    """Snapshot store backed by the plan REST API.

    Parameters
    ----------
    base_url:
        Root of the API, e.g. ``"http://127.0.0.1:8000"``.
    timeout_seconds:
        Socket timeout of each request. The engine itself never retries; a
        timeout surfaces as a failed save.
    """

    base_url: str
    timeout_seconds: float = 10.0

    def url_for(self, document_id: str) -> str:
        quoted = urllib.parse.quote(document_id, safe="")
        return f"{self.base_url.rstrip('/')}/plans/{quoted}"

    async def save(self, document_id: str, snapshot: Snapshot) -> Snapshot:
        payload = json.loads(serialize_snapshot(snapshot))
        body = await asyncio.to_thread(
            self._request, method="PUT", url=self.url_for(document_id), payload=payload
        )
        if body is None:
            raise StoreError(f"Plan API returned no body when saving {document_id!r}")
        result = decode_snapshot(json.dumps(body))
        if result.is_err():
            raise StoreError(f"Plan API echoed an {result.unwrap_err()} for {document_id!r}")
        return result.unwrap()

    async def load(self, document_id: str) -> Snapshot | None:
        body = await asyncio.to_thread(
            self._request, method="GET", url=self.url_for(document_id), payload=None
        )
        if body is None:
            return None
        result = decode_snapshot(json.dumps(body))
        if result.is_err():
            logger.warning("plan %s from %s: %s", document_id, self.base_url, result.unwrap_err())
            return None
        return result.unwrap()

    def _request(
        self,
        *,
        method: str,
        url: str,
        payload: Mapping[str, Any] | None,
    ) -> dict[str, Any] | None:
        """Perform one HTTP call and decode the JSON response.

        This method is the seam for unit tests. It returns ``None`` for a 404
        and raises :class:`StoreError` for every other failure.
        """
        data = json.dumps(payload).encode("utf-8") if payload is not None else None
        request = urllib.request.Request(
            url=url,
            data=data,
            headers={"Content-Type": "application/json", "Accept": "application/json"},
            method=method,
        )

        try:
            with urllib.request.urlopen(request, timeout=self.timeout_seconds) as resp:
                raw = resp.read()
        except urllib.error.HTTPError as exc:
            if exc.code == 404:
                return None
            detail = exc.read().decode("utf-8", errors="ignore")
            raise StoreError(
                f"Plan API HTTP error {exc.code}: {exc.reason}; body={detail!r}"
            ) from exc
        except urllib.error.URLError as exc:
            raise StoreError(f"Plan API unreachable at {url}: {exc.reason}") from exc

        try:
            decoded = json.loads(raw.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise StoreError(f"Plan API returned non-JSON body from {url}") from exc
        if not isinstance(decoded, dict):
            raise StoreError(f"Plan API returned unexpected payload type from {url}")
        return decoded


__all__ = ["HttpSnapshotStore"]
