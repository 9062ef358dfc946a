"""
Engine state contracts: undo history and autosave status.

Both models are frozen; the engines replace them wholesale on every
transition, so a reference to an old state is a stable record of that moment.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from .plan import Snapshot


class HistoryState(BaseModel):
    """
    Linear undo history over plan snapshots.

    Fields
    ------
    past:
        Older frames, oldest first. ``undo`` pops from the end.
    present:
        The working snapshot shown by the editor.
    future:
        Undone frames, nearest first. ``redo`` pops from the front.
    server_revision:
        Count of confirmed durable writes (or hydrations) in this session.
    """

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    past: tuple[Snapshot, ...] = ()
    present: Snapshot
    future: tuple[Snapshot, ...] = ()
    server_revision: int = Field(default=0, ge=0)

    @property
    def can_undo(self) -> bool:
        return len(self.past) > 0

    @property
    def can_redo(self) -> bool:
        return len(self.future) > 0


class AutosaveState(BaseModel):
    """
    Observable status of the autosave pipeline.

    ``server_serialized`` is the canonical form of the last snapshot confirmed
    written (or loaded); it is what redundant writes are compared against.
    """

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    is_saving: bool = False
    last_saved_at: datetime | None = None
    server_snapshot: Snapshot | None = None
    server_serialized: str | None = None
    last_error: str | None = None


__all__ = ["AutosaveState", "HistoryState"]
