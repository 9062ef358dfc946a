"""Plan contracts: steps, snapshots and step templates.

This module defines the Pydantic v2 value types the whole engine passes
around:

- `Step`        : one teaching unit inside a plan (activity, timer, ...).
- `StepDraft`   : a step without its id, supplied by callers that add steps.
- `Snapshot`    : the full working document at one point in time.
- `StepTemplate`: a catalogue entry a new step is built from.
- `TemplateGroup`: a labelled category of templates.

Immutability
------------
Every model is ``frozen``. Frames of the undo history are additionally
deep-copied on entry (see :func:`clone_snapshot`) because a frozen model
still holds a mutable ``metadata`` dict.

Wire format
-----------
Python code uses snake_case field names; JSON uses the camelCase keys of the
stored documents (``targetMinutes``, ``durationMinutes``, ``updatedAt``) and
``type`` for a step's kind. :func:`serialize_snapshot` produces the canonical
string that history de-duplication and autosave redundancy checks compare.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any, Literal, get_args

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

StepKind = Literal["activity", "timer", "objective", "standard", "export"]
STEP_KINDS: tuple[str, ...] = get_args(StepKind)


def utc_now() -> datetime:
    """Default clock of the engine (timezone-aware UTC)."""
    return datetime.now(UTC)


class PlanModel(BaseModel):
    """Shared configuration: frozen, camelCase on the wire, unknown keys dropped."""

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


class StepDraft(PlanModel):
    """Every field of a :class:`Step` except its identity."""

    kind: StepKind = Field(alias="type")
    title: str = ""
    description: str | None = None
    notes: str | None = None
    duration_minutes: int = Field(default=0, ge=0)
    metadata: dict[str, Any] | None = None


class Step(StepDraft):
    """A single addressable unit of a lesson plan."""

    id: str = Field(min_length=1)


class Snapshot(PlanModel):
    """The complete serialisable state of one lesson-plan draft."""

    id: str = Field(min_length=1)
    title: str = ""
    target_minutes: int = Field(default=60, ge=0)
    steps: tuple[Step, ...] = ()
    updated_at: datetime = Field(default_factory=utc_now)

    @field_validator("updated_at")
    @classmethod
    def _as_utc(cls, value: datetime) -> datetime:
        """Naive timestamps are read as UTC; aware ones are converted."""
        if value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value.astimezone(UTC)

    def step_index(self, step_id: str) -> int:
        """Return the position of ``step_id`` or ``-1``."""
        for index, step in enumerate(self.steps):
            if step.id == step_id:
                return index
        return -1

    def find_step(self, step_id: str) -> Step | None:
        index = self.step_index(step_id)
        return self.steps[index] if index >= 0 else None


class StepTemplate(PlanModel):
    """Catalogue entry consumed by ``add_step_from_template``."""

    id: str
    kind: StepKind = Field(alias="type")
    title: str
    description: str | None = None
    default_duration: int = Field(ge=0)
    default_notes: str | None = None


class TemplateGroup(PlanModel):
    """A labelled category of templates (activities, timers, ...)."""

    id: str
    label: str
    description: str | None = None
    parts: tuple[StepTemplate, ...] = ()


class PlanTotals(PlanModel):
    """Time budget of a plan: how much is scheduled against the target."""

    total_minutes: int
    target_minutes: int
    remaining_minutes: int
    overflow: bool


# --------------------------------------------------------------------------- #
# Helpers
# --------------------------------------------------------------------------- #


def serialize_snapshot(snapshot: Snapshot) -> str:
    """Return the canonical JSON form used for equality and persistence."""
    return snapshot.model_dump_json(by_alias=True, exclude_none=True)


def parse_snapshot(raw: str | bytes) -> Snapshot:
    """Parse a stored snapshot; raises ``pydantic.ValidationError`` on bad data."""
    return Snapshot.model_validate_json(raw)


def clone_snapshot(snapshot: Snapshot) -> Snapshot:
    """Deep, independently owned copy (no shared steps or metadata dicts)."""
    return snapshot.model_copy(deep=True)


def snapshots_equal(left: Snapshot, right: Snapshot) -> bool:
    """Structural equality through the canonical serialised form."""
    return left is right or serialize_snapshot(left) == serialize_snapshot(right)


def step_from_template(template: StepTemplate, step_id: str) -> Step:
    """Build a fresh step from a catalogue template."""
    return Step(
        id=step_id,
        kind=template.kind,
        title=template.title,
        description=template.description,
        notes=template.default_notes,
        duration_minutes=template.default_duration,
    )


__all__ = [
    "PlanModel",
    "PlanTotals",
    "STEP_KINDS",
    "Snapshot",
    "Step",
    "StepDraft",
    "StepKind",
    "StepTemplate",
    "TemplateGroup",
    "clone_snapshot",
    "parse_snapshot",
    "serialize_snapshot",
    "snapshots_equal",
    "step_from_template",
    "utc_now",
]
