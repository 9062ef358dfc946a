"""
Gesture adapter between the drag/drop layer and :class:`PlanEditor`.

The drag/drop sensor library resolves pointers, keyboards and collisions;
this module only sees the resolved events:

- :class:`DragStart` with the dragged item and the activator's modifier keys,
- :class:`DragEnd` with the id of the drop target (a step id, the canvas
  background :data:`CANVAS_DROP_ID`, or None when dropped nowhere),
- :class:`KeyPress` for the editor-wide shortcuts.

The duplicate modifier (Alt/Option) is sampled once, at drag start.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum

from plandraft.core.contracts.plan import Step, StepDraft, StepTemplate

from .facade import PlanEditor

#: Drop target id of the canvas background (append / move to end).
CANVAS_DROP_ID = "plan-canvas"

#: Focus targets in which keyboard shortcuts must not fire.
EDITABLE_TARGETS: frozenset[str] = frozenset({"input", "textarea", "content-editable"})

QUICK_INSERT_MINUTES = 10


@dataclass(frozen=True, slots=True)
class StepDragData:
    """A step of the plan being dragged."""

    step_id: str


@dataclass(frozen=True, slots=True)
class TemplateDragData:
    """A template from the parts library being dragged."""

    template: StepTemplate


DragData = StepDragData | TemplateDragData


@dataclass(frozen=True, slots=True)
class Modifiers:
    alt: bool = False
    ctrl: bool = False
    meta: bool = False
    shift: bool = False


@dataclass(frozen=True, slots=True)
class DragStart:
    data: DragData | None
    activator: Modifiers | None = None


@dataclass(frozen=True, slots=True)
class DragEnd:
    data: DragData | None
    over_id: str | None


@dataclass(frozen=True, slots=True)
class KeyPress:
    """A keydown event; ``target`` names the focused control kind, if any."""

    key: str
    ctrl: bool = False
    meta: bool = False
    shift: bool = False
    alt: bool = False
    target: str | None = None

    @property
    def in_editable(self) -> bool:
        return self.target in EDITABLE_TARGETS

    @property
    def command(self) -> bool:
        """Ctrl on Windows/Linux, Cmd on macOS."""
        return self.ctrl or self.meta


class DropAction(str, Enum):
    NONE = "none"
    INSERT = "insert"
    DUPLICATE = "duplicate"
    REORDER = "reorder"


class SequencingSurface:
    """Translate drag/drop and keyboard gestures into editor calls."""

    def __init__(
        self,
        editor: PlanEditor,
        *,
        on_focus_quick_insert: Callable[[], None] | None = None,
    ) -> None:
        self.editor = editor
        self.on_focus_quick_insert = on_focus_quick_insert
        self.palette_open = False
        self.active_step: Step | None = None
        self.active_template: StepTemplate | None = None
        self.duplicate_modifier = False

    # -------------------------------- Drag ----------------------------------

    def drag_start(self, event: DragStart) -> None:
        self.duplicate_modifier = bool(event.activator and event.activator.alt)
        if isinstance(event.data, StepDragData):
            self.active_step = self.editor.plan.find_step(event.data.step_id)
            self.active_template = None
        elif isinstance(event.data, TemplateDragData):
            self.active_template = event.data.template
            self.active_step = None

    def drag_end(self, event: DragEnd) -> DropAction:
        duplicate = self.duplicate_modifier
        self._clear_drag()
        if event.over_id is None or event.data is None:
            return DropAction.NONE

        steps = self.editor.steps
        over_index = next(
            (index for index, step in enumerate(steps) if step.id == event.over_id), -1
        )
        on_canvas = event.over_id == CANVAS_DROP_ID

        if isinstance(event.data, TemplateDragData):
            index = len(steps) if on_canvas or over_index == -1 else over_index
            self.editor.add_step_from_template(event.data.template, index)
            return DropAction.INSERT

        active_index = self.editor.plan.step_index(event.data.step_id)
        if active_index == -1:
            return DropAction.NONE

        if duplicate:
            insert_index = len(steps) if on_canvas or over_index == -1 else over_index
            target = active_index + 1 if insert_index <= active_index else insert_index
            self.editor.duplicate_step(event.data.step_id, target)
            return DropAction.DUPLICATE

        if on_canvas and active_index != len(steps) - 1:
            self.editor.reorder_steps(active_index, len(steps) - 1)
            return DropAction.REORDER
        if over_index != -1 and over_index != active_index:
            self.editor.reorder_steps(active_index, over_index)
            return DropAction.REORDER
        return DropAction.NONE

    def drag_cancel(self) -> None:
        self._clear_drag()

    # ------------------------------ Keyboard --------------------------------

    def key_down(self, event: KeyPress) -> bool:
        """Handle an editor shortcut; return True when the default is prevented."""
        key = event.key.lower()

        if event.command and key == "k":
            if not event.in_editable:
                self.palette_open = not self.palette_open
            return True

        if event.in_editable:
            return False

        if key == "/" and not event.command:
            if self.on_focus_quick_insert is not None:
                self.on_focus_quick_insert()
            return True

        if event.command and key == "z":
            if event.shift:
                self.editor.redo()
            else:
                self.editor.undo()
            return True

        if event.command and key == "y":
            self.editor.redo()
            return True

        return False

    # ------------------------------ Palette ---------------------------------

    def select_template(self, template: StepTemplate) -> Step:
        """Append a template chosen from the palette or sidebar."""
        self.palette_open = False
        return self.editor.add_step_from_template(template)

    def quick_insert(self, title: str) -> Step | None:
        """Append a custom activity typed into the quick-insert field."""
        value = title.strip()
        if not value:
            return None
        draft = StepDraft(
            kind="activity", title=value, duration_minutes=QUICK_INSERT_MINUTES, notes=""
        )
        return self.editor.add_custom_step(draft)

    def _clear_drag(self) -> None:
        self.active_step = None
        self.active_template = None
        self.duplicate_modifier = False


__all__ = [
    "CANVAS_DROP_ID",
    "DragEnd",
    "DragStart",
    "DropAction",
    "KeyPress",
    "Modifiers",
    "SequencingSurface",
    "StepDragData",
    "TemplateDragData",
]
