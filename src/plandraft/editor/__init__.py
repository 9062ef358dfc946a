"""Editor layer: the mutation facade, gesture adapter and template catalogue."""

from __future__ import annotations

from .facade import PlanEditor
from .sequencing import SequencingSurface
from .templates import PLAN_PART_GROUPS, find_template, search_templates, starter_snapshot

__all__ = [
    "PLAN_PART_GROUPS",
    "PlanEditor",
    "SequencingSurface",
    "find_template",
    "search_templates",
    "starter_snapshot",
]
