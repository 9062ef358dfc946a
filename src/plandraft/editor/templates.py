"""
Step template catalogue.

The read-only parts library shown in the sidebar and the command palette.
Each template carries the kind, title, description and default duration a
new step is created with.
"""

from __future__ import annotations

from datetime import datetime

from plandraft.core.contracts.plan import Snapshot, Step, StepTemplate, TemplateGroup, utc_now


def _part(
    part_id: str, kind: str, title: str, description: str, default_duration: int
) -> StepTemplate:
    return StepTemplate.model_validate(
        {
            "id": part_id,
            "type": kind,
            "title": title,
            "description": description,
            "defaultDuration": default_duration,
        }
    )


PLAN_PART_GROUPS: tuple[TemplateGroup, ...] = (
    TemplateGroup(
        id="activities",
        label="Activities",
        description="Engage students with collaborative or hands-on experiences.",
        parts=(
            _part(
                "collaborative-activity",
                "activity",
                "Collaborative Activity",
                "Group work or partner tasks to reinforce new concepts.",
                15,
            ),
            _part(
                "guided-practice",
                "activity",
                "Guided Practice",
                "Teacher-led modeling with student participation.",
                10,
            ),
            _part(
                "independent-practice",
                "activity",
                "Independent Practice",
                "Individual work time for demonstrating mastery.",
                12,
            ),
        ),
    ),
    TemplateGroup(
        id="timers",
        label="Timers",
        description="Structure your pacing with countdowns and transitions.",
        parts=(
            _part(
                "warmup-timer",
                "timer",
                "Warm-up Timer",
                "Quick opener to activate prior knowledge.",
                5,
            ),
            _part(
                "transition-timer",
                "timer",
                "Transition Timer",
                "Prep students to switch activities smoothly.",
                3,
            ),
            _part(
                "reflection-timer",
                "timer",
                "Reflection Timer",
                "Silent reflection or journaling time.",
                7,
            ),
        ),
    ),
    TemplateGroup(
        id="objectives",
        label="Objectives",
        description="Clarify learning outcomes and success criteria.",
        parts=(
            _part(
                "learning-objective",
                "objective",
                "Learning Objective",
                "Define what students should know or do by the end.",
                3,
            ),
            _part(
                "success-criteria",
                "objective",
                "Success Criteria",
                "List the indicators for demonstrating mastery.",
                4,
            ),
        ),
    ),
    TemplateGroup(
        id="standards",
        label="Standards",
        description="Align instruction with curriculum or SEL frameworks.",
        parts=(
            _part(
                "academic-standard",
                "standard",
                "Academic Standard",
                "Reference a curriculum or subject area standard.",
                2,
            ),
            _part(
                "sel-competency",
                "standard",
                "SEL Competency",
                "Highlight social-emotional learning outcomes.",
                2,
            ),
        ),
    ),
    TemplateGroup(
        id="exports",
        label="Exports",
        description="Prepare sharable artifacts for families or colleagues.",
        parts=(
            _part(
                "family-update",
                "export",
                "Family Update",
                "Summary email or newsletter template.",
                8,
            ),
            _part(
                "team-handout",
                "export",
                "Team Handout",
                "Printable overview for support staff.",
                6,
            ),
        ),
    ),
)


def all_templates() -> tuple[StepTemplate, ...]:
    """Every template in catalogue order."""
    return tuple(part for group in PLAN_PART_GROUPS for part in group.parts)


def find_template(template_id: str) -> StepTemplate | None:
    for part in all_templates():
        if part.id == template_id:
            return part
    return None


def search_templates(query: str | None) -> tuple[TemplateGroup, ...]:
    """Filter the catalogue the way the command palette does.

    Matching is a case-insensitive substring test over a template's title and
    description and its group's label. Groups left without parts are dropped;
    a blank query returns the whole catalogue.
    """
    needle = (query or "").strip().lower()
    if not needle:
        return PLAN_PART_GROUPS

    groups: list[TemplateGroup] = []
    for group in PLAN_PART_GROUPS:
        if needle in group.label.lower():
            groups.append(group)
            continue
        parts = tuple(
            part
            for part in group.parts
            if needle in part.title.lower() or needle in (part.description or "").lower()
        )
        if parts:
            groups.append(group.model_copy(update={"parts": parts}))
    return tuple(groups)


def starter_snapshot(
    plan_id: str,
    *,
    title: str = "New Lesson Plan",
    target_minutes: int = 60,
    empty: bool = False,
    now: datetime | None = None,
) -> Snapshot:
    """The fresh template a new editing session starts from."""
    steps: tuple[Step, ...] = ()
    if not empty:
        steps = (
            Step(
                id="step-warmup",
                kind="timer",
                title="Warm-up Prompt",
                description="Invite students to share a quick idea to activate prior knowledge.",
                duration_minutes=5,
                notes="Invite two students to share aloud",
            ),
            Step(
                id="step-mini-lesson",
                kind="activity",
                title="Mini Lesson",
                description="Introduce the core concept with modeling and guided practice.",
                duration_minutes=15,
                notes="Use visuals and think-aloud",
            ),
        )
    return Snapshot(
        id=plan_id,
        title=title,
        target_minutes=max(0, target_minutes),
        steps=steps,
        updated_at=now or utc_now(),
    )


__all__ = [
    "PLAN_PART_GROUPS",
    "all_templates",
    "find_template",
    "search_templates",
    "starter_snapshot",
]
