"""Tests for the step template catalogue and the starter plan."""

from __future__ import annotations

from conftest import BASE_TIME
from plandraft.editor.templates import (
    PLAN_PART_GROUPS,
    all_templates,
    find_template,
    search_templates,
    starter_snapshot,
)


def test_catalogue_groups_and_ids_are_unique() -> None:
    assert [group.id for group in PLAN_PART_GROUPS] == [
        "activities",
        "timers",
        "objectives",
        "standards",
        "exports",
    ]
    ids = [part.id for part in all_templates()]
    assert len(ids) == len(set(ids)) == 12


def test_find_template() -> None:
    template = find_template("transition-timer")
    assert template is not None
    assert template.kind == "timer" and template.default_duration == 3
    assert find_template("nope") is None


def test_search_matches_title_and_description_case_insensitively() -> None:
    groups = search_templates("JOURNAL")
    assert [(g.id, [p.id for p in g.parts]) for g in groups] == [
        ("timers", ["reflection-timer"])
    ]


def test_search_on_group_label_keeps_whole_group() -> None:
    groups = search_templates("standards")
    assert len(groups) == 1
    assert len(groups[0].parts) == 2


def test_blank_or_unmatched_queries() -> None:
    assert search_templates(None) == PLAN_PART_GROUPS
    assert search_templates("   ") == PLAN_PART_GROUPS
    assert search_templates("quantum chromodynamics") == ()


def test_starter_snapshot() -> None:
    plan = starter_snapshot("plan-1", now=BASE_TIME)

    assert plan.title == "New Lesson Plan"
    assert plan.target_minutes == 60
    assert [step.id for step in plan.steps] == ["step-warmup", "step-mini-lesson"]
    assert [step.duration_minutes for step in plan.steps] == [5, 15]
    assert plan.updated_at == BASE_TIME

    empty = starter_snapshot("plan-2", title="Blank", target_minutes=-5, empty=True)
    assert empty.steps == ()
    assert empty.target_minutes == 0
