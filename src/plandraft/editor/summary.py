"""Derived read-outs of a plan: time budget and "last saved" wording."""

from __future__ import annotations

from datetime import datetime

from plandraft.core.contracts.plan import PlanTotals, Snapshot, utc_now


def plan_totals(snapshot: Snapshot) -> PlanTotals:
    """Sum step durations against the plan's target."""
    total = sum(step.duration_minutes for step in snapshot.steps)
    remaining = snapshot.target_minutes - total
    return PlanTotals(
        total_minutes=total,
        target_minutes=snapshot.target_minutes,
        remaining_minutes=remaining,
        overflow=remaining < 0,
    )


def budget_label(totals: PlanTotals) -> str:
    if totals.overflow:
        return f"Over by {abs(totals.remaining_minutes)} minutes"
    suffix = "" if totals.remaining_minutes == 1 else "s"
    return f"Remaining {totals.remaining_minutes} minute{suffix}"


def relative_saved_label(last_saved_at: datetime | None, now: datetime | None = None) -> str | None:
    """Human wording for the autosave badge, or None when never saved."""
    if last_saved_at is None:
        return None
    now = now or utc_now()
    diff_minutes = int((now - last_saved_at).total_seconds() // 60)
    if diff_minutes <= 0:
        return "Just now"
    if diff_minutes == 1:
        return "1 minute ago"
    if diff_minutes < 60:
        return f"{diff_minutes} minutes ago"
    diff_hours = diff_minutes // 60
    if diff_hours == 1:
        return "1 hour ago"
    return f"{diff_hours} hours ago"


__all__ = ["budget_label", "plan_totals", "relative_saved_label"]
