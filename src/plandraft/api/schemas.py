"""
Response payloads of the plan API that are not plain plan contracts.
"""

from __future__ import annotations

from datetime import datetime

from plandraft.core.contracts.plan import PlanModel, PlanTotals


class HealthPayload(PlanModel):
    status: str
    environment: str
    version: str


class PlanSummary(PlanModel):
    """Time budget read-out of a stored plan."""

    plan_id: str
    title: str
    step_count: int
    totals: PlanTotals
    budget_label: str
    updated_at: datetime


__all__ = ["HealthPayload", "PlanSummary"]
