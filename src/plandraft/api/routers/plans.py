"""
API Routes for stored plan snapshots.

Endpoints
---------
- `GET /plans/{plan_id}`: Load the stored snapshot (404 if never saved).
- `PUT /plans/{plan_id}`: Save a snapshot and echo the stored value.
- `GET /plans/{plan_id}/summary`: Time budget of the stored snapshot.

These are the two calls of the snapshot store contract, exposed over HTTP
so that editors on other machines can use :class:`HttpSnapshotStore`.
"""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, status

from plandraft.api.plan_store import get_plan_repository
from plandraft.api.schemas import PlanSummary
from plandraft.core.contracts.plan import Snapshot
from plandraft.editor.summary import budget_label, plan_totals

router = APIRouter(prefix="/plans", tags=["Plans"])


async def _load_or_404(plan_id: str) -> Snapshot:
    snapshot = await get_plan_repository().store.load(plan_id)
    if snapshot is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Plan {plan_id} not found",
        )
    return snapshot


@router.get(
    "/{plan_id}",
    response_model=Snapshot,
    response_model_exclude_none=True,
    summary="Load a stored plan snapshot",
)
async def get_plan(plan_id: str) -> Snapshot:
    return await _load_or_404(plan_id)


@router.put(
    "/{plan_id}",
    response_model=Snapshot,
    response_model_exclude_none=True,
    summary="Save a plan snapshot",
)
async def put_plan(plan_id: str, snapshot: Snapshot) -> Snapshot:
    """
    Persist ``snapshot`` under ``plan_id`` and echo what was stored.

    The body's ``id`` must match the path; a mismatch is a client error.
    """
    if snapshot.id != plan_id:
        raise ValueError(f"Snapshot id {snapshot.id!r} does not match plan {plan_id!r}")
    return await get_plan_repository().store.save(plan_id, snapshot)


@router.get(
    "/{plan_id}/summary",
    response_model=PlanSummary,
    summary="Time budget of a stored plan",
)
async def get_plan_summary(plan_id: str) -> PlanSummary:
    snapshot = await _load_or_404(plan_id)
    totals = plan_totals(snapshot)
    return PlanSummary(
        plan_id=snapshot.id,
        title=snapshot.title,
        step_count=len(snapshot.steps),
        totals=totals,
        budget_label=budget_label(totals),
        updated_at=snapshot.updated_at,
    )


__all__ = ["router"]
