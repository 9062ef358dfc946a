"""API route for the step template catalogue (`GET /templates`)."""

from __future__ import annotations

from fastapi import APIRouter, Query

from plandraft.core.contracts.plan import TemplateGroup
from plandraft.editor.templates import search_templates

router = APIRouter(tags=["Templates"])


@router.get(
    "/templates",
    response_model=list[TemplateGroup],
    response_model_exclude_none=True,
    summary="List step templates grouped by category",
)
async def list_templates(
    q: str | None = Query(default=None, description="Case-insensitive search"),
) -> list[TemplateGroup]:
    return list(search_templates(q))


__all__ = ["router"]
