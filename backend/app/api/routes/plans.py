"""Read access to stored plan documents."""
from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, Path, Query, Request

from app.api.deps import get_plan_generator
from app.api.errors import planning_errors
from app.api.schemas.plan import PLAN_KEY_PATTERN, StoredPlanResponse
from app.services.plan_generator import PlanGenerator

router = APIRouter(prefix="/plans", tags=["plans"])


@router.get("/{date_key}", response_model=StoredPlanResponse)
def get_plan(
    request: Request,
    date_key: str = Path(..., pattern=PLAN_KEY_PATTERN, description="YYYY-MM-DD or monthly-YYYY-MM"),
    user_id: UUID = Query(..., description="User ID"),
    generator: PlanGenerator = Depends(get_plan_generator),
) -> StoredPlanResponse:
    with planning_errors("Failed to load plan"):
        plan = generator.get_plan(user_id, date_key)
    return StoredPlanResponse(
        user_id=plan.user_id,
        date=plan.date,
        timezone=plan.timezone,
        plan=plan.plan_json or {},
        request_id=getattr(request.state, "request_id", None) or "",
    )
