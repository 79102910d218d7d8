"""Long-term goal endpoints."""
from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response, status

from app.api.deps import get_plan_generator, get_storage
from app.api.errors import planning_errors
from app.api.schemas.goal import (
    GoalGenerateRequest,
    GoalListResponse,
    GoalPayload,
    GoalUpdateRequest,
    GoalUpdateResponse,
)
from app.core.context import bind_user_id
from app.observability.tracing import log_metric, trace
from app.services.errors import GoalNotFoundError
from app.services.plan_generator import PlanGenerator
from app.services.plan_storage import PlanStorage

router = APIRouter(prefix="/goals", tags=["goals"])


@router.get("", response_model=GoalListResponse)
def list_goals(
    request: Request,
    user_id: UUID = Query(..., description="User ID"),
    storage: PlanStorage = Depends(get_storage),
) -> GoalListResponse:
    bind_user_id(user_id)
    goals = storage.list_goals(user_id)
    return GoalListResponse(
        message="Goals retrieved successfully",
        goals=[GoalPayload.model_validate(goal) for goal in goals],
        request_id=getattr(request.state, "request_id", None) or "",
    )


@router.post("/generate", response_model=GoalListResponse)
def generate_goals(
    request: Request,
    payload: GoalGenerateRequest,
    generator: PlanGenerator = Depends(get_plan_generator),
) -> GoalListResponse:
    """Create long-term goals from the profile; refused once the user has any goals."""
    bind_user_id(payload.user_id)
    with trace("goals.generate", metadata={"route": "/goals/generate"}):
        with planning_errors("Failed to generate goals"):
            result = generator.generate_long_term_goals(payload.user_id)

    log_metric("goals.generate.count", len(result.goals), {"source": result.source})
    return GoalListResponse(
        message="Long-term goals generated successfully",
        goals=[GoalPayload.model_validate(goal) for goal in result.goals],
        source=result.source,
        request_id=getattr(request.state, "request_id", None) or "",
    )


@router.put("/{goal_id}", response_model=GoalUpdateResponse)
def update_goal(
    goal_id: UUID,
    request: Request,
    payload: GoalUpdateRequest,
    storage: PlanStorage = Depends(get_storage),
) -> GoalUpdateResponse:
    """Update progress, status or priority; any status may follow any other."""
    bind_user_id(payload.user_id)
    updates = payload.model_dump(exclude_unset=True, exclude_none=True, exclude={"user_id"})
    if not updates:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No valid updates provided")

    with planning_errors("Failed to update goal"):
        goal = storage.get_goal(payload.user_id, goal_id)
        if goal is None:
            raise GoalNotFoundError()
        goal = storage.update_goal(goal, updates)

    return GoalUpdateResponse(
        message="Goal updated successfully",
        goal=GoalPayload.model_validate(goal),
        request_id=getattr(request.state, "request_id", None) or "",
    )


@router.delete("/{goal_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_goal(
    goal_id: UUID,
    user_id: UUID = Query(..., description="User ID"),
    storage: PlanStorage = Depends(get_storage),
) -> Response:
    bind_user_id(user_id)
    with planning_errors("Failed to delete goal"):
        if not storage.delete_goal(user_id, goal_id):
            raise GoalNotFoundError()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
