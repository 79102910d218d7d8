"""Plan generation endpoints."""
from __future__ import annotations

from time import perf_counter

from fastapi import APIRouter, Depends, Request

from app.api.deps import get_plan_generator
from app.api.errors import planning_errors
from app.api.schemas.plan import (
    DailyPlanRequest,
    DailyPlanResponse,
    DailyTask,
    DailyTasksResponse,
    MonthlyPlanPayload,
    MonthlyPlanRequest,
    MonthlyPlanResponse,
    TaskToggleRequest,
    TaskToggleResponse,
)
from app.core.context import bind_user_id
from app.observability.tracing import log_metric, trace
from app.services.plan_generator import PlanGenerator

router = APIRouter(prefix="/ai", tags=["ai"])


@router.post("/daily-plan", response_model=DailyPlanResponse)
def generate_daily_plan(
    request: Request,
    payload: DailyPlanRequest,
    generator: PlanGenerator = Depends(get_plan_generator),
) -> DailyPlanResponse:
    """Generate (or fall back to) a time-blocked plan for one day and store it."""
    request_id = getattr(request.state, "request_id", None)
    bind_user_id(payload.user_id)
    start = perf_counter()

    with trace("ai.daily_plan", metadata={"route": "/ai/daily-plan"}):
        with planning_errors("Failed to generate daily plan"):
            result = generator.generate_daily_plan(payload.user_id, payload.date, payload.timezone)

    log_metric("ai.daily_plan.latency_ms", (perf_counter() - start) * 1000, {"source": result.source})
    return DailyPlanResponse(**result.payload, source=result.source, request_id=request_id or "")


@router.post("/daily-tasks", response_model=DailyTasksResponse)
def generate_daily_tasks(
    request: Request,
    payload: DailyPlanRequest,
    generator: PlanGenerator = Depends(get_plan_generator),
) -> DailyTasksResponse:
    request_id = getattr(request.state, "request_id", None)
    bind_user_id(payload.user_id)
    start = perf_counter()

    with trace("ai.daily_tasks", metadata={"route": "/ai/daily-tasks"}):
        with planning_errors("Failed to generate tasks"):
            result = generator.generate_daily_tasks(payload.user_id, payload.date, payload.timezone)

    log_metric("ai.daily_tasks.latency_ms", (perf_counter() - start) * 1000, {"source": result.source})
    return DailyTasksResponse(
        daily_tasks=[DailyTask.model_validate(task) for task in result.payload["daily_tasks"]],
        date=result.date_key,
        timezone=result.timezone,
        source=result.source,
        request_id=request_id or "",
    )


@router.post("/daily-tasks/toggle", response_model=TaskToggleResponse)
def toggle_daily_task(
    request: Request,
    payload: TaskToggleRequest,
    generator: PlanGenerator = Depends(get_plan_generator),
) -> TaskToggleResponse:
    """Flip the completed flag of one stored task."""
    request_id = getattr(request.state, "request_id", None)
    bind_user_id(payload.user_id)

    with trace("ai.daily_tasks.toggle", metadata={"date": payload.date, "task_id": payload.id}):
        with planning_errors("Failed to update task"):
            tasks = generator.toggle_daily_task(payload.user_id, payload.date, payload.id, payload.completed)

    log_metric("ai.daily_tasks.toggled", 1, {"completed": payload.completed})
    return TaskToggleResponse(
        message="Task updated",
        daily_tasks=[DailyTask.model_validate(task) for task in tasks if isinstance(task, dict)],
        request_id=request_id or "",
    )


@router.post("/monthly-planning", response_model=MonthlyPlanResponse)
def generate_monthly_plan(
    request: Request,
    payload: MonthlyPlanRequest,
    generator: PlanGenerator = Depends(get_plan_generator),
) -> MonthlyPlanResponse:
    request_id = getattr(request.state, "request_id", None)
    bind_user_id(payload.user_id)

    with trace("ai.monthly_planning", metadata={"route": "/ai/monthly-planning"}):
        with planning_errors("Failed to generate monthly planning data"):
            result = generator.generate_monthly_plan(payload.user_id, payload.timezone)

    return MonthlyPlanResponse(
        message="Monthly planning data generated successfully",
        data=MonthlyPlanPayload.model_validate(result.payload),
        month=result.label or "",
        source=result.source,
        request_id=request_id or "",
    )
