"""Schemas for generated plans, daily tasks and monthly plans.

The same models validate payloads returned by text-generation backends and
shape the API responses, so a fallback plan and a generated plan are
indistinguishable at the schema level.
"""
from __future__ import annotations

from datetime import date as date_type
from typing import Annotated, Any, Dict, List, Literal, Optional
from uuid import UUID
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import AfterValidator, BaseModel, ConfigDict, Field

TIME_PATTERN = r"^([01]\d|2[0-3]):[0-5]\d$"
DATE_PATTERN = r"^\d{4}-\d{2}-\d{2}$"
PLAN_KEY_PATTERN = r"^(\d{4}-\d{2}-\d{2}|monthly-\d{4}-\d{2})$"

PlanItemType = Literal["work", "study", "exercise", "meal", "reading", "break", "sleep", "other"]
PlanPriority = Literal["low", "medium", "high"]
GoalCategory = Literal["fitness", "learning", "career", "personal", "financial"]


def _check_timezone(value: str) -> str:
    try:
        ZoneInfo(value)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise ValueError(f"Unknown timezone: {value}") from exc
    return value


TimezoneName = Annotated[str, AfterValidator(_check_timezone)]


class DailyPlanItem(BaseModel):
    start: str = Field(..., pattern=TIME_PATTERN)
    end: str = Field(..., pattern=TIME_PATTERN)
    title: str = Field(..., min_length=1)
    type: PlanItemType
    priority: Optional[PlanPriority] = None
    notes: Optional[str] = None


class DailyPlanPayload(BaseModel):
    date: str = Field(..., pattern=DATE_PATTERN)
    timezone: str
    items: List[DailyPlanItem] = Field(..., min_length=1)


class DailyTask(BaseModel):
    id: str
    title: str
    time: str = Field(..., pattern=TIME_PATTERN)
    type: str
    completed: bool = False
    description: str = ""


class GeneratedTask(BaseModel):
    """Loosely-typed task as returned by a backend; times are repaired afterwards."""

    model_config = ConfigDict(extra="allow")

    id: Optional[str | int] = None
    title: str = Field(..., min_length=1)
    time: Optional[Any] = None
    type: str = "other"
    completed: bool = False
    description: str = ""


class GeneratedTaskList(BaseModel):
    daily_tasks: List[GeneratedTask] = Field(..., min_length=1)


class AIVision(BaseModel):
    six_month_projection: str
    one_year_vision: str


class MonthlyGoal(BaseModel):
    id: str
    title: str
    category: GoalCategory
    progress: int = Field(..., ge=0, le=100)
    target: str


class Milestone(BaseModel):
    id: str
    title: str
    date: str = Field(..., pattern=DATE_PATTERN)
    completed: bool
    description: str


class MonthlyPlanPayload(BaseModel):
    ai_vision: AIVision
    monthly_goals: List[MonthlyGoal]
    milestones: List[Milestone]


class DailyPlanRequest(BaseModel):
    user_id: UUID
    date: Optional[date_type] = None
    timezone: Optional[TimezoneName] = None


class DailyPlanResponse(DailyPlanPayload):
    source: str
    request_id: str


class DailyTasksResponse(BaseModel):
    daily_tasks: List[DailyTask]
    date: str
    timezone: str
    source: str
    request_id: str


class TaskToggleRequest(BaseModel):
    user_id: UUID
    date: str = Field(..., pattern=DATE_PATTERN)
    id: str = Field(..., min_length=1)
    completed: bool


class TaskToggleResponse(BaseModel):
    message: str
    daily_tasks: List[DailyTask]
    request_id: str


class MonthlyPlanRequest(BaseModel):
    user_id: UUID
    timezone: Optional[TimezoneName] = None


class MonthlyPlanResponse(BaseModel):
    message: str
    data: MonthlyPlanPayload
    month: str
    source: str
    request_id: str


class StoredPlanResponse(BaseModel):
    user_id: UUID
    date: str
    timezone: str
    plan: Dict[str, Any]
    request_id: str
