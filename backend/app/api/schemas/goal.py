"""Schemas for long-term goals."""
from __future__ import annotations

from datetime import datetime
from typing import List, Literal, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from app.api.schemas.plan import GoalCategory

GoalStatus = Literal["active", "completed", "paused", "archived"]


class GoalDraft(BaseModel):
    """A goal proposed by a backend or by the template fallback."""

    title: str = Field(..., min_length=1)
    description: str
    category: GoalCategory
    priority: int = Field(..., ge=1, le=5)
    target_timeframe: str = Field(..., min_length=1)
    ai_context: Optional[str] = None


class GeneratedGoalList(BaseModel):
    goals: List[GoalDraft] = Field(..., min_length=1)


class GoalGenerateRequest(BaseModel):
    user_id: UUID


class GoalUpdateRequest(BaseModel):
    user_id: UUID
    progress: Optional[int] = Field(default=None, ge=0, le=100)
    status: Optional[GoalStatus] = None
    priority: Optional[int] = Field(default=None, ge=1, le=5)


class GoalPayload(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    user_id: UUID
    title: str
    description: str
    category: str
    priority: int
    target_timeframe: str
    progress: int
    status: str
    ai_context: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class GoalListResponse(BaseModel):
    message: str
    goals: List[GoalPayload]
    source: Optional[str] = None
    request_id: str


class GoalUpdateResponse(BaseModel):
    message: str
    goal: GoalPayload
    request_id: str
