"""Schemas for the planning profile."""
from __future__ import annotations

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class ProfileFields(BaseModel):
    work_study: str = Field(..., min_length=1)
    hobbies: str
    sports: str
    location: str
    weight_kg: Optional[int] = Field(default=None, gt=0)
    height_cm: Optional[int] = Field(default=None, gt=0)
    age_years: Optional[int] = Field(default=None, gt=0)
    reading: Optional[str] = None
    extra_information: Optional[str] = None
    extra_words: Optional[str] = None


class ProfileUpsertRequest(ProfileFields):
    user_id: UUID


class ProfileResponse(ProfileFields):
    model_config = ConfigDict(from_attributes=True)

    user_id: UUID
    updated_at: Optional[datetime] = None
