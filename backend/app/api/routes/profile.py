"""Planning profile endpoints."""
from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status

from app.api.deps import get_storage
from app.api.errors import planning_errors
from app.api.schemas.profile import ProfileResponse, ProfileUpsertRequest
from app.core.context import bind_user_id
from app.services.plan_storage import PlanStorage

router = APIRouter(prefix="/profile", tags=["profile"])


@router.get("", response_model=ProfileResponse)
def get_profile(
    user_id: UUID = Query(..., description="User ID"),
    storage: PlanStorage = Depends(get_storage),
) -> ProfileResponse:
    profile = storage.get_profile(user_id)
    if profile is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Profile not found")
    return ProfileResponse.model_validate(profile)


@router.put("", response_model=ProfileResponse)
def upsert_profile(
    payload: ProfileUpsertRequest,
    storage: PlanStorage = Depends(get_storage),
) -> ProfileResponse:
    bind_user_id(payload.user_id)
    with planning_errors("Failed to save profile"):
        profile = storage.upsert_profile(payload.user_id, payload.model_dump(exclude={"user_id"}))
    return ProfileResponse.model_validate(profile)
