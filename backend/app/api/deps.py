"""Dependencies wiring the plan generator into request handlers."""
from __future__ import annotations

from typing import List

from fastapi import Depends
from sqlalchemy.orm import Session

from app.core.config import settings
from app.db.deps import get_db
from app.services.llm_backends import GenerationBackend, build_backends
from app.services.plan_generator import PlanGenerator
from app.services.plan_storage import PlanStorage


def get_storage(db: Session = Depends(get_db)) -> PlanStorage:
    return PlanStorage(db)


def get_generation_backends() -> List[GenerationBackend]:
    """Backends enabled by the current settings; override in tests to inject fakes."""
    return build_backends(settings)


def get_plan_generator(
    storage: PlanStorage = Depends(get_storage),
    backends: List[GenerationBackend] = Depends(get_generation_backends),
) -> PlanGenerator:
    return PlanGenerator(storage, backends, default_timezone=settings.default_timezone)
