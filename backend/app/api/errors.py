"""Translate planning errors into HTTP responses."""
from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator

from fastapi import HTTPException, status
from sqlalchemy.exc import SQLAlchemyError

from app.api.schemas.goal import GoalPayload
from app.services.errors import (
    GoalNotFoundError,
    GoalsAlreadyExistError,
    PlanNotFoundError,
    ProfileMissingError,
    TaskNotFoundError,
)

logger = logging.getLogger(__name__)


@contextmanager
def planning_errors(failure_message: str) -> Iterator[None]:
    """Map service errors to 4xx responses and storage failures to a 500."""
    try:
        yield
    except ProfileMissingError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except (PlanNotFoundError, TaskNotFoundError, GoalNotFoundError) as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except GoalsAlreadyExistError as exc:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail={
                "message": str(exc),
                "goals": [GoalPayload.model_validate(goal).model_dump(mode="json") for goal in exc.goals],
            },
        ) from exc
    except SQLAlchemyError as exc:
        logger.exception("%s: storage failure", failure_message)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=failure_message) from exc
