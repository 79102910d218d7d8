"""Domain errors raised by planning services and mapped to HTTP statuses by the routes."""
from __future__ import annotations

from typing import List


class PlanningError(Exception):
    """Base class for expected, caller-facing planning failures."""


class ProfileMissingError(PlanningError):
    def __init__(self) -> None:
        super().__init__("Profile not found. Please complete your profile first.")


class PlanNotFoundError(PlanningError):
    def __init__(self, date_key: str) -> None:
        super().__init__(f"Plan not found for {date_key}")
        self.date_key = date_key


class TaskNotFoundError(PlanningError):
    def __init__(self, task_id: str) -> None:
        super().__init__(f"Task {task_id} not found in plan")
        self.task_id = task_id


class GoalNotFoundError(PlanningError):
    def __init__(self) -> None:
        super().__init__("Goal not found or access denied")


class GoalsAlreadyExistError(PlanningError):
    """Raised when goal generation is requested for a user who already has goals."""

    def __init__(self, goals: List[object]) -> None:
        super().__init__("Long-term goals already exist for this user")
        self.goals = goals
