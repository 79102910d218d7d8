"""SQLAlchemy-backed storage for profiles, goals and plan documents."""
from __future__ import annotations

from typing import Any, Dict, List, Optional
from uuid import UUID

from sqlalchemy import asc, desc
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.db.models.daily_plan import DailyPlan
from app.db.models.long_term_goal import LongTermGoal
from app.db.models.profile import Profile
from app.db.models.user import User

GOAL_UPDATABLE_FIELDS = ("progress", "status", "priority")


class PlanStorage:
    """Keyed get/upsert access scoped by user.

    Writes commit immediately. Concurrent upserts of the same key are not
    coordinated; the last commit wins.
    """

    def __init__(self, db: Session) -> None:
        self.db = db

    def ensure_user(self, user_id: UUID) -> User:
        """Fetch an existing user or create the row safely."""
        user = self.db.get(User, user_id)
        if user:
            return user
        user = User(id=user_id)
        self.db.add(user)
        try:
            self.db.flush()
            return user
        except IntegrityError:
            self.db.rollback()
            existing = self.db.get(User, user_id)
            if existing:
                return existing
            raise

    def get_profile(self, user_id: UUID) -> Optional[Profile]:
        return self.db.query(Profile).filter(Profile.user_id == user_id).one_or_none()

    def upsert_profile(self, user_id: UUID, fields: Dict[str, Any]) -> Profile:
        self.ensure_user(user_id)
        profile = self.get_profile(user_id)
        if profile is None:
            profile = Profile(user_id=user_id)
        for key, value in fields.items():
            setattr(profile, key, value)
        self.db.add(profile)
        self._commit()
        self.db.refresh(profile)
        return profile

    def list_goals(self, user_id: UUID) -> List[LongTermGoal]:
        return (
            self.db.query(LongTermGoal)
            .filter(LongTermGoal.user_id == user_id)
            .order_by(desc(LongTermGoal.priority), asc(LongTermGoal.created_at))
            .all()
        )

    def get_active_goals(self, user_id: UUID) -> List[LongTermGoal]:
        return [goal for goal in self.list_goals(user_id) if goal.status == "active"]

    def get_goal(self, user_id: UUID, goal_id: UUID) -> Optional[LongTermGoal]:
        goal = self.db.get(LongTermGoal, goal_id)
        if goal is None or goal.user_id != user_id:
            return None
        return goal

    def delete_goal(self, user_id: UUID, goal_id: UUID) -> bool:
        """Delete one of the user's goals; False when it does not exist or belongs to someone else."""
        goal = self.get_goal(user_id, goal_id)
        if goal is None:
            return False
        self.db.delete(goal)
        self._commit()
        return True

    def create_goals(self, user_id: UUID, drafts: List[Dict[str, Any]]) -> List[LongTermGoal]:
        """Insert several goals in one transaction."""
        self.ensure_user(user_id)
        goals = [self._goal_from_draft(user_id, draft) for draft in drafts]
        self.db.add_all(goals)
        self._commit()
        for goal in goals:
            self.db.refresh(goal)
        return goals

    def create_goal(self, user_id: UUID, **fields: Any) -> LongTermGoal:
        return self.create_goals(user_id, [fields])[0]

    def update_goal(self, goal: LongTermGoal, updates: Dict[str, Any]) -> LongTermGoal:
        for key in GOAL_UPDATABLE_FIELDS:
            if key in updates:
                setattr(goal, key, updates[key])
        self.db.add(goal)
        self._commit()
        self.db.refresh(goal)
        return goal

    def get_plan(self, user_id: UUID, date_key: str) -> Optional[DailyPlan]:
        return (
            self.db.query(DailyPlan)
            .filter(DailyPlan.user_id == user_id, DailyPlan.date == date_key)
            .one_or_none()
        )

    def upsert_plan(self, user_id: UUID, date_key: str, timezone: str, plan_json: Dict[str, Any]) -> DailyPlan:
        self.ensure_user(user_id)
        plan = self.get_plan(user_id, date_key)
        if plan is None:
            plan = DailyPlan(user_id=user_id, date=date_key)
        plan.timezone = timezone
        plan.plan_json = plan_json
        self.db.add(plan)
        self._commit()
        self.db.refresh(plan)
        return plan

    def _goal_from_draft(self, user_id: UUID, draft: Dict[str, Any]) -> LongTermGoal:
        return LongTermGoal(
            user_id=user_id,
            title=draft["title"],
            description=draft.get("description") or "",
            category=draft["category"],
            priority=draft.get("priority", 1),
            target_timeframe=draft.get("target_timeframe") or "1 year",
            progress=draft.get("progress", 0),
            status=draft.get("status", "active"),
            ai_context=draft.get("ai_context"),
        )

    def _commit(self) -> None:
        try:
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
