"""Plan generation: ordered backend chain, response validation, fallback and persistence."""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from datetime import date, datetime, timezone as dt_timezone
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple, Type
from uuid import UUID
from zoneinfo import ZoneInfo

from pydantic import BaseModel, ValidationError

from app.api.schemas.goal import GeneratedGoalList
from app.api.schemas.plan import DailyPlanPayload, GeneratedTaskList, MonthlyPlanPayload
from app.db.models.long_term_goal import LongTermGoal
from app.db.models.profile import Profile
from app.observability.tracing import log_metric, trace
from app.services import plan_prompts
from app.services.errors import (
    GoalsAlreadyExistError,
    PlanNotFoundError,
    ProfileMissingError,
    TaskNotFoundError,
)
from app.services.llm_backends import (
    DEEPSEEK,
    HUGGINGFACE,
    BackendError,
    GenerationBackend,
    GenerationParams,
    GenerationPrompt,
)
from app.services.plan_fallback import (
    MAX_TEMPLATE_GOALS,
    fallback_daily_plan,
    fallback_daily_tasks,
    fallback_long_term_goals,
    fallback_monthly_plan,
)
from app.services.plan_normalizer import normalize_task_times, parse_generated_json
from app.services.plan_storage import PlanStorage

logger = logging.getLogger(__name__)

FALLBACK_SOURCE = "fallback"


@dataclass(frozen=True)
class UseCase:
    name: str
    backend_order: Tuple[str, ...]
    params: GenerationParams
    schema: Type[BaseModel]


DAILY_PLAN = UseCase("daily_plan", (DEEPSEEK, HUGGINGFACE), GenerationParams(0.6, 1200), DailyPlanPayload)
DAILY_TASKS = UseCase("daily_tasks", (HUGGINGFACE, DEEPSEEK), GenerationParams(0.6, 1200), GeneratedTaskList)
MONTHLY_PLAN = UseCase("monthly_plan", (DEEPSEEK, HUGGINGFACE), GenerationParams(0.6, 1500), MonthlyPlanPayload)
LONG_TERM_GOALS = UseCase("long_term_goals", (DEEPSEEK, HUGGINGFACE), GenerationParams(0.6, 1500), GeneratedGoalList)


@dataclass
class PlanResult:
    date_key: str
    timezone: str
    payload: Dict[str, Any]
    source: str
    label: Optional[str] = None


@dataclass
class GoalResult:
    goals: List[LongTermGoal]
    source: str


def monthly_plan_key(month_of: date) -> str:
    return f"monthly-{month_of.year}-{month_of.month:02d}"


def _utcnow() -> datetime:
    return datetime.now(dt_timezone.utc)


class PlanGenerator:
    """Generate plans through the configured backends, falling back to deterministic templates.

    ``backends`` is the list of enabled backends; each use case tries them in
    its own fixed order, one at a time, and the first response that parses and
    validates wins. Every plan request performs exactly one storage write.
    """

    def __init__(
        self,
        storage: PlanStorage,
        backends: Sequence[GenerationBackend],
        *,
        default_timezone: str = "UTC",
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.storage = storage
        self.backends = list(backends)
        self.default_timezone = default_timezone
        self.clock = clock

    # Use cases -----------------------------------------------------------------

    def generate_daily_plan(self, user_id: UUID, plan_date: Optional[date] = None, timezone: Optional[str] = None) -> PlanResult:
        profile = self._require_profile(user_id)
        goals = self.storage.get_active_goals(user_id)
        tz = timezone or self.default_timezone
        date_key = (plan_date or self._today(tz)).isoformat()

        generated, source = self._run_chain(DAILY_PLAN, plan_prompts.daily_plan_prompt(profile, goals, date_key, tz))
        if generated is not None:
            payload = generated.model_dump(exclude_none=True)
            payload.update(date=date_key, timezone=tz)
        else:
            payload = fallback_daily_plan(profile, goals, date_key, tz)

        self._store(user_id, date_key, tz, payload)
        return PlanResult(date_key=date_key, timezone=tz, payload=payload, source=source)

    def generate_daily_tasks(self, user_id: UUID, plan_date: Optional[date] = None, timezone: Optional[str] = None) -> PlanResult:
        profile = self._require_profile(user_id)
        goals = self.storage.get_active_goals(user_id)
        tz = timezone or self.default_timezone
        date_key = (plan_date or self._today(tz)).isoformat()

        generated, source = self._run_chain(DAILY_TASKS, plan_prompts.daily_tasks_prompt(profile, goals, date_key))
        if generated is not None:
            tasks = _assign_task_ids([task.model_dump() for task in generated.daily_tasks])
        else:
            tasks = fallback_daily_tasks(goals)
        tasks = normalize_task_times(tasks)

        self._store(user_id, date_key, tz, {"daily_tasks": tasks})
        return PlanResult(date_key=date_key, timezone=tz, payload={"daily_tasks": tasks}, source=source)

    def generate_monthly_plan(self, user_id: UUID, timezone: Optional[str] = None) -> PlanResult:
        profile = self._require_profile(user_id)
        goals = self.storage.get_active_goals(user_id)
        tz = timezone or self.default_timezone
        today = self._today(tz)
        date_key = monthly_plan_key(today)

        prompt = plan_prompts.monthly_plan_prompt(profile, goals, month_label(today), today.strftime("%Y-%m"))
        generated, source = self._run_chain(MONTHLY_PLAN, prompt)
        payload = generated.model_dump() if generated is not None else fallback_monthly_plan(today)

        self.storage.upsert_plan(user_id, date_key, tz, payload)
        return PlanResult(date_key=date_key, timezone=tz, payload=payload, source=source, label=month_label(today))

    def generate_long_term_goals(self, user_id: UUID) -> GoalResult:
        profile = self._require_profile(user_id)
        existing = self.storage.list_goals(user_id)
        if existing:
            raise GoalsAlreadyExistError(existing)

        generated, source = self._run_chain(LONG_TERM_GOALS, plan_prompts.long_term_goals_prompt(profile))
        if generated is not None:
            drafts = [goal.model_dump() for goal in generated.goals][:MAX_TEMPLATE_GOALS]
        else:
            drafts = fallback_long_term_goals(profile)

        return GoalResult(goals=self.storage.create_goals(user_id, drafts), source=source)

    def toggle_daily_task(self, user_id: UUID, date_key: str, task_id: str, completed: bool) -> List[Dict[str, Any]]:
        plan = self.storage.get_plan(user_id, date_key)
        if plan is None:
            raise PlanNotFoundError(date_key)

        document = dict(plan.plan_json or {})
        # Entries that are not task objects are kept in place untouched.
        tasks = [dict(task) if isinstance(task, dict) else task for task in document.get("daily_tasks") or []]
        index = next(
            (i for i, task in enumerate(tasks) if isinstance(task, dict) and str(task.get("id")) == str(task_id)),
            None,
        )
        if index is None:
            raise TaskNotFoundError(task_id)

        tasks[index]["completed"] = completed
        document["daily_tasks"] = tasks
        self.storage.upsert_plan(user_id, date_key, plan.timezone, document)
        return tasks

    def get_plan(self, user_id: UUID, date_key: str):
        plan = self.storage.get_plan(user_id, date_key)
        if plan is None:
            raise PlanNotFoundError(date_key)
        return plan

    # Backend chain -------------------------------------------------------------

    def backends_for(self, use_case: UseCase) -> List[GenerationBackend]:
        """Enabled backends in the use case's priority order; unlisted backends go last."""
        ranked = {name: position for position, name in enumerate(use_case.backend_order)}
        return sorted(self.backends, key=lambda backend: ranked.get(backend.name, len(ranked)))

    def _run_chain(self, use_case: UseCase, prompt: GenerationPrompt) -> Tuple[Optional[BaseModel], str]:
        for backend in self.backends_for(use_case):
            with trace(f"plan.generate.{use_case.name}", metadata={"backend": backend.name}) as attempt_trace:
                result = self._attempt(use_case, backend, prompt)
                if attempt_trace:
                    attempt_trace.update(metadata={"accepted": result is not None})
            if result is not None:
                log_metric("plan.generate.success", 1, {"use_case": use_case.name, "backend": backend.name})
                return result, backend.name

        logger.info("%s: using deterministic fallback (%d backend(s) tried)", use_case.name, len(self.backends))
        log_metric("plan.fallback.used", 1, {"use_case": use_case.name})
        return None, FALLBACK_SOURCE

    def _attempt(self, use_case: UseCase, backend: GenerationBackend, prompt: GenerationPrompt) -> Optional[BaseModel]:
        try:
            text = backend.complete(prompt, use_case.params)
        except BackendError as exc:
            logger.warning("%s: backend %s failed: %s", use_case.name, backend.name, exc)
            return None

        try:
            parsed = parse_generated_json(text)
        except (json.JSONDecodeError, RecursionError) as exc:
            logger.warning("%s: backend %s returned invalid JSON: %s", use_case.name, backend.name, exc)
            return None

        try:
            return use_case.schema.model_validate(parsed)
        except ValidationError as exc:
            logger.warning("%s: backend %s response failed validation: %s", use_case.name, backend.name, exc)
            return None

    # Helpers -------------------------------------------------------------------

    def _require_profile(self, user_id: UUID) -> Profile:
        profile = self.storage.get_profile(user_id)
        if profile is None:
            raise ProfileMissingError()
        return profile

    def _today(self, tz: str) -> date:
        return self.clock().astimezone(ZoneInfo(tz)).date()

    def _store(self, user_id: UUID, date_key: str, tz: str, update: Dict[str, Any]) -> None:
        """Write one use case's keys into the day's document, keeping the other use case's keys."""
        existing = self.storage.get_plan(user_id, date_key)
        document = dict(existing.plan_json or {}) if existing is not None else {}
        document.update(update)
        self.storage.upsert_plan(user_id, date_key, tz, document)


def month_label(month_of: date) -> str:
    return f"{month_of.strftime('%B')} {month_of.year}"


def _assign_task_ids(tasks: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Stringify task ids and replace missing or repeated ones so each id is unique."""
    seen: set[str] = set()
    for index, task in enumerate(tasks):
        task_id = task.get("id")
        candidate = str(task_id) if task_id not in (None, "") else f"task-{index + 1}"
        suffix = 1
        base = candidate
        while candidate in seen:
            suffix += 1
            candidate = f"{base}-{suffix}"
        task["id"] = candidate
        seen.add(candidate)
    return tasks
