"""Deterministic plans used when no generation backend is configured or every attempt fails.

Nothing here reads the clock or performs I/O: identical inputs always produce
identical output.
"""
from __future__ import annotations

import calendar
from dataclasses import dataclass
from datetime import date
from typing import Any, Dict, Iterable, List, Optional, Sequence

from app.services.plan_normalizer import minutes_to_time, time_to_minutes

DAILY_TEMPLATE: tuple[Dict[str, str], ...] = (
    {"start": "07:00", "end": "07:30", "title": "Morning routine", "type": "other", "priority": "medium"},
    {"start": "07:30", "end": "08:00", "title": "Breakfast", "type": "meal", "priority": "high"},
    {"start": "08:00", "end": "12:00", "title": "Work/Study time", "type": "work", "priority": "high"},
    {"start": "12:00", "end": "13:00", "title": "Lunch break", "type": "meal", "priority": "high"},
    {"start": "13:00", "end": "17:00", "title": "Work/Study time", "type": "work", "priority": "high"},
    {"start": "17:00", "end": "18:00", "title": "Exercise", "type": "exercise", "priority": "medium"},
    {"start": "18:00", "end": "19:00", "title": "Personal time", "type": "break", "priority": "low"},
    {"start": "19:00", "end": "20:00", "title": "Dinner", "type": "meal", "priority": "high"},
    {"start": "20:00", "end": "21:00", "title": "Reading/Hobbies", "type": "reading", "priority": "low"},
    {"start": "21:00", "end": "22:00", "title": "Wind down", "type": "break", "priority": "low"},
    {"start": "22:00", "end": "07:00", "title": "Sleep", "type": "sleep", "priority": "high"},
)

EXERCISE_SLOT = 5
EVENING_READING_SLOT = 8
GOALS_CONSIDERED = 3


@dataclass(frozen=True)
class SlotOverride:
    """Template slot a goal category takes over, and the ranks allowed to take it."""

    slot: int
    max_rank: int
    title: str
    type: str
    priority: str
    notes_prefix: str


# Evaluated per goal, highest priority first; each category substitutes at most once.
CATEGORY_SLOT_OVERRIDES: Dict[str, SlotOverride] = {
    "fitness": SlotOverride(EXERCISE_SLOT, 3, "Goal-focused Exercise", "exercise", "high", "Working toward"),
    "learning": SlotOverride(EVENING_READING_SLOT, 2, "Learning Session", "reading", "high", "Study for"),
    "career": SlotOverride(2, 2, "Career Development Work", "work", "high", "Progress on"),
    "personal": SlotOverride(6, 3, "Personal Goal Time", "other", "medium", "Work on"),
    "financial": SlotOverride(4, 3, "Financial Planning Work", "work", "high", "Progress on"),
}


@dataclass(frozen=True)
class GoalTaskTemplate:
    title: str
    time: str
    type: str
    description_prefix: str


GOAL_TASK_TEMPLATES: Dict[str, GoalTaskTemplate] = {
    "fitness": GoalTaskTemplate("Goal-aligned Workout", "07:00", "workout", "Work towards"),
    "learning": GoalTaskTemplate("Learning Session", "19:00", "reading", "Study for"),
    "career": GoalTaskTemplate("Career Development", "09:00", "work", "Progress on"),
}
DEFAULT_GOAL_TASK = GoalTaskTemplate("Personal Goal Work", "18:00", "work", "Work on")

DEFAULT_DAILY_TASKS: tuple[Dict[str, Any], ...] = (
    {
        "id": "default-1",
        "title": "Morning Routine",
        "time": "08:00",
        "type": "meal",
        "completed": False,
        "description": "Healthy breakfast and planning",
    },
    {
        "id": "default-2",
        "title": "Focus Block",
        "time": "10:00",
        "type": "work",
        "completed": False,
        "description": "Deep work session",
    },
)
MAX_DAILY_TASKS = 5
GOAL_TASKS_CONSIDERED = 2
MAX_TEMPLATE_GOALS = 5

MONTHLY_VISION = {
    "six_month_projection": (
        "Based on your profile, focusing on consistent daily habits will help you achieve significant "
        "progress in your fitness, learning, and career goals. Building momentum in small, manageable "
        "steps leads to remarkable long-term results."
    ),
    "one_year_vision": (
        "By maintaining consistent effort in your areas of interest, you'll develop expertise and achieve "
        "meaningful milestones that align with your personal and professional aspirations."
    ),
}
MONTHLY_GOALS: tuple[Dict[str, Any], ...] = (
    {"id": "1", "title": "Daily Exercise Routine", "category": "fitness", "progress": 0, "target": "30 days of activity"},
    {"id": "2", "title": "Learn New Skills", "category": "learning", "progress": 0, "target": "Complete 2 courses"},
    {"id": "3", "title": "Career Development", "category": "career", "progress": 0, "target": "Advance key projects"},
    {"id": "4", "title": "Personal Growth", "category": "personal", "progress": 0, "target": "Develop healthy habits"},
)
MONTHLY_MILESTONES: tuple[tuple[int, str, str], ...] = (
    (7, "Complete first week of habits", "Build foundation for monthly goals"),
    (15, "Mid-month check-in", "Assess progress and adjust approach"),
    (23, "Complete major milestone", "Achieve significant goal progress"),
    (30, "Month-end reflection", "Review achievements and plan next month"),
)


def active_goals_by_priority(goals: Iterable) -> List:
    """Active goals, highest priority first; ties keep their incoming order."""
    active = [goal for goal in goals if goal.status == "active"]
    return sorted(active, key=lambda goal: goal.priority or 0, reverse=True)


def fallback_daily_plan(profile, goals: Sequence, plan_date: str, timezone: str) -> Dict[str, Any]:
    items = [dict(slot) for slot in DAILY_TEMPLATE]
    ranked = active_goals_by_priority(goals)

    if ranked:
        applied: set[str] = set()
        for rank, goal in enumerate(ranked[:GOALS_CONSIDERED]):
            override = CATEGORY_SLOT_OVERRIDES.get(goal.category)
            if override is None or goal.category in applied or rank >= override.max_rank:
                continue
            slot = items[override.slot]
            items[override.slot] = {
                "start": slot["start"],
                "end": slot["end"],
                "title": override.title,
                "type": override.type,
                "priority": override.priority,
                "notes": f"{override.notes_prefix}: {goal.title}",
            }
            applied.add(goal.category)
    else:
        if "yoga" in (profile.sports or "").lower():
            items[EXERCISE_SLOT] = {
                "start": "17:00",
                "end": "18:00",
                "title": "Yoga session",
                "type": "exercise",
                "priority": "medium",
            }
        if (profile.reading or "").strip():
            items[EVENING_READING_SLOT] = {
                "start": "20:00",
                "end": "21:00",
                "title": "Reading time",
                "type": "reading",
                "priority": "medium",
            }

    return {"date": plan_date, "timezone": timezone, "items": items}


def _claim_slot(preferred: str, taken: set[str]) -> str:
    """Nudge a clashing task later in 30-minute steps so one task set never repeats a time."""
    base = time_to_minutes(preferred)
    for offset in range(0, 24 * 60, 30):
        candidate = minutes_to_time(base + offset)
        if candidate not in taken:
            taken.add(candidate)
            return candidate
    return preferred


def fallback_daily_tasks(goals: Sequence) -> List[Dict[str, Any]]:
    taken = {task["time"] for task in DEFAULT_DAILY_TASKS}
    goal_tasks: List[Dict[str, Any]] = []
    for index, goal in enumerate(active_goals_by_priority(goals)[:GOAL_TASKS_CONSIDERED]):
        template = GOAL_TASK_TEMPLATES.get(goal.category, DEFAULT_GOAL_TASK)
        goal_tasks.append(
            {
                "id": f"goal-{index + 1}",
                "title": template.title,
                "time": _claim_slot(template.time, taken),
                "type": template.type,
                "completed": False,
                "description": f"{template.description_prefix}: {goal.title}",
            }
        )
    return (goal_tasks + [dict(task) for task in DEFAULT_DAILY_TASKS])[:MAX_DAILY_TASKS]


def _has_text(value: Optional[str]) -> bool:
    return bool(value and value.strip())


def fallback_long_term_goals(profile) -> List[Dict[str, Any]]:
    """Template goals derived from the profile alone."""
    work_study = profile.work_study.strip()
    goals: List[Dict[str, Any]] = [
        {
            "title": f"Advance your career in {work_study}",
            "description": f"Build skills, visibility and concrete results in {work_study}.",
            "category": "career",
            "priority": 5,
            "target_timeframe": "1 year",
            "ai_context": f"Derived from your work/study focus: {work_study}.",
        }
    ]
    if _has_text(profile.sports):
        goals.append(
            {
                "title": f"Build a consistent {profile.sports.strip()} routine",
                "description": "Train at least three times a week and track sessions to measure improvement.",
                "category": "fitness",
                "priority": 4,
                "target_timeframe": "6 months",
                "ai_context": f"You listed {profile.sports.strip()} as your sport.",
            }
        )
    if _has_text(profile.hobbies):
        goals.append(
            {
                "title": f"Deepen your skills in {profile.hobbies.strip()}",
                "description": "Set aside regular practice time and finish one tangible project.",
                "category": "learning",
                "priority": 3,
                "target_timeframe": "6 months",
                "ai_context": f"Built around your hobbies: {profile.hobbies.strip()}.",
            }
        )
    if any(value is not None for value in (profile.age_years, profile.weight_kg, profile.height_cm)):
        goals.append(
            {
                "title": "Improve overall health and wellness",
                "description": "Keep balanced meals, steady sleep and regular check-ins on your physical stats.",
                "category": "fitness",
                "priority": 4,
                "target_timeframe": "1 year",
                "ai_context": "You shared physical stats, so a health baseline is worth tracking.",
            }
        )
    goals.append(
        {
            "title": "Build a personal emergency fund",
            "description": "Save a fixed share of monthly income until three months of expenses are covered.",
            "category": "financial",
            "priority": 3,
            "target_timeframe": "1 year",
            "ai_context": "Financial stability supports every other goal.",
        }
    )
    goals.append(
        {
            "title": "Grow through weekly reflection",
            "description": "Review each week, note what worked and choose one habit to improve.",
            "category": "personal",
            "priority": 2,
            "target_timeframe": "2 years",
            "ai_context": "Personal development keeps the rest of the plan sustainable.",
        }
    )
    return goals[:MAX_TEMPLATE_GOALS]


def fallback_monthly_plan(month_of: date) -> Dict[str, Any]:
    """Generic vision, goals and milestones for the month containing ``month_of``."""
    last_day = calendar.monthrange(month_of.year, month_of.month)[1]
    milestones = [
        {
            "id": str(index + 1),
            "title": title,
            "date": date(month_of.year, month_of.month, min(day, last_day)).isoformat(),
            "completed": False,
            "description": description,
        }
        for index, (day, title, description) in enumerate(MONTHLY_MILESTONES)
    ]
    return {
        "ai_vision": dict(MONTHLY_VISION),
        "monthly_goals": [dict(goal) for goal in MONTHLY_GOALS],
        "milestones": milestones,
    }
