"""Prompt builders for each generation use case."""
from __future__ import annotations

from typing import Sequence

from app.services.ai_context import build_context, summarize_goals
from app.services.llm_backends import GenerationPrompt

RAW_JSON_RULE = "Respond with raw JSON only: no markdown, no code fences, no commentary."

DAILY_PLAN_SCHEMA = """{
  "date": "YYYY-MM-DD",
  "timezone": "string",
  "items": [
    {
      "start": "HH:MM",
      "end": "HH:MM",
      "title": "string",
      "type": "work|study|exercise|meal|reading|break|sleep|other",
      "priority": "low|medium|high",
      "notes": "string (name the goal this block supports, if any)"
    }
  ]
}"""

DAILY_TASKS_SCHEMA = """{
  "daily_tasks": [
    {
      "id": "1",
      "title": "Goal-aligned task title",
      "time": "HH:MM",
      "type": "workout|meal|reading|work|rest",
      "completed": false,
      "description": "Specific action that supports [Goal Name]"
    }
  ]
}"""

MONTHLY_PLAN_SCHEMA = """{
  "ai_vision": {
    "six_month_projection": "string",
    "one_year_vision": "string"
  },
  "monthly_goals": [
    {
      "id": "string",
      "title": "string",
      "category": "fitness|learning|career|personal|financial",
      "progress": 0,
      "target": "string"
    }
  ],
  "milestones": [
    {
      "id": "string",
      "title": "string",
      "date": "YYYY-MM-DD",
      "completed": false,
      "description": "string"
    }
  ]
}"""

LONG_TERM_GOALS_SCHEMA = """{
  "goals": [
    {
      "title": "string",
      "description": "string",
      "category": "fitness|learning|career|personal|financial",
      "priority": 1,
      "target_timeframe": "6 months|1 year|2 years",
      "ai_context": "why this goal fits the user"
    }
  ]
}"""


def _system_prompt(profile, goals: Sequence, role: str, schema: str, guidelines: str) -> str:
    return (
        f"{build_context(profile)}\n\n"
        f"{summarize_goals(goals)}\n\n"
        f"{role} {RAW_JSON_RULE}\n\n"
        f"Required JSON schema:\n{schema}\n\n"
        f"Guidelines:\n{guidelines}"
    )


def daily_plan_prompt(profile, goals: Sequence, plan_date: str, timezone: str) -> GenerationPrompt:
    guidelines = (
        "- Create 8-12 realistic time blocks covering the whole day, including sleep.\n"
        "- Include blocks that directly support the active long-term goals and mark them high priority.\n"
        "- Add work/study from the profile, exercise from their sports, reading from their interests.\n"
        "- Include meals, breaks and sleep for wellbeing.\n"
        "- Use 24-hour HH:MM times."
    )
    system = _system_prompt(
        profile,
        goals,
        "You are a personal productivity assistant that builds daily schedules aligned with long-term goals.",
        DAILY_PLAN_SCHEMA,
        guidelines,
    )
    user = (
        f"Create a daily plan for {plan_date} in timezone {timezone} that moves the user toward their "
        "long-term goals while staying realistic and balanced."
    )
    return GenerationPrompt(system=system, user=user)


def daily_tasks_prompt(profile, goals: Sequence, plan_date: str) -> GenerationPrompt:
    guidelines = (
        "- Generate 4-6 tasks that support progress toward the active long-term goals.\n"
        "- Keep them achievable in one day and vary them (work, exercise, learning, personal care).\n"
        "- Give every task a distinct 24-hour HH:MM time and completed: false."
    )
    system = _system_prompt(
        profile,
        goals,
        "You are an intelligent daily task planner that creates tasks aligned with long-term goals.",
        DAILY_TASKS_SCHEMA,
        guidelines,
    )
    return GenerationPrompt(system=system, user=f"Create the task list for {plan_date}.")


def monthly_plan_prompt(profile, goals: Sequence, month_label: str, month_prefix: str) -> GenerationPrompt:
    guidelines = (
        "- Create 3-5 monthly goals based on the profile and active goals.\n"
        "- Include fitness goals for their sports, learning goals for hobbies and reading, career goals for work.\n"
        f"- Create 4-6 milestones spread through the month; every date must start with {month_prefix}.\n"
        "- Progress values are integers between 0 and 100."
    )
    system = _system_prompt(
        profile,
        goals,
        "You are a personal productivity assistant that plans the user's month.",
        MONTHLY_PLAN_SCHEMA,
        guidelines,
    )
    user = (
        f"Create a monthly plan for {month_label} with personalized, achievable goals, progress tracking "
        "and meaningful milestones."
    )
    return GenerationPrompt(system=system, user=user)


def long_term_goals_prompt(profile) -> GenerationPrompt:
    guidelines = (
        "- Propose 3-5 long-term goals across different categories.\n"
        "- Always include a career goal grounded in their work/study.\n"
        "- Priority is an integer from 1 (low) to 5 (high).\n"
        "- Keep each description to one or two concrete sentences."
    )
    system = _system_prompt(
        profile,
        [],
        "You are a life coach that turns a profile into long-term goals.",
        LONG_TERM_GOALS_SCHEMA,
        guidelines,
    )
    return GenerationPrompt(system=system, user="Suggest long-term goals for this user.")
