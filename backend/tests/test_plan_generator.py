from __future__ import annotations

import json
from datetime import date, datetime, timezone
from uuid import uuid4

import pytest

from app.services.errors import (
    GoalsAlreadyExistError,
    PlanNotFoundError,
    ProfileMissingError,
    TaskNotFoundError,
)
from app.services.llm_backends import DEEPSEEK, HUGGINGFACE
from app.services.plan_generator import (
    DAILY_PLAN,
    DAILY_TASKS,
    FALLBACK_SOURCE,
    LONG_TERM_GOALS,
    MONTHLY_PLAN,
    PlanGenerator,
    month_label,
    monthly_plan_key,
)
from app.services.plan_storage import PlanStorage

FIXED_NOW = datetime(2026, 10, 19, 23, 30, tzinfo=timezone.utc)

DAILY_PLAN_JSON = {
    "date": "1999-01-01",
    "timezone": "Mars/Base",
    "items": [
        {"start": "07:00", "end": "08:00", "title": "Run", "type": "exercise", "priority": "high"},
        {"start": "09:00", "end": "17:00", "title": "Work", "type": "work"},
    ],
}


@pytest.fixture()
def storage(session_factory):
    db = session_factory()
    store = PlanStorage(db)
    yield store
    db.close()


@pytest.fixture()
def user_id(storage, profile_fields):
    user_id = uuid4()
    storage.upsert_profile(user_id, profile_fields)
    return user_id


def _generator(storage, *backends):
    return PlanGenerator(storage, list(backends), default_timezone="UTC", clock=lambda: FIXED_NOW)


def test_use_case_backend_orders():
    assert DAILY_PLAN.backend_order == (DEEPSEEK, HUGGINGFACE)
    assert DAILY_TASKS.backend_order == (HUGGINGFACE, DEEPSEEK)
    assert MONTHLY_PLAN.params.max_tokens == 1500
    assert LONG_TERM_GOALS.params.temperature == 0.6


def test_backends_for_orders_by_use_case(storage, fake_backend):
    deepseek = fake_backend(DEEPSEEK)
    huggingface = fake_backend(HUGGINGFACE)
    generator = _generator(storage, deepseek, huggingface)

    assert generator.backends_for(DAILY_PLAN) == [deepseek, huggingface]
    assert generator.backends_for(DAILY_TASKS) == [huggingface, deepseek]


def test_daily_plan_from_fenced_backend_output(storage, user_id, fake_backend):
    text = "```json\n" + json.dumps(DAILY_PLAN_JSON) + "\n```"
    deepseek = fake_backend(DEEPSEEK, text=text)
    huggingface = fake_backend(HUGGINGFACE, text="unused")

    result = _generator(storage, deepseek, huggingface).generate_daily_plan(user_id, date(2026, 10, 20), "Europe/Lisbon")

    assert result.source == DEEPSEEK
    assert result.payload["date"] == "2026-10-20"
    assert result.payload["timezone"] == "Europe/Lisbon"
    assert [item["title"] for item in result.payload["items"]] == ["Run", "Work"]
    assert huggingface.calls == []
    stored = storage.get_plan(user_id, "2026-10-20")
    assert stored.plan_json["items"][0]["title"] == "Run"


def test_daily_plan_falls_through_chain_then_to_template(storage, user_id, fake_backend):
    deepseek = fake_backend(DEEPSEEK, error="timeout")
    huggingface = fake_backend(HUGGINGFACE, text="I cannot produce JSON today.")

    result = _generator(storage, huggingface, deepseek).generate_daily_plan(user_id)

    assert result.source == FALLBACK_SOURCE
    assert len(result.payload["items"]) == 11
    assert len(deepseek.calls) == 1
    assert len(huggingface.calls) == 1


def test_schema_violation_moves_to_next_backend(storage, user_id, fake_backend):
    bad = dict(DAILY_PLAN_JSON, items=[{"start": "25:00", "end": "08:00", "title": "Run", "type": "exercise"}])
    deepseek = fake_backend(DEEPSEEK, text=json.dumps(bad))
    huggingface = fake_backend(HUGGINGFACE, text=json.dumps(DAILY_PLAN_JSON))

    result = _generator(storage, deepseek, huggingface).generate_daily_plan(user_id)

    assert result.source == HUGGINGFACE


def test_default_date_uses_requested_timezone(storage, user_id):
    result = _generator(storage).generate_daily_plan(user_id, timezone="Asia/Tokyo")

    # 23:30 UTC is already the next morning in Tokyo.
    assert result.date_key == "2026-10-20"
    assert result.timezone == "Asia/Tokyo"


def test_missing_profile_raises_without_calling_backends(storage, fake_backend):
    deepseek = fake_backend(DEEPSEEK, text="{}")

    with pytest.raises(ProfileMissingError):
        _generator(storage, deepseek).generate_daily_plan(uuid4())
    assert deepseek.calls == []


def test_daily_tasks_get_ids_and_normalized_times(storage, user_id, fake_backend):
    generated = {
        "daily_tasks": [
            {"title": "Stretch", "time": "7am", "type": "workout"},
            {"id": 5, "title": "Deep work", "time": "09:00", "type": "work"},
            {"id": 5, "title": "Read", "type": "reading"},
        ]
    }
    huggingface = fake_backend(HUGGINGFACE, text=json.dumps(generated))

    result = _generator(storage, huggingface).generate_daily_tasks(user_id, date(2026, 10, 20))
    tasks = result.payload["daily_tasks"]

    assert result.source == HUGGINGFACE
    assert [task["id"] for task in tasks] == ["task-1", "5", "5-2"]
    assert [task["time"] for task in tasks] == ["00:00", "09:00", "16:00"]
    assert all(task["completed"] is False for task in tasks)


def test_empty_task_list_falls_back(storage, user_id, fake_backend):
    huggingface = fake_backend(HUGGINGFACE, text='{"daily_tasks": []}')

    result = _generator(storage, huggingface).generate_daily_tasks(user_id)

    assert result.source == FALLBACK_SOURCE
    assert [task["id"] for task in result.payload["daily_tasks"]] == ["default-1", "default-2"]


def test_plan_and_tasks_share_one_document(storage, user_id):
    generator = _generator(storage)
    generator.generate_daily_plan(user_id, date(2026, 10, 20))
    generator.generate_daily_tasks(user_id, date(2026, 10, 20))

    document = storage.get_plan(user_id, "2026-10-20").plan_json
    assert "items" in document
    assert "daily_tasks" in document


def test_toggle_updates_stored_task(storage, user_id):
    generator = _generator(storage)
    generator.generate_daily_tasks(user_id, date(2026, 10, 20))

    tasks = generator.toggle_daily_task(user_id, "2026-10-20", "default-2", True)

    assert [task["completed"] for task in tasks] == [False, True]
    stored = storage.get_plan(user_id, "2026-10-20").plan_json["daily_tasks"]
    assert stored[1]["completed"] is True


def test_toggle_errors(storage, user_id):
    generator = _generator(storage)
    with pytest.raises(PlanNotFoundError):
        generator.toggle_daily_task(user_id, "2026-10-20", "default-1", True)

    generator.generate_daily_tasks(user_id, date(2026, 10, 20))
    with pytest.raises(TaskNotFoundError):
        generator.toggle_daily_task(user_id, "2026-10-20", "missing", True)


def test_monthly_plan_fallback_key_and_label(storage, user_id):
    result = _generator(storage).generate_monthly_plan(user_id)

    assert result.date_key == "monthly-2026-10"
    assert result.label == "October 2026"
    assert result.source == FALLBACK_SOURCE
    assert storage.get_plan(user_id, "monthly-2026-10") is not None


def test_monthly_helpers():
    assert monthly_plan_key(date(2026, 3, 9)) == "monthly-2026-03"
    assert month_label(date(2026, 3, 9)) == "March 2026"


def test_long_term_goals_from_backend(storage, user_id, fake_backend):
    generated = {
        "goals": [
            {
                "title": "Ship a side project",
                "description": "Release something small",
                "category": "career",
                "priority": 4,
                "target_timeframe": "6 months",
            }
        ]
    }
    deepseek = fake_backend(DEEPSEEK, text=json.dumps(generated))

    result = _generator(storage, deepseek).generate_long_term_goals(user_id)

    assert result.source == DEEPSEEK
    assert [goal.title for goal in result.goals] == ["Ship a side project"]
    assert result.goals[0].status == "active"
    assert result.goals[0].progress == 0


def test_long_term_goals_refused_when_goals_exist(storage, user_id):
    generator = _generator(storage)
    first = generator.generate_long_term_goals(user_id)
    assert first.source == FALLBACK_SOURCE

    with pytest.raises(GoalsAlreadyExistError) as excinfo:
        generator.generate_long_term_goals(user_id)
    assert len(excinfo.value.goals) == len(first.goals)


def test_get_plan_missing(storage, user_id):
    with pytest.raises(PlanNotFoundError):
        _generator(storage).get_plan(user_id, "2026-01-01")


def test_deeply_nested_reply_falls_back(storage, user_id, fake_backend):
    deepseek = fake_backend(DEEPSEEK, text="[" * 100000 + "]" * 100000)

    result = _generator(storage, deepseek).generate_daily_plan(user_id, date(2026, 10, 20))

    assert result.source == FALLBACK_SOURCE
    assert len(result.payload["items"]) == 11
    assert len(deepseek.calls) == 1


def test_toggle_keeps_entries_that_are_not_tasks(storage, user_id):
    storage.upsert_plan(
        user_id,
        "2026-10-20",
        "UTC",
        {"daily_tasks": ["stray note", {"id": "a", "title": "Walk", "time": "08:00", "completed": False}, 7]},
    )

    tasks = _generator(storage).toggle_daily_task(user_id, "2026-10-20", "a", True)

    assert tasks[0] == "stray note"
    assert tasks[1]["completed"] is True
    assert tasks[2] == 7
    assert storage.get_plan(user_id, "2026-10-20").plan_json["daily_tasks"] == tasks


def test_delete_goal_is_scoped_to_owner(storage, user_id):
    goal = storage.create_goal(
        user_id, title="Save", description="", category="financial", priority=2, target_timeframe="1 year"
    )

    assert storage.delete_goal(uuid4(), goal.id) is False
    assert storage.delete_goal(user_id, goal.id) is True
    assert storage.list_goals(user_id) == []
    assert storage.delete_goal(user_id, goal.id) is False
