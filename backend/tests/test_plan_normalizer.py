from __future__ import annotations

import json

import pytest

from app.services.plan_normalizer import (
    is_valid_time,
    minutes_to_time,
    normalize_task_times,
    parse_generated_json,
    strip_code_fences,
)


def _times(tasks):
    return [task["time"] for task in tasks]


def test_valid_times_are_preserved():
    raw = [{"title": "a", "time": "06:30"}, {"title": "b", "time": "21:15"}]

    assert _times(normalize_task_times(raw)) == ["06:30", "21:15"]


def test_missing_times_spread_over_the_day():
    raw = [{"title": "a"}, {"title": "b"}, {"title": "c"}, {"title": "d"}]

    assert _times(normalize_task_times(raw)) == ["00:00", "06:00", "12:00", "18:00"]


def test_reserved_slot_is_skipped_by_probing_forward():
    raw = [{"title": "a"}, {"title": "b", "time": "00:00"}]

    # step is 720; index 0 wants 00:00, which task b already holds.
    assert _times(normalize_task_times(raw)) == ["00:01", "00:00"]


def test_invalid_times_are_replaced():
    raw = [
        {"title": "a", "time": "24:00"},
        {"title": "b", "time": "7:5"},
        {"title": "c", "time": 900},
        {"title": "d", "time": None},
    ]

    times = _times(normalize_task_times(raw))

    assert all(is_valid_time(value) for value in times)
    assert len(set(times)) == len(times)


def test_result_has_same_length_order_and_unique_times():
    raw = [{"title": str(i), "time": "09:00" if i % 3 == 0 else "bad"} for i in range(30)]

    result = normalize_task_times(raw)

    assert [task["title"] for task in result] == [str(i) for i in range(30)]
    # Repeated valid times are left alone; assigned slots avoid them.
    invalid_positions = [i for i in range(30) if i % 3 != 0]
    assigned = [result[i]["time"] for i in invalid_positions]
    assert len(set(assigned)) == len(assigned)
    assert "09:00" not in assigned


def test_non_dict_entries_become_tasks_and_input_is_not_mutated():
    original = {"title": "keep"}
    result = normalize_task_times([original, "junk"])

    assert "time" not in original
    assert result[1] == {"time": "12:00"}


def test_empty_list():
    assert normalize_task_times([]) == []


def test_minutes_to_time_wraps_midnight():
    assert minutes_to_time(1439) == "23:59"
    assert minutes_to_time(1440) == "00:00"


@pytest.mark.parametrize(
    "text",
    [
        '```json\n{"a": 1}\n```',
        '```\n{"a": 1}\n```',
        '  {"a": 1}  ',
        '```JSON   \r\n{"a": 1}```',
    ],
)
def test_strip_code_fences_recovers_payload(text):
    assert json.loads(strip_code_fences(text)) == {"a": 1}


def test_parse_generated_json_raises_for_prose():
    with pytest.raises(json.JSONDecodeError):
        parse_generated_json("Sure! Here is your plan: {not json}")
