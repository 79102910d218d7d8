"""Repair helpers for text returned by generation backends."""
from __future__ import annotations

import json
import re
from typing import Any, Dict, List, Sequence

MINUTES_PER_DAY = 24 * 60

_TIME_RE = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)$")
_FENCE_RE = re.compile(r"```[A-Za-z0-9_-]*[ \t]*\r?\n?")


def is_valid_time(value: Any) -> bool:
    return isinstance(value, str) and bool(_TIME_RE.match(value))


def minutes_to_time(total_minutes: int) -> str:
    total_minutes %= MINUTES_PER_DAY
    return f"{total_minutes // 60:02d}:{total_minutes % 60:02d}"


def time_to_minutes(value: str) -> int:
    hours, minutes = value.split(":")
    return int(hours) * 60 + int(minutes)


def normalize_task_times(raw_tasks: Sequence[Any]) -> List[Dict[str, Any]]:
    """Give every task a valid, unused HH:MM time.

    Valid times already present are kept and reserved. Tasks without one get
    ``index * (1440 // N)`` minutes, probing forward a minute at a time past
    reserved slots. Probing stops after 1440 attempts, so when every minute of
    the day is taken the last probe is accepted as is.
    """
    tasks = [dict(task) if isinstance(task, dict) else {} for task in raw_tasks]
    step = MINUTES_PER_DAY // len(tasks) if tasks else 0
    reserved = {task["time"] for task in tasks if is_valid_time(task.get("time"))}

    for index, task in enumerate(tasks):
        if is_valid_time(task.get("time")):
            continue
        candidate = (index * step) % MINUTES_PER_DAY
        slot = minutes_to_time(candidate)
        attempts = 0
        while slot in reserved and attempts < MINUTES_PER_DAY:
            candidate = (candidate + 1) % MINUTES_PER_DAY
            slot = minutes_to_time(candidate)
            attempts += 1
        task["time"] = slot
        reserved.add(slot)
    return tasks


def strip_code_fences(text: str) -> str:
    """Remove markdown code fences (```json ... ```) wrapped around a payload."""
    if "```" not in text:
        return text.strip()
    return _FENCE_RE.sub("", text).strip()


def parse_generated_json(text: str) -> Any:
    """Strip fences and decode; raises ``json.JSONDecodeError`` on malformed output."""
    return json.loads(strip_code_fences(text))
