"""Render a user's profile and goals into the text that primes every generation prompt."""
from __future__ import annotations

from typing import Iterable, List


def _present(value) -> bool:
    if value is None:
        return False
    if isinstance(value, str):
        return bool(value.strip())
    return True


def build_context(profile) -> str:
    """Summarize the profile as a fixed-structure paragraph.

    Required fields always appear in the same order; optional attributes are
    appended only when present, so two identical profiles always render the
    same text.
    """
    sentences: List[str] = [
        f"The user works or studies in: {profile.work_study}.",
        f"Their hobbies are: {profile.hobbies}.",
        f"Sports and exercise they practice: {profile.sports}.",
        f"They are based in {profile.location}.",
    ]
    if _present(profile.age_years):
        sentences.append(f"They are {profile.age_years} years old.")
    physical: List[str] = []
    if _present(profile.weight_kg):
        physical.append(f"weigh {profile.weight_kg} kg")
    if _present(profile.height_cm):
        physical.append(f"are {profile.height_cm} cm tall")
    if physical:
        sentences.append(f"They {' and '.join(physical)}.")
    if _present(profile.reading):
        sentences.append(f"Reading interests: {profile.reading.strip()}.")
    if _present(getattr(profile, "extra_information", None)):
        sentences.append(f"Additional information: {profile.extra_information.strip()}")
    if _present(getattr(profile, "extra_words", None)):
        sentences.append(f"In their own words: {profile.extra_words.strip()}")
    return " ".join(sentences)


def summarize_goals(goals: Iterable) -> str:
    goals = list(goals)
    if not goals:
        return "No active long-term goals set. Focus on general productivity and wellness."
    lines = ["User's active long-term goals:"]
    for goal in goals:
        lines.append(
            f"- {goal.title} ({goal.category}, priority {goal.priority}, "
            f"progress {goal.progress}%, target {goal.target_timeframe})"
        )
        if _present(goal.description):
            lines.append(f"  Description: {goal.description}")
    return "\n".join(lines)
