from __future__ import annotations

import json
from typing import Any, List, Mapping, Optional, Sequence

from pydantic import BaseModel

EXERCISE_SCHEMA = """{
  "name": "STRING (e.g., Barbell Squats)",
  "target_muscles": "STRING (e.g., Quadriceps, Glutes)",
  "machine": "STRING (e.g., Squat Rack, Dumbbells, Bodyweight)",
  "attachments": "STRING (optional, e.g., Barbell, Resistance Band)",
  "sets": [
    { "reps": 0, "weight": 0, "unit": "STRING (either 'kg' or 'lbs')", "ai_tips": "STRING (suggested reps and weight, plus cues)" }
  ]
}"""

WORKOUT_SCHEMA = """{
  "day": "STRING (e.g., Monday, June 17th, 2025)",
  "title": "STRING (e.g., Leg Day)",
  "subtitle": "STRING (optional, e.g., Focus on strength)",
  "exercises": [ EXERCISE ],
  "ai_tips": "STRING (optional, overall tips for the workout)"
}"""

JSON_ONLY = "DO NOT include any conversational text outside the JSON."

ZERO_LOAD_RULE = (
    "For each set within an exercise, set the 'reps' and 'weight' fields to 0. "
    "Put the suggested reps and weight in that set's 'ai_tips' field instead, "
    "the user will fill in the actual numbers. Units must be 'kg' or 'lbs'."
)


def _dump(data: Any) -> str:
    if isinstance(data, BaseModel):
        data = data.model_dump()
    elif isinstance(data, (list, tuple)):
        data = [d.model_dump() if isinstance(d, BaseModel) else d for d in data]
    return json.dumps(data, indent=2, default=str)


def _with_user_input(prompt: str, user_input: Optional[str], label: str) -> str:
    if user_input:
        prompt += f"\n{label}: {user_input}"
    return prompt


def build_suggestion_prompt(past_workouts: Sequence[Any], user_instructions: Optional[str] = None) -> str:
    schema = WORKOUT_SCHEMA.replace("EXERCISE", EXERCISE_SCHEMA.replace("\n", "\n    "))
    prompt = (
        "Based on the following past workout data, suggest a workout plan for today.\n"
        "The suggestion MUST be returned as a JSON object strictly following this schema:\n"
        f"{schema}\n"
        f"{ZERO_LOAD_RULE}\n"
        "For each exercise include relevant tips (form, common mistakes, intensity cues) in the sets' 'ai_tips'. "
        "For the overall workout, provide an 'ai_tips' field with general advice or focus.\n"
        "If no exercise is suggested, provide an empty array for 'exercises'.\n"
        f"{JSON_ONLY}\n\n"
        f"Past Workout Data:\n{_dump(list(past_workouts))}\n"
    )
    prompt = _with_user_input(prompt, user_instructions, "Additional instructions from user")
    return prompt + "\n\nSuggested workout for today (as JSON):"


def build_replacement_prompt(
    exercise: Any, siblings: Sequence[Any], user_input: Optional[str] = None
) -> str:
    prompt = (
        "Suggest a single replacement for the exercise below. It should train similar muscles "
        "and fit with the other exercises in the same workout without duplicating them.\n"
        "The replacement MUST be returned as a JSON object strictly following this schema:\n"
        f"{EXERCISE_SCHEMA}\n"
        f"{ZERO_LOAD_RULE}\n"
        f"{JSON_ONLY}\n\n"
        f"Exercise to replace:\n{_dump(exercise)}\n\n"
        f"Other exercises in the workout:\n{_dump(list(siblings))}\n"
    )
    prompt = _with_user_input(prompt, user_input, "User input")
    return prompt + "\n\nReplacement exercise (as JSON):"


def build_rest_time_prompt(workout: Any, user_input: Optional[str] = None) -> str:
    prompt = (
        "Given the following workout for today, suggest the optimal rest time (in seconds) "
        "between sets and exercises. "
        'Respond ONLY with a JSON object: { "rest_time_seconds": NUMBER }. '
        f"Today's workout: {_dump(workout)}"
    )
    prompt = _with_user_input(prompt, user_input, "User input")
    return prompt + "\nRespond only with the JSON."


def build_tips_prompt(exercise: Any, workout: Any, user_input: Optional[str] = None) -> str:
    prompt = (
        "Give practical coaching tips for the exercise below: setup, form cues, common mistakes, "
        "breathing and how to progress it. Take the rest of the workout into account.\n"
        "Answer in plain prose, not JSON.\n\n"
        f"Exercise:\n{_dump(exercise)}\n\n"
        f"Workout context:\n{_dump(workout)}\n"
    )
    return _with_user_input(prompt, user_input, "Additional instructions from user")


def _field(item: Any, name: str) -> Any:
    if isinstance(item, Mapping):
        return item.get(name)
    return getattr(item, name, None)


def _number(value: Any) -> Any:
    # 60.0 prints as 60, 62.5 stays 62.5
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value


def format_workout_as_text(workout: Any) -> str:
    """Plain-text rendering of a workout tree (dicts or read models)."""
    lines: List[str] = ["", f"--- Suggested Workout for {_field(workout, 'day') or 'Today'} ---"]
    lines.append(f"Title: {_field(workout, 'title')}")
    if _field(workout, "subtitle"):
        lines.append(f"Subtitle: {_field(workout, 'subtitle')}")
    if _field(workout, "ai_tips"):
        lines.append(f"AI Tips (Workout): {_field(workout, 'ai_tips')}")
    lines.append("-" * 36)

    exercises = _field(workout, "exercises") or []
    if not exercises:
        lines.append("No exercises suggested for this workout.")
    for ex_index, exercise in enumerate(exercises, start=1):
        lines.append("")
        lines.append(f"Exercise {ex_index}: {_field(exercise, 'name')}")
        lines.append(f"  Target Muscles: {_field(exercise, 'target_muscles') or 'N/A'}")
        lines.append(f"  Machine: {_field(exercise, 'machine') or 'N/A'}")
        if _field(exercise, "attachments"):
            lines.append(f"  Attachments: {_field(exercise, 'attachments')}")
        sets = _field(exercise, "sets") or []
        if not sets:
            lines.append("  No sets logged for this exercise.")
            continue
        lines.append("  Sets:")
        for set_index, s in enumerate(sets, start=1):
            line = f"    Set {set_index}: {_field(s, 'reps')} reps @ {_number(_field(s, 'weight'))} {_field(s, 'unit')}"
            if _field(s, "ai_tips"):
                line += f" - Tips: {_field(s, 'ai_tips')}"
            lines.append(line)
    lines.append("-" * 36)
    return "\n".join(lines) + "\n"
