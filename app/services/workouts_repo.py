"""Loading and writing whole Workout -> Exercise -> Set trees.

Loaders fetch one query per level (workouts, then each workout's exercises,
then each exercise's sets) and return the nested read models.

Writers never commit. The caller owns the session and commits once, which
makes every public write a single transaction.
"""
from __future__ import annotations

import logging
from datetime import date
from typing import Any, Dict, Iterable, List, Mapping, Optional

from sqlalchemy import delete, update
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from ..errors import NotFoundError, ValidationError
from ..models import (
    UNITS,
    Exercise,
    ExerciseRead,
    ExerciseSet,
    SetRead,
    Workout,
    WorkoutRead,
)
from ..settings import get_settings

logger = logging.getLogger(__name__)

EXERCISE_FIELDS = ("name", "target_muscles", "machine", "attachments")


def today_label(today: Optional[date] = None) -> str:
    return (today or date.today()).strftime(get_settings().day_format)


# Loading


async def _exercise_tree(session: AsyncSession, exercise: Exercise) -> ExerciseRead:
    result = await session.exec(
        select(ExerciseSet).where(ExerciseSet.exercise_id == exercise.id).order_by(ExerciseSet.id)
    )
    sets = [SetRead(**s.model_dump()) for s in result.all()]
    return ExerciseRead(**exercise.model_dump(), sets=sets)


async def _workout_tree(session: AsyncSession, workout: Workout) -> WorkoutRead:
    result = await session.exec(
        select(Exercise).where(Exercise.workout_id == workout.id).order_by(Exercise.id)
    )
    exercises = [await _exercise_tree(session, ex) for ex in result.all()]
    return WorkoutRead(**workout.model_dump(), exercises=exercises)


async def load_all_workouts(session: AsyncSession, exclude_day: Optional[str] = None) -> List[WorkoutRead]:
    query = select(Workout).order_by(Workout.id)
    if exclude_day is not None:
        query = query.where(Workout.day != exclude_day)
    result = await session.exec(query)
    return [await _workout_tree(session, w) for w in result.all()]


async def _find_by_day(session: AsyncSession, day: str) -> Optional[Workout]:
    result = await session.exec(select(Workout).where(Workout.day == day).order_by(Workout.id))
    return result.first()


async def load_workout_by_day(session: AsyncSession, day: str) -> WorkoutRead:
    workout = await _find_by_day(session, day)
    if workout is None:
        raise NotFoundError(f"No workout found for {day}.")
    return await _workout_tree(session, workout)


async def load_todays_workout(session: AsyncSession) -> WorkoutRead:
    today = today_label()
    workout = await _find_by_day(session, today)
    if workout is None:
        raise NotFoundError(f"No workout found for today ({today}).")
    return await _workout_tree(session, workout)


async def load_workout_by_id(session: AsyncSession, workout_id: int) -> WorkoutRead:
    result = await session.exec(select(Workout).where(Workout.id == workout_id))
    workout = result.first()
    if workout is None:
        raise NotFoundError("Workout not found")
    return await _workout_tree(session, workout)


async def load_exercise(session: AsyncSession, exercise_id: int) -> ExerciseRead:
    result = await session.exec(select(Exercise).where(Exercise.id == exercise_id))
    exercise = result.first()
    if exercise is None:
        raise NotFoundError("Exercise not found.")
    return await _exercise_tree(session, exercise)


# Writing


def _optional_text(value: Any) -> Optional[str]:
    if value is None or value == "":
        return None
    if isinstance(value, (list, tuple)):
        return ", ".join(str(v) for v in value) or None
    return str(value)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _set_values(raw: Any, ai_authored: bool) -> Optional[Dict[str, Any]]:
    """Column values for one set, or None when the set must be skipped."""
    if not isinstance(raw, Mapping) or raw.get("unit") not in UNITS:
        return None
    if ai_authored:
        # Suggested loads live in ai_tips; the user fills in real numbers later
        reps, weight = 0, 0.0
    else:
        reps, weight = raw.get("reps"), raw.get("weight")
        if not _is_number(reps) or not _is_number(weight) or not float(reps).is_integer():
            return None
        reps, weight = int(reps), float(weight)
    return {
        "reps": reps,
        "weight": weight,
        "unit": raw["unit"],
        "ai_tips": _optional_text(raw.get("ai_tips")),
    }


async def _insert_children(
    session: AsyncSession, workout_id: int, exercises: Optional[Iterable[Any]], ai_authored: bool
) -> None:
    if not isinstance(exercises, list):
        return
    for raw in exercises:
        if not isinstance(raw, Mapping) or not raw.get("name"):
            continue
        db_ex = Exercise(
            workout_id=workout_id,
            name=str(raw["name"]),
            target_muscles=_optional_text(raw.get("target_muscles")),
            machine=_optional_text(raw.get("machine")),
            attachments=_optional_text(raw.get("attachments")),
        )
        session.add(db_ex)
        await session.flush()

        sets = raw.get("sets")
        for raw_set in sets if isinstance(sets, list) else []:
            values = _set_values(raw_set, ai_authored)
            if values is None:
                logger.warning("Skipping invalid set for exercise %s: %r", db_ex.name, raw_set)
                continue
            session.add(ExerciseSet(exercise_id=db_ex.id, **values))
    await session.flush()


def _require_day_and_title(tree: Mapping[str, Any]) -> None:
    if not tree.get("day") or not tree.get("title"):
        raise ValidationError("Day and title are required for a workout.")


async def create_workout(session: AsyncSession, tree: Mapping[str, Any], ai_authored: bool = False) -> int:
    """Insert a workout and its valid children, returning the new workout id.

    With ``ai_authored`` every persisted set gets ``reps = 0`` and
    ``weight = 0`` and only its unit is validated.
    """
    _require_day_and_title(tree)
    workout = Workout(
        day=str(tree["day"]),
        title=str(tree["title"]),
        subtitle=_optional_text(tree.get("subtitle")),
        ai_tips=_optional_text(tree.get("ai_tips")),
    )
    session.add(workout)
    await session.flush()
    await _insert_children(session, workout.id, tree.get("exercises"), ai_authored)
    return workout.id


async def replace_workout(session: AsyncSession, workout_id: int, tree: Mapping[str, Any]) -> bool:
    """Overwrite a workout's fields and replace all of its children.

    Children are deleted and re-inserted, never merged, so exercise and set
    ids always change. Returns False when the workout does not exist,
    whatever the body holds.
    """
    existing = await session.exec(select(Workout.id).where(Workout.id == workout_id))
    if existing.first() is None:
        return False
    _require_day_and_title(tree)
    result = await session.exec(
        update(Workout)
        .where(Workout.id == workout_id)
        .values(
            day=str(tree["day"]),
            title=str(tree["title"]),
            subtitle=_optional_text(tree.get("subtitle")),
            ai_tips=_optional_text(tree.get("ai_tips")),
        )
    )
    if result.rowcount == 0:
        return False

    exercise_ids = select(Exercise.id).where(Exercise.workout_id == workout_id)
    await session.exec(delete(ExerciseSet).where(ExerciseSet.exercise_id.in_(exercise_ids)))
    await session.exec(delete(Exercise).where(Exercise.workout_id == workout_id))
    await _insert_children(session, workout_id, tree.get("exercises"), ai_authored=False)
    return True


async def delete_workout(session: AsyncSession, workout_id: int) -> bool:
    result = await session.exec(delete(Workout).where(Workout.id == workout_id))
    return result.rowcount > 0


async def delete_workout_by_day(session: AsyncSession, day: str) -> bool:
    result = await session.exec(delete(Workout).where(Workout.day == day))
    return result.rowcount > 0


async def update_exercise_details(session: AsyncSession, exercise_id: int, details: Mapping[str, Any]) -> bool:
    """Update only the descriptive fields of an exercise; its sets are left alone."""
    values = {field: _optional_text(details.get(field)) for field in EXERCISE_FIELDS}
    if not values["name"]:
        raise ValidationError("Exercise name is required.")
    result = await session.exec(update(Exercise).where(Exercise.id == exercise_id).values(**values))
    return result.rowcount > 0
