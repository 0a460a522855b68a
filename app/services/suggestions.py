"""AI-backed suggestions: a full workout, an exercise swap, rest time and tips.

Each operation loads what it needs, asks the generator, checks the reply and
writes at most once, inside a single transaction.
"""
from __future__ import annotations

import asyncio
import logging
import math
from typing import Any, Dict, Optional, Union

from fastapi import APIRouter, Depends
from fastapi.responses import PlainTextResponse

from ..db import get_session
from ..errors import GenerationFormatError, NotFoundError, ValidationError
from ..models import (
    ExerciseRead,
    ExerciseTipsIn,
    ReplaceExerciseIn,
    RestTimeIn,
    SuggestWorkoutIn,
    WorkoutRead,
)
from . import workouts_repo
from .gemini_client import GeminiClient, extract_json, extract_text, get_generation_client
from .prompts import (
    build_rest_time_prompt,
    build_replacement_prompt,
    build_suggestion_prompt,
    build_tips_prompt,
    format_workout_as_text,
)

logger = logging.getLogger(__name__)

router = APIRouter()

# Serializes today's delete-then-insert within this process. Several worker
# processes would additionally need a unique index on workouts.day.
_suggest_lock = asyncio.Lock()


async def suggest_workout(client: GeminiClient, additional_input: Optional[str] = None) -> WorkoutRead:
    async with _suggest_lock:
        today = workouts_repo.today_label()
        async with get_session() as session:
            history = await workouts_repo.load_all_workouts(session, exclude_day=today)

        result = await client.generate(build_suggestion_prompt(history, additional_input))
        suggestion = extract_json(result)
        if not isinstance(suggestion, dict) or not suggestion.get("title"):
            raise GenerationFormatError("AI did not return a workout with a title.")
        suggestion["day"] = today

        async with get_session() as session:
            if await workouts_repo.delete_workout_by_day(session, today):
                logger.info("Deleted existing workout for today (%s).", today)
            else:
                logger.info("No existing workout found for today (%s) to delete.", today)
            workout_id = await workouts_repo.create_workout(session, suggestion, ai_authored=True)
            await session.commit()
            saved = await workouts_repo.load_workout_by_id(session, workout_id)

    logger.info("Suggested workout for %s saved with id %s", today, workout_id)
    return saved


async def replace_exercise(client: GeminiClient, exercise_id: int, user_input: Optional[str] = None) -> ExerciseRead:
    async with get_session() as session:
        exercise = await workouts_repo.load_exercise(session, exercise_id)
        try:
            workout = await workouts_repo.load_workout_by_id(session, exercise.workout_id)
        except NotFoundError:
            raise NotFoundError("Workout associated with exercise not found.")
    siblings = [ex for ex in workout.exercises if ex.id != exercise.id]

    replacement = extract_json(await client.generate(build_replacement_prompt(exercise, siblings, user_input)))
    if not isinstance(replacement, dict) or not replacement.get("name"):
        raise GenerationFormatError("AI did not return a replacement exercise with a name.")

    async with get_session() as session:
        if not await workouts_repo.update_exercise_details(session, exercise_id, replacement):
            raise NotFoundError("Exercise not found.")
        await session.commit()
        updated = await workouts_repo.load_exercise(session, exercise_id)
    logger.info("Replaced exercise %s (%s -> %s)", exercise_id, exercise.name, updated.name)
    return updated


async def suggest_rest_time(client: GeminiClient, user_input: Optional[str] = None) -> Union[int, float]:
    async with get_session() as session:
        workout = await workouts_repo.load_todays_workout(session)

    parsed = extract_json(await client.generate(build_rest_time_prompt(workout, user_input)))
    seconds = parsed.get("rest_time_seconds") if isinstance(parsed, dict) else None
    if not isinstance(seconds, (int, float)) or isinstance(seconds, bool) or not math.isfinite(seconds):
        raise GenerationFormatError("AI did not return a valid rest time.")
    return seconds


async def exercise_tips(client: GeminiClient, exercise_id: int, additional_input: Optional[str] = None) -> str:
    async with get_session() as session:
        exercise = await workouts_repo.load_exercise(session, exercise_id)
        try:
            workout = await workouts_repo.load_workout_by_id(session, exercise.workout_id)
        except NotFoundError:
            raise NotFoundError("Workout associated with exercise not found.")

    return extract_text(await client.generate(build_tips_prompt(exercise, workout, additional_input)))


# Routes


@router.post("/suggest-workout", response_class=PlainTextResponse)
async def suggest_workout_route(
    body: Optional[SuggestWorkoutIn] = None,
    client: GeminiClient = Depends(get_generation_client),
) -> str:
    saved = await suggest_workout(client, body.additional_input if body else None)
    return format_workout_as_text(saved)


@router.post("/replace-workout")
async def replace_exercise_route(
    body: Optional[ReplaceExerciseIn] = None,
    client: GeminiClient = Depends(get_generation_client),
) -> Dict[str, Any]:
    if body is None or body.exerciseId is None:
        raise ValidationError("exerciseId is required.")
    updated = await replace_exercise(client, body.exerciseId, body.user_input)
    return {"message": "Exercise replaced successfully", "replacement": updated.model_dump()}


@router.post("/suggest-rest-time")
async def suggest_rest_time_route(
    body: Optional[RestTimeIn] = None,
    client: GeminiClient = Depends(get_generation_client),
) -> Dict[str, Any]:
    seconds = await suggest_rest_time(client, body.user_input if body else None)
    return {"rest_time_seconds": seconds}


@router.post("/exercise-tips/{exercise_id}", response_class=PlainTextResponse)
async def exercise_tips_route(
    exercise_id: int,
    body: Optional[ExerciseTipsIn] = None,
    client: GeminiClient = Depends(get_generation_client),
) -> str:
    return await exercise_tips(client, exercise_id, body.additional_input if body else None)
