from __future__ import annotations

from typing import Any, Dict, List

from fastapi import APIRouter

from ..db import get_session
from ..errors import NotFoundError
from ..models import WorkoutIn, WorkoutRead
from . import workouts_repo

router = APIRouter()


@router.get("/workouts", response_model=List[WorkoutRead])
async def list_workouts() -> List[WorkoutRead]:
    async with get_session() as session:
        return await workouts_repo.load_all_workouts(session)


@router.get("/workouts/today", response_model=WorkoutRead)
async def todays_workout() -> WorkoutRead:
    async with get_session() as session:
        return await workouts_repo.load_todays_workout(session)


@router.get("/workouts/{workout_id}", response_model=WorkoutRead)
async def get_workout(workout_id: int) -> WorkoutRead:
    async with get_session() as session:
        return await workouts_repo.load_workout_by_id(session, workout_id)


@router.post("/workouts", status_code=201)
async def create_workout(body: WorkoutIn) -> Dict[str, Any]:
    async with get_session() as session:
        workout_id = await workouts_repo.create_workout(session, body.model_dump())
        await session.commit()
    return {"message": "Workout created successfully", "workoutId": workout_id}


@router.put("/workouts/{workout_id}")
async def update_workout(workout_id: int, body: WorkoutIn) -> Dict[str, Any]:
    async with get_session() as session:
        if not await workouts_repo.replace_workout(session, workout_id, body.model_dump()):
            raise NotFoundError("Workout not found or no changes made")
        await session.commit()
    return {"message": "Workout updated successfully"}


@router.delete("/workouts/{workout_id}")
async def delete_workout(workout_id: int) -> Dict[str, Any]:
    async with get_session() as session:
        if not await workouts_repo.delete_workout(session, workout_id):
            raise NotFoundError("Workout not found")
        await session.commit()
    return {"message": "Workout deleted successfully"}
