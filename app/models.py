from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel
from sqlalchemy import CheckConstraint
from sqlmodel import SQLModel, Field

UNITS = ("kg", "lbs")


class Workout(SQLModel, table=True):
    __tablename__ = "workouts"
    __table_args__ = {"sqlite_autoincrement": True}

    id: Optional[int] = Field(default=None, primary_key=True)
    day: str = Field(index=True)
    title: str
    subtitle: Optional[str] = None
    ai_tips: Optional[str] = None


class Exercise(SQLModel, table=True):
    __tablename__ = "exercises"
    __table_args__ = {"sqlite_autoincrement": True}

    id: Optional[int] = Field(default=None, primary_key=True)
    workout_id: int = Field(foreign_key="workouts.id", ondelete="CASCADE", index=True)
    name: str
    target_muscles: Optional[str] = None
    machine: Optional[str] = None
    attachments: Optional[str] = None


class ExerciseSet(SQLModel, table=True):
    __tablename__ = "sets"
    __table_args__ = (
        CheckConstraint("unit IN ('kg', 'lbs')", name="ck_sets_unit"),
        {"sqlite_autoincrement": True},
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    exercise_id: int = Field(foreign_key="exercises.id", ondelete="CASCADE", index=True)
    reps: int
    weight: float
    unit: str
    ai_tips: Optional[str] = None


# Aggregate views returned by the loader


class SetRead(BaseModel):
    id: int
    exercise_id: int
    reps: int
    weight: float
    unit: str
    ai_tips: Optional[str] = None


class ExerciseRead(BaseModel):
    id: int
    workout_id: int
    name: str
    target_muscles: Optional[str] = None
    machine: Optional[str] = None
    attachments: Optional[str] = None
    sets: List[SetRead] = []


class WorkoutRead(BaseModel):
    id: int
    day: str
    title: str
    subtitle: Optional[str] = None
    ai_tips: Optional[str] = None
    exercises: List[ExerciseRead] = []


# Request bodies. Children stay loosely typed so one bad set is skipped
# instead of failing the whole request.


class WorkoutIn(BaseModel):
    day: Optional[str] = None
    title: Optional[str] = None
    subtitle: Optional[str] = None
    ai_tips: Optional[str] = None
    exercises: Optional[List[Dict[str, Any]]] = None


class SuggestWorkoutIn(BaseModel):
    additional_input: Optional[str] = None


class ReplaceExerciseIn(BaseModel):
    exerciseId: Optional[int] = None
    user_input: Optional[str] = None


class RestTimeIn(BaseModel):
    user_input: Optional[str] = None


class ExerciseTipsIn(BaseModel):
    additional_input: Optional[str] = None
