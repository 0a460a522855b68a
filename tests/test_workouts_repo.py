import pytest
from sqlmodel import select

from app import db
from app.models import ExerciseSet
from app.errors import NotFoundError, ValidationError
from app.services import workouts_repo

LEG_DAY = {
    "day": "Mon Jun 16 2025",
    "title": "Leg Day",
    "subtitle": "Strength",
    "exercises": [
        {
            "name": "Barbell Squat",
            "target_muscles": "Quadriceps, Glutes",
            "machine": "Squat Rack",
            "sets": [
                {"reps": 10, "weight": 60, "unit": "kg"},
                {"reps": 8, "weight": 70.5, "unit": "kg", "ai_tips": "Brace"},
            ],
        },
        {"name": "Leg Curl", "machine": "Leg Curl Machine", "sets": [{"reps": 12, "weight": 40, "unit": "lbs"}]},
    ],
}


@pytest.mark.asyncio
async def test_create_then_load_round_trip(session):
    wid = await workouts_repo.create_workout(session, LEG_DAY)
    await session.commit()

    tree = await workouts_repo.load_workout_by_id(session, wid)
    assert (tree.day, tree.title, tree.subtitle, tree.ai_tips) == ("Mon Jun 16 2025", "Leg Day", "Strength", None)
    assert [ex.name for ex in tree.exercises] == ["Barbell Squat", "Leg Curl"]
    squat = tree.exercises[0]
    assert squat.attachments is None
    assert [(s.reps, s.weight, s.unit, s.ai_tips) for s in squat.sets] == [
        (10, 60.0, "kg", None),
        (8, 70.5, "kg", "Brace"),
    ]
    assert tree.exercises[1].sets[0].unit == "lbs"


@pytest.mark.asyncio
async def test_create_requires_day_and_title(session):
    with pytest.raises(ValidationError):
        await workouts_repo.create_workout(session, {"day": "Mon Jun 16 2025"})
    with pytest.raises(ValidationError):
        await workouts_repo.create_workout(session, {"title": "Leg Day", "day": ""})


@pytest.mark.asyncio
async def test_invalid_sets_and_nameless_exercises_are_skipped(session):
    tree = {
        "day": "Tue Jun 17 2025",
        "title": "Mixed",
        "exercises": [
            {
                "name": "Bench Press",
                "sets": [
                    {"reps": 10, "weight": 50, "unit": "kg"},
                    {"reps": 8, "weight": 0, "unit": "stone"},
                    {"reps": "8", "weight": 50, "unit": "kg"},
                    {"reps": 8, "weight": None, "unit": "kg"},
                    {"reps": 7.5, "weight": 50, "unit": "kg"},
                    {"reps": True, "weight": 50, "unit": "kg"},
                ],
            },
            {"target_muscles": "Chest", "sets": [{"reps": 1, "weight": 1, "unit": "kg"}]},
        ],
    }
    wid = await workouts_repo.create_workout(session, tree)
    await session.commit()

    loaded = await workouts_repo.load_workout_by_id(session, wid)
    assert len(loaded.exercises) == 1
    assert [(s.reps, s.weight, s.unit) for s in loaded.exercises[0].sets] == [(10, 50.0, "kg")]


@pytest.mark.asyncio
async def test_ai_authored_sets_are_zeroed(session):
    tree = {
        "day": "Wed Jun 18 2025",
        "title": "Push",
        "exercises": [
            {
                "name": "Overhead Press",
                "sets": [
                    {"reps": 8, "weight": 40, "unit": "kg", "ai_tips": "8 reps @ 40kg"},
                    {"reps": "ten", "weight": "heavy", "unit": "lbs"},
                    {"reps": 5, "weight": 100, "unit": "stone"},
                ],
            }
        ],
    }
    wid = await workouts_repo.create_workout(session, tree, ai_authored=True)
    await session.commit()

    sets = (await workouts_repo.load_workout_by_id(session, wid)).exercises[0].sets
    assert [(s.reps, s.weight, s.unit) for s in sets] == [(0, 0.0, "kg"), (0, 0.0, "lbs")]
    assert sets[0].ai_tips == "8 reps @ 40kg"


@pytest.mark.asyncio
async def test_replace_regenerates_child_ids(session):
    wid = await workouts_repo.create_workout(session, LEG_DAY)
    await session.commit()
    before = await workouts_repo.load_workout_by_id(session, wid)
    old_exercise_ids = {ex.id for ex in before.exercises}
    old_set_ids = {s.id for ex in before.exercises for s in ex.sets}

    changed = await workouts_repo.replace_workout(
        session,
        wid,
        {
            "day": "Mon Jun 16 2025",
            "title": "Leg Day v2",
            "exercises": [{"name": "Lunge", "sets": [{"reps": 12, "weight": 20, "unit": "kg"}]}],
        },
    )
    await session.commit()
    assert changed is True

    after = await workouts_repo.load_workout_by_id(session, wid)
    assert after.title == "Leg Day v2"
    assert after.subtitle is None
    assert [ex.name for ex in after.exercises] == ["Lunge"]
    assert after.exercises[0].id not in old_exercise_ids
    assert after.exercises[0].sets[0].id not in old_set_ids
    for exercise_id in old_exercise_ids:
        with pytest.raises(NotFoundError):
            await workouts_repo.load_exercise(session, exercise_id)


@pytest.mark.asyncio
async def test_replace_unknown_workout_reports_unchanged(session):
    assert await workouts_repo.replace_workout(session, 999999, {"day": "x", "title": "y"}) is False
    assert await workouts_repo.replace_workout(session, 999999, {}) is False
    await session.commit()
    assert await workouts_repo.load_all_workouts(session) == []


@pytest.mark.asyncio
async def test_delete_cascades_to_exercises_and_sets(session):
    wid = await workouts_repo.create_workout(session, LEG_DAY)
    await session.commit()
    tree = await workouts_repo.load_workout_by_id(session, wid)

    assert await workouts_repo.delete_workout(session, wid) is True
    await session.commit()

    with pytest.raises(NotFoundError):
        await workouts_repo.load_workout_by_id(session, wid)
    for ex in tree.exercises:
        with pytest.raises(NotFoundError):
            await workouts_repo.load_exercise(session, ex.id)

    # The sets table must be empty too, not just unreachable
    async with db.get_session() as other:
        assert (await other.exec(select(ExerciseSet))).all() == []

    assert await workouts_repo.delete_workout(session, wid) is False


@pytest.mark.asyncio
async def test_load_by_day_and_delete_by_day(session):
    await workouts_repo.create_workout(session, LEG_DAY)
    await workouts_repo.create_workout(session, {"day": "Fri Jun 20 2025", "title": "Pull"})
    await session.commit()

    assert (await workouts_repo.load_workout_by_day(session, "Fri Jun 20 2025")).title == "Pull"
    with pytest.raises(NotFoundError):
        await workouts_repo.load_workout_by_day(session, "Sat Jun 21 2025")

    assert await workouts_repo.delete_workout_by_day(session, "Fri Jun 20 2025") is True
    assert await workouts_repo.delete_workout_by_day(session, "Fri Jun 20 2025") is False
    await session.commit()

    assert [w.title for w in await workouts_repo.load_all_workouts(session)] == ["Leg Day"]
    assert await workouts_repo.load_all_workouts(session, exclude_day="Mon Jun 16 2025") == []


@pytest.mark.asyncio
async def test_update_exercise_details_keeps_sets(session):
    wid = await workouts_repo.create_workout(session, LEG_DAY)
    await session.commit()
    squat = (await workouts_repo.load_workout_by_id(session, wid)).exercises[0]

    changed = await workouts_repo.update_exercise_details(
        session, squat.id, {"name": "Goblet Squat", "machine": "Dumbbell", "target_muscles": ["Quads", "Glutes"]}
    )
    await session.commit()
    assert changed is True

    updated = await workouts_repo.load_exercise(session, squat.id)
    assert (updated.name, updated.machine, updated.target_muscles) == ("Goblet Squat", "Dumbbell", "Quads, Glutes")
    assert updated.sets == squat.sets
    assert await workouts_repo.update_exercise_details(session, 424242, {"name": "Nope"}) is False


def test_today_label_format():
    from datetime import date

    assert workouts_repo.today_label(date(2026, 10, 3)) == "Sat Oct 03 2026"
