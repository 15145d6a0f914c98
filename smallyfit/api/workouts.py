"""Weekly workout schedule API — /api/v1/workouts and /api/v1/exercises."""
from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum

from fastapi import APIRouter, Depends, Response
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from smallyfit.auth import require_account
from smallyfit.db.engine import get_session
from smallyfit.db.repository import Repository
from smallyfit.db.user_tables import AccountRow
from smallyfit.db.workout_tables import ExerciseRow, WorkoutRow
from smallyfit.errors import NotFoundError, ensure_owner
from smallyfit.services.notifications import workout_completed

router = APIRouter(prefix="/api/v1", tags=["workouts"])


class Weekday(str, Enum):
    MONDAY = "Monday"
    TUESDAY = "Tuesday"
    WEDNESDAY = "Wednesday"
    THURSDAY = "Thursday"
    FRIDAY = "Friday"
    SATURDAY = "Saturday"
    SUNDAY = "Sunday"


WEEKDAYS = [d.value for d in Weekday]  # Monday-first, matches date.weekday()


class ExerciseRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    sets: int = Field(..., ge=1, le=100)
    reps: int = Field(..., ge=1, le=1000)


class WorkoutRequest(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    type: str = Field(..., min_length=1, max_length=50)
    day: Weekday
    exercises: list[ExerciseRequest] = Field(default_factory=list, max_length=50)


class ExerciseUpdate(BaseModel):
    completed: bool


def _exercise_response(ex: ExerciseRow) -> dict:
    return {"id": ex.id, "name": ex.name, "sets": ex.sets, "reps": ex.reps, "completed": ex.completed}


def _workout_response(w: WorkoutRow, exercises: list[ExerciseRow]) -> dict:
    return {
        "id": w.id,
        "title": w.title,
        "type": w.type,
        "day": w.day,
        "completed": bool(exercises) and all(e.completed for e in exercises),
        "exercises": [_exercise_response(e) for e in exercises],
    }


async def _with_exercises(repo: Repository, workouts: list[WorkoutRow]) -> list[dict]:
    grouped = await repo.list_exercises([w.id for w in workouts])
    return [_workout_response(w, grouped[w.id]) for w in workouts]


async def _owned_workout(repo: Repository, account_id: str, workout_id: str) -> WorkoutRow:
    workout = await repo.get_workout(workout_id)
    ensure_owner(workout, account_id, "Workout")
    return workout


@router.get("/workouts/today")
async def workouts_today(
    account: AccountRow = Depends(require_account),
    session: AsyncSession = Depends(get_session),
):
    repo = Repository(session)
    today = WEEKDAYS[datetime.now(timezone.utc).weekday()]
    return await _with_exercises(repo, await repo.list_workouts(account.id, day=today))


@router.get("/workouts/schedule")
async def workout_schedule(
    account: AccountRow = Depends(require_account),
    session: AsyncSession = Depends(get_session),
):
    """All seven days, Monday first; empty days included."""
    repo = Repository(session)
    workouts = await _with_exercises(repo, await repo.list_workouts(account.id))
    return [
        {"day": day, "workouts": [w for w in workouts if w["day"] == day]}
        for day in WEEKDAYS
    ]


@router.post("/workouts", status_code=201)
async def create_workout(
    body: WorkoutRequest,
    account: AccountRow = Depends(require_account),
    session: AsyncSession = Depends(get_session),
):
    repo = Repository(session)
    workout = await repo.create_workout(
        account.id, body.title, body.type, body.day.value,
        exercises=[e.model_dump() for e in body.exercises],
    )
    await session.commit()
    grouped = await repo.list_exercises([workout.id])
    return _workout_response(workout, grouped[workout.id])


@router.patch("/workouts/{workout_id}/complete")
async def complete_workout(
    workout_id: str,
    account: AccountRow = Depends(require_account),
    session: AsyncSession = Depends(get_session),
):
    """Mark every exercise of the workout as done."""
    repo = Repository(session)
    workout = await _owned_workout(repo, account.id, workout_id)
    await repo.set_workout_completed(workout.id)
    prefs = await repo.get_or_create_settings(account.id)
    if prefs.workout_reminders:
        await repo.create_notification(account.id, *workout_completed(workout.title))
    await session.commit()
    grouped = await repo.list_exercises([workout.id])
    return _workout_response(workout, grouped[workout.id])


@router.delete("/workouts/{workout_id}", status_code=204)
async def delete_workout(
    workout_id: str,
    account: AccountRow = Depends(require_account),
    session: AsyncSession = Depends(get_session),
):
    repo = Repository(session)
    workout = await _owned_workout(repo, account.id, workout_id)
    await repo.delete_workout(workout.id)
    await session.commit()
    return Response(status_code=204)


@router.patch("/exercises/{exercise_id}")
async def update_exercise(
    exercise_id: str,
    body: ExerciseUpdate,
    account: AccountRow = Depends(require_account),
    session: AsyncSession = Depends(get_session),
):
    repo = Repository(session)
    exercise = await repo.get_exercise(exercise_id)
    if exercise is None:
        raise NotFoundError("Exercise", exercise_id)
    await _owned_workout(repo, account.id, exercise.workout_id)
    exercise.completed = body.completed
    await session.commit()
    return _exercise_response(exercise)
