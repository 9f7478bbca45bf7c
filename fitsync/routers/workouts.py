from fastapi import APIRouter, Depends
from sqlmodel import Session as DBSession


from ..db import get_session
from ..errors import NotFound
from ..responses import ok
from ..schemas import WorkoutLogCreate, WorkoutLogUpdate
from ..security import AuthPayload, get_current_auth
from ..services import workouts_service as svc


router = APIRouter(prefix="/workouts", tags=["workouts"])

WORKOUT_NOT_FOUND = "Workout not found"


@router.get("")
def list_workouts(
    db: DBSession = Depends(get_session),
    auth: AuthPayload = Depends(get_current_auth),
):
    return ok(svc.list_workouts(db=db, user_id=auth.user_id))


@router.get("/stats")
def workout_stats(
    db: DBSession = Depends(get_session),
    auth: AuthPayload = Depends(get_current_auth),
):
    return ok(svc.get_workout_stats(db=db, user_id=auth.user_id))


@router.get("/{workout_id}")
def get_workout(
    workout_id: str,
    db: DBSession = Depends(get_session),
    auth: AuthPayload = Depends(get_current_auth),
):
    workout = svc.get_workout(db=db, workout_id=workout_id, user_id=auth.user_id)
    if workout is None:
        raise NotFound(WORKOUT_NOT_FOUND)
    return ok(workout)


@router.post("", status_code=201)
def create_workout(
    payload: WorkoutLogCreate,
    db: DBSession = Depends(get_session),
    auth: AuthPayload = Depends(get_current_auth),
):
    return ok(svc.create_workout(db=db, user_id=auth.user_id, payload=payload))


@router.put("/{workout_id}")
def update_workout(
    workout_id: str,
    payload: WorkoutLogUpdate,
    db: DBSession = Depends(get_session),
    auth: AuthPayload = Depends(get_current_auth),
):
    workout = svc.update_workout(db=db, workout_id=workout_id, user_id=auth.user_id, payload=payload)
    if workout is None:
        raise NotFound(WORKOUT_NOT_FOUND)
    return ok(workout)


@router.delete("/{workout_id}")
def delete_workout(
    workout_id: str,
    db: DBSession = Depends(get_session),
    auth: AuthPayload = Depends(get_current_auth),
):
    if not svc.delete_workout(db=db, workout_id=workout_id, user_id=auth.user_id):
        raise NotFound(WORKOUT_NOT_FOUND)
    return ok(message="Workout deleted successfully")
