from __future__ import annotations
from typing import List, Optional
import datetime as dt
from sqlalchemy import case, func, select as sa_select
from sqlmodel import Session as DBSession, select


from ..errors import InvalidInput
from ..models import WorkoutLog, new_id, utcnow
from ..schemas import (
   ExerciseData,
   WorkoutLogCreate,
   WorkoutLogRead,
   WorkoutLogUpdate,
   WorkoutStats,
)
from .common import dump_json, load_json, to_utc


NULLABLE_FIELDS = {"user_weight"}


def _dump_exercises(exercises: List[ExerciseData]) -> str:
   return dump_json([e.model_dump(by_alias=True) for e in exercises])


def _read(w: WorkoutLog) -> WorkoutLogRead:
   return WorkoutLogRead(
       id=w.id,
       user_id=w.user_id,
       workout_id=w.workout_id,
       workout_name=w.workout_name,
       start_time=w.start_time,
       end_time=w.end_time,
       duration_seconds=w.duration_seconds,
       exercises=load_json(w.exercises, "workout exercises") or [],
       user_weight=w.user_weight,
       created_at=w.created_at,
   )


def _owned(db: DBSession, workout_id: str, user_id: str) -> Optional[WorkoutLog]:
   # another user's id is reported exactly like a missing one
   return db.exec(
       select(WorkoutLog).where(WorkoutLog.id == workout_id).where(WorkoutLog.user_id == user_id)
   ).first()




def list_workouts(db: DBSession, user_id: str) -> List[WorkoutLogRead]:
   stmt = (
       select(WorkoutLog)
       .where(WorkoutLog.user_id == user_id)
       .order_by(WorkoutLog.end_time.desc(), WorkoutLog.id.desc())
   )
   return [_read(w) for w in db.exec(stmt).all()]




def get_workout(db: DBSession, workout_id: str, user_id: str) -> Optional[WorkoutLogRead]:
   w = _owned(db, workout_id, user_id)
   return _read(w) if w else None




def create_workout(db: DBSession, user_id: str, payload: WorkoutLogCreate) -> WorkoutLogRead:
   w = WorkoutLog(
       id=new_id(),
       user_id=user_id,
       workout_id=payload.workout_id,
       workout_name=payload.workout_name,
       start_time=to_utc(payload.start_time),
       end_time=to_utc(payload.end_time),
       duration_seconds=payload.duration_seconds or 0,
       exercises=_dump_exercises(payload.exercises),
       user_weight=payload.user_weight,
   )
   db.add(w)
   db.commit()
   db.refresh(w)
   return _read(w)




def update_workout(
   db: DBSession,
   workout_id: str,
   user_id: str,
   payload: WorkoutLogUpdate,
) -> Optional[WorkoutLogRead]:
   w = _owned(db, workout_id, user_id)
   if not w:
       return None

   data = payload.model_dump(exclude_unset=True)
   if not data:
       return _read(w)

   for field, value in data.items():
       if value is None and field not in NULLABLE_FIELDS:
           raise InvalidInput(f"{field} cannot be null")

   if "exercises" in data:
       data["exercises"] = _dump_exercises(payload.exercises or [])
   for field in ("start_time", "end_time"):
       if field in data:
           data[field] = to_utc(data[field])

   for field, value in data.items():
       setattr(w, field, value)

   db.add(w)
   db.commit()
   db.refresh(w)
   return _read(w)




def delete_workout(db: DBSession, workout_id: str, user_id: str) -> bool:
   w = _owned(db, workout_id, user_id)
   if not w:
       return False
   db.delete(w)
   db.commit()
   return True




def _period_starts(now: Optional[dt.datetime] = None):
   """UTC midnight of this ISO week's Monday and of the first of the month."""
   day = (now or utcnow()).replace(hour=0, minute=0, second=0, microsecond=0)
   return day - dt.timedelta(days=day.weekday()), day.replace(day=1)




def get_workout_stats(db: DBSession, user_id: str) -> WorkoutStats:
   week_start, month_start = _period_starts()
   t = WorkoutLog.__table__
   stmt = sa_select(
       func.count().label("total"),
       func.coalesce(func.sum(case((t.c.end_time >= week_start, 1), else_=0)), 0).label("this_week"),
       func.coalesce(func.sum(case((t.c.end_time >= month_start, 1), else_=0)), 0).label("this_month"),
   ).where(t.c.user_id == user_id)

   row = db.exec(stmt).one()
   return WorkoutStats(
       total_workouts=int(row.total or 0),
       this_week=int(row.this_week or 0),
       this_month=int(row.this_month or 0),
   )
