from __future__ import annotations
from typing import Optional
import datetime as dt
import uuid
from enum import Enum

from sqlalchemy import Column, Text
from sqlmodel import SQLModel, Field


def new_id() -> str:
    return str(uuid.uuid4())


def utcnow() -> dt.datetime:
    """Timezone-aware UTC; every timestamp column is written in UTC."""
    return dt.datetime.now(dt.timezone.utc)


# ---------- Enums ----------
class ExerciseType(str, Enum):
    strength = "strength"
    cardio = "cardio"


# ---------- Users ----------
class User(SQLModel, table=True):
    __tablename__ = "users"

    id: str = Field(default_factory=new_id, primary_key=True)
    email: str = Field(index=True, unique=True)
    password_hash: str
    name: Optional[str] = None
    created_at: dt.datetime = Field(default_factory=utcnow)
    updated_at: dt.datetime = Field(default_factory=utcnow)
    last_login: Optional[dt.datetime] = None


# ---------- Workout logs (completed sessions) ----------
class WorkoutLog(SQLModel, table=True):
    """
    One finished session as uploaded by the app. Exercises are kept as JSON.
    """
    __tablename__ = "workout_logs"

    id: str = Field(default_factory=new_id, primary_key=True)
    user_id: str = Field(foreign_key="users.id", index=True)
    workout_id: str
    workout_name: str
    start_time: dt.datetime
    end_time: dt.datetime = Field(index=True)
    duration_seconds: int = Field(default=0)
    exercises: str = Field(default="[]", sa_column=Column(Text, nullable=False))
    user_weight: Optional[float] = None
    created_at: dt.datetime = Field(default_factory=utcnow)


# ---------- Workout templates (plans) ----------
class WorkoutTemplate(SQLModel, table=True):
    """
    Reusable multi-day plan. At most one row per user has is_active set.
    recommended_weeks and activated_at were added later; older stores may lack them.
    """
    __tablename__ = "workout_templates"

    id: str = Field(default_factory=new_id, primary_key=True)
    user_id: str = Field(foreign_key="users.id", index=True)
    title: str
    description: Optional[str] = None
    is_active: bool = Field(default=False)
    # no client-side default: inserts that leave it out must not name it
    recommended_weeks: Optional[int] = Field(default=None, sa_column_kwargs={"server_default": "8"})
    created_at: dt.datetime = Field(default_factory=utcnow)
    updated_at: dt.datetime = Field(default_factory=utcnow)
    activated_at: Optional[dt.datetime] = None


class WorkoutDay(SQLModel, table=True):
    __tablename__ = "workout_days"

    id: str = Field(default_factory=new_id, primary_key=True)
    template_id: str = Field(foreign_key="workout_templates.id", ondelete="CASCADE", index=True)
    title: str
    day_order: int = Field(default=0)
    day_of_week: Optional[int] = None
    cardio_data: Optional[str] = Field(default=None, sa_column=Column(Text, nullable=True))


class WorkoutExercise(SQLModel, table=True):
    """
    Sets and cardio targets are stored as JSON text; ownership comes via the day.
    """
    __tablename__ = "workout_exercises"

    id: str = Field(default_factory=new_id, primary_key=True)
    day_id: str = Field(foreign_key="workout_days.id", ondelete="CASCADE", index=True)
    name: str
    description: Optional[str] = None
    notes: Optional[str] = None
    rest_seconds: int = Field(default=90)
    exercise_order: int = Field(default=0)
    is_standard_sets: bool = Field(default=True)
    sets_data: str = Field(default="[]", sa_column=Column(Text, nullable=False))
    exercise_type: ExerciseType = Field(default=ExerciseType.strength)
    cardio_data: Optional[str] = Field(default=None, sa_column=Column(Text, nullable=True))
