from typing import Any, Dict, List, Optional
from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from pydantic.alias_generators import to_camel

from .models import ExerciseType


class CamelModel(BaseModel):
    """Accepts and emits the camelCase keys the mobile client speaks."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ---------- Auth ----------
class SignupIn(BaseModel):
    email: EmailStr
    password: str
    name: Optional[str] = None


class LoginIn(BaseModel):
    # any text: an address that cannot exist simply fails the lookup
    email: str
    password: str


class UserPublic(BaseModel):
    id: str
    email: str
    name: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    last_login: Optional[datetime] = None


class AuthResult(BaseModel):
    user: UserPublic
    token: str


# ---------- Workout logs ----------
class SetData(CamelModel):
    set_number: int
    weight: float = 0
    reps: int = 0


class ExerciseData(CamelModel):
    exercise_id: str
    exercise_name: str
    sets: List[SetData] = Field(default_factory=list)


class WorkoutLogCreate(BaseModel):
    workout_id: str
    workout_name: str
    start_time: datetime
    end_time: datetime
    duration_seconds: int = 0
    exercises: List[ExerciseData]
    user_weight: Optional[float] = None


class WorkoutLogUpdate(BaseModel):
    """Only keys present in the body are applied."""
    workout_id: Optional[str] = None
    workout_name: Optional[str] = None
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    duration_seconds: Optional[int] = None
    exercises: Optional[List[ExerciseData]] = None
    user_weight: Optional[float] = None


class WorkoutLogRead(BaseModel):
    id: str
    user_id: str
    workout_id: str
    workout_name: str
    start_time: datetime
    end_time: datetime
    duration_seconds: int
    exercises: List[ExerciseData]
    user_weight: Optional[float] = None
    created_at: datetime


class WorkoutStats(CamelModel):
    total_workouts: int
    this_week: int
    this_month: int


# ---------- Templates ----------
class TemplateSet(CamelModel):
    """One planned set. Keys beyond the known ones are kept as sent."""
    model_config = ConfigDict(extra="allow")

    reps: str
    weight: Optional[float] = None
    rpe: Optional[float] = None
    notes: Optional[str] = None
    is_warmup: Optional[bool] = None

    @field_validator("reps", mode="before")
    @classmethod
    def reps_as_text(cls, value):
        # "8-12" style ranges are allowed, plain numbers are kept as text
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value


class ExerciseCardio(CamelModel):
    duration_minutes: float
    intensity: str


class CardioSession(CamelModel):
    modality: str
    duration_minutes: float
    intensity: str
    notes: Optional[str] = None


class TemplateExerciseIn(CamelModel):
    name: str
    type: ExerciseType = ExerciseType.strength
    description: Optional[str] = None
    notes: Optional[str] = None
    rest_seconds: Optional[int] = None
    is_standard_sets: Optional[bool] = None
    sets: List[TemplateSet] = Field(default_factory=list)
    cardio: Optional[ExerciseCardio] = None


class TemplateDayIn(CamelModel):
    title: str
    day_of_week: Optional[int] = None
    exercises: List[TemplateExerciseIn] = Field(default_factory=list)
    cardio: Optional[CardioSession] = None


class TemplateCreate(CamelModel):
    title: str = Field(min_length=1)
    description: Optional[str] = None
    days: List[TemplateDayIn]
    recommended_weeks: Optional[int] = None


class TemplateUpdate(TemplateCreate):
    pass


class TemplateSummary(CamelModel):
    id: str
    title: str
    description: Optional[str] = None
    is_active: bool
    days_count: int
    exercises_count: int
    created_at: datetime
    updated_at: datetime


class TemplateExerciseRead(CamelModel):
    id: str
    name: str
    type: ExerciseType
    description: Optional[str] = None
    notes: Optional[str] = None
    rest_seconds: int
    is_standard_sets: bool
    # returned exactly as stored
    sets: List[Dict[str, Any]]
    cardio: Optional[ExerciseCardio] = None


class TemplateDayRead(CamelModel):
    id: str
    title: str
    day_order: int
    day_of_week: Optional[int] = None
    cardio: Optional[CardioSession] = None
    exercises: List[TemplateExerciseRead]


class TemplateDetail(CamelModel):
    id: str
    title: str
    description: Optional[str] = None
    is_active: bool
    created_at: datetime
    updated_at: datetime
    activated_at: Optional[datetime] = None
    recommended_weeks: int
    days: List[TemplateDayRead]
