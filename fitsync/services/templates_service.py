"""Workout templates: the template -> days -> exercises tree.

Writes go through SQLAlchemy Core against the table objects so a statement can
leave out optional columns that an older store does not have. Every write path
runs on the caller's session as one transaction and rolls back before the
error reaches the caller.
"""
from __future__ import annotations
from typing import Callable, Dict, List, Optional, Set
import logging

from sqlalchemy import and_, case, delete, func, insert, literal, or_, select, update
from sqlalchemy.exc import DBAPIError
from sqlmodel import Session as DBSession

from ..db import find_missing_column, mark_column_missing, missing_columns
from ..models import WorkoutDay, WorkoutExercise, WorkoutTemplate, new_id, utcnow
from ..schemas import (
   TemplateCreate,
   TemplateDayIn,
   TemplateDayRead,
   TemplateDetail,
   TemplateExerciseIn,
   TemplateExerciseRead,
   TemplateSummary,
   TemplateUpdate,
)
from .common import dump_json, load_json

logger = logging.getLogger(__name__)

templates = WorkoutTemplate.__table__
days = WorkoutDay.__table__
exercises = WorkoutExercise.__table__

OPTIONAL_TEMPLATE_COLUMNS = ("recommended_weeks", "activated_at")
DEFAULT_RECOMMENDED_WEEKS = 8
DEFAULT_REST_SECONDS = 90




def _run_tolerant(db: DBSession, build: Callable[[Set[str]], object]):
   """
   Execute build(skip) where skip names optional columns to leave out.
   A missing-column failure records the column and re-issues the statement
   once per column. Only call this as the first statement of a transaction:
   the failed attempt is rolled back.
   """
   bind = db.get_bind()
   while True:
       skip = missing_columns(bind)
       try:
           return db.exec(build(skip))
       except DBAPIError as exc:
           candidates = [c for c in OPTIONAL_TEMPLATE_COLUMNS if c not in skip]
           column = find_missing_column(exc, candidates)
           if column is None:
               raise
           db.rollback()
           mark_column_missing(bind, column)




def _template_columns(skip: Set[str]):
   return [c for c in templates.c if c.name not in skip]


def _select_template(*criteria):
   def build(skip: Set[str]):
       return select(*_template_columns(skip)).where(*criteria)
   return build




def _decode_exercise(row) -> TemplateExerciseRead:
   return TemplateExerciseRead(
       id=row.id,
       name=row.name,
       type=getattr(row.exercise_type, "value", row.exercise_type) or "strength",
       description=row.description,
       notes=row.notes,
       rest_seconds=row.rest_seconds or DEFAULT_REST_SECONDS,
       is_standard_sets=bool(row.is_standard_sets),
       sets=load_json(row.sets_data, "exercise sets") or [],
       cardio=load_json(row.cardio_data, "exercise cardio"),
   )


def _detail(db: DBSession, tpl) -> TemplateDetail:
   """Rebuild the tree from the template row, its days and their exercises."""
   day_rows = db.exec(
       select(days).where(days.c.template_id == tpl["id"]).order_by(days.c.day_order)
   ).all()

   by_day: Dict[str, List[TemplateExerciseRead]] = {d.id: [] for d in day_rows}
   if by_day:
       ex_rows = db.exec(
           select(exercises)
           .where(exercises.c.day_id.in_(list(by_day)))
           .order_by(exercises.c.day_id, exercises.c.exercise_order)
       ).all()
       for ex in ex_rows:
           by_day[ex.day_id].append(_decode_exercise(ex))

   return TemplateDetail(
       id=tpl["id"],
       title=tpl["title"],
       description=tpl["description"],
       is_active=bool(tpl["is_active"]),
       created_at=tpl["created_at"],
       updated_at=tpl["updated_at"],
       activated_at=tpl.get("activated_at"),
       recommended_weeks=tpl.get("recommended_weeks") or DEFAULT_RECOMMENDED_WEEKS,
       days=[
           TemplateDayRead(
               id=d.id,
               title=d.title,
               day_order=d.day_order,
               day_of_week=d.day_of_week,
               cardio=load_json(d.cardio_data, "day cardio"),
               exercises=by_day[d.id],
           )
           for d in day_rows
       ],
   )


def _exercise_values(day_id: str, order: int, ex: TemplateExerciseIn) -> dict:
   return {
       "id": new_id(),
       "day_id": day_id,
       "name": ex.name,
       "description": ex.description,
       "notes": ex.notes,
       "rest_seconds": ex.rest_seconds or DEFAULT_REST_SECONDS,
       "exercise_order": order,
       "is_standard_sets": ex.is_standard_sets is not False,
       "sets_data": dump_json([s.model_dump(by_alias=True, exclude_unset=True) for s in ex.sets]),
       "exercise_type": ex.type.value,
       "cardio_data": dump_json(ex.cardio.model_dump(by_alias=True)) if ex.cardio else None,
   }


def _insert_days(db: DBSession, template_id: str, day_inputs: List[TemplateDayIn]) -> None:
   for day_order, day in enumerate(day_inputs):
       day_id = new_id()
       db.exec(insert(days).values(
           id=day_id,
           template_id=template_id,
           title=day.title,
           day_order=day_order,
           day_of_week=day.day_of_week,
           cardio_data=dump_json(day.cardio.model_dump(by_alias=True, exclude_none=True)) if day.cardio else None,
       ))
       for order, ex in enumerate(day.exercises):
           db.exec(insert(exercises).values(**_exercise_values(day_id, order, ex)))




def list_templates(db: DBSession, user_id: str) -> List[TemplateSummary]:
   days_count = (
       select(func.count())
       .select_from(days)
       .where(days.c.template_id == templates.c.id)
       .scalar_subquery()
   )
   exercises_count = (
       select(func.count())
       .select_from(days.join(exercises, exercises.c.day_id == days.c.id))
       .where(days.c.template_id == templates.c.id)
       .scalar_subquery()
   )
   stmt = (
       select(
           templates.c.id,
           templates.c.title,
           templates.c.description,
           templates.c.is_active,
           templates.c.created_at,
           templates.c.updated_at,
           days_count.label("days_count"),
           exercises_count.label("exercises_count"),
       )
       .where(templates.c.user_id == user_id)
       .order_by(templates.c.is_active.desc(), templates.c.updated_at.desc())
   )
   return [
       TemplateSummary(
           id=r.id,
           title=r.title,
           description=r.description,
           is_active=bool(r.is_active),
           days_count=r.days_count or 0,
           exercises_count=r.exercises_count or 0,
           created_at=r.created_at,
           updated_at=r.updated_at,
       )
       for r in db.exec(stmt).all()
   ]




def get_active_template(db: DBSession, user_id: str) -> Optional[TemplateDetail]:
   tpl = _run_tolerant(db, _select_template(
       templates.c.user_id == user_id, templates.c.is_active.is_(True)
   )).mappings().first()
   if not tpl:
       return None
   return _detail(db, tpl)




def get_template(db: DBSession, template_id: str, user_id: str) -> Optional[TemplateDetail]:
   tpl = _run_tolerant(db, _select_template(
       templates.c.id == template_id, templates.c.user_id == user_id
   )).mappings().first()
   if not tpl:
       return None
   return _detail(db, tpl)




def create_template(db: DBSession, user_id: str, payload: TemplateCreate) -> TemplateDetail:
   template_id = new_id()
   now = utcnow()
   values = {
       "id": template_id,
       "user_id": user_id,
       "title": payload.title,
       "description": payload.description,
       "is_active": False,
       "created_at": now,
       "updated_at": now,
       "recommended_weeks": payload.recommended_weeks or DEFAULT_RECOMMENDED_WEEKS,
   }

   def build(skip: Set[str]):
       return insert(templates).values({k: v for k, v in values.items() if k not in skip})

   try:
       _run_tolerant(db, build)
       _insert_days(db, template_id, payload.days)
       db.commit()
   except Exception:
       db.rollback()
       raise

   logger.info("Template %s created for user %s with %d days", template_id, user_id, len(payload.days))
   # read back so stored defaults are what the caller sees
   return get_template(db, template_id, user_id)




def update_template(
   db: DBSession,
   template_id: str,
   user_id: str,
   payload: TemplateUpdate,
) -> Optional[TemplateDetail]:
   try:
       existing = _run_tolerant(db, _select_template(
           templates.c.id == template_id, templates.c.user_id == user_id
       )).first()
       if not existing:
           db.rollback()
           return None

       values = {
           "title": payload.title,
           "description": payload.description,
           "updated_at": utcnow(),
       }
       if payload.recommended_weeks and "recommended_weeks" not in missing_columns(db.get_bind()):
           values["recommended_weeks"] = payload.recommended_weeks

       db.exec(
           update(templates)
           .where(templates.c.id == template_id, templates.c.user_id == user_id)
           .values(**values)
       )
       # full replace: exercises go with their days through the cascade
       db.exec(delete(days).where(days.c.template_id == template_id))
       _insert_days(db, template_id, payload.days)

       tpl = db.exec(_select_template(templates.c.id == template_id)(missing_columns(db.get_bind()))).mappings().one()
       detail = _detail(db, tpl)
       db.commit()
   except Exception:
       db.rollback()
       raise

   logger.info("Template %s replaced with %d days", template_id, len(payload.days))
   return detail




def activate_template(db: DBSession, template_id: str, user_id: str) -> bool:
   """
   Flip the user's templates in one UPDATE so there is never a moment with
   two active rows, whatever else is activating concurrently.
   """
   if not template_id or not user_id:
       return False

   now = utcnow()
   is_target = templates.c.id == template_id
   target = templates.alias("target")
   target_owned = (
       select(target.c.id)
       .where(target.c.id == template_id, target.c.user_id == user_id)
       .exists()
   )

   def build(skip: Set[str]):
       values = {
           "is_active": case((is_target, True), else_=False),
           "updated_at": case((is_target, literal(now, templates.c.updated_at.type)), else_=templates.c.updated_at),
       }
       if "activated_at" not in skip:
           values["activated_at"] = case(
               (
                   and_(is_target, or_(templates.c.activated_at.is_(None), templates.c.is_active.is_(False))),
                   literal(now, templates.c.activated_at.type),
               ),
               else_=templates.c.activated_at,
           )
       # an id the user does not own leaves every flag as it was
       return update(templates).where(templates.c.user_id == user_id, target_owned).values(**values)

   try:
       result = _run_tolerant(db, build)
       active = db.exec(
           select(templates.c.is_active).where(is_target, templates.c.user_id == user_id)
       ).scalar()
       db.commit()
   except Exception:
       db.rollback()
       raise

   logger.info("Activate template %s for user %s: %s rows touched", template_id, user_id, result.rowcount)
   return bool(active)




def delete_template(db: DBSession, template_id: str, user_id: str) -> bool:
   try:
       result = db.exec(
           delete(templates).where(templates.c.id == template_id, templates.c.user_id == user_id)
       )
       db.commit()
   except Exception:
       db.rollback()
       raise

   removed = result.rowcount > 0
   if removed:
       logger.info("Template %s deleted", template_id)
   return removed
