import logging
from datetime import datetime
from contextlib import contextmanager
from typing import Iterable, List, Optional

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from gymtrack.crud.exercise_filter import build_conditions
from gymtrack.exceptions import ExerciseNotFound, StorageError
from gymtrack.models.exercise import Exercise
from gymtrack.schemas.exercise import ExerciseFilter, ExerciseForm

logger = logging.getLogger(__name__)


@contextmanager
def _storage(db: Session, action: str):
    """Roll back and re-raise any SQLAlchemy failure as StorageError."""
    try:
        yield
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"db error while trying to {action}: {e}")
        raise StorageError(str(e)) from e


def _dialect_name(db: Session) -> str:
    return db.get_bind().dialect.name


def list_exercises(db: Session) -> List[Exercise]:
    with _storage(db, "list exercises"):
        return db.query(Exercise).order_by(Exercise.id).all()


def filter_exercises(db: Session, criteria: ExerciseFilter) -> List[Exercise]:
    """Exercises matching every selected criterion, ordered like list_exercises."""
    with _storage(db, "filter exercises"):
        conditions = build_conditions(criteria, _dialect_name(db))
        return db.query(Exercise).filter(*conditions).order_by(Exercise.id).all()


def get_exercise(db: Session, exercise_id: int) -> Exercise:
    with _storage(db, f"read exercise {exercise_id}"):
        exercise = db.query(Exercise).filter(Exercise.id == exercise_id).first()
    if exercise is None:
        raise ExerciseNotFound(exercise_id)
    return exercise


def count_by_name(db: Session, name: str, exclude_id: Optional[int] = None) -> int:
    """Exact, case-sensitive name matches, optionally ignoring one record."""
    with _storage(db, "count exercises by name"):
        query = db.query(func.count(Exercise.id)).filter(Exercise.name == name)
        if exclude_id is not None:
            query = query.filter(Exercise.id != exclude_id)
        return query.scalar()


def image_keys_in_use(db: Session, keys: Iterable[str], exclude_id: Optional[int] = None) -> List[str]:
    """Those of `keys` already referenced by an exercise other than `exclude_id`."""
    wanted = set(keys)
    if not wanted:
        return []
    with _storage(db, "look up image keys"):
        query = db.query(Exercise.images)
        if exclude_id is not None:
            query = query.filter(Exercise.id != exclude_id)
        taken = {key for (images,) in query.all() for key in images or () if key in wanted}
    return sorted(taken)


def create_exercise(db: Session, obj_in: ExerciseForm, images: List[str]) -> Exercise:
    with _storage(db, f"create exercise {obj_in.name!r}"):
        db_obj = Exercise(**obj_in.model_dump(), images=list(images))
        db.add(db_obj)
        db.commit()
        db.refresh(db_obj)
        return db_obj


def update_exercise(db: Session, exercise_id: int, obj_in: ExerciseForm, images: List[str]) -> Exercise:
    """Replace every mutable field of the exercise, images included."""
    db_obj = get_exercise(db, exercise_id)
    with _storage(db, f"update exercise {exercise_id}"):
        for field, value in obj_in.model_dump().items():
            setattr(db_obj, field, value)
        db_obj.images = list(images)
        db_obj.updated_at = datetime.utcnow()
        db.add(db_obj)
        db.commit()
        db.refresh(db_obj)
        return db_obj


def delete_exercise(db: Session, exercise_id: int) -> Exercise:
    db_obj = get_exercise(db, exercise_id)
    with _storage(db, f"delete exercise {exercise_id}"):
        db.delete(db_obj)
        db.commit()
    return db_obj
