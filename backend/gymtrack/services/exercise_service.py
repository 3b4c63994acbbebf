import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Union

from pydantic import ValidationError
from sqlalchemy.orm import Session

from gymtrack.crud import exercise as crud_exercise
from gymtrack.exceptions import (
    BindingError,
    DuplicateNameError,
    ExerciseError,
    ImageKeyConflict,
    StorageError,
    UploadError,
)
from gymtrack.models.exercise import Exercise
from gymtrack.schemas.exercise import ExerciseFilter, ExerciseForm, exercise_values
from gymtrack.services.image_store import ImageStore, UploadedFile, image_key

logger = logging.getLogger(__name__)

"""
Exercise Service
----------------
Runs one create or update request of the exercise form:
1. Binds the form into an ExerciseForm draft.
2. Stops there for validation-only requests.
3. Rejects names already used by another exercise, and uploads whose
   image keys another exercise still references (left behind by a rename).
4. Saves uploaded images (update: replacing the old ones).
5. Writes the record.
Every failure ends in a Rejected outcome that carries the submitted values
back to the form, nothing is raised to the caller.
"""


@dataclass
class Persisted:
    exercise: Exercise


@dataclass
class FormState:
    """Values and error message the exercise form is (re)displayed with."""

    values: Dict[str, Any]
    error: str = ""
    exercise_id: Optional[int] = None

    @property
    def button(self) -> str:
        return "Create" if self.exercise_id is None else "Update"


@dataclass
class Rejected(FormState):
    pass


Outcome = Union[Persisted, Rejected]


@dataclass
class ListResult:
    exercises: List[Exercise]
    error: Optional[str] = None


def _binding_message(e: ValidationError) -> str:
    parts = []
    for err in e.errors():
        field = ".".join(str(loc) for loc in err["loc"])
        parts.append(f"{field}: {err['msg']}")
    return "; ".join(parts)


def bind_exercise(values: Dict[str, Any]) -> ExerciseForm:
    try:
        return ExerciseForm.model_validate(values)
    except ValidationError as e:
        logger.info(f"bind error: {e}")
        raise BindingError(_binding_message(e)) from e


def bind_filter(values: Dict[str, Any]) -> ExerciseFilter:
    try:
        return ExerciseFilter.model_validate(values)
    except ValidationError as e:
        logger.info(f"bind error: {e}")
        raise BindingError(_binding_message(e)) from e


def submit_exercise(
    db: Session,
    store: ImageStore,
    values: Dict[str, Any],
    files: Sequence[UploadedFile] = (),
    exercise_id: Optional[int] = None,
    validation_only: bool = False,
) -> Outcome:
    """
    Create (`exercise_id` None) or update an exercise from submitted form values.

    Validation-only requests never reach the repository or the image store;
    they come back Rejected with an empty error when the values bind.
    """
    try:
        draft = bind_exercise(values)
        if validation_only:
            return Rejected(values, "", exercise_id)
        if exercise_id is None:
            exercise = _insert_exercise(db, store, draft, files)
        else:
            exercise = _update_exercise(db, store, exercise_id, draft, files)
    except ExerciseError as e:
        return Rejected(values, str(e), exercise_id)
    return Persisted(exercise)


def _check_unique_name(db: Session, name: str, exclude_id: Optional[int] = None):
    if crud_exercise.count_by_name(db, name, exclude_id=exclude_id) > 0:
        err = DuplicateNameError(name)
        logger.info(f"duplication error: {err}")
        raise err


def _check_free_image_keys(db: Session, name: str, files, exclude_id: Optional[int] = None):
    keys = [image_key(name, index) for index in range(len(files))]
    taken = crud_exercise.image_keys_in_use(db, keys, exclude_id=exclude_id)
    if taken:
        err = ImageKeyConflict(name, taken)
        logger.info(f"image key conflict: {err}")
        raise err


def _save_images(store: ImageStore, name: str, files: Sequence[UploadedFile]) -> List[str]:
    try:
        return store.save(name, files)
    except UploadError as e:
        logger.error(f"upload error: {e} (left on store: {e.saved})")
        raise


def _insert_exercise(db: Session, store: ImageStore, draft: ExerciseForm, files) -> Exercise:
    _check_unique_name(db, draft.name)
    images = []
    if files:
        _check_free_image_keys(db, draft.name, files)
        images = _save_images(store, draft.name, files)
    return crud_exercise.create_exercise(db, draft, images)


def _update_exercise(db: Session, store: ImageStore, exercise_id: int, draft: ExerciseForm, files) -> Exercise:
    existing = crud_exercise.get_exercise(db, exercise_id)
    _check_unique_name(db, draft.name, exclude_id=exercise_id)

    if files:
        _check_free_image_keys(db, draft.name, files, exclude_id=exercise_id)
        # old keys may equal the new ones, remove before saving
        store.remove(list(existing.images))
        images = _save_images(store, draft.name, files)
    else:
        images = list(existing.images)

    return crud_exercise.update_exercise(db, exercise_id, draft, images)


def remove_exercise(db: Session, store: ImageStore, exercise_id: int) -> Optional[str]:
    """
    Delete an exercise and then its images.

    Returns the error message when nothing was deleted, None on success.
    """
    try:
        exercise = crud_exercise.delete_exercise(db, exercise_id)
    except ExerciseError as e:
        logger.error(f"delete error: {e}")
        return str(e)
    store.remove(list(exercise.images))
    return None


def load_exercise(db: Session, exercise_id: int) -> FormState:
    """Edit form state for a stored exercise; the error is set when it cannot be read."""
    try:
        exercise = crud_exercise.get_exercise(db, exercise_id)
    except ExerciseError as e:
        logger.error(f"read error: {e}")
        return FormState({}, str(e), exercise_id)
    return FormState(exercise_values(exercise), "", exercise_id)


def with_current_images(db: Session, state: FormState) -> FormState:
    """
    Add the stored images of the edited exercise to a redisplayed form.

    Submitted values never carry images, so a rejected or validation-only
    update would otherwise show the form without them.
    """
    if state.exercise_id is None or state.values.get("images"):
        return state
    try:
        exercise = crud_exercise.get_exercise(db, state.exercise_id)
    except ExerciseError as e:
        logger.info(f"read error: {e}")
        return state
    state.values = {**state.values, "images": list(exercise.images)}
    return state


def list_exercises(db: Session) -> ListResult:
    try:
        return ListResult(crud_exercise.list_exercises(db))
    except StorageError as e:
        return ListResult([], str(e))


def filter_exercises(db: Session, values: Dict[str, Any]) -> ListResult:
    try:
        criteria = bind_filter(values)
        return ListResult(crud_exercise.filter_exercises(db, criteria))
    except (BindingError, StorageError) as e:
        return ListResult([], str(e))
