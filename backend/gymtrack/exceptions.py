"""
Failure kinds of the exercise catalog.

Repository and image store raise these; the exercise workflow catches them
and turns them into a form rejection, so none of them reach a router.
"""
from typing import List, Optional


class ExerciseError(Exception):
    """Base class for every exercise catalog failure."""


class BindingError(ExerciseError):
    """Form input is missing or malformed."""


class DuplicateNameError(ExerciseError):
    def __init__(self, name: str):
        self.name = name
        super().__init__(f"exercise with name '{name}' already exists")


class ExerciseNotFound(ExerciseError):
    def __init__(self, exercise_id: int):
        self.exercise_id = exercise_id
        super().__init__(f"exercise with id {exercise_id} not found")


class UploadError(ExerciseError):
    """
    Saving an uploaded image failed.

    `saved` lists the keys written before the failing file. They are left
    on the store, nothing removes them.
    """

    def __init__(self, message: str, saved: Optional[List[str]] = None):
        self.saved = list(saved or [])
        super().__init__(message)


class StorageError(ExerciseError):
    """Any other persistence failure."""


class ImageKeyConflict(ExerciseError):
    """Saving under the exercise name would overwrite images another exercise references."""

    def __init__(self, name: str, keys: List[str]):
        self.name = name
        self.keys = list(keys)
        super().__init__(
            f"images {', '.join(self.keys)} belong to another exercise, "
            f"choose a name other than '{name}' to upload images"
        )
