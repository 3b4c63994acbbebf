import logging
import shutil
from pathlib import Path
from typing import BinaryIO, Iterable, List, Protocol, Sequence

from gymtrack.config import IMAGE_DIR
from gymtrack.exceptions import UploadError

logger = logging.getLogger(__name__)


class UploadedFile(Protocol):
    """What the store needs from an upload; starlette's UploadFile fits."""

    filename: str
    file: BinaryIO


class ImageStore(Protocol):
    """
    Content store for exercise images, addressed by keys derived from the
    exercise name.
    """

    def save(self, exercise_name: str, files: Sequence[UploadedFile]) -> List[str]:
        """
        Store `files` in order under `image_key(exercise_name, i)`.

        Raises UploadError on the first failing file. Files written before
        it stay where they are.
        """
        ...

    def remove(self, keys: Iterable[str]) -> None:
        """Best effort delete; a failing key is logged and skipped."""
        ...


def image_key(exercise_name: str, index: int) -> str:
    return f"{exercise_name}_{index}"


class FileSystemImageStore:
    """ImageStore writing one file per key into a directory."""

    def __init__(self, directory):
        self.directory = Path(directory)

    def _path(self, key: str) -> Path:
        # keys come from user supplied names, keep them inside the directory
        if not key or Path(key).name != key or key in (".", ".."):
            raise UploadError(f"invalid image key '{key}'")
        return self.directory / key

    def save(self, exercise_name: str, files: Sequence[UploadedFile]) -> List[str]:
        saved: List[str] = []
        for index, upload in enumerate(files):
            key = image_key(exercise_name, index)
            try:
                path = self._path(key)
            except UploadError as e:
                raise UploadError(str(e), saved=saved) from e
            logger.info(f"saving file {upload.filename} as {path}")
            try:
                self.directory.mkdir(parents=True, exist_ok=True)
                with open(path, "wb") as out:
                    shutil.copyfileobj(upload.file, out)
            except OSError as e:
                raise UploadError(f"could not save image '{upload.filename}': {e}", saved=saved) from e
            saved.append(key)
        return saved

    def remove(self, keys: Iterable[str]) -> None:
        for key in keys:
            try:
                path = self._path(key)
                logger.info(f"removing file {path}")
                path.unlink()
            except (OSError, UploadError) as e:
                logger.warning(f"remove file error: {e}")


def get_image_store() -> ImageStore:
    return FileSystemImageStore(IMAGE_DIR)
