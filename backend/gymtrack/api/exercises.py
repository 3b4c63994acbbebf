import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List

from fastapi import APIRouter, Depends, Request, Response
from fastapi.templating import Jinja2Templates
from sqlalchemy.orm import Session
from starlette.datastructures import UploadFile

from gymtrack.database import get_db
from gymtrack.models.enums import POSSIBLE_VALUES
from gymtrack.schemas.exercise import filter_values, form_values
from gymtrack.services import exercise_service
from gymtrack.services.exercise_service import FormState, ListResult, Persisted
from gymtrack.services.image_store import ImageStore, get_image_store

logger = logging.getLogger(__name__)

TEMPLATES_DIR = Path(__file__).resolve().parent.parent / "templates"
templates = Jinja2Templates(directory=str(TEMPLATES_DIR))
templates.env.filters["labels"] = lambda values: ", ".join(str(v) for v in values)

TABLE_COLUMNS = [
    "Action", "Name", "Force", "Level", "Mechanic", "Category",
    "Primary", "Secondary", "Equipment", "Instructions", "Images",
]
LIST_LOCATION = json.dumps({"path": "/exercise/list", "target": "#content"})

router = APIRouter(prefix="/exercise", tags=["exercises"])


@dataclass
class Submission:
    values: Dict[str, Any]
    files: List[UploadFile] = field(default_factory=list)
    validation_only: bool = False


async def exercise_submission(request: Request) -> Submission:
    form = await request.form()
    # browsers send an empty part when no file was picked
    files = [f for f in form.getlist("images") if isinstance(f, UploadFile) and f.filename]
    return Submission(
        values=form_values(form),
        files=files,
        validation_only=request.headers.get("X-Validation-Only") == "true",
    )


async def filter_submission(request: Request) -> Dict[str, Any]:
    form = await request.form()
    return filter_values(form)


def _layout(request: Request) -> str:
    # htmx swaps fragments into #content, full loads get the whole page
    return "partial.html" if request.headers.get("HX-Request") else "base.html"


def _list_page(request: Request, result: ListResult):
    return templates.TemplateResponse(request, "pages/exercises.html", {
        "layout": _layout(request),
        "exercises": result.exercises,
        "error": result.error,
        "columns": TABLE_COLUMNS,
        "possible_values": POSSIBLE_VALUES,
    })


def _form_page(request: Request, state: FormState):
    if state.exercise_id is None:
        validation_link = "/exercise/validate"
    else:
        validation_link = f"/exercise/{state.exercise_id}/validate"
    return templates.TemplateResponse(request, "pages/exercise_form.html", {
        "layout": _layout(request),
        "input": state.values,
        "error": state.error,
        "button": state.button,
        "validation_link": validation_link,
        "possible_values": POSSIBLE_VALUES,
    })


@router.get("/list")
def list_exercises(request: Request, db: Session = Depends(get_db)):
    return _list_page(request, exercise_service.list_exercises(db))


@router.post("/list")
def filter_exercises(
    request: Request,
    values: Dict[str, Any] = Depends(filter_submission),
    db: Session = Depends(get_db),
):
    result = exercise_service.filter_exercises(db, values)
    return templates.TemplateResponse(request, "components/exercise_table.html", {
        "exercises": result.exercises,
        "error": result.error,
        "columns": TABLE_COLUMNS,
    })


@router.get("")
def new_exercise(request: Request):
    return _form_page(request, FormState({}))


@router.post("/validate")
def validate_new_exercise(
    request: Request,
    submission: Submission = Depends(exercise_submission),
    db: Session = Depends(get_db),
    store: ImageStore = Depends(get_image_store),
):
    return _submit(request, submission, db, store, None)


@router.get("/{exercise_id}")
def read_exercise(exercise_id: int, request: Request, db: Session = Depends(get_db)):
    return _form_page(request, exercise_service.load_exercise(db, exercise_id))


@router.delete("/{exercise_id}")
def delete_exercise(
    exercise_id: int,
    request: Request,
    db: Session = Depends(get_db),
    store: ImageStore = Depends(get_image_store),
):
    exercise_service.remove_exercise(db, store, exercise_id)
    return _list_page(request, exercise_service.list_exercises(db))


@router.post("/{exercise_id}/validate")
def validate_exercise(
    exercise_id: int,
    request: Request,
    submission: Submission = Depends(exercise_submission),
    db: Session = Depends(get_db),
    store: ImageStore = Depends(get_image_store),
):
    return _submit(request, submission, db, store, exercise_id)


def _submit(request: Request, submission: Submission, db: Session, store: ImageStore, exercise_id):
    outcome = exercise_service.submit_exercise(
        db,
        store,
        submission.values,
        submission.files,
        exercise_id=exercise_id,
        validation_only=submission.validation_only,
    )
    if isinstance(outcome, Persisted):
        logger.info(f"saved exercise {outcome.exercise.id} ({outcome.exercise.name})")
        return Response(headers={"HX-Location": LIST_LOCATION})
    return _form_page(request, exercise_service.with_current_images(db, outcome))
