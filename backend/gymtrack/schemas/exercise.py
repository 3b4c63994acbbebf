from pydantic import BaseModel, Field, field_validator
from datetime import datetime
from typing import List, Any, Dict
from gymtrack.models.enums import Force, Level, Mechanic, Category, Muscle, Equipment

# Multipart field names shared by the exercise form and the filter controls
SCALAR_FIELDS = ("name", "force", "level", "mechanic", "category", "primary", "instructions")
LIST_FIELDS = ("secondary", "equipment")
FILTER_LIST_FIELDS = ("force", "level", "mechanic", "category", "primary", "secondary", "equipment")


def _as_int(value: Any) -> Any:
    if isinstance(value, str):
        value = value.strip()
        if value.lstrip("-").isdigit():
            return int(value)
    return value


def form_values(form) -> Dict[str, Any]:
    """
    Raw user input of an exercise form or filter, keyed by field name.

    `form` is anything with get/getlist (starlette FormData, MultiDict).
    The result is what gets redisplayed after a rejection.
    """
    values: Dict[str, Any] = {key: form.get(key) for key in SCALAR_FIELDS}
    for key in LIST_FIELDS:
        values[key] = list(form.getlist(key))
    return values


def filter_values(form) -> Dict[str, Any]:
    values: Dict[str, Any] = {"name": form.get("name") or ""}
    for key in FILTER_LIST_FIELDS:
        values[key] = list(form.getlist(key))
    return values


def exercise_values(exercise) -> Dict[str, Any]:
    """Form values of a stored exercise, for prefilling the edit form."""
    stored = ExerciseResponse.model_validate(exercise)
    return {
        "name": stored.name,
        "force": int(stored.force),
        "level": int(stored.level),
        "mechanic": int(stored.mechanic),
        "category": int(stored.category),
        "primary": int(stored.primary_muscle),
        "secondary": [int(m) for m in stored.secondary_muscles],
        "equipment": [int(e) for e in stored.equipment],
        "instructions": stored.instructions,
        "images": list(stored.images),
    }


class ExerciseForm(BaseModel):
    """Draft exercise bound from the create/update form."""

    name: str = Field(..., min_length=1)
    force: Force = Force.PULL
    level: Level = Level.EASY
    mechanic: Mechanic = Mechanic.COMPOUND
    category: Category = Category.ENDURANCE
    primary_muscle: Muscle = Field(Muscle.ABDOMINALS, alias="primary")
    secondary_muscles: List[Muscle] = Field(default_factory=list, alias="secondary")
    equipment: List[Equipment] = Field(default_factory=list)
    instructions: str = Field(..., min_length=1)

    class Config:
        populate_by_name = True

    @field_validator("name", "instructions", mode="before")
    @classmethod
    def strip_text(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator("force", "level", "mechanic", "category", "primary_muscle", mode="before")
    @classmethod
    def parse_attribute(cls, v):
        # an unselected control submits an empty string
        if v is None or v == "":
            return 0
        return _as_int(v)

    @field_validator("secondary_muscles", "equipment", mode="before")
    @classmethod
    def parse_attribute_set(cls, v):
        if v is None:
            return []
        return [_as_int(item) for item in v if item != ""]

    @field_validator("secondary_muscles", "equipment")
    @classmethod
    def unique_members(cls, v):
        return sorted(set(v))


class ExerciseFilter(BaseModel):
    """
    Listing filter. Every field is optional: an empty selection leaves that
    column unconstrained.
    """

    name: str = ""
    force: List[Force] = Field(default_factory=list)
    level: List[Level] = Field(default_factory=list)
    mechanic: List[Mechanic] = Field(default_factory=list)
    category: List[Category] = Field(default_factory=list)
    primary_muscle: List[Muscle] = Field(default_factory=list, alias="primary")
    secondary_muscles: List[Muscle] = Field(default_factory=list, alias="secondary")
    equipment: List[Equipment] = Field(default_factory=list)

    class Config:
        populate_by_name = True

    @field_validator("name", mode="before")
    @classmethod
    def empty_name(cls, v):
        return v or ""

    @field_validator(
        "force", "level", "mechanic", "category",
        "primary_muscle", "secondary_muscles", "equipment",
        mode="before",
    )
    @classmethod
    def parse_selection(cls, v):
        if v is None:
            return []
        if not isinstance(v, (list, tuple, set)):
            v = [v]
        return [_as_int(item) for item in v if item != ""]


class ExerciseResponse(BaseModel):
    """A stored exercise as read back from the database."""

    id: int
    name: str
    force: Force
    level: Level
    mechanic: Mechanic
    category: Category
    primary_muscle: Muscle
    secondary_muscles: List[Muscle] = Field(default_factory=list)
    equipment: List[Equipment] = Field(default_factory=list)
    instructions: str
    images: List[str] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
