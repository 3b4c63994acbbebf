"""
Translates an ExerciseFilter into SQLAlchemy conditions.

Each filter field is bound to one predicate kind:

    contains  name substring, case-sensitive, skipped when empty
    member    single-valued attribute column, equality for one selected
              value, IN for several; all member predicates are ANDed into
              one compound condition
    subset    JSON array column; the stored set must be contained in the
              selection, i.e. NOT EXISTS a stored element outside it. An
              empty stored array always passes.

An empty selection never constrains its column.
"""
from dataclasses import dataclass
from typing import List

from sqlalchemy import Integer, and_, cast, func, select
from sqlalchemy.sql.elements import ColumnElement

from gymtrack.models.exercise import Exercise
from gymtrack.schemas.exercise import ExerciseFilter

CONTAINS = "contains"
MEMBER = "member"
SUBSET = "subset"


@dataclass(frozen=True)
class FieldRule:
    field: str  # ExerciseFilter attribute, also the Exercise column attribute
    kind: str


FILTER_RULES = (
    FieldRule("name", CONTAINS),
    FieldRule("force", MEMBER),
    FieldRule("level", MEMBER),
    FieldRule("mechanic", MEMBER),
    FieldRule("category", MEMBER),
    FieldRule("primary_muscle", MEMBER),
    FieldRule("secondary_muscles", SUBSET),
    FieldRule("equipment", SUBSET),
)


def _contains(column, text: str, dialect_name: str) -> ColumnElement:
    # SQLite LIKE ignores ASCII case, instr() does not
    if dialect_name == "sqlite":
        return func.instr(column, text) > 0
    return column.contains(text, autoescape=True)


def _member(column, values: list) -> ColumnElement:
    values = sorted({int(v) for v in values})
    if len(values) == 1:
        return column == values[0]
    return column.in_(values)


def _json_elements(column, dialect_name: str):
    if dialect_name == "postgresql":
        return func.jsonb_array_elements_text(column).table_valued("value")
    return func.json_each(column).table_valued("value")


def _subset(column, values: list, dialect_name: str) -> ColumnElement:
    allowed = sorted({int(v) for v in values})
    elements = _json_elements(column, dialect_name)
    outside = (
        select(elements.c.value)
        .select_from(elements)
        .where(cast(elements.c.value, Integer).not_in(allowed))
    )
    return ~outside.exists()


def build_conditions(criteria: ExerciseFilter, dialect_name: str) -> List[ColumnElement]:
    """Conditions to AND onto an Exercise query; empty when nothing is selected."""
    conditions = []
    members = []
    for rule in FILTER_RULES:
        value = getattr(criteria, rule.field)
        if not value:
            continue
        column = getattr(Exercise, rule.field)
        if rule.kind == CONTAINS:
            conditions.append(_contains(column, value, dialect_name))
        elif rule.kind == MEMBER:
            members.append(_member(column, value))
        elif rule.kind == SUBSET:
            conditions.append(_subset(column, value, dialect_name))
        else:
            raise ValueError(f"unknown filter predicate kind: {rule.kind}")

    if members:
        conditions.append(and_(*members))
    return conditions
