"""
Closed classification domains for exercises.

Every attribute is an IntEnum whose values run contiguously from 0; the
integer is what gets stored and what forms submit, the label is only shown.
"""
from enum import IntEnum
from types import MappingProxyType
from typing import Tuple, Type, TypeVar

A = TypeVar("A", bound="Attribute")


class Attribute(IntEnum):
    """IntEnum carrying a display label next to its stored integer."""

    def __new__(cls, value: int, label: str):
        obj = int.__new__(cls, value)
        obj._value_ = value
        obj.label = label
        return obj

    def __str__(self) -> str:
        return self.label


class Force(Attribute):
    PULL = (0, "Pull")
    PUSH = (1, "Push")
    STATIC = (2, "Static")


class Level(Attribute):
    EASY = (0, "Easy")
    MIDDLE = (1, "Middle")
    HARD = (2, "Hard")


class Mechanic(Attribute):
    COMPOUND = (0, "Compound")
    ISOLATION = (1, "Isolation")


class Category(Attribute):
    ENDURANCE = (0, "Endurance")
    STRENGTH = (1, "Strength")
    STRETCHING = (2, "Stretching")


class Equipment(Attribute):
    BANDS = (0, "Bands")
    BARBELL = (1, "Barbell")
    BENCH = (2, "Bench")
    BODY = (3, "Body")
    CABLE = (4, "Cable")
    DUMBBELLS = (5, "Dumbbells")
    KETTLEBELLS = (6, "Kettlebells")
    MACHINE = (7, "Machine")
    OTHER = (8, "Other")


class Muscle(Attribute):
    ABDOMINALS = (0, "Abdominals")
    ABDUCTORS = (1, "Abductors")
    ADDUCTORS = (2, "Adductors")
    BICEPS = (3, "Biceps")
    CALVES = (4, "Calves")
    CHEST = (5, "Chest")
    FOREARMS = (6, "Forearms")
    GLUTES = (7, "Glutes")
    HAMSTRINGS = (8, "Hamstrings")
    LATS = (9, "Lats")
    LOWER_BACK = (10, "LowerBack")
    NECK = (11, "Neck")
    QUADRICEPS = (12, "Quadriceps")
    SHOULDERS = (13, "Shoulders")
    TRAPS = (14, "Traps")
    TRICEPS = (15, "Triceps")


def all_values(attribute: Type[A]) -> Tuple[A, ...]:
    """All members of `attribute` in ascending integer order."""
    return tuple(sorted(attribute))


# Select-control options, keyed the way the templates address them
POSSIBLE_VALUES = MappingProxyType({
    "Forces": all_values(Force),
    "Levels": all_values(Level),
    "Mechanics": all_values(Mechanic),
    "Categories": all_values(Category),
    "Muscles": all_values(Muscle),
    "Equipment": all_values(Equipment),
})
