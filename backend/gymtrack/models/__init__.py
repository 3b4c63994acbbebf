# Import all models here
from gymtrack.models.exercise import Exercise
