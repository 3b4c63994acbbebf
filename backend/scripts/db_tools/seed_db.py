import sys
import os

from dotenv import load_dotenv

# Load environment variables
load_dotenv(os.path.join(os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))), ".env"))

# Add the backend directory to python path
sys.path.append(os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))))

from gymtrack.database import SessionLocal, engine, Base
from gymtrack.crud import exercise as crud_exercise
from gymtrack.models.enums import Force, Level, Mechanic, Category, Muscle, Equipment
from gymtrack.schemas.exercise import ExerciseForm

# Ensure tables exist
Base.metadata.create_all(bind=engine)

SAMPLE_EXERCISES = [
    ExerciseForm(
        name="Pull Up", force=Force.PULL, level=Level.MIDDLE, mechanic=Mechanic.COMPOUND,
        category=Category.STRENGTH, primary_muscle=Muscle.LATS,
        secondary_muscles=[Muscle.BICEPS, Muscle.FOREARMS], equipment=[Equipment.OTHER],
        instructions="Hang from the bar with straight arms, pull until the chin clears the bar.",
    ),
    ExerciseForm(
        name="Bench Press", force=Force.PUSH, level=Level.MIDDLE, mechanic=Mechanic.COMPOUND,
        category=Category.STRENGTH, primary_muscle=Muscle.CHEST,
        secondary_muscles=[Muscle.SHOULDERS, Muscle.TRICEPS], equipment=[Equipment.BARBELL, Equipment.BENCH],
        instructions="Lower the bar to mid chest, press back up to locked elbows.",
    ),
    ExerciseForm(
        name="Plank", force=Force.STATIC, level=Level.EASY, mechanic=Mechanic.ISOLATION,
        category=Category.ENDURANCE, primary_muscle=Muscle.ABDOMINALS,
        instructions="Hold a straight line from head to heels on forearms and toes.",
    ),
    ExerciseForm(
        name="Goblet Squat", force=Force.PUSH, level=Level.EASY, mechanic=Mechanic.COMPOUND,
        category=Category.STRENGTH, primary_muscle=Muscle.QUADRICEPS,
        secondary_muscles=[Muscle.GLUTES, Muscle.ADDUCTORS], equipment=[Equipment.KETTLEBELLS],
        instructions="Hold the bell at the chest, squat between the knees, stand up tall.",
    ),
    ExerciseForm(
        name="Hamstring Stretch", force=Force.STATIC, level=Level.EASY, mechanic=Mechanic.ISOLATION,
        category=Category.STRETCHING, primary_muscle=Muscle.HAMSTRINGS,
        secondary_muscles=[Muscle.CALVES], equipment=[Equipment.BANDS],
        instructions="Loop the band over the foot and raise the straight leg until a stretch is felt.",
    ),
]

def seed_exercises():
    db = SessionLocal()

    # Check if we already have items
    if crud_exercise.list_exercises(db):
        print("Exercises already seeded.")
        db.close()
        return

    for exercise in SAMPLE_EXERCISES:
        crud_exercise.create_exercise(db, exercise, [])

    print(f"Seeded {len(SAMPLE_EXERCISES)} exercises successfully.")
    db.close()

if __name__ == "__main__":
    seed_exercises()
