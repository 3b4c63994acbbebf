from sqlalchemy import Column, Integer, String, Text, DateTime
from datetime import datetime
from gymtrack.database import Base
from gymtrack.models.column_types import AttributeType, AttributeSet, JSONList
from gymtrack.models.enums import Force, Level, Mechanic, Category, Muscle, Equipment


class Exercise(Base):
    __tablename__ = "exercises"

    id = Column(Integer, primary_key=True, index=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    name = Column(String, unique=True, index=True, nullable=False)

    # Single-valued attributes, stored as small integers
    force = Column(AttributeType(Force), nullable=False, default=Force.PULL)
    level = Column(AttributeType(Level), nullable=False, default=Level.EASY)
    mechanic = Column(AttributeType(Mechanic), nullable=False, default=Mechanic.COMPOUND)
    category = Column(AttributeType(Category), nullable=False, default=Category.ENDURANCE)
    primary_muscle = Column(AttributeType(Muscle), nullable=False, default=Muscle.ABDOMINALS)

    # Set-valued attributes, JSON arrays of integers
    secondary_muscles = Column(AttributeSet(Muscle), nullable=False, default=list)
    equipment = Column(AttributeSet(Equipment), nullable=False, default=list)

    instructions = Column(Text, nullable=False)
    images = Column(JSONList, nullable=False, default=list)  # image store keys, upload order

    def __repr__(self):
        return f"<Exercise id={self.id} name={self.name!r}>"
