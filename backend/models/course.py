"""Course model definitions."""

import enum

from sqlalchemy import Column, DateTime, Enum, Float, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship, validates
from backend.database import Base
from backend.models.user import utcnow


DEFAULT_DURATION = 'Self-paced'


class Difficulty(str, enum.Enum):
    BEGINNER = 'Beginner'
    INTERMEDIATE = 'Intermediate'
    ADVANCED = 'Advanced'


class Course(Base):
    """A published course, owned by the instructor who created it.

    The roster is not stored on the course row. ``enrolled_students`` is read
    from the enrollment table, so a course and its enrollments cannot disagree.
    """
    __tablename__ = "courses"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=False)
    instructor_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    duration = Column(String, nullable=False, default=DEFAULT_DURATION)
    difficulty = Column(
        Enum(Difficulty, name='course_difficulty', native_enum=False,
             values_callable=lambda levels: [d.value for d in levels]),
        nullable=False,
        default=Difficulty.BEGINNER,
    )
    price = Column(Float, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    instructor = relationship("User")
    enrollments = relationship(
        "Enrollment",
        back_populates="course",
        cascade="all, delete-orphan",
        order_by="Enrollment.id",
    )

    @validates('title', 'description')
    def validate_required_text(self, key, value):
        normalized = value.strip() if isinstance(value, str) else value
        if not normalized:
            raise ValueError(f'Course {key} is required')
        return normalized

    @validates('difficulty')
    def validate_difficulty(self, key, value):
        try:
            return Difficulty(value)
        except ValueError as exc:
            raise ValueError(f'`{value}` is not a valid course difficulty') from exc

    @validates('price')
    def validate_price(self, key, value):
        if value is None:
            return 0
        if value < 0:
            raise ValueError('Course price cannot be negative')
        return value

    @property
    def enrolled_student_ids(self) -> list[int]:
        return [enrollment.student_id for enrollment in self.enrollments]

    @property
    def enrolled_students(self) -> list:
        return [enrollment.student for enrollment in self.enrollments]
