"""Enrollment model definitions."""

from sqlalchemy import Column, DateTime, Float, ForeignKey, Integer, UniqueConstraint
from sqlalchemy.orm import relationship, validates
from backend.database import Base
from backend.models.user import utcnow


class Enrollment(Base):
    """One student's enrollment in one course. At most one row per pair."""
    __tablename__ = "enrollments"

    id = Column(Integer, primary_key=True, index=True)
    student_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    course_id = Column(Integer, ForeignKey("courses.id", ondelete="CASCADE"), nullable=False, index=True)
    enrolled_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    # Stored only; nothing in this service computes progress.
    progress = Column(Float, nullable=False, default=0)

    __table_args__ = (
        UniqueConstraint("student_id", "course_id", name="uq_enrollments_student_course"),
    )

    student = relationship("User")
    course = relationship("Course", back_populates="enrollments")

    @validates('progress')
    def validate_progress(self, key, value):
        if value is None:
            return 0
        if not 0 <= value <= 100:
            raise ValueError('Enrollment progress must be between 0 and 100')
        return value
