"""User model definitions."""

import enum
from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, Enum, Integer, String
from backend.database import Base


class Role(str, enum.Enum):
    """Closed set of account roles. A role never changes after registration."""

    STUDENT = 'student'
    INSTRUCTOR = 'instructor'
    ADMIN = 'admin'


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class User(Base):
    """Represents an application user."""
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    email = Column(String, unique=True, index=True, nullable=False)
    hashed_password = Column(String, nullable=False)
    role = Column(
        Enum(Role, name='user_role', native_enum=False, values_callable=lambda roles: [r.value for r in roles]),
        nullable=False,
        default=Role.STUDENT,
    )
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
