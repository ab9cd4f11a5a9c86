from collections.abc import Iterable

from backend.models.course import Course
from backend.models.user import Role, User


def is_allowed(role: Role | str, allowed: Iterable[Role]) -> bool:
    """Return True when ``role`` is one of the ``allowed`` roles."""
    try:
        resolved = Role(role)
    except ValueError:
        return False
    return resolved in set(allowed)


def can_manage_course(user: User, course: Course) -> bool:
    """Owners and admins may change or delete a course."""
    if is_allowed(user.role, {Role.ADMIN}):
        return True
    return course.instructor_id == user.id
