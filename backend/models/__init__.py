from backend.models.user import Role, User
from backend.models.course import Course, Difficulty
from backend.models.enrollment import Enrollment

__all__ = ['Course', 'Difficulty', 'Enrollment', 'Role', 'User']
