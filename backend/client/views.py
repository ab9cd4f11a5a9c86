"""Display logic for the portal's course lists and dashboards.

These helpers hold the only business logic the client has: text search over
fetched courses, local list updates after a delete, and dashboard totals.
Everything works on the JSON dicts returned by ``CoursePortalClient``.
"""

from collections.abc import Callable, Iterable
from dataclasses import dataclass, field

from backend.client.api_client import COURSE_DELETE_ERROR, ApiError, CoursePortalClient

HOURS_PER_ENROLLMENT = 2


def course_matches(course: dict, term: str) -> bool:
    needle = term.lower()
    instructor = course.get('instructor') or {}
    haystacks = (
        course.get('title') or '',
        course.get('description') or '',
        instructor.get('name') or '',
    )
    return any(needle in text.lower() for text in haystacks)


def filter_courses(courses: Iterable[dict], term: str) -> list[dict]:
    """Case-insensitive substring search over title, description and instructor name."""
    if not term:
        return list(courses)
    return [course for course in courses if course_matches(course, term)]


def remove_course(courses: Iterable[dict], course_id: int) -> list[dict]:
    return [course for course in courses if course.get('id') != course_id]


def delete_course_and_update(client: CoursePortalClient, courses: list[dict], course_id: int) -> list[dict]:
    """Delete on the server, then drop the course locally without re-fetching.

    Raises ApiError carrying the view's fixed message; the caller keeps its
    current list.
    """
    try:
        client.delete_course(course_id)
    except ApiError as exc:
        raise ApiError(exc.status_code, COURSE_DELETE_ERROR) from exc
    return remove_course(courses, course_id)


def instructor_stats(courses: Iterable[dict]) -> dict:
    courses = list(courses)
    total_students = sum(len(course.get('enrolledStudents') or []) for course in courses)
    total_revenue = sum(
        (course.get('price') or 0) * len(course.get('enrolledStudents') or [])
        for course in courses
    )
    return {
        'courses': len(courses),
        'total_students': total_students,
        'total_revenue': total_revenue,
    }


def student_stats(enrollments: Iterable[dict]) -> dict:
    count = len(list(enrollments))
    return {
        'enrolled_courses': count,
        'hours_studied': count * HOURS_PER_ENROLLMENT,
    }


@dataclass
class ViewState:
    loading: bool = True
    error: str = ''
    items: list = field(default_factory=list)

    @property
    def status(self) -> str:
        if self.loading:
            return 'loading'
        if self.error:
            return 'error'
        if not self.items:
            return 'empty'
        return 'populated'

    @classmethod
    def from_fetch(cls, fetch: Callable[[], list], fallback: str) -> 'ViewState':
        """Run ``fetch`` once; any API failure shows the view's fixed message."""
        try:
            items = fetch()
        except ApiError:
            return cls(loading=False, error=fallback)
        return cls(loading=False, items=list(items))
