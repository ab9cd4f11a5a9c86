"""Response models shared by the route modules.

Payload keys are camelCase on the wire (``enrolledStudents``, ``createdAt``)
while Python code uses snake_case attribute names.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from backend.models.course import Course, Difficulty
from backend.models.enrollment import Enrollment
from backend.models.user import Role, User


class ApiModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class UserSummary(ApiModel):
    id: int
    name: str
    email: str


class UserResponse(UserSummary):
    role: Role
    created_at: datetime | None = None


class CourseResponse(ApiModel):
    id: int
    title: str
    description: str
    instructor: UserSummary | None = None
    duration: str
    difficulty: Difficulty
    price: float
    enrolled_students: list[int]
    created_at: datetime | None = None
    updated_at: datetime | None = None


class CourseDetailResponse(CourseResponse):
    enrolled_students: list[UserSummary]


class EnrollmentResponse(ApiModel):
    id: int
    student: int
    course: int
    enrolled_at: datetime
    progress: float


class EnrollmentWithCourseResponse(EnrollmentResponse):
    course: CourseResponse


class Envelope(ApiModel):
    success: bool = True


class MessageEnvelope(Envelope):
    message: str


class UserEnvelope(Envelope):
    message: str | None = None
    user: UserResponse


class CourseListEnvelope(Envelope):
    courses: list[CourseResponse]


class CourseEnvelope(Envelope):
    message: str | None = None
    course: CourseResponse


class CourseDetailEnvelope(Envelope):
    course: CourseDetailResponse


class EnrollmentEnvelope(Envelope):
    message: str
    enrollment: EnrollmentResponse


class EnrollmentListEnvelope(Envelope):
    enrollments: list[EnrollmentWithCourseResponse]


class EnrollmentStatusEnvelope(Envelope):
    is_enrolled: bool
    enrollment: EnrollmentResponse | None = None


def build_user_summary(user: User | None) -> UserSummary | None:
    if user is None:
        return None
    return UserSummary(id=user.id, name=user.name, email=user.email)


def build_user_response(user: User) -> UserResponse:
    return UserResponse(
        id=user.id,
        name=user.name,
        email=user.email,
        role=user.role,
        created_at=user.created_at,
    )


def _course_fields(course: Course) -> dict:
    return {
        'id': course.id,
        'title': course.title,
        'description': course.description,
        'instructor': build_user_summary(course.instructor),
        'duration': course.duration,
        'difficulty': course.difficulty,
        'price': course.price,
        'created_at': course.created_at,
        'updated_at': course.updated_at,
    }


def build_course_response(course: Course) -> CourseResponse:
    return CourseResponse(**_course_fields(course), enrolled_students=course.enrolled_student_ids)


def build_course_detail_response(course: Course) -> CourseDetailResponse:
    return CourseDetailResponse(
        **_course_fields(course),
        enrolled_students=[build_user_summary(student) for student in course.enrolled_students],
    )


def build_enrollment_response(enrollment: Enrollment) -> EnrollmentResponse:
    return EnrollmentResponse(
        id=enrollment.id,
        student=enrollment.student_id,
        course=enrollment.course_id,
        enrolled_at=enrollment.enrolled_at,
        progress=enrollment.progress,
    )


def build_enrollment_with_course(enrollment: Enrollment) -> EnrollmentWithCourseResponse:
    return EnrollmentWithCourseResponse(
        id=enrollment.id,
        student=enrollment.student_id,
        course=build_course_response(enrollment.course),
        enrolled_at=enrollment.enrolled_at,
        progress=enrollment.progress,
    )
