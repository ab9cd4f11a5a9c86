"""Student enrollment endpoints.

A (student, course) pair moves from not enrolled to enrolled exactly once;
there is no way back. The enrollments table is the only record of the
relationship, and its unique constraint on the pair backs up the
read-then-insert check when two requests race.
"""

import logging

from fastapi import APIRouter, HTTPException, status
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from backend.auth.dependencies import DbSession, StudentUser
from backend.core.errors import store_error
from backend.models.enrollment import Enrollment
from backend.models.user import User
from backend.routes.course_routes import load_course
from backend.schemas import (
    EnrollmentEnvelope,
    EnrollmentListEnvelope,
    EnrollmentStatusEnvelope,
    build_enrollment_response,
    build_enrollment_with_course,
)

router = APIRouter(tags=['enrollment'])

logger = logging.getLogger(__name__)

ALREADY_ENROLLED_DETAIL = 'Already enrolled in this course.'


class AlreadyEnrolledError(Exception):
    """Raised when a student enrolls in a course they already joined."""

    def __init__(self, student_id: int, course_id: int):
        self.student_id = student_id
        self.course_id = course_id
        super().__init__(f"Student '{student_id}' is already enrolled in course '{course_id}'")


def find_enrollment(student_id: int, course_id: int, db: Session) -> Enrollment | None:
    return db.query(Enrollment).filter(
        Enrollment.student_id == student_id,
        Enrollment.course_id == course_id,
    ).first()


def enroll_student(student: User, course_id: int, db: Session) -> Enrollment:
    """Create the enrollment for ``student`` in ``course_id``.

    Raises:
        HTTPException: 404 when the course does not exist.
        AlreadyEnrolledError: when the pair already has an enrollment, either
            found up front or reported by the unique constraint on insert.
    """
    course = load_course(course_id, db)

    if find_enrollment(student.id, course.id, db) is not None:
        raise AlreadyEnrolledError(student.id, course.id)

    enrollment = Enrollment(student_id=student.id, course_id=course.id)
    db.add(enrollment)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise AlreadyEnrolledError(student.id, course.id) from exc
    db.refresh(enrollment)
    return enrollment


@router.post('/enroll/{course_id}', response_model=EnrollmentEnvelope, status_code=status.HTTP_201_CREATED)
def enroll(course_id: int, current_user: StudentUser, db: DbSession):
    try:
        enrollment = enroll_student(current_user, course_id, db)
    except AlreadyEnrolledError as exc:
        logger.info('Duplicate enrollment rejected: %s', exc)
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=ALREADY_ENROLLED_DETAIL,
        ) from exc
    except SQLAlchemyError as exc:
        db.rollback()
        raise store_error(exc) from exc

    logger.info('Student %s enrolled in course %s', current_user.id, course_id)
    return EnrollmentEnvelope(
        message='Successfully enrolled in the course.',
        enrollment=build_enrollment_response(enrollment),
    )


@router.get('/my-courses', response_model=EnrollmentListEnvelope)
def list_my_enrollments(current_user: StudentUser, db: DbSession):
    try:
        enrollments = db.query(Enrollment).filter(
            Enrollment.student_id == current_user.id,
        ).order_by(Enrollment.enrolled_at.desc(), Enrollment.id.desc()).all()

        return EnrollmentListEnvelope(
            enrollments=[build_enrollment_with_course(enrollment) for enrollment in enrollments],
        )
    except SQLAlchemyError as exc:
        raise store_error(exc) from exc


@router.get('/enrollment-status/{course_id}', response_model=EnrollmentStatusEnvelope)
def get_enrollment_status(course_id: int, current_user: StudentUser, db: DbSession):
    try:
        enrollment = find_enrollment(current_user.id, course_id, db)
    except SQLAlchemyError as exc:
        raise store_error(exc) from exc

    return EnrollmentStatusEnvelope(
        is_enrolled=enrollment is not None,
        enrollment=build_enrollment_response(enrollment) if enrollment is not None else None,
    )
