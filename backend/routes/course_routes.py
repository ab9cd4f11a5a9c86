import logging

from fastapi import APIRouter, HTTPException, status
from pydantic import BaseModel, Field
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from backend.auth.dependencies import CourseAuthor, DbSession
from backend.auth.permissions import can_manage_course
from backend.core.errors import store_error
from backend.models.course import Course, Difficulty
from backend.models.user import User
from backend.schemas import (
    CourseDetailEnvelope,
    CourseEnvelope,
    CourseListEnvelope,
    MessageEnvelope,
    build_course_detail_response,
    build_course_response,
)

router = APIRouter(tags=['courses'])

logger = logging.getLogger(__name__)

TEXT_FIELDS = ('title', 'description', 'duration')


class CourseCreateRequest(BaseModel):
    title: str | None = None
    description: str | None = None
    duration: str | None = None
    difficulty: Difficulty | None = None
    price: float | None = Field(default=None, ge=0)


class CourseUpdateRequest(CourseCreateRequest):
    pass


def load_course(course_id: int, db: Session) -> Course:
    course = db.get(Course, course_id)
    if course is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail='Course not found.',
        )
    return course


def load_managed_course(course_id: int, user: User, db: Session) -> Course:
    course = load_course(course_id, db)
    if not can_manage_course(user, course):
        logger.warning('User %s may not manage course %s', user.id, course.id)
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail='Access denied.',
        )
    return course


def apply_course_update(course: Course, data: CourseUpdateRequest) -> None:
    """Copy supplied fields onto ``course``; omitted fields keep their value.

    Blank text counts as omitted. ``price`` is applied whenever it is present,
    so an explicit 0 makes a course free.
    """
    for field_name in TEXT_FIELDS:
        value = getattr(data, field_name)
        if value is not None and value.strip():
            setattr(course, field_name, value)
    if data.difficulty is not None:
        course.difficulty = data.difficulty
    if data.price is not None:
        course.price = data.price


def newest_first(query):
    return query.order_by(Course.created_at.desc(), Course.id.desc())


@router.get('', response_model=CourseListEnvelope)
def list_courses(db: DbSession):
    try:
        courses = newest_first(db.query(Course)).all()
        return CourseListEnvelope(courses=[build_course_response(course) for course in courses])
    except SQLAlchemyError as exc:
        raise store_error(exc) from exc


@router.get('/instructor/my-courses', response_model=CourseListEnvelope)
def list_my_courses(current_user: CourseAuthor, db: DbSession):
    try:
        courses = newest_first(db.query(Course).filter(Course.instructor_id == current_user.id)).all()
        return CourseListEnvelope(courses=[build_course_response(course) for course in courses])
    except SQLAlchemyError as exc:
        raise store_error(exc) from exc


@router.get('/{course_id}', response_model=CourseDetailEnvelope)
def get_course(course_id: int, db: DbSession):
    try:
        course = load_course(course_id, db)
        return CourseDetailEnvelope(course=build_course_detail_response(course))
    except SQLAlchemyError as exc:
        raise store_error(exc) from exc


@router.post('', response_model=CourseEnvelope, status_code=status.HTTP_201_CREATED)
def create_course(data: CourseCreateRequest, current_user: CourseAuthor, db: DbSession):
    # Optional fields left out so the column defaults apply.
    optional_fields = {
        key: value
        for key, value in (('duration', data.duration), ('difficulty', data.difficulty), ('price', data.price))
        if value is not None
    }

    try:
        course = Course(
            title=data.title,
            description=data.description,
            instructor_id=current_user.id,
            **optional_fields,
        )
        db.add(course)
        db.commit()
        db.refresh(course)
    except (SQLAlchemyError, ValueError) as exc:
        db.rollback()
        raise store_error(exc) from exc

    logger.info('User %s created course %s', current_user.id, course.id)
    return CourseEnvelope(message='Course created successfully.', course=build_course_response(course))


@router.put('/{course_id}', response_model=CourseEnvelope)
def update_course(course_id: int, data: CourseUpdateRequest, current_user: CourseAuthor, db: DbSession):
    try:
        course = load_managed_course(course_id, current_user, db)
        apply_course_update(course, data)
        db.commit()
        db.refresh(course)
    except (SQLAlchemyError, ValueError) as exc:
        db.rollback()
        raise store_error(exc) from exc

    return CourseEnvelope(message='Course updated successfully.', course=build_course_response(course))


@router.delete('/{course_id}', response_model=MessageEnvelope)
def delete_course(course_id: int, current_user: CourseAuthor, db: DbSession):
    try:
        course = load_managed_course(course_id, current_user, db)
        db.delete(course)
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        raise store_error(exc) from exc

    logger.info('User %s deleted course %s', current_user.id, course_id)
    return MessageEnvelope(message='Course deleted successfully.')
