import pytest
from sqlalchemy.exc import IntegrityError

from backend.models.course import Course
from backend.models.enrollment import Enrollment
from backend.models.user import Role, User
from backend.routes.enrollment_routes import AlreadyEnrolledError, enroll_student


def test_enroll_creates_enrollment(instructor_client, student_client, create_course) -> None:
    course = create_course(instructor_client)
    student = student_client.get('/api/auth/me').json()['user']

    response = student_client.post(f"/api/enroll/{course['id']}")

    assert response.status_code == 201
    body = response.json()
    assert body['success'] is True
    assert body['message'] == 'Successfully enrolled in the course.'
    assert body['enrollment']['student'] == student['id']
    assert body['enrollment']['course'] == course['id']
    assert body['enrollment']['progress'] == 0
    assert 'enrolledAt' in body['enrollment']


def test_enroll_updates_status_and_roster(client, instructor_client, student_client, create_course) -> None:
    course = create_course(instructor_client)
    student = student_client.get('/api/auth/me').json()['user']
    before = student_client.get(f"/api/enrollment-status/{course['id']}").json()

    student_client.post(f"/api/enroll/{course['id']}")

    after = student_client.get(f"/api/enrollment-status/{course['id']}").json()
    listed = client.get('/api/courses').json()['courses'][0]
    detail = client.get(f"/api/courses/{course['id']}").json()['course']

    assert before == {'success': True, 'isEnrolled': False, 'enrollment': None}
    assert after['isEnrolled'] is True
    assert after['enrollment']['student'] == student['id']
    assert listed['enrolledStudents'] == [student['id']]
    assert detail['enrolledStudents'] == [{'id': student['id'], 'name': 'Sam Student', 'email': 'sam@example.edu'}]


def test_second_enroll_is_rejected_and_creates_nothing(instructor_client, student_client, create_course, db_session) -> None:
    course = create_course(instructor_client)

    first = student_client.post(f"/api/enroll/{course['id']}")
    second = student_client.post(f"/api/enroll/{course['id']}")

    assert first.status_code == 201
    assert second.status_code == 400
    assert second.json() == {'success': False, 'message': 'Already enrolled in this course.'}
    assert db_session.query(Enrollment).filter(Enrollment.course_id == course['id']).count() == 1


def test_enroll_in_missing_course_returns_not_found(student_client) -> None:
    response = student_client.post('/api/enroll/999')

    assert response.status_code == 404
    assert response.json()['message'] == 'Course not found.'


def test_enroll_requires_student_role(instructor_client, create_course) -> None:
    course = create_course(instructor_client)

    response = instructor_client.post(f"/api/enroll/{course['id']}")

    assert response.status_code == 403


def test_enroll_requires_authentication(client, instructor_client, create_course) -> None:
    course = create_course(instructor_client)

    response = client.post(f"/api/enroll/{course['id']}")

    assert response.status_code == 401


def test_my_courses_returns_nested_course_and_instructor(instructor_client, student_client, create_course) -> None:
    first = create_course(instructor_client, title='First')
    second = create_course(instructor_client, title='Second')
    student_client.post(f"/api/enroll/{first['id']}")
    student_client.post(f"/api/enroll/{second['id']}")

    response = student_client.get('/api/my-courses')

    assert response.status_code == 200
    enrollments = response.json()['enrollments']
    assert [enrollment['course']['title'] for enrollment in enrollments] == ['Second', 'First']
    assert enrollments[0]['course']['instructor']['name'] == 'Ada Instructor'
    assert enrollments[0]['progress'] == 0


def test_my_courses_is_student_only(instructor_client) -> None:
    response = instructor_client.get('/api/my-courses')

    assert response.status_code == 403


def test_enrollment_status_is_student_only(instructor_client) -> None:
    response = instructor_client.get('/api/enrollment-status/1')

    assert response.status_code == 403


def test_deleting_course_removes_its_enrollments(instructor_client, student_client, create_course, db_session) -> None:
    course = create_course(instructor_client)
    student_client.post(f"/api/enroll/{course['id']}")

    instructor_client.delete(f"/api/courses/{course['id']}")

    assert db_session.query(Enrollment).count() == 0
    assert student_client.get('/api/my-courses').json()['enrollments'] == []


@pytest.fixture
def student_and_course(db_session):
    instructor = User(name='Ada', email='ada@example.edu', hashed_password='x', role=Role.INSTRUCTOR)
    student = User(name='Sam', email='sam@example.edu', hashed_password='x', role=Role.STUDENT)
    db_session.add_all([instructor, student])
    db_session.flush()
    course = Course(title='Intro', description='Basics', instructor_id=instructor.id)
    db_session.add(course)
    db_session.commit()
    return student, course


def test_unique_constraint_rejects_duplicate_pair(db_session, student_and_course) -> None:
    student, course = student_and_course
    db_session.add(Enrollment(student_id=student.id, course_id=course.id))
    db_session.commit()

    db_session.add(Enrollment(student_id=student.id, course_id=course.id))
    with pytest.raises(IntegrityError):
        db_session.commit()
    db_session.rollback()


def test_enroll_student_reports_race_lost_to_constraint(
    db_session,
    student_and_course,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    student, course = student_and_course
    db_session.add(Enrollment(student_id=student.id, course_id=course.id))
    db_session.commit()
    # Simulate a concurrent request that inserted between the check and the write.
    monkeypatch.setattr('backend.routes.enrollment_routes.find_enrollment', lambda *args: None)

    with pytest.raises(AlreadyEnrolledError):
        enroll_student(student, course.id, db_session)

    assert db_session.query(Enrollment).count() == 1


def test_enroll_student_returns_persisted_enrollment(db_session, student_and_course) -> None:
    student, course = student_and_course

    enrollment = enroll_student(student, course.id, db_session)

    assert enrollment.id is not None
    assert enrollment.progress == 0
    assert course.enrolled_student_ids == [student.id]
