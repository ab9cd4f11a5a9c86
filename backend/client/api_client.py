"""HTTP client for the course portal API.

The credential cookie set by register/login lives in the underlying
``httpx.Client`` cookie jar, so later calls are authenticated automatically.
"""

import logging
from typing import Any

import httpx


logger = logging.getLogger(__name__)

COURSES_FETCH_ERROR = 'Failed to fetch courses'
COURSE_FETCH_ERROR = 'Failed to fetch course details'
ENROLLMENTS_FETCH_ERROR = 'Failed to fetch enrolled courses'
COURSE_DELETE_ERROR = 'Failed to delete course'
COURSE_SAVE_ERROR = 'Failed to save course'
ENROLL_ERROR = 'Enrollment failed'
AUTH_ERROR = 'Authentication failed'


class ApiError(Exception):
    """A failed API call. ``status_code`` is None when no response arrived."""

    def __init__(self, status_code: int | None, message: str):
        self.status_code = status_code
        self.message = message
        super().__init__(message)


class CoursePortalClient:
    def __init__(self, http: httpx.Client):
        self.http = http

    @classmethod
    def connect(cls, base_url: str, timeout: float = 10.0) -> 'CoursePortalClient':
        return cls(httpx.Client(base_url=base_url, timeout=timeout))

    def close(self) -> None:
        self.http.close()

    def _request(self, method: str, path: str, fallback: str, **kwargs: Any) -> dict:
        try:
            response = self.http.request(method, path, **kwargs)
        except httpx.HTTPError as exc:
            logger.warning('%s %s failed: %s', method, path, exc)
            raise ApiError(None, fallback) from exc

        try:
            payload = response.json()
        except ValueError:
            payload = {}
        if not isinstance(payload, dict):
            payload = {}

        if response.is_error or not payload.get('success', False):
            raise ApiError(response.status_code, payload.get('message') or fallback)
        return payload

    # --- auth ---

    def register(self, name: str, email: str, password: str, role: str = 'student',
                 admin_token: str | None = None) -> dict:
        body = {'name': name, 'email': email, 'password': password, 'role': role}
        if admin_token is not None:
            body['adminToken'] = admin_token
        return self._request('POST', '/api/auth/register', AUTH_ERROR, json=body)['user']

    def login(self, email: str, password: str) -> dict:
        payload = self._request('POST', '/api/auth/login', AUTH_ERROR, json={'email': email, 'password': password})
        return payload['user']

    def logout(self) -> None:
        self._request('POST', '/api/auth/logout', AUTH_ERROR)

    def me(self) -> dict | None:
        try:
            return self._request('GET', '/api/auth/me', AUTH_ERROR)['user']
        except ApiError as exc:
            if exc.status_code == 401:
                return None
            raise

    # --- courses ---

    def list_courses(self) -> list[dict]:
        return self._request('GET', '/api/courses', COURSES_FETCH_ERROR)['courses']

    def get_course(self, course_id: int) -> dict:
        return self._request('GET', f'/api/courses/{course_id}', COURSE_FETCH_ERROR)['course']

    def create_course(self, **fields: Any) -> dict:
        return self._request('POST', '/api/courses', COURSE_SAVE_ERROR, json=fields)['course']

    def update_course(self, course_id: int, **fields: Any) -> dict:
        return self._request('PUT', f'/api/courses/{course_id}', COURSE_SAVE_ERROR, json=fields)['course']

    def delete_course(self, course_id: int) -> str:
        return self._request('DELETE', f'/api/courses/{course_id}', COURSE_DELETE_ERROR)['message']

    def list_teaching_courses(self) -> list[dict]:
        return self._request('GET', '/api/courses/instructor/my-courses', COURSES_FETCH_ERROR)['courses']

    # --- enrollment ---

    def enroll(self, course_id: int) -> dict:
        return self._request('POST', f'/api/enroll/{course_id}', ENROLL_ERROR)['enrollment']

    def list_enrollments(self) -> list[dict]:
        return self._request('GET', '/api/my-courses', ENROLLMENTS_FETCH_ERROR)['enrollments']

    def is_enrolled(self, course_id: int) -> bool:
        return self._request('GET', f'/api/enrollment-status/{course_id}', ENROLL_ERROR)['isEnrolled']
