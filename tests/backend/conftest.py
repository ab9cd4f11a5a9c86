import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool

from backend.core.config import Settings
from backend.database import Database
from backend.main import create_app


ADMIN_TOKEN = 'let-me-in'
PASSWORD = 'secret123'


@pytest.fixture(autouse=True)
def fast_password_hashing(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr('backend.auth.passwords.BCRYPT_ROUNDS', 4)


@pytest.fixture
def settings() -> Settings:
    return Settings(
        database_url='sqlite://',
        jwt_secret_key='test-secret',
        admin_token=ADMIN_TOKEN,
    )


@pytest.fixture
def database():
    database = Database('sqlite://', poolclass=StaticPool)
    database.create_all()
    try:
        yield database
    finally:
        database.drop_all()
        database.dispose()


@pytest.fixture
def db_session(database):
    session = database.session()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def app(settings, database):
    return create_app(settings, database)


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def make_client(app):
    """Build extra clients so several users can hold separate cookies."""
    clients: list[TestClient] = []

    def factory() -> TestClient:
        test_client = TestClient(app)
        clients.append(test_client)
        return test_client

    yield factory

    for test_client in clients:
        test_client.close()


@pytest.fixture
def register_user():
    def _register(client: TestClient, name: str, email: str, role: str = 'student', **extra) -> dict:
        body = {'name': name, 'email': email, 'password': PASSWORD, 'role': role, **extra}
        response = client.post('/api/auth/register', json=body)
        assert response.status_code == 201, response.text
        return response.json()['user']

    return _register


@pytest.fixture
def create_course():
    def _create(client: TestClient, **fields) -> dict:
        body = {'title': 'Intro to Python', 'description': 'Variables, loops and functions.', **fields}
        response = client.post('/api/courses', json=body)
        assert response.status_code == 201, response.text
        return response.json()['course']

    return _create


@pytest.fixture
def instructor_client(make_client, register_user):
    test_client = make_client()
    register_user(test_client, 'Ada Instructor', 'ada@example.edu', role='instructor')
    return test_client


@pytest.fixture
def student_client(make_client, register_user):
    test_client = make_client()
    register_user(test_client, 'Sam Student', 'sam@example.edu', role='student')
    return test_client
