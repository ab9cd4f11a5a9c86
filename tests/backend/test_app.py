import pytest
from fastapi.testclient import TestClient

from backend.core.config import Settings, load_settings, validate_runtime_config
from backend.main import create_app


def test_root_reports_status(client) -> None:
    response = client.get('/')

    assert response.status_code == 200
    assert response.json() == {'status': 'Course Portal API Running'}


def test_app_without_database_serves_but_data_operations_fail() -> None:
    app = create_app(Settings(database_url=None))

    with TestClient(app) as degraded_client:
        root_response = degraded_client.get('/')
        courses_response = degraded_client.get('/api/courses')

    assert root_response.status_code == 200
    assert courses_response.status_code == 503
    assert courses_response.json() == {
        'success': False,
        'message': 'Database unavailable. Set DATABASE_URL to enable persistence.',
    }


def test_unknown_route_uses_error_envelope(client) -> None:
    response = client.get('/api/nothing-here')

    assert response.status_code == 404
    assert response.json() == {'success': False, 'message': 'Not Found'}


def test_invalid_path_parameter_uses_error_envelope(client) -> None:
    response = client.get('/api/courses/not-a-number')

    assert response.status_code == 422
    assert response.json()['success'] is False
    assert 'course_id' in response.json()['message']


def test_unhandled_errors_return_generic_message(settings, database) -> None:
    app = create_app(settings, database)

    @app.get('/boom')
    def boom():
        raise RuntimeError('secret internals')

    with TestClient(app, raise_server_exceptions=False) as test_client:
        response = test_client.get('/boom')

    assert response.status_code == 500
    assert response.json() == {'success': False, 'message': 'Something went wrong!'}


def test_load_settings_reads_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv('DATABASE_URL', 'sqlite:///./portal.db')
    monkeypatch.setenv('JWT_SECRET_KEY', 'from-env')
    monkeypatch.setenv('JWT_EXPIRES_MINUTES', '30')
    monkeypatch.setenv('COOKIE_SECURE', 'yes')
    monkeypatch.setenv('CORS_ALLOWED_ORIGINS', 'https://portal.example.edu, http://localhost:5173')
    monkeypatch.setenv('ADMIN_TOKEN', 'admin-token')

    settings = load_settings()

    assert settings.database_url == 'sqlite:///./portal.db'
    assert settings.persistence_enabled
    assert settings.jwt_secret_key == 'from-env'
    assert settings.jwt_expires_minutes == 30
    assert settings.cookie_secure is True
    assert settings.cors_allowed_origins == ['https://portal.example.edu', 'http://localhost:5173']
    assert settings.admin_token == 'admin-token'


def test_load_settings_without_database_url_disables_persistence(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv('DATABASE_URL', '')

    assert not load_settings().persistence_enabled


def test_production_requires_real_jwt_secret() -> None:
    with pytest.raises(RuntimeError):
        validate_runtime_config(Settings(app_env='production'))

    validate_runtime_config(Settings(app_env='production', jwt_secret_key='a-real-secret'))


def test_create_app_refuses_default_secret_in_production() -> None:
    with pytest.raises(RuntimeError):
        create_app(Settings(app_env='production'))
