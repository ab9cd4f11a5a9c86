import os
from dataclasses import dataclass, field

from dotenv import load_dotenv


DEFAULT_JWT_SECRET = "change-me"


def _get_bool(value: str | None, default: bool = False) -> bool:
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _get_list(value: str | None, default: list[str]) -> list[str]:
    if value is None:
        return list(default)
    return [item.strip() for item in value.split(",") if item.strip()]


@dataclass(frozen=True)
class Settings:
    """Process configuration, built once at startup and handed to the app."""

    database_url: str | None = None
    jwt_secret_key: str = DEFAULT_JWT_SECRET
    jwt_algorithm: str = "HS256"
    jwt_expires_minutes: int = 60 * 24 * 7
    cookie_name: str = "token"
    cookie_secure: bool = False
    cors_allowed_origins: list[str] = field(default_factory=lambda: ["http://localhost:5173"])
    admin_token: str | None = None
    app_env: str = "development"
    log_level: str = "INFO"

    @property
    def persistence_enabled(self) -> bool:
        return bool(self.database_url)


def load_settings(env_file: str | None = None) -> Settings:
    load_dotenv(env_file)
    return Settings(
        database_url=os.getenv("DATABASE_URL") or None,
        jwt_secret_key=os.getenv("JWT_SECRET_KEY", DEFAULT_JWT_SECRET),
        jwt_algorithm=os.getenv("JWT_ALGORITHM", "HS256"),
        jwt_expires_minutes=int(os.getenv("JWT_EXPIRES_MINUTES", str(60 * 24 * 7))),
        cookie_secure=_get_bool(os.getenv("COOKIE_SECURE"), default=False),
        cors_allowed_origins=_get_list(os.getenv("CORS_ALLOWED_ORIGINS"), ["http://localhost:5173"]),
        admin_token=os.getenv("ADMIN_TOKEN") or None,
        app_env=os.getenv("APP_ENV", "development"),
        log_level=os.getenv("LOG_LEVEL", "INFO"),
    )


def validate_runtime_config(settings: Settings) -> None:
    if settings.app_env.lower() == "production" and settings.jwt_secret_key == DEFAULT_JWT_SECRET:
        raise RuntimeError("JWT_SECRET_KEY must be set in production.")
