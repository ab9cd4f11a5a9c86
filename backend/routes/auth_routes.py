import logging
import re

from fastapi import APIRouter, HTTPException, Response, status
from pydantic import BaseModel, ConfigDict, field_validator
from pydantic.alias_generators import to_camel
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from backend.auth import jwt_handler
from backend.auth.dependencies import CurrentUser, DbSession, SettingsDep
from backend.auth.passwords import hash_password, verify_password
from backend.core.config import Settings
from backend.core.errors import store_error
from backend.models.user import Role, User
from backend.schemas import MessageEnvelope, UserEnvelope, build_user_response

router = APIRouter(tags=['auth'])

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6
EMAIL_PATTERN = re.compile(r'^[^@\s]+@[^@\s]+\.[^@\s]+$')


def normalize_email(value: str) -> str:
    normalized = value.strip().lower()
    if not EMAIL_PATTERN.match(normalized):
        raise ValueError('Please provide a valid email address.')
    return normalized


class RegisterRequest(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    name: str
    email: str
    password: str
    role: Role = Role.STUDENT
    admin_token: str | None = None

    @field_validator('name')
    @classmethod
    def validate_name(cls, value: str) -> str:
        normalized = value.strip()
        if not normalized:
            raise ValueError('Name is required.')
        return normalized

    @field_validator('email')
    @classmethod
    def validate_email(cls, value: str) -> str:
        return normalize_email(value)

    @field_validator('password')
    @classmethod
    def validate_password(cls, value: str) -> str:
        if len(value) < MIN_PASSWORD_LENGTH:
            raise ValueError(f'Password must be at least {MIN_PASSWORD_LENGTH} characters.')
        return value


class LoginRequest(BaseModel):
    email: str
    password: str

    @field_validator('email')
    @classmethod
    def validate_email(cls, value: str) -> str:
        return value.strip().lower()


def set_auth_cookie(response: Response, user: User, settings: Settings) -> None:
    token = jwt_handler.create_access_token(subject=str(user.id), settings=settings)
    response.set_cookie(
        key=settings.cookie_name,
        value=token,
        max_age=settings.jwt_expires_minutes * 60,
        httponly=True,
        secure=settings.cookie_secure,
        samesite='lax',
        path='/',
    )


def clear_auth_cookie(response: Response, settings: Settings) -> None:
    response.delete_cookie(
        key=settings.cookie_name,
        httponly=True,
        secure=settings.cookie_secure,
        samesite='lax',
        path='/',
    )


def check_admin_registration(data: RegisterRequest, settings: Settings) -> None:
    if data.role is not Role.ADMIN:
        return
    if not settings.admin_token or data.admin_token != settings.admin_token:
        logger.warning('Rejected admin registration for %s', data.email)
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail='Admin registration requires a valid admin token.',
        )


@router.post('/register', response_model=UserEnvelope, status_code=status.HTTP_201_CREATED)
def register(data: RegisterRequest, response: Response, db: DbSession, settings: SettingsDep):
    check_admin_registration(data, settings)

    try:
        existing = db.query(User).filter(User.email == data.email).first()
        if existing:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail='User already exists.',
            )

        user = User(
            name=data.name,
            email=data.email,
            hashed_password=hash_password(data.password),
            role=data.role,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
    except IntegrityError as exc:
        db.rollback()
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail='User already exists.',
        ) from exc
    except SQLAlchemyError as exc:
        db.rollback()
        raise store_error(exc) from exc

    logger.info('Registered %s user %s', user.role.value, user.id)
    set_auth_cookie(response, user, settings)
    return UserEnvelope(message='User registered successfully.', user=build_user_response(user))


@router.post('/login', response_model=UserEnvelope)
def login(data: LoginRequest, response: Response, db: DbSession, settings: SettingsDep):
    try:
        user = db.query(User).filter(User.email == data.email).first()
    except SQLAlchemyError as exc:
        raise store_error(exc) from exc

    if user is None or not verify_password(data.password, user.hashed_password):
        logger.info('Failed login attempt for %s', data.email)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail='Invalid email or password.',
        )

    set_auth_cookie(response, user, settings)
    return UserEnvelope(message='Login successful.', user=build_user_response(user))


@router.post('/logout', response_model=MessageEnvelope)
def logout(response: Response, settings: SettingsDep):
    clear_auth_cookie(response, settings)
    return MessageEnvelope(message='Logged out successfully.')


@router.get('/me', response_model=UserEnvelope, response_model_exclude_none=True)
def me(current_user: CurrentUser):
    return UserEnvelope(user=build_user_response(current_user))
