import logging

from fastapi import APIRouter, Depends, Form, Request
from pydantic import BaseModel, ValidationError, field_validator
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from portal.auth.sessions import SessionResolver
from portal.core import config
from portal.database import get_db
from portal.models.user import Role
from portal.routes.common import see_other, storage_unavailable
from portal.services.identity import EmailAlreadyRegistered, IdentityStore
from portal.views import AuthFormView, error_message, render

router = APIRouter(tags=['auth'])

logger = logging.getLogger(__name__)


class RegisterForm(BaseModel):
    email: str
    password: str
    name: str

    @field_validator('email')
    @classmethod
    def validate_email(cls, value: str) -> str:
        normalized = value.strip().lower()
        if not normalized:
            raise ValueError('Email is required.')
        return normalized

    @field_validator('password')
    @classmethod
    def validate_password(cls, value: str) -> str:
        if not value:
            raise ValueError('Password is required.')
        return value

    @field_validator('name')
    @classmethod
    def validate_name(cls, value: str) -> str:
        normalized = value.strip()
        if not normalized:
            raise ValueError('Name is required.')
        return normalized


def _mask_email(email: str) -> str:
    local, _, domain = email.partition('@')
    return f'{local[:1]}***@{domain}' if domain else '***'


@router.get('/')
def root():
    return see_other('/login')


@router.get('/health')
def health():
    return {'status': 'Learning Portal Running'}


@router.get('/login')
def login_page(request: Request, error: str | None = None, registered: str | None = None):
    notice = 'Registration complete. Please log in.' if registered else None
    return render(request, 'login', AuthFormView(error=error_message(error), notice=notice))


@router.post('/login')
def login(
    email: str = Form(''),
    password: str = Form(''),
    db: Session = Depends(get_db),
):
    try:
        user = IdentityStore(db).authenticate(email, password)
        if user is None:
            logger.warning('Failed login for %s', _mask_email(email.strip().lower()))
            return see_other('/login', error='invalid_credentials')

        issued = SessionResolver(db).issue(user.id)
        is_admin = user.role == Role.ADMIN.value
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception('Login failed on storage access')
        raise storage_unavailable() from exc

    response = see_other('/admin' if is_admin else '/dashboard')
    response.set_cookie(
        key=config.SESSION_COOKIE_NAME,
        value=issued.token,
        max_age=config.SESSION_LIFETIME_HOURS * 3600,
        path='/',
        httponly=True,
        secure=config.SESSION_COOKIE_SECURE,
        samesite='lax',
    )
    return response


@router.get('/register')
def register_page(request: Request, error: str | None = None):
    return render(request, 'register', AuthFormView(error=error_message(error)))


@router.post('/register')
def register(
    email: str = Form(''),
    password: str = Form(''),
    name: str = Form(''),
    db: Session = Depends(get_db),
):
    try:
        data = RegisterForm(email=email, password=password, name=name)
    except ValidationError:
        return see_other('/register', error='missing_fields')

    try:
        IdentityStore(db).create_user(email=data.email, password=data.password, display_name=data.name)
    except EmailAlreadyRegistered:
        return see_other('/register', error='email_taken')
    except (SQLAlchemyError, ValueError):
        db.rollback()
        logger.exception('Registration failed for %s', _mask_email(data.email))
        return see_other('/register', error='server_error')

    return see_other('/login', registered='1')


@router.get('/logout')
def logout(request: Request, db: Session = Depends(get_db)):
    try:
        SessionResolver(db).revoke(request.cookies.get(config.SESSION_COOKIE_NAME))
    except SQLAlchemyError:
        db.rollback()
        logger.exception('Could not revoke session on logout')

    response = see_other('/login')
    response.delete_cookie(
        key=config.SESSION_COOKIE_NAME,
        path='/',
        httponly=True,
        secure=config.SESSION_COOKIE_SECURE,
        samesite='lax',
    )
    return response
