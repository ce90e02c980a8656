import logging

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel, EmailStr, field_validator
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from backend.auth import jwt_handler
from backend.auth.dependencies import get_current_user
from backend.auth.passwords import hash_password, verify_password
from backend.core import config
from backend.database import get_db
from backend.models.user import ROLE_USER, User

router = APIRouter(tags=['auth'])

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6


class RegisterRequest(BaseModel):
    name: str
    email: EmailStr
    password: str
    telephone_number: str

    @field_validator('name')
    @classmethod
    def validate_name(cls, value: str) -> str:
        normalized = value.strip()
        if not normalized:
            raise ValueError('Please add a name.')
        return normalized

    @field_validator('email')
    @classmethod
    def normalize_email(cls, value: str) -> str:
        return value.strip().lower()

    @field_validator('password')
    @classmethod
    def validate_password(cls, value: str) -> str:
        if len(value) < MIN_PASSWORD_LENGTH:
            raise ValueError(f'Password must be at least {MIN_PASSWORD_LENGTH} characters.')
        return value

    @field_validator('telephone_number')
    @classmethod
    def validate_telephone_number(cls, value: str) -> str:
        normalized = value.strip()
        if not normalized:
            raise ValueError('Please add a telephone number.')
        return normalized


class LoginRequest(BaseModel):
    email: EmailStr
    password: str

    @field_validator('email')
    @classmethod
    def normalize_email(cls, value: str) -> str:
        return value.strip().lower()


class UserResponse(BaseModel):
    id: int
    name: str
    email: str
    role: str
    telephone_number: str | None = None

    class Config:
        from_attributes = True


def token_response(user: User, status_code: int = status.HTTP_200_OK) -> JSONResponse:
    token = jwt_handler.create_access_token(subject=str(user.id), role=user.role)
    response = JSONResponse(status_code=status_code, content={'success': True, 'token': token})
    response.set_cookie(
        key=config.AUTH_COOKIE_NAME,
        value=token,
        max_age=config.JWT_EXPIRES_MINUTES * 60,
        httponly=True,
        secure=config.AUTH_COOKIE_SECURE,
        samesite='lax',
    )
    return response


@router.post('/register')
def register(data: RegisterRequest, db: Session = Depends(get_db)):
    try:
        if db.query(User).filter(User.email == data.email).first():
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail='An account with this email already exists.',
            )

        user = User(
            name=data.name,
            email=data.email,
            hashed_password=hash_password(data.password),
            role=ROLE_USER,
            telephone_number=data.telephone_number,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
    except IntegrityError as exc:
        db.rollback()
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail='An account with this email already exists.',
        ) from exc
    except SQLAlchemyError as exc:
        db.rollback()
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail='Database unavailable. Verify DATABASE_URL and database credentials.',
        ) from exc

    logger.info('Registered user %s', user.id)
    return token_response(user, status_code=status.HTTP_201_CREATED)


@router.post('/login')
def login(data: LoginRequest, db: Session = Depends(get_db)):
    try:
        user = db.query(User).filter(User.email == data.email).first()
    except SQLAlchemyError as exc:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail='Database unavailable. Verify DATABASE_URL and database credentials.',
        ) from exc

    if user is None or not verify_password(data.password, user.hashed_password):
        logger.warning('Failed login for %s', data.email)
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail='Invalid credentials')

    return token_response(user)


@router.get('/me')
def me(current_user: User = Depends(get_current_user)):
    return {'success': True, 'data': UserResponse.model_validate(current_user)}


@router.post('/logout')
def logout():
    response = JSONResponse(content={'success': True, 'data': {}})
    response.delete_cookie(config.AUTH_COOKIE_NAME)
    return response
