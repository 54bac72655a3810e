import logging

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, model_validator
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from backend.auth.dependencies import get_current_user
from backend.auth.jwt_handler import TokenService, get_token_service
from backend.auth.passwords import hash_password, verify_password
from backend.database import get_db
from backend.models.user import ROLES, User
from backend.repositories import users

router = APIRouter(tags=['auth'])

logger = logging.getLogger(__name__)

INTERNAL_ERROR_DETAIL = 'Internal server error'


class SignupRequest(BaseModel):
    email: str | None = None
    password: str | None = None
    role: str | None = None
    name: str | None = None

    @model_validator(mode='after')
    def validate_fields(self) -> 'SignupRequest':
        if not all([self.email, self.password, self.role, self.name]):
            raise ValueError('All fields are required')
        if self.role not in ROLES:
            raise ValueError('Role must be student or teacher')
        return self


class LoginRequest(BaseModel):
    email: str | None = None
    password: str | None = None

    @model_validator(mode='after')
    def validate_fields(self) -> 'LoginRequest':
        if not self.email or not self.password:
            raise ValueError('Email and password are required')
        return self


class UserResponse(BaseModel):
    id: int
    email: str
    role: str
    name: str

    class Config:
        from_attributes = True


class AuthResponse(BaseModel):
    token: str
    user: UserResponse


@router.post('/signup', response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def signup(
    data: SignupRequest,
    db: Session = Depends(get_db),
    tokens: TokenService = Depends(get_token_service),
):
    try:
        user_id = users.create_user(data.email, hash_password(data.password), data.role, data.name, db)
        user = users.get_user_by_id(user_id, db)
    except users.DuplicateEmailError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail='Email already registered',
        ) from exc
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception('Signup failed')
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=INTERNAL_ERROR_DETAIL,
        ) from exc

    logger.info('Registered %s user %s', user.role, user.id)
    return AuthResponse(token=tokens.issue(user), user=UserResponse.model_validate(user))


@router.post('/login', response_model=AuthResponse)
def login(
    data: LoginRequest,
    db: Session = Depends(get_db),
    tokens: TokenService = Depends(get_token_service),
):
    try:
        user = users.get_user_by_email(data.email, db)
    except SQLAlchemyError as exc:
        logger.exception('Login lookup failed')
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=INTERNAL_ERROR_DETAIL,
        ) from exc

    if user is None or not verify_password(data.password, user.password_hash):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail='Invalid credentials')

    logger.info('User %s logged in', user.id)
    return AuthResponse(token=tokens.issue(user), user=UserResponse.model_validate(user))


@router.get('/me', response_model=UserResponse)
def me(current_user: User = Depends(get_current_user)):
    return current_user
