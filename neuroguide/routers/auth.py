"""
Authentication Router for the NeuroGuide API.

Endpoints:
- POST /auth/register - Create an account
- POST /auth/login - Exchange credentials for a JWT
- GET /auth/me - Current account
"""

import logging

from fastapi import APIRouter, Depends, Request, status
from fastapi.concurrency import run_in_threadpool

from ..account_service import authenticate_user, issue_token, register_user
from ..auth import TokenIdentity
from ..config import Settings
from ..dependencies import get_current_user, get_settings, get_user_repository
from ..exceptions import InvalidCredentialsError, NotFoundError
from ..models import LoginResponse, UserLogin, UserRegister, UserResponse
from ..rate_limit import AUTH_RATE_LIMIT, limiter
from ..repository import UserRepository

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/auth",
    tags=["authentication"],
    responses={401: {"description": "Unauthorized"}},
)


@router.post("/register", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit(AUTH_RATE_LIMIT)
async def register(
    request: Request,
    user_create: UserRegister,
    users: UserRepository = Depends(get_user_repository),
) -> UserResponse:
    """
    Register a new user.

    Raises:
        ConflictError 409: if the email is already registered
    """
    user = await run_in_threadpool(
        register_user, users, user_create.email, user_create.password, user_create.name
    )
    return UserResponse.model_validate(user)


@router.post("/login", response_model=LoginResponse)
@limiter.limit(AUTH_RATE_LIMIT)
async def login(
    request: Request,
    credentials: UserLogin,
    users: UserRepository = Depends(get_user_repository),
    settings: Settings = Depends(get_settings),
) -> LoginResponse:
    """
    Log in and receive a JWT.

    Unknown email and wrong password produce the same 401.
    """
    user = await run_in_threadpool(authenticate_user, users, credentials.email, credentials.password)
    if user is None:
        logger.info("Failed login attempt")
        raise InvalidCredentialsError()

    logger.info(f"User logged in: {user.id}")
    return LoginResponse(user=UserResponse.model_validate(user), token=issue_token(user, settings))


@router.get("/me", response_model=UserResponse)
def me(
    current_user: TokenIdentity = Depends(get_current_user),
    users: UserRepository = Depends(get_user_repository),
) -> UserResponse:
    """Account behind the presented token; 404 if it has since been removed."""
    user = users.get_by_id(current_user.user_id)
    if user is None:
        raise NotFoundError("User")
    return UserResponse.model_validate(user)
