"""
Account registration and credential checks.
"""

import logging
from functools import lru_cache
from typing import Optional

from .auth import TokenIdentity, create_access_token, hash_password, verify_password
from .config import Settings
from .db_models import DBUser
from .exceptions import ConflictError
from .repository import UserRepository

logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def _dummy_hash() -> str:
    return hash_password("neuroguide-timing-equalizer")


def register_user(users: UserRepository, email: str, password: str, name: str) -> DBUser:
    """
    Create an account.

    Raises:
        ConflictError: if the email is already registered
    """
    if users.get_by_email(email) is not None:
        raise ConflictError("User already exists")

    user = users.create(email=email, hashed_password=hash_password(password), name=name)
    logger.info(f"User registered: {user.id}")
    return user


def authenticate_user(users: UserRepository, email: str, password: str) -> Optional[DBUser]:
    """
    Return the user for valid credentials, else None.

    Unknown emails still pay for one bcrypt comparison so response timing
    does not reveal which emails are registered.
    """
    user = users.get_by_email(email)
    if user is None:
        verify_password(password, _dummy_hash())
        return None
    if not verify_password(password, user.hashed_password):
        return None
    return user


def issue_token(user: DBUser, settings: Settings) -> str:
    identity = TokenIdentity(user_id=user.id, email=user.email, name=user.name)
    return create_access_token(identity, settings.secret_key, settings.token_expire_minutes)
