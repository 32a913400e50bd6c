"""
Authentication Module for the NeuroGuide backend.

Provides:
- Password hashing (bcrypt, cost factor 10)
- JWT token creation and verification (HS256)

The signing secret and TTL come from Settings and are passed in by the caller,
so one process can host applications with different secrets (tests do).
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Dict

from jose import JWTError, jwt
from passlib.context import CryptContext

from .constants import BCRYPT_ROUNDS, DEFAULT_TOKEN_EXPIRE_MINUTES, JWT_ALGORITHM

# =============================================================================
# Password Hashing
# =============================================================================

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=BCRYPT_ROUNDS)


def hash_password(password: str) -> str:
    """Hash a password with a fresh per-user salt."""
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """
    Verify a password against its hash.

    Returns False for malformed hashes instead of raising.
    """
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except ValueError:
        return False


# =============================================================================
# JWT Token Management
# =============================================================================

@dataclass(frozen=True)
class TokenIdentity:
    """Claims every access token carries."""
    user_id: str
    email: str
    name: str


def create_access_token(
    identity: TokenIdentity,
    secret_key: str,
    expire_minutes: int = DEFAULT_TOKEN_EXPIRE_MINUTES,
) -> str:
    """
    Create a signed JWT for the given identity.

    Claims: sub and userId (same value), email, name, iat, exp.
    A non-positive expire_minutes yields an already expired token.
    """
    now = datetime.now(timezone.utc)
    claims = {
        "sub": identity.user_id,
        "userId": identity.user_id,
        "email": identity.email,
        "name": identity.name,
        "iat": int(now.timestamp()),
        "exp": int((now + timedelta(minutes=expire_minutes)).timestamp()),
    }
    return jwt.encode(claims, secret_key, algorithm=JWT_ALGORITHM)


def decode_access_token(token: str, secret_key: str) -> Dict[str, Any]:
    """
    Decode and verify a JWT (signature and expiry).

    Raises:
        ValueError: if the token is invalid, expired or lacks a user id
    """
    try:
        payload = jwt.decode(token, secret_key, algorithms=[JWT_ALGORITHM])
    except JWTError as e:
        raise ValueError("Invalid token") from e

    if not payload.get("userId"):
        raise ValueError("Token has no user id")
    return payload


def identity_from_claims(claims: Dict[str, Any]) -> TokenIdentity:
    return TokenIdentity(
        user_id=str(claims["userId"]),
        email=str(claims.get("email", "")),
        name=str(claims.get("name", "")),
    )
