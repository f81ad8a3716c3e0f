"""
Bearer token handling.

Sessions are issued by the external account service; this module only
verifies the tokens it signs and can mint tokens for scripts and tests.
"""
from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import JWTError, jwt
from pydantic import BaseModel

from .config import settings


class TokenPayload(BaseModel):
    """Claims the marketplace relies on."""

    sub: str  # purchaser email
    is_admin: bool = False
    exp: Optional[datetime] = None

    @property
    def email(self) -> str:
        return self.sub


def create_access_token(
    email: str,
    is_admin: bool = False,
    expires_delta: Optional[timedelta] = None,
) -> str:
    """
    Create a JWT access token.

    Args:
        email: User identity encoded as the subject
        is_admin: Whether the holder may use back-office endpoints
        expires_delta: Optional expiration time delta

    Returns:
        Encoded JWT token string
    """
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.access_token_expire_minutes)

    to_encode = {
        "sub": email,
        "is_admin": is_admin,
        "exp": datetime.now(timezone.utc) + expires_delta,
    }
    return jwt.encode(to_encode, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> Optional[TokenPayload]:
    """
    Decode and validate a JWT access token.

    Returns:
        TokenPayload if valid, None if invalid or expired
    """
    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret_key,
            algorithms=[settings.jwt_algorithm],
        )
    except JWTError:
        return None

    subject = payload.get("sub")
    if not subject:
        return None

    exp = payload.get("exp")
    return TokenPayload(
        sub=subject,
        is_admin=bool(payload.get("is_admin", False)),
        exp=datetime.fromtimestamp(exp, tz=timezone.utc) if exp else None,
    )
