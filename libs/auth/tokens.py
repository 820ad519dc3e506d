"""Access token issuing and verification (HS256 JWT via python-jose)."""

from datetime import timedelta
from typing import Optional

from jose import JWTError, jwt
from pydantic import ValidationError

from libs.auth.models import AuthUser
from libs.common.config import get_settings
from libs.common.datetime_utils import utc_now


class InvalidTokenError(Exception):
    """Raised when a token is malformed, forged or expired."""


def create_access_token(
    *,
    user_id: str,
    role: str,
    phone: Optional[str] = None,
    name: Optional[str] = None,
    farmer_profile_id: Optional[str] = None,
    expires_in: Optional[timedelta] = None,
) -> str:
    settings = get_settings()
    issued_at = utc_now()
    expires_at = issued_at + (
        expires_in or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    )
    claims = {
        "sub": user_id,
        "role": role,
        "phone": phone,
        "name": name,
        "farmer_profile_id": farmer_profile_id,
        "iat": int(issued_at.timestamp()),
        "exp": int(expires_at.timestamp()),
    }
    return jwt.encode(claims, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def decode_access_token(token: str) -> AuthUser:
    settings = get_settings()
    try:
        payload = jwt.decode(
            token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM]
        )
        return AuthUser(**payload)
    except (JWTError, ValidationError) as exc:
        raise InvalidTokenError(str(exc)) from exc
