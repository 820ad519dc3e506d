from typing import Annotated, Callable, Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from libs.auth.models import AuthUser
from libs.auth.tokens import InvalidTokenError, decode_access_token
from libs.common.errors import forbidden, unauthorized

security = HTTPBearer(auto_error=False)


async def get_current_user(
    token: Annotated[Optional[HTTPAuthorizationCredentials], Depends(security)]
) -> AuthUser:
    """
    Validate the bearer token and return the authenticated user.
    """
    if token is None:
        raise unauthorized("未提供认证令牌")
    try:
        return decode_access_token(token.credentials)
    except InvalidTokenError:
        raise unauthorized("认证令牌无效或已过期")


def require_roles(*roles: str) -> Callable:
    """Build a dependency that only lets the given roles through."""

    async def _require(
        current_user: Annotated[AuthUser, Depends(get_current_user)]
    ) -> AuthUser:
        if current_user.role not in roles:
            raise forbidden()
        return current_user

    return _require


require_admin = require_roles("admin")
require_farmer_or_admin = require_roles("farmer", "admin")
