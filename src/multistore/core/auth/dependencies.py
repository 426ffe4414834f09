"""Authentication dependencies.

Authentication answers who the caller is. Whether they may act on the
resolved store is a separate check (``TenantOwner`` in
``multistore.core.tenancy.dependencies``).
"""

from typing import Annotated

import structlog
from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from multistore.api.dependencies import DBSession
from multistore.core.auth.backend import ACCESS_TOKEN_TYPE, decode_token
from multistore.core.auth.schemas import TokenData
from multistore.core.errors import ForbiddenError, UnauthorizedError
from multistore.modules.users.models import User
from multistore.modules.users.repos import UserRepository


bearer_scheme = HTTPBearer(auto_error=False)

Credentials = Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)]


async def get_token_data(credentials: Credentials) -> TokenData:
    """Validated claims of the bearer token.

    Raises:
        UnauthorizedError: If the token is missing, invalid, or not an
            access token
    """
    if credentials is None:
        raise UnauthorizedError("Missing authentication token", error_code="missing_token")

    token_data = decode_token(credentials.credentials)
    if token_data is None:
        raise UnauthorizedError("Invalid or expired token", error_code="invalid_token")
    if token_data.type != ACCESS_TOKEN_TYPE:
        raise UnauthorizedError("Invalid token type", error_code="invalid_token_type")
    return token_data


async def get_current_user(
    request: Request,
    token_data: Annotated[TokenData, Depends(get_token_data)],
    db: DBSession,
) -> User:
    """The authenticated user, bound to the request's log context.

    Raises:
        UnauthorizedError: If the user no longer exists
        ForbiddenError: If the user is deactivated
    """
    user = await UserRepository(db).get_by_id(token_data.user_id)
    if user is None:
        raise UnauthorizedError("User not found", error_code="user_not_found")
    if not user.is_active:
        raise ForbiddenError("User account is deactivated", error_code="user_inactive")

    request.state.user_id = user.id
    structlog.contextvars.bind_contextvars(user_id=str(user.id))
    return user


async def get_platform_admin(user: Annotated[User, Depends(get_current_user)]) -> User:
    """Require a platform admin, who may act on any store.

    Raises:
        ForbiddenError: If the user is a store owner
    """
    if not user.is_platform_admin:
        raise ForbiddenError(
            "Platform admin privileges required",
            error_code="not_platform_admin",
        )
    return user


CurrentUser = Annotated[User, Depends(get_current_user)]
PlatformAdmin = Annotated[User, Depends(get_platform_admin)]
