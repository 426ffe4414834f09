"""Authentication module for JWT and password handling."""

from multistore.core.auth.backend import (
    create_access_token,
    decode_token,
    hash_password,
    verify_password,
)
from multistore.core.auth.middleware import RequestIdMiddleware
from multistore.core.auth.schemas import TokenData


def get_routers():
    """Import routers lazily to avoid circular imports."""
    from multistore.core.auth.routes import router as auth_router

    return (auth_router,)


__all__ = [
    "RequestIdMiddleware",
    "TokenData",
    "create_access_token",
    "decode_token",
    "get_routers",
    "hash_password",
    "verify_password",
]
