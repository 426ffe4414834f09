"""Passwords and access tokens.

An access token names a user and the platform that issued it. It does
not name a store: the same token is valid on every store origin the
user reaches, and what it may do there is decided per request from the
resolved store (``TenantOwner``).
"""

import secrets
from datetime import UTC, datetime, timedelta
from uuid import UUID

from jose import JWTError, jwt
from passlib.context import CryptContext

from multistore.config import Settings, settings
from multistore.core.auth.schemas import TokenData
from multistore.core.constants import (
    ACCESS_TOKEN_JTI_LENGTH,
    BCRYPT_ROUNDS,
    LOGGED_TOKEN_PREFIX,
)


pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=BCRYPT_ROUNDS,
)

ACCESS_TOKEN_TYPE = "access"


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def token_issuer(config: Settings | None = None) -> str:
    """``iss`` claim of tokens minted by this platform deployment."""
    return (config or settings).platform_root_domain


def create_access_token(user_id: UUID, expires_delta: timedelta | None = None) -> str:
    """Mint an access token for a user.

    Args:
        user_id: The user's UUID
        expires_delta: Lifetime, defaults to ``ACCESS_TOKEN_EXPIRE_MINUTES``
    """
    issued_at = datetime.now(UTC)
    lifetime = expires_delta or timedelta(minutes=settings.access_token_expire_minutes)

    claims = {
        "sub": str(user_id),
        "iss": token_issuer(),
        "iat": issued_at,
        "exp": issued_at + lifetime,
        "type": ACCESS_TOKEN_TYPE,
        "jti": secrets.token_urlsafe(ACCESS_TOKEN_JTI_LENGTH),
    }
    return jwt.encode(claims, settings.secret_key, algorithm=settings.jwt_algorithm)


def decode_token(token: str) -> TokenData | None:
    """Validate a token's signature, expiry and issuer.

    Returns:
        TokenData, or None for any token this platform should not accept
    """
    try:
        payload = jwt.decode(
            token,
            settings.secret_key,
            algorithms=[settings.jwt_algorithm],
            issuer=token_issuer(),
        )
        return TokenData(
            user_id=UUID(payload["sub"]),
            exp=datetime.fromtimestamp(payload["exp"], tz=UTC),
            type=payload.get("type", ACCESS_TOKEN_TYPE),
            jti=payload.get("jti"),
        )
    except (JWTError, KeyError, ValueError):
        return None


def token_preview(token: str) -> str:
    """Shorten a token for log output."""
    return f"{token[:LOGGED_TOKEN_PREFIX]}..."
