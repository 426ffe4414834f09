"""Authentication service for login, registration, and session handoff."""

from typing import Annotated

import structlog
from fastapi import Depends

from multistore.api.dependencies import DBSession
from multistore.config import settings
from multistore.core.auth.backend import (
    create_access_token,
    hash_password,
    token_preview,
    verify_password,
)
from multistore.core.auth.handoff import HandoffCodeStore, Issuer
from multistore.core.errors import ConflictError, ForbiddenError, UnauthorizedError
from multistore.modules.tenants.models import Tenant
from multistore.modules.tenants.repos import TenantRepository
from multistore.modules.tenants.services import TenantService
from multistore.modules.users.models import Role, User
from multistore.modules.users.repos import UserRepository
from multistore.modules.users.schemas import (
    AuthResponse,
    HandoffRedeemResponse,
    MeResponse,
    RegisterRequest,
    StoreSummary,
    UserResponse,
)


logger = structlog.get_logger()


class AuthService:
    """Service for authentication operations.

    Handles registration, login, and the cross-domain handoff that moves
    the new session from the platform root onto the store origin.
    """

    def __init__(self, db: DBSession, issuer: Issuer) -> None:
        self.db = db
        self.issuer = issuer
        self.user_repo = UserRepository(db)
        self.tenant_repo = TenantRepository(db)
        self.tenants = TenantService(self.tenant_repo)

    async def register(self, data: RegisterRequest) -> AuthResponse:
        """Register a new user together with their first store.

        Raises:
            ConflictError: If the email or subdomain is taken
            InvalidSlugError: If the subdomain breaks the naming policy
        """
        # Generic message to prevent email enumeration
        if await self.user_repo.get_by_email(data.email):
            raise ConflictError(
                "Registration failed. If this email is already registered, please use the login page.",
                error_code="registration_failed",
            )

        user = await self.user_repo.create(
            User(
                email=data.email,
                password_hash=hash_password(data.password),
                full_name=data.full_name,
                role=Role.STORE_OWNER,
            )
        )
        tenant = await self.tenants.create_store(data.store_name, data.subdomain, user.id)

        logger.info("user_registered", user_id=str(user.id), tenant_id=str(tenant.id))
        return await self._session_response(user, tenant)

    async def login(
        self,
        email: str,
        password: str,
        subdomain: str | None = None,
    ) -> AuthResponse:
        """Authenticate a user with email and password.

        Args:
            email: User's email address
            password: Plain text password
            subdomain: Store to hand the session off to

        Raises:
            UnauthorizedError: If credentials are invalid
            ForbiddenError: If the user may not enter the requested store
        """
        user = await self.user_repo.get_by_email(email)
        if not user or not verify_password(password, user.password_hash):
            raise UnauthorizedError(
                "Invalid email or password",
                error_code="invalid_credentials",
            )

        if not user.is_active:
            raise UnauthorizedError(
                "Account is deactivated",
                error_code="account_inactive",
            )

        tenant = await self._handoff_target(user, subdomain)
        logger.info(
            "user_logged_in",
            user_id=str(user.id),
            tenant_id=str(tenant.id) if tenant else None,
        )
        return await self._session_response(user, tenant)

    async def me(self, user: User) -> MeResponse:
        """Profile of the current user and their stores."""
        tenants = await self.tenant_repo.list_by_owner(user.id)
        return MeResponse(
            user=UserResponse.model_validate(user),
            stores=[StoreSummary.model_validate(tenant) for tenant in tenants],
        )

    async def _handoff_target(self, user: User, subdomain: str | None) -> Tenant | None:
        owned = await self.tenant_repo.list_by_owner(user.id)
        if subdomain is None:
            return owned[0] if owned else None

        slug = subdomain.strip().lower()
        for tenant in owned:
            if tenant.subdomain == slug:
                return tenant

        if user.is_platform_admin:
            tenant = await self.tenant_repo.find_by_subdomain(slug)
            if tenant is not None:
                return tenant

        raise ForbiddenError(
            "Access denied: not the store owner",
            error_code="not_store_owner",
        )

    async def _session_response(self, user: User, tenant: Tenant | None) -> AuthResponse:
        token = create_access_token(user.id)
        handoff_url = await self.issuer.handoff_url(tenant, token) if tenant else None
        if handoff_url:
            logger.info(
                "handoff_issued",
                user_id=str(user.id),
                tenant_id=str(tenant.id) if tenant else None,
                mode=self.issuer.mode,
                token=token_preview(token),
            )
        return AuthResponse(
            user=UserResponse.model_validate(user),
            access_token=token,
            expires_in=settings.access_token_expire_minutes * 60,
            store=StoreSummary.model_validate(tenant) if tenant else None,
            handoff_url=handoff_url,
        )


async def redeem_handoff_code(codes: HandoffCodeStore, code: str) -> HandoffRedeemResponse:
    """Exchange a one-time handoff code for the access token behind it.

    Raises:
        UnauthorizedError: If the code is unknown, used, or expired
    """
    payload = await codes.redeem(code)
    if payload is None:
        raise UnauthorizedError(
            "Invalid or expired handoff code",
            error_code="invalid_handoff_code",
        )
    return HandoffRedeemResponse(
        access_token=payload["token"],
        subdomain=payload["subdomain"],
    )


# Type alias for dependency injection
AuthSvc = Annotated[AuthService, Depends(AuthService)]

