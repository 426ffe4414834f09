"""Authentication API routes.

Provides endpoints for:
- Registration (user plus first store)
- Login
- Current user profile
- One-time handoff code redemption
"""

from fastapi import APIRouter, status

from multistore.core.auth.dependencies import CurrentUser
from multistore.core.auth.handoff import HandoffCodes
from multistore.core.auth.service import AuthSvc, redeem_handoff_code
from multistore.modules.users.schemas import (
    AuthResponse,
    HandoffRedeemRequest,
    HandoffRedeemResponse,
    LoginRequest,
    MeResponse,
    RegisterRequest,
)


router = APIRouter(prefix="/auth", tags=["auth"])


@router.post(
    "/register",
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register new user and store",
    description="Creates a user and their first store. The response carries a handoff URL to the store dashboard.",
)
async def register(data: RegisterRequest, service: AuthSvc) -> AuthResponse:
    """Register a new user and store."""
    return await service.register(data)


@router.post(
    "/login",
    response_model=AuthResponse,
    summary="Login with email and password",
    description="Authenticate and receive an access token plus a handoff URL to a store dashboard.",
)
async def login(data: LoginRequest, service: AuthSvc) -> AuthResponse:
    """Login with email and password."""
    return await service.login(data.email, data.password, data.subdomain)


@router.get(
    "/me",
    response_model=MeResponse,
    summary="Get current user",
    description="Returns the authenticated user and every store they own.",
)
async def get_me(current_user: CurrentUser, service: AuthSvc) -> MeResponse:
    """Get current user profile."""
    return await service.me(current_user)


@router.post(
    "/handoff/redeem",
    response_model=HandoffRedeemResponse,
    summary="Redeem a handoff code",
    description="Exchanges a one-time code from a #code= handoff URL for an access token. Each code works once.",
)
async def redeem_handoff(data: HandoffRedeemRequest, codes: HandoffCodes) -> HandoffRedeemResponse:
    """Redeem a one-time handoff code."""
    return await redeem_handoff_code(codes, data.code)
