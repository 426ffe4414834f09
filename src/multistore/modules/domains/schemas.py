"""Pydantic schemas for custom domain operations."""

from datetime import datetime

from pydantic import BaseModel, Field

from multistore.core.constants import MAX_DOMAIN_LENGTH
from multistore.modules.domains.models import ChallengeMethod


class ChallengeRequest(BaseModel):
    """Schema for starting domain verification."""

    domain: str = Field(..., min_length=1, max_length=MAX_DOMAIN_LENGTH)
    method: ChallengeMethod = ChallengeMethod.TXT


class ChallengeResponse(BaseModel):
    """DNS record the owner has to publish."""

    domain: str
    method: ChallengeMethod
    record_name: str
    record_type: str
    record_value: str
    expires_at: datetime


class VerifyRequest(BaseModel):
    """Schema for checking a pending challenge."""

    domain: str = Field(..., min_length=1, max_length=MAX_DOMAIN_LENGTH)


class DomainStatusResponse(BaseModel):
    """Custom domain attached to the store."""

    custom_domain: str | None
    status: str
