"""Pydantic schemas for store operations."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from multistore.core.constants import MAX_SLUG_LENGTH, MIN_SLUG_LENGTH
from multistore.core.tenancy.context import ResolutionMethod


class TenantResponse(BaseModel):
    """Schema for store response data."""

    id: UUID
    name: str
    subdomain: str
    custom_domain: str | None = None
    is_active: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class CurrentTenantResponse(BaseModel):
    """The store a request resolved to and how.

    Attributes:
        tenant: Store data
        resolved_by: Addressing scheme that matched
        base_url: Public base URL of the store
        dashboard_base_path: Dashboard path prefix for client-side routing
    """

    tenant: TenantResponse
    resolved_by: ResolutionMethod
    base_url: str
    dashboard_base_path: str


class SubdomainUpdate(BaseModel):
    """Schema for renaming a store subdomain."""

    subdomain: str = Field(..., min_length=MIN_SLUG_LENGTH, max_length=MAX_SLUG_LENGTH)


class TenantStatusUpdate(BaseModel):
    """Schema for activating or deactivating a store."""

    is_active: bool
