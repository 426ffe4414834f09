"""Shared API dependencies."""

from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from multistore.core.database import get_db


# Type alias for database session dependency
DBSession = Annotated[AsyncSession, Depends(get_db)]


# Tenant-scoped routes use RequiredTenant / ActiveTenant / TenantDB from
# multistore.core.tenancy.dependencies instead of a bare session.
