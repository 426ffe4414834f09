"""Tenant-scoped database session.

This module provides a session wrapper that automatically
filters all queries by tenant_id for multi-tenancy support.
"""

from typing import TYPE_CHECKING, Any
from uuid import UUID

from sqlalchemy import Select
from sqlalchemy.ext.asyncio import AsyncSession

from multistore.core.errors import ForbiddenError


if TYPE_CHECKING:
    from sqlalchemy.sql import ColumnElement

    from multistore.core.tenancy.context import TenantContext


class TenantSession:
    """Wraps AsyncSession with automatic tenant filtering.

    This class ensures that all database operations are scoped
    to the resolved tenant, preventing cross-tenant data access.

    Usage:
        tenant_session = TenantSession.for_context(session, context)
        result = await tenant_session.execute(select(Product))
    """

    def __init__(self, session: AsyncSession, tenant_id: UUID) -> None:
        self.session = session
        self.tenant_id = tenant_id

    @classmethod
    def for_context(cls, session: AsyncSession, context: "TenantContext") -> "TenantSession":
        """Bind a session to the tenant of a resolved request context."""
        return cls(session, context.tenant.id)

    def _apply_tenant_filter(self, statement: Select[Any], model: Any) -> Select[Any]:
        """Apply tenant_id filter to a select statement."""
        if hasattr(model, "tenant_id"):
            tenant_column: ColumnElement[UUID] = model.tenant_id
            return statement.where(tenant_column == self.tenant_id)
        return statement

    async def execute(self, statement: Select[Any]) -> Any:
        """Execute a statement with automatic tenant filtering.

        Only the primary entity of the statement is filtered; joined
        tenant-scoped entities must be constrained by the caller.
        """
        if hasattr(statement, "column_descriptions") and statement.column_descriptions:
            for desc in statement.column_descriptions:
                entity = desc.get("entity")
                if entity is not None:
                    statement = self._apply_tenant_filter(statement, entity)
                    break

        return await self.session.execute(statement)

    async def scalars(self, statement: Select[Any]) -> list[Any]:
        """Execute a tenant-filtered select and return the scalar rows."""
        result = await self.execute(statement)
        return list(result.scalars().all())

    async def get(self, entity: type[Any], ident: Any) -> Any | None:
        """Get an entity by ID, scoped to tenant."""
        obj = await self.session.get(entity, ident)
        if (
            obj is not None
            and hasattr(obj, "tenant_id")
            and obj.tenant_id != self.tenant_id
        ):
            return None
        return obj

    def add(self, instance: Any) -> None:
        """Add an instance, stamping it with the bound tenant.

        Raises:
            ForbiddenError: If the instance already belongs to another tenant
        """
        if hasattr(instance, "tenant_id"):
            if instance.tenant_id is None:
                instance.tenant_id = self.tenant_id
            elif instance.tenant_id != self.tenant_id:
                raise ForbiddenError(
                    "Cross-tenant write rejected",
                    error_code="cross_tenant_write",
                )
        self.session.add(instance)

    async def flush(self) -> None:
        """Flush pending changes to the database."""
        await self.session.flush()

    async def refresh(self, instance: Any) -> None:
        """Refresh an instance from the database."""
        await self.session.refresh(instance)
