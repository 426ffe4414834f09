"""Catalog repositories.

Both repositories work through a ``TenantSession``, so every read is
filtered by the resolved store and every write is stamped with it.
"""

from typing import Annotated
from uuid import UUID

from fastapi import Depends
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from multistore.core.errors import ConflictError
from multistore.core.tenancy.dependencies import TenantDB
from multistore.modules.catalog.models import Category, Product


class CategoryRepository:
    """Repository for Category database operations."""

    def __init__(self, session: TenantDB) -> None:
        self.session = session

    async def list_all(self) -> list[Category]:
        """Categories of the store, by name."""
        return await self.session.scalars(select(Category).order_by(Category.name))

    async def get(self, category_id: UUID) -> Category | None:
        """Get a category of the store by ID."""
        return await self.session.get(Category, category_id)

    async def create(self, category: Category) -> Category:
        """Create a category in the store.

        Raises:
            ConflictError: If the store already has a category of that name
        """
        self.session.add(category)
        try:
            await self.session.flush()
        except IntegrityError as exc:
            raise ConflictError(
                "Category already exists",
                error_code="category_exists",
                details={"name": category.name},
            ) from exc
        await self.session.refresh(category)
        return category


class ProductRepository:
    """Repository for Product database operations."""

    def __init__(self, session: TenantDB) -> None:
        self.session = session

    async def list_all(self, published_only: bool = False) -> list[Product]:
        """Products of the store, newest first."""
        stmt = select(Product).order_by(Product.created_at.desc(), Product.name)
        if published_only:
            stmt = stmt.where(Product.is_published.is_(True))
        return await self.session.scalars(stmt)

    async def create(self, product: Product) -> Product:
        """Create a product in the store."""
        self.session.add(product)
        await self.session.flush()
        await self.session.refresh(product)
        return product


# Type aliases for dependency injection
CategoryRepo = Annotated[CategoryRepository, Depends(CategoryRepository)]
ProductRepo = Annotated[ProductRepository, Depends(ProductRepository)]
