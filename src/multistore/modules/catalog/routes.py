"""Catalog API routes.

``/catalog/*`` is the owner-facing dashboard API; ``/storefront/*`` is
public and only served for active stores.
"""

from fastapi import status

from multistore.core.errors import NotFoundError
from multistore.core.tenancy.dependencies import ActiveTenant, TenantOwner
from multistore.modules.catalog import router
from multistore.modules.catalog.models import Category, Product
from multistore.modules.catalog.repos import CategoryRepo, ProductRepo
from multistore.modules.catalog.schemas import (
    CategoryCreate,
    CategoryResponse,
    ProductCreate,
    ProductResponse,
)


@router.get(
    "/storefront/products",
    response_model=list[ProductResponse],
    summary="List published products",
    description="Public listing of the resolved store. Returns 403 for inactive stores.",
)
async def list_storefront_products(
    _context: ActiveTenant,
    products: ProductRepo,
) -> list[ProductResponse]:
    """List published products of the resolved store."""
    items = await products.list_all(published_only=True)
    return [ProductResponse.model_validate(item) for item in items]


@router.get(
    "/catalog/categories",
    response_model=list[CategoryResponse],
    summary="List categories",
)
async def list_categories(_owner: TenantOwner, categories: CategoryRepo) -> list[CategoryResponse]:
    """List categories of the resolved store."""
    items = await categories.list_all()
    return [CategoryResponse.model_validate(item) for item in items]


@router.post(
    "/catalog/categories",
    response_model=CategoryResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a category",
)
async def create_category(
    data: CategoryCreate,
    _owner: TenantOwner,
    categories: CategoryRepo,
) -> CategoryResponse:
    """Create a category in the resolved store."""
    category = await categories.create(Category(name=data.name))
    return CategoryResponse.model_validate(category)


@router.get(
    "/catalog/products",
    response_model=list[ProductResponse],
    summary="List products",
)
async def list_products(_owner: TenantOwner, products: ProductRepo) -> list[ProductResponse]:
    """List all products of the resolved store, published or not."""
    items = await products.list_all()
    return [ProductResponse.model_validate(item) for item in items]


@router.post(
    "/catalog/products",
    response_model=ProductResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a product",
)
async def create_product(
    data: ProductCreate,
    _owner: TenantOwner,
    categories: CategoryRepo,
    products: ProductRepo,
) -> ProductResponse:
    """Create a product in the resolved store.

    A category of another store is reported as missing.
    """
    if data.category_id is not None and await categories.get(data.category_id) is None:
        raise NotFoundError(
            "Category not found",
            resource="category",
            resource_id=str(data.category_id),
        )
    product = await products.create(
        Product(
            name=data.name,
            description=data.description,
            category_id=data.category_id,
            is_published=data.is_published,
        )
    )
    return ProductResponse.model_validate(product)
