"""Catalog module - tenant-scoped categories and products."""

from fastapi import APIRouter


router = APIRouter(tags=["catalog"])


# Module metadata
__module__ = {
    "name": "catalog",
    "version": "1.0.0",
    "description": "Store catalog and public storefront listing",
    "dependencies": ["tenants"],
}


def register_routes() -> None:
    """Register routes - called after all imports are complete."""
    from multistore.modules.catalog import routes  # noqa: F401
