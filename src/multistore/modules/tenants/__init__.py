"""Tenants module - stores and their addressing."""

from fastapi import APIRouter


router = APIRouter(prefix="/tenants", tags=["tenants"])


# Module metadata
__module__ = {
    "name": "tenants",
    "version": "1.0.0",
    "description": "Stores, subdomains, and store status",
    "dependencies": ["users"],
}


def register_routes() -> None:
    """Register routes - called after all imports are complete."""
    from multistore.modules.tenants import routes  # noqa: F401
