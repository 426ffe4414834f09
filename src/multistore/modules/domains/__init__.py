"""Domains module - custom domain verification."""

from fastapi import APIRouter


router = APIRouter(prefix="/domains", tags=["domains"])


# Module metadata
__module__ = {
    "name": "domains",
    "version": "1.0.0",
    "description": "Custom domain ownership challenges and activation",
    "dependencies": ["tenants"],
}


def register_routes() -> None:
    """Register routes - called after all imports are complete."""
    from multistore.modules.domains import routes  # noqa: F401
