"""Feature modules with auto-discovery."""

from importlib import import_module
from pathlib import Path

import structlog
from fastapi import APIRouter


logger = structlog.get_logger()


def discover_modules() -> list[APIRouter]:
    """Auto-discover and return routers from all modules.

    This function scans the modules directory for subdirectories whose
    ``__init__.py`` defines a ``router``. A module's ``register_routes``
    hook runs first so its route handlers attach to that router.

    Returns:
        List of FastAPI routers from discovered modules.
    """
    modules_dir = Path(__file__).parent
    routers: list[APIRouter] = []

    for path in sorted(modules_dir.iterdir()):
        if path.is_dir() and not path.name.startswith("_"):
            module = import_module(f"multistore.modules.{path.name}")
            if not hasattr(module, "router"):
                continue
            register = getattr(module, "register_routes", None)
            if register is not None:
                register()
            routers.append(module.router)
            logger.debug("module_loaded", module=path.name)

    return routers
