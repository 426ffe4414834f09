"""Public URLs of a store.

A store is reachable at its verified custom domain, at
``<slug>.<root>``, or at ``<root>/<slug>`` depending on
``tenant_url_style``. The dashboard lives under ``dashboard_path``
relative to that base.
"""

from typing import TYPE_CHECKING

from multistore.config import Settings, settings


if TYPE_CHECKING:
    from multistore.modules.tenants.models import Tenant


def _origin(host: str, config: Settings) -> str:
    port = f":{config.public_port}" if config.public_port else ""
    return f"{config.public_scheme}://{host}{port}"


def tenant_base_url(tenant: "Tenant", config: Settings | None = None) -> str:
    """Base URL a store is served from.

    Examples:
        https://shop.example.com     (custom domain)
        https://acme.shopu.ge        (subdomain style)
        https://shopu.ge/acme        (path style)
    """
    config = config or settings
    if tenant.custom_domain:
        return f"{config.public_scheme}://{tenant.custom_domain}"
    if config.tenant_url_style == "path":
        return f"{_origin(config.platform_root_domain, config)}/{tenant.subdomain}"
    return _origin(f"{tenant.subdomain}.{config.platform_root_domain}", config)


def dashboard_base_path(slug: str | None = None, config: Settings | None = None) -> str:
    """Path prefix of the dashboard as seen from the browser.

    Pass the slug for path-addressed requests (``/<slug>/dashboard``);
    subdomain and custom-domain requests serve it at the root.
    """
    config = config or settings
    path = "/" + config.dashboard_path.strip("/")
    return f"/{slug}{path}" if slug else path


def dashboard_url(tenant: "Tenant", config: Settings | None = None) -> str:
    """Absolute URL of a store's dashboard."""
    config = config or settings
    path = "/" + config.dashboard_path.strip("/")
    return f"{tenant_base_url(tenant, config)}{path}"
