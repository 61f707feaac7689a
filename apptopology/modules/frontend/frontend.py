"""
Frontend module.

Declares the Static Web App and, when backend URLs are supplied, a Linux
gateway web app that proxies to them.
"""

from __future__ import annotations

from typing import Dict, List, Optional, Tuple, Union

from ...iac_types import Ref, ResourceSpec
from ...utils.refs import declare, interpolate
from ..backend.backend import plan_sku
from ..database.database import tier_key

GATEWAY_NODE_VERSION = "20-lts"
GATEWAY_PORT = 3000


def static_sku(tier: str) -> Tuple[str, str]:
    """Return (sku_tier, sku_size) for the Static Web App."""
    return ("Free", "Free") if tier == "free" else ("Standard", "Standard")


def split_backend_urls(backend_urls: Optional[str]) -> List[str]:
    if not backend_urls:
        return []
    return [u.strip() for u in backend_urls.split(",") if u.strip()]


def declare_frontend(
    *,
    prefix: str,
    tier: str,
    location: str,
    rg_name: Union[str, Ref],
    backend_api_url: Optional[str],
) -> List[ResourceSpec]:
    sku_tier, sku_size = static_sku(tier)
    app_settings: Dict[str, str] = {}
    if backend_api_url:
        app_settings["BACKEND_API_URL"] = backend_api_url
    return [
        declare(
            "azurerm_static_web_app",
            "static_webapp",
            f"{prefix}-static",
            {
                "name": f"{prefix}-static",
                "resource_group_name": rg_name,
                "location": location,
                "sku_tier": sku_tier,
                "sku_size": sku_size,
                "app_settings": app_settings,
            },
        )
    ]


def declare_gateway(
    *,
    prefix: str,
    tier: str,
    location: str,
    rg_name: Union[str, Ref],
    backend_urls: str,
) -> List[ResourceSpec]:
    """Declare the gateway plan and web app.

    BACKEND_URLS carries the raw list as given. FRONTEND_URL stays deferred
    until the Static Web App has a hostname, which adds the edge on it.
    """
    plan = declare(
        "azurerm_service_plan",
        "gateway_plan",
        f"{prefix}-gateway-plan",
        {
            "name": f"{prefix}-gateway-plan",
            "resource_group_name": rg_name,
            "location": location,
            "os_type": "Linux",
            "sku_name": plan_sku(tier),
        },
    )
    webapp = declare(
        "azurerm_linux_web_app",
        "gateway_webapp",
        f"{prefix}-gateway",
        {
            "name": f"{prefix}-gateway",
            "resource_group_name": rg_name,
            "location": location,
            "service_plan_id": Ref("gateway_plan", "id"),
            "https_only": True,
            "site_config": {
                "always_on": tier_key(tier) != "free",
                "application_stack": {"node_version": GATEWAY_NODE_VERSION},
            },
            "app_settings": {
                "BACKEND_URLS": backend_urls,
                "FRONTEND_URL": interpolate(
                    "https://", Ref("static_webapp", "default_host_name")
                ),
                "WEBSITES_PORT": str(GATEWAY_PORT),
            },
        },
    )
    return [plan, webapp]
