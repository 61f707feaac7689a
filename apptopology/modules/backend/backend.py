"""
Backend module.

Declares an App Service plan and exactly one web app for it: Windows for
.NET, Linux for every other runtime stack.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Union

from ...iac_types import (
    DatabaseSelection,
    LinuxWebApp,
    NoDatabase,
    Ref,
    ResourceSpec,
    WebAppVariant,
    WindowsWebApp,
)
from ...utils.refs import declare
from ..database.database import connection_string_for, tier_key

PLAN_SKU = {"free": "F1", "standard": "S1", "premium": "P1v3"}

# Keyed on runtime_stack; an unknown stack gets no runtime settings at all.
RUNTIME_SETTINGS: Dict[str, Dict[str, Any]] = {
    "dotnet": {"port": 8080, "version": "v8.0"},
    "node": {"port": 3000, "version": "20-lts"},
    "python": {"port": 8000, "version": "3.11"},
    "java": {"port": 8080, "version": "17"},
}


def web_app_variant(runtime_stack: str) -> WebAppVariant:
    if runtime_stack == "dotnet":
        return WindowsWebApp()
    return LinuxWebApp()


def plan_sku(tier: str) -> str:
    return PLAN_SKU[tier_key(tier)]


def _application_stack(runtime_stack: str) -> Optional[Dict[str, str]]:
    settings = RUNTIME_SETTINGS.get(runtime_stack)
    if settings is None:
        return None
    version = settings["version"]
    if runtime_stack == "dotnet":
        return {"current_stack": "dotnet", "dotnet_version": version}
    if runtime_stack == "node":
        return {"node_version": version}
    if runtime_stack == "python":
        return {"python_version": version}
    return {
        "java_version": version,
        "java_server": "JAVA",
        "java_server_version": version,
    }


def _app_settings(runtime_stack: str, variant: WebAppVariant) -> Dict[str, str]:
    settings = RUNTIME_SETTINGS.get(runtime_stack)
    if settings is None:
        return {}
    app_settings = {"RUNTIME_STACK": runtime_stack}
    if isinstance(variant, LinuxWebApp):
        app_settings["WEBSITES_PORT"] = str(settings["port"])
    else:
        app_settings["PORT"] = str(settings["port"])
    return app_settings


def declare_backend(
    *,
    prefix: str,
    runtime_stack: str,
    tier: str,
    location: str,
    rg_name: Union[str, Ref],
    database: DatabaseSelection,
) -> List[ResourceSpec]:
    """Declare the service plan and web app, wiring in the database when one is selected."""
    variant = web_app_variant(runtime_stack)
    key = tier_key(tier)

    plan = declare(
        "azurerm_service_plan",
        "service_plan",
        f"{prefix}-plan",
        {
            "name": f"{prefix}-plan",
            "resource_group_name": rg_name,
            "location": location,
            "os_type": variant.os_type,
            "sku_name": plan_sku(tier),
        },
    )

    site_config: Dict[str, Any] = {"always_on": key != "free"}
    application_stack = _application_stack(runtime_stack)
    if application_stack is not None:
        site_config["application_stack"] = application_stack

    app_settings = _app_settings(runtime_stack, variant)
    attributes: Dict[str, Any] = {
        "name": f"{prefix}-webapp",
        "resource_group_name": rg_name,
        "location": location,
        "service_plan_id": Ref("service_plan", "id"),
        "https_only": True,
        "site_config": site_config,
        "app_settings": app_settings,
    }
    depends_on: List[str] = []
    if not isinstance(database, NoDatabase):
        app_settings["DATABASE_TYPE"] = database.family
        attributes["connection_string"] = [
            {
                "name": "DefaultConnection",
                "type": database.connection_type,
                "value": connection_string_for(database),
            }
        ]
        depends_on.append("db")

    webapp = declare(
        variant.kind, "webapp", f"{prefix}-webapp", attributes, depends_on=depends_on
    )
    return [plan, webapp]
