"""
CDKTF entrypoint: synthesizes a resolved topology plan into Terraform JSON.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from constructs import Construct
from cdktf import App, TerraformOutput, TerraformStack

from cdktf_cdktf_provider_azurerm.provider import (
    AzurermProvider,
    AzurermProviderFeatures,
)
from cdktf_cdktf_provider_azurerm.resource_group import ResourceGroup
from cdktf_cdktf_provider_azurerm.static_web_app import StaticWebApp
from cdktf_cdktf_provider_azurerm.service_plan import ServicePlan
from cdktf_cdktf_provider_azurerm.linux_web_app import (
    LinuxWebApp,
    LinuxWebAppConnectionString,
)
from cdktf_cdktf_provider_azurerm.windows_web_app import (
    WindowsWebApp,
    WindowsWebAppConnectionString,
)
from cdktf_cdktf_provider_azurerm.mssql_server import MssqlServer
from cdktf_cdktf_provider_azurerm.mssql_database import MssqlDatabase
from cdktf_cdktf_provider_azurerm.mssql_firewall_rule import MssqlFirewallRule
from cdktf_cdktf_provider_azurerm.postgresql_flexible_server import (
    PostgresqlFlexibleServer,
)
from cdktf_cdktf_provider_azurerm.postgresql_flexible_server_database import (
    PostgresqlFlexibleServerDatabase,
)
from cdktf_cdktf_provider_azurerm.postgresql_flexible_server_firewall_rule import (
    PostgresqlFlexibleServerFirewallRule,
)
from cdktf_cdktf_provider_azurerm.mysql_flexible_server import MysqlFlexibleServer
from cdktf_cdktf_provider_azurerm.mysql_flexible_database import (
    MysqlFlexibleDatabase,
)
from cdktf_cdktf_provider_azurerm.mysql_flexible_server_firewall_rule import (
    MysqlFlexibleServerFirewallRule,
)

from .iac_types import Interpolation, Plan, Ref, Sensitive
from .resolver import resolve
from .utils.config_loader import load_tfvars_config
from .utils.validation import (
    ConfigurationError,
    format_missing_env_message,
    missing_env,
)

RESOURCE_CLASSES = {
    "azurerm_resource_group": ResourceGroup,
    "azurerm_static_web_app": StaticWebApp,
    "azurerm_service_plan": ServicePlan,
    "azurerm_linux_web_app": LinuxWebApp,
    "azurerm_windows_web_app": WindowsWebApp,
    "azurerm_mssql_server": MssqlServer,
    "azurerm_mssql_database": MssqlDatabase,
    "azurerm_mssql_firewall_rule": MssqlFirewallRule,
    "azurerm_postgresql_flexible_server": PostgresqlFlexibleServer,
    "azurerm_postgresql_flexible_server_database": PostgresqlFlexibleServerDatabase,
    "azurerm_postgresql_flexible_server_firewall_rule": PostgresqlFlexibleServerFirewallRule,
    "azurerm_mysql_flexible_server": MysqlFlexibleServer,
    "azurerm_mysql_flexible_database": MysqlFlexibleDatabase,
    "azurerm_mysql_flexible_server_firewall_rule": MysqlFlexibleServerFirewallRule,
}

# Repeatable blocks are typed lists of structs and must be built explicitly.
BLOCK_STRUCTS = {
    ("azurerm_linux_web_app", "connection_string"): LinuxWebAppConnectionString,
    ("azurerm_windows_web_app", "connection_string"): WindowsWebAppConnectionString,
}


class AppTopologyStack(TerraformStack):
    """TerraformStack that materializes every resource of a resolved plan."""

    def __init__(
        self,
        scope: Construct,
        id: str,
        plan: Plan,
        subscription_id: Optional[str] = None,
    ) -> None:
        super().__init__(scope, id)

        # Provider
        AzurermProvider(
            self,
            "azurerm",
            features=[AzurermProviderFeatures()],
            subscription_id=subscription_id,
        )

        self.resources: Dict[str, Any] = {}
        for spec in plan.topological_order():
            resource_class = RESOURCE_CLASSES.get(spec.kind)
            if resource_class is None:
                raise ValueError(f"Unsupported resource kind: {spec.kind}")
            kwargs = {k: self._render(v) for k, v in spec.attributes.items()}
            for (kind, key), struct in BLOCK_STRUCTS.items():
                if kind == spec.kind and key in kwargs:
                    kwargs[key] = [struct(**block) for block in kwargs[key]]
            # Refs already imply these edges; listing them keeps the plan's DAG explicit.
            depends_on = [self.resources[d] for d in spec.depends_on]
            if depends_on:
                kwargs["depends_on"] = depends_on
            self.resources[spec.id] = resource_class(self, spec.id, **kwargs)

        for name, output in plan.outputs.items():
            TerraformOutput(
                self,
                name,
                value=self._render(output.value),
                sensitive=output.sensitive,
            )

    def _render(self, value: Any) -> Any:
        if isinstance(value, Ref):
            return getattr(self.resources[value.resource], value.attribute)
        if isinstance(value, Interpolation):
            return "".join(str(self._render(p)) for p in value.parts)
        if isinstance(value, Sensitive):
            return self._render(value.value)
        if isinstance(value, Mapping):
            return {k: self._render(v) for k, v in value.items()}
        if isinstance(value, (list, tuple)):
            return [self._render(v) for v in value]
        return value


def main() -> None:
    repo_root = Path.cwd()

    # Preflight: ensure required env vars are present before synthesizing
    required_env = ["ARM_SUBSCRIPTION_ID"]
    missing = missing_env(env=os.environ, keys=required_env)
    if missing:
        print(format_missing_env_message(missing), file=sys.stderr)
        sys.exit(2)

    try:
        params = load_tfvars_config(repo_root=repo_root)
        plan = resolve(params)
    except (ConfigurationError, FileNotFoundError) as ex:
        print(f"Error: {ex}", file=sys.stderr)
        sys.exit(1)

    app = App()
    try:
        AppTopologyStack(
            app, "apptopology", plan, subscription_id=os.environ["ARM_SUBSCRIPTION_ID"]
        )
    except ValueError as ex:
        # Surface a concise, friendly message instead of a long traceback
        print(f"Error: {ex}", file=sys.stderr)
        sys.exit(1)

    try:
        app.synth()
    except Exception as ex:  # noqa: BLE001 - present actionable error
        print("Synthesis failed.", file=sys.stderr)
        print(str(ex), file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
