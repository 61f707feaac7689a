"""
Typed inputs, derived flags and plan records for the topology resolver.

Everything here is immutable: a plan is computed once from an input snapshot
and never mutated afterwards.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, ClassVar, Dict, Mapping, Optional, Tuple, Union


@dataclass(frozen=True)
class InputParameters:
    app_name: str
    location: str = "Central India"
    project_type: str = "frontend"  # frontend or backend
    tier: str = "free"  # free/standard/premium
    runtime_stack: str = "dotnet"  # dotnet/node/python/java
    database_type: str = "none"  # none/sqlserver/postgresql/mysql
    database_name: Optional[str] = None
    sql_admin_password: Optional[str] = field(default=None, repr=False)
    backend_api_url: Optional[str] = None
    backend_urls: Optional[str] = None  # comma-separated


@dataclass(frozen=True)
class DerivedFlags:
    is_frontend: bool
    is_backend: bool
    is_dotnet: bool
    is_linux: bool
    create_gateway: bool
    create_sql_server: bool
    create_postgresql: bool
    create_mysql: bool
    has_database: bool


@dataclass(frozen=True)
class Ref:
    """Attribute of another resource, known only once that resource exists."""

    resource: str
    attribute: str

    def __str__(self) -> str:
        return "${%s.%s}" % (self.resource, self.attribute)


@dataclass(frozen=True)
class Interpolation:
    """String assembled from literals and refs by the provisioning engine."""

    parts: Tuple[Union[str, Ref], ...]

    @property
    def refs(self) -> Tuple[Ref, ...]:
        return tuple(p for p in self.parts if isinstance(p, Ref))

    def __str__(self) -> str:
        return "".join(str(p) for p in self.parts)


@dataclass(frozen=True)
class Sensitive:
    """Wraps a value that must not appear in plain-text plans or logs."""

    value: Any

    def __repr__(self) -> str:
        return "Sensitive(***)"


@dataclass(frozen=True)
class ResourceSpec:
    kind: str  # provider resource type, e.g. azurerm_linux_web_app
    id: str  # logical id, unique within a plan
    name: str
    attributes: Mapping[str, Any] = field(default_factory=dict, hash=False)
    depends_on: Tuple[str, ...] = ()


@dataclass(frozen=True)
class OutputValue:
    value: Union[str, Ref, Interpolation]
    sensitive: bool = False


@dataclass(frozen=True)
class Plan:
    prefix: str
    flags: DerivedFlags
    resources: Tuple[ResourceSpec, ...]
    outputs: Mapping[str, OutputValue] = field(default_factory=dict, hash=False)

    def resource(self, resource_id: str) -> ResourceSpec:
        for spec in self.resources:
            if spec.id == resource_id:
                return spec
        raise KeyError(f"Resource not in plan: {resource_id}")

    def of_kind(self, kind: str) -> Tuple[ResourceSpec, ...]:
        return tuple(r for r in self.resources if r.kind == kind)

    def output_values(self) -> Dict[str, Union[str, Ref, Interpolation]]:
        return {k: v.value for k, v in self.outputs.items()}

    def topological_order(self) -> Tuple[ResourceSpec, ...]:
        from .utils.graph import topological_order

        return tuple(topological_order(self.resources))


# Database families. Exactly one selection is active per plan.


@dataclass(frozen=True)
class NoDatabase:
    family: ClassVar[str] = "none"


@dataclass(frozen=True)
class _DatabaseServer:
    server_name: str
    database_name: str
    admin_password: str = field(repr=False)

    family: ClassVar[str] = ""
    server_kind: ClassVar[str] = ""
    database_kind: ClassVar[str] = ""
    firewall_kind: ClassVar[str] = ""
    admin_login: ClassVar[str] = ""
    port: ClassVar[int] = 0
    fqdn_attribute: ClassVar[str] = "fqdn"
    connection_type: ClassVar[str] = ""


@dataclass(frozen=True)
class SqlServerDatabase(_DatabaseServer):
    family: ClassVar[str] = "sqlserver"
    server_kind: ClassVar[str] = "azurerm_mssql_server"
    database_kind: ClassVar[str] = "azurerm_mssql_database"
    firewall_kind: ClassVar[str] = "azurerm_mssql_firewall_rule"
    admin_login: ClassVar[str] = "sqladmin"
    port: ClassVar[int] = 1433
    fqdn_attribute: ClassVar[str] = "fully_qualified_domain_name"
    connection_type: ClassVar[str] = "SQLAzure"


@dataclass(frozen=True)
class PostgresDatabase(_DatabaseServer):
    family: ClassVar[str] = "postgresql"
    server_kind: ClassVar[str] = "azurerm_postgresql_flexible_server"
    database_kind: ClassVar[str] = "azurerm_postgresql_flexible_server_database"
    firewall_kind: ClassVar[str] = "azurerm_postgresql_flexible_server_firewall_rule"
    admin_login: ClassVar[str] = "pgadmin"
    port: ClassVar[int] = 5432
    connection_type: ClassVar[str] = "PostgreSQL"


@dataclass(frozen=True)
class MySqlDatabase(_DatabaseServer):
    family: ClassVar[str] = "mysql"
    server_kind: ClassVar[str] = "azurerm_mysql_flexible_server"
    database_kind: ClassVar[str] = "azurerm_mysql_flexible_database"
    firewall_kind: ClassVar[str] = "azurerm_mysql_flexible_server_firewall_rule"
    admin_login: ClassVar[str] = "mysqladmin"
    port: ClassVar[int] = 3306
    connection_type: ClassVar[str] = "MySql"


DatabaseSelection = Union[NoDatabase, SqlServerDatabase, PostgresDatabase, MySqlDatabase]


# Backend web app variants. Exactly one is declared for a backend project.


@dataclass(frozen=True)
class WindowsWebApp:
    kind: ClassVar[str] = "azurerm_windows_web_app"
    os_type: ClassVar[str] = "Windows"


@dataclass(frozen=True)
class LinuxWebApp:
    kind: ClassVar[str] = "azurerm_linux_web_app"
    os_type: ClassVar[str] = "Linux"


WebAppVariant = Union[WindowsWebApp, LinuxWebApp]
