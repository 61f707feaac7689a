"""
Database module.

Selects at most one managed database family (SQL Server, PostgreSQL Flexible
Server, MySQL Flexible Server) and declares its server, database and the
firewall rule that lets Azure services reach it.
"""

from __future__ import annotations

from typing import List, Union

from ...iac_types import (
    DatabaseSelection,
    InputParameters,
    Interpolation,
    MySqlDatabase,
    NoDatabase,
    PostgresDatabase,
    Ref,
    ResourceSpec,
    Sensitive,
    SqlServerDatabase,
)
from ...utils.refs import declare, interpolate

# On Azure a 0.0.0.0-0.0.0.0 rule admits Azure-internal services only.
ALLOW_AZURE_SERVICES_RULE = "AllowAzureServices"
ALLOW_AZURE_SERVICES_START = "0.0.0.0"
ALLOW_AZURE_SERVICES_END = "0.0.0.0"

_FAMILIES = {
    "sqlserver": SqlServerDatabase,
    "postgresql": PostgresDatabase,
    "mysql": MySqlDatabase,
}

_SERVER_SUFFIX = {
    "sqlserver": "sqlserver",
    "postgresql": "pgserver",
    "mysql": "mysqlserver",
}

_SQL_DATABASE_SKU = {"free": "Basic", "standard": "S0", "premium": "P1"}
_PG_SERVER_SKU = {
    "free": "B_Standard_B1ms",
    "standard": "GP_Standard_D2s_v3",
    "premium": "GP_Standard_D4s_v3",
}
_MYSQL_SERVER_SKU = {
    "free": "B_Standard_B1s",
    "standard": "GP_Standard_D2ds_v4",
    "premium": "GP_Standard_D4ds_v4",
}


def tier_key(tier: str) -> str:
    """Collapse a tier into a SKU lookup key; anything unrecognized sizes as standard."""
    return tier if tier in ("free", "premium") else "standard"


def select_database(params: InputParameters, prefix: str) -> DatabaseSelection:
    """Pick the active database family.

    Requires both a known database type and a non-empty admin secret; a type
    without a secret selects nothing.
    """
    family = _FAMILIES.get(params.database_type)
    if family is None or not params.sql_admin_password:
        return NoDatabase()
    return family(
        server_name=f"{prefix}-{_SERVER_SUFFIX[family.family]}",
        database_name=params.database_name or f"{prefix}-db",
        admin_password=params.sql_admin_password,
    )


def build_connection_string(
    family: str,
    fqdn: Union[str, Ref],
    database: str,
    secret: str,
) -> Union[str, Interpolation]:
    """Render the client connection string for a database family.

    Returns a plain string when fqdn is known, otherwise an Interpolation the
    provisioning engine completes.
    """
    if family == "sqlserver":
        return interpolate(
            "Server=tcp:", fqdn, f",1433;Initial Catalog={database};"
            f"User ID=sqladmin;Password={secret};"
            "Encrypt=true;TrustServerCertificate=false;",
        )
    if family == "postgresql":
        return interpolate(
            "Host=", fqdn, f";Port=5432;Database={database};"
            f"Username=pgadmin;Password={secret};SSL Mode=Require;",
        )
    if family == "mysql":
        return interpolate(
            "Server=", fqdn, f";Port=3306;Database={database};"
            f"User=mysqladmin;Password={secret};SslMode=Required;",
        )
    raise ValueError(f"Unknown database family: {family}")


def connection_string_for(selection: DatabaseSelection) -> Sensitive:
    """Connection string for the selected server, with its FQDN still deferred."""
    if isinstance(selection, NoDatabase):
        raise ValueError("No database selected")
    fqdn = Ref("db_server", selection.fqdn_attribute)
    return Sensitive(
        build_connection_string(
            selection.family, fqdn, selection.database_name, selection.admin_password
        )
    )


def declare_database(
    *, selection: DatabaseSelection, tier: str, location: str, rg_name: Union[str, Ref]
) -> List[ResourceSpec]:
    """Declare server, database and firewall rule for the selection (none for NoDatabase)."""
    if isinstance(selection, NoDatabase):
        return []

    key = tier_key(tier)
    server_id = Ref("db_server", "id")
    password = Sensitive(selection.admin_password)

    if isinstance(selection, SqlServerDatabase):
        server = declare(
            selection.server_kind,
            "db_server",
            selection.server_name,
            {
                "name": selection.server_name,
                "resource_group_name": rg_name,
                "location": location,
                "version": "12.0",
                "administrator_login": selection.admin_login,
                "administrator_login_password": password,
                "minimum_tls_version": "1.2",
            },
        )
        database = declare(
            selection.database_kind,
            "db",
            selection.database_name,
            {
                "name": selection.database_name,
                "server_id": server_id,
                "sku_name": _SQL_DATABASE_SKU[key],
            },
        )
        firewall = declare(
            selection.firewall_kind,
            "db_firewall",
            ALLOW_AZURE_SERVICES_RULE,
            {
                "name": ALLOW_AZURE_SERVICES_RULE,
                "server_id": server_id,
                "start_ip_address": ALLOW_AZURE_SERVICES_START,
                "end_ip_address": ALLOW_AZURE_SERVICES_END,
            },
        )
        return [server, database, firewall]

    if isinstance(selection, PostgresDatabase):
        server = declare(
            selection.server_kind,
            "db_server",
            selection.server_name,
            {
                "name": selection.server_name,
                "resource_group_name": rg_name,
                "location": location,
                "version": "16",
                "administrator_login": selection.admin_login,
                "administrator_password": password,
                "sku_name": _PG_SERVER_SKU[key],
                "storage_mb": 32768,
                "zone": "1",
                "public_network_access_enabled": True,
            },
        )
        database = declare(
            selection.database_kind,
            "db",
            selection.database_name,
            {
                "name": selection.database_name,
                "server_id": server_id,
                "charset": "UTF8",
                "collation": "en_US.utf8",
            },
        )
        firewall = declare(
            selection.firewall_kind,
            "db_firewall",
            ALLOW_AZURE_SERVICES_RULE,
            {
                "name": ALLOW_AZURE_SERVICES_RULE,
                "server_id": server_id,
                "start_ip_address": ALLOW_AZURE_SERVICES_START,
                "end_ip_address": ALLOW_AZURE_SERVICES_END,
            },
        )
        return [server, database, firewall]

    # MySQL flexible children address the server by name, not id.
    server_name = Ref("db_server", "name")
    server = declare(
        selection.server_kind,
        "db_server",
        selection.server_name,
        {
            "name": selection.server_name,
            "resource_group_name": rg_name,
            "location": location,
            "version": "8.0.21",
            "administrator_login": selection.admin_login,
            "administrator_password": password,
            "sku_name": _MYSQL_SERVER_SKU[key],
            "zone": "1",
        },
    )
    database = declare(
        selection.database_kind,
        "db",
        selection.database_name,
        {
            "name": selection.database_name,
            "resource_group_name": rg_name,
            "server_name": server_name,
            "charset": "utf8mb4",
            "collation": "utf8mb4_unicode_ci",
        },
    )
    firewall = declare(
        selection.firewall_kind,
        "db_firewall",
        ALLOW_AZURE_SERVICES_RULE,
        {
            "name": ALLOW_AZURE_SERVICES_RULE,
            "resource_group_name": rg_name,
            "server_name": server_name,
            "start_ip_address": ALLOW_AZURE_SERVICES_START,
            "end_ip_address": ALLOW_AZURE_SERVICES_END,
        },
    )
    return [server, database, firewall]
