"""
Topology resolver.

Maps a fixed InputParameters snapshot to the resources that should exist,
the edges between them and the named outputs. Pure: no I/O, no shared state.
"""

from __future__ import annotations

from typing import Dict, List, Mapping

from .iac_types import (
    DatabaseSelection,
    DerivedFlags,
    InputParameters,
    MySqlDatabase,
    NoDatabase,
    OutputValue,
    Plan,
    PostgresDatabase,
    Ref,
    ResourceSpec,
    SqlServerDatabase,
)
from .modules.backend.backend import declare_backend
from .modules.database.database import declare_database, select_database
from .modules.frontend.frontend import (
    declare_frontend,
    declare_gateway,
    split_backend_urls,
)
from .utils.refs import declare, freeze, interpolate
from .utils.validation import validate_input

DATABASE_TYPES = ("sqlserver", "postgresql", "mysql")

# Output keys and whether each is sensitive; every key is always emitted.
OUTPUT_SCHEMA = (
    ("resource_group", False),
    ("project_type", False),
    ("runtime_stack", False),
    ("webapp_name", False),
    ("webapp_url", False),
    ("static_webapp_name", False),
    ("static_webapp_url", False),
    ("static_webapp_api_key", True),
    ("gateway_webapp_name", False),
    ("gateway_webapp_url", False),
    ("database_type", False),
    ("db_server_fqdn", True),
    ("db_name", True),
)


def normalize_name(name: str) -> str:
    """Lowercase and turn '_' and '.' into '-'."""
    return name.lower().replace("_", "-").replace(".", "-")


def derive_flags(params: InputParameters) -> DerivedFlags:
    is_frontend = params.project_type == "frontend"
    is_backend = params.project_type == "backend"
    is_dotnet = params.runtime_stack == "dotnet"
    has_database = params.database_type in DATABASE_TYPES and bool(
        params.sql_admin_password
    )
    backend_db = is_backend and has_database
    return DerivedFlags(
        is_frontend=is_frontend,
        is_backend=is_backend,
        is_dotnet=is_dotnet,
        is_linux=not is_dotnet,
        create_gateway=is_frontend and bool(split_backend_urls(params.backend_urls)),
        create_sql_server=backend_db and params.database_type == "sqlserver",
        create_postgresql=backend_db and params.database_type == "postgresql",
        create_mysql=backend_db and params.database_type == "mysql",
        has_database=has_database,
    )


def _database_for(flags: DerivedFlags, selection: DatabaseSelection) -> DatabaseSelection:
    # Only backend projects carry a database.
    if isinstance(selection, SqlServerDatabase) and flags.create_sql_server:
        return selection
    if isinstance(selection, PostgresDatabase) and flags.create_postgresql:
        return selection
    if isinstance(selection, MySqlDatabase) and flags.create_mysql:
        return selection
    return NoDatabase()


def _outputs(
    params: InputParameters,
    prefix: str,
    flags: DerivedFlags,
    database: DatabaseSelection,
) -> Mapping[str, OutputValue]:
    values: Dict[str, object] = {key: "" for key, _ in OUTPUT_SCHEMA}
    values["resource_group"] = f"{prefix}-rg"
    values["project_type"] = params.project_type

    if flags.is_frontend:
        values["static_webapp_name"] = f"{prefix}-static"
        values["static_webapp_url"] = interpolate(
            "https://", Ref("static_webapp", "default_host_name")
        )
        values["static_webapp_api_key"] = Ref("static_webapp", "api_key")
    if flags.create_gateway:
        values["gateway_webapp_name"] = f"{prefix}-gateway"
        values["gateway_webapp_url"] = interpolate(
            "https://", Ref("gateway_webapp", "default_hostname")
        )
    if flags.is_backend:
        values["runtime_stack"] = params.runtime_stack
        values["webapp_name"] = f"{prefix}-webapp"
        values["webapp_url"] = interpolate(
            "https://", Ref("webapp", "default_hostname")
        )
        values["database_type"] = params.database_type
    if not isinstance(database, NoDatabase):
        values["db_server_fqdn"] = Ref("db_server", database.fqdn_attribute)
        values["db_name"] = database.database_name

    return freeze(
        {
            key: OutputValue(value=values[key], sensitive=sensitive)  # type: ignore[arg-type]
            for key, sensitive in OUTPUT_SCHEMA
        }
    )


def resolve(params: InputParameters) -> Plan:
    """Resolve the full topology for one input snapshot.

    Raises ConfigurationError for malformed input before anything is declared.
    """
    validate_input(params)
    prefix = normalize_name(params.app_name)
    flags = derive_flags(params)
    database = _database_for(flags, select_database(params, prefix))

    rg_name = Ref("resource_group", "name")
    resources: List[ResourceSpec] = [
        declare(
            "azurerm_resource_group",
            "resource_group",
            f"{prefix}-rg",
            {"name": f"{prefix}-rg", "location": params.location},
        )
    ]

    if flags.is_frontend:
        resources.extend(
            declare_frontend(
                prefix=prefix,
                tier=params.tier,
                location=params.location,
                rg_name=rg_name,
                backend_api_url=params.backend_api_url,
            )
        )
        if flags.create_gateway:
            resources.extend(
                declare_gateway(
                    prefix=prefix,
                    tier=params.tier,
                    location=params.location,
                    rg_name=rg_name,
                    backend_urls=params.backend_urls or "",
                )
            )

    if flags.is_backend:
        resources.extend(
            declare_database(
                selection=database,
                tier=params.tier,
                location=params.location,
                rg_name=rg_name,
            )
        )
        resources.extend(
            declare_backend(
                prefix=prefix,
                runtime_stack=params.runtime_stack,
                tier=params.tier,
                location=params.location,
                rg_name=rg_name,
                database=database,
            )
        )

    return Plan(
        prefix=prefix,
        flags=flags,
        resources=tuple(resources),
        outputs=_outputs(params, prefix, flags, database),
    )
