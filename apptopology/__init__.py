"""Conditional resource-topology resolver for Azure app stacks."""

from .iac_types import InputParameters, OutputValue, Plan, ResourceSpec
from .modules.database.database import build_connection_string
from .resolver import derive_flags, normalize_name, resolve
from .utils.validation import ConfigurationError

__all__ = [
    "ConfigurationError",
    "InputParameters",
    "OutputValue",
    "Plan",
    "ResourceSpec",
    "build_connection_string",
    "derive_flags",
    "normalize_name",
    "resolve",
]
