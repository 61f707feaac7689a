"""
Input and preflight validation helpers.

Pure, minimal functions that reject malformed input and format actionable
error messages for users.
"""

from __future__ import annotations

from dataclasses import fields
from typing import List, Mapping

from ..iac_types import InputParameters


class ConfigurationError(ValueError):
    """Raised when resolver input is missing or malformed."""


def validate_input(params: InputParameters) -> None:
    """Raise ConfigurationError unless every supplied value is a string and app_name is set."""
    for f in fields(params):
        value = getattr(params, f.name)
        if value is not None and not isinstance(value, str):
            raise ConfigurationError(
                f"Variable '{f.name}' must be a string, got {type(value).__name__}"
            )
    if not params.app_name or not params.app_name.strip():
        raise ConfigurationError("Missing required var: app_name")


def missing_env(env: Mapping[str, str], keys: List[str]) -> List[str]:
    """Return the list of keys missing in the provided environment mapping."""
    return [k for k in keys if not env.get(k)]


def format_missing_env_message(missing: List[str]) -> str:
    """Format a friendly, actionable message for missing env vars."""
    if not missing:
        return ""
    lines: List[str] = []
    lines.append("Preflight check failed: missing environment variables")
    lines.append("")
    lines.append("Missing:")
    for k in missing:
        lines.append(f"  - {k}")
    lines.append("")
    lines.append("Set them in the current shell session:")
    for k in missing:
        lines.append(f'  export {k}="<value>"')
    lines.append("")
    lines.append("Then re-run: apptopology infra-deploy --project-dir .")
    return "\n".join(lines)
