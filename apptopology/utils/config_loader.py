"""
Config loader for tfvars -> typed InputParameters used by the resolver.

Functional, pure helpers that parse the minimal subset of .tfvars syntax the
var files in this repo use. No external dependencies.
"""

from __future__ import annotations

import os
from dataclasses import fields
from pathlib import Path
from typing import Dict, List, Mapping, Optional

from ..iac_types import InputParameters
from .validation import ConfigurationError

DEFAULT_TFVARS_FILE = "vars/dev.tfvars"
ENV_PREFIX = "TF_VAR_"

KNOWN_VARS = tuple(f.name for f in fields(InputParameters))


def _strip_quotes(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] and value[0] in ('"', "'"):
        return value[1:-1]
    return value


def _parse_list(value: str) -> str:
    """Flatten a single-line list of strings into a comma-separated string."""
    inner = value[1:-1].strip()
    if not inner:
        return ""
    items = [_strip_quotes(item.strip()) for item in _split_outside_quotes(inner, ",")]
    return ",".join(item for item in items if item)


def _split_outside_quotes(value: str, sep: str) -> List[str]:
    parts: List[str] = []
    quote: Optional[str] = None
    start = 0
    for i, ch in enumerate(value):
        if quote:
            if ch == quote:
                quote = None
        elif ch in ('"', "'"):
            quote = ch
        elif ch == sep:
            parts.append(value[start:i])
            start = i + 1
    parts.append(value[start:])
    return parts


def _strip_comment(value: str) -> str:
    # Only strip '#' outside quotes; URLs may carry fragments.
    quote: Optional[str] = None
    for i, ch in enumerate(value):
        if quote:
            if ch == quote:
                quote = None
        elif ch in ('"', "'"):
            quote = ch
        elif ch == "#":
            return value[:i].rstrip()
    return value


def parse_tfvars(content: str) -> Dict[str, str]:
    """Very small tfvars parser for simple key = value pairs.

    Supports quoted strings, bare scalars and single-line string lists.
    Lines starting with '#' or '//' are ignored.
    """
    vars_map: Dict[str, str] = {}
    for raw in content.splitlines():
        line = raw.strip()
        if not line or line.startswith("#") or line.startswith("//"):
            continue
        if "=" not in line:
            continue
        key, val = line.split("=", 1)
        key = key.strip()
        val = _strip_comment(val.strip())
        if val.startswith("[") and val.endswith("]"):
            vars_map[key] = _parse_list(val)
        else:
            vars_map[key] = _strip_quotes(val)
    return vars_map


def env_vars(env: Mapping[str, str]) -> Dict[str, str]:
    """Pick TF_VAR_<name> values for the variables this repo declares."""
    found: Dict[str, str] = {}
    for name in KNOWN_VARS:
        value = env.get(ENV_PREFIX + name)
        if value is not None:
            found[name] = value
    return found


def build_input_parameters(vars_map: Mapping[str, str]) -> InputParameters:
    unknown = sorted(k for k in vars_map if k not in KNOWN_VARS)
    if unknown:
        raise ConfigurationError(f"Undeclared variables: {', '.join(unknown)}")
    if not vars_map.get("app_name"):
        raise ConfigurationError("Missing required var: app_name")
    return InputParameters(**dict(vars_map))


def load_tfvars_config(
    *, repo_root: Path, env: Optional[Mapping[str, str]] = None
) -> InputParameters:
    """Load InputParameters from $TFVARS_FILE (or vars/dev.tfvars) under repo_root.

    TF_VAR_<name> environment variables fill in anything the file leaves out.
    """
    env = os.environ if env is None else env
    tfvars_file_env = env.get("TFVARS_FILE")
    tfvars_file = (
        tfvars_file_env
        if (tfvars_file_env and tfvars_file_env.strip())
        else DEFAULT_TFVARS_FILE
    )
    vars_path = (repo_root / tfvars_file).resolve()
    if not vars_path.exists():
        raise FileNotFoundError(f"tfvars file not found: {vars_path}")

    vars_map = env_vars(env)
    vars_map.update(parse_tfvars(vars_path.read_text(encoding="utf-8")))
    return build_input_parameters(vars_map)
