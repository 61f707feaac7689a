"""
Plan serialization helpers.

Turns a resolved Plan into plain JSON-friendly data for diagnostics, with
secrets redacted unless explicitly requested.
"""

from dataclasses import asdict
from typing import Any, Dict, Mapping

from ..iac_types import Interpolation, Plan, Ref, Sensitive

REDACTED = "(sensitive)"


def _plain(value: Any, redact: bool) -> Any:
    if isinstance(value, Sensitive):
        return REDACTED if redact else _plain(value.value, redact)
    if isinstance(value, (Ref, Interpolation)):
        return str(value)
    if isinstance(value, Mapping):
        return {k: _plain(v, redact) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_plain(v, redact) for v in value]
    return value


def synth_plan_json(plan: Plan, *, redact: bool = True) -> Dict[str, Any]:
    """Convert a plan to plain dicts; refs render as ${id.attribute}."""
    return {
        "prefix": plan.prefix,
        "flags": asdict(plan.flags),
        "resources": [
            {
                "kind": spec.kind,
                "id": spec.id,
                "name": spec.name,
                "depends_on": list(spec.depends_on),
                "attributes": _plain(spec.attributes, redact),
            }
            for spec in plan.resources
        ],
        "outputs": synth_outputs_json(plan, redact=redact),
    }


def synth_outputs_json(plan: Plan, *, redact: bool = True) -> Dict[str, Any]:
    result: Dict[str, Any] = {}
    for name, output in plan.outputs.items():
        value = _plain(output.value, redact)
        # Empty placeholders stay visible so the schema reads the same either way.
        if output.sensitive and redact and value != "":
            value = REDACTED
        result[name] = {"value": value, "sensitive": output.sensitive}
    return result
