"""
Helpers for building resource specifications whose attributes reference
other resources.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Any, Iterable, List, Mapping, Union

from ..iac_types import Interpolation, Ref, ResourceSpec, Sensitive


def collect_refs(value: Any) -> List[Ref]:
    """Return every Ref found in a (possibly nested) attribute value."""
    if isinstance(value, Ref):
        return [value]
    if isinstance(value, Interpolation):
        return list(value.refs)
    if isinstance(value, Sensitive):
        return collect_refs(value.value)
    if isinstance(value, Mapping):
        found: List[Ref] = []
        for item in value.values():
            found.extend(collect_refs(item))
        return found
    if isinstance(value, (list, tuple)):
        found = []
        for item in value:
            found.extend(collect_refs(item))
        return found
    return []


def freeze(value: Any) -> Any:
    """Return a read-only copy: mappings become proxies, lists become tuples."""
    if isinstance(value, Mapping):
        return MappingProxyType({k: freeze(v) for k, v in value.items()})
    if isinstance(value, (list, tuple)):
        return tuple(freeze(v) for v in value)
    return value


def interpolate(*parts: Union[str, Ref]) -> Union[str, Interpolation]:
    """Join parts now when they are all literals, otherwise defer to the engine."""
    if all(isinstance(p, str) for p in parts):
        return "".join(parts)  # type: ignore[arg-type]
    return Interpolation(tuple(parts))


def declare(
    kind: str,
    resource_id: str,
    name: str,
    attributes: Mapping[str, Any],
    *,
    depends_on: Iterable[str] = (),
) -> ResourceSpec:
    """Build a ResourceSpec whose edges cover its refs plus explicit dependencies."""
    edges: List[str] = []
    for dep in [r.resource for r in collect_refs(attributes)] + list(depends_on):
        if dep != resource_id and dep not in edges:
            edges.append(dep)
    return ResourceSpec(
        kind=kind,
        id=resource_id,
        name=name,
        attributes=freeze(attributes),
        depends_on=tuple(edges),
    )
