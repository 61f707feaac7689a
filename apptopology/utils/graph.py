"""
Dependency ordering for resource specifications.
"""

from __future__ import annotations

from typing import Dict, Iterable, List

from ..iac_types import ResourceSpec


def topological_order(resources: Iterable[ResourceSpec]) -> List[ResourceSpec]:
    """Order resources so each one follows everything it depends on.

    Kahn's algorithm; ties keep declaration order so the result is stable.
    Raises ValueError on duplicate ids, unknown dependencies or cycles.
    """
    specs = list(resources)
    by_id: Dict[str, ResourceSpec] = {}
    for spec in specs:
        if spec.id in by_id:
            raise ValueError(f"Duplicate resource id: {spec.id}")
        by_id[spec.id] = spec

    in_degree = {s.id: 0 for s in specs}
    dependents: Dict[str, List[str]] = {s.id: [] for s in specs}
    for spec in specs:
        for dep in spec.depends_on:
            if dep not in by_id:
                raise ValueError(f"Resource '{spec.id}' depends on unknown resource '{dep}'")
            dependents[dep].append(spec.id)
            in_degree[spec.id] += 1

    position = {s.id: i for i, s in enumerate(specs)}
    ready = [s.id for s in specs if in_degree[s.id] == 0]
    ordered: List[ResourceSpec] = []
    while ready:
        current = ready.pop(0)
        ordered.append(by_id[current])
        for child in dependents[current]:
            in_degree[child] -= 1
            if in_degree[child] == 0:
                ready.append(child)
        ready.sort(key=position.__getitem__)

    if len(ordered) < len(specs):
        stuck = sorted(sid for sid, degree in in_degree.items() if degree > 0)
        raise ValueError(f"Dependency cycle between resources: {', '.join(stuck)}")
    return ordered
