import pytest

from apptopology.iac_types import ResourceSpec
from apptopology.utils.graph import topological_order


def spec(resource_id, *deps):
    return ResourceSpec(kind="k", id=resource_id, name=resource_id, depends_on=deps)


def test_dependencies_come_first_and_ties_keep_declaration_order():
    specs = [spec("webapp", "plan", "db"), spec("rg"), spec("db", "rg"), spec("plan", "rg")]
    assert [s.id for s in topological_order(specs)] == ["rg", "db", "plan", "webapp"]


def test_cycle_is_rejected():
    with pytest.raises(ValueError, match="cycle"):
        topological_order([spec("a", "b"), spec("b", "a")])


def test_unknown_dependency_is_rejected():
    with pytest.raises(ValueError, match="unknown"):
        topological_order([spec("a", "missing")])


def test_duplicate_id_is_rejected():
    with pytest.raises(ValueError, match="Duplicate"):
        topological_order([spec("a"), spec("a")])
