"""Tests for deployable units and the function registry."""

import pytest

from fnstack.config import BuildConfig
from fnstack.errors import DuplicateFunctionName, InvalidBudget, NotFound
from fnstack.model.functions import (
    DeployableUnit,
    FunctionRegistry,
    RegistryHandle,
    ResourceBudget,
)
from fnstack.model.grants import TrustRelationship
from fnstack.model.identity import Identity

ROLE = Identity(name="shared-role", trust=TrustRelationship())


def _unit(name: str, code: str = "src/fn") -> DeployableUnit:
    return DeployableUnit(name=name, code=code, identity=ROLE)


def test_register_and_lookup() -> None:
    registry = FunctionRegistry()
    unit = _unit("create-order")
    handle = registry.register(unit)
    assert handle == RegistryHandle("create-order", 0)
    assert registry.lookup("create-order") is unit
    assert "create-order" in registry
    assert len(registry) == 1


def test_duplicate_name_keeps_first() -> None:
    registry = FunctionRegistry()
    first = _unit("fn", code="src/a")
    registry.register(first)
    with pytest.raises(DuplicateFunctionName, match="'fn'"):
        registry.register(_unit("fn", code="src/b"))
    assert registry.lookup("fn") is first
    assert len(registry) == 1


def test_lookup_missing() -> None:
    with pytest.raises(NotFound) as exc_info:
        FunctionRegistry().lookup("ghost")
    assert exc_info.value.kind == "function"
    assert exc_info.value.key == "ghost"


def test_same_code_location_different_names_are_independent() -> None:
    registry = FunctionRegistry()
    registry.register(_unit("a", code="src/shared"))
    registry.register(_unit("b", code="src/shared"))
    assert registry.names() == ["a", "b"]


def test_iteration_in_registration_order() -> None:
    registry = FunctionRegistry()
    for name in ("z", "a", "m"):
        registry.register(_unit(name))
    assert [u.name for u in registry] == ["z", "a", "m"]


def test_identity_shared_by_reference() -> None:
    a, b = _unit("a"), _unit("b")
    assert a.identity is b.identity


def test_unit_defaults() -> None:
    unit = _unit("fn")
    assert unit.budget == ResourceBudget(memory_mb=128, timeout_s=3)
    assert unit.runtime == "python3.12"
    assert unit.handler == "handler.handler"
    assert unit.extensions == frozenset()


def test_extensions_become_frozenset() -> None:
    unit = DeployableUnit(name="fn", code="src", identity=ROLE, extensions=["layer-a", "layer-a"])
    assert unit.extensions == frozenset({"layer-a"})


class TestResourceBudget:
    def test_within_bounds(self) -> None:
        ResourceBudget(memory_mb=10240, timeout_s=900).check("fn")

    @pytest.mark.parametrize(
        "budget, fragment",
        [
            (ResourceBudget(memory_mb=64), "memory 64"),
            (ResourceBudget(memory_mb=20000), "memory 20000"),
            (ResourceBudget(timeout_s=0), "timeout 0"),
            (ResourceBudget(timeout_s=901), "timeout 901"),
        ],
    )
    def test_out_of_bounds(self, budget: ResourceBudget, fragment: str) -> None:
        with pytest.raises(InvalidBudget, match=fragment):
            budget.check("fn")

    def test_custom_bounds(self) -> None:
        config = BuildConfig(max_timeout_s=30)
        with pytest.raises(InvalidBudget):
            ResourceBudget(timeout_s=60).check("fn", config)
