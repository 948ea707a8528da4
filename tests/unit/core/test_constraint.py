"""Test declarative constraint metadata."""

import pytest

from fhirmodel.core.constraint import (
    LEVEL_RULE,
    LEVEL_WARNING,
    Constraint,
    constraint,
    get_constraints,
    get_own_constraints,
)
from fhirmodel.core.model import Extension
from fhirmodel.resources.base import DomainResource
from fhirmodel.resources.plan_definition import PlanDefinition
from fhirmodel.resources.testscript import TestScript as Script
from fhirmodel.types.datatypes import Age, Duration, Quantity, Timing

pytestmark = pytest.mark.constraints


class TestConstraintDecorator:
    """Test attaching constraints to classes."""

    def test_stacked_decorators_keep_source_order(self):
        """Test that stacked decorators read top to bottom."""

        @constraint("x-1", LEVEL_RULE, "(base)", "first", "a.exists()")
        @constraint("x-2", LEVEL_WARNING, "(base)", "second", "b.exists()")
        class Annotated:
            pass

        assert [c.id for c in get_own_constraints(Annotated)] == ["x-1", "x-2"]

    def test_constraint_fields(self):
        """Test the metadata carried by a constraint."""
        item = Constraint("x-1", LEVEL_RULE, "(base)", "desc", "a.exists()", source="http://x")

        assert item.is_rule
        assert not Constraint("x-2", LEVEL_WARNING, "(base)", "d", "e").is_rule
        assert item.source == "http://x"
        assert not item.modifier

    def test_constraints_are_immutable(self):
        """Test that constraint records cannot be changed."""
        item = Constraint("x-1", LEVEL_RULE, "(base)", "desc", "a.exists()")

        with pytest.raises(AttributeError):
            item.id = "x-2"

    def test_subclass_does_not_change_base(self):
        """Test that decorating a subclass leaves the base's constraints alone."""

        @constraint("b-1", LEVEL_RULE, "(base)", "base", "a.exists()")
        class Base:
            pass

        @constraint("s-1", LEVEL_RULE, "(base)", "sub", "b.exists()")
        class Sub(Base):
            pass

        assert [c.id for c in get_own_constraints(Base)] == ["b-1"]
        assert [c.id for c in get_constraints(Sub)] == ["b-1", "s-1"]


class TestModelConstraints:
    """Test the constraints declared on the bundled types."""

    def test_inherited_constraints_come_first(self):
        """Test that base class constraints precede the type's own."""
        assert [c.id for c in get_constraints(Duration)] == ["qty-3", "drt-1"]
        assert [c.id for c in get_constraints(Age)] == ["qty-3", "age-1"]
        assert [c.id for c in get_own_constraints(Duration)] == ["drt-1"]

    def test_quantity_constraint(self):
        """Test the fields of a data type constraint."""
        (qty,) = get_constraints(Quantity)

        assert qty.id == "qty-3"
        assert qty.level == LEVEL_RULE
        assert qty.location == "(base)"
        assert qty.expression == "code.empty() or system.exists()"
        assert qty.source == "http://hl7.org/fhir/StructureDefinition/Quantity"

    def test_extension_constraint(self):
        """Test the extension invariant."""
        assert [c.id for c in get_constraints(Extension)] == ["ext-1"]

    def test_domain_resource_constraints(self):
        """Test the constraints shared by all domain resources."""
        ids = [c.id for c in get_constraints(DomainResource)]

        assert ids == ["dom-2", "dom-3", "dom-4", "dom-5", "dom-6"]
        dom6 = get_constraints(DomainResource)[-1]
        assert dom6.level == LEVEL_WARNING

    def test_testscript_constraints(self):
        """Test the TestScript invariants and their locations."""
        constraints = get_constraints(Script)
        ids = [c.id for c in constraints]

        assert ids[:5] == ["dom-2", "dom-3", "dom-4", "dom-5", "dom-6"]
        assert ids[5:] == [f"tst-{i}" for i in range(14)]
        tst1 = constraints[6]
        assert tst1.location == "TestScript.setup.action"
        assert tst1.expression == "operation.exists() xor assert.exists()"

    def test_plan_definition_constraints(self):
        """Test the PlanDefinition invariants."""
        ids = [c.id for c in get_own_constraints(PlanDefinition)]

        assert ids[0] == "cnl-0"
        assert "planDefinition-1" in ids

    def test_timing_constraints(self):
        """Test constraints located on a backbone element of a data type."""
        locations = {c.id: c.location for c in get_constraints(Timing)}

        assert locations["timing-11"] == "(base)"
        assert locations["tim-1"] == "Timing.repeat"

    def test_nested_backbone_has_no_constraints_of_its_own(self):
        """Test that constraints live on the declaring type, not the backbone."""
        assert get_constraints(Script.Setup.Action) == []
