"""Generic object-model framework: base classes, builders, validation and traversal."""

from fhirmodel.core.annotations import Binding, BindingStrength, Choice, ReferenceTarget, Required, Summary
from fhirmodel.core.builder import Builder
from fhirmodel.core.constraint import Constraint, constraint, get_constraints
from fhirmodel.core.model import (
    BackboneElement,
    Element,
    Extension,
    FHIRModel,
    HasChildrenCheck,
    HasExtensions,
    HasId,
    HasModifierExtensions,
)
from fhirmodel.core.visitor import CollectingVisitor, DefaultVisitor, PathAwareVisitor, Visitor

__all__ = [
    "BackboneElement",
    "Binding",
    "BindingStrength",
    "Builder",
    "Choice",
    "CollectingVisitor",
    "Constraint",
    "DefaultVisitor",
    "Element",
    "Extension",
    "FHIRModel",
    "HasChildrenCheck",
    "HasExtensions",
    "HasId",
    "HasModifierExtensions",
    "PathAwareVisitor",
    "ReferenceTarget",
    "Required",
    "Summary",
    "Visitor",
    "constraint",
    "get_constraints",
]
