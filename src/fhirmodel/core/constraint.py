"""Declarative constraint metadata.

Constraints are FHIRPath-style invariants attached to model classes. The
model never evaluates them; they are read by external validators such as
:class:`fhirmodel.validation.constraint_validator.ConstraintValidator`.
"""

from dataclasses import dataclass
from typing import Callable, List, Tuple, Type, TypeVar

LEVEL_RULE = "Rule"
LEVEL_WARNING = "Warning"

SOURCE_BASE = "http://hl7.org/fhir/StructureDefinition"

_CONSTRAINTS_ATTR = "__fhir_constraints__"

C = TypeVar("C", bound=type)


@dataclass(frozen=True)
class Constraint:
    """A declarative invariant of a model class.

    Attributes:
        id: Constraint key, e.g. ``tst-1``
        level: ``Rule`` (error) or ``Warning``
        location: Path the expression is evaluated at, ``(base)`` for the
            annotated type itself
        description: Human readable description
        expression: Boolean FHIRPath expression
        source: Canonical URL of the defining structure definition
        modifier: True if the constraint is a modifier invariant
    """

    id: str
    level: str
    location: str
    description: str
    expression: str
    source: str = ""
    modifier: bool = False

    @property
    def is_rule(self) -> bool:
        """Return True for error-level constraints."""
        return self.level == LEVEL_RULE


def constraint(
    id: str,
    level: str,
    location: str,
    description: str,
    expression: str,
    source: str = "",
    modifier: bool = False,
) -> Callable[[C], C]:
    """Class decorator attaching a Constraint to a model class.

    Decorators stack; constraints keep their top-to-bottom source order.

    Example:
        @constraint(
            id="tst-1",
            level="Rule",
            location="TestScript.setup.action",
            description="Setup action SHALL contain either an operation or assert but not both.",
            expression="operation.exists() xor assert.exists()",
        )
        class SetupAction(BackboneElement):
            ...
    """
    item = Constraint(id, level, location, description, expression, source, modifier)

    def decorator(cls: C) -> C:
        own: Tuple[Constraint, ...] = cls.__dict__.get(_CONSTRAINTS_ATTR, ())
        # decorators apply bottom-up, so prepend to keep source order
        setattr(cls, _CONSTRAINTS_ATTR, (item,) + own)
        return cls

    return decorator


def get_own_constraints(cls: type) -> Tuple[Constraint, ...]:
    """Return the constraints declared directly on ``cls``."""
    return cls.__dict__.get(_CONSTRAINTS_ATTR, ())


def get_constraints(cls: Type) -> List[Constraint]:
    """Return the constraints of ``cls`` and its ancestors, base classes first."""
    result: List[Constraint] = []
    for base in reversed(cls.__mro__):
        result.extend(get_own_constraints(base))
    return result
