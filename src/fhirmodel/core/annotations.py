"""Field markers for model classes.

Markers are placed in ``Annotated`` field types, where pydantic keeps them
in ``FieldInfo.metadata`` without acting on them::

    action_id: Annotated[Optional[Id], Required()] = Field(None, alias="actionId")
    offset: Annotated[Optional[Element], Choice("Duration", "Range")] = None

The framework reads them back through :mod:`fhirmodel.core.model_support`.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Tuple, Union


@dataclass(frozen=True)
class Required:
    """The element must be present (or non-empty, when repeating)."""


@dataclass(frozen=True)
class Summary:
    """The element is part of the summary view of its resource."""


class Choice:
    """Allowed concrete types of a choice element.

    Types may be given as classes or as registered FHIR type names; names
    are resolved lazily so a choice can refer to types defined later.
    """

    __slots__ = ("types",)

    def __init__(self, *types: Union[type, str]):
        """Initialize with the allowed types."""
        if not types:
            raise TypeError("Choice requires at least one type")
        self.types: Tuple[Union[type, str], ...] = types

    def type_names(self) -> Tuple[str, ...]:
        """Return the simple names of the allowed types."""
        return tuple(t if isinstance(t, str) else t.__name__ for t in self.types)

    def __repr__(self) -> str:
        return f"Choice({', '.join(self.type_names())})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Choice):
            return NotImplemented
        return self.type_names() == other.type_names()

    def __hash__(self) -> int:
        return hash(self.type_names())


@dataclass(frozen=True)
class ReferenceTarget:
    """Resource types a Reference element may point to."""

    resource_types: Tuple[str, ...]

    def __init__(self, *resource_types: str):
        object.__setattr__(self, "resource_types", tuple(resource_types))


class BindingStrength(str, Enum):
    """Terminology binding strengths."""

    REQUIRED = "required"
    EXTENSIBLE = "extensible"
    PREFERRED = "preferred"
    EXAMPLE = "example"


@dataclass(frozen=True)
class Binding:
    """Terminology binding of a coded element.

    Carried as metadata only; terminology validation is left to external
    services.
    """

    binding_name: str
    strength: BindingStrength
    value_set: str = ""
    description: str = ""
