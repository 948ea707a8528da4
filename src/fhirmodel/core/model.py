"""Model base classes.

Every FHIR type is a frozen pydantic model. Structural capabilities are small
mixins composed per type level:

* ``HasId``: the ``id`` element
* ``HasExtensions``: the ``extension`` list
* ``HasModifierExtensions``: the ``modifierExtension`` list
* ``HasChildrenCheck``: enforcement of the value-or-children rule

``Element`` and ``BackboneElement`` are compositions of these; resources
compose their own set in :mod:`fhirmodel.resources.base`. Pydantic collects
fields in reverse MRO order, so the order of the bases fixes the element
order seen by builders and visitors.
"""

from typing import TYPE_CHECKING, Annotated, Any, ClassVar, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr, model_validator

from fhirmodel.core import model_support, validation
from fhirmodel.core.annotations import Choice, Required
from fhirmodel.core.constraint import LEVEL_RULE, constraint

if TYPE_CHECKING:
    from fhirmodel.core.builder import Builder
    from fhirmodel.core.visitor import Visitor


class FHIRModel(BaseModel):
    """Base class of all FHIR model types.

    Instances are immutable. They are normally created through
    :meth:`builder`, though keyword construction (by attribute name or FHIR
    element name) performs exactly the same checks.
    """

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        populate_by_name=True,
        arbitrary_types_allowed=True,
    )

    # FHIR type name; defaults to the class name
    fhir_type: ClassVar[Optional[str]] = None
    # Capability mixins and abstract bases set this in their own body
    abstract_model: ClassVar[bool] = True

    _hash_code: Optional[int] = PrivateAttr(default=None)

    @classmethod
    def __pydantic_init_subclass__(cls, **kwargs: Any) -> None:
        super().__pydantic_init_subclass__(**kwargs)
        if not cls.__dict__.get("abstract_model", False):
            model_support.register_type(cls)

    @classmethod
    def fhir_type_name(cls) -> str:
        """Return the FHIR type name of this class."""
        return cls.__dict__.get("fhir_type") or cls.__name__

    @model_validator(mode="after")
    def _check_structure(self) -> "FHIRModel":
        validation.validate_elements(self)
        self._validate()
        if self._requires_value_or_children():
            validation.require_value_or_children(self)
        return self

    def _validate(self) -> None:
        """Type-specific construction checks; overridden by subclasses."""

    def _requires_value_or_children(self) -> bool:
        return False

    def has_value(self) -> bool:
        """Return True if this node carries a primitive value."""
        return False

    def has_children(self) -> bool:
        """Return True if any element other than ``id`` is populated."""
        for attr in type(self).model_fields:
            if attr == "id":
                continue
            value = getattr(self, attr)
            if isinstance(value, tuple):
                if value:
                    return True
            elif value is not None:
                return True
        return False

    @classmethod
    def builder(cls, *required: Any, **fields: Any) -> "Builder":
        """Return a builder for this type.

        Args:
            *required: Values for the required elements, in declaration order
            **fields: Any further elements, by attribute or FHIR name

        Returns:
            A new Builder
        """
        from fhirmodel.core.builder import Builder

        return Builder(cls, *required, **fields)

    def to_builder(self) -> "Builder":
        """Return a builder seeded with this instance's elements."""
        from fhirmodel.core.builder import Builder

        builder = Builder(self.__class__)
        for attr in type(self).model_fields:
            value = getattr(self, attr)
            if isinstance(value, tuple):
                if value:
                    builder.update(**{attr: list(value)})
            elif value is not None:
                builder.update(**{attr: value})
        return builder

    def accept(
        self, visitor: "Visitor", element_name: Optional[str] = None, element_index: int = -1
    ) -> None:
        """Walk this node and its descendants with ``visitor``.

        Args:
            visitor: Visitor receiving the traversal callbacks
            element_name: Name reported for this node; defaults to the FHIR type name
            element_index: Position within the parent list, or -1
        """
        from fhirmodel.core.visitor import accept

        accept(self, element_name or self.fhir_type_name(), visitor, element_index)

    def __eq__(self, other: object) -> bool:
        if self is other:
            return True
        if not isinstance(other, FHIRModel):
            return NotImplemented
        if type(self) is not type(other):
            return False
        return all(
            getattr(self, attr) == getattr(other, attr) for attr in type(self).model_fields
        )

    def __hash__(self) -> int:
        result = self._hash_code
        if result is None:
            result = hash(
                (type(self),) + tuple(getattr(self, attr) for attr in type(self).model_fields)
            )
            # idempotent, so concurrent first reads may both store it
            self._hash_code = result
        return result


class HasId(FHIRModel):
    """Capability: an ``id`` for internal cross references."""

    abstract_model: ClassVar[bool] = True

    id: Optional[str] = None


class HasExtensions(FHIRModel):
    """Capability: additional content defined by implementations."""

    abstract_model: ClassVar[bool] = True

    extension: Tuple["Extension", ...] = ()


class HasModifierExtensions(FHIRModel):
    """Capability: extensions that change the meaning of the element.

    Consumers must not ignore modifier extensions they do not understand.
    """

    abstract_model: ClassVar[bool] = True

    modifier_extension: Tuple["Extension", ...] = Field((), alias="modifierExtension")


class HasChildrenCheck(FHIRModel):
    """Capability: rejects nodes with neither a value nor children (ele-1)."""

    abstract_model: ClassVar[bool] = True

    def _requires_value_or_children(self) -> bool:
        return True


class Element(HasChildrenCheck, HasExtensions, HasId):
    """Base for all elements contained in a resource."""

    def _validate(self) -> None:
        super()._validate()
        validation.check_string(self.id)


class BackboneElement(HasModifierExtensions, Element):
    """Base for nested structures defined inside a resource or data type."""


@constraint(
    id="ext-1",
    level=LEVEL_RULE,
    location="(base)",
    description="Must have either extensions or value[x], not both",
    expression="extension.exists() != value.exists()",
    source="http://hl7.org/fhir/StructureDefinition/Extension",
)
class Extension(Element):
    """Optional extension element.

    ``value`` is a choice over the open type set; the allowed names resolve
    against the registry on first use.
    """

    url: Annotated[Optional[str], Required()] = None
    value: Annotated[
        Optional[Element],
        Choice(
            "base64Binary",
            "boolean",
            "canonical",
            "code",
            "date",
            "dateTime",
            "decimal",
            "id",
            "instant",
            "integer",
            "markdown",
            "oid",
            "positiveInt",
            "string",
            "time",
            "unsignedInt",
            "uri",
            "url",
            "uuid",
            "Age",
            "CodeableConcept",
            "Coding",
            "ContactDetail",
            "ContactPoint",
            "Duration",
            "Expression",
            "Identifier",
            "Meta",
            "Period",
            "Quantity",
            "Range",
            "Reference",
            "RelatedArtifact",
            "Timing",
        ),
    ] = None

    def _validate(self) -> None:
        super()._validate()
        validation.check_uri(self.url)


HasExtensions.model_rebuild()
HasModifierExtensions.model_rebuild()
Element.model_rebuild()
BackboneElement.model_rebuild()
Extension.model_rebuild()
