"""Resource base types.

``Resource`` carries the ``id``/``meta``/``implicitRules``/``language``
elements shared by every resource. ``DomainResource`` adds narrative,
contained resources and both extension lists. Resources are exempt from the
value-or-children rule.
"""

from typing import Annotated, ClassVar, Optional, Tuple

from pydantic import Field

from fhirmodel.core import validation
from fhirmodel.core.annotations import Binding, BindingStrength, Summary
from fhirmodel.core.constraint import LEVEL_RULE, LEVEL_WARNING, SOURCE_BASE, constraint
from fhirmodel.core.model import FHIRModel, HasExtensions, HasId, HasModifierExtensions
from fhirmodel.types.codes import VALUE_SET_BASE
from fhirmodel.types.datatypes import Meta, Narrative
from fhirmodel.types.primitives import Code, Uri


class Resource(HasId):
    """Base for all resources."""

    meta: Annotated[Optional[Meta], Summary()] = None
    implicit_rules: Annotated[Optional[Uri], Summary()] = Field(None, alias="implicitRules")
    language: Annotated[
        Optional[Code],
        Binding(
            "Language",
            BindingStrength.PREFERRED,
            VALUE_SET_BASE + "languages",
            "A human language.",
        ),
    ] = None

    def _validate(self) -> None:
        super()._validate()
        validation.check_id(self.id)


class HasNarrative(FHIRModel):
    """Capability: human readable narrative and inline contained resources."""

    abstract_model: ClassVar[bool] = True

    text: Optional[Narrative] = None
    contained: Tuple[Resource, ...] = ()


@constraint(
    id="dom-2",
    level=LEVEL_RULE,
    location="(base)",
    description="If the resource is contained in another resource, it SHALL NOT contain nested Resources",
    expression="contained.contained.empty()",
    source=f"{SOURCE_BASE}/DomainResource",
)
@constraint(
    id="dom-3",
    level=LEVEL_RULE,
    location="(base)",
    description="If the resource is contained in another resource, it SHALL be referred to from elsewhere in the resource or SHALL refer to the containing resource",
    expression="contained.where((('#'+id in (%resource.descendants().reference | %resource.descendants().as(canonical) | %resource.descendants().as(uri) | %resource.descendants().as(url))) or descendants().where(reference = '#').exists() or descendants().where(as(canonical) = '#').exists() or descendants().where(as(canonical) = '#').exists()).not()).trace('unmatched', id).empty()",
    source=f"{SOURCE_BASE}/DomainResource",
)
@constraint(
    id="dom-4",
    level=LEVEL_RULE,
    location="(base)",
    description="If a resource is contained in another resource, it SHALL NOT have a meta.versionId or a meta.lastUpdated",
    expression="contained.meta.versionId.empty() and contained.meta.lastUpdated.empty()",
    source=f"{SOURCE_BASE}/DomainResource",
)
@constraint(
    id="dom-5",
    level=LEVEL_RULE,
    location="(base)",
    description="If a resource is contained in another resource, it SHALL NOT have a security label",
    expression="contained.meta.security.empty()",
    source=f"{SOURCE_BASE}/DomainResource",
)
@constraint(
    id="dom-6",
    level=LEVEL_WARNING,
    location="(base)",
    description="A resource should have narrative for robust management",
    expression="text.`div`.exists()",
    source=f"{SOURCE_BASE}/DomainResource",
)
class DomainResource(HasModifierExtensions, HasExtensions, HasNarrative, Resource):
    """A resource with narrative, extensions, and contained resources."""
