"""FHIR data types: primitives, bound codes and complex types."""

from fhirmodel.types import codes, datatypes, primitives
from fhirmodel.types.codes import BoundCode, ResourceTypeCode
from fhirmodel.types.datatypes import (
    Age,
    CodeableConcept,
    Coding,
    ContactDetail,
    ContactPoint,
    Duration,
    Expression,
    Identifier,
    Meta,
    Narrative,
    Period,
    Quantity,
    Range,
    Reference,
    RelatedArtifact,
    Timing,
    UsageContext,
)
from fhirmodel.types.primitives import (
    Base64Binary,
    Boolean,
    Canonical,
    Code,
    Date,
    DateTime,
    Decimal,
    Id,
    Instant,
    Integer,
    Markdown,
    Oid,
    PositiveInt,
    Primitive,
    String,
    Time,
    UnsignedInt,
    Uri,
    Url,
    Uuid,
    Xhtml,
)

__all__ = [
    "Age",
    "Base64Binary",
    "Boolean",
    "BoundCode",
    "Canonical",
    "Code",
    "CodeableConcept",
    "Coding",
    "ContactDetail",
    "ContactPoint",
    "Date",
    "DateTime",
    "Decimal",
    "Duration",
    "Expression",
    "Id",
    "Identifier",
    "Instant",
    "Integer",
    "Markdown",
    "Meta",
    "Narrative",
    "Oid",
    "Period",
    "PositiveInt",
    "Primitive",
    "Quantity",
    "Range",
    "Reference",
    "RelatedArtifact",
    "ResourceTypeCode",
    "String",
    "Time",
    "Timing",
    "UnsignedInt",
    "Uri",
    "Url",
    "UsageContext",
    "Uuid",
    "Xhtml",
    "codes",
    "datatypes",
    "primitives",
]
