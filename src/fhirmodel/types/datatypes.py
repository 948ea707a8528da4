"""FHIR complex data types."""

from typing import Annotated, Optional, Tuple

from pydantic import Field

from fhirmodel.core.annotations import Binding, BindingStrength, Choice, ReferenceTarget, Required, Summary
from fhirmodel.core.constraint import LEVEL_RULE, SOURCE_BASE, constraint
from fhirmodel.core.model import BackboneElement, Element
from fhirmodel.types.codes import (
    VALUE_SET_BASE,
    ContactPointSystem,
    ContactPointUse,
    DayOfWeek,
    EventTiming,
    IdentifierUse,
    NarrativeStatus,
    QuantityComparator,
    RelatedArtifactType,
    UnitsOfTime,
)
from fhirmodel.types.primitives import (
    Boolean,
    Canonical,
    Code,
    DateTime,
    Decimal,
    Id,
    Instant,
    Markdown,
    PositiveInt,
    String,
    Time,
    UnsignedInt,
    Uri,
    Url,
    Xhtml,
)

UCUM = "http://unitsofmeasure.org"


class Coding(Element):
    """A reference to a code defined by a terminology system."""

    system: Annotated[Optional[Uri], Summary()] = None
    version: Annotated[Optional[String], Summary()] = None
    code: Annotated[Optional[Code], Summary()] = None
    display: Annotated[Optional[String], Summary()] = None
    user_selected: Annotated[Optional[Boolean], Summary()] = Field(None, alias="userSelected")


class CodeableConcept(Element):
    """A concept that may be defined by a formal reference to a terminology or by text."""

    coding: Annotated[Tuple[Coding, ...], Summary()] = ()
    text: Annotated[Optional[String], Summary()] = None


@constraint(
    id="per-1",
    level=LEVEL_RULE,
    location="(base)",
    description="If present, start SHALL have a lower value than end",
    expression="start.hasValue().not() or end.hasValue().not() or (start <= end)",
    source=f"{SOURCE_BASE}/Period",
)
class Period(Element):
    """A time period defined by a start and end date and optionally time."""

    start: Annotated[Optional[DateTime], Summary()] = None
    end: Annotated[Optional[DateTime], Summary()] = None


@constraint(
    id="ref-1",
    level=LEVEL_RULE,
    location="(base)",
    description="SHALL have a contained resource if a local reference is provided",
    expression="reference.startsWith('#').not() or (reference.substring(1).trace('url') in %rootResource.contained.id.trace('ids'))",
    source=f"{SOURCE_BASE}/Reference",
)
class Reference(Element):
    """A reference from one resource to another."""

    reference: Annotated[Optional[String], Summary()] = None
    type: Annotated[
        Optional[Uri],
        Summary(),
        Binding(
            "FHIRResourceTypeExt",
            BindingStrength.EXTENSIBLE,
            VALUE_SET_BASE + "resource-types",
            "A resource (or, for logical models, the URI of the logical model).",
        ),
    ] = None
    identifier: Annotated[Optional["Identifier"], Summary()] = None
    display: Annotated[Optional[String], Summary()] = None


class Identifier(Element):
    """An identifier intended for computation."""

    use: Annotated[
        Optional[IdentifierUse],
        Summary(),
        Binding("IdentifierUse", BindingStrength.REQUIRED, VALUE_SET_BASE + "identifier-use|4.0.1"),
    ] = None
    type: Annotated[
        Optional[CodeableConcept],
        Summary(),
        Binding("IdentifierType", BindingStrength.EXTENSIBLE, VALUE_SET_BASE + "identifier-type"),
    ] = None
    system: Annotated[Optional[Uri], Summary()] = None
    value: Annotated[Optional[String], Summary()] = None
    period: Annotated[Optional[Period], Summary()] = None
    assigner: Annotated[Optional[Reference], Summary(), ReferenceTarget("Organization")] = None


Reference.model_rebuild()


@constraint(
    id="qty-3",
    level=LEVEL_RULE,
    location="(base)",
    description="If a code for the unit is present, the system SHALL also be present",
    expression="code.empty() or system.exists()",
    source=f"{SOURCE_BASE}/Quantity",
)
class Quantity(Element):
    """A measured amount (or an amount that can potentially be measured)."""

    value: Annotated[Optional[Decimal], Summary()] = None
    comparator: Annotated[
        Optional[QuantityComparator],
        Summary(),
        Binding("QuantityComparator", BindingStrength.REQUIRED, VALUE_SET_BASE + "quantity-comparator|4.0.1"),
    ] = None
    unit: Annotated[Optional[String], Summary()] = None
    system: Annotated[Optional[Uri], Summary()] = None
    code: Annotated[Optional[Code], Summary()] = None


@constraint(
    id="age-1",
    level=LEVEL_RULE,
    location="(base)",
    description="There SHALL be a code if there is a value and it SHALL be an expression of time.  If system is present, it SHALL be UCUM.  If value is present, it SHALL be positive.",
    expression="(code.exists() or value.empty()) and (system.empty() or system = %ucum) and (value.empty() or value.hasValue().not() or value > 0)",
    source=f"{SOURCE_BASE}/Age",
)
class Age(Quantity):
    """A duration of time during which an organism (or a process) has existed."""


@constraint(
    id="drt-1",
    level=LEVEL_RULE,
    location="(base)",
    description="There SHALL be a code if there is a value and it SHALL be an expression of time.  If system is present, it SHALL be UCUM.",
    expression="code.exists() implies ((system = %ucum) and value.exists())",
    source=f"{SOURCE_BASE}/Duration",
)
class Duration(Quantity):
    """A length of time."""


@constraint(
    id="rng-2",
    level=LEVEL_RULE,
    location="(base)",
    description="If present, low SHALL have a lower value than high",
    expression="low.empty() or high.empty() or (low <= high)",
    source=f"{SOURCE_BASE}/Range",
)
class Range(Element):
    """A set of ordered Quantities defined by a low and high limit."""

    low: Annotated[Optional[Quantity], Summary()] = None
    high: Annotated[Optional[Quantity], Summary()] = None


@constraint(
    id="timing-11",
    level="Warning",
    location="(base)",
    description="SHOULD contain a code from value set http://hl7.org/fhir/ValueSet/timing-abbreviation",
    expression="code.exists() implies (code.memberOf('http://hl7.org/fhir/ValueSet/timing-abbreviation', 'preferred'))",
    source=f"{SOURCE_BASE}/Timing",
)
@constraint(
    id="tim-1",
    level=LEVEL_RULE,
    location="Timing.repeat",
    description="if there's a duration, there needs to be duration units",
    expression="duration.empty() or durationUnit.exists()",
    source=f"{SOURCE_BASE}/Timing",
)
@constraint(
    id="tim-2",
    level=LEVEL_RULE,
    location="Timing.repeat",
    description="if there's a period, there needs to be period units",
    expression="period.empty() or periodUnit.exists()",
    source=f"{SOURCE_BASE}/Timing",
)
@constraint(
    id="tim-4",
    level=LEVEL_RULE,
    location="Timing.repeat",
    description="duration SHALL be a non-negative value",
    expression="duration.exists() implies duration >= 0",
    source=f"{SOURCE_BASE}/Timing",
)
@constraint(
    id="tim-5",
    level=LEVEL_RULE,
    location="Timing.repeat",
    description="period SHALL be a non-negative value",
    expression="period.exists() implies period >= 0",
    source=f"{SOURCE_BASE}/Timing",
)
@constraint(
    id="tim-6",
    level=LEVEL_RULE,
    location="Timing.repeat",
    description="If there's a periodMax, there must be a period",
    expression="periodMax.empty() or period.exists()",
    source=f"{SOURCE_BASE}/Timing",
)
@constraint(
    id="tim-7",
    level=LEVEL_RULE,
    location="Timing.repeat",
    description="If there's a durationMax, there must be a duration",
    expression="durationMax.empty() or duration.exists()",
    source=f"{SOURCE_BASE}/Timing",
)
@constraint(
    id="tim-8",
    level=LEVEL_RULE,
    location="Timing.repeat",
    description="If there's a countMax, there must be a count",
    expression="countMax.empty() or count.exists()",
    source=f"{SOURCE_BASE}/Timing",
)
@constraint(
    id="tim-9",
    level=LEVEL_RULE,
    location="Timing.repeat",
    description="If there's an offset, there must be a when (and not C, CM, CD, CV)",
    expression="offset.empty() or (when.exists() and ((when in ('C' | 'CM' | 'CD' | 'CV')).not()))",
    source=f"{SOURCE_BASE}/Timing",
)
@constraint(
    id="tim-10",
    level=LEVEL_RULE,
    location="Timing.repeat",
    description="If there's a timeOfDay, there cannot be a when, or vice versa",
    expression="timeOfDay.empty() or when.empty()",
    source=f"{SOURCE_BASE}/Timing",
)
class Timing(BackboneElement):
    """An occurrence that may occur multiple times."""

    class Repeat(BackboneElement):
        """A set of rules that describe when the event is scheduled."""

        fhir_type = "Timing.Repeat"

        bounds: Annotated[Optional[Element], Summary(), Choice("Duration", "Range", "Period")] = None
        count: Annotated[Optional[PositiveInt], Summary()] = None
        count_max: Annotated[Optional[PositiveInt], Summary()] = Field(None, alias="countMax")
        duration: Annotated[Optional[Decimal], Summary()] = None
        duration_max: Annotated[Optional[Decimal], Summary()] = Field(None, alias="durationMax")
        duration_unit: Annotated[
            Optional[UnitsOfTime],
            Summary(),
            Binding("UnitsOfTime", BindingStrength.REQUIRED, VALUE_SET_BASE + "units-of-time|4.0.1"),
        ] = Field(None, alias="durationUnit")
        frequency: Annotated[Optional[PositiveInt], Summary()] = None
        frequency_max: Annotated[Optional[PositiveInt], Summary()] = Field(None, alias="frequencyMax")
        period: Annotated[Optional[Decimal], Summary()] = None
        period_max: Annotated[Optional[Decimal], Summary()] = Field(None, alias="periodMax")
        period_unit: Annotated[
            Optional[UnitsOfTime],
            Summary(),
            Binding("UnitsOfTime", BindingStrength.REQUIRED, VALUE_SET_BASE + "units-of-time|4.0.1"),
        ] = Field(None, alias="periodUnit")
        day_of_week: Annotated[
            Tuple[DayOfWeek, ...],
            Summary(),
            Binding("DayOfWeek", BindingStrength.REQUIRED, VALUE_SET_BASE + "days-of-week|4.0.1"),
        ] = Field((), alias="dayOfWeek")
        time_of_day: Annotated[Tuple[Time, ...], Summary()] = Field((), alias="timeOfDay")
        when: Annotated[
            Tuple[EventTiming, ...],
            Summary(),
            Binding("EventTiming", BindingStrength.REQUIRED, VALUE_SET_BASE + "event-timing|4.0.1"),
        ] = ()
        offset: Annotated[Optional[UnsignedInt], Summary()] = None

    event: Annotated[Tuple[DateTime, ...], Summary()] = ()
    repeat: Annotated[Optional[Repeat], Summary()] = None
    code: Annotated[
        Optional[CodeableConcept],
        Summary(),
        Binding("TimingAbbreviation", BindingStrength.PREFERRED, VALUE_SET_BASE + "timing-abbreviation"),
    ] = None


class Meta(Element):
    """Metadata about a resource."""

    version_id: Annotated[Optional[Id], Summary()] = Field(None, alias="versionId")
    last_updated: Annotated[Optional[Instant], Summary()] = Field(None, alias="lastUpdated")
    source: Annotated[Optional[Uri], Summary()] = None
    profile: Annotated[Tuple[Canonical, ...], Summary()] = ()
    security: Annotated[
        Tuple[Coding, ...],
        Summary(),
        Binding("SecurityLabels", BindingStrength.EXTENSIBLE, VALUE_SET_BASE + "security-labels"),
    ] = ()
    tag: Annotated[
        Tuple[Coding, ...],
        Summary(),
        Binding("Tags", BindingStrength.EXAMPLE, VALUE_SET_BASE + "common-tags"),
    ] = ()


class Narrative(Element):
    """Human-readable summary of the resource."""

    status: Annotated[
        Optional[NarrativeStatus],
        Required(),
        Binding("NarrativeStatus", BindingStrength.REQUIRED, VALUE_SET_BASE + "narrative-status|4.0.1"),
    ] = None
    div: Annotated[Optional[Xhtml], Required()] = None


@constraint(
    id="cpt-2",
    level=LEVEL_RULE,
    location="(base)",
    description="A system is required if a value is provided.",
    expression="value.empty() or system.exists()",
    source=f"{SOURCE_BASE}/ContactPoint",
)
class ContactPoint(Element):
    """Details for all kinds of technology mediated contact points."""

    system: Annotated[
        Optional[ContactPointSystem],
        Summary(),
        Binding("ContactPointSystem", BindingStrength.REQUIRED, VALUE_SET_BASE + "contact-point-system|4.0.1"),
    ] = None
    value: Annotated[Optional[String], Summary()] = None
    use: Annotated[
        Optional[ContactPointUse],
        Summary(),
        Binding("ContactPointUse", BindingStrength.REQUIRED, VALUE_SET_BASE + "contact-point-use|4.0.1"),
    ] = None
    rank: Annotated[Optional[PositiveInt], Summary()] = None
    period: Annotated[Optional[Period], Summary()] = None


class ContactDetail(Element):
    """Contact information for a person or organization."""

    name: Annotated[Optional[String], Summary()] = None
    telecom: Annotated[Tuple[ContactPoint, ...], Summary()] = ()


class RelatedArtifact(Element):
    """Related artifacts such as additional documentation, justification, or bibliographic references."""

    type: Annotated[
        Optional[RelatedArtifactType],
        Summary(),
        Required(),
        Binding("RelatedArtifactType", BindingStrength.REQUIRED, VALUE_SET_BASE + "related-artifact-type|4.0.1"),
    ] = None
    label: Annotated[Optional[String], Summary()] = None
    display: Annotated[Optional[String], Summary()] = None
    citation: Annotated[Optional[Markdown], Summary()] = None
    url: Annotated[Optional[Url], Summary()] = None
    resource: Annotated[Optional[Canonical], Summary()] = None


@constraint(
    id="exp-1",
    level=LEVEL_RULE,
    location="(base)",
    description="An expression or a reference must be provided",
    expression="expression.exists() or reference.exists()",
    source=f"{SOURCE_BASE}/Expression",
)
class Expression(Element):
    """An expression that can be used to generate a value."""

    description: Annotated[Optional[String], Summary()] = None
    name: Annotated[Optional[Id], Summary()] = None
    language: Annotated[
        Optional[Code],
        Summary(),
        Required(),
        Binding("ExpressionLanguage", BindingStrength.EXTENSIBLE, VALUE_SET_BASE + "expression-language"),
    ] = None
    expression: Annotated[Optional[String], Summary()] = None
    reference: Annotated[Optional[Uri], Summary()] = None


class UsageContext(Element):
    """The context that the content is intended to support."""

    code: Annotated[
        Optional[Coding],
        Summary(),
        Required(),
        Binding("UsageContextType", BindingStrength.EXTENSIBLE, VALUE_SET_BASE + "usage-context-type"),
    ] = None
    value: Annotated[
        Optional[Element],
        Summary(),
        Required(),
        Choice(CodeableConcept, Quantity, Range, Reference),
        ReferenceTarget(
            "PlanDefinition",
            "ResearchStudy",
            "InsurancePlan",
            "HealthcareService",
            "Group",
            "Location",
            "Organization",
        ),
    ] = None

