"""Test the complex data types."""

import pytest

from fhirmodel.core.model import Extension
from fhirmodel.resources.plan_definition import PlanDefinition
from fhirmodel.types.codes import NarrativeStatus, RelatedArtifactType, UnitsOfTime
from fhirmodel.types.datatypes import (
    UCUM,
    Age,
    CodeableConcept,
    Coding,
    ContactDetail,
    ContactPoint,
    Duration,
    Identifier,
    Narrative,
    Period,
    Quantity,
    Reference,
    RelatedArtifact,
    Timing,
    UsageContext,
)
from fhirmodel.types.primitives import Decimal, String, Uri
from fhirmodel.utils.exceptions import (
    EmptyElement,
    InvalidChoiceType,
    InvalidReferenceType,
    MissingRequiredField,
)

XHTML_DIV = '<div xmlns="http://www.w3.org/1999/xhtml"><p>Glucose check</p></div>'


class TestExtension:
    """Test the extension element."""

    def test_url_is_required(self):
        """Test that an extension needs a url."""
        with pytest.raises(MissingRequiredField) as exc_info:
            Extension(value=String.of("x"))

        assert exc_info.value.field_name == "url"

    def test_value_accepts_open_type_set(self):
        """Test primitive and complex extension values."""
        age = Age.builder().value(42).unit("a").system(UCUM).code("a").build()

        extension = Extension.builder().url("http://example.org/age").value(age).build()

        assert extension.value is age
        assert Extension(url="http://example.org/flag", value=String.of("on")).value.value == "on"

    def test_value_rejects_backbone_elements(self):
        """Test that backbone elements are not extension values."""
        action = PlanDefinition.Action.builder().title("Draw blood").build()

        with pytest.raises(InvalidChoiceType) as exc_info:
            Extension(url="http://example.org/action", value=action)

        assert exc_info.value.field_name == "value"
        assert exc_info.value.supplied_type == "Action"

    def test_nested_extensions(self):
        """Test a complex extension made of sub-extensions."""
        part = Extension(url="part", value=String.of("a"))

        extension = Extension(url="http://example.org/complex", extension=(part,))

        assert extension.extension == (part,)
        assert extension.value is None


class TestQuantities:
    """Test Quantity and its specializations."""

    def test_duration_is_a_quantity(self, thirty_minutes):
        """Test the Quantity hierarchy and wrapped values."""
        assert isinstance(thirty_minutes, Quantity)
        assert thirty_minutes.value == Decimal.of(30)
        assert thirty_minutes.system == Uri.of(UCUM)

    def test_empty_duration(self):
        """Test that a duration with no elements is rejected."""
        with pytest.raises(EmptyElement):
            Duration.builder().build()

    def test_id_alone_is_not_content(self):
        """Test that an element id does not count as a child."""
        with pytest.raises(EmptyElement):
            Duration(id="d1")

    def test_comparator(self):
        """Test a bound code element on a data type."""
        quantity = Quantity.builder().value(5).comparator("<").build()

        assert quantity.comparator.value == "<"


class TestReferencesAndIdentifiers:
    """Test Reference and Identifier."""

    def test_reference_with_identifier(self):
        """Test the mutually recursive Reference and Identifier types."""
        identifier = Identifier.builder().system("http://example.org/mrn").value("12345").build()

        reference = Reference.builder().identifier(identifier).display("Jane").build()

        assert reference.identifier.value.value == "12345"

    def test_assigner_must_be_an_organization(self):
        """Test the reference target of Identifier.assigner."""
        organization = Reference.builder().reference("Organization/o1").build()
        patient = Reference.builder().reference("Patient/p1").build()

        assert Identifier.builder().assigner(organization).build().assigner == organization
        with pytest.raises(InvalidReferenceType):
            Identifier.builder().assigner(patient).build()


class TestNarrative:
    """Test the narrative type."""

    def test_status_and_div_are_required(self):
        """Test the positional required elements of Narrative."""
        narrative = Narrative.builder(NarrativeStatus.GENERATED, XHTML_DIV).build()

        assert narrative.status == NarrativeStatus.GENERATED
        assert narrative.div.value == XHTML_DIV

    def test_missing_div(self):
        """Test a narrative without content."""
        with pytest.raises(MissingRequiredField) as exc_info:
            Narrative.builder(NarrativeStatus.GENERATED).build()

        assert exc_info.value.field_name == "div"


class TestMetadataTypes:
    """Test the types used by resource metadata."""

    def test_usage_context_requires_code_and_value(self):
        """Test both required elements of UsageContext."""
        code = Coding.builder().system("http://terminology.hl7.org/CodeSystem/usage-context-type").code("focus").build()

        with pytest.raises(MissingRequiredField) as exc_info:
            UsageContext.builder(code).build()
        assert exc_info.value.field_name == "value"

        concept = CodeableConcept.builder().text("Diabetes").build()
        assert UsageContext.builder(code, concept).build().value == concept

    def test_usage_context_value_choice(self):
        """Test that a period is not a usage context value."""
        code = Coding.builder().code("focus").build()
        period = Period.builder().start("2024").build()

        with pytest.raises(InvalidChoiceType):
            UsageContext.builder(code, period).build()

    def test_related_artifact_type_is_required(self):
        """Test the required type of RelatedArtifact."""
        with pytest.raises(MissingRequiredField):
            RelatedArtifact.builder().display("Guideline").build()

        artifact = RelatedArtifact.builder(RelatedArtifactType.CITATION).citation("Smith 2020").build()
        assert artifact.type.value == "citation"

    def test_contact_detail(self):
        """Test repeating elements of a contact."""
        phone = ContactPoint.builder().system("phone").value("555-0100").build()

        contact = ContactDetail.builder().name("Clinic").telecom(phone).build()

        assert contact.telecom == (phone,)


class TestTiming:
    """Test Timing and its repeat backbone."""

    def test_repeat(self):
        """Test a twice daily schedule."""
        repeat = Timing.Repeat.builder().frequency(2).period(1).period_unit(UnitsOfTime.D).build()

        timing = Timing.builder().repeat(repeat).build()

        assert timing.repeat.frequency.value == 2
        assert timing.repeat.period_unit.value == "d"

    def test_repeat_bounds_choice(self, thirty_minutes):
        """Test the bounds choice element."""
        repeat = Timing.Repeat.builder().bounds(thirty_minutes).count(3).build()

        assert repeat.bounds is thirty_minutes
        with pytest.raises(InvalidChoiceType):
            Timing.Repeat.builder().bounds(String.of("forever")).build()

    def test_repeat_type_name(self):
        """Test the dotted type name of the backbone."""
        assert Timing.Repeat.fhir_type_name() == "Timing.Repeat"
