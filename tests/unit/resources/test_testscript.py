"""Test the TestScript resource."""

import pytest

from fhirmodel.core import model_support
from fhirmodel.resources.testscript import TestScript as Script
from fhirmodel.types.codes import AssertionDirectionType, PublicationStatus
from fhirmodel.utils.exceptions import EmptyRequiredList, InvalidValue, MissingRequiredField

Setup = Script.Setup
Operation = Script.Setup.Action.Operation
Assert = Script.Setup.Action.Assert

SCRIPT_URL = "http://example.org/fhir/TestScript/patient-read"


class TestScriptResource:
    """Test the resource and its required elements."""

    def test_required_elements_are_positional(self, script_builder):
        """Test that url, name and status fill the builder positionally."""
        script = script_builder.build()

        assert script.url.value == SCRIPT_URL
        assert script.name.value == "PatientRead"
        assert script.status == PublicationStatus.ACTIVE

    @pytest.mark.parametrize("missing", ["url", "name", "status"])
    def test_each_required_element(self, script_builder, missing):
        """Test that each required element is enforced."""
        script_builder.update(**{missing: None})

        with pytest.raises(MissingRequiredField) as exc_info:
            script_builder.build()

        assert exc_info.value.field_name == missing

    def test_too_many_positional_values(self):
        """Test that extra positional values are rejected."""
        with pytest.raises(TypeError):
            Script.builder(SCRIPT_URL, "PatientRead", "active", "extra")

    def test_metadata_capability(self):
        """Test the required elements of metadata capabilities."""
        capability = Script.Metadata.Capability.builder(True, False, "http://example.org/CapabilityStatement/x").build()

        metadata = Script.Metadata.builder([capability]).build()

        assert metadata.capability[0].required.value is True
        with pytest.raises(EmptyRequiredList):
            Script.Metadata.builder([]).build()

    def test_fixture_flags(self):
        """Test the autocreate and autodelete flags."""
        fixture = Script.Fixture.builder(False, False).build()

        assert fixture.autocreate.value is False


class TestSetup:
    """Test setup actions."""

    def test_operation_and_assert_both_build(self, read_operation, ok_assert):
        """Test that the exclusive-or rule is a constraint, not a build check."""
        action = Setup.Action.builder().operation(read_operation).assert_(ok_assert).build()

        assert action.operation is read_operation
        assert action.assert_ is ok_assert

    def test_assert_alias(self, ok_assert):
        """Test the assert element by its FHIR name."""
        by_name = Setup.Action(**{"assert": ok_assert})
        by_builder = Setup.Action.builder().update(**{"assert": ok_assert}).build()

        assert by_name == by_builder
        assert by_builder.assert_ is ok_assert

    def test_accept_alias(self):
        """Test the accept element by its FHIR name."""
        operation = Operation(encodeRequestUrl=True, accept="application/fhir+json")

        assert operation.accept_.value == "application/fhir+json"
        assert callable(operation.accept)

    def test_encode_request_url_is_required(self):
        """Test the required flag of an operation."""
        with pytest.raises(MissingRequiredField) as exc_info:
            Operation.builder().resource("Patient").build()

        assert exc_info.value.field_name == "encodeRequestUrl"

    def test_request_headers(self):
        """Test repeated request headers."""
        header = Operation.RequestHeader.builder("Accept", "application/fhir+json").build()

        operation = Operation.builder(True).request_header(header, header).build()

        assert len(operation.request_header) == 2

    def test_assert_bound_codes(self):
        """Test bound codes on an assertion."""
        assertion = Assert.builder(False).direction(AssertionDirectionType.RESPONSE).operator("equals").value("x").build()

        assert assertion.direction.value == "response"
        with pytest.raises(InvalidValue):
            Assert.builder(False).operator("eq").build()

    def test_empty_setup(self):
        """Test that setup needs at least one action."""
        with pytest.raises(EmptyRequiredList):
            Setup.builder().build()


class TestTestsAndTeardown:
    """Test the test and teardown sections."""

    def test_test_action_reuses_setup_types(self, read_operation, ok_assert):
        """Test that test actions hold setup operations and assertions."""
        action = Script.Test.Action.builder().operation(read_operation).build()
        test = Script.Test.builder([action]).name("read").build()

        assert test.action[0].operation is read_operation
        assert model_support.get_element_info(Script.Test.Action, "assert").type is Assert

    def test_teardown_requires_operation(self):
        """Test the required operation of a teardown action."""
        with pytest.raises(MissingRequiredField) as exc_info:
            Script.Teardown.Action(extension=())

        assert exc_info.value.field_name == "operation"

    def test_teardown(self, script_builder, read_operation):
        """Test a script with a teardown section."""
        teardown = Script.Teardown.builder([Script.Teardown.Action.builder(read_operation).build()]).build()

        script = script_builder.teardown(teardown).build()

        assert script.teardown.action[0].operation == read_operation

    def test_nested_type_names(self):
        """Test that nested classes register under dotted names."""
        assert Script.Setup.Action.Operation.RequestHeader.fhir_type_name() == (
            "TestScript.Setup.Action.Operation.RequestHeader"
        )
        assert model_support.get_data_type("TestScript.Teardown.Action") is Script.Teardown.Action
