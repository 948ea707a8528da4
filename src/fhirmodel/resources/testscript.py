"""TestScript resource.

A TestScript describes a set of tests against a FHIR server or client
implementation. Python keywords and model method names used as FHIR
element names get a trailing underscore: ``Setup.Action.assert_`` is the
``assert`` element and ``Setup.Action.Operation.accept_`` the ``accept``
element. The FHIR names work as aliases in constructors, builders and
metadata.
"""

from typing import Annotated, Optional, Tuple

from pydantic import Field

from fhirmodel.core.annotations import Binding, BindingStrength, Required, Summary
from fhirmodel.core.constraint import LEVEL_RULE, LEVEL_WARNING, SOURCE_BASE, constraint
from fhirmodel.core.model import BackboneElement
from fhirmodel.resources.base import DomainResource
from fhirmodel.types.codes import (
    VALUE_SET_BASE,
    AssertionDirectionType,
    AssertionOperatorType,
    AssertionResponseTypes,
    PublicationStatus,
    TestScriptRequestMethodCode,
)
from fhirmodel.types.datatypes import CodeableConcept, Coding, ContactDetail, Identifier, Reference, UsageContext
from fhirmodel.types.primitives import Boolean, Canonical, Code, DateTime, Id, Integer, Markdown, String, Uri

_SOURCE = f"{SOURCE_BASE}/TestScript"

_SINGLE_ASSERTION = (
    "extension.exists() or (contentType.count() + expression.count() + headerField.count() "
    "+ minimumId.count() + navigationLinks.count() + path.count() + requestMethod.count() "
    "+ resource.count() + responseCode.count() + response.count()  + validateProfileId.count() <=1)"
)
_OPERATION_TARGET = (
    "sourceId.exists() or (targetId.count() + url.count() + params.count() = 1) "
    "or (type.code in ('capabilities' |'search' | 'transaction' | 'history'))"
)
_COMPARE_TO_SOURCE = (
    "compareToSourceId.empty() xor (compareToSourceExpression.exists() or compareToSourcePath.exists())"
)
_REQUEST_DIRECTION = (
    "(response.empty() and responseCode.empty() and direction = 'request') "
    "or direction.empty() or direction = 'response'"
)
_FHIR_DEFINED_TYPE = Binding(
    "FHIRDefinedType",
    BindingStrength.REQUIRED,
    VALUE_SET_BASE + "defined-types|4.0.1",
    "A list of all the concrete types defined in this version of the FHIR specification - Data Types and Resource Types.",
)
_MIME_TYPE = Binding(
    "MimeType",
    BindingStrength.REQUIRED,
    VALUE_SET_BASE + "mimetypes|4.0.1",
    "The mime type of an attachment. Any valid mime type is allowed.",
)


@constraint(
    id="tst-0",
    level=LEVEL_WARNING,
    location="(base)",
    description="Name should be usable as an identifier for the module by machine processing applications such as code generation",
    expression="name.matches('[A-Z]([A-Za-z0-9_]){0,254}')",
    source=_SOURCE,
)
@constraint(
    id="tst-1",
    level=LEVEL_RULE,
    location="TestScript.setup.action",
    description="Setup action SHALL contain either an operation or assert but not both.",
    expression="operation.exists() xor assert.exists()",
    source=_SOURCE,
)
@constraint(
    id="tst-2",
    level=LEVEL_RULE,
    location="TestScript.test.action",
    description="Test action SHALL contain either an operation or assert but not both.",
    expression="operation.exists() xor assert.exists()",
    source=_SOURCE,
)
@constraint(
    id="tst-3",
    level=LEVEL_RULE,
    location="TestScript.variable",
    description="Variable can only contain one of expression, headerField or path.",
    expression="expression.empty() or headerField.empty() or path.empty()",
    source=_SOURCE,
)
@constraint(
    id="tst-4",
    level=LEVEL_RULE,
    location="TestScript.metadata",
    description="TestScript metadata capability SHALL contain required or validated or both.",
    expression="capability.required.exists() or capability.validated.exists()",
    source=_SOURCE,
)
@constraint(
    id="tst-5",
    level=LEVEL_RULE,
    location="TestScript.setup.action.assert",
    description="Only a single assertion SHALL be present within setup action assert element.",
    expression=_SINGLE_ASSERTION,
    source=_SOURCE,
)
@constraint(
    id="tst-6",
    level=LEVEL_RULE,
    location="TestScript.test.action.assert",
    description="Only a single assertion SHALL be present within test action assert element.",
    expression=_SINGLE_ASSERTION,
    source=_SOURCE,
)
@constraint(
    id="tst-7",
    level=LEVEL_RULE,
    location="TestScript.setup.action.operation",
    description="Setup operation SHALL contain either sourceId or targetId or params or url.",
    expression=_OPERATION_TARGET,
    source=_SOURCE,
)
@constraint(
    id="tst-8",
    level=LEVEL_RULE,
    location="TestScript.test.action.operation",
    description="Test operation SHALL contain either sourceId or targetId or params or url.",
    expression=_OPERATION_TARGET,
    source=_SOURCE,
)
@constraint(
    id="tst-9",
    level=LEVEL_RULE,
    location="TestScript.teardown.action.operation",
    description="Teardown operation SHALL contain either sourceId or targetId or params or url.",
    expression=_OPERATION_TARGET,
    source=_SOURCE,
)
@constraint(
    id="tst-10",
    level=LEVEL_RULE,
    location="TestScript.setup.action.assert",
    description="Setup action assert SHALL contain either compareToSourceId and compareToSourceExpression, compareToSourceId and compareToSourcePath or neither.",
    expression=_COMPARE_TO_SOURCE,
    source=_SOURCE,
)
@constraint(
    id="tst-11",
    level=LEVEL_RULE,
    location="TestScript.test.action.assert",
    description="Test action assert SHALL contain either compareToSourceId and compareToSourceExpression, compareToSourceId and compareToSourcePath or neither.",
    expression=_COMPARE_TO_SOURCE,
    source=_SOURCE,
)
@constraint(
    id="tst-12",
    level=LEVEL_RULE,
    location="TestScript.setup.action.assert",
    description="Setup action assert response and responseCode SHALL be empty when direction equals request",
    expression=_REQUEST_DIRECTION,
    source=_SOURCE,
)
@constraint(
    id="tst-13",
    level=LEVEL_RULE,
    location="TestScript.test.action.assert",
    description="Test action assert response and response and responseCode SHALL be empty when direction equals request",
    expression=_REQUEST_DIRECTION,
    source=_SOURCE,
)
class TestScript(DomainResource):
    """A structured set of tests against a FHIR server or client implementation."""

    class Origin(BackboneElement):
        """An abstract server representing a client or sender in a message exchange."""

        fhir_type = "TestScript.Origin"

        index: Annotated[Optional[Integer], Required()] = None
        profile: Annotated[
            Optional[Coding],
            Required(),
            Binding("TestScriptProfileOriginType", BindingStrength.EXTENSIBLE, VALUE_SET_BASE + "testscript-profile-origin-types"),
        ] = None

    class Destination(BackboneElement):
        """An abstract server representing a destination or receiver in a message exchange."""

        fhir_type = "TestScript.Destination"

        index: Annotated[Optional[Integer], Required()] = None
        profile: Annotated[
            Optional[Coding],
            Required(),
            Binding(
                "TestScriptProfileDestinationType",
                BindingStrength.EXTENSIBLE,
                VALUE_SET_BASE + "testscript-profile-destination-types",
            ),
        ] = None

    class Metadata(BackboneElement):
        """Required capability that is assumed to function correctly on the FHIR server being tested."""

        fhir_type = "TestScript.Metadata"

        class Link(BackboneElement):
            """A link to the FHIR specification that this test is covering."""

            fhir_type = "TestScript.Metadata.Link"

            url: Annotated[Optional[Uri], Required()] = None
            description: Optional[String] = None

        class Capability(BackboneElement):
            """Capabilities that must exist and are assumed to function correctly on the server."""

            fhir_type = "TestScript.Metadata.Capability"

            required: Annotated[Optional[Boolean], Required()] = None
            validated: Annotated[Optional[Boolean], Required()] = None
            description: Optional[String] = None
            origin: Tuple[Integer, ...] = ()
            destination: Optional[Integer] = None
            link: Tuple[Uri, ...] = ()
            capabilities: Annotated[Optional[Canonical], Required()] = None

        link: Tuple[Link, ...] = ()
        capability: Annotated[Tuple[Capability, ...], Required()] = ()

    class Fixture(BackboneElement):
        """Fixture in the test script, by reference (uri)."""

        fhir_type = "TestScript.Fixture"

        autocreate: Annotated[Optional[Boolean], Required()] = None
        autodelete: Annotated[Optional[Boolean], Required()] = None
        resource: Optional[Reference] = None

    class Variable(BackboneElement):
        """Variable used to hold values for use in operations and asserts."""

        fhir_type = "TestScript.Variable"

        name: Annotated[Optional[String], Required()] = None
        default_value: Optional[String] = Field(None, alias="defaultValue")
        description: Optional[String] = None
        expression: Optional[String] = None
        header_field: Optional[String] = Field(None, alias="headerField")
        hint: Optional[String] = None
        path: Optional[String] = None
        source_id: Optional[Id] = Field(None, alias="sourceId")

    class Setup(BackboneElement):
        """A series of required setup operations before tests are executed."""

        fhir_type = "TestScript.Setup"

        class Action(BackboneElement):
            """Action would contain either an operation or an assertion."""

            fhir_type = "TestScript.Setup.Action"

            class Operation(BackboneElement):
                """The operation to perform."""

                fhir_type = "TestScript.Setup.Action.Operation"

                class RequestHeader(BackboneElement):
                    """Header elements would be used to set HTTP headers."""

                    fhir_type = "TestScript.Setup.Action.Operation.RequestHeader"

                    field: Annotated[Optional[String], Required()] = None
                    value: Annotated[Optional[String], Required()] = None

                type: Annotated[
                    Optional[Coding],
                    Binding("TestScriptOperationCode", BindingStrength.EXTENSIBLE, VALUE_SET_BASE + "testscript-operation-codes"),
                ] = None
                resource: Annotated[Optional[Code], _FHIR_DEFINED_TYPE] = None
                label: Optional[String] = None
                description: Optional[String] = None
                accept_: Annotated[Optional[Code], _MIME_TYPE] = Field(None, alias="accept")
                content_type: Annotated[Optional[Code], _MIME_TYPE] = Field(None, alias="contentType")
                destination: Optional[Integer] = None
                encode_request_url: Annotated[Optional[Boolean], Required()] = Field(None, alias="encodeRequestUrl")
                method: Annotated[
                    Optional[TestScriptRequestMethodCode],
                    Binding(
                        "TestScriptRequestMethodCode",
                        BindingStrength.REQUIRED,
                        VALUE_SET_BASE + "http-operations|4.0.1",
                    ),
                ] = None
                origin: Optional[Integer] = None
                params: Optional[String] = None
                request_header: Tuple[RequestHeader, ...] = Field((), alias="requestHeader")
                request_id: Optional[Id] = Field(None, alias="requestId")
                response_id: Optional[Id] = Field(None, alias="responseId")
                source_id: Optional[Id] = Field(None, alias="sourceId")
                target_id: Optional[Id] = Field(None, alias="targetId")
                url: Optional[String] = None

            class Assert(BackboneElement):
                """Evaluates the results of previous operations to determine if the server under test behaves appropriately."""

                fhir_type = "TestScript.Setup.Action.Assert"

                label: Optional[String] = None
                description: Optional[String] = None
                direction: Annotated[
                    Optional[AssertionDirectionType],
                    Binding(
                        "AssertionDirectionType",
                        BindingStrength.REQUIRED,
                        VALUE_SET_BASE + "assert-direction-codes|4.0.1",
                    ),
                ] = None
                compare_to_source_id: Optional[String] = Field(None, alias="compareToSourceId")
                compare_to_source_expression: Optional[String] = Field(None, alias="compareToSourceExpression")
                compare_to_source_path: Optional[String] = Field(None, alias="compareToSourcePath")
                content_type: Annotated[Optional[Code], _MIME_TYPE] = Field(None, alias="contentType")
                expression: Optional[String] = None
                header_field: Optional[String] = Field(None, alias="headerField")
                minimum_id: Optional[String] = Field(None, alias="minimumId")
                navigation_links: Optional[Boolean] = Field(None, alias="navigationLinks")
                operator: Annotated[
                    Optional[AssertionOperatorType],
                    Binding(
                        "AssertionOperatorType",
                        BindingStrength.REQUIRED,
                        VALUE_SET_BASE + "assert-operator-codes|4.0.1",
                    ),
                ] = None
                path: Optional[String] = None
                request_method: Annotated[
                    Optional[TestScriptRequestMethodCode],
                    Binding(
                        "TestScriptRequestMethodCode",
                        BindingStrength.REQUIRED,
                        VALUE_SET_BASE + "http-operations|4.0.1",
                    ),
                ] = Field(None, alias="requestMethod")
                request_url: Optional[String] = Field(None, alias="requestURL")
                resource: Annotated[Optional[Code], _FHIR_DEFINED_TYPE] = None
                response: Annotated[
                    Optional[AssertionResponseTypes],
                    Binding(
                        "AssertionResponseTypes",
                        BindingStrength.REQUIRED,
                        VALUE_SET_BASE + "assert-response-code-types|4.0.1",
                    ),
                ] = None
                response_code: Optional[String] = Field(None, alias="responseCode")
                source_id: Optional[Id] = Field(None, alias="sourceId")
                validate_profile_id: Optional[Id] = Field(None, alias="validateProfileId")
                value: Optional[String] = None
                warning_only: Annotated[Optional[Boolean], Required()] = Field(None, alias="warningOnly")

            operation: Optional[Operation] = None
            assert_: Optional[Assert] = Field(None, alias="assert")

        action: Annotated[Tuple[Action, ...], Required()] = ()

    class Test(BackboneElement):
        """A test in this script."""

        fhir_type = "TestScript.Test"

        class Action(BackboneElement):
            """Action would contain either an operation or an assertion."""

            fhir_type = "TestScript.Test.Action"

            operation: "Optional[TestScript.Setup.Action.Operation]" = None
            assert_: "Optional[TestScript.Setup.Action.Assert]" = Field(None, alias="assert")

        name: Optional[String] = None
        description: Optional[String] = None
        action: Annotated[Tuple[Action, ...], Required()] = ()

    class Teardown(BackboneElement):
        """A series of operations required to clean up after all the tests are executed."""

        fhir_type = "TestScript.Teardown"

        class Action(BackboneElement):
            """The teardown action will only contain an operation."""

            fhir_type = "TestScript.Teardown.Action"

            operation: "Annotated[Optional[TestScript.Setup.Action.Operation], Required()]" = None

        action: Annotated[Tuple[Action, ...], Required()] = ()

    url: Annotated[Optional[Uri], Summary(), Required()] = None
    identifier: Annotated[Optional[Identifier], Summary()] = None
    version: Annotated[Optional[String], Summary()] = None
    name: Annotated[Optional[String], Summary(), Required()] = None
    title: Annotated[Optional[String], Summary()] = None
    status: Annotated[
        Optional[PublicationStatus],
        Summary(),
        Required(),
        Binding("PublicationStatus", BindingStrength.REQUIRED, VALUE_SET_BASE + "publication-status|4.0.1"),
    ] = None
    experimental: Annotated[Optional[Boolean], Summary()] = None
    date: Annotated[Optional[DateTime], Summary()] = None
    publisher: Annotated[Optional[String], Summary()] = None
    contact: Annotated[Tuple[ContactDetail, ...], Summary()] = ()
    description: Optional[Markdown] = None
    use_context: Annotated[Tuple[UsageContext, ...], Summary()] = Field((), alias="useContext")
    jurisdiction: Annotated[
        Tuple[CodeableConcept, ...],
        Summary(),
        Binding("Jurisdiction", BindingStrength.EXTENSIBLE, VALUE_SET_BASE + "jurisdiction"),
    ] = ()
    purpose: Optional[Markdown] = None
    copyright: Optional[Markdown] = None
    origin: Tuple[Origin, ...] = ()
    destination: Tuple[Destination, ...] = ()
    metadata: Optional[Metadata] = None
    fixture: Tuple[Fixture, ...] = ()
    profile: Tuple[Reference, ...] = ()
    variable: Tuple[Variable, ...] = ()
    setup: Optional[Setup] = None
    test: Tuple[Test, ...] = ()
    teardown: Optional[Teardown] = None


TestScript.Test.Action.model_rebuild()
TestScript.Teardown.Action.model_rebuild()
TestScript.Test.model_rebuild()
TestScript.Teardown.model_rebuild()
TestScript.model_rebuild()
