"""Test configuration for the fhirmodel object model.

Provides model fixtures shared across the unit tests and keeps the cached
settings isolated between tests.
"""

import pytest

from fhirmodel.config import reload_settings
from fhirmodel.core import model_support
from fhirmodel.resources.plan_definition import PlanDefinition
from fhirmodel.resources import testscript as ts
from fhirmodel.types.codes import ActionRelationshipType, PublicationStatus
from fhirmodel.types.datatypes import UCUM, Coding, Duration


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "constraints: mark test as exercising constraint metadata or validation"
    )
    config.addinivalue_line("markers", "visitor: mark test as exercising the tree walk")


@pytest.fixture(autouse=True)
def fresh_settings(monkeypatch):
    """Run every test against settings read from a clean environment."""
    for name in ("FHIR_MODEL_CHECK_CONTROL_CHARS", "FHIR_MODEL_CHECK_REFERENCE_TYPES"):
        monkeypatch.delenv(name, raising=False)
    reload_settings()
    yield
    reload_settings()


@pytest.fixture
def thirty_minutes() -> Duration:
    """A UCUM duration of 30 minutes."""
    return Duration.builder().value(30).unit("min").system(UCUM).code("min").build()


@pytest.fixture
def related_action(thirty_minutes) -> PlanDefinition.Action.RelatedAction:
    """Relationship: 30 minutes after action ``step-1``."""
    return (
        PlanDefinition.Action.RelatedAction.builder("step-1", ActionRelationshipType.AFTER)
        .offset(thirty_minutes)
        .build()
    )


@pytest.fixture
def plan_definition(related_action) -> PlanDefinition:
    """A draft plan with two actions, the second related to the first."""
    first = PlanDefinition.Action.builder().id("step-1").title("Draw blood").build()
    second = (
        PlanDefinition.Action.builder()
        .title("Measure glucose")
        .related_action(related_action)
        .build()
    )
    return (
        PlanDefinition.builder(PublicationStatus.DRAFT)
        .name("GlucoseCheck")
        .action(first, second)
        .build()
    )


@pytest.fixture
def read_operation() -> ts.TestScript.Setup.Action.Operation:
    """A read operation against a fixture."""
    return (
        ts.TestScript.Setup.Action.Operation.builder(True)
        .type(Coding.builder().system("http://terminology.hl7.org/CodeSystem/testscript-operation-codes").code("read").build())
        .resource("Patient")
        .target_id("patient-fixture")
        .build()
    )


@pytest.fixture
def ok_assert() -> ts.TestScript.Setup.Action.Assert:
    """An assertion on the response code."""
    return ts.TestScript.Setup.Action.Assert.builder(False).response_code("200").build()


@pytest.fixture
def script_builder(read_operation):
    """A builder for a minimal active TestScript with one setup action."""
    setup = ts.TestScript.Setup.builder([ts.TestScript.Setup.Action.builder().operation(read_operation).build()]).build()
    return ts.TestScript.builder(
        "http://example.org/fhir/TestScript/patient-read", "PatientRead", PublicationStatus.ACTIVE
    ).setup(setup)


@pytest.fixture
def clean_metadata_cache():
    """Forget cached element metadata after the test."""
    yield
    model_support.clear_caches()
