"""Test constraint validation of built model trees."""

from datetime import date

import pytest
from structlog.testing import capture_logs

from fhirmodel.core.model import Extension
from fhirmodel.resources.plan_definition import PlanDefinition
from fhirmodel.resources.testscript import TestScript as Script
from fhirmodel.types.datatypes import CodeableConcept, Duration, Period, Timing
from fhirmodel.types.primitives import String
from fhirmodel.utils.exceptions import UnsupportedExpression
from fhirmodel.validation import (
    ConstraintValidator,
    IssueSeverity,
    PredicateEvaluator,
    ValidationIssue,
    resolve_location,
)

pytestmark = pytest.mark.constraints


def by_severity(issues, severity):
    """Return the constraint ids of issues with the given severity."""
    return [issue.constraint_id for issue in issues if issue.severity == severity]


@pytest.fixture
def validator():
    """Validator with the default predicate evaluator."""
    return ConstraintValidator()


@pytest.fixture
def two_action_script(script_builder, read_operation, ok_assert):
    """A script whose second setup action holds an operation and an assertion."""
    first = Script.Setup.Action.builder().operation(read_operation).build()
    second = Script.Setup.Action.builder().operation(read_operation).assert_(ok_assert).build()
    return script_builder.setup(Script.Setup.builder([first, second]).build()).build()


class TestConstraintValidator:
    """Test validation results."""

    def test_clean_script(self, validator, script_builder):
        """Test a script that satisfies every evaluated rule."""
        is_valid, issues = validator.validate(script_builder.build())

        assert is_valid
        assert by_severity(issues, IssueSeverity.ERROR) == []
        assert by_severity(issues, IssueSeverity.WARNING) == ["dom-6"]
        assert by_severity(issues, IssueSeverity.INFORMATION) == ["dom-3"]

    def test_operation_and_assert_together(self, validator, two_action_script):
        """Test that tst-1 is reported on the offending setup action."""
        is_valid, issues = validator.validate(two_action_script)

        assert not is_valid
        (error,) = [issue for issue in issues if issue.severity == IssueSeverity.ERROR]
        assert error.constraint_id == "tst-1"
        assert error.location == "TestScript.setup.action[1]"
        assert error.expression == "operation.exists() xor assert.exists()"
        assert "either an operation or assert" in error.message

    def test_setup_action_with_neither(self, validator, script_builder):
        """Test tst-1 for an action with no operation and no assertion."""
        empty_action = Script.Setup.Action.builder().extension(
            Extension(url="http://example.org/note", value=String.of("todo"))
        ).build()
        script = script_builder.setup(Script.Setup.builder([empty_action]).build()).build()

        _, issues = validator.validate(script)

        assert by_severity(issues, IssueSeverity.ERROR) == ["tst-1"]

    def test_bad_computable_name_is_a_warning(self, validator, script_builder):
        """Test that a warning constraint never makes the tree invalid."""
        is_valid, issues = validator.validate(script_builder.name("patient read").build())

        assert is_valid
        assert "tst-0" in by_severity(issues, IssueSeverity.WARNING)

    def test_operation_without_target(self, validator, script_builder):
        """Test tst-7 on a setup operation with neither target nor source."""
        operation = Script.Setup.Action.Operation.builder(True).resource("Patient").build()
        action = Script.Setup.Action.builder().operation(operation).build()
        script = script_builder.setup(Script.Setup.builder([action]).build()).build()

        _, issues = validator.validate(script)

        (error,) = [issue for issue in issues if issue.severity == IssueSeverity.ERROR]
        assert error.constraint_id == "tst-7"
        assert error.location == "TestScript.setup.action[0].operation"

    def test_duration_code_without_system(self, validator):
        """Test qty-3 and drt-1 on a bare duration."""
        duration = Duration.builder().value(30).code("min").build()

        is_valid, issues = validator.validate(duration)

        assert not is_valid
        assert by_severity(issues, IssueSeverity.ERROR) == ["qty-3", "drt-1"]
        assert {issue.location for issue in issues} == {"Duration"}

    def test_nested_data_type_location(self, validator):
        """Test the path of a failing data type deep in a resource."""
        offset = Duration.builder().value(30).code("min").build()
        related = PlanDefinition.Action.RelatedAction.builder("step-1", "after").offset(offset).build()
        action = PlanDefinition.Action.builder().related_action(related).build()
        plan = PlanDefinition.builder("draft").action(action).build()

        _, issues = validator.validate(plan)

        errors = [issue for issue in issues if issue.severity == IssueSeverity.ERROR]
        assert [issue.constraint_id for issue in errors] == ["qty-3", "drt-1"]
        assert errors[0].location == "PlanDefinition.action[0].relatedAction[0].offset"

    def test_fixture_plan_is_valid(self, validator, plan_definition):
        """Test the shared plan fixture, including its UCUM offset."""
        is_valid, issues = validator.validate(plan_definition)

        assert is_valid
        info = by_severity(issues, IssueSeverity.INFORMATION)
        assert "dom-3" in info
        assert "planDefinition-1" in info

    def test_period_out_of_order(self, validator):
        """Test per-1."""
        period = Period.builder().start(date(2024, 5, 17)).end(date(2024, 5, 1)).build()

        is_valid, issues = validator.validate(period)

        assert not is_valid
        assert by_severity(issues, IssueSeverity.ERROR) == ["per-1"]

    def test_partial_dates_are_not_compared(self, validator):
        """Test that values of different precision are not ordered."""
        period = Period.builder().start("2024").end(date(2023, 1, 1)).build()

        assert validator.validate(period)[0]

    def test_timing_repeat_duration_unit(self, validator):
        """Test tim-1 at the Timing.repeat location."""
        timing = Timing.builder().repeat(Timing.Repeat.builder().duration(10).build()).build()

        _, issues = validator.validate(timing)

        (error,) = [issue for issue in issues if issue.severity == IssueSeverity.ERROR]
        assert error.constraint_id == "tim-1"
        assert error.location == "Timing.repeat"
        assert by_severity(issues, IssueSeverity.INFORMATION) == ["timing-11"]

    def test_extension_with_value_and_extensions(self, validator):
        """Test ext-1 for both and for neither."""
        part = Extension(url="part", value=String.of("a"))
        both = Extension(url="http://example.org/both", value=String.of("b"), extension=(part,))
        neither = Extension(url="http://example.org/neither")

        assert by_severity(validator.validate(both)[1], IssueSeverity.ERROR) == ["ext-1"]
        assert by_severity(validator.validate(neither)[1], IssueSeverity.ERROR) == ["ext-1"]
        assert validator.validate(part) == (True, [])

    def test_validation_logs(self, validator, two_action_script):
        """Test the structured log events of a validation run."""
        with capture_logs() as cap_logs:
            validator.validate(two_action_script)

        events = {entry["event"]: entry for entry in cap_logs}
        assert events["constraint_violations_found"]["log_level"] == "warning"
        assert events["constraint_violations_found"]["constraint_ids"] == ["dom-6", "tst-1"]
        completed = events["constraint_validation_completed"]
        assert completed["log_level"] == "info"
        assert completed["model_type"] == "TestScript"
        assert completed["valid"] is False
        assert events["constraint_not_evaluated"]["constraint_id"] == "dom-3"


class TestEvaluators:
    """Test pluggable constraint evaluation."""

    def test_custom_evaluator(self, two_action_script):
        """Test an evaluator that accepts everything."""
        validator = ConstraintValidator(evaluator=lambda expression, node: True)

        assert validator.validate(two_action_script) == (True, [])

    def test_evaluator_receives_target_nodes(self, plan_definition):
        """Test that located constraints are evaluated on the located node."""
        seen = []

        def record(expression, node):
            seen.append((expression, node.fhir_type_name()))
            return True

        ConstraintValidator(evaluator=record).validate(plan_definition)

        assert ("code.empty() or system.exists()", "Duration") in seen
        assert ("name.matches('[A-Z]([A-Za-z0-9_]){0,254}')", "PlanDefinition") in seen

    def test_unsupported_everywhere(self, two_action_script):
        """Test an evaluator that knows no expressions."""
        validator = ConstraintValidator(evaluator=PredicateEvaluator(include_defaults=False))

        is_valid, issues = validator.validate(two_action_script)

        assert is_valid
        assert {issue.severity for issue in issues} == {IssueSeverity.INFORMATION}

    def test_register(self):
        """Test registering a predicate for a new expression."""
        evaluator = PredicateEvaluator(include_defaults=False)
        concept = CodeableConcept.builder().text("x").build()

        assert not evaluator.supports("text.exists()")
        with pytest.raises(UnsupportedExpression) as exc_info:
            evaluator("text.exists()", concept)
        assert exc_info.value.expression == "text.exists()"

        evaluator.register("text.exists()", lambda node: node.text is not None)
        assert evaluator.supports("text.exists()")
        assert evaluator("text.exists()", concept)

    def test_extra_predicates_override_defaults(self):
        """Test that predicates passed in replace the defaults."""
        evaluator = PredicateEvaluator({"code.empty() or system.exists()": lambda node: False})
        duration = Duration.builder().value(1).build()

        assert not evaluator("code.empty() or system.exists()", duration)
        assert evaluator.supports("contained.contained.empty()")


class TestResolveLocation:
    """Test constraint location resolution."""

    def test_base(self, plan_definition):
        """Test that the base location selects the node itself."""
        assert resolve_location(plan_definition, "(base)") == [("", plan_definition)]

    def test_type_prefixed_path(self, two_action_script):
        """Test a location starting with the declaring type name."""
        targets = resolve_location(two_action_script, "TestScript.setup.action")

        assert [path for path, _ in targets] == ["setup.action[0]", "setup.action[1]"]
        assert targets[1][1] is two_action_script.setup.action[1]

    def test_element_path(self):
        """Test a location starting with an element name."""
        priority = CodeableConcept.builder().text("high").build()
        description = CodeableConcept.builder().text("Glucose in range").build()
        goal = PlanDefinition.Goal.builder(description).priority(priority).build()
        plan = PlanDefinition.builder("draft").goal(goal).build()

        assert resolve_location(plan, "goal.priority") == [("goal[0].priority", priority)]

    def test_absent_elements(self, plan_definition):
        """Test that absent elements select nothing."""
        assert resolve_location(plan_definition, "goal.priority") == []
        assert resolve_location(plan_definition, "action.subject") == []


class TestOperationOutcome:
    """Test OperationOutcome generation."""

    def test_issue_conversion(self):
        """Test the issue component of a failed rule."""
        issue = ValidationIssue(
            "tst-1",
            IssueSeverity.ERROR,
            "TestScript.setup.action[0]",
            "tst-1: Setup action SHALL contain either an operation or assert but not both.",
            "operation.exists() xor assert.exists()",
        )

        component = issue.to_operation_outcome_issue()

        assert component["severity"] == "error"
        assert component["code"] == "invariant"
        assert component["location"] == ["TestScript.setup.action[0]"]
        assert component["details"]["text"] == "tst-1: operation.exists() xor assert.exists()"
        assert issue.issue_id.startswith("VAL-")

    def test_unevaluated_issue(self):
        """Test the issue component of an unevaluated constraint."""
        issue = ValidationIssue("dom-3", IssueSeverity.INFORMATION, "TestScript", "not evaluated")

        component = issue.to_operation_outcome_issue()

        assert component["code"] == "not-supported"
        assert component["details"]["text"] == "dom-3: not evaluated"

    def test_generate_operation_outcome(self, validator, two_action_script):
        """Test the outcome resource built from a validation run."""
        _, issues = validator.validate(two_action_script)

        outcome = validator.generate_operation_outcome(issues, resource_id="patient-read")

        assert outcome["resourceType"] == "OperationOutcome"
        assert outcome["id"].startswith("validation-")
        assert len(outcome["issue"]) == len(issues)
        assert "patient-read" in outcome["text"]["div"]

    def test_outcome_without_resource_id(self, validator):
        """Test that the narrative is omitted without a resource id."""
        outcome = validator.generate_operation_outcome([])

        assert outcome["issue"] == []
        assert "text" not in outcome
