"""PlanDefinition resource.

A PlanDefinition is a sharable, consumable and executable definition of a
plan: clinical decision support rules, order sets, protocols and similar
artifacts. Its backbone elements are nested classes, so the FHIR path
``PlanDefinition.action.relatedAction`` maps to
``PlanDefinition.Action.RelatedAction``.
"""

from typing import Annotated, Optional, Tuple

from pydantic import Field

from fhirmodel.core.annotations import Binding, BindingStrength, Choice, ReferenceTarget, Required, Summary
from fhirmodel.core.constraint import LEVEL_WARNING, SOURCE_BASE, constraint
from fhirmodel.core.model import BackboneElement, Element
from fhirmodel.resources.base import DomainResource
from fhirmodel.types.codes import (
    VALUE_SET_BASE,
    ActionCardinalityBehavior,
    ActionConditionKind,
    ActionGroupingBehavior,
    ActionParticipantType,
    ActionPrecheckBehavior,
    ActionRelationshipType,
    ActionRequiredBehavior,
    ActionSelectionBehavior,
    PublicationStatus,
    RequestPriority,
)
from fhirmodel.types.datatypes import (
    Age,
    CodeableConcept,
    ContactDetail,
    Duration,
    Expression,
    Identifier,
    Period,
    Quantity,
    Range,
    Reference,
    RelatedArtifact,
    Timing,
    UsageContext,
)
from fhirmodel.types.primitives import Boolean, Canonical, Date, DateTime, Id, Markdown, String, Uri

_SOURCE = f"{SOURCE_BASE}/PlanDefinition"


@constraint(
    id="cnl-0",
    level=LEVEL_WARNING,
    location="(base)",
    description="Name should be usable as an identifier for the module by machine processing applications such as code generation",
    expression="name.matches('[A-Z]([A-Za-z0-9_]){0,254}')",
    source=_SOURCE,
)
@constraint(
    id="planDefinition-1",
    level=LEVEL_WARNING,
    location="(base)",
    description="SHALL, if possible, contain a code from value set http://hl7.org/fhir/ValueSet/plan-definition-type",
    expression="type.exists() implies (type.memberOf('http://hl7.org/fhir/ValueSet/plan-definition-type', 'extensible'))",
    source=_SOURCE,
)
@constraint(
    id="planDefinition-2",
    level=LEVEL_WARNING,
    location="(base)",
    description="SHALL, if possible, contain a code from value set http://hl7.org/fhir/ValueSet/subject-type",
    expression="subject.as(CodeableConcept).exists() implies (subject.as(CodeableConcept).memberOf('http://hl7.org/fhir/ValueSet/subject-type', 'extensible'))",
    source=_SOURCE,
)
@constraint(
    id="planDefinition-3",
    level=LEVEL_WARNING,
    location="(base)",
    description="SHALL, if possible, contain a code from value set http://hl7.org/fhir/ValueSet/jurisdiction",
    expression="jurisdiction.exists() implies (jurisdiction.all(memberOf('http://hl7.org/fhir/ValueSet/jurisdiction', 'extensible')))",
    source=_SOURCE,
)
@constraint(
    id="planDefinition-4",
    level=LEVEL_WARNING,
    location="goal.priority",
    description="SHOULD contain a code from value set http://hl7.org/fhir/ValueSet/goal-priority",
    expression="$this.memberOf('http://hl7.org/fhir/ValueSet/goal-priority', 'preferred')",
    source=_SOURCE,
)
@constraint(
    id="planDefinition-5",
    level=LEVEL_WARNING,
    location="action.subject",
    description="SHALL, if possible, contain a code from value set http://hl7.org/fhir/ValueSet/subject-type",
    expression="$this.as(CodeableConcept).memberOf('http://hl7.org/fhir/ValueSet/subject-type', 'extensible')",
    source=_SOURCE,
)
@constraint(
    id="planDefinition-6",
    level=LEVEL_WARNING,
    location="action.type",
    description="SHALL, if possible, contain a code from value set http://hl7.org/fhir/ValueSet/action-type",
    expression="$this.memberOf('http://hl7.org/fhir/ValueSet/action-type', 'extensible')",
    source=_SOURCE,
)
class PlanDefinition(DomainResource):
    """The definition of a plan for a series of actions."""

    class Goal(BackboneElement):
        """A goal describing an expected outcome of the actions of the plan."""

        fhir_type = "PlanDefinition.Goal"

        class Target(BackboneElement):
            """Target outcome for the goal."""

            fhir_type = "PlanDefinition.Goal.Target"

            measure: Annotated[
                Optional[CodeableConcept],
                Binding("GoalTargetMeasure", BindingStrength.EXAMPLE, "http://hl7.org/fhir/ValueSet/observation-codes"),
            ] = None
            detail: Annotated[Optional[Element], Choice(Quantity, Range, CodeableConcept)] = None
            due: Optional[Duration] = None

        category: Annotated[
            Optional[CodeableConcept],
            Binding("GoalCategory", BindingStrength.EXAMPLE, VALUE_SET_BASE + "goal-category"),
        ] = None
        description: Annotated[
            Optional[CodeableConcept],
            Required(),
            Binding("GoalDescription", BindingStrength.EXAMPLE, VALUE_SET_BASE + "clinical-findings"),
        ] = None
        priority: Annotated[
            Optional[CodeableConcept],
            Binding("GoalPriority", BindingStrength.PREFERRED, VALUE_SET_BASE + "goal-priority"),
        ] = None
        start: Annotated[
            Optional[CodeableConcept],
            Binding("GoalStartEvent", BindingStrength.EXAMPLE, VALUE_SET_BASE + "goal-start-event"),
        ] = None
        addresses: Annotated[
            Tuple[CodeableConcept, ...],
            Binding("GoalAddresses", BindingStrength.EXAMPLE, VALUE_SET_BASE + "condition-code"),
        ] = ()
        documentation: Tuple[RelatedArtifact, ...] = ()
        target: Tuple[Target, ...] = ()

    class Action(BackboneElement):
        """An action or group of actions to be taken as part of the plan."""

        fhir_type = "PlanDefinition.Action"

        class Condition(BackboneElement):
            """A condition that determines whether the action applies."""

            fhir_type = "PlanDefinition.Action.Condition"

            kind: Annotated[
                Optional[ActionConditionKind],
                Required(),
                Binding("ActionConditionKind", BindingStrength.REQUIRED, VALUE_SET_BASE + "action-condition-kind|4.0.1"),
            ] = None
            expression: Optional[Expression] = None

        class RelatedAction(BackboneElement):
            """A relationship to another action, such as "before" or "30-60 minutes after start of"."""

            fhir_type = "PlanDefinition.Action.RelatedAction"

            action_id: Annotated[Optional[Id], Required()] = Field(None, alias="actionId")
            relationship: Annotated[
                Optional[ActionRelationshipType],
                Required(),
                Binding(
                    "ActionRelationshipType",
                    BindingStrength.REQUIRED,
                    VALUE_SET_BASE + "action-relationship-type|4.0.1",
                ),
            ] = None
            offset: Annotated[Optional[Element], Choice(Duration, Range)] = None

        class Participant(BackboneElement):
            """Who should participate in the action."""

            fhir_type = "PlanDefinition.Action.Participant"

            type: Annotated[
                Optional[ActionParticipantType],
                Required(),
                Binding(
                    "ActionParticipantType",
                    BindingStrength.REQUIRED,
                    VALUE_SET_BASE + "action-participant-type|4.0.1",
                ),
            ] = None
            role: Annotated[
                Optional[CodeableConcept],
                Binding("ActionParticipantRole", BindingStrength.EXAMPLE, VALUE_SET_BASE + "action-participant-role"),
            ] = None

        class DynamicValue(BackboneElement):
            """Customization applied to the definition when the plan is applied."""

            fhir_type = "PlanDefinition.Action.DynamicValue"

            path: Optional[String] = None
            expression: Optional[Expression] = None

        prefix: Optional[String] = None
        title: Optional[String] = None
        description: Annotated[Optional[String], Summary()] = None
        text_equivalent: Annotated[Optional[String], Summary()] = Field(None, alias="textEquivalent")
        priority: Annotated[
            Optional[RequestPriority],
            Binding("RequestPriority", BindingStrength.REQUIRED, VALUE_SET_BASE + "request-priority|4.0.1"),
        ] = None
        code: Annotated[
            Tuple[CodeableConcept, ...],
            Binding("ActionCode", BindingStrength.EXAMPLE, VALUE_SET_BASE + "action-code"),
        ] = ()
        reason: Annotated[
            Tuple[CodeableConcept, ...],
            Binding("ActionReasonCode", BindingStrength.EXAMPLE, VALUE_SET_BASE + "action-reason-code"),
        ] = ()
        documentation: Tuple[RelatedArtifact, ...] = ()
        goal_id: Tuple[Id, ...] = Field((), alias="goalId")
        subject: Annotated[
            Optional[Element],
            Choice(CodeableConcept, Reference, Canonical),
            ReferenceTarget("Group"),
            Binding("SubjectType", BindingStrength.EXTENSIBLE, VALUE_SET_BASE + "subject-type"),
        ] = None
        condition: Tuple[Condition, ...] = ()
        related_action: Tuple[RelatedAction, ...] = Field((), alias="relatedAction")
        timing: Annotated[Optional[Element], Choice(DateTime, Age, Period, Duration, Range, Timing)] = None
        participant: Tuple[Participant, ...] = ()
        type: Annotated[
            Optional[CodeableConcept],
            Binding("ActionType", BindingStrength.EXTENSIBLE, VALUE_SET_BASE + "action-type"),
        ] = None
        grouping_behavior: Annotated[
            Optional[ActionGroupingBehavior],
            Binding(
                "ActionGroupingBehavior",
                BindingStrength.REQUIRED,
                VALUE_SET_BASE + "action-grouping-behavior|4.0.1",
            ),
        ] = Field(None, alias="groupingBehavior")
        selection_behavior: Annotated[
            Optional[ActionSelectionBehavior],
            Binding(
                "ActionSelectionBehavior",
                BindingStrength.REQUIRED,
                VALUE_SET_BASE + "action-selection-behavior|4.0.1",
            ),
        ] = Field(None, alias="selectionBehavior")
        required_behavior: Annotated[
            Optional[ActionRequiredBehavior],
            Binding(
                "ActionRequiredBehavior",
                BindingStrength.REQUIRED,
                VALUE_SET_BASE + "action-required-behavior|4.0.1",
            ),
        ] = Field(None, alias="requiredBehavior")
        precheck_behavior: Annotated[
            Optional[ActionPrecheckBehavior],
            Binding(
                "ActionPrecheckBehavior",
                BindingStrength.REQUIRED,
                VALUE_SET_BASE + "action-precheck-behavior|4.0.1",
            ),
        ] = Field(None, alias="precheckBehavior")
        cardinality_behavior: Annotated[
            Optional[ActionCardinalityBehavior],
            Binding(
                "ActionCardinalityBehavior",
                BindingStrength.REQUIRED,
                VALUE_SET_BASE + "action-cardinality-behavior|4.0.1",
            ),
        ] = Field(None, alias="cardinalityBehavior")
        definition: Annotated[Optional[Element], Choice(Canonical, Uri)] = None
        transform: Optional[Canonical] = None
        dynamic_value: Tuple[DynamicValue, ...] = Field((), alias="dynamicValue")
        action: Tuple["Action", ...] = ()

    url: Annotated[Optional[Uri], Summary()] = None
    identifier: Annotated[Tuple[Identifier, ...], Summary()] = ()
    version: Annotated[Optional[String], Summary()] = None
    name: Annotated[Optional[String], Summary()] = None
    title: Annotated[Optional[String], Summary()] = None
    subtitle: Optional[String] = None
    type: Annotated[
        Optional[CodeableConcept],
        Summary(),
        Binding("PlanDefinitionType", BindingStrength.EXTENSIBLE, VALUE_SET_BASE + "plan-definition-type"),
    ] = None
    status: Annotated[
        Optional[PublicationStatus],
        Summary(),
        Required(),
        Binding("PublicationStatus", BindingStrength.REQUIRED, VALUE_SET_BASE + "publication-status|4.0.1"),
    ] = None
    experimental: Annotated[Optional[Boolean], Summary()] = None
    subject: Annotated[
        Optional[Element],
        Choice(CodeableConcept, Reference, Canonical),
        ReferenceTarget("Group"),
        Binding("SubjectType", BindingStrength.EXTENSIBLE, VALUE_SET_BASE + "subject-type"),
    ] = None
    date: Annotated[Optional[DateTime], Summary()] = None
    publisher: Annotated[Optional[String], Summary()] = None
    contact: Annotated[Tuple[ContactDetail, ...], Summary()] = ()
    description: Annotated[Optional[Markdown], Summary()] = None
    use_context: Annotated[Tuple[UsageContext, ...], Summary()] = Field((), alias="useContext")
    jurisdiction: Annotated[
        Tuple[CodeableConcept, ...],
        Summary(),
        Binding("Jurisdiction", BindingStrength.EXTENSIBLE, VALUE_SET_BASE + "jurisdiction"),
    ] = ()
    purpose: Optional[Markdown] = None
    usage: Optional[String] = None
    copyright: Optional[Markdown] = None
    approval_date: Optional[Date] = Field(None, alias="approvalDate")
    last_review_date: Optional[Date] = Field(None, alias="lastReviewDate")
    effective_period: Annotated[Optional[Period], Summary()] = Field(None, alias="effectivePeriod")
    topic: Annotated[
        Tuple[CodeableConcept, ...],
        Binding("DefinitionTopic", BindingStrength.EXAMPLE, VALUE_SET_BASE + "definition-topic"),
    ] = ()
    author: Tuple[ContactDetail, ...] = ()
    editor: Tuple[ContactDetail, ...] = ()
    reviewer: Tuple[ContactDetail, ...] = ()
    endorser: Tuple[ContactDetail, ...] = ()
    related_artifact: Tuple[RelatedArtifact, ...] = Field((), alias="relatedArtifact")
    library: Tuple[Canonical, ...] = ()
    goal: Tuple[Goal, ...] = ()
    action: Tuple[Action, ...] = ()
