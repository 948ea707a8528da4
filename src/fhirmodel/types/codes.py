"""Code types bound to fixed value sets.

Each subtype carries a nested ``Value`` enum listing the codes of its value
set, and exposes one ready-made instance per code::

    ActionRelationshipType.AFTER
    ActionRelationshipType.of("after")
    ActionRelationshipType.of(ActionRelationshipType.Value.AFTER)

are all equal. Codes outside the value set raise ``InvalidValue``.
"""

from enum import Enum
from typing import Any, ClassVar

from pydantic import field_validator

from fhirmodel.types.primitives import Code
from fhirmodel.utils.exceptions import InvalidValue

VALUE_SET_BASE = "http://hl7.org/fhir/ValueSet/"


class BoundCode(Code):
    """Base class of code types restricted to a value set."""

    abstract_model: ClassVar[bool] = True

    value_set: ClassVar[str] = ""

    @classmethod
    def __pydantic_init_subclass__(cls, **kwargs: Any) -> None:
        super().__pydantic_init_subclass__(**kwargs)
        if "Value" in cls.__dict__:
            for member in cls.Value:
                setattr(cls, member.name, cls(value=member.value))

    @field_validator("value", mode="before")
    @classmethod
    def _enum_as_code(cls, v: Any) -> Any:
        if isinstance(v, Enum):
            return v.value
        return v

    def _validate(self) -> None:
        super()._validate()
        if self.value is not None and self.value not in self.codes():
            raise InvalidValue(
                f"Invalid value: '{self.value}' for {type(self).__name__}; "
                f"must be one of: {sorted(self.codes())}"
            )

    @classmethod
    def codes(cls) -> frozenset:
        """Return the codes of the bound value set."""
        return frozenset(member.value for member in cls.Value)

    def value_as_enum(self) -> Any:
        """Return the value as a member of the ``Value`` enum."""
        return None if self.value is None else self.Value(self.value)


class PublicationStatus(BoundCode):
    """The lifecycle status of an artifact."""

    value_set = VALUE_SET_BASE + "publication-status"

    class Value(str, Enum):
        DRAFT = "draft"
        ACTIVE = "active"
        RETIRED = "retired"
        UNKNOWN = "unknown"


class RequestPriority(BoundCode):
    """How quickly the action should be addressed with respect to other requests."""

    value_set = VALUE_SET_BASE + "request-priority"

    class Value(str, Enum):
        ROUTINE = "routine"
        URGENT = "urgent"
        ASAP = "asap"
        STAT = "stat"


class ActionRelationshipType(BoundCode):
    """Defines the types of relationships between actions."""

    value_set = VALUE_SET_BASE + "action-relationship-type"

    class Value(str, Enum):
        BEFORE_START = "before-start"
        BEFORE = "before"
        BEFORE_END = "before-end"
        CONCURRENT_WITH_START = "concurrent-with-start"
        CONCURRENT = "concurrent"
        CONCURRENT_WITH_END = "concurrent-with-end"
        AFTER_START = "after-start"
        AFTER = "after"
        AFTER_END = "after-end"


class ActionConditionKind(BoundCode):
    """Defines the kinds of conditions that can appear on actions."""

    value_set = VALUE_SET_BASE + "action-condition-kind"

    class Value(str, Enum):
        APPLICABILITY = "applicability"
        START = "start"
        STOP = "stop"


class ActionParticipantType(BoundCode):
    """The type of participant for the action."""

    value_set = VALUE_SET_BASE + "action-participant-type"

    class Value(str, Enum):
        PATIENT = "patient"
        PRACTITIONER = "practitioner"
        RELATED_PERSON = "related-person"
        DEVICE = "device"


class ActionGroupingBehavior(BoundCode):
    """Defines organization behavior of a group."""

    value_set = VALUE_SET_BASE + "action-grouping-behavior"

    class Value(str, Enum):
        VISUAL_GROUP = "visual-group"
        LOGICAL_GROUP = "logical-group"
        SENTENCE_GROUP = "sentence-group"


class ActionSelectionBehavior(BoundCode):
    """Defines selection behavior of a group."""

    value_set = VALUE_SET_BASE + "action-selection-behavior"

    class Value(str, Enum):
        ANY = "any"
        ALL = "all"
        ALL_OR_NONE = "all-or-none"
        EXACTLY_ONE = "exactly-one"
        AT_MOST_ONE = "at-most-one"
        ONE_OR_MORE = "one-or-more"


class ActionRequiredBehavior(BoundCode):
    """Defines expectations around whether an action or action group is required."""

    value_set = VALUE_SET_BASE + "action-required-behavior"

    class Value(str, Enum):
        MUST = "must"
        COULD = "could"
        MUST_UNLESS_DOCUMENTED = "must-unless-documented"


class ActionPrecheckBehavior(BoundCode):
    """Defines selection frequency behavior for an action or group."""

    value_set = VALUE_SET_BASE + "action-precheck-behavior"

    class Value(str, Enum):
        YES = "yes"
        NO = "no"


class ActionCardinalityBehavior(BoundCode):
    """Defines behavior for an action or a group for how many times that item may be repeated."""

    value_set = VALUE_SET_BASE + "action-cardinality-behavior"

    class Value(str, Enum):
        SINGLE = "single"
        MULTIPLE = "multiple"


class NarrativeStatus(BoundCode):
    """The status of a resource narrative."""

    value_set = VALUE_SET_BASE + "narrative-status"

    class Value(str, Enum):
        GENERATED = "generated"
        EXTENSIONS = "extensions"
        ADDITIONAL = "additional"
        EMPTY = "empty"


class QuantityComparator(BoundCode):
    """How the Quantity should be understood and represented."""

    value_set = VALUE_SET_BASE + "quantity-comparator"

    class Value(str, Enum):
        LESS_THAN = "<"
        LESS_OR_EQUALS = "<="
        GREATER_OR_EQUALS = ">="
        GREATER_THAN = ">"


class IdentifierUse(BoundCode):
    """Identifies the purpose for this identifier, if known."""

    value_set = VALUE_SET_BASE + "identifier-use"

    class Value(str, Enum):
        USUAL = "usual"
        OFFICIAL = "official"
        TEMP = "temp"
        SECONDARY = "secondary"
        OLD = "old"


class ContactPointSystem(BoundCode):
    """Telecommunications form for contact point."""

    value_set = VALUE_SET_BASE + "contact-point-system"

    class Value(str, Enum):
        PHONE = "phone"
        FAX = "fax"
        EMAIL = "email"
        PAGER = "pager"
        URL = "url"
        SMS = "sms"
        OTHER = "other"


class ContactPointUse(BoundCode):
    """Use of contact point."""

    value_set = VALUE_SET_BASE + "contact-point-use"

    class Value(str, Enum):
        HOME = "home"
        WORK = "work"
        TEMP = "temp"
        OLD = "old"
        MOBILE = "mobile"


class RelatedArtifactType(BoundCode):
    """The type of relationship to the related artifact."""

    value_set = VALUE_SET_BASE + "related-artifact-type"

    class Value(str, Enum):
        DOCUMENTATION = "documentation"
        JUSTIFICATION = "justification"
        CITATION = "citation"
        PREDECESSOR = "predecessor"
        SUCCESSOR = "successor"
        DERIVED_FROM = "derived-from"
        DEPENDS_ON = "depends-on"
        COMPOSED_OF = "composed-of"


class UnitsOfTime(BoundCode):
    """A unit of time (units from UCUM)."""

    value_set = VALUE_SET_BASE + "units-of-time"

    class Value(str, Enum):
        S = "s"
        MIN = "min"
        H = "h"
        D = "d"
        WK = "wk"
        MO = "mo"
        A = "a"


class DayOfWeek(BoundCode):
    """The days of the week."""

    value_set = VALUE_SET_BASE + "days-of-week"

    class Value(str, Enum):
        MON = "mon"
        TUE = "tue"
        WED = "wed"
        THU = "thu"
        FRI = "fri"
        SAT = "sat"
        SUN = "sun"


class EventTiming(BoundCode):
    """Real world event relating to the schedule."""

    value_set = VALUE_SET_BASE + "event-timing"

    class Value(str, Enum):
        MORN = "MORN"
        MORN_EARLY = "MORN.early"
        MORN_LATE = "MORN.late"
        NOON = "NOON"
        AFT = "AFT"
        AFT_EARLY = "AFT.early"
        AFT_LATE = "AFT.late"
        EVE = "EVE"
        EVE_EARLY = "EVE.early"
        EVE_LATE = "EVE.late"
        NIGHT = "NIGHT"
        PHS = "PHS"
        HS = "HS"
        WAKE = "WAKE"
        C = "C"
        CM = "CM"
        CD = "CD"
        CV = "CV"
        AC = "AC"
        ACM = "ACM"
        ACD = "ACD"
        ACV = "ACV"
        PC = "PC"
        PCM = "PCM"
        PCD = "PCD"
        PCV = "PCV"


class TestScriptRequestMethodCode(BoundCode):
    """The allowable request method or HTTP operation codes."""

    value_set = VALUE_SET_BASE + "http-operations"

    class Value(str, Enum):
        DELETE = "delete"
        GET = "get"
        OPTIONS = "options"
        PATCH = "patch"
        POST = "post"
        PUT = "put"
        HEAD = "head"


class AssertionDirectionType(BoundCode):
    """The type of direction to use for assertion."""

    value_set = VALUE_SET_BASE + "assert-direction-codes"

    class Value(str, Enum):
        RESPONSE = "response"
        REQUEST = "request"


class AssertionOperatorType(BoundCode):
    """The type of operator to use for assertion."""

    value_set = VALUE_SET_BASE + "assert-operator-codes"

    class Value(str, Enum):
        EQUALS = "equals"
        NOT_EQUALS = "notEquals"
        IN = "in"
        NOT_IN = "notIn"
        GREATER_THAN = "greaterThan"
        LESS_THAN = "lessThan"
        EMPTY = "empty"
        NOT_EMPTY = "notEmpty"
        CONTAINS = "contains"
        NOT_CONTAINS = "notContains"
        EVAL = "eval"


class AssertionResponseTypes(BoundCode):
    """The type of response code to use for assertion."""

    value_set = VALUE_SET_BASE + "assert-response-code-types"

    class Value(str, Enum):
        OKAY = "okay"
        CREATED = "created"
        NO_CONTENT = "noContent"
        NOT_MODIFIED = "notModified"
        BAD = "bad"
        FORBIDDEN = "forbidden"
        NOT_FOUND = "notFound"
        METHOD_NOT_ALLOWED = "methodNotAllowed"
        CONFLICT = "conflict"
        GONE = "gone"
        PRECONDITION_FAILED = "preconditionFailed"
        UNPROCESSABLE = "unprocessable"


class ResourceTypeCode(BoundCode):
    """One of the resource types defined as part of this version of FHIR."""

    fhir_type = "ResourceType"
    value_set = VALUE_SET_BASE + "resource-types"

    class Value(str, Enum):
        ACCOUNT = "Account"
        ACTIVITY_DEFINITION = "ActivityDefinition"
        ADVERSE_EVENT = "AdverseEvent"
        ALLERGY_INTOLERANCE = "AllergyIntolerance"
        APPOINTMENT = "Appointment"
        APPOINTMENT_RESPONSE = "AppointmentResponse"
        AUDIT_EVENT = "AuditEvent"
        BASIC = "Basic"
        BINARY = "Binary"
        BIOLOGICALLY_DERIVED_PRODUCT = "BiologicallyDerivedProduct"
        BODY_STRUCTURE = "BodyStructure"
        BUNDLE = "Bundle"
        CAPABILITY_STATEMENT = "CapabilityStatement"
        CARE_PLAN = "CarePlan"
        CARE_TEAM = "CareTeam"
        CATALOG_ENTRY = "CatalogEntry"
        CHARGE_ITEM = "ChargeItem"
        CHARGE_ITEM_DEFINITION = "ChargeItemDefinition"
        CLAIM = "Claim"
        CLAIM_RESPONSE = "ClaimResponse"
        CLINICAL_IMPRESSION = "ClinicalImpression"
        CODE_SYSTEM = "CodeSystem"
        COMMUNICATION = "Communication"
        COMMUNICATION_REQUEST = "CommunicationRequest"
        COMPARTMENT_DEFINITION = "CompartmentDefinition"
        COMPOSITION = "Composition"
        CONCEPT_MAP = "ConceptMap"
        CONDITION = "Condition"
        CONSENT = "Consent"
        CONTRACT = "Contract"
        COVERAGE = "Coverage"
        COVERAGE_ELIGIBILITY_REQUEST = "CoverageEligibilityRequest"
        COVERAGE_ELIGIBILITY_RESPONSE = "CoverageEligibilityResponse"
        DETECTED_ISSUE = "DetectedIssue"
        DEVICE = "Device"
        DEVICE_DEFINITION = "DeviceDefinition"
        DEVICE_METRIC = "DeviceMetric"
        DEVICE_REQUEST = "DeviceRequest"
        DEVICE_USE_STATEMENT = "DeviceUseStatement"
        DIAGNOSTIC_REPORT = "DiagnosticReport"
        DOCUMENT_MANIFEST = "DocumentManifest"
        DOCUMENT_REFERENCE = "DocumentReference"
        DOMAIN_RESOURCE = "DomainResource"
        EFFECT_EVIDENCE_SYNTHESIS = "EffectEvidenceSynthesis"
        ENCOUNTER = "Encounter"
        ENDPOINT = "Endpoint"
        ENROLLMENT_REQUEST = "EnrollmentRequest"
        ENROLLMENT_RESPONSE = "EnrollmentResponse"
        EPISODE_OF_CARE = "EpisodeOfCare"
        EVENT_DEFINITION = "EventDefinition"
        EVIDENCE = "Evidence"
        EVIDENCE_VARIABLE = "EvidenceVariable"
        EXAMPLE_SCENARIO = "ExampleScenario"
        EXPLANATION_OF_BENEFIT = "ExplanationOfBenefit"
        FAMILY_MEMBER_HISTORY = "FamilyMemberHistory"
        FLAG = "Flag"
        GOAL = "Goal"
        GRAPH_DEFINITION = "GraphDefinition"
        GROUP = "Group"
        GUIDANCE_RESPONSE = "GuidanceResponse"
        HEALTHCARE_SERVICE = "HealthcareService"
        IMAGING_STUDY = "ImagingStudy"
        IMMUNIZATION = "Immunization"
        IMMUNIZATION_EVALUATION = "ImmunizationEvaluation"
        IMMUNIZATION_RECOMMENDATION = "ImmunizationRecommendation"
        IMPLEMENTATION_GUIDE = "ImplementationGuide"
        INSURANCE_PLAN = "InsurancePlan"
        INVOICE = "Invoice"
        LIBRARY = "Library"
        LINKAGE = "Linkage"
        LIST = "List"
        LOCATION = "Location"
        MEASURE = "Measure"
        MEASURE_REPORT = "MeasureReport"
        MEDIA = "Media"
        MEDICATION = "Medication"
        MEDICATION_ADMINISTRATION = "MedicationAdministration"
        MEDICATION_DISPENSE = "MedicationDispense"
        MEDICATION_KNOWLEDGE = "MedicationKnowledge"
        MEDICATION_REQUEST = "MedicationRequest"
        MEDICATION_STATEMENT = "MedicationStatement"
        MEDICINAL_PRODUCT = "MedicinalProduct"
        MEDICINAL_PRODUCT_AUTHORIZATION = "MedicinalProductAuthorization"
        MEDICINAL_PRODUCT_CONTRAINDICATION = "MedicinalProductContraindication"
        MEDICINAL_PRODUCT_INDICATION = "MedicinalProductIndication"
        MEDICINAL_PRODUCT_INGREDIENT = "MedicinalProductIngredient"
        MEDICINAL_PRODUCT_INTERACTION = "MedicinalProductInteraction"
        MEDICINAL_PRODUCT_MANUFACTURED = "MedicinalProductManufactured"
        MEDICINAL_PRODUCT_PACKAGED = "MedicinalProductPackaged"
        MEDICINAL_PRODUCT_PHARMACEUTICAL = "MedicinalProductPharmaceutical"
        MEDICINAL_PRODUCT_UNDESIRABLE_EFFECT = "MedicinalProductUndesirableEffect"
        MESSAGE_DEFINITION = "MessageDefinition"
        MESSAGE_HEADER = "MessageHeader"
        MOLECULAR_SEQUENCE = "MolecularSequence"
        NAMING_SYSTEM = "NamingSystem"
        NUTRITION_ORDER = "NutritionOrder"
        OBSERVATION = "Observation"
        OBSERVATION_DEFINITION = "ObservationDefinition"
        OPERATION_DEFINITION = "OperationDefinition"
        OPERATION_OUTCOME = "OperationOutcome"
        ORGANIZATION = "Organization"
        ORGANIZATION_AFFILIATION = "OrganizationAffiliation"
        PARAMETERS = "Parameters"
        PATIENT = "Patient"
        PAYMENT_NOTICE = "PaymentNotice"
        PAYMENT_RECONCILIATION = "PaymentReconciliation"
        PERSON = "Person"
        PLAN_DEFINITION = "PlanDefinition"
        PRACTITIONER = "Practitioner"
        PRACTITIONER_ROLE = "PractitionerRole"
        PROCEDURE = "Procedure"
        PROVENANCE = "Provenance"
        QUESTIONNAIRE = "Questionnaire"
        QUESTIONNAIRE_RESPONSE = "QuestionnaireResponse"
        RELATED_PERSON = "RelatedPerson"
        REQUEST_GROUP = "RequestGroup"
        RESEARCH_DEFINITION = "ResearchDefinition"
        RESEARCH_ELEMENT_DEFINITION = "ResearchElementDefinition"
        RESEARCH_STUDY = "ResearchStudy"
        RESEARCH_SUBJECT = "ResearchSubject"
        RESOURCE = "Resource"
        RISK_ASSESSMENT = "RiskAssessment"
        RISK_EVIDENCE_SYNTHESIS = "RiskEvidenceSynthesis"
        SCHEDULE = "Schedule"
        SEARCH_PARAMETER = "SearchParameter"
        SERVICE_REQUEST = "ServiceRequest"
        SLOT = "Slot"
        SPECIMEN = "Specimen"
        SPECIMEN_DEFINITION = "SpecimenDefinition"
        STRUCTURE_DEFINITION = "StructureDefinition"
        STRUCTURE_MAP = "StructureMap"
        SUBSCRIPTION = "Subscription"
        SUBSTANCE = "Substance"
        SUBSTANCE_NUCLEIC_ACID = "SubstanceNucleicAcid"
        SUBSTANCE_POLYMER = "SubstancePolymer"
        SUBSTANCE_PROTEIN = "SubstanceProtein"
        SUBSTANCE_REFERENCE_INFORMATION = "SubstanceReferenceInformation"
        SUBSTANCE_SOURCE_MATERIAL = "SubstanceSourceMaterial"
        SUBSTANCE_SPECIFICATION = "SubstanceSpecification"
        SUPPLY_DELIVERY = "SupplyDelivery"
        SUPPLY_REQUEST = "SupplyRequest"
        TASK = "Task"
        TERMINOLOGY_CAPABILITIES = "TerminologyCapabilities"
        TEST_REPORT = "TestReport"
        TEST_SCRIPT = "TestScript"
        VALUE_SET = "ValueSet"
        VERIFICATION_RESULT = "VerificationResult"
        VISION_PRESCRIPTION = "VisionPrescription"
