"""Constraint validation for model trees.

Models carry their FHIRPath invariants as :class:`~fhirmodel.core.constraint.Constraint`
metadata but never evaluate them. This module walks a built tree, resolves
the location of each constraint relative to the node that declares it, and
asks a pluggable evaluator whether the expression holds.

The bundled :class:`PredicateEvaluator` knows a set of common invariants as
plain Python predicates. It is not a FHIRPath engine; expressions it does
not know are reported as informational issues instead of failures.
"""

import re
from enum import Enum
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple
from uuid import uuid4

from fhirmodel.core import model_support
from fhirmodel.core.constraint import Constraint, get_constraints
from fhirmodel.core.model import FHIRModel
from fhirmodel.core.visitor import PathAwareVisitor
from fhirmodel.types.datatypes import UCUM
from fhirmodel.utils.exceptions import UnsupportedExpression
from fhirmodel.utils.logging import get_logger

logger = get_logger(__name__)

BASE_LOCATION = "(base)"

Evaluator = Callable[[str, FHIRModel], bool]
Predicate = Callable[[FHIRModel], bool]


class IssueSeverity(Enum):
    """OperationOutcome issue severity levels."""

    ERROR = "error"  # Rule constraint violated
    WARNING = "warning"  # Warning constraint violated
    INFORMATION = "information"  # Constraint was not evaluated


class ValidationIssue:
    """Represents one constraint finding."""

    def __init__(
        self,
        constraint_id: str,
        severity: IssueSeverity,
        location: str,
        message: str,
        expression: Optional[str] = None,
    ):
        """Initialize validation issue.

        Args:
            constraint_id: Key of the constraint, e.g. ``tst-1``
            severity: Issue severity
            location: Location of the offending node (FHIRPath)
            message: Issue message
            expression: Expression of the constraint
        """
        self.issue_id = f"VAL-{uuid4().hex[:8]}"
        self.constraint_id = constraint_id
        self.severity = severity
        self.location = location
        self.message = message
        self.expression = expression

    def to_operation_outcome_issue(self) -> Dict[str, Any]:
        """Convert to FHIR OperationOutcome issue.

        Returns:
            OperationOutcome issue component
        """
        code = "invariant" if self.severity != IssueSeverity.INFORMATION else "not-supported"
        return {
            "severity": self.severity.value,
            "code": code,
            "diagnostics": self.message,
            "location": [self.location],
            "details": {"text": f"{self.constraint_id}: {self.expression or self.message}"},
        }

    def __repr__(self) -> str:
        return (
            f"ValidationIssue({self.constraint_id!r}, {self.severity.value!r}, "
            f"{self.location!r})"
        )


# Navigation helpers shared by the predicates and the location resolver


def children(node: Any, element_name: str) -> List[Any]:
    """Return the values of ``element_name`` on ``node`` as a list.

    Unknown elements and non-model nodes yield an empty list, matching
    FHIRPath navigation on an empty collection.
    """
    if not isinstance(node, FHIRModel):
        return []
    info = model_support.get_element_info(type(node), element_name)
    if info is None:
        return []
    value = getattr(node, info.attr)
    if isinstance(value, tuple):
        return list(value)
    return [] if value is None else [value]


def navigate(nodes: Iterable[Any], path: str) -> List[Any]:
    """Follow a dotted element path from every node in ``nodes``."""
    result = list(nodes)
    for name in path.split("."):
        result = [child for node in result for child in children(node, name)]
    return result


def exists(node: Any, path: str) -> bool:
    """FHIRPath ``exists()`` for a dotted element path."""
    return len(navigate([node], path)) > 0


def count(node: Any, path: str) -> int:
    """FHIRPath ``count()`` for a dotted element path."""
    return len(navigate([node], path))


def value_of(node: Any, path: str) -> Any:
    """Return the primitive value at ``path``, or None if absent or repeated."""
    found = navigate([node], path)
    if len(found) != 1:
        return None
    return getattr(found[0], "value", None)


def _ordered(low: Any, high: Any) -> bool:
    # values of different kinds (date vs dateTime) are not comparable
    if low is None or high is None:
        return True
    if type(low) is not type(high):
        return True
    return low <= high


def _single_assertion(node: FHIRModel) -> bool:
    if exists(node, "extension"):
        return True
    names = (
        "contentType",
        "expression",
        "headerField",
        "minimumId",
        "navigationLinks",
        "path",
        "requestMethod",
        "resource",
        "responseCode",
        "response",
        "validateProfileId",
    )
    return sum(count(node, name) for name in names) <= 1


def _operation_target(node: FHIRModel) -> bool:
    if exists(node, "sourceId"):
        return True
    if count(node, "targetId") + count(node, "url") + count(node, "params") == 1:
        return True
    return value_of(node, "type.code") in ("capabilities", "search", "transaction", "history")


def _compare_to_source(node: FHIRModel) -> bool:
    return (not exists(node, "compareToSourceId")) != (
        exists(node, "compareToSourceExpression") or exists(node, "compareToSourcePath")
    )


def _request_direction(node: FHIRModel) -> bool:
    direction = value_of(node, "direction")
    if direction is None or direction == "response":
        return True
    return direction == "request" and not exists(node, "response") and not exists(node, "responseCode")


def _computable_name(node: FHIRModel) -> bool:
    name = value_of(node, "name")
    return name is None or re.fullmatch(r"[A-Z]([A-Za-z0-9_]){0,254}", name) is not None


def _quantity_ordered(node: FHIRModel) -> bool:
    low = navigate([node], "low")
    high = navigate([node], "high")
    if not low or not high:
        return True
    low_unit = value_of(low[0], "code")
    high_unit = value_of(high[0], "code")
    if low_unit is not None and high_unit is not None and low_unit != high_unit:
        return True
    return _ordered(value_of(low[0], "value"), value_of(high[0], "value"))


def _age(node: FHIRModel) -> bool:
    value = value_of(node, "value")
    return (
        (exists(node, "code") or value is None)
        and (not exists(node, "system") or value_of(node, "system") == UCUM)
        and (value is None or value > 0)
    )


def _timing_offset(node: FHIRModel) -> bool:
    if not exists(node, "offset"):
        return True
    when = [getattr(w, "value", None) for w in navigate([node], "when")]
    return bool(when) and not any(w in ("C", "CM", "CD", "CV") for w in when)


def _non_negative(node: FHIRModel, name: str) -> bool:
    value = value_of(node, name)
    return value is None or value >= 0


def _contained_meta_empty(node: FHIRModel, *paths: str) -> bool:
    return not any(navigate(navigate([node], "contained.meta"), path) for path in paths)


DEFAULT_PREDICATES: Dict[str, Predicate] = {
    # ext-1
    "extension.exists() != value.exists()": (
        lambda n: exists(n, "extension") != exists(n, "value")
    ),
    # per-1
    "start.hasValue().not() or end.hasValue().not() or (start <= end)": (
        lambda n: _ordered(value_of(n, "start"), value_of(n, "end"))
    ),
    # qty-3
    "code.empty() or system.exists()": lambda n: not exists(n, "code") or exists(n, "system"),
    # age-1
    "(code.exists() or value.empty()) and (system.empty() or system = %ucum) "
    "and (value.empty() or value.hasValue().not() or value > 0)": _age,
    # drt-1
    "code.exists() implies ((system = %ucum) and value.exists())": (
        lambda n: not exists(n, "code") or (value_of(n, "system") == UCUM and exists(n, "value"))
    ),
    # rng-2
    "low.empty() or high.empty() or (low <= high)": _quantity_ordered,
    # tim-1, tim-2
    "duration.empty() or durationUnit.exists()": (
        lambda n: not exists(n, "duration") or exists(n, "durationUnit")
    ),
    "period.empty() or periodUnit.exists()": (
        lambda n: not exists(n, "period") or exists(n, "periodUnit")
    ),
    # tim-4, tim-5
    "duration.exists() implies duration >= 0": lambda n: _non_negative(n, "duration"),
    "period.exists() implies period >= 0": lambda n: _non_negative(n, "period"),
    # tim-6, tim-7, tim-8
    "periodMax.empty() or period.exists()": (
        lambda n: not exists(n, "periodMax") or exists(n, "period")
    ),
    "durationMax.empty() or duration.exists()": (
        lambda n: not exists(n, "durationMax") or exists(n, "duration")
    ),
    "countMax.empty() or count.exists()": (
        lambda n: not exists(n, "countMax") or exists(n, "count")
    ),
    # tim-9, tim-10
    "offset.empty() or (when.exists() and ((when in ('C' | 'CM' | 'CD' | 'CV')).not()))": _timing_offset,
    "timeOfDay.empty() or when.empty()": (
        lambda n: not exists(n, "timeOfDay") or not exists(n, "when")
    ),
    # cpt-2
    "value.empty() or system.exists()": lambda n: not exists(n, "value") or exists(n, "system"),
    # exp-1
    "expression.exists() or reference.exists()": (
        lambda n: exists(n, "expression") or exists(n, "reference")
    ),
    # dom-2, dom-4, dom-5, dom-6
    "contained.contained.empty()": lambda n: not exists(n, "contained.contained"),
    "contained.meta.versionId.empty() and contained.meta.lastUpdated.empty()": (
        lambda n: _contained_meta_empty(n, "versionId", "lastUpdated")
    ),
    "contained.meta.security.empty()": lambda n: _contained_meta_empty(n, "security"),
    "text.`div`.exists()": lambda n: exists(n, "text.div"),
    # cnl-0, tst-0
    "name.matches('[A-Z]([A-Za-z0-9_]){0,254}')": _computable_name,
    # tst-1, tst-2
    "operation.exists() xor assert.exists()": (
        lambda n: exists(n, "operation") != exists(n, "assert")
    ),
    # tst-3
    "expression.empty() or headerField.empty() or path.empty()": (
        lambda n: not exists(n, "expression") or not exists(n, "headerField") or not exists(n, "path")
    ),
    # tst-4
    "capability.required.exists() or capability.validated.exists()": (
        lambda n: exists(n, "capability.required") or exists(n, "capability.validated")
    ),
    # tst-5, tst-6
    "extension.exists() or (contentType.count() + expression.count() + headerField.count() "
    "+ minimumId.count() + navigationLinks.count() + path.count() + requestMethod.count() "
    "+ resource.count() + responseCode.count() + response.count()  + validateProfileId.count() <=1)": (
        _single_assertion
    ),
    # tst-7, tst-8, tst-9
    "sourceId.exists() or (targetId.count() + url.count() + params.count() = 1) "
    "or (type.code in ('capabilities' |'search' | 'transaction' | 'history'))": _operation_target,
    # tst-10, tst-11
    "compareToSourceId.empty() xor (compareToSourceExpression.exists() or compareToSourcePath.exists())": (
        _compare_to_source
    ),
    # tst-12, tst-13
    "(response.empty() and responseCode.empty() and direction = 'request') "
    "or direction.empty() or direction = 'response'": _request_direction,
}


class PredicateEvaluator:
    """Evaluates known constraint expressions with Python predicates.

    Example:
        evaluator = PredicateEvaluator()
        evaluator.register("title.exists()", lambda node: exists(node, "title"))
    """

    def __init__(
        self, predicates: Optional[Mapping[str, Predicate]] = None, include_defaults: bool = True
    ):
        """Initialize the evaluator.

        Args:
            predicates: Extra expression to predicate mappings
            include_defaults: Start from :data:`DEFAULT_PREDICATES`
        """
        self.predicates: Dict[str, Predicate] = dict(DEFAULT_PREDICATES) if include_defaults else {}
        if predicates:
            self.predicates.update(predicates)

    def register(self, expression: str, predicate: Predicate) -> None:
        """Register or replace the predicate for ``expression``."""
        self.predicates[expression] = predicate

    def supports(self, expression: str) -> bool:
        """Return True if ``expression`` has a predicate."""
        return expression in self.predicates

    def __call__(self, expression: str, node: FHIRModel) -> bool:
        predicate = self.predicates.get(expression)
        if predicate is None:
            raise UnsupportedExpression(expression)
        return bool(predicate(node))


def resolve_location(node: FHIRModel, location: str) -> List[Tuple[str, FHIRModel]]:
    """Return the nodes a constraint location selects, with their relative paths.

    ``(base)`` selects ``node`` itself. Otherwise a leading type name
    (``TestScript`` in ``TestScript.setup.action``) is dropped and the
    remaining element names are followed, visiting every item of a
    repeating element.

    Args:
        node: Node declaring the constraint
        location: Constraint location

    Returns:
        List of ``(relative path, target)`` pairs; the path is empty for the node itself
    """
    if location == BASE_LOCATION:
        return [("", node)]
    names = location.split(".")
    if model_support.get_element_info(type(node), names[0]) is None:
        names = names[1:]
    current: List[Tuple[str, Any]] = [("", node)]
    for name in names:
        selected: List[Tuple[str, Any]] = []
        for path, parent in current:
            if not isinstance(parent, FHIRModel):
                continue
            info = model_support.get_element_info(type(parent), name)
            if info is None:
                continue
            value = getattr(parent, info.attr)
            prefix = f"{path}." if path else ""
            if isinstance(value, tuple):
                selected.extend(
                    (f"{prefix}{info.name}[{index}]", item) for index, item in enumerate(value)
                )
            elif value is not None:
                selected.append((f"{prefix}{info.name}", value))
        current = selected
    return [(path, target) for path, target in current if isinstance(target, FHIRModel)]


class _ConstraintVisitor(PathAwareVisitor):
    """Evaluates the constraints of every node in the walk."""

    def __init__(self, validator: "ConstraintValidator"):
        super().__init__()
        self.validator = validator
        self.issues: List[ValidationIssue] = []

    def do_visit_start(self, element_name: str, element_index: int, node: FHIRModel) -> None:
        base_path = self.get_path()
        for item in get_constraints(type(node)):
            for relative_path, target in resolve_location(node, item.location):
                location = f"{base_path}.{relative_path}" if relative_path else base_path
                issue = self.validator.check(item, target, location)
                if issue is not None:
                    self.issues.append(issue)


class ConstraintValidator:
    """Validates model trees against their declared constraints."""

    def __init__(self, evaluator: Optional[Evaluator] = None):
        """Initialize the validator.

        Args:
            evaluator: Callable taking ``(expression, node)`` and returning
                whether the constraint holds; may raise
                :class:`UnsupportedExpression`. Defaults to a
                :class:`PredicateEvaluator`.
        """
        self.evaluator: Evaluator = evaluator or PredicateEvaluator()

    def check(self, item: Constraint, node: FHIRModel, location: str) -> Optional[ValidationIssue]:
        """Evaluate one constraint on one node.

        Returns:
            An issue if the constraint failed or could not be evaluated, else None
        """
        try:
            satisfied = self.evaluator(item.expression, node)
        except UnsupportedExpression:
            logger.debug(
                "constraint_not_evaluated", constraint_id=item.id, location=location
            )
            return ValidationIssue(
                item.id,
                IssueSeverity.INFORMATION,
                location,
                f"Constraint {item.id} was not evaluated: unsupported expression",
                item.expression,
            )
        if satisfied:
            return None
        severity = IssueSeverity.ERROR if item.is_rule else IssueSeverity.WARNING
        return ValidationIssue(
            item.id, severity, location, f"{item.id}: {item.description}", item.expression
        )

    def validate(self, resource: FHIRModel) -> Tuple[bool, List[ValidationIssue]]:
        """Validate ``resource`` and everything it contains.

        Args:
            resource: Root of the tree; any model instance

        Returns:
            Tuple of (is_valid, issues); only error issues make the tree invalid
        """
        visitor = _ConstraintVisitor(self)
        resource.accept(visitor)
        issues = visitor.issues

        errors = [issue for issue in issues if issue.severity == IssueSeverity.ERROR]
        failed = {
            issue.constraint_id for issue in issues if issue.severity != IssueSeverity.INFORMATION
        }
        if failed:
            logger.warning(
                "constraint_violations_found",
                model_type=resource.fhir_type_name(),
                errors=len(errors),
                constraint_ids=sorted(failed),
            )
        logger.info(
            "constraint_validation_completed",
            model_type=resource.fhir_type_name(),
            issues=len(issues),
            valid=not errors,
        )
        return not errors, issues

    def generate_operation_outcome(
        self, issues: Sequence[ValidationIssue], resource_id: Optional[str] = None
    ) -> Dict[str, Any]:
        """Generate a FHIR OperationOutcome from validation issues.

        Args:
            issues: Validation issues
            resource_id: Id of the validated resource

        Returns:
            OperationOutcome resource as a dictionary
        """
        outcome: Dict[str, Any] = {
            "resourceType": "OperationOutcome",
            "id": f"validation-{uuid4().hex[:8]}",
            "issue": [issue.to_operation_outcome_issue() for issue in issues],
        }
        if resource_id:
            outcome["text"] = {
                "status": "generated",
                "div": f"<div>Validation results for resource {resource_id}</div>",
            }
        return outcome
