"""Constraint validation over built model trees."""

from fhirmodel.validation.constraint_validator import (
    ConstraintValidator,
    IssueSeverity,
    PredicateEvaluator,
    ValidationIssue,
    resolve_location,
)

__all__ = [
    "ConstraintValidator",
    "IssueSeverity",
    "PredicateEvaluator",
    "ValidationIssue",
    "resolve_location",
]
