"""Custom exceptions for the FHIR object model.

Build-time errors derive from :class:`ModelValidationError`. None of the
classes here derive from ``ValueError``: pydantic only converts ``ValueError``
and ``AssertionError`` into its own ``ValidationError``, so these propagate to
the caller of ``build()`` unchanged.
"""

from typing import Iterable, Optional, Tuple


class FHIRModelException(Exception):
    """Base exception for all object model exceptions."""

    def __init__(self, message: str, code: Optional[str] = None):
        """Initialize exception.

        Args:
            message: Error message
            code: Optional error code
        """
        super().__init__(message)
        self.code = code


class ModelValidationError(FHIRModelException):
    """Raised when a model instance fails construction-time validation."""


class MissingRequiredField(ModelValidationError):
    """Raised when a required field was never set."""

    def __init__(self, field_name: str):
        """Initialize MissingRequiredField."""
        super().__init__(
            f"Missing required element: '{field_name}'", "MISSING_REQUIRED_FIELD"
        )
        self.field_name = field_name


class EmptyRequiredList(ModelValidationError):
    """Raised when a required repeating field has no entries."""

    def __init__(self, field_name: str):
        """Initialize EmptyRequiredList."""
        super().__init__(
            f"Required repeating element: '{field_name}' must not be empty",
            "EMPTY_REQUIRED_LIST",
        )
        self.field_name = field_name


class InvalidChoiceType(ModelValidationError):
    """Raised when a choice field holds a value of a type outside its allowed set."""

    def __init__(
        self, field_name: str, supplied_type: str, allowed_types: Iterable[str]
    ):
        """Initialize InvalidChoiceType.

        Args:
            field_name: FHIR name of the choice element
            supplied_type: Type name of the rejected value
            allowed_types: Type names the element accepts
        """
        self.field_name = field_name
        self.supplied_type = supplied_type
        self.allowed_types: Tuple[str, ...] = tuple(allowed_types)
        super().__init__(
            f"Invalid type: {supplied_type} for choice element: '{field_name}' "
            f"must be one of: {list(self.allowed_types)}",
            "INVALID_CHOICE_TYPE",
        )


class EmptyElement(ModelValidationError):
    """Raised when an element has neither a value nor children."""

    def __init__(self, type_name: str):
        """Initialize EmptyElement."""
        super().__init__(
            f"ele-1: All FHIR elements must have a @value or children: '{type_name}'",
            "EMPTY_ELEMENT",
        )
        self.type_name = type_name


class InvalidValue(ModelValidationError):
    """Raised when a primitive value violates its type's value rules."""

    def __init__(self, message: str):
        """Initialize InvalidValue."""
        super().__init__(message, "INVALID_VALUE")


class ProhibitedElement(ModelValidationError):
    """Raised when a prohibited element is present."""

    def __init__(self, field_name: str):
        """Initialize ProhibitedElement."""
        super().__init__(f"Element: '{field_name}' is prohibited.", "PROHIBITED_ELEMENT")
        self.field_name = field_name


class InvalidReferenceType(ModelValidationError):
    """Raised when a Reference targets a resource type the element does not allow."""

    def __init__(self, message: str):
        """Initialize InvalidReferenceType."""
        super().__init__(message, "INVALID_REFERENCE_TYPE")


class UnsupportedExpression(FHIRModelException):
    """Raised by a constraint evaluator that cannot evaluate an expression."""

    def __init__(self, expression: str):
        """Initialize UnsupportedExpression."""
        super().__init__(
            f"Unsupported constraint expression: {expression}", "UNSUPPORTED_EXPRESSION"
        )
        self.expression = expression
