"""Validation support for model construction.

Static helpers run from inside ``build()``. Each check either returns its
input unchanged or raises one of the :mod:`fhirmodel.utils.exceptions`
build errors; nothing here logs or defers.
"""

import re
from typing import TYPE_CHECKING, Any, Dict, Optional, Pattern, Sequence, Tuple, TypeVar, Union

from fhirmodel.config import get_settings
from fhirmodel.core import model_support
from fhirmodel.utils.exceptions import (
    EmptyElement,
    EmptyRequiredList,
    InvalidChoiceType,
    InvalidReferenceType,
    InvalidValue,
    MissingRequiredField,
    ProhibitedElement,
)

if TYPE_CHECKING:
    from fhirmodel.core.model import FHIRModel

T = TypeVar("T")

MIN_STRING_LENGTH = 1
MAX_STRING_LENGTH = 1048576  # 1024 * 1024 = 1MB
MAX_ID_LENGTH = 64

_WHITESPACE = frozenset(" \t\r\n")
_UNSUPPORTED_CONTROL_CHARS = frozenset(chr(i) for i in range(32) if i not in (9, 10, 13))
_ID_PATTERN = re.compile(r"[A-Za-z0-9\-\.]+")

# [base]/ResourceType/id[/_history/vid] with an optional absolute base
REFERENCE_PATTERN = re.compile(
    r"((http|https)://([A-Za-z0-9\\\.\:\%\$]*\/)*)?"
    r"([A-Za-z]+)\/[A-Za-z0-9\-\.]{1,64}(\/_history\/[A-Za-z0-9\-\.]{1,64})?"
)
_RESOURCE_TYPE_GROUP = 4

_BASE64_CHARS = "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789+/"
_BASE64_INDEX: Dict[str, int] = {ch: i for i, ch in enumerate(_BASE64_CHARS)}


def require_non_null(value: Optional[T], field_name: str) -> T:
    """Return ``value`` unchanged.

    Raises:
        MissingRequiredField: If value is None
    """
    if value is None:
        raise MissingRequiredField(field_name)
    return value


def require_non_empty(values: Sequence[T], field_name: str) -> Sequence[T]:
    """Return ``values`` unchanged.

    Raises:
        EmptyRequiredList: If the sequence has no entries
    """
    if len(values) == 0:
        raise EmptyRequiredList(field_name)
    return values


def choice_element(value: Optional[T], field_name: str, *types: Union[type, str]) -> Optional[T]:
    """Check the runtime type of a choice element against its allowed types.

    Subclasses of an allowed type are accepted. None is always accepted.

    Raises:
        InvalidChoiceType: If the value's type is not one of ``types``
    """
    if value is None:
        return value
    allowed = model_support.resolve_types(types)
    if not isinstance(value, allowed):
        raise InvalidChoiceType(
            field_name, type(value).__name__, [t.__name__ for t in allowed]
        )
    return value


def require_choice_element(value: Optional[T], field_name: str, *types: Union[type, str]) -> T:
    """Require a choice element to be present and of an allowed type."""
    require_non_null(value, field_name)
    choice_element(value, field_name, *types)
    return value  # type: ignore[return-value]


def require_value_or_children(element: "FHIRModel") -> None:
    """Reject an element that carries neither a value nor children.

    Raises:
        EmptyElement: If ``has_value()`` and ``has_children()`` are both False
    """
    if not element.has_value() and not element.has_children():
        raise EmptyElement(element.fhir_type_name())


def prohibited(value: Any, field_name: str) -> None:
    """Reject a present (non-None, non-empty) element.

    Raises:
        ProhibitedElement: If the element is present
    """
    if isinstance(value, tuple):
        if value:
            raise ProhibitedElement(field_name)
    elif value is not None:
        raise ProhibitedElement(field_name)


def _check_control_char(s: str, ch: str) -> None:
    if get_settings().check_control_chars and ch in _UNSUPPORTED_CONTROL_CHARS:
        raise InvalidValue(
            "String value contains unsupported control characters: "
            f"decimal range=[\\0000-0008,0011,0012,0014-0031] value=[{s}]"
        )


def check_max_length(value: Optional[str]) -> None:
    """Reject strings longer than the maximum string length."""
    if value is not None and len(value) > MAX_STRING_LENGTH:
        raise InvalidValue(
            f"String value length: {len(value)} is greater than maximum allowed "
            f"length: {MAX_STRING_LENGTH}"
        )


def check_string(s: Optional[str]) -> None:
    """Check a FHIR string: pattern ``[ \\r\\n\\t\\S]+``.

    Raises:
        InvalidValue: If the value is too long, has no non-whitespace
            characters, or contains other whitespace or control characters
    """
    if s is None:
        return
    check_max_length(s)
    count = 0
    for ch in s:
        if not ch.isspace():
            _check_control_char(s, ch)
            count += 1
        elif ch not in _WHITESPACE:
            raise InvalidValue(
                f"String value: '{s}' is not valid with respect to pattern: [ \\r\\n\\t\\S]+"
            )
    if count < MIN_STRING_LENGTH:
        raise InvalidValue(
            f"Trimmed String value length: {count} is less than minimum required "
            f"length: {MIN_STRING_LENGTH}"
        )


def check_code(s: Optional[str]) -> None:
    """Check a FHIR code: pattern ``[^\\s]+(\\s[^\\s]+)*``."""
    if s is None:
        return
    if not s or s[0].isspace():
        raise InvalidValue(f"Code value: '{s}' must begin with a non-whitespace character")
    if s[-1].isspace():
        raise InvalidValue(f"Code value: '{s}' must end with a non-whitespace character")
    previous_is_space = False
    for ch in s:
        if ch.isspace():
            if ch != " ":
                raise InvalidValue(
                    f"Code value: '{s}' must not contain whitespace other than a single space"
                )
            if previous_is_space:
                raise InvalidValue(f"Code value: '{s}' must not contain consecutive spaces")
            previous_is_space = True
        else:
            _check_control_char(s, ch)
            previous_is_space = False


def check_id(s: Optional[str]) -> None:
    """Check a FHIR id: pattern ``[A-Za-z0-9\\-\\.]{1,64}``."""
    if s is None:
        return
    if not s:
        raise InvalidValue("Id value must not be empty")
    if len(s) > MAX_ID_LENGTH:
        raise InvalidValue(
            f"Id value length: {len(s)} is greater than maximum allowed length: {MAX_ID_LENGTH}"
        )
    if not _ID_PATTERN.fullmatch(s):
        bad = next(ch for ch in s if not _ID_PATTERN.fullmatch(ch))
        raise InvalidValue(f"Id value: '{s}' contain invalid character '{bad}'")


def check_uri(s: Optional[str]) -> None:
    """Check a FHIR uri: pattern ``\\S*``."""
    if s is None:
        return
    if len(s) > MAX_STRING_LENGTH:
        raise InvalidValue(
            f"Uri value length: {len(s)} is greater than maximum allowed length: "
            f"{MAX_STRING_LENGTH}"
        )
    for ch in s:
        _check_control_char(s, ch)
        if ch.isspace():
            raise InvalidValue(f"Uri value: '{s}' must not contain whitespace")


def check_value_range(
    value: Optional[int], min_value: Optional[int] = None, max_value: Optional[int] = None
) -> None:
    """Check an integer against inclusive bounds."""
    if value is None:
        return
    if min_value is not None and value < min_value:
        raise InvalidValue(
            f"Integer value: {value} is less than minimum required value: {min_value}"
        )
    if max_value is not None and value > max_value:
        raise InvalidValue(
            f"Integer value: {value} is greater than maximum allowed value: {max_value}"
        )


def check_pattern(value: Optional[str], pattern: Pattern[str]) -> None:
    """Check a string value against a regular expression (full match)."""
    if value is not None and not pattern.fullmatch(value):
        raise InvalidValue(
            f"String value: '{value}' is not valid with respect to pattern: {pattern.pattern}"
        )


def validate_base64(value: str) -> None:
    """Check the length and padding of a base64 encoded string.

    Raises:
        InvalidValue: If the length is not a multiple of 4 or the padding
            bits of the last encoded character are not zero
    """
    length = len(value)
    if length % 4 != 0:
        raise InvalidValue(f"Invalid base64 string length: {length}")
    for index, ch in enumerate(value.rstrip("=")):
        if ch not in _BASE64_INDEX:
            raise InvalidValue(f"Illegal base64 character: '{ch}' found at index: {index}")
    if value.endswith("="):
        char_index = length - 3 if value.endswith("==") else length - 2
        ch = value[char_index]
        if ch == "=":
            raise InvalidValue(
                f"Unexpected base64 padding character: '=' found at index: {char_index}"
            )
        base64_index = _BASE64_INDEX[ch]
        mask = 0b001111 if value.endswith("==") else 0b000011
        if base64_index & mask:
            raise InvalidValue(
                f"Invalid base64 string: non-zero padding bits; character: '{ch}' "
                f"found at index: {char_index} should be: "
                f"'{_BASE64_CHARS[base64_index & ~mask]}'"
            )


def _split_reference(reference_value: str) -> Optional[str]:
    """Return the resource type named by a literal reference, if any."""
    index = reference_value.find("?")
    if index != -1:
        # conditional reference
        return reference_value[:index]
    match = REFERENCE_PATTERN.fullmatch(reference_value)
    if match:
        return match.group(_RESOURCE_TYPE_GROUP)
    return None


def _has_scheme(value: str) -> bool:
    index = value.find(":")
    return index > 0 and len(value) > index + 1


def check_reference_type(
    reference: Any, field_name: str, reference_types: Tuple[str, ...]
) -> None:
    """Check a Reference against the allowed target resource types.

    Local (``#id``) and absolute URI references without a recognizable
    resource type are not checked. Non-Reference values (other choice
    alternatives) are ignored.

    Raises:
        InvalidReferenceType: If the reference names a disallowed or unknown
            resource type, or contradicts ``Reference.type``
    """
    from fhirmodel.types.datatypes import Reference

    if not isinstance(reference, Reference) or not reference_types:
        return
    if not get_settings().check_reference_types:
        return

    resource_type = None
    value = reference.reference.value if reference.reference is not None else None
    if value is not None and not value.startswith("#") and not _has_scheme(value):
        resource_type = _split_reference(value)
        if resource_type is None:
            raise InvalidReferenceType(
                f"Invalid reference value or resource type not found in reference value: "
                f"'{value}' for element: '{field_name}'"
            )
        if not model_support.is_resource_type(resource_type):
            raise InvalidReferenceType(
                f"Resource type found in reference value: '{value}' for element: "
                f"'{field_name}' must be a valid resource type name"
            )
        if resource_type not in reference_types:
            raise InvalidReferenceType(
                f"Resource type found in reference value: '{value}' for element: "
                f"'{field_name}' must be one of: {list(reference_types)}"
            )

    reference_type = reference.type.value if reference.type is not None else None
    if reference_type is not None:
        if not model_support.is_resource_type(reference_type):
            raise InvalidReferenceType(
                f"Resource type found in Reference.type: '{reference_type}' for element: "
                f"'{field_name}' must be a valid resource type name"
            )
        if reference_type not in reference_types:
            raise InvalidReferenceType(
                f"Resource type found in Reference.type: '{reference_type}' for element: "
                f"'{field_name}' must be one of: {list(reference_types)}"
            )
        if resource_type is not None and resource_type != reference_type:
            raise InvalidReferenceType(
                f"Resource type found in reference value: '{value}' for element: "
                f"'{field_name}' does not match Reference.type: {reference_type}"
            )


def validate_elements(instance: "FHIRModel") -> None:
    """Run the metadata-driven checks for every element of ``instance``.

    Elements are checked in declaration order: required, choice legality,
    then reference targets.
    """
    for info in model_support.get_element_info(type(instance)):
        value = getattr(instance, info.attr)
        if info.required:
            if info.repeating:
                require_non_empty(value, info.name)
            else:
                require_non_null(value, info.name)
        if info.choice is not None:
            choice_element(value, info.name, *info.choice.types)
        if info.reference_targets:
            items = value if info.repeating else (value,)
            for item in items:
                check_reference_type(item, info.name, info.reference_targets)
